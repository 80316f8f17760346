from __future__ import annotations

import asyncio
import logging
import os
import signal
from typing import Callable, Optional, Set

from rebroadcast.admission import gates
from rebroadcast.admission.chain import GateChain
from rebroadcast.admission.follow import FollowResolver
from rebroadcast.admission.schema import PostEvent, Verdict
from rebroadcast.admission.state import CacheSet
from rebroadcast.core.errors import FatalError, RecoverableBroadcastError
from rebroadcast.core.events import VerdictLog
from rebroadcast.core.logging import log_event
from rebroadcast.infra.utils import new_request_id
from rebroadcast.plugins.registry import Collaborators
from rebroadcast.settings import Settings

FatalHandler = Callable[[FatalError], None]


def terminate_process(err: FatalError) -> None:
    """Hook de producción: un error sistémico baja el proceso (uvicorn hace shutdown con SIGTERM)."""
    log_event("fatal", level=logging.CRITICAL, error=str(err), error_type=type(err).__name__)
    os.kill(os.getpid(), signal.SIGTERM)


class AdmissionPipeline:
    """
    Caller de la cadena: evalúa, deduplica por URL, hace el re-broadcast
    y registra el verdict. dispatch() lanza una task por evento (fire-and-forget).
    """

    def __init__(
        self,
        settings: Settings,
        caches: CacheSet,
        collaborators: Collaborators,
        verdict_log: Optional[VerdictLog] = None,
        on_fatal: FatalHandler = terminate_process,
    ):
        self.settings = settings
        self.caches = caches
        self.collaborators = collaborators
        self.verdict_log = verdict_log or VerdictLog(maxlen=settings.VERDICT_LOG_SIZE)
        self.on_fatal = on_fatal

        self.resolver = FollowResolver(
            cache=caches.follow,
            lookup=collaborators.lookup,
            target=settings.MUST_FOLLOW,
            mutual=settings.MUTUAL_FOLLOW,
        )
        self.chain = GateChain(caches=caches, settings=settings, resolver=self.resolver)
        self._tasks: Set[asyncio.Task] = set()

    async def process(self, event: PostEvent) -> Verdict:
        request_id = new_request_id()
        log_event("in", request_id=request_id, post_id=event.id, screen_name=event.user.screen_name)

        result = await self.chain.evaluate(event)

        if not result.admitted:
            verdict = Verdict(post_id=event.id, admitted=False, reason=result.reason)
            return self._finalize(request_id, verdict)

        media = result.media
        if media is None:
            # solo con una lista de gates custom sin el gate de media
            verdict = Verdict(post_id=event.id, admitted=False, reason="no_match")
            return self._finalize(request_id, verdict)

        if not gates.check_duplicate_url(self.caches.url, media.url):
            verdict = Verdict(post_id=event.id, admitted=False, reason="duplicate_url")
            return self._finalize(request_id, verdict)

        verdict = Verdict(
            post_id=event.id,
            admitted=True,
            content_type=media.content_type,
            content_url=media.url,
        )

        if self.settings.TEST_MODE:
            log_event(
                "test_mode",
                level=logging.WARNING,
                request_id=request_id,
                post_id=event.id,
                detail="not rebroadcast because TEST_MODE is on",
            )
        else:
            try:
                await self.collaborators.broadcaster.rebroadcast(event.id)
                log_event("rebroadcast", request_id=request_id, post_id=event.id)
            except RecoverableBroadcastError as e:
                log_event("rebroadcast_recovered", level=logging.WARNING, request_id=request_id, code=e.code, error=str(e))

        return self._finalize(request_id, verdict)

    def dispatch(self, event: PostEvent) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._run(event))
        # referencia fuerte hasta que termine
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def _run(self, event: PostEvent) -> Optional[Verdict]:
        try:
            return await self.process(event)
        except FatalError as e:
            self.on_fatal(e)
        except Exception as e:
            # un evento roto no tira abajo el proceso
            log_event("error", level=logging.ERROR, post_id=event.id, error=str(e), error_type=type(e).__name__)
        return None

    def _finalize(self, request_id: str, verdict: Verdict) -> Verdict:
        self.verdict_log.append(verdict.model_dump())
        log_event(
            "out",
            request_id=request_id,
            post_id=verdict.post_id,
            admitted=verdict.admitted,
            reason=verdict.reason,
            content_type=verdict.content_type,
        )
        return verdict
