"""
Cadena de admisión: gates en orden fijo, corta en el primer rechazo.

    Pending --(gate rechaza)--> Rejected(reason)
    Pending --(pasan todos)--> Admitted
"""
from __future__ import annotations

import enum
import inspect
from dataclasses import dataclass
from typing import Awaitable, Callable, List, NamedTuple, Optional, Union

from rebroadcast.admission import gates
from rebroadcast.admission.follow import FollowResolver, FollowStatus
from rebroadcast.admission.schema import PostEvent
from rebroadcast.admission.state import CacheSet
from rebroadcast.core.logging import log_event
from rebroadcast.settings import Settings


class ChainState(enum.Enum):
    PENDING = "pending"
    ADMITTED = "admitted"
    REJECTED = "rejected"


@dataclass
class GateContext:
    event: PostEvent
    caches: CacheSet
    settings: Settings
    resolver: FollowResolver
    # lo completa el gate de media; lo usan los gates siguientes
    media: Optional[gates.MediaMatch] = None


GateCheck = Callable[[GateContext], Union[bool, Awaitable[bool]]]


class Gate(NamedTuple):
    name: str
    reason: str
    check: GateCheck


@dataclass
class ChainResult:
    state: ChainState
    reason: Optional[str] = None
    gate: Optional[str] = None
    media: Optional[gates.MediaMatch] = None

    @property
    def admitted(self) -> bool:
        return self.state is ChainState.ADMITTED


def _original(ctx: GateContext) -> bool:
    return gates.is_original(ctx.event, ctx.settings.IGNORE_FROM)


def _sensitive(ctx: GateContext) -> bool:
    return not gates.is_sensitive_denied(ctx.event, ctx.settings.DENY_SENSITIVE_CONTENT)


def _media(ctx: GateContext) -> bool:
    ctx.media = gates.find_media(ctx.event)
    return ctx.media is not None


def _mentions(ctx: GateContext) -> bool:
    return not gates.has_prohibited_mention(ctx.event, ctx.caches.prohibited_mentions)


def _words(ctx: GateContext) -> bool:
    return not gates.has_prohibited_word(ctx.event.text, ctx.caches.prohibited_words)


def _account_age(ctx: GateContext) -> bool:
    return gates.check_account_age(ctx.event.user.created_at, ctx.settings.MIN_ACCOUNT_AGE_DAYS)


def _muted(ctx: GateContext) -> bool:
    # ojo: is_muted() == True significa que NO pasa
    return not gates.is_muted(ctx.event.user.id, ctx.caches.muted_ids)


def _content_delta(ctx: GateContext) -> bool:
    content_type = ctx.media.content_type if ctx.media else "unknown"
    return gates.check_content_delta(
        ctx.caches.content_delta,
        ctx.event.user.id,
        ctx.event.user.screen_name,
        content_type,
        ctx.settings.CONTENT_TIME_DELTA_SECONDS,
        ctx.event.created_at,
    )


def _post_delta(ctx: GateContext) -> bool:
    return gates.check_post_delta(
        ctx.caches.post_delta,
        ctx.event.user.id,
        ctx.event.user.screen_name,
        ctx.settings.POST_TIME_DELTA_SECONDS,
        ctx.event.created_at,
    )


def _duplicate_text(ctx: GateContext) -> bool:
    return gates.check_recent_text(ctx.caches.post_text, ctx.event.text)


async def _following(ctx: GateContext) -> bool:
    return await ctx.resolver.resolve(ctx.event.user.screen_name) is FollowStatus.FOLLOWS


DEFAULT_GATES: List[Gate] = [
    Gate("original", "non-original", _original),
    Gate("sensitive", "sensitive", _sensitive),
    Gate("media", "no_match", _media),
    Gate("mentions", "prohibited_mention", _mentions),
    Gate("words", "prohibited_word", _words),
    Gate("account_age", "too_young", _account_age),
    Gate("muted", "muted", _muted),
    Gate("content_delta", "content_delta", _content_delta),
    Gate("post_delta", "post_delta", _post_delta),
    Gate("duplicate_text", "duplicate_text", _duplicate_text),
    Gate("following", "not_following", _following),
]


class GateChain:
    def __init__(
        self,
        caches: CacheSet,
        settings: Settings,
        resolver: FollowResolver,
        gate_list: Optional[List[Gate]] = None,
    ):
        self.caches = caches
        self.settings = settings
        self.resolver = resolver
        self.gates = list(gate_list if gate_list is not None else DEFAULT_GATES)

    async def evaluate(self, event: PostEvent) -> ChainResult:
        """
        FatalError (p.ej. TimestampFormatError) se propaga tal cual:
        no es un rechazo del evento sino un entorno roto.
        """
        ctx = GateContext(event=event, caches=self.caches, settings=self.settings, resolver=self.resolver)

        for gate in self.gates:
            passed = gate.check(ctx)
            if inspect.isawaitable(passed):
                passed = await passed

            if not passed:
                log_event("chain_reject", post_id=event.id, gate=gate.name, reason=gate.reason)
                return ChainResult(ChainState.REJECTED, reason=gate.reason, gate=gate.name, media=ctx.media)

        log_event("chain_admit", post_id=event.id, content_type=ctx.media.content_type if ctx.media else None)
        return ChainResult(ChainState.ADMITTED, media=ctx.media)
