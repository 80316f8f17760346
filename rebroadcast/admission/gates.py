"""
Checks individuales de admisión.

Cada función es una decisión pura sobre el evento + el estado compartido
(caches / member sets) y devuelve True cuando el post PASA el check.
La excepción es is_muted(): devuelve True cuando el autor está muteado,
o sea cuando el post NO pasa.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Hashable, List, Optional

from rebroadcast.admission.schema import ContentType, Media, PostEvent
from rebroadcast.admission.state import ContentDeltaKey
from rebroadcast.core.logging import log_event
from rebroadcast.core.lru import BoundedCache
from rebroadcast.core.memberset import MemberSet
from rebroadcast.core.timeutil import account_age, post_time

# "RT texto" / "RT @user: ..." (retweet manual). "RTX 4090" no es repost:
# hace falta límite de palabra después de "RT"
REPOST_PREFIX = re.compile(r"^RT\b")

# tipo de media de la API -> content class
MEDIA_TYPES = {
    "animated_gif": "gif",
    "video": "video",
}


@dataclass(frozen=True)
class MediaMatch:
    content_type: ContentType
    url: str


def is_original(event: PostEvent, ignore_from: str = "") -> bool:
    if event.is_reply or event.is_repost or REPOST_PREFIX.match(event.text):
        log_event("gate_original", post_id=event.id, result="reject", detail="reply or repost")
        return False

    if ignore_from and event.user.screen_name.casefold() == ignore_from.casefold():
        log_event("gate_original", post_id=event.id, result="reject", detail="ignored author")
        return False

    return True


def is_sensitive_denied(event: PostEvent, deny_sensitive: bool) -> bool:
    denied = deny_sensitive and event.possibly_sensitive
    if denied:
        log_event("gate_sensitive", post_id=event.id, result="reject")
    return denied


def _match_media(entries: List[Media]) -> Optional[MediaMatch]:
    for media in entries:
        content_type = MEDIA_TYPES.get(media.type.lower())
        if content_type is None:
            continue
        for variant in media.video_info.variants:
            log_event("media_variant", level=logging.DEBUG, content_type=variant.content_type, url=variant.url)
        return MediaMatch(content_type=content_type, url=media.media_url_https)  # type: ignore[arg-type]
    return None


def find_media(event: PostEvent) -> Optional[MediaMatch]:
    """Primer adjunto gif/video, recorriendo las 4 ubicaciones en orden fijo."""
    for location in event.media_locations():
        match = _match_media(location)
        if match is not None:
            log_event(
                "gate_media",
                post_id=event.id,
                result="accept",
                content_type=match.content_type,
                url=match.url,
            )
            return match

    log_event("gate_media", post_id=event.id, result="reject", detail="no media content found")
    return None


def has_prohibited_mention(event: PostEvent, prohibited: MemberSet) -> bool:
    for mention in event.mentions():
        if prohibited.get(mention.screen_name.lower()):
            log_event("gate_mentions", post_id=event.id, result="reject", mention=mention.screen_name)
            return True
    return False


def has_prohibited_word(text: str, prohibited: MemberSet) -> bool:
    # split() sin argumento nunca produce tokens vacíos
    for word in text.split():
        if prohibited.get(word.lower()):
            log_event("gate_words", result="reject", word=word)
            return True
    return False


def check_account_age(created_at: str, min_age_days: int, now: Optional[datetime] = None) -> bool:
    """
    Pasa solo si la cuenta es estrictamente más vieja que el mínimo.
    Mínimo <= 0 => pasa siempre (ni siquiera se parsea la fecha).
    """
    if min_age_days <= 0:
        return True

    age = account_age(created_at, now=now)
    ok = age > timedelta(days=min_age_days)
    log_event(
        "gate_account_age",
        result="accept" if ok else "reject",
        account_age_hours=age.total_seconds() / 3600,
        min_age_days=min_age_days,
    )
    return ok


def is_muted(user_id: int, muted_ids: MemberSet) -> bool:
    muted = muted_ids.get(user_id)
    if muted:
        log_event("gate_muted", user_id=user_id, result="reject")
    return muted


def _check_delta(
    cache: BoundedCache,
    key: Hashable,
    created_at: str,
    delta_seconds: int,
) -> bool:
    current, delta = post_time(created_at, delta_seconds)
    last, present = cache.get(key)

    # primera vez (o la entrada fue desalojada)
    if not present:
        cache.add(key, current)
        return True

    if current - last >= delta:
        cache.add(key, current)
        return True

    return False


def check_content_delta(
    cache: BoundedCache[ContentDeltaKey, datetime],
    user_id: int,
    screen_name: str,
    content_type: str,
    delta_seconds: int,
    created_at: str,
) -> bool:
    """Rate limit por (autor, content class), usando la hora del post."""
    ok = _check_delta(cache, ContentDeltaKey(user_id, content_type), created_at, delta_seconds)
    log_event(
        "gate_content_delta",
        result="accept" if ok else "reject",
        user=screen_name,
        content_type=content_type,
        delta_seconds=delta_seconds,
    )
    return ok


def check_post_delta(
    cache: BoundedCache[int, datetime],
    user_id: int,
    screen_name: str,
    delta_seconds: int,
    created_at: str,
) -> bool:
    """Rate limit por autor sobre todos los posts aprobados."""
    ok = _check_delta(cache, user_id, created_at, delta_seconds)
    log_event("gate_post_delta", result="accept" if ok else "reject", user=screen_name, delta_seconds=delta_seconds)
    return ok


def check_recent_text(cache: BoundedCache[str, int], text: str) -> bool:
    _, present = cache.get(text)
    if not present:
        cache.add(text, 1)
        return True

    log_event("gate_duplicate_text", result="reject")
    return False


def check_duplicate_url(cache: BoundedCache[str, int], url: str) -> bool:
    _, present = cache.get(url)
    if not present:
        log_event("gate_duplicate_url", result="accept", url=url)
        cache.add(url, 1)
        return True

    log_event("gate_duplicate_url", result="reject", url=url)
    return False
