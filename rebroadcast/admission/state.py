from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, NamedTuple

from rebroadcast.core.logging import log_event
from rebroadcast.core.lru import BoundedCache
from rebroadcast.core.memberset import MemberSet
from rebroadcast.settings import Settings


class ContentDeltaKey(NamedTuple):
    user_id: int
    content_type: str


@dataclass
class CacheSet:
    """
    Estado anti-abuso del proceso: se construye una vez al arrancar y se
    pasa por referencia a cada evaluación de la cadena. Nada persiste.
    """
    url: BoundedCache[str, int]
    post_delta: BoundedCache[int, datetime]
    content_delta: BoundedCache[ContentDeltaKey, datetime]
    post_text: BoundedCache[str, int]
    follow: BoundedCache[str, int]
    muted_ids: MemberSet = field(default_factory=MemberSet)
    prohibited_mentions: MemberSet = field(default_factory=MemberSet)
    prohibited_words: MemberSet = field(default_factory=MemberSet)
    delta_gated_content: MemberSet = field(default_factory=MemberSet)

    @classmethod
    def from_settings(cls, settings: Settings) -> "CacheSet":
        caches = cls(
            url=BoundedCache(settings.URL_CACHE_SIZE),
            post_delta=BoundedCache(settings.POST_DELTA_CACHE_SIZE),
            content_delta=BoundedCache(settings.CONTENT_DELTA_CACHE_SIZE),
            post_text=BoundedCache(settings.POST_TEXT_CACHE_SIZE),
            follow=BoundedCache(settings.FOLLOW_CACHE_SIZE),
        )

        for content_type in settings.DELTA_GATED_CONTENT:
            caches.delta_gated_content.add(content_type.lower())

        # mentions y words se normalizan a minúsculas al cargar y al consultar
        for mention in settings.PROHIBITED_MENTIONS:
            caches.prohibited_mentions.add(mention.lower())

        for word in settings.PROHIBITED_WORDS:
            if word == "":
                log_event(
                    "config_empty_prohibited_word",
                    level=logging.WARNING,
                    detail="empty entry kept but can never match a whitespace-split token",
                )
            caches.prohibited_words.add(word.lower())

        return caches

    def sizes(self) -> Dict[str, int]:
        return {
            "url": len(self.url),
            "post_delta": len(self.post_delta),
            "content_delta": len(self.content_delta),
            "post_text": len(self.post_text),
            "follow": len(self.follow),
            "muted_ids": len(self.muted_ids),
        }
