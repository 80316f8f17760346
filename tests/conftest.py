from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import pytest

from rebroadcast.admission.schema import PostEvent
from rebroadcast.core.timeutil import format_created_at
from rebroadcast.settings import Settings

# hora fija para que los tests no dependan del reloj
NOW = datetime(2026, 10, 19, 12, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_settings():
    def _make(**overrides: Any) -> Settings:
        base: Dict[str, Any] = {
            "COLLABORATORS_PROVIDER": "rebroadcast.plugins.fixtures:provide_collaborators",
            "LOAD_MUTES_ON_STARTUP": False,
        }
        base.update(overrides)
        return Settings(_env_file=None, **base)

    return _make


@pytest.fixture
def make_event():
    def _make(
        post_id: int = 1,
        user_id: int = 1337821,
        screen_name: str = "bothFollow",
        text: str = "I have cake!",
        created: Optional[datetime] = None,
        account_created: Optional[datetime] = None,
        media_type: str = "video",
        media_url: Optional[str] = None,
        location: str = "extended_entities",
        **extra: Any,
    ) -> PostEvent:
        created = created or NOW
        account_created = account_created or datetime(2008, 8, 27, 13, 8, 45, tzinfo=timezone.utc)
        media = {
            "type": media_type,
            "media_url_https": media_url or f"https://pbs.example.com/media/{post_id}.jpg",
            "video_info": {"variants": [{"content_type": "video/mp4", "url": "http://example.com"}]},
        }
        payload: Dict[str, Any] = {
            "id": post_id,
            "text": text,
            "created_at": format_created_at(created),
            "user": {
                "id": user_id,
                "screen_name": screen_name,
                "created_at": format_created_at(account_created),
            },
        }
        if location == "extended_tweet.extended_entities":
            payload["extended_tweet"] = {"extended_entities": {"media": [media]}}
        elif location == "extended_tweet.entities":
            payload["extended_tweet"] = {"entities": {"media": [media]}}
        else:
            payload[location] = {"media": [media]}
        payload.update(extra)
        return PostEvent.model_validate(payload)

    return _make
