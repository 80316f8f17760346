from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class _ApiModel(BaseModel):
    # la API manda muchísimos campos que no usamos
    model_config = ConfigDict(extra="ignore")


class User(_ApiModel):
    id: int = 0
    screen_name: str = ""
    created_at: str = ""


class Mention(_ApiModel):
    screen_name: str = ""
    id: Optional[int] = None


class Variant(_ApiModel):
    content_type: str = ""
    url: str = ""
    bitrate: Optional[int] = None


class VideoInfo(_ApiModel):
    variants: List[Variant] = Field(default_factory=list)


class Media(_ApiModel):
    type: str = ""
    media_url_https: str = ""
    video_info: VideoInfo = Field(default_factory=VideoInfo)


class Entities(_ApiModel):
    media: List[Media] = Field(default_factory=list)
    user_mentions: List[Mention] = Field(default_factory=list)


class ExtendedTweet(_ApiModel):
    full_text: str = ""
    entities: Entities = Field(default_factory=Entities)
    extended_entities: Entities = Field(default_factory=Entities)


class PostEvent(_ApiModel):
    id: int = 0
    text: str = ""
    created_at: str = ""
    user: User = Field(default_factory=User)
    in_reply_to_screen_name: Optional[str] = None
    retweeted_status: Optional[Dict[str, Any]] = None
    possibly_sensitive: bool = False
    entities: Entities = Field(default_factory=Entities)
    extended_entities: Entities = Field(default_factory=Entities)
    extended_tweet: ExtendedTweet = Field(default_factory=ExtendedTweet)

    @property
    def is_reply(self) -> bool:
        return bool(self.in_reply_to_screen_name)

    @property
    def is_repost(self) -> bool:
        return self.retweeted_status is not None

    def media_locations(self) -> List[List[Media]]:
        """Las cuatro ubicaciones de media, en orden de prioridad."""
        return [
            self.entities.media,
            self.extended_entities.media,
            self.extended_tweet.entities.media,
            self.extended_tweet.extended_entities.media,
        ]

    def mentions(self) -> List[Mention]:
        return [
            *self.extended_tweet.extended_entities.user_mentions,
            *self.extended_tweet.entities.user_mentions,
            *self.entities.user_mentions,
        ]


class WebhookEnvelope(_ApiModel):
    tweet_create_events: List[PostEvent] = Field(default_factory=list)


class Relationship(BaseModel):
    source_follows_target: bool = False
    target_follows_source: bool = False


class MutedPage(BaseModel):
    users: List[User] = Field(default_factory=list)
    next_cursor_str: str = "0"


ContentType = Literal["gif", "video"]


class Verdict(BaseModel):
    post_id: int
    admitted: bool
    reason: Optional[str] = None
    content_type: Optional[ContentType] = None
    content_url: Optional[str] = None
