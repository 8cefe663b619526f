from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Literal, Mapping, Sequence

ProviderShape = Literal["content_posts", "engagement_array", "nested_object", "flat"]

PROVIDER_SHAPES: tuple[ProviderShape, ...] = (
    "content_posts",
    "engagement_array",
    "nested_object",
    "flat",
)

_EMPTY: Mapping[str, Any] = {}


@dataclass(frozen=True)
class ProviderPayload:
    """
    The provider object found inside a raw post record, tagged with its shape.

    `data` is the object metrics are read from: the engagement-bearing element of
    an array `data`, the single `data` object, or `post_result_obj` itself for
    content-posts records. `container` is always the raw `post_result_obj`.
    """

    shape: ProviderShape
    data: Mapping[str, Any]
    container: Mapping[str, Any]


RawRecord = Mapping[str, Any]
Getter = Callable[[RawRecord, ProviderPayload], Any]


@dataclass(frozen=True)
class Accessor:
    """A named field location; chains of these encode fallback priority."""

    name: str
    get: Getter


def dig(value: Any, *keys: str) -> Any:
    cur = value
    for key in keys:
        if not isinstance(cur, Mapping):
            return None
        cur = cur.get(key)
    return cur


def as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else _EMPTY


def detect_provider_payload(record: RawRecord) -> ProviderPayload:
    container = as_mapping(record.get("post_result_obj"))

    engagement = container.get("engagement")
    if isinstance(engagement, Mapping) and "like_count" in engagement:
        return ProviderPayload(shape="content_posts", data=container, container=container)

    data = container.get("data")
    if isinstance(data, list):
        first = data[0] if data else None
        if isinstance(first, Mapping) and isinstance(first.get("engagement"), Mapping):
            return ProviderPayload(shape="engagement_array", data=first, container=container)
        if isinstance(first, Mapping):
            return ProviderPayload(shape="nested_object", data=first, container=container)
        return ProviderPayload(shape="flat", data=_EMPTY, container=container)

    if isinstance(data, Mapping):
        return ProviderPayload(shape="nested_object", data=data, container=container)

    return ProviderPayload(shape="flat", data=_EMPTY, container=container)


def coerce_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        f = float(value)
    elif isinstance(value, str):
        s = value.strip().replace(",", "")
        if not s:
            return None
        try:
            f = float(s)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(f) or math.isinf(f):
        return None
    return f


def coerce_text(value: Any) -> str | None:
    if isinstance(value, str):
        s = value.strip()
        return s if s else None
    return None


def coerce_id(value: Any) -> str | None:
    if isinstance(value, str):
        v = value.strip()
        return v if v else None
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return None


def first_number(chain: Sequence[Accessor], record: RawRecord, payload: ProviderPayload) -> float:
    """First non-zero numeric value along the chain, else 0."""
    for accessor in chain:
        num = coerce_number(accessor.get(record, payload))
        if num is not None and num != 0:
            return num
    return 0.0


def first_text(chain: Sequence[Accessor], record: RawRecord, payload: ProviderPayload) -> str | None:
    """First non-empty string along the chain, else None."""
    for accessor in chain:
        text = coerce_text(accessor.get(record, payload))
        if text is not None:
            return text
    return None


def first_named(
    chain: Sequence[Accessor], record: RawRecord, payload: ProviderPayload
) -> tuple[str | None, float]:
    """Like first_number, but also reports which location supplied the value."""
    for accessor in chain:
        num = coerce_number(accessor.get(record, payload))
        if num is not None and num != 0:
            return accessor.name, num
    return None, 0.0


def _post(*keys: str) -> Getter:
    return lambda record, payload: dig(record, *keys)


def _data(*keys: str) -> Getter:
    return lambda record, payload: dig(payload.data, *keys)


def _nested_data(*keys: str) -> Getter:
    """Read from `post_result_obj.data` when it is a single object."""

    def get(record: RawRecord, payload: ProviderPayload) -> Any:
        data = payload.container.get("data")
        if isinstance(data, Mapping):
            return dig(data, *keys)
        return None

    return get


def _array_first(*keys: str) -> Getter:
    """Read from `post_result_obj.data[0]` when `data` is an array."""

    def get(record: RawRecord, payload: ProviderPayload) -> Any:
        data = payload.container.get("data")
        if isinstance(data, list) and data:
            return dig(data[0], *keys)
        return None

    return get


@dataclass(frozen=True)
class ShapeFields:
    """Where each provider-specific metric lives for one payload shape."""

    likes: tuple[Accessor, ...]
    comments: tuple[Accessor, ...]
    shares: tuple[Accessor, ...]
    views: tuple[Accessor, ...]
    followers: tuple[Accessor, ...]
    price: tuple[Accessor, ...]
    video_url: tuple[Accessor, ...]
    duration: tuple[Accessor, ...]
    format: tuple[Accessor, ...]
    is_video: tuple[Accessor, ...]
    is_verified: tuple[Accessor, ...]
    post_url: tuple[Accessor, ...]
    shortcode: tuple[Accessor, ...]


_NONE: tuple[Accessor, ...] = ()

SHAPE_FIELDS: dict[ProviderShape, ShapeFields] = {
    "content_posts": ShapeFields(
        likes=(Accessor("engagement.like_count", _data("engagement", "like_count")),),
        comments=(Accessor("engagement.comment_count", _data("engagement", "comment_count")),),
        shares=(Accessor("engagement.share_count", _data("engagement", "share_count")),),
        views=(Accessor("engagement.view_count", _data("engagement", "view_count")),),
        followers=(Accessor("influencer.followers", _data("influencer", "followers")),),
        price=(Accessor("influencer.collaboration_price", _data("influencer", "collaboration_price")),),
        video_url=_NONE,
        duration=_NONE,
        format=_NONE,
        is_video=_NONE,
        is_verified=(Accessor("influencer.is_verified", _data("influencer", "is_verified")),),
        post_url=_NONE,
        shortcode=_NONE,
    ),
    "engagement_array": ShapeFields(
        likes=(Accessor("engagement.like_count", _data("engagement", "like_count")),),
        comments=(Accessor("engagement.comment_count", _data("engagement", "comment_count")),),
        shares=(Accessor("engagement.share_count", _data("engagement", "share_count")),),
        views=(
            Accessor("engagement.view_count", _data("engagement", "view_count")),
            Accessor("engagement.play_count", _data("engagement", "play_count")),
        ),
        followers=(Accessor("profile.follower_count", _data("profile", "follower_count")),),
        price=(Accessor("data[0].collaboration_price", _data("collaboration_price")),),
        video_url=(Accessor("data[0].media_url", _data("media_url")),),
        duration=(Accessor("data[0].duration", _data("duration")),),
        format=(Accessor("data[0].format", _data("format")),),
        is_video=_NONE,
        is_verified=(Accessor("profile.is_verified", _data("profile", "is_verified")),),
        post_url=(Accessor("data[0].url", _data("url")),),
        shortcode=_NONE,
    ),
    "nested_object": ShapeFields(
        likes=(
            Accessor("edge_media_preview_like.count", _data("edge_media_preview_like", "count")),
            Accessor("edge_liked_by.count", _data("edge_liked_by", "count")),
        ),
        comments=(
            Accessor("edge_media_to_comment.count", _data("edge_media_to_comment", "count")),
            Accessor("edge_media_preview_comment.count", _data("edge_media_preview_comment", "count")),
            Accessor(
                "edge_media_to_parent_comment.count",
                _data("edge_media_to_parent_comment", "count"),
            ),
        ),
        shares=(Accessor("edge_media_to_share.count", _data("edge_media_to_share", "count")),),
        views=(
            Accessor("video_view_count", _data("video_view_count")),
            Accessor("video_play_count", _data("video_play_count")),
        ),
        followers=(Accessor("owner.edge_followed_by.count", _data("owner", "edge_followed_by", "count")),),
        price=_NONE,
        video_url=(Accessor("data.video_url", _data("video_url")),),
        duration=(Accessor("data.video_duration", _data("video_duration")),),
        format=_NONE,
        is_video=(Accessor("data.is_video", _data("is_video")),),
        is_verified=(Accessor("owner.is_verified", _data("owner", "is_verified")),),
        post_url=_NONE,
        shortcode=(Accessor("data.shortcode", _data("shortcode")),),
    ),
    "flat": ShapeFields(
        likes=_NONE,
        comments=_NONE,
        shares=_NONE,
        views=_NONE,
        followers=_NONE,
        price=_NONE,
        video_url=_NONE,
        duration=_NONE,
        format=_NONE,
        is_video=_NONE,
        is_verified=_NONE,
        post_url=_NONE,
        shortcode=_NONE,
    ),
}


def fields_for(payload: ProviderPayload) -> ShapeFields:
    return SHAPE_FIELDS[payload.shape]


# Post-level fallbacks shared by every shape.
POST_LIKES = (Accessor("likes_count", _post("likes_count")),)
POST_COMMENTS = (Accessor("comments_count", _post("comments_count")),)
POST_FOLLOWERS = (Accessor("followers_count", _post("followers_count")),)
POST_VIEWS = (Accessor("views_count", _post("views_count")),)
POST_PLAYS = (Accessor("plays_count", _post("plays_count")),)


def share_chain(payload: ProviderPayload) -> tuple[Accessor, ...]:
    """Shares: post level, then post data level, then the provider share count."""
    return (
        Accessor("shares_count", _post("shares_count")),
        Accessor("data.shares_count", _data("shares_count")),
        *fields_for(payload).shares,
    )


def price_chain(payload: ProviderPayload) -> tuple[Accessor, ...]:
    """
    Collaboration price: post level, post data level, provider object, then the
    first element of an array `data`.
    """
    return (
        Accessor("collaboration_price", _post("collaboration_price")),
        Accessor("post_result_obj.data.collaboration_price", _nested_data("collaboration_price")),
        *fields_for(payload).price,
        Accessor("post_result_obj.data[0].collaboration_price", _array_first("collaboration_price")),
    )


# Six candidate thumbnail locations, most specific first.
THUMBNAIL = (
    Accessor("thumbnail", _post("thumbnail")),
    Accessor("media_preview", _post("media_preview")),
    Accessor("thumbnail_url", _post("thumbnail_url")),
    Accessor("data[0].thumbnail_url", _array_first("thumbnail_url")),
    Accessor("data.thumbnail_src", _data("thumbnail_src")),
    Accessor("data.display_url", _data("display_url")),
)


def video_url_chain(payload: ProviderPayload) -> tuple[Accessor, ...]:
    return (
        *fields_for(payload).video_url,
        Accessor("media_url", _post("media_url")),
    )


def duration_chain(payload: ProviderPayload) -> tuple[Accessor, ...]:
    return (
        *fields_for(payload).duration,
        Accessor("duration", _post("duration")),
    )


PUBLISH_TIMESTAMP = (
    Accessor("post_created_at", _post("post_created_at")),
    Accessor("posted_at", _post("posted_at")),
    Accessor("created_at", _post("created_at")),
)

CONTENT_URL = (
    Accessor("content_url", _post("content_url")),
    Accessor("url", _post("url")),
)

AVATAR = (Accessor("profile_pic_url", _post("profile_pic_url")),)

HANDLE = (
    Accessor("influencer_username", _post("influencer_username")),
    Accessor("username", _post("username")),
    Accessor("account_handle", _post("account_handle")),
)

DISPLAY_NAME = (
    Accessor("full_name", _post("full_name")),
    Accessor("name", _post("name")),
)
