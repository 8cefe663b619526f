from __future__ import annotations

import math
import re
from typing import Any, Iterable, Mapping

from .config_schema import NormalizerConfig
from .platforms import detect_platform, extract_shortcode, placeholder_thumbnail
from .post import NormalizedPostMetrics, PreservedOverride
from .providers import (
    AVATAR,
    CONTENT_URL,
    DISPLAY_NAME,
    HANDLE,
    POST_COMMENTS,
    POST_FOLLOWERS,
    POST_LIKES,
    POST_PLAYS,
    POST_VIEWS,
    PUBLISH_TIMESTAMP,
    THUMBNAIL,
    Accessor,
    ProviderPayload,
    coerce_id,
    coerce_number,
    coerce_text,
    detect_provider_payload,
    duration_chain,
    fields_for,
    first_named,
    first_number,
    first_text,
    price_chain,
    share_chain,
    video_url_chain,
)

_NUMERIC_ID_RE = re.compile(r"^\d+$")


def _count(value: float) -> int:
    if value <= 0:
        return 0
    return int(math.floor(value + 0.5))


def _non_negative(value: float) -> float:
    return value if value > 0 else 0.0


def _first_bool(chain: tuple[Accessor, ...], record: Mapping[str, Any], payload: ProviderPayload) -> bool:
    for accessor in chain:
        value = accessor.get(record, payload)
        if isinstance(value, bool) and value:
            return True
    return False


def _is_video(record: Mapping[str, Any], payload: ProviderPayload) -> bool:
    fields = fields_for(payload)
    fmt = first_text(fields.format, record, payload)
    if fmt is not None and fmt.upper() == "VIDEO":
        return True
    if _first_bool(fields.is_video, record, payload):
        return True
    content_format = coerce_text(record.get("content_format"))
    return content_format is not None and content_format.upper() == "VIDEO"


def _post_id(record: Mapping[str, Any]) -> str:
    return (
        coerce_id(record.get("id"))
        or coerce_id(record.get("post_id"))
        or coerce_id(record.get("platform_post_id"))
        or ""
    )


def _shortcode(
    record: Mapping[str, Any], payload: ProviderPayload, content_url: str | None
) -> str | None:
    fields = fields_for(payload)
    code = first_text(fields.shortcode, record, payload)
    if code:
        return code

    provider_url = first_text(fields.post_url, record, payload)
    code = extract_shortcode(provider_url) or extract_shortcode(content_url)
    if code:
        return code

    raw_post_id = coerce_id(record.get("post_id"))
    if raw_post_id and not _NUMERIC_ID_RE.fullmatch(raw_post_id):
        return raw_post_id
    return None


def _handle(record: Mapping[str, Any], payload: ProviderPayload) -> str:
    handle = first_text(HANDLE, record, payload) or ""
    if handle.startswith("@"):
        handle = handle[1:].strip()
    return handle


def _resolve_views(
    record: Mapping[str, Any],
    payload: ProviderPayload,
    override: PreservedOverride | None,
) -> tuple[int, int, int, bool]:
    """
    Return (video_play_count, raw_views, raw_plays, override_applied).

    A preserved override always wins. Otherwise the provider view wins, falling
    back to the post-level plays when the provider reports nothing. raw_views is
    the legacy max of every source and never feeds video_play_count.
    """
    provider_view = _count(first_number(fields_for(payload).views, record, payload))
    post_level_views = _count(first_number(POST_VIEWS, record, payload))
    post_level_plays = _count(first_number(POST_PLAYS, record, payload))

    raw_views = max(provider_view, post_level_views, post_level_plays)

    if override is not None and override.video_play_count is not None:
        return max(0, int(override.video_play_count)), raw_views, post_level_plays, True

    video_play_count = provider_view if provider_view > 0 else post_level_plays
    return video_play_count, raw_views, post_level_plays, False


def normalize_post(
    record: Mapping[str, Any] | Any,
    *,
    override: PreservedOverride | None = None,
    config: NormalizerConfig | None = None,
) -> NormalizedPostMetrics:
    """
    Turn one raw post record of any provider shape into canonical metrics.

    Never raises for missing or malformed fields; absent values become zero or empty.
    """
    cfg = config or NormalizerConfig()
    item: Mapping[str, Any] = record if isinstance(record, Mapping) else {}
    payload = detect_provider_payload(item)
    fields = fields_for(payload)

    likes = _count(first_number((*fields.likes, *POST_LIKES), item, payload))
    comments = _count(first_number((*fields.comments, *POST_COMMENTS), item, payload))
    shares = _count(first_number(share_chain(payload), item, payload))
    followers = _count(first_number((*fields.followers, *POST_FOLLOWERS), item, payload))

    video_play_count, raw_views, raw_plays, override_applied = _resolve_views(item, payload, override)

    engagement = likes + comments + (shares if shares > 0 else 0)
    engagement_rate = (engagement / followers) * 100 if followers > 0 else 0.0

    price_source, price = first_named(price_chain(payload), item, payload)
    price = _non_negative(price)
    if price <= 0:
        price_source = None

    cost_per_view = price / video_play_count if price > 0 and video_play_count > 0 else 0.0
    cost_per_engagement = price / engagement if price > 0 and engagement > 0 else 0.0
    if override is not None:
        if override.cost_per_view is not None:
            cost_per_view = _non_negative(float(override.cost_per_view))
            override_applied = True
        if override.cost_per_engagement is not None:
            cost_per_engagement = _non_negative(float(override.cost_per_engagement))
            override_applied = True

    content_url = first_text(CONTENT_URL, item, payload)
    thumbnail = first_text(THUMBNAIL, item, payload) or placeholder_thumbnail(
        content_url, cfg.default_placeholder
    )

    handle = _handle(item, payload)
    display_name = first_text(DISPLAY_NAME, item, payload) or handle

    return NormalizedPostMetrics(
        post_id=_post_id(item),
        handle=handle,
        display_name=display_name,
        likes=likes,
        comments=comments,
        shares=shares,
        raw_views=raw_views,
        raw_plays=raw_plays,
        video_play_count=video_play_count,
        follower_count=followers,
        engagement_rate_percent=engagement_rate,
        is_video=_is_video(item, payload),
        duration=_non_negative(first_number(duration_chain(payload), item, payload)),
        collaboration_price=price,
        cost_per_view=cost_per_view,
        cost_per_engagement=cost_per_engagement,
        publish_timestamp=first_text(PUBLISH_TIMESTAMP, item, payload),
        provider_shape=payload.shape,
        platform=detect_platform(content_url),
        content_url=content_url,
        shortcode=_shortcode(item, payload, content_url),
        thumbnail_url=thumbnail,
        video_url=first_text(video_url_chain(payload), item, payload),
        avatar_url=first_text(AVATAR, item, payload),
        is_verified=_first_bool(fields.is_verified, item, payload),
        campaign_influencer_id=coerce_id(item.get("campaign_influencer_id")),
        price_source=price_source,
        override_applied=override_applied,
    )


def _first_present(item: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = item.get(key)
        if value is not None:
            return value
    return None


def override_from_mapping(item: Mapping[str, Any]) -> PreservedOverride | None:
    """
    Parse a manually edited metrics entry; returns None when it carries no values.

    Accepts both snake_case keys and the camelCase keys of saved edits.
    """
    play_count = coerce_number(_first_present(item, "video_play_count", "videoPlayCount"))
    cpv = coerce_number(_first_present(item, "cost_per_view", "cpv"))
    cpe = coerce_number(_first_present(item, "cost_per_engagement", "cpe"))

    if play_count is None and cpv is None and cpe is None:
        return None

    return PreservedOverride(
        video_play_count=_count(play_count) if play_count is not None else None,
        cost_per_view=_non_negative(cpv) if cpv is not None else None,
        cost_per_engagement=_non_negative(cpe) if cpe is not None else None,
    )


def overrides_by_post_id(items: Iterable[Mapping[str, Any]]) -> dict[str, PreservedOverride]:
    out: dict[str, PreservedOverride] = {}
    for item in items:
        if not isinstance(item, Mapping):
            continue
        post_id = coerce_id(item.get("post_id")) or coerce_id(item.get("id"))
        if not post_id:
            continue
        override = override_from_mapping(item)
        if override is not None:
            out[post_id] = override
    return out


def normalize_posts(
    records: Iterable[Mapping[str, Any]],
    *,
    overrides: Mapping[str, PreservedOverride] | None = None,
    config: NormalizerConfig | None = None,
) -> list[NormalizedPostMetrics]:
    """Normalize every record; overrides are looked up by the record's post id."""
    lookup = overrides or {}
    out: list[NormalizedPostMetrics] = []
    for record in records:
        item = record if isinstance(record, Mapping) else {}
        override = lookup.get(_post_id(item)) if lookup else None
        out.append(normalize_post(item, override=override, config=config))
    return out
