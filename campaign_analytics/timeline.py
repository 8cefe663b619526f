from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Iterable

from .event_log import EventLogger
from .post import NormalizedPostMetrics


@dataclass(frozen=True)
class PostSummary:
    post_id: str
    handle: str
    display_name: str
    thumbnail_url: str
    views: int
    likes: int
    comments: int
    shares: int


@dataclass(frozen=True)
class DateBucket:
    date: str
    post_count: int
    views: int
    cumulative_views: int
    posts: tuple[PostSummary, ...] = ()


_OFFSET_NO_COLON = re.compile(r"([+-])(\d{2})(\d{2})$")
_FRACTION = re.compile(r"\.(\d+)")


def _to_isoformat_subset(s: str) -> str:
    # fromisoformat on 3.10 wants "+HH:MM" offsets and 3 or 6 fractional digits.
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    if "T" in s or " " in s:
        s = _OFFSET_NO_COLON.sub(r"\1\2:\3", s)
    return _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), s, count=1)


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse an ISO-8601 timestamp or date into an aware UTC datetime.

    Naive values are taken as UTC. Returns None when the value cannot be parsed
    or its UTC equivalent falls outside the supported date range.
    """
    s = (value or "").strip()
    if not s:
        return None
    try:
        dt = datetime.fromisoformat(_to_isoformat_subset(s))
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def _summary(post: NormalizedPostMetrics) -> PostSummary:
    return PostSummary(
        post_id=post.post_id,
        handle=post.handle,
        display_name=post.display_name,
        thumbnail_url=post.thumbnail_url,
        views=post.video_play_count,
        likes=post.likes,
        comments=post.comments,
        shares=post.shares,
    )


def bucket_by_date(
    posts: Iterable[NormalizedPostMetrics],
    *,
    logger: EventLogger | None = None,
) -> list[DateBucket]:
    """
    Bucket viewed posts by UTC publish date with a running view total.

    Posts without views or without a parseable timestamp are left out entirely.
    """
    grouped: dict[date, list[NormalizedPostMetrics]] = {}

    for post in posts:
        if post.video_play_count <= 0:
            if logger is not None:
                logger.debug("timeline_post_excluded", post_id=post.post_id, reason="no_views")
            continue

        published = parse_timestamp(post.publish_timestamp)
        if published is None:
            if logger is not None:
                logger.warning(
                    "timeline_post_excluded",
                    post_id=post.post_id,
                    reason="malformed_date",
                    publish_timestamp=post.publish_timestamp,
                )
            continue

        grouped.setdefault(published.date(), []).append(post)

    buckets: list[DateBucket] = []
    cumulative = 0
    for day in sorted(grouped):
        day_posts = grouped[day]
        views = sum(p.video_play_count for p in day_posts)
        cumulative += views
        buckets.append(
            DateBucket(
                date=day.isoformat(),
                post_count=len(day_posts),
                views=views,
                cumulative_views=cumulative,
                posts=tuple(_summary(p) for p in day_posts),
            )
        )
    return buckets


def excluded_from_timeline(posts: Iterable[NormalizedPostMetrics]) -> dict[str, int]:
    """Count posts the bucketer would skip, by reason."""
    counts = {"no_views": 0, "malformed_date": 0}
    for post in posts:
        if post.video_play_count <= 0:
            counts["no_views"] += 1
        elif parse_timestamp(post.publish_timestamp) is None:
            counts["malformed_date"] += 1
    return counts
