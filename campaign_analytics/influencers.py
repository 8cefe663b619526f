from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from .event_log import EventLogger
from .platforms import Platform
from .post import NormalizedPostMetrics
from .providers import coerce_id, coerce_number, coerce_text, dig


@dataclass(frozen=True)
class InfluencerRollup:
    """
    Per-influencer totals keyed by the lower-cased handle.

    `followers` is the largest follower snapshot seen across the influencer's
    posts, or the YouTube subscriber count when one was found. It is never a sum.
    """

    handle: str
    display_name: str
    post_count: int
    likes: int
    comments: int
    shares: int
    views: int
    followers: int
    engagement_rate_percent: float
    total_engagement: int
    estimated_clicks: int
    avatar_url: str | None = None
    is_verified: bool = False
    platform: Platform | None = None
    subscriber_count: int = 0
    total_raw_views: int = 0


class SubscriberDirectory:
    """
    YouTube subscriber counts from campaign influencer identity records.

    Records are indexed by their `id` and by `username_<handle>` so a post can be
    matched by campaign influencer id first and by account handle second.
    """

    def __init__(self, records: Iterable[Mapping[str, Any]] | None = None) -> None:
        self._by_key: dict[str, Mapping[str, Any]] = {}
        for record in records or ():
            self.add(record)

    def __len__(self) -> int:
        return len(self._by_key)

    def add(self, record: Mapping[str, Any]) -> None:
        if not isinstance(record, Mapping):
            return
        record_id = coerce_id(record.get("id"))
        if record_id:
            self._by_key[record_id] = record
        handle = coerce_text(dig(record, "social_account", "account_handle"))
        if handle:
            self._by_key[f"username_{handle.lower()}"] = record

    def subscriber_count(self, *, campaign_influencer_id: str | None, handle: str) -> int:
        count = 0
        if campaign_influencer_id and campaign_influencer_id in self._by_key:
            count = _subscribers_of(self._by_key[campaign_influencer_id])
        if count == 0:
            key = f"username_{(handle or '').lower()}"
            if key in self._by_key:
                count = _subscribers_of(self._by_key[key])
        return count


def _subscribers_of(record: Mapping[str, Any]) -> int:
    for keys in (
        ("social_account", "subscribers_count"),
        ("social_account", "additional_metrics", "subscriber_count"),
    ):
        value = coerce_number(dig(record, *keys))
        if value is not None and value > 0:
            return int(math.floor(value + 0.5))
    return 0


def estimated_clicks(engagement: int, click_through_rate: float) -> int:
    if engagement <= 0 or click_through_rate <= 0:
        return 0
    return int(math.floor(engagement * click_through_rate + 0.5))


def _group_by_handle(posts: Iterable[NormalizedPostMetrics]) -> dict[str, list[NormalizedPostMetrics]]:
    groups: dict[str, list[NormalizedPostMetrics]] = {}
    for post in posts:
        groups.setdefault(post.handle_key, []).append(post)
    return groups


def _rollup_group(
    key: str,
    group: Sequence[NormalizedPostMetrics],
    *,
    subscribers: SubscriberDirectory | None,
    click_through_rate: float,
    logger: EventLogger | None,
) -> InfluencerRollup:
    likes = comments = shares = views = raw_views = 0
    followers = 0
    display_name = ""
    avatar_url: str | None = None
    is_verified = False
    platform: Platform | None = None
    campaign_influencer_id: str | None = None

    for post in group:
        likes += post.likes
        comments += post.comments
        shares += post.shares
        views += post.video_play_count
        raw_views += post.raw_views
        followers = max(followers, post.follower_count)

        if not display_name or post.display_name != post.handle:
            display_name = post.display_name or display_name
            avatar_url = post.avatar_url or post.thumbnail_url or avatar_url
            is_verified = post.is_verified
        if platform is None and post.platform is not None:
            platform = post.platform
        if campaign_influencer_id is None and post.campaign_influencer_id:
            campaign_influencer_id = post.campaign_influencer_id

    subscriber_count = 0
    if platform == "youtube" and subscribers is not None:
        subscriber_count = subscribers.subscriber_count(
            campaign_influencer_id=campaign_influencer_id, handle=key
        )
        if subscriber_count > 0:
            if logger is not None:
                logger.info(
                    "subscriber_count_applied",
                    handle=key,
                    followers=followers,
                    subscriber_count=subscriber_count,
                )
            followers = subscriber_count

    engagement = likes + comments + (shares if shares > 0 else 0)
    rate = (engagement / followers) * 100 if followers > 0 else 0.0

    return InfluencerRollup(
        handle=key,
        display_name=display_name or key,
        post_count=len(group),
        likes=likes,
        comments=comments,
        shares=shares,
        views=views,
        followers=followers,
        engagement_rate_percent=rate,
        total_engagement=engagement,
        estimated_clicks=estimated_clicks(engagement, click_through_rate),
        avatar_url=avatar_url,
        is_verified=is_verified,
        platform=platform,
        subscriber_count=subscriber_count,
        total_raw_views=raw_views,
    )


def aggregate_influencers(
    posts: Iterable[NormalizedPostMetrics],
    *,
    subscribers: SubscriberDirectory | None = None,
    click_through_rate: float = 0.03,
    logger: EventLogger | None = None,
) -> dict[str, InfluencerRollup]:
    """
    Group posts by lower-cased handle and roll each group up.

    Output order follows the first appearance of each handle.
    """
    return {
        key: _rollup_group(
            key,
            group,
            subscribers=subscribers,
            click_through_rate=click_through_rate,
            logger=logger,
        )
        for key, group in _group_by_handle(posts).items()
    }


def rank_influencers(rollups: Iterable[InfluencerRollup]) -> list[InfluencerRollup]:
    return sorted(rollups, key=lambda r: r.total_engagement, reverse=True)
