from __future__ import annotations

from dataclasses import dataclass

from .platforms import Platform
from .providers import ProviderShape


@dataclass(frozen=True)
class PreservedOverride:
    """
    Manually edited metrics for one post that must survive a later refetch.

    Any field left as None falls back to the computed value.
    """

    video_play_count: int | None = None
    cost_per_view: float | None = None
    cost_per_engagement: float | None = None


@dataclass(frozen=True)
class NormalizedPostMetrics:
    """
    Canonical per-post metrics. All counts are non-negative.

    `video_play_count` is the views value every rollup uses. `raw_views` only
    exists for the legacy engagement math and is never displayed or summed.
    """

    post_id: str
    handle: str
    display_name: str

    likes: int = 0
    comments: int = 0
    shares: int = 0

    raw_views: int = 0
    raw_plays: int = 0
    video_play_count: int = 0

    follower_count: int = 0
    engagement_rate_percent: float = 0.0

    is_video: bool = False
    duration: float = 0.0
    collaboration_price: float = 0.0
    cost_per_view: float = 0.0
    cost_per_engagement: float = 0.0

    publish_timestamp: str | None = None

    provider_shape: ProviderShape = "flat"
    platform: Platform | None = None
    content_url: str | None = None
    shortcode: str | None = None
    thumbnail_url: str = ""
    video_url: str | None = None
    avatar_url: str | None = None
    is_verified: bool = False
    campaign_influencer_id: str | None = None
    price_source: str | None = None
    override_applied: bool = False

    @property
    def handle_key(self) -> str:
        return self.handle.lower()

    @property
    def total_engagement(self) -> int:
        return self.likes + self.comments + (self.shares if self.shares > 0 else 0)
