from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from .config_schema import EstimatesConfig
from .influencers import InfluencerRollup, estimated_clicks
from .post import NormalizedPostMetrics


@dataclass(frozen=True)
class CampaignRollup:
    total_posts: int = 0
    total_influencers: int = 0
    total_likes: int = 0
    total_comments: int = 0
    total_shares: int = 0
    total_views: int = 0
    total_followers: int = 0
    total_engagement: int = 0
    total_spend: float = 0.0
    priced_post_count: int = 0
    video_post_count: int = 0
    photo_post_count: int = 0
    average_engagement_rate: float = 0.0
    cost_per_view: float = 0.0
    cost_per_engagement: float = 0.0
    estimated_impressions: int = 0
    estimated_reach: int = 0
    total_clicks: int = 0
    views_to_followers_ratio: float = 0.0
    engagement_to_views_ratio: float = 0.0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def estimate_impressions(
    *,
    total_views: int,
    photo_post_count: int,
    total_followers: int,
    influencer_count: int,
    estimates: EstimatesConfig,
) -> int:
    """
    Video impressions from views plus a follower-share heuristic for photo posts.

    The photo term is spread across influencers, so it is 0 without any.
    """
    video_impressions = round_half_up(total_views * estimates.video_impression_multiplier)
    photo_impressions = 0
    if influencer_count > 0:
        photo_impressions = round_half_up(
            photo_post_count
            * total_followers
            * estimates.photo_impression_follower_share
            / influencer_count
        )
    return video_impressions + photo_impressions


def estimate_reach(*, impressions: int, total_views: int, estimates: EstimatesConfig) -> int:
    """Reach never exceeds the scaled impressions nor falls below the floor."""
    scaled = round_half_up(impressions * estimates.reach_multiplier)
    floor = max(float(total_views), impressions * estimates.reach_floor_impression_share)
    return round_half_up(min(float(scaled), floor))


def aggregate_campaign(
    posts: Sequence[NormalizedPostMetrics],
    influencers: Mapping[str, InfluencerRollup],
    *,
    estimates: EstimatesConfig | None = None,
) -> CampaignRollup:
    """
    Campaign totals over every post plus audience totals over unique influencers.

    Cost ratios come from aggregate sums, never from averaging per-post ratios.
    """
    est = estimates or EstimatesConfig()

    likes = sum(p.likes for p in posts)
    comments = sum(p.comments for p in posts)
    shares = sum(p.shares for p in posts)
    views = sum(p.video_play_count for p in posts)

    priced = [p for p in posts if p.collaboration_price > 0]
    spend = sum(p.collaboration_price for p in priced)

    video_posts = sum(1 for p in posts if p.video_play_count > 0)
    photo_posts = len(posts) - video_posts

    followers = sum(r.followers for r in influencers.values())
    influencer_count = len(influencers)

    engagement = likes + comments + (shares if shares > 0 else 0)

    impressions = estimate_impressions(
        total_views=views,
        photo_post_count=photo_posts,
        total_followers=followers,
        influencer_count=influencer_count,
        estimates=est,
    )

    return CampaignRollup(
        total_posts=len(posts),
        total_influencers=influencer_count,
        total_likes=likes,
        total_comments=comments,
        total_shares=shares,
        total_views=views,
        total_followers=followers,
        total_engagement=engagement,
        total_spend=float(spend),
        priced_post_count=len(priced),
        video_post_count=video_posts,
        photo_post_count=photo_posts,
        average_engagement_rate=(engagement / followers) * 100 if followers > 0 else 0.0,
        cost_per_view=spend / views if views > 0 else 0.0,
        cost_per_engagement=spend / engagement if engagement > 0 else 0.0,
        estimated_impressions=impressions,
        estimated_reach=estimate_reach(impressions=impressions, total_views=views, estimates=est),
        total_clicks=estimated_clicks(engagement, est.click_through_rate),
        views_to_followers_ratio=(views / followers) * 100 if followers > 0 else 0.0,
        engagement_to_views_ratio=(engagement / views) * 100 if views > 0 else 0.0,
    )


def rank_posts(posts: Iterable[NormalizedPostMetrics]) -> list[NormalizedPostMetrics]:
    return sorted(posts, key=lambda p: p.total_engagement, reverse=True)
