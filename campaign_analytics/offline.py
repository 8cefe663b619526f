from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any


_SAMPLE_POSTS: list[dict[str, Any]] = [
    {
        "id": "post-1",
        "influencer_username": "stretchwithsam",
        "full_name": "Sam Rivera",
        "content_url": "https://www.instagram.com/reel/Cx1AbC_9/",
        "post_created_at": "2025-03-01T14:20:00Z",
        "collaboration_price": 250,
        "post_result_obj": {
            "data": {
                "shortcode": "Cx1AbC_9",
                "is_video": True,
                "video_view_count": 12000,
                "video_duration": 31.5,
                "display_url": "https://cdn.example.com/cx1abc.jpg",
                "edge_media_preview_like": {"count": 840},
                "edge_media_to_comment": {"count": 66},
                "owner": {"edge_followed_by": {"count": 15000}, "is_verified": True},
            }
        },
    },
    {
        "id": "post-2",
        "influencer_username": "StretchWithSam",
        "content_url": "https://www.instagram.com/p/Cy2DeF/",
        "post_created_at": "2025-03-03T09:00:00+02:00",
        "post_result_obj": {
            "data": {
                "shortcode": "Cy2DeF",
                "is_video": False,
                "edge_liked_by": {"count": 410},
                "edge_media_preview_comment": {"count": 12},
                "owner": {"edge_followed_by": {"count": 15400}},
            }
        },
    },
    {
        "id": "post-3",
        "influencer_username": "mobility.lab",
        "full_name": "Mobility Lab",
        "campaign_influencer_id": "ci-77",
        "content_url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "post_created_at": "2025-03-01T20:00:00Z",
        "post_result_obj": {
            "data": [
                {
                    "format": "VIDEO",
                    "url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
                    "duration": 412,
                    "collaboration_price": 600,
                    "thumbnail_url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/hq.jpg",
                    "engagement": {
                        "like_count": 2100,
                        "comment_count": 180,
                        "view_count": 48000,
                    },
                    "profile": {"follower_count": 9000},
                }
            ]
        },
    },
    {
        "id": "post-4",
        "influencer_username": "dailyflow",
        "content_url": "https://www.tiktok.com/@dailyflow/video/7312",
        "post_created_at": "yesterday",
        "likes_count": 95,
        "comments_count": 7,
        "shares_count": 4,
        "followers_count": 3200,
        "plays_count": 2600,
        "collaboration_price": "80",
    },
    {
        "id": "post-5",
        "influencer_username": "dailyflow",
        "content_url": "https://www.linkedin.com/posts/dailyflow-123",
        "created_at": "2025-03-04",
        "post_result_obj": {
            "engagement": {"like_count": 40, "comment_count": 3, "share_count": 2},
            "influencer": {"followers": 3400},
        },
    },
]

_SAMPLE_INFLUENCERS: list[dict[str, Any]] = [
    {
        "id": "ci-77",
        "social_account": {"account_handle": "mobility.lab", "subscribers_count": 52000},
    },
]

_SAMPLE_OVERRIDES: list[dict[str, Any]] = [
    {"post_id": "post-2", "videoPlayCount": 0, "cpe": 0.5},
]


def _sentiment_item(
    post_id: str,
    *,
    distribution: dict[str, float],
    comments: int,
    started_at: str,
    risk_level: str,
    emoji_total: int,
) -> dict[str, Any]:
    dominant = max(distribution, key=lambda k: distribution[k])
    return {
        "content_post_id": post_id,
        "sentiment": {"dominant": dominant, "confidence": 0.93, "distribution": distribution},
        "statistics": {"total_comments": comments, "processing_duration_seconds": 4.2},
        "timestamps": {
            "started_at": started_at,
            "completed_at": started_at.replace(":00Z", ":30Z"),
            "created_at": started_at,
        },
        "platform_info": {"published_at": started_at},
        "analysis": {
            "comments_count": comments,
            "avg_confidence": 0.94,
            "risk_level": risk_level,
            "flagged_count": 1 if risk_level in ("high", "critical") else 0,
            "flagged_messages": (
                [
                    {
                        "original_text": "this is a scam",
                        "flag_reasons": ["accusation"],
                        "severity": "high",
                        "risk_level": risk_level,
                    }
                ]
                if risk_level in ("high", "critical")
                else []
            ),
            "positive_comments": [
                {
                    "original_text": "love this routine",
                    "sentiment_label": "positive",
                    "confidence": 0.97,
                    "dominant_emotion": "Joy: strong",
                    "intensity": 0.8,
                    "categories": {"gratitude": 0.7, "sarcasm": 0.1},
                }
            ],
            "negative_comments": [],
            "emoji_summary": {
                "frequency": {"🔥": emoji_total // 2, "❤️": emoji_total - emoji_total // 2},
                "total_count": emoji_total,
                "unique_emojis": 2,
                "emoji_sentiment": {
                    "sentiment_distribution": {"positive": 7, "neutral": 2, "negative": 1, "none": 0}
                },
            },
            "common_words": {
                "most_common": [{"word": "stretch", "count": 14}, {"word": "form", "count": 6}],
                "most_unique": [{"word": "hamstrings", "count": 2}],
                "total_words": 20,
                "unique_count": 3,
            },
        },
    }


_SAMPLE_SENTIMENT: list[dict[str, Any]] = [
    _sentiment_item(
        "post-1",
        distribution={"positive": 0.55, "neutral": 0.3, "negative": 0.1, "mixed": 0.05},
        comments=66,
        started_at="2025-03-02T10:00:00Z",
        risk_level="low",
        emoji_total=24,
    ),
    _sentiment_item(
        "post-3",
        distribution={"positive": 0.78, "neutral": 0.15, "negative": 0.05, "mixed": 0.02},
        comments=180,
        started_at="2025-03-05T10:00:00Z",
        risk_level="high",
        emoji_total=41,
    ),
]


@dataclass(frozen=True)
class OfflineSample:
    """
    Deterministic campaign records for `dry-run`.

    Covers every provider shape, a YouTube subscriber lookup, a preserved
    override, an unparseable publish date and two sentiment records.
    """

    campaign_id: str = "offline-campaign"
    posts: list[dict[str, Any]] = field(default_factory=lambda: copy.deepcopy(_SAMPLE_POSTS))
    influencers: list[dict[str, Any]] = field(default_factory=lambda: copy.deepcopy(_SAMPLE_INFLUENCERS))
    overrides: list[dict[str, Any]] = field(default_factory=lambda: copy.deepcopy(_SAMPLE_OVERRIDES))
    sentiment: list[dict[str, Any]] = field(default_factory=lambda: copy.deepcopy(_SAMPLE_SENTIMENT))
