from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Iterable, Mapping

from .campaign import CampaignRollup, aggregate_campaign, rank_posts
from .config import config_sha256
from .config_schema import AppConfig
from .event_log import EventLogger
from .influencers import InfluencerRollup, SubscriberDirectory, aggregate_influencers, rank_influencers
from .insights import Insight, generate_insights
from .normalize import normalize_posts, overrides_by_post_id
from .post import NormalizedPostMetrics
from .sentiment import (
    AggregatedSentiment,
    EmojiAggregate,
    PostSentimentRow,
    WordAggregate,
    aggregate_emoji,
    aggregate_emotions,
    aggregate_flagged,
    aggregate_sentiment,
    aggregate_words,
    post_sentiment_rows,
    risk_level_counts,
)
from .sentiment_schema import FlaggedMessage, SentimentRecord, sentiment_record_from_api_item
from .timeline import DateBucket, bucket_by_date


@dataclass(frozen=True)
class CampaignReport:
    campaign_id: str | None
    config_sha256: str
    campaign: CampaignRollup
    influencers: tuple[InfluencerRollup, ...]
    posts: tuple[NormalizedPostMetrics, ...]
    timeline: tuple[DateBucket, ...]
    sentiment: AggregatedSentiment
    sentiment_score: float
    emoji: EmojiAggregate
    words: WordAggregate
    flagged_messages: tuple[FlaggedMessage, ...]
    emotions: tuple[tuple[str, int], ...]
    post_sentiment: tuple[PostSentimentRow, ...]
    risk_counts: Mapping[str, int] = field(default_factory=dict)
    insights: tuple[Insight, ...] = ()


def build_campaign_report(
    raw_posts: Iterable[Mapping[str, Any]],
    sentiment_items: Iterable[Mapping[str, Any]] = (),
    *,
    influencers: Iterable[Mapping[str, Any]] | None = None,
    overrides: Iterable[Mapping[str, Any]] | None = None,
    config: AppConfig | None = None,
    logger: EventLogger | None = None,
    campaign_id: str | None = None,
) -> CampaignReport:
    """
    Run every aggregation over one campaign's already-fetched records.

    `influencers` are campaign influencer identity records, used only for the
    YouTube subscriber lookup. `overrides` are manually edited per-post metrics
    keyed by `post_id`. Degenerate input yields a zeroed report, never an error.
    """
    cfg = config or AppConfig()
    cfg_hash = config_sha256(cfg)
    raw = list(raw_posts)
    sentiment_raw = list(sentiment_items)

    if logger is not None:
        logger.set_campaign_id(campaign_id)
        logger.info(
            "report_started",
            raw_posts=len(raw),
            sentiment_items=len(sentiment_raw),
            config_sha256=cfg_hash,
        )

    posts = normalize_posts(
        raw,
        overrides=overrides_by_post_id(overrides or ()),
        config=cfg.normalizer,
    )

    subscribers = SubscriberDirectory(influencers) if influencers is not None else None
    rollups = aggregate_influencers(
        posts,
        subscribers=subscribers,
        click_through_rate=cfg.estimates.click_through_rate,
        logger=logger,
    )
    campaign = aggregate_campaign(posts, rollups, estimates=cfg.estimates)
    timeline = bucket_by_date(posts, logger=logger)

    records: list[SentimentRecord] = [sentiment_record_from_api_item(item) for item in sentiment_raw]
    aggregated = aggregate_sentiment(records, config=cfg.sentiment, logger=logger)
    emoji = aggregate_emoji(records, top_limit=cfg.sentiment.top_emoji_limit)
    risk_counts = risk_level_counts(records)
    insights = generate_insights(
        aggregated,
        campaign=campaign,
        emoji=emoji,
        risk_counts=risk_counts,
        config=cfg.insights,
    )

    report = CampaignReport(
        campaign_id=(campaign_id or "").strip() or None,
        config_sha256=cfg_hash,
        campaign=campaign,
        influencers=tuple(rank_influencers(rollups.values())),
        posts=tuple(rank_posts(posts)),
        timeline=tuple(timeline),
        sentiment=aggregated,
        sentiment_score=aggregated.score,
        emoji=emoji,
        words=aggregate_words(records, limit=cfg.sentiment.word_list_limit),
        flagged_messages=aggregate_flagged(records),
        emotions=aggregate_emotions(
            records,
            limit=cfg.sentiment.top_emotion_limit,
            category_threshold=cfg.sentiment.emotion_category_threshold,
        ),
        post_sentiment=tuple(post_sentiment_rows(records)),
        risk_counts=risk_counts,
        insights=tuple(insights),
    )

    if logger is not None:
        logger.info(
            "report_completed",
            posts=campaign.total_posts,
            influencers=campaign.total_influencers,
            timeline_days=len(report.timeline),
            sentiment_posts=aggregated.total_posts,
            insights=len(report.insights),
        )

    return report


def report_to_dict(report: CampaignReport) -> dict[str, Any]:
    """Plain JSON-serializable structure for export collaborators."""
    out = asdict(report)
    out["risk_counts"] = dict(report.risk_counts)
    out["emotions"] = [{"emotion": e, "count": c} for e, c in report.emotions]
    out["emoji"]["top_emojis"] = [{"emoji": e, "count": c} for e, c in report.emoji.top_emojis]
    return out
