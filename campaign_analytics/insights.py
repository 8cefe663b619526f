from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping

from .campaign import CampaignRollup
from .config_schema import InsightsConfig
from .sentiment import AggregatedSentiment, EmojiAggregate, to_percentages

InsightType = Literal["positive", "warning", "success", "info"]

HIGH_RISK_LEVELS = ("high", "critical")


@dataclass(frozen=True)
class Insight:
    type: InsightType
    title: str
    description: str


def generate_insights(
    sentiment: AggregatedSentiment,
    *,
    campaign: CampaignRollup | None = None,
    emoji: EmojiAggregate | None = None,
    risk_counts: Mapping[str, int] | None = None,
    config: InsightsConfig | None = None,
) -> list[Insight]:
    """
    Qualitative statements about a campaign's reception, in a fixed rule order.

    Rules: sentiment trend, analysis confidence, emoji volume, high-risk posts,
    positive share. Only the first `max_insights` that fire are kept.
    `campaign` is the campaign rollup; no current rule reads it.
    """
    cfg = config or InsightsConfig()
    percentages = to_percentages(sentiment.distribution)
    positive = percentages["positive"]

    insights: list[Insight] = []

    if sentiment.trend == "improving":
        insights.append(
            Insight(
                type="positive",
                title="Positive Trend Detected",
                description=(
                    "Sentiment has improved across recent posts, "
                    f"with {positive}% positive feedback overall."
                ),
            )
        )
    elif sentiment.trend == "declining":
        insights.append(
            Insight(
                type="warning",
                title="Attention Needed",
                description="Sentiment is declining. Consider addressing concerns in recent comments.",
            )
        )

    if sentiment.confidence > cfg.high_confidence_threshold:
        confidence_pct = int(sentiment.confidence * 100 + 0.5)
        insights.append(
            Insight(
                type="success",
                title="High Analysis Accuracy",
                description=(
                    f"AI confidence is {confidence_pct}%, indicating reliable sentiment detection."
                ),
            )
        )

    if emoji is not None and emoji.total_count > cfg.emoji_count_threshold:
        insights.append(
            Insight(
                type="info",
                title="High Emoji Engagement",
                description=(
                    f"{emoji.total_count} emojis detected across {emoji.unique_count} unique types. "
                    "Consider emoji-driven content."
                ),
            )
        )

    high_risk = sum(int((risk_counts or {}).get(level, 0)) for level in HIGH_RISK_LEVELS)
    if high_risk > 0:
        insights.append(
            Insight(
                type="warning",
                title="Risk Alert",
                description=(
                    f"{high_risk} post(s) flagged with high/critical risk. Review flagged comments."
                ),
            )
        )

    if positive > cfg.positive_percent_threshold:
        insights.append(
            Insight(
                type="success",
                title="Excellent Performance",
                description=(
                    f"{positive}% positive sentiment exceeds typical benchmarks. "
                    "Great campaign reception!"
                ),
            )
        )

    return insights[: cfg.max_insights]
