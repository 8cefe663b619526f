from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Literal, Mapping, Sequence

from .config_schema import SentimentConfig
from .event_log import EventLogger
from .sentiment_schema import (
    EMOJI_SENTIMENT_KEYS,
    SENTIMENT_LABELS,
    FlaggedMessage,
    SentimentDistribution,
    SentimentRecord,
    WordCount,
)
from .timeline import parse_timestamp

Trend = Literal["improving", "stable", "declining"]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class AggregatedSentiment:
    """Comment-weighted sentiment over every analysed post of a campaign."""

    distribution: SentimentDistribution
    dominant: str = "neutral"
    confidence: float = 0.0
    trend: Trend = "stable"
    total_comments: int = 0
    total_posts: int = 0
    processing_duration_seconds: float = 0.0
    earliest_started: str | None = None
    latest_completed: str | None = None

    @property
    def score(self) -> float:
        return sentiment_score(self.distribution)


@dataclass(frozen=True)
class EmojiAggregate:
    total_count: int = 0
    unique_count: int = 0
    top_emojis: tuple[tuple[str, int], ...] = ()
    sentiment_counts: Mapping[str, float] = field(default_factory=dict)
    sentiment_percentages: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class WordAggregate:
    most_common: tuple[WordCount, ...] = ()
    most_unique: tuple[WordCount, ...] = ()
    total_words: int = 0
    unique_count: int = 0


@dataclass(frozen=True)
class PostSentimentRow:
    post_id: str
    post_number: int
    total_comments: int
    positive_share: float
    risk_level: str
    flagged_count: int
    published_at: str | None
    dominant: str
    confidence: float


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _renormalize(weighted: Mapping[str, float]) -> SentimentDistribution:
    """Scale the weighted fractions to sum to 1. An all-zero input is neutral."""
    total = sum(weighted.values())
    if total <= 0:
        return SentimentDistribution(neutral=1.0)
    return SentimentDistribution(**{label: weighted[label] / total for label in SENTIMENT_LABELS})


def _dominant_label(dist: Mapping[str, float]) -> str:
    # The first label holding the maximum wins ties.
    best = SENTIMENT_LABELS[0]
    for label in SENTIMENT_LABELS[1:]:
        if dist[label] > dist[best]:
            best = label
    return best


def _time_key(value: str | None) -> tuple[bool, datetime]:
    parsed = parse_timestamp(value)
    return (parsed is not None, parsed or _EPOCH)


def classify_trend(records: Sequence[SentimentRecord], *, threshold: float = 0.05) -> Trend:
    """
    Compare the mean positive share of the earlier and later half of the posts.

    Records are ordered by analysis start time (creation time when absent);
    unparseable times sort first.
    """
    if len(records) < 2:
        return "stable"

    ordered = sorted(records, key=lambda r: _time_key(r.started_at or r.created_at))
    mid = len(ordered) // 2
    first, second = ordered[:mid], ordered[mid:]

    first_positive = sum(r.distribution.positive for r in first) / len(first)
    second_positive = sum(r.distribution.positive for r in second) / len(second)
    diff = second_positive - first_positive

    if diff > threshold:
        return "improving"
    if diff < -threshold:
        return "declining"
    return "stable"


def _earliest(values: Iterable[str | None]) -> str | None:
    parsed = [(parse_timestamp(v), v) for v in values if v]
    parsed = [(dt, v) for dt, v in parsed if dt is not None]
    return min(parsed, key=lambda x: x[0])[1] if parsed else None


def _latest(values: Iterable[str | None]) -> str | None:
    parsed = [(parse_timestamp(v), v) for v in values if v]
    parsed = [(dt, v) for dt, v in parsed if dt is not None]
    return max(parsed, key=lambda x: x[0])[1] if parsed else None


def aggregate_sentiment(
    records: Sequence[SentimentRecord],
    *,
    config: SentimentConfig | None = None,
    logger: EventLogger | None = None,
) -> AggregatedSentiment:
    """
    Combine per-post distributions using each post's comment count as its weight.

    Confidence is the unweighted mean over posts. With no comments at all the
    result is neutral.
    """
    cfg = config or SentimentConfig()

    total_comments = sum(r.comment_count for r in records)
    confidence = (
        sum(r.effective_confidence for r in records) / len(records) if records else 0.0
    )

    if total_comments <= 0:
        if logger is not None:
            logger.info("sentiment_empty", records=len(records))
        distribution = SentimentDistribution(neutral=1.0)
    else:
        weighted = {label: 0.0 for label in SENTIMENT_LABELS}
        for record in records:
            weight = record.comment_count / total_comments
            for label in SENTIMENT_LABELS:
                weighted[label] += record.distribution.get(label) * weight
        distribution = _renormalize(weighted)

    return AggregatedSentiment(
        distribution=distribution,
        dominant=_dominant_label(distribution.as_dict()),
        confidence=confidence,
        trend=classify_trend(records, threshold=cfg.trend_threshold) if total_comments > 0 else "stable",
        total_comments=total_comments,
        total_posts=len(records),
        processing_duration_seconds=sum(r.processing_duration_seconds for r in records),
        earliest_started=_earliest(r.started_at for r in records),
        latest_completed=_latest(r.completed_at for r in records),
    )


def sentiment_score(distribution: SentimentDistribution) -> float:
    """0-10 score: positive counts fully, neutral half, mixed 0.4, negative nothing."""
    score = distribution.positive * 10 + distribution.neutral * 5 + distribution.mixed * 4
    return _round_half_up(score * 10) / 10


def to_percentages(distribution: SentimentDistribution) -> dict[str, int]:
    return {label: _round_half_up(distribution.get(label) * 100) for label in SENTIMENT_LABELS}


def normalize_emoji_percentages(counts: Mapping[str, float]) -> dict[str, int]:
    """
    Integer percentages of the emoji sentiment counts that sum to exactly 100.

    The largest rounded bucket absorbs the rounding residual; on a tie the later
    bucket does. A zero total yields all zeros.
    """
    values = {key: max(0.0, float(counts.get(key, 0) or 0)) for key in EMOJI_SENTIMENT_KEYS}
    total = sum(values.values())
    if total <= 0:
        return {key: 0 for key in EMOJI_SENTIMENT_KEYS}

    rounded = {key: _round_half_up(values[key] / total * 100) for key in EMOJI_SENTIMENT_KEYS}
    diff = 100 - sum(rounded.values())
    if diff != 0:
        max_key = EMOJI_SENTIMENT_KEYS[0]
        for key in EMOJI_SENTIMENT_KEYS[1:]:
            if not rounded[max_key] > rounded[key]:
                max_key = key
        rounded[max_key] += diff
    return rounded


def aggregate_emoji(records: Iterable[SentimentRecord], *, top_limit: int = 30) -> EmojiAggregate:
    frequency: dict[str, int] = {}
    total = 0
    sentiment_counts = {key: 0.0 for key in EMOJI_SENTIMENT_KEYS}

    for record in records:
        summary = record.emoji
        if summary is None:
            continue
        for emoji, count in summary.frequency.items():
            frequency[emoji] = frequency.get(emoji, 0) + count
        total += summary.total_count
        for key in EMOJI_SENTIMENT_KEYS:
            sentiment_counts[key] += float(summary.sentiment_counts.get(key, 0.0))

    top = sorted(frequency.items(), key=lambda kv: kv[1], reverse=True)[:top_limit]
    return EmojiAggregate(
        total_count=total,
        unique_count=len(frequency),
        top_emojis=tuple(top),
        sentiment_counts=sentiment_counts,
        sentiment_percentages=normalize_emoji_percentages(sentiment_counts),
    )


def aggregate_words(records: Iterable[SentimentRecord], *, limit: int = 30) -> WordAggregate:
    """
    Merge per-post word lists. Common words sum their counts; a unique word only
    counts when nothing has claimed it yet.
    """
    counts: dict[str, int] = {}
    total_words = 0

    for record in records:
        for item in record.most_common_words:
            counts[item.word] = counts.get(item.word, 0) + item.count
            total_words += item.count
        for item in record.most_unique_words:
            if not counts.get(item.word):
                counts[item.word] = item.count

    ordered = [WordCount(word=w, count=c) for w, c in sorted(counts.items(), key=lambda kv: kv[1], reverse=True)]
    tail = ordered[-limit:] if len(ordered) > limit else ordered
    return WordAggregate(
        most_common=tuple(ordered[:limit]),
        most_unique=tuple(reversed(tail)),
        total_words=total_words,
        unique_count=len(counts),
    )


def aggregate_flagged(records: Iterable[SentimentRecord]) -> tuple[FlaggedMessage, ...]:
    out: list[FlaggedMessage] = []
    for record in records:
        out.extend(record.flagged_messages)
    return tuple(out)


def _normalize_category(name: str) -> str:
    return "".join(ch for ch in name.lower() if ch != "_" and not ch.isspace())


def aggregate_emotions(
    records: Iterable[SentimentRecord],
    *,
    limit: int = 8,
    category_threshold: float = 0.5,
) -> tuple[tuple[str, int], ...]:
    """
    Count emotions across positive and negative comments: each comment's dominant
    emotion (text before ':') plus every category scoring above the threshold.
    """
    counts: Counter[str] = Counter()
    for record in records:
        for message in (*record.positive_comments, *record.negative_comments):
            if message.dominant_emotion:
                emotion = message.dominant_emotion.split(":", 1)[0].strip().lower()
                counts[emotion] += 1
            for category, value in message.categories.items():
                if value > category_threshold:
                    counts[_normalize_category(category)] += 1

    return tuple(sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:limit])


def risk_level_counts(records: Iterable[SentimentRecord]) -> dict[str, int]:
    return dict(Counter(r.risk_level for r in records))


def post_sentiment_rows(records: Sequence[SentimentRecord]) -> list[PostSentimentRow]:
    return [
        PostSentimentRow(
            post_id=r.post_id,
            post_number=i,
            total_comments=r.comment_count,
            positive_share=r.distribution.positive,
            risk_level=r.risk_level,
            flagged_count=r.flagged_count,
            published_at=r.published_at or r.completed_at,
            dominant=r.dominant,
            confidence=r.confidence,
        )
        for i, r in enumerate(records, start=1)
    ]
