from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

from .providers import as_mapping, coerce_id, coerce_number, coerce_text

SentimentLabel = Literal["positive", "neutral", "negative", "mixed"]

SENTIMENT_LABELS: tuple[SentimentLabel, ...] = ("positive", "neutral", "negative", "mixed")
EMOJI_SENTIMENT_KEYS: tuple[str, ...] = ("positive", "neutral", "negative", "none")


@dataclass(frozen=True)
class SentimentDistribution:
    positive: float = 0.0
    neutral: float = 0.0
    negative: float = 0.0
    mixed: float = 0.0

    def get(self, label: str) -> float:
        return float(getattr(self, label))

    def as_dict(self) -> dict[str, float]:
        return {label: self.get(label) for label in SENTIMENT_LABELS}

    def total(self) -> float:
        return self.positive + self.neutral + self.negative + self.mixed


@dataclass(frozen=True)
class FlaggedMessage:
    original_text: str = ""
    flag_reasons: tuple[str, ...] = ()
    severity: str = "none"
    risk_level: str = "none"


@dataclass(frozen=True)
class WordCount:
    word: str
    count: int


@dataclass(frozen=True)
class CommentMessage:
    original_text: str = ""
    sentiment_label: str = ""
    confidence: float = 0.0
    dominant_emotion: str = ""
    intensity: float = 0.0
    categories: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class EmojiSummary:
    frequency: Mapping[str, int] = field(default_factory=dict)
    total_count: int = 0
    sentiment_counts: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class SentimentRecord:
    """
    One post's sentiment analysis. `comment_count` is its aggregation weight.

    `analysis_confidence` is the comment-level mean from the analysis block and
    takes precedence over the post-level `confidence` when averaging.
    """

    post_id: str
    distribution: SentimentDistribution
    dominant: str = "neutral"
    confidence: float = 0.0
    comment_count: int = 0
    analysis_confidence: float | None = None
    risk_level: str = "none"
    flagged_count: int = 0
    flagged_messages: tuple[FlaggedMessage, ...] = ()
    positive_comments: tuple[CommentMessage, ...] = ()
    negative_comments: tuple[CommentMessage, ...] = ()
    emoji: EmojiSummary | None = None
    most_common_words: tuple[WordCount, ...] = ()
    most_unique_words: tuple[WordCount, ...] = ()
    processing_duration_seconds: float = 0.0
    started_at: str | None = None
    completed_at: str | None = None
    created_at: str | None = None
    published_at: str | None = None

    @property
    def effective_confidence(self) -> float:
        if self.analysis_confidence:
            return self.analysis_confidence
        return self.confidence


def _number(value: Any) -> float:
    num = coerce_number(value)
    return num if num is not None and num > 0 else 0.0


def _int(value: Any) -> int:
    return int(math.floor(_number(value) + 0.5))


def _label(value: Any, default: str) -> str:
    text = coerce_text(value)
    return text.lower() if text else default


def _distribution(value: Any) -> SentimentDistribution:
    data = as_mapping(value)
    return SentimentDistribution(**{label: _number(data.get(label)) for label in SENTIMENT_LABELS})


def _flagged(value: Any) -> FlaggedMessage:
    data = as_mapping(value)
    reasons = data.get("flag_reasons")
    return FlaggedMessage(
        original_text=coerce_text(data.get("original_text")) or "",
        flag_reasons=tuple(r for r in (coerce_text(x) for x in reasons) if r)
        if isinstance(reasons, list)
        else (),
        severity=_label(data.get("severity"), "none"),
        risk_level=_label(data.get("risk_level"), "none"),
    )


def _comment(value: Any) -> CommentMessage:
    data = as_mapping(value)
    categories: dict[str, float] = {}
    for name, score in as_mapping(data.get("categories")).items():
        num = coerce_number(score)
        if isinstance(name, str) and num is not None:
            categories[name] = num
    return CommentMessage(
        original_text=coerce_text(data.get("original_text")) or "",
        sentiment_label=_label(data.get("sentiment_label"), ""),
        confidence=_number(data.get("confidence")),
        dominant_emotion=coerce_text(data.get("dominant_emotion")) or "",
        intensity=_number(data.get("intensity")),
        categories=categories,
    )


def _words(value: Any) -> tuple[WordCount, ...]:
    if not isinstance(value, list):
        return ()
    out: list[WordCount] = []
    for item in value:
        data = as_mapping(item)
        word = coerce_text(data.get("word"))
        if word:
            out.append(WordCount(word=word, count=_int(data.get("count"))))
    return tuple(out)


def _emoji(value: Any) -> EmojiSummary | None:
    if not isinstance(value, Mapping):
        return None
    frequency: dict[str, int] = {}
    for emoji, count in as_mapping(value.get("frequency")).items():
        if isinstance(emoji, str) and emoji:
            frequency[emoji] = _int(count)
    dist = as_mapping(as_mapping(value.get("emoji_sentiment")).get("sentiment_distribution"))
    return EmojiSummary(
        frequency=frequency,
        total_count=_int(value.get("total_count")),
        sentiment_counts={key: _number(dist.get(key)) for key in EMOJI_SENTIMENT_KEYS},
    )


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def sentiment_record_from_api_item(item: Mapping[str, Any] | Any) -> SentimentRecord:
    """
    Parse one per-post item of the sentiment analytics response.

    Missing blocks (notably `analysis`) fall back to empty defaults; this never raises.
    """
    data = as_mapping(item)
    sentiment = as_mapping(data.get("sentiment"))
    statistics = as_mapping(data.get("statistics"))
    timestamps = as_mapping(data.get("timestamps"))
    platform_info = as_mapping(data.get("platform_info"))
    analysis = as_mapping(data.get("analysis"))
    common_words = as_mapping(analysis.get("common_words"))

    comment_count = statistics.get("total_comments")
    if comment_count is None:
        comment_count = analysis.get("comments_count")

    analysis_confidence = coerce_number(analysis.get("avg_confidence"))

    return SentimentRecord(
        post_id=coerce_id(data.get("content_post_id")) or coerce_id(data.get("id")) or "",
        distribution=_distribution(sentiment.get("distribution")),
        dominant=_label(sentiment.get("dominant"), "neutral"),
        confidence=_number(sentiment.get("confidence")),
        comment_count=_int(comment_count),
        analysis_confidence=analysis_confidence if analysis_confidence and analysis_confidence > 0 else None,
        risk_level=_label(analysis.get("risk_level"), "none"),
        flagged_count=_int(analysis.get("flagged_count")),
        flagged_messages=tuple(_flagged(m) for m in _list(analysis.get("flagged_messages"))),
        positive_comments=tuple(_comment(m) for m in _list(analysis.get("positive_comments"))),
        negative_comments=tuple(_comment(m) for m in _list(analysis.get("negative_comments"))),
        emoji=_emoji(analysis.get("emoji_summary")),
        most_common_words=_words(common_words.get("most_common")),
        most_unique_words=_words(common_words.get("most_unique")),
        processing_duration_seconds=_number(statistics.get("processing_duration_seconds")),
        started_at=coerce_text(timestamps.get("started_at")),
        completed_at=coerce_text(timestamps.get("completed_at")),
        created_at=coerce_text(timestamps.get("created_at")),
        published_at=coerce_text(platform_info.get("published_at")),
    )
