from __future__ import annotations

import io
import json
import unittest
from typing import Any

from campaign_analytics.event_log import EventLogger
from campaign_analytics.sentiment import (
    aggregate_emoji,
    aggregate_emotions,
    aggregate_flagged,
    aggregate_sentiment,
    aggregate_words,
    classify_trend,
    normalize_emoji_percentages,
    post_sentiment_rows,
    risk_level_counts,
    sentiment_score,
)
from campaign_analytics.sentiment_schema import (
    CommentMessage,
    EmojiSummary,
    FlaggedMessage,
    SentimentDistribution,
    SentimentRecord,
    WordCount,
)


def _record(post_id: str = "p", *, comments: int = 10, positive: float = 0.0, **kwargs: Any) -> SentimentRecord:
    dist = kwargs.pop("distribution", None) or SentimentDistribution(positive=positive, neutral=1.0 - positive)
    return SentimentRecord(post_id=post_id, distribution=dist, comment_count=comments, **kwargs)


class TestAggregateSentiment(unittest.TestCase):
    def test_comment_weighted_distribution(self) -> None:
        records = [
            _record("a", comments=100, positive=0.6),
            _record("b", comments=300, positive=0.2),
        ]

        agg = aggregate_sentiment(records)

        self.assertAlmostEqual(agg.distribution.positive, 0.3)
        self.assertAlmostEqual(agg.distribution.neutral, 0.7)
        self.assertEqual(agg.dominant, "neutral")
        self.assertEqual(agg.total_comments, 400)
        self.assertEqual(agg.total_posts, 2)

    def test_fractions_sum_to_one(self) -> None:
        cases = [
            [_record(distribution=SentimentDistribution(0.31, 0.33, 0.33, 0.0))],
            [_record(distribution=SentimentDistribution(0.1, 0.1, 0.1, 0.1), comments=7)],
            [
                _record("a", distribution=SentimentDistribution(0.333, 0.333, 0.333, 0.0), comments=3),
                _record("b", distribution=SentimentDistribution(0.7, 0.1, 0.1, 0.1), comments=11),
                _record("c", distribution=SentimentDistribution(0.0, 0.0, 0.5, 0.5), comments=0),
            ],
            [_record(comments=0)],
            [_record(distribution=SentimentDistribution(), comments=5)],
            [],
        ]
        for records in cases:
            dist = aggregate_sentiment(records).distribution
            self.assertAlmostEqual(dist.total(), 1.0, delta=1e-9)

    def test_zero_comments_is_neutral(self) -> None:
        stream = io.StringIO()
        with EventLogger(stream=stream) as log:
            agg = aggregate_sentiment([_record(comments=0, positive=0.9, confidence=0.8)], logger=log)

        self.assertEqual(agg.distribution, SentimentDistribution(neutral=1.0))
        self.assertEqual(agg.dominant, "neutral")
        self.assertEqual(agg.trend, "stable")
        self.assertAlmostEqual(agg.confidence, 0.8)
        self.assertEqual(json.loads(stream.getvalue())["event"], "sentiment_empty")

    def test_dominant_tie_prefers_first_label(self) -> None:
        agg = aggregate_sentiment([_record(distribution=SentimentDistribution(0.4, 0.2, 0.4, 0.0))])
        self.assertEqual(agg.dominant, "positive")

    def test_confidence_is_unweighted_mean(self) -> None:
        records = [
            _record("a", comments=1000, confidence=0.5, analysis_confidence=0.9),
            _record("b", comments=1, confidence=0.7),
        ]
        self.assertAlmostEqual(aggregate_sentiment(records).confidence, 0.8)

    def test_statistics_and_time_range(self) -> None:
        records = [
            _record("a", processing_duration_seconds=1.5, started_at="2025-03-02T00:00:00Z",
                    completed_at="2025-03-02T00:01:00Z"),
            _record("b", processing_duration_seconds=2.0, started_at="2025-03-01T00:00:00Z",
                    completed_at="2025-03-05T00:00:00Z"),
            _record("c", started_at="garbage"),
        ]
        agg = aggregate_sentiment(records)
        self.assertAlmostEqual(agg.processing_duration_seconds, 3.5)
        self.assertEqual(agg.earliest_started, "2025-03-01T00:00:00Z")
        self.assertEqual(agg.latest_completed, "2025-03-05T00:00:00Z")

    def test_out_of_range_timestamps_do_not_raise(self) -> None:
        records = [
            _record("a", positive=0.2, started_at="0001-01-01T00:00:00+05:00",
                    completed_at="9999-12-31T23:59:59-05:00"),
            _record("b", positive=0.6, started_at="2025-03-01T00:00:00Z",
                    completed_at="2025-03-01T00:05:00Z"),
        ]
        agg = aggregate_sentiment(records)
        self.assertEqual(agg.total_comments, 20)
        self.assertEqual(agg.trend, "improving")
        self.assertEqual(agg.earliest_started, "2025-03-01T00:00:00Z")
        self.assertEqual(agg.latest_completed, "2025-03-01T00:05:00Z")


class TestTrend(unittest.TestCase):
    def _records(self, positives: list[float]) -> list[SentimentRecord]:
        return [
            _record(f"p{i}", positive=p, started_at=f"2025-03-0{i + 1}T00:00:00Z")
            for i, p in enumerate(positives)
        ]

    def test_improving_declining_stable(self) -> None:
        self.assertEqual(classify_trend(self._records([0.3, 0.3, 0.5, 0.5])), "improving")
        self.assertEqual(classify_trend(self._records([0.5, 0.5, 0.3, 0.3])), "declining")
        self.assertEqual(classify_trend(self._records([0.4, 0.4, 0.4, 0.4])), "stable")

    def test_orders_by_start_time(self) -> None:
        records = list(reversed(self._records([0.3, 0.3, 0.5, 0.5])))
        self.assertEqual(classify_trend(records), "improving")

    def test_small_difference_is_stable(self) -> None:
        self.assertEqual(classify_trend(self._records([0.40, 0.44])), "stable")

    def test_fewer_than_two_records(self) -> None:
        self.assertEqual(classify_trend([]), "stable")
        self.assertEqual(classify_trend(self._records([0.9])), "stable")

    def test_odd_count_puts_extra_record_in_second_half(self) -> None:
        # first half: [0.2], second half: [0.2, 0.5]
        self.assertEqual(classify_trend(self._records([0.2, 0.2, 0.5])), "improving")


class TestEmoji(unittest.TestCase):
    def test_percentages_sum_to_100(self) -> None:
        cases = [
            {"positive": 1, "neutral": 1, "negative": 1, "none": 0},
            {"positive": 2, "neutral": 1, "negative": 0, "none": 0},
            {"positive": 1, "neutral": 1, "negative": 1, "none": 1},
            {"positive": 7, "neutral": 2, "negative": 1, "none": 0},
            {"positive": 1, "neutral": 1, "negative": 1, "none": 3},
            {"positive": 0.5, "neutral": 0, "negative": 0, "none": 0},
            {"positive": 13, "neutral": 17, "negative": 19, "none": 23},
        ]
        for counts in cases:
            self.assertEqual(sum(normalize_emoji_percentages(counts).values()), 100, msg=str(counts))

    def test_residual_goes_to_last_largest_bucket(self) -> None:
        self.assertEqual(
            normalize_emoji_percentages({"positive": 1, "neutral": 1, "negative": 1, "none": 0}),
            {"positive": 33, "neutral": 33, "negative": 34, "none": 0},
        )

    def test_zero_total(self) -> None:
        self.assertEqual(
            normalize_emoji_percentages({}),
            {"positive": 0, "neutral": 0, "negative": 0, "none": 0},
        )

    def test_aggregate_emoji(self) -> None:
        records = [
            _record("a", emoji=EmojiSummary(frequency={"🔥": 3, "❤️": 1}, total_count=4,
                                            sentiment_counts={"positive": 3, "neutral": 1})),
            _record("b", emoji=EmojiSummary(frequency={"❤️": 5}, total_count=5,
                                            sentiment_counts={"positive": 1, "negative": 1})),
            _record("c"),
        ]

        agg = aggregate_emoji(records, top_limit=1)

        self.assertEqual(agg.total_count, 9)
        self.assertEqual(agg.unique_count, 2)
        self.assertEqual(agg.top_emojis, (("❤️", 6),))
        self.assertEqual(agg.sentiment_counts["positive"], 4)
        self.assertEqual(sum(agg.sentiment_percentages.values()), 100)


class TestWordsFlagsEmotions(unittest.TestCase):
    def test_aggregate_words(self) -> None:
        records = [
            _record(
                "a",
                most_common_words=(WordCount("a", 5), WordCount("b", 2)),
                most_unique_words=(WordCount("z", 1),),
            ),
            _record(
                "b",
                most_common_words=(WordCount("a", 3), WordCount("c", 4)),
                most_unique_words=(WordCount("b", 9), WordCount("y", 2)),
            ),
        ]

        agg = aggregate_words(records)

        self.assertEqual([(w.word, w.count) for w in agg.most_common],
                         [("a", 8), ("c", 4), ("b", 2), ("y", 2), ("z", 1)])
        self.assertEqual([w.word for w in agg.most_unique], ["z", "y", "b", "c", "a"])
        self.assertEqual(agg.total_words, 14)
        self.assertEqual(agg.unique_count, 5)

        limited = aggregate_words(records, limit=2)
        self.assertEqual([w.word for w in limited.most_common], ["a", "c"])
        self.assertEqual([w.word for w in limited.most_unique], ["z", "y"])

    def test_flagged_messages_concatenate(self) -> None:
        msg = FlaggedMessage(original_text="spam", risk_level="high")
        records = [_record("a", flagged_messages=(msg,)), _record("b", flagged_messages=(msg, msg))]
        self.assertEqual(len(aggregate_flagged(records)), 3)

    def test_aggregate_emotions(self) -> None:
        records = [
            _record(
                "a",
                positive_comments=(
                    CommentMessage(dominant_emotion="Joy: strong", categories={"Gratitude_Level": 0.7}),
                    CommentMessage(dominant_emotion="joy", categories={"praise": 0.5}),
                ),
                negative_comments=(CommentMessage(dominant_emotion="Anger"),),
            )
        ]
        self.assertEqual(
            aggregate_emotions(records),
            (("joy", 2), ("gratitudelevel", 1), ("anger", 1)),
        )
        self.assertEqual(aggregate_emotions(records, limit=1), (("joy", 2),))

    def test_risk_counts_and_rows(self) -> None:
        records = [
            _record("a", risk_level="high", flagged_count=2, completed_at="2025-01-01T00:00:00Z"),
            _record("b", risk_level="low", published_at="2024-12-31T00:00:00Z"),
            _record("c", risk_level="high"),
        ]
        self.assertEqual(risk_level_counts(records), {"high": 2, "low": 1})

        rows = post_sentiment_rows(records)
        self.assertEqual([r.post_number for r in rows], [1, 2, 3])
        self.assertEqual(rows[0].published_at, "2025-01-01T00:00:00Z")
        self.assertEqual(rows[1].published_at, "2024-12-31T00:00:00Z")
        self.assertEqual(rows[0].flagged_count, 2)


class TestScore(unittest.TestCase):
    def test_sentiment_score(self) -> None:
        self.assertEqual(sentiment_score(SentimentDistribution(0.5, 0.3, 0.1, 0.1)), 6.9)
        self.assertEqual(sentiment_score(SentimentDistribution(positive=1.0)), 10.0)
        self.assertEqual(sentiment_score(SentimentDistribution(negative=1.0)), 0.0)


if __name__ == "__main__":
    unittest.main()
