from __future__ import annotations

import unittest

from campaign_analytics.sentiment_schema import SentimentDistribution, sentiment_record_from_api_item

_ITEM = {
    "content_post_id": "cp-1",
    "sentiment": {
        "dominant": "Positive",
        "confidence": 0.81,
        "distribution": {"positive": 0.6, "neutral": 0.25, "negative": 0.1, "mixed": 0.05},
    },
    "statistics": {"total_comments": 42, "processing_duration_seconds": 3.5},
    "timestamps": {
        "started_at": "2025-03-01T10:00:00Z",
        "completed_at": "2025-03-01T10:00:04Z",
        "created_at": "2025-03-01T09:59:00Z",
    },
    "platform_info": {"published_at": "2025-02-28T18:00:00Z"},
    "analysis": {
        "avg_confidence": 0.92,
        "risk_level": "HIGH",
        "flagged_count": 1,
        "flagged_messages": [
            {"original_text": "scam", "flag_reasons": ["fraud", None], "severity": "high", "risk_level": "high"}
        ],
        "positive_comments": [
            {"original_text": "great", "dominant_emotion": "joy: high", "categories": {"praise": 0.8, "x": "bad"}}
        ],
        "emoji_summary": {
            "frequency": {"🔥": 4},
            "total_count": 4,
            "emoji_sentiment": {"sentiment_distribution": {"positive": 3, "none": 1}},
        },
        "common_words": {
            "most_common": [{"word": "great", "count": 3}, {"count": 2}],
            "most_unique": [{"word": "wow", "count": 1}],
        },
    },
}


class TestSentimentRecordFromApiItem(unittest.TestCase):
    def test_parses_full_item(self) -> None:
        r = sentiment_record_from_api_item(_ITEM)

        self.assertEqual(r.post_id, "cp-1")
        self.assertEqual(r.distribution, SentimentDistribution(0.6, 0.25, 0.1, 0.05))
        self.assertEqual(r.dominant, "positive")
        self.assertEqual(r.comment_count, 42)
        self.assertAlmostEqual(r.effective_confidence, 0.92)
        self.assertEqual(r.risk_level, "high")
        self.assertEqual(r.flagged_messages[0].flag_reasons, ("fraud",))
        self.assertEqual(r.positive_comments[0].categories, {"praise": 0.8})
        self.assertIsNotNone(r.emoji)
        assert r.emoji is not None
        self.assertEqual(r.emoji.total_count, 4)
        self.assertEqual(r.emoji.sentiment_counts["positive"], 3)
        self.assertEqual(r.emoji.sentiment_counts["negative"], 0)
        self.assertEqual([w.word for w in r.most_common_words], ["great"])
        self.assertEqual(r.started_at, "2025-03-01T10:00:00Z")
        self.assertEqual(r.published_at, "2025-02-28T18:00:00Z")
        self.assertAlmostEqual(r.processing_duration_seconds, 3.5)

    def test_missing_analysis_block(self) -> None:
        item = {k: v for k, v in _ITEM.items() if k != "analysis"}
        r = sentiment_record_from_api_item(item)

        self.assertEqual(r.risk_level, "none")
        self.assertIsNone(r.emoji)
        self.assertEqual(r.flagged_messages, ())
        self.assertAlmostEqual(r.effective_confidence, 0.81)

    def test_comment_count_falls_back_to_analysis(self) -> None:
        r = sentiment_record_from_api_item({"analysis": {"comments_count": 9}})
        self.assertEqual(r.comment_count, 9)

    def test_garbage_input_yields_defaults(self) -> None:
        for item in (None, [], "x", {"sentiment": "bad", "statistics": {"total_comments": -3}}):
            r = sentiment_record_from_api_item(item)
            self.assertEqual(r.post_id, "")
            self.assertEqual(r.comment_count, 0)
            self.assertEqual(r.distribution, SentimentDistribution())
            self.assertEqual(r.dominant, "neutral")


if __name__ == "__main__":
    unittest.main()
