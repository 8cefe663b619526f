from __future__ import annotations

import io
import json
import unittest

from campaign_analytics.config_schema import AppConfig, EstimatesConfig
from campaign_analytics.event_log import EventLogger
from campaign_analytics.offline import OfflineSample
from campaign_analytics.report import build_campaign_report, report_to_dict


def _build(**kwargs: object):
    sample = OfflineSample()
    return build_campaign_report(
        sample.posts,
        sample.sentiment,
        influencers=sample.influencers,
        overrides=sample.overrides,
        campaign_id=sample.campaign_id,
        **kwargs,  # type: ignore[arg-type]
    )


class TestBuildCampaignReport(unittest.TestCase):
    def test_offline_sample_rollups(self) -> None:
        report = _build()
        c = report.campaign

        self.assertEqual(report.campaign_id, "offline-campaign")
        self.assertEqual(c.total_posts, 5)
        self.assertEqual(c.total_influencers, 3)
        self.assertEqual(c.total_views, 62600)
        # 15400 (max of two snapshots) + 52000 (YouTube subscribers) + 3400
        self.assertEqual(c.total_followers, 70800)
        self.assertEqual(c.total_spend, 930)
        self.assertAlmostEqual(c.cost_per_view, 930 / 62600)
        self.assertEqual(c.photo_post_count, 2)
        self.assertEqual(c.estimated_impressions, 100260)
        self.assertEqual(c.estimated_reach, 62600)

        by_handle = {r.handle: r for r in report.influencers}
        self.assertEqual(by_handle["mobility.lab"].subscriber_count, 52000)
        self.assertEqual(by_handle["stretchwithsam"].post_count, 2)
        self.assertEqual(report.influencers[0].handle, "mobility.lab")

    def test_offline_sample_timeline_and_sentiment(self) -> None:
        report = _build()

        self.assertEqual(len(report.timeline), 1)
        bucket = report.timeline[0]
        self.assertEqual(bucket.date, "2025-03-01")
        self.assertEqual(bucket.views, 60000)
        self.assertEqual(bucket.cumulative_views, 60000)

        self.assertEqual(report.sentiment.total_comments, 246)
        self.assertEqual(report.sentiment.trend, "improving")
        self.assertEqual(report.sentiment.dominant, "positive")
        self.assertEqual(report.emoji.total_count, 65)
        self.assertEqual(len(report.flagged_messages), 1)
        self.assertEqual(report.risk_counts, {"low": 1, "high": 1})
        self.assertEqual(
            [i.title for i in report.insights],
            ["Positive Trend Detected", "High Analysis Accuracy", "High Emoji Engagement", "Risk Alert"],
        )

    def test_override_is_applied(self) -> None:
        report = _build()
        post = {p.post_id: p for p in report.posts}["post-2"]
        self.assertTrue(post.override_applied)
        self.assertAlmostEqual(post.cost_per_engagement, 0.5)

    def test_config_changes_estimates(self) -> None:
        cfg = AppConfig(estimates=EstimatesConfig(photo_impression_follower_share=0.0))
        report = _build(config=cfg)
        self.assertEqual(report.campaign.estimated_impressions, 81380)

    def test_empty_input(self) -> None:
        report = build_campaign_report([], [])

        self.assertEqual(report.campaign.total_views, 0)
        self.assertEqual(report.campaign.average_engagement_rate, 0.0)
        self.assertEqual(report.influencers, ())
        self.assertEqual(report.timeline, ())
        self.assertEqual(report.sentiment.dominant, "neutral")
        self.assertEqual(report.insights, ())

    def test_out_of_range_publish_date_is_left_off_timeline(self) -> None:
        raw = [
            {
                "id": "1",
                "influencer_username": "a",
                "plays_count": 10,
                "post_created_at": "0001-01-01T00:00:00+05:00",
            }
        ]
        sentiment = [
            {
                "content_post_id": "1",
                "statistics": {"total_comments": 3},
                "timestamps": {"started_at": "0001-01-01T00:00:00+05:00"},
            }
        ]

        report = build_campaign_report(raw, sentiment)

        self.assertEqual(report.campaign.total_posts, 1)
        self.assertEqual(report.timeline, ())
        self.assertIsNone(report.sentiment.earliest_started)

    def test_logs_lifecycle_events(self) -> None:
        stream = io.StringIO()
        with EventLogger(stream=stream) as log:
            _build(logger=log)

        events = [json.loads(line) for line in stream.getvalue().splitlines()]
        names = [e["event"] for e in events]
        self.assertEqual(names[0], "report_started")
        self.assertEqual(names[-1], "report_completed")
        self.assertIn("subscriber_count_applied", names)
        self.assertIn("timeline_post_excluded", names)
        self.assertTrue(all(e.get("campaign_id") == "offline-campaign" for e in events))

    def test_report_to_dict_is_json_serializable(self) -> None:
        payload = report_to_dict(_build())

        text = json.dumps(payload, ensure_ascii=False, sort_keys=True)
        data = json.loads(text)
        self.assertEqual(data["campaign"]["total_posts"], 5)
        self.assertEqual(data["emoji"]["top_emojis"][0].keys(), {"emoji", "count"})
        self.assertEqual(data["emotions"][0]["emotion"], "joy")
        self.assertEqual(data["timeline"][0]["posts"][0]["post_id"], "post-1")
        self.assertEqual(len(data["config_sha256"]), 64)


if __name__ == "__main__":
    unittest.main()
