from __future__ import annotations

from .campaign import CampaignRollup, aggregate_campaign
from .config import config_sha256, load_config
from .config_schema import AppConfig
from .errors import ConfigError, InputError, ReportError
from .influencers import InfluencerRollup, SubscriberDirectory, aggregate_influencers
from .insights import Insight, generate_insights
from .normalize import normalize_post, normalize_posts
from .post import NormalizedPostMetrics, PreservedOverride
from .report import CampaignReport, build_campaign_report, report_to_dict
from .sentiment import AggregatedSentiment, aggregate_sentiment
from .sentiment_schema import SentimentRecord, sentiment_record_from_api_item
from .timeline import DateBucket, bucket_by_date

__all__ = [
    "AggregatedSentiment",
    "AppConfig",
    "CampaignReport",
    "CampaignRollup",
    "ConfigError",
    "DateBucket",
    "InfluencerRollup",
    "InputError",
    "Insight",
    "NormalizedPostMetrics",
    "PreservedOverride",
    "ReportError",
    "SentimentRecord",
    "SubscriberDirectory",
    "aggregate_campaign",
    "aggregate_influencers",
    "aggregate_sentiment",
    "bucket_by_date",
    "build_campaign_report",
    "config_sha256",
    "generate_insights",
    "load_config",
    "normalize_post",
    "normalize_posts",
    "report_to_dict",
    "sentiment_record_from_api_item",
]
