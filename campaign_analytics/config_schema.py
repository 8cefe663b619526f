from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

PositiveInt = Annotated[int, Field(ge=1)]
NonNegativeInt = Annotated[int, Field(ge=0)]
NonNegativeFloat = Annotated[float, Field(ge=0.0)]
Fraction = Annotated[float, Field(ge=0.0, le=1.0)]


class EstimatesConfig(BaseModel):
    """Heuristic constants behind the impression, reach and click estimates."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    video_impression_multiplier: NonNegativeFloat = 1.3
    photo_impression_follower_share: Fraction = 0.4
    reach_multiplier: Fraction = 0.65
    reach_floor_impression_share: Fraction = 0.5
    click_through_rate: Fraction = 0.03


class SentimentConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    trend_threshold: Fraction = 0.05
    word_list_limit: PositiveInt = 30
    top_emoji_limit: PositiveInt = 30
    top_emotion_limit: PositiveInt = 8
    emotion_category_threshold: Fraction = 0.5


class InsightsConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_insights: NonNegativeInt = 4
    high_confidence_threshold: Fraction = 0.9
    emoji_count_threshold: NonNegativeInt = 50
    positive_percent_threshold: Annotated[int, Field(ge=0, le=100)] = 70


class NormalizerConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    default_placeholder: str = "/dummy-image.jpg"

    @field_validator("default_placeholder")
    @classmethod
    def _placeholder_must_be_non_empty(cls, v: str) -> str:
        value = (v or "").strip()
        if not value:
            raise ValueError("must be a non-empty path or URL")
        return value


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    estimates: EstimatesConfig = Field(default_factory=EstimatesConfig)
    sentiment: SentimentConfig = Field(default_factory=SentimentConfig)
    insights: InsightsConfig = Field(default_factory=InsightsConfig)
    normalizer: NormalizerConfig = Field(default_factory=NormalizerConfig)

    @model_validator(mode="after")
    def _reach_floor_below_multiplier(self) -> "AppConfig":
        est = self.estimates
        if est.reach_floor_impression_share > est.reach_multiplier:
            raise ValueError(
                "estimates.reach_floor_impression_share must be <= estimates.reach_multiplier"
            )
        return self
