from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    auto_match_threshold: float = Field(0.6, alias="MATCHING_AUTO_THRESHOLD")
    explore_threshold: float = Field(0.3, alias="MATCHING_EXPLORE_THRESHOLD")
    default_limit: int = Field(10, alias="MATCHING_DEFAULT_LIMIT")
    auto_match_limit: int = Field(5, alias="MATCHING_AUTO_LIMIT")
    candidate_pool_size: int = Field(50, alias="MATCHING_CANDIDATE_POOL")
    recent_posts_limit: int = Field(5, alias="MATCHING_RECENT_POSTS")
    max_distance_km: float = Field(50.0, alias="MATCHING_MAX_DISTANCE_KM")
    active_within_days: int = Field(7, alias="MATCHING_ACTIVE_WITHIN_DAYS")
    candidate_timeout: float = Field(5.0, alias="MATCHING_CANDIDATE_TIMEOUT")
    pool_timeout: float = Field(10.0, alias="MATCHING_POOL_TIMEOUT")
    max_concurrency: int = Field(10, alias="MATCHING_MAX_CONCURRENCY")
    rules_version: str = Field("v1", alias="MATCHING_RULES_VERSION")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"
        populate_by_name = True


settings = Settings()
