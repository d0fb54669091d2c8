"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings loaded from environment variables (prefix RODADA_)."""

    # ═══════════════════════════════════════════════════════════════
    # Confidence policy (CV% → confidence percent + tier)
    # ═══════════════════════════════════════════════════════════════
    CV_CAP: float = 120.0          # CV at which confidence reaches 0%
    CV_GREEN_MAX: float = 35.0     # cv <= 35 → green
    CV_YELLOW_MAX: float = 60.0    # cv <= 60 → yellow, above → red
    CV_EPS: float = 1e-6           # |mean| below this counts as zero
    CV_SATURATION: float = 999.0   # "infinite dispersion" sentinel, must exceed CV_CAP

    # Weighting
    DELTA_EPS: float = 1e-6        # w = 1 / (delta + eps) for the round overview

    # Recent matches (league archive)
    RECENT_MATCHES_LIMIT: int = 10

    # Panel export: field = {prefix}_{stat_key}_{mean|std|cv_pct|n}
    PANEL_BASELINE_PREFIX: str = "baseline"
    PANEL_SIMILAR_PREFIX: str = "similar"

    # Optional fixture view cache
    FIXTURE_CACHE_TTL_SECONDS: float = 300.0

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "RODADA_"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
