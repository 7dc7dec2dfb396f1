import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    enhance_confidence_threshold: float = Field(0.6, alias="RECIPE_ENHANCE_THRESHOLD")
    aggressive_max_items: int = Field(20, alias="RECIPE_AGGRESSIVE_MAX_ITEMS")
    aggressive_min_hits: int = Field(3, alias="RECIPE_AGGRESSIVE_MIN_HITS")
    json_ld_max_depth: int = Field(8, alias="RECIPE_JSON_LD_MAX_DEPTH")
    harness_log_level: str = Field("INFO", alias="RECIPE_HARNESS_LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    try:
        settings = Settings()
    except PermissionError:
        logger.warning("Unable to read .env; continuing with environment variables only")
        settings = Settings(_env_file=None)
    return settings
