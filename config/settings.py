"""
Configuration settings for the Culinary Job Scout pipeline.
Loads values from .env file and provides typed access.
"""

import os
from dataclasses import dataclass, field
from typing import Optional
from dotenv import load_dotenv

# Determine project root
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
config_dir = os.path.join(project_root, "config")
env_path = os.path.join(project_root, ".env")
load_dotenv(env_path)


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    # Provider API keys
    search_api_key: str = field(
        default_factory=lambda: os.getenv("SEARCH_API_KEY", "")
    )
    theirstack_api_key: str = field(
        default_factory=lambda: os.getenv("THEIRSTACK_API_KEY", "")
    )
    rapidapi_key: str = field(
        default_factory=lambda: os.getenv("RAPIDAPI_KEY", "")
    )

    # HTTP Configuration
    request_timeout: int = field(
        default_factory=lambda: int(os.getenv("REQUEST_TIMEOUT", "30"))
    )
    max_retries: int = field(
        default_factory=lambda: int(os.getenv("MAX_RETRIES", "3"))
    )

    # Search Configuration
    max_pages_per_query: int = field(
        default_factory=lambda: int(os.getenv("MAX_PAGES_PER_QUERY", "5"))
    )
    page_delay_seconds: float = field(
        default_factory=lambda: float(os.getenv("PAGE_DELAY_SECONDS", "1.0"))
    )

    # Enrichment Configuration
    enrichment_delay_seconds: float = field(
        default_factory=lambda: float(os.getenv("ENRICHMENT_DELAY_SECONDS", "1.0"))
    )
    enrichment_timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv("ENRICHMENT_TIMEOUT_SECONDS", "15"))
    )

    # Storage
    db_path: str = field(
        default_factory=lambda: os.getenv(
            "DB_PATH", os.path.join(project_root, "data", "culinary_jobs.db")
        )
    )
    jobs_table: str = field(
        default_factory=lambda: os.getenv("JOBS_TABLE", "culinary_jobs")
    )

    # Paths
    output_dir: str = field(
        default_factory=lambda: os.getenv("OUTPUT_DIR", "output")
    )
    search_plan_path: str = field(
        default_factory=lambda: os.getenv(
            "SEARCH_PLAN_PATH", os.path.join(config_dir, "search_plan.yaml")
        )
    )
    exclusion_rules_path: str = field(
        default_factory=lambda: os.getenv(
            "EXCLUSION_RULES_PATH", os.path.join(config_dir, "exclusion_rules.yaml")
        )
    )

    # Matching (unset: use match_policy from exclusion_rules.yaml)
    boundary_max_length: Optional[int] = field(
        default_factory=lambda: int(os.getenv("BOUNDARY_MAX_LENGTH")) if os.getenv("BOUNDARY_MAX_LENGTH") else None
    )
    min_salary: Optional[float] = field(
        default_factory=lambda: float(os.getenv("MIN_SALARY")) if os.getenv("MIN_SALARY") else None
    )
    rules_ttl_seconds: float = field(
        default_factory=lambda: float(os.getenv("RULES_TTL_SECONDS", "3600"))
    )

    # Feature Flags
    skip_enrichment: bool = field(
        default_factory=lambda: os.getenv("SKIP_ENRICHMENT", "false").lower() == "true"
    )


# Singleton instance
settings = Settings()
