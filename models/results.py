"""
Result models passed between the pipeline and its collaborators.
"""

from typing import Any, Optional
from pydantic import BaseModel, Field

from models.job import CanonicalJob, ExclusionReason


class ClassificationResult(BaseModel):
    """Outcome of a keep/drop decision."""

    excluded: bool = False
    reason: ExclusionReason = ExclusionReason.NONE
    matched_term: Optional[str] = None


KEEP = ClassificationResult()


class SearchPage(BaseModel):
    """One page of raw records returned by a provider search."""

    records: list[dict[str, Any]] = Field(default_factory=list)
    next_cursor: Optional[str] = None


class UpsertResult(BaseModel):
    """What the store did with one job."""

    id: int
    was_new: bool


class PipelineCounters(BaseModel):
    """Per-run counters, reported even when some jobs failed."""

    total_fetched: int = 0
    excluded_by_company: int = 0
    excluded_by_fast_food: int = 0
    excluded_by_restaurant_chain: int = 0
    excluded_by_hourly: int = 0
    excluded_by_salary_shaped_name: int = 0
    excluded_by_domain: int = 0
    excluded_by_title: int = 0
    excluded_by_salary: int = 0
    excluded_missing_identity: int = 0
    duplicates_within_batch: int = 0
    duplicates_against_store: int = 0
    enrichment_attempted: int = 0
    enriched: int = 0
    emitted: int = 0
    errored: int = 0

    def summary(self) -> str:
        excluded = (
            self.excluded_by_company
            + self.excluded_by_fast_food
            + self.excluded_by_restaurant_chain
            + self.excluded_by_hourly
            + self.excluded_by_salary_shaped_name
            + self.excluded_by_domain
            + self.excluded_by_title
            + self.excluded_by_salary
            + self.excluded_missing_identity
        )
        lines = [
            f"{'=' * 50}",
            f"  PIPELINE SUMMARY",
            f"{'=' * 50}",
            f"  Fetched:              {self.total_fetched}",
            f"  Excluded:             {excluded}",
            f"    - company list:     {self.excluded_by_company}",
            f"    - fast food:        {self.excluded_by_fast_food}",
            f"    - restaurant chain: {self.excluded_by_restaurant_chain}",
            f"    - hourly:           {self.excluded_by_hourly}",
            f"    - salary name:      {self.excluded_by_salary_shaped_name}",
            f"    - job board domain: {self.excluded_by_domain}",
            f"    - title:            {self.excluded_by_title}",
            f"    - below min salary: {self.excluded_by_salary}",
            f"    - missing identity: {self.excluded_missing_identity}",
            f"  Duplicates (batch):   {self.duplicates_within_batch}",
            f"  Duplicates (store):   {self.duplicates_against_store}",
            f"  Enriched:             {self.enriched}/{self.enrichment_attempted}",
            f"  Errored:              {self.errored}",
            f"  Emitted:              {self.emitted}",
            f"{'=' * 50}",
        ]
        return "\n".join(lines)


# Counter bumped for each exclusion reason
REASON_COUNTERS = {
    ExclusionReason.EXCLUDED_COMPANY: "excluded_by_company",
    ExclusionReason.FAST_FOOD: "excluded_by_fast_food",
    ExclusionReason.RESTAURANT_CHAIN: "excluded_by_restaurant_chain",
    ExclusionReason.HOURLY: "excluded_by_hourly",
    ExclusionReason.SALARY_COMPANY_NAME: "excluded_by_salary_shaped_name",
    ExclusionReason.EXCLUDED_DOMAIN: "excluded_by_domain",
    ExclusionReason.EXCLUDED_TITLE: "excluded_by_title",
    ExclusionReason.BELOW_MIN_SALARY: "excluded_by_salary",
    ExclusionReason.MISSING_IDENTITY: "excluded_missing_identity",
    ExclusionReason.EXISTING_DUPLICATE: "duplicates_against_store",
    ExclusionReason.PROCESSING_ERROR: "errored",
}


class PipelineResult(BaseModel):
    """Final output of one pipeline run."""

    jobs: list[CanonicalJob] = Field(default_factory=list, description="Jobs to persist")
    excluded_jobs: list[CanonicalJob] = Field(default_factory=list, description="Audit list")
    counters: PipelineCounters = Field(default_factory=PipelineCounters)
    errors: list[str] = Field(default_factory=list)
