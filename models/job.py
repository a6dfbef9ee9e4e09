"""
Job data models — raw provider records and the canonical job posting.
"""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field, model_validator


UNKNOWN_TITLE = "No title"
UNKNOWN_POSITION = "Unknown Position"
UNKNOWN_COMPANY = "Unknown Company"
UNKNOWN_LOCATION = "Location not specified"

LOW_CONFIDENCE_TITLES = {UNKNOWN_TITLE, UNKNOWN_POSITION}


class SalaryPeriod(str, Enum):
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ExclusionReason(str, Enum):
    """Why a job was dropped from the output set. NONE means it was kept."""

    NONE = "none"
    EXCLUDED_COMPANY = "excluded_company"
    FAST_FOOD = "fast_food"
    RESTAURANT_CHAIN = "restaurant_chain"
    SALARY_COMPANY_NAME = "salary_company_name"
    HOURLY = "hourly"
    EXCLUDED_DOMAIN = "excluded_domain"
    EXCLUDED_TITLE = "excluded_title"
    BELOW_MIN_SALARY = "below_min_salary"
    MISSING_IDENTITY = "missing_identity"
    EXISTING_DUPLICATE = "existing_duplicate"
    PROCESSING_ERROR = "processing_error"


def identity_key(title: str, company: str) -> str:
    """Key used to decide whether two listings are the same job."""
    return f"{(title or '').lower()}|{(company or '').lower()}"


class RawJobRecord(BaseModel):
    """A record exactly as a provider returned it, tagged with its provider kind."""

    provider: str = Field(description="Provider kind selecting the field mapping")
    payload: dict[str, Any] = Field(default_factory=dict, description="Untouched provider payload")
    search_query: str = Field(default="", description="Query that produced this record")
    search_location: str = Field(default="", description="Location used in the search")


class Salary(BaseModel):
    """Parsed compensation. A single amount is stored as min == max."""

    min: Optional[float] = None
    max: Optional[float] = None
    currency: str = "USD"
    period: SalaryPeriod = SalaryPeriod.YEARLY

    @model_validator(mode="after")
    def _order_bounds(self) -> "Salary":
        if self.min is None and self.max is not None:
            self.min = self.max
        elif self.max is None and self.min is not None:
            self.max = self.min
        elif self.min is not None and self.max is not None and self.min > self.max:
            self.min, self.max = self.max, self.min
        return self


class CanonicalJob(BaseModel):
    """The pipeline's normalized representation of a job posting."""

    title: str = Field(default=UNKNOWN_TITLE, min_length=1, description="Job title")
    company: str = Field(default=UNKNOWN_COMPANY, min_length=1, description="Company name")
    location: str = Field(default=UNKNOWN_LOCATION, description="Job location")
    salary: Optional[Salary] = Field(default=None, description="Parsed salary, if any")
    salary_text: str = Field(default="", description="Salary text as the provider gave it")
    description: str = Field(default="", description="Description or search snippet")
    apply_url: str = Field(default="", description="Where to apply")
    source: str = Field(default="", description="Site or provider label the posting came from")
    provider: str = Field(default="", description="Provider kind that produced the record")
    posted_at: Optional[str] = Field(default=None, description="Posting date as reported")
    schedule: str = Field(default="", description="Full-time, Part-time, etc.")
    experience_level: str = Field(default="mid", description="entry, mid, senior or executive")
    skills: list[str] = Field(default_factory=list, description="Culinary skills mentioned")
    company_website: Optional[str] = None
    company_domain: Optional[str] = None
    exclusion_reason: ExclusionReason = ExclusionReason.NONE
    exclusion_match: Optional[str] = Field(default=None, description="Rule term that matched")
    error: Optional[str] = Field(default=None, description="Diagnostic for processing errors")

    @property
    def identity_key(self) -> str:
        return identity_key(self.title, self.company)

    @property
    def is_excluded(self) -> bool:
        return self.exclusion_reason != ExclusionReason.NONE

    @property
    def is_low_confidence(self) -> bool:
        return self.title in LOW_CONFIDENCE_TITLES or self.company == UNKNOWN_COMPANY

    def excluded(self, reason: ExclusionReason, match: Optional[str] = None) -> "CanonicalJob":
        """Return a copy flagged with an exclusion reason."""
        return self.model_copy(update={"exclusion_reason": reason, "exclusion_match": match})

    def failed(self, error: Exception | str) -> "CanonicalJob":
        """Return a copy flagged as a processing error."""
        return self.model_copy(update={
            "exclusion_reason": ExclusionReason.PROCESSING_ERROR,
            "error": str(error),
        })
