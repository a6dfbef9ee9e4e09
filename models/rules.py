"""
Exclusion rule set — the immutable catalogues the classifier matches against.
"""

from typing import Iterable, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class MatchPolicy(BaseModel):
    """How strictly catalogue terms match, and the lowest acceptable pay."""

    model_config = ConfigDict(frozen=True)

    # Terms this short (after normalization) only match on word boundaries
    boundary_max_length: int = Field(default=8, ge=0)
    fast_food_always_bounded: bool = True
    # Yearly pay floor; None disables the check
    min_salary: Optional[float] = Field(default=None, ge=0)


class ExcludedCompanyRow(BaseModel):
    """One row of the persisted excluded-companies table."""

    company_name: str
    parent_company: Optional[str] = None
    domain: Optional[str] = None


def _clean_terms(values: Iterable[str]) -> tuple[str, ...]:
    """Lowercase, strip and de-duplicate while keeping first-seen order."""
    seen = set()
    terms = []
    for value in values or ():
        if value is None:
            continue
        term = str(value).strip().lower()
        if term and term not in seen:
            seen.add(term)
            terms.append(term)
    return tuple(terms)


class ExclusionRuleSet(BaseModel):
    """
    Ordered, append-only catalogues of lowercase fragments.

    Instances are frozen: a refresh builds a new rule set instead of
    editing the one a running pipeline holds.
    """

    model_config = ConfigDict(frozen=True)

    excluded_companies: tuple[str, ...] = ()
    fast_food_chains: tuple[str, ...] = ()
    restaurant_chains: tuple[str, ...] = ()
    excluded_domains: tuple[str, ...] = ()
    excluded_titles: tuple[str, ...] = ()
    match_policy: MatchPolicy = MatchPolicy()

    @field_validator(
        "excluded_companies",
        "fast_food_chains",
        "restaurant_chains",
        "excluded_domains",
        "excluded_titles",
        mode="before",
    )
    @classmethod
    def _normalize_terms(cls, value):
        return _clean_terms(value)

    def merged_with(self, rows: Iterable[ExcludedCompanyRow]) -> "ExclusionRuleSet":
        """Append persisted excluded-company rows, returning a new rule set."""
        companies = list(self.excluded_companies)
        domains = list(self.excluded_domains)
        for row in rows:
            companies.append(row.company_name)
            if row.parent_company:
                companies.append(row.parent_company)
            if row.domain:
                domains.append(row.domain)
        return self.model_copy(update={
            "excluded_companies": _clean_terms(companies),
            "excluded_domains": _clean_terms(domains),
        })

    def with_policy(self, policy: MatchPolicy) -> "ExclusionRuleSet":
        return self.model_copy(update={"match_policy": policy})
