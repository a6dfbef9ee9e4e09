"""
Provider Mappings — per-provider field extraction rules for the record normalizer.

Each provider kind gets one ProviderMapping. A field rule is either a tuple
of dotted paths into the raw payload (the first non-empty value wins) or a
callable taking the payload. Supporting a new provider means adding one
entry to MAPPINGS.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union


FieldRule = Union[tuple, Callable[[dict], Any]]


def get_path(payload: dict, path: str) -> Any:
    """Follow a dotted path ('detected_extensions.posted_at', 'apply_links.0.link')."""
    current: Any = payload
    for part in path.split("."):
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def resolve(payload: dict, rule: Optional[FieldRule]) -> Any:
    """Apply a field rule to a payload, returning None when nothing is found."""
    if rule is None or not isinstance(payload, dict):
        return None
    if callable(rule):
        value = rule(payload)
        return None if _is_empty(value) else value
    for path in rule:
        value = get_path(payload, path)
        if not _is_empty(value):
            return value
    return None


@dataclass(frozen=True)
class ProviderMapping:
    """Where each canonical field lives in one provider's raw payload."""

    kind: str
    title: Optional[FieldRule] = None
    company: Optional[FieldRule] = None
    location: Optional[FieldRule] = None
    description: Optional[FieldRule] = None
    url: Optional[FieldRule] = None
    salary_text: Optional[FieldRule] = None
    salary_min: Optional[FieldRule] = None
    salary_max: Optional[FieldRule] = None
    salary_period: Optional[FieldRule] = None
    posted_at: Optional[FieldRule] = None
    schedule: Optional[FieldRule] = None
    source: Optional[FieldRule] = None
    website: Optional[FieldRule] = None
    qualifications: Optional[FieldRule] = None
    source_label: str = ""

    # Titles are search-result headlines ("Executive Chef | Riverside Bistro")
    extract_title_from_headline: bool = False
    # Company comes from the result's site name, domain or link host
    company_from_host: Optional[FieldRule] = None
    # Location is scanned out of title + description text
    location_from_text: bool = False
    # Parse salary from the description when no salary field is present
    salary_from_description: bool = False
    # Hourly markers are also searched in the description
    hourly_in_description: bool = False
    # Results linking to job boards or directories are dropped
    check_domain: bool = False


# ── Helpers used by the mapping tables ──────────────────────────

def _highlight_items(payload: dict, heading: str) -> list[str]:
    for highlight in payload.get("job_highlights") or []:
        if isinstance(highlight, dict) and str(highlight.get("title", "")).lower() == heading.lower():
            return [item for item in highlight.get("items") or [] if isinstance(item, str)]
    return []


def _google_salary_text(payload: dict) -> Optional[str]:
    salary = get_path(payload, "detected_extensions.salary")
    if isinstance(salary, str) and salary.strip():
        return salary
    for item in _highlight_items(payload, "Compensation"):
        if "$" in item:
            return item
    return None


def _google_source(payload: dict) -> Optional[str]:
    via = payload.get("via")
    if isinstance(via, str) and via.strip():
        return re.sub(r"^via\s+", "", via.strip(), flags=re.I)
    return None


_SNIPPET_SALARY = (
    re.compile(r"\$[\d,.]+k?\s*[-–]\s*\$[\d,.]+k?(?:\s*(?:/|per|an?)\s*(?:year|yr|hour|hr))?", re.I),
    re.compile(r"\$[\d,.]+k?\s*to\s*\$[\d,.]+k?(?:\s*(?:/|per|an?)\s*(?:year|yr|hour|hr))?", re.I),
    re.compile(r"\$[\d,.]+k?\s*(?:/|per|an?)\s*(?:year|yr|hour|hr)\b", re.I),
    re.compile(r"(?:salary|pay):\s*\$[\d,.]+k?", re.I),
)


def _snippet_salary_text(payload: dict) -> Optional[str]:
    snippet = payload.get("snippet")
    if not isinstance(snippet, str):
        return None
    for pattern in _SNIPPET_SALARY:
        match = pattern.search(snippet)
        if match:
            return match.group(0)
    return None


def _bing_host_candidates(payload: dict) -> list[str]:
    candidates = []
    source = payload.get("source")
    if isinstance(source, str) and source.strip().lower() != "bing":
        candidates.append(source)
    for key in ("domain", "link"):
        value = payload.get(key)
        if isinstance(value, str):
            candidates.append(value)
    return candidates


# ── Mapping tables ──────────────────────────────────────────────

GOOGLE_JOBS = ProviderMapping(
    kind="google_jobs",
    title=("title",),
    company=("company_name", "company"),
    location=("location",),
    description=("description",),
    url=("apply_link", "apply_links.0.link", "sharing_link"),
    salary_text=_google_salary_text,
    posted_at=("detected_extensions.posted_at",),
    schedule=("detected_extensions.schedule", "schedule"),
    source=_google_source,
    qualifications=lambda payload: _highlight_items(payload, "Qualifications"),
    source_label="Google Jobs",
    salary_from_description=True,
)

BING = ProviderMapping(
    kind="bing",
    title=("title",),
    description=("snippet",),
    url=("link",),
    salary_text=_snippet_salary_text,
    source=("source", "displayed_link"),
    source_label="Bing",
    extract_title_from_headline=True,
    company_from_host=_bing_host_candidates,
    location_from_text=True,
    hourly_in_description=True,
    check_domain=True,
)

THEIRSTACK = ProviderMapping(
    kind="theirstack",
    title=("job_title", "title"),
    company=("company_name", "company", "company_object.name"),
    location=("location", "job_location", "short_location", "city"),
    description=("description", "job_description", "summary"),
    url=("url", "apply_url", "job_url", "final_url"),
    salary_text=("salary_string", "salary_text", "compensation_text"),
    salary_min=("min_annual_salary_usd", "compensation_annual_min_usd", "salary_min_usd"),
    salary_max=("max_annual_salary_usd", "compensation_annual_max_usd", "salary_max_usd"),
    salary_period=lambda payload: "yearly",
    posted_at=("date_posted", "posted_at", "published_at", "discovered_at"),
    schedule=("employment_statuses.0", "job_type", "schedule"),
    website=("company_object.url", "company_url", "company_website", "company_domain", "company_object.domain"),
    source_label="TheirStack",
)

JOBS_SEARCH_API = ProviderMapping(
    kind="jobs_search_api",
    title=("title",),
    company=("company", "company_name"),
    location=("location",),
    description=("description", "summary"),
    url=("job_url", "url", "job_url_direct"),
    salary_text=("salary",),
    salary_min=("min_amount", "salary_min"),
    salary_max=("max_amount", "salary_max"),
    salary_period=("interval", "salary_period"),
    posted_at=("date_posted", "posted_date"),
    schedule=("job_type",),
    source=("site",),
    website=("company_url_direct",),
    source_label="Jobs Search API",
)

GENERIC = ProviderMapping(
    kind="generic",
    title=("title", "job_title", "name", "position"),
    company=("company", "company_name", "employer", "employer_name", "organization"),
    location=("location", "job_location", "city"),
    description=("description", "job_description", "summary", "snippet"),
    url=("apply_url", "apply_link", "url", "job_url", "link"),
    salary_text=("salary", "salary_text", "compensation"),
    salary_min=("salary_min", "min_salary"),
    salary_max=("salary_max", "max_salary"),
    salary_period=("salary_period", "interval"),
    posted_at=("posted_at", "date_posted"),
    schedule=("schedule", "job_type", "employment_type"),
    source=("source", "site", "via"),
    website=("company_website", "company_url"),
)

MAPPINGS = {
    mapping.kind: mapping
    for mapping in (GOOGLE_JOBS, BING, THEIRSTACK, JOBS_SEARCH_API, GENERIC)
}


def get_mapping(provider: str) -> ProviderMapping:
    """Mapping for a provider kind; unknown kinds use the generic field names."""
    return MAPPINGS.get((provider or "").strip().lower(), GENERIC)
