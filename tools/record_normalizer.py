"""
Record Normalizer — maps one raw provider record to a CanonicalJob.

Field locations come from the provider's ProviderMapping; everything else
(salary parsing, company fallback, description cleanup) is shared. Missing
fields resolve to the placeholder constants in models.job, never to None.
"""

from typing import Any, Optional

from models.job import (
    CanonicalJob,
    RawJobRecord,
    UNKNOWN_COMPANY,
    UNKNOWN_LOCATION,
    UNKNOWN_TITLE,
)
from tools.classifier import extract_title, is_salary_shaped_company_name
from tools.field_extractors import (
    company_from_host,
    extract_company_fallback,
    extract_domain,
    extract_location,
    extract_skills,
    infer_experience_level,
    parse_salary,
    salary_from_numbers,
)
from tools.provider_mappings import ProviderMapping, get_mapping, resolve
from tools.text_extractor import clean_description


_LOCATION_PARTS = ("city", "state", "region", "country")


def _text(value: Any) -> str:
    """Render a resolved payload value as a single-line string."""
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return " ".join(value.split())
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, dict):
        parts = [_text(value.get(key)) for key in _LOCATION_PARTS]
        parts = [part for part in parts if part]
        if parts:
            return ", ".join(parts)
        return _text(value.get("name"))
    if isinstance(value, (list, tuple)):
        return ", ".join(part for part in (_text(item) for item in value) if part)
    return " ".join(str(value).split())


def _company(mapping: ProviderMapping, payload: dict, raw_title: str, description: str) -> str:
    explicit = _text(resolve(payload, mapping.company))
    if explicit:
        # Salary-shaped names stay so the classifier can record why they were dropped
        return explicit

    if mapping.company_from_host:
        for candidate in resolve(payload, mapping.company_from_host) or []:
            company = company_from_host(candidate)
            if company:
                return company

    company = extract_company_fallback(
        raw_title, description, is_rejected=is_salary_shaped_company_name
    )
    return company or UNKNOWN_COMPANY


def _website(mapping: ProviderMapping, payload: dict) -> tuple[Optional[str], Optional[str]]:
    website = _text(resolve(payload, mapping.website))
    if not website:
        return None, None
    domain = extract_domain(website)
    if not domain:
        return None, None
    if "://" not in website:
        website = f"https://{website}"
    return website, domain


def normalize_record(raw: RawJobRecord) -> CanonicalJob:
    """
    Convert a raw provider record into a CanonicalJob.

    Args:
        raw: Provider record tagged with its provider kind.

    Returns:
        CanonicalJob with every required string field filled.
    """
    mapping = get_mapping(raw.provider)
    payload = raw.payload if isinstance(raw.payload, dict) else {}

    raw_title = _text(resolve(payload, mapping.title))
    raw_description = resolve(payload, mapping.description)
    description = clean_description(
        raw_description if isinstance(raw_description, str) else _text(raw_description)
    )

    if mapping.extract_title_from_headline:
        title = extract_title(raw_title)
    else:
        title = raw_title or UNKNOWN_TITLE

    company = _company(mapping, payload, raw_title, description)

    location = _text(resolve(payload, mapping.location))
    if not location and mapping.location_from_text:
        location = extract_location(f"{raw_title} {description}", raw.search_location)

    # Numeric provider fields win over free text
    salary_text = _text(resolve(payload, mapping.salary_text))
    salary = salary_from_numbers(
        resolve(payload, mapping.salary_min),
        resolve(payload, mapping.salary_max),
        resolve(payload, mapping.salary_period),
    )
    if salary is None:
        salary = parse_salary(salary_text)
    if salary is None and mapping.salary_from_description and not salary_text:
        salary = parse_salary(description)

    website, domain = _website(mapping, payload)
    qualifications = resolve(payload, mapping.qualifications) or []

    return CanonicalJob(
        title=title,
        company=company,
        location=location or UNKNOWN_LOCATION,
        salary=salary,
        salary_text=salary_text,
        description=description,
        apply_url=_text(resolve(payload, mapping.url)),
        source=_text(resolve(payload, mapping.source)) or mapping.source_label or raw.provider,
        provider=raw.provider,
        posted_at=_text(resolve(payload, mapping.posted_at)) or None,
        schedule=_text(resolve(payload, mapping.schedule)),
        experience_level=infer_experience_level(title),
        skills=extract_skills(description, qualifications),
        company_website=website,
        company_domain=domain,
    )
