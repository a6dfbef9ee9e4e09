"""
File Handler Tool — loads the YAML configs, saves results to JSON and CSV.
"""

import csv
import json
import os
from datetime import datetime

import yaml

from models.job import CanonicalJob
from models.rules import ExclusionRuleSet, MatchPolicy


RULE_CATEGORIES = (
    "excluded_companies",
    "fast_food_chains",
    "restaurant_chains",
    "excluded_domains",
    "excluded_titles",
)

CSV_FIELDS = [
    "title", "company", "location", "salary_min", "salary_max", "salary_period",
    "salary_text", "apply_url", "source", "provider", "posted_at", "schedule",
    "experience_level", "skills", "company_website", "company_domain",
]


def _load_yaml(yaml_path: str) -> dict:
    with open(yaml_path, "r") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def load_search_plan(yaml_path: str) -> list[dict]:
    """
    Load search plan entries from a YAML file.

    Args:
        yaml_path: Path to the search_plan.yaml file.

    Returns:
        List of search dicts with keys: provider, query, and optionally
        location and max_pages. Entries missing provider or query are skipped.
    """
    data = _load_yaml(yaml_path)

    validated = []
    for search in data.get("searches") or []:
        if not isinstance(search, dict):
            continue
        if "provider" in search and "query" in search:
            entry = {
                "provider": str(search["provider"]).strip().lower(),
                "query": str(search["query"]),
                "location": str(search.get("location") or ""),
            }
            # Pass through optional fields
            if "max_pages" in search:
                entry["max_pages"] = int(search["max_pages"])
            validated.append(entry)

    return validated


def load_exclusion_rules(
    yaml_path: str,
    boundary_max_length: int = None,
    min_salary: float = None,
) -> ExclusionRuleSet:
    """
    Load the static exclusion catalogues.

    Args:
        yaml_path: Path to exclusion_rules.yaml.
        boundary_max_length: Overrides match_policy.boundary_max_length when given.
        min_salary: Overrides match_policy.min_salary when given.

    Returns:
        An immutable ExclusionRuleSet.
    """
    data = _load_yaml(yaml_path)

    policy = MatchPolicy(**(data.get("match_policy") or {}))
    if boundary_max_length is not None:
        policy = policy.model_copy(update={"boundary_max_length": boundary_max_length})
    if min_salary is not None:
        policy = policy.model_copy(update={"min_salary": min_salary})

    catalogues = {category: data.get(category) or [] for category in RULE_CATEGORIES}
    return ExclusionRuleSet(**catalogues, match_policy=policy)


def _job_row(job: CanonicalJob) -> dict:
    salary = job.salary
    return {
        "title": job.title,
        "company": job.company,
        "location": job.location,
        "salary_min": salary.min if salary else "",
        "salary_max": salary.max if salary else "",
        "salary_period": salary.period.value if salary else "",
        "salary_text": job.salary_text,
        "apply_url": job.apply_url,
        "source": job.source,
        "provider": job.provider,
        "posted_at": job.posted_at or "",
        "schedule": job.schedule,
        "experience_level": job.experience_level,
        "skills": "; ".join(job.skills),
        "company_website": job.company_website or "",
        "company_domain": job.company_domain or "",
    }


def save_to_json(jobs: list[CanonicalJob], output_dir: str, filename: str = None) -> str:
    """
    Save job listings to a JSON file.

    Args:
        jobs: Jobs to save.
        output_dir: Directory to save the file in.
        filename: Optional filename (auto-generated with timestamp if not provided).

    Returns:
        Path to the saved file.
    """
    os.makedirs(output_dir, exist_ok=True)

    if not filename:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"jobs_{timestamp}.json"

    filepath = os.path.join(output_dir, filename)

    with open(filepath, "w") as f:
        json.dump([job.model_dump(mode="json") for job in jobs], f, indent=2, default=str)

    return filepath


def save_to_csv(jobs: list[CanonicalJob], output_dir: str, filename: str = None) -> str:
    """
    Save job listings to a CSV file.

    Args:
        jobs: Jobs to save.
        output_dir: Directory to save the file in.
        filename: Optional filename (auto-generated with timestamp if not provided).

    Returns:
        Path to the saved file.
    """
    os.makedirs(output_dir, exist_ok=True)

    if not filename:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"jobs_{timestamp}.csv"

    filepath = os.path.join(output_dir, filename)

    with open(filepath, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(_job_row(job) for job in jobs)

    return filepath


def generate_summary(jobs: list[CanonicalJob]) -> str:
    """
    Generate a human-readable summary of the emitted jobs.

    Args:
        jobs: Emitted jobs.

    Returns:
        Formatted summary string.
    """
    if not jobs:
        return "No jobs emitted."

    # Count by company
    companies = {}
    for job in jobs:
        companies[job.company] = companies.get(job.company, 0) + 1

    # Count by source
    sources = {}
    for job in jobs:
        sources[job.source] = sources.get(job.source, 0) + 1

    lines = [
        f"{'=' * 50}",
        f"  EMITTED JOBS",
        f"{'=' * 50}",
        f"  Total jobs: {len(jobs)}",
        f"",
        f"  By Company:",
    ]
    for company, count in sorted(companies.items(), key=lambda x: -x[1])[:15]:
        lines.append(f"    - {company}: {count}")

    lines.append(f"")
    lines.append(f"  By Source:")
    for source, count in sorted(sources.items(), key=lambda x: -x[1]):
        lines.append(f"    - {source}: {count}")

    lines.append(f"{'=' * 50}")

    return "\n".join(lines)
