"""
Enricher Agent — attaches a company website and domain to kept jobs.

Only jobs that are still kept and have a real company name trigger a
lookup. Excluded jobs and existing duplicates never do, and each company
is looked up at most once per run.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from models.job import UNKNOWN_COMPANY, CanonicalJob
from models.state import PipelineState
from tools.classifier import normalize_company_name
from tools.field_extractors import extract_domain


WebsiteLookup = Callable[[str], Awaitable[Optional[str]]]


def needs_enrichment(job: CanonicalJob) -> bool:
    return (
        not job.is_excluded
        and job.company != UNKNOWN_COMPANY
        and not job.company_website
    )


async def lookup_with_timeout(lookup: WebsiteLookup, company: str, timeout: float) -> Optional[str]:
    """Await one lookup; a timeout or failure counts as 'no website found'."""
    try:
        website = await asyncio.wait_for(lookup(company), timeout=timeout)
    except asyncio.TimeoutError:
        print(f"[Enricher] Lookup timed out after {timeout}s for {company}")
        return None
    except Exception as e:
        print(f"[Enricher] Lookup failed for {company}: {e}")
        return None

    if isinstance(website, str) and website.strip():
        return website.strip()
    return None


def make_enricher_node(lookup: Optional[WebsiteLookup], delay_seconds: float = 1.0, timeout_seconds: float = 15.0):
    """
    Create the enrich node.

    Args:
        lookup: lookup_company_website(company) -> url | None, or None to skip enrichment.
        delay_seconds: Pause between successive external calls.
        timeout_seconds: Upper bound for a single lookup.
    """

    async def enricher_agent(state: PipelineState) -> dict:
        jobs = state.get("jobs", [])

        if lookup is None:
            print("[Enricher] ⏭️  Skipping enrichment (no website lookup configured)")
            return {"jobs": jobs}

        candidates = sum(1 for job in jobs if needs_enrichment(job))
        print(f"[Enricher] Looking up websites for {candidates} jobs...")

        websites = {}
        enriched_jobs = []
        errors = []
        attempted = 0
        enriched = 0
        errored = 0

        for job in jobs:
            if not needs_enrichment(job):
                enriched_jobs.append(job)
                continue

            key = normalize_company_name(job.company)
            if key not in websites:
                # Rate limit between external calls
                if attempted and delay_seconds > 0:
                    await asyncio.sleep(delay_seconds)
                attempted += 1
                websites[key] = await lookup_with_timeout(lookup, job.company, timeout_seconds)

            website = websites[key]
            if website:
                try:
                    job = job.model_copy(update={
                        "company_website": website,
                        "company_domain": extract_domain(website),
                    })
                    enriched += 1
                except Exception as e:
                    errors.append(f"Enrichment failed for \"{job.title}\" at \"{job.company}\": {e}")
                    errored += 1
                    job = job.failed(e)

            enriched_jobs.append(job)

        print(f"[Enricher] {attempted} lookups, {enriched} jobs enriched")

        return {
            "jobs": enriched_jobs,
            "counters": {
                "enrichment_attempted": attempted,
                "enriched": enriched,
                "errored": errored,
            },
            "errors": errors,
        }

    return enricher_agent
