"""
Dedup Agent — deterministic deduplication against the store and within the batch.
"""

from dataclasses import dataclass, field
from typing import AbstractSet

from models.job import CanonicalJob, ExclusionReason
from models.state import PipelineState


@dataclass
class DedupOutcome:
    """Deduplicated jobs plus how many were caught by each check."""

    jobs: list[CanonicalJob] = field(default_factory=list)
    within_batch: int = 0
    against_store: int = 0


def deduplicate(jobs: list[CanonicalJob], existing_identities: AbstractSet[str]) -> DedupOutcome:
    """
    Deduplicate kept jobs by identity key (title|company, case-insensitive).

    - Key already in the store: flagged existing_duplicate and kept for audit
    - Key already seen in this batch: dropped; the first one seen wins
    - Jobs that are already excluded pass through untouched

    The existing_identities set is only read.
    """
    outcome = DedupOutcome()
    seen_keys = set()

    for job in jobs:
        if job.is_excluded:
            outcome.jobs.append(job)
            continue

        key = job.identity_key

        if key in seen_keys:
            outcome.within_batch += 1
            continue
        seen_keys.add(key)

        if key in existing_identities:
            outcome.against_store += 1
            outcome.jobs.append(job.excluded(ExclusionReason.EXISTING_DUPLICATE))
            continue

        outcome.jobs.append(job)

    return outcome


def dedup_agent(state: PipelineState) -> dict:
    """Graph node wrapping deduplicate()."""
    jobs = state.get("jobs", [])
    existing = state.get("existing_identities") or frozenset()

    if not jobs:
        print("[Dedup] No jobs to deduplicate")
        return {"jobs": []}

    print(f"[Dedup] Processing {len(jobs)} jobs against {len(existing)} stored identities...")

    outcome = deduplicate(jobs, existing)

    print(f"[Dedup] Removed {outcome.within_batch} duplicates within this batch")
    print(f"[Dedup] Flagged {outcome.against_store} jobs already in the store")

    return {
        "jobs": outcome.jobs,
        "counters": {
            "duplicates_within_batch": outcome.within_batch,
            "duplicates_against_store": outcome.against_store,
        },
    }
