"""
Normalizer Agent — maps every raw provider record to a CanonicalJob.
Deterministic; field rules live in tools.provider_mappings.
"""

from models.job import CanonicalJob, RawJobRecord
from models.state import PipelineState
from tools.record_normalizer import normalize_record


def normalizer_agent(state: PipelineState) -> dict:
    """
    Normalize all fetched (or caller-supplied) records.

    A record that fails to normalize becomes a placeholder job marked
    processing_error, so counters still add up and the batch continues.
    """
    raw_records = state.get("raw_records", [])

    if not raw_records:
        print("[Normalizer] No records to normalize")
        return {
            "jobs": [],
            "counters": {"total_fetched": 0},
        }

    print(f"[Normalizer] Normalizing {len(raw_records)} records...")

    jobs = []
    errors = []
    providers = {}

    for record in raw_records:
        try:
            if not isinstance(record, RawJobRecord):
                record = RawJobRecord.model_validate(record)
            job = normalize_record(record)
        except Exception as e:
            provider = getattr(record, "provider", "") or "unknown"
            print(f"[Normalizer] Failed to normalize {provider} record: {e}")
            errors.append(f"Normalization failed for {provider} record: {e}")
            job = CanonicalJob(provider=provider, source=provider).failed(e)

        providers[job.provider] = providers.get(job.provider, 0) + 1
        jobs.append(job)

    for provider, count in providers.items():
        print(f"[Normalizer]   {provider}: {count}")
    if errors:
        print(f"[Normalizer] {len(errors)} records could not be normalized")

    return {
        "jobs": jobs,
        "counters": {"total_fetched": len(raw_records), "errored": len(errors)},
        "errors": errors,
    }
