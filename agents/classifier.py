"""
Classifier Agent — flags unwanted jobs with an exclusion reason.

Excluded jobs stay in the working set so they reach the audit list; later
stages skip anything that already carries a reason.
"""

from models.results import REASON_COUNTERS
from models.rules import ExclusionRuleSet
from models.state import PipelineState
from tools.classifier import classify_job
from tools.provider_mappings import get_mapping


def classifier_agent(state: PipelineState) -> dict:
    """Run the exclusion checks over every job that is still kept."""
    jobs = state.get("jobs", [])
    rules = state.get("rules") or ExclusionRuleSet()

    if not jobs:
        print("[Classifier] No jobs to classify")
        return {"jobs": []}

    print(f"[Classifier] Classifying {len(jobs)} jobs...")

    classified = []
    counts = {}
    errors = []

    for job in jobs:
        if job.is_excluded:
            classified.append(job)
            continue

        mapping = get_mapping(job.provider)
        try:
            result = classify_job(
                job,
                rules,
                check_domain=mapping.check_domain,
                include_description=mapping.hourly_in_description,
            )
        except Exception as e:
            print(f"[Classifier] Failed on \"{job.title}\" at \"{job.company}\": {e}")
            errors.append(f"Classification failed for \"{job.title}\" at \"{job.company}\": {e}")
            counts["errored"] = counts.get("errored", 0) + 1
            classified.append(job.failed(e))
            continue

        if result.excluded:
            match = f" (matched: {result.matched_term})" if result.matched_term else ""
            print(f"[Classifier] Excluding \"{job.title}\" at \"{job.company}\": {result.reason.value}{match}")
            counter = REASON_COUNTERS[result.reason]
            counts[counter] = counts.get(counter, 0) + 1
            job = job.excluded(result.reason, result.matched_term)

        classified.append(job)

    excluded = sum(counts.values()) - counts.get("errored", 0)
    print(f"[Classifier] {excluded} excluded, {len(classified) - excluded} remaining")

    return {
        "jobs": classified,
        "counters": counts,
        "errors": errors,
    }
