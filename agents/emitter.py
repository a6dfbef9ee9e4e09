"""
Emitter Agent — splits the working set into emitted jobs and the audit list.
Runs last. Order within each list follows the input order.
"""

from models.state import PipelineState


def emitter_agent(state: PipelineState) -> dict:
    jobs = state.get("jobs", [])

    emitted = [job for job in jobs if not job.is_excluded]
    excluded = [job for job in jobs if job.is_excluded]

    print(f"\n[Emitter] {len(emitted)} jobs emitted, {len(excluded)} kept for audit")

    return {
        "emitted_jobs": emitted,
        "excluded_jobs": excluded,
        "counters": {"emitted": len(emitted)},
    }
