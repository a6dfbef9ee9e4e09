"""
LangGraph Pipeline State — shared state that flows through the graph.
"""

from typing import TypedDict, Annotated
from models.job import CanonicalJob, RawJobRecord
from models.rules import ExclusionRuleSet


def merge_lists(left: list, right: list) -> list:
    """Reducer that merges two lists (used for accumulating results across loop iterations)."""
    return left + right


def add_counts(left: dict, right: dict) -> dict:
    """Reducer that sums per-stage counter deltas into the running totals."""
    merged = dict(left or {})
    for key, value in (right or {}).items():
        merged[key] = merged.get(key, 0) + value
    return merged


class PipelineState(TypedDict):
    """
    Shared state for the LangGraph workflow.
    Each stage reads from and writes to this state.
    """

    # Input: search plan entries ({provider, query, location, max_pages})
    search_plan: list[dict]

    # Current search index being fetched (for loop control)
    current_search_index: int

    # Current search being fetched
    current_search: dict

    # Rule snapshot and identity index, fixed for the whole run
    rules: ExclusionRuleSet
    existing_identities: frozenset[str]

    # Fetch output (or caller-supplied records)
    raw_records: Annotated[list[RawJobRecord], merge_lists]

    # Working set, replaced by each stage from normalize onwards
    jobs: list[CanonicalJob]

    # Emit output
    emitted_jobs: list[CanonicalJob]
    excluded_jobs: list[CanonicalJob]

    # Running counters (see models.results.PipelineCounters)
    counters: Annotated[dict[str, int], add_counts]

    # Accumulated errors during processing
    errors: Annotated[list[str], merge_lists]
