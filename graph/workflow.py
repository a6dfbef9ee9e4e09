"""
LangGraph Workflow — defines the pipeline graph with state transitions.

Graph structure:
    planner → [fetch → advance → fetch ...] → normalize → classify → dedup → enrich → emit

The graph loops from fetch through advance while searches remain in the
plan, then continues to normalize. With an empty plan the planner goes
straight to normalize, so callers can feed raw records directly.
"""

import asyncio
import inspect
from typing import Callable, Iterable, Optional

from langgraph.graph import StateGraph, END

from config.settings import settings
from models.errors import IdentityIndexUnavailable
from models.job import RawJobRecord
from models.results import PipelineCounters, PipelineResult
from models.rules import ExclusionRuleSet
from models.state import PipelineState
from agents.planner import planner_agent, has_searches
from agents.fetcher import Searcher, make_fetcher_node
from agents.normalizer import normalizer_agent
from agents.classifier import classifier_agent
from agents.dedup import dedup_agent
from agents.enricher import WebsiteLookup, make_enricher_node
from agents.emitter import emitter_agent


def should_continue(state: PipelineState) -> str:
    """
    Conditional edge: decide whether to fetch the next search or move on.

    Returns:
        'advance' if more searches remain, 'normalize' if all are done.
    """
    search_plan = state.get("search_plan", [])
    current_index = state.get("current_search_index", 0)

    if current_index < len(search_plan) - 1:
        return "advance"
    else:
        return "normalize"


def advance_to_next_search(state: PipelineState) -> dict:
    """
    Transition node: advance to the next search in the plan.
    Updates the current_search_index and current_search.
    """
    search_plan = state.get("search_plan", [])
    current_index = state.get("current_search_index", 0)
    next_index = current_index + 1

    if next_index < len(search_plan):
        print(f"\n[Workflow] Moving to search {next_index + 1}/{len(search_plan)}")
        return {
            "current_search_index": next_index,
            "current_search": search_plan[next_index],
        }

    return {}


def build_workflow(
    searchers: Optional[dict[str, Searcher]] = None,
    lookup_company_website: Optional[WebsiteLookup] = None,
    enrichment_delay: float = None,
    enrichment_timeout: float = None,
    page_delay: float = None,
):
    """
    Build and compile the LangGraph workflow.

    Args:
        searchers: Provider kind -> searcher. Defaults to the shipped HTTP searchers.
        lookup_company_website: Website lookup, or None to skip enrichment.
        enrichment_delay: Seconds between lookups (ENRICHMENT_DELAY_SECONDS).
        enrichment_timeout: Seconds before a lookup counts as "not found".
        page_delay: Seconds between result pages (PAGE_DELAY_SECONDS).

    Returns:
        Compiled StateGraph ready to invoke.
    """
    if searchers is None:
        from tools.api_fetcher import PROVIDER_SEARCHES
        searchers = PROVIDER_SEARCHES

    enrichment_delay = settings.enrichment_delay_seconds if enrichment_delay is None else enrichment_delay
    enrichment_timeout = settings.enrichment_timeout_seconds if enrichment_timeout is None else enrichment_timeout
    page_delay = settings.page_delay_seconds if page_delay is None else page_delay

    # Create the graph
    workflow = StateGraph(PipelineState)

    # Add nodes (each stage is a node in the graph)
    workflow.add_node("planner", planner_agent)
    workflow.add_node("fetch", make_fetcher_node(searchers, page_delay))
    workflow.add_node("advance", advance_to_next_search)
    workflow.add_node("normalize", normalizer_agent)
    workflow.add_node("classify", classifier_agent)
    workflow.add_node("dedup", dedup_agent)
    workflow.add_node("enrich", make_enricher_node(lookup_company_website, enrichment_delay, enrichment_timeout))
    workflow.add_node("emit", emitter_agent)

    # Define edges (execution flow)
    workflow.set_entry_point("planner")

    # Planner → Fetch, or straight to Normalize when nothing is planned
    workflow.add_conditional_edges(
        "planner",
        has_searches,
        {
            "fetch": "fetch",
            "normalize": "normalize",
        },
    )

    # Fetch → conditional: more searches? → advance → fetch  OR  → normalize
    workflow.add_conditional_edges(
        "fetch",
        should_continue,
        {
            "advance": "advance",
            "normalize": "normalize",
        },
    )

    # Advance → Fetch (loop back)
    workflow.add_edge("advance", "fetch")

    workflow.add_edge("normalize", "classify")
    workflow.add_edge("classify", "dedup")
    workflow.add_edge("dedup", "enrich")
    workflow.add_edge("enrich", "emit")

    # Emit → END
    workflow.add_edge("emit", END)

    # Compile and return
    return workflow.compile()


async def _load_identities(loader: Callable, allow_missing_index: bool) -> tuple[frozenset, list[str]]:
    try:
        identities = loader()
        if inspect.isawaitable(identities):
            identities = await identities
        return frozenset(identities or ()), []
    except Exception as e:
        if not allow_missing_index:
            raise IdentityIndexUnavailable(f"Could not load existing identities: {e}") from e
        message = f"Existing identity index unavailable, duplicate check against the store disabled: {e}"
        print(f"[Workflow] ⚠️  {message}")
        return frozenset(), [message]


async def run_pipeline(
    raw_records: Optional[Iterable[RawJobRecord]] = None,
    *,
    rules: ExclusionRuleSet,
    load_existing_identities: Callable,
    lookup_company_website: Optional[WebsiteLookup] = None,
    search_plan: Optional[list[dict]] = None,
    searchers: Optional[dict[str, Searcher]] = None,
    enrichment_delay: float = None,
    enrichment_timeout: float = None,
    page_delay: float = None,
    allow_missing_index: bool = False,
) -> PipelineResult:
    """
    Run one batch through normalize → classify → dedup → enrich → emit.

    Args:
        raw_records: Records to process in addition to anything the search plan fetches.
        rules: Rule snapshot for the whole run.
        load_existing_identities: Zero-argument callable (sync or async) returning
            the identity keys already in the store. Called once, before the graph runs.
        lookup_company_website: Async website lookup, or None to skip enrichment.
        search_plan: Searches to fetch first ({provider, query, location, max_pages}).
        searchers: Provider kind -> searcher for the fetch stage.
        allow_missing_index: Continue with an empty index if the loader fails,
            instead of raising IdentityIndexUnavailable.

    Returns:
        PipelineResult with emitted jobs, the audit list, counters and errors.

    Raises:
        IdentityIndexUnavailable: if the identity index cannot be loaded and
            allow_missing_index is False.
    """
    existing_identities, index_errors = await _load_identities(
        load_existing_identities, allow_missing_index
    )

    records = [
        record if isinstance(record, RawJobRecord) else RawJobRecord.model_validate(record)
        for record in raw_records or []
    ]
    search_plan = list(search_plan or [])

    graph = build_workflow(
        searchers=searchers,
        lookup_company_website=lookup_company_website,
        enrichment_delay=enrichment_delay,
        enrichment_timeout=enrichment_timeout,
        page_delay=page_delay,
    )

    initial_state = {
        "search_plan": search_plan,
        "current_search_index": 0,
        "current_search": {},
        "rules": rules,
        "existing_identities": existing_identities,
        "raw_records": records,
        "jobs": [],
        "emitted_jobs": [],
        "excluded_jobs": [],
        "counters": {},
        "errors": index_errors,
    }

    # Two steps per search (fetch + advance) plus the fixed stages
    final_state = await graph.ainvoke(
        initial_state,
        config={"recursion_limit": 2 * len(search_plan) + 20},
    )

    counters = PipelineCounters(**(final_state.get("counters") or {}))
    print(f"\n{counters.summary()}")

    return PipelineResult(
        jobs=final_state.get("emitted_jobs", []),
        excluded_jobs=final_state.get("excluded_jobs", []),
        counters=counters,
        errors=final_state.get("errors", []),
    )


def run_pipeline_sync(*args, **kwargs) -> PipelineResult:
    """Blocking wrapper around run_pipeline for scripts and the CLI."""
    return asyncio.run(run_pipeline(*args, **kwargs))
