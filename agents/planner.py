"""
Planner Agent — validates the search plan and selects the first search.
This is a deterministic agent.
"""

from config.settings import settings
from models.state import PipelineState


def planner_agent(state: PipelineState) -> dict:
    """
    Build an ordered search plan from state['search_plan'].

    Each entry gets a provider, query, location and page limit. An empty
    plan is valid: the run then works only on caller-supplied raw records.
    """
    searches = state.get("search_plan") or []

    if not searches:
        print("[Planner] No searches planned, using supplied records only")
        return {
            "search_plan": [],
            "current_search_index": 0,
            "current_search": {},
        }

    # Build search plan: add processing order and defaults
    search_plan = []
    for i, search in enumerate(searches):
        plan_entry = {
            "index": i,
            "provider": str(search.get("provider", "")).strip().lower(),
            "query": search.get("query", ""),
            "location": search.get("location", "") or "",
            "max_pages": int(search.get("max_pages") or settings.max_pages_per_query),
        }
        search_plan.append(plan_entry)

    print(f"[Planner] Created search plan with {len(search_plan)} searches:")
    for search in search_plan:
        where = f" in {search['location']}" if search["location"] else ""
        print(f"  - {search['provider']}: \"{search['query']}\"{where} (up to {search['max_pages']} pages)")

    return {
        "search_plan": search_plan,
        "current_search_index": 0,
        "current_search": search_plan[0],
    }


def has_searches(state: PipelineState) -> str:
    """Conditional edge after the planner: fetch when there is a plan, else normalize."""
    return "fetch" if state.get("search_plan") else "normalize"
