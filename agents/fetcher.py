"""
Fetcher Agent — runs the current search against its provider and pages
through the results.

Searchers are injected: a dict of provider kind -> search(query, location,
cursor) returning a SearchPage. A failing searcher ends that search only;
whatever was fetched before the error is kept.
"""

import time
from typing import Callable

from models.errors import ProviderError
from models.job import RawJobRecord
from models.results import SearchPage
from models.state import PipelineState


Searcher = Callable[[str, str, str], SearchPage]


def make_fetcher_node(searchers: dict[str, Searcher], page_delay: float = 0.0):
    """Create the fetch node bound to a set of provider searchers."""

    def fetcher_agent(state: PipelineState) -> dict:
        search = state.get("current_search", {})
        provider = search.get("provider", "")
        query = search.get("query", "")
        location = search.get("location", "")
        max_pages = max(1, int(search.get("max_pages", 1)))

        searcher = searchers.get(provider)
        if searcher is None:
            print(f"[Fetcher] No searcher registered for provider '{provider}'")
            return {
                "errors": [f"No searcher registered for provider '{provider}'"],
            }

        where = f" in {location}" if location else ""
        print(f"[Fetcher] 🔌 {provider}: \"{query}\"{where}")

        records = []
        errors = []
        cursor = None

        for page in range(1, max_pages + 1):
            if page > 1 and page_delay > 0:
                time.sleep(page_delay)

            try:
                result = searcher(query, location, cursor)
            except ProviderError as e:
                print(f"[Fetcher] Search failed on page {page}: {e}")
                errors.append(f"Search failed for {provider} \"{query}\" (page {page}): {e}")
                break
            except Exception as e:
                print(f"[Fetcher] Unexpected error on page {page}: {e}")
                errors.append(f"Search failed for {provider} \"{query}\" (page {page}): {type(e).__name__}: {e}")
                break

            page_records = [
                RawJobRecord(
                    provider=provider,
                    payload=item,
                    search_query=query,
                    search_location=location,
                )
                for item in result.records
                if isinstance(item, dict)
            ]
            records.extend(page_records)

            print(f"[Fetcher] Page {page}: fetched {len(page_records)} records (total so far: {len(records)})")

            cursor = result.next_cursor
            if not cursor or not page_records:
                break

            if page == max_pages:
                print(f"[Fetcher] Reached limit of {max_pages} pages for \"{query}\"")

        print(f"[Fetcher] ✅ Fetched {len(records)} records")

        return {
            "raw_records": records,
            "errors": errors,
        }

    return fetcher_agent
