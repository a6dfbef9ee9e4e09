"""
API Fetcher Tool — fetches raw job records from the job-search providers.

Low-level helpers return {"success", "data", "error"} dicts and never raise.
The provider searchers built on them share one signature,
search(query, location, cursor) -> SearchPage, and raise ProviderError
when a page cannot be fetched.
"""

import time

import httpx
from config.settings import settings
from models.errors import ProviderError
from models.results import SearchPage
from tools.provider_mappings import get_path


SEARCH_API_URL = "https://www.searchapi.io/api/v1/search"
THEIRSTACK_URL = "https://api.theirstack.com/v1/jobs/search"
JOBS_SEARCH_API_URL = "https://jobs-search-api.p.rapidapi.com/getjobs"
JOBS_SEARCH_API_HOST = "jobs-search-api.p.rapidapi.com"

BING_RESULTS_PER_PAGE = 50
THEIRSTACK_PAGE_SIZE = 25
JOBS_SEARCH_PAGE_SIZE = 50

# Added to Bing queries so results favour direct employer pages
BING_HIRING_TERMS = '("now hiring" OR "job opening" OR "career" OR "position" OR "employment")'
BING_EXCLUDED_SITES = (
    "indeed.com", "linkedin.com", "glassdoor.com", "ziprecruiter.com",
    "monster.com", "careerbuilder.com", "simplyhired.com", "snagajob.com",
    "joblist.com", "jobrapido.com",
)

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) Chrome/120.0.0.0",
    "Accept": "application/json",
    "Accept-Encoding": "gzip, deflate",  # Exclude brotli to avoid decompressobj reuse bug
}

# Status codes worth another attempt
RETRY_STATUS = {429, 500, 502, 503, 504}


def _request(method: str, api_url: str, params: dict = None, json_body: dict = None,
             headers: dict = None, timeout: int = None) -> dict:
    timeout = timeout or settings.request_timeout
    attempts = max(1, settings.max_retries)
    error = ""

    for attempt in range(1, attempts + 1):
        try:
            with httpx.Client(
                timeout=timeout,
                follow_redirects=True,
                headers={**DEFAULT_HEADERS, **(headers or {})},
            ) as client:
                if method == "POST":
                    resp = client.post(api_url, params=params, json=json_body or {})
                else:
                    resp = client.get(api_url, params=params or {})

                if resp.status_code == 200:
                    return {
                        "success": True,
                        "data": resp.json(),
                        "error": "",
                    }
                error = f"API returned HTTP {resp.status_code}"
                if resp.status_code not in RETRY_STATUS:
                    break

        except (httpx.HTTPError, ValueError) as e:
            error = str(e) or e.__class__.__name__

        if attempt < attempts:
            time.sleep(attempt)

    return {
        "success": False,
        "data": {},
        "error": error,
    }


def fetch_jobs_from_api(
    api_url: str,
    params: dict = None,
    headers: dict = None,
    timeout: int = None,
) -> dict:
    """
    Fetch jobs from a JSON API endpoint.

    Args:
        api_url: The API endpoint URL.
        params: Query parameters for the API call.
        headers: Extra request headers.
        timeout: Request timeout in seconds.

    Returns:
        dict with keys:
            - success (bool)
            - data (dict): Raw API response
            - error (str): Error message if failed
    """
    return _request("GET", api_url, params=params, headers=headers, timeout=timeout)


def fetch_jobs_from_api_post(
    api_url: str,
    json_body: dict = None,
    headers: dict = None,
    timeout: int = None,
) -> dict:
    """
    Fetch jobs from a JSON API endpoint using POST.
    Used for TheirStack and the RapidAPI job search, which take a JSON body.
    """
    headers = {"Content-Type": "application/json", **(headers or {})}
    return _request("POST", api_url, json_body=json_body, headers=headers, timeout=timeout)


def _unwrap(result: dict, provider: str) -> dict:
    """Return the response body or raise ProviderError."""
    if not result["success"]:
        raise ProviderError(f"{provider}: {result['error']}")
    data = result["data"]
    if not isinstance(data, dict):
        return {"data": data} if isinstance(data, list) else {}
    if data.get("error"):
        raise ProviderError(f"{provider}: {data['error']}")
    return data


def _page_number(cursor, first: int) -> int:
    try:
        return int(cursor) if cursor is not None else first
    except (TypeError, ValueError):
        return first


# ── SearchAPI: Google Jobs ──────────────────────────────────────

def search_google_jobs(query: str, location: str = "", cursor: str = None) -> SearchPage:
    """One page of Google Jobs results; the cursor is SearchAPI's next_page_token."""
    if not settings.search_api_key:
        print("[Fetcher] ⚠️  SEARCH_API_KEY not set. Skipping Google Jobs search.")
        return SearchPage()

    params = {
        "engine": "google_jobs",
        "q": query,
        "api_key": settings.search_api_key,
    }
    if location:
        params["location"] = location
    if cursor:
        params["next_page_token"] = cursor

    data = _unwrap(fetch_jobs_from_api(SEARCH_API_URL, params=params), "Google Jobs")
    jobs = data.get("jobs") or []

    return SearchPage(
        records=[job for job in jobs if isinstance(job, dict)],
        next_cursor=get_path(data, "pagination.next_page_token"),
    )


# ── SearchAPI: Bing web results ─────────────────────────────────

def build_bing_query(query: str, location: str = "") -> str:
    """Search terms plus hiring phrases and -site: exclusions for the big job boards."""
    parts = [query]
    if location:
        parts.append(location)
    parts.append(BING_HIRING_TERMS)
    parts.append(" ".join(f"-site:{domain}" for domain in BING_EXCLUDED_SITES))
    return " ".join(parts)


def search_bing(query: str, location: str = "", cursor: str = None) -> SearchPage:
    """One page of Bing organic results; the cursor is the page number."""
    if not settings.search_api_key:
        print("[Fetcher] ⚠️  SEARCH_API_KEY not set. Skipping Bing search.")
        return SearchPage()

    page = _page_number(cursor, 1)
    params = {
        "engine": "bing",
        "q": build_bing_query(query, location),
        "api_key": settings.search_api_key,
        "num": BING_RESULTS_PER_PAGE,
        "page": page,
    }

    data = _unwrap(fetch_jobs_from_api(SEARCH_API_URL, params=params), "Bing")
    results = [item for item in data.get("organic_results") or [] if isinstance(item, dict)]

    return SearchPage(
        records=results,
        next_cursor=str(page + 1) if results else None,
    )


# ── TheirStack ──────────────────────────────────────────────────

def search_theirstack(query: str, location: str = "", cursor: str = None) -> SearchPage:
    """
    One page of TheirStack job search results (pages start at 0).

    The query is a comma-separated list of job titles.
    """
    if not settings.theirstack_api_key:
        print("[Fetcher] ⚠️  THEIRSTACK_API_KEY not set. Skipping TheirStack search.")
        return SearchPage()

    page = _page_number(cursor, 0)
    titles = [title.strip() for title in query.split(",") if title.strip()]
    body = {
        "limit": THEIRSTACK_PAGE_SIZE,
        "page": page,
        "include_total_results": False,
        "job_title_or": titles,
        "job_country_code_or": ["US"],
        "posted_at_max_age_days": 7,
        "company_type": "direct_employer",
    }
    if location and location.lower() != "united states":
        body["job_location_pattern_or"] = [location]

    result = fetch_jobs_from_api_post(
        THEIRSTACK_URL,
        json_body=body,
        headers={"Authorization": f"Bearer {settings.theirstack_api_key}"},
    )
    data = _unwrap(result, "TheirStack")
    items = data.get("data") if isinstance(data.get("data"), list) else data.get("jobs") or []
    items = [item for item in items if isinstance(item, dict)]

    return SearchPage(
        records=items,
        next_cursor=str(page + 1) if len(items) >= THEIRSTACK_PAGE_SIZE else None,
    )


# ── RapidAPI job search aggregator ──────────────────────────────

def search_jobs_api(query: str, location: str = "", cursor: str = None) -> SearchPage:
    """One batch from the RapidAPI job search aggregator; the cursor is an offset."""
    if not settings.rapidapi_key:
        print("[Fetcher] ⚠️  RAPIDAPI_KEY not set. Skipping job search API.")
        return SearchPage()

    offset = _page_number(cursor, 0)
    body = {
        "search_term": query,
        "location": location,
        "results_wanted": JOBS_SEARCH_PAGE_SIZE,
        "site_name": ["indeed", "linkedin", "zip_recruiter", "glassdoor"],
        "distance": 50,
        "job_type": "fulltime",
        "is_remote": False,
        "hours_old": 168,
    }
    if offset:
        body["offset"] = offset

    result = fetch_jobs_from_api_post(
        JOBS_SEARCH_API_URL,
        json_body=body,
        headers={
            "x-rapidapi-key": settings.rapidapi_key,
            "x-rapidapi-host": JOBS_SEARCH_API_HOST,
        },
    )
    data = _unwrap(result, "Jobs Search API")
    jobs = [job for job in data.get("jobs") or [] if isinstance(job, dict)]

    return SearchPage(
        records=jobs,
        next_cursor=str(offset + len(jobs)) if len(jobs) >= JOBS_SEARCH_PAGE_SIZE else None,
    )


# Provider kind -> searcher
PROVIDER_SEARCHES = {
    "google_jobs": search_google_jobs,
    "bing": search_bing,
    "theirstack": search_theirstack,
    "jobs_search_api": search_jobs_api,
}
