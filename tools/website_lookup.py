"""
Website Lookup Tool — finds a company's own website through SearchAPI's
Google engine. This is the default lookup_company_website collaborator
for the enrichment stage.
"""

from typing import Any, Optional

import httpx
from config.settings import settings
from tools.field_extractors import extract_domain
from models.job import UNKNOWN_COMPANY


SEARCH_API_URL = "https://www.searchapi.io/api/v1/search"

# Only the first few organic results are considered
MAX_RESULTS_CHECKED = 5

# Review, delivery, social, blog, job and directory sites are never a company's own site
NON_COMPANY_DOMAINS = (
    # Travel & review
    "tripadvisor.", "yelp.", "opentable.", "zomato.com", "foursquare.com",
    "urbanspoon.com", "zagat.com", "timeout.com", "eater.com", "thrillist.com",
    "chowhound.com", "menupix.com", "grubhub.com", "seamless.com", "doordash.com",
    "ubereats.com", "postmates.com", "caviar.com",
    # Social
    "facebook.com", "fb.com", "instagram.com", "twitter.com", "x.com",
    "linkedin.com", "youtube.com", "tiktok.com", "pinterest.com",
    "snapchat.com", "whatsapp.com", "telegram.org",
    # Blogs & site builders
    "blogspot.com", "wordpress.com", "medium.com", "substack.com",
    "tumblr.com", "wix.com", "squarespace.com",
    # Job boards
    "indeed.com", "glassdoor.com", "monster.com", "ziprecruiter.com",
    "careerbuilder.com", "simplyhired.com", "snagajob.com",
    # Directories
    "yellowpages.com", "whitepages.com", "superpages.com", "manta.com",
    "bbb.org", "mapquest.com", "google.com", "wikipedia.org", "wikimedia.org",
)


def is_company_site(url: str) -> bool:
    """False for review, social, job-board and directory hosts."""
    host = extract_domain(url)
    if not host:
        return False
    for domain in NON_COMPANY_DOMAINS:
        if domain.endswith("."):
            if host.startswith(domain) or f".{domain}" in host:
                return False
        elif host == domain or host.endswith(f".{domain}"):
            return False
    return True


def pick_company_website(organic_results: list[dict[str, Any]]) -> Optional[str]:
    """First link among the top results that looks like the company's own site."""
    for result in (organic_results or [])[:MAX_RESULTS_CHECKED]:
        link = result.get("link") if isinstance(result, dict) else None
        if link and is_company_site(link):
            return link
    return None


async def lookup_company_website(
    company: str,
    api_key: str = None,
    transport: httpx.AsyncBaseTransport = None,
) -> Optional[str]:
    """
    Search for "<company> official website" and return the best link.

    Args:
        company: Company name as normalized by the pipeline.
        api_key: SearchAPI key (defaults to SEARCH_API_KEY).
        transport: Optional httpx transport, used by tests.

    Returns:
        Website URL, or None when nothing suitable is found or the request fails.
    """
    api_key = api_key or settings.search_api_key
    if not api_key:
        print("[Enricher] ⚠️  SEARCH_API_KEY not set. Skipping website lookup.")
        return None

    if not company or company == UNKNOWN_COMPANY:
        return None

    params = {
        "engine": "google",
        "q": f"{company} official website",
        "api_key": api_key,
    }

    try:
        async with httpx.AsyncClient(
            timeout=settings.request_timeout,
            follow_redirects=True,
            transport=transport,
        ) as client:
            response = await client.get(SEARCH_API_URL, params=params)
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPStatusError as e:
        print(f"[Enricher] Website search HTTP {e.response.status_code} for {company}")
        return None
    except (httpx.HTTPError, ValueError) as e:
        print(f"[Enricher] Website search failed for {company}: {e}")
        return None

    website = pick_company_website(data.get("organic_results") if isinstance(data, dict) else [])
    if not website:
        print(f"[Enricher] No suitable website found for {company}")
    return website
