import asyncio
import unittest
from unittest.mock import AsyncMock, patch

from agents.enricher import lookup_with_timeout, make_enricher_node, needs_enrichment
from models.job import CanonicalJob, ExclusionReason, UNKNOWN_COMPANY


def make_job(title, company, **kwargs):
    return CanonicalJob(title=title, company=company, provider="google_jobs", **kwargs)


class TestNeedsEnrichment(unittest.TestCase):
    def test_kept_job_with_company(self):
        self.assertTrue(needs_enrichment(make_job("Executive Chef", "Riverside Bistro")))

    def test_skipped_jobs(self):
        self.assertFalse(needs_enrichment(make_job("Sous Chef", UNKNOWN_COMPANY)))
        self.assertFalse(needs_enrichment(
            make_job("Sous Chef", "Acme Diner").excluded(ExclusionReason.EXISTING_DUPLICATE)
        ))
        self.assertFalse(needs_enrichment(
            make_job("Sous Chef", "Acme Diner", company_website="https://acmediner.com")
        ))


class TestEnricherNode(unittest.IsolatedAsyncioTestCase):
    async def test_attaches_website_and_domain(self):
        lookup = AsyncMock(return_value="https://www.riversidebistro.com/")
        enrich = make_enricher_node(lookup, delay_seconds=0, timeout_seconds=5)

        result = await enrich({"jobs": [make_job("Executive Chef", "Riverside Bistro")]})

        job = result["jobs"][0]
        self.assertEqual(job.company_website, "https://www.riversidebistro.com/")
        self.assertEqual(job.company_domain, "riversidebistro.com")
        self.assertEqual(result["counters"], {"enrichment_attempted": 1, "enriched": 1, "errored": 0})
        lookup.assert_awaited_once_with("Riverside Bistro")

    async def test_excluded_and_duplicate_jobs_never_looked_up(self):
        lookup = AsyncMock(return_value="https://example.com")
        enrich = make_enricher_node(lookup, delay_seconds=0, timeout_seconds=5)
        jobs = [
            make_job("Night Auditor", "Marriott International").excluded(ExclusionReason.EXCLUDED_COMPANY),
            make_job("Executive Chef", "Riverside Bistro").excluded(ExclusionReason.EXISTING_DUPLICATE),
        ]

        result = await enrich({"jobs": jobs})

        lookup.assert_not_awaited()
        self.assertEqual(result["counters"]["enrichment_attempted"], 0)
        self.assertIsNone(result["jobs"][0].company_website)
        self.assertIsNone(result["jobs"][1].company_website)

    async def test_not_found_is_not_an_error(self):
        lookup = AsyncMock(return_value=None)
        enrich = make_enricher_node(lookup, delay_seconds=0, timeout_seconds=5)

        result = await enrich({"jobs": [make_job("Sous Chef", "Acme Diner")]})

        job = result["jobs"][0]
        self.assertIsNone(job.company_website)
        self.assertIsNone(job.company_domain)
        self.assertFalse(job.is_excluded)
        self.assertEqual(result["counters"], {"enrichment_attempted": 1, "enriched": 0, "errored": 0})

    async def test_one_lookup_per_company(self):
        lookup = AsyncMock(return_value="https://acmediner.com")
        enrich = make_enricher_node(lookup, delay_seconds=0, timeout_seconds=5)
        jobs = [make_job("Sous Chef", "Acme Diner"), make_job("Pastry Chef", "ACME  Diner")]

        result = await enrich({"jobs": jobs})

        lookup.assert_awaited_once()
        self.assertEqual(result["counters"]["enrichment_attempted"], 1)
        self.assertEqual(result["counters"]["enriched"], 2)
        self.assertTrue(all(job.company_domain == "acmediner.com" for job in result["jobs"]))

    async def test_delay_between_lookups(self):
        lookup = AsyncMock(side_effect=["https://acmediner.com", "https://riversidebistro.com"])
        enrich = make_enricher_node(lookup, delay_seconds=2.5, timeout_seconds=5)
        jobs = [make_job("Sous Chef", "Acme Diner"), make_job("Executive Chef", "Riverside Bistro")]

        with patch("agents.enricher.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            await enrich({"jobs": jobs})

        # Only between calls, not before the first one
        mock_sleep.assert_awaited_once_with(2.5)

    async def test_lookup_failure_keeps_job(self):
        lookup = AsyncMock(side_effect=RuntimeError("quota exceeded"))
        enrich = make_enricher_node(lookup, delay_seconds=0, timeout_seconds=5)

        result = await enrich({"jobs": [make_job("Sous Chef", "Acme Diner")]})

        self.assertFalse(result["jobs"][0].is_excluded)
        self.assertIsNone(result["jobs"][0].company_website)

    async def test_no_lookup_configured(self):
        enrich = make_enricher_node(None)
        jobs = [make_job("Sous Chef", "Acme Diner")]

        result = await enrich({"jobs": jobs})

        self.assertEqual(result, {"jobs": jobs})


class TestLookupWithTimeout(unittest.IsolatedAsyncioTestCase):
    async def test_timeout_counts_as_not_found(self):
        async def slow_lookup(company):
            await asyncio.sleep(1)
            return "https://too-late.com"

        self.assertIsNone(await lookup_with_timeout(slow_lookup, "Acme Diner", 0.01))

    async def test_blank_result(self):
        lookup = AsyncMock(return_value="   ")
        self.assertIsNone(await lookup_with_timeout(lookup, "Acme Diner", 1))


if __name__ == "__main__":
    unittest.main()
