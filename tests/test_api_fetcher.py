import unittest
from unittest.mock import patch

import httpx

from models.errors import ProviderError
from tools import api_fetcher
from tools.api_fetcher import (
    build_bing_query,
    fetch_jobs_from_api,
    search_bing,
    search_google_jobs,
    search_jobs_api,
    search_theirstack,
)


def ok(data):
    return {"success": True, "data": data, "error": ""}


class TestRequestRetries(unittest.TestCase):
    def setUp(self):
        self.calls = []
        real_client = httpx.Client

        def handler(request):
            self.calls.append(request)
            return self.responses.pop(0)

        self.client_patch = patch(
            "tools.api_fetcher.httpx.Client",
            side_effect=lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
        )
        self.sleep_patch = patch("tools.api_fetcher.time.sleep")
        self.retries_patch = patch.object(api_fetcher.settings, "max_retries", 3)
        self.client_patch.start()
        self.mock_sleep = self.sleep_patch.start()
        self.retries_patch.start()

    def tearDown(self):
        patch.stopall()

    def test_retries_on_server_error(self):
        self.responses = [httpx.Response(503), httpx.Response(200, json={"jobs": []})]

        result = fetch_jobs_from_api("https://api.example.com/jobs", params={"q": "chef"})

        self.assertTrue(result["success"])
        self.assertEqual(result["data"], {"jobs": []})
        self.assertEqual(len(self.calls), 2)
        self.mock_sleep.assert_called_once_with(1)

    def test_client_error_is_not_retried(self):
        self.responses = [httpx.Response(404)]

        result = fetch_jobs_from_api("https://api.example.com/jobs")

        self.assertFalse(result["success"])
        self.assertEqual(result["error"], "API returned HTTP 404")
        self.assertEqual(len(self.calls), 1)

    def test_gives_up_after_max_retries(self):
        self.responses = [httpx.Response(429), httpx.Response(429), httpx.Response(429)]

        result = fetch_jobs_from_api("https://api.example.com/jobs")

        self.assertFalse(result["success"])
        self.assertEqual(len(self.calls), 3)
        self.assertEqual(self.mock_sleep.call_count, 2)


class TestGoogleJobs(unittest.TestCase):
    @patch.object(api_fetcher.settings, "search_api_key", "")
    @patch("tools.api_fetcher.fetch_jobs_from_api")
    def test_missing_key_skips_search(self, mock_fetch):
        page = search_google_jobs("executive chef", "Austin, TX")
        self.assertEqual(page.records, [])
        self.assertIsNone(page.next_cursor)
        mock_fetch.assert_not_called()

    @patch.object(api_fetcher.settings, "search_api_key", "test-key")
    @patch("tools.api_fetcher.fetch_jobs_from_api")
    def test_page_and_cursor(self, mock_fetch):
        mock_fetch.return_value = ok({
            "jobs": [{"title": "Executive Chef"}, "not a job"],
            "pagination": {"next_page_token": "abc"},
        })

        page = search_google_jobs("executive chef", "Austin, TX", cursor="prev")

        self.assertEqual(page.records, [{"title": "Executive Chef"}])
        self.assertEqual(page.next_cursor, "abc")
        params = mock_fetch.call_args.kwargs["params"]
        self.assertEqual(params["engine"], "google_jobs")
        self.assertEqual(params["location"], "Austin, TX")
        self.assertEqual(params["next_page_token"], "prev")

    @patch.object(api_fetcher.settings, "search_api_key", "test-key")
    @patch("tools.api_fetcher.fetch_jobs_from_api")
    def test_failures_raise_provider_error(self, mock_fetch):
        mock_fetch.return_value = {"success": False, "data": {}, "error": "API returned HTTP 500"}
        with self.assertRaises(ProviderError):
            search_google_jobs("executive chef")

        mock_fetch.return_value = ok({"error": "Invalid API key"})
        with self.assertRaises(ProviderError):
            search_google_jobs("executive chef")


class TestBing(unittest.TestCase):
    def test_query_excludes_job_boards(self):
        query = build_bing_query("executive chef", "Austin, TX")
        self.assertTrue(query.startswith("executive chef Austin, TX"))
        self.assertIn('"now hiring"', query)
        self.assertIn("-site:indeed.com", query)

    @patch.object(api_fetcher.settings, "search_api_key", "test-key")
    @patch("tools.api_fetcher.fetch_jobs_from_api")
    def test_page_cursor(self, mock_fetch):
        mock_fetch.return_value = ok({"organic_results": [{"title": "Sous Chef | Acme Diner"}]})

        page = search_bing("sous chef", cursor="2")

        self.assertEqual(mock_fetch.call_args.kwargs["params"]["page"], 2)
        self.assertEqual(page.next_cursor, "3")

        mock_fetch.return_value = ok({"organic_results": []})
        self.assertIsNone(search_bing("sous chef", cursor="3").next_cursor)


class TestTheirStack(unittest.TestCase):
    @patch.object(api_fetcher.settings, "theirstack_api_key", "ts-key")
    @patch("tools.api_fetcher.fetch_jobs_from_api_post")
    def test_request_body_and_paging(self, mock_post):
        mock_post.return_value = ok({"data": [{"job_title": "Chef"}] * api_fetcher.THEIRSTACK_PAGE_SIZE})

        page = search_theirstack("executive chef, sous chef", "Austin, TX")

        body = mock_post.call_args.kwargs["json_body"]
        self.assertEqual(body["job_title_or"], ["executive chef", "sous chef"])
        self.assertEqual(body["page"], 0)
        self.assertEqual(body["job_location_pattern_or"], ["Austin, TX"])
        self.assertEqual(mock_post.call_args.kwargs["headers"], {"Authorization": "Bearer ts-key"})
        self.assertEqual(page.next_cursor, "1")

    @patch.object(api_fetcher.settings, "theirstack_api_key", "ts-key")
    @patch("tools.api_fetcher.fetch_jobs_from_api_post")
    def test_short_page_is_last(self, mock_post):
        mock_post.return_value = ok({"data": [{"job_title": "Chef"}]})
        self.assertIsNone(search_theirstack("executive chef", "United States").next_cursor)
        self.assertNotIn("job_location_pattern_or", mock_post.call_args.kwargs["json_body"])


class TestJobsSearchApi(unittest.TestCase):
    @patch.object(api_fetcher.settings, "rapidapi_key", "rapid-key")
    @patch("tools.api_fetcher.fetch_jobs_from_api_post")
    def test_offset_cursor(self, mock_post):
        mock_post.return_value = ok({"jobs": [{"title": "Chef"}] * api_fetcher.JOBS_SEARCH_PAGE_SIZE})

        page = search_jobs_api("sous chef", "Austin, TX", cursor="50")

        body = mock_post.call_args.kwargs["json_body"]
        self.assertEqual(body["offset"], 50)
        self.assertEqual(body["search_term"], "sous chef")
        self.assertEqual(page.next_cursor, "100")

    @patch.object(api_fetcher.settings, "rapidapi_key", "")
    def test_missing_key(self):
        self.assertEqual(search_jobs_api("sous chef").records, [])


if __name__ == "__main__":
    unittest.main()
