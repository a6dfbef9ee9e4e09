import unittest

from models.job import SalaryPeriod, UNKNOWN_LOCATION
from tools.classifier import is_salary_shaped_company_name
from tools.field_extractors import (
    company_from_host,
    extract_company_fallback,
    extract_domain,
    extract_location,
    extract_skills,
    infer_experience_level,
    parse_salary,
    period_from_text,
    salary_from_numbers,
)
from tools.text_extractor import clean_description


class TestParseSalary(unittest.TestCase):
    def test_dash_range(self):
        salary = parse_salary("$50,000 - $70,000")
        self.assertEqual(salary.min, 50000)
        self.assertEqual(salary.max, 70000)
        self.assertEqual(salary.period, SalaryPeriod.YEARLY)
        self.assertEqual(salary.currency, "USD")

    def test_hourly_single_amount(self):
        salary = parse_salary("$25/hour")
        self.assertEqual(salary.min, 25)
        self.assertEqual(salary.max, 25)
        self.assertEqual(salary.period, SalaryPeriod.HOURLY)

    def test_to_range_with_k_suffix(self):
        salary = parse_salary("Pay: $55k to $65k per year")
        self.assertEqual((salary.min, salary.max), (55000, 65000))
        self.assertEqual(salary.period, SalaryPeriod.YEARLY)

    def test_range_with_unit(self):
        salary = parse_salary("$18.50 - $22 an hour")
        self.assertEqual((salary.min, salary.max), (18.5, 22))
        self.assertEqual(salary.period, SalaryPeriod.HOURLY)

    def test_amount_with_unit_preferred_over_bare_amount(self):
        salary = parse_salary("Sign-on bonus $1,000. Base $4,500 monthly")
        self.assertEqual(salary.min, 4500)
        self.assertEqual(salary.period, SalaryPeriod.MONTHLY)

    def test_bare_amount_defaults_to_yearly(self):
        salary = parse_salary("Salary: $62,000")
        self.assertEqual(salary.min, 62000)
        self.assertEqual(salary.period, SalaryPeriod.YEARLY)

    def test_unparseable(self):
        for text in (None, "", "Competitive pay", "DOE", 50000):
            with self.subTest(text=text):
                self.assertIsNone(parse_salary(text))

    def test_salary_from_numbers(self):
        salary = salary_from_numbers(70000, 50000, "yearly")
        self.assertEqual((salary.min, salary.max), (50000, 70000))

        single = salary_from_numbers(None, "28", "HOURLY")
        self.assertEqual((single.min, single.max), (28, 28))
        self.assertEqual(single.period, SalaryPeriod.HOURLY)

        self.assertIsNone(salary_from_numbers(None, None))
        self.assertIsNone(salary_from_numbers("n/a", True))

    def test_period_from_text(self):
        self.assertEqual(period_from_text("hr"), SalaryPeriod.HOURLY)
        self.assertEqual(period_from_text("MONTHLY"), SalaryPeriod.MONTHLY)
        self.assertIsNone(period_from_text("fortnight"))


class TestDomains(unittest.TestCase):
    def test_extract_domain(self):
        self.assertEqual(extract_domain("https://www.RiversideBistro.com/careers?x=1"), "riversidebistro.com")
        self.assertEqual(extract_domain("acmediner.com"), "acmediner.com")
        self.assertEqual(extract_domain("http://jobs.acmediner.com"), "jobs.acmediner.com")

    def test_malformed_url(self):
        for url in (None, "", "   ", "not a url", "http://", "https://localhost"):
            with self.subTest(url=url):
                self.assertIsNone(extract_domain(url))

    def test_company_from_host(self):
        self.assertEqual(company_from_host("www.riversidebistro.com"), "riversidebistro")
        self.assertEqual(company_from_host("https://www.acmediner.net/jobs"), "acmediner")
        self.assertEqual(company_from_host("Riverside Bistro"), "Riverside Bistro")
        self.assertIsNone(company_from_host("ab.com"))
        self.assertIsNone(company_from_host(None))


class TestCompanyFallback(unittest.TestCase):
    def test_from_title_prefix(self):
        self.assertEqual(
            extract_company_fallback("Riverside Bistro - Executive Chef", ""),
            "Riverside Bistro",
        )

    def test_from_description(self):
        company = extract_company_fallback(
            "Executive Chef",
            "Join our team at Riverside Bistro in Austin. Great benefits.",
        )
        self.assertEqual(company, "Riverside Bistro")

    def test_salary_shaped_candidates_are_skipped(self):
        company = extract_company_fallback(
            "$65,000 - Executive Chef",
            "Lead the kitchen at Acme Diner. Apply today!",
            is_rejected=is_salary_shaped_company_name,
        )
        self.assertEqual(company, "Acme Diner")

    def test_lowercase_phrase_is_not_a_company(self):
        self.assertIsNone(extract_company_fallback("Sous Chef", "Work with our amazing team, every day."))

    def test_nothing_found(self):
        self.assertIsNone(extract_company_fallback(None, None))


class TestLocationAndSkills(unittest.TestCase):
    def test_city_state(self):
        self.assertEqual(extract_location("Executive Chef - Austin, TX - Full time"), "Austin, TX")

    def test_major_city(self):
        self.assertEqual(extract_location("Great role in downtown chicago"), "Chicago")

    def test_fallback(self):
        self.assertEqual(extract_location("Executive Chef", "Denver, CO"), "Denver, CO")
        self.assertEqual(extract_location(None), UNKNOWN_LOCATION)

    def test_extract_skills(self):
        skills = extract_skills(
            "Menu planning, inventory management and food safety.",
            ["ServSafe certification", "Experience with sous vide"],
        )
        self.assertEqual(skills, ["menu planning", "food safety", "inventory management", "sous vide"])
        self.assertEqual(extract_skills(None), [])

    def test_experience_level(self):
        self.assertEqual(infer_experience_level("Executive Chef"), "executive")
        self.assertEqual(infer_experience_level("Sous Chef"), "senior")
        self.assertEqual(infer_experience_level("Junior Pastry Cook"), "entry")
        self.assertEqual(infer_experience_level("Pastry Chef"), "mid")
        self.assertEqual(infer_experience_level(None), "mid")


class TestCleanDescription(unittest.TestCase):
    def test_html_is_stripped(self):
        html = "<div><p>Lead our kitchen.</p><script>track()</script><ul><li>Menu planning</li></ul></div>"
        self.assertEqual(clean_description(html), "Lead our kitchen.\nMenu planning")

    def test_plain_text_whitespace(self):
        self.assertEqual(clean_description("  Lead   our\t kitchen.\n\n\nGreat pay. "), "Lead our kitchen.\nGreat pay.")

    def test_truncation(self):
        self.assertEqual(clean_description("a" * 20, max_length=10), "a" * 10 + "...")
        self.assertEqual(clean_description(None), "")


if __name__ == "__main__":
    unittest.main()
