import os
import unittest

from config.settings import config_dir
from models.job import CanonicalJob, ExclusionReason, Salary, SalaryPeriod, UNKNOWN_POSITION, UNKNOWN_COMPANY
from models.rules import ExclusionRuleSet, MatchPolicy
from tools.classifier import (
    classify_company,
    classify_job,
    extract_title,
    is_excluded_domain,
    is_excluded_title,
    is_hourly_posting,
    is_salary_shaped_company_name,
    normalize_company_name,
)
from tools.file_handler import load_exclusion_rules


RULES = load_exclusion_rules(os.path.join(config_dir, "exclusion_rules.yaml"))


class TestClassifyCompany(unittest.TestCase):
    def test_fast_food_exact_match(self):
        result = classify_company("McDonald's", RULES)
        self.assertTrue(result.excluded)
        self.assertEqual(result.reason, ExclusionReason.FAST_FOOD)
        self.assertEqual(result.matched_term, "mcdonald's")

    def test_every_fast_food_entry_is_fast_food(self):
        self.assertTrue(RULES.fast_food_chains)
        for term in RULES.fast_food_chains:
            with self.subTest(term=term):
                result = classify_company(term, RULES)
                self.assertEqual(result.reason, ExclusionReason.FAST_FOOD)

    def test_fast_food_matches_inside_franchise_name(self):
        result = classify_company("McDonald's of Downtown Austin", RULES)
        self.assertEqual(result.reason, ExclusionReason.FAST_FOOD)

    def test_similar_name_does_not_match_fast_food(self):
        result = classify_company("Wendy Johnson Consulting", RULES)
        self.assertFalse(result.excluded)
        self.assertEqual(result.reason, ExclusionReason.NONE)

    def test_restaurant_chain_substring(self):
        result = classify_company("Sunrise Waffle House Partners", RULES)
        self.assertTrue(result.excluded)
        self.assertEqual(result.reason, ExclusionReason.RESTAURANT_CHAIN)
        self.assertEqual(result.matched_term, "waffle house")

    def test_excluded_company_list(self):
        result = classify_company("Marriott International", RULES)
        self.assertEqual(result.reason, ExclusionReason.EXCLUDED_COMPANY)

    def test_excluded_company_beats_restaurant_chain(self):
        result = classify_company("Sheraton Waffle House Partners", RULES)
        self.assertEqual(result.reason, ExclusionReason.EXCLUDED_COMPANY)
        self.assertEqual(result.matched_term, "sheraton")

    def test_institution_keywords(self):
        for name in ("State University Dining", "Riverside Hospital", "Lakeview Healthcare Group",
                     "Valley Medical Center", "Hudson Community Colleges"):
            with self.subTest(name=name):
                result = classify_company(name, RULES)
                self.assertEqual(result.reason, ExclusionReason.EXCLUDED_COMPANY)

    def test_hospitality_is_not_hospital(self):
        result = classify_company("Blue Door Hospitality", RULES)
        self.assertFalse(result.excluded)

    def test_short_term_needs_word_boundary(self):
        # "shell" is listed; "Shellfish Shack" is a seafood restaurant
        self.assertFalse(classify_company("Shellfish Shack", RULES).excluded)
        self.assertTrue(classify_company("Shell Gas Station #42", RULES).excluded)

    def test_long_term_matches_as_substring(self):
        result = classify_company("The Olive Garden Italian Kitchen", RULES)
        self.assertEqual(result.reason, ExclusionReason.RESTAURANT_CHAIN)

    def test_apostrophes_and_case_are_ignored(self):
        result = classify_company("MCDONALDS", RULES)
        self.assertEqual(result.reason, ExclusionReason.FAST_FOOD)

    def test_boundary_threshold_is_configurable(self):
        rules = ExclusionRuleSet(excluded_companies=["giant"], match_policy=MatchPolicy(boundary_max_length=0))
        self.assertTrue(classify_company("Giantstep Catering", rules).excluded)

        bounded = rules.with_policy(MatchPolicy(boundary_max_length=8))
        self.assertFalse(classify_company("Giantstep Catering", bounded).excluded)

    def test_total_on_empty_input(self):
        for name in (None, "", "   ", 42, UNKNOWN_COMPANY):
            with self.subTest(name=name):
                self.assertFalse(classify_company(name, RULES).excluded)
        self.assertFalse(classify_company("McDonald's", None).excluded)


class TestSalaryShapedNames(unittest.TestCase):
    def test_salary_fragments(self):
        for name in ("$55,000", "60k", "55,000 - 65,000", "per hour", "$25 an hour",
                     "Up to 70,000 a year", "Competitive Salary", "$18/hr"):
            with self.subTest(name=name):
                self.assertTrue(is_salary_shaped_company_name(name))

    def test_real_company_names(self):
        for name in ("Riverside Bistro", "A Day to Remember Catering", "Acme Diner",
                     "Per Se", "Eleven Madison Park", "The Hourly Oyster House",
                     "Wage Brewing Co", "Salary & Sage Kitchen", ""):
            with self.subTest(name=name):
                self.assertFalse(is_salary_shaped_company_name(name))

    def test_pay_phrases(self):
        for name in ("Salary", "Competitive Pay", "Wages DOE", "Salary 60000"):
            with self.subTest(name=name):
                self.assertTrue(is_salary_shaped_company_name(name))

    def test_none_is_not_salary(self):
        self.assertFalse(is_salary_shaped_company_name(None))


class TestTextChecks(unittest.TestCase):
    def test_hourly_markers(self):
        self.assertTrue(is_hourly_posting("Line Cook - $18 per hour"))
        self.assertTrue(is_hourly_posting("Sous Chef $24/hr DOE"))
        self.assertTrue(is_hourly_posting("Competitive HOURLY RATE"))
        self.assertFalse(is_hourly_posting("Executive Chef $85,000/year"))
        self.assertFalse(is_hourly_posting(None))

    def test_slash_hr_needs_an_amount(self):
        self.assertTrue(is_hourly_posting("Line Cook $18.50 / hour"))
        self.assertFalse(is_hourly_posting("Kitchen Manager/HR Coordinator"))
        self.assertFalse(is_hourly_posting("F&B Director/HR Liaison"))

    def test_excluded_domain(self):
        self.assertTrue(is_excluded_domain("https://www.indeed.com/viewjob?jk=1", RULES))
        self.assertTrue(is_excluded_domain("https://newyork.craigslist.org/fbh/123.html", RULES))
        self.assertFalse(is_excluded_domain("https://riversidebistro.com/careers", RULES))
        self.assertFalse(is_excluded_domain("not a url", RULES))
        self.assertFalse(is_excluded_domain(None, RULES))

    def test_excluded_title(self):
        self.assertEqual(is_excluded_title("Night Auditor", RULES), "night auditor")
        self.assertEqual(is_excluded_title("Banquet Server", RULES), "server")
        self.assertIsNone(is_excluded_title("Executive Chef", RULES))
        self.assertIsNone(is_excluded_title(UNKNOWN_POSITION, RULES))

    def test_normalize_company_name(self):
        self.assertEqual(normalize_company_name("  Papa  John's "), "papa johns")
        self.assertEqual(normalize_company_name(None), "")


class TestExtractTitle(unittest.TestCase):
    def test_delimiters(self):
        cases = {
            "Executive Chef | Riverside Bistro": "Executive Chef",
            "Sous Chef - Acme Diner - Austin, TX": "Sous Chef",
            "Pastry Chef @ Sweet Things": "Pastry Chef",
            "Chef de Cuisine, The Grand": "Chef de Cuisine",
            "Head Chef at Riverside Bistro": "Head Chef",
        }
        for raw, expected in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(extract_title(raw), expected)

    def test_hyphenated_title_survives(self):
        self.assertEqual(extract_title("Sous-Chef | Acme Diner"), "Sous-Chef")

    def test_boilerplate_is_stripped(self):
        self.assertEqual(extract_title("Now Hiring: Sous Chef Jobs"), "Sous Chef")
        self.assertEqual(extract_title("Executive Chef (Full-Time) Apply Now"), "Executive Chef")

    def test_empty_input(self):
        self.assertEqual(extract_title(""), UNKNOWN_POSITION)
        self.assertEqual(extract_title(None), UNKNOWN_POSITION)
        self.assertEqual(extract_title("Jobs"), UNKNOWN_POSITION)


class TestClassifyJob(unittest.TestCase):
    def test_kept_job(self):
        job = CanonicalJob(title="Executive Chef", company="Riverside Bistro", salary_text="$85,000 a year")
        self.assertFalse(classify_job(job, RULES).excluded)

    def test_company_checked_before_title(self):
        job = CanonicalJob(title="Line Cook", company="McDonald's")
        self.assertEqual(classify_job(job, RULES).reason, ExclusionReason.FAST_FOOD)

    def test_salary_shaped_company(self):
        job = CanonicalJob(title="Executive Chef", company="$65,000")
        result = classify_job(job, RULES)
        self.assertEqual(result.reason, ExclusionReason.SALARY_COMPANY_NAME)

    def test_hourly_from_salary_text(self):
        job = CanonicalJob(title="Sous Chef", company="Acme Diner", salary_text="$22 per hour")
        self.assertEqual(classify_job(job, RULES).reason, ExclusionReason.HOURLY)

    def test_hourly_from_parsed_period(self):
        job = CanonicalJob(
            title="Sous Chef",
            company="Acme Diner",
            salary=Salary(min=22, max=26, period=SalaryPeriod.HOURLY),
        )
        self.assertEqual(classify_job(job, RULES).reason, ExclusionReason.HOURLY)

    def test_description_only_checked_when_asked(self):
        job = CanonicalJob(title="Sous Chef", company="Acme Diner", description="Pay is $20/hr plus tips")
        self.assertFalse(classify_job(job, RULES).excluded)
        self.assertEqual(
            classify_job(job, RULES, include_description=True).reason,
            ExclusionReason.HOURLY,
        )

    def test_default_min_salary(self):
        self.assertEqual(RULES.match_policy.min_salary, 55000)

    def test_below_min_salary(self):
        job = CanonicalJob(
            title="Sous Chef",
            company="Acme Diner",
            salary=Salary(min=42000, max=60000, period=SalaryPeriod.YEARLY),
        )
        result = classify_job(job, RULES)
        self.assertEqual(result.reason, ExclusionReason.BELOW_MIN_SALARY)
        self.assertEqual(result.matched_term, "42000")

    def test_min_salary_compares_yearly_amounts(self):
        monthly = CanonicalJob(
            title="Sous Chef",
            company="Acme Diner",
            salary=Salary(min=5000, max=6000, period=SalaryPeriod.MONTHLY),
        )
        self.assertFalse(classify_job(monthly, RULES).excluded)

        weekly = CanonicalJob(
            title="Sous Chef",
            company="Acme Diner",
            salary=Salary(min=900, period=SalaryPeriod.WEEKLY),
        )
        self.assertEqual(classify_job(weekly, RULES).reason, ExclusionReason.BELOW_MIN_SALARY)

    def test_min_salary_needs_a_parsed_salary_and_a_floor(self):
        no_salary = CanonicalJob(title="Sous Chef", company="Acme Diner", salary_text="Competitive")
        self.assertFalse(classify_job(no_salary, RULES).excluded)

        low = CanonicalJob(title="Sous Chef", company="Acme Diner", salary=Salary(min=40000))
        no_floor = RULES.with_policy(RULES.match_policy.model_copy(update={"min_salary": None}))
        self.assertFalse(classify_job(low, no_floor).excluded)

    def test_domain_only_checked_when_asked(self):
        job = CanonicalJob(title="Sous Chef", company="Acme Diner", apply_url="https://www.indeed.com/job/1")
        self.assertFalse(classify_job(job, RULES).excluded)
        result = classify_job(job, RULES, check_domain=True)
        self.assertEqual(result.reason, ExclusionReason.EXCLUDED_DOMAIN)
        self.assertEqual(result.matched_term, "indeed.com")

    def test_missing_identity(self):
        job = CanonicalJob(title=UNKNOWN_POSITION, company=UNKNOWN_COMPANY)
        self.assertEqual(classify_job(job, RULES).reason, ExclusionReason.MISSING_IDENTITY)

    def test_excluded_title(self):
        job = CanonicalJob(title="Night Auditor", company="Riverside Bistro")
        result = classify_job(job, RULES)
        self.assertEqual(result.reason, ExclusionReason.EXCLUDED_TITLE)

    def test_none_job(self):
        self.assertFalse(classify_job(None, RULES).excluded)


if __name__ == "__main__":
    unittest.main()
