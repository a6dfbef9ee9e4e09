"""
Classifier Tool — keep/drop decisions for job postings.

Every function here is total: empty or None input returns the
not-excluded default instead of raising. A classification bug should at
worst keep a job that ought to have been dropped, never stop ingestion.
"""

import re
from functools import lru_cache
from typing import Optional

from models.job import (
    CanonicalJob,
    ExclusionReason,
    Salary,
    SalaryPeriod,
    UNKNOWN_COMPANY,
    UNKNOWN_POSITION,
    LOW_CONFIDENCE_TITLES,
)
from models.results import ClassificationResult, KEEP
from models.rules import ExclusionRuleSet
from tools.field_extractors import extract_domain


# Institutions we never ingest, matched anywhere in the company name
INDUSTRY_KEYWORDS = (
    "college",
    "university",
    "health care",
    "healthcare",
    "hospital",
    "medical center",
)

# Whole words, optionally plural: "hospital" must not match "hospitality"
_KEYWORD_PATTERNS = {
    keyword: re.compile(r"(?<![a-z0-9])" + re.escape(keyword) + r"s?(?![a-z0-9])")
    for keyword in INDUSTRY_KEYWORDS
}

HOURLY_MARKERS = (
    "per hour",
    "hourly rate",
    "hourly wage",
    "hourly pay",
    "hour rate",
    "hour wage",
    "hour pay",
    "an hour",
)
# Slash rates need an amount: "$18/hr", "18 / hour", not "Manager/HR"
_SLASH_RATE = re.compile(r"\d\s*/\s*(?:hours?|hrs?)\b")


# ── Company names ───────────────────────────────────────────────

def normalize_company_name(name) -> str:
    """Lowercase, drop apostrophes and collapse whitespace."""
    if not name or not isinstance(name, str):
        return ""
    lowered = name.lower().replace("'", "").replace("’", "")
    return " ".join(lowered.split())


_MONEY = re.compile(r"\$\s*\d")
_BARE_AMOUNT = re.compile(
    r"^\s*\d[\d,.]*\s*k?\s*(?:(?:-|–|to)\s*\$?\s*\d[\d,.]*\s*k?)?\s*$",
    re.I,
)
_THOUSANDS = re.compile(r"\b\d{1,3}(?:,\d{3})+\b|\b\d+(?:\.\d+)?k\b", re.I)
_RATE_PHRASE = re.compile(
    r"\b(?:per|an?|each)\s+(?:hour|hr|year|yr|annum|month|week|day)\b"
    r"|/\s*(?:hour|hr|h|year|yr|month|mo|week|wk|day)\b",
    re.I,
)
_SALARY_WORDS = re.compile(
    r"\b(?:hourly|annually|annual salary|salary|salaries|compensation|wage|wages|per annum|pay range)\b",
    re.I,
)
# The whole string is a pay phrase: "Competitive Salary", "Wages DOE"
_SALARY_PHRASE = re.compile(
    r"^(?:(?:competitive|negotiable|attractive|excellent|great|good|base|starting|annual|hourly)\s+)*"
    r"(?:salary|salaries|wages?|pay|compensation|pay range|hourly|annually|per annum)"
    r"(?:\s+(?:doe|negotiable|available|offered|package|range))*[\s.!]*$",
    re.I,
)


def is_salary_shaped_company_name(name) -> bool:
    """
    True when a 'company' string is really a salary fragment.

    Catches "$55,000", "60k", "55,000 - 65,000", "per hour", "$25 an hour",
    "Up to 70,000 a year" and pay phrases such as "Competitive Salary".
    A salary word on its own only counts when the whole name is a pay
    phrase or it sits next to a number, so "Wage Brewing Co" survives.
    A rate phrase like "a day" only counts next to a number or at the end
    of the string, so names like "A Day to Remember Catering" survive.
    """
    if not name or not isinstance(name, str):
        return False

    text = name.strip()
    if not text:
        return False

    if _MONEY.search(text) or _BARE_AMOUNT.match(text) or _THOUSANDS.search(text):
        return True
    if _SALARY_PHRASE.match(text):
        return True
    if _SALARY_WORDS.search(text) and any(ch.isdigit() for ch in text):
        return True

    rate = _RATE_PHRASE.search(text)
    if rate:
        has_number = any(ch.isdigit() for ch in text)
        at_end = not text[rate.end():].strip(" .!)")
        return has_number or at_end
    return False


@lru_cache(maxsize=4096)
def _bounded_pattern(term: str) -> re.Pattern:
    return re.compile(r"(?<![a-z0-9])" + re.escape(term) + r"(?![a-z0-9])")


def _term_matches(company: str, term: str, bounded: bool) -> bool:
    if not term:
        return False
    if bounded:
        return company == term or _bounded_pattern(term).search(company) is not None
    return term in company


def _first_match(company: str, terms, max_unbounded_length: int, always_bounded: bool = False) -> Optional[str]:
    for term in terms:
        needle = normalize_company_name(term)
        bounded = always_bounded or len(needle) <= max_unbounded_length
        if _term_matches(company, needle, bounded):
            return term
    return None


def classify_company(name, rules: ExclusionRuleSet) -> ClassificationResult:
    """
    Decide whether a company is excluded.

    Priority order, first match wins:
      1. college / university / healthcare keywords -> excluded_company
      2. excluded companies list                     -> excluded_company
      3. fast food chains                            -> fast_food
      4. restaurant chains                           -> restaurant_chain

    Terms no longer than match_policy.boundary_max_length only match
    whole words; longer terms match as substrings. Fast food terms are
    always matched on word boundaries unless the policy says otherwise.
    """
    if not name or not isinstance(name, str) or name == UNKNOWN_COMPANY or rules is None:
        return KEEP

    company = normalize_company_name(name)
    if not company:
        return KEEP

    for keyword in INDUSTRY_KEYWORDS:
        if _KEYWORD_PATTERNS[keyword].search(company):
            return ClassificationResult(
                excluded=True, reason=ExclusionReason.EXCLUDED_COMPANY, matched_term=keyword
            )

    policy = rules.match_policy
    checks = (
        (rules.excluded_companies, ExclusionReason.EXCLUDED_COMPANY, False),
        (rules.fast_food_chains, ExclusionReason.FAST_FOOD, policy.fast_food_always_bounded),
        (rules.restaurant_chains, ExclusionReason.RESTAURANT_CHAIN, False),
    )
    for terms, reason, always_bounded in checks:
        term = _first_match(company, terms, policy.boundary_max_length, always_bounded)
        if term:
            return ClassificationResult(excluded=True, reason=reason, matched_term=term)

    return KEEP


# ── Text markers ────────────────────────────────────────────────

def is_hourly_posting(text) -> bool:
    """True if the text carries any hourly-pay marker."""
    if not text or not isinstance(text, str):
        return False
    lowered = text.lower()
    if _SLASH_RATE.search(lowered):
        return True
    return any(marker in lowered for marker in HOURLY_MARKERS)


def _matching_domain(url, rules: ExclusionRuleSet) -> Optional[str]:
    host = extract_domain(url)
    if not host or rules is None:
        return None
    for domain in rules.excluded_domains:
        if domain in host:
            return domain
    return None


def is_excluded_domain(url, rules: ExclusionRuleSet) -> bool:
    """True if the URL's host contains a configured job-board or directory domain."""
    return _matching_domain(url, rules) is not None


def is_excluded_title(title, rules: ExclusionRuleSet) -> Optional[str]:
    """Return the excluded-title term found at the start of a word in the title, if any."""
    if not title or not isinstance(title, str) or title in LOW_CONFIDENCE_TITLES or rules is None:
        return None
    lowered = " ".join(title.lower().split())
    for term in rules.excluded_titles:
        if re.search(r"(?<![a-z0-9])" + re.escape(term), lowered):
            return term
    return None


# ── Pay ─────────────────────────────────────────────────────────

# Working periods per year
ANNUAL_FACTORS = {
    SalaryPeriod.HOURLY: 2080,
    SalaryPeriod.DAILY: 260,
    SalaryPeriod.WEEKLY: 52,
    SalaryPeriod.MONTHLY: 12,
    SalaryPeriod.YEARLY: 1,
}


def annualized_minimum(salary: Optional[Salary]) -> Optional[float]:
    """Lower bound of the pay range converted to a yearly amount."""
    if salary is None or salary.min is None:
        return None
    return salary.min * ANNUAL_FACTORS.get(salary.period, 1)


def is_below_min_salary(salary: Optional[Salary], min_salary: Optional[float]) -> bool:
    """True if a parsed salary pays less than the yearly floor. No salary, no floor: False."""
    if not min_salary:
        return False
    yearly = annualized_minimum(salary)
    return yearly is not None and yearly > 0 and yearly < min_salary


# ── Titles ──────────────────────────────────────────────────────

# Tried in order; the first delimiter present decides the split
_TITLE_SPLITS = (
    re.compile(r"\s*\|\s*"),
    re.compile(r"\s+[-–—]\s+"),
    re.compile(r"\s*@\s*"),
    re.compile(r"\s*,\s*"),
    re.compile(r"\s+(?:at|with|for)\s+", re.I),
)

_LEADING_BOILERPLATE = re.compile(r"^(?:now hiring|we(?:'re| are) hiring|hiring|job opening)\s*[:!-]?\s*", re.I)
_TRAILING_BOILERPLATE = re.compile(
    r"\s*(?:\((?:full|part)[\s-]?time\)|\((?:contract|temporary|seasonal|remote)\)"
    r"|\bnow hiring\b|\bapply now\b|\bapply today\b|\bjobs?\b|\bcareers?\b|\bopenings?\b)\s*[!.:]*$",
    re.I,
)


def extract_title(raw_title) -> str:
    """
    Pull the job title out of a search-result headline.

    "Executive Chef | Riverside Bistro" -> "Executive Chef"
    "Now Hiring: Sous Chef Jobs"         -> "Sous Chef"
    """
    if not raw_title or not isinstance(raw_title, str):
        return UNKNOWN_POSITION

    title = " ".join(raw_title.split())
    title = _LEADING_BOILERPLATE.sub("", title)

    for pattern in _TITLE_SPLITS:
        parts = pattern.split(title, maxsplit=1)
        if len(parts) == 2 and parts[0].strip():
            title = parts[0]
            break

    previous = None
    while previous != title:
        previous = title
        title = _TRAILING_BOILERPLATE.sub("", title).strip()

    title = title.strip(" -|@,:;")
    return title or UNKNOWN_POSITION


# ── Whole-job decision ──────────────────────────────────────────

def classify_job(
    job: CanonicalJob,
    rules: ExclusionRuleSet,
    check_domain: bool = False,
    include_description: bool = False,
) -> ClassificationResult:
    """
    Run every exclusion check against one normalized job.

    Order: excluded domain (web-search results only), missing identity,
    salary-shaped company name, company lists, hourly pay, pay below
    match_policy.min_salary, excluded title.

    Args:
        job: Normalized job.
        rules: Rule snapshot for this run.
        check_domain: Reject results whose apply URL is a job board or directory.
        include_description: Also scan the description for hourly markers
            (used for short web-search snippets).
    """
    if job is None or rules is None:
        return KEEP

    if check_domain:
        domain = _matching_domain(job.apply_url, rules)
        if domain:
            return ClassificationResult(
                excluded=True, reason=ExclusionReason.EXCLUDED_DOMAIN, matched_term=domain
            )

    if job.title in LOW_CONFIDENCE_TITLES and job.company == UNKNOWN_COMPANY:
        return ClassificationResult(excluded=True, reason=ExclusionReason.MISSING_IDENTITY)

    if is_salary_shaped_company_name(job.company):
        return ClassificationResult(
            excluded=True, reason=ExclusionReason.SALARY_COMPANY_NAME, matched_term=job.company
        )

    company_result = classify_company(job.company, rules)
    if company_result.excluded:
        return company_result

    hourly_text = f"{job.title} {job.salary_text}"
    if include_description:
        hourly_text = f"{hourly_text} {job.description}"
    if is_hourly_posting(hourly_text):
        return ClassificationResult(excluded=True, reason=ExclusionReason.HOURLY)
    if job.salary is not None and job.salary.period == SalaryPeriod.HOURLY:
        return ClassificationResult(
            excluded=True, reason=ExclusionReason.HOURLY, matched_term=job.salary.period.value
        )

    if is_below_min_salary(job.salary, rules.match_policy.min_salary):
        return ClassificationResult(
            excluded=True,
            reason=ExclusionReason.BELOW_MIN_SALARY,
            matched_term=f"{annualized_minimum(job.salary):.0f}",
        )

    title_term = is_excluded_title(job.title, rules)
    if title_term:
        return ClassificationResult(
            excluded=True, reason=ExclusionReason.EXCLUDED_TITLE, matched_term=title_term
        )

    return KEEP
