"""
Field Extractors — best-effort parsing of salary, company, location, domain
and skill information from free-text job fields.

Nothing in this module raises on bad input. Unparseable values come back as
None (or the caller's fallback) so a single odd record never stops a batch.
"""

import re
from typing import Iterable, Optional
from urllib.parse import urlparse

from models.job import Salary, SalaryPeriod, UNKNOWN_LOCATION


# ── Salary ──────────────────────────────────────────────────────

# A money amount: digits with optional thousands separators, decimals and a k suffix
_NUM = r"\d[\d,]*(?:\.\d+)?(?:\s?k\b)?"

_RANGE_DASH = re.compile(rf"\$\s*(?P<low>{_NUM})\s*[-–—]\s*\$?\s*(?P<high>{_NUM})", re.I)
_RANGE_TO = re.compile(rf"\$\s*(?P<low>{_NUM})\s+to\s+\$?\s*(?P<high>{_NUM})", re.I)
_SINGLE = re.compile(rf"\$\s*(?P<amount>{_NUM})", re.I)

# Unit-of-time suffix directly after an amount ("/hr", "per hour", "an hour", "annually")
_UNIT_SUFFIX = re.compile(
    r"\s*(?:/\s*|per\s+|an?\s+|each\s+)?"
    r"(?P<unit>hours?|hrs?|hourly|days?|daily|weeks?|wk|weekly|months?|mo|monthly"
    r"|years?|yrs?|yearly|annum|annual|annually)\b",
    re.I,
)

_PERIODS = {
    "hour": SalaryPeriod.HOURLY,
    "hours": SalaryPeriod.HOURLY,
    "hr": SalaryPeriod.HOURLY,
    "hrs": SalaryPeriod.HOURLY,
    "hourly": SalaryPeriod.HOURLY,
    "day": SalaryPeriod.DAILY,
    "days": SalaryPeriod.DAILY,
    "daily": SalaryPeriod.DAILY,
    "week": SalaryPeriod.WEEKLY,
    "weeks": SalaryPeriod.WEEKLY,
    "wk": SalaryPeriod.WEEKLY,
    "weekly": SalaryPeriod.WEEKLY,
    "month": SalaryPeriod.MONTHLY,
    "months": SalaryPeriod.MONTHLY,
    "mo": SalaryPeriod.MONTHLY,
    "monthly": SalaryPeriod.MONTHLY,
    "year": SalaryPeriod.YEARLY,
    "years": SalaryPeriod.YEARLY,
    "yr": SalaryPeriod.YEARLY,
    "yrs": SalaryPeriod.YEARLY,
    "yearly": SalaryPeriod.YEARLY,
    "annum": SalaryPeriod.YEARLY,
    "annual": SalaryPeriod.YEARLY,
    "annually": SalaryPeriod.YEARLY,
}


def _to_number(value: str) -> Optional[float]:
    """Parse '55,000', '60k' or '27.50' into a float."""
    cleaned = value.strip().lower().replace(",", "").replace(" ", "")
    multiplier = 1
    if cleaned.endswith("k"):
        multiplier = 1000
        cleaned = cleaned[:-1]
    try:
        return float(cleaned) * multiplier
    except ValueError:
        return None


def period_from_text(text) -> Optional[SalaryPeriod]:
    """Map a unit word such as 'hour', 'yr' or 'MONTHLY' to a SalaryPeriod."""
    if not text:
        return None
    tokens = re.sub(r"[^a-z]", " ", str(text).lower()).split()
    for token in tokens:
        if token in _PERIODS:
            return _PERIODS[token]
    return None


def _period_after(text: str, position: int) -> Optional[SalaryPeriod]:
    match = _UNIT_SUFFIX.match(text, position)
    if match:
        return _PERIODS.get(match.group("unit").lower())
    return None


def parse_salary(text) -> Optional[Salary]:
    """
    Parse a free-text salary string.

    Rules are tried in order and the first match wins:
      1. a dollar range with a dash:  "$50,000 - $70,000"
      2. a dollar range with "to":    "$50,000 to $70,000"
      3. a single amount with a unit: "$25/hour", "$60,000 a year"
      4. any single dollar amount:    "Salary: $55,000", "$55k"

    A unit suffix (also after a range) sets the period; yearly otherwise.

    Returns:
        Salary, or None when nothing parseable is found.
    """
    if not text or not isinstance(text, str):
        return None

    for pattern in (_RANGE_DASH, _RANGE_TO):
        match = pattern.search(text)
        if match:
            low = _to_number(match.group("low"))
            high = _to_number(match.group("high"))
            if low is not None and high is not None:
                period = _period_after(text, match.end()) or SalaryPeriod.YEARLY
                return Salary(min=low, max=high, period=period)

    singles = list(_SINGLE.finditer(text))

    for match in singles:
        period = _period_after(text, match.end())
        amount = _to_number(match.group("amount"))
        if period and amount is not None:
            return Salary(min=amount, max=amount, period=period)

    for match in singles:
        amount = _to_number(match.group("amount"))
        if amount is not None:
            return Salary(min=amount, max=amount, period=SalaryPeriod.YEARLY)

    return None


def salary_from_numbers(low, high, period_text=None) -> Optional[Salary]:
    """Build a Salary from numeric provider fields, ignoring non-numeric values."""
    def as_float(value):
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            return _to_number(value.replace("$", "")) if value.strip() else None
        return None

    low, high = as_float(low), as_float(high)
    if low is None and high is None:
        return None
    return Salary(min=low, max=high, period=period_from_text(period_text) or SalaryPeriod.YEARLY)


# ── Domain / host ───────────────────────────────────────────────

_HOST = re.compile(r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?(?:\.[a-z0-9](?:[a-z0-9-]*[a-z0-9])?)+$")


def extract_domain(url) -> Optional[str]:
    """
    Return the bare host of a URL: scheme and leading 'www.' removed.

    A scheme-less value is treated as http. Malformed input gives None.
    """
    if not url or not isinstance(url, str):
        return None

    candidate = url.strip()
    if not candidate:
        return None
    if "://" not in candidate:
        candidate = f"http://{candidate}"

    try:
        host = urlparse(candidate).hostname
    except ValueError:
        return None

    if not host:
        return None
    host = host.lower().rstrip(".")
    if host.startswith("www."):
        host = host[4:]
    if not _HOST.match(host):
        return None
    return host


def company_from_host(value) -> Optional[str]:
    """
    Derive a company label from a site name, domain or URL host.

    'www.riversidebistro.com' -> 'riversidebistro'
    """
    if not value or not isinstance(value, str):
        return None

    label = value.strip()
    if "://" in label:
        label = extract_domain(label) or ""
    label = re.sub(r"^www\.", "", label, flags=re.I)
    label = re.sub(r"\.(?:com|org|net)$", "", label, flags=re.I).strip()

    if len(label) > 2:
        return label
    return None


# ── Company fallback ────────────────────────────────────────────

_TITLE_DELIMITERS = (" - ", " | ", " @ ", ", ")

# "Join our team at Riverside Bistro." -> "Riverside Bistro"
# Lookahead so overlapping candidates are all visited
_DESCRIPTION_COMPANY = re.compile(
    r"(?=\b(?:at|with|for|join)\s+([\w\s&']+?)(?:\s+in\b|\.|!|,))",
    re.I,
)

_MAX_COMPANY_WORDS = 6


def _company_from_title(title: str, is_rejected) -> Optional[str]:
    positions = [(title.find(d), d) for d in _TITLE_DELIMITERS if d in title]
    if not positions:
        return None
    position, _ = min(positions)
    candidate = title[:position].strip()
    if candidate and not is_rejected(candidate):
        return candidate
    return None


def _company_from_description(description: str, is_rejected) -> Optional[str]:
    for match in _DESCRIPTION_COMPANY.finditer(description):
        candidate = " ".join(match.group(1).split())
        if not candidate or not candidate[0].isupper():
            continue
        if len(candidate.split()) > _MAX_COMPANY_WORDS:
            continue
        if is_rejected(candidate):
            continue
        return candidate
    return None


def extract_company_fallback(title, description, is_rejected=None) -> Optional[str]:
    """
    Guess a company name when the provider did not supply one.

    Tries the text before the first delimiter in the title, then an
    "at/with/for/join <Name>" phrase in the description. Candidates for
    which is_rejected(candidate) is true (salary fragments) are skipped.
    """
    is_rejected = is_rejected or (lambda _candidate: False)

    if title and isinstance(title, str):
        company = _company_from_title(title, is_rejected)
        if company:
            return company

    if description and isinstance(description, str):
        return _company_from_description(description, is_rejected)

    return None


# ── Location ────────────────────────────────────────────────────

_CITY_STATE = re.compile(r"\b([A-Z][a-zA-Z.'-]+(?:\s[A-Z][a-zA-Z.'-]+){0,3},\s*[A-Z]{2})\b")

MAJOR_CITIES = (
    "new york", "los angeles", "chicago", "houston", "phoenix", "philadelphia",
    "san antonio", "san diego", "dallas", "san jose", "austin", "jacksonville",
    "fort worth", "columbus", "charlotte", "san francisco", "indianapolis",
    "seattle", "denver", "washington", "boston", "el paso", "detroit",
    "nashville", "portland", "memphis", "oklahoma city", "las vegas",
    "louisville", "baltimore", "milwaukee", "albuquerque", "tucson", "fresno",
    "sacramento", "kansas city", "atlanta", "long beach", "colorado springs",
    "raleigh", "miami", "virginia beach", "omaha", "oakland", "minneapolis",
    "tulsa", "new orleans", "cleveland", "tampa", "honolulu", "anaheim",
    "pittsburgh", "cincinnati", "st. louis", "orlando", "salt lake city",
    "charleston", "savannah", "napa", "scottsdale", "santa barbara",
)

_CITY_PATTERN = re.compile(
    r"\b(" + "|".join(re.escape(city) for city in MAJOR_CITIES) + r")\b",
    re.I,
)


def extract_location(text, fallback: str = "") -> str:
    """Find a 'City, ST' pair or a known city name; otherwise use the fallback."""
    if text and isinstance(text, str):
        match = _CITY_STATE.search(text)
        if match:
            return match.group(1)
        match = _CITY_PATTERN.search(text)
        if match:
            return match.group(1).title()
    return fallback or UNKNOWN_LOCATION


# ── Skills & experience ─────────────────────────────────────────

CULINARY_SKILLS = (
    "cooking", "baking", "grilling", "sautéing", "knife skills",
    "food preparation", "menu planning", "recipe development",
    "food safety", "sanitation", "inventory management", "kitchen management",
    "plating", "garnishing", "culinary arts", "pastry", "butchery",
    "sous vide", "food presentation", "catering", "banquet",
)


def extract_skills(description, qualifications: Iterable[str] = ()) -> list[str]:
    """Culinary skills mentioned in the description or qualification items, in vocabulary order."""
    texts = [description] if isinstance(description, str) else []
    texts.extend(item for item in qualifications or () if isinstance(item, str))
    haystack = " ".join(texts).lower()
    if not haystack:
        return []
    return [skill for skill in CULINARY_SKILLS if skill in haystack]


_EXECUTIVE_MARKERS = ("executive chef", "head chef", "chef de cuisine", "culinary director")
_SENIOR_MARKERS = ("senior", "sr.", "lead", "sous chef")
_ENTRY_MARKERS = ("junior", "jr.", "entry", "trainee", "apprentice", "commis")


def infer_experience_level(title) -> str:
    """executive, senior, entry or mid (the default) from the job title."""
    lowered = (title or "").lower() if isinstance(title, str) else ""
    if any(marker in lowered for marker in _EXECUTIVE_MARKERS):
        return "executive"
    if any(marker in lowered for marker in _SENIOR_MARKERS):
        return "senior"
    if any(marker in lowered for marker in _ENTRY_MARKERS):
        return "entry"
    return "mid"
