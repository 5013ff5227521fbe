"""
Company Name Helpers

Recruitee does not give vacancies a reliable client-company key, so the
dashboard works with free-text company names:

- normalize_company_name / are_companies_same: decide whether two names
  denote the same client ("Kader Group" vs "kader")
- extract_company_from_tags / extract_company_from_title: recover the client
  name from a vacancy's tags or title ("Monteur bij Van Wijnen")
- company_slug: stable grouping id derived from a name

Matching is a heuristic. Substring matches can produce false positives
("Holland" vs "New Holland"); that risk is accepted.
"""

import re
from typing import Iterable, List, Optional

UNKNOWN_COMPANY = "Onbekend Bedrijf"

# Client companies that are always recognised, in their canonical casing.
# Admins can extend the list at runtime (known_companies table).
KNOWN_COMPANIES: List[str] = [
    "Kader Group", "Vacumetal", "Don Bureau", "Bosch Beton", "Bouwgroep Peters",
    "GB-Meubelen", "CANNA", "Circus Gran Casino", "De Groot Bewerkingsmachines",
    "HQ Pack", "KIS Group", "Kragten", "Methorst", "Mosadex", "NIRAS", "Noverno",
    "Onestein", "Owow", "Pelgrimshof", "Pergamijn", "PPT", "Rioned", "Seerden",
    "Siebers", "SocialFind", "Taxperience", "thyssenkrupp", "Trappenfabriek Vermeulen",
    "Ugoo", "Van de Reijt Meststoffen", "Van Heek Medical", "Van Wijnen",
    "Waterschap Aa en Maas", "Waterschap de Brabantse Delta", "Waterschap De Dommel",
    "Willy Naessens",
]

# Words that almost always mean the text is a job title, not a company
JOB_TITLE_INDICATORS = (
    "monteur", "medewerker", "manager", "directeur", "assistent", "specialist",
    "consultant", "engineer", "developer", "secretaresse", "secretaris", "receptionist",
    "notaris", "kandidaat", "associate", "senior", "junior", "officer",
    "operator", "technician", "begeleider", "adviseur", "functioneelbeheerder",
    "directievoerder", "produktionsleiter", "personalreferent", "betontechnologe",
    "assembly", "representative", "qhse", "marketeer", "coördinator", "productcoördinator",
    "information security", "field services", "civiele techniek", "elektrotechniek",
    "geodesie", "infrastructuur", "flexbureau", "talentpool",
)
JOB_TITLE_MARKERS = ("(m/v)", "(eng)", "(india)", "(niveau")

RECRUITMENT_SUFFIX_RE = re.compile(
    r"\s+(linkedin\s*pipeline|pipeline|recruitment|recruiting|talent|hiring|jobs|vacatures?)$",
    re.IGNORECASE,
)
LOCATION_SUFFIX_RE = re.compile(
    r"\s+(roermond|leusden|nuland|tiel|brussel|venlo|woudenberg)$", re.IGNORECASE
)
VACANCY_COUNT_RE = re.compile(r"^\d+\s*vacatures?", re.IGNORECASE)

PREPOSITION_RE = re.compile(r"(?:\b(?:bij|bei|voor|at)|@)\s+(.+)$", re.IGNORECASE)
PREPOSITION_WORD_RE = re.compile(r"(?:\b(?:bij|bei|voor|at)\b|@)", re.IGNORECASE)
DASH_RE = re.compile(r"^(.+?)\s*-\s*(.+)$")
PIPE_RE = re.compile(r"^(.+?)\s*\|\s*(.+)$")
COMMA_RE = re.compile(r"^(.+?),\s*(.+?)(?:,\s*(.+))?$")

# Keys under which Recruitee exposes offer tags
TAG_FIELDS = ("tags", "tag_names", "labels", "label_names")


# ============================================================
# NORMALIZATION & MATCHING
# ============================================================

def normalize_company_name(name: Optional[str]) -> str:
    """
    Canonical form used for comparisons.

    Lowercase, periods and commas removed, hyphens become spaces,
    whitespace collapsed and trimmed. Idempotent.
    """
    if not name:
        return ""
    normalized = name.lower().replace(".", "").replace(",", "").replace("-", " ")
    return " ".join(normalized.split())


def are_companies_same(first: Optional[str], second: Optional[str]) -> bool:
    """True when the normalized names are equal or one contains the other."""
    a = normalize_company_name(first)
    b = normalize_company_name(second)
    if not a or not b:
        return False
    return a == b or a in b or b in a


def company_slug(name: Optional[str]) -> str:
    """Grouping id: the normalized name with non-alphanumerics replaced by '-'."""
    slug = re.sub(r"[^a-z0-9]", "-", normalize_company_name(name))
    return re.sub(r"-+", "-", slug).strip("-")


# ============================================================
# EXTRACTION
# ============================================================

def find_known_company(text: Optional[str], extra: Iterable[str] = ()) -> Optional[str]:
    """Canonical name of the first known company contained in `text`."""
    if not text:
        return None
    text_lower = text.lower()
    for company in [*KNOWN_COMPANIES, *extra]:
        if company and company.lower() in text_lower:
            return company
    return None


def clean_company_name(name: Optional[str]) -> str:
    """
    Strip recruitment suffixes ("Kragten Recruitment") and trailing
    location words ("Seerden Venlo"). Circus Gran Casino keeps its location.
    """
    if not name:
        return ""
    cleaned = RECRUITMENT_SUFFIX_RE.sub("", name.strip())
    if "circus gran casino" not in cleaned.lower():
        cleaned = LOCATION_SUFFIX_RE.sub("", cleaned)
    return " ".join(cleaned.split())


def _strip_recruitment_suffix(name: str) -> str:
    return RECRUITMENT_SUFFIX_RE.sub("", name).strip()


def is_likely_job_title(text: Optional[str]) -> bool:
    if not text or len(text) < 2:
        return False
    text_lower = text.lower().strip()
    if any(word in text_lower for word in JOB_TITLE_INDICATORS):
        return True
    if any(marker in text_lower for marker in JOB_TITLE_MARKERS):
        return True
    return bool(VACANCY_COUNT_RE.match(text))


def extract_company_from_tags(tags: Optional[list]) -> Optional[str]:
    """
    Company name from the first usable offer tag.

    Tags may be plain strings or objects with a name/label/title key.
    """
    if not isinstance(tags, list):
        return None

    names = []
    for tag in tags:
        if isinstance(tag, str):
            name = tag.strip()
        elif isinstance(tag, dict):
            name = tag.get("name") or tag.get("label") or tag.get("title") or ""
            name = name.strip() if isinstance(name, str) else ""
        else:
            name = ""
        if name:
            names.append(name)

    if not names:
        return None

    company = clean_company_name(names[0])
    if 2 <= len(company) < 100:
        return company
    return None


def extract_company_from_title(title: Optional[str], extra_known: Iterable[str] = ()) -> str:
    """
    Recover the client company from a vacancy title.

    Recognised shapes, tried in order:
        "Notaris bij Taxperience"              -> "Taxperience"
        "Allround Secretaresse (M/V) - Owow"   -> "Owow"
        "Seerden - Assembly operator"          -> "Seerden"
        "Security Officer | Kader Group"       -> "Kader Group"
        "Senior Marketeer, Methorst, Rosmalen" -> "Methorst"
    Falls back to the whole title, then its last word(s), then
    "Onbekend Bedrijf".
    """
    if not title:
        return UNKNOWN_COMPANY
    extra_known = list(extra_known)

    known = find_known_company(title, extra_known)
    if known:
        return clean_company_name(known)

    # "... bij / bei / voor / at / @ Company"
    match = PREPOSITION_RE.search(title)
    if match:
        candidate = re.sub(r"[.,;:]+$", "", match.group(1).strip()).strip()
        candidate = _strip_recruitment_suffix(candidate)
        known = find_known_company(candidate, extra_known)
        if known:
            return clean_company_name(known)
        if 2 <= len(candidate) < 100 and not is_likely_job_title(candidate):
            return clean_company_name(candidate)

    # "Job Title - Company" or "Company - Job Title"
    match = DASH_RE.match(title)
    if match:
        first, second = match.group(1).strip(), match.group(2).strip()
        known = find_known_company(first, extra_known) or find_known_company(second, extra_known)
        if known:
            return clean_company_name(known)

        first_is_title = is_likely_job_title(first)
        second_is_title = is_likely_job_title(second)
        if first_is_title and not second_is_title and 2 <= len(second) < 80:
            return clean_company_name(_strip_recruitment_suffix(second))
        if second_is_title and not first_is_title and 2 <= len(first) < 80:
            return clean_company_name(_strip_recruitment_suffix(first))
        if not first_is_title and not second_is_title:
            if first[:1].isupper() and 2 <= len(first) < 50:
                return clean_company_name(_strip_recruitment_suffix(first))
            if 2 <= len(second) < 80:
                return clean_company_name(_strip_recruitment_suffix(second))

    # "Job Title | Company"
    match = PIPE_RE.match(title)
    if match:
        candidate = match.group(2).strip()
        known = find_known_company(candidate, extra_known)
        if known:
            return clean_company_name(known)
        if not is_likely_job_title(candidate) and 2 <= len(candidate) < 80:
            return clean_company_name(_strip_recruitment_suffix(candidate))

    # "Job Title, Company, Location"; short second parts are usually a city
    match = COMMA_RE.match(title)
    if match:
        candidate = match.group(2).strip()
        known = find_known_company(candidate, extra_known)
        if known:
            return clean_company_name(known)
        if not is_likely_job_title(candidate) and 5 <= len(candidate) < 80:
            return clean_company_name(_strip_recruitment_suffix(candidate))

    # A title without separators may be the company name itself
    if "-" not in title and "|" not in title and not PREPOSITION_WORD_RE.search(title):
        if not is_likely_job_title(title) and 2 < len(title) < 100:
            return clean_company_name(title)

    words = title.split()
    if len(words) > 1:
        last_word = words[-1]
        if 2 <= len(last_word) < 50 and not is_likely_job_title(last_word):
            return clean_company_name(last_word)
        last_two = " ".join(words[-2:])
        if 3 <= len(last_two) < 60 and not is_likely_job_title(last_two):
            return clean_company_name(last_two)

    return UNKNOWN_COMPANY
