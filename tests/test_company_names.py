"""
Company name normalization, fuzzy matching and extraction from titles/tags.
"""

import pytest

from recruitops.services.company_names import (
    UNKNOWN_COMPANY, are_companies_same, clean_company_name, company_slug,
    extract_company_from_tags, extract_company_from_title, is_likely_job_title,
    normalize_company_name,
)


def test_normalize_company_name():
    assert normalize_company_name("  Kader-Group  B.V. ") == "kader group bv"
    assert normalize_company_name(None) == ""


def test_normalize_is_idempotent():
    for name in ["Van Heek Medical", "GB-Meubelen", "Waterschap Aa en Maas, Den Bosch."]:
        once = normalize_company_name(name)
        assert normalize_company_name(once) == once


@pytest.mark.parametrize("first, second, same", [
    ("Kader Group", "kader", True),
    ("Kader Group", "KADER GROUP", True),
    ("GB-Meubelen", "gb meubelen", True),
    ("Acme Inc", "Globex Corp", False),
    ("", "Kader", False),
    (None, None, False),
])
def test_are_companies_same(first, second, same):
    assert are_companies_same(first, second) is same
    assert are_companies_same(second, first) is same


def test_company_slug():
    assert company_slug("Van Heek Medical") == "van-heek-medical"
    assert company_slug("Kader Group B.V.") == "kader-group-bv"


@pytest.mark.parametrize("title, company", [
    ("Notaris bij Taxperience", "Taxperience"),
    ("Allround Secretaresse (M/V) - Owow", "Owow"),
    ("Seerden - Assembly operator", "Seerden"),
    ("Security Officer | Kader Group", "Kader Group"),
    ("Senior Marketeer, Methorst, Rosmalen", "Methorst"),
    ("Monteur bij Bakkerij Jansen", "Bakkerij Jansen"),
    ("Bouwbedrijf Hendriks - Werkvoorbereider", "Bouwbedrijf Hendriks"),
    ("Content Marketeer - Kader", "Kader"),
    ("Senior Developer", UNKNOWN_COMPANY),
    ("", UNKNOWN_COMPANY),
])
def test_extract_company_from_title(title, company):
    assert extract_company_from_title(title) == company


def test_extract_company_from_title_uses_extra_known_names():
    assert extract_company_from_title("Planner Zuidzorg Tilburg", ["Zuidzorg"]) == "Zuidzorg"


def test_extract_company_from_tags():
    assert extract_company_from_tags([{"name": "Kragten Recruitment"}]) == "Kragten"
    assert extract_company_from_tags(["Seerden Venlo"]) == "Seerden"
    assert extract_company_from_tags([{"label": "Noverno"}, "Other"]) == "Noverno"
    assert extract_company_from_tags([]) is None
    assert extract_company_from_tags(None) is None


def test_clean_company_name_keeps_circus_location():
    assert clean_company_name("Circus Gran Casino Venlo") == "Circus Gran Casino Venlo"
    assert clean_company_name("Siebers Roermond") == "Siebers"


def test_is_likely_job_title():
    assert is_likely_job_title("Junior Engineer")
    assert is_likely_job_title("Planner (M/V)")
    assert is_likely_job_title("12 vacatures")
    assert not is_likely_job_title("Van Wijnen")
