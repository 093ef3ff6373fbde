import io

import pytest

from uniplace.exceptions import ParseError
from uniplace.services.csv_parser import parse_csv
from uniplace.services.email_extractor import collect_emails, extract_email, normalize_email


# ============ CSV PARSER ============

def test_rows_are_keyed_by_header():
    rows = list(parse_csv(b"name,email\nAsha,a@x.edu\nBilal,b@x.edu\n"))
    assert rows == [
        {"name": "Asha", "email": "a@x.edu"},
        {"name": "Bilal", "email": "b@x.edu"},
    ]


def test_values_stay_strings():
    rows = list(parse_csv(b"roll,cgpa,email\n0021,NA,\n"))
    assert rows == [{"roll": "0021", "cgpa": "NA", "email": ""}]


def test_blank_lines_and_empty_rows_are_skipped():
    rows = list(parse_csv(b"email,name\n\na@x.edu,Asha\n,\n\nb@x.edu,Bilal\n"))
    assert [r["email"] for r in rows] == ["a@x.edu", "b@x.edu"]


def test_quoted_fields_and_bom():
    data = '\ufeffemail,note\n"a@x.edu","likes, commas"\n'.encode("utf-8")
    rows = list(parse_csv(io.BytesIO(data)))
    assert rows == [{"email": "a@x.edu", "note": "likes, commas"}]


def test_header_only_yields_nothing():
    assert list(parse_csv(b"email,name\n")) == []


def test_empty_file_is_a_parse_error():
    with pytest.raises(ParseError) as exc:
        list(parse_csv(b""))
    assert exc.value.line == 1


def test_too_many_fields_reports_location():
    with pytest.raises(ParseError) as exc:
        list(parse_csv(b"email,name\na@x.edu,Asha\nb@x.edu,Bilal,extra\n"))
    assert exc.value.line == 3
    assert exc.value.column == 3
    assert "line 3" in str(exc.value)


# ============ EMAIL EXTRACTION ============

def test_normalize_email():
    assert normalize_email("  A@X.EDU ") == "a@x.edu"
    assert normalize_email("   ") is None
    assert normalize_email(None) is None


def test_extract_email_header_is_case_insensitive():
    assert extract_email({"Email": " A@X.edu "}) == "a@x.edu"
    assert extract_email({"PRIMARY_EMAIL": "b@x.edu"}) == "b@x.edu"


def test_extract_email_prefers_email_over_primary_email():
    assert extract_email({"primary_email": "p@x.edu", "email": "e@x.edu"}) == "e@x.edu"


def test_extract_email_falls_back_when_email_is_blank():
    assert extract_email({"email": "", "primary_email": "p@x.edu"}) == "p@x.edu"


def test_extract_email_without_known_column():
    assert extract_email({"mail": "a@x.edu", "name": "Asha"}) is None


def test_collect_emails_dedupes_in_row_order():
    rows = [{"email": "b@x.edu"}, {"email": "A@x.edu"}, {"email": "a@X.edu"}, {"name": "no email"}]
    assert collect_emails(rows) == ["b@x.edu", "a@x.edu"]


def test_extra_field_on_first_data_row():
    with pytest.raises(ParseError) as exc:
        list(parse_csv(b"email,name\na@x.edu,Asha,extra\n"))
    assert exc.value.line == 2


def test_short_first_row_is_padded():
    rows = list(parse_csv(b"email,name,branch\na@x.edu,Asha\n"))
    assert rows == [{"email": "a@x.edu", "name": "Asha", "branch": ""}]
