import io

import pandas as pd
import pytest

from conftest import add_drive
from uniplace.exceptions import ReportEmptyError
from uniplace.services.report_service import build_report, render_report


def test_placed_report_columns(db, roster):
    add_drive(db, "Acme", "SDE", "Selected", ["2101"])
    rows, stem = build_report(db, "placed")

    assert stem == "Placed_Students_List"
    assert rows == [{
        "Student Name": "Asha",
        "Enrollment No": "2101",
        "Branch": "CSE",
        "Company": "Acme",
        "Job Role": "SDE",
        "Type": "FTE",
        "Status": "Selected",
    }]


def test_applicants_sorted_by_company(db, roster):
    add_drive(db, "zeta", "SDE", "Shortlisted", ["2101"])
    add_drive(db, "Acme", "SDE", "Shortlisted", ["2102"])
    rows, _ = build_report(db, "applicants")
    assert [r["Company"] for r in rows] == ["Acme", "zeta"]


def test_intern_ppo_only(db, roster):
    add_drive(db, "Acme", "SDE", "Selected", ["2101"])
    add_drive(db, "Globex", "Intern", "Selected", ["2102"], employment_type="Intern")
    add_drive(db, "Initech", "PPO", "Selected", ["2201"], employment_type="PPO")
    rows, _ = build_report(db, "intern_ppo")
    assert [r["Company"] for r in rows] == ["Globex", "Initech"]


def test_empty_report(db, roster):
    with pytest.raises(ReportEmptyError):
        build_report(db, "placed")


def test_unknown_report(db):
    with pytest.raises(KeyError):
        build_report(db, "salaries")


def test_render_csv_and_xlsx():
    rows = [{"Branch": "CSE", "Total Students": 3}]

    assert render_report(rows, "csv").decode("utf-8").splitlines() == ["Branch,Total Students", "CSE,3"]

    sheet = pd.read_excel(io.BytesIO(render_report(rows, "xlsx")), sheet_name="Report")
    assert sheet.to_dict(orient="records") == rows


def test_render_unknown_format():
    with pytest.raises(ValueError):
        render_report([{"a": 1}], "pdf")


# ============ API ============

def test_export_download(client, roster, admin_headers):
    response = client.get("/api/v1/reports/students", params={"format": "csv"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="Student_Database.csv"'
    assert response.text.splitlines()[0].startswith("enrollment_number,name,branch")


def test_export_errors(client, roster, admin_headers):
    assert client.get("/api/v1/reports/salaries", headers=admin_headers).status_code == 400
    assert client.get("/api/v1/reports/students", params={"format": "pdf"}, headers=admin_headers).status_code == 400
    assert client.get("/api/v1/reports/placed", headers=admin_headers).status_code == 404
