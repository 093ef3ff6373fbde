import pytest

from sqlalchemy.exc import SQLAlchemyError

from uniplace.exceptions import ParseError, StoreError, ValidationError
from uniplace.models import Drive, Result
from uniplace.services.result_ingestor import ingest_results, result_labels, status_for_result_type
from uniplace.services.student_matcher import match_students


def _ingest(db, csv_bytes, **overrides):
    form = dict(company_name="Acme", job_title="SDE", batch="2026", result_type="OA", employment_type="Intern")
    form.update(overrides)
    return ingest_results(db, csv_bytes, **form)


# ============ STATUS RULE ============

def test_status_follows_result_type():
    assert status_for_result_type("Final Offer") == "Selected"
    assert status_for_result_type("OA") == "Shortlisted"


def test_result_labels():
    assert result_labels("Selected") == {"oa_status": "Cleared", "interview_status": "Cleared", "final_status": "Selected"}
    assert result_labels("Shortlisted")["final_status"] == "Pending"


# ============ MATCHER ============

def test_match_by_primary_and_secondary(db, roster):
    mapping = match_students(db, ["A@X.EDU", "asha.alt@x.edu", "d@x.edu", "ghost@x.edu"])
    assert mapping["a@x.edu"].enrollment_number == "2101"
    assert mapping["asha.alt@x.edu"].enrollment_number == "2101"
    assert mapping["d@x.edu"].enrollment_number == "2201"
    assert "ghost@x.edu" not in mapping


def test_match_with_no_candidates(db, roster):
    assert match_students(db, []) == {}


# ============ INGESTION ============

def test_duplicate_emails_collapse_to_one_result(db, roster):
    csv_bytes = b"email\na@x.edu\nA@X.EDU\nnomatch@x.edu\n"

    report = _ingest(db, csv_bytes, result_type="Final Offer")

    assert report.inserted == 1
    assert report.not_found == 1
    assert "1 email(s) were not found" in report.message

    rows = db.query(Result).all()
    assert len(rows) == 1
    assert rows[0].student_id == "2101"
    assert rows[0].status == "Selected"
    assert rows[0].drive_id == report.drive_id
    assert report.results[0].final_status == "Selected"


def test_primary_and_secondary_of_same_student_count_once(db, roster):
    report = _ingest(db, b"email\na@x.edu\nasha.alt@x.edu\nb@x.edu\n")

    assert report.inserted == 2
    assert report.not_found == 0
    assert {r.student_id for r in db.query(Result).all()} == {"2101", "2102"}
    assert all(r.status == "Shortlisted" for r in db.query(Result).all())


def test_drive_fields_are_stored(db, roster):
    report = _ingest(db, b"primary_email\nd@x.edu\n", employment_type="PPO", description="Round 1")

    drive = db.query(Drive).one()
    assert drive.id == report.drive_id
    assert (drive.company_name, drive.job_title, drive.batch) == ("Acme", "SDE", "2026")
    assert drive.employment_type == "PPO"
    assert drive.result_type == "OA"
    assert drive.description == "Round 1"


def test_same_sheet_twice_stores_rows_twice(db, roster):
    _ingest(db, b"email\nb@x.edu\n")
    _ingest(db, b"email\nb@x.edu\n")
    assert db.query(Drive).count() == 2
    assert db.query(Result).count() == 2


@pytest.mark.parametrize("csv_bytes", [b"email\n", b"email,name\n\n,\n"])
def test_csv_without_rows_writes_nothing(db, roster, csv_bytes):
    with pytest.raises(ValidationError):
        _ingest(db, csv_bytes)
    assert db.query(Drive).count() == 0
    assert db.query(Result).count() == 0


def test_missing_email_column(db, roster):
    with pytest.raises(ValidationError, match="No valid email column"):
        _ingest(db, b"name,roll\nAsha,2101\n")
    assert db.query(Drive).count() == 0


def test_no_matching_students(db, roster):
    with pytest.raises(ValidationError, match="No matching students"):
        _ingest(db, b"email\nghost@x.edu\n")
    assert db.query(Drive).count() == 0


def test_malformed_csv_writes_nothing(db, roster):
    with pytest.raises(ParseError):
        _ingest(db, b"email,name\na@x.edu,Asha\nb@x.edu,Bilal,extra\n")
    assert db.query(Drive).count() == 0


def test_long_first_row_aborts_instead_of_shifting_columns(db, roster):
    with pytest.raises(ParseError):
        _ingest(db, b"name,email\nAsha,a@x.edu,extra\nBilal,b@x.edu,extra\n")
    assert db.query(Drive).count() == 0


def _failing_commit(db, monkeypatch, message="disk full"):
    def commit():
        raise SQLAlchemyError(message)

    monkeypatch.setattr(db, "commit", commit)


def test_failed_insert_rolls_back_the_drive(db, roster, monkeypatch):
    _failing_commit(db, monkeypatch)

    with pytest.raises(StoreError) as exc:
        _ingest(db, b"email\na@x.edu\nb@x.edu\n")

    assert "disk full" in exc.value.message
    assert db.query(Drive).count() == 0
    assert db.query(Result).count() == 0


@pytest.mark.parametrize("overrides", [
    {"company_name": "  "},
    {"job_title": ""},
    {"result_type": "Interview"},
    {"employment_type": "Contract"},
])
def test_bad_form_is_rejected(db, roster, overrides):
    with pytest.raises(ValidationError):
        _ingest(db, b"email\na@x.edu\n", **overrides)
    assert db.query(Drive).count() == 0


# ============ API ============

def test_upload_endpoint(client, roster, admin_headers, db):
    response = client.post(
        "/api/v1/results/upload",
        headers=admin_headers,
        data={"company_name": "Acme", "job_title": "SDE", "batch": "2026",
              "result_type": "Final Offer", "employment_type": "FTE"},
        files={"file": ("results.csv", b"email\na@x.edu\nA@X.EDU\nnomatch@x.edu\n", "text/csv")},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["inserted"] == 1
    assert body["not_found"] == 1
    assert body["results"][0]["roll_no"] == "2101"
    assert body["results"][0]["job"] == "SDE - Acme"

    listing = client.get("/api/v1/results", headers=admin_headers).json()
    assert listing["total"] == 1
    assert len(listing["final_offers"]) == 1


def test_upload_empty_csv_returns_400(client, roster, admin_headers, db):
    response = client.post(
        "/api/v1/results/upload",
        headers=admin_headers,
        data={"company_name": "Acme", "job_title": "SDE", "batch": "2026"},
        files={"file": ("results.csv", b"", "text/csv")},
    )
    assert response.status_code == 400
    assert db.query(Drive).count() == 0


def test_upload_requires_admin(client, roster, student_headers):
    response = client.post(
        "/api/v1/results/upload",
        headers=student_headers,
        data={"company_name": "Acme", "job_title": "SDE", "batch": "2026"},
        files={"file": ("results.csv", b"email\na@x.edu\n", "text/csv")},
    )
    assert response.status_code == 403


def test_upload_store_failure_returns_500(client, roster, admin_headers, db, monkeypatch):
    _failing_commit(db, monkeypatch, message="could not write block")

    response = client.post(
        "/api/v1/results/upload",
        headers=admin_headers,
        data={"company_name": "Acme", "job_title": "SDE", "batch": "2026"},
        files={"file": ("results.csv", b"email\na@x.edu\n", "text/csv")},
    )
    assert response.status_code == 500
    assert response.json()["detail"] == str(SQLAlchemyError("could not write block"))
    assert db.query(Drive).count() == 0
