import pytest

from brevo_sync.errors import ValidationError
from brevo_sync.models import (
    SOURCE_FIELDS,
    ErrorOutcome,
    ExistingContactIndex,
    ProcessingReport,
    RecordAction,
    RecordOutcome,
    SourceRecord,
    UpsertPayload,
)


def test_source_record_round_trips_row_values() -> None:
    row = [f" value {index} " for index in range(len(SOURCE_FIELDS))]

    record = SourceRecord.from_row(row)

    assert list(record.as_row()) == row
    assert record.email == " value 5 "


def test_source_record_rejects_short_rows() -> None:
    with pytest.raises(ValidationError):
        SourceRecord.from_row(["GE", "x"])


def test_source_record_maps_none_to_empty_string() -> None:
    record = SourceRecord.from_row([None] * len(SOURCE_FIELDS))

    assert record.as_row() == ("",) * len(SOURCE_FIELDS)


def test_index_membership_is_case_insensitive() -> None:
    index = ExistingContactIndex.from_emails(["Ada@Example.com", "", "ada@example.com"])

    assert len(index) == 1
    assert "ADA@EXAMPLE.COM" in index
    assert None not in index


def test_payload_without_attribute_returns_a_copy() -> None:
    payload = UpsertPayload(email="a@example.com", attributes={"SMS": "+995", "COMPANY_NAME": "A"}, list_ids=[1])

    stripped = payload.without_attribute("SMS")

    assert stripped.attributes == {"COMPANY_NAME": "A"}
    assert payload.attributes == {"SMS": "+995", "COMPANY_NAME": "A"}
    assert stripped.to_json()["updateEnabled"] is True


def test_report_routes_outcomes_and_aborts() -> None:
    report = ProcessingReport()
    report.record(RecordOutcome(email="a@example.com", record=None, action=RecordAction.ADDED))
    report.record(RecordOutcome(email="b@example.com", record=None, action=RecordAction.UPDATED))
    report.record(ErrorOutcome(error="missing email"))

    returned = report.abort("boom", "Failed to create contact list")

    assert returned is report
    assert len(report.added) == len(report.updated) == 1
    assert [error.error for error in report.errors] == ["missing email", "boom"]
    assert report.to_dict()["aborted"] is True
    assert report.to_dict()["campaign_info"] is None
