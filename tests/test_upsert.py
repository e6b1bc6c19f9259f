import requests

from brevo_sync.models import ExistingContactIndex
from brevo_sync.upsert import DUPLICATE_SMS_MESSAGE, UpsertExecutor, UpsertStage, build_payload

from conftest import FakeResponse

CONFLICT = FakeResponse(400, {"code": "duplicate_parameter", "message": DUPLICATE_SMS_MESSAGE})
EMPTY_INDEX = ExistingContactIndex()


def test_payload_includes_attributes_and_list_ids(make_record) -> None:
    payload = build_payload("vendor@example.com", [12], make_record())

    assert payload.to_json() == {
        "email": "vendor@example.com",
        "updateEnabled": True,
        "attributes": {
            "COMPANY_NAME": "Vendor LLC",
            "COMPANY_ID": "404040404",
            "SMS": "+995555123456",
            "TENDER_CODE": "79530000",
        },
        "listIds": [12],
    }


def test_payload_omits_empty_attributes_and_lists() -> None:
    payload = build_payload("vendor@example.com", [], None)

    assert payload.to_json() == {"email": "vendor@example.com", "updateEnabled": True}


def test_successful_upsert_sends_one_request(client, fake_session, make_record) -> None:
    fake_session.add("POST", "/contacts", FakeResponse(201, {"id": 99}))

    result = UpsertExecutor(client).upsert("vendor@example.com", EMPTY_INDEX, [12], make_record())

    assert result.success is True
    assert result.status_code == 201
    assert result.stage is UpsertStage.ATTEMPTED
    assert len(fake_session.calls) == 1


def test_existing_contact_update_with_no_content(client, fake_session, make_record) -> None:
    fake_session.add("POST", "/contacts", FakeResponse(204))
    existing = ExistingContactIndex.from_emails(["vendor@example.com"])

    result = UpsertExecutor(client).upsert("vendor@example.com", existing, [12], make_record())

    assert result.success is True
    assert result.status_code == 204


def test_sms_conflict_retries_once_without_sms(client, fake_session, make_record) -> None:
    fake_session.add("POST", "/contacts", CONFLICT, FakeResponse(204))

    result = UpsertExecutor(client).upsert("vendor@example.com", EMPTY_INDEX, [12], make_record())

    assert result.success is True
    assert result.stage is UpsertStage.RETRIED_ONCE
    first, retry = fake_session.calls
    assert "SMS" in first.json["attributes"]
    assert "SMS" not in retry.json["attributes"]
    assert retry.json["attributes"]["COMPANY_NAME"] == "Vendor LLC"
    assert retry.json["listIds"] == [12]


def test_second_conflict_is_a_failure_not_another_retry(client, fake_session, make_record) -> None:
    fake_session.add("POST", "/contacts", CONFLICT)

    result = UpsertExecutor(client).upsert("vendor@example.com", EMPTY_INDEX, [12], make_record())

    assert result.success is False
    assert result.stage is UpsertStage.RETRIED_ONCE
    assert result.status_code == 400
    assert len(fake_session.calls) == 2


def test_conflict_with_only_sms_is_a_no_op_success(client, fake_session, make_record) -> None:
    fake_session.add("POST", "/contacts", CONFLICT)
    record = make_record(vendor_name="", id_code="http://", category="")

    result = UpsertExecutor(client).upsert("vendor@example.com", EMPTY_INDEX, [12], record)

    assert result.success is True
    assert result.stage is UpsertStage.CONFLICT_DETECTED
    assert result.skipped_retry is True
    assert result.status_code == 204
    assert len(fake_session.calls) == 1


def test_other_client_errors_are_not_retried(client, fake_session, make_record) -> None:
    fake_session.add("POST", "/contacts", FakeResponse(400, {"code": "invalid_parameter", "message": "Invalid email"}))

    result = UpsertExecutor(client).upsert("not-an-email", EMPTY_INDEX, [12], make_record())

    assert result.success is False
    assert "Invalid email" in result.error
    assert len(fake_session.calls) == 1


def test_transport_failure_is_captured(client, fake_session, make_record) -> None:
    fake_session.add("POST", "/contacts", requests.exceptions.ConnectionError("reset"))

    result = UpsertExecutor(client).upsert("vendor@example.com", EMPTY_INDEX, [12], make_record())

    assert result.success is False
    assert result.stage is UpsertStage.ATTEMPTED
    assert "reset" in result.error
