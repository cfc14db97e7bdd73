"""
Unit Tests for payload validation.
"""

import json

import pytest

from leave_portal.core.exceptions import PayloadTooLargeError, ValidationError
from leave_portal.leave.schemas import MAX_BODY_BYTES, validate_append, validate_query


def _body(data) -> bytes:
    return json.dumps(data).encode("utf-8")


class TestValidateQuery:
    """Tests for validate_query()."""

    def test_valid_query(self):
        payload = validate_query(_body({"claimCode": "GSL25021372778", "nationalId": "1000000001"}))
        assert payload.claim_code == "GSL25021372778"
        assert payload.national_id == "1000000001"
        assert payload.captcha_token is None

    def test_captcha_token_is_kept(self):
        payload = validate_query(
            _body({"claimCode": "ABCDEFGH", "nationalId": "1234567890", "captchaToken": "tok"})
        )
        assert payload.captcha_token == "tok"

    @pytest.mark.parametrize(
        "claim_code",
        ["short", "A" * 21, "GSL-2502137", "GSL 2502137", "كودعربي123", ""],
    )
    def test_invalid_claim_code(self, claim_code):
        with pytest.raises(ValidationError) as exc_info:
            validate_query(_body({"claimCode": claim_code, "nationalId": "1234567890"}))
        assert exc_info.value.field == "claimCode"

    @pytest.mark.parametrize("national_id", ["123456789", "12345678901", "12345abcde", "١٢٣٤٥٦٧٨٩٠"])
    def test_invalid_national_id(self, national_id):
        with pytest.raises(ValidationError) as exc_info:
            validate_query(_body({"claimCode": "ABCDEFGH", "nationalId": national_id}))
        assert exc_info.value.field == "nationalId"

    def test_numbers_are_not_coerced_to_strings(self):
        with pytest.raises(ValidationError):
            validate_query(_body({"claimCode": "ABCDEFGH", "nationalId": 1234567890}))

    def test_first_failure_wins(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_query(_body({"claimCode": "bad", "nationalId": "bad"}))
        assert exc_info.value.field == "claimCode"

    @pytest.mark.parametrize("raw", [b"", b"not json", b"[1, 2]", b"null"])
    def test_non_object_bodies(self, raw):
        with pytest.raises(ValidationError):
            validate_query(raw)

    def test_oversized_body(self):
        raw = _body({"claimCode": "ABCDEFGH", "nationalId": "1234567890", "pad": "x" * MAX_BODY_BYTES})
        with pytest.raises(PayloadTooLargeError):
            validate_query(raw)

    def test_public_message_is_generic(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_query(_body({"claimCode": "short", "nationalId": "1234567890"}))
        assert exc_info.value.public_message == "Invalid input."
        assert exc_info.value.status_code == 400


class TestValidateAppend:
    """Tests for validate_append()."""

    def test_valid_append(self, append_payload):
        payload = validate_append(_body(append_payload))
        assert payload.holder_name == "Test Holder"
        assert payload.model_dump()["start_date"] == "2025-03-01"

    @pytest.mark.parametrize(
        "field",
        ["holderName", "reportDate", "startDate", "endDate", "issuingPhysician", "jobTitle"],
    )
    def test_missing_text_field(self, append_payload, field):
        del append_payload[field]
        with pytest.raises(ValidationError) as exc_info:
            validate_append(_body(append_payload))
        assert exc_info.value.field == field

    @pytest.mark.parametrize("value", ["", "   "])
    def test_blank_text_field(self, append_payload, value):
        append_payload["holderName"] = value
        with pytest.raises(ValidationError):
            validate_append(_body(append_payload))

    def test_non_string_field(self, append_payload):
        append_payload["jobTitle"] = 7
        with pytest.raises(ValidationError):
            validate_append(_body(append_payload))

    def test_unparseable_dates_are_tolerated(self, append_payload):
        append_payload["startDate"] = "someday"
        payload = validate_append(_body(append_payload))
        assert payload.start_date == "someday"

    def test_day_count_is_not_accepted(self, append_payload):
        payload = validate_append(_body({**append_payload, "inclusiveDayCount": 500}))
        assert "inclusive_day_count" not in payload.model_dump()

    def test_key_fields_checked_before_text_fields(self, append_payload):
        append_payload["nationalId"] = "abc"
        del append_payload["holderName"]
        with pytest.raises(ValidationError) as exc_info:
            validate_append(_body(append_payload))
        assert exc_info.value.field == "nationalId"
