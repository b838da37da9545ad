"""Tests for payapp_core.core.errors."""
from __future__ import annotations

import pytest

from payapp_core import (
    PAYAPP_ERROR_MESSAGES,
    PayAppError,
    get_payapp_error_message,
    is_payapp_error,
)


class TestPayAppError:
    def test_message_defaults_to_table_entry(self):
        error = PayAppError("NETWORK_ERROR")
        assert error.message == PAYAPP_ERROR_MESSAGES["NETWORK_ERROR"]
        assert str(error) == f"[NETWORK_ERROR] {PAYAPP_ERROR_MESSAGES['NETWORK_ERROR']}"

    def test_unknown_code_falls_back_to_default_message(self):
        error = PayAppError("SOMETHING_ELSE")
        assert error.message == PAYAPP_ERROR_MESSAGES["UNKNOWN_ERROR"]

    def test_vendor_details_are_kept(self):
        error = PayAppError(
            "PAYMENT_REQUEST_FAILED",
            "판매자 정보가 없습니다.",
            errno="70010",
            raw={"state": "0"},
        )
        assert error.errno == "70010"
        assert error.raw == {"state": "0"}
        assert "errno 70010" in str(error)
        assert error.to_dict() == {
            "code": "PAYMENT_REQUEST_FAILED",
            "message": "판매자 정보가 없습니다.",
            "errno": "70010",
        }

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            PAYAPP_ERROR_MESSAGES["NEW"] = "x"  # type: ignore[index]


class TestIsPayAppError:
    def test_exception_instance(self):
        assert is_payapp_error(PayAppError("CANCEL_FAILED"))

    def test_serialized_error(self):
        assert is_payapp_error(PayAppError("CANCEL_FAILED").to_dict())

    def test_vendor_failure_response(self):
        assert is_payapp_error({"state": "0", "errorMessage": "실패", "errno": "1"})

    def test_vendor_success_response_is_not_error(self):
        assert not is_payapp_error({"state": "1", "errorMessage": "", "mul_no": "1"})

    @pytest.mark.parametrize(
        "value",
        [
            None,
            "NETWORK_ERROR",
            ValueError("boom"),
            {"code": "NOT_A_PAYAPP_CODE"},
            {"state": "0"},
            {"message": "no code"},
        ],
    )
    def test_other_values_are_not_errors(self, value):
        assert not is_payapp_error(value)


class TestGetPayAppErrorMessage:
    @pytest.mark.parametrize("code", sorted(PAYAPP_ERROR_MESSAGES))
    def test_every_code_has_its_message(self, code):
        assert get_payapp_error_message(code) == PAYAPP_ERROR_MESSAGES[code]

    def test_unknown_code_uses_default(self):
        assert get_payapp_error_message("NOPE") == PAYAPP_ERROR_MESSAGES["UNKNOWN_ERROR"]
        assert get_payapp_error_message(None) == PAYAPP_ERROR_MESSAGES["UNKNOWN_ERROR"]

    def test_error_instance_uses_own_message(self):
        error = PayAppError("CANCEL_FAILED", "이미 취소된 결제입니다.")
        assert get_payapp_error_message(error) == "이미 취소된 결제입니다."

    def test_mapping_with_code(self):
        assert (
            get_payapp_error_message({"code": "INVALID_PARAMS"})
            == PAYAPP_ERROR_MESSAGES["INVALID_PARAMS"]
        )

    def test_vendor_failure_uses_vendor_message(self):
        assert get_payapp_error_message({"state": "0", "errorMessage": "한도 초과"}) == "한도 초과"
