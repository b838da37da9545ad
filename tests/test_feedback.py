"""Tests for feedback validation, keys and payment-status predicates."""
from __future__ import annotations

from urllib.parse import urlencode

import pytest

from payapp_core import (
    CANCELLED_STATES,
    COMPLETED_STATES,
    ConfigError,
    PayAppConfig,
    PayAppFeedback,
    PayState,
    generate_feedback_key,
    is_payment_cancelled,
    is_payment_completed,
    validate_feedback,
)


class TestValidateFeedback:
    def test_accepts_matching_payload(self, config, feedback_form):
        result = validate_feedback(feedback_form, config)
        assert result.valid
        assert bool(result)
        assert result.errors == ()
        assert result.feedback.mul_no == "123456"

    def test_accepts_url_encoded_body(self, config, feedback_form):
        assert validate_feedback(urlencode(feedback_form).encode(), config).valid

    def test_accepts_list_valued_form(self, config, feedback_form):
        form = {key: [value] for key, value in feedback_form.items()}
        assert validate_feedback(form, config).valid

    @pytest.mark.parametrize("field", ["userid", "linkkey", "linkval", "mul_no", "pay_state"])
    def test_rejects_missing_required_field(self, config, feedback_form, field):
        del feedback_form[field]
        result = validate_feedback(feedback_form, config)
        assert not result.valid
        assert f"missing field: {field}" in result.errors

    @pytest.mark.parametrize(
        "field,value,error",
        [
            ("userid", "other", "userid mismatch"),
            ("linkkey", "other", "linkkey mismatch"),
            ("linkval", "other", "linkval mismatch"),
        ],
    )
    def test_rejects_wrong_credentials(self, config, feedback_form, field, value, error):
        feedback_form[field] = value
        result = validate_feedback(feedback_form, config)
        assert not result.valid
        assert error in result.errors

    def test_rejects_unknown_pay_state(self, config, feedback_form):
        feedback_form["pay_state"] = "99"
        result = validate_feedback(feedback_form, config)
        assert result.errors == ("unknown pay_state: 99",)

    def test_rejects_non_numeric_pay_state_and_price(self, config, feedback_form):
        feedback_form["pay_state"] = "done"
        feedback_form["price"] = "1,000"
        result = validate_feedback(feedback_form, config)
        assert len(result.errors) == 2

    def test_expected_price(self, config, feedback_form):
        assert validate_feedback(feedback_form, config, expected_price=1000).valid
        result = validate_feedback(feedback_form, config, expected_price=2000)
        assert not result.valid
        assert result.errors[0].startswith("price mismatch")

    def test_linkkey_skipped_when_merchant_key_unknown(self, feedback_form):
        config = PayAppConfig(userid="seller", linkval="link-val")
        feedback_form["linkkey"] = "anything"
        assert validate_feedback(feedback_form, config).valid

    def test_keyword_credentials_override_config(self, config, feedback_form):
        feedback_form["linkval"] = "rotated"
        assert validate_feedback(feedback_form, config, linkval="rotated").valid

    def test_keyword_credentials_without_config(self, feedback_form):
        assert validate_feedback(
            feedback_form, userid="seller", linkkey="link-key", linkval="link-val"
        ).valid

    def test_requires_merchant_linkval(self, feedback_form):
        with pytest.raises(ConfigError):
            validate_feedback(feedback_form, PayAppConfig(userid="seller"))


class TestGenerateFeedbackKey:
    def test_deterministic(self, feedback_form):
        assert generate_feedback_key(feedback_form) == generate_feedback_key(dict(feedback_form))
        assert len(generate_feedback_key(feedback_form)) == 64

    def test_same_event_in_any_shape(self, feedback_form):
        key = generate_feedback_key(feedback_form)
        assert generate_feedback_key(urlencode(feedback_form)) == key
        assert generate_feedback_key(PayAppFeedback.from_mapping(feedback_form)) == key

    def test_ignores_non_identifying_fields(self, feedback_form):
        key = generate_feedback_key(feedback_form)
        feedback_form["goodname"] = "다른 이름"
        feedback_form["linkval"] = "whatever"
        assert generate_feedback_key(feedback_form) == key

    @pytest.mark.parametrize(
        "field,value",
        [("mul_no", "999"), ("pay_state", "9"), ("price", "500"), ("userid", "x"), ("rebill_no", "1")],
    )
    def test_identifying_fields_change_key(self, feedback_form, field, value):
        key = generate_feedback_key(feedback_form)
        feedback_form[field] = value
        assert generate_feedback_key(feedback_form) != key

    def test_feedback_without_raw(self, feedback_form):
        feedback = PayAppFeedback(
            userid="seller",
            linkkey=None,
            linkval=None,
            mul_no="123456",
            pay_state=PayState.COMPLETED,
            price=1000,
        )
        assert generate_feedback_key(feedback) == generate_feedback_key(feedback_form)


class TestPaymentStatusPredicates:
    @pytest.mark.parametrize("state", list(PayState))
    def test_known_states_are_never_both(self, state):
        assert not (is_payment_completed(state) and is_payment_cancelled(state))

    def test_partition(self):
        assert COMPLETED_STATES.isdisjoint(CANCELLED_STATES)
        neither = set(PayState) - COMPLETED_STATES - CANCELLED_STATES
        assert neither == {PayState.REQUESTED, PayState.WAITING}

    @pytest.mark.parametrize("status", [4, "4", PayState.COMPLETED, {"pay_state": "4"}])
    def test_completed_inputs(self, status):
        assert is_payment_completed(status)
        assert not is_payment_cancelled(status)

    @pytest.mark.parametrize("status", [8, "9", 16, 31, 64, "70", 71, {"pay_state": ["64"]}])
    def test_cancelled_inputs(self, status):
        assert is_payment_cancelled(status)
        assert not is_payment_completed(status)

    @pytest.mark.parametrize("status", [1, 10, 99, "abc", None, True, 4.0, {}])
    def test_neither(self, status):
        assert not is_payment_completed(status)
        assert not is_payment_cancelled(status)

    def test_feedback_objects(self, feedback_form):
        assert is_payment_completed(PayAppFeedback.from_mapping(feedback_form))
