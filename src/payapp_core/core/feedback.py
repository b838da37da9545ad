"""
Validation and classification of PayApp feedback (payment notifications).
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import fields
from typing import Any, Dict, List, Mapping, Optional, Union

from .config import ConfigError, PayAppConfig
from .types import (
    CANCELLED_STATES,
    COMPLETED_STATES,
    FeedbackValidation,
    PayAppFeedback,
    PayState,
    flatten_form,
    parse_form_body,
)

__all__ = [
    "FEEDBACK_KEY_FIELDS",
    "REQUIRED_FEEDBACK_FIELDS",
    "generate_feedback_key",
    "is_payment_cancelled",
    "is_payment_completed",
    "validate_feedback",
]

FeedbackPayload = Union[Mapping[str, Any], PayAppFeedback, str, bytes]

REQUIRED_FEEDBACK_FIELDS = ("userid", "linkkey", "linkval", "mul_no", "pay_state")
FEEDBACK_KEY_FIELDS = ("userid", "mul_no", "rebill_no", "pay_state", "price")
_KNOWN_STATES = frozenset(int(state) for state in PayState)


def _feedback_as_form(feedback: PayAppFeedback) -> Dict[str, str]:
    if feedback.raw:
        return dict(feedback.raw)
    form: Dict[str, str] = {}
    for item in fields(feedback):
        if item.name == "raw":
            continue
        value = getattr(feedback, item.name)
        if value is not None:
            form[item.name] = str(int(value)) if isinstance(value, int) else str(value)
    return form


def _as_form(payload: FeedbackPayload) -> Dict[str, str]:
    if isinstance(payload, PayAppFeedback):
        return _feedback_as_form(payload)
    if isinstance(payload, (str, bytes)):
        return parse_form_body(payload)
    if isinstance(payload, Mapping):
        return flatten_form(payload)
    raise TypeError(f"Unsupported feedback payload type: {type(payload).__name__}")


def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value.strip())
    except ValueError:
        return None


def _matches(received: str, expected: str) -> bool:
    return hmac.compare_digest(received.encode("utf-8"), expected.encode("utf-8"))


def validate_feedback(
    payload: FeedbackPayload,
    config: Optional[PayAppConfig] = None,
    *,
    userid: Optional[str] = None,
    linkkey: Optional[str] = None,
    linkval: Optional[str] = None,
    expected_price: Optional[int] = None,
) -> FeedbackValidation:
    """
    Check a feedback payload against the merchant's credentials.

    The payload is accepted only when every required field is present,
    ``pay_state`` is a known state, ``price`` (if sent) is an integer, the
    ``userid``/``linkkey``/``linkval`` values match, and ``price`` equals
    ``expected_price`` when one is given. ``linkkey`` is only compared when
    the merchant's key is known. Keyword credentials take precedence over
    ``config``.
    """
    expected_userid = userid or (config.userid if config else None)
    expected_linkkey = linkkey or (config.linkkey if config else None)
    expected_linkval = linkval or (config.linkval if config else None)
    if not expected_userid or not expected_linkval:
        raise ConfigError("userid and linkval are required to validate PayApp feedback")

    form = _as_form(payload)
    errors: List[str] = []

    for name in REQUIRED_FEEDBACK_FIELDS:
        if not form.get(name, "").strip():
            errors.append(f"missing field: {name}")

    state_raw = form.get("pay_state", "").strip()
    if state_raw:
        state = _parse_int(state_raw)
        if state is None:
            errors.append(f"pay_state is not an integer: {state_raw!r}")
        elif state not in _KNOWN_STATES:
            errors.append(f"unknown pay_state: {state}")

    price: Optional[int] = None
    price_raw = form.get("price", "").strip()
    if price_raw:
        price = _parse_int(price_raw)
        if price is None:
            errors.append(f"price is not an integer: {price_raw!r}")

    received_userid = form.get("userid", "").strip()
    if received_userid and not _matches(received_userid, expected_userid):
        errors.append("userid mismatch")

    received_linkkey = form.get("linkkey", "").strip()
    if received_linkkey and expected_linkkey and not _matches(
        received_linkkey, expected_linkkey
    ):
        errors.append("linkkey mismatch")

    received_linkval = form.get("linkval", "").strip()
    if received_linkval and not _matches(received_linkval, expected_linkval):
        errors.append("linkval mismatch")

    if expected_price is not None and price != expected_price:
        errors.append(f"price mismatch: expected {expected_price}, got {price_raw or None}")

    return FeedbackValidation(
        valid=not errors,
        errors=tuple(errors),
        feedback=PayAppFeedback.from_mapping(form),
    )


def generate_feedback_key(payload: FeedbackPayload) -> str:
    """
    Derive a stable identifier for a feedback event.

    PayApp retries a notification until it gets ``SUCCESS`` back; the key is
    the same for every retry of one event and differs between events (a
    cancellation of ``mul_no`` yields a different key than its completion).
    """
    form = _as_form(payload)
    material = "&".join(
        f"{name}={form.get(name, '').strip()}" for name in FEEDBACK_KEY_FIELDS
    )
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


def _pay_state_of(status: Any) -> Optional[int]:
    if isinstance(status, PayAppFeedback):
        return status.pay_state
    if isinstance(status, Mapping):
        status = flatten_form(status).get("pay_state")
    if isinstance(status, bool):
        return None
    if isinstance(status, int):
        return int(status)
    if isinstance(status, str):
        return _parse_int(status)
    return None


def is_payment_completed(status: Any) -> bool:
    """``True`` when ``status`` denotes an approved payment."""
    return _pay_state_of(status) in COMPLETED_STATES


def is_payment_cancelled(status: Any) -> bool:
    """``True`` for any full, partial, request or approval cancellation."""
    return _pay_state_of(status) in CANCELLED_STATES
