"""
HTTP client for the PayApp REST endpoint (``apiLoad.html``).
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

import requests

from .config import PayAppConfig
from .errors import PayAppError
from .types import (
    CancelRequest,
    CommandResult,
    PaymentRequest,
    PaymentRequestResult,
    RecurringPaymentRequest,
    RecurringPaymentResult,
    parse_form_body,
    require_identifier,
)

__all__ = [
    "PayAppClient",
    "post_command",
]


def _post_form(
    session: requests.Session,
    url: str,
    body: Dict[str, str],
    *,
    timeout: int,
) -> Dict[str, str]:
    try:
        response = session.post(url, data=body, timeout=timeout)
    except requests.RequestException as exc:
        raise PayAppError("NETWORK_ERROR", f"PayApp request to {url} failed: {exc}") from exc

    if response.status_code >= 400:
        raise PayAppError(
            "NETWORK_ERROR",
            f"PayApp responded with {response.status_code}: {response.text}",
        )

    payload = parse_form_body(response.text)
    if "state" not in payload:
        raise PayAppError(
            "INVALID_RESPONSE",
            f"Failed to parse PayApp response from {url}: {response.text!r}",
        )
    return payload


def post_command(
    session: requests.Session,
    config: PayAppConfig,
    cmd: str,
    params: Dict[str, str],
    *,
    error_code: str,
) -> Dict[str, str]:
    """
    Send ``cmd`` with ``params`` and return the decoded response.

    Raises :class:`PayAppError` with ``error_code`` when PayApp answers with
    ``state`` other than ``1``.
    """
    body = {"cmd": cmd, "userid": config.userid}
    body.update(params)

    logging.info("Sending PayApp command %s to %s", cmd, config.api_url)
    payload = _post_form(session, config.api_url, body, timeout=config.timeout_seconds)

    if payload.get("state") != "1":
        raise PayAppError(
            error_code,
            payload.get("errorMessage") or None,
            errno=payload.get("errno") or None,
            raw=payload,
        )
    return payload


class PayAppClient:
    """
    Thin convenience wrapper around the PayApp commands.
    """

    def __init__(
        self,
        config: PayAppConfig,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()

    def _command(self, cmd: str, params: Dict[str, str], *, error_code: str) -> Dict[str, str]:
        return post_command(self.session, self.config, cmd, params, error_code=error_code)

    def _with_feedback_url(self, params: Dict[str, str]) -> Dict[str, str]:
        if self.config.feedback_url and "feedbackurl" not in params:
            params["feedbackurl"] = self.config.feedback_url
        return params

    def request_payment(self, request: PaymentRequest) -> PaymentRequestResult:
        params = self._with_feedback_url(request.to_params())
        payload = self._command("payrequest", params, error_code="PAYMENT_REQUEST_FAILED")
        result = PaymentRequestResult.from_response(payload)
        logging.info("PayApp payment request created (mul_no=%s)", result.mul_no)
        return result

    def request_recurring_payment(
        self, request: RecurringPaymentRequest
    ) -> RecurringPaymentResult:
        params = self._with_feedback_url(request.to_params())
        payload = self._command("rebillRegist", params, error_code="REBILL_REQUEST_FAILED")
        result = RecurringPaymentResult.from_response(payload)
        logging.info("PayApp recurring payment registered (rebill_no=%s)", result.rebill_no)
        return result

    def cancel_payment(self, request: CancelRequest) -> CommandResult:
        """
        Cancel an approved payment, partially when ``request.part_price`` is set.
        """
        params = {"linkkey": self.config.require_linkkey()}
        params.update(request.to_params())
        return CommandResult.from_response(
            self._command("paycancel", params, error_code="CANCEL_FAILED")
        )

    def request_cancel(self, request: CancelRequest) -> CommandResult:
        """
        File a cancellation request for payments past the direct-cancel window.
        """
        params = {"linkkey": self.config.require_linkkey()}
        params.update(request.to_params())
        return CommandResult.from_response(
            self._command("paycancelreq", params, error_code="CANCEL_FAILED")
        )

    def _rebill_command(self, cmd: str, rebill_no: str) -> CommandResult:
        rebill_no = require_identifier(rebill_no, "rebill_no")
        params = {"linkkey": self.config.require_linkkey(), "rebill_no": rebill_no}
        return CommandResult.from_response(
            self._command(cmd, params, error_code="REBILL_CONTROL_FAILED")
        )

    def cancel_recurring_payment(self, rebill_no: str) -> CommandResult:
        return self._rebill_command("rebillCancel", rebill_no)

    def stop_recurring_payment(self, rebill_no: str) -> CommandResult:
        return self._rebill_command("rebillStop", rebill_no)

    def start_recurring_payment(self, rebill_no: str) -> CommandResult:
        return self._rebill_command("rebillStart", rebill_no)
