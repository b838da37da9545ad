"""
Framework-agnostic handler for PayApp feedback notifications.

This module is not re-exported from :mod:`payapp_core`; import
it explicitly::

    from payapp_core.webhook import create_webhook_handler

PayApp posts a url-encoded form to the merchant's feedback URL and keeps
retrying until the response body is ``SUCCESS``. Wire
:meth:`PayAppWebhookHandler.handle` into any web framework by passing it the
raw request body (or the parsed form) and copying the returned
:class:`WebhookResponse` onto the framework's response object.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Protocol, Union

from .core.config import PayAppConfig
from .core.feedback import generate_feedback_key, validate_feedback
from .core.types import (
    FeedbackValidation,
    PayAppFeedback,
    flatten_form,
    parse_form_body,
)

__all__ = [
    "FeedbackStore",
    "InMemoryFeedbackStore",
    "PayAppWebhookHandler",
    "WebhookResponse",
    "create_webhook_handler",
]

SUCCESS_BODY = "SUCCESS"
FAILURE_BODY = "FAIL"

FeedbackCallback = Callable[[PayAppFeedback], Any]
PriceResolver = Callable[[PayAppFeedback], Optional[int]]
WebhookPayload = Union[Mapping[str, Any], str, bytes]


class FeedbackStore(Protocol):
    """Remembers which feedback events were already processed."""

    def seen(self, key: str) -> bool:
        ...

    def remember(self, key: str) -> None:
        ...


class InMemoryFeedbackStore:
    """Process-local store that forgets the oldest keys beyond ``max_size``."""

    def __init__(self, max_size: int = 10_000) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be greater than zero")
        self.max_size = max_size
        self._keys: "OrderedDict[str, None]" = OrderedDict()
        self._lock = threading.Lock()

    def seen(self, key: str) -> bool:
        with self._lock:
            return key in self._keys

    def remember(self, key: str) -> None:
        with self._lock:
            self._keys[key] = None
            self._keys.move_to_end(key)
            while len(self._keys) > self.max_size:
                self._keys.popitem(last=False)

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)


@dataclass(frozen=True)
class WebhookResponse:
    status_code: int
    body: str
    content_type: str = "text/plain; charset=utf-8"

    @property
    def ok(self) -> bool:
        return self.body == SUCCESS_BODY


class PayAppWebhookHandler:
    def __init__(
        self,
        config: PayAppConfig,
        *,
        on_payment_completed: Optional[FeedbackCallback] = None,
        on_payment_cancelled: Optional[FeedbackCallback] = None,
        on_feedback: Optional[FeedbackCallback] = None,
        on_invalid: Optional[Callable[[FeedbackValidation], Any]] = None,
        expected_price: Optional[PriceResolver] = None,
        store: Optional[FeedbackStore] = None,
    ) -> None:
        config.require_linkval()
        self.config = config
        self.on_payment_completed = on_payment_completed
        self.on_payment_cancelled = on_payment_cancelled
        self.on_feedback = on_feedback
        self.on_invalid = on_invalid
        self.expected_price = expected_price
        self.store: FeedbackStore = store if store is not None else InMemoryFeedbackStore()

    def __call__(self, payload: WebhookPayload) -> WebhookResponse:
        return self.handle(payload)

    def _dispatch(self, feedback: PayAppFeedback) -> None:
        if feedback.is_completed and self.on_payment_completed is not None:
            self.on_payment_completed(feedback)
        elif feedback.is_cancelled and self.on_payment_cancelled is not None:
            self.on_payment_cancelled(feedback)
        if self.on_feedback is not None:
            self.on_feedback(feedback)

    def handle(self, payload: WebhookPayload) -> WebhookResponse:
        """
        Validate, de-duplicate and dispatch one feedback notification.

        Invalid payloads are answered with ``400 FAIL``. A callback or price
        resolver that raises yields ``500 FAIL`` and the event is not marked
        as processed, so PayApp's retry goes through the callbacks again.
        """
        if isinstance(payload, (str, bytes)):
            form = parse_form_body(payload)
        else:
            form = flatten_form(payload)

        price = None
        if self.expected_price is not None:
            try:
                price = self.expected_price(PayAppFeedback.from_mapping(form))
            except Exception as exc:  # noqa: BLE001
                logging.error(
                    "PayApp expected price lookup failed for mul_no=%s: %s",
                    form.get("mul_no"),
                    exc,
                )
                return WebhookResponse(status_code=500, body=FAILURE_BODY)

        validation = validate_feedback(form, self.config, expected_price=price)
        feedback = validation.feedback
        if not validation.valid or feedback is None:
            logging.warning(
                "Rejected PayApp feedback for mul_no=%s: %s",
                form.get("mul_no"),
                "; ".join(validation.errors),
            )
            if self.on_invalid is not None:
                try:
                    self.on_invalid(validation)
                except Exception as exc:  # noqa: BLE001
                    logging.error(
                        "PayApp invalid-feedback handler failed for mul_no=%s: %s",
                        form.get("mul_no"),
                        exc,
                    )
                    return WebhookResponse(status_code=500, body=FAILURE_BODY)
            return WebhookResponse(status_code=400, body=FAILURE_BODY)

        key = generate_feedback_key(form)
        if self.store.seen(key):
            logging.info(
                "Ignoring duplicate PayApp feedback for mul_no=%s (pay_state=%s)",
                feedback.mul_no,
                feedback.pay_state,
            )
            return WebhookResponse(status_code=200, body=SUCCESS_BODY)

        try:
            self._dispatch(feedback)
        except Exception as exc:  # noqa: BLE001
            logging.error(
                "PayApp feedback handler failed for mul_no=%s: %s", feedback.mul_no, exc
            )
            return WebhookResponse(status_code=500, body=FAILURE_BODY)

        self.store.remember(key)
        logging.info(
            "Processed PayApp feedback for mul_no=%s (pay_state=%s)",
            feedback.mul_no,
            feedback.pay_state,
        )
        return WebhookResponse(status_code=200, body=SUCCESS_BODY)


def create_webhook_handler(
    config: PayAppConfig,
    *,
    on_payment_completed: Optional[FeedbackCallback] = None,
    on_payment_cancelled: Optional[FeedbackCallback] = None,
    on_feedback: Optional[FeedbackCallback] = None,
    on_invalid: Optional[Callable[[FeedbackValidation], Any]] = None,
    expected_price: Optional[PriceResolver] = None,
    store: Optional[FeedbackStore] = None,
) -> PayAppWebhookHandler:
    """
    Build a :class:`PayAppWebhookHandler` for ``config``.

    ``config.linkval`` must be set; it is what authenticates PayApp's
    notifications. ``expected_price`` may look up the order amount (for
    example from ``feedback.var1``) so that tampered prices are rejected.
    """
    return PayAppWebhookHandler(
        config,
        on_payment_completed=on_payment_completed,
        on_payment_cancelled=on_payment_cancelled,
        on_feedback=on_feedback,
        on_invalid=on_invalid,
        expected_price=expected_price,
        store=store,
    )
