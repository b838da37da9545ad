"""
PayApp payment integration core library (framework-agnostic).

Integrators can ``from payapp_core import ...`` the client, the request and
feedback types, the SDK rendering helpers and the error lookups. The webhook
handler is an optional import: ``from payapp_core.webhook import
create_webhook_handler``.
"""

from .api import create_payapp_client
from .core import (
    CANCELLED_STATES,
    COMPLETED_STATES,
    PAYAPP_ERROR_MESSAGES,
    PAYAPP_SDK_URL,
    CancelRequest,
    CommandResult,
    ConfigError,
    FeedbackValidation,
    PayAppClient,
    PayAppConfig,
    PayAppError,
    PayAppFeedback,
    PayAppParameters,
    PayAppSDK,
    PayState,
    PayType,
    PaymentRequest,
    PaymentRequestResult,
    RebillCycleType,
    RecurringPaymentRequest,
    RecurringPaymentResult,
    generate_feedback_key,
    get_payapp_error_message,
    init_payapp_sdk,
    is_payapp_error,
    is_payment_cancelled,
    is_payment_completed,
    load_env_file,
    load_payapp_config,
    load_payapp_sdk,
    request_payment_with_sdk,
    request_recurring_payment_with_sdk,
    validate_feedback,
)

__version__ = "0.1.0"

__all__ = (
    "CANCELLED_STATES",
    "COMPLETED_STATES",
    "CancelRequest",
    "CommandResult",
    "ConfigError",
    "FeedbackValidation",
    "PAYAPP_ERROR_MESSAGES",
    "PAYAPP_SDK_URL",
    "PayAppClient",
    "PayAppConfig",
    "PayAppError",
    "PayAppFeedback",
    "PayAppParameters",
    "PayAppSDK",
    "PayState",
    "PayType",
    "PaymentRequest",
    "PaymentRequestResult",
    "RebillCycleType",
    "RecurringPaymentRequest",
    "RecurringPaymentResult",
    "create_payapp_client",
    "generate_feedback_key",
    "get_payapp_error_message",
    "init_payapp_sdk",
    "is_payapp_error",
    "is_payment_cancelled",
    "is_payment_completed",
    "load_env_file",
    "load_payapp_config",
    "load_payapp_sdk",
    "request_payment_with_sdk",
    "request_recurring_payment_with_sdk",
    "validate_feedback",
)
