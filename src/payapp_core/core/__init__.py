"""
Core primitives for talking to PayApp and interpreting its notifications.
"""

from .client import PayAppClient, post_command
from .config import (
    ConfigError,
    PayAppConfig,
    PayAppParameters,
    load_payapp_config,
)
from .environment import PayAppEnvironment, build_environment, load_env_file
from .errors import (
    PAYAPP_ERROR_MESSAGES,
    PayAppError,
    get_payapp_error_message,
    is_payapp_error,
)
from .feedback import (
    generate_feedback_key,
    is_payment_cancelled,
    is_payment_completed,
    validate_feedback,
)
from .sdk import (
    PAYAPP_SDK_URL,
    PayAppSDK,
    init_payapp_sdk,
    load_payapp_sdk,
    request_payment_with_sdk,
    request_recurring_payment_with_sdk,
)
from .types import (
    CANCELLED_STATES,
    COMPLETED_STATES,
    CancelRequest,
    CommandResult,
    FeedbackValidation,
    PayAppFeedback,
    PayState,
    PayType,
    PaymentRequest,
    PaymentRequestResult,
    RebillCycleType,
    RecurringPaymentRequest,
    RecurringPaymentResult,
)

__all__ = [
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
    "PayAppEnvironment",
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
    "build_environment",
    "generate_feedback_key",
    "get_payapp_error_message",
    "init_payapp_sdk",
    "is_payapp_error",
    "is_payment_cancelled",
    "is_payment_completed",
    "load_env_file",
    "load_payapp_config",
    "load_payapp_sdk",
    "post_command",
    "request_payment_with_sdk",
    "request_recurring_payment_with_sdk",
    "validate_feedback",
]
