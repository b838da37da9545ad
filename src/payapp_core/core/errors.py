"""
Error codes and messages raised by the PayApp helpers.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

__all__ = [
    "PAYAPP_ERROR_MESSAGES",
    "PayAppError",
    "get_payapp_error_message",
    "is_payapp_error",
]

PAYAPP_ERROR_MESSAGES: Mapping[str, str] = MappingProxyType(
    {
        "SDK_NOT_LOADED": "PayApp SDK가 로드되지 않았습니다.",
        "SDK_NOT_INITIALIZED": "PayApp SDK가 초기화되지 않았습니다. 판매자 아이디를 확인해 주세요.",
        "INVALID_CONFIG": "PayApp 설정이 올바르지 않습니다.",
        "INVALID_PARAMS": "결제 요청 파라미터가 올바르지 않습니다.",
        "PAYMENT_REQUEST_FAILED": "결제 요청에 실패했습니다.",
        "REBILL_REQUEST_FAILED": "정기결제 등록에 실패했습니다.",
        "REBILL_CONTROL_FAILED": "정기결제 상태 변경에 실패했습니다.",
        "CANCEL_FAILED": "결제 취소에 실패했습니다.",
        "PAYMENT_CANCELLED": "결제가 취소되었습니다.",
        "INVALID_FEEDBACK": "유효하지 않은 결제 통보입니다.",
        "FEEDBACK_AUTH_FAILED": "결제 통보의 인증 정보가 일치하지 않습니다.",
        "NETWORK_ERROR": "PayApp 서버와 통신 중 오류가 발생했습니다.",
        "INVALID_RESPONSE": "PayApp 응답을 해석할 수 없습니다.",
        "UNKNOWN_ERROR": "알 수 없는 오류가 발생했습니다.",
    }
)

_DEFAULT_CODE = "UNKNOWN_ERROR"


class PayAppError(Exception):
    """Raised when a PayApp call fails or its input is rejected."""

    def __init__(
        self,
        code: str,
        message: Optional[str] = None,
        *,
        errno: Optional[str] = None,
        raw: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.code = code
        self.message = message or PAYAPP_ERROR_MESSAGES.get(
            code, PAYAPP_ERROR_MESSAGES[_DEFAULT_CODE]
        )
        self.errno = errno
        self.raw: Dict[str, Any] = dict(raw or {})
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.errno:
            return f"[{self.code}] {self.message} (errno {self.errno})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "errno": self.errno,
        }


def _is_vendor_failure(value: Mapping[str, Any]) -> bool:
    state = value.get("state")
    if state is None or "errorMessage" not in value:
        return False
    return str(state).strip() != "1"


def is_payapp_error(value: Any) -> bool:
    """
    Return ``True`` when ``value`` looks like a PayApp error.

    Recognised shapes are :class:`PayAppError` instances, mappings carrying a
    known ``code`` (e.g. :meth:`PayAppError.to_dict` output) and raw vendor
    failure responses (``state`` other than ``1`` plus ``errorMessage``).
    """
    if isinstance(value, PayAppError):
        return True
    if not isinstance(value, Mapping):
        return False
    code = value.get("code")
    if isinstance(code, str) and code in PAYAPP_ERROR_MESSAGES:
        return True
    return _is_vendor_failure(value)


def get_payapp_error_message(error: Any) -> str:
    """Look up a human-readable message for an error code or error object."""
    if isinstance(error, PayAppError):
        return error.message
    if isinstance(error, Mapping):
        if _is_vendor_failure(error) and error.get("errorMessage"):
            return str(error["errorMessage"])
        error = error.get("code")
    if isinstance(error, str) and error in PAYAPP_ERROR_MESSAGES:
        return PAYAPP_ERROR_MESSAGES[error]
    return PAYAPP_ERROR_MESSAGES[_DEFAULT_CODE]
