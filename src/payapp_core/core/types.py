"""
Records and constants shared by the PayApp client, SDK and feedback helpers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum, IntEnum
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple
from urllib.parse import parse_qsl

from .errors import PayAppError

__all__ = [
    "CANCELLED_STATES",
    "COMPLETED_STATES",
    "CancelRequest",
    "CommandResult",
    "FeedbackValidation",
    "PayAppFeedback",
    "PayState",
    "PayType",
    "PaymentRequest",
    "PaymentRequestResult",
    "RebillCycleType",
    "RecurringPaymentRequest",
    "RecurringPaymentResult",
]


class PayState(IntEnum):
    """``pay_state`` values reported by PayApp."""

    REQUESTED = 1
    COMPLETED = 4
    REQUEST_CANCELLED = 8
    APPROVAL_CANCELLED = 9
    WAITING = 10
    REQUEST_CANCELLED_16 = 16
    REQUEST_CANCELLED_31 = 31
    APPROVAL_CANCELLED_64 = 64
    PARTIAL_CANCELLED = 70
    PARTIAL_CANCELLED_71 = 71


COMPLETED_STATES = frozenset({PayState.COMPLETED})
CANCELLED_STATES = frozenset(
    {
        PayState.REQUEST_CANCELLED,
        PayState.APPROVAL_CANCELLED,
        PayState.REQUEST_CANCELLED_16,
        PayState.REQUEST_CANCELLED_31,
        PayState.APPROVAL_CANCELLED_64,
        PayState.PARTIAL_CANCELLED,
        PayState.PARTIAL_CANCELLED_71,
    }
)


class PayType(IntEnum):
    CARD = 1
    MOBILE_PHONE = 2
    FACE_TO_FACE = 4
    BANK_TRANSFER = 6
    VIRTUAL_ACCOUNT = 7
    KAKAOPAY = 15
    NAVERPAY = 16
    SMILEPAY = 21
    APPLEPAY = 23
    TOSSPAY = 25


class RebillCycleType(str, Enum):
    MONTH = "Month"
    WEEK = "Week"
    DAY = "Day"


_PHONE_SEPARATORS = re.compile(r"[\s-]")


def _normalize_phone(raw: str) -> str:
    phone = _PHONE_SEPARATORS.sub("", raw or "")
    if not phone.isdigit():
        raise PayAppError("INVALID_PARAMS", f"수신 휴대폰 번호가 올바르지 않습니다: {raw!r}")
    return phone


def _require_text(value: Optional[str], label: str) -> str:
    text = (value or "").strip()
    if not text:
        raise PayAppError("INVALID_PARAMS", f"{label} 값이 필요합니다.")
    return text


def require_identifier(value: Any, label: str) -> str:
    """Return ``value`` as a non-empty string; ``None`` and bools are rejected."""
    if value is None or isinstance(value, bool) or not isinstance(value, (str, int)):
        raise PayAppError("INVALID_PARAMS", f"{label} 값이 필요합니다.")
    return _require_text(str(value), label)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _require_positive(value: Any, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise PayAppError("INVALID_PARAMS", f"{label} 값은 0보다 큰 정수여야 합니다.")
    return value


def _yn(value: Optional[bool]) -> Optional[str]:
    if value is None:
        return None
    return "y" if value else "n"


def _compact(params: Mapping[str, Any]) -> Dict[str, str]:
    return {key: str(value) for key, value in params.items() if value is not None}


@dataclass(frozen=True)
class PaymentRequest:
    """A one-time payment request (``cmd=payrequest``)."""

    goodname: str
    price: int
    recvphone: str
    memo: Optional[str] = None
    reqaddr: bool = False
    feedbackurl: Optional[str] = None
    returnurl: Optional[str] = None
    var1: Optional[str] = None
    var2: Optional[str] = None
    smsuse: Optional[bool] = None
    openpaytype: Sequence[str] = ()
    checkretry: Optional[bool] = None
    currency: Optional[str] = None
    skip_cstpage: Optional[bool] = None
    amount_taxable: Optional[int] = None
    amount_taxfree: Optional[int] = None
    amount_vat: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "goodname", _require_text(self.goodname, "goodname"))
        _require_positive(self.price, "price")
        object.__setattr__(self, "recvphone", _normalize_phone(self.recvphone))
        object.__setattr__(self, "openpaytype", tuple(self.openpaytype))

    def to_params(self) -> Dict[str, str]:
        return _compact(
            {
                "goodname": self.goodname,
                "price": self.price,
                "recvphone": self.recvphone,
                "memo": self.memo,
                "reqaddr": "1" if self.reqaddr else "0",
                "feedbackurl": self.feedbackurl,
                "returnurl": self.returnurl,
                "var1": self.var1,
                "var2": self.var2,
                "smsuse": _yn(self.smsuse),
                "openpaytype": ",".join(self.openpaytype) or None,
                "checkretry": _yn(self.checkretry),
                "currency": self.currency,
                "skip_cstpage": _yn(self.skip_cstpage),
                "amount_taxable": self.amount_taxable,
                "amount_taxfree": self.amount_taxfree,
                "amount_vat": self.amount_vat,
            }
        )


@dataclass(frozen=True)
class RecurringPaymentRequest:
    """
    A recurring payment registration (``cmd=rebillRegist``).

    Monthly cycles bill on ``cycle_month`` (1-31, or 90 for the last day of
    the month); weekly cycles bill on ``cycle_week`` (1 = Monday ... 7).
    Billing stops after ``expire``.
    """

    goodname: str
    goodprice: int
    recvphone: str
    cycle_type: RebillCycleType
    expire: date
    cycle_month: Optional[int] = None
    cycle_week: Optional[int] = None
    memo: Optional[str] = None
    feedbackurl: Optional[str] = None
    failurl: Optional[str] = None
    returnurl: Optional[str] = None
    var1: Optional[str] = None
    var2: Optional[str] = None
    smsuse: Optional[bool] = None
    openpaytype: Sequence[str] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "goodname", _require_text(self.goodname, "goodname"))
        _require_positive(self.goodprice, "goodprice")
        object.__setattr__(self, "recvphone", _normalize_phone(self.recvphone))
        object.__setattr__(self, "openpaytype", tuple(self.openpaytype))

        try:
            cycle_type = RebillCycleType(self.cycle_type)
        except ValueError as exc:
            raise PayAppError(
                "INVALID_PARAMS", f"지원하지 않는 정기결제 주기입니다: {self.cycle_type!r}"
            ) from exc
        object.__setattr__(self, "cycle_type", cycle_type)

        if isinstance(self.expire, datetime):
            object.__setattr__(self, "expire", self.expire.date())
        elif not isinstance(self.expire, date):
            raise PayAppError("INVALID_PARAMS", "expire 값은 날짜여야 합니다.")

        if cycle_type is RebillCycleType.MONTH:
            if not _is_int(self.cycle_month) or not (
                1 <= self.cycle_month <= 31 or self.cycle_month == 90
            ):
                raise PayAppError(
                    "INVALID_PARAMS", "월 정기결제는 1~31일 또는 90(말일)을 지정해야 합니다."
                )
        elif cycle_type is RebillCycleType.WEEK:
            if not _is_int(self.cycle_week) or not 1 <= self.cycle_week <= 7:
                raise PayAppError(
                    "INVALID_PARAMS", "주 정기결제는 1~7 요일을 지정해야 합니다."
                )

    def to_params(self) -> Dict[str, str]:
        return _compact(
            {
                "goodname": self.goodname,
                "goodprice": self.goodprice,
                "recvphone": self.recvphone,
                "rebillCycleType": self.cycle_type.value,
                "rebillCycleMonth": (
                    self.cycle_month if self.cycle_type is RebillCycleType.MONTH else None
                ),
                "rebillCycleWeek": (
                    self.cycle_week if self.cycle_type is RebillCycleType.WEEK else None
                ),
                "rebillExpire": self.expire.strftime("%Y-%m-%d"),
                "memo": self.memo,
                "feedbackurl": self.feedbackurl,
                "failurl": self.failurl,
                "returnurl": self.returnurl,
                "var1": self.var1,
                "var2": self.var2,
                "smsuse": _yn(self.smsuse),
                "openpaytype": ",".join(self.openpaytype) or None,
            }
        )


@dataclass(frozen=True)
class CancelRequest:
    """Full or partial cancellation of a payment identified by ``mul_no``."""

    mul_no: str
    memo: str
    part_price: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "mul_no", require_identifier(self.mul_no, "mul_no"))
        object.__setattr__(self, "memo", _require_text(self.memo, "cancelmemo"))
        if self.part_price is not None:
            _require_positive(self.part_price, "cancelprice")

    @property
    def partial(self) -> bool:
        return self.part_price is not None

    def to_params(self) -> Dict[str, str]:
        return _compact(
            {
                "mul_no": self.mul_no,
                "cancelmemo": self.memo,
                "partcancel": "1" if self.partial else "0",
                "cancelprice": self.part_price,
            }
        )


@dataclass(frozen=True)
class PaymentRequestResult:
    mul_no: str
    payurl: Optional[str]
    qrurl: Optional[str]
    raw: Dict[str, str]

    @classmethod
    def from_response(cls, payload: Dict[str, str]) -> "PaymentRequestResult":
        return cls(
            mul_no=payload.get("mul_no", ""),
            payurl=payload.get("payurl") or None,
            qrurl=payload.get("qrurl") or None,
            raw=payload,
        )


@dataclass(frozen=True)
class RecurringPaymentResult:
    rebill_no: str
    payurl: Optional[str]
    raw: Dict[str, str]

    @classmethod
    def from_response(cls, payload: Dict[str, str]) -> "RecurringPaymentResult":
        return cls(
            rebill_no=payload.get("rebill_no", ""),
            payurl=payload.get("payurl") or None,
            raw=payload,
        )


@dataclass(frozen=True)
class CommandResult:
    state: str
    raw: Dict[str, str]

    @property
    def success(self) -> bool:
        return self.state == "1"

    @classmethod
    def from_response(cls, payload: Dict[str, str]) -> "CommandResult":
        return cls(state=payload.get("state", ""), raw=payload)


def _first(value: Any) -> Optional[str]:
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return None
    return str(value)


def _to_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _to_pay_state(value: Optional[int]) -> Optional[int]:
    if value is None:
        return None
    try:
        return PayState(value)
    except ValueError:
        return value


def _to_pay_type(value: Optional[int]) -> Optional[int]:
    if value is None:
        return None
    try:
        return PayType(value)
    except ValueError:
        return value


def flatten_form(values: Mapping[str, Any]) -> Dict[str, str]:
    """Collapse a form mapping whose values may be lists into plain strings."""
    flat: Dict[str, str] = {}
    for key, value in values.items():
        text = _first(value)
        if text is not None:
            flat[str(key)] = text
    return flat


@dataclass(frozen=True)
class PayAppFeedback:
    """
    A payment notification posted by PayApp to the merchant's feedback URL.

    Parsing is lenient: unparsable numbers become ``None`` and unknown
    ``pay_state``/``pay_type`` codes stay plain ints. Use
    :func:`payapp_core.core.feedback.validate_feedback` to decide whether a
    payload is acceptable.
    """

    userid: Optional[str]
    linkkey: Optional[str]
    linkval: Optional[str]
    mul_no: Optional[str]
    pay_state: Optional[int]
    price: Optional[int] = None
    goodname: Optional[str] = None
    recvphone: Optional[str] = None
    memo: Optional[str] = None
    pay_memo: Optional[str] = None
    reqaddr: Optional[str] = None
    pay_addr: Optional[str] = None
    reqdate: Optional[str] = None
    pay_date: Optional[str] = None
    pay_type: Optional[int] = None
    var1: Optional[str] = None
    var2: Optional[str] = None
    payurl: Optional[str] = None
    csturl: Optional[str] = None
    card_name: Optional[str] = None
    currency: Optional[str] = None
    rebill_no: Optional[str] = None
    raw: Dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def is_completed(self) -> bool:
        return self.pay_state in COMPLETED_STATES

    @property
    def is_cancelled(self) -> bool:
        return self.pay_state in CANCELLED_STATES

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "PayAppFeedback":
        flat = flatten_form(values)

        def text(key: str) -> Optional[str]:
            value = flat.get(key)
            return value if value else None

        return cls(
            userid=text("userid"),
            linkkey=text("linkkey"),
            linkval=text("linkval"),
            mul_no=text("mul_no"),
            pay_state=_to_pay_state(_to_int(text("pay_state"))),
            price=_to_int(text("price")),
            goodname=text("goodname"),
            recvphone=text("recvphone"),
            memo=text("memo"),
            pay_memo=text("pay_memo"),
            reqaddr=text("reqaddr"),
            pay_addr=text("pay_addr"),
            reqdate=text("reqdate"),
            pay_date=text("pay_date"),
            pay_type=_to_pay_type(_to_int(text("pay_type"))),
            var1=text("var1"),
            var2=text("var2"),
            payurl=text("payurl"),
            csturl=text("csturl"),
            card_name=text("card_name"),
            currency=text("currency"),
            rebill_no=text("rebill_no"),
            raw=flat,
        )

    @classmethod
    def from_body(cls, body: str | bytes, *, encoding: str = "utf-8") -> "PayAppFeedback":
        return cls.from_mapping(parse_form_body(body, encoding=encoding))


def parse_form_body(body: str | bytes, *, encoding: str = "utf-8") -> Dict[str, str]:
    """Parse a url-encoded ``key=value&...`` body; later keys win."""
    if isinstance(body, bytes):
        body = body.decode(encoding, errors="replace")
    return dict(parse_qsl(body, keep_blank_values=True, encoding=encoding))


@dataclass(frozen=True)
class FeedbackValidation:
    valid: bool
    errors: Tuple[str, ...] = ()
    feedback: Optional[PayAppFeedback] = None

    def __bool__(self) -> bool:
        return self.valid
