"""
Command-line interface for exercising the PayApp APIs.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from typing import Iterable, Sequence, Tuple

import requests

from .api import create_payapp_client
from .core.client import PayAppClient
from .core.config import ConfigError, load_payapp_config
from .core.errors import PayAppError
from .core.feedback import validate_feedback
from .core.types import (
    CancelRequest,
    PaymentRequest,
    RebillCycleType,
    RecurringPaymentRequest,
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _env_override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _collect_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, value in pairs:
        overrides[key] = value
    return overrides


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("Dates must look like YYYY-MM-DD") from exc


def _pay_types(value: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payapp-core",
        description="Call PayApp payment APIs from the command line",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing PAYAPP_* settings (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_env_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    request = commands.add_parser("request", help="Create a one-time payment request")
    request.add_argument("--goodname", required=True, help="Product name shown to the buyer")
    request.add_argument("--price", type=int, required=True, help="Amount in KRW")
    request.add_argument("--recvphone", required=True, help="Buyer's mobile number")
    request.add_argument("--memo", help="Memo shown on the payment page")
    request.add_argument("--feedback-url", help="Override PAYAPP_FEEDBACK_URL for this request")
    request.add_argument("--return-url", help="Page the buyer returns to after paying")
    request.add_argument("--var1", help="Merchant-defined value echoed in feedback")
    request.add_argument("--var2", help="Merchant-defined value echoed in feedback")
    request.add_argument("--no-sms", action="store_true", help="Do not send the payment SMS")
    request.add_argument(
        "--openpaytype",
        type=_pay_types,
        default=(),
        help="Comma-separated payment methods to offer (e.g. card,phone)",
    )

    cancel = commands.add_parser("cancel", help="Cancel a payment")
    cancel.add_argument("--mul-no", required=True, help="PayApp payment number")
    cancel.add_argument("--memo", required=True, help="Reason for the cancellation")
    cancel.add_argument("--part-price", type=int, help="Cancel only this amount")
    cancel.add_argument(
        "--request",
        action="store_true",
        help="File a cancel request instead of cancelling directly",
    )

    rebill = commands.add_parser("rebill", help="Register a recurring payment")
    rebill.add_argument("--goodname", required=True)
    rebill.add_argument("--goodprice", type=int, required=True)
    rebill.add_argument("--recvphone", required=True)
    rebill.add_argument(
        "--cycle",
        choices=[cycle.value for cycle in RebillCycleType],
        default=RebillCycleType.MONTH.value,
        help="Billing cycle (default: Month)",
    )
    rebill.add_argument("--cycle-month", type=int, help="Day of month (1-31, 90 = last day)")
    rebill.add_argument("--cycle-week", type=int, help="Day of week (1 = Monday .. 7)")
    rebill.add_argument("--expire", type=_iso_date, required=True, help="Last billing date")
    rebill.add_argument("--feedback-url", help="Override PAYAPP_FEEDBACK_URL for this request")
    rebill.add_argument("--fail-url", help="URL notified when a scheduled charge fails")

    for name, help_text in (
        ("rebill-cancel", "Cancel a recurring payment"),
        ("rebill-stop", "Pause a recurring payment"),
        ("rebill-start", "Resume a paused recurring payment"),
    ):
        control = commands.add_parser(name, help=help_text)
        control.add_argument("--rebill-no", required=True, help="PayApp recurring payment number")

    feedback = commands.add_parser(
        "validate-feedback",
        help="Check a url-encoded feedback body against the configured credentials",
    )
    feedback.add_argument(
        "body",
        nargs="?",
        help="Feedback body; read from stdin when omitted",
    )
    feedback.add_argument("--expected-price", type=int, help="Reject other amounts")
    return parser


def _run_command(client: PayAppClient, args: argparse.Namespace) -> int:
    if args.command == "request":
        result = client.request_payment(
            PaymentRequest(
                goodname=args.goodname,
                price=args.price,
                recvphone=args.recvphone,
                memo=args.memo,
                feedbackurl=args.feedback_url,
                returnurl=args.return_url,
                var1=args.var1,
                var2=args.var2,
                smsuse=False if args.no_sms else None,
                openpaytype=args.openpaytype,
            )
        )
        logging.info("Payment requested. mul_no=%s payurl=%s", result.mul_no, result.payurl)
        return 0

    if args.command == "cancel":
        request = CancelRequest(mul_no=args.mul_no, memo=args.memo, part_price=args.part_price)
        if args.request:
            client.request_cancel(request)
            logging.info("Cancel request filed for mul_no=%s", request.mul_no)
        else:
            client.cancel_payment(request)
            logging.info("Payment %s cancelled", request.mul_no)
        return 0

    if args.command == "rebill":
        result = client.request_recurring_payment(
            RecurringPaymentRequest(
                goodname=args.goodname,
                goodprice=args.goodprice,
                recvphone=args.recvphone,
                cycle_type=RebillCycleType(args.cycle),
                cycle_month=args.cycle_month,
                cycle_week=args.cycle_week,
                expire=args.expire,
                feedbackurl=args.feedback_url,
                failurl=args.fail_url,
            )
        )
        logging.info(
            "Recurring payment registered. rebill_no=%s payurl=%s",
            result.rebill_no,
            result.payurl,
        )
        return 0

    control = {
        "rebill-cancel": client.cancel_recurring_payment,
        "rebill-stop": client.stop_recurring_payment,
        "rebill-start": client.start_recurring_payment,
    }[args.command]
    control(args.rebill_no)
    logging.info("%s succeeded for rebill_no=%s", args.command, args.rebill_no)
    return 0


def _validate_feedback(config, args: argparse.Namespace) -> int:
    body = args.body if args.body is not None else sys.stdin.read()
    try:
        result = validate_feedback(body.strip(), config, expected_price=args.expected_price)
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    if not result.valid:
        logging.error("Feedback rejected: %s", "; ".join(result.errors))
        return 1

    feedback = result.feedback
    logging.info(
        "Feedback accepted for mul_no=%s (pay_state=%s)",
        feedback.mul_no if feedback else None,
        feedback.pay_state if feedback else None,
    )
    return 0


def run_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)
    overrides = _collect_overrides(args.set or ())

    try:
        config = load_payapp_config(env_file=args.env_file, overrides=overrides)
    except (ConfigError, ValueError) as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    if args.command == "validate-feedback":
        return _validate_feedback(config, args)

    client = create_payapp_client(config=config, session=requests.Session())
    try:
        return _run_command(client, args)
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1
    except PayAppError as exc:
        logging.error("%s failed: %s", args.command, exc)
        return 1


def main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
