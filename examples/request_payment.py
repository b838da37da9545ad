"""
Minimal script that uses the public API to create a PayApp payment request
and print the checkout snippet for the same request.
"""

from __future__ import annotations

import argparse
import logging
import sys

from payapp_core import (
    ConfigError,
    PayAppError,
    PaymentRequest,
    create_payapp_client,
    init_payapp_sdk,
    load_payapp_config,
    load_payapp_sdk,
    request_payment_with_sdk,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a PayApp payment request")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing PAYAPP_* settings",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    parser.add_argument("--userid", help="PayApp seller id (overrides PAYAPP_USERID)")
    parser.add_argument("--goodname", default="테스트 상품", help="Product name")
    parser.add_argument("--price", type=int, default=1000, help="Amount in KRW")
    parser.add_argument("--recvphone", required=True, help="Buyer's mobile number")
    parser.add_argument(
        "--sdk-only",
        action="store_true",
        help="Only print the browser checkout snippet; do not call the REST API",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        config = load_payapp_config(env_file=args.env_file, userid=args.userid)
        request = PaymentRequest(
            goodname=args.goodname,
            price=args.price,
            recvphone=args.recvphone,
        )
    except (ConfigError, PayAppError) as exc:
        logging.error("Invalid input: %s", exc)
        return 1

    sdk = init_payapp_sdk(config)
    print(load_payapp_sdk())
    print("<script>")
    print(request_payment_with_sdk(sdk, request))
    print("</script>")

    if args.sdk_only:
        return 0

    client = create_payapp_client(config=config)
    try:
        result = client.request_payment(request)
    except PayAppError as exc:
        logging.error("Payment request failed: %s", exc)
        return 1

    logging.info("Payment request %s created: %s", result.mul_no, result.payurl)
    return 0


if __name__ == "__main__":
    sys.exit(main())
