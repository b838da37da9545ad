"""
Server-side helpers for driving the PayApp browser SDK.

The PayApp checkout SDK is a script that runs in the buyer's browser. These
helpers render the ``<script>`` tag that loads it and the statements that
configure and invoke it, so any template engine can embed them.
"""

from __future__ import annotations

import html
import json
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from .config import PayAppConfig
from .errors import PayAppError
from .types import PaymentRequest, RecurringPaymentRequest

__all__ = [
    "PAYAPP_SDK_URL",
    "PayAppSDK",
    "init_payapp_sdk",
    "load_payapp_sdk",
    "request_payment_with_sdk",
    "request_recurring_payment_with_sdk",
]

PAYAPP_SDK_URL = "https://lite.payapp.kr/public/api/v2/payapp-lite.js"


def _js_string(value: str) -> str:
    # Keep the literal from terminating the enclosing <script> element.
    return json.dumps(value, ensure_ascii=False).replace("</", "<\\/")


def _call(method: str, key: str, value: str) -> str:
    return f"PayApp.{method}({_js_string(key)}, {_js_string(value)});"


def load_payapp_sdk(*, src: str = PAYAPP_SDK_URL, nonce: Optional[str] = None) -> str:
    """Return the ``<script>`` tag that loads the PayApp SDK."""
    if not src:
        raise PayAppError("SDK_NOT_LOADED", "PayApp SDK 주소가 비어 있습니다.")
    attributes = f'src="{html.escape(src, quote=True)}"'
    if nonce:
        attributes += f' nonce="{html.escape(nonce, quote=True)}"'
    return f"<script {attributes}></script>"


@dataclass(frozen=True)
class PayAppSDK:
    """Defaults applied to every SDK call via ``PayApp.setDefault``."""

    userid: str
    shopname: Optional[str] = None
    src: str = PAYAPP_SDK_URL

    def defaults(self) -> Dict[str, str]:
        values = {"userid": self.userid}
        if self.shopname:
            values["shopname"] = self.shopname
        return values

    def script_tag(self, *, nonce: Optional[str] = None) -> str:
        return load_payapp_sdk(src=self.src, nonce=nonce)

    def init_script(self) -> str:
        return "\n".join(
            _call("setDefault", key, value) for key, value in self.defaults().items()
        )


def init_payapp_sdk(
    config: Union[PayAppConfig, str],
    shopname: Optional[str] = None,
    *,
    src: str = PAYAPP_SDK_URL,
) -> PayAppSDK:
    """
    Build the SDK defaults from a :class:`PayAppConfig` or a bare seller id.

    An explicit ``shopname`` wins over the config's.
    """
    if isinstance(config, PayAppConfig):
        userid = config.userid
        shopname = shopname or config.shopname
    else:
        userid = config
    if not userid or not str(userid).strip():
        raise PayAppError("SDK_NOT_INITIALIZED")
    return PayAppSDK(userid=str(userid).strip(), shopname=shopname, src=src)


def _render(sdk: PayAppSDK, params: Dict[str, str], invoke: str) -> str:
    if not isinstance(sdk, PayAppSDK):
        raise PayAppError("SDK_NOT_INITIALIZED")
    lines: List[str] = [sdk.init_script()]
    lines.extend(_call("setParam", key, value) for key, value in params.items())
    lines.append(f"PayApp.{invoke}();")
    return "\n".join(lines)


def request_payment_with_sdk(sdk: PayAppSDK, request: PaymentRequest) -> str:
    """Render the statements that open the PayApp checkout for ``request``."""
    return _render(sdk, request.to_params(), "call")


def request_recurring_payment_with_sdk(
    sdk: PayAppSDK, request: RecurringPaymentRequest
) -> str:
    """Render the statements that open the recurring-payment registration."""
    return _render(sdk, request.to_params(), "rebill")
