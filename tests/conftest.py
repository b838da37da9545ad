from __future__ import annotations

import os
from typing import Any, Dict
from unittest.mock import Mock
from urllib.parse import urlencode

import pytest
import requests

from payapp_core import PayAppConfig


def make_response(fields: Dict[str, Any], status_code: int = 200) -> Mock:
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.text = urlencode(fields)
    return response


@pytest.fixture(autouse=True)
def clean_payapp_env(monkeypatch):
    """Keep the developer's PAYAPP_* variables out of the tests."""
    for key in list(os.environ):
        if key.startswith("PAYAPP_"):
            monkeypatch.delenv(key)


@pytest.fixture
def config() -> PayAppConfig:
    return PayAppConfig(
        userid="seller",
        linkkey="link-key",
        linkval="link-val",
        shopname="테스트상점",
        feedback_url="https://shop.example.com/payapp/feedback",
    )


@pytest.fixture
def session() -> Mock:
    session = Mock(spec=requests.Session)
    session.post.return_value = make_response({"state": "1"})
    return session


@pytest.fixture
def feedback_form() -> Dict[str, str]:
    return {
        "userid": "seller",
        "linkkey": "link-key",
        "linkval": "link-val",
        "mul_no": "123456",
        "pay_state": "4",
        "price": "1000",
        "goodname": "테스트 상품",
        "pay_type": "1",
        "var1": "order-1",
    }
