"""Tests for the browser SDK rendering helpers."""
from __future__ import annotations

from datetime import date

import pytest

from payapp_core import (
    PAYAPP_SDK_URL,
    PayAppConfig,
    PayAppError,
    PaymentRequest,
    RebillCycleType,
    RecurringPaymentRequest,
    init_payapp_sdk,
    load_payapp_sdk,
    request_payment_with_sdk,
    request_recurring_payment_with_sdk,
)


def test_load_payapp_sdk_default():
    assert load_payapp_sdk() == f'<script src="{PAYAPP_SDK_URL}"></script>'


def test_load_payapp_sdk_escapes_attributes():
    tag = load_payapp_sdk(src='https://cdn.example.com/a.js?x="1"', nonce="abc")
    assert 'src="https://cdn.example.com/a.js?x=&quot;1&quot;"' in tag
    assert 'nonce="abc"' in tag


def test_load_payapp_sdk_requires_src():
    with pytest.raises(PayAppError) as excinfo:
        load_payapp_sdk(src="")
    assert excinfo.value.code == "SDK_NOT_LOADED"


class TestInitPayAppSDK:
    def test_from_config(self, config):
        sdk = init_payapp_sdk(config)
        assert sdk.defaults() == {"userid": "seller", "shopname": "테스트상점"}
        assert sdk.init_script() == (
            'PayApp.setDefault("userid", "seller");\n'
            'PayApp.setDefault("shopname", "테스트상점");'
        )

    def test_from_userid(self):
        sdk = init_payapp_sdk(" seller ", "Shop")
        assert sdk.userid == "seller"
        assert sdk.shopname == "Shop"

    def test_explicit_shopname_wins(self, config):
        assert init_payapp_sdk(config, "다른상점").shopname == "다른상점"

    @pytest.mark.parametrize("userid", ["", "   "])
    def test_requires_userid(self, userid):
        with pytest.raises(PayAppError) as excinfo:
            init_payapp_sdk(userid)
        assert excinfo.value.code == "SDK_NOT_INITIALIZED"

    def test_script_tag_uses_sdk_source(self):
        sdk = init_payapp_sdk(PayAppConfig(userid="seller"), src="https://cdn.example.com/p.js")
        assert sdk.script_tag() == '<script src="https://cdn.example.com/p.js"></script>'


def test_request_payment_with_sdk(config):
    script = request_payment_with_sdk(
        init_payapp_sdk(config),
        PaymentRequest(goodname="테스트 상품", price=1000, recvphone="01012345678"),
    )
    lines = script.splitlines()
    assert lines[0] == 'PayApp.setDefault("userid", "seller");'
    assert 'PayApp.setParam("goodname", "테스트 상품");' in lines
    assert 'PayApp.setParam("price", "1000");' in lines
    assert lines[-1] == "PayApp.call();"


def test_request_recurring_payment_with_sdk(config):
    script = request_recurring_payment_with_sdk(
        init_payapp_sdk(config),
        RecurringPaymentRequest(
            goodname="주 구독",
            goodprice=5000,
            recvphone="01012345678",
            cycle_type=RebillCycleType.WEEK,
            cycle_week=1,
            expire=date(2027, 6, 30),
        ),
    )
    assert 'PayApp.setParam("rebillCycleType", "Week");' in script
    assert 'PayApp.setParam("rebillCycleWeek", "1");' in script
    assert 'PayApp.setParam("rebillExpire", "2027-06-30");' in script
    assert script.endswith("PayApp.rebill();")


def test_values_cannot_break_out_of_script(config):
    script = request_payment_with_sdk(
        init_payapp_sdk(config),
        PaymentRequest(
            goodname='</script><script>alert("x")</script>',
            price=1000,
            recvphone="01012345678",
        ),
    )
    assert "</script>" not in script
    assert '<\\/script><script>alert(\\"x\\")<\\/script>' in script


def test_requires_initialized_sdk():
    with pytest.raises(PayAppError) as excinfo:
        request_payment_with_sdk(
            None,  # type: ignore[arg-type]
            PaymentRequest(goodname="x", price=1000, recvphone="01012345678"),
        )
    assert excinfo.value.code == "SDK_NOT_INITIALIZED"
