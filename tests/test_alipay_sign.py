"""MD5 signature verification of Alipay callbacks."""
import hashlib

import pytest

from storefront.services.alipay import AlipayNotify, filter_params, link_string, md5_sign

KEY = "k3y"


@pytest.fixture
def notify() -> AlipayNotify:
    return AlipayNotify(partner="2088", key=KEY, gateway_url="https://gateway.invalid/gateway.do")


def test_filter_and_link_string():
    params = {"b": "2", "a": "1", "sign": "x", "sign_type": "MD5", "empty": ""}
    assert filter_params(params) == {"a": "1", "b": "2"}
    assert link_string(filter_params(params)) == "a=1&b=2"


def test_md5_sign_matches_protocol():
    params = {"out_trade_no": "SO1", "total_fee": "1.00", "sign_type": "MD5"}
    expected = hashlib.md5(b"out_trade_no=SO1&total_fee=1.00" + KEY.encode()).hexdigest()
    assert md5_sign(params, KEY) == expected


def test_verify_return_accepts_valid_signature(notify):
    params = {"out_trade_no": "SO1", "trade_status": "TRADE_SUCCESS", "body": "fk|1|2|abc"}
    params["sign"] = md5_sign(params, KEY)
    assert notify.verify_return(params) is True


def test_uppercase_signature_is_accepted(notify):
    params = {"out_trade_no": "SO1"}
    params["sign"] = md5_sign(params, KEY).upper()
    assert notify.verify_return(params) is True


def test_tampered_params_fail(notify):
    params = {"out_trade_no": "SO1", "total_fee": "1.00"}
    params["sign"] = md5_sign(params, KEY)
    params["total_fee"] = "100.00"
    assert notify.verify_return(params) is False


def test_missing_sign_or_params_fail(notify):
    assert notify.verify_return({}) is False
    assert notify.verify_return({"out_trade_no": "SO1"}) is False


def test_unsupported_sign_type_fails():
    rsa = AlipayNotify(partner="2088", key=KEY, sign_type="RSA")
    params = {"out_trade_no": "SO1"}
    params["sign"] = md5_sign(params, KEY)
    assert rsa.verify_return(params) is False


def test_empty_key_never_verifies():
    params = {"out_trade_no": "SO1"}
    params["sign"] = md5_sign(params, "")
    assert AlipayNotify(partner="2088", key="").verify_return(params) is False


def test_notify_id_is_checked_with_gateway_when_enabled(monkeypatch):
    notify = AlipayNotify(partner="2088", key=KEY, gateway_url="https://gateway.invalid/gateway.do", verify_notify_id=True)
    params = {"out_trade_no": "SO1", "notify_id": "n1"}
    params["sign"] = md5_sign(params, KEY)

    monkeypatch.setattr(notify, "notify_id_response", lambda notify_id: "true")
    assert notify.verify_notify(params) is True
    monkeypatch.setattr(notify, "notify_id_response", lambda notify_id: "false")
    assert notify.verify_notify(params) is False
    monkeypatch.setattr(notify, "notify_id_response", lambda notify_id: "")
    assert notify.verify_notify(params) is False
