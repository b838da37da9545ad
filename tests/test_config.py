"""Tests for configuration loading and environment layering."""
from __future__ import annotations

import pytest

from payapp_core import ConfigError, PayAppParameters, load_env_file, load_payapp_config
from payapp_core.core.config import DEFAULT_API_URL
from payapp_core.core.environment import build_environment


def test_minimal_config():
    config = load_payapp_config(env_file=None, base={"PAYAPP_USERID": "seller"})
    assert config.userid == "seller"
    assert config.linkkey is None
    assert config.api_url == DEFAULT_API_URL
    assert config.timeout_seconds == 30


def test_missing_userid():
    with pytest.raises(ConfigError):
        load_payapp_config(env_file=None, base={"PAYAPP_USERID": "  "})


def test_layering(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# PayApp credentials\n"
        "PAYAPP_USERID=from-file\n"
        'export PAYAPP_LINKKEY="file-key"\n'
        "PAYAPP_LINKVAL='file-val'\n"
        "PAYAPP_SHOPNAME=File Shop\n",
        encoding="utf-8",
    )

    config = load_payapp_config(
        env_file=str(env_file),
        base={"PAYAPP_USERID": "from-base"},
        overrides={"PAYAPP_SHOPNAME": "Override Shop"},
        linkval="kwarg-val",
    )

    assert config.userid == "from-base"
    assert config.linkkey == "file-key"
    assert config.linkval == "kwarg-val"
    assert config.shopname == "Override Shop"


def test_parameters_bundle():
    config = load_payapp_config(
        env_file=None,
        base={},
        parameters=PayAppParameters(userid="seller", timeout_seconds=5),
    )
    assert config.timeout_seconds == 5


def test_parameters_as_overrides():
    assert PayAppParameters(userid="seller", timeout_seconds=5).as_overrides() == {
        "PAYAPP_USERID": "seller",
        "PAYAPP_TIMEOUT_SECONDS": "5",
    }


@pytest.mark.parametrize(
    "values",
    [
        {"PAYAPP_TIMEOUT_SECONDS": "soon"},
        {"PAYAPP_TIMEOUT_SECONDS": "0"},
        {"PAYAPP_API_URL": "api.payapp.kr"},
        {"PAYAPP_FEEDBACK_URL": "ftp://shop.example.com/hook"},
    ],
)
def test_invalid_values(values):
    with pytest.raises(ConfigError):
        load_payapp_config(env_file=None, base={"PAYAPP_USERID": "seller", **values})


def test_secrets_not_in_repr(config):
    text = repr(config)
    assert "link-key" not in text
    assert "link-val" not in text
    assert "seller" in text


def test_require_credentials():
    config = load_payapp_config(env_file=None, base={"PAYAPP_USERID": "seller"})
    with pytest.raises(ConfigError):
        config.require_linkkey()
    with pytest.raises(ConfigError):
        config.require_linkval()


def test_environment_keeps_only_payapp_keys(tmp_path):
    environment = build_environment(
        env_file=str(tmp_path / "missing.env"),
        base={"PATH": "/usr/bin", "PAYAPP_USERID": "seller"},
    )
    assert dict(environment.variables) == {"PAYAPP_USERID": "seller"}
    assert "PAYAPP_USERID" in environment


def test_load_env_file_preserves_existing(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("PAYAPP_USERID=file\nPAYAPP_LINKVAL=val\n", encoding="utf-8")
    environ = {"PAYAPP_USERID": "existing"}

    merged = load_env_file(str(env_file), environ=environ)

    assert merged == {"PAYAPP_USERID": "existing", "PAYAPP_LINKVAL": "val"}
    assert environ["PAYAPP_LINKVAL"] == "val"
