"""
Configuration objects and helpers for the PayApp client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

from .environment import build_environment

__all__ = [
    "ConfigError",
    "DEFAULT_API_URL",
    "PayAppConfig",
    "PayAppParameters",
    "load_payapp_config",
]

DEFAULT_API_URL = "https://api.payapp.kr/oapi/apiLoad.html"
DEFAULT_TIMEOUT_SECONDS = 30

_PARAMETER_TO_ENV_KEY = {
    "userid": "PAYAPP_USERID",
    "linkkey": "PAYAPP_LINKKEY",
    "linkval": "PAYAPP_LINKVAL",
    "shopname": "PAYAPP_SHOPNAME",
    "api_url": "PAYAPP_API_URL",
    "feedback_url": "PAYAPP_FEEDBACK_URL",
    "timeout_seconds": "PAYAPP_TIMEOUT_SECONDS",
}


class ConfigError(Exception):
    """Raised when the supplied configuration is invalid."""


@dataclass(frozen=True)
class PayAppParameters:
    """
    Explicit parameter bundle for constructing :class:`PayAppConfig`.

    Equivalent to passing the same keyword arguments to
    :func:`load_payapp_config`.
    """

    userid: Optional[str] = None
    linkkey: Optional[str] = None
    linkval: Optional[str] = None
    shopname: Optional[str] = None
    api_url: Optional[str] = None
    feedback_url: Optional[str] = None
    timeout_seconds: Optional[int | str] = None

    def as_overrides(self) -> Dict[str, str]:
        overrides: Dict[str, str] = {}
        for field_name, env_key in _PARAMETER_TO_ENV_KEY.items():
            value = getattr(self, field_name)
            if value is None:
                continue
            overrides[env_key] = str(value)
        return overrides


def _collect_parameter_overrides(
    parameters: Optional[PayAppParameters],
    explicit: Mapping[str, Any],
) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    if parameters is not None:
        overrides.update(parameters.as_overrides())

    for key, value in explicit.items():
        if value is None:
            continue
        try:
            env_key = _PARAMETER_TO_ENV_KEY[key]
        except KeyError as exc:  # pragma: no cover
            raise TypeError(f"Unknown PayApp parameter '{key}'") from exc
        overrides[env_key] = str(value)
    return overrides


def _optional(values: Mapping[str, str], key: str) -> Optional[str]:
    value = values.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _normalize_url(raw_url: str, field_name: str) -> str:
    value = raw_url.strip()
    parsed = urlparse(value)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ConfigError(f"{field_name} must be an absolute http(s) URL")
    return value


@dataclass(frozen=True)
class PayAppConfig:
    userid: str
    linkkey: Optional[str] = None
    linkval: Optional[str] = None
    shopname: Optional[str] = None
    api_url: str = DEFAULT_API_URL
    feedback_url: Optional[str] = None
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS

    def require_linkkey(self) -> str:
        if not self.linkkey:
            raise ConfigError("PAYAPP_LINKKEY is required for this operation")
        return self.linkkey

    def require_linkval(self) -> str:
        if not self.linkval:
            raise ConfigError("PAYAPP_LINKVAL is required for this operation")
        return self.linkval

    def __repr__(self) -> str:
        return (
            f"PayAppConfig(userid={self.userid!r}, shopname={self.shopname!r}, "
            f"api_url={self.api_url!r}, feedback_url={self.feedback_url!r}, "
            f"timeout_seconds={self.timeout_seconds!r})"
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "PayAppConfig":
        userid = _optional(values, "PAYAPP_USERID")
        if userid is None:
            raise ConfigError("PAYAPP_USERID must be provided")

        api_url = _normalize_url(
            values.get("PAYAPP_API_URL", DEFAULT_API_URL), "PAYAPP_API_URL"
        )

        feedback_raw = _optional(values, "PAYAPP_FEEDBACK_URL")
        feedback_url = (
            _normalize_url(feedback_raw, "PAYAPP_FEEDBACK_URL")
            if feedback_raw is not None
            else None
        )

        timeout_raw = values.get("PAYAPP_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))
        try:
            timeout_seconds = int(timeout_raw)
        except ValueError as exc:
            raise ConfigError(
                f"PAYAPP_TIMEOUT_SECONDS must be an integer, got '{timeout_raw}'"
            ) from exc
        if timeout_seconds <= 0:
            raise ConfigError("PAYAPP_TIMEOUT_SECONDS must be greater than zero")

        return cls(
            userid=userid,
            linkkey=_optional(values, "PAYAPP_LINKKEY"),
            linkval=_optional(values, "PAYAPP_LINKVAL"),
            shopname=_optional(values, "PAYAPP_SHOPNAME"),
            api_url=api_url,
            feedback_url=feedback_url,
            timeout_seconds=timeout_seconds,
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
        parameters: Optional[PayAppParameters] = None,
        userid: Optional[str] = None,
        linkkey: Optional[str] = None,
        linkval: Optional[str] = None,
        shopname: Optional[str] = None,
        api_url: Optional[str] = None,
        feedback_url: Optional[str] = None,
        timeout_seconds: Optional[int | str] = None,
    ) -> "PayAppConfig":
        parameter_overrides = _collect_parameter_overrides(
            parameters,
            {
                "userid": userid,
                "linkkey": linkkey,
                "linkval": linkval,
                "shopname": shopname,
                "api_url": api_url,
                "feedback_url": feedback_url,
                "timeout_seconds": timeout_seconds,
            },
        )
        merged_overrides = dict(overrides or {})
        merged_overrides.update(parameter_overrides)

        environment = build_environment(
            env_file=env_file,
            base=base,
            overrides=merged_overrides,
        )
        return cls.from_mapping(environment.variables)


def load_payapp_config(
    *,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[PayAppParameters] = None,
    userid: Optional[str] = None,
    linkkey: Optional[str] = None,
    linkval: Optional[str] = None,
    shopname: Optional[str] = None,
    api_url: Optional[str] = None,
    feedback_url: Optional[str] = None,
    timeout_seconds: Optional[int | str] = None,
) -> PayAppConfig:
    """
    Convenience wrapper that mirrors :meth:`PayAppConfig.from_env`.

    Settings may come from environment variables, a ``.env`` file, direct
    keyword arguments, or any combination of the three.
    """
    return PayAppConfig.from_env(
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        userid=userid,
        linkkey=linkkey,
        linkval=linkval,
        shopname=shopname,
        api_url=api_url,
        feedback_url=feedback_url,
        timeout_seconds=timeout_seconds,
    )
