"""
High-level entry points for constructing a PayApp client.
"""

from __future__ import annotations

from typing import Mapping, Optional

import requests

from .core.client import PayAppClient
from .core.config import PayAppConfig, PayAppParameters, load_payapp_config

__all__ = [
    "create_payapp_client",
]


def create_payapp_client(
    *,
    config: Optional[PayAppConfig] = None,
    session: Optional[requests.Session] = None,
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
) -> PayAppClient:
    """
    Construct a :class:`PayAppClient`.

    Callers can either supply a ready-made :class:`PayAppConfig` or let the
    helper assemble one from environment data and keyword arguments.
    """
    if config is not None:
        extras = (
            overrides,
            base,
            parameters,
            userid,
            linkkey,
            linkval,
            shopname,
            api_url,
            feedback_url,
            timeout_seconds,
        )
        if any(item is not None and item != {} for item in extras):
            raise ValueError(
                "Provide either a pre-built PayAppConfig or individual parameters, not both."
            )
        cfg = config
    else:
        cfg = load_payapp_config(
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
    return PayAppClient(cfg, session=session)
