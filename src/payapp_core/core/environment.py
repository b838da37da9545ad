"""
Utilities for resolving the ``PAYAPP_*`` settings used by the helpers.

Values are read from a base mapping (``os.environ`` by default), a ``.env``
file and explicit overrides, and handed to
:class:`payapp_core.core.config.PayAppConfig` as a plain mapping.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, MutableMapping, Optional

ENV_PREFIX = "PAYAPP_"


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def _parse_env_file(path: Path) -> Dict[str, str]:
    values: Dict[str, str] = {}
    try:
        data = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return values

    for raw_line in data.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, value = line.split("=", 1)
        values[key.strip()] = _unquote(value.strip())
    return values


def load_env_file(
    path: str = ".env",
    *,
    environ: Optional[MutableMapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Load variables from ``path`` into ``environ`` without clobbering keys
    that are already set, and return the merged mapping.
    """
    target: MutableMapping[str, str] = environ if environ is not None else os.environ
    for key, value in _parse_env_file(Path(path)).items():
        target.setdefault(key, value)
    return dict(target)


@dataclass(frozen=True)
class PayAppEnvironment:
    """The ``PAYAPP_*`` variables visible to the configuration loader."""

    variables: Mapping[str, str]

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.variables.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self.variables


def build_environment(
    *,
    env_file: Optional[str] = ".env",
    base: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> PayAppEnvironment:
    """
    Assemble a :class:`PayAppEnvironment` from multiple sources.

    ``base`` defaults to :data:`os.environ`; pass ``env_file=None`` to skip
    the ``.env`` file. Overrides always win. Keys without the ``PAYAPP_``
    prefix are dropped.
    """
    merged: Dict[str, str] = dict(base if base is not None else os.environ)

    if env_file is not None:
        for key, value in _parse_env_file(Path(env_file)).items():
            merged.setdefault(key, value)

    if overrides:
        merged.update(overrides)

    return PayAppEnvironment(
        variables={k: v for k, v in merged.items() if k.startswith(ENV_PREFIX)}
    )
