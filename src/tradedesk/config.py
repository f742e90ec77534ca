"""Loading of tradedesk settings.

Values come from ``config.yml`` (or the file named by ``TRADEDESK_CONFIG``).
Any ``TRADEDESK_<SECTION>__<KEY>`` variable then overrides one setting, e.g.
``TRADEDESK_CACHE__PRICE_TTL=60`` or ``TRADEDESK_EXCHANGES__SANDBOX=true``.

The assets route looks prices up on this same server, so when
``pricing.base_url`` is not given it is derived from ``server.host`` and
``server.port``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Iterator

import yaml
from pydantic import ValidationError

from .settings import Settings

ENV_PREFIX = "TRADEDESK_"
DEFAULT_CONFIG = "config.yml"

# Read elsewhere, never mapped onto Settings
RESERVED_ENV = {"CONFIG", "LOG_LEVEL"}

WILDCARD_HOSTS = {"", "0.0.0.0", "::"}


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config root must be a mapping, got: {type(loaded)!r}")
    return loaded


def _env_overrides(environ: dict[str, str], prefix: str = ENV_PREFIX) -> Iterator[tuple[list[str], Any]]:
    """Yield ``(path, value)`` for every ``PREFIX<SECTION>__<KEY>`` variable.

    Values are parsed as YAML so ``true``, ``60`` and ``[USDT, USD]`` arrive
    typed. Anything YAML cannot parse is kept as the raw string.
    """
    for name, raw in environ.items():
        if not name.startswith(prefix):
            continue
        remainder = name[len(prefix):]
        if remainder in RESERVED_ENV:
            continue
        path = [part.lower() for part in remainder.split("__") if part]
        if not path:
            continue
        try:
            value = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        yield path, value


def _merge(data: dict[str, Any], path: list[str], value: Any) -> None:
    section = data
    for key in path[:-1]:
        child = section.get(key)
        if not isinstance(child, dict):
            child = section[key] = {}
        section = child
    section[path[-1]] = value


def local_price_url(settings: Settings) -> str:
    """URL at which this server's own price endpoint is reachable."""
    host = settings.server.host
    if host in WILDCARD_HOSTS:
        host = "127.0.0.1"
    elif ":" in host:
        host = f"[{host}]"
    return f"http://{host}:{settings.server.port}"


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from YAML, then apply ``TRADEDESK_SECTION__KEY`` overrides.

    Raises:
        ValueError: If the file is not a mapping or a value fails validation
    """
    if config_path is None:
        config_path = os.environ.get(f"{ENV_PREFIX}CONFIG", DEFAULT_CONFIG)

    data = _read_yaml(Path(config_path))
    for path, value in _env_overrides(dict(os.environ)):
        _merge(data, path, value)

    try:
        settings = Settings.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc

    if "base_url" not in settings.pricing.model_fields_set:
        pricing = settings.pricing.model_copy(update={"base_url": local_price_url(settings)})
        settings = settings.model_copy(update={"pricing": pricing})
    return settings
