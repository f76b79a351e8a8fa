# =============================================================================
# core/config.py  —  Connection Settings from the Environment
# =============================================================================
#
# Two naming schemes are accepted; the newer one wins when both are set:
#
#     new             legacy
#     ODOO_HOST       ODOO_URL
#     ODOO_DB         ODOO_DATABASE
#     ODOO_USER       ODOO_USERNAME
#     ODOO_PASS       ODOO_API_KEY
#
# The URL is reduced to scheme://host[:port].  People often paste the
# address of a web page (".../odoo/action-123", ".../web/login"); the XML-RPC
# endpoints always live at the root.
#
# .env files are loaded by the entry points (python-dotenv) before this runs.
# =============================================================================

import os
from typing import Mapping
from urllib.parse import urlsplit

from core.models import OdooConfig


_SETTINGS = (
    # (attribute, new name, legacy name)
    ("url", "ODOO_HOST", "ODOO_URL"),
    ("database", "ODOO_DB", "ODOO_DATABASE"),
    ("username", "ODOO_USER", "ODOO_USERNAME"),
    ("password", "ODOO_PASS", "ODOO_API_KEY"),
)


class ConfigError(ValueError):
    """The environment does not describe a usable Odoo connection."""


def normalize_url(url: str) -> str:
    """Strip path, query and fragment: https://h:8069/web/login → https://h:8069"""
    parts = urlsplit(url.strip())
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise ConfigError(f"Invalid Odoo URL: {url!r} (expected http(s)://host[:port])")
    try:
        port = parts.port
    except ValueError as exc:
        raise ConfigError(f"Invalid Odoo URL: {url!r} ({exc})") from exc

    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    return f"{parts.scheme}://{host}" + (f":{port}" if port else "")


def load_config(environ: Mapping[str, str] | None = None) -> OdooConfig:
    """Build the OdooConfig from environment variables.

    Raises:
        ConfigError: a value is missing or the URL is not http(s).
    """
    env = os.environ if environ is None else environ

    values: dict[str, str] = {}
    missing: list[str] = []
    for attr, new_name, legacy_name in _SETTINGS:
        value = env.get(new_name) or env.get(legacy_name) or ""
        if not value.strip():
            missing.append(f"{new_name}/{legacy_name}")
        values[attr] = value

    if missing:
        raise ConfigError(
            "Missing required configuration: " + ", ".join(missing) + ". "
            "Provide either ODOO_HOST/ODOO_DB/ODOO_USER/ODOO_PASS or "
            "ODOO_URL/ODOO_DATABASE/ODOO_USERNAME/ODOO_API_KEY"
        )

    values["url"] = normalize_url(values["url"])
    return OdooConfig(**values)
