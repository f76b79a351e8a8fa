# =============================================================================
# core/endpoints.py  —  Odoo XML-RPC Endpoint Resolution
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Odoo exposes two XML-RPC endpoints under one base address:
#     /xmlrpc/2/common  → version() and authenticate()
#     /xmlrpc/2/object  → execute_kw() for every model operation
#
#   This module derives both from the configured base URL and, when the URL
#   looks wrong, proposes corrected addresses for the common endpoint.
#
# WHY SUGGESTIONS?
#   The most frequent misconfiguration is pointing ODOO_URL at the web client
#   (a login page, a reverse proxy prefix, the wrong port).  Listing the
#   handful of layouts Odoo is usually deployed with turns a cryptic parse
#   failure into something the user can act on.
# =============================================================================

from urllib.parse import urlsplit

from core.models import UrlCheck


COMMON_PATH = "/xmlrpc/2/common"
OBJECT_PATH = "/xmlrpc/2/object"

DEFAULT_RPC_PORT = 8069    # Odoo's built-in HTTP server
DEFAULT_TLS_PORT = 443

_SCHEME_DEFAULT_PORTS = {"http": 80, "https": 443}


def common_url(base_url: str) -> str:
    """Address of the authentication/version endpoint."""
    return base_url + COMMON_PATH


def object_url(base_url: str) -> str:
    """Address of the data (execute_kw) endpoint."""
    return base_url + OBJECT_PATH


def explicit_port(parts) -> int | None:
    """Port written in the URL, ignoring one that equals the scheme default.

    ``https://host:443`` and ``https://host`` mean the same thing, so both
    count as "no port specified".  Raises ValueError for a malformed port.
    """
    port = parts.port
    if port is None or port == _SCHEME_DEFAULT_PORTS.get(parts.scheme):
        return None
    return port


def host_for_url(parts) -> str:
    """Hostname as it must appear in a URL (IPv6 literals keep brackets)."""
    host = parts.hostname or ""
    return f"[{host}]" if ":" in host else host


def _parse(url: str):
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise ValueError(f"Not an absolute http(s) URL: {url!r}")
    explicit_port(parts)  # validates the port
    return parts


def validate_and_suggest_urls(config_url: str) -> UrlCheck:
    """Check a base URL and list plausible common-endpoint addresses.

    Every rule below appends; none of them is exclusive.  Duplicates are
    dropped while keeping first-seen order, so the most specific guess
    (the URL exactly as configured) stays at the top.

    Example:
        "https://acme.example.com" yields, in order:
          https://acme.example.com/xmlrpc/2/common
          https://acme.example.com:8069/xmlrpc/2/common
          https://acme.example.com:443/xmlrpc/2/common
          https://acme.example.com/odoo/xmlrpc/2/common
          https://acme.example.com/web/xmlrpc/2/common
    """
    suggestions: list[str] = []

    try:
        parts = _parse(config_url)
    except ValueError:
        # Typical mistake: "odoo.example.com" without a scheme.
        if not config_url.startswith("http"):
            suggestions.append(f"https://{config_url}{COMMON_PATH}")
            suggestions.append(f"http://{config_url}:{DEFAULT_RPC_PORT}{COMMON_PATH}")
        return UrlCheck(is_valid=False, suggestions=list(dict.fromkeys(suggestions)))

    scheme = parts.scheme
    host = host_for_url(parts)
    port = explicit_port(parts)

    if parts.path in ("", "/"):
        suggestions.append(f"{config_url.rstrip('/')}{COMMON_PATH}")

    if port is None:
        suggestions.append(f"{scheme}://{host}:{DEFAULT_RPC_PORT}{COMMON_PATH}")
        suggestions.append(f"{scheme}://{host}:{DEFAULT_TLS_PORT}{COMMON_PATH}")

    # Common Odoo deployment layouts
    base = f"{scheme}://{host}" + (f":{port}" if port is not None else "")
    suggestions.extend([
        f"{base}{COMMON_PATH}",
        f"{scheme}://{host}:{DEFAULT_RPC_PORT}{COMMON_PATH}",
        f"{base}/odoo{COMMON_PATH}",
        f"{base}/web{COMMON_PATH}",
    ])

    return UrlCheck(is_valid=True, suggestions=list(dict.fromkeys(suggestions)))
