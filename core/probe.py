# =============================================================================
# core/probe.py  —  Raw HTTP Probe for Odoo Endpoints
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Answers "is this endpoint alive, and what does it claim to serve?"
#   without speaking XML-RPC at all.  It sends an empty POST (XML-RPC only
#   accepts POST) and looks at the status code and Content-Type.
#
# WHEN IS IT USED?
#   Only on the diagnostic path: when a call came back with HTML instead of
#   a methodResponse, and by the check_odoo_connection tool.  Normal queries
#   never pay for it.
#
# RESILIENCE:
#   Neither function here raises for network trouble.  probe() returns a
#   failed OdooResult and fetch_body() returns a placeholder string, so the
#   diagnosis always completes even when the server is unreachable.
#
# TLS:
#   Certificate verification is disabled for these two requests only.  A
#   self-signed or expired certificate must not hide the real problem.
# =============================================================================

import asyncio
import logging
from urllib.parse import urlsplit

import httpx

from core.endpoints import DEFAULT_RPC_PORT, DEFAULT_TLS_PORT, explicit_port, host_for_url
from core.models import OdooResult
from core.xmlrpc import USER_AGENT


logger = logging.getLogger(__name__)

PROBE_TIMEOUT = 10.0
BODY_FETCH_TIMEOUT = 5.0

# For an XML-RPC endpoint an empty POST is a malformed call: 400/500 with no
# useful body is the expected answer, and it proves the endpoint exists.
_ALIVE_STATUSES = {200, 400, 500}

BODY_FETCH_FAILED = "Unable to fetch response body"
BODY_FETCH_TIMED_OUT = "Response body fetch timed out"


class TransportProbe:
    """Probes paths on the host of a configured Odoo base URL."""

    def __init__(self, base_url: str, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url
        self._transport = transport

    def target_url(self, path: str) -> str:
        """Absolute URL for `path`, always with an explicit port.

        https → 443 and http → 8069 unless the base URL names a port other
        than the scheme default (so http://host:80 is probed on 8069).
        """
        parts = urlsplit(self.base_url)
        secure = parts.scheme == "https"
        port = explicit_port(parts) or (DEFAULT_TLS_PORT if secure else DEFAULT_RPC_PORT)
        scheme = "https" if secure else "http"
        return f"{scheme}://{host_for_url(parts)}:{port}{path}"

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            verify=False,
            timeout=httpx.Timeout(timeout),
            transport=self._transport,
        )

    async def _post_empty(self, url: str, timeout: float) -> httpx.Response:
        async with self._client(timeout) as client:
            request = client.post(
                url,
                content=b"",
                headers={"User-Agent": USER_AGENT, "Content-Type": "text/xml"},
            )
            return await asyncio.wait_for(request, timeout)

    async def probe(self, path: str) -> OdooResult:
        """Classify the endpoint at `path` by its HTTP status.

        Returns:
            success with {"status", "content_type", "headers"} for 200/400/500;
            a failure with an explanatory message otherwise.
        """
        try:
            url = self.target_url(path)
        except ValueError as exc:
            return OdooResult.fail(f"HTTP request failed: {exc}. Check URL and network connectivity.")

        logger.info("Testing HTTP endpoint: %s", url)
        try:
            response = await self._post_empty(url, PROBE_TIMEOUT)
        except (httpx.TimeoutException, asyncio.TimeoutError):
            logger.warning("HTTP request to %s timed out", url)
            return OdooResult.fail("HTTP request timed out. Server might be overloaded or unreachable.")
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("HTTP request to %s failed: %s", url, exc)
            return OdooResult.fail(f"HTTP request failed: {exc}. Check URL and network connectivity.")

        content_type = response.headers.get("content-type")
        logger.info("HTTP %s - Content-Type: %s", response.status_code, content_type)

        if response.status_code in _ALIVE_STATUSES:
            return OdooResult.ok({
                "status": response.status_code,
                "content_type": content_type,
                "headers": dict(response.headers),
            })
        if response.status_code == 405:
            return OdooResult.fail(
                "HTTP 405: XML-RPC endpoint found but method not allowed. This usually "
                "means the endpoint is correct but needs proper XML-RPC requests."
            )
        return OdooResult.fail(
            f"HTTP {response.status_code}: {response.reason_phrase}. "
            "Check if XML-RPC is enabled on this Odoo instance."
        )

    async def fetch_body(self, path: str) -> str:
        """Return whatever the server sends back for an empty POST to `path`."""
        try:
            response = await self._post_empty(self.target_url(path), BODY_FETCH_TIMEOUT)
        except (httpx.TimeoutException, asyncio.TimeoutError):
            return BODY_FETCH_TIMED_OUT
        except (httpx.HTTPError, httpx.InvalidURL, ValueError):
            return BODY_FETCH_FAILED

        body = response.text
        logger.info("Response body (first 500 chars): %s", body[:500])
        return body
