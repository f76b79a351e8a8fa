# =============================================================================
# core/odoo_client.py  —  Odoo XML-RPC Session
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Owns the connection to one Odoo instance:
#     - the user id (uid) returned by authenticate()
#     - the two XML-RPC endpoints (common + object)
#     - the read operations the tools need: search_read, search_count,
#       fields_get, plus version() for connection checks
#
# THE CONTRACT:
#   Every public coroutine returns an OdooResult.  Timeouts, rejected
#   credentials, network failures and HTML pages all come back as data.
#   Callers branch on result.success; nothing here raises for them.
#
# IDENTITY:
#   The uid is obtained lazily.  The first query authenticates; later
#   queries reuse the uid.  If Odoo rejects the uid/password pair with an
#   access-denied fault, the uid is dropped so the next call logs in again.
#   The failing call itself is not retried.
#
# TIMEOUTS:
#   Each remote call is bounded with asyncio.wait_for.  When the bound is
#   hit, the httpx request is cancelled and the call resolves as a failure.
#     version()       10 s
#     authenticate()  15 s
#     execute_kw()    20 s
# =============================================================================

import asyncio
import logging
import xmlrpc.client
from typing import Any

import httpx

from core.diagnostics import ResponseValidator, error_message
from core.endpoints import common_url, object_url
from core.models import OdooConfig, OdooResult, SearchParams
from core.probe import TransportProbe
from core.xmlrpc import XmlRpcEndpoint, XmlRpcError


logger = logging.getLogger(__name__)

VERSION_TIMEOUT = 10.0
AUTH_TIMEOUT = 15.0
QUERY_TIMEOUT = 20.0

# Largest page search_read will ask for, whatever the caller passes.
MAX_SEARCH_LIMIT = 1000

# Everything a single XML-RPC round trip can raise that we turn into data.
RPC_ERRORS = (xmlrpc.client.Error, XmlRpcError, httpx.HTTPError, httpx.InvalidURL)


def _is_access_denied(error: Any) -> bool:
    return isinstance(error, xmlrpc.client.Fault) and "access denied" in str(error.faultString).lower()


class OdooClient:
    """Authenticated, read-only session against one Odoo database."""

    def __init__(self, config: OdooConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self.uid: int | None = None

        logger.info("Connecting to %s (database %s)", config.url, config.database)
        # No client-side timeout: every call is bounded by asyncio.wait_for.
        self._http = httpx.AsyncClient(timeout=None, transport=transport)
        self._common = XmlRpcEndpoint(common_url(config.url), self._http)
        self._object = XmlRpcEndpoint(object_url(config.url), self._http)

        self.probe = TransportProbe(config.url, transport=transport)
        self.validator = ResponseValidator(config.url, self.probe)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _call(self, endpoint: XmlRpcEndpoint, method: str, *params: Any, timeout: float):
        """Run one call; returns (error, result) with exactly one of them set.

        asyncio.TimeoutError is left to propagate so each operation can word
        its own timeout message.
        """
        try:
            result = await asyncio.wait_for(endpoint.call(method, *params), timeout)
        except RPC_ERRORS as exc:
            return exc, None
        return None, result

    # -------------------------------------------------------------------------
    # common endpoint
    # -------------------------------------------------------------------------
    async def test_connection(self) -> OdooResult:
        """Call version() on the common endpoint."""
        logger.info("Testing connection to %s", self.config.url)
        try:
            error, result = await self._call(self._common, "version", timeout=VERSION_TIMEOUT)
        except asyncio.TimeoutError:
            logger.error("XML-RPC connection test timed out after %s seconds", VERSION_TIMEOUT)
            return OdooResult.fail(
                "XML-RPC connection test timed out - check your Odoo URL and network connectivity"
            )

        outcome = await self.validator.validate(error, result, "Connection test")
        if outcome.success:
            logger.info("Connection successful. Odoo version: %s", result)
        return outcome

    async def authenticate(self) -> OdooResult:
        """Log in and remember the uid.  The uid is untouched on failure."""
        logger.info("Authenticating user %s on database %s", self.config.username, self.config.database)
        try:
            error, uid = await self._call(
                self._common,
                "authenticate",
                self.config.database,
                self.config.username,
                self.config.password,
                {},
                timeout=AUTH_TIMEOUT,
            )
        except asyncio.TimeoutError:
            logger.error("Authentication timed out after %s seconds", AUTH_TIMEOUT)
            return OdooResult.fail("Authentication timed out - check your credentials and Odoo server status")

        outcome = await self.validator.validate(error, uid, "Authentication")
        if not outcome.success:
            return outcome

        # Odoo answers False (not a fault) when the credentials are wrong.
        if not uid:
            logger.error("Authentication returned no UID - invalid credentials")
            return OdooResult.fail(
                "Invalid credentials or API key. Check your username, database name, and API key."
            )

        logger.info("Authentication successful. User ID: %s", uid)
        self.uid = uid
        return OdooResult.ok(uid)

    async def _ensure_authenticated(self) -> OdooResult | None:
        """None when a uid is available, else the failed login result."""
        if self.uid:
            return None
        logger.info("Not authenticated, authenticating...")
        auth = await self.authenticate()
        return None if auth.success else auth

    # -------------------------------------------------------------------------
    # object endpoint
    # -------------------------------------------------------------------------
    async def _execute_kw(self, model: str, method: str, args: list, kwargs: dict | None = None):
        params = [self.config.database, self.uid, self.config.password, model, method, args]
        if kwargs is not None:
            params.append(kwargs)
        error, result = await self._call(self._object, "execute_kw", *params, timeout=QUERY_TIMEOUT)
        if _is_access_denied(error):
            logger.warning("Odoo rejected uid %s; will re-authenticate on the next call", self.uid)
            self.uid = None
        return error, result

    async def search_read(self, model: str, params: SearchParams | None = None) -> OdooResult:
        """search_read on `model`; success data is always a list."""
        logger.info("SearchRead on model: %s", model)
        params = params or SearchParams()

        auth_failure = await self._ensure_authenticated()
        if auth_failure is not None:
            return auth_failure

        limit = min(params.limit, MAX_SEARCH_LIMIT)
        options: dict[str, Any] = {"limit": limit, "offset": params.offset, "order": params.order}
        # Leaving "fields" out makes Odoo return its default field set.
        if params.fields:
            options["fields"] = list(params.fields)

        logger.info(
            "Search parameters: model=%s domain=%s fields=%s limit=%s offset=%s order=%s",
            model, params.domain, params.fields or "all", limit, params.offset, params.order,
        )

        try:
            error, result = await self._execute_kw(model, "search_read", [params.domain], options)
        except asyncio.TimeoutError:
            logger.error("SearchRead timed out after %s seconds", QUERY_TIMEOUT)
            return OdooResult.fail(
                "Search operation timed out - the query may be too complex or the server is overloaded"
            )

        outcome = await self.validator.validate(error, result, "SearchRead")
        if not outcome.success:
            return outcome

        records = result or []
        logger.info("SearchRead successful. Found %d records", len(records))
        return OdooResult.ok(records)

    async def count(self, model: str, domain: list | None = None) -> OdooResult:
        """search_count on `model`.  Failures carry the raw server message only."""
        auth_failure = await self._ensure_authenticated()
        if auth_failure is not None:
            return auth_failure

        try:
            error, result = await self._execute_kw(model, "search_count", [domain if domain is not None else []])
        except asyncio.TimeoutError:
            return OdooResult.fail("Count failed: timed out")
        if error is not None:
            return OdooResult.fail(f"Count failed: {error_message(error) or 'Unknown error'}")
        return OdooResult.ok(result)

    async def get_fields(self, model: str) -> OdooResult:
        """fields_get on `model`: field name → metadata."""
        auth_failure = await self._ensure_authenticated()
        if auth_failure is not None:
            return auth_failure

        try:
            error, result = await self._execute_kw(model, "fields_get", [], {})
        except asyncio.TimeoutError:
            return OdooResult.fail("Fields retrieval failed: timed out")
        if error is not None:
            return OdooResult.fail(f"Fields retrieval failed: {error_message(error) or 'Unknown error'}")
        return OdooResult.ok(result)
