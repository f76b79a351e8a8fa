# =============================================================================
# core/xmlrpc.py  —  Async XML-RPC Endpoint
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Sends XML-RPC calls over httpx and decodes the answer with the standard
#   library's xmlrpc.client marshalling code.
#
# WHY NOT xmlrpc.client.ServerProxy?
#   1. ServerProxy is blocking.  The MCP server runs on asyncio, and every
#      call must be cancellable by its timeout.
#   2. ServerProxy's unmarshaller silently skips tags it does not know.  When
#      Odoo (or a proxy in front of it) answers with an HTML page, the result
#      is an empty ResponseError that says nothing.  Our strict unmarshaller
#      stops at the first foreign tag and names it:
#          Unknown XML-RPC tag 'html'
#      That message is exactly what core/diagnostics.py looks for.
# =============================================================================

import logging
import xmlrpc.client
from typing import Any
from xml.parsers.expat import ExpatError

import httpx


logger = logging.getLogger(__name__)

USER_AGENT = "Odoo-MCP-Client/1.0"

# Every element a methodResponse (or methodCall) may legally contain.
_XMLRPC_TAGS = frozenset(xmlrpc.client.Unmarshaller.dispatch) | {
    "methodResponse",
    "methodCall",
    "param",
    "member",
    "data",
}


class XmlRpcError(Exception):
    """The server's answer could not be read as an XML-RPC response."""

    @property
    def message(self) -> str:
        return str(self)


class _StrictUnmarshaller(xmlrpc.client.Unmarshaller):
    def start(self, tag, attrs):
        if tag.split(":")[-1] not in _XMLRPC_TAGS:
            raise XmlRpcError(f"Unknown XML-RPC tag '{tag}'")
        super().start(tag, attrs)


def loads_response(body: bytes) -> Any:
    """Decode a methodResponse body and return its single value.

    Raises:
        xmlrpc.client.Fault: The server returned a fault.
        XmlRpcError: The body is not an XML-RPC response.
    """
    unmarshaller = _StrictUnmarshaller(use_builtin_types=True)
    parser = xmlrpc.client.ExpatParser(unmarshaller)
    try:
        parser.feed(body)
        parser.close()
    except (ExpatError, ValueError, TypeError, IndexError, OverflowError) as exc:
        # Bad scalars (<int>abc</int>) and broken structs fail inside the
        # unmarshaller with plain Python errors.
        raise XmlRpcError(f"Malformed XML-RPC response: {exc}") from exc
    try:
        values = unmarshaller.close()
    except xmlrpc.client.ResponseError as exc:
        raise XmlRpcError("Empty or incomplete XML-RPC response") from exc
    except (ValueError, TypeError, IndexError) as exc:
        raise XmlRpcError(f"Malformed XML-RPC response: {exc}") from exc
    return values[0] if len(values) == 1 else values


class XmlRpcEndpoint:
    """One XML-RPC endpoint (e.g. https://odoo.example.com/xmlrpc/2/common).

    The httpx client is shared between endpoints of the same session and is
    created without its own timeout; callers bound each call with
    asyncio.wait_for so that a timeout cancels the request in flight.
    """

    def __init__(self, url: str, client: httpx.AsyncClient):
        self.url = url
        self._client = client

    async def call(self, method: str, *params: Any) -> Any:
        try:
            payload = xmlrpc.client.dumps(params, methodname=method, allow_none=True)
        except (OverflowError, TypeError) as exc:
            # e.g. an integer outside the 32-bit range XML-RPC allows
            raise XmlRpcError(f"Cannot encode XML-RPC request: {exc}") from exc
        response = await self._client.post(
            self.url,
            content=payload.encode("utf-8"),
            headers={"Content-Type": "text/xml", "User-Agent": USER_AGENT},
        )
        logger.debug("%s %s → HTTP %s", method, self.url, response.status_code)

        # A non-200 answer with a body is still parsed: a proxy's HTML error
        # page must surface as an unknown-tag error so it can be diagnosed.
        if response.status_code != 200 and not response.content.strip():
            raise xmlrpc.client.ProtocolError(
                self.url,
                response.status_code,
                response.reason_phrase,
                dict(response.headers),
            )
        return loads_response(response.content)
