# =============================================================================
# core/diagnostics.py  —  Response Validation & Diagnostic Classification
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns the raw (error, result) pair of an XML-RPC call into an OdooResult.
#
#   Three outcomes:
#     1. No error               → success, result passed through untouched.
#     2. "Unknown XML-RPC tag"  → the server sent markup (usually an HTML
#                                 page) instead of a methodResponse.  We go
#                                 and look at what is really there, then
#                                 explain it.
#     3. Anything else          → "<operation> failed: <message>".
#
# THE EXPENSIVE BRANCH:
#   Only branch 2 does I/O (a body fetch and a probe).  Successful calls and
#   ordinary faults return immediately.
#
#   The probe always targets the common endpoint, even when the failing call
#   went to /xmlrpc/2/object.  A wrong base URL breaks both endpoints the
#   same way, and the common endpoint is the one users can check by hand.
#
# WHY STRING MATCHING?
#   Odoo and the proxies in front of it give us no structured error codes
#   for "this is a web page".  The tag name, the <title> text and the
#   Content-Type header are the only signals available, so classification
#   is an explicit, testable set of substring checks.
# =============================================================================

import logging
import re
import xmlrpc.client
from typing import Any

from core.endpoints import COMMON_PATH, validate_and_suggest_urls
from core.models import DiagnosticReport, OdooResult
from core.probe import TransportProbe


logger = logging.getLogger(__name__)

_UNKNOWN_TAG_RE = re.compile(r"Unknown XML-RPC tag '([^']+)'")
_TITLE_RE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)

MAX_SUGGESTIONS = 5

CAUSE_NOT_FOUND = "not_found"
CAUSE_LOGIN_REQUIRED = "login_required"
CAUSE_SERVER_ERROR = "server_error"

_CAUSE_MESSAGES = {
    CAUSE_NOT_FOUND: "This is a 404 error page. The XML-RPC endpoint doesn't exist at this URL.",
    CAUSE_LOGIN_REQUIRED: "This is a login page. You may need to authenticate at the web server level first.",
    CAUSE_SERVER_ERROR: "This appears to be an error page from Odoo.",
}

_XML_PAGE_HINT = """The Content-Type suggests this should be XML-RPC, but the response contains HTML elements.
This usually means:
1. Odoo is returning an error page in XML format
2. Wrong database name or XML-RPC path
3. Odoo configuration issue

Check your ODOO_DATABASE setting and ensure XML-RPC is properly configured."""

_HTML_PAGE_HINT = """This suggests:
1. URL might be pointing to Odoo web interface instead of XML-RPC endpoint
2. XML-RPC might be disabled on this Odoo instance
3. Authentication might be required at web server level
4. Wrong port or path

Try these URLs in your .env file:"""


def error_message(error: Any) -> str | None:
    """Best human-readable text for an error raised by an XML-RPC call."""
    if isinstance(error, xmlrpc.client.Fault):
        return error.faultString or None
    if isinstance(error, xmlrpc.client.ProtocolError):
        return f"HTTP {error.errcode} {error.errmsg}".strip()
    return str(error) or None


def extract_unknown_tag(message: str | None) -> str | None:
    """Tag name from an "Unknown XML-RPC tag '<tag>'" message, else None."""
    if not message:
        return None
    match = _UNKNOWN_TAG_RE.search(message)
    return match.group(1) if match else None


def extract_page_title(body: str) -> str | None:
    """Text of the page's <title>, "Unknown" if the element is empty/odd."""
    if "<title>" not in body and "<TITLE>" not in body:
        return None
    match = _TITLE_RE.search(body)
    return match.group(1).strip() if match else "Unknown"


def classify_page_title(title: str) -> str | None:
    lowered = title.lower()
    if "404" in lowered or "not found" in lowered:
        return CAUSE_NOT_FOUND
    if "login" in lowered or "sign in" in lowered:
        return CAUSE_LOGIN_REQUIRED
    if "error" in lowered or "exception" in lowered:
        return CAUSE_SERVER_ERROR
    return None


def render_report(report: DiagnosticReport) -> str:
    """Compose the user-facing explanation for a DiagnosticReport."""
    message = f"Server returned non-XML-RPC response (found <{report.tag}> tag). "

    if report.probe_error is not None:
        return message + f"\n\nEndpoint test failed: {report.probe_error}"

    content_type = report.content_type or "unknown"
    message += f"\n\nEndpoint returns Content-Type: {content_type}"

    if report.page_title is not None:
        message += f'\n\nPage title: "{report.page_title}"'
        if report.cause:
            message += f"\n\n{_CAUSE_MESSAGES[report.cause]}"

    if "text/xml" in content_type:
        message += f"\n\n{_XML_PAGE_HINT}"
    elif "text/html" in content_type:
        message += f"\n\n{_HTML_PAGE_HINT}"
        for index, suggestion in enumerate(report.suggestions, start=1):
            message += f"\n{index}. ODOO_URL={suggestion.replace(COMMON_PATH, '')}"
        message += "\n\nOr check if XML-RPC is enabled in Odoo configuration."

    return message


class ResponseValidator:
    """Validates XML-RPC outcomes for one configured Odoo base URL."""

    def __init__(self, base_url: str, probe: TransportProbe):
        self.base_url = base_url
        self.probe = probe

    async def validate(self, error: Any, result: Any, operation: str) -> OdooResult:
        if error is None:
            return OdooResult.ok(result)

        message = error_message(error)
        logger.error("%s XML-RPC error: %s", operation, message)

        tag = extract_unknown_tag(message)
        if tag is not None:
            logger.error("Server returned non-XML-RPC content (found tag: %s)", tag)
            report = await self.diagnose(tag)
            return OdooResult.fail(render_report(report), diagnostic=report)

        code = getattr(error, "faultCode", None) or getattr(error, "errcode", None)
        return OdooResult.fail(f"{operation} failed: {message or code or 'Unknown error'}")

    async def diagnose(self, tag: str) -> DiagnosticReport:
        """Look at what the common endpoint really serves."""
        body = await self.probe.fetch_body(COMMON_PATH)
        probed = await self.probe.probe(COMMON_PATH)

        report = DiagnosticReport(tag=tag)
        if not probed.success:
            report.probe_error = probed.error
            return report

        report.status = probed.data.get("status")
        report.content_type = probed.data.get("content_type") or "unknown"

        report.page_title = extract_page_title(body)
        if report.page_title is not None:
            report.cause = classify_page_title(report.page_title)

        if "text/html" in report.content_type and "text/xml" not in report.content_type:
            check = validate_and_suggest_urls(self.base_url)
            report.suggestions = check.suggestions[:MAX_SUGGESTIONS]

        return report
