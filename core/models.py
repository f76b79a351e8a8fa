# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses define the *shape* of every piece of information that
# flows between the Odoo client, the diagnostic layer, and the MCP tools.
#
# DESIGN PRINCIPLE — "Results, not exceptions":
#   Every remote operation returns an OdooResult.  Callers branch on
#   `success` and never assume `data` is present on failure.  Nothing in
#   core/ raises across the client boundary for an expected failure
#   (timeouts, bad credentials, HTML instead of XML-RPC, network errors).
# =============================================================================

from dataclasses import dataclass, field
from typing import Any, Optional


# -----------------------------------------------------------------------------
# OdooConfig — where and as whom we connect
# -----------------------------------------------------------------------------
# Built once at startup by core/config.py and never mutated afterwards.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class OdooConfig:
    """Connection settings for one Odoo instance."""

    url: str                           # scheme://host[:port], no path
    database: str                      # Odoo database (tenant) name
    username: str                      # Login, usually an email
    password: str = field(repr=False)  # Password or API key


# -----------------------------------------------------------------------------
# DiagnosticReport — why a response was not XML-RPC
# -----------------------------------------------------------------------------
# Only built when the server answers with markup instead of a methodResponse.
# It is rendered into the error message, and also kept on the result so
# callers (and tests) can inspect it without parsing text.
# -----------------------------------------------------------------------------
@dataclass
class DiagnosticReport:
    """Details gathered while diagnosing a structural response failure."""

    tag: str                                   # e.g. "html", "HTML"
    content_type: Optional[str] = None         # From the endpoint probe
    status: Optional[int] = None               # From the endpoint probe
    page_title: Optional[str] = None           # <title> of the returned page
    cause: Optional[str] = None                # "not_found", "login_required", "server_error"
    probe_error: Optional[str] = None          # Set when the probe itself failed
    suggestions: list[str] = field(default_factory=list)


# -----------------------------------------------------------------------------
# OdooResult — the tagged outcome of every remote operation
# -----------------------------------------------------------------------------
@dataclass
class OdooResult:
    """Either (success, data) or (failure, error[, diagnostic])."""

    success: bool
    data: Any = None
    error: Optional[str] = None
    diagnostic: Optional[DiagnosticReport] = None

    def __post_init__(self) -> None:
        # A failure must always say something.
        if not self.success and not self.error:
            self.error = "Unknown error"

    @classmethod
    def ok(cls, data: Any = None) -> "OdooResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, diagnostic: Optional[DiagnosticReport] = None) -> "OdooResult":
        return cls(success=False, error=error, diagnostic=diagnostic)


# -----------------------------------------------------------------------------
# SearchParams — one search_read query
# -----------------------------------------------------------------------------
# The defaults mirror what a bare search_read from the tools should do:
# the first 100 records, newest first.
# -----------------------------------------------------------------------------
@dataclass
class SearchParams:
    """Arguments for a single search_read call."""

    domain: list = field(default_factory=list)   # [[field, operator, value], ...]
    fields: list[str] = field(default_factory=list)  # Empty = server default set
    limit: int = 100
    offset: int = 0
    order: str = "id desc"


# -----------------------------------------------------------------------------
# UrlCheck — output of the endpoint resolver
# -----------------------------------------------------------------------------
@dataclass
class UrlCheck:
    """Whether a configured URL parses, plus likely corrected endpoints."""

    is_valid: bool
    suggestions: list[str] = field(default_factory=list)
