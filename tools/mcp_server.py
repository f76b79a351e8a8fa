# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Defines the MCP tools the agent can call.  Each tool is a thin wrapper
#   around a core/ coroutine: it logs the call, hands the arguments over,
#   and returns the resulting dict.
#
# HOW IT WORKS (the flow):
#   1. The agent decides it needs sales data
#   2. It calls a tool by name via MCP (e.g., "get_sales_stats")
#   3. FastMCP routes the call to the decorated coroutine below
#   4. core/ queries Odoo over XML-RPC and shapes the answer
#   5. The agent receives a compact JSON object
#
# TOOL NAMING CONVENTIONS:
#   - get_*   → Read-only retrieval (idempotent, safe to retry)
#   - check_* → Diagnostics (read-only, no Odoo records touched)
#   Nothing here writes to Odoo.
#
# ERRORS:
#   Tools never raise.  Remote failures, bad arguments and Odoo
#   misconfiguration all come back as {"error": "..."} so the agent can
#   explain them instead of crashing the conversation.
#
# RUNNING THIS SERVER:
#   a) Standalone:  python -m tools.mcp_server
#   b) Spawned over stdio by the agent (agent/sales_agent.py)
# =============================================================================

import json
import logging
import sys
from typing import Literal, Optional

from dotenv import load_dotenv
from fastmcp import FastMCP

from core.config import ConfigError, load_config
from core.connection import check_connection
from core.odoo_client import OdooClient
from core import sales

# Load ODOO_* settings from a .env file before anything reads them.
load_dotenv()

# =============================================================================
# Logging Setup
# =============================================================================
# Log to STDERR: STDOUT carries the MCP protocol, and a stray log line there
# would corrupt the JSON stream.
#
# ANSI colors:
#   CYAN   → incoming tool calls
#   GREEN  → responses
#   YELLOW → progress messages
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [MCP] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)

logger = logging.getLogger("tools.mcp_server")


def _log_request(tool_name: str, **params) -> None:
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: dict) -> dict:
    """Log the tool response as compact JSON in GREEN, then return it."""
    logger.info(
        f"{_GREEN}  ← {tool_name} response: "
        f"{json.dumps(result, separators=(',', ':'), default=str)[:2000]}{_RESET}"
    )
    return result


# =============================================================================
# The Odoo session
# =============================================================================
# One OdooClient per server process.  It is created on first use so that
# importing this module (tests, tooling) does not require ODOO_* settings;
# main() builds it eagerly so a bad configuration fails at startup.
# =============================================================================
_odoo_client: Optional[OdooClient] = None


def get_client() -> OdooClient:
    global _odoo_client
    if _odoo_client is None:
        _odoo_client = OdooClient(load_config())
    return _odoo_client


mcp = FastMCP("odoo-sales")


# =============================================================================
# TOOL 1: get_sales_orders
# =============================================================================
@mcp.tool()
async def get_sales_orders(
    domain: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
    fields: Optional[str] = None,
) -> dict:
    """Extract sales orders from Odoo with optional domain filtering.

    By default, returns confirmed sales orders only, newest first.

    Args:
        domain: Optional Odoo domain filter as a JSON string, e.g.
            '[["state", "=", "sale"], ["date_order", ">=", "2024-01-01"]]'.
            Defaults to confirmed orders ('[["state", "=", "sale"]]').
        limit: Maximum number of records to return (1-1000, default 100).
        offset: Number of records to skip (default 0).
        fields: Comma-separated list of fields to read. Defaults to the
            standard order fields (name, customer, dates, amounts, team...).

    Returns:
        A dict with:
          - summary: total_orders, total_amount, currency
          - orders: id, name, customer, date_order, state, amount_total,
            salesperson, sales_team, invoice_status, delivery_status
        Or {"error": ...} if Odoo could not be queried.
    """
    _log_request("get_sales_orders", domain=domain, limit=limit, offset=offset, fields=fields)
    result = await sales.get_sales_orders(get_client(), domain=domain, limit=limit, offset=offset, fields=fields)
    if "summary" in result:
        _log_status(f"Found {result['summary']['total_orders']} orders")
    return _log_response("get_sales_orders", result)


# =============================================================================
# TOOL 2: get_sales_order_details
# =============================================================================
@mcp.tool()
async def get_sales_order_details(order_id: int, include_lines: bool = True) -> dict:
    """Get detailed information for one sales order, including its lines.

    Args:
        order_id: The ID of the sales order (a positive integer).
        include_lines: Whether to include the order lines (default True).

    Returns:
        A dict with "order" (amounts, taxes, currency, salesperson, team,
        invoice/delivery status, create/write dates) and, when requested,
        "order_lines" (product, description, quantities, prices, discount).
        Or {"error": ...} if the order does not exist or Odoo failed.
    """
    _log_request("get_sales_order_details", order_id=order_id, include_lines=include_lines)
    if order_id < 1:
        return _log_response("get_sales_order_details", {"error": "order_id must be a positive integer"})
    result = await sales.get_sales_order_details(get_client(), order_id, include_lines=include_lines)
    return _log_response("get_sales_order_details", result)


# =============================================================================
# TOOL 3: get_sales_stats
# =============================================================================
@mcp.tool()
async def get_sales_stats(
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    group_by: Optional[Literal["user_id", "team_id", "state", "partner_id"]] = None,
) -> dict:
    """Get sales statistics and summaries for confirmed orders.

    Args:
        date_from: Start date (YYYY-MM-DD), inclusive.
        date_to: End date (YYYY-MM-DD), inclusive.
        group_by: Optional grouping: "user_id" (salesperson), "team_id",
            "state" or "partner_id" (customer).

    Returns:
        A dict with:
          - summary: total_orders, total_amount, average_order_value, date_range
          - grouped_by / groups: per-group order_count, total_amount,
            average_amount (only when group_by is given)
        Or {"error": ...}.
    """
    _log_request("get_sales_stats", date_from=date_from, date_to=date_to, group_by=group_by)
    result = await sales.get_sales_stats(get_client(), date_from=date_from, date_to=date_to, group_by=group_by)
    return _log_response("get_sales_stats", result)


# =============================================================================
# TOOL 4: check_odoo_connection
# =============================================================================
# When the sales tools keep returning errors, this is the tool the agent
# should reach for: it reports what the server actually answers and which
# URLs to try instead.
# =============================================================================
@mcp.tool()
async def check_odoo_connection() -> dict:
    """Diagnose the connection to Odoo.

    WHEN TO CALL THIS: when another tool reports a connection,
    authentication or "non-XML-RPC response" error, or when the user asks
    whether Odoo is reachable.

    Returns:
        A dict with the configured url and database, url_valid, the raw
        endpoint_probe (HTTP status and content type), the xmlrpc handshake
        result (Odoo version or a detailed error), and suggested_urls when
        the handshake failed.
    """
    _log_request("check_odoo_connection")
    result = await check_connection(get_client())
    _log_status(f"XML-RPC handshake ok={result['xmlrpc']['ok']}")
    return _log_response("check_odoo_connection", result)


# =============================================================================
# Server entry point
# =============================================================================
def main() -> None:
    global _odoo_client
    try:
        _odoo_client = OdooClient(load_config())
    except ConfigError as exc:
        logger.error("Failed to start server: %s", exc)
        sys.exit(1)
    logger.info("Odoo MCP Server running on stdio")
    mcp.run()


if __name__ == "__main__":
    main()
