# =============================================================================
# core/sales.py  —  Sales Order Queries & Statistics
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Everything the sales tools do between "the agent called a tool" and
#   "here is a JSON-ready dict":
#     - parse tool arguments (JSON domains, comma-separated field lists)
#     - apply default filters (confirmed orders only)
#     - query Odoo through OdooClient
#     - flatten Odoo's many2one pairs ([id, "Name"]) into plain names
#     - compute totals, averages and grouped statistics
#
# CONTEXT BUDGET DISCIPLINE:
#   Orders are returned with a dozen readable fields, not Odoo's full
#   record.  The agent gets what it can reason about and nothing more.
#
# ERRORS:
#   These functions never raise for bad input or remote failures.  They
#   return {"error": "..."} so the tool can hand it straight to the agent.
# =============================================================================

import json
import re
from typing import Any

from core.models import SearchParams
from core.odoo_client import MAX_SEARCH_LIMIT


SALE_ORDER = "sale.order"
SALE_ORDER_LINE = "sale.order.line"

MAX_LIMIT = MAX_SEARCH_LIMIT
DEFAULT_LIMIT = 100

# Confirmed sales orders.
DEFAULT_DOMAIN = [["state", "=", "sale"]]

DEFAULT_ORDER_FIELDS = [
    "id", "name", "partner_id", "date_order", "state", "amount_untaxed",
    "amount_tax", "amount_total", "currency_id", "user_id", "team_id",
    "invoice_status", "delivery_status",
]

ORDER_LINE_FIELDS = [
    "id", "product_id", "name", "product_uom_qty", "qty_delivered",
    "qty_invoiced", "price_unit", "price_subtotal", "price_total", "discount",
]

STATS_FIELDS = ["id", "name", "partner_id", "date_order", "amount_total", "user_id", "team_id", "state"]

GROUP_BY_FIELDS = ("user_id", "team_id", "state", "partner_id")

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# =============================================================================
# Argument parsing
# =============================================================================
def parse_domain(raw: str | None) -> list:
    """Parse a JSON domain string; None/empty means DEFAULT_DOMAIN.

    Raises:
        ValueError: not JSON, or not a JSON list.
    """
    if not raw:
        return [list(term) for term in DEFAULT_DOMAIN]
    try:
        domain = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid domain JSON: {exc.msg}") from exc
    if not isinstance(domain, list):
        raise ValueError("Domain must be a JSON list of [field, operator, value] terms")
    return domain


def parse_fields(raw: str | None) -> list[str]:
    """'id, name,state' → ['id', 'name', 'state']; None → DEFAULT_ORDER_FIELDS."""
    if not raw:
        return list(DEFAULT_ORDER_FIELDS)
    return [name.strip() for name in raw.split(",") if name.strip()]


def clamp_limit(limit: int | None) -> int:
    if not limit:
        return DEFAULT_LIMIT
    return max(1, min(int(limit), MAX_LIMIT))


def _name(value: Any) -> str:
    """Display name of a many2one value ([id, name] or False)."""
    if isinstance(value, (list, tuple)) and len(value) > 1:
        return value[1]
    return "Unknown"


# =============================================================================
# Shaping
# =============================================================================
def simplify_order(order: dict) -> dict:
    return {
        "id": order.get("id"),
        "name": order.get("name"),
        "customer": _name(order.get("partner_id")),
        "date_order": order.get("date_order"),
        "state": order.get("state"),
        "amount_total": order.get("amount_total"),
        "salesperson": _name(order.get("user_id")),
        "sales_team": _name(order.get("team_id")),
        "invoice_status": order.get("invoice_status"),
        "delivery_status": order.get("delivery_status"),
    }


def simplify_line(line: dict) -> dict:
    return {
        "id": line.get("id"),
        "product": _name(line.get("product_id")),
        "description": line.get("name"),
        "quantity": line.get("product_uom_qty"),
        "delivered": line.get("qty_delivered"),
        "invoiced": line.get("qty_invoiced"),
        "unit_price": line.get("price_unit"),
        "subtotal": line.get("price_subtotal"),
        "total": line.get("price_total"),
        "discount": line.get("discount"),
    }


def total_amount(orders: list[dict]) -> float:
    return sum(order.get("amount_total") or 0 for order in orders)


def group_orders(orders: list[dict], group_by: str) -> list[dict]:
    """Count and total orders per value of `group_by`, in first-seen order."""
    groups: dict[str, dict[str, float]] = {}
    for order in orders:
        value = order.get(group_by)
        if isinstance(value, (list, tuple)):
            key = _name(value)
        elif value is None or value is False or value == "":
            key = "Unknown"
        else:
            key = str(value)

        group = groups.setdefault(key, {"count": 0, "total_amount": 0})
        group["count"] += 1
        group["total_amount"] += order.get("amount_total") or 0

    return [
        {
            "name": key,
            "order_count": group["count"],
            "total_amount": group["total_amount"],
            "average_amount": group["total_amount"] / group["count"],
        }
        for key, group in groups.items()
    ]


# =============================================================================
# Tool operations
# =============================================================================
async def get_sales_orders(
    client,
    domain: str | None = None,
    limit: int | None = DEFAULT_LIMIT,
    offset: int | None = 0,
    fields: str | None = None,
) -> dict:
    """Sales orders matching `domain` (confirmed orders by default), newest first."""
    try:
        parsed_domain = parse_domain(domain)
    except ValueError as exc:
        return {"error": str(exc)}

    result = await client.search_read(SALE_ORDER, SearchParams(
        domain=parsed_domain,
        fields=parse_fields(fields),
        limit=clamp_limit(limit),
        offset=max(0, offset or 0),
        order="date_order desc",
    ))
    if not result.success:
        return {"error": f"Error retrieving sales orders: {result.error}"}

    orders = result.data or []
    return {
        "summary": {
            "total_orders": len(orders),
            "total_amount": total_amount(orders),
            "currency": _name(orders[0].get("currency_id")) if orders else "Unknown",
        },
        "orders": [simplify_order(order) for order in orders],
    }


async def get_sales_order_details(client, order_id: int, include_lines: bool = True) -> dict:
    """One order with totals, dates and (optionally) its lines."""
    result = await client.search_read(SALE_ORDER, SearchParams(domain=[["id", "=", order_id]], limit=1))
    if not result.success:
        return {"error": f"Error retrieving sales order: {result.error}"}
    if not result.data:
        return {"error": f"Sales order with ID {order_id} not found"}

    order = result.data[0]
    details = simplify_order(order)
    details.update({
        "amount_untaxed": order.get("amount_untaxed"),
        "amount_tax": order.get("amount_tax"),
        "currency": _name(order.get("currency_id")),
        "create_date": order.get("create_date"),
        "write_date": order.get("write_date"),
    })
    response: dict[str, Any] = {"order": details}

    line_ids = order.get("order_line") or []
    if include_lines and line_ids:
        lines = await client.search_read(SALE_ORDER_LINE, SearchParams(
            domain=[["id", "in", line_ids]],
            fields=list(ORDER_LINE_FIELDS),
        ))
        # The order itself is still useful without its lines.
        if lines.success:
            response["order_lines"] = [simplify_line(line) for line in lines.data]
        else:
            response["order_lines_error"] = lines.error

    return response


async def get_sales_stats(
    client,
    date_from: str | None = None,
    date_to: str | None = None,
    group_by: str | None = None,
) -> dict:
    """Totals and averages of confirmed orders, optionally grouped."""
    for label, value in (("date_from", date_from), ("date_to", date_to)):
        if value and not _DATE_RE.match(value):
            return {"error": f"{label} must use YYYY-MM-DD format, got {value!r}"}
    if group_by and group_by not in GROUP_BY_FIELDS:
        return {"error": f"group_by must be one of {', '.join(GROUP_BY_FIELDS)}"}

    domain = [list(term) for term in DEFAULT_DOMAIN]
    if date_from:
        domain.append(["date_order", ">=", date_from])
    if date_to:
        domain.append(["date_order", "<=", date_to])

    result = await client.search_read(SALE_ORDER, SearchParams(domain=domain, fields=list(STATS_FIELDS)))
    if not result.success:
        return {"error": f"Error retrieving sales statistics: {result.error}"}

    orders = result.data or []
    total = total_amount(orders)
    stats: dict[str, Any] = {
        "summary": {
            "total_orders": len(orders),
            "total_amount": total,
            "average_order_value": total / len(orders) if orders else 0,
            "date_range": {
                "from": date_from or "All time",
                "to": date_to or "All time",
            },
        }
    }

    if group_by and orders:
        stats["grouped_by"] = group_by
        stats["groups"] = group_orders(orders, group_by)

    return stats
