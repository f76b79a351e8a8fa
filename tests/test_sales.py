import pytest

from core import sales
from core.models import OdooResult


class FakeClient:
    """Stands in for OdooClient: answers search_read from canned results."""

    def __init__(self, *results: OdooResult):
        self.results = list(results)
        self.queries = []

    async def search_read(self, model, params=None):
        self.queries.append((model, params))
        return self.results.pop(0)


ORDER = {
    "id": 12,
    "name": "S00012",
    "partner_id": [7, "Deco Addict"],
    "date_order": "2024-03-01 10:00:00",
    "state": "sale",
    "amount_untaxed": 100.0,
    "amount_tax": 21.0,
    "amount_total": 121.0,
    "currency_id": [1, "EUR"],
    "user_id": [2, "Mitchell Admin"],
    "team_id": False,
    "invoice_status": "to invoice",
    "delivery_status": "pending",
    "order_line": [31, 32],
}


def test_parse_domain() -> None:
    assert sales.parse_domain(None) == [["state", "=", "sale"]]
    assert sales.parse_domain('[["partner_id", "=", 7]]') == [["partner_id", "=", 7]]
    with pytest.raises(ValueError, match="Invalid domain JSON"):
        sales.parse_domain("[[state")
    with pytest.raises(ValueError, match="JSON list"):
        sales.parse_domain('{"state": "sale"}')


def test_parse_fields_and_limit() -> None:
    assert sales.parse_fields(" id, name ,,state") == ["id", "name", "state"]
    assert sales.parse_fields(None) == sales.DEFAULT_ORDER_FIELDS
    assert sales.clamp_limit(5000) == 1000
    assert sales.clamp_limit(-3) == 1
    assert sales.clamp_limit(None) == 100


def test_default_domain_is_not_shared() -> None:
    sales.parse_domain(None).append(["id", "=", 1])
    assert sales.DEFAULT_DOMAIN == [["state", "=", "sale"]]


def test_group_orders_in_first_seen_order() -> None:
    orders = [
        {"user_id": [2, "Mitchell"], "amount_total": 100},
        {"user_id": False, "amount_total": 10},
        {"user_id": [2, "Mitchell"], "amount_total": 50},
    ]

    assert sales.group_orders(orders, "user_id") == [
        {"name": "Mitchell", "order_count": 2, "total_amount": 150, "average_amount": 75},
        {"name": "Unknown", "order_count": 1, "total_amount": 10, "average_amount": 10},
    ]


@pytest.mark.asyncio
async def test_get_sales_orders_summary() -> None:
    client = FakeClient(OdooResult.ok([ORDER, {**ORDER, "id": 13, "amount_total": 79.0}]))

    result = await sales.get_sales_orders(client, limit=10)

    assert result["summary"] == {"total_orders": 2, "total_amount": 200.0, "currency": "EUR"}
    assert result["orders"][0]["customer"] == "Deco Addict"
    assert result["orders"][0]["sales_team"] == "Unknown"
    model, params = client.queries[0]
    assert model == "sale.order"
    assert params.domain == [["state", "=", "sale"]]
    assert params.limit == 10
    assert params.order == "date_order desc"


@pytest.mark.asyncio
async def test_get_sales_orders_errors() -> None:
    assert await sales.get_sales_orders(FakeClient(), domain="nope") == {
        "error": "Invalid domain JSON: Expecting value"
    }
    failing = FakeClient(OdooResult.fail("Authentication timed out"))
    assert await sales.get_sales_orders(failing) == {
        "error": "Error retrieving sales orders: Authentication timed out"
    }


@pytest.mark.asyncio
async def test_get_sales_orders_empty() -> None:
    result = await sales.get_sales_orders(FakeClient(OdooResult.ok([])))

    assert result["summary"] == {"total_orders": 0, "total_amount": 0, "currency": "Unknown"}
    assert result["orders"] == []


@pytest.mark.asyncio
async def test_order_details_with_lines() -> None:
    line = {"id": 31, "product_id": [5, "Desk"], "name": "Desk", "product_uom_qty": 2, "price_unit": 50.0}
    client = FakeClient(OdooResult.ok([ORDER]), OdooResult.ok([line]))

    result = await sales.get_sales_order_details(client, 12)

    assert result["order"]["amount_tax"] == 21.0
    assert result["order"]["currency"] == "EUR"
    assert result["order_lines"][0]["product"] == "Desk"
    assert result["order_lines"][0]["quantity"] == 2
    assert client.queries[0][1].domain == [["id", "=", 12]]
    assert client.queries[1][0] == "sale.order.line"
    assert client.queries[1][1].domain == [["id", "in", [31, 32]]]


@pytest.mark.asyncio
async def test_order_details_line_failure_keeps_order() -> None:
    client = FakeClient(OdooResult.ok([ORDER]), OdooResult.fail("SearchRead failed: boom"))

    result = await sales.get_sales_order_details(client, 12)

    assert result["order"]["id"] == 12
    assert result["order_lines_error"] == "SearchRead failed: boom"


@pytest.mark.asyncio
async def test_order_details_without_lines_and_not_found() -> None:
    client = FakeClient(OdooResult.ok([ORDER]))
    result = await sales.get_sales_order_details(client, 12, include_lines=False)
    assert "order_lines" not in result
    assert len(client.queries) == 1

    missing = await sales.get_sales_order_details(FakeClient(OdooResult.ok([])), 99)
    assert missing == {"error": "Sales order with ID 99 not found"}


@pytest.mark.asyncio
async def test_sales_stats_with_dates_and_grouping() -> None:
    orders = [
        {"amount_total": 100.0, "team_id": [1, "Europe"]},
        {"amount_total": 50.0, "team_id": [2, "America"]},
        {"amount_total": 30.0, "team_id": [1, "Europe"]},
    ]
    client = FakeClient(OdooResult.ok(orders))

    result = await sales.get_sales_stats(client, date_from="2024-01-01", group_by="team_id")

    assert result["summary"]["total_orders"] == 3
    assert result["summary"]["total_amount"] == 180.0
    assert result["summary"]["average_order_value"] == 60.0
    assert result["summary"]["date_range"] == {"from": "2024-01-01", "to": "All time"}
    assert result["grouped_by"] == "team_id"
    assert [group["name"] for group in result["groups"]] == ["Europe", "America"]
    assert client.queries[0][1].domain == [["state", "=", "sale"], ["date_order", ">=", "2024-01-01"]]


@pytest.mark.asyncio
async def test_sales_stats_validation_and_empty() -> None:
    assert "YYYY-MM-DD" in (await sales.get_sales_stats(FakeClient(), date_to="01/02/2024"))["error"]
    assert "group_by" in (await sales.get_sales_stats(FakeClient(), group_by="product_id"))["error"]

    result = await sales.get_sales_stats(FakeClient(OdooResult.ok([])), group_by="state")
    assert result["summary"]["average_order_value"] == 0
    assert "groups" not in result


@pytest.mark.asyncio
async def test_order_details_with_huge_id_returns_error_dict(client) -> None:
    result = await sales.get_sales_order_details(client, 2**40)

    assert result == {
        "error": "Error retrieving sales order: SearchRead failed: "
        "Cannot encode XML-RPC request: int exceeds XML-RPC limits"
    }
