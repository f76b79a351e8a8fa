import asyncio
import xmlrpc.client

import httpx
import pytest

from core.models import OdooConfig
from core.odoo_client import OdooClient


def xml_response(value, status: int = 200) -> httpx.Response:
    body = xmlrpc.client.dumps((value,), methodresponse=True, allow_none=True)
    return httpx.Response(status, headers={"content-type": "text/xml"}, content=body.encode())


def fault_response(code: int, message: str) -> httpx.Response:
    body = xmlrpc.client.dumps(xmlrpc.client.Fault(code, message), methodresponse=True)
    return httpx.Response(200, headers={"content-type": "text/xml"}, content=body.encode())


def _matches(row: dict, domain: list) -> bool:
    for field, operator, value in domain:
        current = row.get(field)
        if operator == "=" and current != value:
            return False
        if operator == "in" and current not in value:
            return False
        if operator == ">=" and not (current is not None and current >= value):
            return False
        if operator == "<=" and not (current is not None and current <= value):
            return False
    return True


class FakeOdoo:
    """Minimal Odoo XML-RPC server for httpx.MockTransport.

    Empty POSTs (what the probe and the body fetch send) are answered from
    the probe_* attributes; everything else is decoded as XML-RPC.
    """

    def __init__(self):
        self.uid = 7
        self.version = {"server_version": "17.0", "protocol_version": 1}
        self.records: dict[str, list[dict]] = {}
        self.faults: dict[str, xmlrpc.client.Fault] = {}
        self.html: str | None = None
        self.delay: dict[str, float] = {}
        self.probe_status = 200
        self.probe_content_type = "text/xml"
        self.probe_body = ""
        self.probe_error: Exception | None = None
        self.calls: list[tuple[str, str, tuple]] = []
        self.probes: list[str] = []

    def methods(self, path_suffix: str = "") -> list[str]:
        return [method for path, method, _ in self.calls if path.endswith(path_suffix)]

    def execute_calls(self, operation: str) -> list[tuple]:
        return [params for _, method, params in self.calls if method == "execute_kw" and params[4] == operation]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        if not request.content:
            self.probes.append(str(request.url))
            if self.probe_error is not None:
                raise self.probe_error
            return httpx.Response(
                self.probe_status,
                headers={"content-type": self.probe_content_type},
                content=self.probe_body.encode(),
            )

        params, method = xmlrpc.client.loads(request.content, use_builtin_types=True)
        self.calls.append((request.url.path, method, params))

        key = params[4] if method == "execute_kw" else method
        if key in self.delay:
            await asyncio.sleep(self.delay[key])
        if self.html is not None:
            return httpx.Response(200, headers={"content-type": "text/html"}, content=self.html.encode())
        if key in self.faults:
            fault = self.faults[key]
            return fault_response(fault.faultCode, fault.faultString)

        if method == "version":
            return xml_response(self.version)
        if method == "authenticate":
            return xml_response(self.uid)

        _db, _uid, _password, model, operation, args, *rest = params
        kwargs = rest[0] if rest else {}
        rows = [row for row in self.records.get(model, []) if _matches(row, args[0] if args else [])]
        if operation == "search_read":
            offset = kwargs.get("offset", 0)
            limit = kwargs.get("limit")
            rows = rows[offset:offset + limit] if limit else rows[offset:]
            if kwargs.get("fields"):
                rows = [{k: v for k, v in row.items() if k in kwargs["fields"]} for row in rows]
            return xml_response(rows)
        if operation == "search_count":
            return xml_response(len(rows))
        if operation == "fields_get":
            return xml_response({"name": {"type": "char", "string": "Order Reference"}})
        return fault_response(1, f"Unknown operation {operation}")


@pytest.fixture
def config() -> OdooConfig:
    return OdooConfig(
        url="https://acme.example.com",
        database="acme",
        username="bot@acme.example.com",
        password="secret",
    )


@pytest.fixture
def odoo() -> FakeOdoo:
    return FakeOdoo()


@pytest.fixture
def client(config, odoo) -> OdooClient:
    return OdooClient(config, transport=httpx.MockTransport(odoo))
