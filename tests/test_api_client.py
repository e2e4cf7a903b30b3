"""
Tests for the HTTP resource client

The client talks to an in-process aiohttp server that records every
request and answers with canned responses.
"""

import asyncio
import json
from datetime import date
from decimal import Decimal

import aiohttp
import pytest
from aiohttp import web
from aiohttp import test_utils

from finaid.models.resources import (
    AccountInput,
    AccountType,
    Currency,
    ExpenseListParams,
    ListParams,
    PersonInput,
    SubCategoryListParams,
)
from finaid.services.api import (
    ApiTransport,
    DecodeError,
    FinAidApiClient,
    HttpStatusError,
    TransportError,
)
from finaid.services.api.http_client import http_error_message


ALICE = {"id": 1, "name": "Alice Smith", "email": "alice@example.com"}


class Backend:
    """Records requests and replays canned (status, body) responses."""

    def __init__(self, delay: float = 0):
        self.requests = []
        self.responses = {}
        self.delay = delay

    def respond(self, method: str, path: str, status: int = 200, body=None) -> None:
        self.responses[(method, path)] = (status, body)

    async def handle(self, request: web.Request) -> web.Response:
        payload = await request.json() if request.can_read_body else None
        self.requests.append({
            "method": request.method,
            "path": request.path,
            "query": dict(request.query),
            "content_type": request.headers.get("Content-Type"),
            "json": payload,
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        status, body = self.responses.get((request.method, request.path), (404, None))
        if body is None:
            return web.Response(status=status)
        if isinstance(body, str):
            return web.Response(status=status, text=body)
        return web.json_response(body, status=status)

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_route("*", "/api/v1/{tail:.*}", self.handle)
        return app


def run_against(backend: Backend, scenario):
    """Run `scenario(api)` against a live in-process backend."""

    async def main():
        async with test_utils.TestServer(backend.app()) as server:
            transport = ApiTransport(base_url=str(server.make_url("/api/v1/")))
            return await scenario(FinAidApiClient(transport))

    return asyncio.run(main())


class TestRequests:
    """How requests are built."""

    def test_list_sends_window_as_query(self):
        backend = Backend()
        backend.respond("GET", "/api/v1/persons", body={"data": [ALICE]})

        people = run_against(backend, lambda api: api.persons.list(ListParams(skip=0, limit=10)))

        assert [person.name for person in people] == ["Alice Smith"]
        request = backend.requests[0]
        assert request["query"] == {"skip": "0", "limit": "10"}
        assert request["content_type"] == "application/json"

    def test_absent_parameters_are_omitted(self):
        backend = Backend()
        backend.respond("GET", "/api/v1/expenses", body={"data": []})

        params = ExpenseListParams(
            skip=10,
            limit=10,
            category_id=3,
            start_date=date(2024, 5, 1),
            end_date=date(2024, 5, 31),
        )
        run_against(backend, lambda api: api.expenses.list(params))

        assert backend.requests[0]["query"] == {
            "skip": "10",
            "limit": "10",
            "category_id": "3",
            "start_date": "2024-05-01",
            "end_date": "2024-05-31",
        }

    def test_lookup_paths(self):
        backend = Backend()
        backend.respond("GET", "/api/v1/expenses/categories", body={"data": [{"id": 1, "name": "Food"}]})
        backend.respond(
            "GET",
            "/api/v1/expenses/categories/subcategories",
            body={"data": [{"id": 10, "name": "Groceries", "expense_category_id": 1}]},
        )

        async def scenario(api):
            categories = await api.categories.list()
            subcategories = await api.subcategories.list(SubCategoryListParams(expense_category_id=1))
            return categories, subcategories

        categories, subcategories = run_against(backend, scenario)
        assert categories[0].name == "Food"
        assert subcategories[0].expense_category_id == 1
        assert backend.requests[0]["query"] == {}
        assert backend.requests[1]["query"] == {"expense_category_id": "1"}

    def test_create_sends_json_body(self):
        backend = Backend()
        backend.respond("POST", "/api/v1/persons", status=201, body={"data": dict(ALICE, id=5)})

        body = PersonInput(name="Alice Smith", email="alice@example.com")
        person = run_against(backend, lambda api: api.persons.create(body))

        assert person.id == 5
        assert backend.requests[0]["json"] == {"name": "Alice Smith", "email": "alice@example.com"}

    def test_update_sends_null_second_owner(self):
        """A single-owner account is saved with an explicit null."""
        account = {
            "id": 7,
            "name": "Joint Checking",
            "currency": "USD",
            "account_type": "checking",
            "initial_balance": 1200.0,
            "primary_owner_id": 1,
            "second_owner_id": None,
        }
        backend = Backend()
        backend.respond("PUT", "/api/v1/accounts/7", body={"data": account})

        body = AccountInput(
            name="Joint Checking",
            currency=Currency.USD,
            account_type=AccountType.CHECKING,
            initial_balance=Decimal("1200.00"),
            primary_owner_id=1,
            second_owner_id=None,
        )
        saved = run_against(backend, lambda api: api.accounts.update(7, body))

        sent = backend.requests[0]["json"]
        assert "second_owner_id" in sent
        assert sent["second_owner_id"] is None
        assert sent["initial_balance"] == 1200.0
        assert saved.second_owner_id is None


class TestResponses:
    """How responses are decoded."""

    def test_get_by_id_unwraps_envelope(self):
        backend = Backend()
        backend.respond("GET", "/api/v1/persons/1", body={"data": ALICE})

        person = run_against(backend, lambda api: api.persons.get_by_id(1))
        assert person.email == "alice@example.com"

    def test_empty_delete_response(self):
        backend = Backend()
        backend.respond("DELETE", "/api/v1/expenses/9", status=204)

        assert run_against(backend, lambda api: api.expenses.delete(9)) is None
        assert backend.requests[0]["method"] == "DELETE"

    def test_error_message_from_body(self):
        backend = Backend()
        backend.respond("DELETE", "/api/v1/persons/1", status=409, body={"message": "Person owns accounts"})

        with pytest.raises(HttpStatusError) as exc_info:
            run_against(backend, lambda api: api.persons.delete(1))
        assert exc_info.value.message == "Person owns accounts"
        assert exc_info.value.status == 409

    def test_delete_missing_entity(self):
        backend = Backend()
        backend.respond("DELETE", "/api/v1/persons/1", status=404, body={"message": "Person not found"})

        with pytest.raises(HttpStatusError) as exc_info:
            run_against(backend, lambda api: api.persons.delete(1))
        assert exc_info.value.status == 404
        assert exc_info.value.message == "Person not found"
        assert backend.requests[0]["method"] == "DELETE"

    def test_unknown_route_is_not_found(self):
        backend = Backend()

        with pytest.raises(HttpStatusError) as exc_info:
            run_against(backend, lambda api: api.expenses.delete(42))
        assert exc_info.value.status == 404
        assert exc_info.value.message == "HTTP error, status 404"

    def test_error_message_fallback(self):
        backend = Backend()
        backend.respond("GET", "/api/v1/persons/2", status=500, body="<html>oops</html>")

        with pytest.raises(HttpStatusError) as exc_info:
            run_against(backend, lambda api: api.persons.get_by_id(2))
        assert exc_info.value.message == "HTTP error, status 500"

    def test_missing_envelope_is_decode_error(self):
        backend = Backend()
        backend.respond("GET", "/api/v1/persons/1", body=ALICE)

        with pytest.raises(DecodeError):
            run_against(backend, lambda api: api.persons.get_by_id(1))

    def test_unparseable_body_is_decode_error(self):
        backend = Backend()
        backend.respond("GET", "/api/v1/persons", body="not json")

        with pytest.raises(DecodeError) as exc_info:
            run_against(backend, lambda api: api.persons.list())
        assert exc_info.value.message == "Malformed response from server (status 200)"

    def test_wrong_shape_is_decode_error(self):
        backend = Backend()
        backend.respond("GET", "/api/v1/persons/1", body={"data": {"id": "one"}})

        with pytest.raises(DecodeError):
            run_against(backend, lambda api: api.persons.get_by_id(1))

    def test_list_requires_array(self):
        backend = Backend()
        backend.respond("GET", "/api/v1/accounts", body={"data": {"items": []}})

        with pytest.raises(DecodeError):
            run_against(backend, lambda api: api.accounts.list())


class TestTransport:
    def test_unreachable_backend(self):
        transport = ApiTransport(base_url="http://127.0.0.1:9/api/v1")
        api = FinAidApiClient(transport)

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(api.persons.list())
        assert exc_info.value.message.startswith("Could not reach the server")
        assert exc_info.value.status is None

    def test_injected_session_uses_timeout(self):
        backend = Backend(delay=0.5)
        backend.respond("GET", "/api/v1/persons", body={"data": []})

        async def main():
            async with test_utils.TestServer(backend.app()) as server:
                async with aiohttp.ClientSession() as session:
                    transport = ApiTransport(
                        base_url=str(server.make_url("/api/v1/")),
                        timeout=0.05,
                        session=session,
                    )
                    return await FinAidApiClient(transport).persons.list()

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(main())
        assert exc_info.value.status is None

    def test_base_url_from_settings(self, monkeypatch):
        monkeypatch.setenv("FINAID_API_BASE_URL", "http://backend.internal/api/v2/")
        assert ApiTransport().base_url == "http://backend.internal/api/v2"

    def test_http_error_message(self):
        assert http_error_message(404, json.dumps({"message": "Not found"}).encode()) == "Not found"
        assert http_error_message(404, b"") == "HTTP error, status 404"
        assert http_error_message(422, json.dumps({"message": "  "}).encode()) == "HTTP error, status 422"
        assert http_error_message(400, json.dumps(["x"]).encode()) == "HTTP error, status 400"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
