"""
HTTP Implementation of the Resource Interface

DESIGN DECISION: One transport, many resources. ApiTransport owns the
wire contract shared by every endpoint:
1. JSON content type on every request, JSON bodies
2. Query parameters built from models, absent values omitted
3. `{"data": ...}` envelopes unwrapped before anything else sees them
4. Empty bodies (204 deletes) resolve to None
5. Every failure normalized into one ApiError with a display message

IMPORTANT: There are no retries here. A failed call fails once and the
user decides whether to try again.
"""

import asyncio
import json
from typing import Any, Generic, Optional

import aiohttp
import structlog
from pydantic import BaseModel, ValidationError

from finaid.config import get_settings
from finaid.models.resources import (
    Account,
    AccountInput,
    Expense,
    ExpenseCategory,
    ExpenseInput,
    ExpenseListParams,
    ExpenseSubCategory,
    ListParams,
    Person,
    PersonInput,
    SubCategoryListParams,
)
from finaid.services.api.interface import (
    ApiError,
    DecodeError,
    EntityT,
    FinAidApiInterface,
    HttpStatusError,
    InputT,
    ParamsT,
    ReadOnlyResourceInterface,
    ResourceInterface,
    TransportError,
)


logger = structlog.get_logger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


def http_error_message(status: int, raw: bytes) -> str:
    """
    Pick the message to show for a failed response.

    Prefers the `message` field of a JSON error body and falls back
    to a generic message when the body is absent or unreadable.
    """
    try:
        payload = json.loads(raw) if raw.strip() else None
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        message = payload.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return f"HTTP error, status {status}"


class ApiTransport:
    """
    Low-level HTTP wrapper around aiohttp.

    If no session is injected, each request opens and closes its own
    ClientSession so the transport can be driven from short-lived
    event loops (Streamlit reruns). The configured timeout applies to
    every request, injected session or not.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        api_settings = get_settings().api
        self._base_url = (base_url or api_settings.base_url).rstrip("/")
        self._timeout = aiohttp.ClientTimeout(
            total=timeout if timeout is not None else api_settings.request_timeout
        )
        self._session = session

    @property
    def base_url(self) -> str:
        return self._base_url

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[ListParams] = None,
        body: Optional[BaseModel] = None,
    ) -> Any:
        """
        Issue one request and return the unwrapped `data` payload.

        Returns None for empty-body responses.

        Raises:
            TransportError: Network failure or timeout
            HttpStatusError: Non-success status
            DecodeError: Success status with an unreadable body
        """
        url = f"{self._base_url}{path}"
        query = params.to_query() if params is not None else None
        payload = json.dumps(body.model_dump(mode="json")) if body is not None else None

        logger.debug("api_request", method=method, url=url, params=query)

        try:
            if self._session is not None:
                status, raw = await self._send(self._session, method, url, query, payload)
            else:
                async with aiohttp.ClientSession(timeout=self._timeout) as session:
                    status, raw = await self._send(session, method, url, query, payload)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("api_transport_failed", method=method, url=url, error=str(e))
            raise TransportError(f"Could not reach the server: {e}") from e

        if not 200 <= status < 300:
            message = http_error_message(status, raw)
            logger.warning("api_http_error", method=method, url=url, status=status, message=message)
            raise HttpStatusError(message, status=status)

        return self._unwrap(raw, status)

    async def _send(
        self,
        session: aiohttp.ClientSession,
        method: str,
        url: str,
        query: Optional[dict[str, str]],
        payload: Optional[str],
    ) -> tuple[int, bytes]:
        async with session.request(
            method,
            url,
            params=query,
            data=payload,
            headers=JSON_HEADERS,
            timeout=self._timeout,
        ) as response:
            return response.status, await response.read()

    def _unwrap(self, raw: bytes, status: int) -> Any:
        if not raw.strip():
            return None
        try:
            envelope = json.loads(raw)
        except ValueError as e:
            raise DecodeError(f"Malformed response from server (status {status})", status=status) from e
        if not isinstance(envelope, dict) or "data" not in envelope:
            raise DecodeError(f"Malformed response from server (status {status})", status=status)
        return envelope["data"]


class HttpReadOnlyResource(ReadOnlyResourceInterface[EntityT, ParamsT], Generic[EntityT, ParamsT]):
    """Read access to one collection path."""

    def __init__(self, transport: ApiTransport, path: str, model: type[EntityT]):
        self._transport = transport
        self._path = path
        self._model = model

    def _parse(self, data: Any) -> EntityT:
        try:
            return self._model.model_validate(data)
        except ValidationError as e:
            raise DecodeError(f"Unexpected {self._model.__name__} payload from server") from e

    async def get_by_id(self, entity_id: int) -> EntityT:
        data = await self._transport.request("GET", f"{self._path}/{entity_id}")
        return self._parse(data)

    async def list(self, params: Optional[ParamsT] = None) -> list[EntityT]:
        data = await self._transport.request("GET", self._path, params=params)
        if data is None:
            return []
        if not isinstance(data, list):
            raise DecodeError(f"Expected a list of {self._model.__name__} from server")
        return [self._parse(item) for item in data]


class HttpResource(
    HttpReadOnlyResource[EntityT, ParamsT],
    ResourceInterface[EntityT, InputT, ParamsT],
    Generic[EntityT, InputT, ParamsT],
):
    """Full CRUD access to one collection path."""

    async def create(self, body: InputT) -> EntityT:
        data = await self._transport.request("POST", self._path, body=body)
        return self._parse(data)

    async def update(self, entity_id: int, body: InputT) -> EntityT:
        data = await self._transport.request("PUT", f"{self._path}/{entity_id}", body=body)
        return self._parse(data)

    async def delete(self, entity_id: int) -> None:
        await self._transport.request("DELETE", f"{self._path}/{entity_id}")


class FinAidApiClient(FinAidApiInterface):
    """
    The backend, as seen over HTTP.

    Usage:
        api = FinAidApiClient()
        people = await api.persons.list(ListParams(skip=0, limit=10))
    """

    def __init__(self, transport: Optional[ApiTransport] = None):
        self._transport = transport or ApiTransport()
        self._persons = HttpResource[Person, PersonInput, ListParams](
            self._transport, "/persons", Person
        )
        self._accounts = HttpResource[Account, AccountInput, ListParams](
            self._transport, "/accounts", Account
        )
        self._expenses = HttpResource[Expense, ExpenseInput, ExpenseListParams](
            self._transport, "/expenses", Expense
        )
        self._categories = HttpReadOnlyResource[ExpenseCategory, ListParams](
            self._transport, "/expenses/categories", ExpenseCategory
        )
        self._subcategories = HttpReadOnlyResource[ExpenseSubCategory, SubCategoryListParams](
            self._transport, "/expenses/categories/subcategories", ExpenseSubCategory
        )

    @property
    def transport(self) -> ApiTransport:
        return self._transport

    @property
    def persons(self) -> HttpResource[Person, PersonInput, ListParams]:
        return self._persons

    @property
    def accounts(self) -> HttpResource[Account, AccountInput, ListParams]:
        return self._accounts

    @property
    def expenses(self) -> HttpResource[Expense, ExpenseInput, ExpenseListParams]:
        return self._expenses

    @property
    def categories(self) -> HttpReadOnlyResource[ExpenseCategory, ListParams]:
        return self._categories

    @property
    def subcategories(self) -> HttpReadOnlyResource[ExpenseSubCategory, SubCategoryListParams]:
        return self._subcategories


__all__ = [
    "ApiError",
    "ApiTransport",
    "FinAidApiClient",
    "HttpReadOnlyResource",
    "HttpResource",
    "http_error_message",
]
