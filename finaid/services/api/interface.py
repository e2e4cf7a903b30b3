"""
Abstract Resource Interface

DESIGN DECISION: Controllers talk to the backend through an abstract
interface, one object per resource. This allows us to:
1. Swap the HTTP client for an in-memory fake in tests
2. Keep view state logic decoupled from transport details
3. Give every resource the same five operations

The interface is intentionally small: list, get by id, create,
full-replace update and delete. Nothing else.
"""

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

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


EntityT = TypeVar("EntityT", bound=BaseModel)
InputT = TypeVar("InputT", bound=BaseModel)
ParamsT = TypeVar("ParamsT", bound=ListParams)


class ReadOnlyResourceInterface(ABC, Generic[EntityT, ParamsT]):
    """Lookup resources (categories, subcategories) only support reads."""

    @abstractmethod
    async def list(self, params: Optional[ParamsT] = None) -> list[EntityT]:
        """
        List entities in a window, optionally filtered.

        Raises:
            ApiError: If the request fails for any reason
        """
        pass

    @abstractmethod
    async def get_by_id(self, entity_id: int) -> EntityT:
        """
        Retrieve one entity.

        Raises:
            HttpStatusError: If the backend does not know the id
        """
        pass


class ResourceInterface(ReadOnlyResourceInterface[EntityT, ParamsT], Generic[EntityT, InputT, ParamsT]):
    """
    Full CRUD resource.

    Any backend implementation (HTTP, in-memory) must implement these.
    """

    @abstractmethod
    async def create(self, body: InputT) -> EntityT:
        """Create an entity and return it as stored by the backend."""
        pass

    @abstractmethod
    async def update(self, entity_id: int, body: InputT) -> EntityT:
        """Replace every editable field of an entity."""
        pass

    @abstractmethod
    async def delete(self, entity_id: int) -> None:
        """
        Delete an entity.

        Deleting an id that no longer exists is an HttpStatusError,
        never a silent success.
        """
        pass


class FinAidApiInterface(ABC):
    """The complete backend surface, grouped by resource."""

    @property
    @abstractmethod
    def persons(self) -> ResourceInterface[Person, PersonInput, ListParams]:
        pass

    @property
    @abstractmethod
    def accounts(self) -> ResourceInterface[Account, AccountInput, ListParams]:
        pass

    @property
    @abstractmethod
    def expenses(self) -> ResourceInterface[Expense, ExpenseInput, ExpenseListParams]:
        pass

    @property
    @abstractmethod
    def categories(self) -> ReadOnlyResourceInterface[ExpenseCategory, ListParams]:
        pass

    @property
    @abstractmethod
    def subcategories(self) -> ReadOnlyResourceInterface[ExpenseSubCategory, SubCategoryListParams]:
        pass


class ApiError(Exception):
    """
    Base exception for backend calls.

    `message` is always fit for display; `status` is the HTTP status
    when the backend answered.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        self.message = message
        self.status = status
        super().__init__(message)


class TransportError(ApiError):
    """The request never reached the backend or never came back."""
    pass


class HttpStatusError(ApiError):
    """The backend answered with a non-success status."""
    pass


class DecodeError(ApiError):
    """The backend answered with a body we cannot read."""
    pass
