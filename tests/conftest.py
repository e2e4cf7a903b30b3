"""
Shared fixtures for FinAid Budget tests.

Controllers are exercised against an in-memory backend that records
every call, can be told to fail a given operation, and can hold calls
open so tests decide the order in which responses arrive.
"""

import asyncio
from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from finaid.config import get_settings
from finaid.models.resources import (
    Account,
    AccountType,
    Currency,
    Expense,
    ExpenseCategory,
    ExpenseSubCategory,
    Person,
)
from finaid.services.api import ApiError, FinAidApiInterface, HttpStatusError, ResourceInterface
from finaid.views.session import SessionContext


TODAY = date(2024, 5, 15)


class FakeResource(ResourceInterface):
    """In-memory collection with call recording and failure injection."""

    def __init__(self, model, items=()):
        self.model = model
        self.items = {item.id: item for item in items}
        self.calls = []
        self.failures: dict[str, ApiError] = {}
        self.hold = False
        self.held: list[asyncio.Event] = []

    async def _call(self, op: str, *args) -> None:
        self.calls.append((op,) + args)
        if self.hold:
            gate = asyncio.Event()
            self.held.append(gate)
            await gate.wait()
        error = self.failures.get(op)
        if error is not None:
            raise error

    def calls_of(self, op: str) -> list:
        return [call for call in self.calls if call[0] == op]

    def release(self, index: int) -> None:
        self.held[index].set()

    async def wait_for_held(self, count: int) -> None:
        while len(self.held) < count:
            await asyncio.sleep(0)

    def _matches(self, item, params) -> bool:
        for key, value in params.model_dump(exclude_none=True).items():
            if key in ("skip", "limit"):
                continue
            if key == "start_date":
                if item.date < value:
                    return False
            elif key == "end_date":
                if item.date > value:
                    return False
            elif getattr(item, key) != value:
                return False
        return True

    def _missing(self, entity_id: int) -> HttpStatusError:
        return HttpStatusError(f"{self.model.__name__} not found", status=404)

    async def get_by_id(self, entity_id: int):
        await self._call("get_by_id", entity_id)
        if entity_id not in self.items:
            raise self._missing(entity_id)
        return self.items[entity_id]

    async def create(self, body):
        await self._call("create", body)
        new_id = max(self.items, default=0) + 1
        entity = self.model(id=new_id, **body.model_dump())
        self.items[new_id] = entity
        return entity

    async def update(self, entity_id: int, body):
        await self._call("update", entity_id, body)
        if entity_id not in self.items:
            raise self._missing(entity_id)
        entity = self.model(id=entity_id, **body.model_dump())
        self.items[entity_id] = entity
        return entity

    async def delete(self, entity_id: int) -> None:
        await self._call("delete", entity_id)
        if entity_id not in self.items:
            raise self._missing(entity_id)
        del self.items[entity_id]

    async def list(self, params=None):
        await self._call("list", params)
        rows = [self.items[key] for key in sorted(self.items)]
        if params is None:
            return rows
        rows = [row for row in rows if self._matches(row, params)]
        skip = params.skip or 0
        if params.limit is None:
            return rows[skip:]
        return rows[skip:skip + params.limit]


class FakeApi(FinAidApiInterface):
    def __init__(
        self,
        persons: FakeResource,
        accounts: FakeResource,
        expenses: FakeResource,
        categories: FakeResource,
        subcategories: FakeResource,
    ):
        self._persons = persons
        self._accounts = accounts
        self._expenses = expenses
        self._categories = categories
        self._subcategories = subcategories

    @property
    def persons(self) -> FakeResource:
        return self._persons

    @property
    def accounts(self) -> FakeResource:
        return self._accounts

    @property
    def expenses(self) -> FakeResource:
        return self._expenses

    @property
    def categories(self) -> FakeResource:
        return self._categories

    @property
    def subcategories(self) -> FakeResource:
        return self._subcategories


PEOPLE_NAMES = [
    "Alice Smith", "Bob Jones", "Carol White", "Dan Brown", "Eve Black", "Frank Green",
    "Grace Hall", "Heidi King", "Ivan Lee", "Judy Moore", "Karl Nash", "Lena Ortiz",
]


def make_people(count: int = len(PEOPLE_NAMES)) -> list[Person]:
    return [
        Person(id=index + 1, name=name, email=f"{name.split()[0].lower()}@example.com")
        for index, name in enumerate(PEOPLE_NAMES[:count])
    ]


def make_accounts() -> list[Account]:
    return [
        Account(
            id=7,
            name="Joint Checking",
            currency=Currency.USD,
            account_type=AccountType.CHECKING,
            initial_balance=Decimal("1200.00"),
            primary_owner_id=1,
            second_owner_id=None,
        ),
        Account(
            id=8,
            name="Shared Savings",
            currency=Currency.EUR,
            account_type=AccountType.SAVINGS,
            initial_balance=Decimal("500.50"),
            primary_owner_id=1,
            second_owner_id=2,
        ),
    ]


def make_categories() -> list[ExpenseCategory]:
    return [
        ExpenseCategory(id=1, name="Food"),
        ExpenseCategory(id=2, name="Transport"),
    ]


def make_subcategories() -> list[ExpenseSubCategory]:
    return [
        ExpenseSubCategory(id=10, name="Groceries", expense_category_id=1),
        ExpenseSubCategory(id=11, name="Restaurants", expense_category_id=1),
        ExpenseSubCategory(id=20, name="Fuel", expense_category_id=2),
    ]


def make_expenses() -> list[Expense]:
    return [
        Expense(
            id=100,
            amount=Decimal("25.50"),
            category_id=1,
            subcategory_id=10,
            date=date(2024, 5, 3),
            payee_id=1,
            account_id=7,
            notes="Weekly shop",
        ),
        Expense(
            id=101,
            amount=Decimal("40.00"),
            category_id=2,
            subcategory_id=20,
            date=date(2024, 5, 10),
            payee_id=2,
            account_id=8,
        ),
        Expense(
            id=102,
            amount=Decimal("12.00"),
            category_id=1,
            subcategory_id=None,
            date=date(2024, 4, 28),
            payee_id=1,
            account_id=7,
        ),
    ]


def make_fake_api(people: Optional[list[Person]] = None) -> FakeApi:
    return FakeApi(
        persons=FakeResource(Person, make_people() if people is None else people),
        accounts=FakeResource(Account, make_accounts()),
        expenses=FakeResource(Expense, make_expenses()),
        categories=FakeResource(ExpenseCategory, make_categories()),
        subcategories=FakeResource(ExpenseSubCategory, make_subcategories()),
    )


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached per process; every test starts from a clean cache."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_api() -> FakeApi:
    return make_fake_api()


@pytest.fixture
def session() -> SessionContext:
    return SessionContext(user_name="Test User", user_email="test.user@example.com")


@pytest.fixture
def navigations() -> list[str]:
    return []


@pytest.fixture
def navigate(navigations):
    return navigations.append
