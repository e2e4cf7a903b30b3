"""
Resource Models for FinAid Budget

These models define the schemas of everything exchanged with the backend.
They are designed to:
1. Parse the `data` payload of every success envelope
2. Shape request bodies for create and full-replace update
3. Shape list query parameters (absent values are never sent)

DESIGN DECISION: Entity models are what the server returns and carry
server-assigned ids and timestamps. Input models are what the client
sends and carry only the editable fields. Updates are full replacements,
so optional references are sent as explicit nulls rather than omitted.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)


# Decimals travel as JSON numbers, not strings
Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]

# Money goes over the wire as a JSON number (a double), which holds 15
# significant digits exactly: up to 13 integer digits plus cents.
MAX_AMOUNT = Decimal("9999999999999.99")
MONEY_DECIMAL_PLACES = 2

NAME_MAX_LENGTH = 200
EMAIL_MAX_LENGTH = 320
NOTES_MAX_LENGTH = 1000


def money_problem(amount: Decimal) -> Optional[str]:
    """Why `amount` cannot be sent without losing precision, or None."""
    if abs(amount) > MAX_AMOUNT:
        return f"must not exceed {MAX_AMOUNT:,}"
    if amount.normalize().as_tuple().exponent < -MONEY_DECIMAL_PLACES:
        return f"can have at most {MONEY_DECIMAL_PLACES} decimal places"
    return None


def _check_money(value: Decimal) -> Decimal:
    problem = money_problem(value)
    if problem:
        raise ValueError(f"Amount {problem}")
    return value


# Money the client sends; entities read from the backend stay unbounded
OutgoingMoney = Annotated[Money, AfterValidator(_check_money)]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Currency(str, Enum):
    """Currencies an account can be held in."""
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"
    CAD = "CAD"
    AUD = "AUD"
    CHF = "CHF"
    CNY = "CNY"


CURRENCY_LABELS = {
    Currency.USD: "USD - US Dollar",
    Currency.EUR: "EUR - Euro",
    Currency.GBP: "GBP - British Pound",
    Currency.JPY: "JPY - Japanese Yen",
    Currency.CAD: "CAD - Canadian Dollar",
    Currency.AUD: "AUD - Australian Dollar",
    Currency.CHF: "CHF - Swiss Franc",
    Currency.CNY: "CNY - Chinese Yuan",
}


class AccountType(str, Enum):
    """Kinds of financial account."""
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"
    INVESTMENT = "investment"
    LOAN = "loan"
    OTHER = "other"


def _date_part(value: Any) -> Any:
    """Accept both `YYYY-MM-DD` and full timestamps for calendar dates."""
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    if isinstance(value, datetime):
        return value.date()
    return value


# =============================================================================
# ENTITIES - as returned by the backend
# =============================================================================

class Entity(BaseModel):
    """Fields every server-side entity carries."""
    model_config = ConfigDict(extra="ignore")

    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Person(Entity):
    name: str
    email: str


class Account(Entity):
    name: str
    currency: Currency
    account_type: AccountType
    initial_balance: Money
    primary_owner_id: int
    second_owner_id: Optional[int] = None


class ExpenseCategory(Entity):
    name: str


class ExpenseSubCategory(Entity):
    name: str
    expense_category_id: int


class Expense(Entity):
    amount: Money
    category_id: int
    subcategory_id: Optional[int] = None
    date: date
    payee_id: int
    account_id: int
    notes: Optional[str] = None

    @field_validator('date', mode='before')
    @classmethod
    def truncate_timestamp(cls, v: Any) -> Any:
        return _date_part(v)


# =============================================================================
# INPUTS - request bodies for create / full-replace update
# =============================================================================

class PersonInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=NAME_MAX_LENGTH)
    email: str = Field(..., min_length=3, max_length=EMAIL_MAX_LENGTH)


class AccountInput(BaseModel):
    """
    Account body.

    second_owner_id is always serialized, as null when the account
    has a single owner.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=NAME_MAX_LENGTH)
    currency: Currency
    account_type: AccountType
    initial_balance: OutgoingMoney
    primary_owner_id: int
    second_owner_id: Optional[int] = None

    @model_validator(mode='after')
    def validate_owners(self) -> 'AccountInput':
        if self.second_owner_id is not None and self.second_owner_id == self.primary_owner_id:
            raise ValueError("Second owner must differ from primary owner")
        return self


class ExpenseInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: OutgoingMoney = Field(..., gt=0)
    category_id: int
    subcategory_id: Optional[int] = None
    date: date
    payee_id: int
    account_id: int
    notes: Optional[str] = Field(default=None, max_length=NOTES_MAX_LENGTH)

    @field_validator('notes')
    @classmethod
    def blank_notes_are_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


# =============================================================================
# LIST PARAMETERS - serialized as URL query parameters
# =============================================================================

class ListParams(BaseModel):
    """
    Pagination window.

    Both fields are optional; an absent field is left out of the query
    string instead of being sent empty.
    """

    skip: Optional[int] = Field(default=None, ge=0)
    limit: Optional[int] = Field(default=None, gt=0)

    def to_query(self) -> dict[str, str]:
        """Render non-empty parameters as query string values."""
        query = {}
        for key, value in self.model_dump(exclude_none=True).items():
            if isinstance(value, date):
                query[key] = value.isoformat()
            else:
                query[key] = str(value)
        return query


class ExpenseListParams(ListParams):
    """Expense window plus exact-match filters and an inclusive date range."""

    category_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    payee_id: Optional[int] = None
    account_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode='after')
    def validate_range(self) -> 'ExpenseListParams':
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


class SubCategoryListParams(ListParams):
    expense_category_id: Optional[int] = None
