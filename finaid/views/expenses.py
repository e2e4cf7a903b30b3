"""
Expense pages: list and create/edit.

Expenses reference a category, an optional subcategory of that category,
a payee and an account. The subcategory selector always depends on the
category selector: changing the category clears the subcategory and
restricts its choices to children of the new category.
"""

import asyncio
import calendar
from datetime import date
from decimal import Decimal
from typing import Optional

from finaid.config import get_settings
from finaid.models.resources import (
    NOTES_MAX_LENGTH,
    Account,
    Expense,
    ExpenseCategory,
    ExpenseInput,
    ExpenseListParams,
    ExpenseSubCategory,
    ListParams,
    Person,
    money_problem,
)
from finaid.services.api import ResourceInterface
from finaid.views.edit_view import (
    EditViewController,
    id_value,
    parse_date,
    parse_decimal,
    parse_id,
)
from finaid.views.list_view import (
    EmptyParentPolicy,
    ListViewController,
    dependent_choices,
    label_for,
    names_by_id,
)


EXPENSES_ROUTE = "/expenses"


def month_bounds(day: date) -> tuple[date, date]:
    """First and last calendar day of the month containing `day`."""
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


def shift_month(day: date, months: int) -> date:
    """First day of the month `months` away from `day`'s month."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def format_amount(amount: Decimal) -> str:
    return f"${amount:,.2f}"


class ExpenseListController(ListViewController[Expense]):
    """
    Expense list with exact-match filters and an inclusive date range.

    The range starts as the current calendar month and can be browsed
    month by month. Any filter change restarts paging at offset 0.
    """

    entity_label = "expense"

    def __init__(
        self,
        *args,
        empty_parent: EmptyParentPolicy = EmptyParentPolicy.ALL,
        today: Optional[date] = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.empty_parent = empty_parent

        self.category_id: Optional[int] = None
        self.subcategory_id: Optional[int] = None
        self.payee_id: Optional[int] = None
        self.account_id: Optional[int] = None
        self.start_date, self.end_date = month_bounds(today or date.today())

        self.categories: list[ExpenseCategory] = []
        self.subcategories: list[ExpenseSubCategory] = []
        self.people: list[Person] = []
        self.accounts: list[Account] = []

        # Sum over every expense matching the filters, across all pages
        self.total_amount = Decimal("0")

    # Loading

    def _params(self) -> ExpenseListParams:
        return ExpenseListParams(
            skip=self.skip,
            limit=self.page_size,
            category_id=self.category_id,
            subcategory_id=self.subcategory_id,
            payee_id=self.payee_id,
            account_id=self.account_id,
            start_date=self.start_date,
            end_date=self.end_date,
        )

    async def _fetch_page(self, params: ExpenseListParams) -> list[Expense]:
        return await self._api.expenses.list(params)

    async def _delete(self, entity_id: int) -> None:
        await self._api.expenses.delete(entity_id)

    async def _fetch_lookups(self) -> tuple:
        window = ListParams(limit=get_settings().api.lookup_limit)
        return await asyncio.gather(
            self._api.categories.list(),
            self._api.subcategories.list(),
            self._api.persons.list(window),
            self._api.accounts.list(window),
        )

    def _apply_lookups(self, lookups: tuple) -> None:
        self.categories, self.subcategories, self.people, self.accounts = (
            list(collection) for collection in lookups
        )

    async def _fetch_summary(self, params: ExpenseListParams) -> list[Expense]:
        window = params.model_copy(update={"skip": 0, "limit": get_settings().api.lookup_limit})
        return await self._api.expenses.list(window)

    def _apply_summary(self, matching: list[Expense]) -> None:
        self.total_amount = sum((expense.amount for expense in matching), Decimal("0"))

    def _on_deleted(self, entity: Expense) -> None:
        self.total_amount -= entity.amount

    def describe_for_delete(self, entity: Expense) -> str:
        return (
            f"Are you sure you want to delete this expense of {format_amount(entity.amount)}? "
            "This action cannot be undone."
        )

    # Filters

    @property
    def subcategory_choices(self) -> list[ExpenseSubCategory]:
        return dependent_choices(
            self.subcategories,
            self.category_id,
            lambda sub: sub.expense_category_id,
            self.empty_parent,
        )

    @property
    def has_active_filters(self) -> bool:
        return any(
            value is not None
            for value in (self.category_id, self.subcategory_id, self.payee_id, self.account_id)
        )

    async def _refilter(self) -> None:
        self.skip = 0
        await self.load()

    async def set_category(self, category_id: Optional[int]) -> None:
        self.category_id = category_id
        self.subcategory_id = None
        await self._refilter()

    async def set_subcategory(self, subcategory_id: Optional[int]) -> None:
        if subcategory_id is not None and subcategory_id not in {
            sub.id for sub in self.subcategory_choices
        }:
            raise ValueError(f"Subcategory {subcategory_id} is not available for the selected category")
        self.subcategory_id = subcategory_id
        await self._refilter()

    async def set_payee(self, payee_id: Optional[int]) -> None:
        self.payee_id = payee_id
        await self._refilter()

    async def set_account(self, account_id: Optional[int]) -> None:
        self.account_id = account_id
        await self._refilter()

    async def set_date_range(self, start_date: date, end_date: date) -> None:
        if end_date < start_date:
            raise ValueError("End date cannot be before start date")
        self.start_date, self.end_date = start_date, end_date
        await self._refilter()

    async def clear_filters(self) -> None:
        self.category_id = None
        self.subcategory_id = None
        self.payee_id = None
        self.account_id = None
        await self._refilter()

    # Month browsing

    @property
    def month_label(self) -> str:
        return self.start_date.strftime("%B %Y")

    async def previous_month(self) -> None:
        await self.set_date_range(*month_bounds(shift_month(self.start_date, -1)))

    async def next_month(self) -> None:
        await self.set_date_range(*month_bounds(shift_month(self.start_date, 1)))

    # Rendering helpers

    def category_label(self, expense: Expense) -> str:
        return label_for(names_by_id(self.categories), expense.category_id)

    def subcategory_label(self, expense: Expense) -> str:
        return label_for(names_by_id(self.subcategories), expense.subcategory_id)

    def payee_label(self, expense: Expense) -> str:
        return label_for(names_by_id(self.people), expense.payee_id)

    def account_label(self, expense: Expense) -> str:
        return label_for(names_by_id(self.accounts), expense.account_id)


class ExpenseFormController(EditViewController[Expense, ExpenseInput]):
    entity_label = "expense"
    list_route = EXPENSES_ROUTE

    def __init__(
        self,
        *args,
        empty_parent: EmptyParentPolicy = EmptyParentPolicy.NONE,
        today: Optional[date] = None,
        **kwargs,
    ):
        self.empty_parent = empty_parent
        self._today = today or date.today()
        self.categories: list[ExpenseCategory] = []
        self.subcategories: list[ExpenseSubCategory] = []
        self.people: list[Person] = []
        self.accounts: list[Account] = []
        super().__init__(*args, **kwargs)

    @property
    def resource(self) -> ResourceInterface:
        return self._api.expenses

    def default_values(self) -> dict[str, str]:
        return {
            "amount": "",
            "category_id": "",
            "subcategory_id": "",
            "date": self._today.isoformat(),
            "payee_id": "",
            "account_id": "",
            "notes": "",
        }

    def values_from_entity(self, entity: Expense) -> dict[str, str]:
        return {
            "amount": str(entity.amount),
            "category_id": str(entity.category_id),
            "subcategory_id": id_value(entity.subcategory_id),
            "date": entity.date.isoformat(),
            "payee_id": str(entity.payee_id),
            "account_id": str(entity.account_id),
            "notes": entity.notes or "",
        }

    async def _fetch_auxiliary(self) -> tuple:
        window = ListParams(limit=get_settings().api.lookup_limit)
        return await asyncio.gather(
            self._api.categories.list(),
            self._api.subcategories.list(),
            self._api.persons.list(window),
            self._api.accounts.list(window),
        )

    def _apply_auxiliary(self, data: tuple) -> None:
        self.categories, self.subcategories, self.people, self.accounts = (
            list(collection) for collection in data
        )

    def _on_field_changed(self, field: str) -> None:
        if field == "category_id":
            self.values["subcategory_id"] = ""
            self.errors.pop("subcategory_id", None)

    # Select options as (value, label); "" is the empty selection

    @property
    def category_choices(self) -> list[tuple[str, str]]:
        return [("", "Select category")] + [(str(c.id), c.name) for c in self.categories]

    @property
    def subcategory_choices(self) -> list[tuple[str, str]]:
        available = dependent_choices(
            self.subcategories,
            parse_id(self.values["category_id"]),
            lambda sub: sub.expense_category_id,
            self.empty_parent,
        )
        return [("", "No subcategory")] + [(str(s.id), s.name) for s in available]

    @property
    def payee_choices(self) -> list[tuple[str, str]]:
        return [("", "Select payee")] + [(str(p.id), p.name) for p in self.people]

    @property
    def account_choices(self) -> list[tuple[str, str]]:
        return [("", "Select account")] + [(str(a.id), a.name) for a in self.accounts]

    def validate(self) -> dict[str, str]:
        errors = {}
        values = self.values

        if not values["amount"].strip():
            errors["amount"] = "Amount is required"
        else:
            amount = parse_decimal(values["amount"])
            if amount is None or amount <= 0:
                errors["amount"] = "Amount must be a positive number"
            elif money_problem(amount) is not None:
                errors["amount"] = f"Amount {money_problem(amount)}"

        if not values["category_id"]:
            errors["category_id"] = "Category is required"
        elif parse_id(values["category_id"]) is None:
            errors["category_id"] = "Please select a valid category"

        subcategory = values["subcategory_id"]
        if subcategory and subcategory not in {value for value, _ in self.subcategory_choices}:
            errors["subcategory_id"] = "Subcategory does not belong to the selected category"

        if not values["date"].strip():
            errors["date"] = "Date is required"
        elif parse_date(values["date"]) is None:
            errors["date"] = "Date must be in YYYY-MM-DD format"

        if not values["payee_id"]:
            errors["payee_id"] = "Payee is required"
        elif parse_id(values["payee_id"]) is None:
            errors["payee_id"] = "Please select a valid payee"

        if not values["account_id"]:
            errors["account_id"] = "Account is required"
        elif parse_id(values["account_id"]) is None:
            errors["account_id"] = "Please select a valid account"

        if len(values["notes"].strip()) > NOTES_MAX_LENGTH:
            errors["notes"] = f"Notes must be at most {NOTES_MAX_LENGTH} characters"

        return errors

    def build_input(self) -> ExpenseInput:
        values = self.values
        return ExpenseInput(
            amount=parse_decimal(values["amount"]),
            category_id=int(values["category_id"]),
            subcategory_id=parse_id(values["subcategory_id"]),
            date=parse_date(values["date"]),
            payee_id=int(values["payee_id"]),
            account_id=int(values["account_id"]),
            notes=values["notes"].strip() or None,
        )
