"""
Account pages: list and create/edit.

Accounts reference one required and one optional owner. Both pages
side-load people so owners render by name.
"""

from typing import Optional

from finaid.config import get_settings
from finaid.models.resources import (
    CURRENCY_LABELS,
    NAME_MAX_LENGTH,
    Account,
    AccountInput,
    AccountType,
    Currency,
    ListParams,
    Person,
    money_problem,
)
from finaid.services.api import ResourceInterface
from finaid.views.edit_view import EditViewController, id_value, parse_decimal, parse_id
from finaid.views.list_view import ListViewController, label_for, names_by_id


ACCOUNTS_ROUTE = "/accounts"
NO_SECOND_OWNER = "No second owner"


def account_type_label(account_type: AccountType) -> str:
    return account_type.value.capitalize()


class AccountListController(ListViewController[Account]):
    entity_label = "account"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.owner_names: dict[int, str] = {}

    async def _fetch_page(self, params: ListParams) -> list[Account]:
        return await self._api.accounts.list(params)

    async def _delete(self, entity_id: int) -> None:
        await self._api.accounts.delete(entity_id)

    async def _fetch_lookups(self) -> list[Person]:
        limit = get_settings().api.lookup_limit
        return await self._api.persons.list(ListParams(limit=limit))

    def _apply_lookups(self, lookups: list[Person]) -> None:
        self.owner_names = names_by_id(lookups)

    def describe_for_delete(self, entity: Account) -> str:
        return f'Are you sure you want to delete the account "{entity.name}"? This action cannot be undone.'

    def primary_owner_label(self, account: Account) -> str:
        return label_for(self.owner_names, account.primary_owner_id)

    def second_owner_label(self, account: Account) -> Optional[str]:
        if account.second_owner_id is None:
            return None
        return label_for(self.owner_names, account.second_owner_id)


class AccountFormController(EditViewController[Account, AccountInput]):
    entity_label = "account"
    list_route = ACCOUNTS_ROUTE

    def __init__(self, *args, **kwargs):
        self.people: list[Person] = []
        super().__init__(*args, **kwargs)

    @property
    def resource(self) -> ResourceInterface:
        return self._api.accounts

    def default_values(self) -> dict[str, str]:
        return {
            "name": "",
            "currency": Currency.USD.value,
            "account_type": AccountType.CHECKING.value,
            "initial_balance": "0.00",
            "primary_owner_id": "",
            "second_owner_id": "",
        }

    def values_from_entity(self, entity: Account) -> dict[str, str]:
        return {
            "name": entity.name,
            "currency": entity.currency.value,
            "account_type": entity.account_type.value,
            "initial_balance": str(entity.initial_balance),
            "primary_owner_id": str(entity.primary_owner_id),
            "second_owner_id": id_value(entity.second_owner_id),
        }

    async def _fetch_auxiliary(self) -> list[Person]:
        limit = get_settings().api.lookup_limit
        return await self._api.persons.list(ListParams(limit=limit))

    def _apply_auxiliary(self, data: list[Person]) -> None:
        self.people = list(data)

    # Select options as (value, label); "" is the empty selection

    @property
    def currency_choices(self) -> list[tuple[str, str]]:
        return [(currency.value, CURRENCY_LABELS[currency]) for currency in Currency]

    @property
    def account_type_choices(self) -> list[tuple[str, str]]:
        return [(kind.value, account_type_label(kind)) for kind in AccountType]

    @property
    def owner_choices(self) -> list[tuple[str, str]]:
        return [("", "Select primary owner")] + [(str(p.id), p.name) for p in self.people]

    @property
    def second_owner_choices(self) -> list[tuple[str, str]]:
        primary = self.values["primary_owner_id"]
        return [("", NO_SECOND_OWNER)] + [
            (str(p.id), p.name) for p in self.people if str(p.id) != primary
        ]

    def validate(self) -> dict[str, str]:
        errors = {}
        values = self.values
        name = values["name"].strip()

        if not name:
            errors["name"] = "Account name is required"
        elif len(name) < 2:
            errors["name"] = "Account name must be at least 2 characters long"
        elif len(name) > NAME_MAX_LENGTH:
            errors["name"] = f"Account name must be at most {NAME_MAX_LENGTH} characters long"

        if not values["currency"]:
            errors["currency"] = "Currency is required"
        elif values["currency"] not in {c.value for c in Currency}:
            errors["currency"] = "Please select a valid currency"

        if not values["account_type"]:
            errors["account_type"] = "Account type is required"
        elif values["account_type"] not in {t.value for t in AccountType}:
            errors["account_type"] = "Please select a valid account type"

        if not values["initial_balance"].strip():
            errors["initial_balance"] = "Initial balance is required"
        else:
            balance = parse_decimal(values["initial_balance"])
            if balance is None:
                errors["initial_balance"] = "Initial balance must be a valid number"
            elif money_problem(balance) is not None:
                errors["initial_balance"] = f"Initial balance {money_problem(balance)}"

        if not values["primary_owner_id"]:
            errors["primary_owner_id"] = "Primary owner is required"
        elif parse_id(values["primary_owner_id"]) is None:
            errors["primary_owner_id"] = "Please select a valid primary owner"

        second = values["second_owner_id"]
        if second:
            second_id = parse_id(second)
            if second_id is None:
                errors["second_owner_id"] = "Please select a valid second owner"
            elif second_id == parse_id(values["primary_owner_id"]):
                errors["second_owner_id"] = "Second owner must be different from the primary owner"

        return errors

    def build_input(self) -> AccountInput:
        values = self.values
        return AccountInput(
            name=values["name"].strip(),
            currency=Currency(values["currency"]),
            account_type=AccountType(values["account_type"]),
            initial_balance=parse_decimal(values["initial_balance"]),
            primary_owner_id=int(values["primary_owner_id"]),
            second_owner_id=parse_id(values["second_owner_id"]),
        )
