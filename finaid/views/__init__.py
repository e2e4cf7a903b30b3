"""
View Controllers Package

Framework-independent state for every page: the list and edit/create
lifecycles, the confirmation gate and the session they run in.
"""

from finaid.views.confirmation import ConfirmationGate, DismissReason, GateTone
from finaid.views.edit_view import EditViewController, FormStatus
from finaid.views.list_view import (
    EmptyParentPolicy,
    ListViewController,
    ViewStatus,
    dependent_choices,
)
from finaid.views.sequencing import RequestSequencer
from finaid.views.session import SessionContext
from finaid.views.people import PEOPLE_ROUTE, PersonFormController, PersonListController
from finaid.views.accounts import ACCOUNTS_ROUTE, AccountFormController, AccountListController
from finaid.views.expenses import EXPENSES_ROUTE, ExpenseFormController, ExpenseListController

__all__ = [
    # Building blocks
    "ConfirmationGate",
    "DismissReason",
    "EditViewController",
    "EmptyParentPolicy",
    "FormStatus",
    "GateTone",
    "ListViewController",
    "RequestSequencer",
    "SessionContext",
    "ViewStatus",
    "dependent_choices",
    # Pages
    "ACCOUNTS_ROUTE",
    "EXPENSES_ROUTE",
    "PEOPLE_ROUTE",
    "AccountFormController",
    "AccountListController",
    "ExpenseFormController",
    "ExpenseListController",
    "PersonFormController",
    "PersonListController",
]
