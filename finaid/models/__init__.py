"""
Data Models Package

This package contains all Pydantic models used by the FinAid Budget client.
Everything sent to or read from the backend conforms to these schemas.
"""

from finaid.models.resources import (
    CURRENCY_LABELS,
    MAX_AMOUNT,
    Account,
    AccountInput,
    AccountType,
    Currency,
    Entity,
    Expense,
    ExpenseCategory,
    ExpenseInput,
    ExpenseListParams,
    ExpenseSubCategory,
    ListParams,
    Person,
    PersonInput,
    SubCategoryListParams,
    money_problem,
)
from finaid.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Resource models
    "CURRENCY_LABELS",
    "MAX_AMOUNT",
    "Account",
    "AccountInput",
    "AccountType",
    "Currency",
    "Entity",
    "Expense",
    "ExpenseCategory",
    "ExpenseInput",
    "ExpenseListParams",
    "ExpenseSubCategory",
    "ListParams",
    "Person",
    "PersonInput",
    "SubCategoryListParams",
    "money_problem",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
