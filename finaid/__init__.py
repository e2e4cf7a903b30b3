"""
FinAid Budget - Source Package

A client for the financial aid budgeting backend: people, accounts
and expenses, listed, edited and deleted through a REST API.

DESIGN PRINCIPLES:
1. The backend is the only source of truth
2. Fail visibly, never crash the page
3. Nothing destructive without explicit confirmation
4. Every mutation is auditable
5. View state is owned by controllers, not by the UI toolkit
"""

__version__ = "1.0.0"
__author__ = "FinAid Budget Team"
