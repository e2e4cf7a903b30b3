"""
Page Orchestration for FinAid Budget

This module ties together the API client, the session and the page
controllers, and maps navigable routes onto controllers:

    /people            -> PersonListController
    /people/new        -> PersonFormController (create)
    /people/{id}/edit  -> PersonFormController (edit)

and likewise for /accounts and /expenses.

DESIGN DECISION: Routing itself belongs to the UI toolkit. The
orchestrator only parses route strings and builds the controller that
owns a route's state, so any front-end can drive the same lifecycle.
"""

import re
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel

from finaid.services.api import FinAidApiClient, FinAidApiInterface
from finaid.views.accounts import ACCOUNTS_ROUTE, AccountFormController, AccountListController
from finaid.views.edit_view import EditViewController, Navigate
from finaid.views.expenses import EXPENSES_ROUTE, ExpenseFormController, ExpenseListController
from finaid.views.list_view import ListViewController
from finaid.views.people import PEOPLE_ROUTE, PersonFormController, PersonListController
from finaid.views.session import SessionContext


HOME_ROUTE = "/"

_ROUTE_PATTERN = re.compile(r"^/(?P<resource>[a-z]+)(?:/(?:(?P<new>new)|(?P<id>\d+)/edit))?/?$")


class PageResource(str, Enum):
    HOME = "home"
    PEOPLE = "people"
    ACCOUNTS = "accounts"
    EXPENSES = "expenses"


class PageAction(str, Enum):
    LIST = "list"
    NEW = "new"
    EDIT = "edit"


LIST_CONTROLLERS = {
    PageResource.PEOPLE: PersonListController,
    PageResource.ACCOUNTS: AccountListController,
    PageResource.EXPENSES: ExpenseListController,
}

FORM_CONTROLLERS = {
    PageResource.PEOPLE: PersonFormController,
    PageResource.ACCOUNTS: AccountFormController,
    PageResource.EXPENSES: ExpenseFormController,
}

LIST_ROUTES = {
    PageResource.PEOPLE: PEOPLE_ROUTE,
    PageResource.ACCOUNTS: ACCOUNTS_ROUTE,
    PageResource.EXPENSES: EXPENSES_ROUTE,
}


class Route(BaseModel):
    """A parsed navigable route."""

    resource: PageResource
    action: PageAction = PageAction.LIST
    entity_id: Optional[int] = None

    @property
    def path(self) -> str:
        if self.resource == PageResource.HOME:
            return HOME_ROUTE
        base = LIST_ROUTES[self.resource]
        if self.action == PageAction.NEW:
            return f"{base}/new"
        if self.action == PageAction.EDIT:
            return f"{base}/{self.entity_id}/edit"
        return base


class UnknownRouteError(ValueError):
    """The path does not name a page."""
    pass


def parse_route(path: str) -> Route:
    """
    Parse a route path.

    Raises:
        UnknownRouteError: For paths that name no page
    """
    if path in ("", HOME_ROUTE):
        return Route(resource=PageResource.HOME)

    match = _ROUTE_PATTERN.match(path)
    if not match:
        raise UnknownRouteError(f"Unknown route: {path}")
    try:
        resource = PageResource(match.group("resource"))
    except ValueError:
        raise UnknownRouteError(f"Unknown route: {path}")
    if resource == PageResource.HOME:
        raise UnknownRouteError(f"Unknown route: {path}")

    if match.group("new"):
        return Route(resource=resource, action=PageAction.NEW)
    if match.group("id"):
        return Route(resource=resource, action=PageAction.EDIT, entity_id=int(match.group("id")))
    return Route(resource=resource)


PageController = Union[ListViewController, EditViewController]


class PageFactory:
    """Builds the controller that owns a route's state."""

    def __init__(self, api: FinAidApiInterface, session: SessionContext):
        self._api = api
        self._session = session

    @property
    def session(self) -> SessionContext:
        return self._session

    def list_controller(self, resource: PageResource) -> ListViewController:
        return LIST_CONTROLLERS[resource](self._api, self._session)

    def form_controller(
        self,
        resource: PageResource,
        navigate: Navigate,
        entity_id: Optional[int] = None,
    ) -> EditViewController:
        return FORM_CONTROLLERS[resource](self._api, self._session, navigate, entity_id=entity_id)

    def controller_for(self, route: Route, navigate: Navigate) -> Optional[PageController]:
        """The controller for a route; None for the home page."""
        if route.resource == PageResource.HOME:
            return None
        if route.action == PageAction.LIST:
            return self.list_controller(route.resource)
        return self.form_controller(route.resource, navigate, entity_id=route.entity_id)


def create_app_components(
    api: Optional[FinAidApiInterface] = None,
    session: Optional[SessionContext] = None,
) -> tuple[FinAidApiInterface, SessionContext, PageFactory]:
    """
    Factory function to create all application components.

    Returns:
        (api, session, page_factory)
    """
    api = api or FinAidApiClient()
    session = session or SessionContext.from_settings()
    return api, session, PageFactory(api, session)
