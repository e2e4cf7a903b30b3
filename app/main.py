"""
Streamlit Frontend for FinAid Budget

Pages for listing and editing people, accounts and expenses.

DESIGN PRINCIPLES:
1. Controllers own all state; this module only renders and forwards input
2. One controller per route, created on navigation and disposed on leave
3. Nothing is deleted without going through the confirmation gate
4. Every failure is shown in place, with a way to try again
"""

import asyncio
from datetime import date

import streamlit as st

from finaid.audit import configure_logging
from finaid.config import get_settings, validate_all_settings
from finaid.orchestrator import (
    HOME_ROUTE,
    PageAction,
    PageResource,
    Route,
    create_app_components,
    parse_route,
)
from finaid.views import (
    AccountFormController,
    AccountListController,
    ConfirmationGate,
    EditViewController,
    ExpenseFormController,
    ExpenseListController,
    FormStatus,
    ListViewController,
    PersonFormController,
    PersonListController,
    ViewStatus,
)
from finaid.views.accounts import account_type_label
from finaid.views.edit_view import parse_date
from finaid.views.expenses import format_amount


st.set_page_config(
    page_title="FinAid Budget",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

SETTINGS_ROUTE = "/settings"

NAVIGATION = [
    ("🏠 Home", HOME_ROUTE),
    ("👤 People", "/people"),
    ("🏦 Accounts", "/accounts"),
    ("💵 Expenses", "/expenses"),
    ("⚙️ Settings", SETTINGS_ROUTE),
]


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    configure_logging(get_settings().app.log_level)
    return create_app_components()


# =============================================================================
# NAVIGATION
# =============================================================================

def current_route() -> Route:
    return parse_route(st.session_state.get("route", HOME_ROUTE))


def navigate(path: str) -> None:
    """Leave the current page; its controller stops applying responses."""
    controller = st.session_state.pop("controller", None)
    if controller is not None:
        controller.dispose()
    st.session_state.route = path
    st.session_state.pop("controller_route", None)


def get_controller(route: Route):
    """The controller owning `route`, created (and loaded) on first render."""
    if st.session_state.get("controller_route") != route.path:
        _, _, pages = get_components()
        controller = pages.controller_for(route, navigate)
        st.session_state.controller = controller
        st.session_state.controller_route = route.path
        if controller is not None:
            run_async(controller.load())
    return st.session_state.controller


def main():
    """Main application entry point."""
    _, session, _ = get_components()

    st.sidebar.title("💰 FinAid Budget")
    st.sidebar.markdown(f"**{session.user_name}**  \n{session.user_email}")
    st.sidebar.markdown("---")

    for label, path in NAVIGATION:
        if st.sidebar.button(label, key=f"nav:{path}"):
            navigate(path)
            st.rerun()

    if st.session_state.get("route") == SETTINGS_ROUTE:
        render_settings_page()
        return

    route = current_route()
    controller = get_controller(route)

    if route.resource == PageResource.HOME:
        render_home_page()
    elif route.action == PageAction.LIST:
        render_list_page(controller)
    else:
        render_form_page(controller)


def render_home_page():
    st.title("Smart Financial Aid Budget Management")
    st.markdown(
        "Take control of your educational finances: track the people, "
        "accounts and expenses behind your financial aid budget."
    )
    col1, col2, col3 = st.columns(3)
    with col1:
        st.markdown("### 👤 People\nEveryone who owns accounts or receives payments.")
    with col2:
        st.markdown("### 🏦 Accounts\nChecking, savings, credit and loan accounts.")
    with col3:
        st.markdown("### 💵 Expenses\nMonthly spending by category and payee.")


# =============================================================================
# LIST PAGES
# =============================================================================

LIST_TITLES = {
    PersonListController: ("People", "Manage people in the system", "/people/new", "Add Person"),
    AccountListController: ("Accounts", "Manage financial accounts", "/accounts/new", "Add Account"),
    ExpenseListController: ("Expenses", "Track and manage your monthly expenses", "/expenses/new", "Add Expense"),
}


def render_list_page(controller: ListViewController):
    title, subtitle, new_path, new_label = LIST_TITLES[type(controller)]
    st.title(title)
    st.markdown(subtitle)

    if st.button(f"➕ {new_label}", type="primary"):
        navigate(new_path)
        st.rerun()

    if isinstance(controller, ExpenseListController):
        render_expense_filters(controller)

    if controller.status == ViewStatus.LOADING:
        st.info("Loading...")
        return

    if controller.status == ViewStatus.FAILED:
        st.error(f"Error loading {title.lower()}: {controller.error}")
        if st.button("🔄 Try Again"):
            run_async(controller.retry())
            st.rerun()
        return

    gate = controller.confirmation_gate
    if gate is not None:
        render_confirmation_gate(gate)

    if not controller.items:
        st.info(f"No {title.lower()} found.")
    else:
        for entity in controller.items:
            render_row(controller, entity)

    render_pagination(controller)


def render_row(controller: ListViewController, entity):
    cols = st.columns([6, 1, 1])
    with cols[0]:
        st.markdown(describe_row(controller, entity))
    with cols[1]:
        edit_path = f"/{title_resource(controller)}/{entity.id}/edit"
        if st.button("Edit", key=f"edit:{edit_path}"):
            navigate(edit_path)
            st.rerun()
    with cols[2]:
        if st.button("Delete", key=f"delete:{type(entity).__name__}:{entity.id}"):
            controller.request_delete(entity)
            st.rerun()


def title_resource(controller: ListViewController) -> str:
    return {
        PersonListController: "people",
        AccountListController: "accounts",
        ExpenseListController: "expenses",
    }[type(controller)]


def describe_row(controller: ListViewController, entity) -> str:
    if isinstance(controller, PersonListController):
        return f"**{entity.name}** · {entity.email}"
    if isinstance(controller, AccountListController):
        owners = controller.primary_owner_label(entity)
        second = controller.second_owner_label(entity)
        if second:
            owners = f"{owners} & {second}"
        return (
            f"**{entity.name}** · {account_type_label(entity.account_type)} · "
            f"{entity.currency.value} {entity.initial_balance:,.2f} · Owners: {owners}"
        )
    notes = entity.notes or "-"
    return (
        f"{entity.date.strftime('%b %d, %Y')} · **{format_amount(entity.amount)}** · "
        f"{controller.category_label(entity)} / {controller.subcategory_label(entity)} · "
        f"{controller.payee_label(entity)} · {controller.account_label(entity)} · {notes}"
    )


def render_pagination(controller: ListViewController):
    col1, col2, col3 = st.columns([1, 4, 1])
    with col1:
        if st.button("◀ Previous", disabled=not controller.has_previous):
            run_async(controller.previous_page())
            st.rerun()
    with col2:
        start = controller.skip + 1 if controller.items else controller.skip
        st.caption(f"Showing {start}–{controller.skip + len(controller.items)}")
    with col3:
        if st.button("Next ▶", disabled=not controller.has_next):
            run_async(controller.next_page())
            st.rerun()


def render_expense_filters(controller: ExpenseListController):
    col1, col2, col3 = st.columns([1, 4, 1])
    with col1:
        if st.button("◀ Previous month"):
            run_async(controller.previous_month())
            st.rerun()
    with col2:
        st.subheader(f"📅 {controller.month_label}")
    with col3:
        if st.button("Next month ▶"):
            run_async(controller.next_month())
            st.rerun()

    with st.expander("🔎 Filters", expanded=controller.has_active_filters):
        col1, col2, col3, col4 = st.columns(4)
        with col1:
            category_id = st.selectbox(
                "Category",
                options=[None] + [c.id for c in controller.categories],
                index=index_of([None] + [c.id for c in controller.categories], controller.category_id),
                format_func=lambda x: "All Categories" if x is None else name_of(controller.categories, x),
            )
        with col2:
            sub_ids = [None] + [s.id for s in controller.subcategory_choices]
            subcategory_id = st.selectbox(
                "Subcategory",
                options=sub_ids,
                index=index_of(sub_ids, controller.subcategory_id),
                format_func=lambda x: "All Subcategories" if x is None else name_of(controller.subcategories, x),
                disabled=controller.category_id is None,
            )
        with col3:
            payee_ids = [None] + [p.id for p in controller.people]
            payee_id = st.selectbox(
                "Payee",
                options=payee_ids,
                index=index_of(payee_ids, controller.payee_id),
                format_func=lambda x: "All Payees" if x is None else name_of(controller.people, x),
            )
        with col4:
            account_ids = [None] + [a.id for a in controller.accounts]
            account_id = st.selectbox(
                "Account",
                options=account_ids,
                index=index_of(account_ids, controller.account_id),
                format_func=lambda x: "All Accounts" if x is None else name_of(controller.accounts, x),
            )

        if category_id != controller.category_id:
            run_async(controller.set_category(category_id))
            st.rerun()
        if subcategory_id != controller.subcategory_id and controller.category_id is not None:
            run_async(controller.set_subcategory(subcategory_id))
            st.rerun()
        if payee_id != controller.payee_id:
            run_async(controller.set_payee(payee_id))
            st.rerun()
        if account_id != controller.account_id:
            run_async(controller.set_account(account_id))
            st.rerun()

        if controller.has_active_filters and st.button("✖ Clear Filters"):
            run_async(controller.clear_filters())
            st.rerun()

    st.metric("Total", format_amount(controller.total_amount))


def index_of(options: list, value) -> int:
    return options.index(value) if value in options else 0


def name_of(entities: list, entity_id: int) -> str:
    for entity in entities:
        if entity.id == entity_id:
            return entity.name
    return "Unknown"


def render_confirmation_gate(gate: ConfirmationGate):
    with st.container(border=True):
        st.markdown(f"### ⚠️ {gate.title}")
        st.markdown(gate.message)
        if gate.error:
            st.error(gate.error)
        col1, col2 = st.columns(2)
        with col1:
            if st.button(gate.confirm_text, type="primary", disabled=gate.is_loading, key="gate:confirm"):
                run_async(gate.confirm())
                st.rerun()
        with col2:
            if st.button(gate.cancel_label, disabled=gate.is_loading, key="gate:cancel"):
                gate.cancel()
                st.rerun()


# =============================================================================
# FORM PAGES
# =============================================================================

FORM_FIELDS = {
    PersonFormController: [
        ("name", "Full Name *", "text"),
        ("email", "Email Address *", "text"),
    ],
    AccountFormController: [
        ("name", "Account Name *", "text"),
        ("currency", "Currency *", "currency_choices"),
        ("account_type", "Account Type *", "account_type_choices"),
        ("initial_balance", "Initial Balance *", "text"),
        ("primary_owner_id", "Primary Owner *", "owner_choices"),
        ("second_owner_id", "Second Owner", "second_owner_choices"),
    ],
    ExpenseFormController: [
        ("amount", "Amount *", "text"),
        ("category_id", "Category *", "category_choices"),
        ("subcategory_id", "Subcategory", "subcategory_choices"),
        ("date", "Date *", "date"),
        ("payee_id", "Payee *", "payee_choices"),
        ("account_id", "Account *", "account_choices"),
        ("notes", "Notes", "textarea"),
    ],
}


def widget_key(controller: EditViewController, field: str) -> str:
    return f"form:{st.session_state.controller_route}:{field}"


def render_form_page(controller: EditViewController):
    label = controller.entity_label
    st.title(f"Edit {label.capitalize()}" if controller.is_edit_mode else f"Add New {label.capitalize()}")

    if st.button(f"← Back to {controller.list_route.strip('/').capitalize()}"):
        controller.cancel()
        st.rerun()

    if controller.status == FormStatus.INITIAL_LOAD:
        st.info("Loading...")
        return

    if controller.status == FormStatus.LOAD_FAILED:
        st.error(controller.general_error)
        if st.button("🔄 Try Again"):
            run_async(controller.load())
            st.rerun()
        return

    if controller.general_error:
        st.error(controller.general_error)

    for field, caption, kind in FORM_FIELDS[type(controller)]:
        render_field(controller, field, caption, kind)
        if field in controller.errors:
            st.caption(f":red[{controller.errors[field]}]")

    submitting = controller.status == FormStatus.SUBMITTING
    action = "Update" if controller.is_edit_mode else "Create"
    col1, col2 = st.columns(2)
    with col1:
        if st.button(f"{action} {label.capitalize()}", type="primary", disabled=submitting):
            run_async(controller.submit())
            st.rerun()
    with col2:
        if st.button("Cancel", disabled=submitting):
            controller.cancel()
            st.rerun()


def render_field(controller: EditViewController, field: str, caption: str, kind: str):
    key = widget_key(controller, field)
    value = controller.values[field]

    def on_change():
        new_value = st.session_state[key]
        if isinstance(new_value, date):
            new_value = new_value.isoformat()
        controller.set_field(field, new_value or "")

    if kind == "text":
        st.session_state[key] = value
        st.text_input(caption, key=key, on_change=on_change)
    elif kind == "textarea":
        st.session_state[key] = value
        st.text_area(caption, key=key, on_change=on_change)
    elif kind == "date":
        st.session_state[key] = parse_date(value) or date.today()
        st.date_input(caption, key=key, on_change=on_change)
    else:
        choices = getattr(controller, kind)
        options = [option for option, _ in choices]
        labels = dict(choices)
        st.session_state[key] = value if value in options else ""
        st.selectbox(
            caption,
            options=options,
            key=key,
            format_func=lambda option: labels.get(option, option),
            on_change=on_change,
        )


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    status = validate_all_settings()

    groups = [
        ("Backend API", "api"),
        ("Application", "app"),
    ]

    for name, key in groups:
        if status.get(key, False):
            st.success(f"✅ {name} - Loaded")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    if status.get("api"):
        st.markdown(f"Backend: `{get_settings().api.base_url}`")

    st.markdown("---")
    st.markdown(
        "To configure the application, set `FINAID_API_BASE_URL` and friends "
        "in the environment or in a `.env` file."
    )


if __name__ == "__main__":
    main()
