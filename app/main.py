"""
Streamlit Frontend for the Finance Tracker

DESIGN PRINCIPLES:
1. Nothing is shown until a user is logged in
2. The logged-in user's id in session state IS the session
3. Every write goes through the flows, never straight to storage
4. Clear error messages for every rejected input

Run with: streamlit run app/main.py
"""

import asyncio
from datetime import date, datetime, time
from decimal import Decimal

import streamlit as st
from pydantic import ValidationError

from finance_tracker.audit import configure_log_level
from finance_tracker.config import TIME_FRAME_CHOICES, get_settings, validate_all_settings
from finance_tracker.models.finance import BudgetPeriod, CategoryType, TransactionType
from finance_tracker.orchestrator import (
    AppComponents,
    AuthFlow,
    DashboardFlow,
    LedgerFlow,
    create_app_components,
)
from finance_tracker.queries import QueryExecutionError
from finance_tracker.seed import seed_demo_data
from finance_tracker.services.auth import AuthError
from finance_tracker.services.storage import NotFoundError


st.set_page_config(
    page_title="Finance Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)


TIME_FRAME_LABELS = {
    "7days": "Last 7 days",
    "30days": "Last 30 days",
    "90days": "Last 90 days",
    "year": "This year",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components() -> AppComponents:
    """Create the shared store and flows once per server process."""
    configure_log_level()
    components = create_app_components()
    if get_settings().app.seed_demo_data:
        run_async(seed_demo_data(components.storage, audit_logger=components.audit_logger))
    return components


def format_money(amount: Decimal) -> str:
    return f"${amount:,.2f}"


def format_change(change: Decimal) -> str:
    return f"{change:+.1f}%"


def show_validation_error(e: ValidationError) -> None:
    for error in e.errors():
        field = ".".join(str(part) for part in error["loc"])
        st.error(f"{field}: {error['msg']}")


def main():
    """Main application entry point."""
    components = get_components()

    if "user_id" not in st.session_state:
        st.session_state.user_id = None

    if st.session_state.user_id is None:
        render_login_page(components.auth_flow)
        return

    try:
        user = run_async(components.auth_flow.get_current_user(st.session_state.user_id))
    except NotFoundError:
        st.session_state.user_id = None
        st.rerun()

    st.sidebar.title("💰 Finance Tracker")
    st.sidebar.markdown(f"Signed in as **{user.name}**")
    if st.sidebar.button("Log out"):
        st.session_state.user_id = None
        st.rerun()
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "💳 Transactions", "🎯 Budgets", "🏦 Accounts", "⚙️ Settings"],
        index=0,
    )

    if page == "📊 Dashboard":
        render_dashboard_page(components.dashboard_flow, user.id)
    elif page == "💳 Transactions":
        render_transactions_page(components.ledger_flow, components.dashboard_flow, user.id)
    elif page == "🎯 Budgets":
        render_budgets_page(components.ledger_flow, components.dashboard_flow, user.id)
    elif page == "🏦 Accounts":
        render_accounts_page(components.ledger_flow, user.id)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_login_page(auth_flow: AuthFlow):
    """Login and registration forms."""
    st.title("💰 Finance Tracker")

    login_tab, register_tab = st.tabs(["Log in", "Register"])

    with login_tab:
        with st.form("login"):
            username = st.text_input("Username")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Log in", type="primary")

        if submitted:
            try:
                user = run_async(auth_flow.login(username, password))
                st.session_state.user_id = user.id
                st.rerun()
            except (AuthError, ValidationError):
                st.error("Invalid credentials")

        if get_settings().app.seed_demo_data:
            demo = get_settings().demo
            st.caption(f"Demo login: {demo.username} / {demo.password}")

    with register_tab:
        with st.form("register"):
            name = st.text_input("Name")
            username = st.text_input("Username", key="register_username")
            email = st.text_input("Email")
            password = st.text_input("Password", type="password", key="register_password")
            submitted = st.form_submit_button("Create account", type="primary")

        if submitted:
            try:
                user = run_async(auth_flow.register({
                    "name": name,
                    "username": username,
                    "email": email,
                    "password": password,
                }))
                st.session_state.user_id = user.id
                st.rerun()
            except ValidationError as e:
                show_validation_error(e)
            except AuthError as e:
                st.error(str(e))


def render_dashboard_page(dashboard_flow: DashboardFlow, user_id: int):
    """Monthly summary and the recent feed."""
    st.title("📊 Dashboard")

    summary = run_async(dashboard_flow.summary(user_id))

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Balance", format_money(summary.total_balance),
                format_change(summary.balance_change))
    col2.metric("Monthly Income", format_money(summary.monthly_income),
                format_change(summary.income_change))
    col3.metric("Monthly Expenses", format_money(summary.monthly_expenses),
                format_change(summary.expenses_change), delta_color="inverse")
    col4.metric("Monthly Savings", format_money(summary.monthly_savings),
                format_change(summary.savings_change))

    st.markdown("### Income vs. Expenses")
    st.bar_chart(
        {
            "Income": {p.month: float(p.income) for p in summary.monthly_data},
            "Expenses": {p.month: float(p.expenses) for p in summary.monthly_data},
        }
    )

    st.markdown("### Recent Transactions")
    recent = run_async(dashboard_flow.recent_transactions(user_id))
    if not recent:
        st.info("No transactions yet.")
    for transaction in recent:
        sign = "+" if transaction.type == TransactionType.INCOME else "-"
        st.markdown(
            f"**{transaction.description}** · {transaction.date.strftime('%d %b %Y')} · "
            f"{sign}{format_money(transaction.amount)}"
        )


def render_transactions_page(ledger_flow: LedgerFlow, dashboard_flow: DashboardFlow, user_id: int):
    """Filtered feed plus a form to record a transaction."""
    st.title("💳 Transactions")

    accounts = run_async(ledger_flow.list_accounts(user_id))
    categories = run_async(ledger_flow.list_categories(user_id))
    category_names = {c.id: c.name for c in categories}

    col1, col2 = st.columns(2)
    with col1:
        time_frame = st.selectbox(
            "Time frame",
            options=list(TIME_FRAME_CHOICES),
            format_func=lambda x: TIME_FRAME_LABELS[x],
        )
    with col2:
        category_filter = st.selectbox(
            "Category",
            options=["all"] + [c.id for c in categories],
            format_func=lambda x: "All Categories" if x == "all" else category_names[x],
        )

    try:
        transactions = run_async(
            dashboard_flow.transactions(user_id, time_frame=time_frame, category_id=category_filter)
        )
    except QueryExecutionError as e:
        st.error(str(e))
        transactions = []

    if transactions:
        st.dataframe(
            [
                {
                    "Date": t.date.strftime("%Y-%m-%d"),
                    "Description": t.description,
                    "Category": category_names.get(t.category_id, "Uncategorised"),
                    "Type": t.type.value,
                    "Amount": float(t.amount),
                    "Payment Method": t.payment_method or "",
                }
                for t in transactions
            ],
            use_container_width=True,
        )
    else:
        st.info("No transactions in this period.")

    st.markdown("---")
    st.subheader("Record a transaction")

    if not accounts:
        st.warning("Create an account first.")
        return

    with st.form("new_transaction"):
        col1, col2 = st.columns(2)
        with col1:
            description = st.text_input("Description *")
            amount = st.number_input("Amount *", min_value=0.0, step=0.01, format="%.2f")
            kind = st.selectbox(
                "Type *",
                options=list(TransactionType),
                format_func=lambda x: x.value.title(),
                index=1,
            )
        with col2:
            account = st.selectbox("Account *", options=accounts, format_func=lambda a: a.name)
            category = st.selectbox(
                "Category",
                options=[None] + categories,
                format_func=lambda c: "Uncategorised" if c is None else c.name,
            )
            when = st.date_input("Date *", value=date.today())
        payment_method = st.text_input("Payment method", placeholder="e.g., Debit Card")
        submitted = st.form_submit_button("Save transaction", type="primary")

    if submitted:
        try:
            run_async(ledger_flow.record_transaction(user_id, {
                "account_id": account.id,
                "category_id": category.id if category else None,
                "amount": Decimal(str(round(amount, 2))),
                "description": description,
                "date": datetime.combine(when, time(12, 0)),
                "type": kind,
                "payment_method": payment_method or None,
            }))
            st.success("Transaction saved.")
            st.rerun()
        except ValidationError as e:
            show_validation_error(e)
        except NotFoundError as e:
            st.error(str(e))


def render_budgets_page(ledger_flow: LedgerFlow, dashboard_flow: DashboardFlow, user_id: int):
    """Budget progress for a chosen month and a form to add budgets."""
    st.title("🎯 Budgets")

    year_month = st.text_input("Month (YYYY-MM)", value=date.today().strftime("%Y-%m"))

    try:
        progress = run_async(dashboard_flow.budget_progress(user_id, year_month=year_month))
    except QueryExecutionError as e:
        st.error(str(e))
        progress = {}

    budgets = run_async(ledger_flow.list_budgets(user_id))
    categories = run_async(ledger_flow.list_categories(user_id))
    category_names = {c.id: c.name for c in categories}

    if not budgets:
        st.info("No budgets yet.")
    for budget in budgets:
        spent = progress.get(budget.id, Decimal("0"))
        ratio = float(min(spent / budget.amount, Decimal("1")))
        st.markdown(
            f"**{category_names.get(budget.category_id, 'Unknown')}** · "
            f"{format_money(spent)} of {format_money(budget.amount)} ({budget.period.value})"
        )
        st.progress(ratio)

    st.markdown("---")
    st.subheader("Add a budget")

    expense_categories = [c for c in categories if c.type == CategoryType.EXPENSE]
    if not expense_categories:
        st.warning("Create an expense category first.")
        return

    with st.form("new_budget"):
        category = st.selectbox("Category *", options=expense_categories, format_func=lambda c: c.name)
        amount = st.number_input("Amount *", min_value=0.0, step=10.0, format="%.2f")
        period = st.selectbox("Period", options=list(BudgetPeriod), index=1,
                              format_func=lambda p: p.value.title())
        start = st.date_input("Start date", value=date.today())
        end = st.date_input("End date", value=date.today())
        submitted = st.form_submit_button("Save budget", type="primary")

    if submitted:
        try:
            run_async(ledger_flow.create_budget(user_id, {
                "category_id": category.id,
                "amount": Decimal(str(round(amount, 2))),
                "period": period,
                "start_date": datetime.combine(start, time.min),
                "end_date": datetime.combine(end, time.max),
            }))
            st.success("Budget saved.")
            st.rerun()
        except ValidationError as e:
            show_validation_error(e)
        except NotFoundError as e:
            st.error(str(e))


def render_accounts_page(ledger_flow: LedgerFlow, user_id: int):
    """Accounts and categories, with forms to add each."""
    st.title("🏦 Accounts")

    accounts = run_async(ledger_flow.list_accounts(user_id))
    for account in accounts:
        st.markdown(f"**{account.name}** ({account.type}) · {format_money(account.balance)}")

    with st.form("new_account"):
        name = st.text_input("Account name *")
        kind = st.selectbox("Type *", options=["checking", "savings", "credit", "investment"])
        balance = st.number_input("Opening balance", step=0.01, format="%.2f")
        submitted = st.form_submit_button("Add account", type="primary")

    if submitted:
        try:
            run_async(ledger_flow.create_account(user_id, {
                "name": name,
                "type": kind,
                "balance": Decimal(str(round(balance, 2))),
            }))
            st.rerun()
        except ValidationError as e:
            show_validation_error(e)

    st.markdown("---")
    st.subheader("Categories")

    for category in run_async(ledger_flow.list_categories(user_id)):
        st.markdown(f"**{category.name}** ({category.type.value}) · {category.color}")

    with st.form("new_category"):
        name = st.text_input("Category name *")
        kind = st.selectbox("Type *", options=list(CategoryType), index=1,
                            format_func=lambda x: x.value.title())
        color = st.color_picker("Colour", value="#3498DB")
        icon = st.text_input("Icon", value="tag")
        submitted = st.form_submit_button("Add category", type="primary")

    if submitted:
        try:
            run_async(ledger_flow.create_category(user_id, {
                "name": name,
                "type": kind,
                "color": color.upper(),
                "icon": icon,
            }))
            st.rerun()
        except ValidationError as e:
            show_validation_error(e)


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    status = validate_all_settings()
    for name, key in [("Application", "app"), ("Demo account", "demo")]:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            st.error(f"❌ {name} - {status.get(f'{key}_error', 'Not configured')}")

    if status.get("app", False):
        app_settings = get_settings().app
        col1, col2 = st.columns(2)
        col1.metric("Environment", app_settings.app_environment)
        col2.metric("Debug mode", "On" if app_settings.debug_mode else "Off")

    st.markdown("---")
    st.markdown(
        "Configure the application with `FINANCE_*` and `DEMO_*` environment "
        "variables or a `.env` file. Data lives in memory and is lost on restart."
    )


if __name__ == "__main__":
    main()
