"""
Streamlit Frontend for SmartExpense

The dashboard users interact with daily. It holds no business logic:
every figure comes from the orchestrator, every action goes through the
session manager, the ledger or the export flow.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every error becomes a message, never a crash
3. Derived values are recomputed on every rerun
"""

import base64
from datetime import date
from decimal import Decimal
from pathlib import Path

import plotly.express as px
import plotly.graph_objects as go
import streamlit as st
from pydantic import ValidationError

from smartexpense.accounts import SessionManager, SessionState
from smartexpense.config import get_settings, validate_all_settings
from smartexpense.errors import SmartExpenseError
from smartexpense.models.finance import (
    CATEGORY_COLORS,
    TransactionType,
    categories_for,
)
from smartexpense.orchestrator import (
    AppComponents,
    DashboardData,
    build_dashboard,
    create_app_components,
)
from smartexpense.services.export import EXPORT_FILE_NAME, XLSX_MIME_TYPE


# Page configuration
st.set_page_config(
    page_title="SmartExpense",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .tip-box {
        padding: 16px;
        background-color: #eef2ff;
        border-radius: 10px;
        border-left: 5px solid #6366f1;
        margin: 10px 0;
    }
    .warning-box {
        padding: 16px;
        background-color: #fff1f2;
        border-radius: 10px;
        border-left: 5px solid #f43f5e;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)


def get_components() -> AppComponents:
    """
    Get or create application components for this browser session.

    Each tab gets its own SessionManager; the backend is shared through
    the configured data file.
    """
    if "components" not in st.session_state:
        st.session_state.components = create_app_components()
    return st.session_state.components


def show_session_messages(session: SessionManager):
    error, notice = session.consume_messages()
    if error:
        st.error(error)
    if notice:
        st.success(notice)


def main():
    """Main application entry point."""
    components = get_components()
    session = components.session

    try:
        if not session.is_logged_in:
            render_auth_page(session)
            return

        render_sidebar(components)
        render_dashboard(components)
    except SmartExpenseError as e:
        st.error(e.message)
    except Exception as e:
        components.audit_logger.log_error(type(e).__name__, str(e))
        if get_settings().app.debug_mode:
            st.exception(e)
        else:
            st.error("Something went wrong. Please try again.")


# =============================================================================
# AUTHENTICATION
# =============================================================================

def render_auth_page(session: SessionManager):
    """Login, signup, verification and password recovery."""
    st.title("💰 SmartExpense")
    st.caption("AI-Powered Wealth Tracker")
    show_session_messages(session)

    if session.state == SessionState.AWAITING_VERIFICATION:
        render_verification_form(session)
    elif session.state == SessionState.AWAITING_RECOVERY_USERNAME:
        render_recovery_username_form(session)
    elif session.state == SessionState.AWAITING_NEW_PASSWORD:
        render_new_password_form(session)
    else:
        login_tab, signup_tab = st.tabs(["Log in", "Sign up"])
        with login_tab:
            render_login_form(session)
        with signup_tab:
            render_signup_form(session)

    st.markdown("---")
    st.caption("By joining, you agree to our 100% private locally-stored data policy.")


def render_login_form(session: SessionManager):
    with st.form("login"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in")

    if submitted:
        session.login(username, password)
        st.rerun()

    if st.button("Forgot password?"):
        session.start_recovery()
        st.rerun()


def render_signup_form(session: SessionManager):
    with st.form("signup"):
        name = st.text_input("Full Name", placeholder="John Doe")
        username = st.text_input("Username")
        email = st.text_input("Email Address", placeholder="john@example.com")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Get Started")

    if submitted:
        session.request_signup(name, username, email, password)
        st.rerun()


def render_verification_form(session: SessionManager):
    st.subheader("Verify your email")
    st.info(f"Demo mode: use code **{session.expected_code}**")

    with st.form("verify"):
        code = st.text_input("Verification code", max_chars=12)
        submitted = st.form_submit_button("Verify")

    if submitted:
        session.submit_code(code)
        st.rerun()

    if st.button("Back"):
        session.cancel()
        st.rerun()


def render_recovery_username_form(session: SessionManager):
    st.subheader("Reset your password")
    with st.form("recover"):
        username = st.text_input("Username")
        submitted = st.form_submit_button("Continue")

    if submitted:
        session.submit_recovery_username(username)
        st.rerun()

    if st.button("Back to login"):
        session.cancel()
        st.rerun()


def render_new_password_form(session: SessionManager):
    st.subheader(f"New password for {session.recovery_username}")
    with st.form("new_password"):
        password = st.text_input("New password", type="password")
        confirm = st.text_input("Confirm password", type="password")
        submitted = st.form_submit_button("Update password")

    if submitted:
        if password != confirm:
            st.error("Passwords do not match.")
        else:
            session.submit_new_password(password)
            st.rerun()


# =============================================================================
# SIDEBAR: profile, export, backup
# =============================================================================

def render_sidebar(components: AppComponents):
    session = components.session
    account = session.current_account

    st.sidebar.title("💰 SmartExpense")
    if account.avatar_bytes:
        st.sidebar.image(account.avatar_bytes, width=80)
    st.sidebar.markdown(f"Welcome back, **{account.name}**")

    avatar = st.sidebar.file_uploader("Profile picture", type=["png", "jpg", "jpeg", "webp"])
    if avatar is not None and st.sidebar.button("Save picture"):
        encoded = base64.b64encode(avatar.getvalue()).decode("ascii")
        session.update_avatar(f"data:{avatar.type};base64,{encoded}")
        st.rerun()

    st.sidebar.markdown("---")
    st.sidebar.markdown("### Export & Backup")

    if st.sidebar.button("Export to Excel"):
        try:
            st.session_state.export_bytes = components.exports.export_spreadsheet()
        except SmartExpenseError as e:
            st.sidebar.error(e.message)

    if st.session_state.get("export_bytes"):
        st.sidebar.download_button(
            "Download spreadsheet",
            data=st.session_state.export_bytes,
            file_name=EXPORT_FILE_NAME,
            mime=XLSX_MIME_TYPE,
        )

    folder = st.sidebar.text_input("Backup folder", placeholder="~/Documents")
    if st.sidebar.button("Save backup"):
        try:
            path = components.exports.backup_to_directory(Path(folder) if folder else None)
            st.sidebar.success(f"Backup saved to {path}")
        except SmartExpenseError as e:
            st.sidebar.error(e.message)

    recipient = st.sidebar.text_input("Email backup to", placeholder="me@example.com")
    if st.sidebar.button("Prepare email"):
        link = components.exports.backup_email_link(recipient)
        st.sidebar.markdown(f"[Open email draft]({link})")

    render_system_status(components)

    st.sidebar.markdown("---")
    if st.sidebar.button("Log out"):
        session.logout()
        st.rerun()


def render_system_status(components: AppComponents):
    app_settings = get_settings().app
    with st.sidebar.expander("System status"):
        st.caption(f"Environment: {app_settings.environment}")
        status = validate_all_settings()
        for name in ("gemini", "storage", "app"):
            icon = "✅" if status.get(name) else "⚠️"
            st.markdown(f"{icon} {name}")
            if status.get(f"{name}_error"):
                st.caption(status[f"{name}_error"])

        if app_settings.debug_mode:
            st.markdown("**Recent activity**")
            for event in components.audit_logger.history[-10:]:
                st.caption(f"{event.timestamp:%H:%M:%S} {event.severity.value} {event.description}")


# =============================================================================
# DASHBOARD
# =============================================================================

def render_dashboard(components: AppComponents):
    dashboard = build_dashboard(components.ledger.transactions())
    stats = dashboard.stats

    show_session_messages(components.session)

    # Quick stats
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric(
            "Available Balance",
            f"${stats.balance:,.2f}",
            delta="Surplus" if stats.is_surplus else "Deficit",
            delta_color="normal" if stats.is_surplus else "inverse",
        )
    with col2:
        st.metric("Total Income", f"${stats.total_income:,.2f}")
    with col3:
        st.metric("Total Expenses", f"${stats.total_expense:,.2f}")

    main_col, side_col = st.columns([2, 1])

    with main_col:
        render_charts(dashboard)
        render_transaction_form(components)
        render_transactions(components, dashboard)

    with side_col:
        render_tips(components, dashboard)
        render_summary(dashboard)


def render_charts(dashboard: DashboardData):
    pie_col, bar_col = st.columns(2)

    with pie_col:
        st.subheader("Expense Breakdown")
        if dashboard.expense_breakdown:
            fig = px.pie(
                names=[row.category.value for row in dashboard.expense_breakdown],
                values=[float(row.amount) for row in dashboard.expense_breakdown],
                color=[row.category.value for row in dashboard.expense_breakdown],
                color_discrete_map={c.value: color for c, color in CATEGORY_COLORS.items()},
                hole=0.6,
            )
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.caption("No data to display")

    with bar_col:
        st.subheader("Income vs Expenses")
        if dashboard.periods:
            labels = [p.period for p in dashboard.periods]
            fig = go.Figure()
            fig.add_bar(x=labels, y=[float(p.income) for p in dashboard.periods],
                        name="Income", marker_color="#10b981")
            fig.add_bar(x=labels, y=[float(p.expense) for p in dashboard.periods],
                        name="Expense", marker_color="#f43f5e")
            fig.update_layout(barmode="group", legend=dict(orientation="h", y=1.1))
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.caption("No data to display")


def render_transaction_form(components: AppComponents):
    with st.expander("➕ Add Transaction"):
        type_label = st.radio("Type", ["Expense", "Income"], horizontal=True)
        transaction_type = (
            TransactionType.INCOME if type_label == "Income" else TransactionType.EXPENSE
        )

        with st.form("add_transaction", clear_on_submit=True):
            amount = st.number_input("Amount ($)", min_value=0.0, step=0.01, format="%.2f")
            category = st.selectbox(
                "Category",
                options=list(categories_for(transaction_type)),
                format_func=lambda c: c.value,
            )
            when = st.date_input("Date", value=date.today())
            note = st.text_input("Note (Optional)", placeholder="e.g. Weekly groceries")
            submitted = st.form_submit_button("Save Transaction")

        if submitted:
            try:
                components.ledger.add(
                    amount=Decimal(str(amount)),
                    type=transaction_type,
                    category=category,
                    date=when,
                    note=note,
                )
                st.rerun()
            except ValidationError as e:
                st.error(e.errors()[0]["msg"])


def render_transactions(components: AppComponents, dashboard: DashboardData):
    st.subheader("Recent Transactions")

    if not dashboard.transactions:
        st.info("No transactions yet. Use 'Add Transaction' to add one.")
        return

    for t in dashboard.transactions:
        cols = st.columns([3, 2, 2, 2, 1])
        cols[0].markdown(f"**{t.note or 'Unlabeled'}**")
        cols[1].markdown(f"`{t.category.value}`")
        cols[2].markdown(t.date.strftime("%d %b %Y"))
        sign = "+" if t.type == TransactionType.INCOME else "-"
        cols[3].markdown(f"{sign}${t.amount:,.2f}")
        if cols[4].button("🗑️", key=f"delete-{t.id}"):
            components.ledger.delete(t.id)
            st.rerun()


def render_tips(components: AppComponents, dashboard: DashboardData):
    st.subheader("✨ Smart AI Insights")

    cache_key = (len(dashboard.transactions), str(dashboard.stats.balance))
    refresh = st.button("Refresh Tips")
    if refresh or st.session_state.get("tips_key") != cache_key:
        with st.spinner("Gemini is analyzing your patterns..."):
            st.session_state.tips = components.advisor.get_financial_tips(
                dashboard.transactions, dashboard.stats
            )
        st.session_state.tips_key = cache_key

    st.markdown(st.session_state.get("tips", ""))


def render_summary(dashboard: DashboardData):
    stats = dashboard.stats
    st.subheader("Financial Summary")
    st.markdown(f"Expense vs Income: **{stats.expense_ratio:.0f}%**")
    st.progress(min(float(stats.expense_ratio), 100.0) / 100)

    warning_ratio = get_settings().app.expense_warning_ratio
    box = "warning-box" if stats.expense_ratio > warning_ratio else "tip-box"
    st.markdown(
        f"""<div class="{box}">Pro Tip: Most experts recommend saving at least 20% of
        your monthly income. You are currently saving {stats.savings_rate:.1f}%.</div>""",
        unsafe_allow_html=True,
    )


if __name__ == "__main__":
    main()
