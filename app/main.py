"""
Streamlit Frontend for Portfolio Tracker

This is the dashboard the user opens to check and update their
portfolio across the four buckets.

DESIGN PRINCIPLES:
1. Every number shown comes from the calculation layer
2. Amounts are converted once, then only formatted
3. Edits are validated inline; save stays disabled until they pass
4. Load/save problems show as a dismissible banner, never a crash
5. No hidden actions

The UI holds no portfolio logic of its own:
- PortfolioDashboard owns the state
- This module only renders it and forwards user actions
"""

from datetime import datetime

import streamlit as st

from portfolio_tracker.audit import configure_logging
from portfolio_tracker.calculations import format_currency
from portfolio_tracker.config import get_settings, validate_all_settings
from portfolio_tracker.data import BUCKET_DEFINITIONS
from portfolio_tracker.errors import PortfolioError
from portfolio_tracker.models import (
    BUCKET_FIELDS,
    Bucket,
    BucketStatus,
    HealthScore,
    HealthSeverity,
)
from portfolio_tracker.orchestrator import PortfolioDashboard, create_app_components


# Page configuration
st.set_page_config(
    page_title="Investment Command Center",
    page_icon="📈",
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
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .warning-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .error-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


STATUS_BADGES = {
    BucketStatus.ON_TARGET: "🟢 On target",
    BucketStatus.CLOSE: "🟡 Close",
    BucketStatus.OFF_TARGET: "🔴 Off target",
}

SCORE_BADGES = {
    HealthScore.GOOD: "🟢 Good",
    HealthScore.MODERATE: "🟡 Moderate",
    HealthScore.URGENT: "🔴 Urgent",
}


def get_dashboard() -> PortfolioDashboard:
    """Get or create this session's dashboard, loaded from storage."""
    if "dashboard" not in st.session_state:
        configure_logging(get_settings().app.log_level)
        dashboard = create_app_components(use_storage=True)
        dashboard.load()
        st.session_state.dashboard = dashboard
    return st.session_state.dashboard


def money(dashboard: PortfolioDashboard, display_amount: int, currency: str) -> str:
    """Format an already-converted amount."""
    return format_currency(display_amount, currency, dashboard.config)


def main():
    """Main application entry point."""
    dashboard = get_dashboard()
    settings = get_settings()

    # Sidebar navigation
    st.sidebar.title(f"📈 {settings.app.app_name}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Overview", "✏️ Edit Portfolio", "📅 History", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    status = dashboard.get_status()
    st.sidebar.markdown(f"**Health:** {SCORE_BADGES[status.health_score]}")
    if status.last_saved:
        st.sidebar.caption(f"Last saved {status.last_saved:%d %b %Y %H:%M} UTC")
    else:
        st.sidebar.caption("Not saved yet")

    render_error_banner(dashboard)

    # Route to appropriate page
    if page == "📊 Overview":
        render_overview_page(dashboard)
    elif page == "✏️ Edit Portfolio":
        render_edit_page(dashboard)
    elif page == "📅 History":
        render_history_page(dashboard)
    elif page == "⚙️ Settings":
        render_settings_page(dashboard)


def render_error_banner(dashboard: PortfolioDashboard):
    """Show the current load/save error, with a dismiss button."""
    if not dashboard.error:
        return

    col1, col2 = st.columns([6, 1])
    with col1:
        st.markdown(f"""
        <div class="error-box">
            <p>⚠️ {dashboard.error}</p>
        </div>
        """, unsafe_allow_html=True)
    with col2:
        if st.button("Dismiss"):
            dashboard.clear_error()
            st.rerun()


def render_overview_page(dashboard: PortfolioDashboard):
    """Render totals, buckets, health alerts and FI progress."""
    st.title("📊 Portfolio Overview")

    snapshot = dashboard.snapshot()
    currency = snapshot.currency

    col1, col2, col3 = st.columns(3)
    with col1:
        st.markdown("**Total Portfolio**")
        st.markdown(
            f'<div class="big-number">{money(dashboard, snapshot.display_total, currency)}</div>',
            unsafe_allow_html=True,
        )
    with col2:
        st.metric("Lean FI progress", f"{snapshot.lean_fi.percentage:.1f}%")
        st.progress(snapshot.lean_fi.percentage / 100)
    with col3:
        st.metric(
            "Monthly passive income",
            money(dashboard, snapshot.display_monthly_passive_income, currency),
        )

    st.markdown("---")

    # Health alerts
    st.subheader("🩺 Portfolio Health")
    if not snapshot.health_issues:
        st.markdown("""
        <div class="success-box">
            <h4>✅ Portfolio is balanced</h4>
            <p>No allocation is above its threshold.</p>
        </div>
        """, unsafe_allow_html=True)
    for issue in snapshot.health_issues:
        box = "error-box" if issue.severity == HealthSeverity.URGENT else "warning-box"
        st.markdown(f"""
        <div class="{box}">
            <h4>{issue.severity.value}: {issue.message}</h4>
            <p>{issue.action}</p>
        </div>
        """, unsafe_allow_html=True)

    st.markdown("---")

    # Buckets
    st.subheader("🪣 Buckets")
    columns = st.columns(len(snapshot.buckets))
    for column, bucket in zip(columns, snapshot.buckets):
        definition = BUCKET_DEFINITIONS[bucket.bucket]
        with column:
            st.markdown(f"**{definition['name']}**")
            st.markdown(money(dashboard, bucket.display_value, currency))
            st.caption(
                f"{bucket.allocation_percent:.1f}% (target {bucket.target_percent:g}%)"
            )
            st.caption(
                f"Target amount: {money(dashboard, bucket.display_target_value, currency)}"
            )
            st.markdown(STATUS_BADGES[bucket.status])
            with st.expander("Details"):
                st.markdown(definition["description"])
                st.markdown(f"**Strategy:** {definition['strategy']}")
                st.markdown(f"**Risk:** {definition['risk_level']}")
                st.markdown("\n".join(f"- {item}" for item in definition["components"]))

    st.markdown("---")

    # FI targets
    st.subheader("🎯 Financial Independence")
    for label, progress in (("Lean FI", snapshot.lean_fi), ("Full FI", snapshot.full_fi)):
        st.markdown(f"**{label}** ({progress.percentage:.1f}%)")
        st.progress(progress.percentage / 100)
        if progress.years_to_target is None:
            st.caption("Years to target: n/a")
        else:
            st.caption(f"Years to target (rough): {progress.years_to_target:.1f}")

    st.markdown("---")
    render_automation_status(dashboard)


def render_automation_status(dashboard: PortfolioDashboard):
    """Render the transfer and auto-invest checklist."""
    st.subheader("⚙️ Automation Status")
    automation = dashboard.automation
    config = dashboard.config
    transfer = automation.transfer
    auto_invest = automation.auto_invest

    col1, col2 = st.columns(2)
    with col1:
        box = "success-box" if transfer.active else "error-box"
        amount = format_currency(transfer.amount, config.base_currency, config)
        last = f"{transfer.last_transfer:%Y-%m-%d}" if transfer.last_transfer else "never"
        st.markdown(f"""
        <div class="{box}">
            <h4>{"✅" if transfer.active else "❌"} {transfer.name}</h4>
            <p>{amount} {transfer.frequency}</p>
            <p>Last transfer: {last}<br>Status: {transfer.status}</p>
        </div>
        """, unsafe_allow_html=True)
    with col2:
        box = "success-box" if auto_invest.active else "warning-box"
        state = "Running" if auto_invest.active else f"Setup needed ({auto_invest.priority} priority)"
        st.markdown(f"""
        <div class="{box}">
            <h4>{"✅" if auto_invest.active else "⏳"} {auto_invest.name}</h4>
            <p>Target: {auto_invest.target}</p>
            <p>{state}</p>
        </div>
        """, unsafe_allow_html=True)

    if automation.pending_setup:
        st.caption("Next step: set up " + ", ".join(automation.pending_setup))


def render_edit_page(dashboard: PortfolioDashboard):
    """Render the manual edit form with inline validation."""
    st.title("✏️ Edit Portfolio")
    st.markdown(
        f"Enter amounts in {dashboard.config.base_currency}. "
        "Separators and symbols are fine (e.g. 125,000)."
    )

    portfolio = dashboard.portfolio
    raw = {}

    col1, col2 = st.columns(2)
    for index, field in enumerate(BUCKET_FIELDS):
        definition = BUCKET_DEFINITIONS[Bucket(field)]
        with (col1 if index % 2 == 0 else col2):
            raw[field] = st.text_input(
                f"{definition['name']} *",
                value=f"{getattr(portfolio, field):.2f}",
                key=f"edit_{field}",
                help=definition["description"],
            )

    raw["monthly_savings"] = st.text_input(
        "Monthly savings",
        value=f"{portfolio.monthly_savings:.2f}",
        key="edit_monthly_savings",
    )

    # Validate as the user types
    result = dashboard.preview_edit(raw)
    errors = result.errors_by_field()
    for field, message in errors.items():
        st.error(f"{field}: {message}")
    for issue in result.issues:
        if issue.severity == "warning":
            st.warning(issue.message)

    st.markdown("---")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("💾 Save", type="primary", disabled=not result.is_valid):
            dashboard.update_portfolio(raw)
            if not dashboard.preferences.auto_save:
                dashboard.save_now()
            st.rerun()
    with col2:
        if st.button("↩️ Reset to defaults"):
            dashboard.reset_portfolio()
            for field in (*BUCKET_FIELDS, "monthly_savings"):
                st.session_state.pop(f"edit_{field}", None)
            st.rerun()


def render_history_page(dashboard: PortfolioDashboard):
    """Render the historical journey and derived metrics."""
    st.title("📅 Investment Journey")

    snapshot = dashboard.snapshot()
    metrics = snapshot.metrics
    currency = dashboard.config.base_currency

    if metrics is None:
        st.info("No history recorded yet.")
        return

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total saved", format_currency(metrics.total_saved, currency, dashboard.config))
    col2.metric(
        "Market gains",
        format_currency(abs(metrics.actual_gains), currency, dashboard.config),
        f"{metrics.gains_percentage:.1f}%",
    )
    col3.metric("CAGR", f"{metrics.cagr:.1f}%", f"over {metrics.years} years")
    col4.metric(
        "From peak",
        f"{metrics.recovery_from_peak:.1f}%",
        f"peak {metrics.peak_year}",
    )

    st.markdown(
        f"**Best year:** {metrics.best_year.year} ({metrics.best_year.gains_percentage:+.1f}%)  \n"
        f"**Worst year:** {metrics.worst_year.year} ({metrics.worst_year.gains_percentage:+.1f}%)"
    )

    st.markdown("---")

    st.line_chart(
        {
            "Net worth": [entry.networth for entry in dashboard.history],
            "Total saved": [entry.total_saved for entry in dashboard.history],
        },
    )
    st.dataframe(
        [
            {
                "Year": entry.year,
                "Net worth": format_currency(entry.networth, currency, dashboard.config),
                "Saved this year": format_currency(entry.annual_savings, currency, dashboard.config),
                "Return": f"{entry.gains_percentage:+.1f}%",
                "Notes": entry.notes or "",
            }
            for entry in dashboard.history
        ],
        use_container_width=True,
        hide_index=True,
    )


def render_settings_page(dashboard: PortfolioDashboard):
    """Render currency, import/export and data management settings."""
    st.title("⚙️ Settings")

    # Display currency
    st.markdown("### Display Currency")
    supported = dashboard.config.supported_currencies
    current = dashboard.preferences.currency
    currency = st.selectbox(
        "Show amounts in",
        options=supported,
        index=supported.index(current) if current in supported else 0,
    )
    if currency != current:
        try:
            dashboard.set_currency(currency)
            st.rerun()
        except PortfolioError as e:
            st.error(str(e))

    st.markdown("---")

    # Export / import
    st.markdown("### Backup")
    st.download_button(
        "📥 Export data",
        data=dashboard.export_data(),
        file_name=f"portfolio-{datetime.utcnow():%Y%m%d}.json",
        mime="application/json",
    )

    uploaded = st.file_uploader("Import a previous export", type=["json"])
    if uploaded and st.button("📤 Import", type="primary"):
        result = dashboard.import_data(uploaded.getvalue())
        if result.success:
            st.success("✅ Data imported")
        else:
            st.error(result.error)

    st.markdown("---")

    # Danger zone
    st.markdown("### Data")
    confirm = st.checkbox("I understand this removes my stored portfolio and settings")
    if st.button("🗑️ Clear all data", disabled=not confirm):
        if dashboard.clear_all_data():
            st.success("Stored data cleared")
            st.rerun()

    st.markdown("---")
    st.markdown("### Configuration Status")

    status = validate_all_settings()
    for name in ("portfolio", "storage", "app"):
        if status.get(name, False):
            st.success(f"✅ {name.title()} settings loaded")
        else:
            st.error(f"❌ {name.title()} - {status.get(f'{name}_error', 'Not configured')}")
    for warning in status.get("portfolio_warnings", []):
        st.warning(warning)

    with st.expander("🧾 Recent activity"):
        for event in dashboard.get_recent_events():
            st.markdown(
                f"`{event.timestamp:%Y-%m-%d %H:%M}` **{event.event_type.value}** "
                f"{event.description}"
            )


if __name__ == "__main__":
    main()
