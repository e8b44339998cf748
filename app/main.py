"""
Streamlit Frontend for Ledger Insights

A dashboard over get_financial_analysis: enter a user id, get the
summary numbers, the health score and the advice.

DESIGN PRINCIPLES:
1. The numbers the advice is based on are always shown next to it
2. Rule-based results are clearly marked as such
3. Clear error messages in simple language
"""

import asyncio
from datetime import datetime

import streamlit as st

from ledger_insights.config import validate_all_settings
from ledger_insights.models.insight import AlertSeverity, AnalysisResponse, Priority
from ledger_insights.orchestrator import FinancialAnalysisFlow, create_app_components
from ledger_insights.services.storage import NotFoundError


# Page configuration
st.set_page_config(
    page_title="Ledger Insights",
    page_icon="📈",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .assessment-box {
        padding: 20px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)

PRIORITY_ICONS = {
    Priority.HIGH: "🔴",
    Priority.MEDIUM: "🟡",
    Priority.LOW: "🟢",
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
def get_components():
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        return create_app_components(use_storage=False)


def main():
    """Main application entry point."""
    analysis_flow, _ = get_components()

    st.sidebar.title("📈 Ledger Insights")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Financial Analysis", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    health = analysis_flow.health_check()
    if health["provider_configured"]:
        st.sidebar.success(f"AI model: {health['model']}")
    else:
        st.sidebar.warning("AI not configured - basic analysis only")

    if page == "📊 Financial Analysis":
        render_analysis_page(analysis_flow)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_analysis_page(analysis_flow: FinancialAnalysisFlow):
    """Render the analysis page."""
    st.title("📊 Financial Analysis")
    st.markdown("Get an overview of the last few months of income and expenses.")

    user_id = st.text_input(
        "User ID",
        help="The profile id whose ledger should be analyzed",
    )

    if st.button("🔍 Analyze", type="primary") and user_id:
        with st.spinner("Analyzing your finances..."):
            try:
                response = run_async(analysis_flow.get_financial_analysis(user_id))
            except NotFoundError:
                st.error("No profile found for this user id.")
                st.stop()
            except Exception as e:
                st.error(f"Error: {str(e)}")
                st.stop()

        render_response(response)


def render_response(response: AnalysisResponse):
    analysis = response.analysis
    summary = response.raw_data

    if not response.success:
        st.warning(
            "AI analysis is unavailable, showing a basic rule-based analysis. "
            f"Reason: {response.error}"
        )

    if analysis.error:
        st.error(analysis.error)
        return

    if summary:
        st.caption(f"{summary.analysis_period} · {summary.period_start} to {summary.period_end}")
        col1, col2, col3, col4 = st.columns(4)
        col1.metric("Total Income", f"{summary.currency}{summary.total_income:,.2f}")
        col2.metric("Total Expenses", f"{summary.currency}{summary.total_expense:,.2f}")
        col3.metric("Net Savings", f"{summary.currency}{summary.net_balance:,.2f}")
        col4.metric("Savings Rate", f"{summary.savings_rate_percent:.1f}%")

    st.markdown("---")

    score_col, text_col = st.columns([1, 3])
    with score_col:
        st.metric("Financial Health Score", f"{analysis.financial_health_score}/100")
        st.progress((analysis.financial_health_score or 0) / 100)
    with text_col:
        st.markdown(f"""
        <div class="assessment-box">
            <h4>Overall Assessment</h4>
            <p>{analysis.overall_assessment}</p>
        </div>
        """, unsafe_allow_html=True)

    if analysis.key_insights:
        st.subheader("💡 Key Insights")
        for insight in analysis.key_insights:
            st.markdown(f"- {insight}")

    if analysis.recommendations:
        st.subheader("✅ Recommendations")
        for rec in analysis.recommendations:
            icon = PRIORITY_ICONS.get(rec.priority, "")
            st.markdown(f"{icon} **{rec.title}** ({rec.priority.value})")
            st.markdown(rec.description)

    for alert in analysis.risk_alerts:
        message = f"**{alert.type}:** {alert.message}"
        if alert.severity == AlertSeverity.DANGER:
            st.error(message)
        elif alert.severity == AlertSeverity.WARNING:
            st.warning(message)
        else:
            st.info(message)

    if analysis.next_month_forecast:
        forecast = analysis.next_month_forecast
        currency = summary.currency if summary else ""
        st.subheader("🔮 Next Month Forecast")
        col1, col2, col3 = st.columns(3)
        col1.metric("Expected Income", f"{currency}{forecast.expected_income:,.2f}")
        col2.metric("Expected Expenses", f"{currency}{forecast.expected_expenses:,.2f}")
        col3.metric("Expected Savings", f"{currency}{forecast.expected_savings:,.2f}")

    if summary and (summary.monthly_income_by_label or summary.monthly_expense_by_label):
        st.subheader("📅 Monthly Breakdown")
        labels = sorted(
            set(summary.monthly_income_by_label) | set(summary.monthly_expense_by_label),
            key=lambda m: datetime.strptime(m, "%b %Y"),
        )
        st.bar_chart({
            "Income": [float(summary.monthly_income_by_label.get(m, 0)) for m in labels],
            "Expenses": [float(summary.monthly_expense_by_label.get(m, 0)) for m in labels],
        })
        st.caption(" · ".join(labels))

    if analysis.text_analysis:
        with st.expander("🔍 Raw AI Response"):
            st.text(analysis.text_analysis)

    with st.expander("🧾 Response Payload"):
        st.json(response.to_payload())


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Google Sheets (Ledger Storage)", "google_sheets"),
        ("Gemini (AI)", "gemini"),
        ("Analysis", "analysis"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your API keys. "
        "See `.env.example` for the required variables."
    )


if __name__ == "__main__":
    main()
