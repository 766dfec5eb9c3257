"""Liquid Hook Monitor - Streamlit dashboard for yield router simulations."""

import streamlit as st
import sys
from pathlib import Path

import pandas as pd

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from monitor_app.database import Database
from monitor_app.stats import StatsCalculator
from monitor_app.visualizations import (
    create_allocation_chart,
    create_event_count_chart,
    create_price_chart,
    create_reserve_ratio_chart,
    create_utilization_chart,
)

from liquid_hook.config import (
    BASELINE_SETTINGS,
    build_router_config,
    build_simulation_settings,
    resolve_db_path,
)
from liquid_hook.core.errors import LiquidHookError
from liquid_hook.core.types import OutputEstimate
from liquid_hook.simulation.runner import SimulationRunner

# Page config
st.set_page_config(
    page_title="Liquid Hook Monitor",
    page_icon="💧",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Initialize session state
if 'db' not in st.session_state:
    st.session_state.db = Database(resolve_db_path())
    st.session_state.stats_calc = StatsCalculator(st.session_state.db)

db = st.session_state.db
stats_calc = st.session_state.stats_calc

st.sidebar.title("💧 Liquid Hook Monitor")

page = st.sidebar.selectbox(
    "Navigation",
    ["🏠 Home", "▶️ Run Simulation", "🔍 Run Details", "⚖️ Compare Reserve Ratios"]
)


def format_run(run):
    label = run['label'] or 'unlabelled'
    return f"#{run['id']} {label} ({run['reserve_ratio_bps'] / 100:.0f}% reserve, {run['n_steps']} steps)"


# ============================================================================
# HOME PAGE
# ============================================================================

if page == "🏠 Home":
    st.title("💧 Liquid Hook Monitor")
    st.markdown("""
    The yield router keeps a share of a pool's holdings idle for trading and
    deposits the rest into a lending service. Before a trade it pulls back
    whatever the trade needs, and after the trade it deposits the excess again.

    Use this dashboard to simulate market activity against a hooked pool and
    see how the reserve ratio trades deposited capital against withdrawals.
    """)

    overview = stats_calc.get_overview()
    col1, col2, col3, col4 = st.columns(4)

    with col1:
        st.metric("Stored Runs", overview['total_runs'])

    with col2:
        st.metric("Trades", overview['total_trades'])

    with col3:
        st.metric("Failed Trades", f"{overview['failure_rate']:.2%}")

    with col4:
        ratio = overview['most_tested_ratio']
        st.metric("Most Tested Ratio", f"{ratio / 100:.0f}%" if ratio is not None else "None yet")

    st.subheader("📜 Recent Runs")
    recent_runs = db.get_recent_runs(limit=10)

    if not recent_runs:
        st.info("No runs yet. Run the first simulation!")
    else:
        df = pd.DataFrame([
            {
                'Run': r['id'],
                'Label': r['label'],
                'Reserve (bps)': r['reserve_ratio_bps'],
                'Steps': r['n_steps'],
                'Trades': r['trades'],
                'Failed': r['failed_trades'],
                'Created': r['created_at'],
            }
            for r in recent_runs
        ])
        st.dataframe(df, use_container_width=True, hide_index=True)

# ============================================================================
# RUN SIMULATION PAGE
# ============================================================================

elif page == "▶️ Run Simulation":
    st.title("▶️ Run Simulation")

    with st.form("simulation_form"):
        label = st.text_input("Label", placeholder="e.g. high-utilization")

        col1, col2 = st.columns(2)
        with col1:
            reserve_ratio = st.slider("Reserve ratio (bps)", 0, 10_000, 2000, step=100)
            min_deposit = st.number_input("Minimum deposit (base units)", min_value=0, value=0)
            output_estimate = st.selectbox(
                "Pre-trade output estimate",
                [e.value for e in OutputEstimate],
            )
            n_steps = st.number_input(
                "Steps", min_value=1, max_value=20_000, value=BASELINE_SETTINGS.n_steps
            )
        with col2:
            seed = st.number_input("Seed", min_value=0, value=42)
            volatility = st.number_input(
                "Per-step volatility", min_value=0.0, value=BASELINE_SETTINGS.gbm_sigma, format="%.4f"
            )
            utilization = st.slider(
                "Lending utilization (bps)", 0, 10_000, BASELINE_SETTINGS.utilization_bps, step=100
            )
            harvest_interval = st.number_input(
                "Harvest interval (steps, 0 disables)",
                min_value=0,
                value=BASELINE_SETTINGS.harvest_interval,
            )

        submitted = st.form_submit_button("Run", type="primary")

    if submitted:
        try:
            router_config = build_router_config(
                reserve_ratio_bps=int(reserve_ratio),
                min_deposit=int(min_deposit),
                output_estimate=output_estimate,
            )
            settings = build_simulation_settings(
                n_steps=int(n_steps),
                seed=int(seed),
                gbm_sigma=float(volatility),
                utilization_bps=int(utilization),
                harvest_interval=int(harvest_interval),
            )
        except (LiquidHookError, ValueError) as e:
            st.error(f"Invalid settings: {e}")
        else:
            with st.spinner("Simulating..."):
                result = SimulationRunner(settings, router_config).run()
                run_id = db.add_run(result, label=label)

            st.success(f"Stored run #{run_id}")
            summary = result.summarize()

            col1, col2, col3 = st.columns(3)
            col1.metric("Trades", summary['trades'])
            col2.metric("Failed", summary['failed_trades'])
            col3.metric("Failure Rate", f"{summary['failure_rate']:.2%}")

            steps = [s.to_dict() for s in result.steps]
            st.plotly_chart(create_price_chart(steps), use_container_width=True)
            for asset in result.currencies:
                st.plotly_chart(create_allocation_chart(steps, asset), use_container_width=True)

# ============================================================================
# RUN DETAILS PAGE
# ============================================================================

elif page == "🔍 Run Details":
    st.title("🔍 Run Details")

    search = st.text_input("🔍 Search by label", "")
    runs = db.list_runs(search=search if search else None)

    if not runs:
        st.info("No runs found.")
    else:
        run = st.selectbox("Run", runs, format_func=format_run)
        stats = stats_calc.get_run_stats(run['id'])
        steps = db.get_run_steps(run['id'])

        col1, col2, col3, col4 = st.columns(4)
        col1.metric("Reserve Ratio", f"{stats['reserve_ratio_bps'] / 100:.0f}%")
        col2.metric("Trades", stats['trades'])
        col3.metric("Failed", stats['failed_trades'])
        col4.metric("Failure Rate", f"{stats['failure_rate']:.2%}")

        st.subheader("Assets")
        st.dataframe(
            pd.DataFrame([
                {
                    'Asset': asset,
                    'Staked': str(numbers['staked']),
                    'Withdrawn': str(numbers['withdrawn']),
                    'Deployed share': f"{numbers['avg_deployed_share']:.1%}",
                    'Withdrawals': numbers['withdrawal_steps'],
                    'Avg utilization': f"{numbers['avg_utilization_bps'] / 100:.1f}%",
                }
                for asset, numbers in stats['assets'].items()
            ]),
            use_container_width=True,
            hide_index=True,
        )

        st.plotly_chart(create_price_chart(steps), use_container_width=True)
        for asset in stats['assets']:
            st.plotly_chart(create_allocation_chart(steps, asset), use_container_width=True)
        st.plotly_chart(create_utilization_chart(steps), use_container_width=True)

        event_chart = create_event_count_chart(stats['events'])
        if event_chart:
            st.plotly_chart(event_chart, use_container_width=True)

        with st.expander("Router events"):
            events = db.get_run_events(run['id'])
            st.dataframe(
                pd.DataFrame([
                    {
                        'Seq': e['sequence'],
                        'Event': e['event'],
                        'Asset': e['asset'],
                        'Amount': '' if e['amount'] is None else str(e['amount']),
                    }
                    for e in events
                ]),
                use_container_width=True,
                hide_index=True,
            )

        if st.button("Delete run"):
            db.delete_run(run['id'])
            st.rerun()

# ============================================================================
# COMPARE PAGE
# ============================================================================

elif page == "⚖️ Compare Reserve Ratios":
    st.title("⚖️ Compare Reserve Ratios")

    comparison = stats_calc.compare_reserve_ratios()

    if not comparison:
        st.info("Store runs at a few reserve ratios to compare them.")
    else:
        chart = create_reserve_ratio_chart(comparison)
        if chart:
            st.plotly_chart(chart, use_container_width=True)

        st.dataframe(
            pd.DataFrame([
                {
                    'Reserve (bps)': c['reserve_ratio_bps'],
                    'Runs': c['runs'],
                    'Trades': c['trades'],
                    'Failed': c['failed_trades'],
                    'Failure rate': f"{c['failure_rate']:.2%}",
                    'Withdrawals / run': f"{c['avg_withdrawals']:.1f}",
                    'Deposits / run': f"{c['avg_stakes']:.1f}",
                }
                for c in comparison
            ]),
            use_container_width=True,
            hide_index=True,
        )
