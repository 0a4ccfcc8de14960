"""Volta Lab interactive dashboard.

Side-by-side bench for a voltaic pile (1800) and a lithium-ion cell built
with Streamlit and Plotly.  The simulation controller and its wall clock
live in ``st.session_state``; a fragment re-runs every tick period to pump
the clock and redraw the live readings.  A tutor panel answers questions
about the current readings.

Launch with::

    streamlit run dashboard/app.py
"""

from __future__ import annotations

import plotly.graph_objects as go
import streamlit as st

from volta_lab.config import load_settings
from volta_lab.core.circuit import VOLTS_PER_LAYER
from volta_lab.core.clock import WallClock
from volta_lab.core.controller import SimulationController, SimulationSnapshot
from volta_lab.core.curves import lithium_ocv_curve, voltaic_decay_curve
from volta_lab.core.source import MAX_LAYERS, MIN_LAYERS, Mode
from volta_lab.log import setup_logging
from volta_lab.reporting import history_frame
from volta_lab.tutor.client import TutorClient, TutorContext
from volta_lab.tutor.session import TutorSession

_LOW_CHARGE_PCT: float = 20.0
_DECAY_PREVIEW_TICKS: int = 600

# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------


def _init_session() -> None:
    """Create the per-browser-session controller, clock and tutor once."""
    if "controller" in st.session_state:
        return
    setup_logging()
    settings = load_settings()
    clock = WallClock(max_catch_up_ms=settings.simulation.max_catch_up_ms)
    st.session_state["clock"] = clock
    st.session_state["controller"] = SimulationController(
        scheduler=clock, settings=settings.simulation
    )
    st.session_state["tutor"] = TutorSession(TutorClient(settings.tutor))


def _controller() -> SimulationController:
    return st.session_state["controller"]


def _clock() -> WallClock:
    return st.session_state["clock"]


def _tutor() -> TutorSession:
    return st.session_state["tutor"]


# ---------------------------------------------------------------------------
# Figures
# ---------------------------------------------------------------------------


def _history_figure(snap: SimulationSnapshot) -> go.Figure:
    """Dual-axis voltage/current chart of the rolling history."""
    df = history_frame(snap)
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=df["time"],
            y=df["voltage"],
            name="Voltage (V)",
            mode="lines",
            line=dict(color="#4f46e5", width=2),
        )
    )
    fig.add_trace(
        go.Scatter(
            x=df["time"],
            y=df["current"],
            name="Current (A)",
            mode="lines",
            line=dict(color="#f59e0b", width=2),
            yaxis="y2",
        )
    )
    fig.update_layout(
        title="Live voltage and current",
        xaxis=dict(title="Tick", showticklabels=False),
        yaxis=dict(title="Voltage (V)", rangemode="tozero", tickformat=".1f"),
        yaxis2=dict(
            title="Current (A)",
            overlaying="y",
            side="right",
            rangemode="tozero",
            tickformat=".2f",
        ),
        height=300,
        margin=dict(t=40, b=20),
        legend=dict(orientation="h", y=-0.15),
    )
    return fig


def _reference_figure(snap: SimulationSnapshot) -> go.Figure:
    """Model curve for the active source with the live operating point."""
    fig = go.Figure()
    if snap.mode is Mode.LITHIUM:
        charge, v = lithium_ocv_curve()
        fig.add_trace(go.Scatter(x=charge, y=v, name="Open-circuit voltage", mode="lines"))
        fig.add_trace(
            go.Scatter(
                x=[snap.charge_level],
                y=[snap.voltage],
                name="Now",
                mode="markers",
                marker=dict(size=10, color="#0d9488"),
            )
        )
        fig.update_layout(
            title="Lithium discharge curve",
            xaxis=dict(title="Charge (%)", autorange="reversed"),
            yaxis=dict(title="Voltage (V)"),
        )
    else:
        t, v, _ = voltaic_decay_curve(snap.layer_count, _DECAY_PREVIEW_TICKS, snap.resistance)
        fig.add_trace(go.Scatter(x=t, y=v, name="Polarization decay", mode="lines"))
        if snap.history:
            latest = snap.history[-1]
            fig.add_trace(
                go.Scatter(
                    x=[latest.time],
                    y=[latest.voltage],
                    name="Now",
                    mode="markers",
                    marker=dict(size=10, color="#b45309"),
                )
            )
        fig.update_layout(
            title=f"Voltaic pile under load ({snap.layer_count} layers)",
            xaxis=dict(title="Tick"),
            yaxis=dict(title="Voltage (V)", rangemode="tozero"),
        )
    fig.update_layout(height=300, margin=dict(t=40, b=20), showlegend=False)
    return fig


# ---------------------------------------------------------------------------
# Live fragments
# ---------------------------------------------------------------------------


@st.fragment(run_every=0.1)
def _live_panel() -> None:
    """Pump the wall clock and redraw readings."""
    _clock().pump()
    snap = _controller().snapshot()

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Voltage", f"{snap.voltage:.2f} V")
    c2.metric("Current", f"{snap.current:.3f} A")
    c3.metric("Power", f"{snap.power:.3f} W")
    c4.metric("Internal R", f"{snap.internal_resistance:.1f} Ω")

    if snap.mode is Mode.LITHIUM:
        st.progress(
            min(1.0, snap.charge_level / 100.0),
            text=f"Charge {round(snap.charge_level)}%"
            + (" (charging)" if snap.is_charging else ""),
        )
        if snap.charge_level < _LOW_CHARGE_PCT and not snap.is_charging:
            st.warning("Battery low. Connect the charger.")
    else:
        st.caption(f"Stack: {snap.layer_count} zinc-copper pairs")

    st.caption(f"State: {snap.phase.value} | t = {snap.time}")

    col_hist, col_ref = st.columns(2)
    with col_hist:
        st.plotly_chart(_history_figure(snap), use_container_width=True)
    with col_ref:
        st.plotly_chart(_reference_figure(snap), use_container_width=True)


@st.fragment(run_every=0.5)
def _tutor_transcript() -> None:
    """Show the chat and collect finished tutor replies."""
    tutor = _tutor()
    tutor.poll()
    for msg in tutor.messages:
        with st.chat_message("user" if msg.role == "user" else "assistant"):
            st.write(msg.text)
    if tutor.is_loading:
        st.caption("Thinking...")


# ---------------------------------------------------------------------------
# Streamlit app
# ---------------------------------------------------------------------------


def main() -> None:
    """Entry point for the Streamlit dashboard."""
    st.set_page_config(page_title="Physics Life: From Voltaic Pile to Lithium", layout="wide")
    _init_session()

    controller = _controller()
    # Catch up on ticks owed before applying this run's commands.
    _clock().pump()

    st.title("Physics Life: From Voltaic Pile to Lithium Battery")
    st.caption("How power sources and the science of measuring them evolved")

    # ── Sidebar controls ─────────────────────────────────────────────────
    st.sidebar.header("Bench")

    selected: Mode = st.sidebar.radio(
        "Power source",
        options=list(Mode),
        format_func=lambda m: m.label,
        key="mode",
    )
    if selected != controller.mode:
        controller.switch_mode(selected)

    snap = controller.snapshot()

    run_label = "Disconnect load" if snap.is_running else "Connect load"
    col_run, col_reset = st.sidebar.columns(2)
    col_run.button(run_label, on_click=controller.toggle_run, use_container_width=True)
    col_reset.button("Reset", on_click=controller.reset, use_container_width=True)

    resistance = st.sidebar.slider(
        "Load resistance (Ω)",
        min_value=1,
        max_value=100,
        value=int(controller.settings.default_resistance),
        key="resistance",
    )
    if resistance != snap.resistance:
        controller.set_resistance(resistance)

    if snap.mode is Mode.VOLTAIC:
        st.sidebar.subheader("Voltaic pile")
        col_minus, col_plus = st.sidebar.columns(2)
        col_minus.button(
            "Remove layer",
            on_click=controller.remove_layer,
            disabled=snap.layer_count <= MIN_LAYERS,
            use_container_width=True,
        )
        col_plus.button(
            "Add layer",
            on_click=controller.add_layer,
            disabled=snap.layer_count >= MAX_LAYERS,
            use_container_width=True,
        )
        st.sidebar.caption(
            f"{snap.layer_count} layers, estimated {snap.layer_count * VOLTS_PER_LAYER:.2f} V"
        )
    else:
        st.sidebar.subheader("Lithium-ion cell")
        st.sidebar.button(
            "Disconnect charger" if snap.is_charging else "Connect charger",
            on_click=controller.toggle_charging,
            use_container_width=True,
        )

    # ── Bench and tutor ──────────────────────────────────────────────────
    col_bench, col_chat = st.columns([3, 1])

    with col_bench:
        _live_panel()

    with col_chat:
        st.subheader("Physics tutor")
        _tutor_transcript()
        question = st.chat_input("Ask something...")
        if question:
            _tutor().submit(question, TutorContext.from_snapshot(controller.snapshot()))
            st.rerun()


if __name__ == "__main__":
    main()
