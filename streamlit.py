# streamlit.py — Browser UI for tarot-reader
# Run:  streamlit run streamlit.py   (and the API: uvicorn api.main:app)

from __future__ import annotations

import os
from typing import List

import streamlit as st

from tarot_reader import tarot_core
from tarot_reader.client import InterpretationClient
from tarot_reader.config import load_settings
from tarot_reader.logic import ReadingController, ReadingSession, get_card_image_path


class StreamlitRenderer:
    """Stores what the controller shows in session_state; the page draws from it."""

    def render(self, session: ReadingSession) -> None:
        st.session_state["interpretation"] = ""
        st.session_state["interpret_error"] = ""
        st.session_state["interpret_status"] = ""

    def show_status(self, text: str) -> None:
        st.session_state["interpret_status"] = text

    def show_interpretation(self, text: str) -> None:
        st.session_state["interpretation"] = text
        st.session_state["interpret_error"] = ""

    def show_error(self, message: str) -> None:
        st.session_state["interpret_error"] = message


def _controller() -> ReadingController:
    # One controller per browser session; it carries the current reading
    if "controller" not in st.session_state:
        settings = load_settings()
        st.session_state["controller"] = ReadingController(
            renderer=StreamlitRenderer(),
            interpreter=InterpretationClient(settings.interpret_url, timeout=settings.http_timeout),
        )
    return st.session_state["controller"]


# -----------------------------
# Page setup
# -----------------------------
st.set_page_config(
    page_title="Tarot Reader",
    page_icon="🔮",
    layout="wide",
)

st.title("🔮 Tarot Reader")
st.caption("Ask a question, draw a spread, then ask the oracle to interpret it.")

controller = _controller()

# -----------------------------
# Sidebar controls
# -----------------------------
st.sidebar.header("Controls")

spreads = tarot_core.list_spreads()
spread = st.sidebar.selectbox(
    "Spread",
    options=[s.key for s in spreads],
    format_func=lambda key: tarot_core.get_spread(key).label,
    index=0,
)
st.sidebar.markdown(f"**Number of cards:** `{len(tarot_core.get_spread(spread).positions)}`")
show_paths = st.sidebar.checkbox("Show image paths (debug)", value=False)

# -----------------------------
# Main panel inputs
# -----------------------------
question = st.text_area(
    "Your question (optional)",
    placeholder="Type your question or context...",
    height=100,
)

col_btn1, col_btn2 = st.columns([1, 1])
with col_btn1:
    run = st.button("🔀 Draw cards", use_container_width=True)

# Draw before laying out the Interpret button so it enables on the same run
if run:
    controller.draw(question, spread)

with col_btn2:
    ask = st.button(
        "✨ Interpret",
        use_container_width=True,
        disabled=controller.busy or controller.session is None,
    )

if ask:
    with st.spinner("Asking the oracle..."):
        controller.interpret()

# -----------------------------
# Render output
# -----------------------------
session = controller.session
if session:
    st.subheader(session.spread_label)
    if session.question:
        st.caption(f"Q: {session.question}")

    cards = session.cards
    cols_per_row = 5 if len(cards) >= 5 else max(3, len(cards))
    rows = (len(cards) + cols_per_row - 1) // cols_per_row

    idx = 0
    for _ in range(rows):
        cols = st.columns(cols_per_row, gap="small")
        for col in cols:
            if idx >= len(cards):
                break
            drawn = cards[idx]
            cap_lines: List[str] = [f"**{drawn.card.name}**", f"`{drawn.orientation}`", drawn.position]
            caption = " · ".join(cap_lines)

            path = get_card_image_path(drawn.card)
            if os.path.isfile(path):
                col.image(path, caption=caption, use_column_width=True)
            else:
                col.markdown(f"🖼️ *Image not found*\n\n{caption}")
            if show_paths:
                col.caption(path)
            idx += 1

    st.markdown("---")
    st.subheader("Interpretation")
    status = st.session_state.get("interpret_status")
    if st.session_state.get("interpret_error"):
        st.error(st.session_state["interpret_error"])
    elif st.session_state.get("interpretation"):
        st.markdown(st.session_state["interpretation"])
    elif status:
        st.info(status)
    else:
        st.info("Click **Interpret** to ask the oracle about this spread.")

    with st.expander("Debug JSON"):
        st.json(session.to_payload(), expanded=False)

elif st.session_state.get("interpret_error"):
    st.error(st.session_state["interpret_error"])
else:
    st.info("Pick a spread, optionally enter a question, then click **Draw cards**.")
