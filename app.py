"""
Career Bot - Streamlit Chat Interface

Ask questions about a professional profile and get answers in the profile
owner's voice, grounded in the passages retrieved from the profile.

RUN:
    streamlit run app.py

FEATURES:
- Indexes the profile once per session, on first load
- Chat history
- Retrieved passages shown under each answer
"""

import asyncio
import sys
from pathlib import Path

import streamlit as st

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from careerbot.exceptions import CareerBotError
from careerbot.rag_pipeline import CareerBotPipeline
from config.settings import get_settings


st.set_page_config(
    page_title="Career Bot",
    page_icon="💼",
    layout="centered",
)

st.markdown("""
<style>
    .context-box {
        background-color: #F8FAFC;
        border-left: 4px solid #0EA5E9;
        padding: 0.75rem 1rem;
        border-radius: 0 8px 8px 0;
        margin: 0.5rem 0;
        font-size: 0.9rem;
        white-space: pre-wrap;
    }
</style>
""", unsafe_allow_html=True)


def run(coro):
    """Run a coroutine on this session's event loop (the async clients are bound to it)."""
    return st.session_state.loop.run_until_complete(coro)


def init_session_state():
    """Initialize session state variables."""
    if "loop" not in st.session_state:
        st.session_state.loop = asyncio.new_event_loop()
    if "pipeline" not in st.session_state:
        st.session_state.pipeline = None
    if "chat_history" not in st.session_state:
        st.session_state.chat_history = []


def get_pipeline() -> CareerBotPipeline:
    """Create the pipeline and index the profile the first time through."""
    if st.session_state.pipeline is None:
        with st.spinner("Loading profile and building the vector store..."):
            pipeline = CareerBotPipeline()
            result = run(pipeline.initialize())
            st.session_state.pipeline = pipeline
        st.toast(f"Indexed {result.documents_stored} of {result.chunks_created} chunks")
    return st.session_state.pipeline


def main():
    init_session_state()

    # Configuration errors stop the app before anything is indexed
    try:
        settings = get_settings()
    except ValueError as e:
        st.error(f"Configuration error: {e}")
        st.stop()

    st.title(f"💼 Chat with {settings.profile.name}")
    st.caption("Answers come from the profile only. \"No\" means the profile doesn't say.")

    pipeline = get_pipeline()

    for chat in st.session_state.chat_history:
        with st.chat_message("user"):
            st.markdown(chat["question"])
        with st.chat_message("assistant"):
            st.markdown(chat["reply"])
            if chat["passages"]:
                with st.expander(f"📄 Profile passages used ({len(chat['passages'])})"):
                    for j, passage in enumerate(chat["passages"]):
                        st.markdown(
                            f'<div class="context-box"><strong>Passage {j+1}</strong> '
                            f'(Score: {passage.score:.2%})<br>{passage.document}</div>',
                            unsafe_allow_html=True
                        )

    question = st.chat_input("Ask about experience, skills, education...")

    if question:
        with st.spinner("Thinking..."):
            try:
                result = run(pipeline.ask(question))
            except CareerBotError as e:
                st.error(f"Something went wrong: {e}")
                return

        st.session_state.chat_history.append({
            "question": question,
            "reply": result.reply,
            "passages": result.passages,
        })
        st.rerun()

    with st.sidebar:
        st.header("ℹ️ About")
        stats = run(pipeline.get_stats())
        st.metric("Backend", stats["backend"])
        st.metric("Chunks", stats["total_chunks"])

        if st.button("🔄 Re-index profile", use_container_width=True):
            with st.spinner("Re-indexing..."):
                run(pipeline.initialize())
            st.rerun()

        if st.button("🗑️ Clear chat", use_container_width=True):
            st.session_state.chat_history = []
            st.rerun()


if __name__ == "__main__":
    main()
