"""Action Extractor -- Streamlit UI.

Upload or paste a meeting transcript, extract action items, then generate a
knowledge map from them.
"""

from __future__ import annotations

import streamlit as st

from src.ui.api_client import (
    check_health,
    extract_from_file,
    extract_from_text,
    generate_knowledge_map,
    summarize,
)
from src.ui.graph import build_dot

# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(page_title="Action Extractor", layout="wide")

# Result and error are tracked separately: an empty result is not a failure.
_STATE_DEFAULTS: dict[str, object] = {
    "action_items": None,
    "actions_error": None,
    "actions_source": None,
    "transcript": "",
    "knowledge_map": None,
    "map_error": None,
    "summary": None,
    "summary_error": None,
}
for key, default in _STATE_DEFAULTS.items():
    st.session_state.setdefault(key, default)


def _reset_results() -> None:
    for key, default in _STATE_DEFAULTS.items():
        st.session_state[key] = default


def _run_extraction(source: str, result: dict | None, error: str | None, transcript: str) -> None:  # type: ignore[type-arg]
    # A new extraction invalidates any previous map and summary.
    _reset_results()
    st.session_state.actions_source = source
    st.session_state.transcript = transcript
    if error is not None:
        st.session_state.actions_error = error
    else:
        st.session_state.action_items = (result or {}).get("actionItems", [])


# ---------------------------------------------------------------------------
# Sidebar -- API status
# ---------------------------------------------------------------------------
with st.sidebar:
    st.title("Action Extractor")
    st.markdown("---")

    api_healthy = check_health()
    if api_healthy:
        st.markdown(":green_circle: API connected")
    else:
        st.markdown(":red_circle: API unreachable")

st.header("Action Extractor")
st.write(
    "Upload or paste a meeting transcript to extract action items and generate a knowledge map."
)

# ---------------------------------------------------------------------------
# Input: file upload or pasted text
# ---------------------------------------------------------------------------
col_file, col_text = st.columns(2)

with col_file:
    st.subheader("Upload Transcript")
    uploaded_file = st.file_uploader(
        "Plain text (.txt), Word (.docx), or PDF (.pdf)",
        type=["txt", "docx", "pdf"],
    )
    if st.button("Extract from File", disabled=uploaded_file is None or not api_healthy):
        if uploaded_file is not None:
            with st.spinner("Extracting action items..."):
                result, error = extract_from_file(
                    file_content=uploaded_file.getvalue(),
                    filename=uploaded_file.name,
                    content_type=uploaded_file.type,
                )
            _run_extraction(
                "uploaded file", result, error, (result or {}).get("transcript", "")
            )

with col_text:
    st.subheader("Paste Transcript")
    pasted = st.text_area("Transcript text", height=200)
    if st.button("Extract from Text", disabled=not api_healthy):
        if not pasted.strip():
            st.error("Please provide a transcript via text input.")
        else:
            with st.spinner("Extracting action items..."):
                result, error = extract_from_text(pasted)
            _run_extraction("text input", result, error, pasted)

if not api_healthy:
    st.warning("The API server is not reachable. Start it with `uvicorn src.api.main:app`.")

# ---------------------------------------------------------------------------
# Action items
# ---------------------------------------------------------------------------
if st.session_state.actions_error:
    st.error(f"Extraction failed: {st.session_state.actions_error}")
elif st.session_state.action_items is not None:
    items = st.session_state.action_items
    st.subheader("Action Items")
    if not items:
        st.info(f"No action items were found in the {st.session_state.actions_source}.")
    else:
        st.success(f"Extracted {len(items)} action items from the {st.session_state.actions_source}.")
        for i, item in enumerate(items):
            with st.expander(f"{i + 1}. {item['action']}"):
                st.write(f"**Assignee:** {item.get('assignee') or 'Unassigned'}")
                st.write(f"**Assigner:** {item.get('assigner') or 'Not specified'}")
                st.write(f"**Timeline:** {item.get('timeline') or 'No deadline'}")
                st.caption(item["context"])

    if st.session_state.transcript and st.button("Summarize Transcript", disabled=not api_healthy):
        with st.spinner("Summarizing..."):
            result, error = summarize(st.session_state.transcript)
        st.session_state.summary = (result or {}).get("summary")
        st.session_state.summary_error = error

    if st.session_state.summary_error:
        st.error(f"Summary failed: {st.session_state.summary_error}")
    elif st.session_state.summary:
        st.subheader("Summary")
        st.markdown(st.session_state.summary)

    # ---------------------------------------------------------------------------
    # Knowledge map (only offered after a successful, non-empty extraction)
    # ---------------------------------------------------------------------------
    if items:
        st.markdown("---")
        if st.button("Generate Knowledge Map", disabled=not api_healthy):
            with st.spinner("Generating knowledge map..."):
                result, error = generate_knowledge_map(items)
            st.session_state.knowledge_map = result
            st.session_state.map_error = error

        if st.session_state.map_error:
            st.error(f"Map generation failed: {st.session_state.map_error}")
        elif st.session_state.knowledge_map:
            kmap = st.session_state.knowledge_map
            st.subheader("Knowledge Map")
            st.markdown(kmap.get("mapDescription", ""))
            if kmap.get("nodes"):
                st.graphviz_chart(build_dot(kmap), use_container_width=True)
            else:
                st.info("No graph entities were identified.")
