import os
import time

import requests
import streamlit as st

API_BASE = os.getenv("PDF_SERVICE_API_BASE", os.getenv("API_BASE", "http://localhost:4000")).rstrip("/")
TEMPLATES = ["classic", "modern", "minimal"]


def _reset_state():
    for key in [
        "result",
        "pdf_bytes",
        "error",
    ]:
        if key in st.session_state:
            del st.session_state[key]
    # Bump the uploader key to clear any previously uploaded file widget state
    if "upload_key" in st.session_state:
        st.session_state["upload_key"] += 1
    else:
        st.session_state["upload_key"] = 1


def _prepare_pdf(html: str, template: str, person_name: str) -> dict[str, str] | None:
    payload: dict[str, str] = {"html": html}
    if person_name.strip():
        payload["personName"] = person_name
    # Retry only network errors; a 4xx/5xx answer is final
    max_attempts = 3
    backoff = 0.5
    for attempt in range(1, max_attempts + 1):
        try:
            resp = requests.post(
                f"{API_BASE}/prepare-pdf",
                params={"template": template},
                json=payload,
                timeout=60,
            )
        except requests.RequestException as e:
            if attempt < max_attempts:
                time.sleep(backoff)
                backoff *= 1.5
                continue
            st.session_state["error"] = f"Failed to connect to API: {e}"
            return None
        if resp.status_code != 200:
            st.session_state["error"] = f"Prepare failed: {resp.status_code} {resp.text}"
            return None
        return resp.json()
    return None


def _fetch_pdf(download_url: str) -> bytes | None:
    # The link is single-use: never retry once the server has answered
    try:
        resp = requests.get(f"{API_BASE}{download_url}", timeout=60)
    except requests.RequestException as e:
        st.session_state["error"] = f"Download failed: {e}"
        return None
    if resp.status_code == 404:
        st.session_state["error"] = "PDF not found or expired"
        return None
    if resp.status_code != 200:
        st.session_state["error"] = f"Download error: {resp.status_code} {resp.text}"
        return None
    return resp.content


def main() -> None:
    st.set_page_config(page_title="PDF Handoff Service", page_icon="📄", layout="centered")
    st.title("📄 PDF Handoff Service")
    st.caption(f"API base: {API_BASE}")

    if st.button("Restart", type="secondary"):
        _reset_state()
        st.rerun()

    if "upload_key" not in st.session_state:
        st.session_state["upload_key"] = 0
    uploaded = st.file_uploader(
        "Upload an HTML document",
        type=["html", "htm"],
        key=f"uploader-{st.session_state['upload_key']}",
    )
    pasted = st.text_area("...or paste HTML", height=200, key=f"html-{st.session_state['upload_key']}")
    template = st.selectbox("Template", TEMPLATES)
    person_name = st.text_input("Person name (used for the filename)")

    html = uploaded.getvalue().decode("utf-8", errors="replace") if uploaded else pasted
    if html and "result" not in st.session_state and st.button("Prepare PDF", type="primary"):
        with st.spinner("Rendering PDF..."):
            result = _prepare_pdf(html, template, person_name)
        if result:
            st.session_state["result"] = result
            with st.spinner("Fetching PDF..."):
                pdf_bytes = _fetch_pdf(result["downloadUrl"])
            if pdf_bytes is not None:
                st.session_state["pdf_bytes"] = pdf_bytes

    if "pdf_bytes" in st.session_state:
        result = st.session_state["result"]
        st.success(f"PDF ready: {result['filename']}")
        st.download_button(
            label="Download PDF",
            data=st.session_state["pdf_bytes"],
            file_name=result["filename"],
            mime="application/pdf",
        )

    if err := st.session_state.get("error"):
        st.error(err)


if __name__ == "__main__":
    main()
