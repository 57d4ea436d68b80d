#!/usr/bin/env python3
"""
Streamlit UI for the demographics pie chart.
Upload a CSV with an ethnicity column, render the grouped pie chart
(pie_chart.py, driven by config.toml) and download the SVG.
"""
from __future__ import annotations
import traceback
from dataclasses import dataclass
from pathlib import Path

import pandas as pd
import streamlit as st

from aggregate import AggregateResult
from pie_chart import chart_settings, generate_pie_chart, load_config

# ----------------------------
# Project layout & constants
# ----------------------------
HERE = Path(__file__).resolve().parent
RUNS_DIR = HERE / "runs"

# ----------------------------
# Helpers
# ----------------------------

def log(msg: str) -> None:
    st.session_state.setdefault("log", [])
    st.session_state.log.append(msg)


def reset_log() -> None:
    st.session_state["log"] = []


def safe_slug(text: str) -> str:
    s = "".join(ch if ch.isalnum() else "_" for ch in str(text).strip())
    while "__" in s:
        s = s.replace("__", "_")
    return s.strip("_") or "chart"

# ----------------------------
# Data containers
# ----------------------------

@dataclass
class ChartRun:
    root: Path
    csv_path: Path
    svg_path: Path

# ----------------------------
# Core steps
# ----------------------------

def prepare_run(root: Path, upload_name: str, data: bytes) -> ChartRun:
    """Save the uploaded CSV under ./runs/YYYYMMDD_HHMMSS and pick the SVG path next to it."""
    run_root = root / pd.Timestamp.now(tz=None).strftime("%Y%m%d_%H%M%S")
    run_root.mkdir(parents=True, exist_ok=True)
    stem = safe_slug(Path(upload_name).stem)
    csv_path = run_root / f"{stem}.csv"
    with open(csv_path, "wb") as f:
        f.write(data)
    return ChartRun(run_root, csv_path, run_root / f"{stem}_pie.svg")


def render_upload(root: Path, upload_name: str, data: bytes, cfg: dict, png: bool = False):
    """Save the upload and render it. Write and render errors propagate to the caller."""
    chart_run = prepare_run(root, upload_name, data)
    result, svg_path, png_path = generate_pie_chart(
        str(chart_run.csv_path), str(chart_run.svg_path), cfg=cfg, png=png,
    )
    return chart_run, result, svg_path, png_path


def summary_frame(result: AggregateResult) -> pd.DataFrame:
    df = pd.DataFrame(result.as_records(), columns=["group", "count", "percentage"])
    return df.rename(columns={"group": "Group", "count": "Count", "percentage": "Share"})

# ----------------------------
# Streamlit UI
# ----------------------------

def main() -> None:
    st.set_page_config(page_title="Demographics Pie Chart", page_icon="📊", layout="centered")
    if "log" not in st.session_state:
        reset_log()

    cfg = load_config()
    settings = chart_settings(cfg)

    st.title("Demographics Pie Chart")
    st.caption("Upload a CSV, group ethnicities into race categories and render the chart.")

    with st.sidebar:
        st.header("Options")
        column = st.text_input("Ethnicity column", value=cfg.get("csv", {}).get("column", "Ethnicity"))
        summary_label = st.text_input("Summary label", value=settings["summary_label"])
        want_png = st.checkbox("Also build PNG", value=False)

    uploaded = st.file_uploader("Upload CSV", type=["csv"], accept_multiple_files=False)

    st.divider()
    run = st.button("Render chart", type="primary", use_container_width=True, disabled=uploaded is None)

    st.write("### Log")
    log_area = st.empty()
    log_area.code("\n".join(st.session_state.log) or "Ready.", language="text")

    if not run:
        return

    reset_log()
    if not uploaded:
        st.error("Please upload a CSV file first.")
        return

    run_cfg = {
        **cfg,
        "csv": {**cfg.get("csv", {}), "column": column},
        "summary": {**cfg.get("summary", {}), "label": summary_label},
    }

    try:
        log(f"▶️ Rendering {uploaded.name} …")
        _, result, svg_path, png_path = render_upload(
            RUNS_DIR, uploaded.name, uploaded.read(), run_cfg, png=want_png,
        )
        log(f"✅ {result.total:,} records in {len(result.summaries)} group(s) → {Path(svg_path).name}")
        if want_png and not png_path:
            log("⚠️ PNG conversion unavailable; SVG only.")
    except Exception as e:
        st.error("Render failed. See log below.")
        log(f"❌ Fatal error: {e}\n{traceback.format_exc()}")
        log_area.code("\n".join(st.session_state.log), language="text")
        return

    log_area.code("\n".join(st.session_state.log), language="text")

    if result.total == 0:
        st.warning("The CSV has no records.")

    svg_text = Path(svg_path).read_text(encoding="utf-8")
    st.markdown(svg_text, unsafe_allow_html=True)
    st.dataframe(summary_frame(result), hide_index=True, use_container_width=True)

    st.download_button(
        "Download SVG",
        data=svg_text,
        file_name=Path(svg_path).name,
        mime="image/svg+xml",
        use_container_width=True,
    )
    if png_path:
        st.download_button(
            "Download PNG",
            data=Path(png_path).read_bytes(),
            file_name=Path(png_path).name,
            mime="image/png",
            use_container_width=True,
        )


if __name__ == "__main__":
    main()
