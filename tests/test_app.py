"""Tests for the non-UI helpers of the Streamlit app."""

import pytest

from aggregate import AggregateResult, GroupSummary
from app import prepare_run, render_upload, safe_slug, summary_frame


def test_safe_slug():
    assert safe_slug("County Jail (2024).csv") == "County_Jail_2024_csv"
    assert safe_slug("***") == "chart"


def test_prepare_run_saves_upload(tmp_path):
    run = prepare_run(tmp_path, "My Data.csv", b"ID,Ethnicity\n1,White\n")
    assert run.csv_path.read_bytes() == b"ID,Ethnicity\n1,White\n"
    assert run.csv_path.name == "My_Data.csv"
    assert run.svg_path.name == "My_Data_pie.svg"
    assert run.root.parent == tmp_path


def test_render_upload_writes_chart(tmp_path):
    run, result, svg_path, png_path = render_upload(
        tmp_path, "jail.csv", b"ID,Ethnicity\n1,White\n2,Korean\n3,White\n", cfg={},
    )
    assert result.total == 3
    assert [(s.group, s.count) for s in result.summaries] == [("White", 2), ("Asian", 1)]
    assert svg_path == str(run.svg_path)
    assert run.svg_path.exists()
    assert png_path is None


def test_render_upload_write_error_propagates(tmp_path):
    blocker = tmp_path / "runs"
    blocker.write_text("not a directory", encoding="utf-8")
    with pytest.raises(OSError):
        render_upload(blocker, "jail.csv", b"ID,Ethnicity\n1,White\n", cfg={})


def test_summary_frame_columns():
    result = AggregateResult([GroupSummary("White", 2, "100.0%")], 2)
    df = summary_frame(result)
    assert list(df.columns) == ["Group", "Count", "Share"]
    assert df.iloc[0].tolist() == ["White", 2, "100.0%"]


def test_summary_frame_empty():
    df = summary_frame(AggregateResult())
    assert df.empty
    assert list(df.columns) == ["Group", "Count", "Share"]
