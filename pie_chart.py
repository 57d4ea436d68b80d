# pie_chart.py
# Pie chart (SVG) of demographic counts from a CSV, grouped into race categories.
# Slices carry hover tooltips (<title>), legend on the right, total summary below.
# Reads defaults from Configs/config.toml ([paths], [csv], [chart], [summary], [groups]).
# Requires: pip install svgwrite pandas  (optional: cairosvg if rsvg-convert not available)

import argparse
import math
import os
import shutil
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd
import svgwrite

try:
    import tomllib  # py3.11+
except ImportError:
    import tomli as tomllib  # type: ignore

from aggregate import (
    DEFAULT_GROUPS,
    FALLBACK_GROUP,
    AggregateResult,
    GroupSummary,
    aggregate,
    normalize_groups,
)

# --- anchor everything to this file's folder ---
HERE = Path(__file__).parent
DEFAULT_CFG_PATH = HERE / "Configs" / "config.toml"

DEFAULT_COLORS = ["#6050DC", "#D52DB7", "#FF2E7E", "#FF6B45", "#FFAB05", "#8A2BE2"]


def load_config(path: str | Path | None = None) -> dict:
    cfg_path = Path(path) if path else DEFAULT_CFG_PATH
    if cfg_path.exists():
        with open(cfg_path, "rb") as f:
            return tomllib.load(f)
    if path:
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    return {}


_CFG = load_config()

# Read defaults from config, but keep sane fallbacks
CSV_PATH = str(HERE / _CFG.get("paths", {}).get("csv", "data/demographics.csv"))
CHART_DIR = str(HERE / _CFG.get("paths", {}).get("chart_dir", "charts"))


def chart_settings(cfg: dict) -> dict:
    """Merge [chart] / [summary] config over the built-in chart defaults."""
    chart = cfg.get("chart", {}) or {}
    return {
        "width": int(chart.get("width", 500)),
        "height": int(chart.get("height", 400)),
        "margin": int(chart.get("margin", 30)),
        "legend_width": int(chart.get("legend_width", 220)),
        "colors": list(chart.get("colors", DEFAULT_COLORS)) or DEFAULT_COLORS,
        "stroke": chart.get("stroke", "white"),
        "stroke_width": float(chart.get("stroke_width", 2)),
        "start_deg": float(chart.get("start_deg", -90.0)),
        "font_family": chart.get("font_family", "sans-serif"),
        "legend_font_size": int(chart.get("legend_font_size", 14)),
        "summary_font_size": int(chart.get("summary_font_size", 16)),
        "text_color": chart.get("text_color", "#333333"),
        "summary_label": (cfg.get("summary", {}) or {}).get("label", "Total inmates"),
    }


def group_settings(cfg: dict) -> Tuple[Dict[str, Tuple[str, ...]], str]:
    groups = cfg.get("groups")
    fallback = (cfg.get("aggregate", {}) or {}).get("fallback", FALLBACK_GROUP)
    if not groups:
        return dict(DEFAULT_GROUPS), fallback
    return normalize_groups(groups), fallback


# =======================
# CSV input
# =======================
def load_records(csv_path: str | Path, column: str = "Ethnicity") -> pd.Series:
    """
    Read the ethnicity column as strings. Cells are kept verbatim: blank cells
    stay as "" and padded labels keep their whitespace, so both are grouped
    like any other literal label.
    """
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    if column not in df.columns:
        raise ValueError(
            f"Column '{column}' not found in '{csv_path}'. Columns present: {list(df.columns)}"
        )
    return df[column].astype(str)


# =======================
# Geometry helpers
# =======================
def _point(cx, cy, r, deg):
    a = math.radians(deg)
    return cx + r * math.cos(a), cy + r * math.sin(a)


def _pie_slice_path(cx, cy, r, a0_deg, a1_deg):
    x0, y0 = _point(cx, cy, r, a0_deg)
    x1, y1 = _point(cx, cy, r, a1_deg)
    large = 1 if (a1_deg - a0_deg) % 360 > 180 else 0
    return " ".join([
        f"M {cx:.3f},{cy:.3f}",
        f"L {x0:.3f},{y0:.3f}",
        f"A {r:.3f},{r:.3f} 0 {large} 1 {x1:.3f},{y1:.3f}",
        "Z",
    ])


def slice_angles(summaries: List[GroupSummary], start_deg: float = -90.0) -> List[Tuple[float, float]]:
    """(start, end) angle in degrees per summary, clockwise, in the given order."""
    total = sum(s.count for s in summaries)
    out: List[Tuple[float, float]] = []
    if total <= 0:
        return out
    angle = float(start_deg)
    for s in summaries:
        sweep = 360.0 * s.count / total
        out.append((angle, angle + sweep))
        angle += sweep
    return out


# =======================
# Colors
# =======================
def color_map(groups: Iterable[str], palette: List[str]) -> Dict[str, str]:
    """Ordinal scale: i-th group gets the i-th palette color, cycling when groups outnumber colors."""
    labels = list(groups)
    return {lab: palette[i % len(palette)] for i, lab in enumerate(labels)}


def tooltip_text(s: GroupSummary) -> str:
    return f"{s.group}\nCount: {s.count:,}\n{s.percentage}"


# =======================
# Renderer
# =======================
def pie_svg(
    svg_path: str,
    result: AggregateResult,
    width: int = 500,
    height: int = 400,
    margin: int = 30,
    legend_width: int = 220,
    colors: Optional[List[str]] = None,
    stroke: str = "white",
    stroke_width: float = 2,
    start_deg: float = -90.0,       # 12 o'clock start, clockwise
    font_family: str = "sans-serif",
    legend_font_size: int = 14,
    summary_font_size: int = 16,
    text_color: str = "#333333",
    summary_label: str = "Total inmates",
) -> svgwrite.Drawing:
    palette = colors or DEFAULT_COLORS
    summaries = result.summaries
    radius = min(width, height) / 2 - margin
    cx, cy = width / 2, height / 2
    summary_h = summary_font_size * 2
    total_w, total_h = width + legend_width, height + summary_h

    dwg = svgwrite.Drawing(svg_path, size=(total_w, total_h), profile="full")
    dwg.attribs["viewBox"] = f"0 0 {total_w} {total_h}"

    fills = color_map((s.group for s in summaries), palette)

    # slices
    chart = dwg.g(class_="pie-chart-svg")
    for s, (a0, a1) in zip(summaries, slice_angles(summaries, start_deg)):
        if a1 - a0 >= 359.999:
            shape = dwg.circle(center=(cx, cy), r=radius)
        else:
            shape = dwg.path(d=_pie_slice_path(cx, cy, radius, a0, a1))
        shape.fill(fills[s.group]).stroke(stroke, width=stroke_width)
        shape.set_desc(title=tooltip_text(s))
        arc = dwg.g(class_="arc")
        arc.add(shape)
        chart.add(arc)
    dwg.add(chart)

    # legend
    legend = dwg.g(class_="legend", font_family=font_family, font_size=legend_font_size, fill=text_color)
    swatch = legend_font_size
    row_h = legend_font_size + 10
    x0 = width + 10
    y0 = max(margin, cy - row_h * len(summaries) / 2)
    for i, s in enumerate(summaries):
        y = y0 + i * row_h
        item = dwg.g(class_="legend-item")
        item.add(dwg.rect(insert=(x0, y), size=(swatch, swatch), fill=fills[s.group], class_="legend-color"))
        item.add(dwg.text(f"{s.group}: {s.percentage}", insert=(x0 + swatch + 8, y + swatch - 2),
                          class_="legend-text"))
        legend.add(item)
    dwg.add(legend)

    # summary
    dwg.add(dwg.text(
        f"{summary_label}: {result.total:,}",
        insert=(width / 2, height + summary_font_size),
        text_anchor="middle",
        font_family=font_family,
        font_size=summary_font_size,
        fill=text_color,
        id="summary",
    ))

    dwg.save()
    return dwg


def _to_png(svg_path: str, png_path: str) -> bool:
    """Convert SVG → PNG. Prefer rsvg-convert; fallback to cairosvg if installed."""
    rsvg = shutil.which("rsvg-convert")
    if rsvg:
        # drop a PNG left over from an earlier run so it cannot pass for fresh output
        Path(png_path).unlink(missing_ok=True)
        status = os.system(f'"{rsvg}" "{svg_path}" -a -f png -o "{png_path}"')
        if status != 0 or not Path(png_path).exists():
            print(f"[warn] PNG not created for {svg_path}: rsvg-convert exited with {status}")
            return False
        return True
    try:
        import cairosvg  # type: ignore
        cairosvg.svg2png(url=svg_path, write_to=png_path)
        return True
    except Exception as exc:
        print(f"[warn] PNG not created for {svg_path}: {exc}")
        return False


# =======================
# CSV → chart
# =======================
def generate_pie_chart(
    csv_path: str = CSV_PATH,
    svg_path: str | None = None,
    *,
    cfg: dict | None = None,
    png: bool = False,
) -> Tuple[AggregateResult, str, str | None]:
    cfg = _CFG if cfg is None else cfg
    column = (cfg.get("csv", {}) or {}).get("column", "Ethnicity")
    groups, fallback = group_settings(cfg)

    records = load_records(csv_path, column=column)
    result = aggregate(records, groups, fallback=fallback)
    if result.total == 0:
        print(f"[warn] No records in {csv_path}; chart will be empty")

    if svg_path is None:
        svg_path = os.path.join(CHART_DIR, f"{Path(csv_path).stem}_pie.svg")
    Path(svg_path).parent.mkdir(parents=True, exist_ok=True)

    pie_svg(svg_path, result, **chart_settings(cfg))

    png_path = None
    if png:
        png_path = str(Path(svg_path).with_suffix(".png"))
        if not _to_png(svg_path, png_path):
            png_path = None

    return result, svg_path, png_path


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Render a grouped demographics pie chart from a CSV.")
    parser.add_argument("csv", nargs="?", default=None, help="input CSV (default: [paths] csv)")
    parser.add_argument("-o", "--output", default=None, help="output SVG path")
    parser.add_argument("--config", default=None, help="alternate config.toml")
    parser.add_argument("--png", action="store_true", help="also write a PNG next to the SVG")
    args = parser.parse_args(argv)

    cfg = load_config(args.config) if args.config else _CFG
    csv_path = args.csv or str(HERE / cfg.get("paths", {}).get("csv", "data/demographics.csv"))

    result, svg_path, png_path = generate_pie_chart(csv_path, args.output, cfg=cfg, png=args.png)
    for s in result.summaries:
        print(f"- {s.group}: {s.count:,} ({s.percentage})")
    print(f"[OK] {result.total:,} records -> {svg_path}" + (f" | {png_path}" if png_path else ""))
    return 0


if __name__ == "__main__":
    sys.exit(main())
