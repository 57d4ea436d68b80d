# aggregate.py
# Group raw ethnicity labels into race categories and rank the groups by count.
# Pure functions only; pie_chart.py and app.py feed it records and draw the result.
# Requires: pip install pandas

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Mapping, Tuple

import pandas as pd

FALLBACK_GROUP = "Other"

# Reference group table. Order matters: the first group listing a label owns it.
DEFAULT_GROUPS: Dict[str, Tuple[str, ...]] = {
    "Black": ("Black",),
    "White": ("White",),
    "Hispanic": ("Hispanic", "Mexican", "Salvadorian", "Puerto Rican", "Guatemalan",
                 "Cuban", "Columbian", "Nicaraguan"),
    "Asian": ("Other Asian", "Chinese", "Cambodian", "Korean", "Indian", "Japanese",
              "Thai", "Vietnamese", "Filipino"),
    "Pacific Islander": ("Pacific Islander", "Samoan", "Hawaiian", "Guamanian"),
    "Other": ("Other", "American Indian", "Laotian", "Jamaican", "Unknown"),
}


@dataclass(frozen=True)
class GroupSummary:
    group: str
    count: int
    percentage: str


@dataclass
class AggregateResult:
    summaries: List[GroupSummary] = field(default_factory=list)
    total: int = 0

    def as_records(self) -> List[dict]:
        """Plain dicts, handy for DataFrames and printing."""
        return [
            {"group": s.group, "count": s.count, "percentage": s.percentage}
            for s in self.summaries
        ]


# =======================
# Group table helpers
# =======================
def normalize_groups(raw: Mapping[str, Iterable[str]]) -> Dict[str, Tuple[str, ...]]:
    """
    Freeze a group table (e.g. the [groups] table of config.toml) into
    name -> tuple of labels, keeping definition order.
    Names and labels are stripped; duplicate labels inside a group are dropped.
    """
    groups: Dict[str, Tuple[str, ...]] = {}
    for name, members in (raw or {}).items():
        key = str(name).strip()
        if not key:
            raise ValueError("Group names must be non-empty strings")
        if isinstance(members, str):
            members = [members]
        seen: List[str] = []
        for m in members or []:
            lab = str(m).strip()
            if lab not in seen:
                seen.append(lab)
        groups[key] = tuple(seen)
    return groups


def build_label_index(group_defs: Mapping[str, Iterable[str]]) -> Dict[str, str]:
    """Reverse lookup label -> group. A label listed twice stays with the earlier group."""
    index: Dict[str, str] = {}
    for group, members in group_defs.items():
        # a bare string is one label, not a sequence of characters
        if isinstance(members, str):
            members = (members,)
        for label in members:
            index.setdefault(label, group)
    return index


def format_percentage(count: int, total: int) -> str:
    if total <= 0:
        return "0.0%"
    # half-up on the exact binary value, same as JS toFixed(1)
    pct = Decimal(count / total * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{pct}%"


# =======================
# Aggregation
# =======================
def aggregate(
    records: Iterable[str],
    group_defs: Mapping[str, Iterable[str]] = DEFAULT_GROUPS,
    fallback: str = FALLBACK_GROUP,
) -> AggregateResult:
    """
    Count records per group and rank the groups.

    `records` is any iterable of raw labels (a pandas Series from the CSV works).
    Labels no group lists go to `fallback`, which is appended to the group
    order if the table does not define it. Zero-count groups are dropped and
    the rest are sorted by count descending; ties keep the table's order.
    """
    labels = records if isinstance(records, pd.Series) else pd.Series(list(records), dtype=object)
    total = int(len(labels))

    counts: Dict[str, int] = {group: 0 for group in group_defs}
    counts.setdefault(fallback, 0)

    index = build_label_index(group_defs)
    # NaN only shows up when the caller parsed blanks as missing; treat it as a label too
    frequencies = labels.value_counts(dropna=False, sort=False)
    for label, freq in frequencies.items():
        group = index.get(label, fallback) if not pd.isna(label) else index.get("", fallback)
        counts[group] += int(freq)

    summaries = [
        GroupSummary(group, count, format_percentage(count, total))
        for group, count in counts.items()
        if count > 0
    ]
    summaries.sort(key=lambda s: s.count, reverse=True)
    return AggregateResult(summaries=summaries, total=total)
