"""Shared test fixtures."""

from __future__ import annotations

import pytest


SVG_NS = "{http://www.w3.org/2000/svg}"

# Mirrors data/demographics.csv: 20 rows, the last one with a blank ethnicity.
SAMPLE_CSV = """ID,Ethnicity
1,Black
2,White
3,Hispanic
4,Mexican
5,Black
6,White
7,Chinese
8,Samoan
9,Unknown
10,Black
11,Mexican
12,Filipino
13,White
14,Black
15,Salvadorian
16,Laotian
17,Hawaiian
18,Black
19,Vietnamese
20,
"""

SMALL_GROUPS = {"A": ["x", "y"], "B": ["z"]}


@pytest.fixture
def sample_csv(tmp_path):
    path = tmp_path / "demographics.csv"
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path


@pytest.fixture
def empty_csv(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("ID,Ethnicity\n", encoding="utf-8")
    return path


@pytest.fixture
def small_groups():
    return {k: list(v) for k, v in SMALL_GROUPS.items()}
