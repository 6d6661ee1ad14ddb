"""Pytest configuration: src/ on sys.path, headless matplotlib, shared fixtures."""

import pathlib
import sys

import matplotlib

matplotlib.use("Agg")

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from tests.factories import make_gdf  # noqa: E402


@pytest.fixture
def points_gdf():
    return make_gdf()


@pytest.fixture
def tagged(points_gdf):
    from sftime import tag
    return tag(points_gdf, "time")


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    import matplotlib.pyplot as plt
    plt.close("all")
