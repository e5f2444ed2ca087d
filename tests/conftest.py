"""Pytest configuration for repository-relative imports."""

import os
import sys

import matplotlib
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

matplotlib.use("Agg")

from neofermi import Evaluator, Settings, make_rng  # noqa: E402


@pytest.fixture
def rng():
    return make_rng(12345)


@pytest.fixture
def evaluator():
    return Evaluator(Settings(sample_count=4000, seed=42))
