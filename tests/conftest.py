"""Shared fixtures for the activity points tests."""

import os
import sys

import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from activity_points.core.catalog import load_catalog
from activity_points.core.points_engine import PointsEngine

REFERENCE_DIR = os.path.join(PROJECT_ROOT, 'tests', 'reference_data')


@pytest.fixture(scope='session')
def catalog():
    """The embedded catalog, loaded once."""
    return load_catalog()


@pytest.fixture(scope='session')
def engine(catalog):
    return PointsEngine(catalog)


@pytest.fixture(scope='session')
def reference_dir():
    return REFERENCE_DIR
