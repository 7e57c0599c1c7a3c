import os

import matplotlib
import pytest

matplotlib.use("Agg")

TRACE_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "traces")


@pytest.fixture
def yi_trace():
    return os.path.join(TRACE_DIR, "yi.trace")
