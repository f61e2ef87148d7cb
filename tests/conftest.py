"""
Pytest fixtures for iterstats tests.
"""
from __future__ import annotations

from typing import List, Optional

import numpy as np
import pytest


@pytest.fixture
def scenario_values() -> List[float]:
    """The five-value stream used throughout the documentation."""
    return [1.0, 2.0, 3.0, 4.0, 5.0]


@pytest.fixture
def random_values() -> List[float]:
    """A reproducible stream of normally distributed values."""
    rng = np.random.default_rng(42)
    return rng.normal(loc=5.0, scale=2.0, size=1000).tolist()


@pytest.fixture
def mock_hooks():
    """Create mock application hooks that record progress reports."""
    class MockHooks:
        def __init__(self, stop_after: Optional[int] = None):
            self.steps = []
            self.infos = []
            self.stop_after = stop_after

        def report_step(self, info: str = "", target: Optional[int] = None, reset_counter: bool = False, plus_step: int = 1) -> None:
            if info:
                self.infos.append(info)
            if plus_step:
                self.steps.append(plus_step)

        def stop_requested(self) -> bool:
            return self.stop_after is not None and len(self.steps) >= self.stop_after

    return MockHooks
