"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from agentreducer import create
from agentreducer.sharing import ModelRegistry


class FixtureCounter:
    state = 0

    def step_up(self) -> int:
        """Increase the count by one."""
        return self.state + 1

    def step_down(self) -> int:
        return self.state - 1

    def step(self, amount: int) -> int:
        return self.state + amount


@pytest.fixture
def counter_cls():
    return FixtureCounter


@pytest.fixture
def counter():
    """Reducer over a fresh counter, not connected."""
    return create(FixtureCounter)


@pytest.fixture
def registry():
    """Isolated model registry."""
    return ModelRegistry()
