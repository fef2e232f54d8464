"""Tests for middle actions.

Critical Invariants:
- A middle action's own return value is never committed
- Inside a method body `self.agent` is a branch; outside it is the original agent
- With take_latest only the most recently started call commits through its branch
"""

import asyncio

import pytest

from agentreducer import (
    ConfigurationError,
    MethodMiddlewares,
    MiddleActions,
    MiddlewarePresets,
    NotMutableError,
    create,
    subscribe_error,
    take_latest,
    take_unstable_block,
    use_middle_actions,
)
from agentreducer.agent import BranchAgent, MiddleActionsProxy

methods = MethodMiddlewares()


class CountAgent:
    state = 0

    def step_up(self):
        return self.state + 1

    def sum(self, *counts):
        return self.state + sum(counts)


class CountBesides(MiddleActions):
    id = 1

    async def sum_after(self, count, delay):
        await asyncio.sleep(delay)
        return self.agent.sum(count)

    def step_twice(self):
        self.agent.step_up()
        self.agent.step_up()
        return "done"

    def remember(self, value):
        self.last = value
        return value

    def current_agent(self):
        return self.agent

    async def fail(self):
        raise LookupError("nothing to count")

    @methods.attach(take_unstable_block())
    async def guarded(self, delay):
        await asyncio.sleep(delay)
        return self.agent.step_up()


def test_methods_are_memoized_and_agent_is_original():
    reducer = create(CountAgent)
    actions = use_middle_actions(CountBesides, agent=reducer.agent)
    assert isinstance(actions, MiddleActionsProxy)
    assert actions.step_twice is actions.step_twice
    assert actions.agent is reducer.agent
    assert actions.id == 1


def test_body_commits_through_a_branch_and_result_is_returned():
    reducer = create(CountAgent)
    actions = use_middle_actions(CountBesides, agent=reducer.agent)
    assert actions.step_twice() == "done"
    assert reducer.state == 2
    inner = actions.current_agent()
    assert inner is not reducer.agent
    assert not isinstance(inner, BranchAgent)


def test_attribute_writes_reach_the_instance():
    instance = CountBesides(create(CountAgent).agent)
    actions = use_middle_actions(instance)
    actions.remember(7)
    assert instance.last == 7
    actions.id = 5
    assert instance.id == 5
    with pytest.raises(NotMutableError):
        actions.remember = print


@pytest.mark.asyncio
async def test_take_latest_keeps_only_the_newest_call():
    """CRITICAL: An older call finishing late commits nothing."""
    reducer = create(CountAgent)
    actions = use_middle_actions(CountBesides, MiddlewarePresets.take_latest(), agent=reducer.agent)
    first = actions.sum_after(3, 0.15)
    second = actions.sum_after(1, 0.05)
    await asyncio.gather(first, second)
    assert reducer.state == 1


@pytest.mark.asyncio
async def test_method_attached_middleware_vetoes():
    reducer = create(CountAgent)
    actions = use_middle_actions(CountBesides, agent=reducer.agent, method_middlewares=methods)
    first = actions.guarded(0.05)
    assert actions.guarded(0) is None
    await first
    assert reducer.state == 1


@pytest.mark.asyncio
async def test_errors_reach_the_agent_model_listeners():
    reducer = create(CountAgent)
    seen = []
    subscribe_error(reducer.model, lambda error, method_name: seen.append((type(error), method_name)))
    actions = use_middle_actions(
        CountBesides, MiddlewarePresets.take_future_resolve(), agent=reducer.agent
    )
    await actions.fail()
    assert seen == [(LookupError, "fail")]


def test_class_without_agent_raises():
    with pytest.raises(ConfigurationError):
        use_middle_actions(CountBesides)


def test_instance_with_foreign_agent_raises():
    with pytest.raises(ConfigurationError):
        use_middle_actions(CountBesides(CountAgent()))


def test_plain_middleware_works_without_agent():
    actions = use_middle_actions(CountBesides())
    assert actions.remember(3) == 3
    assert actions.agent is None


def test_lifecycle_middleware_without_agent_raises_on_call():
    actions = use_middle_actions(CountBesides(), take_latest())
    with pytest.raises(ConfigurationError):
        actions.remember(1)
