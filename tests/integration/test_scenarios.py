"""End-to-end journeys through create, middleware, and sharing."""

import asyncio

import pytest

from agentreducer import (
    MethodMiddlewares,
    MiddlewarePresets,
    create,
    sharing,
    take_future_resolve,
    take_unstable_debounce,
    weak_sharing,
)

methods = MethodMiddlewares()


class Counter:
    state = 0

    def step_up(self) -> int:
        return self.state + 1


class UserModel:
    state = {"id": 0}

    @methods.attach(MiddlewarePresets.take_latest())
    async def fetch_user(self, user_id: int, delay_ms: int) -> dict:
        await asyncio.sleep(delay_ms / 1000)
        return {"id": user_id}


class TodoList:
    state = ()

    async def fetch(self) -> tuple:
        await asyncio.sleep(0.01)
        return ("write tests", "ship")


class SearchModel:
    state = ""

    def search(self, keyword: str) -> str:
        return keyword


def test_counter_steps_up_twice():
    reducer = create(Counter)
    reducer.connect()
    reducer.agent.step_up()
    reducer.agent.step_up()
    assert reducer.state == 2
    reducer.disconnect()


@pytest.mark.asyncio
async def test_latest_fetch_wins():
    reducer = create(UserModel, method_middlewares=methods)
    first = reducer.agent.fetch_user(1, 200)
    second = reducer.agent.fetch_user(2, 100)
    await asyncio.gather(first, second)
    assert reducer.state["id"] == 2


@pytest.mark.asyncio
async def test_shared_todo_list_notifies_other_wrapper():
    ref = sharing(lambda: TodoList)
    first = create(ref.current, take_future_resolve())
    second = create(ref.current, take_future_resolve())
    first_seen, second_seen = [], []
    first.connect(first_seen.append)
    second.connect(second_seen.append)

    next_state = await first.agent.fetch()

    assert second_seen == [next_state]
    assert first_seen == []
    assert second.state is next_state
    first.disconnect()
    second.disconnect()


@pytest.mark.asyncio
async def test_debounce_keeps_only_second_call():
    reducer = create(SearchModel, take_unstable_debounce(200, leading=False))
    stop = reducer.record_changes()
    reducer.agent.search("first")
    reducer.agent.search("second")
    await asyncio.sleep(0.1)
    assert reducer.state == ""
    await asyncio.sleep(0.3)
    assert reducer.state == "second"
    assert len(stop()) == 1


@pytest.mark.asyncio
async def test_weak_todo_list_starts_over_after_everyone_leaves():
    ref = weak_sharing(lambda: TodoList)
    reducer = create(ref.current, take_future_resolve())
    reducer.connect()
    await reducer.agent.fetch()
    assert ref.current.state == ("write tests", "ship")
    reducer.disconnect()
    assert ref.current.state == ()
