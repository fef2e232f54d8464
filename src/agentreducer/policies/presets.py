"""Ready-made middleware combinations.

Timing and ordering policies are paired with take_future_resolve so async
methods commit their settled value. The `*_assignable` variants also merge
mapping results onto the current state.

Usage:
    methods = MethodMiddlewares()

    class UserModel:
        state = {"id": 0, "name": ""}

        @methods.attach(MiddlewarePresets.take_latest_assignable())
        async def fetch_user(self, user_id: int) -> dict:
            ...
"""

from __future__ import annotations

from agentreducer.core.middleware import Middleware, apply_middlewares
from agentreducer.policies.middlewares import (
    take_assignable,
    take_future_resolve,
    take_latest,
    take_unstable_block,
    take_unstable_debounce,
    take_unstable_throttle,
)


class MiddlewarePresets:
    """Namespace of preset middleware factories."""

    @staticmethod
    def take_assignable() -> Middleware:
        return take_assignable()

    @staticmethod
    def take_future_resolve() -> Middleware:
        return take_future_resolve()

    @staticmethod
    def take_latest() -> Middleware:
        return apply_middlewares(take_latest(), take_future_resolve())

    @staticmethod
    def take_block(block_ms: float | None = None) -> Middleware:
        return apply_middlewares(take_unstable_block(block_ms), take_future_resolve())

    @staticmethod
    def take_throttle(wait_ms: float) -> Middleware:
        return apply_middlewares(take_unstable_throttle(wait_ms), take_future_resolve())

    @staticmethod
    def take_debounce(wait_ms: float, leading: bool = False) -> Middleware:
        return apply_middlewares(take_unstable_debounce(wait_ms, leading), take_future_resolve())

    @staticmethod
    def take_future_resolve_assignable() -> Middleware:
        return apply_middlewares(take_future_resolve(), take_assignable())

    @staticmethod
    def take_latest_assignable() -> Middleware:
        return apply_middlewares(take_latest(), take_future_resolve(), take_assignable())

    @staticmethod
    def take_block_assignable(block_ms: float | None = None) -> Middleware:
        return apply_middlewares(
            take_unstable_block(block_ms), take_future_resolve(), take_assignable()
        )

    @staticmethod
    def take_throttle_assignable(wait_ms: float) -> Middleware:
        return apply_middlewares(
            take_unstable_throttle(wait_ms), take_future_resolve(), take_assignable()
        )

    @staticmethod
    def take_debounce_assignable(wait_ms: float, leading: bool = False) -> Middleware:
        return apply_middlewares(
            take_unstable_debounce(wait_ms, leading), take_future_resolve(), take_assignable()
        )
