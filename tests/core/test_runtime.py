"""Tests for environments and runtime records.

Critical Invariants:
- Lifecycle expiry is monotonic and inherits from the parent env
- rebuild() expires before handing over to the owner
- Actions are immutable once committed
"""

import dataclasses

import pytest

from agentreducer import Action, AgentSettings, DefaultActionType, Env, LifecycleEnv
from agentreducer.core.runtime import EnvLike


def test_env_defaults():
    env = Env()
    assert env.expired is False
    assert env.strict is True
    assert env.legacy is False
    assert env.namespace_separator == ":"


def test_env_from_settings():
    env = Env.from_settings(AgentSettings(strict=False, legacy=True, namespace_separator="/"))
    assert env.strict is False
    assert env.legacy is True
    assert env.namespace_separator == "/"
    assert env.expired is False


def test_envs_satisfy_protocol():
    parent = Env()
    assert isinstance(parent, EnvLike)
    assert isinstance(LifecycleEnv(parent), EnvLike)


def test_lifecycle_env_delegates_flags():
    parent = Env(strict=False, legacy=True, namespace_separator=".")
    env = LifecycleEnv(parent)
    assert env.parent is parent
    assert env.strict is False
    assert env.legacy is True
    assert env.namespace_separator == "."


def test_lifecycle_expire_is_permanent():
    """CRITICAL: Once expired, a lifecycle env never becomes live again."""
    env = LifecycleEnv(Env())
    assert env.expired is False
    env.expire()
    assert env.expired is True
    env.expire()
    assert env.expired is True


def test_lifecycle_follows_expired_parent():
    parent = Env()
    env = LifecycleEnv(LifecycleEnv(parent))
    parent.expired = True
    assert env.expired is True


def test_lifecycle_expire_does_not_touch_parent():
    parent = Env()
    LifecycleEnv(parent).expire()
    assert parent.expired is False


def test_rebuild_expires_then_calls_owner():
    seen = []
    env = LifecycleEnv(Env(), on_rebuild=lambda: seen.append(env.expired))
    env.rebuild()
    assert seen == [True]
    assert env.expired is True


def test_rebuild_without_owner_only_expires():
    env = LifecycleEnv(Env())
    env.rebuild()
    assert env.expired is True


def test_action_is_frozen():
    action = Action(type="step_up", state=1, prev_state=0)
    assert action.params == ()
    with pytest.raises(dataclasses.FrozenInstanceError):
        action.state = 2  # type: ignore[misc]


def test_reserved_action_types_are_strings():
    assert DefaultActionType.MUTE_STATE == "@@AGENT_MUTE_STATE"
    assert DefaultActionType.INITIAL_STATE == "@@AGENT_REDUCER_INITIAL_STATE"
