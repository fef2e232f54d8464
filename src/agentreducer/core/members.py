"""Detection of a model's action methods."""

from __future__ import annotations

import functools
import inspect
import types
from typing import Any

_METHOD_MEMBERS = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    staticmethod,
    classmethod,
    functools.partial,
)


def is_action_name(name: str) -> bool:
    """Public names other than `state` can be action methods."""
    return not name.startswith("_") and name != "state"


def is_action_member(model: Any, name: str) -> bool:
    """Check if `name` on model is a method the agent should dispatch.

    Looks the member up statically so properties are not evaluated.
    """
    if not is_action_name(name):
        return False
    try:
        member = inspect.getattr_static(model, name)
    except AttributeError:
        return False
    return isinstance(member, _METHOD_MEMBERS)


def action_method_names(model: Any) -> frozenset[str]:
    """Collect the names of all action methods on model."""
    return frozenset(name for name in dir(model) if is_action_member(model, name))
