from __future__ import annotations

import functools
import inspect
from typing import Any, Callable, List, TypeVar

from .policy import Policy


F = TypeVar("F", bound=Callable[..., Any])

_READ_ONLY_ATTR = "__walletgate_read_only__"

# Well-known mutating operations across wallet and protocol kinds.
MUTATING_METHODS = (
    "send_transaction",
    "transfer",
    "approve",
    "sign",
    "sign_typed_data",
    "bridge",
    "swap",
    "stake",
    "unstake",
    "supply",
    "withdraw",
    "borrow",
    "repay",
    "buy",
    "sell",
)


def read_only(func: F) -> F:
    """
    Mark a method as non-mutating so the capability scan leaves it ungated.

    A policy that names the method explicitly still gates it.
    """
    setattr(func, _READ_ONLY_ATTR, True)
    return func


def is_read_only(value: Any) -> bool:
    return bool(getattr(value, _READ_ONLY_ATTR, False))


def scan_capabilities(instance: Any) -> List[str]:
    """
    Collect the public callable members of an instance.

    Walks the instance's own attributes, then its class hierarchy up to (but
    excluding) `object`. The most-derived definition of a name decides whether
    it is collected. Not cached: instances of the same class may carry
    different own members.
    """
    names: List[str] = []
    seen: set[str] = set()

    def consider(name: str, raw: Any) -> None:
        if name in seen or name.startswith("_"):
            return
        seen.add(name)
        if inspect.isdatadescriptor(raw) or isinstance(raw, functools.cached_property) or inspect.isclass(raw):
            return
        value = getattr(instance, name, None)
        if not callable(value) or is_read_only(value):
            return
        names.append(name)

    own = getattr(instance, "__dict__", None)
    if isinstance(own, dict):
        for name, raw in list(own.items()):
            consider(name, raw)

    for klass in type(instance).__mro__:
        if klass is object:
            break
        for name, raw in list(vars(klass).items()):
            consider(name, raw)

    return names


def resolve_methods(policy: Policy, instance: Any) -> List[str]:
    method = policy.method
    if method is None:
        return scan_capabilities(instance)
    if isinstance(method, str):
        return [method]
    return list(method)
