from __future__ import annotations

import functools
import inspect
import weakref
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

from .errors import GateError
from .evaluator import run_policies
from .method_resolver import resolve_methods
from .policy import Policy
from .scope import PolicyTarget, matches
from ..trace.trace_emitter import TraceEmitter


_MISSING = object()


@dataclass
class _GateState:
    chains: Dict[str, List[Policy]] = field(default_factory=dict)
    wrapped: Set[str] = field(default_factory=set)
    # Per method: how many live policies the call-time catch-up has seen.
    synced: Dict[str, int] = field(default_factory=dict)
    # Per method: the instance attribute the checkpoint shadows, or _MISSING.
    shadowed: Dict[str, Any] = field(default_factory=dict)
    finalizer: Optional[weakref.finalize] = None


class PolicyGate:
    """
    Installs policy checkpoints on account and protocol instances.

    Bookkeeping lives in a side table keyed by instance identity, never on the
    instance itself. A checkpoint is an instance attribute shadowing the
    method; the instance's type is left untouched.

    Invariants:
    - a method is wrapped at most once per instance;
    - chains are per-instance and follow global registration order;
    - the chain is looked up when the method is called, so policies
      registered after wrapping still apply.
    """

    def __init__(self, policies: Sequence[Policy], trace: Optional[TraceEmitter] = None):
        self._policies = policies
        self._trace = trace
        self._states: Dict[int, _GateState] = {}

    def apply(self, instance: Any, scope: PolicyTarget, candidates: Optional[Sequence[Policy]] = None) -> Any:
        if candidates is None:
            candidates = self._policies

        gated: List[str] = []
        for policy in candidates:
            if not matches(policy.target, scope):
                continue
            for name in resolve_methods(policy, instance):
                if not callable(getattr(instance, name, None)):
                    continue
                state = self._ensure_state(instance)
                if name not in state.wrapped:
                    self._install(instance, name, scope, state)
                    gated.append(name)
                chain = state.chains.setdefault(name, [])
                if policy not in chain:
                    chain.append(policy)

        if gated and self._trace is not None:
            self._trace.emit(
                "instance_gated",
                target=scope.as_dict(),
                data={"instance": type(instance).__name__, "methods": gated},
            )
        return instance

    def chain(self, instance: Any, method: str) -> Tuple[Policy, ...]:
        state = self._states.get(id(instance))
        if state is None:
            return ()
        return tuple(state.chains.get(method, ()))

    def wrapped_methods(self, instance: Any) -> Tuple[str, ...]:
        state = self._states.get(id(instance))
        if state is None:
            return ()
        return tuple(sorted(state.wrapped))

    def release(self, instance: Any) -> None:
        """
        Remove every checkpoint installed on `instance` and forget its chains.

        Methods that were instance attributes before gating are put back.
        """
        state = self._states.pop(id(instance), None)
        if state is None:
            return
        if state.finalizer is not None:
            state.finalizer.detach()

        attrs = instance.__dict__
        for name, previous in state.shadowed.items():
            if previous is _MISSING:
                attrs.pop(name, None)
            else:
                attrs[name] = previous

    def _ensure_state(self, instance: Any) -> _GateState:
        key = id(instance)
        state = self._states.get(key)
        if state is not None:
            return state

        if not isinstance(getattr(instance, "__dict__", None), dict):
            raise GateError(
                code="gate.unsupported_instance",
                message=f"Cannot gate instance without attribute storage: {type(instance).__name__}",
            )
        try:
            finalizer = weakref.finalize(instance, self._states.pop, key, None)
        except TypeError as e:
            raise GateError(
                code="gate.unsupported_instance",
                message=f"Cannot gate instance that is not weak-referenceable: {type(instance).__name__}",
            ) from e

        state = _GateState(finalizer=finalizer)
        self._states[key] = state
        return state

    def _install(self, instance: Any, name: str, scope: PolicyTarget, state: _GateState) -> None:
        original = getattr(instance, name)
        previous = instance.__dict__.get(name, _MISSING)

        @functools.wraps(original)
        async def checkpoint(*args: Any, **kwargs: Any) -> Any:
            if args:
                params = args[0]
            else:
                params = kwargs or None
            chain = self._catch_up(instance, name, scope, state)
            await run_policies(chain, name, params, scope, trace=self._trace)

            result = original(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result

        try:
            setattr(instance, name, checkpoint)
        except AttributeError as e:
            raise GateError(
                code="gate.unsupported_instance",
                message=f"Cannot install checkpoint for method: {name}",
                data={"instance": type(instance).__name__},
            ) from e
        state.shadowed[name] = previous
        state.wrapped.add(name)

    def _catch_up(self, instance: Any, name: str, scope: PolicyTarget, state: _GateState) -> List[Policy]:
        chain = state.chains.setdefault(name, [])
        live = list(self._policies)
        added = False
        for policy in live[state.synced.get(name, 0):]:
            if policy in chain or not matches(policy.target, scope):
                continue
            if name in resolve_methods(policy, instance):
                chain.append(policy)
                added = True
        if added:
            order = {id(p): i for i, p in enumerate(live)}
            chain.sort(key=lambda p: order.get(id(p), len(live)))
        state.synced[name] = len(live)
        return list(chain)
