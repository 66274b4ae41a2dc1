from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from .errors import PolicyRegistrationError
from .policy import Policy, coerce_policy
from .policy_gate import PolicyGate
from .scope import GLOBAL_SCOPE, PolicyTarget
from ..trace.trace_emitter import TraceEmitter


class GateManager:
    """
    Owns the process-wide ordered policy list and gates new instances.

    Hard rules:
    - registration is all-or-nothing per batch;
    - the policy list is append-only;
    - every instance handed out by the registry is gated first.
    """

    def __init__(self, trace: Optional[TraceEmitter] = None):
        self._policies: List[Policy] = []
        self._trace = trace
        self._gate = PolicyGate(self._policies, trace=trace)

    @property
    def policies(self) -> Tuple[Policy, ...]:
        return tuple(self._policies)

    def register_policies(self, policies: Iterable[Union[Policy, Mapping[str, Any]]] = ()) -> "GateManager":
        if not isinstance(policies, (list, tuple)):
            raise PolicyRegistrationError(
                code="policy.invalid",
                message="register_policies expects a list",
                data={"type": type(policies).__name__},
            )

        batch = [coerce_policy(p) for p in policies]
        self._policies.extend(batch)

        if batch and self._trace is not None:
            self._trace.emit("policies_registered", data={"names": [p.name for p in batch]})
        return self

    def gate(self, instance: Any, scope: Union[PolicyTarget, Mapping[str, Any], None] = None) -> Any:
        target = PolicyTarget.coerce(scope) or GLOBAL_SCOPE
        return self._gate.apply(instance, target)

    def chain(self, instance: Any, method: str) -> Tuple[Policy, ...]:
        return self._gate.chain(instance, method)

    def wrapped_methods(self, instance: Any) -> Tuple[str, ...]:
        return self._gate.wrapped_methods(instance)

    def release(self, instance: Any) -> None:
        self._gate.release(instance)
