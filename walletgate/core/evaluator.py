from __future__ import annotations

import inspect
from typing import Any, Optional, Sequence

from .errors import PolicyViolation
from .policy import Policy, PolicyRequest
from .scope import PolicyTarget
from ..trace.trace_emitter import TraceEmitter


async def run_policies(
    policies: Sequence[Policy],
    method: str,
    params: Any,
    target: PolicyTarget,
    *,
    trace: Optional[TraceEmitter] = None,
) -> None:
    """
    Evaluate a policy chain in order, stopping at the first rejection.

    Exceptions raised by `evaluate` propagate unchanged; only a falsy result
    becomes a PolicyViolation.
    """
    for policy in policies:
        request = PolicyRequest(method=method, params=params, target=target)
        try:
            result = policy.evaluate(request)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:  # noqa: BLE001
            if trace is not None:
                trace.emit(
                    "error",
                    method=method,
                    policy=policy.name,
                    target=target.as_dict(),
                    message="Policy evaluation failed",
                    data={"error": repr(e)},
                )
            raise

        decision = "allow" if result else "deny"
        if trace is not None:
            trace.emit("policy_decision", method=method, policy=policy.name, target=target.as_dict(), data={"decision": decision})

        if not result:
            violation = PolicyViolation.for_call(policy.name, method, target)
            if trace is not None:
                trace.emit("call_denied", method=method, policy=policy.name, target=target.as_dict(), message=violation.message)
            raise violation
