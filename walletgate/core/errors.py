from __future__ import annotations

from dataclasses import dataclass
from typing import Any


# Not frozen: raising and re-raising assign __traceback__, __context__ and __notes__.
@dataclass(eq=False)
class GateError(Exception):
    code: str
    message: str
    data: dict[str, Any] | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ValidationError(GateError):
    pass


class PolicyRegistrationError(GateError, TypeError):
    pass


class ScopeNotFound(GateError, LookupError):
    pass


@dataclass(eq=False)
class PolicyViolation(GateError):
    """
    Raised when a matched policy returns a falsy decision.

    The gated method is never invoked once this is raised.
    """

    policy: str = ""
    method: str = ""
    target: Any = None

    @classmethod
    def for_call(cls, policy_name: str, method: str, target: Any) -> "PolicyViolation":
        from .scope import describe_target  # local import to avoid cycles

        return cls(
            code="policy.violation",
            message=f'Policy "{policy_name}" rejected method "{method}" for {describe_target(target)}',
            data={"policy": policy_name, "method": method},
            policy=policy_name,
            method=method,
            target=target,
        )

    def __str__(self) -> str:
        return self.message
