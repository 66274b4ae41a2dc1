from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional, Tuple, Union

from .errors import PolicyRegistrationError
from .scope import PolicyTarget


@dataclass(frozen=True)
class PolicyRequest:
    method: str
    params: Any
    target: PolicyTarget


Evaluate = Callable[[PolicyRequest], Union[bool, Awaitable[bool]]]


@dataclass(frozen=True, eq=False)
class Policy:
    """
    Named authorization rule.

    Equality is identity: a policy already present in a method's chain is
    never appended twice, while two separately built policies with the same
    name are distinct entries.
    """

    name: str
    evaluate: Evaluate
    target: Optional[PolicyTarget] = None
    method: Union[str, Tuple[str, ...], None] = None

    def __post_init__(self) -> None:
        # An empty method name means "every capability", like None.
        if self.method == "":
            object.__setattr__(self, "method", None)
        elif self.method is not None and not isinstance(self.method, str):
            object.__setattr__(self, "method", tuple(self.method))


def _check_method(method: Any) -> None:
    if method is None or isinstance(method, str):
        return
    if isinstance(method, (list, tuple)) and all(isinstance(m, str) and m for m in method):
        return
    raise PolicyRegistrationError(
        code="policy.invalid",
        message="method must be a string or a list of non-empty strings",
    )


def coerce_policy(entry: Any) -> Policy:
    """
    Validate a Policy (or a mapping with the same keys) and return a Policy.
    """
    if isinstance(entry, Policy):
        name, evaluate, target, method = entry.name, entry.evaluate, entry.target, entry.method
    elif isinstance(entry, Mapping):
        name, evaluate = entry.get("name"), entry.get("evaluate")
        target, method = entry.get("target"), entry.get("method")
    else:
        raise PolicyRegistrationError(
            code="policy.invalid",
            message="Invalid policy object",
            data={"type": type(entry).__name__},
        )

    if not isinstance(name, str) or not name:
        raise PolicyRegistrationError(code="policy.invalid", message="Invalid policy object: name is required")
    if not callable(evaluate):
        raise PolicyRegistrationError(
            code="policy.invalid",
            message=f"Invalid policy object: evaluate must be callable ({name})",
            data={"policy": name},
        )
    _check_method(method)
    target = PolicyTarget.coerce(target)

    if isinstance(entry, Policy) and target is entry.target:
        return entry
    return Policy(name=name, evaluate=evaluate, target=target, method=method)
