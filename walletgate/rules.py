from __future__ import annotations

from typing import Any, Iterable, Mapping, Union

from .core.errors import ValidationError
from .core.policy import Evaluate, PolicyRequest


def param_value(params: Any, key: str) -> Any:
    """
    Read a call parameter from a mapping or from an attribute.
    """
    if params is None:
        return None
    if isinstance(params, Mapping):
        return params.get(key)
    return getattr(params, key, None)


def _to_int(value: Any, *, what: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(code="policy.param_invalid", message=f"{what} must be an integer, got a boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ValidationError(
        code="policy.param_invalid",
        message=f"{what} must be an integer",
        data={"value": repr(value)},
    )


def allow() -> Evaluate:
    def evaluate(request: PolicyRequest) -> bool:
        return True

    return evaluate


def deny() -> Evaluate:
    def evaluate(request: PolicyRequest) -> bool:
        return False

    return evaluate


def max_value(param: str, limit: Union[int, str]) -> Evaluate:
    """
    Reject calls whose integer parameter exceeds `limit`.

    Calls without the parameter pass.
    """
    bound = _to_int(limit, what="limit")

    def evaluate(request: PolicyRequest) -> bool:
        value = param_value(request.params, param)
        if value is None:
            return True
        return _to_int(value, what=f"params.{param}") <= bound

    return evaluate


def _normalize(values: Iterable[str], case_insensitive: bool) -> frozenset:
    return frozenset(v.lower() if case_insensitive else v for v in values)


def allowlist(param: str, values: Iterable[str], *, case_insensitive: bool = True) -> Evaluate:
    """
    Allow calls whose parameter is listed; calls without the parameter pass.
    """
    allowed = _normalize(values, case_insensitive)

    def evaluate(request: PolicyRequest) -> bool:
        value = param_value(request.params, param)
        if value is None:
            return True
        value = str(value)
        return (value.lower() if case_insensitive else value) in allowed

    return evaluate


def blocklist(param: str, values: Iterable[str], *, case_insensitive: bool = True) -> Evaluate:
    blocked = _normalize(values, case_insensitive)

    def evaluate(request: PolicyRequest) -> bool:
        value = param_value(request.params, param)
        if value is None:
            return True
        value = str(value)
        return (value.lower() if case_insensitive else value) not in blocked

    return evaluate
