from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from . import rules
from .contract_store import ContractStore
from .core.errors import ValidationError
from .core.policy import Evaluate, Policy
from .core.scope import PolicyTarget


POLICY_CONFIG_SCHEMA = "policy_config.schema.json"

_STORE: Optional[ContractStore] = None


def _contracts() -> ContractStore:
    global _STORE
    if _STORE is None:
        store = ContractStore()
        store.load()
        _STORE = store
    return _STORE


def _build_rule(rule: Union[str, Dict[str, Any]]) -> Evaluate:
    if rule == "allow":
        return rules.allow()
    if rule == "deny":
        return rules.deny()
    if "max_value" in rule:
        spec = rule["max_value"]
        return rules.max_value(spec["param"], spec["limit"])
    if "allowlist" in rule:
        spec = rule["allowlist"]
        return rules.allowlist(spec["param"], spec["values"], case_insensitive=spec.get("case_insensitive", True))
    spec = rule["blocklist"]
    return rules.blocklist(spec["param"], spec["values"], case_insensitive=spec.get("case_insensitive", True))


def build_policies(raw: Any) -> List[Policy]:
    """
    Turn a parsed policy config into Policy objects, in file order.
    """
    if not isinstance(raw, dict):
        raise ValidationError(code="config.invalid", message="Config must be a YAML mapping/object at top-level")

    errors = _contracts().validate(POLICY_CONFIG_SCHEMA, raw)
    if errors:
        raise ValidationError(
            code="config.schema_invalid",
            message="Config does not match schema",
            data={"errors": errors},
        )

    policies: List[Policy] = []
    for entry in raw["policies"]:
        method = entry.get("method")
        policies.append(
            Policy(
                name=entry["name"],
                evaluate=_build_rule(entry["rule"]),
                target=PolicyTarget.coerce(entry.get("target")),
                method=tuple(method) if isinstance(method, list) else method,
            )
        )
    return policies


def load_policy_file(path: Union[str, Path]) -> List[Policy]:
    p = Path(path).expanduser()
    if not p.exists():
        raise ValidationError(code="config.not_found", message=f"Config not found: {path}")
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValidationError(code="config.invalid_yaml", message="Failed to parse YAML config", data={"error": repr(e)}) from e
    return build_policies(raw)
