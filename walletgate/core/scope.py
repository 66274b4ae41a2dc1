from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .errors import PolicyRegistrationError


@dataclass(frozen=True)
class ProtocolTarget:
    blockchain: Optional[str] = None
    label: Optional[str] = None

    def as_dict(self) -> dict[str, str]:
        out: dict[str, str] = {}
        if self.blockchain is not None:
            out["blockchain"] = self.blockchain
        if self.label is not None:
            out["label"] = self.label
        return out


@dataclass(frozen=True)
class PolicyTarget:
    """
    Scope descriptor for policies and for gated instances.

    As a policy target, absent fields are wildcards. As the scope of a gated
    instance, `wallet` is set for accounts and `protocol` for protocol objects.
    """

    wallet: Optional[str] = None
    protocol: Optional[ProtocolTarget] = None

    @classmethod
    def coerce(cls, value: Any) -> Optional["PolicyTarget"]:
        if value is None or isinstance(value, PolicyTarget):
            return value
        if not isinstance(value, Mapping):
            raise PolicyRegistrationError(
                code="policy.invalid",
                message="target must be a PolicyTarget or a mapping",
                data={"type": type(value).__name__},
            )

        wallet = value.get("wallet")
        if wallet is not None and not isinstance(wallet, str):
            raise PolicyRegistrationError(code="policy.invalid", message="target.wallet must be a string")

        protocol = value.get("protocol")
        if protocol is not None and not isinstance(protocol, ProtocolTarget):
            if not isinstance(protocol, Mapping):
                raise PolicyRegistrationError(code="policy.invalid", message="target.protocol must be a mapping")
            for k in ("blockchain", "label"):
                v = protocol.get(k)
                if v is not None and not isinstance(v, str):
                    raise PolicyRegistrationError(code="policy.invalid", message=f"target.protocol.{k} must be a string")
            protocol = ProtocolTarget(blockchain=protocol.get("blockchain"), label=protocol.get("label"))

        return cls(wallet=wallet, protocol=protocol)

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.wallet is not None:
            out["wallet"] = self.wallet
        if self.protocol is not None:
            out["protocol"] = self.protocol.as_dict()
        return out


GLOBAL_SCOPE = PolicyTarget()


def matches(policy_target: Optional[PolicyTarget], scope: PolicyTarget) -> bool:
    if policy_target is None:
        return True

    if policy_target.wallet and policy_target.wallet != scope.wallet:
        return False

    wanted = policy_target.protocol
    if wanted is not None:
        actual = scope.protocol or ProtocolTarget()
        if wanted.blockchain and wanted.blockchain != actual.blockchain:
            return False
        if wanted.label and wanted.label != actual.label:
            return False

    return True


def describe_target(scope: Optional[PolicyTarget]) -> str:
    if scope is not None and scope.wallet:
        return f"wallet: {scope.wallet}"
    if scope is not None and scope.protocol is not None:
        return "protocol: {}".format(json.dumps(scope.protocol.as_dict(), separators=(",", ":")))
    return "global"
