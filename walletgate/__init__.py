from .core import (
  GateContext,
  GateError,
  GateManager,
  MUTATING_METHODS,
  Policy,
  PolicyRegistrationError,
  PolicyRequest,
  PolicyTarget,
  PolicyViolation,
  ProtocolTarget,
  ScopeNotFound,
  ValidationError,
  read_only,
)
from .policy_config import load_policy_file
from .registry import (
  BridgeProtocol,
  FiatProtocol,
  LendingProtocol,
  SwapProtocol,
  WalletKit,
  WalletManager,
)

__all__ = [
  "GateContext",
  "GateError",
  "GateManager",
  "MUTATING_METHODS",
  "Policy",
  "PolicyRegistrationError",
  "PolicyRequest",
  "PolicyTarget",
  "PolicyViolation",
  "ProtocolTarget",
  "ScopeNotFound",
  "ValidationError",
  "read_only",
  "load_policy_file",
  "BridgeProtocol",
  "FiatProtocol",
  "LendingProtocol",
  "SwapProtocol",
  "WalletKit",
  "WalletManager",
]
