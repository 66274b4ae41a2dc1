from .errors import GateError, PolicyRegistrationError, PolicyViolation, ScopeNotFound, ValidationError
from .scope import GLOBAL_SCOPE, PolicyTarget, ProtocolTarget, describe_target, matches
from .policy import Policy, PolicyRequest, coerce_policy
from .method_resolver import MUTATING_METHODS, read_only, resolve_methods, scan_capabilities
from .evaluator import run_policies
from .policy_gate import PolicyGate
from .gate_manager import GateManager
from .runtime_context import GateContext

__all__ = [
  "GateError",
  "PolicyRegistrationError",
  "PolicyViolation",
  "ScopeNotFound",
  "ValidationError",
  "GLOBAL_SCOPE",
  "PolicyTarget",
  "ProtocolTarget",
  "describe_target",
  "matches",
  "Policy",
  "PolicyRequest",
  "coerce_policy",
  "MUTATING_METHODS",
  "read_only",
  "resolve_methods",
  "scan_capabilities",
  "run_policies",
  "PolicyGate",
  "GateManager",
  "GateContext",
]
