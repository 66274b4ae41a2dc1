from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from ..trace.trace_emitter import TraceEmitter
from ..trace.trace_store_jsonl import TraceStoreJSONL


@dataclass(frozen=True)
class GateContext:
    """
    Runtime configuration for a wallet kit and its gate.

    Tracing is off unless `trace_path` is set.
    """

    run_id: str = "walletgate"
    trace_path: Optional[Path] = None
    meta: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GateContext":
        env = os.environ if environ is None else environ
        run_id = env.get("WALLETGATE_RUN_ID") or "walletgate"
        trace_path = env.get("WALLETGATE_TRACE_PATH")
        return cls(
            run_id=run_id,
            trace_path=Path(os.path.expandvars(os.path.expanduser(trace_path))) if trace_path else None,
        )

    def trace_emitter(self) -> Optional[TraceEmitter]:
        if self.trace_path is None:
            return None
        return TraceEmitter(store=TraceStoreJSONL(self.trace_path), run_id=self.run_id)
