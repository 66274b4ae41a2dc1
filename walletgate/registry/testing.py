from __future__ import annotations

import hashlib
from typing import Any, Dict, List, Optional

from ..core.method_resolver import read_only
from .wallet_manager import Seed, WalletManager


TEST_SEED_PHRASE = "cook voyage document eight skate token alien guide drink uncle term abuse"


class InMemoryAccount:
    """
    Deterministic account for tests/examples.

    Mutating operations record their params and echo them back; nothing
    leaves the process.
    """

    def __init__(self, path: str):
        self.path = path
        self.calls: List[str] = []

    @read_only
    async def get_address(self) -> str:
        return "0x" + hashlib.sha256(self.path.encode("utf-8")).hexdigest()[:40]

    @read_only
    def get_path(self) -> str:
        return self.path

    async def send_transaction(self, params: Any) -> Dict[str, Any]:
        return self._record("send", params)

    async def transfer(self, params: Any) -> Dict[str, Any]:
        return self._record("transfer", params)

    async def approve(self, params: Any) -> Dict[str, Any]:
        return self._record("approve", params)

    async def sign(self, params: Any) -> Dict[str, Any]:
        return self._record("sign", params)

    async def bridge(self, params: Any) -> Dict[str, Any]:
        return self._record("bridge", params)

    async def stake(self, params: Any) -> Dict[str, Any]:
        return self._record("stake", params)

    async def unstake(self, params: Any) -> Dict[str, Any]:
        return self._record("unstake", params)

    def _record(self, kind: str, params: Any) -> Dict[str, Any]:
        self.calls.append(kind)
        return {"type": kind, "params": params}


class InMemoryWalletManager(WalletManager):
    """
    Deterministic wallet provider for tests/examples.

    Accounts are cached per derivation path, like a real provider's account
    cache; `fee_rates` may be set through the `fee_rates` config key.
    """

    def __init__(self, seed: Seed, config: Optional[Dict[str, Any]] = None):
        super().__init__(seed, config)
        self._accounts: Dict[str, InMemoryAccount] = {}
        self.disposed = False

    @classmethod
    def get_random_seed_phrase(cls) -> str:
        return TEST_SEED_PHRASE

    async def get_account(self, index: int = 0) -> InMemoryAccount:
        return await self.get_account_by_path(f"0'/0/{index}")

    async def get_account_by_path(self, path: str) -> InMemoryAccount:
        account = self._accounts.get(path)
        if account is None:
            account = InMemoryAccount(path)
            self._accounts[path] = account
        return account

    async def get_fee_rates(self) -> Dict[str, int]:
        rates = self.config.get("fee_rates") or {"normal": 1, "fast": 2}
        return dict(rates)

    def dispose(self) -> None:
        super().dispose()
        self._accounts.clear()
        self.disposed = True
