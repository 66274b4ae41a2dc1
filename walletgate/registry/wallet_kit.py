from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Type, Union

from ..core.errors import ScopeNotFound, ValidationError
from ..core.gate_manager import GateManager
from ..core.method_resolver import read_only
from ..core.policy import Policy
from ..core.runtime_context import GateContext
from ..core.scope import PolicyTarget, ProtocolTarget
from .protocols import PROTOCOL_KINDS, protocol_kind
from .wallet_manager import Seed, WalletManager


Middleware = Callable[[Any], Union[None, Awaitable[None]]]


def _kind_of(protocol_cls: Type[Any]) -> str:
    kind = protocol_kind(protocol_cls)
    if kind is None:
        raise ValidationError(
            code="protocol.unsupported",
            message=f"Unsupported protocol class: {getattr(protocol_cls, '__name__', protocol_cls)!r}",
        )
    return kind


class _AccountProtocols:
    """
    Protocol bindings of one derived account.

    Its bound methods are attached to the account; they are read-only so
    untargeted policies never gate them.
    """

    def __init__(self, kit: "WalletKit", account: Any, blockchain: str):
        self._kit = kit
        self._account = account
        self._blockchain = blockchain
        self._local: Dict[str, Dict[str, Any]] = {kind: {} for kind in PROTOCOL_KINDS}

    def attach(self) -> None:
        self._account.register_protocol = self.register_protocol
        self._account.get_swap_protocol = self.get_swap_protocol
        self._account.get_bridge_protocol = self.get_bridge_protocol
        self._account.get_lending_protocol = self.get_lending_protocol
        self._account.get_fiat_protocol = self.get_fiat_protocol

    @read_only
    def register_protocol(self, label: str, protocol_cls: Type[Any], config: Optional[Dict[str, Any]] = None) -> Any:
        kind = _kind_of(protocol_cls)
        self._local[kind][label] = protocol_cls(self._account, config)
        return self._account

    @read_only
    def get_swap_protocol(self, label: str) -> Any:
        return self._get("swap", label)

    @read_only
    def get_bridge_protocol(self, label: str) -> Any:
        return self._get("bridge", label)

    @read_only
    def get_lending_protocol(self, label: str) -> Any:
        return self._get("lending", label)

    @read_only
    def get_fiat_protocol(self, label: str) -> Any:
        return self._get("fiat", label)

    def _get(self, kind: str, label: str) -> Any:
        scope = PolicyTarget(protocol=ProtocolTarget(blockchain=self._blockchain, label=label))

        registered = self._kit._protocols[kind].get(self._blockchain, {}).get(label)
        if registered is not None:
            protocol_cls, config = registered
            return self._kit._gates.gate(protocol_cls(self._account, config), scope)

        local = self._local[kind].get(label)
        if local is not None:
            return self._kit._gates.gate(local, scope)

        raise ScopeNotFound(
            code="protocol.unknown",
            message=f"No {kind} protocol registered for label: {label}.",
            data={"kind": kind, "label": label, "blockchain": self._blockchain},
        )


class WalletKit:
    """
    Registry of wallets, protocols and middlewares for one seed.

    Every account and protocol instance it hands out has already passed
    through the policy gate.
    """

    def __init__(self, seed: Seed, ctx: Optional[GateContext] = None):
        if not WalletKit.is_valid_seed(seed):
            raise ValidationError(code="seed.invalid", message="Invalid seed.")

        self._seed = seed
        self._ctx = ctx or GateContext()
        self._wallets: Dict[str, WalletManager] = {}
        self._protocols: Dict[str, Dict[str, Dict[str, Any]]] = {kind: {} for kind in PROTOCOL_KINDS}
        self._middlewares: Dict[str, List[Middleware]] = {}
        self._gates = GateManager(trace=self._ctx.trace_emitter())

    @staticmethod
    def get_random_seed_phrase(wallet_cls: Type[WalletManager]) -> str:
        return wallet_cls.get_random_seed_phrase()

    @staticmethod
    def is_valid_seed(seed: Any) -> bool:
        if isinstance(seed, (bytes, bytearray)):
            return 16 <= len(seed) <= 64
        return WalletManager.is_valid_seed_phrase(seed)

    @property
    def gates(self) -> GateManager:
        return self._gates

    def register_policies(self, policies: Sequence[Union[Policy, Mapping[str, Any]]] = ()) -> "WalletKit":
        self._gates.register_policies(policies)
        return self

    def register_wallet(self, blockchain: str, wallet_cls: Type[WalletManager], config: Optional[Dict[str, Any]] = None) -> "WalletKit":
        self._wallets[blockchain] = wallet_cls(self._seed, config)
        return self

    def register_protocol(
        self,
        blockchain: str,
        label: str,
        protocol_cls: Type[Any],
        config: Optional[Dict[str, Any]] = None,
    ) -> "WalletKit":
        """
        Register a protocol for every account of a blockchain.

        Labels are unique per blockchain and protocol kind; a later
        registration replaces an earlier one.
        """
        kind = _kind_of(protocol_cls)
        self._protocols[kind].setdefault(blockchain, {})[label] = (protocol_cls, config)
        return self

    def register_middleware(self, blockchain: str, middleware: Middleware) -> "WalletKit":
        self._middlewares.setdefault(blockchain, []).append(middleware)
        return self

    async def get_account(self, blockchain: str, index: int = 0) -> Any:
        wallet = self._wallet(blockchain)
        account = await wallet.get_account(index)
        return await self._prepare_account(account, blockchain)

    async def get_account_by_path(self, blockchain: str, path: str) -> Any:
        wallet = self._wallet(blockchain)
        account = await wallet.get_account_by_path(path)
        return await self._prepare_account(account, blockchain)

    async def get_fee_rates(self, blockchain: str) -> Dict[str, int]:
        return await self._wallet(blockchain).get_fee_rates()

    def dispose(self) -> None:
        for wallet in self._wallets.values():
            wallet.dispose()
        self._wallets.clear()

    def _wallet(self, blockchain: str) -> WalletManager:
        wallet = self._wallets.get(blockchain)
        if wallet is None:
            raise ScopeNotFound(
                code="wallet.unknown",
                message=f"No wallet registered for blockchain: {blockchain}.",
                data={"blockchain": blockchain},
            )
        return wallet

    async def _prepare_account(self, account: Any, blockchain: str) -> Any:
        for middleware in self._middlewares.get(blockchain, []):
            out = middleware(account)
            if inspect.isawaitable(out):
                await out

        _AccountProtocols(self, account, blockchain).attach()
        return self._gates.gate(account, PolicyTarget(wallet=blockchain))
