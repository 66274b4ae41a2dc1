from __future__ import annotations

import abc
from typing import Any, Dict, Optional, Type

from ..core.method_resolver import read_only


class Protocol(abc.ABC):
    """
    Base of the protocol kinds a wallet account can be bound to.
    """

    kind = ""

    def __init__(self, account: Any, config: Optional[Dict[str, Any]] = None):
        self._account = account
        self._config: Dict[str, Any] = dict(config or {})

    @property
    def account(self) -> Any:
        return self._account

    @property
    def config(self) -> Dict[str, Any]:
        return self._config


class SwapProtocol(Protocol):
    kind = "swap"

    @abc.abstractmethod
    async def swap(self, options: Dict[str, Any]) -> Any:
        raise NotImplementedError

    @read_only
    async def quote_swap(self, options: Dict[str, Any]) -> Any:
        raise NotImplementedError


class BridgeProtocol(Protocol):
    kind = "bridge"

    @abc.abstractmethod
    async def bridge(self, options: Dict[str, Any]) -> Any:
        raise NotImplementedError

    @read_only
    async def quote_bridge(self, options: Dict[str, Any]) -> Any:
        raise NotImplementedError


class LendingProtocol(Protocol):
    kind = "lending"

    @abc.abstractmethod
    async def supply(self, options: Dict[str, Any]) -> Any:
        raise NotImplementedError

    @abc.abstractmethod
    async def withdraw(self, options: Dict[str, Any]) -> Any:
        raise NotImplementedError

    @abc.abstractmethod
    async def borrow(self, options: Dict[str, Any]) -> Any:
        raise NotImplementedError

    @abc.abstractmethod
    async def repay(self, options: Dict[str, Any]) -> Any:
        raise NotImplementedError


class FiatProtocol(Protocol):
    kind = "fiat"

    @abc.abstractmethod
    async def buy(self, options: Dict[str, Any]) -> Any:
        raise NotImplementedError

    @abc.abstractmethod
    async def sell(self, options: Dict[str, Any]) -> Any:
        raise NotImplementedError


PROTOCOL_KINDS = ("swap", "bridge", "lending", "fiat")


def protocol_kind(protocol_cls: Type[Any]) -> Optional[str]:
    for base in (SwapProtocol, BridgeProtocol, LendingProtocol, FiatProtocol):
        if isinstance(protocol_cls, type) and issubclass(protocol_cls, base):
            return base.kind
    return None
