from __future__ import annotations

import abc
from typing import Any, Dict, Optional, Union


Seed = Union[str, bytes]

_PHRASE_LENGTHS = (12, 15, 18, 21, 24)


class WalletManager(abc.ABC):
    """
    Interface of a wallet provider for one blockchain.

    Providers own key derivation, fee queries and seed handling; the kit only
    calls through this interface.
    """

    def __init__(self, seed: Seed, config: Optional[Dict[str, Any]] = None):
        self._seed: Optional[Seed] = seed
        self._config: Dict[str, Any] = dict(config or {})

    @property
    def config(self) -> Dict[str, Any]:
        return self._config

    @classmethod
    def get_random_seed_phrase(cls) -> str:
        """
        Return a new random seed phrase.

        Providers that ship a BIP-39 wordlist override this.
        """
        raise NotImplementedError(f"{cls.__name__} cannot generate seed phrases")

    @staticmethod
    def is_valid_seed_phrase(phrase: Any) -> bool:
        # Structural BIP-39 check; providers with a wordlist should override.
        if not isinstance(phrase, str):
            return False
        words = phrase.split()
        if len(words) not in _PHRASE_LENGTHS:
            return False
        return all(w.isalpha() and w.islower() for w in words)

    @abc.abstractmethod
    async def get_account(self, index: int = 0) -> Any:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_account_by_path(self, path: str) -> Any:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_fee_rates(self) -> Dict[str, int]:
        raise NotImplementedError

    def dispose(self) -> None:
        self._seed = None
