from .wallet_manager import WalletManager
from .protocols import BridgeProtocol, FiatProtocol, LendingProtocol, Protocol, SwapProtocol
from .wallet_kit import WalletKit

__all__ = [
  "WalletManager",
  "Protocol",
  "SwapProtocol",
  "BridgeProtocol",
  "LendingProtocol",
  "FiatProtocol",
  "WalletKit",
]
