"""EVM wallet boundary for Hedera Testnet."""

from comptara.wallet.hedera import (
    HEDERA_TESTNET,
    HederaWallet,
    WalletError,
    decimal_to_wei_hex,
    explorer_tx_url,
    format_address,
    utf8_to_hex,
)
from comptara.wallet.provider import HttpJsonRpcProvider, ProviderRpcError, WalletProvider

__all__ = [
    "HEDERA_TESTNET",
    "HederaWallet",
    "HttpJsonRpcProvider",
    "ProviderRpcError",
    "WalletError",
    "WalletProvider",
    "decimal_to_wei_hex",
    "explorer_tx_url",
    "format_address",
    "utf8_to_hex",
]
