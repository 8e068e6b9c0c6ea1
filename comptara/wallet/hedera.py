"""
Hedera Testnet helpers over an EVM wallet provider.

Amounts are decimal strings converted to 18-decimal integers; all chain
calls go through a WalletProvider.
"""

import json
import re
from typing import Any, Optional

import structlog

from comptara.audit import AuditLogger
from comptara.wallet.provider import (
    REQUEST_PENDING,
    UNRECOGNIZED_CHAIN,
    USER_REJECTED,
    ProviderRpcError,
    WalletProvider,
)


logger = structlog.get_logger(__name__)

HEDERA_TESTNET = {
    "chainId": "0x128",  # 296
    "chainName": "Hedera Testnet",
    "rpcUrls": ["https://testnet.hashio.io/api"],
    "nativeCurrency": {"name": "HBAR", "symbol": "HBAR", "decimals": 18},
    "blockExplorerUrls": ["https://hashscan.io/testnet"],
}

NATIVE_DECIMALS = 18
_AMOUNT_PATTERN = re.compile(r"^\d*(?:\.\d*)?$")


class WalletError(Exception):
    """User-facing wallet failure."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code


def decimal_to_wei_hex(amount: str) -> str:
    """
    Convert a decimal amount string to a 0x-prefixed wei value.

    Digits past the 18th decimal are truncated. An empty string is zero.

    Raises:
        WalletError: If the string is not a plain non-negative decimal
    """
    trimmed = amount.strip()
    if not trimmed:
        return "0x0"
    if not _AMOUNT_PATTERN.match(trimmed):
        raise WalletError("Invalid amount")
    integer, _, fraction = trimmed.partition(".")
    fraction = (fraction + "0" * NATIVE_DECIMALS)[:NATIVE_DECIMALS]
    wei = int(integer or "0") * 10 ** NATIVE_DECIMALS + int(fraction)
    return hex(wei)


def utf8_to_hex(data: str) -> str:
    return "0x" + data.encode("utf-8").hex()


def explorer_tx_url(tx_hash: str) -> str:
    return f"{HEDERA_TESTNET['blockExplorerUrls'][0]}/transaction/{tx_hash}"


def format_address(address: Optional[str]) -> str:
    """Shortened address for display, e.g. 0x1234...abcd."""
    if not address:
        return ""
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"


class HederaWallet:
    """Wallet operations against Hedera Testnet."""

    def __init__(
        self,
        provider: WalletProvider,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._provider = provider
        self._audit_logger = audit_logger

    async def _switch_chain(self) -> None:
        await self._provider.request(
            "wallet_switchEthereumChain",
            [{"chainId": HEDERA_TESTNET["chainId"]}],
        )

    async def ensure_chain(self) -> None:
        """
        Make Hedera Testnet the provider's active chain.

        Adds the chain first when the provider does not know it.

        Raises:
            WalletError: If the user rejects the switch or the add fails
        """
        try:
            current = await self._provider.request("eth_chainId")
            if str(current or "").lower() == HEDERA_TESTNET["chainId"]:
                return
        except ProviderRpcError as e:
            logger.debug("chain_id_unavailable", error=e.message)

        try:
            await self._switch_chain()
        except ProviderRpcError as switch_error:
            if switch_error.code == USER_REJECTED:
                raise WalletError("Network switch rejected by the user", USER_REJECTED)
            if switch_error.code != UNRECOGNIZED_CHAIN:
                raise WalletError(
                    switch_error.message or "Unable to switch network",
                    switch_error.code,
                )
            try:
                await self._provider.request("wallet_addEthereumChain", [HEDERA_TESTNET])
                await self._switch_chain()
            except ProviderRpcError as add_error:
                if add_error.code == USER_REJECTED:
                    raise WalletError(
                        "Adding the Hedera network was rejected by the user",
                        USER_REJECTED,
                    )
                raise WalletError(
                    add_error.message or "Unable to add the Hedera network",
                    add_error.code,
                )
        logger.info("chain_switched", chain_id=HEDERA_TESTNET["chainId"])

    async def connect(self) -> str:
        """
        Request account access and return the first account.

        Raises:
            WalletError: If access is rejected, the wallet is locked or no
                account is available
        """
        try:
            accounts = await self._provider.request("eth_requestAccounts")
        except ProviderRpcError as e:
            if e.code == USER_REJECTED:
                raise WalletError("Connection rejected by the user", e.code)
            if e.code == REQUEST_PENDING:
                raise WalletError("The wallet is locked. Unlock it and retry.", e.code)
            raise WalletError(e.message or "Wallet connection failed", e.code)
        if not accounts:
            raise WalletError("No wallet account available")
        logger.info("wallet_connected", address=format_address(accounts[0]))
        return accounts[0]

    async def get_selected_address(self) -> Optional[str]:
        """First authorized account, or None on any failure."""
        try:
            accounts = await self._provider.request("eth_accounts")
        except Exception as e:
            logger.debug("selected_address_unavailable", error=str(e))
            return None
        return accounts[0] if accounts else None

    async def _require_address(self) -> str:
        address = await self.get_selected_address()
        if not address:
            raise WalletError("No wallet connected")
        return address

    async def _send(self, tx: dict, anchored: bool) -> str:
        tx_hash = await self._provider.request("eth_sendTransaction", [tx])
        logger.info("transaction_sent", tx_hash=tx_hash, anchored=anchored)
        if self._audit_logger:
            await self._audit_logger.log_transaction_sent(tx_hash, tx["from"], anchored)
        return tx_hash

    async def send_native(
        self,
        to: str,
        amount: str,
        data_hex: Optional[str] = None,
    ) -> str:
        """
        Send HBAR from the selected account.

        Returns:
            The transaction hash
        """
        sender = await self._require_address()
        tx = {"from": sender, "to": to, "value": decimal_to_wei_hex(amount)}
        if data_hex:
            tx["data"] = data_hex
        return await self._send(tx, anchored=False)

    async def anchor_entry_data(self, payload: dict[str, Any]) -> str:
        """
        Anchor a ledger record with a zero-value self-transaction.

        The record travels as UTF-8 hex calldata, except on Hedera where
        EOA-to-EOA transactions cannot carry data. A provider that rejects
        the calldata gets the transaction again without it.
        """
        sender = await self._require_address()
        base_tx = {"from": sender, "to": sender, "value": "0x0"}

        try:
            chain_id = str(await self._provider.request("eth_chainId") or "").lower()
            if chain_id == HEDERA_TESTNET["chainId"]:
                return await self._send(base_tx, anchored=True)
            data_hex = utf8_to_hex(json.dumps(payload, separators=(",", ":"), default=str))
            return await self._send({**base_tx, "data": data_hex}, anchored=True)
        except ProviderRpcError as e:
            if "include data" in (e.message or "").lower():
                logger.info("anchor_retry_without_data", error=e.message)
                return await self._send(base_tx, anchored=True)
            raise
