"""Tests for the Hedera wallet helpers with a scripted provider."""

import asyncio
import json

import httpx
import pytest

from comptara.audit import AuditLogger
from comptara.models.audit import AuditEventType
from comptara.services.storage import InMemoryAuditStorage
from comptara.wallet import (
    HEDERA_TESTNET,
    HederaWallet,
    HttpJsonRpcProvider,
    ProviderRpcError,
    WalletError,
    WalletProvider,
    decimal_to_wei_hex,
    explorer_tx_url,
    format_address,
    utf8_to_hex,
)

ACCOUNT = "0x1234567890abcdef1234567890abcdef12345678"


class Outcomes:
    """Successive outcomes for one method, consumed one call at a time."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)

    def next(self):
        return self.outcomes.pop(0)


class ScriptedProvider(WalletProvider):
    """Answers each method with a scripted result or raises a scripted error."""

    def __init__(self, script):
        self.script = dict(script)
        self.calls = []

    async def request(self, method, params=None):
        self.calls.append((method, params))
        outcome = self.script.get(method)
        if isinstance(outcome, Outcomes):
            outcome = outcome.next()
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def methods(self):
        return [c[0] for c in self.calls]


def _run(coro):
    return asyncio.run(coro)


class TestDecimalToWeiHex:

    @pytest.mark.parametrize("amount, expected", [
        ("1", hex(10 ** 18)),
        ("0.5", hex(5 * 10 ** 17)),
        (".25", hex(25 * 10 ** 16)),
        ("  2.  ", hex(2 * 10 ** 18)),
        ("", "0x0"),
        ("0.0000000000000000019", "0x1"),
    ])
    def test_conversion(self, amount, expected):
        assert decimal_to_wei_hex(amount) == expected

    @pytest.mark.parametrize("amount", ["-1", "1e3", "abc", "1.2.3"])
    def test_invalid(self, amount):
        with pytest.raises(WalletError):
            decimal_to_wei_hex(amount)


class TestHelpers:

    def test_utf8_to_hex(self):
        assert utf8_to_hex("é") == "0xc3a9"

    def test_explorer_url(self):
        assert explorer_tx_url("0xabc") == "https://hashscan.io/testnet/transaction/0xabc"

    def test_format_address(self):
        assert format_address(ACCOUNT) == "0x1234...5678"
        assert format_address(None) == ""
        assert format_address("0x12") == "0x12"


class TestEnsureChain:

    def test_already_on_hedera(self):
        provider = ScriptedProvider({"eth_chainId": "0x128"})
        _run(HederaWallet(provider).ensure_chain())
        assert provider.methods() == ["eth_chainId"]

    def test_switches_chain(self):
        provider = ScriptedProvider({"eth_chainId": "0x1", "wallet_switchEthereumChain": None})
        _run(HederaWallet(provider).ensure_chain())
        assert provider.calls[1] == ("wallet_switchEthereumChain", [{"chainId": "0x128"}])

    def test_adds_unknown_chain_then_switches(self):
        provider = ScriptedProvider({
            "eth_chainId": "0x1",
            "wallet_switchEthereumChain": Outcomes(ProviderRpcError(4902, "Unrecognized chain"), None),
            "wallet_addEthereumChain": None,
        })
        _run(HederaWallet(provider).ensure_chain())

        assert provider.methods() == [
            "eth_chainId",
            "wallet_switchEthereumChain",
            "wallet_addEthereumChain",
            "wallet_switchEthereumChain",
        ]
        assert provider.calls[2][1] == [HEDERA_TESTNET]

    def test_user_rejects_switch(self):
        provider = ScriptedProvider({
            "eth_chainId": "0x1",
            "wallet_switchEthereumChain": ProviderRpcError(4001, "User rejected"),
        })
        with pytest.raises(WalletError) as exc_info:
            _run(HederaWallet(provider).ensure_chain())
        assert exc_info.value.code == 4001

    def test_user_rejects_add(self):
        provider = ScriptedProvider({
            "eth_chainId": "0x1",
            "wallet_switchEthereumChain": ProviderRpcError(4902, "Unrecognized chain"),
            "wallet_addEthereumChain": ProviderRpcError(4001, "User rejected"),
        })
        with pytest.raises(WalletError) as exc_info:
            _run(HederaWallet(provider).ensure_chain())
        assert "rejected" in exc_info.value.message


class TestConnect:

    def test_returns_first_account(self):
        provider = ScriptedProvider({"eth_requestAccounts": [ACCOUNT, "0xother"]})
        assert _run(HederaWallet(provider).connect()) == ACCOUNT

    @pytest.mark.parametrize("code", [4001, -32002, -32603])
    def test_errors(self, code):
        provider = ScriptedProvider({"eth_requestAccounts": ProviderRpcError(code, "nope")})
        with pytest.raises(WalletError) as exc_info:
            _run(HederaWallet(provider).connect())
        assert exc_info.value.code == code

    def test_no_accounts(self):
        provider = ScriptedProvider({"eth_requestAccounts": []})
        with pytest.raises(WalletError):
            _run(HederaWallet(provider).connect())

    def test_selected_address_none_on_failure(self):
        provider = ScriptedProvider({"eth_accounts": ProviderRpcError(-32603, "down")})
        assert _run(HederaWallet(provider).get_selected_address()) is None


class TestTransactions:

    def test_send_native(self):
        storage = InMemoryAuditStorage()
        provider = ScriptedProvider({"eth_accounts": [ACCOUNT], "eth_sendTransaction": "0xhash"})
        wallet = HederaWallet(provider, audit_logger=AuditLogger(storage))

        tx_hash = _run(wallet.send_native("0xdest", "1.5"))

        assert tx_hash == "0xhash"
        assert provider.calls[-1] == (
            "eth_sendTransaction",
            [{"from": ACCOUNT, "to": "0xdest", "value": hex(15 * 10 ** 17)}],
        )
        assert storage.events[-1].event_type == AuditEventType.TRANSACTION_SENT

    def test_send_without_wallet(self):
        provider = ScriptedProvider({"eth_accounts": []})
        with pytest.raises(WalletError):
            _run(HederaWallet(provider).send_native("0xdest", "1"))

    def test_anchor_on_hedera_omits_data(self):
        provider = ScriptedProvider({
            "eth_accounts": [ACCOUNT],
            "eth_chainId": "0x128",
            "eth_sendTransaction": "0xhash",
        })
        _run(HederaWallet(provider).anchor_entry_data({"id": "e1"}))

        tx = provider.calls[-1][1][0]
        assert tx == {"from": ACCOUNT, "to": ACCOUNT, "value": "0x0"}

    def test_anchor_elsewhere_includes_data(self):
        provider = ScriptedProvider({
            "eth_accounts": [ACCOUNT],
            "eth_chainId": "0x1",
            "eth_sendTransaction": "0xhash",
        })
        _run(HederaWallet(provider).anchor_entry_data({"id": "e1"}))

        tx = provider.calls[-1][1][0]
        assert tx["data"] == utf8_to_hex(json.dumps({"id": "e1"}, separators=(",", ":")))

    def test_anchor_retries_without_data(self):
        provider = ScriptedProvider({
            "eth_accounts": [ACCOUNT],
            "eth_chainId": "0x1",
            "eth_sendTransaction": Outcomes(
                ProviderRpcError(-32000, "EOA cannot include data"),
                "0xretry",
            ),
        })
        assert _run(HederaWallet(provider).anchor_entry_data({"id": "e1"})) == "0xretry"
        assert "data" not in provider.calls[-1][1][0]

    def test_anchor_other_errors_propagate(self):
        provider = ScriptedProvider({
            "eth_accounts": [ACCOUNT],
            "eth_chainId": "0x1",
            "eth_sendTransaction": ProviderRpcError(4001, "User rejected"),
        })
        with pytest.raises(ProviderRpcError):
            _run(HederaWallet(provider).anchor_entry_data({"id": "e1"}))


class TestHttpJsonRpcProvider:

    def test_result(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x128"})

        provider = HttpJsonRpcProvider("https://rpc.test", transport=httpx.MockTransport(handler))

        assert _run(provider.request("eth_chainId")) == "0x128"
        assert seen[0]["method"] == "eth_chainId"
        assert seen[0]["params"] == []

    def test_error_object(self):
        def handler(request):
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": 1, "error": {"code": 4902, "message": "unknown"}},
            )

        provider = HttpJsonRpcProvider("https://rpc.test", transport=httpx.MockTransport(handler))

        with pytest.raises(ProviderRpcError) as exc_info:
            _run(provider.request("wallet_switchEthereumChain", [{"chainId": "0x128"}]))
        assert exc_info.value.code == 4902

    def test_http_error_status(self):
        def handler(request):
            return httpx.Response(500, text="upstream down")

        provider = HttpJsonRpcProvider("https://rpc.test", transport=httpx.MockTransport(handler))

        with pytest.raises(ProviderRpcError) as exc_info:
            _run(provider.request("eth_chainId"))
        assert exc_info.value.code == -32603
        assert "500" in exc_info.value.message
