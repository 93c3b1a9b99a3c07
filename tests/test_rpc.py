"""Tests for the JSON-RPC Provider against the in-memory node."""

from __future__ import annotations

import json
import logging

import httpx
import pytest

from conftest import ETHER, RECEIVER, RICH, RPC_URL, FakeNode
from learnether.errors import ConfirmationTimeoutError, RpcConnectionError, RpcError
from learnether.node.rpc import Provider, to_block_param, to_int


class TestEncoding:
    def test_block_param(self) -> None:
        assert to_block_param(23_729_788) == "0x16a147c"
        assert to_block_param("latest") == "latest"
        with pytest.raises(ValueError):
            to_block_param(-1)

    def test_to_int(self) -> None:
        assert to_int("0x1a") == 26
        assert to_int(None) == 0
        assert to_int(7) == 7


class TestReads:
    def test_balance(self, provider: Provider) -> None:
        assert provider.get_balance(RICH) == 23_549_600_706_125_768_371

    def test_idempotent_reads(self, provider: Provider) -> None:
        first = provider.get_balance(RECEIVER)
        second = provider.get_balance(RECEIVER)
        assert first == second == 1 * ETHER

    def test_block_and_chain(self, provider: Provider, node: FakeNode) -> None:
        assert provider.get_block_number() == node.block_number
        assert provider.get_chain_id() == 1
        assert provider.get_block()["baseFeePerGas"] == "0x1"

    def test_request_ids_increment(self, node: FakeNode) -> None:
        seen: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content)["id"])
            return node.handle(request)

        with Provider(RPC_URL, transport=httpx.MockTransport(handler)) as provider:
            provider.get_block_number()
            provider.get_block_number()
        assert seen == [1, 2]

    def test_debug_logging(self, provider: Provider, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="learnether.node.rpc"):
            provider.get_block_number()
        assert "eth_blockNumber" in caplog.text


class TestErrors:
    def test_connection_failure_is_fatal(self, provider: Provider, node: FakeNode) -> None:
        node.down.add("*")
        with pytest.raises(RpcConnectionError, match="cannot reach"):
            provider.get_balance(RICH)

    def test_http_error_status(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(429, text="slow down"))
        with Provider(RPC_URL, transport=transport) as provider:
            with pytest.raises(RpcConnectionError, match="HTTP 429"):
                provider.get_block_number()

    def test_invalid_json(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
        with Provider(RPC_URL, transport=transport) as provider:
            with pytest.raises(RpcConnectionError, match="invalid JSON"):
                provider.get_block_number()

    def test_rpc_error_object(self, provider: Provider, node: FakeNode) -> None:
        node.priority_fee = None
        with pytest.raises(RpcError) as excinfo:
            provider.get_max_priority_fee()
        assert excinfo.value.code == -32601
        assert excinfo.value.method == "eth_maxPriorityFeePerGas"
        assert excinfo.value.exit_code == 5


class TestWaitForTransaction:
    def test_returns_mined_receipt(self, provider: Provider, node: FakeNode) -> None:
        node.receipts["0xabc"] = {"transactionHash": "0xabc", "blockNumber": hex(node.block_number), "status": "0x1"}
        receipt = provider.wait_for_transaction("0xabc", timeout=1, poll_interval=0.01)
        assert receipt["transactionHash"] == "0xabc"

    def test_waits_for_confirmations(self, provider: Provider, node: FakeNode) -> None:
        node.receipts["0xabc"] = {"transactionHash": "0xabc", "blockNumber": hex(node.block_number), "status": "0x1"}
        with pytest.raises(ConfirmationTimeoutError):
            provider.wait_for_transaction("0xabc", timeout=0.05, poll_interval=0.01, confirmations=2)

        node.block_number += 1
        receipt = provider.wait_for_transaction("0xabc", timeout=1, poll_interval=0.01, confirmations=2)
        assert receipt["status"] == "0x1"

    def test_timeout(self, provider: Provider) -> None:
        with pytest.raises(ConfirmationTimeoutError) as excinfo:
            provider.wait_for_transaction("0xdead", timeout=0.05, poll_interval=0.01)
        assert excinfo.value.tx_hash == "0xdead"
        assert excinfo.value.exit_code == 7
