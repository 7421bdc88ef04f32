"""
Module 07 - Provider Collaborators Unit Tests
Tests for providers/*

Tests:
- Bounded retry with backoff
- JSON-RPC request shape and error handling
- Peer id contract call encoding and ABI decoding
- Peer id resolution preferring the contract over chain state
- IPNI advertisement selection and lookup failures
"""
import json
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest
import requests

from core.schemas import IndexerResult, ProviderLookupError, RpcError
from providers import (
    FilecoinRpcClient,
    IpniClient,
    MinerInfoClient,
    RetryPolicy,
    SmartContractClient,
    decode_peer_data,
    decode_protocol,
    encode_get_peer_data,
    retry_call,
)
from providers.smart_contract import parse_miner_number

from fixtures.common import FakeResponse, make_http, requested

RPC_URL = "https://api.node.glif.io/"
INDEX_URL = "https://cid.contact"
CID = "bafkreih25dih6ug3xtj73vswccw423b56ilrwmnos4cbwhrceudopdp5sq"

# base64 of the varint-encoded transport multicodec
HTTP_METADATA = "oBI="
GRAPHSYNC_METADATA = "kBI="
BITSWAP_METADATA = "gBI="


def abi_peer_data(peer_id: str, signature: bytes = b"") -> bytes:
    """ABI encoding of a returned (string peerID, bytes signature) tuple."""
    def word(n):
        return n.to_bytes(32, "big")

    def pad(b):
        return b + b"\x00" * (-len(b) % 32)

    raw = peer_id.encode()
    string_part = word(len(raw)) + pad(raw)
    bytes_part = word(len(signature)) + pad(signature)
    tuple_body = word(64) + word(64 + len(string_part)) + string_part + bytes_part
    return word(32) + tuple_body


class Recorder:
    """Sleep replacement that records requested delays."""

    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


# =============================================================================
# Retry
# =============================================================================

class TestRetry:
    """Tests for RetryPolicy and retry_call()."""

    def test_delays_grow_and_cap(self):
        policy = RetryPolicy(max_attempts=5, min_delay_s=5, multiplier=1.5, max_delay_s=10)

        assert [policy.delay_for(n) for n in (1, 2, 3)] == [5, 7.5, 10]

    def test_succeeds_after_failures(self):
        sleep = Recorder()
        fn = Mock(side_effect=[RpcError("down", status_code=502), RpcError("down", status_code=503), "ok"])

        result = retry_call(fn, RetryPolicy(max_attempts=5, min_delay_s=1, multiplier=2), sleep=sleep)

        assert result == "ok"
        assert fn.call_count == 3
        assert sleep.delays == [1, 2]

    def test_gives_up(self):
        """Test the last error is re-raised once attempts are exhausted."""
        sleep = Recorder()
        errors = [RpcError(f"down {i}", status_code=500) for i in range(3)]
        fn = Mock(side_effect=errors)

        with pytest.raises(RpcError) as exc_info:
            retry_call(fn, RetryPolicy(max_attempts=3, min_delay_s=1), sleep=sleep)

        assert exc_info.value is errors[-1]
        assert len(sleep.delays) == 2

    def test_non_retryable_raised_immediately(self):
        sleep = Recorder()
        fn = Mock(side_effect=RpcError("bad params", status_code=200, rpc_code=-32602))

        with pytest.raises(RpcError):
            retry_call(fn, RetryPolicy(max_attempts=5), sleep=sleep)

        assert fn.call_count == 1
        assert sleep.delays == []

    def test_custom_predicate(self):
        fn = Mock(side_effect=[ValueError("a"), "ok"])

        result = retry_call(
            fn, RetryPolicy(max_attempts=2, min_delay_s=0),
            should_retry=lambda e: isinstance(e, ValueError),
            sleep=Recorder(),
        )

        assert result == "ok"


# =============================================================================
# JSON-RPC
# =============================================================================

class TestFilecoinRpc:
    """Tests for FilecoinRpcClient.call()."""

    def test_request_shape(self):
        def handler(method, url, **kwargs):
            return FakeResponse(200, json_body={"jsonrpc": "2.0", "id": 1, "result": {"Cids": []}})

        http = make_http(handler)
        rpc = FilecoinRpcClient(http, RPC_URL, "secret")

        assert rpc.call("Filecoin.ChainHead") == {"Cids": []}

        call = http._session.request.call_args.kwargs
        assert call["method"] == "POST"
        assert call["url"] == RPC_URL
        assert call["json"] == {"jsonrpc": "2.0", "id": 1, "method": "Filecoin.ChainHead", "params": []}
        assert call["headers"]["Authorization"] == "Bearer secret"

    def test_request_ids_unique_across_threads(self):
        http = make_http(lambda method, url, **kw: FakeResponse(200, json_body={"result": 1}))
        rpc = FilecoinRpcClient(http, RPC_URL)

        with ThreadPoolExecutor(max_workers=4) as pool:
            list(pool.map(lambda _: rpc.call("Filecoin.ChainHead"), range(40)))

        ids = [c.kwargs["json"]["id"] for c in http._session.request.call_args_list]
        assert sorted(ids) == list(range(1, 41))

    def test_no_auth_header_without_token(self):
        http = make_http(lambda method, url, **kw: FakeResponse(200, json_body={"result": 1}))

        FilecoinRpcClient(http, RPC_URL).call("eth_chainId")

        assert "Authorization" not in http._session.request.call_args.kwargs["headers"]

    def test_params_passed_positionally(self):
        http = make_http(lambda method, url, **kw: FakeResponse(200, json_body={"result": None}))

        FilecoinRpcClient(http, RPC_URL).call("Filecoin.StateMinerInfo", "f0123", [{"/": "bafyhead"}])

        params = http._session.request.call_args.kwargs["json"]["params"]
        assert params == ["f0123", [{"/": "bafyhead"}]]

    def test_error_object(self):
        http = make_http(lambda method, url, **kw: FakeResponse(
            200, json_body={"error": {"code": 1, "message": "actor not found"}},
        ))

        with pytest.raises(RpcError, match="actor not found") as exc_info:
            FilecoinRpcClient(http, RPC_URL).call("Filecoin.StateMinerInfo", "f0999")

        assert exc_info.value.rpc_code == 1
        assert not exc_info.value.retryable

    def test_http_error_status(self):
        http = make_http(lambda method, url, **kw: FakeResponse(502, b"Bad Gateway"))

        with pytest.raises(RpcError, match="502") as exc_info:
            FilecoinRpcClient(http, RPC_URL).call("Filecoin.ChainHead")

        assert exc_info.value.retryable

    def test_transport_failure(self):
        def handler(method, url, **kwargs):
            raise requests.ConnectionError("refused")

        with pytest.raises(RpcError) as exc_info:
            FilecoinRpcClient(make_http(handler), RPC_URL).call("Filecoin.ChainHead")

        assert exc_info.value.status_code is None
        assert exc_info.value.retryable

    def test_invalid_json(self):
        http = make_http(lambda method, url, **kw: FakeResponse(200, b"<html>"))

        with pytest.raises(RpcError, match="invalid JSON"):
            FilecoinRpcClient(http, RPC_URL).call("Filecoin.ChainHead")


# =============================================================================
# Peer ID Contract
# =============================================================================

class TestSmartContract:
    """Tests for the peer id mapping contract client."""

    def test_encode_call_data(self):
        data = encode_get_peer_data(1234)

        assert data == "0x3e2eac07" + "0" * 60 + "04d2"

    @pytest.mark.parametrize("miner_id,number", [("f01234", 1234), ("t0999", 999), ("42", 42)])
    def test_parse_miner_number(self, miner_id, number):
        assert parse_miner_number(miner_id) == number

    def test_parse_invalid_miner(self):
        with pytest.raises(ValueError):
            parse_miner_number("f3abcdef")

    def test_decode_peer_data(self):
        assert decode_peer_data(abi_peer_data("12D3KooWContract", b"\x01\x02")) == "12D3KooWContract"

    def test_decode_empty(self):
        assert decode_peer_data(b"") == ""
        assert decode_peer_data(abi_peer_data("")) == ""

    def test_decode_truncated(self):
        with pytest.raises(ValueError):
            decode_peer_data(abi_peer_data("12D3KooWContract")[:100])

    def test_get_peer_id(self):
        rpc = Mock()
        rpc.call.return_value = "0x" + abi_peer_data("12D3KooWContract").hex()
        client = SmartContractClient(rpc, "0xContract")

        assert client.get_peer_id("f01234") == "12D3KooWContract"
        rpc.call.assert_called_once_with(
            "eth_call",
            {"to": "0xContract", "data": encode_get_peer_data(1234)},
            "latest",
        )

    def test_call_failure(self):
        rpc = Mock()
        rpc.call.side_effect = RpcError("execution reverted", status_code=200, rpc_code=3)

        with pytest.raises(ProviderLookupError, match="f01234"):
            SmartContractClient(rpc, "0xContract").get_peer_id("f01234")


# =============================================================================
# Miner Info
# =============================================================================

def make_rpc(peer_id="12D3KooWChain", head_errors=()):
    """Mock RPC answering ChainHead and StateMinerInfo."""
    head_errors = list(head_errors)

    def call(method, *params):
        if method == "Filecoin.ChainHead":
            if head_errors:
                raise head_errors.pop(0)
            return {"Cids": [{"/": "bafyhead"}]}
        if method == "Filecoin.StateMinerInfo":
            assert params == ("f01234", [{"/": "bafyhead"}])
            return {"PeerId": peer_id}
        raise AssertionError(f"unexpected RPC {method}")

    rpc = Mock()
    rpc.call.side_effect = call
    return rpc


def make_contract(peer_id="", error=None):
    contract = Mock()
    if error is not None:
        contract.get_peer_id.side_effect = error
    else:
        contract.get_peer_id.return_value = peer_id
    return contract


class TestMinerInfo:
    """Tests for MinerInfoClient.get_miner_peer_id()."""

    def test_contract_wins(self):
        client = MinerInfoClient(make_rpc(), make_contract("12D3KooWContract"), sleep=Recorder())

        assert client.get_miner_peer_id("f01234") == "12D3KooWContract"

    def test_chain_used_when_contract_empty(self):
        client = MinerInfoClient(make_rpc(), make_contract(""), sleep=Recorder())

        assert client.get_miner_peer_id("f01234") == "12D3KooWChain"

    def test_chain_used_when_contract_fails(self):
        contract = make_contract(error=ProviderLookupError("reverted"))
        client = MinerInfoClient(make_rpc(), contract, sleep=Recorder())

        assert client.get_miner_peer_id("f01234") == "12D3KooWChain"

    def test_contract_used_when_chain_fails(self):
        rpc = make_rpc(head_errors=[RpcError("actor not found", status_code=200, rpc_code=1)])
        client = MinerInfoClient(rpc, make_contract("12D3KooWContract"), sleep=Recorder())

        assert client.get_miner_peer_id("f01234") == "12D3KooWContract"

    def test_both_fail(self):
        rpc = make_rpc(head_errors=[RpcError("bad", status_code=200, rpc_code=1)])
        client = MinerInfoClient(rpc, make_contract(error=ProviderLookupError("reverted")), sleep=Recorder())

        with pytest.raises(ProviderLookupError, match="Failed to obtain Miner's Index Provider PeerID"):
            client.get_miner_peer_id("f01234")

    def test_both_empty(self):
        client = MinerInfoClient(make_rpc(peer_id=""), make_contract(""), sleep=Recorder())

        with pytest.raises(ProviderLookupError):
            client.get_miner_peer_id("f01234")

    def test_chain_head_retried(self):
        """Test transient node failures are retried with backoff."""
        sleep = Recorder()
        rpc = make_rpc(head_errors=[RpcError("down", status_code=503)])
        client = MinerInfoClient(
            rpc, make_contract(""),
            RetryPolicy(max_attempts=5, min_delay_s=5, multiplier=1.5),
            sleep=sleep,
        )

        assert client.get_peer_id_from_miner_info("f01234") == "12D3KooWChain"
        assert sleep.delays == [5]


# =============================================================================
# IPNI
# =============================================================================

def advertisement(peer_id, addrs, metadata):
    return {
        "ContextID": "ZmlsZWNvaW4=",
        "Metadata": metadata,
        "Provider": {"ID": peer_id, "Addrs": addrs},
    }


def index_response(*results):
    return {"MultihashResults": [{"Multihash": "EiA=", "ProviderResults": list(results)}]}


def make_ipni(handler, max_attempts=3):
    sleep = Recorder()
    client = IpniClient(
        make_http(handler),
        INDEX_URL,
        RetryPolicy(max_attempts=max_attempts, min_delay_s=1, multiplier=2),
        sleep=sleep,
    )
    return client, sleep


class TestDecodeProtocol:
    """Tests for decode_protocol()."""

    @pytest.mark.parametrize("metadata,protocol", [
        (HTTP_METADATA, "http"),
        (GRAPHSYNC_METADATA, "graphsync"),
        (BITSWAP_METADATA, "bitswap"),
        ("", None),
        (None, None),
        ("!!!", None),
    ])
    def test_decode(self, metadata, protocol):
        assert decode_protocol(metadata) == protocol


class TestIpniClient:
    """Tests for IpniClient.query_the_index()."""

    def test_http_advertisement(self):
        body = index_response(
            advertisement("12D3Other", ["/dns/other.example/tcp/443/https"], HTTP_METADATA),
            advertisement("12D3Peer", ["/dns/frisbii.fly.dev/tcp/443/https"], HTTP_METADATA),
        )
        client, _ = make_ipni(lambda method, url, **kw: FakeResponse(200, json_body=body))

        result = client.query_the_index(CID, "12D3Peer")

        assert result.indexer_result == IndexerResult.OK
        assert result.provider.address == "/dns/frisbii.fly.dev/tcp/443/https"
        assert result.provider.protocol == "http"
        assert requested(client.http) == [("GET", f"{INDEX_URL}/cid/{CID}")]

    def test_graphsync_fallback(self):
        body = index_response(
            advertisement("12D3Peer", ["/ip4/1.2.3.4/tcp/3000"], GRAPHSYNC_METADATA),
        )
        client, _ = make_ipni(lambda method, url, **kw: FakeResponse(200, json_body=body))

        result = client.query_the_index(CID, "12D3Peer")

        assert result.indexer_result == IndexerResult.HTTP_NOT_ADVERTISED
        assert result.provider.protocol == "graphsync"
        assert result.provider.address == "/ip4/1.2.3.4/tcp/3000/p2p/12D3Peer"

    def test_http_preferred_over_graphsync(self):
        body = index_response(
            advertisement("12D3Peer", ["/ip4/1.2.3.4/tcp/3000"], GRAPHSYNC_METADATA),
            advertisement("12D3Peer", ["/ip4/1.2.3.4/tcp/80/http"], HTTP_METADATA),
        )
        client, _ = make_ipni(lambda method, url, **kw: FakeResponse(200, json_body=body))

        assert client.query_the_index(CID, "12D3Peer").provider.protocol == "http"

    def test_only_other_providers(self):
        body = index_response(
            advertisement("12D3Other", ["/ip4/5.6.7.8/tcp/80/http"], HTTP_METADATA),
            advertisement("12D3Peer", [], HTTP_METADATA),
            advertisement("12D3Peer", ["/ip4/1.2.3.4/tcp/4001"], BITSWAP_METADATA),
        )
        client, _ = make_ipni(lambda method, url, **kw: FakeResponse(200, json_body=body))

        result = client.query_the_index(CID, "12D3Peer")

        assert result.indexer_result == IndexerResult.NO_VALID_ADVERTISEMENT
        assert result.provider is None
        assert [p.id for p in result.alternative_providers] == ["12D3Other"]

    def test_not_found(self):
        """Test a 404 is reported without retrying."""
        client, sleep = make_ipni(lambda method, url, **kw: FakeResponse(404, b"not found"))

        result = client.query_the_index(CID, "12D3Peer")

        assert result.indexer_result == "ERROR_404"
        assert sleep.delays == []

    def test_server_error_retried(self):
        client, sleep = make_ipni(lambda method, url, **kw: FakeResponse(502, b"bad gateway"))

        result = client.query_the_index(CID, "12D3Peer")

        assert result.indexer_result == "ERROR_502"
        assert sleep.delays == [1, 2]
        assert len(requested(client.http)) == 3

    def test_recovers_after_server_error(self):
        responses = [
            FakeResponse(503, b"busy"),
            FakeResponse(200, json_body=index_response(
                advertisement("12D3Peer", ["/ip4/1.2.3.4/tcp/80/http"], HTTP_METADATA),
            )),
        ]
        client, _ = make_ipni(lambda method, url, **kw: responses.pop(0))

        assert client.query_the_index(CID, "12D3Peer").indexer_result == IndexerResult.OK

    def test_network_failure(self):
        def handler(method, url, **kwargs):
            raise requests.ConnectionError("dns")

        client, _ = make_ipni(handler)

        assert client.query_the_index(CID, "12D3Peer").indexer_result == IndexerResult.ERROR_FETCH

    def test_invalid_json(self):
        client, _ = make_ipni(lambda method, url, **kw: FakeResponse(200, b"{nope"))

        assert client.query_the_index(CID, "12D3Peer").indexer_result == IndexerResult.ERROR_FETCH

    def test_empty_results(self):
        client, _ = make_ipni(lambda method, url, **kw: FakeResponse(200, json.dumps({}).encode()))

        result = client.query_the_index(CID, "12D3Peer")

        assert result.indexer_result == IndexerResult.NO_VALID_ADVERTISEMENT

    @pytest.mark.parametrize("body", [
        b'["x"]',
        b"null",
        b'{"MultihashResults": ["x"]}',
        b'{"MultihashResults": [{"ProviderResults": [1]}]}',
        b'{"MultihashResults": {"ProviderResults": []}}',
    ])
    def test_malformed_body(self, body):
        """Test JSON of the wrong shape is reported as a fetch error."""
        client, sleep = make_ipni(lambda method, url, **kw: FakeResponse(200, body))

        result = client.query_the_index(CID, "12D3Peer")

        assert result.indexer_result == IndexerResult.ERROR_FETCH
        assert sleep.delays == []

    def test_provider_without_object_shape_skipped(self):
        body = index_response(
            {"Provider": "12D3Peer", "Metadata": HTTP_METADATA},
            advertisement("12D3Peer", ["/ip4/1.2.3.4/tcp/80/http"], HTTP_METADATA),
        )
        client, _ = make_ipni(lambda method, url, **kw: FakeResponse(200, json_body=body))

        assert client.query_the_index(CID, "12D3Peer").indexer_result == IndexerResult.OK
