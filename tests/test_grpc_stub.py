"""Tests for infra/grpc_stub.py.

``grpc`` channels are mocked; no sockets are opened.

Coverage:
* Each schema method is bound to its gRPC path.
* ``grpc.RpcError`` is mapped to TransportError with code and hint.
* ``open_stub`` waits for readiness and always closes the channel.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

import grpc
import pytest

from dpservice_cli import wire
from dpservice_cli.exceptions import TransportError
from dpservice_cli.infra.grpc_stub import (
    GrpcDataplaneStub,
    GrpcUnaryCall,
    map_rpc_error,
    open_stub,
)


class _RpcError(grpc.RpcError, grpc.Call):
    """Minimal failed call, as raised by a real unary-unary stub."""

    def __init__(self, code: grpc.StatusCode, details: str = "") -> None:
        super().__init__()
        self._code = code
        self._details = details

    def code(self) -> grpc.StatusCode:
        return self._code

    def details(self) -> str:
        return self._details

    def initial_metadata(self) -> Any:
        return None

    def trailing_metadata(self) -> Any:
        return None

    def is_active(self) -> bool:
        return False

    def time_remaining(self) -> Any:
        return None

    def cancel(self) -> bool:
        return False

    def add_callback(self, callback: Any) -> bool:
        return False


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

class TestMapRpcError:
    def test_unavailable(self) -> None:
        err = map_rpc_error("GetNAT", _RpcError(grpc.StatusCode.UNAVAILABLE, "connection refused"))
        assert isinstance(err, TransportError)
        assert err.code == "UNAVAILABLE"
        assert str(err) == "GetNAT failed: UNAVAILABLE: connection refused"
        assert err.hint is not None and "--address" in err.hint

    def test_deadline_has_timeout_hint(self) -> None:
        err = map_rpc_error("ListRoutes", _RpcError(grpc.StatusCode.DEADLINE_EXCEEDED))
        assert str(err) == "ListRoutes failed: DEADLINE_EXCEEDED"
        assert "--timeout" in (err.hint or "")

    def test_other_code_has_no_hint(self) -> None:
        err = map_rpc_error("AddRoute", _RpcError(grpc.StatusCode.INTERNAL, "oops"))
        assert err.code == "INTERNAL"
        assert err.hint is None

    def test_plain_rpc_error(self) -> None:
        err = map_rpc_error("AddRoute", grpc.RpcError("bare"))
        assert err.code is None
        assert str(err) == "AddRoute failed: RPC error: bare"


class TestGrpcUnaryCall:
    def test_passes_request_and_timeout(self) -> None:
        inner = MagicMock(return_value="response")
        call = GrpcUnaryCall("GetNAT", inner)
        assert call("request", timeout=3.0) == "response"
        inner.assert_called_once_with("request", timeout=3.0)

    def test_wraps_rpc_error_and_chains_cause(self) -> None:
        original = _RpcError(grpc.StatusCode.UNAVAILABLE, "down")
        call = GrpcUnaryCall("GetNAT", MagicMock(side_effect=original))
        with pytest.raises(TransportError) as exc_info:
            call("request")
        assert exc_info.value.__cause__ is original


# ---------------------------------------------------------------------------
# Stub binding
# ---------------------------------------------------------------------------

class TestGrpcDataplaneStub:
    def test_binds_every_method(self) -> None:
        channel = MagicMock()
        stub = GrpcDataplaneStub(channel)

        assert channel.unary_unary.call_count == len(wire.METHODS)
        for method in wire.METHODS:
            assert isinstance(getattr(stub, method), GrpcUnaryCall)

    def test_paths_are_lower_camel(self) -> None:
        channel = MagicMock()
        GrpcDataplaneStub(channel)
        paths = {c.args[0] for c in channel.unary_unary.call_args_list}
        assert "/dpdkonmetal.DPDKonmetal/addRoute" in paths
        assert "/dpdkonmetal.DPDKonmetal/listInterfaces" in paths

    def test_serializers_use_schema_messages(self) -> None:
        channel = MagicMock()
        GrpcDataplaneStub(channel)
        by_path = {c.args[0]: c.kwargs for c in channel.unary_unary.call_args_list}
        kwargs = by_path["/dpdkonmetal.DPDKonmetal/getNAT"]
        request = wire.GetNATRequest(interface_id=b"vm1")
        assert kwargs["request_serializer"](request) == request.SerializeToString()
        response = kwargs["response_deserializer"](
            wire.GetNATResponse(min_port=1).SerializeToString(),
        )
        assert response.min_port == 1


# ---------------------------------------------------------------------------
# open_stub
# ---------------------------------------------------------------------------

class TestOpenStub:
    @patch("dpservice_cli.infra.grpc_stub.grpc.channel_ready_future")
    @patch("dpservice_cli.infra.grpc_stub.grpc.insecure_channel")
    def test_yields_stub_and_closes(
        self, mock_channel: MagicMock, mock_ready: MagicMock
    ) -> None:
        with open_stub("localhost:1337", connect_timeout=4) as stub:
            assert isinstance(stub, GrpcDataplaneStub)

        mock_channel.assert_called_once_with("localhost:1337")
        mock_ready.return_value.result.assert_called_once_with(timeout=4)
        mock_channel.return_value.close.assert_called_once()

    @patch("dpservice_cli.infra.grpc_stub.grpc.channel_ready_future")
    @patch("dpservice_cli.infra.grpc_stub.grpc.insecure_channel")
    def test_not_ready_raises_transport_error(
        self, mock_channel: MagicMock, mock_ready: MagicMock
    ) -> None:
        mock_ready.return_value.result.side_effect = grpc.FutureTimeoutError()

        with pytest.raises(TransportError) as exc_info:
            with open_stub("dp:1337", connect_timeout=0.5):
                pass

        assert exc_info.value.code == "UNAVAILABLE"
        assert "dp:1337" in str(exc_info.value)
        mock_channel.return_value.close.assert_called_once()

    @patch("dpservice_cli.infra.grpc_stub.grpc.channel_ready_future")
    @patch("dpservice_cli.infra.grpc_stub.grpc.insecure_channel")
    def test_closes_on_error_inside_block(
        self, mock_channel: MagicMock, _mock_ready: MagicMock
    ) -> None:
        with pytest.raises(RuntimeError):
            with open_stub("localhost:1337", connect_timeout=4):
                raise RuntimeError("boom")
        mock_channel.return_value.close.assert_called_once()
