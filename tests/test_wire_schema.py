"""Tests for wire/schema.py: the runtime-built dpdkonmetal descriptors."""

from __future__ import annotations

import pytest

from dpservice_cli import wire
from dpservice_cli.wire.schema import MESSAGES, build_file_descriptor


class TestSchema:
    def test_every_method_has_known_messages(self) -> None:
        for request, response in wire.METHODS.values():
            assert request in MESSAGES
            assert response in MESSAGES

    def test_service_methods_are_lower_camel(self) -> None:
        (service,) = build_file_descriptor().service
        names = {m.name for m in service.method}
        assert "createLoadBalancer" in names
        assert "getNAT" in names
        assert len(names) == len(wire.METHODS)

    @pytest.mark.parametrize(
        ("method", "path"),
        [
            ("AddRoute", "/dpdkonmetal.DPDKonmetal/addRoute"),
            ("ListInterfaces", "/dpdkonmetal.DPDKonmetal/listInterfaces"),
            ("GetNAT", "/dpdkonmetal.DPDKonmetal/getNAT"),
        ],
    )
    def test_method_path(self, method: str, path: str) -> None:
        assert wire.method_path(method) == path

    def test_message_serialises(self) -> None:
        msg = wire.VNIRouteMsg(
            vni=wire.VNIMsg(vni=100),
            route=wire.Route(weight=100, nexthop_address=b"fc00::1"),
        )
        parsed = wire.VNIRouteMsg.FromString(msg.SerializeToString())
        assert parsed == msg
        assert parsed.route.nexthop_address == b"fc00::1"

    def test_enum_values(self) -> None:
        assert int(wire.Protocol.TCP) == 6
        assert int(wire.Protocol.UDP) == 17
        assert int(wire.IPVersion.IPv6) == 1
        assert int(wire.NATInfoType.NATInfoNeighbor) == 2
        assert int(wire.VniType.VniBoth) == 2

    def test_service_information_methods(self) -> None:
        assert wire.METHODS["GetNATInfo"] == ("GetNATInfoRequest", "GetNATInfoResponse")
        assert wire.method_path("IsVniInUse") == "/dpdkonmetal.DPDKonmetal/isVniInUse"
        assert wire.method_path("CheckInitialized") == "/dpdkonmetal.DPDKonmetal/checkInitialized"
