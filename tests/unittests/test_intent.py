# This file is part of setip. See LICENSE file for license information.

import dataclasses

import pytest

from setip.exceptions import InvalidArgument, InvalidMask, MissingPrefix
from setip.intent import (
    USAGE,
    Mode,
    NetworkIntent,
    parse_params,
    require_prefix,
    resolve_intent,
)
from setip.netinfo import CurrentNetworkState

CURRENT = CurrentNetworkState(prefix=22, gateway="10.0.0.1", dns="10.0.0.53")


class TestParseParams:
    @pytest.mark.parametrize(
        "args,mode,expected",
        [
            (
                ["192.168.1.10"],
                Mode.IP_ONLY,
                NetworkIntent("", ip="192.168.1.10"),
            ),
            (
                ["192.168.1.10", "24"],
                Mode.IP_MASK,
                NetworkIntent("", ip="192.168.1.10", prefix=24),
            ),
            (
                ["192.168.1.10", "255.255.252.0"],
                Mode.IP_MASK,
                NetworkIntent("", ip="192.168.1.10", prefix=22),
            ),
            (
                ["DNS", "8.8.8.8"],
                Mode.DNS_ONLY,
                NetworkIntent("", dns="8.8.8.8"),
            ),
            (
                ["dns", "8.8.8.8"],
                Mode.DNS_ONLY,
                NetworkIntent("", dns="8.8.8.8"),
            ),
            (
                ["192.168.1.10", "24", "192.168.1.1"],
                Mode.IP_MASK_GW,
                NetworkIntent(
                    "", ip="192.168.1.10", prefix=24, gateway="192.168.1.1"
                ),
            ),
            (
                ["192.168.1.10", "255.255.255.0", "192.168.1.1", "8.8.8.8"],
                Mode.IP_MASK_GW_DNS,
                NetworkIntent(
                    "",
                    ip="192.168.1.10",
                    prefix=24,
                    gateway="192.168.1.1",
                    dns="8.8.8.8",
                ),
            ),
        ],
    )
    def test_argument_count_selects_mode(self, args, mode, expected):
        assert (mode, expected) == parse_params(args)

    @pytest.mark.parametrize(
        "args", [[], ["1.1.1.1", "24", "1.1.1.254", "8.8.8.8", "extra"]]
    )
    def test_wrong_argument_count_shows_usage(self, args):
        with pytest.raises(InvalidArgument) as exc:
            parse_params(args)
        assert USAGE == str(exc.value)

    @pytest.mark.parametrize(
        "args,message",
        [
            (["999.1.1.1"], "Invalid IP address: 999.1.1.1"),
            (["1.1.1.1", "24", "1.1.1"], "Invalid gateway: 1.1.1"),
            (
                ["1.1.1.1", "24", "1.1.1.254", "8.8.8"],
                "Invalid DNS server: 8.8.8",
            ),
            (["DNS", "8.8.8.256"], "Invalid DNS server: 8.8.8.256"),
        ],
    )
    def test_invalid_values(self, args, message):
        with pytest.raises(InvalidArgument, match=message):
            parse_params(args)

    @pytest.mark.parametrize("mask", ["0", "33", "255.255.255.1"])
    def test_invalid_mask(self, mask):
        with pytest.raises(InvalidMask):
            parse_params(["10.0.0.5", mask])

    def test_trailing_newline_rejected(self):
        with pytest.raises(InvalidArgument, match="Invalid IP address"):
            parse_params(["10.0.0.1\n", "24"])
        with pytest.raises(InvalidMask):
            parse_params(["10.0.0.1", "24\n"])

    def test_ip_checked_before_mask(self):
        with pytest.raises(InvalidArgument, match="Invalid IP address"):
            parse_params(["10.0.0.256", "33"])


class TestNetworkIntent:
    def test_is_immutable(self):
        intent = NetworkIntent("eth0", ip="10.0.0.5")
        with pytest.raises(dataclasses.FrozenInstanceError):
            intent.ip = "10.0.0.6"

    @pytest.mark.parametrize("prefix", [0, 33])
    def test_rejects_invalid_prefix(self, prefix):
        with pytest.raises(InvalidArgument):
            NetworkIntent("eth0", ip="10.0.0.5", prefix=prefix)


class TestResolveIntent:
    def test_ip_only_keeps_current_prefix_gateway_and_dns(self):
        mode, params = parse_params(["10.0.0.50"])
        assert NetworkIntent(
            "eth0",
            ip="10.0.0.50",
            prefix=22,
            gateway="10.0.0.1",
            dns="10.0.0.53",
        ) == resolve_intent(mode, params, "eth0", CURRENT)

    def test_ip_mask_keeps_current_gateway(self):
        mode, params = parse_params(["10.0.0.50", "24"])
        assert NetworkIntent(
            "eth0",
            ip="10.0.0.50",
            prefix=24,
            gateway="10.0.0.1",
            dns="10.0.0.53",
        ) == resolve_intent(mode, params, "eth0", CURRENT)

    def test_dns_only_changes_nothing_else(self):
        mode, params = parse_params(["DNS", "8.8.8.8"])
        assert NetworkIntent("eth0", dns="8.8.8.8") == resolve_intent(
            mode, params, "eth0", CURRENT
        )

    def test_ip_mask_gw_keeps_current_dns(self):
        mode, params = parse_params(["10.0.0.50", "24", "10.0.0.254"])
        assert NetworkIntent(
            "eth0",
            ip="10.0.0.50",
            prefix=24,
            gateway="10.0.0.254",
            dns="10.0.0.53",
        ) == resolve_intent(mode, params, "eth0", CURRENT)

    def test_supplied_values_are_never_replaced(self):
        args = ["10.0.0.50", "24", "10.0.0.254", "9.9.9.9"]
        mode, params = parse_params(args)
        resolved = resolve_intent(mode, params, "eth0", CURRENT)
        assert dataclasses.replace(params, interface="eth0") == resolved

    def test_unknown_current_state_leaves_gaps(self):
        mode, params = parse_params(["10.0.0.50"])
        resolved = resolve_intent(
            mode, params, "eth0", CurrentNetworkState()
        )
        assert NetworkIntent("eth0", ip="10.0.0.50") == resolved

    def test_params_are_not_modified(self):
        mode, params = parse_params(["10.0.0.50"])
        resolve_intent(mode, params, "eth0", CURRENT)
        assert "" == params.interface
        assert params.prefix is None


class TestRequirePrefix:
    def test_intent_prefix_wins(self):
        intent = NetworkIntent("eth0", ip="10.0.0.5", prefix=24)
        assert 24 == require_prefix(intent, 16)

    def test_fallback_used(self):
        intent = NetworkIntent("eth0", ip="10.0.0.5")
        assert 16 == require_prefix(intent, 16)

    def test_missing_prefix_raises(self):
        intent = NetworkIntent("eth0", ip="10.0.0.5")
        with pytest.raises(MissingPrefix, match="eth0"):
            require_prefix(intent, None)

    def test_no_ip_no_prefix_is_fine(self):
        intent = NetworkIntent("eth0", dns="1.1.1.1")
        assert require_prefix(intent, None) is None
