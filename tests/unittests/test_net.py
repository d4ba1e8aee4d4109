# This file is part of setip. See LICENSE file for license information.

import logging

import pytest

from setip import net
from setip.exceptions import InvalidArgument, InvalidMask


class TestIsIpv4Address:
    @pytest.mark.parametrize(
        "address",
        ["192.168.1.10", "0.0.0.0", "255.255.255.255", "10.0.0.1"],
    )
    def test_valid_addresses(self, address):
        assert net.is_ipv4_address(address)

    @pytest.mark.parametrize(
        "address",
        [
            "999.1.1.1",
            "256.0.0.1",
            "1.2.3",
            "1.2.3.4.5",
            "1.2.3.a",
            "1.2.3.4 ",
            "10.0.0.1\n",
            "",
            "1234.1.1.1",
            None,
            "fe80::1",
        ],
    )
    def test_invalid_addresses(self, address):
        assert not net.is_ipv4_address(address)


class TestIsValidPrefix:
    @pytest.mark.parametrize("prefix", ["1", "9", "24", "32", 1, 32])
    def test_valid(self, prefix):
        assert net.is_valid_prefix(prefix)

    @pytest.mark.parametrize(
        "prefix",
        ["0", "33", "024", "-1", "", "abc", "24\n", 0, 33, True, None],
    )
    def test_invalid(self, prefix):
        assert not net.is_valid_prefix(prefix)


class TestMaskToPrefix:
    @pytest.mark.parametrize(
        "mask,expected",
        [
            ("24", 24),
            ("255.255.255.0", 24),
            ("255.255.252.0", 22),
            ("255.255.255.255", 32),
            ("128.0.0.0", 1),
            ("255.255.255.128", 25),
        ],
    )
    def test_valid_masks(self, mask, expected):
        assert expected == net.mask_to_prefix(mask)

    @pytest.mark.parametrize(
        "mask",
        [
            "255.255.255.1",
            "255.255.256.0",
            "0",
            "33",
            "0.0.0.0",
            "foo",
            "",
            "255.255.255.0\n",
        ],
    )
    def test_invalid_masks_raise(self, mask):
        with pytest.raises(InvalidMask, match="Invalid netmask"):
            net.mask_to_prefix(mask)

    def test_invalid_mask_is_an_invalid_argument(self):
        with pytest.raises(InvalidArgument):
            net.mask_to_prefix("255.255.255.1")

    def test_non_contiguous_mask_is_accepted_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert 16 == net.mask_to_prefix("255.0.255.0")
        assert "255.0.255.0 is not contiguous" in caplog.text

    def test_contiguous_mask_does_not_warn(self, caplog):
        with caplog.at_level(logging.WARNING):
            net.mask_to_prefix("255.255.0.0")
        assert "contiguous" not in caplog.text


class TestIsContiguousMask:
    @pytest.mark.parametrize(
        "mask,expected",
        [
            ("255.255.255.0", True),
            ("255.255.255.255", True),
            ("0.0.0.0", True),
            ("255.0.255.0", False),
            ("0.255.255.255", False),
            ("not-a-mask", False),
        ],
    )
    def test_is_contiguous_mask(self, mask, expected):
        assert expected is net.is_contiguous_mask(mask)


class TestPrefixToMask:
    @pytest.mark.parametrize(
        "prefix,expected",
        [
            (24, "255.255.255.0"),
            ("22", "255.255.252.0"),
            (1, "128.0.0.0"),
            (32, "255.255.255.255"),
            (25, "255.255.255.128"),
        ],
    )
    def test_prefix_to_mask(self, prefix, expected):
        assert expected == net.prefix_to_mask(prefix)

    def test_every_prefix_converts_back(self):
        for prefix in range(1, 33):
            assert prefix == net.mask_to_prefix(net.prefix_to_mask(prefix))

    @pytest.mark.parametrize("prefix", [0, 33, "0", "x", None])
    def test_invalid_prefix_raises(self, prefix):
        with pytest.raises(InvalidMask, match="Invalid prefix length"):
            net.prefix_to_mask(prefix)
