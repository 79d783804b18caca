# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import dataclasses

import pytest

from vmdef.libvirt.version import DEFAULT_CONTEXT, VersionContext, pack_version


@pytest.mark.unit
class TestPackVersion:
    @pytest.mark.parametrize(
        "raw, packed",
        [
            ("0.9.8", 9008),
            ("1.1.0", 1001000),
            ("1.1", 1001000),
            ("2", 2000000),
            ("9008", 9008),
            (" 0.9.4 ", 9004),
            (1002002, 1002002),
        ],
    )
    def test_valid(self, raw, packed):
        assert pack_version(raw) == packed

    @pytest.mark.parametrize("raw", ["", "a.b.c", "1.2.3.4", "1.1000.0", -1, True, "1..2"])
    def test_invalid(self, raw):
        with pytest.raises(ValueError):
            pack_version(raw)


@pytest.mark.unit
class TestVersionContext:
    def test_default_gates_everything(self):
        assert DEFAULT_CONTEXT.supports_iotune is False
        assert DEFAULT_CONTEXT.supports_bandwidth is False

    def test_thresholds(self):
        assert VersionContext(9008, 1001000).supports_iotune
        assert not VersionContext(9007, 1001000).supports_iotune
        assert not VersionContext(9008, 1000999).supports_iotune
        assert VersionContext(9004, 0).supports_bandwidth
        assert not VersionContext(9003, 0).supports_bandwidth

    def test_from_strings(self):
        ctx = VersionContext.from_strings("0.9.8", "1.1.0")
        assert ctx == VersionContext(libvirt_version=9008, qemu_version=1001000)

    def test_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_CONTEXT.libvirt_version = 1  # type: ignore[misc]

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            VersionContext(libvirt_version=-1)
