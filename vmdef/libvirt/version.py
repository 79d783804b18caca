# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# vmdef/libvirt/version.py
"""
Hypervisor/emulator version numbers that gate optional markup.

Versions use libvirt's packed encoding: major * 1,000,000 + minor * 1,000 +
micro, so libvirt 0.9.8 is 9008 and qemu 1.1.0 is 1001000. Discovery of the
numbers happens elsewhere (typically once at agent startup); a VersionContext
is an immutable value handed to every render call.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

# <iotune> needs libvirt 0.9.8 and qemu 1.1.0
IOTUNE_MIN_LIBVIRT = 9008
IOTUNE_MIN_QEMU = 1001000

# <bandwidth> needs libvirt 0.9.4
BANDWIDTH_MIN_LIBVIRT = 9004


def pack_version(v: Union[int, str]) -> int:
    """
    Accept a packed int, a digit string, or a dotted "X.Y.Z" string.

        >>> pack_version("0.9.8")
        9008
        >>> pack_version("1.1")
        1001000
    """
    if isinstance(v, bool):
        raise ValueError(f"invalid version: {v!r}")
    if isinstance(v, int):
        if v < 0:
            raise ValueError(f"version must be >= 0, got: {v}")
        return v

    s = str(v).strip()
    if s.isdigit():
        return int(s)

    parts = s.split(".")
    if not 1 <= len(parts) <= 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"invalid version: {v!r}")
    nums = [int(p) for p in parts] + [0] * (3 - len(parts))
    major, minor, micro = nums
    if minor > 999 or micro > 999:
        raise ValueError(f"version component out of range: {v!r}")
    return major * 1_000_000 + minor * 1_000 + micro


@dataclass(frozen=True)
class VersionContext:
    libvirt_version: int = 0
    qemu_version: int = 0

    def __post_init__(self) -> None:
        if self.libvirt_version < 0 or self.qemu_version < 0:
            raise ValueError("version numbers must be >= 0")

    @classmethod
    def from_strings(cls, libvirt: Union[int, str], qemu: Union[int, str]) -> "VersionContext":
        return cls(libvirt_version=pack_version(libvirt), qemu_version=pack_version(qemu))

    @property
    def supports_iotune(self) -> bool:
        return self.libvirt_version >= IOTUNE_MIN_LIBVIRT and self.qemu_version >= IOTUNE_MIN_QEMU

    @property
    def supports_bandwidth(self) -> bool:
        return self.libvirt_version >= BANDWIDTH_MIN_LIBVIRT


# Nothing version-gated is rendered under the default context.
DEFAULT_CONTEXT = VersionContext()
