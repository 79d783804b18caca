# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# vmdef/libvirt/disk.py
"""
<disk> device descriptor.

Target labels are either given verbatim or derived from a zero-based device
index by :func:`dev_label`. Index 2 is the CD-ROM slot (hdc), so every index
from 2 upward is shifted by one letter:

    >>> dev_label(0, DiskBus.VIRTIO)
    'vda'
    >>> dev_label(2, DiskBus.SCSI)
    'sdd'
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from ..core.xml_utils import block, close_tag, empty_tag, join_lines, open_tag, text_elem
from .version import DEFAULT_CONTEXT, VersionContext

logger = logging.getLogger(__name__)

CDROM_INDEX = 2
CDROM_LABEL = "hdc"

# shifted past the CD-ROM slot, index 24 is the last one that maps to "z"
MAX_DEV_INDEX = 24


class DeviceType(Enum):
    FLOPPY = "floppy"
    DISK = "disk"
    CDROM = "cdrom"
    LUN = "lun"


class DiskType(Enum):
    FILE = "file"
    BLOCK = "block"
    DIRECTORY = "dir"
    NETWORK = "network"


class DiskProtocol(Enum):
    RBD = "rbd"
    SHEEPDOG = "sheepdog"
    GLUSTER = "gluster"


class DiskBus(Enum):
    IDE = "ide"
    SCSI = "scsi"
    VIRTIO = "virtio"
    XEN = "xen"
    USB = "usb"
    UML = "uml"
    FDC = "fdc"


class DiskFmtType(Enum):
    RAW = "raw"
    QCOW2 = "qcow2"


class DiskCacheMode(Enum):
    NONE = "none"
    WRITEBACK = "writeback"
    WRITETHROUGH = "writethrough"


def dev_label(dev_id: int, bus: Optional[DiskBus]) -> str:
    if dev_id < 0:
        raise ValueError(f"device index must be >= 0, got: {dev_id}")
    if dev_id > MAX_DEV_INDEX:
        raise ValueError(f"device index must be <= {MAX_DEV_INDEX}, got: {dev_id}")
    if dev_id >= CDROM_INDEX:
        dev_id += 1
    suffix = chr(ord("a") + dev_id)
    if bus is DiskBus.SCSI:
        return "sd" + suffix
    if bus is DiskBus.VIRTIO:
        return "vd" + suffix
    return "hd" + suffix


LabelOrIndex = Union[str, int]


def _resolve_label(label: LabelOrIndex, bus: Optional[DiskBus]) -> str:
    if isinstance(label, int) and not isinstance(label, bool):
        return dev_label(label, bus)
    return str(label)


@dataclass
class DiskDef:
    device_type: DeviceType = DeviceType.DISK
    disk_type: DiskType = DiskType.FILE
    source_path: Optional[str] = None
    disk_label: Optional[str] = None
    bus: Optional[DiskBus] = None
    fmt: Optional[DiskFmtType] = None
    cache_mode: DiskCacheMode = DiskCacheMode.NONE

    # network backing
    protocol: Optional[DiskProtocol] = None
    source_host: Optional[str] = None
    source_port: int = 0
    auth_username: Optional[str] = None
    auth_secret_uuid: Optional[str] = None

    readonly: bool = False
    shareable: bool = False
    defer_attach: bool = False
    serial: Optional[str] = None
    qemu_driver: bool = True

    # I/O throttling; only positive values are rendered
    bytes_read_rate: Optional[int] = None
    bytes_write_rate: Optional[int] = None
    iops_read_rate: Optional[int] = None
    iops_write_rate: Optional[int] = None

    # --- constructors --------------------------------------------------

    @classmethod
    def file_based(cls, path: str, label: LabelOrIndex, bus: DiskBus, fmt: DiskFmtType) -> "DiskDef":
        return cls(
            disk_type=DiskType.FILE,
            source_path=path,
            disk_label=_resolve_label(label, bus),
            bus=bus,
            fmt=fmt,
        )

    @classmethod
    def iso(cls, path: Optional[str]) -> "DiskDef":
        """CD-ROM in the reserved hdc slot; path None leaves the tray empty."""
        return cls(
            device_type=DeviceType.CDROM,
            disk_type=DiskType.FILE,
            source_path=path,
            disk_label=CDROM_LABEL,
            bus=DiskBus.IDE,
            fmt=DiskFmtType.RAW,
        )

    @classmethod
    def block_based(cls, path: str, label: LabelOrIndex, bus: DiskBus) -> "DiskDef":
        return cls(
            disk_type=DiskType.BLOCK,
            source_path=path,
            disk_label=_resolve_label(label, bus),
            bus=bus,
            fmt=DiskFmtType.RAW,
        )

    @classmethod
    def network_based(
        cls,
        name: str,
        host: str,
        port: int,
        auth_username: Optional[str],
        auth_secret_uuid: Optional[str],
        label: LabelOrIndex,
        bus: DiskBus,
        protocol: DiskProtocol,
        fmt: DiskFmtType,
    ) -> "DiskDef":
        return cls(
            disk_type=DiskType.NETWORK,
            source_path=name,
            source_host=host,
            source_port=port,
            auth_username=auth_username,
            auth_secret_uuid=auth_secret_uuid,
            disk_label=_resolve_label(label, bus),
            bus=bus,
            protocol=protocol,
            fmt=fmt,
        )

    # --- accessors -----------------------------------------------------

    @property
    def disk_seq(self) -> int:
        if not self.disk_label:
            raise ValueError("disk has no target label")
        return ord(self.disk_label[-1]) - ord("a")

    def set_rates(
        self,
        *,
        bytes_read: Optional[int] = None,
        bytes_write: Optional[int] = None,
        iops_read: Optional[int] = None,
        iops_write: Optional[int] = None,
    ) -> None:
        self.bytes_read_rate = bytes_read
        self.bytes_write_rate = bytes_write
        self.iops_read_rate = iops_read
        self.iops_write_rate = iops_write

    # --- rendering -----------------------------------------------------

    def _source_lines(self) -> List[str]:
        if self.disk_type is DiskType.FILE:
            if self.source_path is not None:
                return [empty_tag("source", [("file", self.source_path)])]
            if self.device_type is DeviceType.CDROM:
                return [empty_tag("source", [("file", "")])]
            return [empty_tag("source")]

        if self.disk_type is DiskType.BLOCK:
            return [empty_tag("source", [("dev", self.source_path)])]

        if self.disk_type is DiskType.DIRECTORY:
            return [empty_tag("source", [("dir", self.source_path)])]

        # network
        proto = self.protocol.value if self.protocol else None
        port = self.source_port if self.source_port else None
        lines = block(
            "source",
            [empty_tag("host", [("name", self.source_host), ("port", port)])],
            [("protocol", proto), ("name", self.source_path)],
        )
        if self.auth_username is not None:
            lines += block(
                "auth",
                [empty_tag("secret", [("type", "ceph"), ("uuid", self.auth_secret_uuid)])],
                [("username", self.auth_username)],
            )
        return lines

    def _iotune_lines(self, ctx: VersionContext) -> List[str]:
        rates = [
            ("read_bytes_sec", self.bytes_read_rate),
            ("write_bytes_sec", self.bytes_write_rate),
            ("read_iops_sec", self.iops_read_rate),
            ("write_iops_sec", self.iops_write_rate),
        ]
        positive = [(tag, v) for tag, v in rates if v is not None and v > 0]
        if self.device_type is DeviceType.CDROM or not positive:
            return []
        if not ctx.supports_iotune:
            logger.debug(
                "Skipping <iotune> for %s: libvirt=%s qemu=%s below threshold",
                self.disk_label,
                ctx.libvirt_version,
                ctx.qemu_version,
            )
            return []
        return block("iotune", [text_elem(tag, v) for tag, v in positive])

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        lines = [open_tag("disk", [("device", self.device_type.value), ("type", self.disk_type.value)])]
        if self.qemu_driver:
            fmt = self.fmt.value if self.fmt else None
            lines.append(empty_tag("driver", [("name", "qemu"), ("type", fmt), ("cache", self.cache_mode.value)]))
        lines.extend(self._source_lines())
        bus = self.bus.value if self.bus else None
        lines.append(empty_tag("target", [("dev", self.disk_label), ("bus", bus)]))
        if self.readonly:
            lines.append(empty_tag("readonly"))
        if self.shareable:
            lines.append(empty_tag("shareable"))
        if self.serial and self.device_type is not DeviceType.LUN:
            lines.append(text_elem("serial", self.serial))
        lines.extend(self._iotune_lines(ctx))
        lines.append(close_tag("disk"))
        return join_lines(lines)
