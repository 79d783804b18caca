# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# vmdef/libvirt/devices.py
"""
Leaf <devices> children and the DevicesDef collection.

DevicesDef keeps one ordered list per DeviceKind and renders the kinds in
DeviceKind declaration order, so output is reproducible regardless of the
order in which different kinds were added.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

from ..core.exceptions import DuplicateDiskLabelError
from ..core.xml_utils import block, close_tag, empty_tag, join_lines, open_tag, text_elem
from .disk import DiskDef, DiskType
from .guest import GuestType
from .interface import InterfaceDef
from .version import DEFAULT_CONTEXT, VersionContext

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_DIR = "/var/lib/libvirt/qemu"

NO_PORT = -1
NO_GRAPHICS_PORT = -2


@dataclass
class ConsoleDef:
    type: str
    tty_path: Optional[str] = None
    source: Optional[str] = None
    port: int = NO_PORT

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        lines = [open_tag("console", [("type", self.type), ("tty", self.tty_path)])]
        if self.source is not None:
            lines.append(empty_tag("source", [("path", self.source)]))
        if self.port != NO_PORT:
            lines.append(empty_tag("target", [("port", self.port)]))
        lines.append(close_tag("console"))
        return join_lines(lines)


@dataclass
class SerialDef:
    type: str
    source: Optional[str] = None
    port: int = NO_PORT

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        body = []
        if self.source is not None:
            body.append(empty_tag("source", [("path", self.source)]))
        if self.port != NO_PORT:
            body.append(empty_tag("target", [("port", self.port)]))
        return join_lines(block("serial", body, [("type", self.type)]))


@dataclass
class VideoDef:
    model: Optional[str] = None
    vram: int = 0

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        if not self.model or self.vram == 0:
            return ""
        return join_lines(block("video", [empty_tag("model", [("type", self.model), ("vram", self.vram)])]))


@dataclass
class VirtioSerialDef:
    """Host<->guest unix-socket channel, e.g. the system VM agent."""
    name: str
    path: Optional[str] = None

    @property
    def socket_path(self) -> str:
        return f"{self.path or DEFAULT_CHANNEL_DIR}/{self.name}.agent"

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        body = [
            empty_tag("source", [("mode", "bind"), ("path", self.socket_path)]),
            empty_tag("target", [("type", "virtio"), ("name", f"{self.name}.vport")]),
            empty_tag("address", [("type", "virtio-serial")]),
        ]
        return join_lines(block("channel", body, [("type", "unix")]))


@dataclass
class GraphicDef:
    type: str
    port: int = NO_GRAPHICS_PORT
    auto_port: bool = False
    listen_addr: Optional[str] = None
    passwd: Optional[str] = None
    keymap: Optional[str] = None

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        attrs = [("type", self.type)]
        if self.auto_port:
            attrs.append(("autoport", "yes"))
        elif self.port != NO_GRAPHICS_PORT:
            attrs.append(("port", self.port))
        attrs.append(("listen", self.listen_addr if self.listen_addr is not None else ""))
        # password and keymap are mutually exclusive on the wire
        if self.passwd is not None:
            attrs.append(("passwd", self.passwd))
        elif self.keymap is not None:
            attrs.append(("keymap", self.keymap))
        return join_lines([empty_tag("graphics", attrs)])

    def __repr__(self) -> str:
        return f"GraphicDef(type={self.type!r}, port={self.port}, listen_addr={self.listen_addr!r})"


@dataclass
class InputDef:
    type: str  # tablet, mouse
    bus: Optional[str] = None  # ps2, usb, xen

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        return join_lines([empty_tag("input", [("type", self.type), ("bus", self.bus)])])


@dataclass
class FilesystemDef:
    source_path: str
    target_path: str

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        body = [empty_tag("source", [("dir", self.source_path)]), empty_tag("target", [("dir", self.target_path)])]
        return join_lines(block("filesystem", body, [("type", "mount")]))


class DeviceKind(Enum):
    # Declaration order is render order.
    DISK = "disk"
    INTERFACE = "interface"
    SERIAL = "serial"
    CONSOLE = "console"
    CHANNEL = "channel"
    GRAPHICS = "graphics"
    INPUT = "input"
    VIDEO = "video"
    FILESYSTEM = "filesystem"


Device = Union[
    DiskDef, InterfaceDef, SerialDef, ConsoleDef, VirtioSerialDef, GraphicDef, InputDef, VideoDef, FilesystemDef
]

_KIND_BY_TYPE: Dict[type, DeviceKind] = {
    DiskDef: DeviceKind.DISK,
    InterfaceDef: DeviceKind.INTERFACE,
    SerialDef: DeviceKind.SERIAL,
    ConsoleDef: DeviceKind.CONSOLE,
    VirtioSerialDef: DeviceKind.CHANNEL,
    GraphicDef: DeviceKind.GRAPHICS,
    InputDef: DeviceKind.INPUT,
    VideoDef: DeviceKind.VIDEO,
    FilesystemDef: DeviceKind.FILESYSTEM,
}

# never rendered for container guests
_LXC_SKIPPED = (DeviceKind.GRAPHICS, DeviceKind.INPUT)


def device_kind(device: object) -> DeviceKind:
    for cls in type(device).__mro__:
        kind = _KIND_BY_TYPE.get(cls)
        if kind is not None:
            return kind
    raise TypeError(f"unsupported device: {type(device).__name__}")


def check_disk_labels(disks: List[DiskDef]) -> None:
    seen = set()
    for d in disks:
        if d.disk_label is None:
            continue
        if d.disk_label in seen:
            raise DuplicateDiskLabelError(d.disk_label)
        seen.add(d.disk_label)


@dataclass
class DevicesDef:
    guest_type: Optional[GuestType] = None
    emulator: Optional[str] = None
    devices: Dict[DeviceKind, List[Device]] = field(default_factory=dict)

    def add_device(self, device: Device) -> None:
        kind = device_kind(device)
        if kind is DeviceKind.DISK and device.disk_label is not None:  # type: ignore[union-attr]
            if any(d.disk_label == device.disk_label for d in self.get_disks()):  # type: ignore[union-attr]
                raise DuplicateDiskLabelError(device.disk_label)  # type: ignore[union-attr]
        self.devices.setdefault(kind, []).append(device)

    def get_disks(self) -> List[DiskDef]:
        """
        The live list of disks: later changes to it show up in the next
        render. Empty list if no disk was added yet.
        """
        return self.devices.setdefault(DeviceKind.DISK, [])  # type: ignore[return-value]

    def get_interfaces(self) -> List[InterfaceDef]:
        """The live list of interfaces (see get_disks)."""
        return self.devices.setdefault(DeviceKind.INTERFACE, [])  # type: ignore[return-value]

    def _skipped(self, kind: DeviceKind, device: Device) -> bool:
        if self.guest_type is not GuestType.LXC:
            return False
        if kind in _LXC_SKIPPED:
            return True
        return kind is DeviceKind.DISK and device.disk_type is not DiskType.BLOCK  # type: ignore[union-attr]

    def iter_rendered(self):
        """Yield (kind, device) pairs in render order after guest filtering."""
        for kind in DeviceKind:
            for device in self.devices.get(kind, ()):
                if self._skipped(kind, device):
                    continue
                yield kind, device

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        check_disk_labels(self.get_disks())
        lines = []
        if self.emulator is not None:
            lines.append(text_elem("emulator", self.emulator))
        lines.extend(device.to_xml(ctx) for _, device in self.iter_rendered())
        return join_lines(block("devices", lines))
