# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# vmdef/libvirt/guest.py
"""
Boot configuration (<sysinfo>/<os>), sizing (<memory>/<vcpu>) and the
<on_*> lifecycle actions of a domain.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..core.exceptions import MissingFieldError
from ..core.xml_utils import block, empty_tag, join_lines, text_elem
from .version import DEFAULT_CONTEXT, VersionContext

SYSINFO_MANUFACTURER = "Apache Software Foundation"
DEFAULT_INIT = "/sbin/init"

UNSET = -1


class GuestType(Enum):
    KVM = "kvm"  # full virtualization
    XEN = "xen"  # paravirtualization
    EXE = "exe"
    LXC = "lxc"  # container-exec


class BootOrder(Enum):
    HARDDISK = "hd"
    CDROM = "cdrom"
    FLOPPY = "fd"
    NETWORK = "network"


@dataclass
class GuestDef:
    guest_type: GuestType
    arch: Optional[str] = None
    machine: Optional[str] = None
    loader: Optional[str] = None
    kernel: Optional[str] = None
    initrd: Optional[str] = None
    root: Optional[str] = None
    cmdline: Optional[str] = None
    uuid: Optional[str] = None
    init: str = DEFAULT_INIT
    boot_devs: List[BootOrder] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.guest_type is None:
            raise MissingFieldError("guest_type", "GuestDef")

    def set_boot_kernel(self, kernel: str, initrd: Optional[str], rootdev: Optional[str], cmdline: Optional[str]) -> None:
        self.kernel = kernel
        self.initrd = initrd
        self.root = rootdev
        self.cmdline = cmdline

    def add_boot_dev(self, order: BootOrder) -> None:
        """Append a boot device; order of calls is boot order."""
        self.boot_devs.append(order)

    def _kvm_lines(self) -> List[str]:
        entries = [
            text_elem("entry", SYSINFO_MANUFACTURER, [("name", "manufacturer")]),
            text_elem("entry", f"CloudStack {self.guest_type.name} Hypervisor", [("name", "product")]),
        ]
        if self.uuid:
            entries.append(text_elem("entry", self.uuid, [("name", "uuid")]))
        lines = block("sysinfo", block("system", entries), [("type", "smbios")])

        os_lines = [text_elem("type", "hvm", [("arch", self.arch), ("machine", self.machine)])]
        if self.loader:
            os_lines.append(text_elem("loader", self.loader))
        if self.kernel:
            os_lines.append(text_elem("kernel", self.kernel))
            if self.initrd:
                os_lines.append(text_elem("initrd", self.initrd))
            if self.cmdline:
                os_lines.append(text_elem("cmdline", self.cmdline))
        os_lines.extend(empty_tag("boot", [("dev", bo.value)]) for bo in self.boot_devs)
        os_lines.append(empty_tag("smbios", [("mode", "sysinfo")]))
        return lines + block("os", os_lines)

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        if self.guest_type is GuestType.KVM:
            return join_lines(self._kvm_lines())
        if self.guest_type is GuestType.LXC:
            return join_lines(block("os", [text_elem("type", "exe"), text_elem("init", self.init)]))
        return ""


@dataclass
class GuestResourceDef:
    """
    Memory is in KiB (libvirt's default unit). current_mem and vcpu use -1
    for "not set".
    """
    mem: int = 0
    current_mem: int = UNSET
    mem_backing: Optional[str] = None
    vcpu: int = UNSET
    mem_ballooning: bool = False

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        lines = [text_elem("memory", self.mem)]
        if self.current_mem != UNSET:
            lines.append(text_elem("currentMemory", self.current_mem))
        if self.mem_backing:
            lines.extend(block("memoryBacking", [empty_tag(self.mem_backing)]))
        if self.vcpu != UNSET:
            lines.append(text_elem("vcpu", self.vcpu))
        model = "virtio" if self.mem_ballooning else "none"
        lines.extend(block("devices", [empty_tag("memballoon", [("model", model)])]))
        return join_lines(lines)


@dataclass
class TermPolicy:
    reboot: str = "destroy"
    power_off: str = "destroy"
    crash: str = "destroy"

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        return join_lines(
            [
                text_elem("on_reboot", self.reboot),
                text_elem("on_poweroff", self.power_off),
                text_elem("on_crash", self.crash),
            ]
        )
