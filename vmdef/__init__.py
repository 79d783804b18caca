# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# vmdef/__init__.py
"""
vmdef - libvirt domain definition builder for KVM host agents

Build a structured description of a guest's hardware and firmware, then
render it into the domain XML that libvirtd accepts:

    from vmdef import (
        LibvirtVmDef, GuestDef, GuestType, DevicesDef, DiskDef, DiskBus,
        DiskFmtType, VersionContext, render_domain_xml,
    )

    vm = LibvirtVmDef(hvs_type="kvm", domain_name="i-2-10-VM")
    vm.add_comp(GuestDef(guest_type=GuestType.KVM, arch="x86_64", machine="pc"))
    devs = DevicesDef(guest_type=GuestType.KVM)
    devs.add_device(DiskDef.file_based("/mnt/pri/ROOT-10.qcow2", 0, DiskBus.VIRTIO, DiskFmtType.QCOW2))
    vm.add_comp(devs)
    xml = render_domain_xml(vm, VersionContext.from_strings("1.2.2", "2.0.0"))
"""

__version__ = "0.1.0"

from .core.exceptions import ConfigError, DuplicateDiskLabelError, MissingFieldError, VmDefError
from .libvirt import (
    BootOrder,
    ClockDef,
    ClockOffset,
    ConsoleDef,
    CpuModeDef,
    CpuTuneDef,
    DeviceType,
    DevicesDef,
    DiskBus,
    DiskCacheMode,
    DiskDef,
    DiskFmtType,
    DiskProtocol,
    DiskType,
    FeaturesDef,
    FilesystemDef,
    GraphicDef,
    GuestDef,
    GuestNetType,
    GuestResourceDef,
    GuestType,
    HyperVEnlightenmentFeatureDef,
    InputDef,
    InterfaceDef,
    LibvirtVmDef,
    MetadataDef,
    NicModel,
    NuageExtensionDef,
    SerialDef,
    TermPolicy,
    VersionContext,
    VideoDef,
    VirtioSerialDef,
    render_domain_xml,
)

__all__ = [
    "__version__",
    # errors
    "VmDefError",
    "MissingFieldError",
    "DuplicateDiskLabelError",
    "ConfigError",
    # domain
    "LibvirtVmDef",
    "render_domain_xml",
    "VersionContext",
    # singleton sections
    "GuestDef",
    "GuestType",
    "BootOrder",
    "GuestResourceDef",
    "FeaturesDef",
    "HyperVEnlightenmentFeatureDef",
    "ClockDef",
    "ClockOffset",
    "TermPolicy",
    "CpuTuneDef",
    "CpuModeDef",
    "MetadataDef",
    "NuageExtensionDef",
    # devices
    "DevicesDef",
    "DiskDef",
    "DeviceType",
    "DiskType",
    "DiskBus",
    "DiskFmtType",
    "DiskCacheMode",
    "DiskProtocol",
    "InterfaceDef",
    "GuestNetType",
    "NicModel",
    "ConsoleDef",
    "SerialDef",
    "VideoDef",
    "VirtioSerialDef",
    "GraphicDef",
    "InputDef",
    "FilesystemDef",
]
