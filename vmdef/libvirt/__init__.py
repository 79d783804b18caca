# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
from .clock import ClockDef, ClockOffset
from .cpu import CpuModeDef, CpuTuneDef
from .devices import (
    ConsoleDef,
    DeviceKind,
    DevicesDef,
    FilesystemDef,
    GraphicDef,
    InputDef,
    SerialDef,
    VideoDef,
    VirtioSerialDef,
)
from .disk import DeviceType, DiskBus, DiskCacheMode, DiskDef, DiskFmtType, DiskProtocol, DiskType, dev_label
from .domain import LibvirtVmDef, render_domain_xml, write_domain_xml
from .features import Enlightenment, FeaturesDef, HyperVEnlightenmentFeatureDef
from .guest import BootOrder, GuestDef, GuestResourceDef, GuestType, TermPolicy
from .interface import GuestNetType, HostNicType, InterfaceDef, NicModel
from .metadata import MetadataDef, MetadataNode, NuageExtensionDef
from .version import VersionContext, pack_version

__all__ = [
    "BootOrder",
    "ClockDef",
    "ClockOffset",
    "ConsoleDef",
    "CpuModeDef",
    "CpuTuneDef",
    "DeviceKind",
    "DeviceType",
    "DevicesDef",
    "DiskBus",
    "DiskCacheMode",
    "DiskDef",
    "DiskFmtType",
    "DiskProtocol",
    "DiskType",
    "Enlightenment",
    "FeaturesDef",
    "FilesystemDef",
    "GraphicDef",
    "GuestDef",
    "GuestNetType",
    "GuestResourceDef",
    "GuestType",
    "HostNicType",
    "HyperVEnlightenmentFeatureDef",
    "InputDef",
    "InterfaceDef",
    "LibvirtVmDef",
    "MetadataDef",
    "MetadataNode",
    "NicModel",
    "NuageExtensionDef",
    "SerialDef",
    "TermPolicy",
    "VersionContext",
    "VideoDef",
    "VirtioSerialDef",
    "dev_label",
    "pack_version",
    "render_domain_xml",
    "write_domain_xml",
]
