# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# vmdef/libvirt/interface.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..core.xml_utils import block, close_tag, empty_tag, join_lines, open_tag
from .version import DEFAULT_CONTEXT, VersionContext

logger = logging.getLogger(__name__)

VLAN_MIN_EXCLUSIVE = 0
VLAN_MAX_EXCLUSIVE = 4095


class GuestNetType(Enum):
    BRIDGE = "bridge"
    DIRECT = "direct"
    NETWORK = "network"
    USER = "user"
    ETHERNET = "ethernet"
    INTERNAL = "internal"


class NicModel(Enum):
    E1000 = "e1000"
    VIRTIO = "virtio"
    RTL8139 = "rtl8139"
    NE2KPCI = "ne2k_pci"
    VMXNET3 = "vmxnet3"


class HostNicType(Enum):
    """Host-side attachment flavour; kept for the agent, never rendered."""
    DIRECT_ATTACHED_WITHOUT_DHCP = "direct_attached_without_dhcp"
    DIRECT_ATTACHED_WITH_DHCP = "direct_attached_with_dhcp"
    VNET = "vnet"
    VLAN = "vlan"


@dataclass
class InterfaceDef:
    net_type: Optional[GuestNetType] = None
    source_name: Optional[str] = None  # bridge / network / host device
    target_name: Optional[str] = None  # tap device
    net_source_mode: Optional[str] = None  # direct only
    mac_addr: Optional[str] = None
    model: Optional[NicModel] = None
    rate_kbps: int = 0
    script_path: Optional[str] = None
    host_net_type: Optional[HostNicType] = None
    virtual_port_type: Optional[str] = None
    virtual_port_interface_id: Optional[str] = None
    vlan_tag: int = -1
    pxe_disable: bool = False

    @classmethod
    def bridge(
        cls, br_name: str, target_name: Optional[str], mac: Optional[str], model: Optional[NicModel], rate_kbps: int = 0
    ) -> "InterfaceDef":
        return cls(
            net_type=GuestNetType.BRIDGE,
            source_name=br_name,
            target_name=target_name,
            mac_addr=mac,
            model=model,
            rate_kbps=rate_kbps,
        )

    @classmethod
    def direct(
        cls,
        source_name: str,
        target_name: Optional[str],
        mac: Optional[str],
        model: Optional[NicModel],
        source_mode: str,
        rate_kbps: int = 0,
    ) -> "InterfaceDef":
        return cls(
            net_type=GuestNetType.DIRECT,
            source_name=source_name,
            target_name=target_name,
            net_source_mode=source_mode,
            mac_addr=mac,
            model=model,
            rate_kbps=rate_kbps,
        )

    @classmethod
    def private_net(
        cls, network_name: str, target_name: Optional[str], mac: Optional[str], model: Optional[NicModel], rate_kbps: int = 0
    ) -> "InterfaceDef":
        return cls(
            net_type=GuestNetType.NETWORK,
            source_name=network_name,
            target_name=target_name,
            mac_addr=mac,
            model=model,
            rate_kbps=rate_kbps,
        )

    @classmethod
    def ethernet(
        cls,
        target_name: str,
        mac: Optional[str],
        model: Optional[NicModel],
        script_path: Optional[str] = None,
        rate_kbps: int = 0,
    ) -> "InterfaceDef":
        return cls(
            net_type=GuestNetType.ETHERNET,
            source_name=target_name,
            target_name=target_name,
            mac_addr=mac,
            model=model,
            script_path=script_path,
            rate_kbps=rate_kbps,
        )

    @property
    def vlan_rendered(self) -> bool:
        return VLAN_MIN_EXCLUSIVE < self.vlan_tag < VLAN_MAX_EXCLUSIVE

    def _source_line(self) -> Optional[str]:
        if self.net_type is GuestNetType.BRIDGE:
            return empty_tag("source", [("bridge", self.source_name)])
        if self.net_type is GuestNetType.NETWORK:
            return empty_tag("source", [("network", self.source_name)])
        if self.net_type is GuestNetType.DIRECT:
            return empty_tag("source", [("dev", self.source_name), ("mode", self.net_source_mode)])
        return None

    def _bandwidth_lines(self, ctx: VersionContext) -> List[str]:
        rate = self.rate_kbps or 0
        if rate <= 0:
            return []
        if not ctx.supports_bandwidth:
            logger.debug("Skipping <bandwidth> for %s: libvirt=%s below threshold", self.mac_addr, ctx.libvirt_version)
            return []
        shape = [("average", rate), ("peak", rate)]
        return block("bandwidth", [empty_tag("inbound", shape), empty_tag("outbound", shape)])

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        net_type = self.net_type.value if self.net_type else None
        lines = [open_tag("interface", [("type", net_type)])]

        src = self._source_line()
        if src:
            lines.append(src)
        if self.target_name is not None:
            lines.append(empty_tag("target", [("dev", self.target_name)]))
        if self.mac_addr is not None:
            lines.append(empty_tag("mac", [("address", self.mac_addr)]))
        if self.model is not None:
            lines.append(empty_tag("model", [("type", self.model.value)]))

        lines.extend(self._bandwidth_lines(ctx))

        if self.script_path is not None:
            lines.append(empty_tag("script", [("path", self.script_path)]))
        if self.pxe_disable:
            lines.append(empty_tag("rom", [("bar", "off"), ("file", "")]))
        if self.virtual_port_type is not None:
            params = []
            if self.virtual_port_interface_id is not None:
                params.append(empty_tag("parameters", [("interfaceid", self.virtual_port_interface_id)]))
            lines.extend(block("virtualport", params, [("type", self.virtual_port_type)]))
        if self.vlan_rendered:
            lines.extend(block("vlan", [empty_tag("tag", [("id", self.vlan_tag)])], [("trunk", "no")]))

        lines.append(close_tag("interface"))
        return join_lines(lines)
