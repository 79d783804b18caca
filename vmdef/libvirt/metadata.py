# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# vmdef/libvirt/metadata.py
"""
<metadata> container.

Extension nodes are constructed by the caller and registered explicitly;
at most one node per kind. Known kinds are listed in METADATA_NODE_TYPES.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Type, TypeVar

from ..core.xml_utils import block, empty_tag, join_lines
from .version import DEFAULT_CONTEXT, VersionContext


class MetadataNode:
    """Base for self-rendering <metadata> children."""

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        raise NotImplementedError


@dataclass
class NuageExtensionDef(MetadataNode):
    """Nuage VSP virtual-router IP per guest MAC address."""
    addresses: Dict[str, str] = field(default_factory=dict)

    def add_nuage_extension(self, mac_address: str, vr_ip: str) -> None:
        self.addresses[mac_address] = vr_ip

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        lines = []
        for mac, vr_ip in self.addresses.items():
            lines += block("nuage-extension", [empty_tag("interface", [("mac", mac), ("vsp-vr-ip", vr_ip)])])
        return join_lines(lines)


METADATA_NODE_TYPES = (NuageExtensionDef,)

N = TypeVar("N", bound=MetadataNode)


@dataclass
class MetadataDef:
    nodes: Dict[type, MetadataNode] = field(default_factory=dict)

    def add_node(self, node: MetadataNode) -> None:
        if not isinstance(node, METADATA_NODE_TYPES):
            raise TypeError(f"unsupported metadata node: {type(node).__name__}")
        kind = type(node)
        if kind in self.nodes:
            raise ValueError(f"metadata node {kind.__name__} already registered")
        self.nodes[kind] = node

    def get_node(self, kind: Type[N]) -> Optional[N]:
        return self.nodes.get(kind)  # type: ignore[return-value]

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        return join_lines(block("metadata", [n.to_xml(ctx) for n in self.nodes.values()]))
