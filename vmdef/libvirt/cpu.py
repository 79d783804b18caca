# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# vmdef/libvirt/cpu.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..core.xml_utils import block, close_tag, empty_tag, join_lines, open_tag, text_elem
from .version import DEFAULT_CONTEXT, VersionContext

MODE_CUSTOM = "custom"
MODE_HOST_MODEL = "host-model"
MODE_HOST_PASSTHROUGH = "host-passthrough"


@dataclass
class CpuTuneDef:
    shares: int = 0  # 0 = scheduler default

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        body = [text_elem("shares", self.shares)] if self.shares > 0 else []
        return join_lines(block("cputune", body))


@dataclass
class CpuModeDef:
    mode: Optional[str] = None
    model: Optional[str] = None
    features: List[str] = field(default_factory=list)
    cores_per_socket: int = -1
    sockets: int = -1

    def set_features(self, features: Optional[List[str]]) -> None:
        if features is not None:
            self.features = list(features)

    def set_topology(self, cores_per_socket: int, sockets: int) -> None:
        self.cores_per_socket = cores_per_socket
        self.sockets = sockets

    def _opening(self) -> List[str]:
        if (self.mode or "").lower() == MODE_CUSTOM and self.model is not None:
            return [
                open_tag("cpu", [("mode", MODE_CUSTOM), ("match", "exact")]),
                text_elem("model", self.model, [("fallback", "allow")]),
            ]
        if self.mode == MODE_HOST_MODEL:
            return [open_tag("cpu", [("mode", MODE_HOST_MODEL)]), empty_tag("model", [("fallback", "allow")])]
        if self.mode == MODE_HOST_PASSTHROUGH:
            return [open_tag("cpu", [("mode", MODE_HOST_PASSTHROUGH)])]
        return [open_tag("cpu")]

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        lines = self._opening()
        lines.extend(empty_tag("feature", [("policy", "require"), ("name", f)]) for f in self.features)
        if self.sockets > 0 and self.cores_per_socket > 0:
            lines.append(
                empty_tag("topology", [("sockets", self.sockets), ("cores", self.cores_per_socket), ("threads", 1)])
            )
        lines.append(close_tag("cpu"))
        return join_lines(lines)
