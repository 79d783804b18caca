# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# vmdef/libvirt/domain.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple, Type, Union

from ..core.exceptions import MissingFieldError
from ..core.logger import Log
from ..core.xml_utils import close_tag, join_lines, open_tag, text_elem
from .clock import ClockDef
from .cpu import CpuModeDef, CpuTuneDef
from .devices import DevicesDef
from .features import FeaturesDef
from .guest import GuestDef, GuestResourceDef, TermPolicy
from .metadata import MetadataDef
from .version import DEFAULT_CONTEXT, VersionContext

logger = logging.getLogger(__name__)

Component = Union[
    MetadataDef, GuestResourceDef, GuestDef, FeaturesDef, CpuModeDef, CpuTuneDef, ClockDef, TermPolicy, DevicesDef
]

# One slot per type, rendered in this order.
COMPONENT_ORDER: Tuple[type, ...] = (
    MetadataDef,
    GuestResourceDef,
    GuestDef,
    FeaturesDef,
    CpuModeDef,
    CpuTuneDef,
    ClockDef,
    TermPolicy,
    DevicesDef,
)

_SAFE_NAME_RE = re.compile(r"[^A-Za-z0-9._+-]+")


def _sanitize_name(s: str) -> str:
    s = _SAFE_NAME_RE.sub("-", (s or "").strip()).strip("-")
    return s or "vm"


@dataclass
class LibvirtVmDef:
    hvs_type: str
    domain_name: str
    uuid: Optional[str] = None
    description: Optional[str] = None
    platform_emulator: Optional[str] = None
    components: Dict[type, Component] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.hvs_type:
            raise MissingFieldError("hvs_type", "LibvirtVmDef")
        if not self.domain_name:
            raise MissingFieldError("domain_name", "LibvirtVmDef")

    def add_comp(self, comp: Component) -> None:
        kind = type(comp)
        if kind not in COMPONENT_ORDER:
            raise TypeError(f"unsupported domain component: {kind.__name__}")
        if kind in self.components:
            logger.debug("Replacing %s on domain %s", kind.__name__, self.domain_name)
        self.components[kind] = comp

    def get_comp(self, kind: Type[Component]) -> Optional[Component]:
        return self.components.get(kind)

    @property
    def devices(self) -> Optional[DevicesDef]:
        return self.components.get(DevicesDef)  # type: ignore[return-value]

    @property
    def metadata(self) -> Optional[MetadataDef]:
        return self.components.get(MetadataDef)  # type: ignore[return-value]

    @property
    def guest(self) -> Optional[GuestDef]:
        return self.components.get(GuestDef)  # type: ignore[return-value]

    def iter_components(self) -> Iterator[Component]:
        for kind in COMPONENT_ORDER:
            comp = self.components.get(kind)
            if comp is not None:
                yield comp

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        lines = [open_tag("domain", [("type", self.hvs_type)]), text_elem("name", self.domain_name)]
        if self.uuid is not None:
            lines.append(text_elem("uuid", self.uuid))
        if self.description is not None:
            lines.append(text_elem("description", self.description))
        lines.extend(comp.to_xml(ctx) for comp in self.iter_components())
        lines.append(close_tag("domain"))
        return join_lines(lines)


def render_domain_xml(vm: LibvirtVmDef, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
    xml_text = vm.to_xml(ctx)
    Log.bind(logger, domain=vm.domain_name).debug(
        "Rendered domain XML",
        extra={"ctx": {"bytes": len(xml_text), "libvirt": ctx.libvirt_version, "qemu": ctx.qemu_version}},
    )
    return xml_text


def write_domain_xml(
    vm: LibvirtVmDef,
    out_dir: Path,
    ctx: VersionContext = DEFAULT_CONTEXT,
    *,
    filename: Optional[str] = None,
    overwrite: bool = True,
) -> Path:
    out_dir = Path(out_dir).expanduser().resolve()
    out_dir.mkdir(parents=True, exist_ok=True)

    xml_path = out_dir / (filename or f"{_sanitize_name(vm.domain_name)}.xml")
    if xml_path.exists() and not overwrite:
        raise FileExistsError(f"domain XML already exists: {xml_path}")

    xml_path.write_text(render_domain_xml(vm, ctx), encoding="utf-8")
    return xml_path
