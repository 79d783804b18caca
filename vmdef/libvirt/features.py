# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# vmdef/libvirt/features.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set

from ..core.xml_utils import block, empty_tag, join_lines
from .version import DEFAULT_CONTEXT, VersionContext

logger = logging.getLogger(__name__)

DEFAULT_SPINLOCK_RETRIES = 4096


class Enlightenment(Enum):
    # Declaration order is render order.
    RELAXED = "relaxed"
    VAPIC = "vapic"
    SPINLOCKS = "spinlocks"

    @classmethod
    def lookup(cls, name: str) -> Optional["Enlightenment"]:
        for e in cls:
            if e.value == name:
                return e
        return None


@dataclass
class HyperVEnlightenmentFeatureDef:
    enabled: Set[Enlightenment] = field(default_factory=set)
    retries: int = DEFAULT_SPINLOCK_RETRIES

    def set_feature(self, feature: str, on: bool) -> None:
        """Enable a named enlightenment. Unknown names and on=False are no-ops."""
        if not on:
            return
        e = Enlightenment.lookup(feature)
        if e is None:
            logger.debug("Ignoring unknown Hyper-V enlightenment %r", feature)
            return
        self.enabled.add(e)

    def set_retries(self, retries: int) -> None:
        # never lowered below the current value
        if retries >= self.retries:
            self.retries = retries

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        lines = []
        for e in Enlightenment:
            if e not in self.enabled:
                continue
            attrs = [("state", "on")]
            if e is Enlightenment.SPINLOCKS:
                attrs.append(("retries", self.retries))
            lines.append(empty_tag(e.value, attrs))
        return join_lines(block("hyperv", lines))


@dataclass
class FeaturesDef:
    features: List[str] = field(default_factory=list)
    hyperv: Optional[HyperVEnlightenmentFeatureDef] = None

    def add_feature(self, feature: str) -> None:
        self.features.append(feature)

    def add_hyperv_feature(self, hyperv: HyperVEnlightenmentFeatureDef) -> None:
        self.hyperv = hyperv

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        lines = [empty_tag(f) for f in self.features]
        if self.hyperv is not None:
            lines.append(self.hyperv.to_xml(ctx))
        return join_lines(block("features", lines))
