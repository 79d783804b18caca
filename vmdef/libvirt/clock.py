# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# vmdef/libvirt/clock.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.xml_utils import block, empty_tag, join_lines
from .version import DEFAULT_CONTEXT, VersionContext

KVMCLOCK = "kvmclock"


class ClockOffset(Enum):
    UTC = "utc"
    LOCALTIME = "localtime"
    TIMEZONE = "timezone"
    VARIABLE = "variable"


@dataclass
class ClockDef:
    offset: ClockOffset = ClockOffset.UTC
    timer_name: Optional[str] = None
    tick_policy: Optional[str] = None
    track: Optional[str] = None
    no_kvm_clock: bool = False

    def set_timer(
        self,
        timer_name: str,
        tick_policy: Optional[str] = None,
        track: Optional[str] = None,
        no_kvm_clock: bool = False,
    ) -> None:
        self.timer_name = timer_name
        self.tick_policy = tick_policy
        self.track = track
        self.no_kvm_clock = no_kvm_clock

    def _timer(self) -> str:
        if self.timer_name == KVMCLOCK and self.no_kvm_clock:
            return empty_tag("timer", [("name", KVMCLOCK), ("present", "no")])
        return empty_tag(
            "timer",
            [("name", self.timer_name), ("tickpolicy", self.tick_policy), ("track", self.track)],
        )

    def to_xml(self, ctx: VersionContext = DEFAULT_CONTEXT) -> str:
        body = [self._timer()] if self.timer_name else []
        return join_lines(block("clock", body, [("offset", self.offset.value)]))
