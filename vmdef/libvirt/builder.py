# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# vmdef/libvirt/builder.py
"""
Populate a LibvirtVmDef from a plain mapping (see vmdef.config.config_loader).

Example description:

    type: kvm
    name: i-2-10-VM
    uuid: 5b4f0c1e-0d2b-4b8e-9a57-4f7d1f6f1a10
    versions: {libvirt: "0.9.8", qemu: "1.1.0"}
    guest: {type: kvm, arch: x86_64, machine: pc, boot: [cdrom, hd]}
    resources: {memory: 2097152, vcpus: 2, balloon: true}
    features: [acpi, apic, pae]
    hyperv: {relaxed: true, spinlocks: true, retries: 8191}
    clock: {offset: utc, timer: {name: kvmclock, disable: true}}
    cpu: {mode: host-passthrough, sockets: 1, cores: 2}
    devices:
      emulator: /usr/bin/kvm
      disks:
        - {kind: file, path: /mnt/pri/ROOT-10.qcow2, index: 0, bus: virtio, format: qcow2}
        - {kind: iso}
      interfaces:
        - {type: bridge, source: cloudbr0, mac: "02:00:4c:5a:00:01", model: virtio, rate: 25600, vlan: 100}
      graphics:
        - {type: vnc, autoport: true, listen: 0.0.0.0, passwd: s3cret}
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from ..core.exceptions import ConfigError
from ..core.xml_utils import check_tag
from .clock import ClockDef, ClockOffset
from .cpu import CpuModeDef, CpuTuneDef
from .devices import (
    ConsoleDef,
    DevicesDef,
    FilesystemDef,
    GraphicDef,
    InputDef,
    SerialDef,
    VideoDef,
    VirtioSerialDef,
)
from .disk import DeviceType, DiskBus, DiskCacheMode, DiskDef, DiskFmtType, DiskProtocol, DiskType, dev_label
from .domain import LibvirtVmDef
from .features import FeaturesDef, HyperVEnlightenmentFeatureDef
from .guest import DEFAULT_INIT, BootOrder, GuestDef, GuestResourceDef, GuestType, TermPolicy
from .interface import GuestNetType, InterfaceDef, NicModel
from .metadata import MetadataDef, NuageExtensionDef
from .version import VersionContext, pack_version

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


def _enum(cls: Type[E], value: Any, what: str) -> E:
    if isinstance(value, cls):
        return value
    s = str(value).strip()
    for member in cls:
        if member.value == s or member.name == s.upper():
            return member
    allowed = ", ".join(m.value for m in cls)
    raise ConfigError(code=2, msg=f"invalid {what}: {value!r} (expected one of: {allowed})", context={"field": what})


def _opt_enum(cls: Type[E], value: Any, what: str) -> Optional[E]:
    return None if value is None else _enum(cls, value, what)


def _section(conf: Mapping[str, Any], key: str) -> Dict[str, Any]:
    v = conf.get(key) or {}
    if not isinstance(v, dict):
        raise ConfigError(code=2, msg=f"{key!r} must be a mapping", context={"field": key})
    return v


def _items(conf: Mapping[str, Any], key: str) -> List[Dict[str, Any]]:
    v = conf.get(key) or []
    if not isinstance(v, list) or not all(isinstance(x, dict) for x in v):
        raise ConfigError(code=2, msg=f"{key!r} must be a list of mappings", context={"field": key})
    return v


def _require(conf: Mapping[str, Any], key: str, what: str) -> Any:
    v = conf.get(key)
    if v is None or v == "":
        raise ConfigError(code=2, msg=f"missing {what}", context={"field": what})
    return v


def _int(v: Any, what: str, default: Optional[int]) -> Optional[int]:
    if v is None:
        return default
    try:
        return int(v)
    except (TypeError, ValueError) as e:
        raise ConfigError(code=2, msg=f"{what} must be an integer, got {v!r}", cause=e, context={"field": what}) from e


def _tag(v: Any, what: str) -> str:
    try:
        return check_tag(str(v))
    except ValueError as e:
        raise ConfigError(code=2, msg=f"invalid {what}: {v!r}", cause=e, context={"field": what}) from e


# ---------------------------------------------------------------------------
# sections
# ---------------------------------------------------------------------------

def build_guest(conf: Mapping[str, Any]) -> GuestDef:
    guest = GuestDef(
        guest_type=_enum(GuestType, conf.get("type", "kvm"), "guest.type"),
        arch=conf.get("arch"),
        machine=conf.get("machine"),
        loader=conf.get("loader"),
        uuid=conf.get("uuid"),
        init=conf.get("init") or DEFAULT_INIT,
    )
    if conf.get("kernel"):
        guest.set_boot_kernel(conf["kernel"], conf.get("initrd"), conf.get("root"), conf.get("cmdline"))
    for dev in conf.get("boot") or []:
        guest.add_boot_dev(_enum(BootOrder, dev, "guest.boot"))
    return guest


def build_resources(conf: Mapping[str, Any]) -> GuestResourceDef:
    return GuestResourceDef(
        mem=_int(conf.get("memory"), "resources.memory", 0),
        current_mem=_int(conf.get("current_memory"), "resources.current_memory", -1),
        mem_backing=_tag(conf["memory_backing"], "resources.memory_backing") if conf.get("memory_backing") else None,
        vcpu=_int(conf.get("vcpus"), "resources.vcpus", -1),
        mem_ballooning=bool(conf.get("balloon", False)),
    )


def build_features(names: List[str], hyperv_conf: Mapping[str, Any]) -> FeaturesDef:
    feats = FeaturesDef()
    for name in names:
        feats.add_feature(_tag(name, "features"))
    if hyperv_conf:
        hv = HyperVEnlightenmentFeatureDef()
        for name, on in hyperv_conf.items():
            if name == "retries":
                hv.set_retries(_int(on, "hyperv.retries", hv.retries))
            else:
                hv.set_feature(name, bool(on))
        feats.add_hyperv_feature(hv)
    return feats


def build_clock(conf: Mapping[str, Any]) -> ClockDef:
    clock = ClockDef(offset=_enum(ClockOffset, conf.get("offset", "utc"), "clock.offset"))
    timer = conf.get("timer")
    if timer:
        clock.set_timer(
            _require(timer, "name", "clock.timer.name"),
            timer.get("tickpolicy"),
            timer.get("track"),
            no_kvm_clock=bool(timer.get("disable", False)),
        )
    return clock


def build_cpu(conf: Mapping[str, Any]) -> CpuModeDef:
    cpu = CpuModeDef(mode=conf.get("mode"), model=conf.get("model"))
    cpu.set_features(conf.get("features"))
    if conf.get("sockets") is not None or conf.get("cores") is not None:
        cpu.set_topology(_int(conf.get("cores"), "cpu.cores", -1), _int(conf.get("sockets"), "cpu.sockets", -1))
    return cpu


def build_term_policy(conf: Mapping[str, Any]) -> TermPolicy:
    policy = TermPolicy()
    policy.reboot = conf.get("reboot", policy.reboot)
    policy.power_off = conf.get("poweroff", policy.power_off)
    policy.crash = conf.get("crash", policy.crash)
    return policy


def build_disk(conf: Mapping[str, Any]) -> DiskDef:
    kind = conf.get("kind", "file")
    label = conf.get("label")
    if label is None:
        label = _int(conf.get("index"), "disk.index", 0)
    bus = _opt_enum(DiskBus, conf.get("bus"), "disk.bus") or DiskBus.VIRTIO
    if isinstance(label, int) and kind != "iso":
        try:
            label = dev_label(label, bus)
        except ValueError as e:
            raise ConfigError(code=2, msg=str(e), cause=e, context={"field": "disk.index"}) from e
    fmt = _opt_enum(DiskFmtType, conf.get("format"), "disk.format")

    if kind == "iso":
        disk = DiskDef.iso(conf.get("path"))
    elif kind == "file":
        disk = DiskDef.file_based(_require(conf, "path", "disk.path"), label, bus, fmt or DiskFmtType.QCOW2)
    elif kind == "block":
        disk = DiskDef.block_based(_require(conf, "path", "disk.path"), label, bus)
    elif kind == "network":
        disk = DiskDef.network_based(
            _require(conf, "path", "disk.path"),
            _require(conf, "host", "disk.host"),
            _int(conf.get("port"), "disk.port", 0),
            conf.get("auth_username"),
            conf.get("secret_uuid"),
            label,
            bus,
            _enum(DiskProtocol, conf.get("protocol", "rbd"), "disk.protocol"),
            fmt or DiskFmtType.RAW,
        )
    elif kind == "dir":
        disk = DiskDef.file_based(_require(conf, "path", "disk.path"), label, bus, fmt or DiskFmtType.RAW)
        disk.disk_type = DiskType.DIRECTORY
    else:
        raise ConfigError(code=2, msg=f"invalid disk.kind: {kind!r}", context={"field": "disk.kind"})

    if conf.get("device"):
        disk.device_type = _enum(DeviceType, conf["device"], "disk.device")
    if conf.get("cache"):
        disk.cache_mode = _enum(DiskCacheMode, conf["cache"], "disk.cache")
    disk.readonly = bool(conf.get("readonly", False))
    disk.shareable = bool(conf.get("shareable", False))
    disk.defer_attach = bool(conf.get("defer_attach", False))
    disk.qemu_driver = bool(conf.get("driver", True))
    disk.serial = conf.get("serial")

    iotune = _section(conf, "iotune")
    if iotune:
        disk.set_rates(
            bytes_read=_int(iotune.get("bytes_read"), "disk.iotune.bytes_read", None),
            bytes_write=_int(iotune.get("bytes_write"), "disk.iotune.bytes_write", None),
            iops_read=_int(iotune.get("iops_read"), "disk.iotune.iops_read", None),
            iops_write=_int(iotune.get("iops_write"), "disk.iotune.iops_write", None),
        )
    return disk


def build_interface(conf: Mapping[str, Any]) -> InterfaceDef:
    net_type = _enum(GuestNetType, conf.get("type", "bridge"), "interface.type")
    model = _opt_enum(NicModel, conf.get("model"), "interface.model")
    rate = _int(conf.get("rate"), "interface.rate", 0)
    mac = conf.get("mac")
    target = conf.get("target")

    if net_type is GuestNetType.BRIDGE:
        nic = InterfaceDef.bridge(conf.get("source"), target, mac, model, rate)
    elif net_type is GuestNetType.DIRECT:
        nic = InterfaceDef.direct(conf.get("source"), target, mac, model, conf.get("mode", "private"), rate)
    elif net_type is GuestNetType.NETWORK:
        nic = InterfaceDef.private_net(conf.get("source"), target, mac, model, rate)
    elif net_type is GuestNetType.ETHERNET:
        nic = InterfaceDef.ethernet(target, mac, model, conf.get("script"), rate)
    else:
        nic = InterfaceDef(net_type=net_type, target_name=target, mac_addr=mac, model=model, rate_kbps=rate)

    if conf.get("script") and nic.script_path is None:
        nic.script_path = conf["script"]
    nic.vlan_tag = _int(conf.get("vlan"), "interface.vlan", -1)
    nic.pxe_disable = bool(conf.get("pxe_disable", False))
    vport = _section(conf, "virtualport")
    if vport:
        nic.virtual_port_type = vport.get("type")
        nic.virtual_port_interface_id = vport.get("interface_id")
    return nic


def build_devices(conf: Mapping[str, Any], guest_type: Optional[GuestType]) -> DevicesDef:
    devs = DevicesDef(guest_type=guest_type, emulator=conf.get("emulator"))
    for i, d in enumerate(_items(conf, "disks")):
        try:
            devs.add_device(build_disk(d))
        except ConfigError as e:
            raise e.with_context(disk=i)
    for i, n in enumerate(_items(conf, "interfaces")):
        try:
            devs.add_device(build_interface(n))
        except ConfigError as e:
            raise e.with_context(interface=i)
    for s in _items(conf, "serials"):
        devs.add_device(SerialDef(s.get("type", "pty"), s.get("source"), _int(s.get("port"), "serial.port", -1)))
    for c in _items(conf, "consoles"):
        devs.add_device(
            ConsoleDef(c.get("type", "pty"), c.get("tty"), c.get("source"), _int(c.get("port"), "console.port", -1))
        )
    for ch in _items(conf, "channels"):
        devs.add_device(VirtioSerialDef(_require(ch, "name", "channel.name"), ch.get("path")))
    for g in _items(conf, "graphics"):
        devs.add_device(
            GraphicDef(
                g.get("type", "vnc"),
                port=_int(g.get("port"), "graphics.port", -2),
                auto_port=bool(g.get("autoport", False)),
                listen_addr=g.get("listen"),
                passwd=g.get("passwd"),
                keymap=g.get("keymap"),
            )
        )
    for i in _items(conf, "inputs"):
        devs.add_device(InputDef(i.get("type", "tablet"), i.get("bus")))
    for v in _items(conf, "videos"):
        devs.add_device(VideoDef(v.get("model"), _int(v.get("vram"), "video.vram", 0)))
    for f in _items(conf, "filesystems"):
        devs.add_device(FilesystemDef(_require(f, "source", "filesystem.source"), _require(f, "target", "filesystem.target")))
    return devs


def build_metadata(conf: Mapping[str, Any]) -> MetadataDef:
    meta = MetadataDef()
    nuage = _section(conf, "nuage")
    if nuage:
        ext = NuageExtensionDef()
        for mac, vr_ip in nuage.items():
            ext.add_nuage_extension(str(mac), str(vr_ip))
        meta.add_node(ext)
    return meta


# ---------------------------------------------------------------------------
# entry points
# ---------------------------------------------------------------------------

def build_version_context(conf: Mapping[str, Any]) -> VersionContext:
    versions = _section(conf, "versions")
    try:
        return VersionContext(
            libvirt_version=pack_version(versions.get("libvirt", 0)),
            qemu_version=pack_version(versions.get("qemu", 0)),
        )
    except ValueError as e:
        raise ConfigError(code=2, msg=str(e), cause=e, context={"field": "versions"}) from e


def build_vm_def(conf: Mapping[str, Any]) -> LibvirtVmDef:
    vm = LibvirtVmDef(
        hvs_type=conf.get("type", ""),
        domain_name=conf.get("name", ""),
        uuid=conf.get("uuid"),
        description=conf.get("description"),
        platform_emulator=conf.get("platform_emulator"),
    )

    guest_conf = dict(_section(conf, "guest"))
    guest: Optional[GuestDef] = None
    if guest_conf:
        guest_conf.setdefault("uuid", vm.uuid)
        guest = build_guest(guest_conf)
        vm.add_comp(guest)

    if "metadata" in conf:
        vm.add_comp(build_metadata(_section(conf, "metadata")))
    if "resources" in conf:
        vm.add_comp(build_resources(_section(conf, "resources")))
    if "features" in conf or "hyperv" in conf:
        vm.add_comp(build_features(list(conf.get("features") or []), _section(conf, "hyperv")))
    if "cpu" in conf:
        vm.add_comp(build_cpu(_section(conf, "cpu")))
    if "cputune" in conf:
        vm.add_comp(CpuTuneDef(shares=_int(_section(conf, "cputune").get("shares"), "cputune.shares", 0)))
    if "clock" in conf:
        vm.add_comp(build_clock(_section(conf, "clock")))
    if "on_events" in conf:
        vm.add_comp(build_term_policy(_section(conf, "on_events")))
    if "devices" in conf:
        vm.add_comp(build_devices(_section(conf, "devices"), guest.guest_type if guest else None))

    logger.debug("Built domain %s with %d component(s)", vm.domain_name, len(vm.components))
    return vm
