#!/usr/bin/env python3
# SPDX-License-Identifier: LGPL-3.0-or-later
"""
Example: Build the domain XML for a system VM using the vmdef library.

This example demonstrates:
- Assembling a domain from component descriptors
- Attaching the system VM agent channel and a CD-ROM
- Rendering against a host's libvirt/qemu versions

Usage:
    python library_system_vm.py /path/to/systemvm.iso [output-dir]
"""

import sys
import logging
from pathlib import Path

from vmdef import (
    BootOrder,
    ClockDef,
    ConsoleDef,
    DevicesDef,
    DiskBus,
    DiskDef,
    DiskFmtType,
    FeaturesDef,
    GraphicDef,
    GuestDef,
    GuestResourceDef,
    GuestType,
    InterfaceDef,
    LibvirtVmDef,
    NicModel,
    SerialDef,
    TermPolicy,
    VersionContext,
    VirtioSerialDef,
)
from vmdef.libvirt.domain import write_domain_xml

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_system_vm(name: str, iso_path: str) -> LibvirtVmDef:
    """Console proxy style system VM: 512 MiB, one vCPU, two NICs."""

    vm = LibvirtVmDef(hvs_type="kvm", domain_name=name, description="System VM")

    guest = GuestDef(guest_type=GuestType.KVM, arch="x86_64", machine="pc")
    guest.add_boot_dev(BootOrder.CDROM)
    guest.add_boot_dev(BootOrder.HARDDISK)
    vm.add_comp(guest)

    vm.add_comp(GuestResourceDef(mem=524288, vcpu=1))

    features = FeaturesDef()
    for f in ("acpi", "apic", "pae"):
        features.add_feature(f)
    vm.add_comp(features)

    clock = ClockDef()
    clock.set_timer("kvmclock", no_kvm_clock=True)
    vm.add_comp(clock)
    vm.add_comp(TermPolicy(reboot="restart"))

    devices = DevicesDef(guest_type=GuestType.KVM, emulator="/usr/bin/kvm")
    devices.add_device(DiskDef.file_based(f"/mnt/pri/ROOT-{name}.qcow2", 0, DiskBus.VIRTIO, DiskFmtType.QCOW2))
    devices.add_device(DiskDef.iso(iso_path))
    devices.add_device(InterfaceDef.bridge("cloud0", None, "0e:00:a9:fe:01:2c", NicModel.VIRTIO))
    devices.add_device(InterfaceDef.bridge("cloudbr0", None, "1e:00:2b:00:00:0d", NicModel.VIRTIO, 25600))
    devices.add_device(SerialDef("pty", port=0))
    devices.add_device(ConsoleDef("pty", port=0))
    devices.add_device(VirtioSerialDef(name))
    devices.add_device(GraphicDef("vnc", auto_port=True, listen_addr="0.0.0.0"))
    vm.add_comp(devices)
    return vm


def main():
    """Main entry point."""

    if len(sys.argv) not in (2, 3):
        print(f"Usage: {sys.argv[0]} <systemvm.iso> [output-dir]")
        sys.exit(1)

    out_dir = Path(sys.argv[2]) if len(sys.argv) == 3 else Path(".")
    vm = build_system_vm("v-2-VM", sys.argv[1])

    # libvirt 1.2.2 / qemu 2.0.0 enable both bandwidth and iotune markup
    ctx = VersionContext.from_strings("1.2.2", "2.0.0")
    path = write_domain_xml(vm, out_dir, ctx)
    logger.info(f"Wrote {path}")


if __name__ == "__main__":
    main()
