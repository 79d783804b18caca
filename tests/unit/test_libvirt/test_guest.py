# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import unittest

import pytest

from vmdef.core.exceptions import MissingFieldError
from vmdef.libvirt.guest import BootOrder, GuestDef, GuestResourceDef, GuestType, TermPolicy

UUID = "5b4f0c1e-0d2b-4b8e-9a57-4f7d1f6f1a10"


@pytest.mark.unit
class TestGuestDef:
    def test_kvm_sysinfo_and_os(self, parse_fragment):
        guest = GuestDef(guest_type=GuestType.KVM, arch="x86_64", machine="pc", uuid=UUID)
        guest.add_boot_dev(BootOrder.CDROM)
        guest.add_boot_dev(BootOrder.HARDDISK)
        root = parse_fragment(guest.to_xml())

        assert [c.tag for c in root] == ["sysinfo", "os"]
        sysinfo = root.find("sysinfo")
        assert sysinfo.get("type") == "smbios"
        entries = {e.get("name"): e.text for e in sysinfo.findall("system/entry")}
        assert entries == {
            "manufacturer": "Apache Software Foundation",
            "product": "CloudStack KVM Hypervisor",
            "uuid": UUID,
        }

        os_el = root.find("os")
        t = os_el.find("type")
        assert t.text == "hvm"
        assert t.get("arch") == "x86_64"
        assert t.get("machine") == "pc"
        assert [b.get("dev") for b in os_el.findall("boot")] == ["cdrom", "hd"]
        assert os_el.find("smbios").get("mode") == "sysinfo"

    def test_kvm_without_uuid_has_no_uuid_entry(self, parse_fragment):
        root = parse_fragment(GuestDef(guest_type=GuestType.KVM).to_xml())
        names = [e.get("name") for e in root.findall("sysinfo/system/entry")]
        assert names == ["manufacturer", "product"]
        t = root.find("os/type")
        assert t.get("arch") is None
        assert t.get("machine") is None

    def test_kvm_loader_and_direct_kernel_boot(self, parse_fragment):
        guest = GuestDef(guest_type=GuestType.KVM, loader="/usr/share/OVMF/OVMF_CODE.fd")
        guest.set_boot_kernel("/boot/vmlinuz", "/boot/initrd.img", "/dev/vda1", "console=ttyS0")
        guest.add_boot_dev(BootOrder.HARDDISK)
        os_el = parse_fragment(guest.to_xml()).find("os")
        assert [c.tag for c in os_el] == ["type", "loader", "kernel", "initrd", "cmdline", "boot", "smbios"]
        assert os_el.find("cmdline").text == "console=ttyS0"

    def test_lxc_os_block(self):
        guest = GuestDef(guest_type=GuestType.LXC)
        assert guest.to_xml() == "<os>\n<type>exe</type>\n<init>/sbin/init</init>\n</os>\n"

    def test_lxc_custom_init(self):
        guest = GuestDef(guest_type=GuestType.LXC, init="/bin/sh")
        assert "<init>/bin/sh</init>" in guest.to_xml()

    @pytest.mark.parametrize("gt", [GuestType.XEN, GuestType.EXE])
    def test_other_guest_types_render_nothing(self, gt):
        assert GuestDef(guest_type=gt).to_xml() == ""

    def test_guest_type_required(self):
        with pytest.raises(MissingFieldError) as ei:
            GuestDef(guest_type=None)  # type: ignore[arg-type]
        assert ei.value.context == {"field": "guest_type", "owner": "GuestDef"}


class TestGuestResourceDef(unittest.TestCase):
    def test_full(self):
        res = GuestResourceDef(mem=2097152, current_mem=1048576, mem_backing="hugepages", vcpu=2, mem_ballooning=True)
        self.assertEqual(
            res.to_xml(),
            "<memory>2097152</memory>\n"
            "<currentMemory>1048576</currentMemory>\n"
            "<memoryBacking>\n<hugepages/>\n</memoryBacking>\n"
            "<vcpu>2</vcpu>\n"
            "<devices>\n<memballoon model='virtio'/>\n</devices>\n",
        )

    def test_minimal_disables_balloon(self):
        self.assertEqual(
            GuestResourceDef(mem=524288).to_xml(),
            "<memory>524288</memory>\n<devices>\n<memballoon model='none'/>\n</devices>\n",
        )


class TestTermPolicy(unittest.TestCase):
    def test_defaults(self):
        self.assertEqual(
            TermPolicy().to_xml(),
            "<on_reboot>destroy</on_reboot>\n<on_poweroff>destroy</on_poweroff>\n<on_crash>destroy</on_crash>\n",
        )

    def test_crash_uses_crash_action(self):
        policy = TermPolicy(reboot="restart", power_off="destroy", crash="preserve")
        xml = policy.to_xml()
        self.assertIn("<on_reboot>restart</on_reboot>", xml)
        self.assertIn("<on_crash>preserve</on_crash>", xml)
