# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from vmdef.core.exceptions import MissingFieldError
from vmdef.libvirt.clock import ClockDef
from vmdef.libvirt.cpu import CpuModeDef, CpuTuneDef
from vmdef.libvirt.devices import DevicesDef, GraphicDef
from vmdef.libvirt.disk import DiskBus, DiskDef, DiskFmtType
from vmdef.libvirt.domain import LibvirtVmDef, render_domain_xml, write_domain_xml
from vmdef.libvirt.features import FeaturesDef
from vmdef.libvirt.guest import GuestDef, GuestResourceDef, GuestType, TermPolicy
from vmdef.libvirt.metadata import MetadataDef
from vmdef.libvirt.version import VersionContext

UUID = "5b4f0c1e-0d2b-4b8e-9a57-4f7d1f6f1a10"


def _full_vm() -> LibvirtVmDef:
    vm = LibvirtVmDef(hvs_type="kvm", domain_name="i-2-10-VM", uuid=UUID, description="Ubuntu 22.04")
    devs = DevicesDef(guest_type=GuestType.KVM, emulator="/usr/bin/kvm")
    devs.add_device(DiskDef.file_based("/mnt/pri/ROOT-10.qcow2", 0, DiskBus.VIRTIO, DiskFmtType.QCOW2))
    devs.add_device(GraphicDef("vnc", auto_port=True))
    # deliberately added out of render order
    vm.add_comp(devs)
    vm.add_comp(TermPolicy())
    vm.add_comp(ClockDef())
    vm.add_comp(CpuTuneDef(shares=1000))
    vm.add_comp(CpuModeDef(mode="host-model"))
    vm.add_comp(FeaturesDef(features=["acpi"]))
    vm.add_comp(GuestDef(guest_type=GuestType.KVM, arch="x86_64", uuid=UUID))
    vm.add_comp(GuestResourceDef(mem=2097152, vcpu=2))
    vm.add_comp(MetadataDef())
    return vm


@pytest.mark.unit
class TestLibvirtVmDef:
    def test_minimal_domain(self):
        vm = LibvirtVmDef(hvs_type="kvm", domain_name="i-2-10-VM")
        assert vm.to_xml() == "<domain type='kvm'>\n<name>i-2-10-VM</name>\n</domain>\n"

    def test_header_fields(self):
        root = ET.fromstring(_full_vm().to_xml())
        assert root.tag == "domain"
        assert root.get("type") == "kvm"
        assert [c.tag for c in root][:3] == ["name", "uuid", "description"]
        assert root.find("uuid").text == UUID

    def test_component_order_fixed(self):
        root = ET.fromstring(_full_vm().to_xml())
        tags = [c.tag for c in root][3:]
        assert tags == [
            "metadata",
            "memory",
            "vcpu",
            "devices",  # memballoon
            "sysinfo",
            "os",
            "features",
            "cpu",
            "cputune",
            "clock",
            "on_reboot",
            "on_poweroff",
            "on_crash",
            "devices",
        ]

    def test_add_comp_replaces_same_kind(self):
        vm = LibvirtVmDef(hvs_type="kvm", domain_name="vm")
        vm.add_comp(CpuTuneDef(shares=10))
        vm.add_comp(CpuTuneDef(shares=20))
        assert vm.get_comp(CpuTuneDef).shares == 20
        assert vm.to_xml().count("<cputune>") == 1

    def test_add_comp_rejects_unknown(self):
        vm = LibvirtVmDef(hvs_type="kvm", domain_name="vm")
        with pytest.raises(TypeError):
            vm.add_comp(object())  # type: ignore[arg-type]

    def test_accessors(self):
        vm = _full_vm()
        assert vm.devices is vm.get_comp(DevicesDef)
        assert vm.metadata is vm.get_comp(MetadataDef)
        assert vm.guest.arch == "x86_64"
        assert LibvirtVmDef(hvs_type="kvm", domain_name="vm").devices is None

    @pytest.mark.parametrize("kwargs, missing", [({"hvs_type": "", "domain_name": "x"}, "hvs_type"), ({"hvs_type": "kvm", "domain_name": None}, "domain_name")])
    def test_required_fields(self, kwargs, missing):
        with pytest.raises(MissingFieldError) as ei:
            LibvirtVmDef(**kwargs)
        assert ei.value.context["field"] == missing

    def test_render_is_idempotent(self):
        vm = _full_vm()
        ctx = VersionContext(9008, 1001000)
        assert vm.to_xml(ctx) == vm.to_xml(ctx)

    def test_mutation_reflected_in_next_render(self):
        vm = _full_vm()
        before = vm.to_xml()
        vm.devices.get_disks()[0].source_path = "/mnt/pri/ROOT-11.qcow2"
        after = vm.to_xml()
        assert before != after
        assert "ROOT-11" in after

    def test_every_line_is_one_element(self):
        for line in _full_vm().to_xml().splitlines():
            assert line.startswith("<")
            assert line == line.strip()


@pytest.mark.security
class TestEscaping:
    def test_name_and_description_escaped(self):
        vm = LibvirtVmDef(hvs_type="kvm", domain_name="a&b<c>", description="it's \"quoted\"")
        xml = vm.to_xml()
        assert "<name>a&amp;b&lt;c&gt;</name>" in xml
        root = ET.fromstring(xml)
        assert root.find("name").text == "a&b<c>"
        assert root.find("description").text == "it's \"quoted\""

    def test_attribute_quote_cannot_break_out(self):
        vm = LibvirtVmDef(hvs_type="kvm' evil='1", domain_name="vm")
        root = ET.fromstring(vm.to_xml())
        assert root.get("type") == "kvm' evil='1"
        assert root.get("evil") is None


@pytest.mark.unit
class TestRenderHelpers:
    def test_render_domain_xml_matches_to_xml(self):
        vm = _full_vm()
        assert render_domain_xml(vm) == vm.to_xml()

    def test_write_domain_xml(self, tmp_path: Path):
        vm = _full_vm()
        out = write_domain_xml(vm, tmp_path / "out")
        assert out.name == "i-2-10-VM.xml"
        assert out.read_text(encoding="utf-8") == vm.to_xml()

    def test_write_domain_xml_sanitizes_name(self, tmp_path: Path):
        vm = LibvirtVmDef(hvs_type="kvm", domain_name="../etc/passwd")
        out = write_domain_xml(vm, tmp_path)
        assert out.parent == tmp_path.resolve()
        assert "/" not in out.name

    def test_write_domain_xml_no_overwrite(self, tmp_path: Path):
        vm = LibvirtVmDef(hvs_type="kvm", domain_name="vm")
        write_domain_xml(vm, tmp_path)
        with pytest.raises(FileExistsError):
            write_domain_xml(vm, tmp_path, overwrite=False)
