# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from vmdef.libvirt.interface import GuestNetType, InterfaceDef, NicModel
from vmdef.libvirt.version import VersionContext

MAC = "02:00:4c:5a:00:01"
BW_OK = VersionContext(libvirt_version=9004)


def _bridge(rate: int = 0) -> InterfaceDef:
    return InterfaceDef.bridge("cloudbr0", "vnet0", MAC, NicModel.VIRTIO, rate)


@pytest.mark.unit
class TestInterfaceRendering:
    def test_bridge_exact_markup(self):
        assert _bridge().to_xml() == (
            "<interface type='bridge'>\n"
            "<source bridge='cloudbr0'/>\n"
            "<target dev='vnet0'/>\n"
            f"<mac address='{MAC}'/>\n"
            "<model type='virtio'/>\n"
            "</interface>\n"
        )

    def test_network_source(self):
        nic = InterfaceDef.private_net("guestnet", None, MAC, NicModel.E1000)
        root = ET.fromstring(nic.to_xml())
        assert root.get("type") == "network"
        assert root.find("source").get("network") == "guestnet"
        assert root.find("target") is None

    def test_direct_source_mode(self):
        nic = InterfaceDef.direct("eth1", None, MAC, NicModel.VIRTIO, "bridge")
        src = ET.fromstring(nic.to_xml()).find("source")
        assert src.get("dev") == "eth1"
        assert src.get("mode") == "bridge"

    def test_ethernet_has_no_source_but_script(self):
        nic = InterfaceDef.ethernet("tap0", MAC, NicModel.RTL8139, script_path="/etc/qemu-ifup")
        root = ET.fromstring(nic.to_xml())
        assert root.get("type") == "ethernet"
        assert root.find("source") is None
        assert root.find("target").get("dev") == "tap0"
        assert root.find("script").get("path") == "/etc/qemu-ifup"

    def test_nic_model_values(self):
        nic = InterfaceDef.bridge("br0", None, MAC, NicModel.NE2KPCI)
        assert "<model type='ne2k_pci'/>" in nic.to_xml()

    def test_user_type_renders_bare(self):
        nic = InterfaceDef(net_type=GuestNetType.USER, mac_addr=MAC)
        assert nic.to_xml() == f"<interface type='user'>\n<mac address='{MAC}'/>\n</interface>\n"


@pytest.mark.unit
class TestBandwidth:
    def test_rendered_at_threshold(self):
        bw = ET.fromstring(_bridge(25600).to_xml(BW_OK)).find("bandwidth")
        assert bw is not None
        for tag in ("inbound", "outbound"):
            el = bw.find(tag)
            assert el.get("average") == "25600"
            assert el.get("peak") == "25600"

    def test_skipped_below_threshold(self):
        assert "<bandwidth>" not in _bridge(25600).to_xml(VersionContext(libvirt_version=9003))

    @pytest.mark.parametrize("rate", [0, -1])
    def test_skipped_without_positive_rate(self, rate):
        assert "<bandwidth>" not in _bridge(rate).to_xml(BW_OK)


@pytest.mark.unit
class TestVlan:
    @pytest.mark.parametrize("tag, rendered", [(-1, False), (0, False), (1, True), (100, True), (4094, True), (4095, False)])
    def test_tag_range(self, tag, rendered):
        nic = _bridge()
        nic.vlan_tag = tag
        assert nic.vlan_rendered is rendered
        assert ("<vlan" in nic.to_xml()) is rendered

    def test_vlan_markup(self):
        nic = _bridge()
        nic.vlan_tag = 100
        vlan = ET.fromstring(nic.to_xml()).find("vlan")
        assert vlan.get("trunk") == "no"
        assert vlan.find("tag").get("id") == "100"


@pytest.mark.unit
class TestInterfaceChildOrder:
    def test_full_order(self):
        nic = _bridge(1000)
        nic.script_path = "/etc/qemu-ifup"
        nic.pxe_disable = True
        nic.virtual_port_type = "openvswitch"
        nic.virtual_port_interface_id = "f0e1d2c3-b4a5-4697-8877-665544332211"
        nic.vlan_tag = 42
        root = ET.fromstring(nic.to_xml(BW_OK))
        assert [c.tag for c in root] == [
            "source",
            "target",
            "mac",
            "model",
            "bandwidth",
            "script",
            "rom",
            "virtualport",
            "vlan",
        ]
        rom = root.find("rom")
        assert rom.get("bar") == "off"
        assert rom.get("file") == ""
        vport = root.find("virtualport")
        assert vport.get("type") == "openvswitch"
        assert vport.find("parameters").get("interfaceid") == "f0e1d2c3-b4a5-4697-8877-665544332211"

    def test_virtualport_without_interface_id(self):
        nic = _bridge()
        nic.virtual_port_type = "802.1Qbh"
        assert "<virtualport type='802.1Qbh'>\n</virtualport>" in nic.to_xml()
