# SPDX-License-Identifier: LGPL-3.0-or-later
from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from vmdef.config.config_loader import Config
from vmdef.core.exceptions import ConfigError

LOG = logging.getLogger("vmdef_test_config")


@pytest.mark.unit
class TestDeepMerge:
    def test_nested_mappings_merge(self):
        base = {"name": "vm", "resources": {"memory": 1024, "vcpus": 1}}
        over = {"resources": {"vcpus": 4}}
        assert Config.deep_merge(base, over) == {"name": "vm", "resources": {"memory": 1024, "vcpus": 4}}
        assert base["resources"]["vcpus"] == 1

    def test_lists_replace(self):
        assert Config.deep_merge({"features": ["acpi", "apic"]}, {"features": ["pae"]}) == {"features": ["pae"]}


@pytest.mark.unit
class TestLoad:
    def test_yaml(self, tmp_path: Path):
        p = tmp_path / "vm.yaml"
        p.write_text("type: kvm\nname: i-2-10-VM\nresources:\n  memory: 2097152\n", encoding="utf-8")
        assert Config.load_one(LOG, p) == {"type": "kvm", "name": "i-2-10-VM", "resources": {"memory": 2097152}}

    def test_json(self, tmp_path: Path):
        p = tmp_path / "vm.json"
        p.write_text(json.dumps({"type": "kvm", "name": "j"}), encoding="utf-8")
        assert Config.load_one(LOG, p)["name"] == "j"

    def test_empty_file_is_empty_mapping(self, tmp_path: Path):
        p = tmp_path / "empty.yaml"
        p.write_text("", encoding="utf-8")
        assert Config.load_one(LOG, p) == {}

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError) as ei:
            Config.load_one(LOG, tmp_path / "nope.yaml")
        assert ei.value.code == 2
        assert isinstance(ei.value.cause, OSError)

    def test_bad_yaml(self, tmp_path: Path):
        p = tmp_path / "bad.yaml"
        p.write_text("name: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            Config.load_one(LOG, p)

    def test_bad_json(self, tmp_path: Path):
        p = tmp_path / "bad.json"
        p.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            Config.load_one(LOG, p)

    def test_non_mapping_root(self, tmp_path: Path):
        p = tmp_path / "list.yaml"
        p.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError) as ei:
            Config.load_one(LOG, p)
        assert ei.value.context["root"] == "list"

    def test_load_many_layers(self, tmp_path: Path):
        base = tmp_path / "base.yaml"
        base.write_text("type: kvm\nname: base\nclock: {offset: utc}\n", encoding="utf-8")
        over = tmp_path / "over.yaml"
        over.write_text("name: i-2-10-VM\nclock: {timer: {name: kvmclock}}\n", encoding="utf-8")
        merged = Config.load_many(LOG, [base, over])
        assert merged == {"type": "kvm", "name": "i-2-10-VM", "clock": {"offset": "utc", "timer": {"name": "kvmclock"}}}


@pytest.mark.unit
class TestExpand:
    def test_directory_expands_sorted(self, tmp_path: Path):
        d = tmp_path / "conf.d"
        d.mkdir()
        for name in ("20-devices.yaml", "10-base.yml", "30-extra.json", "README.txt"):
            (d / name).write_text("{}", encoding="utf-8")
        single = tmp_path / "last.yaml"
        out = Config.expand_configs(LOG, [str(d), str(single)])
        assert [p.name for p in out] == ["10-base.yml", "20-devices.yaml", "30-extra.json", "last.yaml"]
