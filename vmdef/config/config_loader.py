# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# vmdef/config/config_loader.py
"""
Domain description files.

A description is a mapping (YAML or JSON) consumed by
vmdef.libvirt.builder.build_vm_def. Several files can be layered:

    vmdef render -c base.yaml -c i-2-10-VM.yaml

Mappings are deep-merged left to right; scalars and lists from later files
replace earlier ones.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

import yaml

from ..core.exceptions import ConfigError

PathLike = Union[str, Path]


class Config:
    @staticmethod
    def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        out = dict(base)
        for k, v in override.items():
            if isinstance(v, dict) and isinstance(out.get(k), dict):
                out[k] = Config.deep_merge(out[k], v)
            else:
                out[k] = v
        return out

    @staticmethod
    def load_one(logger: logging.Logger, path: PathLike) -> Dict[str, Any]:
        p = Path(path).expanduser()
        try:
            raw = p.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(code=2, msg=f"cannot read config: {p}", cause=e, context={"path": str(p)}) from e

        try:
            if p.suffix.lower() == ".json":
                data = json.loads(raw) if raw.strip() else {}
            else:
                data = yaml.safe_load(raw) or {}
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(code=2, msg=f"invalid config syntax: {p}", cause=e, context={"path": str(p)}) from e

        if not isinstance(data, dict):
            raise ConfigError(
                code=2,
                msg=f"config root must be a mapping: {p}",
                context={"path": str(p), "root": type(data).__name__},
            )
        logger.debug("Loaded config %s (%d keys)", p, len(data))
        return data

    @staticmethod
    def load_many(logger: logging.Logger, paths: Sequence[PathLike]) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for p in paths:
            merged = Config.deep_merge(merged, Config.load_one(logger, p))
        return merged

    @staticmethod
    def expand_configs(logger: logging.Logger, paths: Sequence[PathLike]) -> List[Path]:
        """
        Directories expand to their *.yaml/*.yml/*.json files in name order.
        """
        out: List[Path] = []
        for raw in paths:
            p = Path(raw).expanduser()
            if p.is_dir():
                found = sorted(x for x in p.iterdir() if x.suffix.lower() in (".yaml", ".yml", ".json"))
                logger.debug("Config dir %s: %d file(s)", p, len(found))
                out.extend(found)
            else:
                out.append(p)
        return out
