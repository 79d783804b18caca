# SPDX-License-Identifier: LGPL-3.0-or-later
# -*- coding: utf-8 -*-
# vmdef/cli/main.py
"""
vmdef render -c desc.yaml [-c overrides.yaml] [--libvirt-version 0.9.8] [--qemu-version 1.1.0] [-o out.xml]
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from .. import __version__
from ..config.config_loader import Config
from ..core.exceptions import VmDefError, format_exception_for_cli, wrap_fatal
from ..core.logger import Log
from ..libvirt.builder import build_version_context, build_vm_def
from ..libvirt.domain import LibvirtVmDef, render_domain_xml
from ..libvirt.version import VersionContext, pack_version


def _version_arg(s: str) -> int:
    try:
        return pack_version(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="vmdef", description="Render libvirt domain XML from a domain description.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-v", "--verbose", action="count", default=0)
    p.add_argument("-q", "--quiet", action="count", default=0)
    p.add_argument("--log-file", dest="log_file", default=None)
    p.add_argument("--json-logs", dest="json_logs", action="store_true")

    sub = p.add_subparsers(dest="cmd", required=True)
    r = sub.add_parser("render", help="render a domain description to XML")
    r.add_argument("-c", "--config", action="append", required=True, help="YAML/JSON description (repeatable, merged in order)")
    r.add_argument("--libvirt-version", type=_version_arg, default=None, help="packed int or X.Y.Z")
    r.add_argument("--qemu-version", type=_version_arg, default=None, help="packed int or X.Y.Z")
    r.add_argument("-o", "--output", default=None, help="write XML here instead of stdout")
    r.add_argument("--summary", action="store_true", help="print a component/device table to stderr")
    return p


def _effective_context(conf_ctx: VersionContext, args: argparse.Namespace) -> VersionContext:
    ctx = conf_ctx
    if args.libvirt_version is not None:
        ctx = replace(ctx, libvirt_version=args.libvirt_version)
    if args.qemu_version is not None:
        ctx = replace(ctx, qemu_version=args.qemu_version)
    return ctx


def print_summary(vm: LibvirtVmDef, ctx: VersionContext, console: Optional[Console] = None) -> None:
    console = console or Console(stderr=True)
    table = Table(title=f"{vm.domain_name} ({vm.hvs_type})")
    table.add_column("section")
    table.add_column("detail")
    for comp in vm.iter_components():
        table.add_row(type(comp).__name__, "")
    if vm.devices is not None:
        for kind, dev in vm.devices.iter_rendered():
            label = getattr(dev, "disk_label", None) or getattr(dev, "mac_addr", None) or ""
            table.add_row(f"  {kind.value}", str(label))
    table.caption = f"libvirt={ctx.libvirt_version} qemu={ctx.qemu_version}"
    console.print(table)


def cmd_render(logger: logging.Logger, args: argparse.Namespace) -> int:
    Log.step(logger, "Loading domain description", files=len(args.config))
    conf = Config.load_many(logger, Config.expand_configs(logger, args.config))
    vm = build_vm_def(conf)
    ctx = _effective_context(build_version_context(conf), args)

    xml_text = render_domain_xml(vm, ctx)

    if args.output:
        out = Path(args.output).expanduser()
        try:
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_text(xml_text, encoding="utf-8")
        except OSError as e:
            raise wrap_fatal("cannot write domain XML", e, code=1, path=str(out)) from e
        Log.ok(logger, "Wrote domain XML", path=str(out), domain=vm.domain_name)
    else:
        sys.stdout.write(xml_text)

    if args.summary:
        print_summary(vm, ctx)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    logger = Log.setup(args.verbose, args.log_file, quiet=args.quiet, json_logs=args.json_logs)

    try:
        return cmd_render(logger, args)
    except VmDefError as e:
        if args.json_logs:
            Log.fail(logger, e.msg, **e.to_dict(include_cause=True))
        else:
            Log.fail(logger, format_exception_for_cli(e, verbose=args.verbose))
        return e.code
    except KeyboardInterrupt:
        logger.warning("Interrupted by user (Ctrl+C).")
        return 130


def run(argv: Optional[List[str]] = None) -> None:
    raise SystemExit(main(argv))


if __name__ == "__main__":
    run()
