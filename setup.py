# SPDX-License-Identifier: LGPL-3.0-or-later
from setuptools import setup, find_packages

setup(
    name="vmdef",
    version="0.1.0",
    description="libvirt domain XML builder for KVM host agents",
    python_requires=">=3.9",
    packages=find_packages(include=["vmdef", "vmdef.*"]),
    install_requires=[l.strip() for l in open("requirements.txt", encoding="utf-8") if l.strip() and not l.startswith("#")],
    extras_require={"test": ["pytest>=7"]},
    entry_points={"console_scripts": ["vmdef=vmdef.cli.main:run"]},
)
