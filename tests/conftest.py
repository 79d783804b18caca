# SPDX-License-Identifier: LGPL-3.0-or-later
import sys
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

_THIS_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _THIS_DIR.parent

if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: fast, pure rendering tests")
    config.addinivalue_line("markers", "security: escaping and secret-handling tests")


@pytest.fixture
def parse_fragment():
    """Parse a possibly multi-root markup fragment under a synthetic <root>."""

    def _parse(xml_text: str) -> ET.Element:
        return ET.fromstring(f"<root>{xml_text}</root>")

    return _parse
