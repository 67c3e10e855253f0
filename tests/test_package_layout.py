"""
Every package module opens with its own path comment.
"""

from pathlib import Path

import pytest

import dominant_colours

PACKAGE_DIR = Path(dominant_colours.__file__).parent
MODULES = sorted(PACKAGE_DIR.rglob("*.py"))


class TestPathHeaders:
    @pytest.mark.parametrize("path", MODULES, ids=lambda p: p.relative_to(PACKAGE_DIR).as_posix())
    def test_first_line(self, path):
        relative = path.relative_to(PACKAGE_DIR.parent).as_posix()
        first = path.read_text(encoding="utf-8").splitlines()[0]
        assert first == f"# {relative}"
