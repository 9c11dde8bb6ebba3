"""
Shared fixtures for the bls tests: small directory trees and rich consoles
that record into memory.
"""
import io
import sys
from pathlib import Path

import pytest
from rich.console import Console

# Make bls.py importable without installing the package
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def sample_tree(tmp_path):
    """
    d/
      a.txt
      .secret
      sub/
        b.txt
    """
    root = tmp_path / "d"
    root.mkdir()
    (root / "a.txt").write_text("a\n")
    (root / ".secret").write_text("s\n")
    (root / "sub").mkdir()
    (root / "sub" / "b.txt").write_text("b\n")
    return root


@pytest.fixture
def plain_console():
    """Console without colours; read back with ``.file.getvalue()``."""
    return Console(file=io.StringIO(), color_system=None, width=200, highlight=False)


@pytest.fixture
def color_console():
    return Console(
        file=io.StringIO(),
        force_terminal=True,
        color_system="standard",
        width=200,
        highlight=False,
    )


@pytest.fixture
def err_console():
    return Console(file=io.StringIO(), color_system=None, width=200, highlight=False)
