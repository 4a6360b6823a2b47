from pathlib import Path

import pytest

FAKE_INVENTORY = """#!/bin/sh
echo "cwd=$(pwd -P)"
echo "plugins=$ANSIBLE_INVENTORY_ENABLED"
echo "args=$*"
"""


@pytest.fixture
def fake_inventory(tmp_path: Path) -> Path:
    """Stand-in for ansible-inventory that echoes how it was called."""

    script = tmp_path / "bin" / "fake-inventory"
    script.parent.mkdir()
    script.write_text(FAKE_INVENTORY)
    script.chmod(0o755)
    return script
