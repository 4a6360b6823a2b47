from pathlib import Path
import tempfile

import pytest

from ans_git_inventory import workdir as workdir_mod
from ans_git_inventory.workdir import CleanupError, generate_workdir, remove_workdir


def test_generate_workdir_uses_temp_dir_and_alphanumeric_suffix() -> None:
    path = generate_workdir()

    assert path.parent == Path(tempfile.gettempdir())
    assert len(path.name) == 32
    assert path.name.isalnum()
    assert path.name.isascii()
    assert not path.exists()


def test_generate_workdir_is_unique() -> None:
    names = {generate_workdir().name for _ in range(500)}
    assert len(names) == 500


def test_remove_workdir_deletes_tree(tmp_path: Path) -> None:
    work = generate_workdir(tmp_path)
    (work / ".git" / "objects").mkdir(parents=True)
    (work / "inventory.yaml").write_text("all: {}\n")

    assert remove_workdir(work) is True
    assert not work.exists()


def test_remove_absent_workdir_is_not_an_error(tmp_path: Path) -> None:
    assert remove_workdir(tmp_path / "never-created") is False


def test_remove_workdir_reports_other_failures(monkeypatch, tmp_path: Path) -> None:
    def deny(path):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(workdir_mod.shutil, "rmtree", deny)
    with pytest.raises(CleanupError, match="Permission denied"):
        remove_workdir(tmp_path)
