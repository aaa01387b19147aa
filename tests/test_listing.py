from pathlib import Path

import pytest

from ultiserve.listing import EntryKind, FileEntry, hasParent, listDirectory


def names(path: Path) -> list[str]:
	return [_.label for _ in listDirectory(path)]


def test_directories_come_first_then_case_insensitive(tmp_path: Path):
	(tmp_path / "b.txt").write_text("b")
	(tmp_path / "A").mkdir()
	(tmp_path / "a.txt").write_text("a")
	assert names(tmp_path) == ["A/", "a.txt", "b.txt"]


def test_order_is_total(tmp_path: Path):
	for name in ("b.txt", "B.txt", "a.txt"):
		(tmp_path / name).write_text(name)
	assert names(tmp_path) == ["a.txt", "B.txt", "b.txt"]


def test_entries_are_classified(tmp_path: Path):
	(tmp_path / "dir").mkdir()
	(tmp_path / "file").write_text("")
	assert listDirectory(tmp_path) == [
		FileEntry("dir", EntryKind.Directory),
		FileEntry("file", EntryKind.File),
	]


def test_symlinks_are_classified_by_target(tmp_path: Path):
	(tmp_path / "dir").mkdir()
	(tmp_path / "link").symlink_to(tmp_path / "dir", target_is_directory=True)
	assert names(tmp_path) == ["dir/", "link/"]


def test_empty_directory(tmp_path: Path):
	assert listDirectory(tmp_path) == []


def test_dangling_symlinks_are_skipped(tmp_path: Path):
	(tmp_path / "file.txt").write_text("")
	(tmp_path / "dangling").symlink_to(tmp_path / "nowhere")
	assert names(tmp_path) == ["file.txt"]


def test_missing_directory_raises(tmp_path: Path):
	with pytest.raises(OSError):
		listDirectory(tmp_path / "missing")


def test_has_parent(tmp_path: Path):
	assert not hasParent(tmp_path, tmp_path)
	assert hasParent(tmp_path, tmp_path / "docs")
	assert hasParent(tmp_path, tmp_path / "docs" / "api")


# EOF
