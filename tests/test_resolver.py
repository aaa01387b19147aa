import errno
import os
from pathlib import Path

import pytest

from ultiserve import resolver
from ultiserve.resolver import (
	Directory,
	File,
	Forbidden,
	NotFound,
	RootError,
	contains,
	resolve,
	segments,
	servedRoot,
)


def test_root_resolves_to_itself(tree: Path):
	root = servedRoot(tree)
	assert resolve(root, "/") == Directory(root)
	assert resolve(root, "") == Directory(root)


def test_trailing_slash_is_ignored(tree: Path):
	root = servedRoot(tree)
	assert resolve(root, "/docs/") == resolve(root, "/docs") == Directory(root / "docs")
	assert resolve(root, "//docs//readme.txt") == resolve(root, "/docs/readme.txt")


def test_resolution_is_idempotent(tree: Path):
	root = servedRoot(tree)
	assert resolve(root, "/docs/readme.txt") == resolve(root, "/docs/readme.txt")


def test_file_has_lowercased_extension(tree: Path):
	root = servedRoot(tree)
	(tree / "UPPER.PY").write_text("x = 1\n")
	assert resolve(root, "/docs/readme.txt") == File(root / "docs" / "readme.txt", "txt")
	assert resolve(root, "/UPPER.PY") == File(root / "UPPER.PY", "py")


def test_percent_encoded_segments_are_decoded(tree: Path):
	root = servedRoot(tree)
	assert resolve(root, "/Mixed%20Case.txt") == File(root / "Mixed Case.txt", "txt")


@pytest.mark.parametrize(
	"path",
	[
		"/..",
		"/../outside/secret.txt",
		"/docs/../../outside/secret.txt",
		"/docs/../main.py",
		"/%2e%2e/outside/secret.txt",
		"/%2E%2E",
	],
)
def test_parent_references_are_forbidden(tree: Path, path: str):
	assert isinstance(resolve(servedRoot(tree), path), Forbidden)


def test_symlinks_escaping_the_root_are_forbidden(tree: Path):
	root = servedRoot(tree)
	assert isinstance(resolve(root, "/escape"), Forbidden)
	assert isinstance(resolve(root, "/escape/secret.txt"), Forbidden)
	assert isinstance(resolve(root, "/leak.txt"), Forbidden)


def test_symlinks_within_the_root_are_followed(tree: Path):
	root = servedRoot(tree)
	assert resolve(root, "/alias.txt") == File(root / "docs" / "readme.txt", "txt")


def test_dangling_symlink_escaping_the_root_is_forbidden(tree: Path):
	root = servedRoot(tree)
	(tree / "gone").symlink_to(tree.parent / "outside" / "missing.txt")
	assert isinstance(resolve(root, "/gone"), Forbidden)


def test_symlink_loop_is_not_served(tree: Path):
	root = servedRoot(tree)
	(tree / "loop").symlink_to(tree / "loop")
	assert isinstance(resolve(root, "/loop"), (Forbidden, NotFound))


def test_missing_paths_are_not_found(tree: Path):
	root = servedRoot(tree)
	assert isinstance(resolve(root, "/missing.txt"), NotFound)
	assert isinstance(resolve(root, "/docs/readme.txt/child"), NotFound)
	assert isinstance(resolve(root, "/dangling"), NotFound)


def test_undecodable_paths_are_not_found(tree: Path):
	assert segments("/%ff") is None
	assert isinstance(resolve(servedRoot(tree), "/%ff"), NotFound)
	assert isinstance(resolve(servedRoot(tree), "/a%00b"), NotFound)


def test_dot_segments_are_dropped(tree: Path):
	root = servedRoot(tree)
	assert segments("/./docs/./readme.txt") == ["docs", "readme.txt"]
	assert segments("/%2e/docs") == ["docs"]
	assert resolve(root, "/docs/./") == Directory(root / "docs")


def test_permission_denied_is_forbidden(tree: Path, monkeypatch: pytest.MonkeyPatch):
	root = servedRoot(tree)
	locked = root / "docs" / "readme.txt"
	stat = os.stat

	def lockedStat(path, *args, **kwargs):
		if Path(path) == locked:
			raise PermissionError(errno.EACCES, "Permission denied", str(path))
		return stat(path, *args, **kwargs)

	monkeypatch.setattr(resolver.os, "stat", lockedStat)
	assert isinstance(resolve(root, "/docs/readme.txt"), Forbidden)
	assert resolve(root, "/docs") == Directory(root / "docs")


def test_containment_compares_components():
	assert contains(Path("/srv/files"), Path("/srv/files"))
	assert contains(Path("/srv/files"), Path("/srv/files/a/b"))
	assert not contains(Path("/srv/files"), Path("/srv/files2"))
	assert not contains(Path("/srv/files"), Path("/srv/files2/a"))
	assert not contains(Path("/srv/files"), Path("/srv"))


def test_sibling_with_common_prefix_is_unreachable(tree: Path):
	root = servedRoot(tree)
	assert isinstance(resolve(root, "/../root2/other.txt"), Forbidden)


def test_served_root_must_be_a_directory(tree: Path):
	with pytest.raises(RootError):
		servedRoot(tree / "missing")
	with pytest.raises(RootError):
		servedRoot(tree / "main.py")
	with pytest.raises(RootError):
		servedRoot("")
	assert servedRoot(tree / "docs" / "..") == tree.resolve()


# EOF
