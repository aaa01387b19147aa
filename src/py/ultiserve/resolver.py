import os
import stat
from pathlib import Path
from typing import NamedTuple, TypeAlias
from urllib.parse import unquote

from .utils.files import extension as fileExtension

# --
# # Path Resolver
#
# Maps the path of a request to a canonical filesystem path confined to the
# served root. The root is the single trust boundary: whatever the request
# path, symlinks included, a resolved `Directory` or `File` is always the root
# or one of its descendants.

PARENT: str = ".."


class RootError(ValueError):
	"""Raised when the directory to serve is unusable."""


class Directory(NamedTuple):
	path: Path


class File(NamedTuple):
	path: Path
	extension: str


class NotFound(NamedTuple):
	reason: str = "No such path"


class Forbidden(NamedTuple):
	reason: str = "Path is outside of the served directory"


ResolvedTarget: TypeAlias = Directory | File | NotFound | Forbidden


def servedRoot(path: Path | str) -> Path:
	"""Canonicalizes and validates the directory to serve, raising
	`RootError` when it does not exist or is not a directory."""
	if not str(path):
		raise RootError("The directory to serve can't be empty")
	root = Path(path).expanduser().resolve()
	if not root.exists():
		raise RootError(f"Directory to serve does not exist: {root}")
	elif not root.is_dir():
		raise RootError(f"Path to serve is not a directory: {root}")
	return root


def segments(requestPath: str) -> list[str] | None:
	"""Decodes the percent-encoded request path and splits it into its
	segments, without empty or `.` ones. Returns `None` when the path
	can't be decoded."""
	try:
		decoded = unquote(requestPath, errors="strict")
	except UnicodeDecodeError:
		return None
	# `.` segments are no-ops, dropping them keeps links relative to the
	# canonical directory
	return [_ for _ in decoded.split("/") if _ and _ != "."]


def contains(root: Path, path: Path) -> bool:
	"""Tells if `path` is `root` or one of its descendants, comparing path
	components so that `/srv2` is not within `/srv`."""
	return path.parts[: len(parts := root.parts)] == parts


def resolve(root: Path, requestPath: str) -> ResolvedTarget:
	"""Resolves the request path against the (canonical) root."""
	chunks = segments(requestPath)
	if chunks is None:
		return NotFound("Path is not valid UTF-8")
	if PARENT in chunks:
		return Forbidden("Path contains a parent reference")
	if any("\x00" in _ or "\\" in _ for _ in chunks):
		return NotFound("Path contains invalid characters")
	try:
		# NOTE: Not strict, so that symlinks pointing outside are reported
		# as escapes even when their target does not exist.
		local_path = root.joinpath(*chunks).resolve()
	except (OSError, RuntimeError):
		# Symlink loops
		return Forbidden("Path can't be canonicalized")
	if not contains(root, local_path):
		return Forbidden()
	try:
		mode = os.stat(local_path).st_mode
	except (FileNotFoundError, NotADirectoryError):
		return NotFound()
	except PermissionError:
		return Forbidden("Permission denied")
	except OSError:
		return NotFound()
	if stat.S_ISDIR(mode):
		return Directory(local_path)
	elif stat.S_ISREG(mode):
		return File(local_path, fileExtension(local_path))
	else:
		return Forbidden("Not a regular file")


# EOF
