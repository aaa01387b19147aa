import os
import stat
from enum import Enum
from pathlib import Path
from typing import NamedTuple

from .resolver import contains
from .utils.logging import LogLevel, debug, logged


class EntryKind(Enum):
	Directory = "directory"
	File = "file"


class FileEntry(NamedTuple):
	"""An immediate child of a listed directory."""

	name: str
	kind: EntryKind

	@property
	def isDirectory(self) -> bool:
		return self.kind is EntryKind.Directory

	@property
	def label(self) -> str:
		"""The name as shown in listings, where directories end with `/`."""
		return f"{self.name}/" if self.isDirectory else self.name


def sortKey(entry: FileEntry) -> tuple[bool, str, str]:
	"""Directories come first, then names in case-insensitive order, the
	exact name breaking ties so that the order is total."""
	return (not entry.isDirectory, entry.name.casefold(), entry.name)


def listDirectory(path: Path) -> list[FileEntry]:
	"""Lists the immediate children of the given directory, following
	symlinks to classify them. Children that can't be stat'ed, like dangling
	symlinks, are skipped. Raises an `OSError` when the directory itself
	can't be enumerated."""
	entries: list[FileEntry] = []
	with os.scandir(path) as children:
		for child in children:
			try:
				mode = child.stat().st_mode
			except OSError as e:
				logged(LogLevel.Debug) and debug(
					"Skipping unreadable entry", Path=child.path, Error=str(e)
				)
				continue
			entries.append(
				FileEntry(
					child.name,
					EntryKind.Directory if stat.S_ISDIR(mode) else EntryKind.File,
				)
			)
	return sorted(entries, key=sortKey)


def hasParent(root: Path, path: Path) -> bool:
	"""Tells if the directory can be navigated up from, which is always the
	case except for the root itself."""
	return path != root and contains(root, path)


# EOF
