from pathlib import Path

OCTET_STREAM: str = "application/octet-stream"


def isText(data: bytes) -> bool:
	"""Tells if the given content can be shown as UTF-8 text: NUL bytes
	are taken as a sign of binary content."""
	if b"\x00" in data:
		return False
	try:
		data.decode("utf-8")
		return True
	except UnicodeDecodeError:
		return False


def extension(path: Path | str) -> str:
	"""Returns the lowercased last suffix of the path, without its dot, so
	that `archive.tar.gz` gives `gz` and `Makefile` gives an empty string."""
	return Path(path).suffix[1:].lower()


# EOF
