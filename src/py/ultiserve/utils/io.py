DEFAULT_ENCODING: str = "utf8"
EOL: bytes = b"\r\n"


class LineParser:
	"""Splits a byte stream into CRLF-terminated lines, holding on to a
	partial line until the chunk that completes it is fed."""

	__slots__ = ["pending", "scanned"]

	def __init__(self) -> None:
		self.pending: bytearray = bytearray()
		# Where to resume the search for the EOL in `pending`
		self.scanned: int = 0

	def reset(self) -> "LineParser":
		self.pending.clear()
		self.scanned = 0
		return self

	def feed(self, chunk: bytes, start: int = 0) -> tuple[bytes | None, int]:
		"""Returns the line completed by `chunk` (without its EOL), or `None`,
		along with the number of bytes consumed from `start`."""
		held: int = len(self.pending)
		self.pending += chunk[start:]
		end: int = self.pending.find(EOL, self.scanned)
		if end == -1:
			# A trailing CR may get its LF from the next chunk
			self.scanned = max(0, len(self.pending) - 1)
			return None, len(chunk) - start
		line = bytes(self.pending[:end])
		self.reset()
		return line, end + len(EOL) - held


# EOF
