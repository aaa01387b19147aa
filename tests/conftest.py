import asyncio
import sys
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).resolve().parents[1] / "src" / "py"
if str(SRC_DIR) not in sys.path:  # pragma: no cover - path setup
	sys.path.insert(0, str(SRC_DIR))

from ultiserve.http.model import HTTPRequest, HTTPResponse  # noqa: E402
from ultiserve.http.parser import HTTPParser  # noqa: E402
from ultiserve.model import Application, mount  # noqa: E402
from ultiserve.server import Process  # noqa: E402
from ultiserve.services.files import FileService  # noqa: E402


def request(path: str, method: str = "GET", *, headers: str = "") -> HTTPRequest:
	"""Parses the raw bytes of a request, the way the server does."""
	payload = f"{method} {path} HTTP/1.1\r\nHost: localhost\r\n{headers}\r\n"
	requests = [
		_
		for _ in HTTPParser().feed(payload.encode("latin-1"))
		if isinstance(_, HTTPRequest)
	]
	assert len(requests) == 1, f"Could not parse request: {payload!r}"
	return requests[0]


def fetch(app: Application, path: str, method: str = "GET") -> HTTPResponse:
	return asyncio.run(Process(app, request(path, method)))


@pytest.fixture
def tree(tmp_path: Path) -> Path:
	"""A served directory along with a sibling that must stay unreachable."""
	root = tmp_path / "root"
	(root / "docs").mkdir(parents=True)
	(root / "docs" / "readme.txt").write_text("hello <b>world</b>\n")
	(root / "docs" / "guide.md").write_text("# Guide\n")
	(root / "empty").mkdir()
	(root / "main.py").write_text("def main():\n\treturn 'hi'\n")
	(root / "index.html").write_text("<h1>Hi</h1>")
	(root / "notes.zzunknown").write_text("a < b & c")
	(root / "data.bin").write_bytes(b"\x00\x01\x02\xff")
	(root / "Mixed Case.txt").write_text("spaced")
	outside = tmp_path / "outside"
	outside.mkdir()
	(outside / "secret.txt").write_text("secret")
	(tmp_path / "root2").mkdir()
	(tmp_path / "root2" / "other.txt").write_text("other")
	(root / "escape").symlink_to(outside, target_is_directory=True)
	(root / "leak.txt").symlink_to(outside / "secret.txt")
	(root / "dangling").symlink_to(root / "nowhere")
	(root / "alias.txt").symlink_to(root / "docs" / "readme.txt")
	return root


@pytest.fixture
def app(tree: Path) -> Application:
	return mount(FileService(tree))


# EOF
