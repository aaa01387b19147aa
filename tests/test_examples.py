import importlib.util
import json
from pathlib import Path

import pytest

from ultiserve.model import mount

from conftest import fetch

EXAMPLES = Path(__file__).resolve().parents[1] / "examples"


@pytest.fixture
def fileserver():
	spec = importlib.util.spec_from_file_location(
		"fileserver", EXAMPLES / "fileserver.py"
	)
	assert spec and spec.loader
	module = importlib.util.module_from_spec(spec)
	spec.loader.exec_module(module)
	return module


def test_api_lists_directories(fileserver, tree: Path):
	app = mount(fileserver.BrowsableFileService(tree))
	res = fetch(app, "/api/docs")
	assert res.status == 200
	assert [_["name"] for _ in json.loads(res.payload)] == ["guide.md", "readme.txt"]
	# The file views are still served by the base service
	assert fetch(app, "/docs/readme.txt").status == 200


def test_api_keeps_the_error_statuses(fileserver, tree: Path):
	app = mount(fileserver.BrowsableFileService(tree))
	assert fetch(app, "/api/escape").status == 403
	assert fetch(app, "/api/..").status == 403
	assert fetch(app, "/api/missing").status == 404
	assert fetch(app, "/api/main.py").status == 404


# EOF
