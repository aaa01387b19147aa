import importlib
from pathlib import Path

import pytest

from ultiserve import __main__ as cli
from ultiserve import config
from ultiserve.config import HOST
from ultiserve.utils.logging import LogLevel, LogThreshold, logged


def test_address_parsing():
	assert cli.parseAddress("0.0.0.0:9000") == ("0.0.0.0", 9000)
	assert cli.parseAddress(":9000") == (HOST, 9000)
	assert cli.parseAddress("9000") == (HOST, 9000)
	for address in ("localhost:http", "localhost:", "localhost:70000"):
		with pytest.raises(ValueError):
			cli.parseAddress(address)


def test_missing_directory_exits(tmp_path: Path):
	with pytest.raises(SystemExit) as raised:
		cli.main([str(tmp_path / "missing")])
	assert raised.value.code == 1


def test_malformed_address_exits(tmp_path: Path):
	with pytest.raises(SystemExit) as raised:
		cli.main(["--addr", "localhost:http", str(tmp_path)])
	assert raised.value.code == 1


def test_runs_file_service(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
	calls: list = []
	monkeypatch.setattr(cli, "run", lambda *args, **kwargs: calls.append((args, kwargs)))
	cli.main(["-a", "127.0.0.1:8123", "-q", str(tmp_path)])
	(service,), options = calls[0]
	assert service.root == tmp_path.resolve()
	assert options == {"host": "127.0.0.1", "port": 8123, "logRequests": False}


@pytest.mark.parametrize(
	"value, expected",
	[("1", True), ("yes", True), ("TRUE", True), ("on", True), ("0", False), ("off", False)],
)
def test_request_logging_flag(monkeypatch: pytest.MonkeyPatch, value: str, expected: bool):
	monkeypatch.setenv("ULTISERVE_LOG_REQUESTS", value)
	try:
		assert importlib.reload(config).LOG_REQUESTS is expected
	finally:
		monkeypatch.undo()
		importlib.reload(config)


def test_truthy_values():
	assert config.isTruthy("Yes") and config.isTruthy(" on ")
	assert not config.isTruthy(None) and not config.isTruthy("")


def test_log_threshold(monkeypatch: pytest.MonkeyPatch):
	monkeypatch.setattr(LogThreshold, "Level", LogThreshold.Level)
	LogThreshold.Set("warning")
	assert not logged(LogLevel.Info)
	assert logged(LogLevel.Error)
	with pytest.raises(ValueError):
		LogThreshold.Set("verbose")


# EOF
