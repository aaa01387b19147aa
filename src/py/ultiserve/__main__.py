import argparse
import sys

from .config import HOST, PORT, ROOT
from .resolver import RootError
from .server import run
from .services.files import FileService
from .utils.logging import LogThreshold, error


def parseAddress(address: str) -> tuple[str, int]:
	"""Parses an address given as `HOST:PORT`, `:PORT` or `PORT`, raising a
	`ValueError` when it is malformed."""
	host, _, port = address.rpartition(":")
	try:
		value = int(port)
	except ValueError:
		raise ValueError(f"Invalid port in address: {address}") from None
	if not 0 <= value <= 65535:
		raise ValueError(f"Port is out of range in address: {address}")
	return host or HOST, value


def main(args: list[str]) -> None:
	parser = argparse.ArgumentParser(
		prog="ultiserve",
		description="Browses a local directory over HTTP, with syntax highlighting",
	)
	parser.add_argument(
		"-a",
		"--addr",
		action="store",
		dest="address",
		metavar="HOST:PORT",
		help="Address to listen on",
		default=f"{HOST}:{PORT}",
	)
	parser.add_argument(
		"-l",
		"--log-level",
		action="store",
		dest="logLevel",
		help="Minimum level of logged messages (debug, info, warning, error)",
	)
	parser.add_argument(
		"-q",
		"--quiet",
		action="store_true",
		dest="quiet",
		help="Does not log served requests",
	)
	parser.add_argument(
		"directory",
		metavar="DIR",
		nargs="?",
		default=ROOT,
		help="The directory to serve",
	)
	options = parser.parse_args(args=args)
	try:
		if options.logLevel:
			LogThreshold.Set(options.logLevel)
		host, port = parseAddress(options.address)
		service = FileService(options.directory)
	except (RootError, ValueError) as e:
		error(str(e), "STARTERR")
		sys.exit(1)
	if options.quiet:
		run(service, host=host, port=port, logRequests=False)
	else:
		run(service, host=host, port=port)


def cli() -> None:
	main(sys.argv[1:])


if __name__ == "__main__":
	cli()

# EOF
