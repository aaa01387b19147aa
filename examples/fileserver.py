"""
Local File Server Example

Serves the current directory, along with a JSON listing of any directory
under `/api/`. Shows how to extend the file service with extra handlers and
how to register a language for an extension.

Usage:
    python fileserver.py

Test with:
    http://localhost:8000/                  # Browse the current directory
    http://localhost:8000/setup.py          # Highlighted source
    http://localhost:8000/setup.py?raw=true # Raw bytes
    http://localhost:8000/api/src           # JSON listing
"""

from ultiserve import HTTPRequest, HTTPResponse, on, run
from ultiserve.listing import listDirectory
from ultiserve.rendering import registerLanguage
from ultiserve.resolver import Directory, Forbidden, resolve
from ultiserve.services.files import FileService
from ultiserve.utils.logging import info


class BrowsableFileService(FileService):
	@on(priority=1, GET=("/api", "/api/{path:any}"))
	def listing(self, request: HTTPRequest, path: str = "") -> HTTPResponse:
		match resolve(self.root, path):
			case Directory(local_path):
				return request.returns(listDirectory(local_path))
			case Forbidden():
				return request.notAuthorized()
			case _:
				return request.notFound()


if __name__ == "__main__":
	registerLanguage("ipynb", "json")
	info("Starting the local file server")
	run(BrowsableFileService("."), port=8000)

# EOF
