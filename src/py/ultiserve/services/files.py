from pathlib import Path
from urllib.parse import quote

from ..config import RAW_PARAM, ROOT, isTruthy as isEnabled
from ..decorators import on
from ..http.model import HTTPRequest, HTTPResponse
from ..listing import FileEntry, hasParent, listDirectory
from ..model import Service
from ..rendering import Renderer
from ..resolver import (
	Directory,
	File,
	Forbidden,
	NotFound,
	resolve,
	segments,
	servedRoot,
)
from ..templates import Crumb, IndexView, renderIndex
from ..utils.logging import error, warning


def isTruthy(value: str | None) -> bool:
	"""Query flags are also set when given without a value, as in `?raw`."""
	return value == "" or isEnabled(value)


def href(chunks: list[str], *, directory: bool = False) -> str:
	"""Returns the absolute, percent-encoded URL for the given path
	segments."""
	path = "/" + "/".join(quote(_) for _ in chunks)
	return f"{path}/" if directory and chunks else path


class FileService(Service):
	"""Serves the files of a directory, read-only. Directories are shown
	as listings and files as pages, highlighted when their language is known,
	or as their raw bytes when the `raw` parameter is given."""

	def __init__(
		self,
		root: str | Path | None = None,
		*,
		renderer: Renderer | None = None,
		rawParam: str = RAW_PARAM,
	):
		super().__init__()
		self.root: Path = servedRoot(ROOT if root is None else root)
		self.renderer: Renderer = renderer or Renderer()
		self.rawParam: str = rawParam

	@on(GET=("/", "/{path:any}"))
	def read(self, request: HTTPRequest, path: str = "") -> HTTPResponse:
		match resolve(self.root, request.path):
			case Forbidden(reason):
				warning("Forbidden path", Path=request.path, Reason=reason)
				return request.notAuthorized()
			case NotFound():
				return request.notFound()
			case Directory(local_path):
				return self.renderDirectory(request, local_path)
			case File(local_path, extension):
				return self.renderFile(request, local_path, extension)
			case target:
				raise RuntimeError(f"Unsupported target: {target}")

	def renderDirectory(self, request: HTTPRequest, localPath: Path) -> HTTPResponse:
		try:
			entries: list[FileEntry] = listDirectory(localPath)
		except FileNotFoundError:
			return request.notFound()
		except PermissionError:
			return request.notAuthorized(f"Not authorized to list: {request.path}")
		except OSError as e:
			error("Could not list directory", "LISTERR", Path=str(localPath), Error=str(e))
			return request.fail("Could not list directory")
		# We support the JSON format to list the contents of a directory
		if request.param("format") == "json":
			return request.returns(entries)
		chunks: list[str] = segments(request.path) or []
		parent: str | None = (
			href(chunks[:-1], directory=True) if hasParent(self.root, localPath) else None
		)
		crumbs: list[Crumb] = [Crumb("/", "/")] + [
			Crumb(name, href(chunks[: i + 1], directory=True))
			for i, name in enumerate(chunks)
		]
		return request.respondHTML(
			renderIndex(
				IndexView(
					path="/" + "/".join(chunks),
					directory=str(localPath),
					hasParent=parent is not None,
					parent=parent,
					breadcrumbs=crumbs,
					entries=[
						(_.label, href(chunks + [_.name], directory=_.isDirectory), _.isDirectory)
						for _ in entries
					],
				)
			)
		)

	def renderFile(
		self, request: HTTPRequest, localPath: Path, extension: str
	) -> HTTPResponse:
		force_raw: bool = isTruthy(request.param(self.rawParam))
		raw_url: str = f"{href(segments(request.path) or [])}?{self.rawParam}=true"
		try:
			rendered = self.renderer.render(
				localPath, extension, force_raw, rawURL=raw_url
			)
		except (FileNotFoundError, NotADirectoryError):
			# The file was removed after it was resolved
			return request.notFound()
		except PermissionError:
			return request.notAuthorized(f"Not authorized to read: {request.path}")
		except OSError as e:
			error("Could not read file", "READERR", Path=str(localPath), Error=str(e))
			return request.fail("Could not read file")
		return request.respond(rendered.body, contentType=rendered.contentType)


# EOF
