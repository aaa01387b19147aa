from abc import ABC, abstractmethod
from pathlib import Path
from typing import NamedTuple, TypeAlias

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import find_lexer_class_for_filename, get_lexer_by_name
from pygments.util import ClassNotFound

from .config import STYLE
from .templates import FileView, renderFile
from .utils.files import OCTET_STREAM, isText
from .utils.logging import warning

# --
# # Content Renderer
#
# Decides how a file is shown: its unmodified bytes (raw view), or an HTML
# page where the content is either highlighted or escaped as plain text.
# Highlighting is delegated to a `Highlighter`, and any of its failures
# results in the plain text page instead of an error.

TEXT_PLAIN: str = "text/plain; charset=utf-8"
TEXT_HTML: str = "text/html; charset=utf-8"

# Extensions of documents that are sent as-is to the browser
HTML_EXTENSIONS: set[str] = {"html", "htm", "html5"}

# Language hints by extension, these take precedence over Pygments' own
# filename patterns. A `None` hint means the file is shown as plain text.
LANGUAGES: dict[str, str | None] = {
	"txt": None,
	"text": None,
	"log": None,
	"c": "c",
	"h": "c",
	"cc": "cpp",
	"cpp": "cpp",
	"hpp": "cpp",
	"css": "css",
	"go": "go",
	"java": "java",
	"js": "javascript",
	"mjs": "javascript",
	"json": "json",
	"py": "python",
	"rb": "ruby",
	"rs": "rust",
	"sh": "bash",
	"bash": "bash",
	"sql": "sql",
	"toml": "toml",
	"ts": "typescript",
	"xml": "xml",
	"yaml": "yaml",
	"yml": "yaml",
}

# Pygments aliases that stand for unhighlighted text
PLAIN_ALIASES: set[str] = {"text", "output"}


def registerLanguage(extension: str, hint: str | None) -> None:
	"""Maps the extension (without its dot) to the given language hint,
	`None` meaning plain text."""
	LANGUAGES[extension.lstrip(".").lower()] = hint


def languageHint(extension: str, name: str | None = None) -> str | None:
	"""Returns the language hint for the given extension, looking up
	Pygments' filename patterns when the extension is not registered."""
	if extension in LANGUAGES:
		return LANGUAGES[extension]
	filename = name or (f"file.{extension}" if extension else None)
	if not filename:
		return None
	lexer = find_lexer_class_for_filename(filename)
	if lexer is None or not lexer.aliases:
		return None
	hint: str = lexer.aliases[0]
	return None if hint in PLAIN_ALIASES else hint


# -----------------------------------------------------------------------------
#
# HIGHLIGHTER
#
# -----------------------------------------------------------------------------


class HighlightError(Exception):
	"""Raised by highlighters that can't process the given content."""


class Highlighter(ABC):
	@abstractmethod
	def render(self, content: str, hint: str) -> str:
		"""Returns the given content as HTML for the language `hint`, where
		the content is escaped, or raises an exception."""


class PygmentsHighlighter(Highlighter):
	"""Highlights with inline styles, so that pages need neither scripts
	nor stylesheets."""

	def __init__(self, style: str = STYLE):
		self.style: str = style

	def render(self, content: str, hint: str) -> str:
		try:
			lexer = get_lexer_by_name(hint, stripnl=False)
			formatter = HtmlFormatter(noclasses=True, style=self.style)
		except ClassNotFound as e:
			raise HighlightError(str(e)) from e
		return highlight(content, lexer, formatter)


# -----------------------------------------------------------------------------
#
# RENDERER
#
# -----------------------------------------------------------------------------


class RawView(NamedTuple):
	"""The file's bytes are sent unmodified"""

	pass


class DocumentView(NamedTuple):
	"""The file is an HTML document sent as-is"""

	pass


class HighlightedView(NamedTuple):
	"""The file is shown in a page, highlighted when there is a hint and
	as escaped plain text otherwise."""

	hint: str | None


RenderDecision: TypeAlias = RawView | DocumentView | HighlightedView


class Rendered(NamedTuple):
	body: bytes
	contentType: str


class Renderer:
	def __init__(
		self, highlighter: Highlighter | None = None, *, serveHTML: bool = True
	):
		self.highlighter: Highlighter | None = (
			PygmentsHighlighter() if highlighter is None else highlighter
		)
		self.serveHTML: bool = serveHTML

	def decide(
		self, extension: str, forceRaw: bool = False, *, name: str | None = None
	) -> RenderDecision:
		if forceRaw:
			return RawView()
		elif self.serveHTML and extension in HTML_EXTENSIONS:
			return DocumentView()
		else:
			return HighlightedView(languageHint(extension, name))

	def render(
		self,
		path: Path,
		extension: str,
		forceRaw: bool = False,
		*,
		rawURL: str = "",
	) -> Rendered:
		"""Reads the whole file and renders it, raising an `OSError` when
		it can't be read."""
		data: bytes = path.read_bytes()
		if not isText(data):
			# Binary content is never highlighted nor escaped
			return Rendered(data, OCTET_STREAM)
		match self.decide(extension, forceRaw, name=path.name):
			case RawView():
				return Rendered(data, TEXT_PLAIN)
			case DocumentView():
				return Rendered(data, TEXT_HTML)
			case HighlightedView(hint):
				view = self.view(path, data.decode("utf-8"), hint, rawURL)
				return Rendered("".join(renderFile(view)).encode("utf-8"), TEXT_HTML)
			case decision:
				raise ValueError(f"Unsupported render decision: {decision}")

	def view(
		self, path: Path, content: str, hint: str | None, rawURL: str
	) -> FileView:
		"""Creates the context for the file page, falling back to plain text
		when highlighting fails."""
		if hint is not None and self.highlighter is not None:
			try:
				return FileView(
					name=path.name,
					path=str(path),
					rawURL=rawURL,
					content=self.highlighter.render(content, hint),
					unsafeContent=True,
					language=hint,
				)
			except Exception as e:
				warning(
					"Highlighting failed, showing plain text",
					Path=str(path),
					Language=hint,
					Error=str(e),
				)
		return FileView(
			name=path.name,
			path=str(path),
			rawURL=rawURL,
			content=content,
			unsafeContent=False,
		)


# EOF
