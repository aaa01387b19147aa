from typing import Iterator, NamedTuple

from .utils.htmpl import H, Node, html, raw

# --
# # Templates
#
# Pages are built with HTMPL nodes, which escape text and attributes. The
# only markup that is not escaped is highlighted content, which the
# highlighter has already escaped (`FileView.unsafeContent`).

PAGE_CSS: str = """
:root {
	font-family: sans-serif;
	font-size: 14px;
	line-height: 1.35em;
	padding: 20px;
	background: #F0F0F0;
	color: #202020;
}
h1 {
	margin-top: 1.25em;
	margin-bottom: 1.25em;
	line-height: 1.25em;
	word-break: break-all;
}
nav.breadcrumb a {
	text-decoration: none;
}
ul.listing {
	padding: 0px 20px;
	margin: 1.25em 0em;
}
ul.listing li {
	padding: 0px 10px;
	margin: 0.5em 0em;
}
ul.listing li.directory {
	list-style-type: "\\1F4C1";
}
ul.listing li.file {
	list-style-type: "\\1F4C4";
}
p.empty {
	font-style: italic;
	color: #808080;
}
div.content pre, pre.plain {
	padding: 1em;
	overflow-x: auto;
	font-size: 13px;
}
pre.plain {
	background: #FFFFFF;
}
"""


class Crumb(NamedTuple):
	"""A breadcrumb link to one of the ancestors of the current path."""

	name: str
	href: str


class IndexView(NamedTuple):
	"""Context of a directory listing page."""

	path: str
	directory: str
	hasParent: bool
	parent: str | None
	breadcrumbs: list[Crumb]
	entries: list[tuple[str, str, bool]]


class FileView(NamedTuple):
	"""Context of a file page. When `unsafeContent` is set, the content
	is HTML that is output as-is, otherwise it is escaped."""

	name: str
	path: str
	rawURL: str
	content: str
	unsafeContent: bool = False
	language: str | None = None


def page(title: str, *body: Node | None) -> Iterator[str]:
	return html(
		H.html(
			H.head(
				H.meta(charset="utf-8"),
				H.meta(
					name="viewport",
					content="width=device-width, initial-scale=1.0",
				),
				H.title(title),
				H.style(raw(PAGE_CSS)),
			),
			H.body(*body),
		),
		doctype="html",
	)


def breadcrumb(crumbs: list[Crumb]) -> Node:
	nodes: list[Node | str] = []
	for i, crumb in enumerate(crumbs):
		nodes.append(H.a(crumb.name, href=crumb.href))
		# The root crumb is already a `/`
		if i > 0 and i < len(crumbs) - 1:
			nodes.append("/")
	return H.nav(*nodes, _="breadcrumb")


def renderIndex(view: IndexView) -> Iterator[str]:
	"""Renders the listing of a directory, where entries are
	`(label, href, isDirectory)` triples."""
	items: list[Node] = []
	if view.hasParent and view.parent is not None:
		items.append(H.li(H.a("..", href=view.parent), _="directory"))
	for label, href, is_dir in view.entries:
		items.append(H.li(H.a(label, href=href), _="directory" if is_dir else "file"))
	return page(
		view.path,
		H.h1("Listing for ", breadcrumb(view.breadcrumbs)),
		H.p(H.small(view.directory)),
		H.ul(*items, _="listing"),
		H.p("Empty Directory", _="empty") if not view.entries else None,
	)


def renderFile(view: FileView) -> Iterator[str]:
	content: Node = (
		H.div(raw(view.content), _="content")
		if view.unsafeContent
		else H.pre(view.content, _="plain")
	)
	return page(
		view.name,
		H.h1(view.path),
		H.p(
			H.a("View Raw", href=view.rawURL),
			f" · {view.language}" if view.language else None,
		),
		content,
	)


# EOF
