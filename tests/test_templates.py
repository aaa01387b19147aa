import pytest

from ultiserve.templates import Crumb, FileView, IndexView, renderFile, renderIndex
from ultiserve.utils.htmpl import H, html, raw


def test_text_and_attributes_are_escaped():
	node = H.a("<b>&</b>", href='/a"b', _="entry")
	assert str(node) == '<a href="/a&quot;b" class="entry">&lt;b&gt;&amp;&lt;/b&gt;</a>'


def test_raw_markup_is_kept():
	assert str(H.div(raw("<span>x</span>"))) == "<div><span>x</span></div>"


def test_void_and_empty_elements():
	assert str(H.meta(charset="utf-8")) == '<meta charset="utf-8">'
	assert str(H.ul(None, _="listing")) == '<ul class="listing"></ul>'
	assert str(H.p("a", ["b", None], disabled=True, hidden=False)) == "<p disabled>ab</p>"
	assert "".join(html(H.p(), doctype="html")) == "<!DOCTYPE html>\n<p></p>"


def test_unknown_tag():
	with pytest.raises(AttributeError):
		H.blink("nope")


def test_index_page_escapes_entries():
	page = "".join(
		renderIndex(
			IndexView(
				path="/docs",
				directory="/srv/docs",
				hasParent=True,
				parent="/",
				breadcrumbs=[Crumb("/", "/"), Crumb("docs", "/docs/")],
				entries=[("<script>.txt", "/docs/%3Cscript%3E.txt", False)],
			)
		)
	)
	assert "&lt;script&gt;.txt" in page
	assert "<script>" not in page
	assert '<a href="/">..</a>' in page
	assert "Empty Directory" not in page


def test_file_page_escapes_plain_content():
	page = "".join(
		renderFile(FileView("a.txt", "/srv/a.txt", "/a.txt?raw=true", "<i>x</i>"))
	)
	assert '<pre class="plain">&lt;i&gt;x&lt;/i&gt;</pre>' in page
	assert 'href="/a.txt?raw=true"' in page


# EOF
