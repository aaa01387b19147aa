from typing import (
    LiteralString,
    Iterable,
    Iterator,
    Union,
    Callable,
    cast,
)
from mypy_extensions import KwArg, VarArg

# --
# HTMPL builds HTML pages out of node trees, escaping text nodes and
# attribute values, so that pages can be assembled without a template engine.
#
# >   H.ul(H.li(H.a("docs/", href="/docs/")), _="listing")

HTML_VOID: set[LiteralString] = set(
    "area base br col embed hr img input link meta source track wbr".split()
)

HTML_ESCAPED = str.maketrans(
    {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#x27;"}
)


def escape(text: str) -> str:
    return text.translate(HTML_ESCAPED)


TNodeContent = Union["Node", str, bool, float, int, None]
TAttributeContent = str | bool | float | int | None


class Node:
    """An element, or a leaf when `name` is `#text` (escaped on output) or
    `#raw` (output as-is)."""

    __slots__ = ["name", "attributes", "children", "value"]

    def __init__(
        self,
        name: str,
        children: Iterable["Node"] = (),
        attributes: dict[str, TAttributeContent] | None = None,
        value: str = "",
    ):
        self.name = name
        self.children: list[Node] = list(children)
        self.attributes: dict[str, TAttributeContent] = attributes or {}
        self.value: str = value

    def iterAttributes(self) -> Iterator[str]:
        for k, v in self.attributes.items():
            # `False` and `None` remove the attribute, `True` is a flag
            if v is True:
                yield f" {k}"
            elif v is not None and v is not False:
                yield f' {k}="{escape(str(v))}"'

    def iterHTML(self) -> Iterator[str]:
        match self.name:
            case "#text":
                yield escape(self.value)
            case "#raw":
                yield self.value
            case name:
                yield f"<{name}"
                yield from self.iterAttributes()
                yield ">"
                if name not in HTML_VOID:
                    for child in self.children:
                        yield from child.iterHTML()
                    yield f"</{name}>"

    def __str__(self) -> str:
        return "".join(self.iterHTML())


def text(value: str) -> Node:
    return Node("#text", value=value)


def raw(html: str) -> Node:
    """Wraps markup that is already safe, like the output of a highlighter."""
    return Node("#raw", value=html)


def asNodes(content: Iterable[TNodeContent]) -> Iterator[Node]:
    for item in content:
        if isinstance(item, Node):
            yield item
        elif isinstance(item, (list, tuple)):
            yield from asNodes(item)
        elif item is not None:
            yield text(str(item))


NodeFactory = Callable[
    [
        VarArg(TNodeContent | list[TNodeContent] | tuple[TNodeContent, ...]),
        KwArg(TAttributeContent),
    ],
    Node,
]


def nodeFactory(name: str) -> NodeFactory:
    def factory(*children: TNodeContent, **attributes: TAttributeContent) -> Node:
        # `_` stands for `class`, which is a reserved keyword
        return Node(
            name,
            asNodes(children),
            {("class" if k == "_" else k): v for k, v in attributes.items()},
        )

    factory.__name__ = name
    return cast(NodeFactory, factory)


HTML_TAGS: list[LiteralString] = """\
a body div h1 head html li meta nav p pre small style title ul\
""".split()


class Markup:
    """Exposes node factories as attributes, as in `H.div(...)`"""

    __slots__ = ["_factories"]

    def __init__(self, tags: Iterable[str]):
        self._factories: dict[str, NodeFactory] = {_: nodeFactory(_) for _ in tags}

    def __getattr__(self, name: str) -> NodeFactory:
        try:
            return self._factories[name]
        except KeyError:
            raise AttributeError(
                f"No tag {name}, pick one of {', '.join(sorted(self._factories))}"
            ) from None


H: Markup = Markup(HTML_TAGS)


def html(*nodes: Node, doctype: str | None = None) -> Iterator[str]:
    if doctype:
        yield f"<!DOCTYPE {doctype}>\n"
    for _ in nodes:
        yield from _.iterHTML()


# EOF
