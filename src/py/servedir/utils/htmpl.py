from typing import (
    Callable,
    Iterable,
    Iterator,
    NamedTuple,
    TypeAlias,
    Union,
    cast,
)
from urllib.parse import quote
from mypy_extensions import KwArg, VarArg

# --
# HTMPL builds HTML documents out of nodes, escaping text and attribute
# values as they are serialized: `H.ul(H.li("item", _="entry"))`.

# Elements without a closing tag
HTML_EMPTY: frozenset[str] = frozenset(("br", "hr", "img", "input", "link", "meta"))

HTML_ESCAPED = str.maketrans(
    {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#x27;"}
)


def escape(text: str) -> str:
    return text.translate(HTML_ESCAPED)


def href(*segments: str) -> str:
    """Returns an absolute URL path made of the given (unquoted) segments."""
    return "/" + "/".join(quote(_, safe="") for _ in segments if _)


class Raw(str):
    """Text that is already HTML, and is output as-is."""


TAttribute: TypeAlias = str | int | float | bool | None
TContent = Union["Node", str, int, float]


class Node(NamedTuple):
    name: str
    attributes: dict[str, TAttribute]
    children: tuple[TContent, ...] = ()

    def iterHTML(self) -> Iterator[str]:
        yield f"<{self.name}"
        for k, v in self.attributes.items():
            # `True` is a boolean attribute, `False` and `None` are omitted
            if v is True:
                yield f" {k}"
            elif v is not False and v is not None:
                yield f' {k}="{escape(str(v))}"'
        yield ">"
        if self.name in HTML_EMPTY:
            return
        for child in self.children:
            if isinstance(child, Node):
                yield from child.iterHTML()
            elif isinstance(child, Raw):
                yield child
            else:
                yield escape(str(child))
        yield f"</{self.name}>"

    def __str__(self) -> str:
        return "".join(self.iterHTML())


NodeFactory = Callable[[VarArg(TContent), KwArg(TAttribute)], Node]


def nodeFactory(name: str) -> NodeFactory:
    def factory(*children: TContent, **attributes: TAttribute) -> Node:
        # `_` stands for `class`, which is a reserved word
        return Node(
            name,
            {("class" if k == "_" else k): v for k, v in attributes.items()},
            children,
        )

    factory.__name__ = name
    return cast(NodeFactory, factory)


class Markup:
    """Exposes a node factory for each of the given tags."""

    def __init__(self, tags: Iterable[str]):
        self.factories: dict[str, NodeFactory] = {_: nodeFactory(_) for _ in tags}

    def __getattr__(self, name: str) -> NodeFactory:
        try:
            return self.factories[name]
        except KeyError:
            raise AttributeError(f"Unsupported tag: {name}") from None


H: Markup = Markup("a body h1 head html li meta style title ul".split())


def html(node: Node, doctype: str = "html") -> str:
    """Serializes the node as a complete document."""
    return f"<!DOCTYPE {doctype}>\n{node}"


# EOF
