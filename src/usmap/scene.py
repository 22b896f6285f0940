"""Minimal retained scene graph with SVG/HTML serialization."""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape
from typing import Any, Callable, Iterator, Mapping

Handler = Callable[[Any], None]


@dataclass(eq=False, slots=True)
class SceneNode:
    """One element: svg shape, group, text, or an html host element.

    ``attrs`` are presentation attributes; ``style`` holds inline styles that
    win over attributes, mirroring the browser cascade. Setting either to
    ``None`` removes the entry.
    """

    tag: str
    attrs: dict[str, Any] = field(default_factory=dict)
    style: dict[str, Any] = field(default_factory=dict)
    classes: tuple[str, ...] = ()
    text: str | None = None
    html: str | None = None
    entity: str | None = None
    key: str | None = None
    children: list[SceneNode] = field(default_factory=list)
    parent: SceneNode | None = field(default=None, repr=False)
    handlers: dict[str, Handler] = field(default_factory=dict, repr=False)

    def append(
        self,
        tag: str,
        attrs: Mapping[str, Any] | None = None,
        *,
        classes: tuple[str, ...] = (),
        entity: str | None = None,
        key: str | None = None,
        text: str | None = None,
    ) -> SceneNode:
        node = SceneNode(
            tag=tag,
            attrs={k: v for k, v in (attrs or {}).items() if v is not None},
            classes=classes,
            entity=entity,
            key=key,
            text=text,
        )
        return self.adopt(node)

    def adopt(self, node: SceneNode, index: int | None = None) -> SceneNode:
        if node.parent is not None:
            node.parent.children.remove(node)
        node.parent = self
        if index is None:
            self.children.append(node)
        else:
            self.children.insert(index, node)
        return node

    def clear(self) -> None:
        for child in self.children:
            child.parent = None
        self.children = []

    def index(self) -> int:
        if self.parent is None:
            return 0
        return self.parent.children.index(self)

    def raise_(self) -> None:
        """Move to the end of the parent's children so it paints last."""
        if self.parent is not None:
            self.parent.adopt(self)

    def set_attr(self, name: str, value: Any) -> SceneNode:
        if value is None:
            self.attrs.pop(name, None)
        else:
            self.attrs[name] = value
        return self

    def set_style(self, name: str, value: Any) -> SceneNode:
        if value is None:
            self.style.pop(name, None)
        else:
            self.style[name] = value
        return self

    def presentation(self, name: str) -> Any:
        if name in self.style:
            return self.style[name]
        return self.attrs.get(name)

    def on(self, event: str, handler: Handler) -> SceneNode:
        self.handlers[event] = handler
        return self

    def fire(self, event: str, payload: Any) -> bool:
        handler = self.handlers.get(event)
        if handler is None:
            return False
        handler(payload)
        return True

    def iter(self) -> Iterator[SceneNode]:
        yield self
        for child in self.children:
            yield from child.iter()

    def find_all(self, *, cls: str | None = None, tag: str | None = None) -> list[SceneNode]:
        return [
            node
            for node in self.iter()
            if (cls is None or cls in node.classes) and (tag is None or node.tag == tag)
        ]

    def find(self, key: str) -> SceneNode | None:
        for node in self.iter():
            if node.key == key:
                return node
        return None

    def to_markup(self, indent: int = 0) -> str:
        pad = "  " * indent
        parts = [self.tag]
        if self.key is not None:
            parts.append(f'id="{escape(self.key)}"')
        if self.classes:
            parts.append(f'class="{escape(" ".join(self.classes))}"')
        for name, value in self.attrs.items():
            parts.append(f'{name}="{escape(_fmt_value(value))}"')
        if self.style:
            css = "; ".join(f"{name}: {_fmt_value(value)}" for name, value in self.style.items())
            parts.append(f'style="{escape(css)}"')
        opening = "<" + " ".join(parts) + ">"
        if self.html is not None:
            return f"{pad}{opening}{self.html}</{self.tag}>"
        if not self.children:
            body = escape(self.text) if self.text is not None else ""
            return f"{pad}{opening}{body}</{self.tag}>"
        inner = "\n".join(child.to_markup(indent + 1) for child in self.children)
        return f"{pad}{opening}\n{inner}\n{pad}</{self.tag}>"


class Document:
    """Host page: a body holding mount points and the shared tooltip."""

    def __init__(self) -> None:
        self.body = SceneNode("body")

    def select_or_append(self, parent: SceneNode, tag: str, key: str) -> SceneNode:
        for child in parent.children:
            if child.key == key:
                return child
        return parent.append(tag, key=key)

    def create_mount(self) -> SceneNode:
        return self.body.append("div")

    def to_html(self, *, title: str = "usmap") -> str:
        return "\n".join(
            [
                "<!doctype html>",
                "<html lang='en'>",
                "<head>",
                "  <meta charset='utf-8'>",
                f"  <title>{escape(title)}</title>",
                "</head>",
                self.body.to_markup(),
                "</html>",
                "",
            ]
        )


def _fmt_value(value: Any) -> str:
    if isinstance(value, float):
        text = f"{value:.2f}".rstrip("0").rstrip(".")
        return "0" if text == "-0" else text
    return str(value)
