"""Minimal retained-mode scene graph.

Stands in for the SVG DOM: elements carry a tag, attributes, a style map,
optional text and children, and can be bound to the data record they
draw. ``to_svg()`` serialises the tree for notebook display or files.
"""

from __future__ import annotations

import html as html_module
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def _css_name(name: str) -> str:
    """fontSize -> font-size; already-dashed names pass through."""
    return _CAMEL.sub("-", name).lower()


def _format_value(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.2f}".rstrip("0").rstrip(".")
    return str(value)


@dataclass(eq=False)
class SceneElement:
    """One node of the scene graph.

    ``datum`` is the record this element was created from. Elements compare
    by identity, like DOM nodes.
    """

    tag: str
    attributes: dict[str, Any] = field(default_factory=dict)
    style: dict[str, Any] = field(default_factory=dict)
    text: str | None = None
    children: list[SceneElement] = field(default_factory=list)
    datum: Any = None

    def append(self, tag: str, attributes: dict[str, Any] | None = None, **kwargs: Any) -> SceneElement:
        """Create a child element and return it."""
        child = SceneElement(tag, attributes=dict(attributes or {}), **kwargs)
        self.children.append(child)
        return child

    def get_attribute(self, name: str) -> Any:
        return self.attributes.get(name)

    def set_attribute(self, name: str, value: Any) -> None:
        self.attributes[name] = value

    @property
    def class_name(self) -> str | None:
        return self.attributes.get("class")

    def clear(self) -> None:
        self.children.clear()

    def iter(self) -> Iterator[SceneElement]:
        """Depth-first walk over this element and its descendants."""
        yield self
        for child in self.children:
            yield from child.iter()

    def find_all(self, class_name: str) -> list[SceneElement]:
        return [el for el in self.iter() if el.class_name == class_name]

    def to_svg(self) -> str:
        """Serialise this element and its subtree as markup."""
        parts = [self.tag]
        for name, value in self.attributes.items():
            if value is None:
                continue
            parts.append(f'{name}="{html_module.escape(_format_value(value), quote=True)}"')
        if self.style:
            css = "; ".join(f"{_css_name(k)}: {_format_value(v)}" for k, v in self.style.items())
            parts.append(f'style="{html_module.escape(css, quote=True)}"')
        if self.tag == "svg" and "xmlns" not in self.attributes:
            parts.append('xmlns="http://www.w3.org/2000/svg"')

        opening = " ".join(parts)
        if not self.children and self.text is None:
            return f"<{opening}/>"
        inner = html_module.escape(self.text) if self.text is not None else ""
        inner += "".join(child.to_svg() for child in self.children)
        return f"<{opening}>{inner}</{self.tag}>"
