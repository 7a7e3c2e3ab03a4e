import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import List, Optional

_BOUNDS_RE = re.compile(r"\[(-?\d+),(-?\d+)\]")


@dataclass(frozen=True)
class Bounds:
    left: int = 0
    top: int = 0
    right: int = 0
    bottom: int = 0

    @property
    def center(self):
        return ((self.left + self.right) // 2, (self.top + self.bottom) // 2)


def parse_bounds(bounds_str):
    """Turn a bounds string like [100,200][400,300] into Bounds."""
    matches = _BOUNDS_RE.findall(bounds_str or "")
    if len(matches) != 2:
        return None
    (x1, y1), (x2, y2) = [(int(x), int(y)) for x, y in matches]
    return Bounds(x1, y1, x2, y2)


@dataclass
class UiNode:
    """One element of a UI hierarchy snapshot."""
    resource_id: str = ""
    text: str = ""
    content_desc: str = ""
    class_name: str = ""
    package: str = ""
    clickable: bool = False
    bounds: Bounds = field(default_factory=Bounds)
    children: List["UiNode"] = field(default_factory=list)

    @property
    def label(self):
        # Accessibility text falls back to the content description
        return self.text or self.content_desc

    def iter_depth_first(self):
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


def _to_node(element):
    attrib = element.attrib
    node = UiNode(
        resource_id=attrib.get("resource-id", ""),
        text=attrib.get("text", "").strip(),
        content_desc=attrib.get("content-desc", "").strip(),
        class_name=attrib.get("class", ""),
        package=attrib.get("package", ""),
        clickable=attrib.get("clickable", "false") == "true",
        bounds=parse_bounds(attrib.get("bounds", "")) or Bounds(),
    )
    node.children = [_to_node(child) for child in element if child.tag == "node"]
    return node


def parse_hierarchy(xml_str):
    """Parse a dump_hierarchy document into a UiNode tree.

    The <hierarchy> element becomes a synthetic, non-clickable root whose
    children are the top-level window nodes.
    """
    root = ET.fromstring(xml_str)
    if root.tag == "node":
        return _to_node(root)
    return UiNode(
        class_name="hierarchy",
        children=[_to_node(child) for child in root if child.tag == "node"],
    )


class UiSnapshot:
    """A transient view of the foreground UI tree; release it after each search."""

    def __init__(self, root: Optional[UiNode]):
        self._root = root
        self.released = False

    @property
    def root(self):
        return None if self.released else self._root

    def release(self):
        self._root = None
        self.released = True
