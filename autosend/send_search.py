from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from autosend.config import IMAGE_BUTTON_CLASS, RIGHT_EDGE_RATIO, SEND_LABEL, SEND_RESOURCE_ID
from autosend.ui_tree import UiNode


@dataclass(frozen=True)
class SearchStrategy:
    """A named predicate over (node, screen_width); the first match wins."""
    name: str
    predicate: Callable[[UiNode, int], bool]

    def find(self, root, screen_width) -> Optional[UiNode]:
        for node in root.iter_depth_first():
            if self.predicate(node, screen_width):
                return node
        return None


def by_resource_id(resource_id=SEND_RESOURCE_ID):
    return SearchStrategy(
        "resource_id",
        lambda node, _width: node.resource_id == resource_id,
    )


def by_label(label=SEND_LABEL):
    return SearchStrategy(
        "label",
        lambda node, _width: node.clickable and label in (node.text, node.content_desc),
    )


def by_screen_position(class_name=IMAGE_BUTTON_CLASS, right_edge_ratio=RIGHT_EDGE_RATIO):
    # A send button usually sits at the right edge of the compose bar
    def predicate(node, screen_width):
        return (
            bool(screen_width)
            and node.class_name == class_name
            and node.clickable
            and node.bounds.right > screen_width * right_edge_ratio
        )
    return SearchStrategy("screen_position", predicate)


DEFAULT_STRATEGIES: List[SearchStrategy] = [
    by_resource_id(),
    by_label(),
    by_screen_position(),
]


def find_send_control(root, screen_width, strategies=None) -> Optional[Tuple[str, UiNode]]:
    """Return (strategy name, node) for the first heuristic that matches, else None."""
    if root is None:
        return None
    for strategy in strategies or DEFAULT_STRATEGIES:
        node = strategy.find(root, screen_width)
        if node is not None:
            return strategy.name, node
    return None
