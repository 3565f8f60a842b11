"""
Layout extraction: rendered document -> pruned tree of visible elements.

The walk is a post-order fold over the live element tree. Each element is
filtered (blocklist, depth, visibility), turned into a candidate node with
sanitized text, rounded bounds and normalized style, then kept only if it
has text, kept children, or is a signal tag (img/button/input/a). Nothing is
caught here: if reading an element fails, the error goes straight back to
the caller and no partial tree is produced.

The walker only needs the LiveElement protocol below, so it runs the same
against a Playwright snapshot (see dom_snapshot.py) or an in-memory fake.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence, Mapping

from render_proxy.layout_models import Bounds, LayoutNode, LayoutResult, Rect, Viewport
from render_proxy.style_normalizer import normalize_style

logger = logging.getLogger(__name__)

BLOCKED_TAGS = frozenset({"script", "noscript", "meta", "link", "style"})
SIGNAL_TAGS = frozenset({"img", "button", "input", "a"})
SCRIPT_MARKERS = ("function", "document.", "window.")

# output key -> DOM attribute
ATTRIBUTE_NAMES = {
    "id": "id",
    "className": "class",
    "src": "src",
    "alt": "alt",
    "href": "href",
    "type": "type",
    "placeholder": "placeholder",
}


class LiveElement(Protocol):
    """What the walker needs from one rendered element."""

    @property
    def tag(self) -> str: ...

    @property
    def bounding_rect(self) -> Rect: ...

    @property
    def computed_style(self) -> Mapping[str, str]: ...

    def get_attribute(self, name: str) -> Optional[str]: ...

    @property
    def direct_text_nodes(self) -> Sequence[str]: ...

    @property
    def rendered_text(self) -> str: ...

    @property
    def element_children(self) -> Sequence["LiveElement"]: ...


class LiveDocument(Protocol):
    @property
    def body(self) -> LiveElement: ...

    @property
    def viewport(self) -> Viewport: ...

    @property
    def total_elements(self) -> Optional[int]: ...


@dataclass(frozen=True)
class ExtractionConfig:
    max_depth: int = 8
    min_visible_size: int = 2
    text_max: int = 2000
    blocked_tags: frozenset = field(default=BLOCKED_TAGS)
    signal_tags: frozenset = field(default=SIGNAL_TAGS)

    @classmethod
    def from_settings(cls, settings) -> "ExtractionConfig":
        return cls(
            max_depth=settings.max_depth,
            min_visible_size=settings.min_visible_size,
            text_max=settings.text_max,
        )


def round_half_up(value: float) -> int:
    """Math.round() semantics; Python's round() would send 0.5 to 0."""
    return math.floor(value + 0.5)


def to_bounds(rect: Rect) -> Bounds:
    return Bounds(
        x=round_half_up(rect.x),
        y=round_half_up(rect.y),
        width=round_half_up(rect.width),
        height=round_half_up(rect.height),
    )


# ============================================================
# Visibility
# ============================================================

def is_visible(element: LiveElement, config: ExtractionConfig) -> bool:
    bounds = to_bounds(element.bounding_rect)
    if bounds.width < config.min_visible_size or bounds.height < config.min_visible_size:
        return False
    style = element.computed_style
    return style.get("display") != "none" and style.get("visibility") != "hidden"


# ============================================================
# Text
# ============================================================

def extract_text(element: LiveElement, config: ExtractionConfig) -> str:
    """
    Text the element owns: its direct text nodes, or failing that everything
    a user would see inside it. Truncated to ``text_max``; anything that looks
    like inline script is dropped. This is a heuristic, not a security boundary.
    """
    text = "".join(element.direct_text_nodes).strip()
    if not text:
        text = (element.rendered_text or "").strip()
    text = text[:config.text_max]
    if any(marker in text for marker in SCRIPT_MARKERS):
        return ""
    return text


def extract_attributes(element: LiveElement) -> dict[str, str]:
    attributes = {}
    for key, name in ATTRIBUTE_NAMES.items():
        value = element.get_attribute(name)
        if value is not None:
            attributes[key] = value
    return attributes


# ============================================================
# Walk + prune
# ============================================================

def prune(candidate: LayoutNode, config: ExtractionConfig) -> Optional[LayoutNode]:
    if candidate.text or candidate.children or candidate.tag in config.signal_tags:
        return candidate
    return None


def walk(element: LiveElement, depth: int, config: ExtractionConfig) -> Optional[LayoutNode]:
    if depth > config.max_depth:
        return None

    tag = element.tag.lower()
    if tag in config.blocked_tags:
        return None

    if not is_visible(element, config):
        return None

    children = []
    for child in element.element_children:
        node = walk(child, depth + 1, config)
        if node is not None:
            children.append(node)

    candidate = LayoutNode(
        tag=tag,
        text=extract_text(element, config),
        bounds=to_bounds(element.bounding_rect),
        style=normalize_style(element.computed_style),
        attributes=extract_attributes(element),
        children=tuple(children),
    )
    return prune(candidate, config)


def assemble(root: Optional[LayoutNode], viewport: Viewport,
             total_elements: Optional[int] = None) -> LayoutResult:
    return LayoutResult(elements=root, viewport=viewport, total_elements=total_elements)


def count_nodes(node: Optional[LayoutNode]) -> int:
    if node is None:
        return 0
    return 1 + sum(count_nodes(child) for child in node.children)


def extract_layout(document: LiveDocument, config: Optional[ExtractionConfig] = None) -> LayoutResult:
    """Walk ``document.body`` from depth 0 and wrap the result with the viewport."""
    config = config or ExtractionConfig()
    root = walk(document.body, 0, config)
    result = assemble(root, document.viewport, document.total_elements)
    logger.debug(
        "[extract] kept %d of %s elements (viewport %dx%d)",
        count_nodes(root), document.total_elements,
        result.viewport.width, result.viewport.height,
    )
    return result
