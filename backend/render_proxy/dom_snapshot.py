"""
Capture a rendered page in one page.evaluate() round trip.

The extractor is synchronous and reads a lot of per-element state (rect,
computed style, attributes, text). Doing that through ElementHandles would
mean thousands of async round trips against a page that could change
between them, so the raw state is pulled in a single evaluate and exposed
through the LiveElement protocol by SnapshotElement.
"""

from typing import Optional, Sequence

from render_proxy.extractor import ATTRIBUTE_NAMES
from render_proxy.layout_models import Rect, Viewport
from render_proxy.style_normalizer import COMPUTED_PROPERTIES

CAPTURE_SCRIPT = """({ maxDepth, textMax, styleProps, attrNames }) => {
    function capture(el, depth) {
        const rect = el.getBoundingClientRect();
        const computed = window.getComputedStyle(el);

        const style = {};
        for (const prop of styleProps) style[prop] = computed[prop];

        const attrs = {};
        for (const name of attrNames) {
            const value = el.getAttribute(name);
            if (value !== null) attrs[name] = value;
        }

        const directText = [];
        for (const node of el.childNodes) {
            if (node.nodeType === Node.TEXT_NODE) directText.push(node.textContent);
        }

        return {
            tag: el.tagName.toLowerCase(),
            rect: { x: rect.left, y: rect.top, width: rect.width, height: rect.height },
            style,
            attrs,
            directText,
            // Rendered text is only read when the element has no direct text
            innerText: directText.join('').trim() ? '' : (el.innerText || '').trim().slice(0, textMax),
            // The walker never goes past maxDepth, so neither does the capture
            children: depth < maxDepth
                ? Array.from(el.children).map(child => capture(child, depth + 1))
                : [],
        };
    }

    return {
        body: capture(document.body, 0),
        viewport: { width: window.innerWidth, height: window.innerHeight },
        totalElements: document.querySelectorAll('*').length,
    };
}"""


class SnapshotElement:
    """LiveElement over one captured element dict."""

    def __init__(self, raw: dict):
        self._raw = raw

    @property
    def tag(self) -> str:
        return self._raw["tag"]

    @property
    def bounding_rect(self) -> Rect:
        return Rect(**self._raw["rect"])

    @property
    def computed_style(self) -> dict:
        return self._raw["style"]

    def get_attribute(self, name: str) -> Optional[str]:
        return self._raw.get("attrs", {}).get(name)

    @property
    def direct_text_nodes(self) -> Sequence[str]:
        return self._raw.get("directText", [])

    @property
    def rendered_text(self) -> str:
        return self._raw.get("innerText", "")

    @property
    def element_children(self) -> list["SnapshotElement"]:
        return [SnapshotElement(child) for child in self._raw.get("children", [])]


class SnapshotDocument:
    """LiveDocument over the whole capture."""

    def __init__(self, raw: dict):
        self._raw = raw

    @property
    def body(self) -> SnapshotElement:
        return SnapshotElement(self._raw["body"])

    @property
    def viewport(self) -> Viewport:
        return Viewport(**self._raw["viewport"])

    @property
    def total_elements(self) -> Optional[int]:
        return self._raw.get("totalElements")


async def capture_document(page, max_depth: int, text_max: int) -> SnapshotDocument:
    """Snapshot the page's body subtree, viewport and element count."""
    raw = await page.evaluate(CAPTURE_SCRIPT, {
        "maxDepth": max_depth,
        "textMax": text_max,
        "styleProps": list(COMPUTED_PROPERTIES),
        "attrNames": list(ATTRIBUTE_NAMES.values()),
    })
    return SnapshotDocument(raw)
