"""
Output data model for an extracted layout.

Every model is frozen and serializes with camelCase keys, which is the shape
the design-tool plugin reads (``fontSize``, ``className``, ``totalElements``).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class Rect(_Frozen):
    """Raw floating-point geometry as reported by getBoundingClientRect()."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


class Bounds(_Frozen):
    x: int
    y: int
    width: int
    height: int


class BoxSides(_Frozen):
    top: float = 0
    right: float = 0
    bottom: float = 0
    left: float = 0


class ColorSides(_Frozen):
    top: str = ""
    right: str = ""
    bottom: str = ""
    left: str = ""


class Corners(_Frozen):
    top_left: float = 0
    top_right: float = 0
    bottom_right: float = 0
    bottom_left: float = 0


class StyleRecord(_Frozen):
    # Typography
    font_family: str = ""
    font_size: float = 14
    font_weight: str = ""
    font_style: str = ""
    line_height: str = ""
    text_align: str = ""
    text_decoration: str = ""
    text_transform: str = ""
    letter_spacing: str = ""
    color: str = ""

    # Background
    background_color: str = ""
    background_image: str = ""
    background_size: str = ""
    background_position: str = ""
    background_repeat: str = ""

    # Box model
    padding: BoxSides = BoxSides()
    margin: BoxSides = BoxSides()

    # Border
    border_width: BoxSides = BoxSides()
    border_color: ColorSides = ColorSides()
    border_style: str = ""
    border_radius: Corners = Corners()

    # Layout
    display: str = ""
    position: str = ""
    top: str = ""
    right: str = ""
    bottom: str = ""
    left: str = ""
    z_index: str = ""
    flex_direction: str = ""
    justify_content: str = ""
    align_items: str = ""
    flex_wrap: str = ""
    gap: str = ""

    # Effects
    box_shadow: str = ""
    opacity: float = 0
    transform: str = ""
    filter: str = ""

    # Overflow
    overflow: str = ""
    overflow_x: str = ""
    overflow_y: str = ""


class LayoutNode(_Frozen):
    """One visible element that survived pruning."""
    tag: str
    text: str = ""
    bounds: Bounds
    style: StyleRecord = StyleRecord()
    attributes: dict[str, str] = {}
    children: tuple["LayoutNode", ...] = ()


class Viewport(_Frozen):
    width: int
    height: int


class LayoutResult(_Frozen):
    elements: Optional[LayoutNode] = None
    viewport: Viewport
    total_elements: Optional[int] = None

    def to_payload(self) -> dict:
        """JSON-ready dict; ``totalElements`` is omitted when it was not measured."""
        payload = self.model_dump(by_alias=True)
        if payload.get("totalElements") is None:
            payload.pop("totalElements", None)
        return payload
