"""
Computed style -> StyleRecord.

Values come straight from getComputedStyle() and are trusted as-is. Numbers
are pulled from the leading numeric part of a dimensioned string; colors,
images, shadows and the like pass through as opaque strings. The literal
"none" is mapped to "" here so nothing downstream has to special-case it.
"""

import re
from typing import Mapping

from render_proxy.layout_models import BoxSides, ColorSides, Corners, StyleRecord

FONT_SIZE_FALLBACK = 14

# Same prefix parseFloat() accepts: optional sign, digits, fraction, exponent
_LEADING_NUMBER = re.compile(r"^\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")

SIDES = ("top", "right", "bottom", "left")
CORNERS = ("top_left", "top_right", "bottom_right", "bottom_left")

# StyleRecord field -> computed style property (camelCase, as captured)
STRING_PROPERTIES = {
    "font_family": "fontFamily",
    "font_weight": "fontWeight",
    "font_style": "fontStyle",
    "line_height": "lineHeight",
    "text_align": "textAlign",
    "text_decoration": "textDecoration",
    "text_transform": "textTransform",
    "letter_spacing": "letterSpacing",
    "color": "color",
    "background_color": "backgroundColor",
    "background_image": "backgroundImage",
    "background_size": "backgroundSize",
    "background_position": "backgroundPosition",
    "background_repeat": "backgroundRepeat",
    "border_style": "borderStyle",
    "display": "display",
    "position": "position",
    "top": "top",
    "right": "right",
    "bottom": "bottom",
    "left": "left",
    "z_index": "zIndex",
    "flex_direction": "flexDirection",
    "justify_content": "justifyContent",
    "align_items": "alignItems",
    "flex_wrap": "flexWrap",
    "gap": "gap",
    "box_shadow": "boxShadow",
    "transform": "transform",
    "filter": "filter",
    "overflow": "overflow",
    "overflow_x": "overflowX",
    "overflow_y": "overflowY",
}


def parse_number(value, default: float = 0) -> float:
    """Leading numeric portion of ``value`` ("12px" -> 12.0), else ``default``."""
    if value is None:
        return default
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    match = _LEADING_NUMBER.match(str(value))
    if not match:
        return default
    return float(match.group())


def clean_string(value) -> str:
    """Opaque string pass-through with the "none" sentinel collapsed to ""."""
    if value is None:
        return ""
    text = str(value).strip()
    return "" if text == "none" else text


def _camel(*parts: str) -> str:
    head, *rest = "_".join(parts).split("_")
    return head + "".join(p.capitalize() for p in rest)


def _box(style: Mapping[str, str], prefix: str, suffix: str = "") -> BoxSides:
    # paddingTop, marginLeft, borderTopWidth ...
    return BoxSides(**{
        side: parse_number(style.get(_camel(prefix, side) + suffix))
        for side in SIDES
    })


def normalize_style(style: Mapping[str, str]) -> StyleRecord:
    """Convert one element's computed style into a StyleRecord."""
    strings = {field: clean_string(style.get(prop)) for field, prop in STRING_PROPERTIES.items()}

    border_color = ColorSides(**{
        side: clean_string(style.get(_camel("border", side) + "Color"))
        for side in SIDES
    })
    border_radius = Corners(**{
        corner: parse_number(style.get(_camel("border", corner) + "Radius"))
        for corner in CORNERS
    })

    return StyleRecord(
        font_size=parse_number(style.get("fontSize"), default=FONT_SIZE_FALLBACK),
        padding=_box(style, "padding"),
        margin=_box(style, "margin"),
        border_width=_box(style, "border", "Width"),
        border_color=border_color,
        border_radius=border_radius,
        opacity=parse_number(style.get("opacity")),
        **strings,
    )


# Everything normalize_style() reads, plus visibility for the filter
COMPUTED_PROPERTIES = tuple(sorted(
    set(STRING_PROPERTIES.values())
    | {"fontSize", "opacity", "visibility"}
    | {_camel(prefix, side) for prefix in ("padding", "margin") for side in SIDES}
    | {_camel("border", side) + suffix for side in SIDES for suffix in ("Width", "Color")}
    | {_camel("border", corner) + "Radius" for corner in CORNERS}
))
