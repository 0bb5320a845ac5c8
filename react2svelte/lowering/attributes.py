"""DOM attribute, event and style transforms for lowered elements."""

from __future__ import annotations

import re
from typing import Optional

EVENT_RENAMES = {
    "onDoubleClick": "ondblclick",
}

DOM_RENAMES = {
    "className": "class",
    "htmlFor": "for",
    "defaultValue": "value",
    "defaultChecked": "checked",
    "tabIndex": "tabindex",
    "readOnly": "readonly",
    "maxLength": "maxlength",
    "minLength": "minlength",
    "autoFocus": "autofocus",
    "autoComplete": "autocomplete",
    "autoPlay": "autoplay",
    "colSpan": "colspan",
    "rowSpan": "rowspan",
    "contentEditable": "contenteditable",
    "spellCheck": "spellcheck",
    "crossOrigin": "crossorigin",
    "srcSet": "srcset",
    "encType": "enctype",
    "acceptCharset": "accept-charset",
    "httpEquiv": "http-equiv",
    "noValidate": "novalidate",
    "formAction": "formaction",
    "inputMode": "inputmode",
    "enterKeyHint": "enterkeyhint",
    "referrerPolicy": "referrerpolicy",
    "playsInline": "playsinline",
    "allowFullScreen": "allowfullscreen",
    "dateTime": "datetime",
    "accessKey": "accesskey",
    "charSet": "charset",
    "strokeWidth": "stroke-width",
    "strokeLinecap": "stroke-linecap",
    "strokeLinejoin": "stroke-linejoin",
    "strokeDasharray": "stroke-dasharray",
    "strokeDashoffset": "stroke-dashoffset",
    "strokeOpacity": "stroke-opacity",
    "fillOpacity": "fill-opacity",
    "fillRule": "fill-rule",
    "clipRule": "clip-rule",
    "clipPath": "clip-path",
    "stopColor": "stop-color",
    "stopOpacity": "stop-opacity",
    "textAnchor": "text-anchor",
    "dominantBaseline": "dominant-baseline",
    "xlinkHref": "xlink:href",
}

# React appends "px" to numbers for every other property.
UNITLESS_PROPERTIES = frozenset(
    """
    animationIterationCount aspectRatio borderImageOutset borderImageSlice
    borderImageWidth boxFlex boxFlexGroup boxOrdinalGroup columnCount columns
    flex flexGrow flexPositive flexShrink flexNegative flexOrder gridArea
    gridRow gridRowEnd gridRowSpan gridRowStart gridColumn gridColumnEnd
    gridColumnSpan gridColumnStart fontWeight lineClamp lineHeight opacity
    order orphans scale tabSize widows zIndex zoom fillOpacity floodOpacity
    stopOpacity strokeDasharray strokeDashoffset strokeMiterlimit
    strokeOpacity strokeWidth
    """.split()
)

TEXT_INPUT_TYPES = frozenset(
    {"text", "email", "password", "search", "tel", "url", "number", "date",
     "datetime-local", "month", "time", "week", "color", "range"}
)

VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link",
     "meta", "param", "source", "track", "wbr"}
)

_NUMBER_RE = re.compile(r"^-?(\d+\.?\d*|\.\d+)$")
_VENDOR_RE = re.compile(r"^(Webkit|Moz|ms|O)(?=[A-Z])")


def is_text_input(tag: str, input_type: Optional[str]) -> bool:
    """True for elements whose React ``onChange`` fires on every keystroke."""
    if tag == "textarea":
        return True
    if tag != "input":
        return False
    return input_type is None or input_type in TEXT_INPUT_TYPES


def event_name(name: str, tag: str, input_type: Optional[str] = None) -> str:
    """``onClick`` -> ``onclick``; text-field ``onChange`` -> ``oninput``."""
    if name in EVENT_RENAMES:
        return EVENT_RENAMES[name]
    if name == "onChange" and is_text_input(tag, input_type):
        return "oninput"
    return name.lower()


def dom_attribute_name(name: str) -> str:
    return DOM_RENAMES.get(name, name)


def css_property(name: str) -> str:
    """``fontSize`` -> ``font-size``; ``WebkitTransform`` -> ``-webkit-transform``."""
    if name.startswith("--"):
        return name
    vendor = _VENDOR_RE.match(name)
    prefix = ""
    if vendor:
        prefix = "-" + vendor.group(1).lower()
        name = name[vendor.end():]
        name = name[0].lower() + name[1:]
    kebab = re.sub(r"([A-Z])", lambda m: "-" + m.group(1).lower(), name)
    return f"{prefix}-{kebab}" if prefix else kebab


def css_number(property_name: str, literal: str) -> str:
    """Format a numeric style literal the way React does."""
    if property_name in UNITLESS_PROPERTIES or property_name.startswith("--"):
        return literal
    if _NUMBER_RE.match(literal) and float(literal) == 0:
        return literal
    return f"{literal}px"


def escape_attribute(value: str) -> str:
    """Quote a JSX attribute string for a double-quoted Svelte attribute.

    Entities are kept as written since both JSX and HTML decode them.
    """
    return value.replace('"', "&quot;").replace("{", "&#123;").replace("}", "&#125;")


def escape_text(value: str) -> str:
    """Escape a string literal rendered as template text."""
    return (
        value.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace("{", "&#123;")
        .replace("}", "&#125;")
    )


__all__ = [
    "DOM_RENAMES",
    "UNITLESS_PROPERTIES",
    "VOID_ELEMENTS",
    "css_number",
    "css_property",
    "dom_attribute_name",
    "escape_attribute",
    "escape_text",
    "event_name",
    "is_text_input",
]
