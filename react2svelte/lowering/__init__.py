"""Lowering from the React component model to the Svelte IR."""

from .attributes import css_property, dom_attribute_name, event_name
from .engine import LoweringEngine
from .expressions import ExpressionRewriter, reindent, splice
from .placeholders import PlaceholderFactory
from .script import ScriptLowerer
from .template import TemplateLowerer

__all__ = [
    "LoweringEngine",
    "ExpressionRewriter",
    "PlaceholderFactory",
    "ScriptLowerer",
    "TemplateLowerer",
    "css_property",
    "dom_attribute_name",
    "event_name",
    "reindent",
    "splice",
]
