"""
Conversion options for the react2svelte pipeline.

Options are validated once, up front, with Pydantic v2 so that every stage
can rely on well-formed values. Instances are frozen and safe to share
between concurrent invocations.

Example:
    from react2svelte import ConversionOptions

    options = ConversionOptions(typescript=True, indentWidth=4)
    options.indent_width  # 4
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConversionOptions(BaseModel):
    """
    Options recognised by :func:`react2svelte.convert`.

    Field names are snake_case; the camelCase aliases (``strictMode``,
    ``indentWidth``) are accepted as well.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
    )

    typescript: bool = Field(
        False,
        description="Parse TypeScript (TSX) and emit type annotations.",
    )
    strict_mode: bool = Field(
        False,
        alias="strictMode",
        description="Escalate warnings to errors and fail on any error.",
    )
    indent_width: int = Field(
        2,
        alias="indentWidth",
        ge=1,
        le=8,
        description="Spaces per indentation level in emitted output.",
    )
    source_name: str = Field(
        "<input>",
        alias="sourceName",
        description="Name used for source locations in diagnostics.",
    )
    component_name: Optional[str] = Field(
        None,
        alias="componentName",
        description="Override for the converted component's name.",
    )

    @field_validator("component_name")
    @classmethod
    def _validate_component_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if not value or not value[0].isupper() or not value.replace("_", "").isalnum():
            raise ValueError("component_name must be a PascalCase identifier")
        return value

    @property
    def indent(self) -> str:
        return " " * self.indent_width


DEFAULT_OPTIONS = ConversionOptions()


__all__ = ["ConversionOptions", "DEFAULT_OPTIONS"]
