"""
Selectors: the persisted form of anchors.

This module provides the W3C Web Annotation selector variants used to store
anchors. Field names on the wire follow the Web Annotation data model
(camelCase); Python attributes are snake_case.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Annotated, Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from anchoring.config import CONTEXT_LENGTH, validate_offsets


class _Selector(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Dump with wire field names, leaving out unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class FragmentSelector(_Selector):
    """Selects an element by its id attribute."""

    type: Literal["FragmentSelector"] = "FragmentSelector"
    value: str = Field(min_length=1)


class RangeSelector(_Selector):
    """
    Selects a range by tree paths and character offsets.

    Attributes:
        start_container: Path of the element holding the start, relative to root
        start_offset: Characters of the start container's text before the start
        end_container: Path of the element holding the end, relative to root
        end_offset: Characters of the end container's text before the end
    """

    type: Literal["RangeSelector"] = "RangeSelector"
    start_container: str = Field(alias="startContainer")
    start_offset: int = Field(alias="startOffset", ge=0)
    end_container: str = Field(alias="endContainer")
    end_offset: int = Field(alias="endOffset", ge=0)


class TextPositionSelector(_Selector):
    """Selects text by start and end offsets in the corpus."""

    type: Literal["TextPositionSelector"] = "TextPositionSelector"
    start: int
    end: int

    @model_validator(mode="after")
    def _check_offsets(self) -> TextPositionSelector:
        validate_offsets(self.start, self.end)
        return self


class TextQuoteSelector(_Selector):
    """
    W3C Web Annotation TextQuoteSelector.

    Selects text by an exact quote with optional prefix/suffix context.
    The context helps disambiguate when the quote appears several times.

    Example:
        selector = TextQuoteSelector(exact="brown fox", prefix="The quick ")

    Attributes:
        type: Selector type identifier (always "TextQuoteSelector")
        exact: The exact text to match
        prefix: Optional text that appears before the exact match
        suffix: Optional text that appears after the exact match
    """

    type: Literal["TextQuoteSelector"] = "TextQuoteSelector"
    exact: str = Field(min_length=1)
    prefix: str | None = Field(default=None, max_length=CONTEXT_LENGTH)
    suffix: str | None = Field(default=None, max_length=CONTEXT_LENGTH)


Selector = Annotated[
    FragmentSelector | RangeSelector | TextPositionSelector | TextQuoteSelector,
    Field(discriminator="type"),
]

_selector_adapter: TypeAdapter[Selector] = TypeAdapter(Selector)
_selector_list_adapter: TypeAdapter[list[Selector]] = TypeAdapter(list[Selector])


def parse_selector(data: Mapping[str, Any]) -> Selector:
    """
    Validate one wire mapping into the matching selector variant.

    Raises:
        pydantic.ValidationError: On an unknown type or invalid fields
    """
    return _selector_adapter.validate_python(data)


def parse_selectors(data: Mapping[str, Any] | Iterable[Mapping[str, Any]]) -> list[Selector]:
    """Validate a single selector mapping or a list of them."""
    if isinstance(data, Mapping):
        return [parse_selector(data)]
    return _selector_list_adapter.validate_python(list(data))


def selectors_from_annotation(yaml_text: str) -> list[Selector]:
    """
    Load the selectors of a W3C Web Annotation written as YAML.

    Reads target.selector, which may be one selector or a list.

    Example:
        selectors = selectors_from_annotation('''
            target:
              selector:
                type: TextQuoteSelector
                exact: "brown fox"
                prefix: "The quick "
        ''')

    Raises:
        ValueError: If the document or its target is not a mapping
        yaml.YAMLError: If the text is not valid YAML
        pydantic.ValidationError: If a selector is invalid
    """
    data = yaml.safe_load(yaml_text) or {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Annotation must be a mapping, got {type(data).__name__}")
    target = data.get("target") or {}
    if not isinstance(target, Mapping):
        raise ValueError(f"Annotation target must be a mapping, got {type(target).__name__}")
    return parse_selectors(target.get("selector", []))


def annotation_yaml(selectors: Iterable[Selector], source: str | None = None) -> str:
    """Write selectors as the target of a W3C Web Annotation in YAML."""
    target: dict[str, Any] = {}
    if source:
        target["source"] = source
    target["selector"] = [selector.to_wire() for selector in selectors]
    return yaml.safe_dump({"target": target}, sort_keys=False, allow_unicode=True)
