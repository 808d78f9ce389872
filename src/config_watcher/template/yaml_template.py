"""
YAML template generation for configuration models.

Renders a commented YAML skeleton from a pydantic model so users can see
every key of a configuration file with its default value and description.
"""

import json
from collections.abc import Mapping, MutableMapping, MutableSequence, MutableSet, Sequence, Set
from enum import Enum
from pathlib import PurePath
from types import NoneType, UnionType
from typing import Any, NamedTuple, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo
from pydantic_core import PydanticUndefined

INDENT = "  "

_SEQUENCE_ORIGINS = (list, tuple, set, frozenset, Sequence, MutableSequence, Set, MutableSet)
_MAPPING_ORIGINS = (dict, Mapping, MutableMapping)


class TemplateLine(NamedTuple):
    """A single line of the template and its trailing comment."""

    line: str
    help: str = ""


def generate_yaml_template(model: type[BaseModel] | BaseModel) -> str:
    """
    Generate a commented YAML template for a configuration model.

    Args:
        model: Pydantic model class (or an instance of one)

    Returns:
        YAML text with one line per field, comments aligned in one column
    """
    model_cls = model if isinstance(model, type) else type(model)
    lines: list[TemplateLine] = []
    _parse_model(model_cls, 0, lines)
    return _render_aligned(lines)


def _parse_model(model_cls: type[BaseModel], indent: int, lines: list[TemplateLine]) -> None:
    indentation = INDENT * indent

    for name, field in model_cls.model_fields.items():
        if _is_skipped(field):
            continue

        key = _field_key(name, field)
        help_text = field.description or ""
        annotation = _unwrap_optional(field.annotation)

        if _is_model(annotation):
            lines.append(TemplateLine(f"{indentation}{key}:", help_text))
            _parse_model(annotation, indent + 1, lines)

        elif _origin_in(annotation, _SEQUENCE_ORIGINS):
            lines.append(TemplateLine(f"{indentation}{key}:", help_text))
            item_type = _unwrap_optional(_first_arg(annotation))
            if _is_model(item_type):
                lines.append(TemplateLine(f"{indentation}{INDENT}-"))
                _parse_model(item_type, indent + 2, lines)
            else:
                items = _sequence_items(field)
                for item in items or ["example"]:
                    lines.append(TemplateLine(f"{indentation}{INDENT}- {_format_item(item)}"))

        elif _origin_in(annotation, _MAPPING_ORIGINS):
            lines.append(TemplateLine(f"{indentation}{key}:", help_text))
            lines.append(TemplateLine(f"{indentation}{INDENT}key: value", "Map example"))

        else:
            lines.append(TemplateLine(f"{indentation}{key}: {_scalar_value(field, annotation)}", help_text))


def _render_aligned(lines: list[TemplateLine]) -> str:
    width = max((len(entry.line) for entry in lines), default=0)
    parts = []
    for entry in lines:
        if entry.help:
            parts.append(f"{entry.line}{' ' * (width - len(entry.line) + 1)}# {entry.help}\n")
        else:
            parts.append(f"{entry.line}\n")
    return "".join(parts)


def _is_skipped(field: FieldInfo) -> bool:
    if field.exclude:
        return True
    extra = field.json_schema_extra
    return isinstance(extra, dict) and extra.get("template") is False


def _field_key(name: str, field: FieldInfo) -> str:
    return (field.serialization_alias or field.alias or name).lower()


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) in (Union, UnionType):
        args = [arg for arg in get_args(annotation) if arg is not NoneType]
        if len(args) == 1:
            return args[0]
    return annotation


def _first_arg(annotation: Any) -> Any:
    args = get_args(annotation)
    return args[0] if args else Any


def _is_model(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, BaseModel)


def _origin_in(annotation: Any, origins: tuple) -> bool:
    origin = get_origin(annotation) or annotation
    return isinstance(origin, type) and origin in origins


def _default(field: FieldInfo) -> tuple[bool, Any]:
    if field.default is not PydanticUndefined:
        return True, field.default
    if field.default_factory is not None:
        return True, field.default_factory()
    return False, None


def _placeholder(field: FieldInfo) -> Any:
    extra = field.json_schema_extra
    if isinstance(extra, dict):
        return extra.get("placeholder")
    return None


def _sequence_items(field: FieldInfo) -> list[Any]:
    has_default, value = _default(field)
    if not has_default or value is None:
        value = _placeholder(field)
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return list(value or [])


def _scalar_value(field: FieldInfo, annotation: Any) -> str:
    has_default, value = _default(field)
    if not has_default or value is None:
        value = _placeholder(field)
    if value is None:
        return "null"

    if isinstance(value, Enum):
        value = value.value
    text = _format_item(value)
    if _should_quote(annotation, value):
        return json.dumps(text, ensure_ascii=False)
    return text


def _should_quote(annotation: Any, value: Any) -> bool:
    if annotation is not Any and isinstance(annotation, type):
        return issubclass(annotation, (str, PurePath))
    return isinstance(value, str)


def _format_item(item: Any) -> str:
    if isinstance(item, Enum):
        item = item.value
    if isinstance(item, bool):
        return "true" if item else "false"
    return str(item)
