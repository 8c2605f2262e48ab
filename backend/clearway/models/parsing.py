"""
Input coercion helpers

Turn plain data from collaborators into validated models, reporting
any problem as InvalidInputError.
"""

from enum import Enum
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from clearway.exceptions import InvalidInputError

M = TypeVar('M', bound=BaseModel)
E = TypeVar('E', bound=Enum)


def coerce_model(model_cls: Type[M], value: Any, field: str) -> M:
    """Accept a model instance or a mapping and return a validated model"""
    if isinstance(value, model_cls):
        return value
    if value is None:
        raise InvalidInputError(f"{field} is required")
    if isinstance(value, BaseModel):
        value = value.model_dump()
    if not isinstance(value, dict):
        raise InvalidInputError(f"{field} must be an object, got {type(value).__name__}")
    try:
        return model_cls.model_validate(value)
    except ValidationError as e:
        first = e.errors()[0]
        location = '.'.join(str(part) for part in first['loc'])
        raise InvalidInputError(f"Invalid {field} ({location}): {first['msg']}") from e


def coerce_enum(enum_cls: Type[E], value: Any, field: str) -> E:
    """Accept an enum member or its string value; unknown values are rejected"""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ', '.join(member.value for member in enum_cls)
        raise InvalidInputError(f"Invalid {field} '{value}' (expected one of: {allowed})") from e
