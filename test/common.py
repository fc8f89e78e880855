from dataclasses import MISSING, Field, fields, is_dataclass
from secrets import token_hex
from types import NoneType, UnionType
from typing import Any, NewType, TypeVar

from userlink.common.datetime import UtcDatetime


def get_default_type(field_type: Any) -> Any:  # type: ignore
    if isinstance(field_type, UnionType):
        for union_type in field_type.__args__:
            if union_type == NoneType:
                return None

        raise TypeError("Cannot auto build union types")

    if isinstance(field_type, NewType):
        if field_type.__supertype__ is str:
            return field_type(token_hex(4))

        return get_default_type(field_type.__supertype__)

    if issubclass(field_type, UtcDatetime):
        return field_type.now()

    if is_dataclass(field_type):
        return build(field_type)

    return field_type()


T = TypeVar("T")


def build(ty: type[T], **kwargs: Any) -> T:  # type: ignore
    if not is_dataclass(ty):
        raise TypeError("Type must be a dataclass")

    unset_fields: dict[str, Field] = {}  # type: ignore[type-arg]

    for field in fields(ty):
        if field.default is MISSING and field.default_factory is MISSING:
            unset_fields[field.name] = field

    data = kwargs.copy()

    for missing_key in unset_fields.keys() - kwargs.keys():
        field_type = unset_fields[missing_key].type

        data[missing_key] = get_default_type(field_type)

    return ty(**data)  # type: ignore
