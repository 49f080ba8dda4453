"""JSON codec for cached payloads.

Values are encoded with orjson. Pydantic models and dataclasses are accepted
on write; on read an optional target type is validated with a cached
TypeAdapter so shape errors surface as a miss instead of a bad object.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, TypeVar, cast

import orjson
from pydantic import BaseModel, TypeAdapter, ValidationError

from lawrose.cache.errors import CacheDeserializationError, CacheSerializationError

T = TypeVar("T")


def _default(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


@lru_cache(maxsize=256)
def _adapter(model: Any) -> TypeAdapter[Any]:
    return TypeAdapter(model)


def dumps(value: Any) -> bytes:
    """Encode a value for storage.

    Raises:
        CacheSerializationError: If the value is not JSON serializable.
    """
    try:
        return orjson.dumps(value, default=_default, option=orjson.OPT_NON_STR_KEYS)
    except (orjson.JSONEncodeError, TypeError) as e:
        raise CacheSerializationError(str(e)) from e


def loads(raw: bytes | str, model: type[T] | Any | None = None) -> T | Any:
    """Decode a stored payload, optionally validating it into ``model``.

    Raises:
        CacheDeserializationError: If the payload is not valid JSON or does not
            match ``model``.
    """
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise CacheDeserializationError(str(e)) from e

    if model is None:
        return data

    try:
        return cast(T, _adapter(model).validate_python(data))
    except ValidationError as e:
        raise CacheDeserializationError(str(e)) from e


def coerce(value: Any, model: type[T] | Any) -> T | Any:
    """Validate an in-memory value into ``model`` as a cached read would.

    The value goes through the same JSON round trip as a stored payload, so a
    freshly loaded value and a cache hit come back as equal objects.

    Raises:
        pydantic.ValidationError: If the value does not match ``model``.
    """
    try:
        data = orjson.loads(dumps(value))
    except CacheSerializationError:
        data = value
    return _adapter(model).validate_python(data)
