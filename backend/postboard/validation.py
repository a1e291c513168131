"""
Postboard Backend — Request Validation Layer
==============================================

What:  Applies a schema's declarative field rules to a request payload and
       reports every violation at once.
How:   Rules are pydantic constraints on the request model (required,
       min_length, EmailStr, ...). Pydantic checks every field independently;
       this module turns its error list into `FieldError` dicts and raises
       `ValidationError` carrying all of them.
Who:   Routes declare `payload: Schema = validated_body(Schema)`; the global
       RequestValidationError handler reuses `collect_field_errors`.

A field that breaks several rules is reported once. The message is the
schema's override for that (field, error type) pair when it declares one
(`field_messages`), otherwise pydantic's own text for the broken rule.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

import pydantic
from fastapi import Depends, Request

from postboard.exceptions import ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)

# Prefixes FastAPI puts in front of the field name in error locations
_LOCATIONS = {"body", "path", "query", "header", "cookie"}


def collect_field_errors(
    raw_errors: Iterable[Mapping[str, Any]],
    messages: Optional[Mapping[Tuple[str, str], str]] = None,
    location: str = "body",
) -> List[Dict[str, str]]:
    """
    Converts pydantic/FastAPI error dicts into one FieldError dict per field.

    Args:
        raw_errors: Items shaped like pydantic's `errors()` output (`loc`, `msg`)
        messages:   Optional (field, error type) -> message overrides
        location:   Location to report when the error `loc` carries none

    Returns:
        Errors in first-seen field order, e.g.
        [{"field": "email", "message": "Please include a valid email", "location": "body"}]
    """
    messages = messages or {}
    collected: Dict[str, Dict[str, str]] = {}

    for err in raw_errors:
        loc = list(err.get("loc") or ())
        where = location
        if loc and loc[0] in _LOCATIONS:
            where = str(loc.pop(0))
        field = str(loc[0]) if loc else where
        if field in collected:
            continue
        collected[field] = {
            "field": field,
            "message": messages.get((field, err.get("type", "")), err.get("msg", "Invalid value")),
            "location": where,
        }

    return list(collected.values())


def validate(schema: Type[ModelT], payload: Any) -> ModelT:
    """
    Checks `payload` against `schema` and returns the parsed model.

    A payload that is not a JSON object is treated as empty, so every
    required field is reported as missing.

    Raises:
        ValidationError: with every violated field in `errors`
    """
    data = payload if isinstance(payload, dict) else {}
    try:
        return schema.model_validate(data)
    except pydantic.ValidationError as exc:
        errors = collect_field_errors(
            exc.errors(),
            messages=getattr(schema, "field_messages", None),
        )
        logger.debug("Rejected %s payload: %s", schema.__name__, [e["field"] for e in errors])
        raise ValidationError(errors=errors) from exc


def validated_body(schema: Type[ModelT]) -> Any:
    """
    FastAPI dependency factory: parses the JSON body and validates it.

    Example:
        @router.post("/posts")
        async def create_post(payload: PostCreateRequest = validated_body(PostCreateRequest)):
            ...
    """

    async def dependency(request: Request) -> ModelT:
        try:
            payload = await request.json()
        except ValueError:
            # Empty or non-JSON body: report the missing fields instead
            payload = None
        return validate(schema, payload)

    dependency.__name__ = f"validate_{schema.__name__}"
    return Depends(dependency)
