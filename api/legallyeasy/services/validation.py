"""
Schema validation shared by both flows.

Input that fails its schema is the caller's fault (InvalidInputError);
provider output that fails its schema is an UpstreamError.
"""

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from legallyeasy.core.errors import InvalidInputError, UpstreamError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten pydantic errors into a single readable line."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        message = error["msg"].removeprefix("Value error, ")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


def parse_input(model: type[M], data: dict[str, Any]) -> M:
    """Validate flow input before any outbound call."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise InvalidInputError(describe_validation_error(exc)) from exc


def parse_output(model: type[M], raw: str) -> M:
    """Validate the provider's structured JSON output."""
    try:
        return model.model_validate_json(raw)
    except ValidationError as exc:
        logger.warning("Provider output failed %s schema: %s", model.__name__, exc)
        raise UpstreamError(
            f"The model returned output that does not match the {model.__name__} schema.",
            cause=exc,
        ) from exc
