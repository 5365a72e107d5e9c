"""
Maps an HTTP response onto the closed error taxonomy.

Every flow goes through ``classify`` so status interpretation is the
same for sign-in, verification, password reset and policy lookups.
"""

import logging
from typing import Optional, TypeVar, overload

import httpx
from pydantic import BaseModel, ValidationError

from safal_auth.errors import (
    ApiError,
    DecodingError,
    NoDataError,
    ServerError,
    UnauthorizedError,
    UnknownError,
)
from safal_auth.models.envelope import ErrorBody

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _error_message(response: httpx.Response, error_field_first: bool) -> Optional[str]:
    try:
        body = ErrorBody.model_validate_json(response.content)
    except ValidationError:
        return None
    first, second = (body.error, body.message) if error_field_first else (body.message, body.error)
    return first or second or None


@overload
def classify(response: httpx.Response, model: type[M], *, error_field_first: bool = ...) -> M: ...


@overload
def classify(response: httpx.Response, model: None = ..., *, error_field_first: bool = ...) -> None: ...


def classify(
    response: httpx.Response,
    model: Optional[type[M]] = None,
    *,
    error_field_first: bool = False,
) -> Optional[M]:
    """Decode a 2xx body into ``model`` or raise the matching ``NetworkError``.

    ``error_field_first`` reads ``error`` before ``message`` from a 401 body
    (organization sign-in reports rejected credentials that way). Other
    4xx bodies are always read ``message`` first.
    """
    status = response.status_code

    if 200 <= status <= 299:
        if model is None:
            return None
        if not response.content:
            raise NoDataError()
        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            logger.error("Failed to decode %s from %s: %s", model.__name__, response.request.url, e)
            raise DecodingError() from e

    if status == 401:
        message = _error_message(response, error_field_first)
        if message:
            raise ApiError(message)
        raise UnauthorizedError()

    if 400 <= status <= 499:
        message = _error_message(response, False)
        raise ApiError(message or f"Client error: {status}")

    if 500 <= status <= 599:
        raise ServerError(status)

    raise UnknownError(f"Unexpected HTTP status {status}")
