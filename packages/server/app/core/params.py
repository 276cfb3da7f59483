"""
Request parameter parsing.

Routes accept the same parameters from the query string and from a JSON
body, so ``GET /orgs/get?org_id=...`` and ``POST /orgs/get {"org_id": ...}``
are equivalent. Body values win when both are given.
"""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from app.core.errors import InvalidRequestError, format_validation_error

M = TypeVar("M", bound=BaseModel)


async def _read_json_body(request: Request) -> dict[str, Any]:
    raw = await request.body()
    if not raw.strip():
        return {}
    content_type = request.headers.get("content-type", "")
    if "json" not in content_type:
        return {}
    try:
        body = json.loads(raw)
    except json.JSONDecodeError:
        raise InvalidRequestError("Request body is not valid JSON")
    if not isinstance(body, dict):
        raise InvalidRequestError("Request body must be a JSON object")
    return body


def common_params(model: type[M]) -> Callable[[Request], Awaitable[M]]:
    """Build a dependency that validates query + JSON body params into ``model``."""

    async def dependency(request: Request) -> M:
        data: dict[str, Any] = dict(request.query_params)
        data.update(await _read_json_body(request))
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise InvalidRequestError(format_validation_error(exc))

    dependency.__name__ = f"{model.__name__}_params"
    return dependency
