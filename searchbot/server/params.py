"""Normalize request parameters from the query string and body."""

from __future__ import annotations

import json
from typing import Any

from fastapi import Request

from searchbot.search.errors import ValidationError

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def try_parse_json(value: Any) -> Any:
    """Decode string values that hold JSON; anything else passes through."""
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except ValueError:
        return value


async def adapt_parse_body(request: Request) -> dict[str, Any]:
    """Merge query-string and body parameters; body keys win."""
    params: dict[str, Any] = {}
    for key, value in request.query_params.items():
        params[key] = try_parse_json(value)
    for key, value in (await _read_body(request)).items():
        params[key] = try_parse_json(value)
    return params


async def _read_body(request: Request) -> dict[str, Any]:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}
    if content_type.startswith(_FORM_TYPES):
        form = await request.form()
        return dict(form)
    return {}


def query_terms(params: dict[str, Any]) -> tuple[str, ...]:
    """Pull the search terms out of normalized params, rejecting empty queries."""
    query = params.get("query")
    if isinstance(query, list):
        terms = tuple(t for t in (_as_term(q) for q in query) if t)
    elif query:
        terms = (_as_term(query),)
    else:
        terms = ()

    if not any(terms):
        raise ValidationError("Invalid body")
    return terms


def show_url_flag(params: dict[str, Any]) -> bool:
    return bool(params.get("showUrl", True))


def _as_term(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return json.dumps(value)
