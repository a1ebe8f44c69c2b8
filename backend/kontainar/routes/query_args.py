# Overview: Helpers for reading list-endpoint query parameters.

from __future__ import annotations

from flask import request


def list_arg(name: str) -> list[str]:
    """
    Multi-valued query parameter.

    Accepts repeated keys (?colors=a&colors=b) and comma lists (?colors=a,b).
    """
    values = []
    for raw in request.args.getlist(name):
        values.extend(part.strip() for part in raw.split(","))
    return [v for v in values if v]


def text_args(*names: str) -> dict:
    """Single-valued string parameters that are present and non-blank."""
    result = {}
    for name in names:
        value = request.args.get(name)
        if value is not None and value.strip():
            result[name] = value.strip()
    return result


def listing(records: list[dict]) -> dict:
    return {"items": records, "count": len(records)}
