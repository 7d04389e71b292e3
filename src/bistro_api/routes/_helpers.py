"""
Request parsing shared by the blueprints.
"""

from __future__ import annotations

from typing import Any

from flask import request
from werkzeug.datastructures import FileStorage

from bistro_shared.datetime_utils import parse_date
from bistro_shared.errors import ValidationError


def json_body() -> Any:
    return request.get_json(silent=True) or {}


def form_or_json() -> tuple[dict[str, Any], FileStorage | None]:
    """
    Read a body that may be multipart (with an ``image`` file) or JSON.

    Blank multipart fields are dropped so partial updates leave them alone.
    """
    if request.mimetype == "multipart/form-data":
        data = {key: value for key, value in request.form.to_dict().items() if value != ""}
        upload = request.files.get("image")
        if upload is not None and not upload.filename:
            upload = None
        return data, upload
    return json_body(), None


def query_date(name: str):
    try:
        return parse_date(request.args.get(name), name)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc


def query_flag(name: str) -> bool:
    return (request.args.get(name) or "").strip().lower() in {"1", "true", "yes"}
