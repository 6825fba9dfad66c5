"""Helpers for reading multipart or JSON request bodies into schemas."""

import json
from typing import Any, Type, TypeVar

import pydantic
from fastapi import Request
from starlette.datastructures import UploadFile

from claimflow.core.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


class RequestBody:
    """Text fields and file parts of a request, whatever its content type."""

    def __init__(self, fields: dict[str, Any], files: dict[str, list[UploadFile]]):
        self.fields = fields
        self.files = files

    def files_for(self, *names: str) -> list[UploadFile]:
        """Uploads sent under any of ``names``, in field order."""
        return [upload for name in names for upload in self.files.get(name, [])]


def is_multipart(request: Request) -> bool:
    content_type = request.headers.get("content-type", "")
    return content_type.startswith("multipart/form-data") or content_type.startswith(
        "application/x-www-form-urlencoded"
    )


async def read_body(request: Request, list_fields: tuple[str, ...] = ()) -> RequestBody:
    """Read a JSON or form body.

    Form fields named in ``list_fields`` keep every value sent under that
    name; other fields keep their last value.

    Raises:
        ValidationError: If a JSON body cannot be decoded
    """
    if not is_multipart(request):
        raw = await request.body()
        if not raw:
            return RequestBody({}, {})
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON body: {e.msg}") from e
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return RequestBody(data, {})

    form = await request.form()
    fields: dict[str, Any] = {}
    files: dict[str, list[UploadFile]] = {}
    for key in form.keys():
        values = form.getlist(key)
        uploads = [v for v in values if isinstance(v, UploadFile)]
        texts = [v for v in values if not isinstance(v, UploadFile)]
        if uploads:
            files[key] = uploads
        if texts:
            fields[key] = texts if key in list_fields else texts[-1]
    return RequestBody(fields, files)


def decode_json_list(value: Any, field_name: str) -> list:
    """Decode a form field carrying JSON: one array, or one object per repeated value."""
    if value is None or value == "":
        return []
    if isinstance(value, list) and all(isinstance(v, dict) for v in value):
        return value

    values = value if isinstance(value, list) else [value]
    decoded: list = []
    for raw in values:
        if isinstance(raw, (dict, list)):
            parsed = raw
        else:
            try:
                parsed = json.loads(raw)
            except (TypeError, json.JSONDecodeError) as e:
                raise ValidationError(f"Field '{field_name}' must contain JSON") from e
        decoded.extend(parsed if isinstance(parsed, list) else [parsed])
    return decoded


def parse_model(model: Type[ModelT], data: dict[str, Any]) -> ModelT:
    """Validate request data, turning schema errors into a 400 response."""
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(f"Invalid request: {problems}", original_error=e) from e
