"""Shared schema base classes."""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exchanging camelCase keys with the web frontend.

    Python code uses snake_case attribute names; both spellings are accepted
    on input and responses are emitted in camelCase.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class FormInputModel(CamelModel):
    """Input model fed from HTML forms, where an empty field means "not provided".

    Blank values are dropped before validation, so the field's default applies.
    Fields listed in ``keep_blank`` accept an empty string as a real value.
    """

    keep_blank: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_values(cls, data: Any) -> Any:
        if isinstance(data, dict):
            keep = cls.keep_blank | {to_camel(name) for name in cls.keep_blank}
            return {
                key: value
                for key, value in data.items()
                if key in keep or not (isinstance(value, str) and not value.strip())
            }
        return data
