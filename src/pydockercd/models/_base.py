"""Base model for Docker-CD API payloads.

Every payload model inherits from :class:`DockerCdBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase API keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that drops ``null`` and empty
  string values so the field default is used.
* :meth:`DockerCdBaseModel.to_api` to dump back to the wire shape.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class DockerCdBaseModel(BaseModel):
    """Base for Docker-CD payload models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_empty_values(cls, values: Any) -> Any:
        # The server omits empty optional fields, but other producers send
        # them as null or "".
        if not isinstance(values, dict):
            return values
        return {
            key: value
            for key, value in values.items()
            if value is not None and not (isinstance(value, str) and not value.strip())
        }

    def to_api(self) -> dict[str, Any]:
        """Dump using the camelCase wire keys, omitting unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
