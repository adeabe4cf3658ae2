"""Common schemas used across the application."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every wire schema: snake_case in Python, camelCase on the wire.

    Requests may use either spelling; responses are always camelCase.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class FileReference(CamelModel):
    """Pointer to an uploaded file as embedded in a registration.

    Extra keys (e.g. the review ``status`` on a balance-payment receipt)
    are kept as-is.
    """

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    name: str | None = None
    type: str | None = None
    size: int | None = None
    url: str | None = None


class SuccessResponse(CamelModel):
    success: bool = True
    message: str | None = None


class CreatedResponse(SuccessResponse):
    id: str
