"""Emergency channel request/response models."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class EmergencyRequest(BaseModel):
    """Body of ``POST /enviar-emergencia``."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    phone_number: str = Field(min_length=1, validation_alias=AliasChoices("telefono", "phone_number", "phoneNumber"))
    message: str = Field(min_length=1, validation_alias=AliasChoices("mensaje", "message"))


class EmergencyResult(BaseModel):
    """Outcome of a delivered alert, including the provider's own answer."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    response: dict[str, Any] = Field(default_factory=dict)


class EmergencyContact(BaseModel):
    """Static number the client dials locally."""

    model_config = ConfigDict(frozen=True)

    number: str = Field(serialization_alias="numero")
