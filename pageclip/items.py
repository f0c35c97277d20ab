"""Pydantic schemas for clips, archives, selectors and host messages."""

from __future__ import annotations

import base64
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter, field_serializer, field_validator

# ---------------------------------------------------------------------------
# Selectors (W3C Web Annotation shapes)
# ---------------------------------------------------------------------------

class TextQuoteSelector(BaseModel):
    """Anchors a range by its exact text plus surrounding context."""

    model_config = {"frozen": True}

    type: Literal["TextQuoteSelector"] = "TextQuoteSelector"
    exact: str
    prefix: str = ""
    suffix: str = ""


class TextPositionSelector(BaseModel):
    """Anchors a range by character offsets into the document text."""

    model_config = {"frozen": True}

    type: Literal["TextPositionSelector"] = "TextPositionSelector"
    start: int = Field(ge=0)
    end: int = Field(ge=0)


Selector = Annotated[
    TextQuoteSelector | TextPositionSelector,
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Clip payloads
# ---------------------------------------------------------------------------

class ScrapeData(BaseModel):
    """Summary of a page, or of a selection within it."""

    model_config = {"frozen": True}

    url: str
    icon: str | None = None
    hero: list[str] = Field(default_factory=list, max_length=4)
    title: str = ""
    description: str = ""
    name: str = ""

    # None exactly when the whole document was clipped.
    selector: list[Selector] | None = None


class ArchiveData(BaseModel):
    """Serialized page markup.  ``data`` travels as standard base64 in JSON."""

    model_config = {"frozen": True}

    url: str
    data: bytes

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_data(cls, v: Any) -> Any:
        if isinstance(v, (bytearray, memoryview)):
            return bytes(v)
        if isinstance(v, str):
            try:
                return base64.b64decode(v, validate=True)
            except ValueError as exc:
                raise ValueError(f"data is not valid base64: {exc}") from exc
        return v

    @field_serializer("data", when_used="json")
    def _encode_data(self, v: bytes) -> str:
        return base64.b64encode(v).decode("ascii")


# ---------------------------------------------------------------------------
# Host messages
# ---------------------------------------------------------------------------

class ScrapedMessage(BaseModel):
    type: Literal["scraped"] = "scraped"
    scraped: ScrapeData


class ArchivedMessage(BaseModel):
    type: Literal["archived"] = "archived"
    archived: ArchiveData


HostMessage = Annotated[
    ScrapedMessage | ArchivedMessage,
    Field(discriminator="type"),
]

_host_message_adapter: TypeAdapter[ScrapedMessage | ArchivedMessage] = TypeAdapter(HostMessage)


def parse_host_message(data: str | bytes | dict[str, Any]) -> ScrapedMessage | ArchivedMessage:
    """Validate a dict or JSON document into the matching message variant."""
    if isinstance(data, dict):
        return _host_message_adapter.validate_python(data)
    return _host_message_adapter.validate_json(data)
