"""Argument models for the tool surface."""

from __future__ import annotations

from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError

from discord_mcp.errors import InvalidArgumentsError


SERVER_DESCRIPTION = "Server name or ID (optional if bot is only in one server)"
CHANNEL_DESCRIPTION = 'Channel name (e.g., "general") or ID'

ArgsT = TypeVar("ArgsT", bound=BaseModel)


class SendMessageArgs(BaseModel):
    server: Optional[str] = Field(None, description=SERVER_DESCRIPTION)
    channel: str = Field(..., description=CHANNEL_DESCRIPTION)
    message: str = Field(..., description="Message content to send")


class ReadMessagesArgs(BaseModel):
    server: Optional[str] = Field(None, description=SERVER_DESCRIPTION)
    channel: str = Field(..., description=CHANNEL_DESCRIPTION)
    limit: int = Field(50, ge=1, le=100, description="Number of messages to fetch (max 100)")


class ListChannelsArgs(BaseModel):
    server: Optional[str] = Field(None, description=SERVER_DESCRIPTION)


class ListChannelsWithNewMessagesArgs(BaseModel):
    server: Optional[str] = Field(None, description=SERVER_DESCRIPTION)
    since: str = Field(
        ...,
        description=(
            'ISO 8601 timestamp (e.g., "2024-01-01T00:00:00Z") or relative time '
            '(e.g., "30m" for 30 minutes, "24h" for 24 hours, "7d" for 7 days)'
        ),
    )


def validate_arguments(model: Type[ArgsT], payload: Any) -> ArgsT:
    """Validate a raw argument payload, flattening pydantic errors into one message."""

    try:
        return model.model_validate(payload if payload is not None else {})
    except ValidationError as exc:
        details = ", ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'arguments'}: {error['msg']}"
            for error in exc.errors()
        )
        raise InvalidArgumentsError(f"Invalid arguments: {details}") from exc


def input_schema(model: Type[BaseModel]) -> dict[str, Any]:
    schema = model.model_json_schema()
    schema.pop("title", None)
    for prop in schema.get("properties", {}).values():
        prop.pop("title", None)
    schema.setdefault("required", [])
    return schema
