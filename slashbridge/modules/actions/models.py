"""Data models for remote action definitions, slash commands and results."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResponseType(StrEnum):
    """Visibility of a command result in the channel."""

    EPHEMERAL = "ephemeral"
    IN_CHANNEL = "in_channel"


class ArgumentType(StrEnum):
    """Kinds of autocomplete argument the bridge registers."""

    DYNAMIC_LIST = "DynamicList"


class DynamicListArgument(BaseModel):
    """An argument slot whose suggestions are fetched from ``fetch_url`` at use-time."""

    model_config = ConfigDict(frozen=True)

    name: str
    help_text: str = ""
    type: ArgumentType = ArgumentType.DYNAMIC_LIST
    fetch_url: str
    is_list: bool = True


class AutocompleteData(BaseModel):
    """Autocomplete tree for one trigger."""

    model_config = ConfigDict(frozen=True)

    trigger: str
    hint: str = ""
    help_text: str = ""
    arguments: tuple[DynamicListArgument, ...] = ()


class CommandDescriptor(BaseModel):
    """A slash command ready to be registered with the host."""

    model_config = ConfigDict(frozen=True)

    trigger: str
    auto_complete: bool = True
    autocomplete_data: AutocompleteData

    @property
    def argument_names(self) -> list[str]:
        return [arg.name for arg in self.autocomplete_data.arguments]

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the API and CLI listings."""
        return self.model_dump(mode="json")


class CommandResult(BaseModel):
    """What the host shows the user after a command runs.

    Unknown fields sent by the action server are kept and passed through.
    """

    model_config = ConfigDict(extra="allow")

    response_type: str = ""
    text: str = ""
    username: str = ""
    icon_url: str = ""
    goto_location: str = ""
    props: dict[str, Any] = Field(default_factory=dict)

    @field_validator("response_type", "text", "username", "icon_url", "goto_location", mode="before")
    @classmethod
    def _null_string(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("props", mode="before")
    @classmethod
    def _null_props(cls, value: Any) -> Any:
        # Go action servers marshal a nil map as null.
        return {} if value is None else value

    @classmethod
    def ephemeral(cls, text: str) -> CommandResult:
        return cls(response_type=ResponseType.EPHEMERAL.value, text=text)

    @property
    def is_ephemeral(self) -> bool:
        return self.response_type == ResponseType.EPHEMERAL


class SyncState(StrEnum):
    """Where the sync loop currently is."""

    IDLE = "idle"
    SYNCING = "syncing"


class SyncStatus(StrEnum):
    """How a single sync cycle ended."""

    NOT_MODIFIED = "not_modified"
    UPDATED = "updated"
    FAILED = "failed"


class SyncOutcome(BaseModel):
    """Result of one sync cycle, reported to logs and the API."""

    status: SyncStatus
    registered: list[str] = Field(default_factory=list)
    etag: str = ""
    error: Optional[str] = None
    error_category: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != SyncStatus.FAILED
