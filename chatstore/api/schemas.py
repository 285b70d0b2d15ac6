"""Pydantic schemas for the command shell's JSON payloads."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from chatstore.db.models import NewMessage

from .utils import coerce_identifier


class NewMessagePayload(BaseModel):
    """Message fields accepted from the front end."""

    role: str
    content: str
    tool_invocations: list[Any] | None = Field(
        default=None,
        validation_alias=AliasChoices("toolInvocations", "tool_invocations"),
    )

    model_config = ConfigDict(extra="ignore")

    @field_validator("role")
    @classmethod
    def _require_role(cls, value: str) -> str:
        role = (value or "").strip()
        if not role:
            raise ValueError("role must not be empty")
        return role

    def to_new_message(self) -> NewMessage:
        return NewMessage(
            role=self.role,
            content=self.content,
            tool_invocations=self.tool_invocations,
        )


class ThreadTitlePayload(BaseModel):
    title: str

    model_config = ConfigDict(extra="ignore")


class SettingsSubmissionPayload(BaseModel):
    tool_call_id: str = Field(validation_alias=AliasChoices("toolCallId", "tool_call_id"))
    settings_key: str = Field(validation_alias=AliasChoices("settingsKey", "settings_key"))

    model_config = ConfigDict(extra="ignore")

    @field_validator("tool_call_id", "settings_key")
    @classmethod
    def _require_identifier(cls, value: str) -> str:
        # Same rule as path lookups, so anything recorded can be found again.
        candidate = coerce_identifier(value)
        if candidate is None:
            raise ValueError("must be a real identifier, not empty or a null placeholder")
        return candidate


class CredentialPayload(BaseModel):
    value: str

    model_config = ConfigDict(extra="ignore")


__all__ = [
    "CredentialPayload",
    "NewMessagePayload",
    "SettingsSubmissionPayload",
    "ThreadTitlePayload",
]
