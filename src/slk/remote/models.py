"""Data models for remote records.

These models are independent of the messaging service behind the client.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Message(BaseModel):
    """A chat message as displayed in the history pane."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(description="When the message was sent")
    sender: str = Field(description="Display name of the sender")
    text: str = Field(description="Message text")
    user_key: str = Field(default="", description="Sender's user identifier, if known")
    ts: str = Field(default="", description="Protocol timestamp, used for read markers")


class Channel(BaseModel):
    """Channel metadata as cached in the channel directory."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Service-specific channel identifier")
    name: str = Field(default="", description="Channel name without '#'")
    is_member: bool = Field(default=False, description="Whether we joined the channel")
    is_private: bool = Field(default=False)
    num_members: int = Field(default=0, ge=0)
    is_im: bool = Field(default=False, description="Direct message conversation")
    is_mpim: bool = Field(default=False, description="Multi-party direct message")

    @property
    def display_name(self) -> str:
        """Name as typed in commands, e.g. '#general'."""
        return f"#{self.name}"

    @property
    def visibility(self) -> str:
        return "private" if self.is_private else "public"


class User(BaseModel):
    """A workspace user."""

    model_config = ConfigDict(frozen=True)

    key: str
    name: str = ""
    real_name: str = ""
    email: str = ""
    title: str = ""
    deleted: bool = False

    @property
    def display_name(self) -> str:
        return self.real_name or self.name or self.key
