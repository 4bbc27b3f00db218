"""Chat session state: an append-only log of exchanged messages."""

import uuid
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from finchat.constants import MAX_HISTORY_MESSAGES, SYSTEM_PROVIDER_LABEL
from finchat.exceptions import ValidationError


class Sender(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"

    @classmethod
    def parse(cls, value: str) -> "Sender":
        """Parse a sender name; the web client's "ai" means assistant."""
        if value == "ai":
            return cls.ASSISTANT
        try:
            return cls(value)
        except ValueError as e:
            raise ValidationError(f"Unknown sender: {value!r}") from e


@dataclass(frozen=True)
class ChatMessage:
    """One immutable turn in a conversation."""

    id: str
    sender: Sender
    text: str
    timestamp: datetime
    image: str | None = None
    provider: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "sender": self.sender.value,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.image is not None:
            data["image"] = self.image
        if self.provider is not None:
            data["provider"] = self.provider
        return data


class ChatSession:
    """Ordered, append-only message log for one conversation.

    Held in memory only; nothing survives a process restart.
    """

    def __init__(self) -> None:
        self._messages: list[ChatMessage] = []

    def append(
        self,
        sender: Sender | str,
        text: str,
        *,
        image: str | None = None,
        provider: str | None = None,
    ) -> tuple[ChatMessage, ...]:
        """Create a message with a fresh id and timestamp and add it to the log.

        Returns:
            tuple[ChatMessage, ...]: The updated message sequence
        """
        if not isinstance(sender, Sender):
            sender = Sender.parse(sender)
        message = ChatMessage(
            id=uuid.uuid4().hex,
            sender=sender,
            text=text,
            timestamp=datetime.now(timezone.utc),
            image=image,
            provider=provider,
        )
        self._messages.append(message)
        return self.all()

    def all(self) -> tuple[ChatMessage, ...]:
        """Read-only view of the messages in append order."""
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(self.all())

    @classmethod
    def from_history(cls, entries: list[dict[str, Any]] | None) -> "ChatSession":
        """Rebuild a session from client-supplied history entries.

        Entries need "sender" (or "role") and "text" (or "content"); entries
        without text are skipped. Each one is appended, so it gets a new id.

        Raises:
            ValidationError: If an entry is not a mapping, has non-string text or
                has an unknown sender
        """
        session = cls()
        for entry in entries or []:
            if not isinstance(entry, dict):
                raise ValidationError("History entries must be objects")
            text = entry.get("text", entry.get("content"))
            if not text:
                continue
            if not isinstance(text, str):
                raise ValidationError("History entry text must be a string")
            session.append(
                entry.get("sender", entry.get("role", Sender.USER.value)),
                text,
                provider=entry.get("provider"),
            )
        return session

    def history(self, limit: int = MAX_HISTORY_MESSAGES) -> list[dict[str, str]]:
        """Recent user/assistant turns as role/content dictionaries.

        System messages and system-labelled error replies are left out.
        """
        turns = [
            {"role": msg.sender.value, "content": msg.text}
            for msg in self._messages
            if msg.sender is not Sender.SYSTEM
            and (msg.provider or "").lower() != SYSTEM_PROVIDER_LABEL
        ]
        return turns[-limit:] if limit > 0 else []
