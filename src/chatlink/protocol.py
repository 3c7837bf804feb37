"""Wire frames exchanged with the chat endpoint."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

PING = "ping"
PONG = "pong"


class ProtocolError(Exception):
    """Raised when an inbound frame is not a valid data frame."""

    def __init__(self, message: str, *, frame: str | bytes | None = None) -> None:
        super().__init__(message)
        self.frame = frame


@dataclass(frozen=True, slots=True)
class Payload:
    """A chat message: who sent it and what it says."""

    sender: str
    body: str

    @property
    def is_blank(self) -> bool:
        return not self.body.strip()


class _DataFrame(BaseModel):
    model_config = ConfigDict(strict=True)

    user: str
    content: str


def encode_payload(payload: Payload) -> str:
    """Serialize a payload to a single text frame."""
    return json.dumps({"user": payload.sender, "content": payload.body})


def decode_frame(frame: str | bytes) -> Payload:
    """Parse a data frame into a Payload.

    Liveness frames are not data frames; callers filter them out first.
    """
    if isinstance(frame, bytes):
        try:
            frame = frame.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ProtocolError("frame is not valid UTF-8", frame=frame) from exc

    try:
        data: Any = json.loads(frame)
    except json.JSONDecodeError as exc:
        raise ProtocolError(f"frame is not JSON: {exc.msg}", frame=frame) from exc
    except (ValueError, RecursionError) as exc:
        # Oversized numbers or nesting too deep for the decoder.
        raise ProtocolError(f"frame is not decodable: {type(exc).__name__}", frame=frame) from exc

    try:
        parsed = _DataFrame.model_validate(data)
    except ValidationError as exc:
        raise ProtocolError(
            f"frame is not a data frame ({exc.error_count()} errors)", frame=frame
        ) from exc
    return Payload(sender=parsed.user, body=parsed.content)
