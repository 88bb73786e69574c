from __future__ import annotations

from datetime import datetime, timezone
from threading import Lock
from typing import Iterator, Tuple

from sam_assistant.backend.core.types import Message, MessageRole


def _now_iso() -> str:
	return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class MessageLog:
	"""Append-only record of conversation turns.

	Entries are held in an immutable tuple that is swapped on every append, so
	any snapshot returned by ``all()`` stays valid while later appends happen.
	Sequence numbers start at 1 and have no gaps.
	"""

	def __init__(self) -> None:
		self._messages: Tuple[Message, ...] = ()
		self._lock = Lock()

	def append(self, role: MessageRole, content: str) -> Message:
		with self._lock:
			message = Message(
				role=role,
				content=content,
				sequence_number=len(self._messages) + 1,
				created_at=_now_iso(),
			)
			self._messages = self._messages + (message,)
			return message

	def all(self) -> Tuple[Message, ...]:
		return self._messages

	def last(self) -> Message | None:
		messages = self._messages
		return messages[-1] if messages else None

	def __len__(self) -> int:
		return len(self._messages)

	def __iter__(self) -> Iterator[Message]:
		return iter(self._messages)
