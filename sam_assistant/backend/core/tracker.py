from __future__ import annotations

from sam_assistant.backend.core.types import AsyncOperation, OperationKind


class OperationTracker:
	"""Holds at most one outstanding collaborator call.

	Every ``begin`` mints a token from a generation counter that only moves
	forward. ``complete`` accepts the current token once; ``cancel`` bumps the
	counter so results carrying an older token are ignored.
	"""

	def __init__(self) -> None:
		self._generation = 0
		self._outstanding: AsyncOperation | None = None

	@property
	def outstanding(self) -> AsyncOperation | None:
		return self._outstanding

	@property
	def is_pending(self) -> bool:
		return self._outstanding is not None

	@property
	def generation(self) -> int:
		return self._generation

	def begin(self, kind: OperationKind) -> AsyncOperation | None:
		if self._outstanding is not None:
			return None
		self._generation += 1
		operation = AsyncOperation(kind=kind, token=self._generation)
		self._outstanding = operation
		return operation

	def is_current(self, token: int, kind: OperationKind | None = None) -> bool:
		operation = self._outstanding
		if operation is None or operation.token != token:
			return False
		return kind is None or operation.kind == kind

	def complete(self, token: int, kind: OperationKind | None = None) -> bool:
		if not self.is_current(token, kind):
			return False
		self._outstanding = None
		return True

	def cancel(self) -> None:
		self._generation += 1
		self._outstanding = None
