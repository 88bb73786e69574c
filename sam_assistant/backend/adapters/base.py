from __future__ import annotations

from typing import Protocol, Sequence

from sam_assistant.backend.core.types import AssistantKind, Message, OpportunityRecord


class CollaboratorError(Exception):
	def __init__(self, message: str, *, code: str = "collaborator_error"):
		super().__init__(message)
		self.code = code
		self.message = message


class IngestionError(CollaboratorError):
	def __init__(self, message: str, *, code: str = "ingestion_failed"):
		super().__init__(message, code=code)


class GenerationError(CollaboratorError):
	def __init__(self, message: str, *, code: str = "generation_failed"):
		super().__init__(message, code=code)


class IngestionAdapter(Protocol):
	async def fetch(self, reference: str) -> OpportunityRecord:
		...


class GenerationAdapter(Protocol):
	async def generate(self, kind: AssistantKind, history: Sequence[Message]) -> str:
		...
