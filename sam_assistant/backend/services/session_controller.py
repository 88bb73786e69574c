from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Dict

from sam_assistant.backend.adapters.base import GenerationAdapter, GenerationError, IngestionAdapter, IngestionError
from sam_assistant.backend.core import assistants
from sam_assistant.backend.core.machine import SessionStateMachine
from sam_assistant.backend.core.types import (
	AssistantKind,
	CommandResult,
	Failure,
	GenerationOutcome,
	IngestionOutcome,
)


logger = logging.getLogger(__name__)


def render_snapshot(machine: SessionStateMachine) -> Dict[str, Any]:
	opportunity = machine.opportunity
	kind = machine.assistant_kind
	pending = machine.pending_operation
	return {
		"phase": machine.phase.value,
		"opportunity": opportunity.as_dict() if opportunity else None,
		"assistant": (
			{"kind": kind.value, "label": assistants.ASSISTANT_LABELS[kind]} if kind else None
		),
		"messages": [message.as_dict() for message in machine.history()],
		"operation_pending": pending is not None,
		"pending_operation": pending.kind.value if pending else None,
	}


class SessionController:
	"""Drives a ``SessionStateMachine`` and runs its collaborator calls.

	Accepted submit/send commands start a background task; the task hands its
	outcome back to the machine together with the token it was started with.
	"""

	def __init__(
		self,
		*,
		ingestion: IngestionAdapter,
		generation: GenerationAdapter,
		machine: SessionStateMachine | None = None,
	):
		self._ingestion = ingestion
		self._generation = generation
		self._machine = machine or SessionStateMachine()
		self._tasks: Dict[int, asyncio.Task] = {}

	@property
	def machine(self) -> SessionStateMachine:
		return self._machine

	async def submit_opportunity_reference(self, reference: str) -> CommandResult:
		result = self._machine.submit_opportunity_reference(reference)
		if result.accepted and result.token is not None:
			self._spawn(result.token, self._run_ingestion(result.token, reference.strip()))
		return result

	async def select_assistant(self, kind: AssistantKind | str) -> CommandResult:
		return self._machine.select_assistant(kind)

	async def send_message(self, text: str) -> CommandResult:
		result = self._machine.send_message(text)
		if result.accepted and result.token is not None:
			kind = self._machine.assistant_kind
			history = self._machine.history()
			self._spawn(result.token, self._run_generation(result.token, kind, history))
		return result

	async def reset(self) -> CommandResult:
		return self._machine.reset()

	async def wait_idle(self) -> None:
		"""Wait for the operation the session is still expecting a result from.

		Calls made stale by a reset keep running in the background but are not awaited.
		"""
		pending = self._machine.pending_operation
		task = self._tasks.get(pending.token) if pending else None
		if task is not None:
			await asyncio.shield(task)

	def snapshot(self) -> Dict[str, Any]:
		return render_snapshot(self._machine)

	def _spawn(self, token: int, coro: Awaitable[None]) -> None:
		task = asyncio.ensure_future(coro)
		self._tasks[token] = task
		task.add_done_callback(lambda _done: self._tasks.pop(token, None))

	async def _run_ingestion(self, token: int, reference: str) -> None:
		outcome: IngestionOutcome
		try:
			outcome = await self._ingestion.fetch(reference)
		except IngestionError as exc:
			outcome = Failure(exc.message)
		except Exception:
			logger.exception("Ingestion adapter raised unexpectedly")
			outcome = Failure("Ingestion service error.")
		self._machine.complete_ingestion(token, outcome)

	async def _run_generation(self, token: int, kind: AssistantKind | None, history) -> None:
		outcome: GenerationOutcome
		if kind is None:
			outcome = Failure("No assistant selected.")
		else:
			try:
				outcome = await self._generation.generate(kind, history)
			except GenerationError as exc:
				outcome = Failure(exc.message)
			except Exception:
				logger.exception("Generation adapter raised unexpectedly")
				outcome = Failure("Assistant service error.")
		self._machine.complete_generation(token, outcome)
