from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sam_assistant.backend.core import assistants
from sam_assistant.backend.core.message_log import MessageLog
from sam_assistant.backend.core.tracker import OperationTracker
from sam_assistant.backend.core.types import (
	AssistantKind,
	AsyncOperation,
	CommandResult,
	Failure,
	GenerationOutcome,
	IngestionOutcome,
	Message,
	MessageRole,
	OperationKind,
	OpportunityRecord,
	RejectionCode,
	SessionPhase,
)


logger = logging.getLogger(__name__)

_INGESTION_SUCCESS_TEMPLATE = (
	'Successfully extracted opportunity data for "{title}". '
	"Please select an AI assistant to begin working on this opportunity."
)
_INGESTION_FAILURE_TEXT = "Error extracting opportunity data. Please check the URL and try again."
_GENERATION_FAILURE_TEXT = "The assistant could not generate a response. Please try again."


@dataclass
class Session:
	phase: SessionPhase = SessionPhase.AWAITING_OPPORTUNITY
	opportunity: OpportunityRecord | None = None
	assistant_kind: AssistantKind | None = None
	log: MessageLog = field(default_factory=MessageLog)


def _failure_text(base: str, failure: Failure) -> str:
	reason = failure.reason.strip()
	return f"{base} ({reason})" if reason else base


class SessionStateMachine:
	"""Phase transitions for one opportunity-engagement session.

	Commands return a ``CommandResult``; a rejected command leaves the session
	untouched. Collaborator results come back through ``complete_ingestion`` and
	``complete_generation`` with the token minted when the call started, and
	are dropped when that token is no longer current.
	"""

	def __init__(self) -> None:
		self._session = Session()
		self._tracker = OperationTracker()

	@property
	def phase(self) -> SessionPhase:
		return self._session.phase

	@property
	def opportunity(self) -> OpportunityRecord | None:
		return self._session.opportunity

	@property
	def assistant_kind(self) -> AssistantKind | None:
		return self._session.assistant_kind

	@property
	def message_log(self) -> MessageLog:
		return self._session.log

	@property
	def is_operation_pending(self) -> bool:
		return self._tracker.is_pending

	@property
	def pending_operation(self) -> AsyncOperation | None:
		return self._tracker.outstanding

	def submit_opportunity_reference(self, reference: str) -> CommandResult:
		if self._tracker.is_pending:
			return self._reject(RejectionCode.OPERATION_BUSY, "Another operation is still in progress.")
		if self._session.phase is not SessionPhase.AWAITING_OPPORTUNITY:
			return self._reject(RejectionCode.PHASE_INVALID, "An opportunity is already loaded; reset the session first.")
		if not isinstance(reference, str) or not reference.strip():
			return self._reject(RejectionCode.REFERENCE_INVALID, "Opportunity reference must not be blank.")
		operation = self._tracker.begin(OperationKind.INGESTION)
		if operation is None:
			return self._reject(RejectionCode.OPERATION_BUSY, "Another operation is still in progress.")
		self._transition(SessionPhase.INGESTING_OPPORTUNITY)
		return CommandResult.ok(token=operation.token)

	def complete_ingestion(self, token: int, outcome: IngestionOutcome) -> bool:
		if not self._tracker.complete(token, OperationKind.INGESTION):
			logger.debug("Discarding stale ingestion result for token %s", token)
			return False
		session = self._session
		if isinstance(outcome, OpportunityRecord):
			session.opportunity = outcome
			session.log.append(MessageRole.SYSTEM, _INGESTION_SUCCESS_TEMPLATE.format(title=outcome.title))
			self._transition(SessionPhase.SELECTING_ASSISTANT)
		else:
			failure = outcome if isinstance(outcome, Failure) else Failure()
			logger.warning("Opportunity ingestion failed: %s", failure.reason or "no reason given")
			session.log.append(MessageRole.SYSTEM, _failure_text(_INGESTION_FAILURE_TEXT, failure))
			self._transition(SessionPhase.AWAITING_OPPORTUNITY)
		return True

	def select_assistant(self, kind: AssistantKind | str) -> CommandResult:
		if self._session.phase is not SessionPhase.SELECTING_ASSISTANT:
			return self._reject(RejectionCode.PHASE_INVALID, "An assistant can only be selected right after an opportunity is loaded.")
		parsed = assistants.parse_kind(kind)
		if parsed is None:
			return self._reject(RejectionCode.ASSISTANT_INVALID, f"Unknown assistant kind: {kind!r}.")
		self._session.assistant_kind = parsed
		self._session.log.append(MessageRole.ASSISTANT, assistants.welcome_message(parsed))
		self._transition(SessionPhase.CONVERSING)
		return CommandResult.ok()

	def send_message(self, text: str) -> CommandResult:
		if self._session.phase is not SessionPhase.CONVERSING:
			return self._reject(RejectionCode.PHASE_INVALID, "Select an assistant before sending messages.")
		if not isinstance(text, str) or not text.strip():
			return self._reject(RejectionCode.MESSAGE_INVALID, "Message must not be blank.")
		operation = self._tracker.begin(OperationKind.GENERATION)
		if operation is None:
			return self._reject(RejectionCode.OPERATION_BUSY, "Wait for the assistant to reply before sending another message.")
		self._session.log.append(MessageRole.USER, text)
		return CommandResult.ok(token=operation.token)

	def complete_generation(self, token: int, outcome: GenerationOutcome) -> bool:
		if not self._tracker.complete(token, OperationKind.GENERATION):
			logger.debug("Discarding stale generation result for token %s", token)
			return False
		if isinstance(outcome, str):
			self._session.log.append(MessageRole.ASSISTANT, outcome)
		else:
			failure = outcome if isinstance(outcome, Failure) else Failure()
			logger.warning("Assistant generation failed: %s", failure.reason or "no reason given")
			self._session.log.append(MessageRole.SYSTEM, _failure_text(_GENERATION_FAILURE_TEXT, failure))
		return True

	def reset(self) -> CommandResult:
		self._tracker.cancel()
		previous = self._session.phase
		self._session = Session()
		logger.info("Session reset from %s", previous.value)
		return CommandResult.ok()

	def history(self) -> tuple[Message, ...]:
		return self._session.log.all()

	def _transition(self, target: SessionPhase) -> None:
		previous = self._session.phase
		self._session.phase = target
		if previous is not target:
			logger.info("Session phase %s -> %s", previous.value, target.value)

	def _reject(self, code: RejectionCode, detail: str) -> CommandResult:
		logger.info("Rejected command (%s) in phase %s", code.value, self._session.phase.value)
		return CommandResult.rejected(code, detail)
