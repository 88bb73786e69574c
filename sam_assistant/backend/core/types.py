from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class SessionPhase(str, Enum):
	AWAITING_OPPORTUNITY = "awaiting_opportunity"
	INGESTING_OPPORTUNITY = "ingesting_opportunity"
	SELECTING_ASSISTANT = "selecting_assistant"
	CONVERSING = "conversing"


class AssistantKind(str, Enum):
	RFI = "rfi"
	SOLUTION_BRIEF = "solution"
	PROPOSAL = "proposal"


class MessageRole(str, Enum):
	USER = "user"
	ASSISTANT = "assistant"
	SYSTEM = "system"


class OperationKind(str, Enum):
	INGESTION = "ingestion"
	GENERATION = "generation"


class RejectionCode(str, Enum):
	REFERENCE_INVALID = "reference_invalid"
	MESSAGE_INVALID = "message_invalid"
	ASSISTANT_INVALID = "assistant_invalid"
	OPERATION_BUSY = "operation_busy"
	PHASE_INVALID = "phase_invalid"


@dataclass(frozen=True)
class Message:
	role: MessageRole
	content: str
	sequence_number: int
	created_at: str

	def as_dict(self) -> Dict[str, Any]:
		return {
			"role": self.role.value,
			"content": self.content,
			"sequence_number": self.sequence_number,
			"created_at": self.created_at,
		}


@dataclass(frozen=True)
class OpportunityRecord:
	title: str
	agency: str
	solicitation_number: str
	response_due_date: str
	description: str
	requirements: Tuple[str, ...] = field(default_factory=tuple)

	def __post_init__(self) -> None:
		object.__setattr__(self, "requirements", tuple(self.requirements))

	def as_dict(self) -> Dict[str, Any]:
		return {
			"title": self.title,
			"agency": self.agency,
			"solicitation_number": self.solicitation_number,
			"response_due_date": self.response_due_date,
			"description": self.description,
			"requirements": list(self.requirements),
		}


@dataclass(frozen=True)
class AsyncOperation:
	kind: OperationKind
	token: int


@dataclass(frozen=True)
class Failure:
	reason: str = ""


IngestionOutcome = Union[OpportunityRecord, Failure]
GenerationOutcome = Union[str, Failure]


@dataclass(frozen=True)
class CommandResult:
	accepted: bool
	rejection: Optional[RejectionCode] = None
	detail: str = ""
	token: Optional[int] = None

	@classmethod
	def ok(cls, token: Optional[int] = None) -> "CommandResult":
		return cls(accepted=True, token=token)

	@classmethod
	def rejected(cls, code: RejectionCode, detail: str) -> "CommandResult":
		return cls(accepted=False, rejection=code, detail=detail)
