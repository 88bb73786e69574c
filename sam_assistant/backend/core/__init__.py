from sam_assistant.backend.core.machine import SessionStateMachine
from sam_assistant.backend.core.message_log import MessageLog
from sam_assistant.backend.core.tracker import OperationTracker
from sam_assistant.backend.core.types import (
	AssistantKind,
	CommandResult,
	Failure,
	Message,
	MessageRole,
	OperationKind,
	OpportunityRecord,
	RejectionCode,
	SessionPhase,
)

__all__ = [
	"AssistantKind",
	"CommandResult",
	"Failure",
	"Message",
	"MessageLog",
	"MessageRole",
	"OperationKind",
	"OperationTracker",
	"OpportunityRecord",
	"RejectionCode",
	"SessionPhase",
	"SessionStateMachine",
]
