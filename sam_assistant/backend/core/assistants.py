from __future__ import annotations

from typing import Dict, List

from sam_assistant.backend.core.types import AssistantKind


ASSISTANT_LABELS: Dict[AssistantKind, str] = {
	AssistantKind.RFI: "RFI Assistant",
	AssistantKind.SOLUTION_BRIEF: "Solution Brief Assistant",
	AssistantKind.PROPOSAL: "Proposal Assistant",
}

WELCOME_MESSAGES: Dict[AssistantKind, str] = {
	AssistantKind.RFI: (
		"I'm the RFI Assistant. I'll help you draft detailed responses to this Request for Information. "
		"What specific questions or requirements would you like to address first?"
	),
	AssistantKind.SOLUTION_BRIEF: (
		"I'm the Solution Brief Assistant. I'll help you create a technical overview that highlights your capabilities. "
		"Let's start by discussing your company's strengths related to this opportunity."
	),
	AssistantKind.PROPOSAL: (
		"I'm the Proposal Assistant. I'll help you develop a comprehensive proposal response. "
		"Let's begin by outlining the key requirements and your approach to meeting them."
	),
}


def parse_kind(value: object) -> AssistantKind | None:
	if isinstance(value, AssistantKind):
		return value
	if not isinstance(value, str):
		return None
	try:
		return AssistantKind(value.strip().lower())
	except ValueError:
		return None


def welcome_message(kind: AssistantKind) -> str:
	return WELCOME_MESSAGES[kind]


def catalog() -> List[Dict[str, str]]:
	return [
		{
			"kind": kind.value,
			"label": ASSISTANT_LABELS[kind],
			"welcome": WELCOME_MESSAGES[kind],
		}
		for kind in AssistantKind
	]
