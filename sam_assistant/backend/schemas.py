from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApiError(BaseModel):
	model_config = ConfigDict(extra="forbid")

	code: str
	message: str
	evidence: List[str] = Field(default_factory=list)


class ApiEnvelope(BaseModel):
	model_config = ConfigDict(extra="allow")

	ok: bool
	generated_at: str
	request_id: Optional[str] = None
	session_id: Optional[str] = None
	data: Optional[Dict[str, Any]] = None
	error: Optional[ApiError] = None


class SubmitOpportunityRequest(BaseModel):
	model_config = ConfigDict(extra="forbid")

	reference: str = Field(..., description="Opportunity URL, e.g. a SAM.gov notice link.")


class SelectAssistantRequest(BaseModel):
	model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

	kind: str = Field(..., min_length=1, description="rfi | solution | proposal")


class SendMessageRequest(BaseModel):
	model_config = ConfigDict(extra="forbid")

	text: str = Field(..., description="Message for the active assistant.")


class MessageData(BaseModel):
	model_config = ConfigDict(extra="forbid")

	role: Literal["user", "assistant", "system"]
	content: str
	sequence_number: int
	created_at: str


class OpportunityData(BaseModel):
	model_config = ConfigDict(extra="forbid")

	title: str
	agency: str
	solicitation_number: str
	response_due_date: str
	description: str
	requirements: List[str] = Field(default_factory=list)


class AssistantData(BaseModel):
	model_config = ConfigDict(extra="forbid")

	kind: Literal["rfi", "solution", "proposal"]
	label: str


class SessionData(BaseModel):
	model_config = ConfigDict(extra="forbid")

	phase: Literal["awaiting_opportunity", "ingesting_opportunity", "selecting_assistant", "conversing"]
	opportunity: Optional[OpportunityData] = None
	assistant: Optional[AssistantData] = None
	messages: List[MessageData] = Field(default_factory=list)
	operation_pending: bool = False
	pending_operation: Optional[Literal["ingestion", "generation"]] = None
