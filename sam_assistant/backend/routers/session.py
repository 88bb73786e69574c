from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request

from sam_assistant.backend.response import success_response
from sam_assistant.backend.schemas import (
	ApiEnvelope,
	SelectAssistantRequest,
	SendMessageRequest,
	SessionData,
	SubmitOpportunityRequest,
)
from sam_assistant.backend.services import session_service


router = APIRouter(prefix="/api/session", tags=["session"])


def _session_id(request: Request) -> str:
	return request.state.session_id


def _service_error(exc: session_service.SessionServiceError) -> HTTPException:
	return HTTPException(
		status_code=exc.status_code,
		detail={"code": exc.code, "message": exc.message},
	)


def _session_payload(request: Request, snapshot: Dict[str, Any]) -> Dict[str, Any]:
	session = SessionData.model_validate(snapshot)
	return success_response(request=request, data={"session": session.model_dump(mode="json")})


@router.get("", response_model=ApiEnvelope)
async def get_session(request: Request):
	try:
		snapshot = session_service.snapshot(_session_id(request))
	except session_service.SessionServiceError as exc:
		raise _service_error(exc) from exc
	return _session_payload(request, snapshot)


@router.post("/opportunity", response_model=ApiEnvelope)
async def submit_opportunity(request: Request, payload: SubmitOpportunityRequest, wait: bool = False):
	try:
		snapshot = await session_service.submit_opportunity(
			_session_id(request),
			payload.reference,
			wait=wait,
		)
	except session_service.SessionServiceError as exc:
		raise _service_error(exc) from exc
	return _session_payload(request, snapshot)


@router.post("/assistant", response_model=ApiEnvelope)
async def select_assistant(request: Request, payload: SelectAssistantRequest):
	try:
		snapshot = await session_service.select_assistant(_session_id(request), payload.kind)
	except session_service.SessionServiceError as exc:
		raise _service_error(exc) from exc
	return _session_payload(request, snapshot)


@router.get("/messages", response_model=ApiEnvelope)
async def list_messages(request: Request):
	try:
		messages = session_service.messages(_session_id(request))
	except session_service.SessionServiceError as exc:
		raise _service_error(exc) from exc
	return success_response(request=request, data={"messages": messages})


@router.post("/messages", response_model=ApiEnvelope)
async def send_message(request: Request, payload: SendMessageRequest, wait: bool = False):
	try:
		snapshot = await session_service.send_message(
			_session_id(request),
			payload.text,
			wait=wait,
		)
	except session_service.SessionServiceError as exc:
		raise _service_error(exc) from exc
	return _session_payload(request, snapshot)


@router.post("/reset", response_model=ApiEnvelope)
async def reset_session(request: Request):
	try:
		snapshot = await session_service.reset(_session_id(request))
	except session_service.SessionServiceError as exc:
		raise _service_error(exc) from exc
	return _session_payload(request, snapshot)
