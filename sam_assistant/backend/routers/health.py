from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from sam_assistant.backend import constants
from sam_assistant.backend.response import success_response
from sam_assistant.backend.schemas import ApiEnvelope
from sam_assistant.backend.services import session_service


router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("", response_model=ApiEnvelope)
async def get_health(request: Request):
	try:
		provider = session_service.provider_status()
	except session_service.SessionServiceError as exc:
		raise HTTPException(
			status_code=exc.status_code,
			detail={"code": exc.code, "message": exc.message},
		) from exc
	return success_response(
		request=request,
		data={
			"service": constants.APP_NAME,
			"version": constants.APP_VERSION,
			**provider,
		},
	)
