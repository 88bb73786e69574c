from __future__ import annotations

from fastapi import APIRouter, Request

from sam_assistant.backend.core import assistants
from sam_assistant.backend.response import success_response
from sam_assistant.backend.schemas import ApiEnvelope


router = APIRouter(prefix="/api/assistants", tags=["assistants"])


@router.get("", response_model=ApiEnvelope)
async def list_assistants(request: Request):
	return success_response(
		request=request,
		data={"assistants": assistants.catalog()},
	)
