from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Request


def now_iso() -> str:
	return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _envelope(ok: bool, request: Optional[Request], **body: Any) -> Dict[str, Any]:
	payload: Dict[str, Any] = {"ok": ok, "generated_at": now_iso()}
	payload.update({key: value for key, value in body.items() if value is not None})
	state = getattr(request, "state", None)
	for key in ("request_id", "session_id"):
		value = getattr(state, key, None)
		if value:
			payload[key] = value
	return payload


def success_response(*, request: Optional[Request] = None, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
	return _envelope(True, request, data=data)


def error_response(
	*,
	code: str,
	message: str,
	request: Optional[Request] = None,
	evidence: Optional[List[str]] = None,
) -> Dict[str, Any]:
	return _envelope(
		False,
		request,
		error={"code": code, "message": message, "evidence": list(evidence or [])},
	)
