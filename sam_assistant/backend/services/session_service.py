from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Any, Dict, List

from sam_assistant.backend import config, constants
from sam_assistant.backend.adapters import generation_adapter, ingestion_adapter
from sam_assistant.backend.config import ProviderConfigError
from sam_assistant.backend.core.machine import SessionStateMachine
from sam_assistant.backend.core.types import CommandResult
from sam_assistant.backend.services.session_controller import SessionController, render_snapshot


logger = logging.getLogger(__name__)


class SessionServiceError(Exception):
	def __init__(self, *, status_code: int, code: str, message: str):
		super().__init__(message)
		self.status_code = status_code
		self.code = code
		self.message = message


@dataclass
class _StoredSession:
	controller: SessionController
	updated_at: datetime


_STORE: Dict[str, _StoredSession] = {}
_LOCK = Lock()


def _now() -> datetime:
	return datetime.now(timezone.utc)


def _evict_expired_locked() -> None:
	now = _now()
	ttl = timedelta(seconds=config.session_ttl_seconds())
	expired: List[str] = [
		session_id for session_id, stored in _STORE.items() if now - stored.updated_at > ttl
	]
	for session_id in expired:
		_STORE.pop(session_id, None)
		logger.info("Evicted idle session %s", session_id)


def _new_controller() -> SessionController:
	try:
		return SessionController(
			ingestion=ingestion_adapter.build_ingestion_adapter(),
			generation=generation_adapter.build_generation_adapter(),
		)
	except ProviderConfigError as exc:
		raise SessionServiceError(status_code=exc.status_code, code=exc.code, message=exc.message) from exc


def get_controller(session_id: str) -> SessionController:
	with _LOCK:
		_evict_expired_locked()
		stored = _STORE.get(session_id)
		if stored is None:
			stored = _StoredSession(controller=_new_controller(), updated_at=_now())
			_STORE[session_id] = stored
			logger.info("Opened session %s", session_id)
		else:
			stored.updated_at = _now()
		return stored.controller


def find_controller(session_id: str) -> SessionController | None:
	with _LOCK:
		_evict_expired_locked()
		stored = _STORE.get(session_id)
		if stored is None:
			return None
		stored.updated_at = _now()
		return stored.controller


def session_count() -> int:
	with _LOCK:
		return len(_STORE)


def clear_sessions() -> None:
	with _LOCK:
		_STORE.clear()


def _raise_if_rejected(result: CommandResult) -> None:
	if result.accepted or result.rejection is None:
		return
	code = result.rejection.value
	raise SessionServiceError(
		status_code=constants.REJECTION_STATUS_CODES.get(code, 409),
		code=code,
		message=result.detail,
	)


def snapshot(session_id: str) -> Dict[str, Any]:
	controller = find_controller(session_id)
	if controller is None:
		return render_snapshot(SessionStateMachine())
	return controller.snapshot()


def messages(session_id: str) -> List[Dict[str, Any]]:
	return snapshot(session_id)["messages"]


async def submit_opportunity(session_id: str, reference: str, *, wait: bool = False) -> Dict[str, Any]:
	controller = get_controller(session_id)
	_raise_if_rejected(await controller.submit_opportunity_reference(reference))
	if wait:
		await controller.wait_idle()
	return controller.snapshot()


async def select_assistant(session_id: str, kind: str) -> Dict[str, Any]:
	controller = get_controller(session_id)
	_raise_if_rejected(await controller.select_assistant(kind))
	return controller.snapshot()


async def send_message(session_id: str, text: str, *, wait: bool = False) -> Dict[str, Any]:
	controller = get_controller(session_id)
	_raise_if_rejected(await controller.send_message(text))
	if wait:
		await controller.wait_idle()
	return controller.snapshot()


async def reset(session_id: str) -> Dict[str, Any]:
	controller = find_controller(session_id)
	if controller is None:
		return render_snapshot(SessionStateMachine())
	await controller.reset()
	return controller.snapshot()


def provider_status() -> Dict[str, Any]:
	try:
		configured = config.provider_mode()
	except ProviderConfigError as exc:
		raise SessionServiceError(status_code=exc.status_code, code=exc.code, message=exc.message) from exc
	warnings: List[str] = []
	if configured == "openai" and not config.openai_api_key():
		warnings.append("OpenAI API key not configured. Set OPENAI_API_KEY.")
	return {
		"provider_mode": configured,
		"effective_provider_mode": config.resolved_provider_mode(configured),
		"provider_ready": not warnings,
		"provider_warnings": warnings,
	}
