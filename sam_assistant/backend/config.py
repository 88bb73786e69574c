from __future__ import annotations

import os
from typing import Literal

from sam_assistant.backend import constants


ProviderMode = Literal["auto", "openai", "local"]
EffectiveProviderMode = Literal["openai", "local"]


class ProviderConfigError(Exception):
	def __init__(self, message: str):
		super().__init__(message)
		self.status_code = 503
		self.code = "provider_unconfigured"
		self.message = message


def _int_env(name: str, default: int, minimum: int = 1) -> int:
	raw = os.getenv(name, "").strip()
	if not raw:
		return default
	try:
		value = int(raw)
	except ValueError:
		return default
	return value if value >= minimum else default


def _float_env(name: str, default: float, minimum: float = 0.0) -> float:
	raw = os.getenv(name, "").strip()
	if not raw:
		return default
	try:
		value = float(raw)
	except ValueError:
		return default
	return value if value >= minimum else default


def session_ttl_seconds() -> int:
	return _int_env("SAM_SESSION_TTL_S", constants.DEFAULT_SESSION_TTL_SECONDS, minimum=60)


def ingestion_delay_s() -> float:
	return _float_env("SAM_INGESTION_DELAY_S", constants.DEFAULT_INGESTION_DELAY_S)


def generation_delay_s() -> float:
	return _float_env("SAM_GENERATION_DELAY_S", constants.DEFAULT_GENERATION_DELAY_S)


def log_level() -> str:
	return os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"


def provider_mode() -> ProviderMode:
	mode = os.getenv("ASSISTANT_PROVIDER_MODE", "auto").strip().lower() or "auto"
	if mode not in {"auto", "openai", "local"}:
		raise ProviderConfigError("ASSISTANT_PROVIDER_MODE must be one of: auto, openai, local.")
	return mode  # type: ignore[return-value]


def openai_api_key() -> str:
	return os.getenv("OPENAI_API_KEY", "").strip()


def resolved_provider_mode(configured_mode: ProviderMode) -> EffectiveProviderMode:
	if configured_mode == "local":
		return "local"
	if configured_mode == "openai":
		return "openai"
	return "openai" if openai_api_key() else "local"


def openai_model() -> str:
	return os.getenv("ASSISTANT_OPENAI_MODEL", constants.DEFAULT_OPENAI_MODEL).strip() or constants.DEFAULT_OPENAI_MODEL


def openai_timeout_s() -> float:
	raw = os.getenv("ASSISTANT_OPENAI_TIMEOUT_S", "").strip()
	if not raw:
		return constants.DEFAULT_OPENAI_TIMEOUT_S
	try:
		value = float(raw)
	except ValueError as exc:
		raise ProviderConfigError("ASSISTANT_OPENAI_TIMEOUT_S must be numeric.") from exc
	if value <= 0:
		raise ProviderConfigError("ASSISTANT_OPENAI_TIMEOUT_S must be greater than zero.")
	return value
