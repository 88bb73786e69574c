from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Sequence

from sam_assistant.backend import config
from sam_assistant.backend.adapters.base import GenerationAdapter, GenerationError
from sam_assistant.backend.config import ProviderConfigError
from sam_assistant.backend.core.types import AssistantKind, Message, MessageRole


_LOCAL_REPLIES: Dict[AssistantKind, str] = {
	AssistantKind.RFI: (
		"Based on the RFI requirements, I've drafted the following response that addresses their questions "
		"about cloud migration experience:\n\n"
		"Our organization has successfully completed 15+ DoD cloud migrations over the past 8 years, including "
		"projects with similar scope to this opportunity. All migrations were completed on schedule and within "
		"budget, with zero security incidents during transition periods."
	),
	AssistantKind.SOLUTION_BRIEF: (
		"Here's a technical solution approach that emphasizes your strengths:\n\n"
		"Our phased migration methodology minimizes disruption while ensuring continuous operation. Phase 1 "
		"includes comprehensive assessment and planning, Phase 2 covers data migration with parallel systems, "
		"and Phase 3 implements final cutover with performance validation."
	),
	AssistantKind.PROPOSAL: (
		"I've analyzed the requirements and prepared the following proposal components:\n\n"
		"1. Technical Approach: Utilizing our proven 5-step migration framework\n"
		"2. Past Performance: Highlighting 3 similar DoD cloud migrations\n"
		"3. Personnel: Recommending a team structure with 8 key roles\n"
		"4. Pricing: Suggesting a phased pricing model with milestone payments"
	),
}

_OPENAI_INSTRUCTIONS: Dict[AssistantKind, str] = {
	AssistantKind.RFI: (
		"You help a government contractor draft responses to a Request for Information. "
		"Answer the agency's questions directly, cite relevant experience, and keep a formal tone."
	),
	AssistantKind.SOLUTION_BRIEF: (
		"You help a government contractor write a solution brief: a concise technical overview "
		"of their approach and differentiators for the opportunity under discussion."
	),
	AssistantKind.PROPOSAL: (
		"You help a government contractor outline a proposal response. Organize output around "
		"technical approach, past performance, personnel and pricing."
	),
}

_OPENAI_ROLES = {
	MessageRole.USER: "user",
	MessageRole.ASSISTANT: "assistant",
	MessageRole.SYSTEM: "developer",
}


class LocalGenerationAdapter:
	def __init__(self, *, delay_s: float | None = None):
		self._delay_s = config.generation_delay_s() if delay_s is None else delay_s

	async def generate(self, kind: AssistantKind, history: Sequence[Message]) -> str:
		if self._delay_s > 0:
			await asyncio.sleep(self._delay_s)
		return _LOCAL_REPLIES[kind]


def _build_openai_client(*, api_key: str, timeout_s: float):
	try:
		from openai import OpenAI
	except ImportError as exc:
		raise ProviderConfigError("OpenAI SDK not installed. Add 'openai' dependency.") from exc
	return OpenAI(api_key=api_key, timeout=timeout_s)


def _openai_input(kind: AssistantKind, history: Sequence[Message]) -> List[Dict[str, Any]]:
	items: List[Dict[str, Any]] = [{"role": "system", "content": _OPENAI_INSTRUCTIONS[kind]}]
	for message in history:
		items.append({"role": _OPENAI_ROLES[message.role], "content": message.content})
	return items


def _extract_response_text(response: Any) -> str:
	output_text = getattr(response, "output_text", None)
	if isinstance(output_text, str) and output_text.strip():
		return output_text.strip()

	output = getattr(response, "output", None)
	if not isinstance(output, list):
		return ""
	parts: List[str] = []
	for item in output:
		content = getattr(item, "content", None)
		if content is None and isinstance(item, dict):
			content = item.get("content")
		if not isinstance(content, list):
			continue
		for chunk in content:
			text = getattr(chunk, "text", None)
			if text is None and isinstance(chunk, dict):
				text = chunk.get("text")
			if isinstance(text, str) and text.strip():
				parts.append(text.strip())
	return "\n".join(parts).strip()


def _openai_error(exc: Exception) -> GenerationError:
	name = exc.__class__.__name__
	if isinstance(exc, TimeoutError) or name == "APITimeoutError":
		return GenerationError("Assistant provider timed out.", code="generation_timeout")
	return GenerationError("Assistant provider request failed.", code="generation_provider_error")


class OpenAIGenerationAdapter:
	def __init__(self, *, api_key: str, model: str, timeout_s: float, client: Any = None):
		if not api_key and client is None:
			raise ProviderConfigError("OpenAI API key not configured. Set OPENAI_API_KEY.")
		self._model = model
		self._client = client if client is not None else _build_openai_client(api_key=api_key, timeout_s=timeout_s)

	@property
	def model(self) -> str:
		return self._model

	def _generate_blocking(self, kind: AssistantKind, history: Sequence[Message]) -> str:
		try:
			response = self._client.responses.create(
				model=self._model,
				input=_openai_input(kind, history),
			)
		except Exception as exc:
			raise _openai_error(exc) from exc
		text = _extract_response_text(response)
		if not text:
			raise GenerationError("Assistant provider returned an empty response.", code="generation_empty")
		return text

	async def generate(self, kind: AssistantKind, history: Sequence[Message]) -> str:
		return await asyncio.to_thread(self._generate_blocking, kind, tuple(history))


def build_generation_adapter() -> GenerationAdapter:
	mode = config.resolved_provider_mode(config.provider_mode())
	if mode == "openai":
		return OpenAIGenerationAdapter(
			api_key=config.openai_api_key(),
			model=config.openai_model(),
			timeout_s=config.openai_timeout_s(),
		)
	return LocalGenerationAdapter()
