from __future__ import annotations

import asyncio
from urllib.parse import urlparse

from sam_assistant.backend import config
from sam_assistant.backend.adapters.base import IngestionAdapter, IngestionError
from sam_assistant.backend.core.types import OpportunityRecord


SAMPLE_OPPORTUNITY = OpportunityRecord(
	title="Cloud Migration Services for Department of Defense",
	agency="Department of Defense",
	solicitation_number="DOD-2025-CMS-001",
	response_due_date="April 15, 2025",
	description=(
		"This opportunity seeks cloud migration services to transition legacy systems "
		"to a secure cloud environment with FedRAMP High certification."
	),
	requirements=(
		"Experience with FedRAMP High compliance",
		"Minimum 5 years of DoD cloud migration experience",
		"Security clearance requirements for key personnel",
		"Agile methodology implementation",
	),
)


def _validate_reference(reference: str) -> str:
	cleaned = reference.strip()
	parsed = urlparse(cleaned)
	if parsed.scheme not in {"http", "https"} or not parsed.netloc:
		raise IngestionError(
			f"'{cleaned}' is not an http(s) opportunity URL.",
			code="ingestion_bad_reference",
		)
	return cleaned


class LocalIngestionAdapter:
	"""Stand-in for the SAM.gov scraping service.

	Any well-formed http(s) URL resolves to the same sample notice after a short delay.
	"""

	def __init__(self, *, delay_s: float | None = None, record: OpportunityRecord = SAMPLE_OPPORTUNITY):
		self._delay_s = config.ingestion_delay_s() if delay_s is None else delay_s
		self._record = record

	async def fetch(self, reference: str) -> OpportunityRecord:
		_validate_reference(reference)
		if self._delay_s > 0:
			await asyncio.sleep(self._delay_s)
		return self._record


def build_ingestion_adapter() -> IngestionAdapter:
	return LocalIngestionAdapter()
