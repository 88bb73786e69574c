import os
from unittest import TestCase
from unittest.mock import patch

from fastapi.testclient import TestClient

from sam_assistant.backend.core import assistants
from sam_assistant.backend.core.types import AssistantKind
from sam_assistant.backend.main import app
from sam_assistant.backend.services import session_service


_TITLE = "Cloud Migration Services for Department of Defense"


class SessionApiTests(TestCase):
	def setUp(self) -> None:
		self._env = patch.dict(
			os.environ,
			{
				"ASSISTANT_PROVIDER_MODE": "local",
				"SAM_INGESTION_DELAY_S": "0",
				"SAM_GENERATION_DELAY_S": "0",
			},
			clear=False,
		)
		self._env.start()
		session_service.clear_sessions()
		self.client = TestClient(app)
		self.client.__enter__()
		self.headers = {"X-Session-ID": "session-api-test"}

	def tearDown(self) -> None:
		self.client.__exit__(None, None, None)
		session_service.clear_sessions()
		self._env.stop()

	def _post(self, path: str, json=None, params=None):
		return self.client.post(path, json=json, params=params, headers=self.headers)

	def _load(self):
		return self._post("/api/session/opportunity", json={"reference": "https://x/opp/1"}, params={"wait": "true"})

	def test_new_session_is_awaiting_opportunity(self) -> None:
		response = self.client.get("/api/session", headers=self.headers)
		self.assertEqual(response.status_code, 200)
		payload = response.json()
		self.assertTrue(payload["ok"])
		self.assertEqual(payload["session_id"], "session-api-test")
		session = payload["data"]["session"]
		self.assertEqual(session["phase"], "awaiting_opportunity")
		self.assertEqual(session["messages"], [])
		self.assertFalse(session["operation_pending"])

	def test_missing_session_header_mints_session_id(self) -> None:
		response = self.client.get("/api/session")
		self.assertEqual(response.status_code, 200)
		minted = response.headers.get("X-Session-ID")
		self.assertTrue(minted)
		self.assertEqual(response.json()["session_id"], minted)

	def test_full_conversation_flow(self) -> None:
		loaded = self._load()
		self.assertEqual(loaded.status_code, 200)
		session = loaded.json()["data"]["session"]
		self.assertEqual(session["phase"], "selecting_assistant")
		self.assertEqual(session["opportunity"]["title"], _TITLE)
		self.assertEqual(len(session["messages"]), 1)
		self.assertEqual(session["messages"][0]["role"], "system")
		self.assertIn(_TITLE, session["messages"][0]["content"])

		selected = self._post("/api/session/assistant", json={"kind": "rfi"})
		self.assertEqual(selected.status_code, 200)
		session = selected.json()["data"]["session"]
		self.assertEqual(session["phase"], "conversing")
		self.assertEqual(session["assistant"], {"kind": "rfi", "label": "RFI Assistant"})
		self.assertEqual(session["messages"][-1]["content"], assistants.WELCOME_MESSAGES[AssistantKind.RFI])

		sent = self._post("/api/session/messages", json={"text": "What about clearances?"}, params={"wait": "true"})
		self.assertEqual(sent.status_code, 200)
		session = sent.json()["data"]["session"]
		roles = [message["role"] for message in session["messages"]]
		self.assertEqual(roles, ["system", "assistant", "user", "assistant"])
		self.assertEqual([m["sequence_number"] for m in session["messages"]], [1, 2, 3, 4])
		self.assertFalse(session["operation_pending"])

		listed = self.client.get("/api/session/messages", headers=self.headers)
		self.assertEqual(len(listed.json()["data"]["messages"]), 4)

	def test_blank_message_is_rejected(self) -> None:
		self._load()
		self._post("/api/session/assistant", json={"kind": "proposal"})
		for text in ("", "   "):
			response = self._post("/api/session/messages", json={"text": text})
			self.assertEqual(response.status_code, 400)
			payload = response.json()
			self.assertFalse(payload["ok"])
			self.assertEqual(payload["error"]["code"], "message_invalid")
		session = self.client.get("/api/session", headers=self.headers).json()["data"]["session"]
		self.assertEqual(len(session["messages"]), 2)

	def test_blank_reference_is_rejected(self) -> None:
		response = self._post("/api/session/opportunity", json={"reference": "  "})
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.json()["error"]["code"], "reference_invalid")

	def test_select_assistant_before_opportunity_is_conflict(self) -> None:
		response = self._post("/api/session/assistant", json={"kind": "rfi"})
		self.assertEqual(response.status_code, 409)
		self.assertEqual(response.json()["error"]["code"], "phase_invalid")

	def test_unknown_assistant_kind_is_bad_request(self) -> None:
		self._load()
		response = self._post("/api/session/assistant", json={"kind": "capture"})
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.json()["error"]["code"], "assistant_invalid")

	def test_failed_ingestion_reports_system_message(self) -> None:
		response = self._post("/api/session/opportunity", json={"reference": "not-a-url"}, params={"wait": "true"})
		self.assertEqual(response.status_code, 200)
		session = response.json()["data"]["session"]
		self.assertEqual(session["phase"], "awaiting_opportunity")
		self.assertIn("Error extracting opportunity data", session["messages"][-1]["content"])

		retry = self._load()
		self.assertEqual(retry.json()["data"]["session"]["phase"], "selecting_assistant")

	def test_reset_clears_session(self) -> None:
		self._load()
		self._post("/api/session/assistant", json={"kind": "solution"})
		response = self._post("/api/session/reset")
		self.assertEqual(response.status_code, 200)
		session = response.json()["data"]["session"]
		self.assertEqual(session["phase"], "awaiting_opportunity")
		self.assertIsNone(session["opportunity"])
		self.assertIsNone(session["assistant"])
		self.assertEqual(session["messages"], [])

	def test_sessions_are_isolated_by_header(self) -> None:
		self._load()
		other = self.client.get("/api/session", headers={"X-Session-ID": "someone-else"})
		self.assertEqual(other.json()["data"]["session"]["phase"], "awaiting_opportunity")

	def test_read_only_requests_do_not_open_sessions(self) -> None:
		self.client.get("/api/session")
		self.client.get("/api/session")
		self.client.get("/api/session", headers={"X-Session-ID": "never-used"})
		self.client.get("/api/session/messages", headers={"X-Session-ID": "never-used"})
		reset = self.client.post("/api/session/reset", headers={"X-Session-ID": "never-used"})
		self.assertEqual(reset.status_code, 200)
		self.assertEqual(reset.json()["data"]["session"]["phase"], "awaiting_opportunity")
		self.assertEqual(session_service.session_count(), 0)

		self._load()
		self.assertEqual(session_service.session_count(), 1)
		self.client.get("/api/session", headers=self.headers)
		self.assertEqual(session_service.session_count(), 1)

	def test_rejection_envelope_carries_session_id(self) -> None:
		response = self._post("/api/session/assistant", json={"kind": "rfi"})
		self.assertEqual(response.status_code, 409)
		payload = response.json()
		self.assertFalse(payload["ok"])
		self.assertEqual(payload["session_id"], "session-api-test")
		self.assertTrue(payload["request_id"])
		self.assertEqual(payload["error"]["evidence"], [])

	def test_missing_body_field_is_validation_error(self) -> None:
		response = self._post("/api/session/messages", json={})
		self.assertEqual(response.status_code, 422)
		payload = response.json()
		self.assertEqual(payload["error"]["code"], "validation_error")
		self.assertTrue(payload["error"]["evidence"])


class SessionApiPendingTests(TestCase):
	def setUp(self) -> None:
		self._env = patch.dict(
			os.environ,
			{
				"ASSISTANT_PROVIDER_MODE": "local",
				"SAM_INGESTION_DELAY_S": "0",
				"SAM_GENERATION_DELAY_S": "30",
			},
			clear=False,
		)
		self._env.start()
		session_service.clear_sessions()
		self.client = TestClient(app)
		self.client.__enter__()
		self.headers = {"X-Session-ID": "session-pending-test"}

	def tearDown(self) -> None:
		self.client.__exit__(None, None, None)
		session_service.clear_sessions()
		self._env.stop()

	def test_second_message_while_generating_is_busy_and_reset_discards_reply(self) -> None:
		self.client.post(
			"/api/session/opportunity",
			json={"reference": "https://x/opp/1"},
			params={"wait": "true"},
			headers=self.headers,
		)
		self.client.post("/api/session/assistant", json={"kind": "rfi"}, headers=self.headers)

		first = self.client.post("/api/session/messages", json={"text": "What about clearances?"}, headers=self.headers)
		self.assertEqual(first.status_code, 200)
		session = first.json()["data"]["session"]
		self.assertTrue(session["operation_pending"])
		self.assertEqual(session["pending_operation"], "generation")
		self.assertEqual(session["messages"][-1]["role"], "user")

		second = self.client.post("/api/session/messages", json={"text": "second"}, headers=self.headers)
		self.assertEqual(second.status_code, 409)
		self.assertEqual(second.json()["error"]["code"], "operation_busy")

		reset = self.client.post("/api/session/reset", headers=self.headers)
		session = reset.json()["data"]["session"]
		self.assertEqual(session["messages"], [])
		self.assertFalse(session["operation_pending"])


class CatalogAndHealthApiTests(TestCase):
	def setUp(self) -> None:
		self.client = TestClient(app)

	def test_assistant_catalog_lists_three_kinds(self) -> None:
		response = self.client.get("/api/assistants")
		self.assertEqual(response.status_code, 200)
		catalog = response.json()["data"]["assistants"]
		self.assertEqual([item["kind"] for item in catalog], ["rfi", "solution", "proposal"])
		self.assertEqual(catalog[1]["label"], "Solution Brief Assistant")

	def test_health_reports_provider_mode(self) -> None:
		with patch.dict(os.environ, {"ASSISTANT_PROVIDER_MODE": "local"}, clear=False):
			response = self.client.get("/api/health")
		self.assertEqual(response.status_code, 200)
		data = response.json()["data"]
		self.assertEqual(data["provider_mode"], "local")
		self.assertEqual(data["effective_provider_mode"], "local")
		self.assertTrue(data["provider_ready"])

	def test_health_rejects_invalid_provider_mode(self) -> None:
		with patch.dict(os.environ, {"ASSISTANT_PROVIDER_MODE": "mystery"}, clear=False):
			response = self.client.get("/api/health")
		self.assertEqual(response.status_code, 503)
		self.assertEqual(response.json()["error"]["code"], "provider_unconfigured")

	def test_unknown_route_uses_error_envelope(self) -> None:
		response = self.client.get("/api/nowhere")
		self.assertEqual(response.status_code, 404)
		payload = response.json()
		self.assertFalse(payload["ok"])
		self.assertEqual(payload["error"]["code"], "http_404")
