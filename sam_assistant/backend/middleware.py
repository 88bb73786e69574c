from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from sam_assistant.backend import constants


logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
	"""Tags each request with a request id and the caller's session id.

	A request without ``X-Session-ID`` gets a fresh session id, echoed back in
	the response header so the client can keep using it.
	"""

	async def dispatch(self, request: Request, call_next) -> Response:
		request_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
		session_id = request.headers.get(constants.SESSION_HEADER, "").strip() or uuid.uuid4().hex
		request.state.request_id = request_id
		request.state.session_id = session_id
		start = time.perf_counter()
		response = await call_next(request)
		process_time = time.perf_counter() - start
		response.headers["X-Request-ID"] = request_id
		response.headers[constants.SESSION_HEADER] = session_id
		response.headers["X-Process-Time"] = f"{process_time:.6f}"
		logger.debug(
			"%s %s -> %s in %.3fs (session %s)",
			request.method,
			request.url.path,
			response.status_code,
			process_time,
			session_id,
		)
		return response
