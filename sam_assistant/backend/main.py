from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.trustedhost import TrustedHostMiddleware

from sam_assistant.backend import constants
from sam_assistant.backend.logging_config import configure_logging
from sam_assistant.backend.middleware import RequestContextMiddleware
from sam_assistant.backend.response import error_response
from sam_assistant.backend.routers import assistants, health, session


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
	configure_logging()
	app = FastAPI(
		title=constants.APP_NAME,
		version=constants.APP_VERSION,
	)
	_register_middleware(app)
	_register_handlers(app)
	_register_routers(app)
	return app


def _register_middleware(app: FastAPI) -> None:
	app.add_middleware(RequestContextMiddleware)
	app.add_middleware(
		CORSMiddleware,
		allow_origins=constants.DEFAULT_CORS_ALLOW_ORIGINS,
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
		expose_headers=[constants.SESSION_HEADER, "X-Request-ID"],
	)
	app.add_middleware(
		TrustedHostMiddleware,
		allowed_hosts=constants.DEFAULT_TRUSTED_HOSTS,
	)


def _register_routers(app: FastAPI) -> None:
	app.include_router(session.router)
	app.include_router(assistants.router)
	app.include_router(health.router)


def _error_json(
	request: Request,
	status_code: int,
	code: str,
	message: str,
	evidence: List[str] | None = None,
) -> JSONResponse:
	payload = error_response(code=code, message=message, request=request, evidence=evidence)
	return JSONResponse(status_code=status_code, content=payload)


def _detail_field(detail: Any, key: str, fallback: str) -> str:
	value = detail.get(key) if isinstance(detail, dict) else None
	if isinstance(value, str) and value.strip():
		return value.strip()
	return fallback


def _issue_text(issue: Dict[str, Any]) -> str:
	loc = ".".join(str(part) for part in issue.get("loc", []))
	msg = issue.get("msg", "Invalid request.")
	return f"{loc}: {msg}" if loc else msg


def _register_handlers(app: FastAPI) -> None:
	# Also receives fastapi.HTTPException, which subclasses the starlette one.
	@app.exception_handler(StarletteHTTPException)
	async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
		detail = exc.detail
		default_message = detail if isinstance(detail, str) else "Request failed."
		return _error_json(
			request,
			exc.status_code,
			_detail_field(detail, "code", f"http_{exc.status_code}"),
			_detail_field(detail, "message", default_message),
		)

	@app.exception_handler(RequestValidationError)
	async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
		evidence = [_issue_text(issue) for issue in exc.errors()]
		return _error_json(request, 422, "validation_error", "Request validation failed.", evidence)

	@app.exception_handler(Exception)
	async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
		logger.exception("Unhandled error on %s %s", request.method, request.url.path)
		return _error_json(request, 500, "internal_error", "Internal server error.")


app = create_app()

