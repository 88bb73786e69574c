APP_NAME = "SAM Opportunity Assistant"
APP_VERSION = "0.3.0"
DEFAULT_CORS_ALLOW_ORIGINS = [
	"http://localhost",
	"http://127.0.0.1",
	"http://localhost:3000",
]
DEFAULT_TRUSTED_HOSTS = [
	"127.0.0.1",
	"localhost",
	"testserver",
]

SESSION_HEADER = "X-Session-ID"

DEFAULT_SESSION_TTL_SECONDS = 6 * 60 * 60
DEFAULT_INGESTION_DELAY_S = 1.5
DEFAULT_GENERATION_DELAY_S = 2.0

DEFAULT_OPENAI_MODEL = "gpt-4.1-mini"
DEFAULT_OPENAI_TIMEOUT_S = 30.0

REJECTION_STATUS_CODES = {
	"reference_invalid": 400,
	"message_invalid": 400,
	"assistant_invalid": 400,
	"operation_busy": 409,
	"phase_invalid": 409,
}
