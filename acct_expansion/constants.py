# Path of the unprotect operation on the detokenization service
DETOKENIZE_PATH = "/v1/data/sdm-protect/cloud-protegrity/unprotect"

# Data element the remote service applies to account numbers
DATA_ELEMENT = "deACCOUNTNUM"

# Environment variables
ENV_API_ENDPOINT = "API_ENDPOINT"
ENV_AUTH_TOKEN = "AUTH_TOKEN"
ENV_API_KEY = "API_KEY"
ENV_ID_CLAIM = "ID_CLAIM"
ENV_ID_CLAIM_LEGACY = "ID-CLAIM"  # not settable on Lambda, still honored when present
ENV_ENVIRONMENT = "ENV"
ENV_LOG_LEVEL = "LOG_LEVEL"
ENV_LOG_REDACT = "LOG_REDACT"

# Environments where debug logging is switched on by default
DEBUG_ENVIRONMENTS = ("dev", "test")

# Outbound HTTP headers
HDR_CONTENT_TYPE = "Content-Type"
HDR_AUTHORIZATION = "Authorization"
HDR_API_KEY = "api-key"
HDR_ID_CLAIM = "id-claim"

CONTENT_TYPE_JSON = "application/json"

# Log identity registered with core_logging
LOG_IDENTITY = "acct_expansion"

# Response bodies longer than this are cut in log records
MAX_LOGGED_BODY = 1024
