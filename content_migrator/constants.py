"""Shared constants for the content hub migration tool."""

from __future__ import annotations

# HTTP status codes
HTTP_NO_CONTENT = 204
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_RATE_LIMIT = 429
HTTP_SERVER_ERROR_MIN = 500

# Remote service endpoints
DEFAULT_API_URL = "https://api.amplience.net/v2/content"
DEFAULT_AUTH_URL = "https://auth.amplience.net/oauth/token"
DEFAULT_PAGE_SIZE = 100

# Body schema URIs that mark an embedded reference to another content item
CONTENT_LINK_SCHEMA = (
    "http://bigcontent.io/cms/schema/v1/core#/definitions/content-link"
)
CONTENT_REFERENCE_SCHEMA = (
    "http://bigcontent.io/cms/schema/v1/core#/definitions/content-reference"
)

# Content item status values
STATUS_ACTIVE = "ACTIVE"
STATUS_ARCHIVED = "ARCHIVED"

# Publish queue defaults
PUBLISH_MAX_IN_FLIGHT = 35
PUBLISH_MAX_ATTEMPTS = 30
PUBLISH_ATTEMPT_DELAY = 1.0
PUBLISH_RATE_LIMIT_PER_MINUTE = 35

# Orchestrator defaults
MAX_CONCURRENT_WRITES = 4
DEFAULT_MAPPING_DIR = "~/.content-migrator/imports"
DEFAULT_LOG_DIR = "~/.content-migrator/logs"

# Action log entries
ACTION_CREATE = "CREATE"
ACTION_UPDATE = "UPDATE"
RESULT_SUCCESS = "SUCCESS"
RESULT_FAILURE = "FAILURE"

# Environment variables for credentials
ENV_CLIENT_ID = "CONTENT_MIGRATOR_CLIENT_ID"
ENV_CLIENT_SECRET = "CONTENT_MIGRATOR_CLIENT_SECRET"
ENV_PAT_TOKEN = "CONTENT_MIGRATOR_PAT_TOKEN"
