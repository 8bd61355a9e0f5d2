"""Server-wide constants."""

PROJECT_NAME = "ChurchSync"
API_V1_STR = "/api/v1"
ORG_PREFIX = f"{API_V1_STR}/orgs/{{slug}}"
USER_ID_HEADER = "X-User-Id"
