"""HTTP constants for title lookups."""

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300

# Chunk size for streaming reads
DEFAULT_CHUNK_SIZE = 8192

# Only the document head is needed to find a title
TITLE_MAX_LENGTH = 500
