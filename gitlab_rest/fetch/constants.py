"""HTTP constants for the fetch layer.

Centralizes status ranges, header names and auth parameter names shared by
the request executor and the paginated fetcher.
"""

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300

# Authentication
PRIVATE_TOKEN_PARAM = "private_token"
PRIVATE_TOKEN_HEADER = "PRIVATE-TOKEN"

# Request headers
HEADER_ACCEPT = "Accept"
HEADER_ACCEPT_ENCODING = "Accept-Encoding"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_CONTENT_LENGTH = "Content-Length"
HEADER_USER_AGENT = "User-Agent"
JSON_CONTENT_TYPE = "application/json"
GZIP_ENCODING = "gzip"

# Pagination
HEADER_LINK = "Link"
LINK_REL_NEXT = "next"

# Error translation
EMPTY_RESPONSE_MESSAGE = "Empty Response"
UNPARSABLE_MESSAGE_TEMPLATE = "Error message cannot be parsed ({raw})"

# Chunk size for streaming reads
DEFAULT_CHUNK_SIZE = 8192
