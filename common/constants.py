"""Protocol-wide constants shared by the uploader and the CLI."""

# Part of the wire protocol: changing it changes every checksum.
CHUNK_SIZE_BYTES: int = 2_000_000

CHECKSUM_MODULUS: int = 400_000_000

DEFAULT_MAX_RETRIES: int = 3
DEFAULT_RETRY_DELAY_SECONDS: float = 1.0

DEFAULT_CONTENT_TYPE: str = "application/octet-stream"
DEFAULT_FILENAME: str = "file"
CONTENT_ENCODING_IDENTITY: str = "Identity"

DEFAULT_STORE_HOST: str = "http://127.0.0.1:8080"
DEFAULT_REQUEST_TIMEOUT_SECONDS: float = 30.0
