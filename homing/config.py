"""
Configuration constants for the homing client.
"""

# --- Streaming ---
BUFFER_SIZE = 32 * 1024          # Chunk size (bytes) for file reads and pipe reads
PIPE_CAPACITY = 256 * 1024       # Max bytes buffered between producer and transport
DEFAULT_CONTENT_TYPE = "application/octet-stream"  # Per-part content type

# --- Networking ---
UDP_PORT = 5001                  # Default port for presence broadcasts
DEFAULT_TIMEOUT = 30             # Seconds the CLI allows an operation before its deadline

# --- Crypto ---
NONCE_SIZE = 12                  # AES-GCM nonce length, stored as ciphertext prefix

# --- Secure delete ---
SHRED_CHUNK_SIZE = 1 << 21       # 2 MiB of zeros per overwrite write
