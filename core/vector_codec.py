from typing import List, Sequence
import numpy as np

# Little-endian float32, the layout RediSearch expects for FLOAT32 vectors.
WIRE_DTYPE = np.dtype("<f4")
BYTES_PER_FLOAT = WIRE_DTYPE.itemsize


def encode(embedding: Sequence[float]) -> bytes:
    """
    Pack an embedding into a little-endian float32 blob of 4 * len(embedding) bytes.
    """
    arr = np.asarray(embedding, dtype=WIRE_DTYPE)
    if arr.ndim != 1:
        raise ValueError(f"embedding must be 1-D, got shape {arr.shape}")
    return arr.tobytes()


def decode(blob: bytes) -> List[float]:
    """
    Inverse of `encode`. Values are returned as Python floats.
    """
    if len(blob) % BYTES_PER_FLOAT:
        raise ValueError(f"blob length {len(blob)} is not a multiple of {BYTES_PER_FLOAT}")
    return np.frombuffer(blob, dtype=WIRE_DTYPE).astype(float).tolist()


def as_float32(embedding: Sequence[float]) -> List[float]:
    """Round values to float32 precision so they survive an encode/decode unchanged."""
    return np.asarray(embedding, dtype=WIRE_DTYPE).astype(float).tolist()
