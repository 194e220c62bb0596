"""
Block Fingerprint Module

Derives the fingerprint that binds a block to its contents and lineage.

A fingerprint is the SHA-256 digest (lowercase hex) of the block fields
concatenated as text in a fixed order:

    position + timestamp + previous_fingerprint + payload

Integers are rendered in decimal, the concatenated record is encoded as
UTF-8. The output must be reproducible bit-for-bit by any other
implementation that reads a serialized chain, so the field order and
encoding never change.

Author: hashlink project
"""

from typing import Union

from cryptography.hazmat.primitives import hashes


# ============================================================================
# Constants
# ============================================================================

FINGERPRINT_ALGORITHM = hashes.SHA256
FINGERPRINT_HEX_LENGTH = 64  # 256-bit digest rendered as hex


# ============================================================================
# Hashing
# ============================================================================

def sha256_hex(data: Union[str, bytes]) -> str:
    """
    Compute the SHA-256 digest of data as lowercase hex.

    Args:
        data: Bytes, or text which is encoded as UTF-8 first

    Returns:
        64-character hex digest
    """
    if isinstance(data, str):
        data = data.encode('utf-8')
    digest = hashes.Hash(FINGERPRINT_ALGORITHM())
    digest.update(data)
    return digest.finalize().hex()


def fingerprint_record(
    position: int,
    timestamp: int,
    previous_fingerprint: str,
    payload: str
) -> str:
    """Build the textual record that gets hashed."""
    return f"{position}{timestamp}{previous_fingerprint}{payload}"


def compute_fingerprint(
    position: int,
    timestamp: int,
    previous_fingerprint: str,
    payload: str
) -> str:
    """
    Compute the fingerprint of a block from its fields.

    Args:
        position: Block position (0 for the origin)
        timestamp: Logical timestamp
        previous_fingerprint: Fingerprint of the preceding block ("" for origin)
        payload: Opaque block payload

    Returns:
        Lowercase hex SHA-256 digest of the concatenated fields
    """
    return sha256_hex(
        fingerprint_record(position, timestamp, previous_fingerprint, payload)
    )


def block_fingerprint(block) -> str:
    """Re-derive a block's fingerprint from its fields, ignoring the stored one."""
    return compute_fingerprint(
        block.position,
        block.timestamp,
        block.previous_fingerprint,
        block.payload
    )


def is_fingerprint(value: str) -> bool:
    """Check that value looks like a rendered fingerprint (64 lowercase hex chars)."""
    if not isinstance(value, str) or len(value) != FINGERPRINT_HEX_LENGTH:
        return False
    return all(c in '0123456789abcdef' for c in value)
