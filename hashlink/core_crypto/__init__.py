# Core Cryptography Module
"""
Fingerprinting primitives shared by the chain:
- SHA-256 hex digests (via the cryptography package)
- Block fingerprint derivation
"""

from .fingerprint import (
    FINGERPRINT_HEX_LENGTH,
    block_fingerprint,
    compute_fingerprint,
    fingerprint_record,
    is_fingerprint,
    sha256_hex,
)

__all__ = [
    'FINGERPRINT_HEX_LENGTH',
    'block_fingerprint',
    'compute_fingerprint',
    'fingerprint_record',
    'is_fingerprint',
    'sha256_hex',
]
