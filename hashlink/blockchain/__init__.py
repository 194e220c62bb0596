# Blockchain Module
"""
Hash-linked chain implementation including:
- Immutable blocks with SHA-256 fingerprints
- Single-block and whole-chain validation
- Longest valid chain replacement policy

Security features:
- Immutable blocks (frozen dataclass)
- Appended blocks re-validated before storage
- Replacement requires a shared origin and an unbroken chain
"""

# Lazy imports to avoid RuntimeWarning when running ledger as __main__
def __getattr__(name):
    """Lazy import to avoid circular import issues."""
    from . import ledger
    return getattr(ledger, name)

__all__ = [
    'Block',
    'Chain',
    'ChainCheck',
    'ValidationError',
    'InvalidBlock',
    'InvalidChain',
    'build_block',
    'create_chain',
    'create_genesis_block',
    'append_payloads',
    'is_valid_successor',
    'is_valid_chain',
    'successor_failure',
    'validate_chain',
    'GENESIS_PAYLOAD',
    'GENESIS_PREV_FINGERPRINT',
    'TIMESTAMP_STEP',
]
