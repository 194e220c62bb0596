"""
Blockchain Ledger Module

Implements an append-only, hash-linked chain of blocks with:
- SHA-256 fingerprints binding each block to its predecessor
- Single-block and whole-chain validation
- "Longest valid chain wins" replacement policy (ties keep the incumbent)

Security features:
- Immutable blocks (frozen dataclass)
- Every appended block is re-validated before it is stored
- Replacement candidates must share the origin and be internally consistent

Known asymmetry: the origin block handed to Chain() is accepted as given.
Its fingerprint is only re-derived when a replacement candidate's origin is
compared against it. Timestamps are produced in steps of TIMESTAMP_STEP but
validation never checks them.

Author: hashlink project
"""

import collections.abc
import json
import logging
from dataclasses import dataclass
from typing import List, Optional, Dict, Any, Iterable, Iterator, Sequence, Union

from ..core_crypto.fingerprint import block_fingerprint, compute_fingerprint


logger = logging.getLogger(__name__)


# ============================================================================
# Constants
# ============================================================================

TIMESTAMP_STEP = 10  # Logical time units between consecutive blocks
GENESIS_PREV_FINGERPRINT = ""  # The origin has no predecessor
GENESIS_PAYLOAD = "Genesis block baby!"


# ============================================================================
# Errors
# ============================================================================

class ValidationError(Exception):
    """
    Base class for chain validation failures.

    Attributes:
        reason: Human-readable description of what failed
        index: List index of the first offending block, if known
        position: Position field of the first offending block, if known
    """

    default_message = "Validation failed"

    def __init__(
        self,
        reason: str = "",
        index: Optional[int] = None,
        position: Optional[int] = None
    ):
        self.reason = reason
        self.index = index
        self.position = position

        message = self.default_message
        if reason:
            message = f"{message}: {reason}"
        if position is not None:
            message = f"{message} (position {position})"
        super().__init__(message)


class InvalidBlock(ValidationError):
    """Raised when a freshly built block fails validation, or there is nothing to extend."""

    default_message = "The block was invalid"


class InvalidChain(ValidationError):
    """Raised when a replacement chain is rejected or a chain document is malformed."""

    default_message = "The chain was invalid"


# ============================================================================
# Block Structure (Immutable)
# ============================================================================

def _require_unsigned(name: str, value: Any) -> None:
    # bool is an int subclass, reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")


def _require_text(name: str, value: Any) -> None:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string, got {type(value).__name__}")


@dataclass(frozen=True)
class Block:
    """
    Immutable block structure for the chain.

    The stored fingerprint is never trusted by validation; it is always
    compared against one re-derived from the other four fields.
    """
    position: int
    timestamp: int
    previous_fingerprint: str
    payload: str
    fingerprint: str

    def __post_init__(self):
        _require_unsigned('position', self.position)
        _require_unsigned('timestamp', self.timestamp)
        _require_text('previous_fingerprint', self.previous_fingerprint)
        _require_text('payload', self.payload)
        _require_text('fingerprint', self.fingerprint)

    @property
    def is_sealed(self) -> bool:
        """True if the stored fingerprint matches the block contents."""
        return block_fingerprint(self) == self.fingerprint

    def to_dict(self) -> Dict[str, Any]:
        """Convert block to dictionary for serialization."""
        return {
            'position': self.position,
            'timestamp': self.timestamp,
            'previous_fingerprint': self.previous_fingerprint,
            'payload': self.payload,
            'fingerprint': self.fingerprint,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Block':
        """
        Create block from dictionary.

        Raises:
            ValueError: If a field is missing or has the wrong type
        """
        try:
            return cls(
                position=data['position'],
                timestamp=data['timestamp'],
                previous_fingerprint=data['previous_fingerprint'],
                payload=data['payload'],
                fingerprint=data['fingerprint'],
            )
        except KeyError as exc:
            raise ValueError(f"Missing block field: {exc.args[0]}") from exc

    def __str__(self) -> str:
        return (
            f"Block #{self.position}\n"
            f"  Timestamp: {self.timestamp}\n"
            f"  Fingerprint: {self.fingerprint[:16] or '(empty)'}...\n"
            f"  Prev: {self.previous_fingerprint[:16] or '(empty)'}...\n"
            f"  Payload: {self.payload}"
        )


def create_genesis_block(
    payload: str = GENESIS_PAYLOAD,
    timestamp: int = 0,
    seal: bool = True
) -> Block:
    """
    Create an origin block.

    Args:
        payload: Origin payload
        timestamp: Starting logical time
        seal: If False the fingerprint is left empty, so the first appended
            block links to "" instead of a real digest

    Returns:
        Block at position 0 with no predecessor
    """
    fingerprint = ""
    if seal:
        fingerprint = compute_fingerprint(0, timestamp, GENESIS_PREV_FINGERPRINT, payload)
    return Block(
        position=0,
        timestamp=timestamp,
        previous_fingerprint=GENESIS_PREV_FINGERPRINT,
        payload=payload,
        fingerprint=fingerprint,
    )


def build_block(prev: Block, payload: str, step: int = TIMESTAMP_STEP) -> Block:
    """
    Build the successor of prev carrying payload.

    The result is a valid successor of prev by construction.
    """
    position = prev.position + 1
    timestamp = prev.timestamp + step
    previous_fingerprint = prev.fingerprint
    return Block(
        position=position,
        timestamp=timestamp,
        previous_fingerprint=previous_fingerprint,
        payload=payload,
        fingerprint=compute_fingerprint(position, timestamp, previous_fingerprint, payload),
    )


# ============================================================================
# Validation
# ============================================================================

def successor_failure(prev: Block, candidate: Block) -> Optional[str]:
    """
    Explain why candidate cannot follow prev.

    Returns:
        A reason string, or None if candidate is a valid successor
    """
    if candidate.position != prev.position + 1:
        return f"expected position {prev.position + 1}, got {candidate.position}"

    if candidate.previous_fingerprint != prev.fingerprint:
        return "previous fingerprint does not match predecessor"

    if block_fingerprint(candidate) != candidate.fingerprint:
        return "fingerprint does not match block contents"

    return None


def is_valid_successor(prev: Block, candidate: Block) -> bool:
    """Check position, linkage and fingerprint of candidate against prev."""
    return successor_failure(prev, candidate) is None


@dataclass(frozen=True)
class ChainCheck:
    """
    Outcome of a whole-chain validation.

    Truthy iff the candidate passed. On failure, index and position identify
    the first offending block of the candidate where one exists.
    """
    valid: bool
    reason: str = ""
    index: Optional[int] = None
    position: Optional[int] = None

    def __bool__(self) -> bool:
        return self.valid


def _reject(reason: str, index: Optional[int] = None, position: Optional[int] = None) -> ChainCheck:
    logger.warning("Chain rejected: %s", reason)
    return ChainCheck(valid=False, reason=reason, index=index, position=position)


def _is_block_sequence(value: Any) -> bool:
    return isinstance(value, (Chain, collections.abc.Sequence))


def validate_chain(
    reference: Sequence[Block],
    candidate: Sequence[Block]
) -> ChainCheck:
    """
    Validate candidate as a replacement for reference.

    Only the origins are compared across the two chains, by re-deriving
    both fingerprints. After the origin, candidate only has to be
    internally consistent; its history may diverge from reference.

    Args:
        reference: The current chain (a Chain or a sequence of blocks)
        candidate: The proposed chain (a Chain or a sequence of blocks)

    Returns:
        ChainCheck describing the first failure, or a passing check
    """
    if not _is_block_sequence(reference):
        return _reject("reference is not a block sequence")
    if not _is_block_sequence(candidate):
        return _reject("candidate is not a block sequence")

    if len(reference) == 0:
        return _reject("could not find genesis block")
    if len(candidate) == 0:
        return _reject("missing new chain origin")

    genesis, new_origin = reference[0], candidate[0]
    if not isinstance(genesis, Block):
        return _reject("reference origin is not a block")
    if not isinstance(new_origin, Block):
        return _reject("candidate origin is not a block", index=0)

    if block_fingerprint(genesis) != block_fingerprint(new_origin):
        return _reject("genesis block mismatch", index=0, position=new_origin.position)

    prev_block = new_origin
    for index in range(1, len(candidate)):
        block = candidate[index]
        if not isinstance(block, Block):
            return _reject(f"entry at index {index} is not a block", index=index)

        failure = successor_failure(prev_block, block)
        if failure is not None:
            return _reject(
                f"invalid block detected with position {block.position}: {failure}",
                index=index,
                position=block.position,
            )
        prev_block = block

    return ChainCheck(valid=True)


def is_valid_chain(reference: Sequence[Block], candidate: Sequence[Block]) -> bool:
    """Boolean form of validate_chain()."""
    return validate_chain(reference, candidate).valid


# ============================================================================
# Chain
# ============================================================================

class Chain:
    """
    An ordered, never-empty sequence of blocks.

    Grows by append() and can be swapped wholesale by replace(). Not
    thread-safe: callers sharing a chain must serialize writers themselves.
    """

    def __init__(self, genesis: Block, timestamp_step: int = TIMESTAMP_STEP):
        """
        Initialize a chain holding only its origin.

        Args:
            genesis: Origin block, accepted as given
            timestamp_step: Logical time added per appended block
        """
        if not isinstance(genesis, Block):
            raise ValueError("Genesis must be a Block")
        _require_unsigned('timestamp_step', timestamp_step)

        self._blocks: List[Block] = [genesis]
        self._timestamp_step = timestamp_step

    @classmethod
    def from_blocks(
        cls,
        blocks: Iterable[Block],
        timestamp_step: int = TIMESTAMP_STEP
    ) -> 'Chain':
        """
        Wrap an existing block sequence, taken as given.

        Raises:
            InvalidChain: If blocks is empty
            ValueError: If an entry is not a Block
        """
        blocks = list(blocks)
        if not blocks:
            raise InvalidChain("chain has no origin block")
        for block in blocks:
            if not isinstance(block, Block):
                raise ValueError(f"Expected Block, got {type(block).__name__}")

        chain = cls(blocks[0], timestamp_step=timestamp_step)
        chain._blocks.extend(blocks[1:])
        return chain

    @property
    def blocks(self) -> List[Block]:
        """Get the blocks (read-only view)."""
        return list(self._blocks)

    @property
    def length(self) -> int:
        """Get chain length."""
        return len(self._blocks)

    @property
    def genesis(self) -> Block:
        """Get the origin block."""
        return self._blocks[0]

    @property
    def last_block(self) -> Block:
        """Get the last block in the chain."""
        return self._blocks[-1]

    def __len__(self) -> int:
        return len(self._blocks)

    def __getitem__(self, index):
        return self._blocks[index]

    def __iter__(self) -> Iterator[Block]:
        return iter(list(self._blocks))

    def __repr__(self) -> str:
        return f"Chain(length={len(self._blocks)}, last={self._blocks[-1].fingerprint[:16]!r})"

    def append(self, payload: str) -> Block:
        """
        Build a block for payload on top of the last block and store it.

        Returns:
            The newly appended block

        Raises:
            ValueError: If payload is not a string
            InvalidBlock: If the chain is empty or the new block fails validation
        """
        _require_text('payload', payload)

        if not self._blocks:
            logger.warning("Could not find previous block to compare")
            raise InvalidBlock("no previous block to extend")

        prev_block = self._blocks[-1]
        new_block = build_block(prev_block, payload, self._timestamp_step)

        failure = successor_failure(prev_block, new_block)
        if failure is not None:
            logger.warning("Block was invalid: %s", failure)
            raise InvalidBlock(failure, index=len(self._blocks), position=new_block.position)

        self._blocks.append(new_block)
        logger.info(
            "Added block %d (%s)", new_block.position, new_block.fingerprint[:16]
        )
        return new_block

    def replace(self, candidate: Union['Chain', Sequence[Block]]) -> None:
        """
        Adopt candidate if it is valid and strictly longer.

        Args:
            candidate: Competing chain (a Chain or a sequence of blocks)

        Raises:
            InvalidChain: If candidate fails validation or is not longer.
                The local chain is left unmodified.
        """
        if isinstance(candidate, Chain):
            new_blocks = candidate.blocks
        else:
            try:
                new_blocks = list(candidate)
            except TypeError as exc:
                logger.warning("Invalid replacement chain: not iterable")
                raise InvalidChain("candidate is not a block sequence") from exc

        check = validate_chain(self._blocks, new_blocks)
        if not check:
            logger.warning("Invalid replacement chain")
            raise InvalidChain(check.reason, index=check.index, position=check.position)

        local_len = len(self._blocks)
        new_len = len(new_blocks)
        if new_len <= local_len:
            logger.warning(
                "Invalid replacement chain: length %d does not exceed %d",
                new_len, local_len
            )
            raise InvalidChain(f"candidate length {new_len} does not exceed {local_len}")

        self._blocks = new_blocks
        logger.info("Valid chain. Replaced %d blocks with %d", local_len, new_len)

    def to_json(self) -> str:
        """Serialize chain to JSON."""
        return json.dumps({
            'chain': [block.to_dict() for block in self._blocks],
        }, indent=2)

    @classmethod
    def from_json(cls, json_str: str, timestamp_step: int = TIMESTAMP_STEP) -> 'Chain':
        """
        Deserialize chain from JSON.

        The blocks are taken as given; run replace() to validate them
        against a local chain.

        Raises:
            InvalidChain: If the document is malformed or holds no blocks
        """
        try:
            data = json.loads(json_str)
            blocks = [Block.from_dict(block_data) for block_data in data['chain']]
        except (KeyError, TypeError, ValueError) as exc:
            # json.JSONDecodeError is a ValueError
            raise InvalidChain(f"malformed chain document: {exc}") from exc

        return cls.from_blocks(blocks, timestamp_step=timestamp_step)

    def print_chain(self) -> None:
        """Print the chain."""
        print(f"\nChain (length={self.length})")
        print("=" * 60)
        for block in self._blocks:
            print(block)
            print("-" * 40)


# ============================================================================
# Convenience Functions
# ============================================================================

def create_chain(genesis_payload: str = GENESIS_PAYLOAD, seal: bool = True) -> Chain:
    """Create a new chain on top of a fresh origin block."""
    return Chain(create_genesis_block(genesis_payload, seal=seal))


def append_payloads(chain: Chain, payloads: Iterable[str]) -> List[Block]:
    """Append each payload in order and return the new blocks."""
    return [chain.append(payload) for payload in payloads]


# ============================================================================
# Self-Test
# ============================================================================

def _run_tests():
    """Run a quick printed self-test of the ledger module."""
    print("Blockchain Ledger Module Test")
    print("=" * 70)

    tests_passed = 0
    tests_total = 0

    def test(name: str, condition: bool, details: str = ""):
        nonlocal tests_passed, tests_total
        tests_total += 1
        status = "✓ PASS" if condition else "✗ FAIL"
        print(f"\n[Test {tests_total}] {name}")
        if details:
            print(f"  {details}")
        print(f"  Status: {status}")
        if condition:
            tests_passed += 1
        return condition

    # Test 1: Unsealed genesis, as the reference driver builds it
    local = Chain(create_genesis_block(seal=False))
    second = local.append("Second block baby!")
    test(
        "Append on unsealed genesis",
        local.length == 2 and second.previous_fingerprint == "",
        f"Block #{second.position} links to {second.previous_fingerprint!r}"
    )

    # Test 2: Appended block is a valid successor
    test(
        "Appended block validates",
        is_valid_successor(local.genesis, second),
        f"Fingerprint: {second.fingerprint[:32]}..."
    )

    # Test 3: Longer fork with the same origin is adopted
    fork = Chain(local.genesis)
    append_payloads(fork, ["a", "b"])
    local.replace(fork)
    test(
        "Longer valid chain replaces local",
        local.length == 3,
        f"Local length after replace: {local.length}"
    )

    # Test 4: Equal length is rejected
    tie = Chain(local.genesis)
    append_payloads(tie, ["x", "y"])
    try:
        local.replace(tie)
        rejected = False
    except InvalidChain:
        rejected = True
    test("Tie keeps the incumbent", rejected, "Equal-length candidate rejected")

    # Test 5: Different origin is rejected
    stranger = create_chain("Some other genesis")
    append_payloads(stranger, ["1", "2", "3", "4"])
    try:
        local.replace(stranger)
        rejected = False
    except InvalidChain:
        rejected = True
    test("Origin mismatch rejected", rejected, "Foreign genesis detected")

    # Test 6: JSON round trip keeps the tip
    loaded = Chain.from_json(local.to_json())
    test(
        "JSON serialization/deserialization",
        loaded.last_block == local.last_block,
        f"Loaded chain length: {loaded.length}"
    )

    print("\n" + "=" * 70)
    print(f"Overall: {tests_passed}/{tests_total} tests passed!")

    local.print_chain()

    return tests_passed == tests_total


if __name__ == "__main__":
    success = _run_tests()
    raise SystemExit(0 if success else 1)
