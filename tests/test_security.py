"""
Security tests for hashlink.

Tests that tampering and malformed input are rejected rather than
accepted or crashing:
- Rewritten history
- Re-sealed forgeries
- Spliced and reordered chains
"""

import dataclasses

import pytest

from hashlink.blockchain.ledger import (
    Block, Chain, InvalidChain, build_block, create_genesis_block,
    append_payloads, is_valid_chain, validate_chain
)
from hashlink.core_crypto.fingerprint import compute_fingerprint


@pytest.fixture
def history():
    chain = Chain(create_genesis_block())
    append_payloads(chain, ["alice->bob 10", "bob->carol 5", "carol->dave 1"])
    return chain


class TestTampering:
    """Rewritten blocks must be detected."""

    def test_payload_rewrite_detected(self, history):
        """Changing a payload breaks that block's fingerprint."""
        blocks = history.blocks
        blocks[1] = dataclasses.replace(blocks[1], payload="alice->mallory 10")
        blocks.append(build_block(blocks[-1], "extra"))

        check = validate_chain(history, blocks)
        assert not check
        assert check.index == 1

    def test_resealed_block_breaks_next_link(self, history):
        """Re-sealing a rewritten block breaks its successor's link."""
        blocks = history.blocks
        old = blocks[1]
        blocks[1] = Block(
            position=old.position,
            timestamp=old.timestamp,
            previous_fingerprint=old.previous_fingerprint,
            payload="alice->mallory 10",
            fingerprint=compute_fingerprint(
                old.position, old.timestamp, old.previous_fingerprint, "alice->mallory 10"
            ),
        )
        blocks.append(build_block(blocks[-1], "extra"))

        check = validate_chain(history, blocks)
        assert not check
        assert check.index == 2
        assert check.position == 2

    def test_timestamp_rewrite_detected(self, history):
        """Timestamps are covered by the fingerprint."""
        blocks = history.blocks
        blocks[3] = dataclasses.replace(blocks[3], timestamp=999)
        blocks.append(build_block(blocks[-1], "extra"))

        with pytest.raises(InvalidChain) as exc_info:
            history.replace(blocks)
        assert exc_info.value.index == 3


class TestStructure:
    """Spliced, reordered and skipped blocks."""

    def test_reordered_blocks_rejected(self, history):
        blocks = history.blocks
        blocks[1], blocks[2] = blocks[2], blocks[1]
        blocks.append(blocks[-1])

        assert not validate_chain(history, blocks)

    def test_skipped_position_rejected(self, history):
        """Dropping a block leaves a gap in positions."""
        blocks = history.blocks
        del blocks[2]
        blocks.extend([blocks[-1], blocks[-1]])

        check = validate_chain(history, blocks)
        assert not check
        assert "position" in check.reason

    def test_duplicate_tip_rejected(self, history):
        """Repeating the last block does not make a chain longer."""
        blocks = history.blocks + [history.last_block]

        with pytest.raises(InvalidChain):
            history.replace(blocks)
        assert history.length == 4

    def test_spliced_foreign_history_rejected(self, history):
        """Blocks from a chain with another origin cannot be spliced in."""
        foreign = Chain(create_genesis_block("other"))
        append_payloads(foreign, ["x", "y", "z", "w"])
        spliced = [history.genesis] + foreign.blocks[1:]

        check = validate_chain(history, spliced)
        assert not check
        assert check.index == 1


class TestMalformedInput:
    """Malformed input becomes a failure, never a crash."""

    def test_empty_candidate(self, history):
        with pytest.raises(InvalidChain):
            history.replace([])
        assert history.length == 4

    def test_non_block_candidate_entries(self, history):
        with pytest.raises(InvalidChain):
            history.replace([history.genesis, "block", "block", "block", "block"])

    def test_non_block_origin(self, history):
        check = validate_chain(history, [None])
        assert not check
        assert check.index == 0

    @pytest.mark.parametrize("candidate", [None, 5])
    def test_non_sequence_candidate_fails_check(self, history, candidate):
        """Objects that are not block sequences fail validation."""
        assert not is_valid_chain(history, candidate)
        assert not is_valid_chain(candidate, history)

    @pytest.mark.parametrize("candidate", [None, 5])
    def test_non_sequence_candidate_rejected(self, history, candidate):
        """Replacing with a non-sequence raises InvalidChain, chain unchanged."""
        before = history.blocks
        with pytest.raises(InvalidChain):
            history.replace(candidate)
        assert history.blocks == before
