#!/usr/bin/env python
"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                          HASHLINK LIVE DEMO                                   ║
╚══════════════════════════════════════════════════════════════════════════════╝

This script walks a presenter through hashlink's chain features:
- Genesis block and fingerprints
- Appending blocks
- Tamper detection
- Longest valid chain replacement (and what gets refused)

Run with --auto to skip the pauses.
"""

import sys
from dataclasses import replace as copy_block

from hashlink.blockchain.ledger import (
    Chain, InvalidChain, create_genesis_block, append_payloads,
    is_valid_successor, validate_chain
)
from hashlink.core_crypto.fingerprint import compute_fingerprint, fingerprint_record, is_fingerprint


AUTO = "--auto" in sys.argv[1:]


def print_header(title):
    """Print a formatted section header"""
    print("\n" + "═" * 70)
    print(f"  {title}")
    print("═" * 70)


def print_step(step_num, description):
    """Print a numbered step"""
    print(f"\n  [{step_num}] {description}")


def pause(message="Press ENTER to continue..."):
    """Pause for presenter to explain"""
    if AUTO:
        return
    print(f"\n  [PAUSE] {message}")
    input()


def main():

    print("\n" * 2)
    print("╔" + "═" * 68 + "╗")
    print("║" + "HASHLINK - TAMPER-EVIDENT BLOCK CHAIN".center(68) + "║")
    print("╚" + "═" * 68 + "╝")

    pause("Press ENTER to begin the demonstration...")

    print_header("PART 1: GENESIS AND FINGERPRINTS")

    genesis = create_genesis_block()
    print_step("1.1", "Fingerprint record for the genesis block")
    record = fingerprint_record(
        genesis.position, genesis.timestamp, genesis.previous_fingerprint, genesis.payload
    )
    print(f"  Record:      {record!r}")
    print(f"  Fingerprint: {genesis.fingerprint}")
    print(f"  Well-formed: {is_fingerprint(genesis.fingerprint)}")
    unsealed = create_genesis_block(seal=False)
    print(f"  Unsealed genesis well-formed: {is_fingerprint(unsealed.fingerprint)}")

    print_step("1.2", "Changing one character changes everything")
    altered = compute_fingerprint(0, 0, "", genesis.payload.replace("!", "?"))
    print(f"  Altered:     {altered}")

    pause()

    print_header("PART 2: APPENDING BLOCKS")

    local = Chain(genesis)
    for block in append_payloads(local, ["Alice pays Bob", "Bob pays Carol"]):
        print(f"  [OK] Block #{block.position} t={block.timestamp} {block.fingerprint[:24]}...")
        print(f"       links to {block.previous_fingerprint[:24]}...")

    pause()

    print_header("PART 3: TAMPER DETECTION")

    honest = local[1]
    forged = copy_block(honest, payload="Alice pays Mallory")
    print_step("3.1", "Rewriting block #1's payload without re-sealing")
    print(f"  Honest block valid: {is_valid_successor(local[0], honest)}")
    print(f"  Forged block valid: {is_valid_successor(local[0], forged)}")

    check = validate_chain(local, [local[0], forged, local[2]])
    print(f"  [X] Chain check: {check.reason} (index {check.index})")

    pause()

    print_header("PART 4: LONGEST VALID CHAIN WINS")

    print_step("4.1", "A peer built a longer chain on the same genesis")
    peer = Chain(genesis)
    append_payloads(peer, ["Peer 1", "Peer 2", "Peer 3"])
    local.replace(peer)
    print(f"  [OK] Adopted peer chain, local length is {local.length}")

    print_step("4.2", "An equally long chain is refused")
    rival = Chain(genesis)
    append_payloads(rival, ["Rival 1", "Rival 2", "Rival 3"])
    try:
        local.replace(rival)
    except InvalidChain as exc:
        print(f"  [X] {exc}")

    print_step("4.3", "A chain with a different genesis is refused")
    stranger = Chain(create_genesis_block("Another genesis"))
    append_payloads(stranger, [f"Stranger {i}" for i in range(6)])
    try:
        local.replace(stranger)
    except InvalidChain as exc:
        print(f"  [X] {exc}")

    local.print_chain()

    print_header("DEMO COMPLETE")


if __name__ == "__main__":
    main()
