"""
hashlink - Demo Entry Point
Builds a small chain, then shows a fork being adopted and a tie being refused.
"""

import logging

from hashlink.blockchain.ledger import (
    Chain, InvalidChain, InvalidBlock, create_genesis_block, append_payloads
)


def run() -> Chain:
    """Build the demo chain and walk through append and replace."""
    print("Testing chain ...")

    genesis = create_genesis_block("Genesis block baby!", seal=False)
    blockchain = Chain(genesis)

    try:
        blockchain.append("Second block baby!")
        result = "Ok"
    except InvalidBlock as exc:
        result = f"Err({exc})"

    print(repr(blockchain))
    print(result)

    # A peer extended the same origin further
    fork = Chain(genesis)
    append_payloads(fork, ["Peer block one", "Peer block two"])
    blockchain.replace(fork)
    print(f"Adopted fork, length is now {blockchain.length}")

    # Same length again: the incumbent stays
    tie = Chain(genesis)
    append_payloads(tie, ["Other block one", "Other block two"])
    try:
        blockchain.replace(tie)
    except InvalidChain as exc:
        print(f"Kept local chain: {exc}")

    blockchain.print_chain()
    return blockchain


def main():
    """Main entry point for the hashlink demo."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    print("=" * 50)
    print("Welcome to hashlink")
    print("=" * 50)
    run()


if __name__ == "__main__":
    main()
