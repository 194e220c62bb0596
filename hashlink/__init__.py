# hashlink
"""
Append-only, tamper-evident chain of hash-linked blocks with a
"longest valid chain wins" replacement rule.
"""

__version__ = "0.1.0"
