"""
KV-Loop: Event-Driven Key-Value Server

A single-threaded, in-memory key-value server that multiplexes many
TCP clients over one selector loop using a length-prefixed binary protocol.
"""

__version__ = "1.0.0"
