"""Match domain services: clock, lifecycle, scoring ledger and broadcasts.

This package contains the match logic imported by HTTP routes and socket
handlers, keeping transport concerns separated from the match clock and the
score ledger.
"""
