"""Shared identities and a deterministic clock for ledger tests."""

from __future__ import annotations

ADMIN = 0xA11CE
USER = 0xB0B
STRANGER = 0x5757


class FakeClock:
    """Deterministic epoch-seconds clock; advance manually."""

    def __init__(self, start: int = 1_700_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int = 1) -> None:
        self.now += seconds
