"""Configuration helpers for environment variables.

Entry points call ``load_dotenv`` before reading settings; this module only
reads ``os.environ``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .models import Identity


def parse_identity(raw: str | int) -> Identity:
    """Parse a decimal or ``0x``-prefixed hex identity/id string."""

    if isinstance(raw, int):
        return raw
    s = raw.strip().lower().replace("_", "")
    if not s:
        raise ValueError("empty identity")
    value = int(s, 16) if s.startswith("0x") else int(s, 10)
    if value < 0:
        raise ValueError(f"identity must be unsigned: {raw!r}")
    return value


def _env_identity(name: str) -> Identity | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return parse_identity(raw)
    except ValueError as e:
        raise ValueError(f"{name} is not a valid identity: {e}") from e


@dataclass(frozen=True, slots=True)
class LedgerSettings:
    """Resolved runtime settings.

    Attributes
    ----------
    database_url:
        SQLAlchemy URL; ``None`` lets ``db.client`` read ``DATABASE_URL``.
    admin:
        Administrator identity (``TX_LEDGER_ADMIN``).
    caller:
        Identity the CLI acts as (``TX_LEDGER_CALLER``).
    log_level:
        ``TX_LEDGER_LOG_LEVEL`` as given; parsed by ``logging_setup``.
    """

    database_url: str | None = None
    admin: Identity | None = None
    caller: Identity | None = None
    log_level: str | None = None

    @classmethod
    def from_env(cls) -> LedgerSettings:
        return cls(
            database_url=os.getenv("DATABASE_URL") or None,
            admin=_env_identity("TX_LEDGER_ADMIN"),
            caller=_env_identity("TX_LEDGER_CALLER"),
            log_level=os.getenv("TX_LEDGER_LOG_LEVEL") or None,
        )

    def override(
        self,
        *,
        database_url: str | None = None,
        admin: Identity | None = None,
        caller: Identity | None = None,
    ) -> LedgerSettings:
        """Return a copy where explicitly passed values win over the environment."""

        return LedgerSettings(
            database_url=database_url or self.database_url,
            admin=admin if admin is not None else self.admin,
            caller=caller if caller is not None else self.caller,
            log_level=self.log_level,
        )


__all__ = [
    "parse_identity",
    "LedgerSettings",
]
