"""Operations built on top of the database manager's public lifecycle."""

from roadlines.ops.relocate import RelocationResult, relocate_database

__all__ = ["RelocationResult", "relocate_database"]
