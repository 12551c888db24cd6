"""Typed errors raised by the supply chain core.

Business errors derive from :class:`SupplyChainError` and carry a human-readable
``msg``. :class:`StorageFault` is not a business error: it signals that the
durable memory could not be written and the caller should not try to recover.
"""


class SupplyChainError(Exception):
    """Base class for recoverable, caller-visible errors."""

    def __init__(self, msg: str) -> None:
        super().__init__(msg)
        self.msg = msg

    def __repr__(self) -> str:
        return f"{type(self).__name__}(msg={self.msg!r})"


class NotFound(SupplyChainError):
    """A referenced entity does not exist, or a query matched nothing."""


class InvalidPayload(SupplyChainError, ValueError):
    """An inbound payload failed structural validation."""


class AlreadyCompleted(SupplyChainError):
    """An order that is already complete was completed again."""


class StorageFault(RuntimeError):
    """Unrecoverable failure of the durable memory (oversized record, failed write)."""
