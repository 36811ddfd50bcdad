"""
src/orchestrator/ledger.py

Call Ledger: the ordered audit trail of every tool invocation in a run.

It is kept next to the transcript, never consulted to build it, and is sealed
when the run ends. Entries recorded before a failure stay put.
"""


import logging
from typing import Iterator, List, Tuple

from orchestrator.models import ToolCallOutcome


logger = logging.getLogger(__name__)


class LedgerClosed(RuntimeError):
    """Raised when recording into a ledger whose run has ended."""


class CallLedger:

    def __init__(self):

        self._entries: List[ToolCallOutcome] = []
        self._closed = False

    def record(self, outcome: ToolCallOutcome) -> None:

        if self._closed:
            raise LedgerClosed(f"Ledger is closed; cannot record call {outcome.id}")

        self._entries.append(outcome)
        logger.debug("Ledger #%d: %s -> %s", len(self._entries), outcome.name, outcome.result)

    def close(self) -> Tuple[ToolCallOutcome, ...]:
        """Seal the ledger and return its entries."""

        self._closed = True

        return self.entries

    @property
    def closed(self) -> bool:

        return self._closed

    @property
    def entries(self) -> Tuple[ToolCallOutcome, ...]:

        return tuple(self._entries)

    @property
    def total_duration(self) -> float:

        return sum(e.duration for e in self._entries)

    def failures(self) -> List[ToolCallOutcome]:

        return [e for e in self._entries if not e.ok]

    def __iter__(self) -> Iterator[ToolCallOutcome]:

        return iter(self.entries)

    def __len__(self) -> int:

        return len(self._entries)
