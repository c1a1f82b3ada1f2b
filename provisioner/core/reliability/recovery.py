"""
Recovery chain: ordered fallbacks for a fallible operation.

Each strategy is a named sequence of steps. A strategy succeeds when
every step returns an ok receipt; it stops at its first failed step.
The chain tries strategies in order and stops at the first success:

    pull  ──fail──▶  fetch + reset --hard origin/main  ──fail──▶  exhausted

Strategies with a precondition that does not hold are skipped, which
keeps each one independently testable.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from provisioner.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

Step = Callable[[], Receipt]


@dataclass
class RecoveryStrategy:
    """A named, all-or-nothing sequence of steps.

    Args:
        name: Identifier (e.g. 'pull', 'fetch-reset').
        steps: Callables run in order; each returns a Receipt.
        precondition: Optional check; the strategy is skipped when False.
    """

    name: str
    steps: Sequence[Step]
    precondition: Callable[[], bool] | None = None

    def applies(self) -> bool:
        return self.precondition is None or self.precondition()

    def attempt(self) -> tuple[bool, list[Receipt]]:
        """Run the steps; return (succeeded, receipts so far)."""
        receipts: list[Receipt] = []
        for step in self.steps:
            receipt = step()
            receipts.append(receipt)
            if not receipt.ok:
                logger.debug(
                    "Strategy '%s' stopped at %s: %s", self.name, receipt.operation, receipt.error
                )
                return False, receipts
        return True, receipts


@dataclass
class ChainResult:
    """What a RecoveryChain run did."""

    winner: str | None = None
    receipts: list[Receipt] = field(default_factory=list)
    attempted: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.winner is not None

    @property
    def last_error(self) -> str:
        for receipt in reversed(self.receipts):
            if receipt.failed:
                return receipt.error or ""
        return ""


class RecoveryChain:
    """Try strategies in order until one succeeds or all are exhausted."""

    def __init__(self, strategies: Sequence[RecoveryStrategy]):
        self._strategies = list(strategies)

    @property
    def names(self) -> list[str]:
        return [s.name for s in self._strategies]

    def run(self) -> ChainResult:
        result = ChainResult()
        for strategy in self._strategies:
            if not strategy.applies():
                result.skipped.append(strategy.name)
                continue

            result.attempted.append(strategy.name)
            succeeded, receipts = strategy.attempt()
            result.receipts.extend(receipts)
            if succeeded:
                result.winner = strategy.name
                return result

            logger.warning("Recovery strategy '%s' failed: %s", strategy.name, result.last_error)

        return result
