"""Utility helpers shared across import flows."""

from __future__ import annotations

__all__ = ["ProgressReporter"]


class ProgressReporter:
    """Periodic progress line for long item loops.

    Prints after every ``every`` processed items.
    """

    def __init__(self, total: int, *, every: int = 10, ctx: str = "import") -> None:
        self.total = total
        self.every = max(1, every)
        self.ctx = ctx
        self.ok = 0
        self.failed = 0

    @property
    def processed(self) -> int:
        return self.ok + self.failed

    def record(self, success: bool) -> None:
        if success:
            self.ok += 1
        else:
            self.failed += 1
        if self.processed % self.every == 0:
            self.report()

    def report(self) -> None:
        print(f"[{self.ctx}] progress idx={self.processed}/{self.total} ok={self.ok} failed={self.failed}")
