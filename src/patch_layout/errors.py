"""Exceptions raised by patch-layout."""

from __future__ import annotations


class ValidationError(ValueError):
    """Input graph violates a data-integrity rule and cannot be laid out.

    ``issues`` lists every problem found, in input order.
    """

    def __init__(self, issues: list[str]) -> None:
        self.issues = list(issues)
        super().__init__("; ".join(self.issues) if self.issues else "invalid graph")
