# pharmacy_stock/utils/errors.py
"""
Error taxonomy shared by repositories and the bill mutation service.

- DomainError and subclasses carry a user-facing message the caller can show
  directly (toast/snackbar); no state has changed when one is raised.
- ConsistencyWarning is a warning category, not an error: the operation went
  ahead after clamping a value that would have gone negative.
"""

from __future__ import annotations

from dataclasses import dataclass


class DomainError(Exception):
    """Domain-level error the caller can surface to the user."""
    pass


class ValidationError(DomainError):
    """
    User input failed a precondition. `problems` lists every reason found,
    the message is the first one.
    """

    def __init__(self, problems: list[str] | str):
        if isinstance(problems, str):
            problems = [problems]
        self.problems: list[str] = list(problems)
        super().__init__(self.problems[0] if self.problems else "Invalid input.")


class NotFoundError(DomainError):
    pass


class DuplicateKeyError(DomainError):
    pass


class ConsistencyWarning(UserWarning):
    pass


@dataclass(frozen=True)
class StockWarning:
    """A non-fatal problem recorded while applying stock changes."""
    product: str
    message: str
    kind: str = "consistency"   # 'consistency' | 'not_found'


__all__ = [
    "DomainError",
    "ValidationError",
    "NotFoundError",
    "DuplicateKeyError",
    "ConsistencyWarning",
    "StockWarning",
]
