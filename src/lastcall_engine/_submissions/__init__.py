# Area: Submissions
"""
Submission Store - answers, wagers, and locks.

This package handles:
- One submission per (participant, question)
- Point-value legality through the Round Ledger
- Single and per-round locking
- Submission state export/import
"""

from .models import Submission
from .validator import validate_new_submission, validate_update
from .store import SubmissionStore

__all__ = [
    "Submission",
    "validate_new_submission",
    "validate_update",
    "SubmissionStore",
]
