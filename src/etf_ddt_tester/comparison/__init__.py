"""Result comparison exports."""

from .case_comparator import CaseMismatchError, compare_result
from .message_normalization import normalize_message

__all__ = [
    "CaseMismatchError",
    "compare_result",
    "normalize_message",
]
