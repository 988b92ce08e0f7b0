"""Applicability mark interpretation for matrix cells.

Spreadsheet authors use inconsistent symbols, so any non-blank token outside the
vocabulary counts as "applies" and the caller records an advisory for it.
"""
from typing import Any, Optional, Tuple

from fleetplan.domain.Grid import cell_to_text
from fleetplan.logic.importing.settings import MarkVocabulary

_DEFAULT_VOCABULARY = MarkVocabulary()


def normalize_token(token: Any) -> str:
    return cell_to_text(token).strip().lower()


def read_mark(token: Any, vocabulary: Optional[MarkVocabulary] = None) -> Tuple[bool, bool]:
    """Return (applies, recognized)."""
    vocab = vocabulary or _DEFAULT_VOCABULARY
    text = normalize_token(token)
    if text in vocab.true_tokens:
        return True, True
    if text in vocab.false_tokens or text == "":
        return False, True
    return True, False


def interpret(token: Any, vocabulary: Optional[MarkVocabulary] = None) -> bool:
    applies, _ = read_mark(token, vocabulary)
    return applies


__all__ = ["normalize_token", "read_mark", "interpret"]
