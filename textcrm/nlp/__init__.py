"""
Mention parsing: extraction of ``@name`` spans and their classification.
"""
from .extractor import MentionCandidate, RawSpan, extract_mentions
from .classifier import classify, resolve_mentions

__all__ = [
    "MentionCandidate",
    "RawSpan",
    "extract_mentions",
    "classify",
    "resolve_mentions",
]
