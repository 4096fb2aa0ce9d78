"""
Pipeline stages built on the parsed mentions:
- reconciler: rebuild People and Places registries from the message log
- suggestions: rank completions for the mention being typed
- message_log: keep the log, its registries and the store in step
"""
from .reconciler import chronological, messages_for, reconcile
from .suggestions import MentionToken, SuggestionComposer, compose_suggestions, current_token
from .message_log import MessageLog

__all__ = [
    "chronological",
    "messages_for",
    "reconcile",
    "MentionToken",
    "SuggestionComposer",
    "compose_suggestions",
    "current_token",
    "MessageLog",
]
