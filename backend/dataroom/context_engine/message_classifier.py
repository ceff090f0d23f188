"""
Message Classifier - decide whether a chat turn should trigger retrieval

Local heuristic, no model call. Rules are evaluated in order and the first
matching predicate wins; anything unmatched falls back to STATEMENT so that
action-style prompts still get evidence.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Callable, Sequence, Tuple


class MessageKind(str, Enum):
    QUESTION = "question"
    STATEMENT = "statement"
    OTHER = "other"

    @property
    def enables_retrieval(self) -> bool:
        return self is not MessageKind.OTHER


INTERROGATIVE = re.compile(r"\b(how|what|why|when|where|which|who)\b", re.IGNORECASE)
ACTION_VERB = re.compile(
    r"^(draft|write|create|analyze|audit|assess|summarize|list|generate)\b",
    re.IGNORECASE,
)

ClassificationRule = Tuple[Callable[[str], bool], MessageKind]

DEFAULT_RULES: Tuple[ClassificationRule, ...] = (
    (lambda text: not text, MessageKind.OTHER),
    (lambda text: text.endswith("?") or INTERROGATIVE.search(text) is not None, MessageKind.QUESTION),
    (lambda text: ACTION_VERB.match(text) is not None, MessageKind.STATEMENT),
)


class MessageClassifier:
    def __init__(
        self,
        rules: Sequence[ClassificationRule] = DEFAULT_RULES,
        default: MessageKind = MessageKind.STATEMENT,
    ) -> None:
        self.rules = tuple(rules)
        self.default = default

    def classify(self, text: str) -> MessageKind:
        stripped = (text or "").strip()
        for predicate, kind in self.rules:
            if predicate(stripped):
                return kind
        return self.default
