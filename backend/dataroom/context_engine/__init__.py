"""
Context Engine - Retrieval-augmented context assembly for the data room advisor

Turns a user question, an analytical perspective and an organization's
uploaded documents into ranked evidence, a coverage score and a sanitized,
source-annotated context for the downstream model.

Architecture Layers:
    1. Rubric & Checklist Catalogs - Perspective criteria keyed by slug
    2. Coverage Scoring - Presence and freshness per required item
    3. Intent Resolution - Query wording to checklist slugs
    4. Message Classification - Whether a turn needs evidence at all
    5. Hybrid Retrieval - Scoped dense + lexical ranking
    6. Sanitization - Injection phrase stripping
    7. Context Assembly - Per-turn message augmentation
    8. Prompt Building - Advisor system prompt per perspective
"""

from .slugs import slugify, DATA_ROOM_STRUCTURE
from .rubrics import Perspective, Rubric, RubricCatalog
from .checklist import ChecklistItem, ChecklistCatalog
from .catalog import AdvisorCatalog, get_default_catalog
from .coverage_scorer import CoverageScorer, CoverageScore, CoverageReport
from .intent_resolver import IntentResolver
from .message_classifier import MessageClassifier, MessageKind
from .hybrid_retriever import HybridRetriever, RetrievalFilters, RetrievedFragment
from .sanitizer import sanitize_context
from .context_assembler import AssembledTurn, ContextAssembler, ChatMessage, AuthSession
from .prompt_builder import PromptBuilder, AdvisorPrompt

__all__ = [
    "slugify",
    "DATA_ROOM_STRUCTURE",
    "Perspective",
    "Rubric",
    "RubricCatalog",
    "ChecklistItem",
    "ChecklistCatalog",
    "AdvisorCatalog",
    "get_default_catalog",
    "CoverageScorer",
    "CoverageScore",
    "CoverageReport",
    "IntentResolver",
    "MessageClassifier",
    "MessageKind",
    "HybridRetriever",
    "RetrievalFilters",
    "RetrievedFragment",
    "sanitize_context",
    "ContextAssembler",
    "AssembledTurn",
    "ChatMessage",
    "AuthSession",
    "PromptBuilder",
    "AdvisorPrompt",
]

__version__ = "0.1.0"
