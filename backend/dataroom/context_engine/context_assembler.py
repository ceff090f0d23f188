"""
Context Assembler - per-turn entry point of the advisor pipeline

Takes the chat transcript, the caller's session and the client-supplied
provider metadata, and returns a new transcript whose last user message
carries a status line, a context header and one sanitized, source-annotated
part per retrieved fragment. The model itself is never called here.

Failure tiers:
- missing session / invalid metadata / non-user last turn: pass through
- association or metadata lookup errors: logged, assembly continues
- retrieval errors: RetrievalError propagates to the caller
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.logging_config import LoggerMixin
from ..services.data_room_store import (
    AssociationStore,
    FileAssociationRecord,
    FileMetadataRecord,
    FileMetadataStore,
    strip_org_prefix,
)
from .catalog import AdvisorCatalog
from .hybrid_retriever import DEFAULT_TOP_K, HybridRetriever, RetrievalFilters, RetrievedFragment
from .intent_resolver import IntentResolver
from .message_classifier import MessageClassifier
from .sanitizer import sanitize_context

CONTEXT_HEADER = "Relevant context from the user's data room (with sources):"


class MessagePart(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    text: Optional[str] = None


class ChatMessage(BaseModel):
    role: str
    content: List[MessagePart] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(part.text or "" for part in self.content if part.type == "text")


class AuthSession(BaseModel):
    user_email: str
    user_id: Optional[str] = None


class FilesSelection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    selection: List[str]
    org_id: Optional[str] = Field(default=None, alias="orgId")
    present_slugs: Optional[List[str]] = Field(default=None, alias="presentSlugs")
    metadata: Optional[Any] = None


class ProviderMetadata(BaseModel):
    files: FilesSelection


def text_part(text: str) -> MessagePart:
    return MessagePart(type="text", text=text)


@dataclass
class AssembledTurn:
    messages: List[ChatMessage]
    org_id: Optional[str] = None
    # None when the turn passed through before the org snapshot was loaded
    present_slugs: Optional[FrozenSet[str]] = None


class ContextAssembler(LoggerMixin):
    """Augments the latest user turn with scoped, sanitized data-room evidence."""

    def __init__(
        self,
        catalog: AdvisorCatalog,
        retriever: HybridRetriever,
        association_store: AssociationStore,
        metadata_store: FileMetadataStore,
        classifier: Optional[MessageClassifier] = None,
        intent_resolver: Optional[IntentResolver] = None,
        top_k: int = DEFAULT_TOP_K,
    ):
        self.catalog = catalog
        self.retriever = retriever
        self.association_store = association_store
        self.metadata_store = metadata_store
        self.classifier = classifier or MessageClassifier()
        self.intent_resolver = intent_resolver or IntentResolver(catalog.checklist.intent_corpus())
        self.top_k = top_k

    async def transform(
        self,
        messages: Sequence[ChatMessage],
        session: Optional[AuthSession],
        provider_metadata: Optional[Dict[str, Any]],
    ) -> List[ChatMessage]:
        turn = await self.assemble(messages, session, provider_metadata)
        return turn.messages

    async def assemble(
        self,
        messages: Sequence[ChatMessage],
        session: Optional[AuthSession],
        provider_metadata: Optional[Dict[str, Any]],
    ) -> AssembledTurn:
        """Like ``transform``, but also reports the org and the present slugs it saw."""
        transcript = list(messages)
        if session is None:
            return AssembledTurn(transcript)

        try:
            metadata = ProviderMetadata.model_validate(provider_metadata)
        except ValidationError:
            self.log_debug("Provider metadata missing or invalid, passing through")
            return AssembledTurn(transcript)

        org_id = metadata.files.org_id
        if not org_id or not transcript:
            return AssembledTurn(transcript)

        recent = transcript.pop()
        if recent.role != "user":
            transcript.append(recent)
            return AssembledTurn(transcript, org_id=org_id)

        query = recent.text
        kind = self.classifier.classify(query)
        if not kind.enables_retrieval:
            transcript.append(recent)
            return AssembledTurn(transcript, org_id=org_id)

        intent_slugs = self._ordered(self.intent_resolver.resolve(query))
        associations, file_metadata = await self._load_org_snapshot(org_id)

        selection = list(dict.fromkeys(metadata.files.selection))
        if intent_slugs:
            selection = self._extend_unique(
                selection, self._files_for_slugs(org_id, intent_slugs, associations, file_metadata)
            )
        if not selection:
            selection = self._extend_unique(selection, (m.filename for m in file_metadata))

        present_slugs = self._extend_unique(
            metadata.files.present_slugs or [],
            (a.label_slug for a in associations),
        )

        fragments = await self.retriever.retrieve(
            RetrievalFilters(
                org_id=org_id,
                query=query,
                file_paths=selection,
                slugs=frozenset(intent_slugs) if intent_slugs else None,
            ),
            top_k=self.top_k,
        )

        self.log_info(
            f"Assembled {len(fragments)} fragments from {len(selection)} scoped files",
            org_id=org_id,
            user_email=session.user_email,
            file_count=len(selection),
            fragment_count=len(fragments),
        )

        parts = list(recent.content)
        parts.append(text_part(self.status_line(fragments, intent_slugs, present_slugs)))
        parts.append(text_part(CONTEXT_HEADER))
        parts.extend(
            text_part(f"Source: {fragment.file_path}\n{sanitize_context(fragment.content)}")
            for fragment in fragments
        )
        transcript.append(ChatMessage(role="user", content=parts))
        return AssembledTurn(transcript, org_id=org_id, present_slugs=frozenset(present_slugs))

    async def present_slugs_for(self, org_id: str) -> FrozenSet[str]:
        """Association slugs for an org; lookup failures are logged and yield an empty set."""
        associations, _ = await self._load_org_snapshot(org_id)
        return frozenset(a.label_slug for a in associations)

    def status_line(
        self,
        fragments: List[RetrievedFragment],
        intent_slugs: List[str],
        present_slugs: List[str],
    ) -> str:
        label_for = self.catalog.checklist.label_for
        labels = ", ".join(label_for(slug) for slug in intent_slugs) or "requested item"
        present = set(present_slugs)
        missing = ", ".join(label_for(slug) for slug in intent_slugs if slug not in present)

        if not fragments:
            return (
                f"Status: No relevant evidence found for [{labels}] in the user's data room. "
                f"After a brief answer, append ui-json with upload and assign actions ONLY for "
                f"these missing items: [{missing}] (use canonical slugs)."
            )

        files = {fragment.file_path.split("/", 1)[-1] for fragment in fragments}
        existing = ", ".join(label_for(slug) for slug in present_slugs)
        return (
            f"Status: Found relevant evidence for [{labels}] across {len(files)} file(s). "
            f"Existing items include: [{existing}]. "
            f"Missing intent items (no dedicated evidence): [{missing}]. "
            f"Do NOT recommend uploads for existing items. If an intent item is missing, after the "
            f"prose append ui-json with upload and assign for that item only (canonical slugs). "
            f"If the user asks \"what files do we have\", list filenames and short labels before any actions."
        )

    async def _load_org_snapshot(self, org_id: str):
        associations, file_metadata = await asyncio.gather(
            self.association_store.get_org_file_associations(org_id),
            self.metadata_store.get_file_metadata_for_org(org_id),
            return_exceptions=True,
        )
        if isinstance(associations, Exception):
            self.log_warning(f"Association lookup failed: {associations}", org_id=org_id)
            associations = []
        if isinstance(file_metadata, Exception):
            self.log_warning(f"File metadata lookup failed: {file_metadata}", org_id=org_id)
            file_metadata = []
        return associations, file_metadata

    def _files_for_slugs(
        self,
        org_id: str,
        slugs: List[str],
        associations: List[FileAssociationRecord],
        file_metadata: List[FileMetadataRecord],
    ) -> List[str]:
        wanted = set(slugs)
        names = [a.file_name for a in associations if a.label_slug in wanted and a.file_name]
        for record in file_metadata:
            if record.slug and record.slug in wanted:
                name = strip_org_prefix(org_id, record.file_path) or record.filename
                if name:
                    names.append(name)
        return names

    def _ordered(self, slugs: Iterable[str]) -> List[str]:
        """Category-tree order, so status lines are deterministic."""
        wanted = set(slugs)
        return [slug for _, slug in self.catalog.checklist.labels() if slug in wanted]

    @staticmethod
    def _extend_unique(base: Iterable[str], extra: Iterable[str]) -> List[str]:
        return list(dict.fromkeys([*base, *extra]))
