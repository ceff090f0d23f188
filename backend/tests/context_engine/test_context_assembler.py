"""
Tests for the per-turn context assembler.
"""

import copy

import pytest

from conftest import CAP_TABLE_SLUG, ORG_ID, PITCH_DECK_SLUG, FakeEmbeddingService, RecordingChunkStore
from dataroom.context_engine.context_assembler import (
    CONTEXT_HEADER,
    AuthSession,
    ChatMessage,
    ContextAssembler,
    MessagePart,
)
from dataroom.context_engine.hybrid_retriever import HybridRetriever
from dataroom.core.exceptions import RetrievalError

SESSION = AuthSession(user_email="founder@acme.test")


def user(text):
    return ChatMessage(role="user", content=[MessagePart(type="text", text=text)])


def metadata(selection=None, org_id=ORG_ID, present_slugs=None):
    files = {"selection": selection or []}
    if org_id is not None:
        files["orgId"] = org_id
    if present_slugs is not None:
        files["presentSlugs"] = present_slugs
    return {"files": files}


def build(catalog, store, embeddings=None, chunk_store=None):
    embeddings = embeddings or FakeEmbeddingService()
    retriever = HybridRetriever(embeddings, chunk_store or store)
    return ContextAssembler(catalog, retriever, association_store=store, metadata_store=store)


@pytest.mark.asyncio
async def test_pitch_deck_question_end_to_end(catalog, seeded_store):
    assembler = build(catalog, seeded_store)
    messages = [user("how's our fundraising story?")]

    result = await assembler.transform(messages, SESSION, metadata(present_slugs=[PITCH_DECK_SLUG]))

    assert len(result) == 1
    parts = [part.text for part in result[-1].content]
    assert parts[0] == "how's our fundraising story?"
    assert parts[1].startswith("Status: Found relevant evidence for [Pitch Deck] across 1 file(s).")
    assert "Existing items include: [Pitch Deck]" in parts[1]
    assert "Missing intent items (no dedicated evidence): []" in parts[1]
    assert parts[2] == CONTEXT_HEADER
    sources = parts[3:]
    assert len(sources) == 2
    assert all(text.startswith(f"Source: {ORG_ID}/pitch_deck.pdf\n") for text in sources)
    assert not any("ignore all previous instructions" in text.lower() for text in sources)
    assert not any("act as" in text.lower() for text in sources)


@pytest.mark.asyncio
async def test_input_list_not_mutated(catalog, seeded_store):
    assembler = build(catalog, seeded_store)
    messages = [
        user("hi"),
        ChatMessage(role="assistant", content=[MessagePart(type="text", text="Hello!")]),
        user("what does the pitch deck say about traction?"),
    ]
    snapshot = copy.deepcopy(messages)

    result = await assembler.transform(messages, SESSION, metadata())

    assert messages == snapshot
    assert result[:2] == messages[:2]
    assert len(result[-1].content) > len(messages[-1].content)


@pytest.mark.asyncio
async def test_passthrough_without_session(catalog, seeded_store):
    embeddings = FakeEmbeddingService()
    assembler = build(catalog, seeded_store, embeddings)
    messages = [user("what is in the pitch deck?")]

    assert await assembler.transform(messages, None, metadata()) == messages
    assert embeddings.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("provider_metadata", [
    None,
    {},
    {"files": {"orgId": ORG_ID}},
    {"files": {"selection": "pitch_deck.pdf", "orgId": ORG_ID}},
    metadata(org_id=None),
])
async def test_passthrough_on_invalid_metadata(catalog, seeded_store, provider_metadata):
    embeddings = FakeEmbeddingService()
    assembler = build(catalog, seeded_store, embeddings)
    messages = [user("what is in the pitch deck?")]

    assert await assembler.transform(messages, SESSION, provider_metadata) == messages
    assert embeddings.calls == []


@pytest.mark.asyncio
async def test_passthrough_when_last_message_not_user(catalog, seeded_store):
    assembler = build(catalog, seeded_store)
    messages = [
        user("what is in the pitch deck?"),
        ChatMessage(role="assistant", content=[MessagePart(type="text", text="Let me check.")]),
    ]
    assert await assembler.transform(messages, SESSION, metadata()) == messages


@pytest.mark.asyncio
async def test_passthrough_for_empty_text(catalog, seeded_store):
    embeddings = FakeEmbeddingService()
    assembler = build(catalog, seeded_store, embeddings)
    messages = [ChatMessage(role="user", content=[MessagePart(type="image", url="https://x.test/a.png")])]

    assert await assembler.transform(messages, SESSION, metadata()) == messages
    assert embeddings.calls == []


@pytest.mark.asyncio
async def test_missing_intent_item_alongside_other_evidence(catalog, seeded_store):
    assembler = build(catalog, seeded_store)
    result = await assembler.transform([user("what's our cap table situation")], SESSION, metadata())

    status = result[-1].content[1].text
    # No cap table file, so the scope widens to all org files and untagged minutes match
    assert status.startswith("Status: Found relevant evidence for [Cap Table History (share issuances, SAFEs)]")
    assert "Missing intent items (no dedicated evidence): [Cap Table History (share issuances, SAFEs)]" in status
    assert "Existing items include: [Pitch Deck]" in status


@pytest.mark.asyncio
async def test_empty_data_room_status(catalog, memory_store):
    embeddings = FakeEmbeddingService()
    assembler = build(catalog, memory_store, embeddings)
    result = await assembler.transform([user("what's our cap table situation")], SESSION, metadata())

    parts = [part.text for part in result[-1].content]
    assert parts[1] == (
        "Status: No relevant evidence found for [Cap Table History (share issuances, SAFEs)] in the "
        "user's data room. After a brief answer, append ui-json with upload and assign actions ONLY "
        "for these missing items: [Cap Table History (share issuances, SAFEs)] (use canonical slugs)."
    )
    assert parts[2:] == [CONTEXT_HEADER]
    assert embeddings.calls == []


@pytest.mark.asyncio
async def test_explicit_selection_is_scoped_to_org(catalog, seeded_store):
    chunk_store = RecordingChunkStore(seeded_store)
    assembler = build(catalog, seeded_store, chunk_store=chunk_store)

    await assembler.transform([user("summarize the minutes")], SESSION, metadata(selection=["board_minutes.docx"]))

    assert chunk_store.requested == [[f"{ORG_ID}/board_minutes.docx"]]


@pytest.mark.asyncio
async def test_empty_scope_falls_back_to_all_org_files(catalog, seeded_store):
    chunk_store = RecordingChunkStore(seeded_store)
    assembler = build(catalog, seeded_store, chunk_store=chunk_store)

    result = await assembler.transform([user("give me an overview")], SESSION, metadata())

    assert sorted(chunk_store.requested[0]) == [f"{ORG_ID}/board_minutes.docx", f"{ORG_ID}/pitch_deck.pdf"]
    assert "across 2 file(s)" in result[-1].content[1].text


@pytest.mark.asyncio
async def test_lookup_failures_are_logged_and_ignored(catalog, seeded_store, caplog):
    class FailingLookups:
        async def get_org_file_associations(self, org_id):
            raise RuntimeError("associations offline")

        async def get_file_metadata_for_org(self, org_id):
            raise RuntimeError("metadata offline")

    failing = FailingLookups()
    retriever = HybridRetriever(FakeEmbeddingService(), seeded_store)
    assembler = ContextAssembler(catalog, retriever, association_store=failing, metadata_store=failing)

    result = await assembler.transform(
        [user("what is in the deck?")], SESSION, metadata(selection=["pitch_deck.pdf"]),
    )

    assert "Found relevant evidence" in result[-1].content[1].text
    assert "associations offline" in caplog.text
    assert "metadata offline" in caplog.text


@pytest.mark.asyncio
async def test_retrieval_failure_propagates(catalog, seeded_store):
    class BrokenEmbeddings:
        async def embed_query(self, text):
            raise TimeoutError("embedding timeout")

    assembler = build(catalog, seeded_store, BrokenEmbeddings())
    with pytest.raises(RetrievalError):
        await assembler.transform([user("what is in the pitch deck?")], SESSION, metadata())


@pytest.mark.asyncio
async def test_present_slugs_merge_request_and_associations(catalog, seeded_store):
    assembler = build(catalog, seeded_store)
    result = await assembler.transform(
        [user("what is in the pitch deck?")], SESSION, metadata(present_slugs=[CAP_TABLE_SLUG]),
    )
    status = result[-1].content[1].text
    assert "Existing items include: [Cap Table History (share issuances, SAFEs), Pitch Deck]" in status


@pytest.mark.asyncio
async def test_assemble_reports_org_and_present_slugs(catalog, seeded_store):
    assembler = build(catalog, seeded_store)

    turn = await assembler.assemble(
        [user("what is in the pitch deck?")], SESSION, metadata(present_slugs=[CAP_TABLE_SLUG]),
    )

    assert turn.org_id == ORG_ID
    assert turn.present_slugs == frozenset({CAP_TABLE_SLUG, PITCH_DECK_SLUG})


@pytest.mark.asyncio
async def test_assemble_pass_through_has_no_snapshot(catalog, seeded_store):
    assembler = build(catalog, seeded_store)
    messages = [
        user("what is in the pitch deck?"),
        ChatMessage(role="assistant", content=[MessagePart(type="text", text="Let me check.")]),
    ]

    turn = await assembler.assemble(messages, SESSION, metadata())

    assert turn.messages == messages
    assert turn.org_id == ORG_ID
    assert turn.present_slugs is None
    assert (await assembler.assemble(messages, None, metadata())).org_id is None


@pytest.mark.asyncio
async def test_present_slugs_for_tolerates_lookup_failure(catalog, seeded_store, caplog):
    class FailingAssociations:
        async def get_org_file_associations(self, org_id):
            raise RuntimeError("associations offline")

    retriever = HybridRetriever(FakeEmbeddingService(), seeded_store)
    healthy = ContextAssembler(catalog, retriever, association_store=seeded_store, metadata_store=seeded_store)
    failing = ContextAssembler(catalog, retriever, association_store=FailingAssociations(), metadata_store=seeded_store)

    assert await healthy.present_slugs_for(ORG_ID) == frozenset({PITCH_DECK_SLUG})
    assert await failing.present_slugs_for(ORG_ID) == frozenset()
    assert "associations offline" in caplog.text
