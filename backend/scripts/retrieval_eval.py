#!/usr/bin/env python3
"""
Run the hybrid retriever for one organization and query and print the ranked
fragments as JSON. Useful for checking scoping and boosts against real data.

Example:
    python scripts/retrieval_eval.py --org-id org-123 --query "what's in our cap table?"
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

# Add the backend directory to the path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from dataroom.context_engine import HybridRetriever, IntentResolver, RetrievalFilters, get_default_catalog
from dataroom.core.config import settings
from dataroom.core.database import AsyncSessionLocal
from dataroom.core.logging_config import setup_logging
from dataroom.services.embedding_service import OpenAIEmbeddingService
from dataroom.services.sql_data_room_store import SqlDataRoomStore


async def run_retrieval(
    org_id: str,
    query: str,
    files: Optional[List[str]],
    top_k: int,
    use_intent: bool,
) -> dict:
    store = SqlDataRoomStore(AsyncSessionLocal)
    embedding_service = OpenAIEmbeddingService(
        api_key=settings.OPENAI_API_KEY,
        model_name=settings.EMBEDDING_MODEL,
    )
    retriever = HybridRetriever(embedding_service, store, timeout_seconds=settings.RETRIEVAL_TIMEOUT_SECONDS)

    intent_slugs = []
    if use_intent:
        catalog = get_default_catalog()
        intent_slugs = sorted(IntentResolver(catalog.checklist.intent_corpus()).resolve(query))

    if not files:
        files = [row.filename for row in await store.get_file_metadata_for_org(org_id)]

    fragments = await retriever.retrieve(
        RetrievalFilters(
            org_id=org_id,
            query=query,
            file_paths=files,
            slugs=frozenset(intent_slugs) if intent_slugs else None,
        ),
        top_k=top_k,
    )

    return {
        "org_id": org_id,
        "query": query,
        "scoped_files": files,
        "intent_slugs": intent_slugs,
        "fragments": [
            {"file_path": f.file_path, "score": round(f.score, 4), "content": f.content[:200]}
            for f in fragments
        ],
    }


def main():
    parser = argparse.ArgumentParser(description="Inspect hybrid retrieval for an organization")
    parser.add_argument("--org-id", required=True, help="Organization id owning the files")
    parser.add_argument("--query", required=True, help="Free-text query")
    parser.add_argument("--files", nargs="*", help="Bare filenames to scope to (default: all org files)")
    parser.add_argument("--top-k", type=int, default=settings.RETRIEVAL_TOP_K, help="Fragments to return")
    parser.add_argument("--no-intent", action="store_true", help="Skip intent slug filtering")
    parser.add_argument("--output", help="Write results to this JSON file")

    args = parser.parse_args()
    setup_logging(settings.LOG_LEVEL)

    results = asyncio.run(run_retrieval(
        org_id=args.org_id,
        query=args.query,
        files=args.files,
        top_k=args.top_k,
        use_intent=not args.no_intent,
    ))

    payload = json.dumps(results, indent=2, default=str)
    if args.output:
        with open(args.output, "w") as f:
            f.write(payload)
        print(f"Results saved to {args.output}")
    else:
        print(payload)


if __name__ == "__main__":
    main()
