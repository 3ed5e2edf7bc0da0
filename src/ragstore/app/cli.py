from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from rich import print as rprint
from rich.console import Console
from rich.table import Table

from ragstore import operations
from ragstore.adapters.backends.jsonl import JsonlIndex
from ragstore.adapters.chunking.fixed import FixedChunker
from ragstore.adapters.ingestion.text_loader import TextLoader
from ragstore.app.container import Container, build_container
from ragstore.debug import dump_retrieval
from ragstore.domain.errors import RagStoreError
from ragstore.domain.models import Document, IngestOptions, ScoredDocument, SearchType
from ragstore.profiles import DEFAULT_PROFILES_DIR, RetrievalProfile, load_profile, override_profile
from ragstore.settings import load_settings, setup_logging

logger = logging.getLogger(__name__)


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ragstore", description="Ingest texts into a vector store and search them.")
    p.add_argument("--config", default="settings.toml", help="Settings file (default: settings.toml)")
    p.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    sub = p.add_subparsers(dest="command", required=True)

    ingest = sub.add_parser("ingest", help="Load text files, split them and add them to the store")
    ingest.add_argument("paths", nargs="+", type=Path)
    ingest.add_argument("--chunk-size", type=int, default=1000)
    ingest.add_argument("--overlap", type=int, default=0)
    ingest.add_argument("--namespace", default=None)
    ingest.add_argument("--batch-size", type=int, default=32)

    search = sub.add_parser("search", help="Search the store")
    search.add_argument("query", type=str)
    search.add_argument("--profile", default=None, help="Profile name (loads <profiles-dir>/<name>.json)")
    search.add_argument("--profiles-dir", type=Path, default=DEFAULT_PROFILES_DIR)
    search.add_argument("--search-type", choices=[t.value for t in SearchType], default=None)
    search.add_argument("--k", type=int, default=None)
    search.add_argument("--fetch-k", type=int, default=None)
    search.add_argument("--lambda-mult", type=float, default=None)
    search.add_argument("--score-threshold", type=float, default=None)
    search.add_argument("--namespace", default=None)
    search.add_argument("--scores", action="store_true", help="Show relevance scores (similarity only)")
    search.add_argument("--dump", action="store_true", help="Write a JSON retrieval dump under logs/retrieval")

    delete = sub.add_parser("delete", help="Delete entries by id")
    delete.add_argument("ids", nargs="+")
    delete.add_argument("--namespace", default=None)

    return p


def _persist(c: Container) -> None:
    if isinstance(c.index, JsonlIndex):
        c.index.save()


def _resolve_profile(args: argparse.Namespace, base: RetrievalProfile) -> RetrievalProfile:
    profile = load_profile(args.profile, args.profiles_dir) if args.profile else base
    # CLI wins over profile, profile wins over settings.toml
    return override_profile(
        profile,
        {
            "search_type": args.search_type,
            "k": args.k,
            "fetch_k": args.fetch_k,
            "lambda_mult": args.lambda_mult,
            "score_threshold": args.score_threshold,
            "namespace": args.namespace,
        },
    )


def cmd_ingest(c: Container, args: argparse.Namespace) -> int:
    loader = TextLoader()
    docs = [d for d in (loader.load(path) for path in args.paths) if d is not None]
    chunks = FixedChunker(chunk_size=args.chunk_size, overlap=args.overlap).split(docs)

    ids = operations.add_documents(
        c.store, chunks, IngestOptions(namespace=args.namespace, batch_size=args.batch_size)
    )
    _persist(c)
    rprint(f"[bold]Indexed[/bold] {len(ids)} chunks from {len(docs)} files")
    return 0


def _render(query: str, results: Sequence[Document | ScoredDocument]) -> None:
    table = Table(title=f"Results for: {query}")
    table.add_column("#", justify="right")
    table.add_column("score", justify="right")
    table.add_column("source")
    table.add_column("text")
    for i, item in enumerate(results, start=1):
        doc = item.document if isinstance(item, ScoredDocument) else item
        score = f"{item.score:.3f}" if isinstance(item, ScoredDocument) else "-"
        preview = doc.page_content[:120].replace("\n", " ")
        table.add_row(str(i), score, str(doc.metadata.get("source", "")), preview)
    Console().print(table)


def cmd_search(c: Container, args: argparse.Namespace, base: RetrievalProfile) -> int:
    profile = _resolve_profile(args, base)
    options = profile.search_options()

    results: list[Document] | list[ScoredDocument]
    if args.scores and profile.search_type is SearchType.SIMILARITY:
        results = c.store.similarity_search_with_relevance_scores(args.query, k=profile.k, options=options)
    else:
        if args.scores:
            rprint("[yellow]--scores is only available for similarity search; ignoring[/yellow]")
        results = operations.search(
            c.store,
            args.query,
            profile.search_type,
            k=profile.k,
            fetch_k=profile.fetch_k,
            lambda_mult=profile.lambda_mult,
            options=options,
        )

    _render(args.query, results)
    if args.dump:
        rprint(f"[bold]Retrieval dump saved:[/bold] {dump_retrieval(args.query, results)}")
    return 0


def cmd_delete(c: Container, args: argparse.Namespace) -> int:
    removed = c.store.delete(args.ids, namespace=args.namespace)
    _persist(c)
    rprint(f"[bold]Deleted:[/bold] {removed}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_argparser().parse_args(argv)
    setup_logging(args.log_level.upper())

    try:
        settings = load_settings(args.config)
        c = build_container(settings)
        if args.command == "ingest":
            return cmd_ingest(c, args)
        if args.command == "search":
            return cmd_search(c, args, settings.retrieval)
        return cmd_delete(c, args)
    except (RagStoreError, FileNotFoundError, KeyError) as e:
        logger.debug("Command failed", exc_info=True)
        rprint(f"[red]Error:[/red] {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
