#!/usr/bin/env python3
"""
vecbox CLI: put documents in the box, pull neighbours out.

Every command has a short name and standard aliases:

    COMMAND         ALIASES         WHAT IT DOES
    -------         -------         ----------------------------------
    init            setup, schema   Create (or recreate) the store tables
    add             ingest, load    Embed and store text files or a JSONL file
    search          sweep, query    Nearest documents to a text query
    stats           info            Row counts and config at a glance
    tone            banner          Print the vecbox banner
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from vecbox import __version__

BANNER = r"""
    ╔══════════════════════════════════════════╗
    ║                                          ║
    ║   ██    ██ ███████  ██████ ██████  ██  ██ ║
    ║   ██    ██ ██      ██      ██   ██  ████  ║
    ║   ██    ██ █████   ██      ██████    ██   ║
    ║    ██  ██  ██      ██      ██   ██  ████  ║
    ║     ████   ███████  ██████ ██████  ██  ██ ║
    ║                                          ║
    ║   Documents in. Neighbours out.  v""" + __version__ + r"""  ║
    ║                                          ║
    ╚══════════════════════════════════════════╝
"""


def _setup_logging(cfg: dict):
    log_cfg = cfg.get("logging", {})
    level = getattr(logging, str(log_cfg.get("level", "INFO")).upper(), logging.INFO)
    log_file = log_cfg.get("file")

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )


def _open_store(args):
    from vecbox.config import get_config, load_config
    from vecbox.storage import build_store

    cfg = load_config(Path(args.config)) if args.config else get_config()
    _setup_logging(cfg)
    return cfg, build_store(cfg)


def read_documents(paths: list[str]) -> list:
    """
    Load documents from disk.

    A .jsonl file holds one {"id"?, "text", "metadata"?} object per line;
    any other file becomes one document whose metadata records its path.
    """
    from vecbox.models import Document

    documents = []
    for raw in paths:
        path = Path(raw)
        if path.suffix == ".jsonl":
            with open(path, encoding="utf-8") as f:
                for line_no, line in enumerate(f, 1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        item = json.loads(line)
                    except json.JSONDecodeError as e:
                        raise ValueError(f"{path}:{line_no}: invalid JSON ({e})") from e
                    if not isinstance(item, dict):
                        raise ValueError(f"{path}:{line_no}: expected a JSON object")
                    text = item.get("text", "")
                    if not isinstance(text, str):
                        raise ValueError(
                            f"{path}:{line_no}: text must be a string, got {type(text).__name__}"
                        )
                    raw_metadata = item.get("metadata") or {}
                    if not isinstance(raw_metadata, dict):
                        raise ValueError(f"{path}:{line_no}: metadata must be an object")
                    metadata = {str(k): str(v) for k, v in raw_metadata.items()}
                    doc_id = item.get("id")
                    documents.append(Document(
                        id=str(doc_id) if doc_id is not None else None,
                        page_content=text,
                        metadata=metadata or None,
                    ))
        else:
            text = path.read_text(encoding="utf-8")
            documents.append(Document(page_content=text, metadata={"source": str(path)}))
    return documents


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_init(args):
    """Create the store tables (constructing a store runs the schema step)."""
    cfg, store = _open_store(args)
    store_cfg = cfg.get("store", {})
    print(f"  Tables ready: {store.sql.vectors_table}, {store.sql.metadata_table}")
    print(f"  Dimensions: {store_cfg.get('vector_dimensions')} | Distance: {store.distance.name}")
    store.close()


def cmd_add(args):
    """Embed and store documents."""
    documents = read_documents(args.paths)
    _, store = _open_store(args)
    try:
        if args.text_key:
            for doc in documents:
                doc.metadata = dict(doc.metadata or {})
                doc.metadata.setdefault(args.text_key, doc.page_content)

        total = 0
        for start in range(0, len(documents), args.batch_size):
            batch = documents[start:start + args.batch_size]
            result = store.add_documents(batch)
            if not result:
                print(f"  Batch at {start} failed: {result.error}")
                sys.exit(1)
            total += result.vectors_written
        print(f"  Stored {total} documents")
    finally:
        store.close()


def cmd_search(args):
    """Nearest documents to a text query."""
    _, store = _open_store(args)
    query = " ".join(args.query)
    try:
        print(f"  Searching for: '{query}'")
        print("  " + "─" * 56)
        results = store.similarity_search_by_text(query, top_k=args.results)
    finally:
        store.close()

    if not results.ok:
        print(f"  [{results.status.value}] {results.error}")
    if not results.documents:
        print("  No matches.")
        return

    for i, doc in enumerate(results, 1):
        content = doc.page_content or ""
        if len(content) > 200:
            content = content[:200] + "..."
        print(f"\n  [{i}] {doc.id} | distance: {doc.similarity_score:.4f}")
        if doc.metadata:
            print(f"      metadata: {', '.join(sorted(doc.metadata))}")
        if content:
            print(f"      {content}")


def cmd_stats(args):
    """Row counts and config."""
    cfg, store = _open_store(args)
    try:
        stats = store.get_stats()
    finally:
        store.close()
    embed_cfg = cfg.get("embedding", {})
    print(f"  Tables:     {store.sql.vectors_table}, {store.sql.metadata_table}")
    print(f"  Vectors:    {stats['vectors']}")
    print(f"  Metadata:   {stats['metadata']}")
    print(f"  Distance:   {store.distance.name}")
    print(f"  Embeddings: {embed_cfg.get('provider', 'ollama')} / {embed_cfg.get('model', '?')}")


def cmd_tone(args):
    """Print the banner."""
    print(BANNER)


# ---------------------------------------------------------------------------
# Parser with aliases
# ---------------------------------------------------------------------------

def _add_command(subparsers, names, help_text, func, setup_fn=None):
    """Register a command under multiple names."""
    p = subparsers.add_parser(names[0], help=help_text, aliases=names[1:])
    p.set_defaults(func=func)
    if setup_fn:
        setup_fn(p)
    return p


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vecbox",
        description="vecbox: documents in, nearest neighbours out.",
        epilog="Run 'vecbox <command> --help' for command-specific options.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", "-V", action="version",
        version=f"vecbox {__version__}",
    )
    parser.add_argument("--config", "-c", default=None, help="Path to config.yaml")

    sub = parser.add_subparsers(dest="command", metavar="<command>")

    _add_command(sub, ["init", "setup", "schema"],
                 "Create the store tables", cmd_init)

    def setup_add(p):
        p.add_argument("paths", nargs="+", help="Text files or .jsonl files to ingest")
        p.add_argument("--batch-size", "-b", type=int, default=64,
                       help="Documents per insert transaction")
        p.add_argument("--text-key", "-k", default=None,
                       help="Also store the text under this metadata key")

    _add_command(sub, ["add", "ingest", "load"],
                 "Embed and store documents", cmd_add, setup_add)

    def setup_search(p):
        p.add_argument("query", nargs="+", help="Search query")
        p.add_argument("--results", "-n", type=int, default=5, help="Number of results")

    _add_command(sub, ["search", "sweep", "query"],
                 "Nearest documents to a text query", cmd_search, setup_search)

    _add_command(sub, ["stats", "info"],
                 "Show row counts and config", cmd_stats)

    _add_command(sub, ["tone", "banner"],
                 "Print the vecbox banner", cmd_tone)
    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        cmd_tone(args)
        parser.print_help()
        return

    args.func(args)


if __name__ == "__main__":
    main()
