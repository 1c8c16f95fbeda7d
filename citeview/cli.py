#!/usr/bin/env python3
"""CiteView CLI - file search stores and cited answers from the command line.

Usage:
    citeview stores list|create|delete ...
    citeview documents list|upload|delete ...
    citeview search <query> --store <name> [options]
    citeview serve [--host HOST] [--port PORT]
    citeview --version
    citeview --help

Examples:
    # Create a store and upload a document into it
    citeview stores create "Handbooks"
    citeview documents upload fileSearchStores/handbooks-1a2b handbook.pdf

    # Ask a question and export the cited answer
    citeview search "What is the leave policy?" --store fileSearchStores/handbooks-1a2b --html answer.html

    # Run the REST API
    citeview serve --port 3000
"""

import argparse
import json
import sys
from pathlib import Path

from citeview.exceptions import CiteViewError


def get_version():
    """Get package version."""
    try:
        from citeview import __version__
        return __version__
    except ImportError:
        return "0.1.0"


def _load_config():
    from citeview.config import Config
    return Config.from_env()


def _service(args):
    from citeview.citeview import CiteView

    config = _load_config()
    if args.api_key:
        config.gemini_api_key = args.api_key
    if not config.gemini_api_key:
        print("Error: GEMINI_API_KEY not set. Use --api-key or set environment variable.")
        return None
    return CiteView(config=config)


def cmd_stores(args):
    """List, create or delete stores."""
    service = _service(args)
    if service is None:
        return 1

    if args.stores_command == "create":
        store = service.create_store(args.display_name)
        print(f"Created store: {store.name} ({store.display_name})")
        return 0

    if args.stores_command == "delete":
        service.delete_store(args.name, force=not args.no_force)
        print(f"Deleted store: {args.name}")
        return 0

    stores = service.list_stores()
    if not stores:
        print("No stores found. Create one with 'citeview stores create <name>'")
        return 0

    print(f"\n{'Name':<50} {'Display name':<30} {'Docs':<6}")
    print("-" * 88)
    for store in stores:
        docs = store.active_documents_count if store.active_documents_count is not None else "-"
        print(f"{store.name:<50} {(store.display_name or 'Unnamed Store')[:30]:<30} {docs:<6}")
    print(f"\n{len(stores)} stores")
    return 0


def cmd_documents(args):
    """List, upload or delete documents."""
    from citeview.providers.file_search import ChunkingConfig

    service = _service(args)
    if service is None:
        return 1

    if args.documents_command == "upload":
        if not Path(args.file).exists():
            print(f"Error: File not found: {args.file}")
            return 1
        try:
            metadata = json.loads(args.metadata) if args.metadata else None
        except json.JSONDecodeError:
            print("Error: --metadata must be a JSON object")
            return 1

        chunking = None
        if args.max_tokens:
            chunking = ChunkingConfig(args.max_tokens, args.max_overlap)

        print(f"Uploading and indexing {args.file}...")
        result = service.upload_file(
            args.file,
            args.store,
            display_name=args.display_name,
            chunking=chunking,
            custom_metadata=metadata,
        )
        print(f"File uploaded and indexed successfully: {result.get('documentName') or args.file}")
        return 0

    if args.documents_command == "delete":
        service.delete_document(args.name, force=not args.no_force)
        print(f"Deleted document: {args.name}")
        return 0

    documents = service.list_documents(args.store)
    if not documents:
        print("No documents yet. Upload one with 'citeview documents upload'")
        return 0

    for doc in documents:
        print(f"{doc.display_name or doc.name}")
        print(f"  {doc.name}  [{doc.state or 'unknown'}]")
    print(f"\n{len(documents)} documents")
    return 0


def cmd_search(args):
    """Ask a question against one or more stores."""
    from citeview.converters import HtmlConverter

    service = _service(args)
    if service is None:
        return 1

    result, rendered = service.search_and_render(
        args.query,
        args.store,
        model=args.model,
        metadata_filter=args.filter,
    )

    if args.json:
        print(json.dumps({"result": result.to_dict(), "rendered": rendered.to_dict()}, indent=2))
        return 0

    if not result.has_text:
        print("No results found")
        return 0

    print("=" * 60)
    print(result.text)
    print("=" * 60)

    if rendered.sidebar_entries:
        print("\nSources:")
        for entry in rendered.sidebar_entries:
            print(f"  [{entry.label}] {entry.title}")
            if entry.uri and entry.excerpt is None:
                print(f"      {entry.uri}")
            elif args.verbose and entry.excerpt:
                print(f"      {entry.preview}")
    else:
        print("\nNo citations for this answer")

    if args.html:
        HtmlConverter().convert(rendered, args.html, query=args.query)
        print(f"\nHTML saved: {args.html}")
    return 0


def cmd_serve(args):
    """Run the REST API."""
    from citeview.web import create_app

    config = _load_config()
    if args.api_key:
        config.gemini_api_key = args.api_key
    app = create_app(config)
    app.run(host=args.host or config.host, port=args.port or config.port)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="citeview",
        description="CiteView - grounded file search answers with citations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  citeview stores list
  citeview documents upload fileSearchStores/abc report.pdf --max-tokens 200
  citeview search "Summarize the findings" --store fileSearchStores/abc --html answer.html
  citeview serve --port 3000
        """
    )
    parser.add_argument("--version", action="version", version=f"citeview {get_version()}")
    parser.add_argument("--api-key", help="Gemini API key (or set GEMINI_API_KEY)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # stores command
    stores_parser = subparsers.add_parser("stores", help="Manage file search stores")
    stores_sub = stores_parser.add_subparsers(dest="stores_command")
    stores_sub.add_parser("list", help="List stores")
    create_parser = stores_sub.add_parser("create", help="Create a store")
    create_parser.add_argument("display_name", help="Display name for the new store")
    delete_store_parser = stores_sub.add_parser("delete", help="Delete a store and its documents")
    delete_store_parser.add_argument("name", help="Store resource name")
    delete_store_parser.add_argument("--no-force", action="store_true",
                                     help="Fail instead of deleting documents in the store")

    # documents command
    documents_parser = subparsers.add_parser("documents", help="Manage documents in a store")
    documents_sub = documents_parser.add_subparsers(dest="documents_command")
    list_docs_parser = documents_sub.add_parser("list", help="List documents in a store")
    list_docs_parser.add_argument("store", help="Store resource name")
    upload_parser = documents_sub.add_parser("upload", help="Upload and index a file")
    upload_parser.add_argument("store", help="Store resource name")
    upload_parser.add_argument("file", help="Local file to upload")
    upload_parser.add_argument("--display-name", help="Document display name (default: filename)")
    upload_parser.add_argument("--max-tokens", type=int, help="Max tokens per chunk")
    upload_parser.add_argument("--max-overlap", type=int, help="Max overlap tokens between chunks")
    upload_parser.add_argument("--metadata", help="Custom metadata as a JSON object")
    delete_doc_parser = documents_sub.add_parser("delete", help="Delete a document")
    delete_doc_parser.add_argument("name", help="Document resource name")
    delete_doc_parser.add_argument("--no-force", action="store_true",
                                   help="Fail instead of deleting indexed chunks")

    # search command
    search_parser = subparsers.add_parser(
        "search",
        help="Ask a question against file search stores",
        description="Answer a question from the given stores and list the cited sources."
    )
    search_parser.add_argument("query", help="Question to ask")
    search_parser.add_argument("--store", action="append", required=True,
                               help="Store resource name (repeat for several stores)")
    search_parser.add_argument("--model", help="Model name (default: from config)")
    search_parser.add_argument("--filter", help="Metadata filter expression")
    search_parser.add_argument("--html", help="Write the cited answer to this HTML file")
    search_parser.add_argument("--json", action="store_true", help="Print raw and rendered result as JSON")
    search_parser.add_argument("-v", "--verbose", action="store_true", help="Show excerpt previews")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the REST API")
    serve_parser.add_argument("--host", help="Bind address (default: from config)")
    serve_parser.add_argument("--port", type=int, help="Port (default: from config)")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "stores" and not args.stores_command:
        args.stores_command = "list"
    if args.command == "documents" and not args.documents_command:
        documents_parser.print_help()
        return 1

    # Dispatch to command handler
    commands = {
        "stores": cmd_stores,
        "documents": cmd_documents,
        "search": cmd_search,
        "serve": cmd_serve,
    }

    try:
        return commands[args.command](args)
    except CiteViewError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
