"""Command-line interface for xmind2md."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import ConversionOptions, XmindConverter, collect_stats, format_stats, read
from .errors import ConversionError
from .export import result_to_json, strip_markdown

_FORMATS = ("md", "txt", "json")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="xmind2md",
        description="Convert XMind mind maps to Markdown",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    # --- export ---
    p_export = sub.add_parser("export", help="Convert one file")
    p_export.add_argument("file", help="Path to .xmind file")
    p_export.add_argument("-o", "--output", help="Output file (default: stdout)")
    p_export.add_argument("--format", choices=_FORMATS, default="md",
                          help="Output format (default: md)")
    _add_render_options(p_export)

    # --- info ---
    p_info = sub.add_parser("info", help="Show map statistics")
    p_info.add_argument("file", help="Path to .xmind file")
    p_info.add_argument("--sheet", type=int, default=0, help="Sheet index (default: 0)")

    # --- tree ---
    p_tree = sub.add_parser("tree", help="Print the topic tree")
    p_tree.add_argument("file", help="Path to .xmind file")
    p_tree.add_argument("--depth", type=int, default=99, help="Max depth")
    p_tree.add_argument("--sheet", type=int, default=0, help="Sheet index (default: 0)")

    # --- batch ---
    p_batch = sub.add_parser("batch", help="Convert several files")
    p_batch.add_argument("files", nargs="+", help="Paths to .xmind files")
    p_batch.add_argument("-d", "--output-dir", help="Directory for .md files (default: next to each input)")
    _add_render_options(p_batch)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "export":
        return cmd_export(args)
    elif args.command == "info":
        return cmd_info(args)
    elif args.command == "tree":
        return cmd_tree(args)
    elif args.command == "batch":
        return cmd_batch(args)
    return 2


def _add_render_options(p):
    p.add_argument("--metadata", action="store_true", help="Add a metadata comment block")
    p.add_argument("--ids", action="store_true", help="Append topic ids to headings and items")
    p.add_argument("--topic-links", action="store_true", help="Show links to other topics")
    p.add_argument("--max-depth", type=int, help="Ignore topics below this level")
    p.add_argument("--sheet", type=int, default=0, help="Sheet index (default: 0)")
    p.add_argument("--marker", action="append", default=[], metavar="ID=SYMBOL",
                   help="Override a marker symbol (repeatable)")


def _options(args) -> ConversionOptions:
    markers = {}
    for item in args.marker:
        marker_id, sep, symbol = item.partition("=")
        if not sep or not marker_id:
            raise SystemExit(f"error: invalid --marker {item!r}, expected ID=SYMBOL")
        markers[marker_id] = symbol
    return ConversionOptions(
        include_metadata=args.metadata,
        include_ids=args.ids,
        include_topic_links=args.topic_links,
        max_depth=args.max_depth,
        sheet_index=args.sheet,
        markers=markers,
    )


def cmd_export(args):
    result = XmindConverter(_options(args)).convert(args.file)
    if not result.success:
        print(f"error: {result.error}", file=sys.stderr)
        return 1

    if args.format == "json":
        output = result_to_json(result)
    elif args.format == "txt":
        output = strip_markdown(result.content)
    else:
        output = result.content

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"Exported to {args.output}")
    else:
        print(output)
    return 0


def cmd_info(args):
    try:
        root = read(args.file, sheet_index=args.sheet)
    except ConversionError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(f"File: {args.file}")
    print(f"Title: {root.title}")
    print()
    print(format_stats(collect_stats(root)))
    return 0


def cmd_tree(args):
    try:
        root = read(args.file, sheet_index=args.sheet)
    except ConversionError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    for topic in root.walk():
        if topic.level > args.depth:
            continue
        markers = f" {' '.join(topic.markers)}" if topic.markers else ""
        print("  " * topic.level + f"{topic.title}{markers}")
    return 0


def cmd_batch(args):
    converter = XmindConverter(_options(args))
    results = converter.convert_batch(args.files)

    failed = 0
    for path, result in zip(args.files, results):
        if not result.success:
            failed += 1
            print(f"✗ {path}: {result.error}", file=sys.stderr)
            continue
        src = Path(path)
        out_dir = Path(args.output_dir) if args.output_dir else src.parent
        out_dir.mkdir(parents=True, exist_ok=True)
        out = out_dir / f"{src.stem}.md"
        out.write_text(result.content, encoding="utf-8")
        print(f"✓ {path} -> {out} ({result.stats.total_topics} topics)")

    print(f"{len(results) - failed} converted, {failed} failed")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
