"""Command-line front end.

Usage:
    m2d2 input.md                              → writes input.docx (style: renewcorp)
    m2d2 input.md -o output.docx               → custom output name
    m2d2 input.md --style clockwork            → use The Clockwork Cloud style
    m2d2 input.md --toc                        → include a Table of Contents
    m2d2 input.md --cover "My Title"           → add a cover page with title
"""

from __future__ import annotations

import argparse
import os
import re
import sys
from pathlib import Path

from .assets import AssetLoader
from .convert import convert_markdown
from .errors import M2D2Error
from .themes import DEFAULT_STYLE, available_styles, resolve


def default_output(input_path: str) -> str:
    out = re.sub(r"\.md$", ".docx", input_path, flags=re.IGNORECASE)
    return out if out != input_path else input_path + ".docx"


def build_parser() -> argparse.ArgumentParser:
    styles = ", ".join(key for key, _ in available_styles())
    parser = argparse.ArgumentParser(
        prog="m2d2",
        description="Convert Markdown to styled Word documents",
    )
    parser.add_argument("input", nargs="?", help="Input Markdown file")
    parser.add_argument("-o", "--output", default=None, help="Output filename (default: input.docx)")
    parser.add_argument("-s", "--style", default=DEFAULT_STYLE,
                        help=f"Style: {styles} (default: {DEFAULT_STYLE})")
    parser.add_argument("--toc", action="store_true", help="Include Table of Contents after cover")
    parser.add_argument("--cover", default=None, metavar="TITLE",
                        help="Add a cover page with the given title")
    parser.add_argument("--list-styles", action="store_true", help="List available styles and exit")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list_styles:
        for key, name in available_styles():
            print(f"{key}\t{name}")
        return 0

    if not args.input:
        parser.print_help()
        return 0

    if not os.path.isfile(args.input):
        print(f"Error: File not found: {args.input}", file=sys.stderr)
        return 1

    output = args.output or default_output(args.input)
    try:
        theme = resolve(args.style)
        content = Path(args.input).read_text(encoding="utf-8")
        print(f"Converting: {args.input}")
        print(f"Style: {theme.name}")
        assets = AssetLoader(os.path.dirname(os.path.abspath(args.input)))
        data = convert_markdown(content, style=args.style, toc=args.toc, cover=args.cover,
                                assets=assets)
    except M2D2Error as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    os.makedirs(os.path.dirname(os.path.abspath(output)), exist_ok=True)
    Path(output).write_bytes(data)
    print(f"Output: {output} ({len(data) / 1024:.1f} KB)")
    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
