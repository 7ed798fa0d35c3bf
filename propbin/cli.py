"""
propbin-dump - inspect a property bin file
==========================================

Decodes a PROP / PTCH bin file and prints a summary, or the full value tree.
On a malformed file the diagnostic trace is printed, outermost step first,
one `<condition> @ <offset>` per line.

Usage:
------
    propbin-dump skin0.bin
    propbin-dump skin0.bin --tree
    propbin-dump skin0.bin --tree --depth 2
    propbin-dump legacy.bin --string-field-names
    python -m propbin skin0.bin --verbose
"""

import argparse
import logging
import os
from typing import List, Optional

from .diagnostics import DecodeError
from .reader import read_binary
from .types import type_name
from .values import (
    Document,
    EmbedValue,
    List2Value,
    ListValue,
    MapValue,
    OptionValue,
    PointerValue,
    Value,
)


def format_value(value: Value, indent: int = 0, max_depth: Optional[int] = None) -> List[str]:
    """
    Render a value as indented text lines.

    Args:
        value: Value to render
        indent: Current nesting level
        max_depth: Collapse containers nested deeper than this

    Returns:
        Lines without trailing newlines; the first line is not indented
    """
    pad = "  " * (indent + 1)
    collapsed = max_depth is not None and indent >= max_depth

    if isinstance(value, (EmbedValue, PointerValue)):
        head = f"{type_name(value.type).lower()} {value.name}"
        if isinstance(value, PointerValue) and value.is_null():
            return [f"{head} null"]
        if collapsed:
            return [f"{head} {{ {len(value.items)} fields }}"]
        lines = [f"{head} {{"]
        for name, item in value.items:
            sub = format_value(item, indent + 1, max_depth)
            lines.append(f"{pad}{_format_name(name)}: {sub[0]}")
            lines.extend(sub[1:])
        lines.append("  " * indent + "}")
        return lines

    if isinstance(value, MapValue):
        head = f"map[{type_name(value.key_type)},{type_name(value.value_type)}]"
        if collapsed:
            return [f"{head} {{ {len(value.items)} items }}"]
        lines = [f"{head} {{"]
        for key, item in value.items:
            sub = format_value(item, indent + 1, max_depth)
            lines.append(f"{pad}{format_value(key)[0]} = {sub[0]}")
            lines.extend(sub[1:])
        lines.append("  " * indent + "}")
        return lines

    if isinstance(value, (OptionValue, ListValue, List2Value)):
        head = f"{type_name(value.type).lower()}[{type_name(value.value_type)}]"
        if collapsed:
            return [f"{head} {{ {len(value.items)} items }}"]
        lines = [f"{head} {{"]
        for item in value.items:
            sub = format_value(item, indent + 1, max_depth)
            lines.append(f"{pad}{sub[0]}")
            lines.extend(sub[1:])
        lines.append("  " * indent + "}")
        return lines

    return [_format_scalar(value.value)]


def _format_name(name) -> str:
    if isinstance(name, bytes):
        return name.decode('utf-8', errors='replace')
    return str(name)


def _format_scalar(value) -> str:
    if isinstance(value, bytes):
        return repr(value.decode('utf-8', errors='replace'))
    if isinstance(value, float):
        return f"{value:g}"
    if isinstance(value, tuple):
        return "{ " + ", ".join(_format_scalar(v) for v in value) + " }"
    return str(value)


def print_summary(doc: Document):
    """Print the header sections and per-entry field counts."""
    print(f"\nType:    {doc.type.decode('ascii')}")
    print(f"Version: {doc.version}")
    print(f"Linked:  {len(doc.linked)}")
    for path in doc.linked:
        print(f"  {path.decode('utf-8', errors='replace')}")
    print(f"Entries: {len(doc.entries.items)}")
    for key, entry in doc.entries.items:
        print(f"  {key.value}  class {entry.name}  ({len(entry.items)} fields)")


def print_tree(doc: Document, max_depth: Optional[int] = None):
    for name, section in doc.sections.items():
        lines = format_value(section, 0, max_depth)
        print(f"{name}: {lines[0]}")
        for line in lines[1:]:
            print(line)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description='Property bin inspector',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  propbin-dump skin0.bin
  propbin-dump skin0.bin --tree --depth 2
  propbin-dump legacy.bin --string-field-names
"""
    )

    parser.add_argument('input', help='Input bin file')
    parser.add_argument('--tree', '-t', action='store_true',
                        help='Print the full value tree')
    parser.add_argument('--depth', '-d', type=int, metavar='N',
                        help='Collapse containers nested deeper than N (with --tree)')
    parser.add_argument('--string-field-names', action='store_true',
                        help='Field names are u16-prefixed strings instead of u32 hashes')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')

    if not os.path.exists(args.input):
        print(f"Error: File not found: {args.input}")
        return 1

    with open(args.input, 'rb') as f:
        data = f.read()

    print("=" * 60)
    print("Property Bin Inspector")
    print("=" * 60)
    print(f"\nInput: {args.input}")
    print(f"Size: {len(data):,} bytes")

    try:
        doc = read_binary(data, string_field_names=args.string_field_names)
    except DecodeError as e:
        print("\nError: not a valid bin file")
        for diagnostic in e.diagnostics:
            print(f"  {diagnostic}")
        return 1

    if args.tree:
        print()
        print_tree(doc, args.depth)
    else:
        print_summary(doc)

    return 0
