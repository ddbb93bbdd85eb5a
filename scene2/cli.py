"""
Scene2 CLI - Command-line interface for scene2.bin files.

Commands:
  scene2 inspect   - Show the header and section table of a scene
  scene2 list      - List chunks (optionally one section or type)
  scene2 show      - Show decoded properties of one chunk
  scene2 convert   - Convert to JSON / CSV / TXT, or back from JSON
  scene2 roundtrip - Check that parse + serialize reproduces the file
  scene2 set       - Edit placement, enemy or header fields
  scene2 view      - Browse a scene in the terminal (TUI)
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path


def _load(path: str):
    """Read a scene file or exit with an error message."""
    from scene2.reader import Scene2Reader

    if not Path(path).is_file():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)
    try:
        return Scene2Reader.read(path)
    except ValueError as e:
        # Scene2CorruptionError and size limit both land here
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _check_output(output: str) -> None:
    if ".." in Path(output).parts:
        print("Error: Output path must not contain '..' (path traversal)", file=sys.stderr)
        sys.exit(1)


def cmd_inspect(args: argparse.Namespace) -> None:
    """Show header fields and the section table."""
    from rich.console import Console
    from rich.table import Table

    doc = _load(args.path)
    console = Console()

    header = doc.header
    console.print(f"[bold]File:[/bold] {args.path}")
    if header.content is not None and header.content.props is not None:
        props = header.content.props
        console.print(f"[bold]Title:[/bold] {props.text}")
        console.print(f"[bold]Declared size:[/bold] {header.declared_size}")
        console.print(
            f"[bold]View distance:[/bold] {props.view_distance:g}   "
            f"[bold]Camera distance:[/bold] {props.camera_distance:g}"
        )
        console.print(
            f"[bold]Clipping:[/bold] near={props.near_clipping:g} far={props.far_clipping:g}"
        )
    else:
        console.print("[yellow]No header found.[/yellow]")

    table = Table(title="Sections")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Kind")
    table.add_column("Start", justify="right")
    table.add_column("Length", justify="right")
    table.add_column("Chunks", justify="right")
    for section in doc.sections:
        table.add_row(
            str(section.position),
            section.name,
            section.kind.value,
            f"0x{section.start:X}",
            str(section.length),
            str(len(section.chunks)),
        )
    console.print(table)


def cmd_list(args: argparse.Namespace) -> None:
    """List chunks, one per line."""
    doc = _load(args.path)

    sections = doc.sections
    if args.section:
        sections = [s for s in sections if s.name == args.section]
        if not sections:
            print(f"Section '{args.section}' not found.", file=sys.stderr)
            print(f"Available: {', '.join(s.name for s in doc.sections)}", file=sys.stderr)
            sys.exit(1)

    for section in sections:
        for chunk in section.chunks:
            if args.type and chunk.type.value != args.type:
                continue
            print(f"{section.name:20s}  {chunk.id:>5d}  {chunk.type.value:16s}  {chunk.name}")


def cmd_show(args: argparse.Namespace) -> None:
    """Show decoded properties of a chunk (or the header)."""
    import json
    from dataclasses import asdict

    doc = _load(args.path)

    if args.name == "Header":
        chunk = doc.header.content
    else:
        chunk = doc.find_chunk(args.name)
    if chunk is None:
        print(f"Chunk '{args.name}' not found.", file=sys.stderr)
        sys.exit(1)

    if args.raw:
        print(bytes(chunk.raw_data).hex(" "))
        return

    print(f"{chunk.type.value}: {chunk.name}")
    if chunk.props is None:
        print("(no decoded properties)")
        return
    print(json.dumps(asdict(chunk.props), indent=2, ensure_ascii=False))


def _infer_format(filename: str) -> str | None:
    """Infer format from file extension."""
    ext_map = {".json": "json", ".csv": "csv", ".txt": "txt", ".bin": "bin"}
    return ext_map.get(Path(filename).suffix.lower())


def cmd_convert(args: argparse.Namespace) -> None:
    """Convert to/from a scene file."""
    from scene2.converters import convert_from, convert_to
    from scene2.spec import MAX_FILE_SIZE

    known_formats = {"json", "csv", "txt"}

    if args.format_or_input in known_formats and args.input:
        fmt = args.format_or_input
        input_file = args.input
    else:
        input_file = args.format_or_input
        inferred = _infer_format(input_file)
        inferred_from_output = _infer_format(args.output) if args.output else None
        resolved = (
            inferred_from_output
            if args.direction == "to" and inferred_from_output and inferred_from_output != "bin"
            else inferred
        )
        if not resolved or resolved == "bin":
            print("Error: Cannot infer format. Specify explicitly:", file=sys.stderr)
            print(f"  scene2 convert {args.direction} <json|csv|txt> {input_file}", file=sys.stderr)
            sys.exit(1)
        fmt = resolved

    if args.direction == "from":
        input_path = Path(input_file)
        if not input_path.is_file():
            print(f"Error: File not found: {input_file}", file=sys.stderr)
            sys.exit(1)
        file_size = input_path.stat().st_size
        if file_size > MAX_FILE_SIZE:
            print(
                f"Error: File size {file_size} exceeds maximum {MAX_FILE_SIZE} bytes",
                file=sys.stderr,
            )
            sys.exit(1)
        try:
            doc = convert_from(input_path.read_text(encoding="utf-8"), fmt)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        output = args.output or input_path.stem + ".bin"
        _check_output(output)
        nbytes = doc.write(output)
        print(f"Converted {input_file} -> {output} ({nbytes} bytes)")

    elif args.direction == "to":
        doc = _load(input_file)
        result = convert_to(doc, fmt)
        if args.output:
            _check_output(args.output)
            Path(args.output).write_text(result, encoding="utf-8")
            print(f"Converted {input_file} -> {args.output}")
        else:
            print(result, end="")


def cmd_roundtrip(args: argparse.Namespace) -> None:
    """Parse and re-serialize, then compare with the file on disk."""
    import hashlib

    from scene2.writer import Scene2Writer

    doc = _load(args.path)
    original = Path(args.path).read_bytes()
    rebuilt = Scene2Writer.serialize(doc)

    if rebuilt == original:
        digest = hashlib.sha256(rebuilt).hexdigest()
        print(f"OK: {args.path} round-trips byte for byte (sha256={digest[:16]}...)")
        return

    limit = min(len(rebuilt), len(original))
    first_diff = next((i for i in range(limit) if rebuilt[i] != original[i]), limit)
    print(
        f"FAIL: {args.path} differs after round trip "
        f"(first difference at 0x{first_diff:X}, {len(original)} -> {len(rebuilt)} bytes)"
    )
    sys.exit(1)


def _parse_assignments(pairs: list[str]) -> dict[str, float]:
    fields = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            print(f"Error: Expected field=value, got '{pair}'", file=sys.stderr)
            sys.exit(1)
        try:
            fields[key.strip()] = float(value)
        except ValueError:
            print(f"Error: Not a number for '{key}': '{value}'", file=sys.stderr)
            sys.exit(1)
    return fields


def cmd_set(args: argparse.Namespace) -> None:
    """Write new field values into a chunk and save the scene."""
    from scene2.edit import update_enemy_props, update_header_props, update_standard_props
    from scene2.spec import ChunkType

    doc = _load(args.path)
    fields = _parse_assignments(args.assignments)

    try:
        if args.name == "Header":
            update_header_props(doc.header, **fields)
        else:
            chunk = doc.find_chunk(args.name)
            if chunk is None:
                print(f"Chunk '{args.name}' not found.", file=sys.stderr)
                sys.exit(1)
            if chunk.type == ChunkType.ENEMY:
                update_enemy_props(chunk, **fields)
            else:
                update_standard_props(chunk, **fields)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    output = args.output or args.path
    _check_output(output)
    nbytes = doc.write(output)
    print(f"Updated {args.name} ({', '.join(fields)}) -> {output} ({nbytes} bytes)")


def cmd_view(args: argparse.Namespace) -> None:
    """Browse a scene file in the terminal."""
    try:
        from scene2.tui.viewer import run_viewer
    except ImportError:
        print(
            "TUI viewer requires the 'textual' package.\n"
            "Install it with: pip install \"scene2[tui]\"",
            file=sys.stderr,
        )
        sys.exit(1)
    run_viewer(args.path)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="scene2",
        description="Scene2 - read, edit and write scene2.bin mission files.",
    )
    from scene2 import __version__
    parser.add_argument("--version", action="version", version=f"scene2 {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log parse progress to stderr")
    sub = parser.add_subparsers(dest="command")

    # inspect
    p_inspect = sub.add_parser("inspect", help="Show header and sections of a scene")
    p_inspect.add_argument("path", help="Path to scene2.bin")

    # list
    p_list = sub.add_parser("list", help="List chunks of a scene")
    p_list.add_argument("path", help="Path to scene2.bin")
    p_list.add_argument("-s", "--section", help="Only this section (e.g. 'Objects')")
    p_list.add_argument("-t", "--type", help="Only this chunk type (e.g. 'Light')")

    # show
    p_show = sub.add_parser("show", help="Show decoded properties of a chunk")
    p_show.add_argument("path", help="Path to scene2.bin")
    p_show.add_argument("name", help="Chunk name, or 'Header'")
    p_show.add_argument("--raw", action="store_true", help="Print the payload as hex instead")

    # convert
    p_convert = sub.add_parser("convert", help="Convert to/from a scene file")
    p_convert.add_argument("direction", choices=["to", "from"], help="Conversion direction")
    p_convert.add_argument("format_or_input", help="Format (json, csv, txt) or input file")
    p_convert.add_argument("input", nargs="?", default=None, help="Input file path")
    p_convert.add_argument("-o", "--output", help="Output file path")

    # roundtrip
    p_roundtrip = sub.add_parser("roundtrip", help="Verify parse + serialize is lossless")
    p_roundtrip.add_argument("path", help="Path to scene2.bin")

    # set
    p_set = sub.add_parser("set", help="Edit fields of a chunk or the header")
    p_set.add_argument("path", help="Path to scene2.bin")
    p_set.add_argument("name", help="Chunk name, or 'Header'")
    p_set.add_argument("assignments", nargs="+", help="field=value pairs (e.g. position_x=12.5)")
    p_set.add_argument("-o", "--output", help="Output path (default: overwrite input)")

    # view
    p_view = sub.add_parser("view", help="Browse a scene in the terminal")
    p_view.add_argument("path", help="Path to scene2.bin")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    if not args.command:
        print("Scene2 - scene2.bin reader / editor\n")
        print("Usage:")
        print("  scene2 inspect scene2.bin")
        print("  scene2 list scene2.bin -s Objects -t Light")
        print("  scene2 show scene2.bin Tommy")
        print("  scene2 convert to json scene2.bin -o scene.json")
        print("  scene2 convert from json scene.json -o rebuilt.bin")
        print("  scene2 roundtrip scene2.bin")
        print("  scene2 set scene2.bin Tommy position_x=12.5 -o edited.bin")
        print("  scene2 view scene2.bin")
        print()
        print("Run 'scene2 <command> --help' for details on any command.")
        sys.exit(0)

    commands = {
        "inspect": cmd_inspect,
        "list": cmd_list,
        "show": cmd_show,
        "convert": cmd_convert,
        "roundtrip": cmd_roundtrip,
        "set": cmd_set,
        "view": cmd_view,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()
