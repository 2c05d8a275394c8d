import argparse
import logging
import sys
from pathlib import Path

from .codegen import CodegenError
from .loader import SpecError, load_scope_file
from .validation import validate_scope

logger = logging.getLogger(__name__)


def cmd_render(args: argparse.Namespace) -> int:
    scope = load_scope_file(args.file)
    code: str = scope.render(indent=" " * args.indent)
    if args.output:
        Path(args.output).write_text(code, encoding="utf-8")
        logger.info("wrote %s", args.output)
    else:
        print(code, end="")
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    scope = load_scope_file(args.file)
    res = validate_scope(scope)
    for err in res.errors:
        print(err, file=sys.stderr)
    return 0 if res.ok else 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser("rscodegen")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(required=True)

    s = sub.add_parser("render", help="Render a JSON declaration tree to source text")
    s.add_argument("file", help="JSON file describing the declaration tree")
    s.add_argument("-o", "--output", help="Write to this path instead of stdout")
    s.add_argument("--indent", type=int, default=4, help="Spaces per indentation level")
    s.set_defaults(func=cmd_render)

    s = sub.add_parser("check", help="Report builder errors in a JSON declaration tree")
    s.add_argument("file", help="JSON file describing the declaration tree")
    s.set_defaults(func=cmd_check)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except (CodegenError, SpecError, OSError) as e:
        print(f"rscodegen: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
