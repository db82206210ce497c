"""CLI entrypoint for bridgegen."""

import argparse
import sys
import time
from pathlib import Path
from typing import Optional

from .config import ConfigError, GeneratorOptions, load_options
from .errors import ParseFailure
from .logging import configure_logging, get_logger
from .parser import BridgeParser
from .syntax import ObjectDecl, load_syntax_tree
from .translator import translate_batch

logger = get_logger("cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bridgegen",
        description="Generate Qt/C++ classes and Rust cxx shims from object definitions.",
    )
    parser.add_argument("inputs", nargs="+", help="Definition files (.bridge or .json)")
    parser.add_argument("--output-dir", "-o", default="generated", help="Output directory")
    parser.add_argument("--config", "-c", default=None, help="TOML file with a [bridgegen] table")
    parser.add_argument("--namespace-prefix", default=None, help="C++ namespace prefix")
    parser.add_argument(
        "--guard-initialization",
        action="store_true",
        default=None,
        help="Reject calls that arrive before the object finished initialising",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    return parser


def load_definitions(path: Path) -> list[ObjectDecl]:
    """Read object definitions from an IDL or JSON syntax tree file"""
    if path.suffix == ".json":
        return load_syntax_tree(str(path))
    return BridgeParser(path.read_text(encoding="utf-8")).parse()


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entrypoint; returns the process exit code."""
    start_time = time.perf_counter()
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    try:
        options = load_options(Path(args.config)) if args.config else GeneratorOptions()
    except ConfigError as exc:
        logger.error("%s", exc)
        return 1
    options = options.with_overrides(
        namespace_prefix=args.namespace_prefix,
        guard_initialization=args.guard_initialization,
    )

    decls: list[ObjectDecl] = []
    failed = False
    for name in args.inputs:
        path = Path(name)
        try:
            decls.extend(load_definitions(path))
        except FileNotFoundError:
            logger.error("%s does not exist", path)
            failed = True
        except ParseFailure as exc:
            logger.error("%s: cannot parse", path)
            for problem in exc.problems:
                logger.error("  %s", problem)
            failed = True

    result = translate_batch(decls, options)

    for name, violations in result.diagnostics.items():
        logger.error("%s: %d violation(s)", name, len(violations))
        for violation in violations:
            logger.error("  %s", violation)

    output_dir = Path(args.output_dir)
    for artifacts in result.artifacts.values():
        for rel_path, content in artifacts.files().items():
            path = output_dir / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            print(f"Generated: {path}")

    if result.artifacts:
        logger.info("Generated %d object(s) in %s", len(result.artifacts), output_dir)

    elapsed = time.perf_counter() - start_time
    logger.debug("Generation completed in %.2f ms", elapsed * 1000)
    return 1 if failed or not result.ok else 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
