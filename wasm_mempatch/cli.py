#!/usr/bin/env python3
"""
Command-line entry point for the WebAssembly memory patcher.

Disassembles a module with `wasm-tools print`, rewrites its initial memory
page count and `$__stack_pointer` initializer, and reassembles it with
`wasm-tools parse`. Nothing is written to stdout on success.
"""

import argparse
import sys
from typing import List, NoReturn, Optional

import structlog

from .config import DEFAULT_MEMORY_PAGES, PAGE_SIZE, resolve_configuration
from .errors import PatcherError
from .logging_config import configure_logging
from .patcher import patch_module_text
from .toolchain import assemble, disassemble

logger = structlog.get_logger()

PROG = "wasm-mempatch"


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser whose usage errors exit with status 1 instead of 2."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(
            1,
            f"Error: {message}\nTry '{self.prog} --help' for more information\n",
        )


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=PROG,
        usage="%(prog)s <input.wasm> <output.wasm> [options]",
        description="Set a WebAssembly module's initial memory size and move its "
                    "stack pointer to the top of that memory.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Example:\n"
            f"  {PROG} component.wasm component.fix.wasm\n"
            f"  {PROG} component.wasm component.fix.wasm --pages 256\n"
        ),
    )
    parser.add_argument("input", metavar="input.wasm", help="Module to patch")
    parser.add_argument("output", metavar="output.wasm", help="Where to write the patched module")
    parser.add_argument(
        "-p", "--pages",
        type=int,
        default=None,
        metavar="PAGES",
        help=f"Memory pages of {PAGE_SIZE} bytes (default: {DEFAULT_MEMORY_PAGES})",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        help="YAML file providing defaults for 'pages' and 'wasm_tools'",
    )
    parser.add_argument(
        "--wasm-tools",
        metavar="PATH",
        default=None,
        help="wasm-tools executable (default: $WASM_TOOLS or 'wasm-tools')",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging on stderr",
    )
    return parser


def run(argv: Optional[List[str]] = None) -> None:
    """Parse arguments and run disassemble -> patch -> assemble."""
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else "WARNING")

    config = resolve_configuration(
        args.input,
        args.output,
        pages=args.pages,
        wasm_tools=args.wasm_tools,
        config_path=args.config,
    )
    logger.info(
        "Patching module",
        input=config.input_path,
        output=config.output_path,
        pages=config.memory_pages,
        stack_pointer=config.stack_pointer,
    )

    wat = disassemble(config.input_path, config.wasm_tools)
    wat_fixed = patch_module_text(wat, config.memory_pages)
    assemble(wat_fixed, config.output_path, config.wasm_tools)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the patcher and translate failures into an exit status.

    Returns:
        Exit code (0 for success, 1 for any failure)
    """
    try:
        run(argv)
        return 0

    except PatcherError as e:
        # Collaborator stderr usually carries its own trailing newline
        message = str(e)
        sys.stderr.write(message if message.endswith("\n") else message + "\n")
        return 1

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130  # Standard exit code for Ctrl+C

    except Exception as e:
        logger.error("Unexpected failure", error=str(e), exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
