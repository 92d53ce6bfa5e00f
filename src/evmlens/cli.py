#!/usr/bin/env python3
"""
Command line entry point for the EVM bytecode disassembler.

Bytecode is taken from a positional hex argument, --stdin, --file or
--address (fetched over JSON-RPC). With no source at all, stdin is read.
"""

import argparse
import sys
from typing import List, Optional

import structlog

from .config import DEFAULT_NETWORK, DEFAULT_RPC_URLS, color_disabled_by_env, default_log_level, resolve_rpc_url
from .disassembler import disassemble_all
from .logging_config import configure_logging
from .render import BOLD, BRIGHT_BLACK, BRIGHT_BLUE, BRIGHT_GREEN, BRIGHT_RED, colorize, render
from .sources import BytecodeInputError, FileSource, HexSource, OnChainSource, StdinSource, fetch_bytes
from .stats import fold_statistics

logger = structlog.get_logger()

EPILOG = """examples:
    evmlens 60FF                    # Simple PUSH1 instruction
    evmlens 0x60FF61ABCD00          # Multiple instructions with 0x prefix
    evmlens 602060005260005100      # Memory operations (MSTORE/MLOAD)
    evmlens 6001600280900100        # Stack operations (DUP/SWAP/ADD)
    evmlens --stats --format json 6001600201
    evmlens --address 0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48 --rpc https://ethereum.publicnode.com
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="evmlens",
        description="A colorful EVM bytecode disassembler",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    source_group = parser.add_mutually_exclusive_group()
    source_group.add_argument(
        "hex",
        nargs="?",
        metavar="BYTECODE",
        help="Hexadecimal EVM bytecode to disassemble",
    )
    source_group.add_argument(
        "--stdin",
        action="store_true",
        help="Read hex bytecode from standard input",
    )
    source_group.add_argument(
        "--file",
        metavar="PATH",
        help="Read hex bytecode from a file",
    )
    source_group.add_argument(
        "--address",
        help="Fetch the deployed code of this contract address",
    )

    parser.add_argument(
        "--rpc",
        metavar="URL",
        help="JSON-RPC endpoint used with --address (default: $EVMLENS_RPC_URL or the network's public node)",
    )
    parser.add_argument(
        "--network",
        choices=sorted(DEFAULT_RPC_URLS),
        default=DEFAULT_NETWORK,
        help="Network whose public RPC endpoint is used when --rpc is not given",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json", "yaml"],
        default="text",
        help="Output format",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Include byte length, opcode count and stack depth statistics",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit log lines as JSON",
    )
    return parser


def select_source(args: argparse.Namespace, parser: argparse.ArgumentParser):
    if args.rpc and not args.address:
        parser.error("--rpc can only be used with --address")

    if args.address:
        return OnChainSource(args.address, resolve_rpc_url(args.rpc, args.network))
    if args.file:
        return FileSource(args.file)
    if args.hex is not None:
        return HexSource(args.hex)
    return StdinSource()


def use_color(args: argparse.Namespace, stream) -> bool:
    if args.no_color or color_disabled_by_env():
        return False
    return hasattr(stream, "isatty") and stream.isatty()


def print_error(message: str, color: bool) -> None:
    print(f"{colorize('Error:', BRIGHT_RED + BOLD, color)} {message}", file=sys.stderr)


def print_usage_hint(color: bool) -> None:
    print(file=sys.stderr)
    print(colorize("Usage examples:", BRIGHT_BLUE + BOLD, color), file=sys.stderr)
    print(f"  {colorize('evmlens', BRIGHT_GREEN, color)} 60FF61ABCD00", file=sys.stderr)
    print(f"  {colorize('evmlens', BRIGHT_GREEN, color)} 0x60FF61ABCD00", file=sys.stderr)
    print(file=sys.stderr)
    print(
        colorize("The input should be valid hexadecimal EVM bytecode.", BRIGHT_BLACK, color),
        file=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Parse arguments, load bytecode and print its disassembly.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        "DEBUG" if args.verbose else default_log_level(),
        json_output=args.log_json,
    )
    color = use_color(args, sys.stdout)
    error_color = use_color(args, sys.stderr)

    try:
        source = select_source(args, parser)
        bytecode = fetch_bytes(source)
        logger.debug("Loaded bytecode", source=type(source).__name__, byte_length=len(bytecode))

        instructions = disassemble_all(bytecode)
        stats = fold_statistics(instructions, len(bytecode)) if args.stats else None

        print(render(args.format, instructions, stats, color))
        return 0

    except BytecodeInputError as e:
        print_error(str(e), error_color)
        if not args.address:
            print_usage_hint(error_color)
        return 1

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    except Exception as e:
        logger.error("Disassembly failed", error=str(e))
        print_error(str(e), error_color)
        return 1


if __name__ == "__main__":
    sys.exit(main())
