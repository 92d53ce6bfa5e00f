"""Text, JSON and YAML rendering of a disassembly."""

import json
from typing import Any, Dict, Iterable, List, Optional

import yaml

from .disassembler import Instruction
from .evm_opcodes import Category
from .stats import DisassemblyStats

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
MAGENTA = "\033[35m"
CYAN = "\033[36m"
WHITE = "\033[37m"
BRIGHT_BLACK = "\033[90m"
BRIGHT_RED = "\033[91m"
BRIGHT_GREEN = "\033[92m"
BRIGHT_YELLOW = "\033[93m"
BRIGHT_BLUE = "\033[94m"
BRIGHT_MAGENTA = "\033[95m"
BRIGHT_CYAN = "\033[96m"
BRIGHT_WHITE = "\033[97m"

CATEGORY_STYLES = {
    Category.STACK: GREEN,
    Category.ARITHMETIC: BRIGHT_YELLOW + BOLD,
    Category.COMPARISON: YELLOW,
    Category.BITWISE: YELLOW,
    Category.MEMORY: BRIGHT_BLUE + BOLD,
    Category.STORAGE: BRIGHT_MAGENTA + BOLD,
    Category.CRYPTO: BRIGHT_CYAN + BOLD,
    Category.CONTROL: BRIGHT_RED + BOLD,
    Category.CALL: RED + BOLD,
    Category.CREATE: RED,
    Category.BLOCK_INFO: CYAN,
    Category.TERMINATION: BRIGHT_WHITE + BOLD,
    Category.INVALID: DIM,
}

HEADER = "EVM BYTECODE DISASSEMBLY"
RULE_WIDTH = 50


def colorize(text: str, style: str, color: bool = True) -> str:
    if not color or not style:
        return text
    return f"{style}{text}{RESET}"


def style_for(instruction: Instruction) -> str:
    # PUSHes stand out from the rest of the stack family
    if instruction.opcode.is_push:
        return BRIGHT_GREEN + BOLD
    return CATEGORY_STYLES.get(instruction.opcode.category, "")


def format_instruction(instruction: Instruction, color: bool = True) -> str:
    """Render one instruction as ``0000 │ PUSH1 0xff``."""
    mnemonic = colorize(instruction.mnemonic, style_for(instruction), color)
    line = f"{colorize(f'{instruction.position:04x}', BRIGHT_BLACK, color)} {colorize('│', BRIGHT_BLACK, color)} {mnemonic}"
    if instruction.opcode.is_push:
        line += f" 0x{bytes(instruction.immediate).hex()}"
        if instruction.is_truncated:
            line += colorize(" (truncated)", DIM, color)
    return line


def render_text(
    instructions: Iterable[Instruction],
    stats: Optional[DisassemblyStats] = None,
    color: bool = True,
) -> str:
    rule = colorize("=" * RULE_WIDTH, BRIGHT_BLACK, color)
    lines = [colorize(HEADER, BRIGHT_BLUE + BOLD, color), rule]

    count = 0
    for instruction in instructions:
        lines.append(format_instruction(instruction, color))
        count += 1

    lines.append(rule)
    lines.append(
        f"{colorize(str(count), BRIGHT_GREEN + BOLD, color)} {colorize('opcodes total', BRIGHT_BLACK, color)}"
    )

    if stats is not None:
        lines.append("")
        lines.append(colorize("STATISTICS", BRIGHT_BLUE + BOLD, color))
        for label, value in (
            ("Byte length", stats.byte_length),
            ("Opcode count", stats.opcode_count),
            ("Max stack depth", stats.max_stack_depth),
            ("Final stack depth", stats.final_stack_depth),
        ):
            lines.append(f"  {label + ':':<19}{value}")

    return "\n".join(lines)


def instruction_to_dict(instruction: Instruction) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "position": instruction.position,
        "opcode": f"0x{instruction.opcode.byte_value:02x}",
        "mnemonic": instruction.mnemonic,
        "category": instruction.opcode.category.value,
    }
    if instruction.opcode.is_push:
        entry["immediate"] = "0x" + bytes(instruction.immediate).hex()
        if instruction.is_truncated:
            entry["truncated"] = True
    return entry


def to_document(
    instructions: Iterable[Instruction], stats: Optional[DisassemblyStats] = None
) -> Dict[str, Any]:
    document: Dict[str, Any] = {
        "instructions": [instruction_to_dict(instruction) for instruction in instructions]
    }
    if stats is not None:
        document["stats"] = stats.to_dict()
    return document


def render_json(instructions: Iterable[Instruction], stats: Optional[DisassemblyStats] = None) -> str:
    return json.dumps(to_document(instructions, stats), indent=2)


def render_yaml(instructions: Iterable[Instruction], stats: Optional[DisassemblyStats] = None) -> str:
    return yaml.safe_dump(to_document(instructions, stats), default_flow_style=False, sort_keys=False)


RENDERERS = {
    "json": render_json,
    "yaml": render_yaml,
}


def render(
    fmt: str,
    instructions: List[Instruction],
    stats: Optional[DisassemblyStats] = None,
    color: bool = True,
) -> str:
    if fmt == "text":
        return render_text(instructions, stats, color)
    if fmt not in RENDERERS:
        raise ValueError(f"Unknown output format: {fmt}")
    return RENDERERS[fmt](instructions, stats)
