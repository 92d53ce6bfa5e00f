"""
EVM bytecode disassembler with static stack-depth statistics.
"""

# Opcode table
from .evm_opcodes import (
    OPCODE_TABLE,
    Category,
    Opcode,
    OpcodeInfo,
    lookup,
)

# Decoding and statistics
from .disassembler import Instruction, disassemble, disassemble_all
from .stats import DisassemblyStats, StatsAccumulator, compute_statistics, fold_statistics

# Input sources
from .sources import (
    BytecodeInputError,
    HexDecodeError,
    InputReadError,
    RpcFetchError,
    Source,
    decode_hex,
    fetch_bytes,
    fetch_onchain,
    read_file,
    read_stdin,
)

__version__ = "0.1.2"

__all__ = [
    # Opcode table
    "OPCODE_TABLE",
    "Category",
    "Opcode",
    "OpcodeInfo",
    "lookup",
    # Core
    "Instruction",
    "disassemble",
    "disassemble_all",
    "DisassemblyStats",
    "StatsAccumulator",
    "compute_statistics",
    "fold_statistics",
    # Input
    "BytecodeInputError",
    "HexDecodeError",
    "InputReadError",
    "RpcFetchError",
    "Source",
    "decode_hex",
    "fetch_bytes",
    "fetch_onchain",
    "read_file",
    "read_stdin",
]
