"""Aggregate statistics over a disassembled instruction sequence."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, Tuple, Union

from .disassembler import BytesLike, Instruction, disassemble


@dataclass
class DisassemblyStats:
    byte_length: int = 0
    opcode_count: int = 0
    max_stack_depth: int = 0
    # Running depth after the last instruction; negative when pops outnumber pushes
    final_stack_depth: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class StatsAccumulator:
    """
    Single-pass fold of instructions into DisassemblyStats.

    The running stack depth starts at 0 and is the sum of each opcode's
    stack delta. It is not clamped at zero, so bytecode that pops more than
    it pushes drives it negative; the reported maximum starts at 0 and can
    only rise.
    """

    def __init__(self, byte_length: int = 0):
        self.byte_length = byte_length
        self.opcode_count = 0
        self.depth = 0
        self.max_depth = 0

    def add(self, instruction: Instruction) -> None:
        self.opcode_count += 1
        self.depth += instruction.opcode.stack_delta
        if self.depth > self.max_depth:
            self.max_depth = self.depth

    def result(self) -> DisassemblyStats:
        return DisassemblyStats(
            byte_length=self.byte_length,
            opcode_count=self.opcode_count,
            max_stack_depth=self.max_depth,
            final_stack_depth=self.depth,
        )


def fold_statistics(
    instructions: Iterable[Union[Instruction, Tuple[int, Instruction]]],
    byte_length: int,
) -> DisassemblyStats:
    """
    Fold an already-decoded instruction stream into statistics.

    Args:
        instructions: Instructions, or (position, Instruction) pairs as
            yielded by disassemble()
        byte_length: Length of the buffer the instructions came from

    Returns:
        DisassemblyStats for the stream
    """
    accumulator = StatsAccumulator(byte_length)
    for item in instructions:
        if isinstance(item, tuple):
            item = item[1]
        accumulator.add(item)
    return accumulator.result()


def compute_statistics(bytecode: BytesLike) -> DisassemblyStats:
    """Disassemble bytecode and return its statistics."""
    return fold_statistics(disassemble(bytecode), memoryview(bytecode).nbytes)
