"""
Linear-sweep EVM disassembler.

Bytecode is decoded left to right into a lazy sequence of ``(position,
Instruction)`` pairs. PUSH operands are sliced out of the source buffer
without copying. A PUSH whose operand runs past the end of the buffer keeps
whatever bytes remain and ends the sequence.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

from .evm_opcodes import OpcodeInfo, lookup

BytesLike = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True)
class Instruction:
    """A decoded instruction: where it starts, what it is, and its operand bytes."""

    position: int
    opcode: OpcodeInfo
    immediate: memoryview = field(hash=False)

    @property
    def mnemonic(self) -> str:
        return self.opcode.mnemonic

    @property
    def size(self) -> int:
        """Bytes consumed from the buffer, opcode byte included."""
        return 1 + len(self.immediate)

    @property
    def is_truncated(self) -> bool:
        return len(self.immediate) < self.opcode.immediate_length

    @property
    def immediate_value(self) -> Optional[int]:
        if not self.opcode.is_push:
            return None
        return int.from_bytes(self.immediate, "big")

    def to_bytes(self) -> bytes:
        return bytes([self.opcode.byte_value]) + bytes(self.immediate)

    def __str__(self) -> str:
        if not self.opcode.is_push:
            return self.mnemonic
        return f"{self.mnemonic} 0x{bytes(self.immediate).hex()}"


def _as_view(bytecode: BytesLike) -> memoryview:
    if isinstance(bytecode, str):
        raise TypeError("disassemble() takes raw bytes; decode hex input first")
    view = memoryview(bytecode)
    if view.format != "B" or view.ndim != 1:
        view = view.cast("B")
    return view


def disassemble(bytecode: BytesLike) -> Iterator[Tuple[int, Instruction]]:
    """
    Decode bytecode into (position, Instruction) pairs.

    The generator does no look-ahead beyond the instruction it is about to
    yield, so callers may stop consuming at any point. The input is never
    modified; disassembling the same buffer twice yields equal sequences.

    Args:
        bytecode: Raw EVM bytecode (bytes, bytearray or memoryview)

    Yields:
        Tuples (position, Instruction) in strictly increasing position order

    Raises:
        TypeError: If given a str instead of raw bytes
    """
    view = _as_view(bytecode)
    length = len(view)
    cursor = 0

    while cursor < length:
        info = lookup(view[cursor])
        start = cursor + 1
        end = min(start + info.immediate_length, length)
        instruction = Instruction(position=cursor, opcode=info, immediate=view[start:end])
        yield cursor, instruction

        if instruction.is_truncated:
            return
        cursor = end


def disassemble_all(bytecode: BytesLike) -> List[Instruction]:
    """Eagerly decode bytecode into a list of instructions."""
    return [instruction for _, instruction in disassemble(bytecode)]
