import itertools

from hypothesis import given, settings
from hypothesis import strategies as st
from hypothesis.strategies import composite

from evmlens.disassembler import disassemble, disassemble_all
from evmlens.evm_opcodes import INVALID_MNEMONIC, OPCODE_TABLE, Opcode, lookup
from evmlens.stats import compute_statistics

# Arbitrary binary data, most of it not valid bytecode
bytecode_strategy = st.binary(min_size=0, max_size=500)

# Unassigned byte values, plus the designated INVALID opcode
invalid_opcode_strategy = st.one_of(
    st.integers(min_value=0x0C, max_value=0x0F),
    st.integers(min_value=0x1E, max_value=0x1F),
    st.integers(min_value=0x21, max_value=0x2F),
    st.integers(min_value=0x4B, max_value=0x4F),
    st.integers(min_value=0xA5, max_value=0xEF),
    st.integers(min_value=0xF6, max_value=0xF9),
    st.integers(min_value=0xFB, max_value=0xFC),
    st.just(0xFE),
)


@composite
def generate_bytecode_sequence(draw):
    """Opcode sequences where every PUSH carries its full operand."""
    elements = []
    length = draw(st.integers(min_value=0, max_value=100))
    for _ in range(length):
        opcode_val = draw(st.integers(min_value=0x00, max_value=0xFF))
        elements.append(opcode_val.to_bytes(1, "big"))
        if Opcode.PUSH1 <= opcode_val <= Opcode.PUSH32:
            push_size = opcode_val - Opcode.PUSH1 + 1
            elements.append(draw(st.binary(min_size=push_size, max_size=push_size)))
    return b"".join(elements), length


@composite
def push_operation_strategy(draw):
    push_opcode_val = draw(st.integers(min_value=Opcode.PUSH1, max_value=Opcode.PUSH32))
    push_size = push_opcode_val - Opcode.PUSH1 + 1
    push_data_bytes = draw(st.binary(min_size=push_size, max_size=push_size))
    return push_opcode_val, push_data_bytes, push_opcode_val.to_bytes(1, "big") + push_data_bytes


@settings(max_examples=200, deadline=None)
@given(bytecode=bytecode_strategy)
def test_instructions_reassemble_to_input(bytecode: bytes):
    """Opcode byte + immediate of every instruction, in order, reproduces the buffer."""
    instructions = disassemble_all(bytecode)
    assert b"".join(instr.to_bytes() for instr in instructions) == bytecode


@settings(max_examples=200, deadline=None)
@given(bytecode=bytecode_strategy)
def test_positions_start_at_zero_and_advance_by_size(bytecode: bytes):
    pairs = list(disassemble(bytecode))
    if not bytecode:
        assert pairs == []
        return

    assert pairs[0][0] == 0
    for (position, instr), (next_position, _) in zip(pairs, pairs[1:]):
        assert position == instr.position
        assert next_position == position + 1 + instr.opcode.immediate_length


@settings(max_examples=200, deadline=None)
@given(bytecode=bytecode_strategy)
def test_only_the_last_instruction_may_be_truncated(bytecode: bytes):
    instructions = disassemble_all(bytecode)
    assert not any(instr.is_truncated for instr in instructions[:-1])


@settings(max_examples=200, deadline=None)
@given(data=generate_bytecode_sequence())
def test_disassemble_valid_sequences(data):
    """Well-formed sequences decode into exactly one instruction per drawn opcode."""
    bytecode, length = data
    instructions = disassemble_all(bytecode)
    assert len(instructions) == length
    assert not any(instr.is_truncated for instr in instructions)


@settings(max_examples=500, deadline=None)
@given(push_info=push_operation_strategy())
def test_disassemble_single_push_operation(push_info):
    push_opcode_val, push_data_bytes, bytecode = push_info
    operations = list(disassemble(bytecode))
    assert len(operations) == 1, "Should disassemble into exactly one operation"

    position, instr = operations[0]
    assert position == 0
    assert instr.opcode.byte_value == push_opcode_val
    assert instr.mnemonic == f"PUSH{len(push_data_bytes)}"
    assert bytes(instr.immediate) == push_data_bytes
    assert instr.immediate_value == int.from_bytes(push_data_bytes, "big")


@settings(max_examples=300, deadline=None)
@given(
    prefix=st.binary(max_size=20).filter(lambda b: all(not 0x60 <= x <= 0x7F for x in b)),
    invalid=invalid_opcode_strategy,
    suffix=st.binary(max_size=20),
)
def test_invalid_bytes_do_not_stop_decoding(prefix, invalid, suffix):
    bytecode = prefix + bytes([invalid]) + suffix
    instructions = disassemble_all(bytecode)

    marker = instructions[len(prefix)]
    assert marker.position == len(prefix)
    assert marker.mnemonic == INVALID_MNEMONIC
    assert len(marker.immediate) == 0
    # Everything after the marker is decoded as usual
    assert b"".join(instr.to_bytes() for instr in instructions[len(prefix) + 1:]) == suffix


@settings(max_examples=200, deadline=None)
@given(bytecode=bytecode_strategy)
def test_max_stack_depth_is_peak_of_running_sum(bytecode: bytes):
    deltas = [instr.opcode.stack_delta for instr in disassemble_all(bytecode)]
    running = list(itertools.accumulate(deltas))

    stats = compute_statistics(bytecode)
    assert stats.byte_length == len(bytecode)
    assert stats.opcode_count == len(deltas)
    assert stats.max_stack_depth == max([0] + running)
    assert stats.final_stack_depth == (running[-1] if running else 0)


@settings(max_examples=100, deadline=None)
@given(bytecode=bytecode_strategy)
def test_disassembly_is_repeatable(bytecode: bytes):
    assert list(disassemble(bytecode)) == list(disassemble(bytecode))


@given(byte_value=st.integers(min_value=0, max_value=255))
def test_every_byte_resolves(byte_value):
    info = lookup(byte_value)
    assert info is OPCODE_TABLE[byte_value]
    assert info.byte_value == byte_value
