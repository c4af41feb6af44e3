"""CHIP-8 control flow instructions."""

import jax.numpy as jnp
from chipmachine.state import EmulatorState
from chipmachine.decode import DecodedInstruction
from chipmachine.constants import INSTRUCTION_SIZE
from chipmachine.pc import PcAction, next_instruction, jump_instruction, skip_if
from chipmachine.stack import push


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """1NNN - Jump to address NNN."""
    return state, jump_instruction(instruction.nnn)


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """2NNN - Call subroutine at NNN."""
    return_address = state.pc + INSTRUCTION_SIZE
    state = state.replace(stack=push(state.stack, return_address))
    return execute_jump(state, instruction)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
        return state, skip_if(condition_fn(state, instruction))
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.kk
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.kk
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)

execute_skip_if_key_pressed = make_skip_instruction(
    lambda state, inst: state.keypad[state.V[inst.x] & 0xF]
)

execute_skip_if_key_not_pressed = make_skip_instruction(
    lambda state, inst: ~state.keypad[state.V[inst.x] & 0xF]
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """BNNN - NNN + V0, loaded into I or jumped to depending on quirks."""
    address = jnp.asarray(instruction.nnn).astype(jnp.uint16) + state.V[0].astype(jnp.uint16)
    if state.quirks.jump_offset_sets_index:
        return state.replace(I=address), next_instruction()
    return state, jump_instruction(address)
