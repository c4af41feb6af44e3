"""CHIP-8 system instructions (0x0xxx)."""

import jax.numpy as jnp
from chipmachine.state import EmulatorState
from chipmachine.decode import DecodedInstruction
from chipmachine.pc import PcAction, next_instruction, jump_instruction
from chipmachine.stack import pop
from chipmachine.instructions.display import publish_frame


def no_op(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """No operation."""
    return state, next_instruction()


def execute_system_call(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """0NNN - Call machine code routine at NNN (ignored)."""
    return state, next_instruction()


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """00E0 - Clear display."""
    state = state.replace(scratch_display=jnp.zeros_like(state.scratch_display))
    return publish_frame(state), next_instruction()


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """00EE - Return from subroutine."""
    stack, address = pop(state.stack)
    return state.replace(stack=stack), jump_instruction(address)
