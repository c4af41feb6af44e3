"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from jax.experimental import checkify
from chipmachine.state import EmulatorState
from chipmachine.decode import DecodedInstruction
from chipmachine.constants import FONT_START, FONT_SPRITE_HEIGHT, MEMORY_SIZE, NUM_REGISTERS
from chipmachine.pc import PcAction, next_instruction, jump_instruction

register_indices = jnp.arange(NUM_REGISTERS)


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer)), next_instruction()


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x]), next_instruction()


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x]), next_instruction()


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """FX1E - Add VX to I register."""
    new_i = state.I + state.V[instruction.x].astype(jnp.uint16)
    return state.replace(I=new_i.astype(jnp.uint16)), next_instruction()


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """FX0A - Wait for key press, store the lowest pressed key in VX.

    While no key is down PC stays on this instruction, so the caller keeps
    cycling until its input handler sets a key.
    """
    def key_pressed_action(state):
        pressed_key = jnp.argmax(state.keypad).astype(jnp.uint8)
        return state.replace(V=state.V.at[instruction.x].set(pressed_key)), next_instruction()

    def wait_action(state):
        return state, jump_instruction(state.pc)

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, wait_action, state)


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """FX29 - Set I to location of sprite for digit VX."""
    digit = (state.V[instruction.x] & 0xF).astype(jnp.uint16)
    return state.replace(I=(FONT_START + digit * FONT_SPRITE_HEIGHT).astype(jnp.uint16)), next_instruction()


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    checkify.check(
        state.I.astype(jnp.int32) + 3 <= MEMORY_SIZE,
        "BCD write out of memory: I={}",
        state.I,
    )
    value = state.V[instruction.x]
    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = state.I.astype(jnp.int32) + jnp.arange(3)
    return state.replace(memory=state.memory.at[indices].set(digits)), next_instruction()


def _register_block(state: EmulatorState, instruction: DecodedInstruction, operation: str):
    """Memory indices for V0..VX starting at I, with unused slots pointing past memory."""
    checkify.check(
        state.I.astype(jnp.int32) + instruction.x + 1 <= MEMORY_SIZE,
        operation + " out of memory: I={} with V0..V{}",
        state.I, instruction.x,
    )
    register_mask = register_indices <= instruction.x
    indices = jnp.where(register_mask, state.I.astype(jnp.int32) + register_indices, MEMORY_SIZE)
    return register_mask, indices


def _advance_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    if state.quirks.load_store_increments_index:
        return state.replace(I=(state.I + instruction.x + 1).astype(jnp.uint16))
    return state


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """FX55 - Store V0 through VX in memory starting at I."""
    _, indices = _register_block(state, instruction, "register store")
    new_memory = state.memory.at[indices].set(state.V, mode="drop")
    return _advance_index(state.replace(memory=new_memory), instruction), next_instruction()


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """FX65 - Load V0 through VX from memory starting at I."""
    register_mask, indices = _register_block(state, instruction, "register load")
    memory_values = state.memory.at[indices].get(mode="fill", fill_value=0)
    new_V = jnp.where(register_mask, memory_values, state.V)
    return _advance_index(state.replace(V=new_V), instruction), next_instruction()
