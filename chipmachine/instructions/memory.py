"""CHIP-8 memory and register operations."""

import jax
import jax.numpy as jnp
from chipmachine.state import EmulatorState
from chipmachine.decode import DecodedInstruction
from chipmachine.pc import PcAction, next_instruction


def execute_set(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """6XKK - Set VX = KK."""
    kk = jnp.asarray(instruction.kk).astype(jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(kk)), next_instruction()


def execute_add(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """7XKK - Add KK to VX, wrapping at 256. VF is untouched."""
    total = (state.V[instruction.x].astype(jnp.uint16) + instruction.kk) & 0xFF
    return state.replace(V=state.V.at[instruction.x].set(total.astype(jnp.uint8))), next_instruction()


def execute_set_index(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.asarray(instruction.nnn).astype(jnp.uint16)), next_instruction()


def execute_random(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """CXKK - Set VX = random & KK."""
    key, subkey = jax.random.split(state.rng)
    random_value = jax.random.randint(subkey, shape=(), minval=0, maxval=256).astype(jnp.uint8)
    masked = random_value & jnp.asarray(instruction.kk).astype(jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(masked), rng=key), next_instruction()
