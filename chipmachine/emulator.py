"""Main CHIP-8 emulator execution engine.

One call to :func:`cycle` fetches the word at PC, decodes it, runs its
handler and applies the program counter action the handler returned. Every
public entry point is jitted and wrapped with ``checkify`` so that a
malformed program surfaces as :class:`MalformedProgramError` instead of a
silently clamped memory access.
"""

from functools import partial, wraps

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np
from jax.experimental import checkify

from chipmachine.state import EmulatorState
from chipmachine.decode import decode
from chipmachine.dispatch import HANDLERS, handler_index
from chipmachine.constants import MEMORY_SIZE, NUM_KEYS, PROGRAM_START
from chipmachine.errors import MalformedProgramError
from chipmachine.logging import logger
from chipmachine.pc import apply_pc_action


def raise_on_malformed(fn=None, *, static_argnums=()):
    """Jit ``fn`` under checkify and raise the first failed check."""
    if fn is None:
        return partial(raise_on_malformed, static_argnums=static_argnums)

    checked_fn = jax.jit(checkify.checkify(fn), static_argnums=static_argnums)

    @wraps(fn)
    def wrapper(*args):
        error, result = checked_fn(*args)
        message = error.get()
        if message is not None:
            raise MalformedProgramError(message)
        return result

    return wrapper


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def _fetch(state: EmulatorState) -> jnp.uint16:
    """Read the big-endian instruction word at PC without advancing it."""
    pc = state.pc.astype(jnp.int32)
    checkify.check(pc + 1 < MEMORY_SIZE, "program counter out of memory: PC={}", state.pc)
    return _pack_u16(state.memory[pc], state.memory[pc + 1])


def _execute(state: EmulatorState, instruction) -> EmulatorState:
    """Execute a single instruction word as if it had been fetched at PC."""
    decoded_instruction = decode(instruction)
    state, action = jax.lax.switch(
        handler_index(instruction),
        HANDLERS,
        state, decoded_instruction
    )
    return state.replace(pc=apply_pc_action(state.pc, action))


def _cycle(state: EmulatorState) -> EmulatorState:
    """Run one fetch/decode/execute step."""
    return _execute(state, _fetch(state))


def _run_cycles(state: EmulatorState, num_cycles: int) -> EmulatorState:
    """Run ``num_cycles`` consecutive cycles in a single compiled scan."""
    def run_instruction(state, _):
        return _cycle(state), None

    state, _ = jax.lax.scan(run_instruction, state, length=num_cycles)
    return state


fetch = raise_on_malformed(_fetch)
execute = raise_on_malformed(_execute)
cycle = raise_on_malformed(_cycle)
run_cycles = raise_on_malformed(_run_cycles, static_argnums=1)


@jax.jit
def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement delay and sound timers, stopping at zero. Call at 60 Hz."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def set_key(state: EmulatorState, key: int, pressed: bool) -> EmulatorState:
    """Press or release one of the 16 hexadecimal keys."""
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Key must be in 0..{NUM_KEYS - 1}, got {key}")
    return state.replace(keypad=state.keypad.at[key].set(bool(pressed)))


def load_program(state: EmulatorState, program) -> EmulatorState:
    """Copy a program image into memory starting at 0x200.

    Bytes that would land past the end of memory are dropped.
    """
    data = bytes(program)
    capacity = MEMORY_SIZE - PROGRAM_START
    if len(data) > capacity:
        logger.warning(
            f"Program image is {len(data)} bytes, only the first {capacity} fit in memory"
        )
        data = data[:capacity]

    program_array = jnp.asarray(np.frombuffer(data, dtype=np.uint8))
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(data)].set(program_array)
    logger.debug(f"Loaded {len(data)} bytes at 0x{PROGRAM_START:03X}")
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    logger.info(f"Read ROM {filename} ({len(rom_data)} bytes)")
    return load_program(state, rom_data)
