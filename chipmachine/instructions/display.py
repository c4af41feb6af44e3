"""CHIP-8 display operations.

Clear and draw never touch ``display`` while they work. They build the next
frame in ``scratch_display`` and publish it with :func:`publish_frame` once
the whole operation is done.
"""

import jax.numpy as jnp
from jax.experimental import checkify
from chipmachine.state import EmulatorState
from chipmachine.decode import DecodedInstruction
from chipmachine.constants import FLAG_REGISTER, MEMORY_SIZE
from chipmachine.pc import PcAction, next_instruction

SPRITE_WIDTH = 8
MAX_SPRITE_HEIGHT = 16

sprite_rows = jnp.arange(MAX_SPRITE_HEIGHT)
sprite_columns = jnp.arange(SPRITE_WIDTH)


def begin_frame(state: EmulatorState) -> EmulatorState:
    """Seed the scratch buffer from the visible frame."""
    return state.replace(scratch_display=state.display)


def publish_frame(state: EmulatorState) -> EmulatorState:
    """Make the scratch buffer the visible frame."""
    return state.replace(display=state.scratch_display)


def execute_draw(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
    """DXYN - Draw sprite at (VX, VY) with height N.

    Sprite pixels wrap around both screen edges. A pixel hit twice by the same
    sprite is toggled twice, as if the bits were XORed one at a time.
    """
    height, width = state.display.shape
    base = state.I.astype(jnp.int32)
    checkify.check(
        base + instruction.n <= MEMORY_SIZE,
        "sprite read out of memory: I={} with height {}",
        state.I, instruction.n,
    )

    row_used = sprite_rows < instruction.n
    addresses = jnp.where(row_used, base + sprite_rows, 0)
    sprite_bytes = state.memory[addresses].astype(jnp.int32)
    sprite_bits = ((sprite_bytes[:, None] >> (7 - sprite_columns)[None, :]) & 1) * row_used[:, None]

    xs = (state.V[instruction.x].astype(jnp.int32) + sprite_columns) % width
    ys = (state.V[instruction.y].astype(jnp.int32) + sprite_rows) % height
    hits = jnp.zeros((height, width), dtype=jnp.int32).at[ys[:, None], xs[None, :]].add(sprite_bits)

    state = begin_frame(state)
    previous = state.scratch_display
    # A set pixel is cleared by its first hit, an unset one by its second.
    collision = jnp.any((previous & (hits > 0)) | (hits > 1))
    state = state.replace(
        scratch_display=previous ^ (hits % 2 == 1),
        V=state.V.at[FLAG_REGISTER].set(collision.astype(jnp.uint8)),
    )
    return publish_frame(state), next_instruction()
