"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chipmachine.constants import (
    FONT_DATA, FONT_START, MEMORY_SIZE, NUM_KEYS, NUM_REGISTERS, PROGRAM_START,
    SCREEN_HEIGHT, SCREEN_WIDTH, STACK_SIZE,
)


@dataclass(frozen=True)
class Quirks:
    """Static switches between historical readings of ambiguous opcodes.

    Attributes:
        jump_offset_sets_index: BNNN stores NNN + V0 in I instead of jumping there
        shift_uses_vy: 8XY6/8XYE shift VY into VX instead of shifting VX in place
        load_store_increments_index: FX55/FX65 leave I pointing past the last register
    """
    jump_offset_sets_index: bool = field(pytree_node=False, default=True)
    shift_uses_vy: bool = field(pytree_node=False, default=False)
    load_store_increments_index: bool = field(pytree_node=False, default=False)


@dataclass(frozen=True)
class StackState:
    """Stack state for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    ``display`` is the visible frame, indexed ``[row, column]``. Clear and draw
    build the next frame in ``scratch_display`` and only then publish it.
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.asarray(PROGRAM_START, dtype=jnp.uint16))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=jnp.bool_))
    scratch_display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=jnp.bool_))
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    quirks: Quirks = field(pytree_node=False, default=Quirks())

    @property
    def width(self) -> int:
        return self.display.shape[1]

    @property
    def height(self) -> int:
        return self.display.shape[0]


def create_state(
    rng: jax.random.PRNGKey = None,
    width: int = SCREEN_WIDTH,
    height: int = SCREEN_HEIGHT,
    quirks: Quirks = Quirks(),
) -> EmulatorState:
    """Create initial emulator state with font data loaded.

    Args:
        rng: PRNG key consumed by CXNN (default: ``PRNGKey(0)``)
        width: Display width in pixels
        height: Display height in pixels
        quirks: Opcode interpretation switches

    Returns:
        Zeroed state with PC at the program start
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Display size must be positive, got {width}x{height}")
    if rng is None:
        rng = jax.random.PRNGKey(0)

    state = EmulatorState(
        rng,
        display=jnp.zeros((height, width), dtype=jnp.bool_),
        scratch_display=jnp.zeros((height, width), dtype=jnp.bool_),
        quirks=quirks,
    )
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))
