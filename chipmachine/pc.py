"""Program counter actions returned by instruction handlers."""

import jax.numpy as jnp
from flax.struct import PyTreeNode

from chipmachine.constants import INSTRUCTION_SIZE

NEXT_INSTRUCTION = 0
SKIP_INSTRUCTION = 1
JUMP_INSTRUCTION = 2


class PcAction(PyTreeNode):
    """What to do with PC once a handler has run.

    ``target`` is only read for jumps.
    """
    kind: jnp.ndarray
    target: jnp.ndarray


def next_instruction() -> PcAction:
    return PcAction(
        kind=jnp.asarray(NEXT_INSTRUCTION, dtype=jnp.int32),
        target=jnp.zeros((), dtype=jnp.uint16),
    )


def skip_instruction() -> PcAction:
    return PcAction(
        kind=jnp.asarray(SKIP_INSTRUCTION, dtype=jnp.int32),
        target=jnp.zeros((), dtype=jnp.uint16),
    )


def jump_instruction(address) -> PcAction:
    return PcAction(
        kind=jnp.asarray(JUMP_INSTRUCTION, dtype=jnp.int32),
        target=jnp.asarray(address).astype(jnp.uint16),
    )


def skip_if(condition) -> PcAction:
    """Skip the next instruction when ``condition`` holds, else advance."""
    kind = jnp.where(condition, SKIP_INSTRUCTION, NEXT_INSTRUCTION)
    return PcAction(kind=kind.astype(jnp.int32), target=jnp.zeros((), dtype=jnp.uint16))


def apply_pc_action(pc: jnp.ndarray, action: PcAction) -> jnp.ndarray:
    """Compute the new PC: +2, +4 or the jump target."""
    new_pc = jnp.select(
        [action.kind == NEXT_INSTRUCTION, action.kind == SKIP_INSTRUCTION],
        [pc + INSTRUCTION_SIZE, pc + 2 * INSTRUCTION_SIZE],
        action.target,
    )
    return new_pc.astype(jnp.uint16)
