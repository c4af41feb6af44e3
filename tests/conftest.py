"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from chipmachine import Quirks, create_state


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def legacy_state():
    """Provide a fresh state with every non-default quirk enabled."""
    return create_state(quirks=Quirks(
        jump_offset_sets_index=False,
        shift_uses_vy=True,
        load_store_increments_index=True,
    ))


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def program(*instructions):
    """Assemble instruction words into a big-endian program image."""
    return b"".join(word.to_bytes(2, "big") for word in instructions)
