"""Tests for memory and register operations."""

import jax
import jax.numpy as jnp
import pytest
from chipmachine import create_state, execute


class TestSetAndAdd:
    """Test 6XKK and 7XKK."""

    def test_set_register(self, fresh_state):
        """6XKK - Set VX = KK."""
        state = execute(fresh_state, 0x6A42)
        assert state.V[0xA] == 0x42
        assert state.pc == 0x202

    def test_add_increments_by_one(self, fresh_state):
        """6XKK then 7X01 adds exactly one."""
        state = execute(fresh_state, 0x6310)
        state = execute(state, 0x7301)
        assert state.V[3] == 0x11

    def test_add_wraps_without_flag(self, fresh_state):
        """7XKK - 255 + 1 wraps to 0 and leaves VF alone."""
        state = execute(fresh_state, 0x63FF)
        state = execute(state, 0x6F07)
        state = execute(state, 0x7301)

        assert state.V[3] == 0x00
        assert state.V[15] == 0x07

    def test_add_large_immediate(self, fresh_state):
        state = execute(fresh_state, 0x6480)
        state = execute(state, 0x74F0)
        assert state.V[4] == 0x70


class TestIndexRegister:
    """Test ANNN."""

    def test_set_index(self, fresh_state):
        """ANNN - Set I = NNN."""
        state = execute(fresh_state, 0xA123)
        assert state.I == 0x123

    def test_set_index_max(self, fresh_state):
        state = execute(fresh_state, 0xAFFF)
        assert state.I == 0xFFF


class TestRandom:
    """Test CXKK."""

    def test_random_bit_mask(self, fresh_state):
        """CXKK - Random AND with specific mask."""
        state = execute(fresh_state, 0xC20F)
        assert 0 <= state.V[2] <= 15

    def test_random_zero_mask(self, fresh_state):
        state = execute(fresh_state.replace(V=fresh_state.V.at[2].set(0x55)), 0xC200)
        assert state.V[2] == 0

    def test_random_advances_rng(self, fresh_state):
        state = execute(fresh_state, 0xC0FF)
        assert not jnp.array_equal(state.rng, fresh_state.rng)

    def test_random_is_reproducible(self):
        """Same key, same byte."""
        first = execute(create_state(jax.random.PRNGKey(7)), 0xC0FF)
        second = execute(create_state(jax.random.PRNGKey(7)), 0xC0FF)
        assert first.V[0] == second.V[0]

    def test_random_preserves_state(self, fresh_state):
        """CXKK - Verify other state is preserved."""
        state = execute(fresh_state, 0x6142)
        state = execute(state, 0x6299)
        state = execute(state, 0xA300)

        state = execute(state, 0xC0FF)

        assert state.V[1] == 0x42
        assert state.V[2] == 0x99
        assert state.I == 0x300

    @pytest.mark.parametrize("mask", [0x01, 0x03, 0x07, 0x80])
    def test_random_mask_patterns(self, fresh_state, mask):
        state = execute(fresh_state, 0xC600 | mask)
        assert (int(state.V[6]) & ~mask) == 0
