"""Tests for the fetch/decode/execute cycle and the engine boundary."""

import jax.numpy as jnp
import pytest
from chipmachine import (
    create_state, cycle, execute, fetch, load_program, load_rom, run_cycles,
    set_key, tick_timers, MalformedProgramError,
)
from chipmachine.constants import MEMORY_SIZE, PROGRAM_START
from conftest import program


class TestState:
    """Test state creation."""

    def test_initial_state(self, fresh_state):
        assert fresh_state.memory.shape == (MEMORY_SIZE,)
        assert fresh_state.pc == PROGRAM_START
        assert fresh_state.I == 0
        assert fresh_state.stack.pointer == 0
        assert fresh_state.display.shape == (32, 64)
        assert fresh_state.scratch_display.shape == fresh_state.display.shape
        assert (fresh_state.width, fresh_state.height) == (64, 32)
        assert not jnp.any(fresh_state.keypad)
        assert jnp.sum(fresh_state.memory[PROGRAM_START:]) == 0

    @pytest.mark.parametrize("width, height", [(0, 32), (64, 0), (-1, 5)])
    def test_invalid_display_size(self, width, height):
        with pytest.raises(ValueError):
            create_state(width=width, height=height)


class TestCycle:
    """Test running programs from memory."""

    def test_fetch_reads_big_endian_without_advancing(self, fresh_state):
        state = load_program(fresh_state, program(0x12A4))
        assert fetch(state) == 0x12A4
        assert state.pc == PROGRAM_START

    def test_cycle_executes_instruction_at_pc(self, fresh_state):
        state = load_program(fresh_state, program(0x6A42, 0x7A01))

        state = cycle(state)
        assert state.V[0xA] == 0x42
        assert state.pc == 0x202

        state = cycle(state)
        assert state.V[0xA] == 0x43
        assert state.pc == 0x204

    def test_skip_lands_four_bytes_past(self, fresh_state):
        """3XKK with VX == KK: the next fetch is 4 bytes past the skip."""
        state = load_program(fresh_state, program(0x6142, 0x3142, 0x6201, 0x6302))

        state = cycle(cycle(state))
        assert state.pc == 0x206

        state = cycle(state)
        assert state.V[2] == 0
        assert state.V[3] == 2

    def test_call_and_return_through_memory(self, fresh_state):
        state = load_program(fresh_state, program(
            0x2206,  # 0x200: call 0x206
            0x6105,  # 0x202: V1 = 5
            0x1204,  # 0x204: loop forever
            0x6003,  # 0x206: V0 = 3
            0x00EE,  # 0x208: return
        ))

        state = cycle(state)
        assert state.pc == 0x206
        state = cycle(cycle(state))
        assert state.pc == 0x202

        state = cycle(state)
        assert state.V[0] == 3
        assert state.V[1] == 5
        assert state.pc == 0x204

    def test_run_cycles(self, fresh_state):
        state = load_program(fresh_state, program(0x6000, 0x7001, 0x1202))

        state = run_cycles(state, 7)

        assert state.V[0] == 3
        assert state.pc == 0x202

    def test_run_cycles_matches_single_cycles(self, fresh_state):
        state = load_program(fresh_state, program(0x6007, 0xA300, 0xF033, 0x8014, 0x1200))

        stepped = state
        for _ in range(6):
            stepped = cycle(stepped)
        batched = run_cycles(state, 6)

        assert jnp.array_equal(stepped.V, batched.V)
        assert jnp.array_equal(stepped.memory, batched.memory)
        assert stepped.pc == batched.pc

    def test_pc_stays_even(self, fresh_state):
        state = load_program(fresh_state, program(0x6000, 0x3000, 0x0000, 0x4001, 0x0000, 0x1200))
        for _ in range(10):
            state = cycle(state)
            assert int(state.pc) % 2 == 0

    def test_waiting_for_key_blocks_until_pressed(self, fresh_state):
        state = load_program(fresh_state, program(0xF50A, 0x6001))

        state = run_cycles(state, 5)
        assert state.pc == 0x200

        state = set_key(state, 0xE, True)
        state = cycle(state)
        assert state.V[5] == 0xE
        assert state.pc == 0x202

    def test_pc_past_memory_is_malformed(self, fresh_state):
        state = execute(fresh_state, 0x1FFF)
        with pytest.raises(MalformedProgramError, match="program counter out of memory"):
            cycle(state)

    def test_run_cycles_reports_malformed_program(self, fresh_state):
        state = load_program(fresh_state, program(0x00EE))
        with pytest.raises(MalformedProgramError, match="stack underflow"):
            run_cycles(state, 3)

    def test_unknown_opcode_in_memory_is_skipped(self, fresh_state):
        state = load_program(fresh_state, program(0xF0FF, 0x6401))
        state = run_cycles(state, 2)
        assert state.V[4] == 1


class TestLoading:
    """Test program loading."""

    def test_load_program(self, fresh_state):
        state = load_program(fresh_state, bytes([0xA2, 0x2A, 0x60, 0x0C]))
        assert [int(b) for b in state.memory[0x200:0x205]] == [0xA2, 0x2A, 0x60, 0x0C, 0]

    def test_load_program_accepts_int_sequences(self, fresh_state):
        state = load_program(fresh_state, [0x12, 0x34])
        assert state.memory[0x201] == 0x34

    def test_load_empty_program(self, fresh_state):
        state = load_program(fresh_state, b"")
        assert jnp.array_equal(state.memory, fresh_state.memory)

    def test_oversized_program_is_truncated(self, fresh_state, capsys):
        capacity = MEMORY_SIZE - PROGRAM_START
        image = bytes([0x11] * capacity + [0x22] * 10)

        state = load_program(fresh_state, image)

        assert state.memory.shape == (MEMORY_SIZE,)
        assert state.memory[MEMORY_SIZE - 1] == 0x11
        assert "only the first 3584 fit" in capsys.readouterr().out

    def test_load_rom(self, fresh_state, tmp_path):
        rom = tmp_path / "test.ch8"
        rom.write_bytes(program(0x6123, 0x1202))

        state = load_rom(fresh_state, str(rom))

        assert fetch(state) == 0x6123

    def test_load_missing_rom(self, fresh_state, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_rom(fresh_state, str(tmp_path / "missing.ch8"))


class TestKeypadAndTimers:
    """Test the input and timer collaborators' entry points."""

    def test_set_and_release_key(self, fresh_state):
        state = set_key(fresh_state, 0xA, True)
        assert state.keypad[0xA]
        assert jnp.sum(state.keypad) == 1

        state = set_key(state, 0xA, False)
        assert not jnp.any(state.keypad)

    @pytest.mark.parametrize("key", [-1, 16, 99])
    def test_invalid_key(self, fresh_state, key):
        with pytest.raises(ValueError):
            set_key(fresh_state, key, True)

    def test_tick_timers(self, fresh_state):
        state = fresh_state.replace(
            delay_timer=jnp.asarray(2, dtype=jnp.uint8),
            sound_timer=jnp.asarray(1, dtype=jnp.uint8),
        )

        state = tick_timers(state)
        assert state.delay_timer == 1
        assert state.sound_timer == 0

        state = tick_timers(tick_timers(state))
        assert state.delay_timer == 0
        assert state.sound_timer == 0

    def test_cycle_does_not_tick_timers(self, fresh_state):
        state = load_program(fresh_state, program(0x6010, 0xF015, 0x1204))
        state = run_cycles(state, 10)
        assert state.delay_timer == 0x10
