"""CHIP-8 opcode dispatch table.

Handlers are selected by matching the instruction's four nibbles against
ordered patterns. Uppercase hex digits must match exactly, lowercase letters
(``x``, ``y``, ``n``, ``k``) are wildcards, and the first matching pattern
wins. The patterns are compiled once into a 65536-entry table mapping every
instruction word to a handler index, which ``jax.lax.switch`` consumes.
Words that match no pattern run :func:`no_op`.
"""

from typing import Callable, Optional

import jax.numpy as jnp
import numpy as np

from chipmachine.instructions.system import (
    no_op, execute_clear_screen, execute_return, execute_system_call
)
from chipmachine.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_pressed, execute_skip_if_key_not_pressed
)
from chipmachine.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor,
    execute_alu_add, execute_alu_sub_xy, execute_alu_shift_right,
    execute_alu_sub_yx, execute_alu_shift_left
)
from chipmachine.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipmachine.instructions.display import execute_draw
from chipmachine.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)

OPCODE_PATTERNS = (
    ("00E0", execute_clear_screen),
    ("00EE", execute_return),
    ("0nnn", execute_system_call),
    ("1nnn", execute_jump),
    ("2nnn", execute_call),
    ("3xkk", execute_skip_if_equal_immediate),
    ("4xkk", execute_skip_if_not_equal_immediate),
    ("5xy0", execute_skip_if_equal_register),
    ("6xkk", execute_set),
    ("7xkk", execute_add),
    ("8xy0", execute_alu_set),
    ("8xy1", execute_alu_or),
    ("8xy2", execute_alu_and),
    ("8xy3", execute_alu_xor),
    ("8xy4", execute_alu_add),
    ("8xy5", execute_alu_sub_xy),
    ("8xy6", execute_alu_shift_right),
    ("8xy7", execute_alu_sub_yx),
    ("8xyE", execute_alu_shift_left),
    ("9xy0", execute_skip_if_not_equal_register),
    ("Annn", execute_set_index),
    ("Bnnn", execute_jump_with_offset),
    ("Cxkk", execute_random),
    ("Dxy0", no_op),  # reserved for 16x16 sprites
    ("Dxyn", execute_draw),
    ("Ex9E", execute_skip_if_key_pressed),
    ("ExA1", execute_skip_if_key_not_pressed),
    ("Fx07", execute_get_delay_timer),
    ("Fx0A", execute_wait_for_key),
    ("Fx15", execute_set_delay_timer),
    ("Fx18", execute_set_sound_timer),
    ("Fx1E", execute_add_to_index),
    ("Fx29", execute_font_character),
    ("Fx33", execute_bcd_conversion),
    ("Fx55", execute_store_registers),
    ("Fx65", execute_load_registers),
)

HEX_DIGITS = "0123456789ABCDEF"


def compile_pattern(pattern: str) -> tuple[int, int]:
    """Turn a pattern such as ``"8xy4"`` into a ``(mask, value)`` pair."""
    if len(pattern) != 4:
        raise ValueError(f"Opcode pattern must have 4 nibbles, got '{pattern}'")
    mask = value = 0
    for char in pattern:
        mask <<= 4
        value <<= 4
        if char in HEX_DIGITS:
            mask |= 0xF
            value |= HEX_DIGITS.index(char)
    return mask, value


def build_dispatch_table(patterns=OPCODE_PATTERNS) -> np.ndarray:
    """Map every 16-bit word to ``1 + index`` of its first matching pattern, 0 if none."""
    words = np.arange(0x10000, dtype=np.uint32)
    table = np.zeros(0x10000, dtype=np.int32)
    matched = np.zeros(0x10000, dtype=np.bool_)
    for index, (pattern, _) in enumerate(patterns, start=1):
        mask, value = compile_pattern(pattern)
        hits = ((words & mask) == value) & ~matched
        table[hits] = index
        matched |= hits
    return table


DISPATCH_TABLE = build_dispatch_table()
HANDLERS = [no_op] + [handler for _, handler in OPCODE_PATTERNS]

_dispatch_table = jnp.asarray(DISPATCH_TABLE)


def handler_index(instruction) -> jnp.ndarray:
    """Index into ``HANDLERS`` for a (possibly traced) instruction word."""
    return _dispatch_table[instruction & 0xFFFF]


def lookup(instruction: int) -> tuple[Optional[str], Callable]:
    """Return the matching pattern and handler for a concrete instruction word."""
    index = int(DISPATCH_TABLE[instruction & 0xFFFF])
    if index == 0:
        return None, no_op
    return OPCODE_PATTERNS[index - 1]
