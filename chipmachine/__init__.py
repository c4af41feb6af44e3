"""CHIP-8 virtual machine package."""

from chipmachine.state import EmulatorState, Quirks, create_state
from chipmachine.emulator import (
    cycle, execute, fetch, load_program, load_rom, run_cycles, set_key, tick_timers
)
from chipmachine.decode import DecodedInstruction, decode, encode
from chipmachine.errors import MalformedProgramError
from chipmachine.constants import *
from chipmachine.rendering import display_to_rgb, create_color_scheme

__all__ = [
    "EmulatorState",
    "Quirks",
    "create_state",
    "fetch",
    "execute",
    "cycle",
    "run_cycles",
    "load_program",
    "load_rom",
    "set_key",
    "tick_timers",
    "DecodedInstruction",
    "decode",
    "encode",
    "MalformedProgramError",
    "PROGRAM_START",
    "FONT_START",
    "MEMORY_SIZE",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "display_to_rgb",
    "create_color_scheme",
]
