"""CHIP-8 opcode handlers.

Every handler takes ``(state, instruction)`` and returns the new state along
with the program counter action to apply.
"""
