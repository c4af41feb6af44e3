"""Errors raised by the CHIP-8 engine."""


class MalformedProgramError(RuntimeError):
    """Raised when a program breaks the machine's contract.

    Stack overflow or underflow, and memory reads or writes past the end of
    the address space (through ``I`` or ``PC``) all land here. Unknown opcodes
    are not malformed: they execute as no-ops.
    """
