"""CHIP-8 ALU operations (8xxx).

Each operation maps ``(vx, vy)`` to ``(result, flag)``. Operations that do not
report a flag leave VF alone; the others write VF after VX, so the flag wins
when X is F.
"""

import jax.numpy as jnp
from chipmachine.state import EmulatorState
from chipmachine.decode import DecodedInstruction
from chipmachine.constants import FLAG_REGISTER
from chipmachine.pc import PcAction, next_instruction


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, None


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, None


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, None


def alu_add(vx, vy):
    """8XY4 - Add: VX += VY, set carry flag."""
    result = vx.astype(jnp.uint16) + vy.astype(jnp.uint16)
    carry = result > 0xFF
    return (result & 0xFF).astype(jnp.uint8), carry


def alu_sub_xy(vx, vy):
    """8XY5 - Subtract: VX -= VY, VF = NOT borrow."""
    not_borrow = vx >= vy
    return vx - vy, not_borrow


def alu_shift_right(vx, vy):
    """8XY6 - Shift right: VX >>= 1, VF = shifted out bit."""
    return vx >> 1, vx & 1


def alu_sub_yx(vx, vy):
    """8XY7 - Subtract: VX = VY - VX, VF = NOT borrow."""
    not_borrow = vy >= vx
    return vy - vx, not_borrow


def alu_shift_left(vx, vy):
    """8XYE - Shift left: VX <<= 1, VF = shifted out bit."""
    return vx << 1, vx >> 7


def make_alu_instruction(operation, shift: bool = False):
    """Wrap an ALU operation as an opcode handler."""
    def alu_instruction(state: EmulatorState, instruction: DecodedInstruction) -> tuple[EmulatorState, PcAction]:
        vx = state.V[instruction.x]
        vy = state.V[instruction.y]
        if shift and state.quirks.shift_uses_vy:
            vx = vy

        result, flag = operation(vx, vy)

        new_V = state.V.at[instruction.x].set(jnp.asarray(result).astype(jnp.uint8))
        if flag is not None:
            new_V = new_V.at[FLAG_REGISTER].set(jnp.asarray(flag).astype(jnp.uint8))
        return state.replace(V=new_V), next_instruction()

    alu_instruction.__doc__ = operation.__doc__
    return alu_instruction


execute_alu_set = make_alu_instruction(alu_set)
execute_alu_or = make_alu_instruction(alu_or)
execute_alu_and = make_alu_instruction(alu_and)
execute_alu_xor = make_alu_instruction(alu_xor)
execute_alu_add = make_alu_instruction(alu_add)
execute_alu_sub_xy = make_alu_instruction(alu_sub_xy)
execute_alu_shift_right = make_alu_instruction(alu_shift_right, shift=True)
execute_alu_sub_yx = make_alu_instruction(alu_sub_yx)
execute_alu_shift_left = make_alu_instruction(alu_shift_left, shift=True)
