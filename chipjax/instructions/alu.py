"""CHIP-8 ALU operations (8xxx).

Each operation maps the pre-operation (VX, VY) pair to a result and,
for the arithmetic and shift operations, a flag. Both are computed from the
pre-operation values. 8XY4 writes VF after the result, so the carry wins when
X is F; the subtractions and shifts write VF first and the result wins.
"""

import jax.numpy as jnp
from chipjax.constants import FLAG_REGISTER
from chipjax.state import EmulatorState
from chipjax.decode import DecodedInstruction


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return vy


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy


def alu_add(vx, vy):
    """8XY4 - Add: VX += VY, VF = carry."""
    result = vx + vy
    return result & 0xFF, result > 0xFF


def alu_sub_xy(vx, vy):
    """8XY5 - Subtract: VX -= VY, VF = VX > VY."""
    return (vx - vy) & 0xFF, vx > vy


def alu_sub_yx(vx, vy):
    """8XY7 - Subtract: VX = VY - VX, VF = VX > VY."""
    return (vy - vx) & 0xFF, vx > vy


def alu_shift_right(vx, vy):
    """8XY6 - Shift right: VX >>= 1, VF = bit shifted out."""
    return vx >> 1, vx & 0x1


def alu_shift_left(vx, vy):
    """8XYE - Shift left: VX <<= 1, VF = bit shifted out."""
    return (vx << 1) & 0xFF, (vx & 0x80) >> 7


def _operands(state: EmulatorState, instruction: DecodedInstruction):
    vx = jnp.astype(state.V[instruction.x], jnp.int32)
    vy = jnp.astype(state.V[instruction.y], jnp.int32)
    return vx, vy


def make_logic_instruction(operation):
    """Factory for the operations that leave VF alone."""
    def logic_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        result = operation(*_operands(state, instruction))
        return state.replace(V=state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8)))
    return logic_instruction


def make_flag_instruction(operation, flag_last=False, copies_vy_with_new_functionality=False):
    """Factory for the operations that report through VF.

    `flag_last` selects which of VF and VX is written second when they are the
    same register.
    """
    def flag_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        vx, vy = _operands(state, instruction)
        if copies_vy_with_new_functionality and state.new_functionality:
            vx = vy
        result, flag = operation(vx, vy)
        result = jnp.astype(result, jnp.uint8)
        flag = jnp.astype(flag, jnp.uint8)
        if flag_last:
            new_V = state.V.at[instruction.x].set(result).at[FLAG_REGISTER].set(flag)
        else:
            new_V = state.V.at[FLAG_REGISTER].set(flag).at[instruction.x].set(result)
        return state.replace(V=new_V)
    return flag_instruction


execute_move = make_logic_instruction(alu_set)
execute_or = make_logic_instruction(alu_or)
execute_and = make_logic_instruction(alu_and)
execute_xor = make_logic_instruction(alu_xor)
execute_add_register = make_flag_instruction(alu_add, flag_last=True)
execute_sub_xy = make_flag_instruction(alu_sub_xy)
execute_sub_yx = make_flag_instruction(alu_sub_yx)
execute_shift_right = make_flag_instruction(alu_shift_right, copies_vy_with_new_functionality=True)
execute_shift_left = make_flag_instruction(alu_shift_left, copies_vy_with_new_functionality=True)
