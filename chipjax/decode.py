"""CHIP-8 instruction decoding."""

from enum import IntEnum

import jax.numpy as jnp
from chex import dataclass


class Op(IntEnum):
    """Closed set of instruction variants. The value indexes the handler table."""
    CLEAR_SCREEN = 0         # 00E0
    RETURN = 1               # 00EE
    JUMP = 2                 # 1NNN
    CALL = 3                 # 2NNN
    SKIP_EQ_IMM = 4          # 3XNN
    SKIP_NE_IMM = 5          # 4XNN
    SKIP_EQ_REG = 6          # 5XY0
    SET_IMM = 7              # 6XNN
    ADD_IMM = 8              # 7XNN
    MOVE = 9                 # 8XY0
    OR = 10                  # 8XY1
    AND = 11                 # 8XY2
    XOR = 12                 # 8XY3
    ADD_REG = 13             # 8XY4
    SUB_XY = 14              # 8XY5
    SHIFT_RIGHT = 15         # 8XY6
    SUB_YX = 16              # 8XY7
    SHIFT_LEFT = 17          # 8XYE
    SKIP_NE_REG = 18         # 9XY0
    SET_INDEX = 19           # ANNN
    JUMP_OFFSET = 20         # BNNN / BXNN
    RANDOM = 21              # CXNN
    DRAW = 22                # DXYN
    SKIP_KEY = 23            # EX9E
    SKIP_NOT_KEY = 24        # EXA1
    GET_DELAY = 25           # FX07
    WAIT_KEY = 26            # FX0A
    SET_DELAY = 27           # FX15
    SET_SOUND = 28           # FX18
    ADD_INDEX = 29           # FX1E
    FONT_CHARACTER = 30      # FX29
    BCD = 31                 # FX33
    STORE_REGISTERS = 32     # FX55
    LOAD_REGISTERS = 33      # FX65
    UNKNOWN = 34


# (mask, pattern, op): an instruction is `op` when `instruction & mask == pattern`.
# 5XYN and 9XYN only look at the top nibble.
PATTERNS = (
    (0xFFFF, 0x00E0, Op.CLEAR_SCREEN),
    (0xFFFF, 0x00EE, Op.RETURN),
    (0xF000, 0x1000, Op.JUMP),
    (0xF000, 0x2000, Op.CALL),
    (0xF000, 0x3000, Op.SKIP_EQ_IMM),
    (0xF000, 0x4000, Op.SKIP_NE_IMM),
    (0xF000, 0x5000, Op.SKIP_EQ_REG),
    (0xF000, 0x6000, Op.SET_IMM),
    (0xF000, 0x7000, Op.ADD_IMM),
    (0xF00F, 0x8000, Op.MOVE),
    (0xF00F, 0x8001, Op.OR),
    (0xF00F, 0x8002, Op.AND),
    (0xF00F, 0x8003, Op.XOR),
    (0xF00F, 0x8004, Op.ADD_REG),
    (0xF00F, 0x8005, Op.SUB_XY),
    (0xF00F, 0x8006, Op.SHIFT_RIGHT),
    (0xF00F, 0x8007, Op.SUB_YX),
    (0xF00F, 0x800E, Op.SHIFT_LEFT),
    (0xF000, 0x9000, Op.SKIP_NE_REG),
    (0xF000, 0xA000, Op.SET_INDEX),
    (0xF000, 0xB000, Op.JUMP_OFFSET),
    (0xF000, 0xC000, Op.RANDOM),
    (0xF000, 0xD000, Op.DRAW),
    (0xF0FF, 0xE09E, Op.SKIP_KEY),
    (0xF0FF, 0xE0A1, Op.SKIP_NOT_KEY),
    (0xF0FF, 0xF007, Op.GET_DELAY),
    (0xF0FF, 0xF00A, Op.WAIT_KEY),
    (0xF0FF, 0xF015, Op.SET_DELAY),
    (0xF0FF, 0xF018, Op.SET_SOUND),
    (0xF0FF, 0xF01E, Op.ADD_INDEX),
    (0xF0FF, 0xF029, Op.FONT_CHARACTER),
    (0xF0FF, 0xF033, Op.BCD),
    (0xF0FF, 0xF055, Op.STORE_REGISTERS),
    (0xF0FF, 0xF065, Op.LOAD_REGISTERS),
)


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    op: int      # Op variant
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def classify(instruction) -> jnp.ndarray:
    """Map a 16-bit instruction to its `Op` value; works on traced values."""
    instruction = jnp.asarray(instruction, dtype=jnp.int32)
    return jnp.select(
        [(instruction & mask) == pattern for mask, pattern, _ in PATTERNS],
        [int(op) for _, _, op in PATTERNS],
        default=int(Op.UNKNOWN),
    )


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    return DecodedInstruction(
        raw=instruction,
        op=classify(instruction),
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )
