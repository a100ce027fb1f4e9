"""CHIP-8 interpreter package."""

from chipjax.state import EmulatorState, StackState, create_state
from chipjax.emulator import (
    execute, fetch, step, run_cycles, tick_timers, resume_with_key, load_program, load_rom,
)
from chipjax.decode import DecodedInstruction, Op, decode
from chipjax.display import draw_sprite, clear_display, needs_redraw, acknowledge_redraw, display_snapshot
from chipjax.keypad import press_key, release_key, is_pressed, last_pressed_key, clear_last_key
from chipjax.scheduler import run_frame
from chipjax.config import EmulatorConfig
from chipjax.errors import MachineHalted, ProgramTooLarge
from chipjax.constants import PROGRAM_START, FONT_START, SCREEN_WIDTH, SCREEN_HEIGHT, FLAG_REGISTER
from chipjax.rendering import chip8_display_to_rgb, create_color_scheme

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "run_cycles",
    "tick_timers",
    "resume_with_key",
    "load_program",
    "load_rom",
    "DecodedInstruction",
    "Op",
    "decode",
    "draw_sprite",
    "clear_display",
    "needs_redraw",
    "acknowledge_redraw",
    "display_snapshot",
    "press_key",
    "release_key",
    "is_pressed",
    "last_pressed_key",
    "clear_last_key",
    "run_frame",
    "EmulatorConfig",
    "MachineHalted",
    "ProgramTooLarge",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "FLAG_REGISTER",
    "chip8_display_to_rgb",
    "create_color_scheme",
]
