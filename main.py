"""
Pygame front-end for the chipjax CHIP-8 interpreter
"""

import sys

import hydra
import jax
import pygame
from omegaconf import DictConfig, OmegaConf

from chipjax import (
    EmulatorConfig, MachineHalted, create_state, load_rom, run_frame, press_key, release_key,
    needs_redraw, acknowledge_redraw, chip8_display_to_rgb, create_color_scheme,
    SCREEN_WIDTH, SCREEN_HEIGHT,
)
from chipjax.logging import logger, set_log_level, format_registers

# COSMAC VIP keypad on the left of a QWERTY keyboard
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}


def poll_events(state):
    """Forward pygame key events to the keypad. Returns (state, keep_running)."""
    for event in pygame.event.get():
        if event.type == pygame.QUIT:
            return state, False
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                return state, False
            if event.key in KEY_MAP:
                state = press_key(state, KEY_MAP[event.key])
        elif event.type == pygame.KEYUP and event.key in KEY_MAP:
            state = release_key(state, KEY_MAP[event.key])
    return state, True


def present(screen, state, config: EmulatorConfig):
    """Blit the display bitmap to the window."""
    on_color, off_color = create_color_scheme(config.color_scheme)
    frame = chip8_display_to_rgb(state.display, config.scale, on_color, off_color, transpose=False)
    pygame.surfarray.blit_array(screen, frame)
    pygame.display.flip()


def run_emulator(rom_filename: str, config: EmulatorConfig, show_debug: bool = False) -> int:
    """Main emulator loop. Returns the process exit status."""
    state = create_state(jax.random.PRNGKey(config.seed), new_functionality=config.new_functionality)
    try:
        state = load_rom(state, rom_filename)
    except OSError as e:
        logger.error(f"Could not open ROM file: {rom_filename} ({e})")
        return 1
    except MachineHalted:
        return 1

    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH * config.scale, SCREEN_HEIGHT * config.scale))
    pygame.display.set_caption("Chip-8 Emulator")
    clock = pygame.time.Clock()

    logger.info(f"Starting emulation at {config.cycles_per_second} Hz "
                f"({config.cycles_per_frame} cycles per {config.timer_hz} Hz frame)")
    frame_count = 0
    running = True
    try:
        while running:
            clock.tick(config.timer_hz)
            state, running = poll_events(state)
            if not running:
                break

            state = run_frame(state, config.cycles_per_frame)
            frame_count += 1

            if needs_redraw(state):
                present(screen, state, config)
                state = acknowledge_redraw(state)

            if show_debug and frame_count % config.timer_hz == 0:
                logger.debug("\n" + format_registers(state))
    except MachineHalted:
        logger.error("\n" + format_registers(state))
        return 1
    finally:
        pygame.quit()

    return 0


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    cfg = OmegaConf.to_container(cfg)
    config = EmulatorConfig.from_dict(cfg)
    set_log_level(config.log_level)
    status = run_emulator(cfg["rom"], config, show_debug=cfg.get("show_debug", False))
    if status:
        sys.exit(status)


if __name__ == "__main__":
    main()
