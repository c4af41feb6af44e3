"""Interactive pygame front end.

Owns everything the engine leaves to its caller: the window, key mapping,
instruction cadence and the 60 Hz timer tick.
"""

import argparse

import jax
import numpy as np
import pygame

from chipmachine.state import Quirks, create_state
from chipmachine.emulator import load_rom, run_cycles, set_key, tick_timers
from chipmachine.errors import MalformedProgramError
from chipmachine.logging import logger
from chipmachine.rendering import create_color_scheme, display_to_rgb

FRAME_RATE = 60

# Standard 4x4 keypad layout on the left side of a QWERTY keyboard
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}


def run_emulator(rom_filename, quirks=Quirks(), scale=10, ipf=10, color_scheme="classic", seed=0):
    """Main emulator loop: ``ipf`` instructions per frame at 60 frames per second."""
    on_color, off_color = create_color_scheme(color_scheme)

    state = create_state(jax.random.PRNGKey(seed), quirks=quirks)
    state = load_rom(state, rom_filename)

    pygame.init()
    screen = pygame.display.set_mode((state.width * scale, state.height * scale))
    pygame.display.set_caption("CHIP-8 Emulator")
    clock = pygame.time.Clock()

    logger.info("Controls: ESC=Quit, P=Pause, keypad on 1-4/Q-R/A-F/Z-V")
    running = True
    paused = False

    while running:
        clock.tick(FRAME_RATE)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_p:
                    paused = not paused
                    logger.info("Paused" if paused else "Resumed")
                elif event.key in KEY_MAP:
                    state = set_key(state, KEY_MAP[event.key], True)
            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAP:
                    state = set_key(state, KEY_MAP[event.key], False)

        if not paused:
            try:
                state = run_cycles(state, ipf)
            except MalformedProgramError as e:
                logger.error(f"Emulation halted: {e}")
                paused = True
            state = tick_timers(state)

        frame = display_to_rgb(state.display, scale, on_color, off_color)
        # pygame surfaces are indexed [x, y]
        surface = pygame.surfarray.make_surface(np.transpose(frame, (1, 0, 2)))
        screen.blit(surface, (0, 0))
        pygame.display.flip()

    pygame.quit()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run a CHIP-8 program.")
    parser.add_argument("rom", help="Path to the CHIP-8 program image")
    parser.add_argument("--scale", type=int, default=10, help="Window pixels per CHIP-8 pixel")
    parser.add_argument("--ipf", type=int, default=10, help="Instructions executed per 60 Hz frame")
    parser.add_argument("--color-scheme", default="classic")
    parser.add_argument("--legacy-jump", action="store_true",
                        help="BNNN jumps to NNN + V0 instead of loading it into I")
    parser.add_argument("--shift-uses-vy", action="store_true")
    parser.add_argument("--load-store-increments-index", action="store_true")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    logger.set_level(args.log_level)
    quirks = Quirks(
        jump_offset_sets_index=not args.legacy_jump,
        shift_uses_vy=args.shift_uses_vy,
        load_store_increments_index=args.load_store_increments_index,
    )
    run_emulator(args.rom, quirks, scale=args.scale, ipf=args.ipf,
                 color_scheme=args.color_scheme, seed=args.seed)


if __name__ == "__main__":
    main()
