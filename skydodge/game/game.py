# skydodge/game/game.py
import sys, argparse
import logging
import pygame
from pygame import K_UP, K_DOWN, K_ESCAPE, K_r, K_RETURN

from .config import BASE_WIDTH, BASE_HEIGHT, FPS, SEED_DEFAULT, LOG_LEVEL
from .audio import BackgroundMusic, DEFAULT_TRACK
from .log import setup_logging
from .render import Renderer
from .scale import fit_viewport
from .session import GameSession

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="SkyDodge: steer the craft, avoid the obstacles.")
    p.add_argument("--seed", type=int, default=None,
                   help="Spawn seed. Omit for SEED_DEFAULT, use -1 for random each launch.")
    p.add_argument("--fps", type=int, default=FPS, help="Window refresh rate (simulation stays at 60 Hz)")
    p.add_argument("--log-level", type=str, default=LOG_LEVEL)
    p.add_argument("--mute", action="store_true", help="Disable background music")
    p.add_argument("--track", type=str, default=DEFAULT_TRACK, help="Background music file (ogg/wav/mp3)")
    return p.parse_args(argv)


def run(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_level)

    # Resolve seed: None -> use SEED_DEFAULT; -1 -> random
    if args.seed is None:
        launch_seed = SEED_DEFAULT
    elif args.seed == -1:
        launch_seed = None
    else:
        launch_seed = args.seed

    pygame.init()
    pygame.display.set_caption("SkyDodge")
    win_w, win_h = BASE_WIDTH, int(BASE_HEIGHT / 0.8)
    screen = pygame.display.set_mode((win_w, win_h), pygame.RESIZABLE)
    clock = pygame.time.Clock()

    session = GameSession(seed=launch_seed, viewport=fit_viewport(win_w, win_h))
    music = BackgroundMusic(track=args.track, enabled=not args.mute)
    renderer = Renderer()
    logger.info("starting with seed %s", session.seed)

    with session.attach(music):
        session.reset()
        try:
            while True:
                dt = clock.tick(args.fps) / 1000.0

                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        return
                    if event.type == pygame.VIDEORESIZE:
                        screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                        session.on_resize(*fit_viewport(event.w, event.h))
                    if event.type == pygame.KEYDOWN:
                        music.unlock()
                        if event.key == K_ESCAPE:
                            return
                        if event.key == K_UP:
                            session.move_up_pressed()
                        if event.key == K_DOWN:
                            session.move_down_pressed()
                        if event.key in (K_r, K_RETURN) and not session.running:
                            session.request_reset()
                    if event.type == pygame.KEYUP:
                        if event.key == K_UP:
                            session.move_up_released()
                        if event.key == K_DOWN:
                            session.move_down_released()
                    if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                        pos = renderer.to_field(event.pos)
                        if renderer.play_again_rect is not None and renderer.play_again_rect.collidepoint(pos):
                            session.request_reset()
                        elif renderer.up_rect is not None and renderer.up_rect.collidepoint(pos):
                            session.move_up_pressed()
                        elif renderer.down_rect is not None and renderer.down_rect.collidepoint(pos):
                            session.move_down_pressed()
                    if event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                        session.buttons_released()

                session.advance(dt)

                # --- Render ---
                renderer.draw(screen, session.snapshot())
                pygame.display.flip()
        finally:
            music.close()
            pygame.quit()


def main():
    run()
    sys.exit(0)


if __name__ == "__main__":
    main()
