# __main__.py - entry point: restore or deal, run the board scene, save on exit
import os
import logging
import pygame

from klondike import common as C
from klondike.game import KlondikeGame
from klondike.persistence import FileStore
from klondike.scene import KlondikeGameScene

logger = logging.getLogger(__name__)


def _initial_window_size():
    info = pygame.display.Info()
    # Keep a safety margin so the window never hides under taskbar
    margin_w, margin_h = 120, 140
    w = min(C.SCREEN_W, max(640, info.current_w - margin_w))
    h = min(C.SCREEN_H, max(480, info.current_h - margin_h))
    return w, h


def _configure_logging():
    level_name = os.environ.get("KLONDIKE_LOG_LEVEL", "WARNING").strip().upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(name)s %(levelname)s %(message)s")


def _seed_override():
    raw = os.environ.get("KLONDIKE_SEED", "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric KLONDIKE_SEED=%r", raw)
        return None


def _allowed_keys_set():
    # Keys the board scene understands; everything else is ignored
    keys = [
        "K_UP", "K_DOWN", "K_RETURN", "K_KP_ENTER", "K_SPACE", "K_ESCAPE",
        "K_d", "K_f", "K_s", "K_z", "K_n", "K_c", "K_h", "K_a",
    ]
    out = set()
    for n in keys:
        v = getattr(pygame, n, None)
        if isinstance(v, int):
            out.add(v)
    return out


def main():
    _configure_logging()
    os.environ.setdefault("SDL_VIDEO_CENTERED", "1")
    pygame.init()

    w, h = _initial_window_size()
    C.SCREEN_W, C.SCREEN_H = w, h
    screen = pygame.display.set_mode((w, h), pygame.RESIZABLE)
    pygame.display.set_caption("Klondike Solitaire")
    C.setup_fonts()
    clock = pygame.time.Clock()

    store = FileStore(C.saves_dir())
    seed = _seed_override()
    game = KlondikeGame() if seed is None else KlondikeGame(clock=lambda: seed)
    if game.start(store):
        logger.info("Resumed saved game from %s", store.directory)
    scene = KlondikeGameScene(app=None, game=game)

    allowed_keys = _allowed_keys_set()
    running = True
    while running:
        dt = clock.tick(60) / 1000.0
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                running = False
                continue
            if e.type == pygame.VIDEORESIZE:
                C.SCREEN_W, C.SCREEN_H = e.size
                screen = pygame.display.set_mode((C.SCREEN_W, C.SCREEN_H), pygame.RESIZABLE)
                scene.compute_layout()
                continue
            if e.type in (pygame.KEYDOWN, pygame.KEYUP) and getattr(e, "key", None) not in allowed_keys:
                continue
            scene.handle_event(e)
        scene.update(dt)
        if scene.next_scene is not None:
            scene = scene.next_scene
        scene.draw(screen)
        pygame.display.flip()

    game.save(store)
    pygame.quit()


if __name__ == "__main__":
    main()
