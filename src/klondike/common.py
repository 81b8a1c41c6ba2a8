# common.py - shared configuration, fonts and card drawing for the Klondike app
import os
import json
import logging
import pygame
from typing import Optional

from klondike.cards import rank_of, suit_of, is_red, RANK_TO_TEXT, SUIT_GLYPHS

logger = logging.getLogger(__name__)

# --- Settings ---
# Display preferences only; game settings live in the saved game record.
_DEFAULT_SETTINGS = {
    "card_size": "Medium",   # Small | Medium | Large
    "long_press_ms": 500,
}

_CURRENT_SETTINGS = dict(_DEFAULT_SETTINGS)


def _settings_dir() -> str:
    # KLONDIKE_HOME, then %APPDATA% on Windows, else ~/.klondike_solitaire
    override = os.environ.get("KLONDIKE_HOME")
    if override:
        return override
    base = os.environ.get("APPDATA")
    if base:
        return os.path.join(base, "KlondikeSolitaire")
    return os.path.join(os.path.expanduser("~"), ".klondike_solitaire")


def _settings_path() -> str:
    return os.path.join(_settings_dir(), "settings.json")


def saves_dir() -> str:
    return _settings_dir()


def get_current_settings():
    return dict(_CURRENT_SETTINGS)


def load_settings():
    global _CURRENT_SETTINGS
    try:
        with open(_settings_path(), "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", _settings_path(), exc)
        return
    if not isinstance(data, dict):
        return
    size = data.get("card_size")
    if isinstance(size, str) and size.capitalize() in ("Small", "Medium", "Large"):
        _CURRENT_SETTINGS["card_size"] = size.capitalize()
    press = data.get("long_press_ms")
    if isinstance(press, int) and press > 0:
        _CURRENT_SETTINGS["long_press_ms"] = press


def save_settings(new_values: dict):
    # Merge and write to disk
    _CURRENT_SETTINGS.update({k: new_values[k] for k in _DEFAULT_SETTINGS if k in new_values})
    try:
        os.makedirs(_settings_dir(), exist_ok=True)
        with open(_settings_path(), "w", encoding="utf-8") as f:
            json.dump(_CURRENT_SETTINGS, f, indent=2)
    except OSError as exc:
        logger.warning("Could not save settings to %s: %s", _settings_path(), exc)


def _size_to_dims(size_name: str):
    size_name = (size_name or "Medium").capitalize()
    if size_name == "Small":
        return 75, 105
    if size_name == "Large":
        return 150, 210
    return 100, 140


def invalidate_card_caches():
    global _card_face_cache, _card_back_cache, _card_frame_cache
    _card_face_cache = {}
    _card_back_cache = None
    _card_frame_cache = None


def apply_card_settings(size_name: Optional[str] = None):
    global CARD_W, CARD_H
    if size_name is not None:
        CARD_W, CARD_H = _size_to_dims(size_name)
    invalidate_card_caches()


# Load any persisted settings and apply now
load_settings()

# ---------- Configuration ----------
SCREEN_W, SCREEN_H = 1280, 800
TABLE_BG = (2, 100, 40)

CARD_W, CARD_H = _size_to_dims(_CURRENT_SETTINGS["card_size"])
CARD_RADIUS = 10
CARD_GAP_X = 18
HIDDEN_EDGE_Y = 6
LONG_PRESS_MS = _CURRENT_SETTINGS["long_press_ms"]

# Fonts are initialized via setup_fonts() AFTER pygame.init()
FONT_NAME = None
FONT_SMALL = None
FONT_UI = None
FONT_TITLE = None
FONT_CORNER_RANK = None
FONT_CORNER_SUIT = None


def setup_fonts():
    global FONT_NAME, FONT_SMALL, FONT_UI, FONT_TITLE, FONT_CORNER_RANK, FONT_CORNER_SUIT
    FONT_NAME = pygame.font.get_default_font()
    FONT_SMALL = pygame.font.SysFont(FONT_NAME, 20, bold=True)
    FONT_UI = pygame.font.SysFont(FONT_NAME, 26, bold=True)
    FONT_TITLE = pygame.font.SysFont(FONT_NAME, 44, bold=True)
    FONT_CORNER_RANK = pygame.font.SysFont(FONT_NAME, 28, bold=True)
    # Suit glyphs need a Unicode-capable font
    try:
        FONT_CORNER_SUIT = pygame.font.SysFont("Segoe UI Symbol", 26, bold=True)
    except Exception:
        FONT_CORNER_SUIT = pygame.font.SysFont(FONT_NAME, 26, bold=True)


# Colors
BLACK = (20, 20, 20)
WHITE = (245, 245, 245)
RED = (200, 20, 20)
GOLD = (230, 190, 80)
LIGHT = (220, 220, 220)
BACK_BLUE = (34, 96, 200)


def draw_suit_shape(surface, center, suit, color, size=42):
    x, y = center
    r = size // 3
    stem_w = max(6, size // 6)
    if suit == 3:  # diamond
        half = size // 2
        points = [(x, y - half), (x + half, y), (x, y + half), (x - half, y)]
        pygame.draw.polygon(surface, color, points)
    elif suit == 2:  # heart
        pygame.draw.circle(surface, color, (x - r, y - r), r)
        pygame.draw.circle(surface, color, (x + r, y - r), r)
        pygame.draw.polygon(surface, color, [(x - 2*r, y - r), (x + 2*r, y - r), (x, y + 2*r)])
    elif suit == 0:  # spade
        pygame.draw.circle(surface, color, (x - r, y), r)
        pygame.draw.circle(surface, color, (x + r, y), r)
        pygame.draw.polygon(surface, color, [(x - 2*r, y), (x + 2*r, y), (x, y - 2*r)])
        pygame.draw.rect(surface, color, (x - stem_w//2, y + r, stem_w, size//2))
    else:  # club
        pygame.draw.circle(surface, color, (x, y - r), r)
        pygame.draw.circle(surface, color, (x - r, y + r//3), r)
        pygame.draw.circle(surface, color, (x + r, y + r//3), r)
        pygame.draw.rect(surface, color, (x - stem_w//2, y + r, stem_w, size//2))


_card_face_cache = {}
_card_back_cache = None
_card_frame_cache = None


def _blank_card():
    surf = pygame.Surface((CARD_W, CARD_H), pygame.SRCALPHA)
    pygame.draw.rect(surf, WHITE, (0, 0, CARD_W, CARD_H), border_radius=CARD_RADIUS)
    pygame.draw.rect(surf, BLACK, (0, 0, CARD_W, CARD_H), width=3, border_radius=CARD_RADIUS)
    return surf


def get_card_surface(card: int):
    if card in _card_face_cache:
        return _card_face_cache[card]
    surf = _blank_card()
    suit = suit_of(card)
    color = RED if is_red(suit) else BLACK
    margin = 10
    rtxt = FONT_CORNER_RANK.render(RANK_TO_TEXT[rank_of(card)], True, color)
    stxt = FONT_CORNER_SUIT.render(SUIT_GLYPHS[suit], True, color)
    surf.blit(rtxt, (margin, margin))
    surf.blit(stxt, (margin, margin + rtxt.get_height() - 2))
    draw_suit_shape(surf, (CARD_W//2, CARD_H//2), suit, color, size=max(24, CARD_W // 2))
    _card_face_cache[card] = surf
    return surf


def get_back_surface():
    global _card_back_cache
    if _card_back_cache is not None:
        return _card_back_cache
    surf = _blank_card()
    inset = 8
    pygame.draw.rect(surf, BACK_BLUE, pygame.Rect(inset, inset, CARD_W-2*inset, CARD_H-2*inset), border_radius=8)
    for i in range(-CARD_H, CARD_W, 12):
        pygame.draw.line(surf, LIGHT, (i, 8), (i+CARD_H, CARD_H-8), 1)
    _card_back_cache = surf
    return surf


def get_frame_surface():
    global _card_frame_cache
    if _card_frame_cache is not None:
        return _card_frame_cache
    surf = pygame.Surface((CARD_W, CARD_H), pygame.SRCALPHA)
    pygame.draw.rect(surf, (255, 255, 255, 90), (0, 0, CARD_W, CARD_H), width=2, border_radius=CARD_RADIUS)
    _card_frame_cache = surf
    return surf


# ---------- Base Scene ----------
class Scene:
    def __init__(self, app):
        self.app = app
        self.next_scene = None

    def handle_event(self, e): pass
    def update(self, dt): pass
    def draw(self, screen): pass
