# scene.py - Klondike board scene: keys become the four game commands, the board becomes pixels
import pygame

from klondike import common as C
from klondike import render as V
from klondike.game import KlondikeGame
from klondike.help_text import HELP_TITLE, HELP_LINES, ABOUT_TITLE, ABOUT_LINES
from klondike.state import PILE_TALON, PILE_FOUNDATIONS

TALON_FAN_X = 24
WIN_FLASH_MS = 600


class KlondikeGameScene(C.Scene):
    def __init__(self, app, game: KlondikeGame):
        super().__init__(app)
        self.game = game
        self.game.on_win = self._on_win
        self.message = ""
        self.overlay = None          # (title, lines) while help/about is open
        self.flash_until = 0
        self._down_at = None         # ticks when Down was pressed
        self._down_consumed = False  # the hold already fired the auto-sweep
        self.compute_layout()

    def compute_layout(self):
        self.top_y = 90
        self.col_x = [40 + i * (C.CARD_W + C.CARD_GAP_X) for i in range(7)]
        self.tableau_y = self.top_y + C.CARD_H + 50

    # ---------- Input ----------
    def _on_win(self):
        self.flash_until = pygame.time.get_ticks() + WIN_FLASH_MS
        self.message = "You won! Press N for a new deal."

    def _settings_message(self):
        st = self.game.state
        self.message = f"Draw: {st.draw_mode.label}   Flip limit: {st.flip_limit.label}   Score: {st.score_display.label}"

    def _cycle_card_size(self):
        sizes = ("Small", "Medium", "Large")
        current = C.get_current_settings()["card_size"]
        size = sizes[(sizes.index(current) + 1) % len(sizes)] if current in sizes else "Medium"
        C.save_settings({"card_size": size})
        C.apply_card_settings(size)
        self.compute_layout()
        self.message = f"Card size: {size}"

    def handle_event(self, e):
        if e.type == pygame.KEYDOWN:
            if self.overlay is not None:
                self.overlay = None
                return
            if e.key == pygame.K_UP:
                self.game.advance_selection()
            elif e.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
                self.game.select()
            elif e.key == pygame.K_DOWN:
                self._down_at = pygame.time.get_ticks()
                self._down_consumed = False
            elif e.key == pygame.K_d:
                self.game.toggle_draw_mode(); self._settings_message()
            elif e.key == pygame.K_f:
                self.game.cycle_flip_limit(); self._settings_message()
            elif e.key == pygame.K_s:
                self.game.cycle_score_display(); self._settings_message()
            elif e.key == pygame.K_z:
                self.game.reset_score(); self.message = "Score reset"
            elif e.key == pygame.K_n:
                self.game.new_deal(); self.message = ""
            elif e.key == pygame.K_c:
                self._cycle_card_size()
            elif e.key == pygame.K_h:
                self.overlay = (HELP_TITLE, HELP_LINES)
            elif e.key == pygame.K_a:
                self.overlay = (ABOUT_TITLE, ABOUT_LINES)
            elif e.key == pygame.K_ESCAPE:
                pygame.event.post(pygame.event.Event(pygame.QUIT))
        elif e.type == pygame.KEYUP and e.key == pygame.K_DOWN:
            if self._down_at is not None and not self._down_consumed:
                self.game.draw_or_cancel()
            self._down_at = None
            self._down_consumed = False

    def update(self, dt):
        if self._down_at is None or self._down_consumed:
            return
        if pygame.time.get_ticks() - self._down_at >= C.LONG_PRESS_MS:
            self._down_consumed = True
            self.game.auto_sweep()

    # ---------- Drawing ----------
    def _blit_slot(self, screen, slot: V.Slot, x: int, y: int):
        if slot.kind is V.SlotKind.CUTOFF:
            return
        if slot.kind is V.SlotKind.FACE_DOWN:
            surf = C.get_back_surface()
        elif slot.kind is V.SlotKind.EMPTY:
            surf = C.get_frame_surface()
        else:
            surf = C.get_card_surface(slot.card)
        screen.blit(surf, (x, y))

    def _tableau_rects(self, view: V.BoardView, i: int):
        t = view.tableau[i]
        bottom_y = self.tableau_y + t.hidden_count * C.HIDDEN_EDGE_Y
        top_y = bottom_y + int(C.CARD_H * 0.45)
        return bottom_y, top_y

    def _selector_pos(self, view: V.BoardView):
        sel = view.selection
        if sel is None:
            return None
        if sel == PILE_TALON:
            x = self.col_x[1] + TALON_FAN_X * max(0, len(view.talon) - 1)
            return x, self.top_y + C.CARD_H + 6, C.CARD_W
        if sel == PILE_FOUNDATIONS:
            x = self.col_x[3]
            return x, self.top_y + C.CARD_H + 6, self.col_x[6] + C.CARD_W - x
        bottom_y, top_y = self._tableau_rects(view, sel)
        y = top_y if view.tableau[sel].top.kind is V.SlotKind.CARD else bottom_y
        return self.col_x[sel], y + C.CARD_H + 6, C.CARD_W

    def _draw_overlay(self, screen):
        title, lines = self.overlay
        dim = pygame.Surface((C.SCREEN_W, C.SCREEN_H), pygame.SRCALPHA)
        dim.fill((0, 0, 0, 160))
        screen.blit(dim, (0, 0))
        box = pygame.Rect(0, 0, min(C.SCREEN_W - 80, 1000), 80 + 30 * len(lines))
        box.center = (C.SCREEN_W // 2, C.SCREEN_H // 2)
        pygame.draw.rect(screen, (240, 240, 240), box, border_radius=16)
        pygame.draw.rect(screen, (80, 80, 80), box, width=2, border_radius=16)
        t = C.FONT_TITLE.render(title, True, C.BLACK)
        screen.blit(t, (box.x + 24, box.y + 16))
        y = box.y + 24 + t.get_height()
        for line in lines:
            s = C.FONT_SMALL.render(line, True, C.BLACK)
            screen.blit(s, (box.x + 24, y))
            y += 30

    def draw(self, screen):
        screen.fill(C.TABLE_BG)
        view = V.board_view(self.game.state, self.game.score_label)

        # Top bar
        pygame.draw.rect(screen, (0, 0, 0), (0, 0, C.SCREEN_W, 60))
        mode = "Choose destination" if view.destination_mode else "Choose card"
        t = C.FONT_UI.render("Klondike" if view.win else mode, True, C.WHITE)
        screen.blit(t, (20, 30 - t.get_height() // 2))
        if view.score_label is not None:
            s = C.FONT_UI.render(view.score_label, True, C.WHITE)
            screen.blit(s, (C.SCREEN_W - s.get_width() - 20, 30 - s.get_height() // 2))

        # Stock, talon, foundations
        self._blit_slot(screen, view.stock, self.col_x[0], self.top_y)
        for i, slot in enumerate(view.talon):
            self._blit_slot(screen, slot, self.col_x[1] + TALON_FAN_X * i, self.top_y)
        for i, slot in enumerate(view.foundations):
            self._blit_slot(screen, slot, self.col_x[3 + i], self.top_y)

        # Tableau
        for i, t in enumerate(view.tableau):
            x = self.col_x[i]
            for j in range(t.hidden_count):
                screen.blit(C.get_back_surface(), (x, self.tableau_y + j * C.HIDDEN_EDGE_Y))
            bottom_y, top_y = self._tableau_rects(view, i)
            self._blit_slot(screen, t.bottom, x, bottom_y)
            self._blit_slot(screen, t.top, x, top_y)

        pos = self._selector_pos(view)
        if pos is not None:
            x, y, w = pos
            pygame.draw.rect(screen, C.GOLD, (x, y, w, 8), border_radius=4)

        if self.message:
            msg = C.FONT_UI.render(self.message, True, (255, 255, 180))
            screen.blit(msg, (C.SCREEN_W // 2 - msg.get_width() // 2, C.SCREEN_H - 40))

        if pygame.time.get_ticks() < self.flash_until:
            flash = pygame.Surface((C.SCREEN_W, C.SCREEN_H), pygame.SRCALPHA)
            flash.fill((255, 255, 255, 120))
            screen.blit(flash, (0, 0))

        if self.overlay is not None:
            self._draw_overlay(screen)
