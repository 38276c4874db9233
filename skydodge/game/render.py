# skydodge/game/render.py
from __future__ import annotations
from typing import Dict, Optional, Tuple

import pygame

from .config import (
    COLOR_SKY_TOP, COLOR_SKY_BOTTOM, COLOR_FRAME, COLOR_CRAFT, COLOR_OBSTACLE,
    COLOR_BADGE, COLOR_FG, COLOR_PANEL, COLOR_BUTTON, COLOR_TOUCH
)
from .session import Snapshot

TOUCH_BTN = 64          # on-screen arrow button size (px)
TOUCH_MARGIN = 16
FRAME_W = 4


class Renderer:
    """
    Draws a Snapshot onto a pygame surface. Reads the snapshot only.
    Hit-test rects for the on-screen buttons are refreshed on every draw.
    """
    def __init__(self, font_name: str = "jetbrainsmono"):
        self._font_name = font_name
        self._fonts: Dict[int, pygame.font.Font] = {}
        self._sky: Optional[pygame.Surface] = None
        self.origin: Tuple[int, int] = (0, 0)
        self.play_again_rect: Optional[pygame.Rect] = None
        self.up_rect: Optional[pygame.Rect] = None
        self.down_rect: Optional[pygame.Rect] = None

    def _font(self, size: int) -> pygame.font.Font:
        if size not in self._fonts:
            if not pygame.font.get_init():
                pygame.font.init()
            self._fonts[size] = pygame.font.SysFont(self._font_name, size)
        return self._fonts[size]

    def _sky_surface(self, w: int, h: int) -> pygame.Surface:
        # vertical gradient, rebuilt only when the playfield size changes
        if self._sky is None or self._sky.get_size() != (w, h):
            surf = pygame.Surface((w, h))
            for row in range(h):
                t = row / max(1, h - 1)
                color = tuple(int(a + (b - a) * t) for a, b in zip(COLOR_SKY_TOP, COLOR_SKY_BOTTOM))
                pygame.draw.line(surf, color, (0, row), (w, row))
            self._sky = surf
        return self._sky

    def draw(self, screen: pygame.Surface, snap: Snapshot):
        sw, sh = screen.get_size()
        w, h = max(1, int(snap.width_px)), max(1, int(snap.height_px))
        ox, oy = max(0, (sw - w) // 2), max(0, (sh - h) // 2)
        self.origin = (ox, oy)

        screen.fill((0, 0, 0))
        field = pygame.Surface((w, h))

        # Background scrolls with the score
        sky = self._sky_surface(w, h)
        shift = snap.score % w
        field.blit(sky, (-shift, 0))
        field.blit(sky, (w - shift, 0))

        # Obstacles
        for ob in snap.obstacles:
            size = max(1, int(ob.size_px))
            sprite = pygame.Surface((size, size), pygame.SRCALPHA)
            pygame.draw.polygon(sprite, COLOR_OBSTACLE,
                                [(0, size // 2), (size, size // 4), (size * 3 // 4, size // 2), (size, size * 3 // 4)])
            if ob.rotation_deg:
                sprite = pygame.transform.rotate(sprite, -ob.rotation_deg)
            field.blit(sprite, (int(ob.x_px), int(ob.y_px)))

        # Craft
        c = snap.craft
        cs = max(1, int(c.size_px))
        cx, cy = int(c.x_px), int(c.y_px)
        pygame.draw.polygon(field, COLOR_CRAFT, [
            (cx + cs // 5, cy + cs // 3),
            (cx + cs * 4 // 5, cy + cs // 2),
            (cx + cs // 5, cy + cs * 2 // 3),
        ])

        # Score badge
        badge = self._font(22).render(f"Score: {snap.score}", True, COLOR_FG)
        br = badge.get_rect(topright=(w - 16, 16)).inflate(24, 16)
        pygame.draw.rect(field, COLOR_BADGE, br, border_radius=8)
        field.blit(badge, badge.get_rect(center=br.center))

        # Touch arrows, bottom-right
        self.up_rect = pygame.Rect(w - TOUCH_MARGIN - TOUCH_BTN, h - 2 * (TOUCH_MARGIN + TOUCH_BTN), TOUCH_BTN, TOUCH_BTN)
        self.down_rect = pygame.Rect(w - TOUCH_MARGIN - TOUCH_BTN, h - TOUCH_MARGIN - TOUCH_BTN, TOUCH_BTN, TOUCH_BTN)
        arrow_font = self._font(28)
        for rect, label in ((self.up_rect, "^"), (self.down_rect, "v")):
            pygame.draw.ellipse(field, COLOR_TOUCH, rect)
            txt = arrow_font.render(label, True, COLOR_FG)
            field.blit(txt, txt.get_rect(center=rect.center))

        self.play_again_rect = None
        if not snap.running:
            shade = pygame.Surface((w, h), pygame.SRCALPHA)
            shade.fill((0, 0, 0, 190))
            field.blit(shade, (0, 0))

            panel = pygame.Rect(0, 0, min(w - 20, 360), min(h - 20, 220))
            panel.center = (w // 2, h // 2)
            pygame.draw.rect(field, COLOR_PANEL, panel, border_radius=10)

            title = self._font(36).render("Game Over!", True, COLOR_FG)
            field.blit(title, title.get_rect(midtop=(panel.centerx, panel.top + 20)))
            final = self._font(24).render(f"Final Score: {snap.score}", True, COLOR_FG)
            field.blit(final, final.get_rect(midtop=(panel.centerx, panel.top + 75)))

            btn = pygame.Rect(0, 0, 180, 50)
            btn.midbottom = (panel.centerx, panel.bottom - 20)
            pygame.draw.rect(field, COLOR_BUTTON, btn, border_radius=8)
            label = self._font(24).render("Play Again", True, COLOR_PANEL)
            field.blit(label, label.get_rect(center=btn.center))
            self.play_again_rect = btn

        screen.blit(field, (ox, oy))
        pygame.draw.rect(screen, COLOR_FRAME, pygame.Rect(ox, oy, w, h).inflate(FRAME_W, FRAME_W), width=FRAME_W)

    def to_field(self, pos: Tuple[int, int]) -> Tuple[int, int]:
        """Window pixel -> playfield pixel."""
        return pos[0] - self.origin[0], pos[1] - self.origin[1]
