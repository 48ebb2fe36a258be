"""
overlays.py

Pygame overlays for the narrative player: caption text, the
success/failure choice panel and the optional status badge.
"""

from __future__ import annotations

import pygame, config
from sequence import Phase

# ── colours ────────────────────────────────────────────────────────────────
WHITE = (255, 255, 255)
GREEN = (0, 255, 0)
RED   = (255,  50, 50)
YEL   = (200, 200, 50)
BG    = (0, 0, 0, 180)

pygame.font.init()

_fonts: dict[tuple[str, int], pygame.font.Font] = {}


# ── helpers ────────────────────────────────────────────────────────────────
def _compute_font_sizes(h: int) -> tuple[int, int, int]:
    return max(12, h // 60), max(16, h // 30), max(24, h // 15)


def _font(name: str, size: int) -> pygame.font.Font:
    key = (name, size)
    if key not in _fonts:
        _fonts[key] = pygame.font.SysFont(name, size)
    return _fonts[key]


def _wrap(text: str, font: pygame.font.Font, width: int) -> list[str]:
    """Greedy word wrap; explicit line breaks in the cue are kept."""
    lines: list[str] = []
    for para in text.split("\n"):
        cur = ""
        for word in para.split():
            trial = f"{cur} {word}" if cur else word
            if cur and font.size(trial)[0] > width:
                lines.append(cur)
                cur = word
            else:
                cur = trial
        lines.append(cur)
    return lines


def _badge(font: pygame.font.Font, text: str, colour) -> pygame.Surface:
    pt   = font.get_height()
    surf = font.render(text, True, colour)
    bg   = pygame.Surface(
        (surf.get_width() + pt // 2, surf.get_height() + pt // 4),
        pygame.SRCALPHA,
    )
    bg.fill(BG)
    bg.blit(surf, (pt // 4, pt // 8))
    return bg


# ── caption display ────────────────────────────────────────────────────────
class CaptionOverlay:
    """Bottom-centred caption block.  Empty text draws nothing."""

    def __init__(self):
        self.text = ""

    def set_text(self, text: str) -> None:
        self.text = text

    def draw(self, surface: pygame.Surface) -> None:
        if not self.text:
            return
        sw, sh = surface.get_size()
        _, small_pt, _ = _compute_font_sizes(sh)
        font  = _font(config.CAPTION_FONT, small_pt)
        lines = _wrap(self.text, font, int(sw * config.CAPTION_MAX_WIDTH_PCT))

        step = font.get_linesize()
        y    = sh - int(sh * config.CAPTION_BOTTOM_MARGIN_PCT) - step * len(lines)
        for ln in lines:
            if ln:
                bg = _badge(font, ln, WHITE)
                surface.blit(bg, ((sw - bg.get_width()) // 2, y))
            y += step


# ── choice panel ───────────────────────────────────────────────────────────
class ChoicePanel:
    """Two buttons shown while the flow waits for the operator."""

    def __init__(self):
        self.visible = False
        self._rects: dict[str, pygame.Rect] = {}

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False

    def hit(self, pos: tuple[int, int]) -> str | None:
        """Return "success" / "failure" for a click on a button, else None."""
        if not self.visible:
            return None
        for choice, rect in self._rects.items():
            if rect.collidepoint(pos):
                return choice
        return None

    def draw(self, surface: pygame.Surface) -> None:
        if not self.visible:
            return
        sw, sh = surface.get_size()
        _, _, large_pt = _compute_font_sizes(sh)
        font = _font(config.CAPTION_FONT, large_pt)

        buttons = (
            ("success", config.CHOICE_SUCCESS_LABEL, GREEN),
            ("failure", config.CHOICE_FAILURE_LABEL, RED),
        )
        surfs = [(c, _badge(font, label, col)) for c, label, col in buttons]
        gap   = large_pt
        total = sum(s.get_width() for _, s in surfs) + gap * (len(surfs) - 1)
        x     = (sw - total) // 2
        y     = (sh - surfs[0][1].get_height()) // 2

        self._rects.clear()
        for choice, s in surfs:
            surface.blit(s, (x, y))
            self._rects[choice] = pygame.Rect(x, y, s.get_width(), s.get_height())
            x += s.get_width() + gap


# ── status badge ───────────────────────────────────────────────────────────
_PHASE_LABEL = {
    Phase.QUESTION:        "Q",
    Phase.OUTCOME_SUCCESS: "OK",
    Phase.OUTCOME_FAILURE: "RETRY",
}


def draw_status(surface: pygame.Surface, flow) -> None:
    """Question number / phase badge in the top-right corner."""
    if not config.SHOW_OVERLAYS:
        return
    sw, sh = surface.get_size()
    tiny_pt, _, _ = _compute_font_sizes(sh)
    font = _font("monospace", tiny_pt * 2)

    total = len(flow.questions)
    if flow.complete:
        txt, col = f"DONE {total:02d}/{total:02d}", GREEN
    else:
        txt = f"{_PHASE_LABEL[flow.phase]} {flow.index + 1:02d}/{total:02d}"
        if flow.attempt > 1:
            txt += f"  #{flow.attempt}"
        col = YEL if flow.awaiting_choice else GREEN

    bg = _badge(font, txt, col)
    surface.blit(bg, (sw - bg.get_width() - 10, 10))
