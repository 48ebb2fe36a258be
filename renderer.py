import pygame

def render_frame(screen: pygame.Surface, frame, sar: float):
    """
    Scale and letter-/pillar-box a raw RGB frame onto `screen`.
    No frame yet (clip still prerolling) leaves the screen black.
    """
    screen.fill((0, 0, 0))
    if frame is None:
        return
    surf = pygame.surfarray.make_surface(frame.swapaxes(0, 1))
    sw, sh = screen.get_size()
    vw, vh = surf.get_size()
    scale = min(sw / (vw * sar), sh / vh)
    surf = pygame.transform.smoothscale(
        surf,
        (int(vw * scale * sar), int(vh * scale))
    )
    x = (sw - surf.get_width()) // 2
    y = (sh - surf.get_height()) // 2
    screen.blit(surf, (x, y))
