import numpy as np
from typing import List, Tuple, Optional
from dataclasses import dataclass
import math
import os

import billiards as P
from billiards.arclength import ArcLengthParametrizer, advance
from billiards.disk import DiskTrajectory
from billiards.rectangle import RectTrajectory
from billiards.unfold import UnfoldResult, tile_bounds

os.environ['PYGAME_HIDE_SUPPORT_PROMPT'] = '1'
import pygame

Color = Tuple[int, int, int]


@dataclass
class AppearanceConfig:
    """Pixels only, never physics."""
    resolution: int = P.RESOLUTION
    padding: int = P.PADDING
    bg_color: Color = P.BG_COLOR
    wall_color: Color = (17, 17, 17)
    path_color: Color = (0, 0, 255)
    caustic_color: Color = (0, 128, 0)
    tile_color: Color = (119, 119, 119)
    particle_color: Color = (255, 0, 0)
    particle_radius: int = 8
    bounce_radius: int = 3


class Viewport:
    """Maps a world box onto a width x height pixel area, aspect preserved, y up."""

    def __init__(self, xmin: float, xmax: float, ymin: float, ymax: float,
                 width: int, height: int, padding: int):
        w = max(xmax - xmin, 1e-9)
        h = max(ymax - ymin, 1e-9)
        self.scale = min((width - 2 * padding) / w, (height - 2 * padding) / h)
        self.ox = padding - xmin * self.scale
        self.oy = height - padding + ymin * self.scale

    def to_pixel(self, p) -> Tuple[int, int]:
        return int(round(self.ox + p[0] * self.scale)), int(round(self.oy - p[1] * self.scale))

    def length(self, r: float) -> int:
        return max(1, int(round(r * self.scale)))


class Renderer:
    """Maps simulation results → pixel frames."""

    def __init__(self, config: Optional[AppearanceConfig] = None):
        self.config = config or AppearanceConfig()
        self._display_initialized = False

    def _surface(self, width: int, height: int) -> pygame.Surface:
        surface = pygame.Surface((width, height))
        surface.fill(self.config.bg_color)
        return surface

    @staticmethod
    def _to_array(surface: pygame.Surface) -> np.ndarray:
        return pygame.surfarray.array3d(surface).transpose(1, 0, 2)

    def _polyline(self, surface, view: Viewport, pts: np.ndarray, color: Color, width: int = 2):
        if len(pts) < 2:
            return
        pygame.draw.lines(surface, color, False, [view.to_pixel(p) for p in pts], width)

    def _dashed_circle(self, surface, view: Viewport, radius: float, color: Color,
                       dash: float = 10.0, gap: float = 8.0):
        r_px = view.length(radius)
        circumference = 2 * math.pi * r_px
        n = max(1, int(circumference // (dash + gap)))
        cx, cy = view.to_pixel((0.0, 0.0))
        for k in range(n):
            a0 = 2 * math.pi * k / n
            a1 = a0 + 2 * math.pi * dash / (dash + gap) / n
            p0 = (cx + r_px * math.cos(a0), cy - r_px * math.sin(a0))
            p1 = (cx + r_px * math.cos(a1), cy - r_px * math.sin(a1))
            pygame.draw.line(surface, color, p0, p1, 2)

    def _particle(self, surface, view: Viewport, pos):
        pygame.draw.circle(surface, self.config.particle_color, view.to_pixel(pos),
                           self.config.particle_radius)

    # Scenes

    def render_disk(self, traj: DiskTrajectory, path: ArcLengthParametrizer, u: float) -> np.ndarray:
        """Unit circle, caustic, traced orbit and particle → (res, res, 3) uint8."""
        res = self.config.resolution
        surface = self._surface(res, res)
        view = Viewport(-1.0, 1.0, -1.0, 1.0, res, res, self.config.padding)

        pygame.draw.circle(surface, self.config.wall_color, view.to_pixel((0.0, 0.0)),
                           view.length(1.0), 3)
        self._dashed_circle(surface, view, traj.caustic_radius, self.config.caustic_color)
        self._polyline(surface, view, path.prefix(min(u, path.total)), self.config.path_color)
        self._particle(surface, view, path.position(u))
        return self._to_array(surface)

    def _table(self, surface, view: Viewport, width: float, height: float, x0=0.0, y0=0.0,
               color: Optional[Color] = None, line: int = 3):
        left, top = view.to_pixel((x0, y0 + height))
        right, bottom = view.to_pixel((x0 + width, y0))
        pygame.draw.rect(surface, color or self.config.wall_color,
                         pygame.Rect(left, top, right - left, bottom - top), line)

    def render_rectangle(self, traj: RectTrajectory, path: Optional[ArcLengthParametrizer] = None,
                         u: Optional[float] = None) -> np.ndarray:
        """Table, path (whole or traced up to u), bounce points, start point."""
        res = self.config.resolution
        a, b = traj.table.width, traj.table.height
        h_px = max(2 * self.config.padding + 1, int(res * b / a))
        surface = self._surface(res, h_px)
        view = Viewport(0.0, a, 0.0, b, res, h_px, self.config.padding)

        self._table(surface, view, a, b)
        if path is not None and u is not None:
            self._polyline(surface, view, path.prefix(min(u, path.total)), self.config.path_color)
            self._particle(surface, view, path.position(u))
        else:
            self._polyline(surface, view, traj.points, self.config.path_color)
            for p in traj.points[1:]:
                pygame.draw.circle(surface, self.config.wall_color, view.to_pixel(p),
                                   self.config.bounce_radius)
        pygame.draw.circle(surface, self.config.particle_color, view.to_pixel(traj.points[0]), 6)
        return self._to_array(surface)

    def render_unfold(self, result: UnfoldResult, folded: ArcLengthParametrizer,
                      unfolded: ArcLengthParametrizer, u: float,
                      tiles: Optional[Tuple[range, range]] = None) -> np.ndarray:
        """
        Folded table on the left, tiled plane on the right, traced to the same arc length.

        Both parametrizers (and the tile ranges) are built once per result by the
        caller; a frame only queries them.
        """
        res = self.config.resolution
        pad = self.config.padding
        a, b = result.folded.table.width, result.folded.table.height
        left_surface = self._surface(res, res)
        tiled = self._surface(res, res)

        left = Viewport(0.0, a, 0.0, b, res, res, pad)
        self._table(left_surface, left, a, b)

        U = unfolded.points
        right = Viewport(U[:, 0].min(), U[:, 0].max(), U[:, 1].min(), U[:, 1].max(),
                         res, res, pad)
        ti, tj = tiles if tiles is not None else tile_bounds(U, a, b)
        for i in ti:
            for j in tj:
                self._table(tiled, right, a, b, i * a, j * b, self.config.tile_color, 2)

        for surface, view, path in ((left_surface, left, folded), (tiled, right, unfolded)):
            self._polyline(surface, view, path.prefix(min(u, path.total)), self.config.path_color)
            pygame.draw.circle(surface, self.config.particle_color, view.to_pixel(path.points[0]), 6)
        return np.hstack([self._to_array(left_surface), self._to_array(tiled)])

    # Playback

    def play(self, draw, total: float, speed: float = P.SPEED, fps: int = P.FPS,
             loop: bool = False, caption: str = 'Billiards'):
        """
        Drive draw(u) -> frame from the pygame clock. Press Q to exit.

        u advances by speed * dt each frame and saturates at total, or wraps
        to 0 when loop is set.
        """
        if not self._display_initialized:
            pygame.init()
            self._display_initialized = True

        first = draw(0.0)
        screen = pygame.display.set_mode((first.shape[1], first.shape[0]))
        pygame.display.set_caption(caption)
        clock = pygame.time.Clock()

        running = True
        u = 0.0
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                if event.type == pygame.KEYDOWN and event.key == pygame.K_q:
                    running = False

            frame = draw(u)
            surf = pygame.surfarray.make_surface(frame.transpose(1, 0, 2))
            screen.blit(surf, (0, 0))
            pygame.display.flip()

            dt = clock.tick(fps) / 1000.0
            if loop and u >= total:
                u = 0.0
            else:
                u = advance(u, total, speed, dt)

        pygame.quit()
        self._display_initialized = False

    def record(self, draw, total: float, speed: float = P.SPEED, fps: int = P.FPS,
               max_frames: int = P.MAX_SAVED_FRAMES) -> List[np.ndarray]:
        """One pass of draw(u) from 0 to total at a fixed 1/fps step, no window."""
        frames = [draw(0.0)]
        u = 0.0
        while u < total and len(frames) < max_frames:
            u = advance(u, total, speed, 1.0 / fps)
            frames.append(draw(u))
        return frames


def save_frames(frames: List[np.ndarray], path: str) -> List[str]:
    """Save frames as individual PNGs."""
    os.makedirs(path, exist_ok=True)
    written = []
    for t, frame in enumerate(frames):
        surf = pygame.surfarray.make_surface(frame.transpose(1, 0, 2))
        name = os.path.join(path, f'frame_{t:05d}.png')
        pygame.image.save(surf, name)
        written.append(name)
    return written
