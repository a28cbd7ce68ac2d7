# visualization.py
import pygame
import numpy as np
from typing import Tuple
import math
import logging
from config import config as default_config, ConfigurationError
from scene import SceneComposer
from solarsystem import CelestialBody
from visual_effects import VisualEffects, StarField


def spin_marker_offset(spin_angle: float, axial_tilt_rad: float) -> Tuple[float, float]:
    """Top-down `(x, z)` direction of a surface marker on the body's equator.

    The marker is turned by `spin_angle` about the body's local vertical axis and
    then tipped by the fixed axial tilt about the x axis; the result is projected
    onto the orbital plane.
    """
    return (math.cos(spin_angle), math.sin(spin_angle) * math.cos(axial_tilt_rad))


class Visualization:
    """Renders a `SceneComposer` with pygame, looking down onto the orbital plane.

    Responsibilities:
    - Initializing pygame and the display window.
    - Drawing the star field, sampled orbit paths, bodies (with a spin marker that
      composes spin angle and axial tilt), the star's pulsing glow and a HUD.
    - Handling input: quit, zoom (keys / mouse wheel), pan (left-drag), time scale
      (`[` / `]`), pause (space) and orbit line toggle (`O`).

    The renderer reads the bodies' reported state only; it never mutates the scene
    apart from the clock's time scale and pause flag, which the scene reads at the
    start of the next tick. If the display cannot be created, `visualization_enabled`
    is set to `False` and rendering calls become no-ops.

    Attributes:
        screen (pygame.Surface | None): Main display surface.
        visualization_enabled (bool): `False` if the display could not be initialized.
        clock (pygame.time.Clock | None): Frame clock; `tick_seconds()` measures frame deltas.
        camera_offset (np.ndarray): Scene `(x, z)` coordinates shown at the screen centre.
        zoom_level (float): Current zoom, clamped to `MIN_ZOOM`..`MAX_ZOOM`.
        show_orbits (bool): Whether orbit paths are drawn.
    """
    def __init__(self, cfg=None):
        """Initializes pygame, the window and the rendering helpers.

        Raises:
            ConfigurationError: If screen dimensions are invalid.
            pygame.error: If pygame cannot be initialized at all.
        """
        self.cfg = cfg if cfg is not None else default_config
        vis = self.cfg.Visualization
        try:
            pygame.init()
            self.visualization_enabled = True

            try:
                screen_w = vis.SCREEN_WIDTH_PX
                screen_h = vis.SCREEN_HEIGHT_PX
                if not (isinstance(screen_w, int) and screen_w > 0 and
                        isinstance(screen_h, int) and screen_h > 0):
                    raise ConfigurationError("SCREEN_WIDTH_PX and SCREEN_HEIGHT_PX must be positive integers.")
                self.screen = pygame.display.set_mode((screen_w, screen_h))
            except pygame.error as e_disp:
                logging.critical(f"Error setting display mode: {e_disp}. Visualization disabled.", exc_info=True)
                self.screen = None
                self.visualization_enabled = False

            self.clock = pygame.time.Clock()
            self.camera_offset = np.array([0.0, 0.0], dtype=np.float64)
            self.zoom_level: float = 1.0
            self.show_orbits: bool = vis.SHOW_ORBITS
            self._dragging = False

            if self.screen is not None:
                pygame.display.set_caption("Orrery")
                try:
                    self.font = pygame.font.Font(None, 22)
                    self.small_font = pygame.font.Font(None, 16)
                except pygame.error as e_font:
                    logging.error(f"Pygame error initializing fonts: {e_font}. Text rendering disabled.", exc_info=True)
                    self.font = self.small_font = None
                self.visual_effects = VisualEffects()
                self.starfield = StarField(screen_w, screen_h, vis.STAR_COUNT)
            else:
                self.font = self.small_font = None
                self.visual_effects = self.starfield = None

        except ConfigurationError as e_config_outer:
            logging.critical(f"Visualization initialization failed due to ConfigurationError: {e_config_outer}", exc_info=True)
            self.visualization_enabled = False
            raise

    def tick_seconds(self) -> float:
        """Waits for the next frame at the configured FPS and returns the real delta in seconds."""
        return self.clock.tick(self.cfg.Visualization.FPS) / 1000.0

    def world_to_screen(self, world_pos) -> Tuple[int, int]:
        """Projects a scene `(x, y, z)` point onto screen pixels (top-down, y dropped)."""
        vis = self.cfg.Visualization
        scale = vis.PIXELS_PER_UNIT * self.zoom_level
        screen_x = vis.SCREEN_WIDTH_PX / 2 + (world_pos[0] - self.camera_offset[0]) * scale
        screen_y = vis.SCREEN_HEIGHT_PX / 2 + (world_pos[2] - self.camera_offset[1]) * scale
        return (int(screen_x), int(screen_y))

    def body_radius_px(self, body: CelestialBody) -> int:
        vis = self.cfg.Visualization
        radius = body.constants.radius * vis.PIXELS_PER_UNIT * vis.BODY_RADIUS_EXAGGERATION * self.zoom_level
        return max(vis.MIN_BODY_RADIUS_PX, int(radius))

    def render(self, scene: SceneComposer):
        """Draws one frame of `scene` and flips the display.

        Error Handling:
            pygame errors are logged and the frame is skipped; the simulation keeps running.
        """
        if not self.visualization_enabled or self.screen is None:
            return

        vis = self.cfg.Visualization
        try:
            self.screen.fill(vis.BACKGROUND_COLOR)
            if self.starfield:
                pan_px = -self.camera_offset * vis.PIXELS_PER_UNIT * self.zoom_level
                self.starfield.draw(self.screen, pan_px)

            if self.show_orbits:
                self._draw_orbit_paths(scene)
            self._draw_celestial_bodies(scene)
            self._draw_hud(scene)

            pygame.display.flip()
        except pygame.error as e_pygame_render:
            logging.error(f"Pygame error during main render loop: {e_pygame_render}. Attempting to continue.", exc_info=True)

    def _draw_orbit_paths(self, scene: SceneComposer):
        color = self.cfg.Visualization.ORBIT_LINE_COLOR
        for body in scene.bodies:
            if body.orbit_path is None:
                continue
            points = [self.world_to_screen(point) for point in body.orbit_path]
            pygame.draw.lines(self.screen, color, True, points, 1)

    def _draw_celestial_bodies(self, scene: SceneComposer):
        """Draws every body at its reported position, in scene order.

        Each body is a filled circle in its appearance colour. A marker line from the
        centre shows the spin angle composed with the fixed axial tilt. Bodies whose
        appearance sets `glow` get the pulsing additive halo.
        """
        vis = self.cfg.Visualization
        for body in scene.bodies:
            appearance = body.appearance or {}
            color = tuple(appearance.get('color', (200, 200, 255)))
            screen_pos = self.world_to_screen(body.position)
            radius_px = self.body_radius_px(body)

            if appearance.get('glow') and self.visual_effects:
                self.visual_effects.draw_star_glow(self.screen, screen_pos, radius_px, vis.GLOW_COLOR,
                                                   vis.GLOW_RADIUS_FACTOR, body.elapsed_time)

            pygame.draw.circle(self.screen, color, screen_pos, radius_px)

            if vis.SHOW_SPIN_INDICATORS and body.rotation_speed != 0 and radius_px >= 4:
                dx, dz = spin_marker_offset(body.spin_angle, body.axial_tilt_rad)
                tip = (int(screen_pos[0] + dx * radius_px), int(screen_pos[1] + dz * radius_px))
                pygame.draw.line(self.screen, (20, 20, 20), screen_pos, tip, 2)

            if self.small_font and radius_px >= 2:
                text_surface = self.small_font.render(body.name.title(), True, vis.LABEL_COLOR)
                text_rect = text_surface.get_rect(center=(screen_pos[0], screen_pos[1] - radius_px - 10))
                self.screen.blit(text_surface, text_rect)

    def _draw_hud(self, scene: SceneComposer):
        if not self.font:
            return
        clock = scene.clock
        status = "paused" if clock.paused else f"x{clock.time_scale:g} days/s"
        lines = [
            f"Day {scene.elapsed_time:,.1f} ({scene.elapsed_time / 365.25:,.2f} yr)  |  {status}",
            "[ ] speed   space pause   O orbits   +/- zoom   drag pan",
        ]
        for i, line in enumerate(lines):
            text_surface = self.font.render(line, True, self.cfg.Visualization.LABEL_COLOR)
            self.screen.blit(text_surface, (12, 10 + i * 22))

    def _zoom(self, factor: float):
        vis = self.cfg.Visualization
        self.zoom_level = float(np.clip(self.zoom_level * factor, vis.MIN_ZOOM, vis.MAX_ZOOM))

    def handle_events(self, scene: SceneComposer) -> bool:
        """Processes the pygame event queue.

        Returns:
            bool: `False` if the user asked to quit, `True` otherwise.
        """
        if not self.visualization_enabled:
            return True

        try:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    logging.info("QUIT event received via Pygame window. Signaling shutdown.")
                    return False

                if event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        logging.info("Escape pressed. Signaling shutdown.")
                        return False
                    elif event.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
                        self._zoom(1.2)
                    elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
                        self._zoom(1 / 1.2)
                    elif event.key == pygame.K_RIGHTBRACKET:
                        scene.clock.scale_by(2.0)
                    elif event.key == pygame.K_LEFTBRACKET:
                        scene.clock.scale_by(0.5)
                    elif event.key == pygame.K_SPACE:
                        scene.clock.toggle_pause()
                    elif event.key == pygame.K_o:
                        self.show_orbits = not self.show_orbits

                elif event.type == pygame.MOUSEWHEEL:
                    self._zoom(1.1 if event.y > 0 else 1 / 1.1)
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    self._dragging = True
                elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                    self._dragging = False
                elif event.type == pygame.MOUSEMOTION and self._dragging:
                    scale = self.cfg.Visualization.PIXELS_PER_UNIT * self.zoom_level
                    self.camera_offset -= np.array(event.rel, dtype=np.float64) / scale

            return True

        except pygame.error as e_pygame_event:
            logging.error(f"Pygame error during event handling: {e_pygame_event}. Attempting to continue.", exc_info=True)
            return True

    def close(self):
        pygame.quit()
