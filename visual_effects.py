import math

import numpy as np
import pygame


def glow_pulse(elapsed_time: float) -> float:
    """Brightness multiplier of the star glow, oscillating between 0.8 and 1.0."""
    shader_time = elapsed_time / 10.0
    return math.sin(shader_time * 2.0) * 0.1 + 0.9


class VisualEffects:
    def __init__(self):
        self.glow_cache = {}  # (radius, color, alpha) -> surface

    def _glow_surface(self, radius, color, alpha):
        key = (radius, color, alpha)
        surf = self.glow_cache.get(key)
        if surf is None:
            surf = pygame.Surface((radius * 2, radius * 2), pygame.SRCALPHA)
            pygame.draw.circle(surf, (*color, alpha), (radius, radius), radius)
            if len(self.glow_cache) > 256:
                self.glow_cache.clear()
            self.glow_cache[key] = surf
        return surf

    def draw_star_glow(self, surface, pos, body_radius_px, color, radius_factor=1.2, elapsed_time=0.0):
        """Additive halo around the central star, pulsing with simulated time."""
        pulse = glow_pulse(elapsed_time)
        radius = body_radius_px * radius_factor
        if radius <= 1:
            return

        for i in range(3):  # outer to inner
            layer_radius = int(radius * (1.0 + (2 - i) * 0.35))
            layer_alpha = int(90 * pulse * (0.4 + i * 0.3))
            if layer_radius <= 1 or layer_alpha <= 10:
                continue
            glow_surf = self._glow_surface(layer_radius, color, layer_alpha)
            surface.blit(glow_surf,
                         (int(pos[0] - layer_radius), int(pos[1] - layer_radius)),
                         special_flags=pygame.BLEND_RGBA_ADD)


class StarField:
    """Static background stars in three parallax layers; nearer layers drift more when the view pans."""

    LAYERS = (
        # (share of stars, parallax factor, base brightness, size px)
        (0.5, 0.05, 0.4, 1),
        (0.3, 0.15, 0.7, 1),
        (0.2, 0.30, 1.0, 2),
    )

    def __init__(self, width, height, star_count=1000, seed=None):
        self.width = width
        self.height = height
        rng = np.random.default_rng(seed)

        self.star_layers = []
        for share, parallax, brightness, size in self.LAYERS:
            count = int(star_count * share)
            self.star_layers.append({
                'positions': rng.uniform((0.0, 0.0), (width, height), size=(count, 2)),
                'brightness': brightness * rng.uniform(0.5, 1.0, size=count),
                'twinkle_phase': rng.uniform(0.0, 2 * math.pi, size=count),
                'twinkle_speed': rng.uniform(0.002, 0.008, size=count),
                'parallax': parallax,
                'size': size,
            })

    def __len__(self):
        return sum(len(layer['positions']) for layer in self.star_layers)

    def draw(self, surface, pan_offset_px=(0.0, 0.0)):
        time_ms = pygame.time.get_ticks()
        pan = np.asarray(pan_offset_px, dtype=np.float64)

        for layer in self.star_layers:
            shifted = (layer['positions'] + pan * layer['parallax']) % (self.width, self.height)
            twinkle = (np.sin(time_ms * layer['twinkle_speed'] + layer['twinkle_phase']) + 1) / 2
            levels = (255 * layer['brightness'] * (0.6 + 0.4 * twinkle)).astype(int)

            for (x, y), level in zip(shifted.astype(int).tolist(), levels.tolist()):
                if level < 20:
                    continue
                color = (min(255, level), min(255, level), min(255, int(level * 1.05)))
                if layer['size'] <= 1:
                    surface.set_at((x, y), color)
                else:
                    pygame.draw.circle(surface, color, (x, y), layer['size'] // 2 + 1)
