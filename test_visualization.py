import math
import os
import unittest

os.environ.setdefault('SDL_VIDEODRIVER', 'dummy')

import numpy as np
import pygame

from config import config
from scene import SceneComposer, SimulationClock
from celestial_catalog import BodyCatalog
from visual_effects import StarField, glow_pulse
from visualization import Visualization, spin_marker_offset


class TestRenderingHelpers(unittest.TestCase):

    def test_glow_pulse_range(self):
        self.assertAlmostEqual(glow_pulse(0.0), 0.9)
        values = [glow_pulse(t) for t in np.linspace(0.0, 100.0, 400)]
        self.assertGreaterEqual(min(values), 0.8 - 1e-9)
        self.assertLessEqual(max(values), 1.0 + 1e-9)

    def test_star_field_layers(self):
        field = StarField(200, 100, star_count=1000, seed=7)
        self.assertEqual(len(field), 1000)
        for layer in field.star_layers:
            self.assertTrue(np.all(layer['positions'][:, 0] < 200))
            self.assertTrue(np.all(layer['positions'][:, 1] < 100))

    def test_spin_marker_without_tilt(self):
        dx, dz = spin_marker_offset(math.pi / 2, 0.0)
        self.assertAlmostEqual(dx, 0.0)
        self.assertAlmostEqual(dz, 1.0)

    def test_spin_marker_tilt_foreshortens(self):
        dx, dz = spin_marker_offset(math.pi / 2, math.radians(60.0))
        self.assertAlmostEqual(dz, 0.5)
        dx, dz = spin_marker_offset(math.pi / 2, math.radians(90.0))
        self.assertAlmostEqual(dz, 0.0)


class TestVisualization(unittest.TestCase):

    def setUp(self):
        self.visualization = Visualization(config)
        catalog = BodyCatalog.from_config(config)
        self.scene = SceneComposer(catalog, ['SUN', 'EARTH', 'VENUS'], clock=SimulationClock(20.0), cfg=config)

    def tearDown(self):
        self.visualization.close()

    def test_world_to_screen(self):
        vis = config.Visualization
        center = (vis.SCREEN_WIDTH_PX // 2, vis.SCREEN_HEIGHT_PX // 2)
        self.assertEqual(self.visualization.world_to_screen((0.0, 0.0, 0.0)), center)
        x, y = self.visualization.world_to_screen((1.0, 0.0, 0.0))
        self.assertEqual((x, y), (center[0] + int(vis.PIXELS_PER_UNIT), center[1]))

    def test_render_frame(self):
        self.scene.tick(0.5)
        self.visualization.render(self.scene)
        self.assertTrue(self.visualization.visualization_enabled)

    def test_time_scale_keys(self):
        pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_RIGHTBRACKET))
        self.assertTrue(self.visualization.handle_events(self.scene))
        self.assertEqual(self.scene.clock.time_scale, 40.0)
        pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_SPACE))
        self.visualization.handle_events(self.scene)
        self.assertTrue(self.scene.clock.paused)

    def test_orbit_toggle_and_zoom(self):
        self.assertTrue(self.visualization.show_orbits)
        pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_o))
        pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_EQUALS))
        self.visualization.handle_events(self.scene)
        self.assertFalse(self.visualization.show_orbits)
        self.assertAlmostEqual(self.visualization.zoom_level, 1.2)

    def test_quit_event(self):
        pygame.event.post(pygame.event.Event(pygame.QUIT))
        self.assertFalse(self.visualization.handle_events(self.scene))


if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
