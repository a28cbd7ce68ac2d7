# main.py
import os
import psutil # For memory monitoring
import logging
import cProfile
import argparse
from typing import Optional

from config import config, ConfigurationError # Use the global config instance
from scene import SceneComposer


class OrrerySimulation:
    """Drives the orrery: owns the scene, the optional renderer and the tick loop.

    Each loop iteration is one tick:
    1.  **Event Handling (if rendering)**: Processes pygame input (quit, zoom, pan,
        time scale, pause). Clock changes take effect on this tick.
    2.  **Real Delta**: Measured by the renderer's frame clock, or a fixed
        `1 / FPS` seconds in headless runs so results are reproducible.
    3.  **Scene Tick**: Every body advances by `real_delta * time_scale` days.
    4.  **Rendering (if enabled)**: Draws the bodies' reported state.
    5.  **Monitoring**: Periodically checks process memory usage.

    Attributes:
        cfg (SimulationConfig): Configuration used for the scene, renderer and monitoring.
        scene (SceneComposer): The bodies and their clock.
        visualization (Visualization | None): pygame renderer, `None` in headless runs.
        running (bool): Set to `False` by the user closing the window or a critical error.
        process (psutil.Process): Current process, used for memory monitoring.
    """
    def __init__(self, cfg=config, preset: Optional[str] = None, time_scale: Optional[float] = None,
                 render: bool = True):
        """Composes the scene and, when `render` is set, opens the window.

        Raises:
            ConfigurationError: If the preset, time scale or configuration is invalid.
            NotFoundError: If a preset names a body missing from the catalog.
        """
        self.cfg = cfg
        try:
            self.scene = SceneComposer.from_config(cfg, preset=preset, time_scale=time_scale)
            self.visualization = None
            if render:
                from visualization import Visualization # pygame is only needed when drawing
                self.visualization = Visualization(cfg)
        except ConfigurationError as e:
            logging.critical(f"Failed to initialize OrrerySimulation due to ConfigurationError: {e}", exc_info=True)
            raise

        self.running = True
        self.process = psutil.Process(os.getpid())
        logging.info(f"OrrerySimulation initialized ({'rendering' if self.visualization else 'headless'}, "
                     f"time scale x{self.scene.clock.time_scale:g}).")

    @property
    def headless(self) -> bool:
        return self.visualization is None or not self.visualization.visualization_enabled

    def check_memory(self) -> Optional[float]:
        """Logs a warning when resident memory exceeds the configured threshold.

        Returns:
            float | None: Resident memory in MB, or `None` if it could not be read.
        """
        try:
            memory_mb = self.process.memory_info().rss / (1024 * 1024)
        except psutil.Error as e_psutil:
            logging.error(f"Could not retrieve memory usage: {e_psutil}", exc_info=True)
            return None
        if memory_mb > self.cfg.Monitoring.MEMORY_USAGE_WARN_MB:
            logging.warning(f"High memory usage: {memory_mb:.2f} MB at tick {self.scene.tick_count}")
        elif self.cfg.Debug.DEBUG_MODE:
            logging.debug(f"Memory usage: {memory_mb:.2f} MB at tick {self.scene.tick_count}")
        return memory_mb

    def run(self, max_ticks: Optional[int] = None) -> int:
        """Runs the tick loop until the window is closed or `max_ticks` is reached.

        Args:
            max_ticks (int, optional): Stop after this many ticks. Headless runs
                without a limit keep going until interrupted.

        Returns:
            int: Number of ticks executed.
        """
        fixed_delta = 1.0 / self.cfg.Visualization.FPS
        memory_interval = self.cfg.Monitoring.MEMORY_CHECK_INTERVAL_TICKS
        ticks = 0
        logging.info(f"Starting orrery loop (max_ticks={max_ticks}).")

        while self.running and (max_ticks is None or ticks < max_ticks):
            if not self.headless:
                if not self.visualization.handle_events(self.scene):
                    self.running = False
                    logging.info("Simulation stopped by user (visualization window closed).")
                    break
                real_delta = self.visualization.tick_seconds()
            else:
                real_delta = fixed_delta

            try:
                self.scene.tick(real_delta)
            except Exception as e_tick:
                logging.critical(f"Unhandled error in tick {ticks}: {e_tick}", exc_info=True)
                self.running = False
                raise

            if not self.headless:
                self.visualization.render(self.scene)

            ticks += 1
            if ticks % memory_interval == 0:
                self.check_memory()

        logging.info(f"Orrery loop finished after {ticks} ticks, {self.scene.elapsed_time:.2f} simulated days.")
        return ticks

    def close(self):
        if self.visualization is not None:
            self.visualization.close()


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the solar system orrery.")
    parser.add_argument(
        "--scene",
        choices=sorted(config.Scenes.PRESETS),
        default=config.Scenes.DEFAULT,
        help="Which bodies to show."
    )
    parser.add_argument(
        "--time-scale",
        type=float,
        default=None,
        help=f"Simulated days per real second (default: {config.Time.DEFAULT_TIME_SCALE:g})."
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run without a window, using a fixed 1/FPS second tick."
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=None,
        help="Stop after this many ticks."
    )
    parser.add_argument(
        "--profile",
        action="store_true",
        help="Enable profiling for the simulation. Statistics will be saved to 'simulation_profile.prof'."
    )
    return parser


def main(argv=None) -> int:
    """Entry point for the orrery.

    Parses the command line, optionally enables `cProfile`, builds an
    `OrrerySimulation` and runs it. Configuration errors and unexpected failures
    are logged and reported on stdout; the return value is the process exit code.
    """
    args = build_arg_parser().parse_args(argv)
    if args.headless and args.ticks is None:
        logging.info("Headless run without --ticks; press Ctrl+C to stop.")

    profiler = None
    if args.profile:
        profiler = cProfile.Profile()
        profiler.enable()
        logging.info("cProfile profiling enabled. Output will be saved to simulation_profile.prof upon completion.")

    simulation_instance = None
    exit_code = 0
    try:
        logging.info(f"Initializing OrrerySimulation with scene '{args.scene}'...")
        simulation_instance = OrrerySimulation(config, preset=args.scene, time_scale=args.time_scale,
                                               render=not args.headless)
        simulation_instance.run(max_ticks=args.ticks)
    except KeyboardInterrupt:
        logging.info("Interrupted by user.")
    except ConfigurationError as e_config_main:
        logging.critical(f"OrrerySimulation could not be initialized or run due to a ConfigurationError: {e_config_main}", exc_info=True)
        print(f"FATAL CONFIGURATION ERROR: {e_config_main}. Simulation cannot start. Check logs for details.")
        exit_code = 2
    except Exception as e_main:
        logging.critical(f"An unexpected critical error occurred in the main simulation execution block: {e_main}", exc_info=True)
        print(f"FATAL UNEXPECTED ERROR: {e_main}. Simulation terminated. Check logs for details.")
        exit_code = 1
    finally:
        if simulation_instance is not None:
            simulation_instance.close()
        if profiler:
            profiler.disable()
            stats_file = "simulation_profile.prof"
            try:
                profiler.dump_stats(stats_file)
                logging.info(f"Profiling data successfully saved to {stats_file}")
            except OSError as e_profile_dump:
                logging.error(f"Failed to save profiling data to {stats_file}: {e_profile_dump}", exc_info=True)

        logging.info("Orrery terminated.")
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
