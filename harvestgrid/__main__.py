"""Entry point for ``python -m harvestgrid``.

Loads the default YAML config, builds a farm engine and either opens a
Pygame window to play, or auto-plays a fixed number of ticks headless.
"""

from __future__ import annotations

import argparse
import logging
import pathlib

from harvestgrid.simulation.config import GameSettings
from harvestgrid.simulation.engine import FarmEngine

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)

logger = logging.getLogger("harvestgrid")


def main(argv: list[str] | None = None) -> None:
    """Parse CLI args, create engine, launch renderer or headless run."""
    parser = argparse.ArgumentParser(
        prog="harvestgrid",
        description="HarvestGrid - grid farming simulation",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--cell-size",
        type=int,
        default=64,
        help="Pixel size per grid cell (default: 64)",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=60,
        help="Target frames per second (default: 60)",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run without a window, auto-playing for --ticks crop ticks",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=100,
        help="Crop ticks of simulated time in headless mode (default: 100)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = GameSettings.from_yaml(args.config)
    engine = FarmEngine(settings=settings)

    if args.headless:
        engine.simulate(seconds=args.ticks * settings.tick_interval)
        published = engine.bus.stats()
        logger.info(
            "ran %d ticks: %d harvested, balance %d",
            engine.tick,
            published.get("CropHarvested", 0),
            engine.grid.money,
        )
        logger.debug("events published: %s", published)
        engine.close()
        return

    from harvestgrid.ui.pygame_client import PygameRenderer

    renderer = PygameRenderer(engine=engine, cell_px=args.cell_size)
    renderer.run(fps=args.fps)
    engine.close()


if __name__ == "__main__":
    main()
