"""Main entry point for the Plate Spotter application.

This module provides the application entry point with:
- Command-line argument parsing
- Application initialization and dependency injection
- Graceful shutdown handling
"""

import argparse
import asyncio
import signal
import sys
from pathlib import Path

import structlog

from plate_spotter import __version__
from plate_spotter.models import AppConfig
from plate_spotter.services.catalog import CatalogService
from plate_spotter.services.config import VALID_LOG_LEVELS, ConfigurationService
from plate_spotter.services.errors import CatalogParseError, handle_error
from plate_spotter.services.filesystem import FileSystemService
from plate_spotter.services.game_manager import GameManagerService
from plate_spotter.services.http_client import HttpClientService
from plate_spotter.services.images import PlateImageCache, PlateImageService
from plate_spotter.services.logging import setup_logging

log = structlog.stdlib.get_logger()


class ApplicationContext:
    """Container for application services and state.

    Services are created lazily from the loaded configuration and shared
    with the UI through the app.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        catalog_path: Path | None = None,
        log_level: str | None = None,
    ) -> None:
        """Initialize the application context.

        Args:
            config_path: Path to configuration file
            catalog_path: Catalog file or directory overriding the configured one
            log_level: Logging level overriding the configured one
        """
        self._config_path: Path | None = config_path
        self._catalog_path: Path | None = catalog_path
        self._log_level: str | None = log_level

        # Services (initialized lazily)
        self._config_service: ConfigurationService | None = None
        self._filesystem: FileSystemService | None = None
        self._game_manager: GameManagerService | None = None
        self._catalog: CatalogService | None = None
        self._http_client: HttpClientService | None = None
        self._image_service: PlateImageService | None = None

        self._config: AppConfig | None = None
        self.catalog_error: str | None = None

    @property
    def config_service(self) -> ConfigurationService:
        if self._config_service is None:
            self._config_service = ConfigurationService(config_path=self._config_path)
        return self._config_service

    @property
    def config(self) -> AppConfig:
        if self._config is None:
            self._config = self.config_service.load_config()
        return self._config

    @property
    def log_level(self) -> str:
        """Command-line level if given, otherwise the configured one."""
        return self._log_level or self.config.log_level

    @property
    def filesystem(self) -> FileSystemService:
        if self._filesystem is None:
            self._filesystem = FileSystemService()
        return self._filesystem

    @property
    def game_manager(self) -> GameManagerService:
        if self._game_manager is None:
            self._game_manager = GameManagerService(
                data_directory=self.config.data_directory,
                filesystem=self.filesystem,
                max_games=self.config.max_games,
            )
        return self._game_manager

    @property
    def catalog(self) -> CatalogService:
        """Get the catalog, loading it on first access.

        A catalog that cannot be loaded leaves the service empty and the
        reason in `catalog_error`.
        """
        if self._catalog is None:
            self._catalog = CatalogService()
            source = self._catalog_path or self.config.catalog_path
            try:
                if source.is_dir():
                    _ = self._catalog.load_from_directory(source)
                else:
                    _ = self._catalog.load(source)
            except CatalogParseError as e:
                user_error = handle_error(e, operation="load_catalog", component="main")
                self.catalog_error = user_error.message
        return self._catalog

    @property
    def http_client(self) -> HttpClientService:
        if self._http_client is None:
            self._http_client = HttpClientService()
        return self._http_client

    @property
    def image_service(self) -> PlateImageService:
        if self._image_service is None:
            base_url = self.config.image_base_url
            self._image_service = PlateImageService(
                image_directory=self.config.image_directory,
                http_client=self.http_client if base_url else None,
                base_url=base_url,
                cache=PlateImageCache(
                    count_limit=self.config.image_cache_count_limit,
                    cost_limit=self.config.image_cache_cost_limit,
                ),
            )
        return self._image_service

    async def cleanup(self) -> None:
        """Release caches and close network connections."""
        log.info("Cleaning up application resources")

        if self._image_service is not None:
            self._image_service.handle_memory_pressure()

        if self._http_client is not None:
            await self._http_client.close()

        log.info("Application cleanup complete")


class ParsedArgs:
    """Type-safe container for parsed command-line arguments."""

    def __init__(
        self,
        config: Path | None,
        catalog: Path | None,
        log_level: str | None,
        log_dir: Path | None,
        no_tui: bool,
    ) -> None:
        self.config: Path | None = config
        self.catalog: Path | None = catalog
        self.log_level: str | None = log_level
        self.log_dir: Path | None = log_dir
        self.no_tui: bool = no_tui


def parse_arguments(argv: list[str] | None = None) -> ParsedArgs:
    """Parse command-line arguments.

    Args:
        argv: Argument list, defaults to sys.argv

    Returns:
        Parsed arguments container
    """
    parser = argparse.ArgumentParser(
        prog="plate-spotter",
        description="Track the license plates you spot on the road",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  plate-spotter                              Start the TUI application
  plate-spotter --catalog ./plates           Use the catalog found in ./plates
  plate-spotter --no-tui                     Print a catalog and games summary
        """,
    )

    _ = parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    _ = parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: ~/.config/plate-spotter/config.json)",
    )

    _ = parser.add_argument(
        "--catalog",
        type=Path,
        default=None,
        help="Catalog CSV file, or a directory holding plate_metadata_enhanced.csv or plate_metadata.csv",
    )

    _ = parser.add_argument(
        "--log-level",
        choices=list(VALID_LOG_LEVELS),
        default=None,
        help="Set the logging level (default: the configured level)",
    )

    _ = parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory for log files (default: ./logs when running the TUI)",
    )

    _ = parser.add_argument(
        "--no-tui",
        action="store_true",
        help="Print a summary instead of starting the TUI",
    )

    ns = parser.parse_args(argv)

    return ParsedArgs(
        config=ns.config,
        catalog=ns.catalog,
        log_level=ns.log_level,
        log_dir=ns.log_dir,
        no_tui=bool(ns.no_tui),
    )


def setup_signal_handlers() -> None:
    """Turn SIGINT and SIGTERM into KeyboardInterrupt so main exits with 130."""

    def signal_handler(signum: int, frame: object) -> None:
        _ = frame
        log.info("Received signal", signal=signal.Signals(signum).name)
        raise KeyboardInterrupt

    _ = signal.signal(signal.SIGINT, signal_handler)
    _ = signal.signal(signal.SIGTERM, signal_handler)

    log.debug("Signal handlers registered")


def print_summary(context: ApplicationContext) -> None:
    """Print catalog and saved game information to stdout."""
    catalog = context.catalog
    manager = context.game_manager

    print(f"Plate Spotter {__version__}")
    print(f"Configuration: {context.config_service.config_path}")
    print(f"Data directory: {manager.data_directory}")
    if context.catalog_error:
        print(f"Catalog: {context.catalog_error}")
    else:
        schema = "enhanced" if catalog.enhanced else "minimal"
        print(f"Catalog: {len(catalog.records)} plates across {len(catalog.available_regions)} regions ({schema})")

    games = manager.games
    print(f"Games: {len(games)}/{manager.max_games}")
    for game in games:
        stats = manager.stats(game.id)
        print(
            f"  {manager.display_name(game)}: {stats.total_count} plates, "
            f"{stats.distinct_regions} regions, {stats.score} pts, "
            f"{stats.completion_percentage:.0f}% complete"
        )


async def run_tui(context: ApplicationContext) -> int:
    """Run the TUI application.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    from plate_spotter.ui.app import PlateSpotterApp

    log.info("Starting TUI application")

    try:
        app = PlateSpotterApp(
            game_manager=context.game_manager,
            catalog=context.catalog,
            image_service=context.image_service,
            config_service=context.config_service,
        )
        app.set_app_context(context)

        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGTERM, app.exit)
        except NotImplementedError:
            log.debug("SIGTERM handler not supported on this platform")

        await app.run_async()

        log.info("TUI application exited normally")
        return 0

    except Exception as e:
        log.error("TUI application error", error=str(e), exc_info=True)
        return 1
    finally:
        await context.cleanup()


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the application."""
    args = parse_arguments(argv)

    log_dir = args.log_dir
    if log_dir is None and not args.no_tui:
        log_dir = Path("logs")

    context = ApplicationContext(
        config_path=args.config,
        catalog_path=args.catalog,
        log_level=args.log_level,
    )

    _ = setup_logging(log_level=context.log_level, log_dir=log_dir, tui_mode=not args.no_tui)

    log.info(
        "Starting Plate Spotter",
        version=__version__,
        log_level=context.log_level,
        config_path=str(args.config) if args.config else "default",
    )

    setup_signal_handlers()

    try:
        if args.no_tui:
            log.info("Running in non-TUI mode")
            print_summary(context)
            exit_code = 0
        else:
            exit_code = asyncio.run(run_tui(context))

    except KeyboardInterrupt:
        log.info("Application interrupted by user")
        exit_code = 130

    except Exception as e:
        log.error("Unhandled exception", error=str(e), exc_info=True)
        print(f"Fatal error: {e}", file=sys.stderr)
        exit_code = 1

    log.info("Application exiting", exit_code=exit_code)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
