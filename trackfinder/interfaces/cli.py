import argparse
import getpass
import json
import sys
import signal
import time
from typing import List, Optional

from trackfinder.application.lookup import LookupSession
from trackfinder.crosscutting.config import ConfigError, LOG_LEVELS, Settings, setup_settings
from trackfinder.crosscutting.credentials import SessionCredential
from trackfinder.crosscutting.logging import get_logger, log_with_fields, setup_logging
from trackfinder.domain.errors import ValidationError
from trackfinder.domain.outcomes import Found, NotFound, NoTracksParsed
from trackfinder.infrastructure.providers.gemini import GeminiTextGenerator
from trackfinder.interfaces.rendering import outcome_to_dict, render_text

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_FOUND = 2


class CLI:
    """Command Line Interface for TrackFinder."""

    def __init__(self, stdin=None, stdout=None):
        """Initialize CLI."""
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.parser = self._create_parser()
        self._start_time = None

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create argument parser."""
        parser = argparse.ArgumentParser(
            prog='trackfinder',
            description='Look up the standard-edition tracklist of an album'
        )

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        lookup_parser = subparsers.add_parser('lookup', help='Look up an album tracklist')
        lookup_parser.add_argument(
            '--artist',
            required=True,
            help='Artist name, e.g. "The Beatles"'
        )
        lookup_parser.add_argument(
            '--album',
            required=True,
            help='Album name, e.g. "Abbey Road"'
        )
        lookup_parser.add_argument(
            '--api-key-stdin',
            action='store_true',
            help='Read the Gemini API key from the first line of stdin instead of prompting'
        )
        lookup_parser.add_argument(
            '--json',
            action='store_true',
            help='Print the outcome as JSON'
        )
        lookup_parser.add_argument(
            '--model',
            default=None,
            help='Gemini model name (default from TRACKFINDER_MODEL or gemini-2.0-flash)'
        )
        lookup_parser.add_argument(
            '--timeout',
            type=float,
            default=None,
            help='Seconds to wait for the provider (default from TRACKFINDER_TIMEOUT or 30)'
        )
        lookup_parser.add_argument(
            '--env-file',
            default=None,
            help='Optional .env file with TRACKFINDER_* settings'
        )
        lookup_parser.add_argument(
            '--log-level',
            choices=list(LOG_LEVELS),
            default=None,
            help='Set logging level'
        )

        return parser

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        def signal_handler(signum, frame):
            logger = get_logger(__name__)
            logger.warning(f"Received signal {signum}, shutting down...")
            sys.exit(130)  # Standard exit code for signal termination

        signal.signal(signal.SIGTERM, signal_handler)

    def _load_settings(self, args: argparse.Namespace) -> Settings:
        """Settings from env/.env with command-line overrides."""
        settings = setup_settings(args.env_file)
        return settings.with_overrides(
            model=args.model,
            timeout_seconds=args.timeout,
            log_level=args.log_level,
        )

    def _read_api_key(self, args: argparse.Namespace) -> str:
        """Read the API key interactively or from stdin. Never from flags or env."""
        if args.api_key_stdin:
            return self.stdin.readline().strip()
        return getpass.getpass('Gemini API key: ').strip()

    def _lookup(self, args: argparse.Namespace, settings: Settings) -> int:
        """Run one lookup and print the result."""
        credential = SessionCredential()
        try:
            credential.set(self._read_api_key(args))
            session = LookupSession(GeminiTextGenerator, settings=settings, credential=credential)
            outcome = session.lookup(args.artist, args.album)
        except ValidationError as e:
            print(str(e), file=sys.stderr)
            return EXIT_ERROR
        finally:
            credential.clear()

        if args.json:
            print(json.dumps(outcome_to_dict(outcome), ensure_ascii=False, indent=2), file=self.stdout)
        else:
            print(render_text(outcome, args.artist.strip(), args.album.strip()), file=self.stdout)

        if isinstance(outcome, Found):
            return EXIT_OK
        if isinstance(outcome, (NotFound, NoTracksParsed)):
            return EXIT_NOT_FOUND
        return EXIT_ERROR

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Run the CLI and return the process exit code."""
        self._start_time = time.time()
        args = self.parser.parse_args(argv)

        if not args.command:
            self.parser.print_help()
            return EXIT_ERROR

        try:
            settings = self._load_settings(args)
        except ConfigError as e:
            print(f"Configuration error: {e}", file=sys.stderr)
            return EXIT_ERROR

        setup_logging(settings.log_level, settings.log_file)
        log_with_fields(get_logger(__name__), 'DEBUG', 'Settings loaded', settings.summary())
        self._setup_signal_handlers()

        try:
            if args.command == 'lookup':
                return self._lookup(args, settings)
            self.parser.print_help()
            return EXIT_ERROR
        except KeyboardInterrupt:
            get_logger(__name__).warning("Operation cancelled by user")
            return 130
        finally:
            duration = time.time() - self._start_time
            get_logger(__name__).debug(f"CLI execution time: {duration:.2f}s")


def main():
    """Main entry point."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == '__main__':
    main()
