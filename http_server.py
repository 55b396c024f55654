#!/usr/bin/env python3
"""
TrackFinder HTTP Server Runner
"""

from trackfinder.crosscutting.config import get_settings
from trackfinder.crosscutting.logging import setup_logging
from trackfinder.interfaces.http import HTTPServer


def main():
    """Run the HTTP server."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)
    server = HTTPServer(
        host='localhost',
        port=3000,
        debug=False,
        settings=settings
    )
    server.run()


if __name__ == '__main__':
    main()
