import os
from typing import Optional
from datetime import datetime
from flask import Flask, request, jsonify

from trackfinder.application.lookup import LookupSession
from trackfinder.crosscutting.config import Settings, get_settings
from trackfinder.crosscutting.logging import get_logger
from trackfinder.domain.errors import LookupInProgress, ValidationError
from trackfinder.domain.outcomes import Found, NotFound, NoTracksParsed, ProviderFailure, Timeout
from trackfinder.infrastructure.providers.gemini import GeminiTextGenerator
from trackfinder.interfaces.rendering import outcome_to_dict, render_page

# HTTP status per outcome kind for the JSON API
OUTCOME_STATUS = {
    Found: 200,
    NotFound: 404,
    NoTracksParsed: 422,
    ProviderFailure: 502,
    Timeout: 504,
}


class HTTPServer:
    """HTTP server for TrackFinder: the single-page form, a JSON API and health checks.

    The server process is the session: the API key entered through the form or
    ``/api/key`` is held in memory by one ``LookupSession`` and is lost on restart.
    """

    def __init__(self, host: str = 'localhost', port: int = 3000, debug: bool = False,
                 settings: Optional[Settings] = None,
                 session: Optional[LookupSession] = None):
        """Initialize HTTP server."""
        self.host = host
        self.port = port
        self.debug = debug
        self.app = Flask(__name__)
        self.logger = get_logger(__name__)

        # Version info
        self.version = "0.1.0"
        self.commit = os.getenv('GIT_COMMIT', 'unknown')

        self.settings = settings or get_settings()
        self.session = session or LookupSession(GeminiTextGenerator, settings=self.settings)

        self._setup_routes()

    def _setup_routes(self) -> None:
        """Setup Flask routes."""

        @self.app.route('/health', methods=['GET'])
        def health_check():
            """Health check endpoint."""
            return jsonify({
                'status': 'healthy',
                'version': self.version,
                'commit': self.commit,
                'lookup_state': self.session.state.value,
                'config': self.settings.summary(),
                'timestamp': datetime.now().isoformat()
            }), 200

        @self.app.route('/', methods=['GET'])
        def index():
            """Empty lookup form."""
            return render_page(has_key=self.session.credential.is_set())

        @self.app.route('/', methods=['POST'])
        def submit():
            """Form submission: store a newly entered key, then look the album up."""
            artist = request.form.get('artist', '')
            album = request.form.get('album', '')
            api_key = request.form.get('api_key', '')

            try:
                if api_key.strip():
                    self.session.set_api_key(api_key)
                outcome = self.session.lookup(artist, album)
            except (ValidationError, LookupInProgress) as e:
                status = 409 if isinstance(e, LookupInProgress) else 400
                return render_page(artist=artist, album=album, error=str(e),
                                   has_key=self.session.credential.is_set()), status

            return render_page(artist=artist.strip(), album=album.strip(), outcome=outcome,
                               has_key=self.session.credential.is_set())

        @self.app.route('/api/key', methods=['POST'])
        def set_key():
            """Store the API key for this server session."""
            data = request.get_json(silent=True) or {}
            try:
                self.session.set_api_key(data.get('api_key', ''))
            except ValidationError as e:
                return jsonify({'error': str(e)}), 400
            self.logger.info("API key set for this session")
            return jsonify({'status': 'stored'}), 200

        @self.app.route('/api/key', methods=['DELETE'])
        def clear_key():
            """Forget the API key."""
            self.session.clear_api_key()
            self.logger.info("API key cleared")
            return jsonify({'status': 'cleared'}), 200

        @self.app.route('/api/lookup', methods=['POST'])
        def api_lookup():
            """Look up an album tracklist; returns the outcome as JSON."""
            data = request.get_json(silent=True) or {}
            try:
                if str(data.get('api_key') or '').strip():
                    self.session.set_api_key(data['api_key'])
                outcome = self.session.lookup(data.get('artist', ''), data.get('album', ''))
            except ValidationError as e:
                return jsonify({'outcome': 'invalid', 'error': str(e)}), 400
            except LookupInProgress as e:
                return jsonify({'outcome': 'busy', 'error': str(e)}), 409

            return jsonify(outcome_to_dict(outcome)), OUTCOME_STATUS[type(outcome)]

    def run(self) -> None:
        """Run the HTTP server."""
        self.logger.info(f"Starting TrackFinder HTTP server on {self.host}:{self.port}")
        self.app.run(
            host=self.host,
            port=self.port,
            debug=self.debug
        )


def create_app(settings: Optional[Settings] = None) -> Flask:
    """Create Flask app for testing."""
    server = HTTPServer(settings=settings)
    return server.app
