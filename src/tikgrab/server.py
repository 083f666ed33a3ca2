from __future__ import annotations

from typing import Optional

from flask import Flask, request, jsonify

from tikgrab import service
from tikgrab.config import Settings
from tikgrab.errors import InvalidURLError
from tikgrab.logging import get_logger

log = get_logger(__name__)


class DownloadServer:
    """Single-endpoint HTTP front for :func:`tikgrab.service.fetch_video`."""

    def __init__(self, settings: Optional[Settings] = None, debug: bool = False):
        self.settings = settings or Settings()
        self.debug = debug
        self.app = Flask(__name__)
        self._setup_routes()

    def _setup_routes(self):
        """Setup Flask routes."""

        @self.app.route('/download', methods=['GET'])
        def download():
            url = request.args.get('url')
            no_watermark = request.args.get('nowm') == 'true'

            try:
                result = service.fetch_video(url, no_watermark, self.settings)
            except InvalidURLError as e:
                return jsonify({'error': str(e)}), 400
            except Exception as e:  # noqa: BLE001
                log.error(f"Error: {e}")
                return jsonify({
                    'error': 'Failed to download TikTok video',
                    'details': str(e),
                }), 500

            return jsonify({
                'message': 'Downloaded successfully!',
                'path': str(result.path),
                'note': result.note,
            })

        @self.app.route('/health', methods=['GET'])
        def health():
            return jsonify({'status': 'ok'})

    def start(self) -> None:
        """Run the Flask server (blocking)."""
        host, port = self.settings.server.host, self.settings.server.port
        log.info(f"Server is running at: http://{host}:{port}")
        self.app.run(
            host=host,
            port=port,
            debug=self.debug,
            use_reloader=False,
        )


def create_app(settings: Optional[Settings] = None) -> Flask:
    return DownloadServer(settings).app
