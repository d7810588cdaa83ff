import logging
import os
import sys

from flask import Flask, Response, request

from authgate.config import Settings, load_env
from authgate.discord_api import authorize_url, invite_url, new_state
from authgate.pages import render_invite, render_landing, render_thanks
from authgate.workflow import GENERIC_FAILURE, CallbackWorkflow

log = logging.getLogger(__name__)


def _text(body: str, status: int) -> Response:
    return Response(body, status=status, mimetype="text/plain")


def create_app(settings: Settings, workflow: CallbackWorkflow | None = None) -> Flask:
    app = Flask(__name__)
    workflow = workflow or CallbackWorkflow(settings)

    @app.route("/")
    def home():
        # state is generated for the link but never checked on callback
        url = authorize_url(settings.client_id, settings.redirect_uri, new_state(), settings.request_email)
        return render_landing(url)

    @app.route("/invite")
    def invite():
        return render_invite(invite_url(settings.client_id))

    @app.route("/health")
    def health():
        return _text("Bot is running", 200)

    @app.route("/api/auth")
    async def callback():
        result = await workflow.run(request.args.get("code"))
        if not result.ok:
            return _text(result.message, result.status)
        return render_thanks(result.community_count)

    @app.errorhandler(500)
    def server_error(e):
        return _text(GENERIC_FAILURE, 500)

    return app


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    load_env(argv[0] if argv else None)
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    settings = Settings.from_env()
    missing = settings.missing()
    if missing:
        raise RuntimeError(f"{', '.join(missing)} not set")

    log.info("[main] %d guild(s) configured, store %s", len(settings.guild_ids), "on" if settings.store_url else "off")
    app = create_app(settings)
    log.info("[main] Started on %s", settings.port)
    app.run(host="0.0.0.0", port=settings.port, threaded=True)
