# app.py - application factory for the Jeopardy! board
from flask import Flask, flash, redirect, render_template, request, url_for
from flask_wtf import CSRFProtect
from flask_wtf.csrf import CSRFError, generate_csrf
from dotenv import load_dotenv
from config import Config
import logging
import os

from services.game_controller import GameController, GameRegistry
from services.trivia_service import TriviaService

# Import blueprints
from routes.main_routes import main_bp
from routes.game_routes import game_bp


def create_app(test_config: dict | None = None, rng=None):
    # Load environment variables from .env when running via python wsgi.py
    load_dotenv()
    app = Flask(__name__, static_folder="static", template_folder="templates")
    app.config.from_object(Config)

    # Allow overriding config for testing
    if test_config:
        app.config.update(test_config)
        # Disable CSRF in tests to simplify posting
        if app.config.get('TESTING'):
            app.config.setdefault('WTF_CSRF_ENABLED', False)

    csrf = CSRFProtect(app)

    # One game per browser session; each gets its own trivia client and state
    def _make_game():
        trivia = TriviaService.from_config(app.config, rng=rng)
        return GameController(
            trivia,
            categories_per_game=app.config["NUM_CATEGORIES"],
            questions_per_category=app.config["NUM_QUESTIONS_PER_CAT"],
        )

    app.extensions["jeopardy_games"] = GameRegistry(_make_game, max_games=app.config["MAX_GAMES"])

    # Register blueprints
    app.register_blueprint(main_bp)
    app.register_blueprint(game_bp)

    # Inject csrf_token() helper for templates without FlaskForm
    @app.context_processor
    def inject_csrf_token():
        return dict(csrf_token=generate_csrf)

    # Provide a cache-busting static_url helper that appends mtime as version
    @app.context_processor
    def inject_static_url_helper():
        def static_url(path: str):
            full = os.path.join(app.static_folder, path)
            v = int(os.path.getmtime(full)) if os.path.exists(full) else 0
            return url_for('static', filename=path, v=v)
        return dict(static_url=static_url)

    # Error handlers
    @app.errorhandler(404)
    def not_found(e):
        return render_template("404.html"), 404

    @app.errorhandler(500)
    def internal_error(e):
        app.logger.exception("Unhandled server error")
        return render_template("500.html"), 500

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        if request.accept_mimetypes.best == 'application/json' or request.is_json:
            return {"error": "csrf token missing or invalid"}, 400
        flash('Your session expired or the form is invalid. Please try again.', 'error')
        return redirect(request.referrer or url_for('main.index'))

    # Health check endpoint for uptime monitoring
    @app.route('/healthz', methods=['GET'])
    def healthz():
        return {"status": "ok", "games": len(app.extensions["jeopardy_games"])}, 200

    # Basic security headers
    @app.after_request
    def set_security_headers(resp):
        resp.headers.setdefault('X-Frame-Options', 'DENY')
        resp.headers.setdefault('X-Content-Type-Options', 'nosniff')
        resp.headers.setdefault('Referrer-Policy', 'strict-origin-when-cross-origin')
        resp.headers.setdefault('Permissions-Policy', 'geolocation=(), microphone=(), camera=()')
        resp.headers.setdefault('Content-Security-Policy', "default-src 'self'; style-src 'self'; script-src 'self'; img-src 'self' data:;")
        return resp

    # Respect X-Forwarded-Proto for HTTPS redirects behind a proxy
    @app.before_request
    def _detect_proxy_scheme():
        xf_proto = request.headers.get('X-Forwarded-Proto')
        if xf_proto:
            request.environ['wsgi.url_scheme'] = xf_proto

    # Basic logging configuration with LOG_LEVEL override
    log_level_name = os.getenv('LOG_LEVEL', 'INFO').upper()
    level = getattr(logging, log_level_name, logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s %(message)s')
    app.logger.info(
        "startup log_level=%s trivia_api=%s board=%sx%s",
        log_level_name, app.config['TRIVIA_API_URL'],
        app.config['NUM_CATEGORIES'], app.config['NUM_QUESTIONS_PER_CAT'],
    )

    return app

"""Application factory only module.

Gunicorn / production: use `gunicorn wsgi:app` (see wsgi.py).
Local dev: `python wsgi.py` or `flask --app wsgi run`.
Tests: import create_app and instantiate explicitly; no server starts on import.
"""
