"""City Weather Hub: Flask backend aggregating weather, city and image APIs."""

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

import config
import handlers
from cache import ResponseCache
from errors import NotFoundError, UpstreamError, ValidationError

log = logging.getLogger(__name__)

# endpoint -> (404 title, 500 title)
_ERROR_TITLES = {
    "weather": ("City not found", "Failed to fetch weather data"),
    "city": ("City not found", "Failed to fetch city data"),
    "image": ("No images found", "Failed to fetch city image"),
}


def create_app(cache=None, environment=None):
    """Build the Flask app around an owned ResponseCache."""
    app = Flask(__name__)
    app.config["ENVIRONMENT"] = environment or config.ENVIRONMENT
    cache = cache if cache is not None else ResponseCache(ttl=config.CACHE_TTL)
    app.extensions["response_cache"] = cache

    def _is_production():
        return app.config["ENVIRONMENT"] == "production"

    def _serve(endpoint, handler):
        not_found_title, failure_title = _ERROR_TITLES[endpoint]
        city = request.args.get("city")
        country = request.args.get("country")
        try:
            return jsonify(handler(cache, city, country))
        except ValidationError as exc:
            return jsonify({
                "error": exc.message,
                "message": "Please provide a city name",
                "example": exc.example,
            }), 400
        except NotFoundError as exc:
            log.info("%s lookup found nothing for %r", endpoint, city)
            return jsonify({"error": not_found_title, "message": exc.message}), 404
        except UpstreamError as exc:
            log.error("%s API error: %s", endpoint.capitalize(), exc.message)
            message = "Something went wrong" if _is_production() else exc.message
            return jsonify({"error": failure_title, "message": message}), 500

    # ── Routes ────────────────────────────────────────────────────────

    @app.route("/api/weather")
    def api_weather():
        return _serve("weather", handlers.get_weather)

    @app.route("/api/city")
    def api_city():
        return _serve("city", handlers.get_city)

    @app.route("/api/image")
    def api_image():
        return _serve("image", handlers.get_image)

    @app.route("/api/health")
    def api_health():
        return jsonify({
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "cache": {
                "keys": len(cache.keys()),
                "stats": cache.stats(),
            },
        })

    @app.route("/api/cache", methods=["DELETE"], strict_slashes=False)
    @app.route("/api/cache/<path:key>", methods=["DELETE"])
    def api_clear_cache(key=None):
        if key:
            deleted = cache.delete(key)
            message = f"Cache key '{key}' cleared" if deleted else f"Cache key '{key}' not found"
            return jsonify({"message": message, "deleted": deleted})
        cleared = cache.clear()
        log.info("Cleared %d cache entries", cleared)
        return jsonify({"message": "All cache cleared", "keysCleared": cleared})

    # ── Errors ────────────────────────────────────────────────────────

    @app.errorhandler(404)
    @app.errorhandler(405)
    def endpoint_not_found(_error):
        return jsonify({
            "error": "Endpoint not found",
            "message": f"No endpoint for {request.method} {request.path}",
            "availableEndpoints": config.AVAILABLE_ENDPOINTS,
        }), 404

    @app.errorhandler(Exception)
    def unhandled_error(error):
        if isinstance(error, HTTPException):
            return error
        log.exception("Unhandled error")
        message = "Something went wrong" if _is_production() else str(error)
        return jsonify({"error": "Internal server error", "message": message}), 500

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET, DELETE, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response

    return app


def start_scheduler(cache, interval=config.CACHE_CHECK_PERIOD):
    """Purge expired cache entries every ``interval`` seconds in the background."""
    scheduler = BackgroundScheduler()
    scheduler.add_job(cache.purge_expired, "interval", seconds=interval, id="purge_expired_cache")
    scheduler.start()
    return scheduler


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    app = create_app()
    start_scheduler(app.extensions["response_cache"])

    log.info("Environment: %s", app.config["ENVIRONMENT"])
    log.info("Cache TTL: %d seconds", config.CACHE_TTL)
    config.validate_api_keys()
    log.info("Starting City Weather Hub on port %d", config.PORT)
    app.run(host="0.0.0.0", port=config.PORT, debug=False)
