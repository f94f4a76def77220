import logging
import os

from flask import Flask, request, jsonify

from config import Config
from errors import NotFoundError, PersistenceError, ValidationError
from log_store import LogStore
from persistence import create_backend
from validator import LogValidator

logger = logging.getLogger(__name__)


def build_store(config):
    """Create the validator, backend and store described by *config*."""
    records_config = config["records"]
    validator = LogValidator(
        records_config["required_fields"],
        schema_path=config["schema"].get("path"),
    )
    backend = create_backend(config["storage"])
    return LogStore(backend, validator, defaults=records_config.get("defaults"))


def create_app(config=None, store=None):
    """Flask application factory."""
    app = Flask(__name__)
    app.json.sort_keys = False

    if config is None:
        config = Config(os.environ.get("CONFIG_PATH", "config.yaml"))
    if store is None:
        store = build_store(config)

    # Store components on app for access in tests
    app.config["components"] = {
        "config": config,
        "store": store,
    }

    # --- Error mapping ---

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc):
        return jsonify({"error": "Missing or invalid log fields.", "errors": exc.errors}), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(exc):
        return jsonify({"error": str(exc)}), 404

    @app.errorhandler(404)
    def handle_unknown_route(exc):
        return jsonify({"error": "Not found."}), 404

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc):
        logger.error("Error saving log: %s", exc)
        return jsonify({"error": "Failed to save log to server."}), 500

    # --- Routes ---

    @app.route("/")
    def index():
        return "Time Sheet Tracker API is running! Use /api/logs for time log operations."

    @app.route("/health")
    def health():
        return jsonify({
            "status": "healthy",
            "total_logs": store.count,
            "storage": store.backend_name,
        })

    @app.route("/api/logs", methods=["GET"])
    def list_logs():
        return jsonify([record.to_dict() for record in store.list()])

    @app.route("/api/logs/<int:record_id>", methods=["GET"])
    def get_log(record_id):
        return jsonify(store.get(record_id).to_dict())

    @app.route("/api/logs", methods=["POST"])
    def create_log():
        record = store.create(request.get_json(silent=True))
        return jsonify({"message": "Log created successfully", "log": record.to_dict()}), 201

    @app.route("/api/logs/<int:record_id>", methods=["PUT"])
    def update_log(record_id):
        record = store.update(record_id, request.get_json(silent=True))
        return jsonify(record.to_dict())

    @app.route("/api/logs/<int:record_id>", methods=["DELETE"])
    def delete_log(record_id):
        store.delete(record_id)
        return "", 204

    @app.route("/api/validation-stats")
    def validation_stats():
        return jsonify(store.validator.get_stats())

    return app
