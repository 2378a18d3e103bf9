"""The HTTP service: application factory and command entry point."""

from __future__ import annotations

import argparse
import logging
import os
from datetime import timedelta
from typing import Mapping, Optional, Sequence

from flask import Flask, Response, request

from .ambulances import AmbulancesApi
from .db_service import DbService, MongoService, resolve_config
from .models import Ambulance
from .questionnaires import QuestionnaireApi
from .routers import ApiHandleFunctions, register_routes
from .updater import DB_SERVICE_KEY

logger = logging.getLogger(__name__)

DEFAULT_PORT = "8080"
CORS_ALLOW_METHODS = ("GET", "PUT", "POST", "DELETE", "PATCH")
CORS_ALLOW_HEADERS = ("Origin", "Authorization", "Content-Type")
CORS_MAX_AGE = timedelta(hours=12)


def _install_cors(app: Flask) -> None:
    """Allow requests from any origin with the API's methods and headers."""

    @app.before_request
    def _preflight() -> Optional[Response]:
        if request.method == "OPTIONS" and request.headers.get("Origin"):
            response = Response(status=204)
            response.headers["Access-Control-Allow-Methods"] = ",".join(CORS_ALLOW_METHODS)
            response.headers["Access-Control-Allow-Headers"] = ",".join(CORS_ALLOW_HEADERS)
            response.headers["Access-Control-Max-Age"] = str(
                int(CORS_MAX_AGE.total_seconds())
            )
            return response
        return None

    @app.after_request
    def _allow_origin(response: Response) -> Response:
        if request.headers.get("Origin"):
            response.headers["Access-Control-Allow-Origin"] = "*"
        return response


def create_app(
    db_service: Optional[DbService] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Flask:
    """Build the application; without a service a MongoDB one is configured from ``environ``."""
    env = os.environ if environ is None else environ
    app = Flask(__name__)
    if env.get("AMBULANCE_API_ENVIRONMENT", "").lower() != "production":
        app.logger.setLevel(logging.DEBUG)

    if db_service is None:
        db_service = MongoService(resolve_config(None, env), document_type=Ambulance)
    app.extensions[DB_SERVICE_KEY] = db_service

    _install_cors(app)
    register_routes(
        app,
        ApiHandleFunctions(
            ambulances_api=AmbulancesApi(),
            questionnaire_api=QuestionnaireApi(),
        ),
    )
    return app


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the service on AMBULANCE_API_PORT (8080 by default)."""
    parser = argparse.ArgumentParser(
        prog="ambulance-api-service",
        description="Serve the ambulance questionnaire API.",
    )
    parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    logger.info("Server started")

    port_text = os.environ.get("AMBULANCE_API_PORT") or DEFAULT_PORT
    try:
        port = int(port_text)
    except ValueError:
        parser.error(f"invalid port: {port_text}")

    with MongoService(resolve_config(), document_type=Ambulance) as service:
        app = create_app(service)
        app.run(host="0.0.0.0", port=port, debug=False, use_reloader=False)
    return 0