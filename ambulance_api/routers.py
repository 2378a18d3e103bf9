"""Routing table of the API and its registration on a Flask application."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Callable, Optional

from flask import Flask, Response

SUPPORTED_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})


@dataclass(frozen=True)
class Route:
    """One endpoint: its name, HTTP method, URL pattern and handler."""

    name: str
    method: str
    pattern: str
    handler: Optional[Callable[..., Any]] = None


@dataclass
class ApiHandleFunctions:
    """The objects that implement each part of the API."""

    ambulances_api: Any = None
    questionnaire_api: Any = None


def _bound(api: Any, method_name: str) -> Optional[Callable[..., Any]]:
    return None if api is None else getattr(api, method_name)


def get_routes(handle_functions: ApiHandleFunctions) -> list[Route]:
    """Return every route of the API, in registration order."""
    ambulances = handle_functions.ambulances_api
    questionnaires = handle_functions.questionnaire_api
    entries = "/api/questionnaire/<ambulance_id>/entries"
    entry = entries + "/<entry_id>"
    return [
        Route("CreateAmbulance", "POST", "/api/ambulance",
              _bound(ambulances, "create_ambulance")),
        Route("DeleteAmbulance", "DELETE", "/api/ambulance/<ambulance_id>",
              _bound(ambulances, "delete_ambulance")),
        Route("CreateQuestionnaireEntry", "POST", entries,
              _bound(questionnaires, "create_questionnaire_entry")),
        Route("DeleteQuestionnaireEntry", "DELETE", entry,
              _bound(questionnaires, "delete_questionnaire_entry")),
        Route("GetQuestionnaireEntries", "GET", entries,
              _bound(questionnaires, "get_questionnaire_entries")),
        Route("GetQuestionnaireEntry", "GET", entry,
              _bound(questionnaires, "get_questionnaire_entry")),
        Route("UpdateQuestionnaireEntry", "PUT", entry,
              _bound(questionnaires, "update_questionnaire_entry")),
    ]


def default_handle_func(**kwargs: Any) -> Response:
    """Answer a route that has no implementation."""
    return Response(
        "501 not implemented",
        status=int(HTTPStatus.NOT_IMPLEMENTED),
        mimetype="text/plain",
    )


def register_routes(app: Flask, handle_functions: ApiHandleFunctions) -> Flask:
    """Add all API routes to ``app`` and return it."""
    for route in get_routes(handle_functions):
        if route.method not in SUPPORTED_METHODS:
            continue
        app.add_url_rule(
            route.pattern,
            endpoint=route.name,
            view_func=route.handler or default_handle_func,
            methods=[route.method],
        )
    return app


def new_router(handle_functions: ApiHandleFunctions) -> Flask:
    """Create a Flask application serving the API routes."""
    return register_routes(Flask(__name__), handle_functions)