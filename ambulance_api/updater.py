"""Load an ambulance, let a handler change it, store it and answer the request."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Callable, Optional, Tuple

from flask import Response, current_app, jsonify

from .db_service import DbService, DocumentNotFoundError
from .models import Ambulance

DB_SERVICE_KEY = "db_service"

UpdaterResult = Tuple[Optional[Ambulance], Any, int]
AmbulanceUpdater = Callable[[Ambulance], UpdaterResult]


def get_db_service() -> DbService:
    """Return the storage service registered on the current Flask application.

    Raises LookupError when none is registered and TypeError when the
    registered object is not a DbService.
    """
    try:
        service = current_app.extensions[DB_SERVICE_KEY]
    except KeyError:
        raise LookupError("db_service not found") from None
    if not isinstance(service, DbService):
        raise TypeError("cannot cast db_service context to db_service.DbService")
    return service


def _to_json(content: Any) -> Any:
    if hasattr(content, "to_dict"):
        return content.to_dict()
    if isinstance(content, (list, tuple)):
        return [_to_json(item) for item in content]
    if isinstance(content, dict):
        return {key: _to_json(value) for key, value in content.items()}
    return content


def _json_response(status: int, content: Any) -> Response:
    response = jsonify(_to_json(content))
    response.status_code = status
    return response


def _error(status: HTTPStatus, message: str, error: str) -> Response:
    return _json_response(
        status,
        {"status": status.phrase, "message": message, "error": error},
    )


def update_ambulance(ambulance_id: str, updater: AmbulanceUpdater) -> Response:
    """Run ``updater`` on the stored ambulance and build the HTTP response.

    The updater returns ``(updated_ambulance, content, status)``. A non-None
    ambulance is written back; ``content`` is sent as JSON, or, when None, an
    empty body with ``status`` is sent.
    """
    try:
        db = get_db_service()
    except LookupError:
        return _error(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "db_service not found",
            "db_service not found",
        )
    except TypeError:
        return _error(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "db_service context is not of type db_service.DbService",
            "cannot cast db_service context to db_service.DbService",
        )

    try:
        ambulance = db.find_document(ambulance_id)
    except DocumentNotFoundError as exc:
        return _error(HTTPStatus.NOT_FOUND, "Ambulance not found", str(exc))
    except Exception as exc:  # any storage failure is reported upstream
        return _error(
            HTTPStatus.BAD_GATEWAY,
            "Failed to load ambulance from database",
            str(exc),
        )

    if not isinstance(ambulance, Ambulance):
        return _error(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "Failed to cast ambulance from database",
            "Failed to cast ambulance from database",
        )

    updated, content, status = updater(ambulance)

    if updated is not None:
        try:
            db.update_document(ambulance_id, updated)
        except DocumentNotFoundError as exc:
            return _error(
                HTTPStatus.NOT_FOUND,
                "Ambulance was deleted while processing the request",
                str(exc),
            )
        except Exception as exc:
            return _error(
                HTTPStatus.BAD_GATEWAY,
                "Failed to update ambulance in database",
                str(exc),
            )

    if content is not None:
        return _json_response(status, content)
    return Response(status=status)