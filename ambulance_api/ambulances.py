"""Handlers that create and delete ambulances."""

from __future__ import annotations

import json
import uuid
from http import HTTPStatus
from typing import Any

from flask import Response, jsonify, request

from .db_service import DocumentConflictError, DocumentNotFoundError
from .models import Ambulance
from .updater import get_db_service


def _json_response(status: int, content: Any) -> Response:
    response = jsonify(content)
    response.status_code = status
    return response


def _error(status: HTTPStatus, message: str, error: str) -> Response:
    return _json_response(
        int(status),
        {"status": status.phrase, "message": message, "error": error},
    )


def _bind_ambulance() -> Ambulance:
    """Decode the request body into an ambulance; raise ValueError if it is not valid."""
    data = json.loads(request.get_data(as_text=True))
    if data is None:
        return Ambulance()
    return Ambulance.from_dict(data)


class AmbulancesApi:
    """Create and delete ambulance documents."""

    def create_ambulance(self) -> Response:
        """Store the ambulance from the request body; its id is generated when missing."""
        try:
            db = get_db_service()
        except LookupError:
            return _error(HTTPStatus.INTERNAL_SERVER_ERROR, "db not found", "db not found")
        except TypeError:
            return _error(
                HTTPStatus.INTERNAL_SERVER_ERROR,
                "db context is not of required type",
                "cannot cast db context to db_service.DbService",
            )

        try:
            ambulance = _bind_ambulance()
        except ValueError as exc:
            return _error(HTTPStatus.BAD_REQUEST, "Invalid request body", str(exc))

        if not ambulance.id:
            ambulance.id = str(uuid.uuid4())

        try:
            db.create_document(ambulance.id, ambulance)
        except DocumentConflictError as exc:
            return _error(HTTPStatus.CONFLICT, "Ambulance already exists", str(exc))
        except Exception as exc:  # any storage failure is reported upstream
            return _error(
                HTTPStatus.BAD_GATEWAY,
                "Failed to create ambulance in database",
                str(exc),
            )

        return _json_response(int(HTTPStatus.CREATED), ambulance.to_dict())

    def delete_ambulance(self, ambulance_id: str) -> Response:
        """Remove the ambulance with the given id."""
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
            db.delete_document(ambulance_id)
        except DocumentNotFoundError as exc:
            return _error(HTTPStatus.NOT_FOUND, "Ambulance not found", str(exc))
        except Exception as exc:
            return _error(
                HTTPStatus.BAD_GATEWAY,
                "Failed to delete ambulance from database",
                str(exc),
            )

        return Response(status=int(HTTPStatus.NO_CONTENT))