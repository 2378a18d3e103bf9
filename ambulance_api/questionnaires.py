"""Handlers for the questionnaire entries of an ambulance."""

from __future__ import annotations

import json
import uuid
from http import HTTPStatus
from typing import Any, Optional

from flask import Response, request

from .models import Ambulance, Questionnaire
from .updater import UpdaterResult, update_ambulance

NEW_ENTRY_ID = "@new"


def _failure(status: HTTPStatus, message: str, error: Optional[str] = None) -> UpdaterResult:
    body: dict[str, Any] = {"status": int(status), "message": message}
    if error is not None:
        body["error"] = error
    return None, body, int(status)


def _bind_entry() -> Questionnaire:
    """Decode the request body into an entry; raise ValueError if it is not valid."""
    data = json.loads(request.get_data(as_text=True))
    if data is None:
        return Questionnaire()
    return Questionnaire.from_dict(data)


def _index_of(ambulance: Ambulance, entry_id: str) -> int:
    return next(
        (index for index, entry in enumerate(ambulance.questionnaires) if entry.id == entry_id),
        -1,
    )


class QuestionnaireApi:
    """Create, read, update and delete questionnaire entries."""

    def create_questionnaire_entry(self, ambulance_id: str) -> Response:
        """Add a new entry; its id is generated when missing or "@new"."""

        def updater(ambulance: Ambulance) -> UpdaterResult:
            try:
                entry = _bind_entry()
            except ValueError as exc:
                return _failure(HTTPStatus.BAD_REQUEST, "Invalid request body", str(exc))

            if not entry.patient_id:
                return _failure(HTTPStatus.BAD_REQUEST, "Patient ID is required")

            if entry.id in ("", NEW_ENTRY_ID):
                entry.id = str(uuid.uuid4())

            if any(
                entry.id == existing.id or entry.patient_id == existing.patient_id
                for existing in ambulance.questionnaires
            ):
                return _failure(HTTPStatus.CONFLICT, "Entry already exists")

            ambulance.questionnaires.append(entry)
            return ambulance, entry, int(HTTPStatus.OK)

        return update_ambulance(ambulance_id, updater)

    def delete_questionnaire_entry(self, ambulance_id: str, entry_id: str) -> Response:
        """Remove the entry with the given id."""

        def updater(ambulance: Ambulance) -> UpdaterResult:
            if not entry_id:
                return _failure(HTTPStatus.BAD_REQUEST, "Entry ID is required")
            index = _index_of(ambulance, entry_id)
            if index < 0:
                return _failure(HTTPStatus.NOT_FOUND, "Entry not found")
            del ambulance.questionnaires[index]
            return ambulance, None, int(HTTPStatus.NO_CONTENT)

        return update_ambulance(ambulance_id, updater)

    def get_questionnaire_entries(self, ambulance_id: str) -> Response:
        """Return all entries of the ambulance."""

        def updater(ambulance: Ambulance) -> UpdaterResult:
            return None, list(ambulance.questionnaires), int(HTTPStatus.OK)

        return update_ambulance(ambulance_id, updater)

    def get_questionnaire_entry(self, ambulance_id: str, entry_id: str) -> Response:
        """Return one entry."""

        def updater(ambulance: Ambulance) -> UpdaterResult:
            if not entry_id:
                return _failure(HTTPStatus.BAD_REQUEST, "Entry ID is required")
            index = _index_of(ambulance, entry_id)
            if index < 0:
                return _failure(HTTPStatus.NOT_FOUND, "Entry not found")
            return None, ambulance.questionnaires[index], int(HTTPStatus.OK)

        return update_ambulance(ambulance_id, updater)

    def update_questionnaire_entry(self, ambulance_id: str, entry_id: str) -> Response:
        """Change the patient id and the id of an entry when they are given."""

        def updater(ambulance: Ambulance) -> UpdaterResult:
            try:
                entry = _bind_entry()
            except ValueError as exc:
                return _failure(HTTPStatus.BAD_REQUEST, "Invalid request body", str(exc))

            if not entry_id:
                return _failure(HTTPStatus.BAD_REQUEST, "Entry ID is required")

            index = _index_of(ambulance, entry_id)
            if index < 0:
                return _failure(HTTPStatus.NOT_FOUND, "Entry not found")

            target = ambulance.questionnaires[index]
            if entry.patient_id:
                target.patient_id = entry.patient_id
            if entry.id:
                target.id = entry.id
            return ambulance, target, int(HTTPStatus.OK)

        return update_ambulance(ambulance_id, updater)