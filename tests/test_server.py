import copy
from unittest.mock import patch

import pytest

from ambulance_api.db_service import (
    DbService,
    DocumentConflictError,
    DocumentNotFoundError,
    MongoService,
)
from ambulance_api.models import Ambulance
from ambulance_api.server import create_app, main


class MemoryDb(DbService):
    def __init__(self):
        self.documents = {}

    def create_document(self, document_id, document):
        if document_id in self.documents:
            raise DocumentConflictError()
        self.documents[document_id] = copy.deepcopy(document)

    def find_document(self, document_id):
        try:
            return copy.deepcopy(self.documents[document_id])
        except KeyError:
            raise DocumentNotFoundError() from None

    def update_document(self, document_id, document):
        if document_id not in self.documents:
            raise DocumentNotFoundError()
        self.documents[document_id] = copy.deepcopy(document)

    def delete_document(self, document_id):
        if document_id not in self.documents:
            raise DocumentNotFoundError()
        del self.documents[document_id]

    def disconnect(self):
        pass


@pytest.fixture
def db():
    return MemoryDb()


@pytest.fixture
def client(db):
    return create_app(db, environ={}).test_client()


def test_app_registers_given_service(db):
    app = create_app(db, environ={})
    assert app.extensions["db_service"] is db


def test_full_questionnaire_flow(client, db):
    created = client.post(
        "/api/ambulance", json={"id": "amb-1", "name": "Central", "roomNumber": "101"}
    )
    assert created.status_code == 201

    listed = client.get("/api/questionnaire/amb-1/entries")
    assert listed.status_code == 200
    assert listed.get_json() == []

    added = client.post(
        "/api/questionnaire/amb-1/entries",
        json={"patientId": "p-1", "name": "Jane Doe", "questions": ["yes", "no"]},
    )
    assert added.status_code == 200
    entry_id = added.get_json()["id"]
    assert [entry.id for entry in db.documents["amb-1"].questionnaires] == [entry_id]

    fetched = client.get(f"/api/questionnaire/amb-1/entries/{entry_id}")
    assert fetched.get_json() == added.get_json()

    updated = client.put(f"/api/questionnaire/amb-1/entries/{entry_id}", json={"patientId": "p-2"})
    assert updated.status_code == 200
    assert updated.get_json()["patientId"] == "p-2"
    assert db.documents["amb-1"].questionnaires[0].patient_id == "p-2"

    removed = client.delete(f"/api/questionnaire/amb-1/entries/{entry_id}")
    assert removed.status_code == 204
    assert client.get(f"/api/questionnaire/amb-1/entries/{entry_id}").status_code == 404

    assert client.delete("/api/ambulance/amb-1").status_code == 204
    assert db.documents == {}


def test_unknown_ambulance_is_not_found(client):
    response = client.get("/api/questionnaire/ghost/entries")
    assert response.status_code == 404
    assert response.get_json()["message"] == "Ambulance not found"


def test_cors_preflight(client):
    response = client.options(
        "/api/ambulance",
        headers={"Origin": "https://app.example.com", "Access-Control-Request-Method": "POST"},
    )
    assert response.status_code == 204
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    methods = response.headers["Access-Control-Allow-Methods"].split(",")
    assert sorted(methods) == sorted(["GET", "PUT", "POST", "DELETE", "PATCH"])
    headers = response.headers["Access-Control-Allow-Headers"].split(",")
    assert sorted(headers) == sorted(["Origin", "Authorization", "Content-Type"])
    assert response.headers["Access-Control-Max-Age"] == "43200"


def test_cors_origin_on_simple_request(client, db):
    db.documents["amb-1"] = Ambulance(id="amb-1")
    with_origin = client.get(
        "/api/questionnaire/amb-1/entries", headers={"Origin": "https://app.example.com"}
    )
    assert with_origin.headers["Access-Control-Allow-Origin"] == "*"
    without_origin = client.get("/api/questionnaire/amb-1/entries")
    assert "Access-Control-Allow-Origin" not in without_origin.headers


def test_default_service_configured_from_environment():
    app = create_app(None, environ={"AMBULANCE_API_MONGODB_HOST": "mongo.example.com"})
    service = app.extensions["db_service"]
    assert isinstance(service, MongoService)
    assert service.config.server_host == "mongo.example.com"
    assert service.config.collection == "ambulance"


def test_main_runs_on_configured_port(monkeypatch):
    monkeypatch.setenv("AMBULANCE_API_PORT", "9090")
    with patch("flask.Flask.run") as run:
        assert main([]) == 0
    assert run.call_count == 1
    assert run.call_args.kwargs["port"] == 9090


def test_main_defaults_to_port_8080(monkeypatch):
    monkeypatch.delenv("AMBULANCE_API_PORT", raising=False)
    with patch("flask.Flask.run") as run:
        assert main([]) == 0
    assert run.call_count == 1
    assert run.call_args.kwargs["port"] == 8080


def test_main_rejects_invalid_port(monkeypatch):
    monkeypatch.setenv("AMBULANCE_API_PORT", "eighty")
    with patch("flask.Flask.run") as run, pytest.raises(SystemExit):
        main([])
    assert run.call_count == 0