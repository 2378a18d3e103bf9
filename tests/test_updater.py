import copy

import pytest
from flask import Flask

from ambulance_api.db_service import DbService, DocumentNotFoundError
from ambulance_api.models import Ambulance, Questionnaire
from ambulance_api.updater import get_db_service, update_ambulance


class InMemoryDb(DbService):
    def __init__(self, documents=None):
        self.documents = {doc.id: copy.deepcopy(doc) for doc in documents or []}
        self.updates = []

    def create_document(self, document_id, document):
        self.documents[document_id] = copy.deepcopy(document)

    def find_document(self, document_id):
        if document_id not in self.documents:
            raise DocumentNotFoundError()
        return copy.deepcopy(self.documents[document_id])

    def update_document(self, document_id, document):
        if document_id not in self.documents:
            raise DocumentNotFoundError()
        self.updates.append(document_id)
        self.documents[document_id] = copy.deepcopy(document)

    def delete_document(self, document_id):
        if document_id not in self.documents:
            raise DocumentNotFoundError()
        del self.documents[document_id]

    def disconnect(self):
        pass


class FailingFindDb(InMemoryDb):
    def find_document(self, document_id):
        raise RuntimeError("connection refused")


class VanishingDb(InMemoryDb):
    def update_document(self, document_id, document):
        raise DocumentNotFoundError()


class FailingUpdateDb(InMemoryDb):
    def update_document(self, document_id, document):
        raise RuntimeError("write failed")


class DictDb(InMemoryDb):
    def find_document(self, document_id):
        return {"id": document_id}


def make_app(service=None, register=True):
    app = Flask(__name__)
    if register:
        app.extensions["db_service"] = service
    return app


def sample_ambulance():
    return Ambulance(
        id="amb-1",
        name="General",
        room_number="101",
        questionnaires=[Questionnaire(id="q1", patient_id="p1", questions=["a"])],
    )


def test_get_db_service_returns_registered_service():
    db = InMemoryDb()
    with make_app(db).app_context():
        assert get_db_service() is db


def test_get_db_service_missing_raises_lookup_error():
    with make_app(register=False).app_context():
        with pytest.raises(LookupError):
            get_db_service()


def test_get_db_service_wrong_type_raises_type_error():
    with make_app(object()).app_context():
        with pytest.raises(TypeError):
            get_db_service()


def test_missing_db_service_gives_500():
    with make_app(register=False).test_request_context():
        response = update_ambulance("amb-1", lambda amb: (None, {}, 200))
    assert response.status_code == 500
    assert response.get_json()["message"] == "db_service not found"


def test_wrong_db_service_type_gives_500():
    with make_app("not a service").test_request_context():
        response = update_ambulance("amb-1", lambda amb: (None, {}, 200))
    assert response.status_code == 500
    body = response.get_json()
    assert body["message"] == "db_service context is not of type db_service.DbService"
    assert body["error"] == "cannot cast db_service context to db_service.DbService"


def test_unknown_ambulance_gives_404():
    with make_app(InMemoryDb()).test_request_context():
        response = update_ambulance("missing", lambda amb: (None, {}, 200))
    assert response.status_code == 404
    body = response.get_json()
    assert body["message"] == "Ambulance not found"
    assert body["error"] == "document not found"


def test_load_failure_gives_502():
    with make_app(FailingFindDb()).test_request_context():
        response = update_ambulance("amb-1", lambda amb: (None, {}, 200))
    assert response.status_code == 502
    body = response.get_json()
    assert body["message"] == "Failed to load ambulance from database"
    assert body["error"] == "connection refused"


def test_non_ambulance_document_gives_500():
    with make_app(DictDb()).test_request_context():
        response = update_ambulance("amb-1", lambda amb: (None, {}, 200))
    assert response.status_code == 500
    assert response.get_json()["message"] == "Failed to cast ambulance from database"


def test_updater_receives_loaded_ambulance_and_no_update_when_none():
    db = InMemoryDb([sample_ambulance()])
    seen = []

    def updater(ambulance):
        seen.append(ambulance)
        return None, ambulance.questionnaires[0], 200

    with make_app(db).test_request_context():
        response = update_ambulance("amb-1", updater)
    assert seen == [sample_ambulance()]
    assert db.updates == []
    assert response.status_code == 200
    assert response.get_json() == sample_ambulance().questionnaires[0].to_dict()


def test_returned_ambulance_is_stored():
    db = InMemoryDb([sample_ambulance()])

    def updater(ambulance):
        ambulance.name = "Renamed"
        return ambulance, {"ok": True}, 200

    with make_app(db).test_request_context():
        response = update_ambulance("amb-1", updater)
    assert db.updates == ["amb-1"]
    assert db.documents["amb-1"].name == "Renamed"
    assert response.get_json() == {"ok": True}


def test_none_content_gives_empty_body():
    db = InMemoryDb([sample_ambulance()])
    with make_app(db).test_request_context():
        response = update_ambulance("amb-1", lambda amb: (amb, None, 204))
    assert response.status_code == 204
    assert response.get_data() == b""


def test_list_content_is_serialised():
    db = InMemoryDb([sample_ambulance()])
    with make_app(db).test_request_context():
        response = update_ambulance(
            "amb-1", lambda amb: (None, list(amb.questionnaires), 200)
        )
    assert response.get_json() == [
        entry.to_dict() for entry in sample_ambulance().questionnaires
    ]


def test_ambulance_deleted_during_update_gives_404():
    db = VanishingDb([sample_ambulance()])
    with make_app(db).test_request_context():
        response = update_ambulance("amb-1", lambda amb: (amb, {}, 200))
    assert response.status_code == 404
    assert (
        response.get_json()["message"]
        == "Ambulance was deleted while processing the request"
    )


def test_update_failure_gives_502():
    db = FailingUpdateDb([sample_ambulance()])
    with make_app(db).test_request_context():
        response = update_ambulance("amb-1", lambda amb: (amb, {}, 200))
    assert response.status_code == 502
    body = response.get_json()
    assert body["message"] == "Failed to update ambulance in database"
    assert body["error"] == "write failed"