# ambulance-api

A small HTTP service, built on Flask, that keeps a list of ambulances and,
for each ambulance, the patient questionnaires filled in there. Data is
stored in MongoDB, one document per ambulance, matched on its `id` field.

## Installation

    pip install .

## Running the service

    ambulance-api-service

The command takes no options other than `--help`. It starts Flask's
built-in server on all interfaces, on the port given by
`AMBULANCE_API_PORT` (default `8080`), and closes the MongoDB connection
when the server stops. Unless `AMBULANCE_API_ENVIRONMENT` is
`production` (in any letter case), the application logger is set to
debug level.

MongoDB connection settings come from the environment:

| Variable                                | Default           |
|-----------------------------------------|-------------------|
| `AMBULANCE_API_MONGODB_HOST`            | `localhost`       |
| `AMBULANCE_API_MONGODB_PORT`            | `27017`           |
| `AMBULANCE_API_MONGODB_USERNAME`        | (empty)           |
| `AMBULANCE_API_MONGODB_PASSWORD`        | (empty)           |
| `AMBULANCE_API_MONGODB_DATABASE`        | `andel-project-q` |
| `AMBULANCE_API_MONGODB_COLLECTION`      | `ambulance`       |
| `AMBULANCE_API_MONGODB_TIMEOUT_SECONDS` | `10`              |

A port or timeout that is not a whole number is logged and replaced by
its default. Credentials are put into the connection URI only when a
user name is set.

## Endpoints

| Method | Path                                                 | Success              |
|--------|------------------------------------------------------|----------------------|
| POST   | `/api/ambulance`                                     | 201 with the ambulance |
| DELETE | `/api/ambulance/<ambulanceId>`                       | 204                  |
| POST   | `/api/questionnaire/<ambulanceId>/entries`           | 200 with the entry   |
| GET    | `/api/questionnaire/<ambulanceId>/entries`           | 200 with a list      |
| GET    | `/api/questionnaire/<ambulanceId>/entries/<entryId>` | 200 with the entry   |
| PUT    | `/api/questionnaire/<ambulanceId>/entries/<entryId>` | 200 with the entry   |
| DELETE | `/api/questionnaire/<ambulanceId>/entries/<entryId>` | 204                  |

An ambulance looks like this (`questionnaires` is left out when empty):

```json
{"id": "amb-1", "name": "Cardiology", "roomNumber": "101"}
```

A questionnaire looks like this:

```json
{
  "id": "3f1c...",
  "name": "Jane Doe",
  "patientId": "patient-001",
  "lastModified": "2024-01-01T10:00:00Z",
  "questions": ["yes", "no", "sometimes"]
}
```

Rules the handlers apply:

- An ambulance without an `id` gets a fresh UUID; an existing `id` gives 409.
- A new entry needs a `patientId` (400 otherwise). An `id` that is missing
  or `@new` gets a fresh UUID. Within one ambulance both the entry `id`
  and the `patientId` must be unique (409 otherwise).
- An update changes only the entry's `patientId` and `id`, and only those
  given non-empty in the body.
- An unknown ambulance or entry gives 404; a body that is not valid JSON
  of the right shape gives 400; a storage failure gives 502.

Errors are JSON objects with `status`, `message` and, for most, `error`.
Browsers are allowed from any origin: preflight `OPTIONS` requests are
answered with the allowed methods (`GET, PUT, POST, DELETE, PATCH`),
headers (`Origin, Authorization, Content-Type`) and a 12-hour max age.

## Using it from Python

```python
from ambulance_api.db_service import MongoService, MongoServiceConfig
from ambulance_api.models import Ambulance
from ambulance_api.server import create_app

with MongoService(MongoServiceConfig(), Ambulance) as service:
    app = create_app(service)
    app.run(port=8080)
```

- `ambulance_api.models` — the `Ambulance` and `Questionnaire` dataclasses
  with `from_dict` / `to_dict` for their JSON form.
- `ambulance_api.db_service` — the abstract `DbService`, the
  `MongoService` implementation, `MongoServiceConfig`, `resolve_config`,
  and the `DocumentNotFoundError` / `DocumentConflictError` exceptions.
- `ambulance_api.server` — `create_app(db_service, environ)` and `main`.
- `ambulance_api.routers` — `get_routes`, `register_routes` and
  `new_router`; a route without a handler answers 501.

`create_app` takes any object implementing `DbService`, so the API can run
against an in-memory store in tests.

## What it does not do

The service does not publish an OpenAPI description of its endpoints, and
it has no authentication: every client that can reach it may read and
change all data.

## Development

    pip install -e ".[test]"
    pytest