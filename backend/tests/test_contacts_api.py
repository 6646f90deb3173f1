"""
API tests for POST /api/v1/contacts
"""
from fastapi.testclient import TestClient

from contact_manager.main import create_app
from contact_manager.models.contact import Contact
from contact_manager.services.contact_gateway import (PersistenceHooks,
                                                      stamp_created)

CONTACTS_URL = "/api/v1/contacts"


def count_contacts(database):
    session = database.session()
    try:
        return session.query(Contact).count()
    finally:
        session.close()


def test_create_contact(client, bram):
    response = client.post(CONTACTS_URL, json=bram)

    assert response.status_code == 201
    contact = response.json()["newContact"]
    assert contact["id"] is not None
    assert contact["firstName"] == "Bram"
    assert contact["lastName"] == "Stoker"
    assert contact["email"] == "bram@example.com"
    assert contact["isAVampire"] is True
    assert contact["age"] == 160
    assert contact["zipcode"] is None
    assert contact["createdAt"]
    assert contact["updatedAt"]


def test_create_contact_response_fields(client, bram):
    contact = client.post(CONTACTS_URL, json=bram).json()["newContact"]
    assert set(contact) == {
        "id", "firstName", "lastName", "email", "zipcode",
        "isAVampire", "age", "createdAt", "updatedAt",
    }


def test_native_json_types_accepted(client):
    response = client.post(CONTACTS_URL, json={
        "firstName": "Abraham",
        "lastName": "Van Helsing",
        "email": "abraham@example.com",
        "isAVampire": False,
        "age": 70,
        "zipcode": "1011",
    })

    assert response.status_code == 201
    contact = response.json()["newContact"]
    assert contact["isAVampire"] is False
    assert contact["age"] == 70
    assert contact["zipcode"] == "1011"


def test_each_contact_gets_a_new_id(client, bram):
    ids = []
    for i in range(3):
        response = client.post(CONTACTS_URL, json={**bram, "email": f"bram{i}@example.com"})
        assert response.status_code == 201
        ids.append(response.json()["newContact"]["id"])

    assert len(set(ids)) == 3
    assert ids == sorted(ids)


def test_duplicate_email_rejected(client, database, bram):
    first = client.post(CONTACTS_URL, json=bram)
    second = client.post(CONTACTS_URL, json={**bram, "firstName": "Abraham"})

    assert first.status_code == 201
    assert second.status_code == 422
    assert second.json() == {"errors": {"email": ["must be unique"]}}
    assert count_contacts(database) == 1


def test_missing_first_name(client, database, bram):
    del bram["firstName"]

    response = client.post(CONTACTS_URL, json=bram)

    assert response.status_code == 422
    assert response.json() == {"errors": {"firstName": ["is required"]}}
    assert count_contacts(database) == 0


def test_blank_first_name_counts_as_missing(client, bram):
    response = client.post(CONTACTS_URL, json={**bram, "firstName": "  "})

    assert response.status_code == 422
    assert response.json() == {"errors": {"firstName": ["is required"]}}


def test_invalid_age(client, bram):
    response = client.post(CONTACTS_URL, json={**bram, "age": "abc"})

    assert response.status_code == 422
    assert response.json() == {"errors": {"age": ["must be an integer"]}}


def test_invalid_vampire_flag(client, bram):
    response = client.post(CONTACTS_URL, json={**bram, "isAVampire": "maybe"})

    assert response.status_code == 422
    assert response.json() == {"errors": {"isAVampire": ["must be true or false"]}}


def test_invalid_email_and_long_name(client, bram):
    response = client.post(CONTACTS_URL, json={**bram, "email": "bram", "lastName": "S" * 21})

    assert response.status_code == 422
    assert response.json() == {
        "errors": {
            "lastName": ["is too long (maximum is 20 characters)"],
            "email": ["must be a valid email address"],
        }
    }


def test_empty_form_lists_every_required_field(client):
    response = client.post(CONTACTS_URL, json={
        "firstName": "", "lastName": "", "email": "", "zipcode": "", "isAVampire": "", "age": "",
    })

    assert response.status_code == 422
    assert set(response.json()["errors"]) == {"firstName", "lastName", "email", "isAVampire"}


def test_unknown_fields_not_persisted(client, bram):
    response = client.post(CONTACTS_URL, json={**bram, "id": 999, "favoriteColor": "red"})

    assert response.status_code == 201
    contact = response.json()["newContact"]
    assert contact["id"] != 999
    assert "favoriteColor" not in contact


def test_non_object_body(client):
    response = client.post(CONTACTS_URL, json=["Bram", "Stoker"])

    assert response.status_code == 422
    assert response.json() == {"errors": {"body": ["must be a JSON object"]}}


def test_malformed_json_body(client):
    response = client.post(
        CONTACTS_URL,
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 422
    assert response.json() == {"errors": {"body": ["must be a JSON object"]}}


def test_storage_failure_returns_500(settings, database, bram):
    def break_insert(record):
        return {**record, "last_name": None}

    app = create_app(
        settings,
        database=database,
        hooks=PersistenceHooks(before_insert=(stamp_created, break_insert)),
    )
    with TestClient(app) as client:
        response = client.post(CONTACTS_URL, json=bram)

    assert response.status_code == 500
    assert response.json() == {"errors": {"type": "StorageFailure", "detail": "Contact could not be saved"}}
    assert count_contacts(database) == 0


def test_response_carries_request_id(client, bram):
    response = client.post(CONTACTS_URL, json=bram, headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_unexpected_error_returns_500(settings, database, bram):
    def explode(record):
        raise RuntimeError("hook failed")

    app = create_app(settings, database=database, hooks=PersistenceHooks(before_insert=(explode,)))
    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.post(CONTACTS_URL, json=bram)

    assert response.status_code == 500
    assert response.json() == {"errors": {"type": "RuntimeError", "detail": "Internal server error"}}


def test_email_domain_case_is_not_folded(client, database, bram):
    first = client.post(CONTACTS_URL, json={**bram, "email": "bram@EXAMPLE.com"})
    second = client.post(CONTACTS_URL, json=bram)

    assert first.status_code == 201
    assert first.json()["newContact"]["email"] == "bram@EXAMPLE.com"
    assert second.status_code == 201
    assert second.json()["newContact"]["email"] == "bram@example.com"
    assert count_contacts(database) == 2


def test_email_with_display_name_rejected(client, database, bram):
    response = client.post(CONTACTS_URL, json={**bram, "email": "Count Dracula <bram@example.com>"})

    assert response.status_code == 422
    assert response.json() == {"errors": {"email": ["must be a valid email address"]}}
    assert count_contacts(database) == 0


def test_age_too_large_for_storage(client, database, bram):
    response = client.post(CONTACTS_URL, json={**bram, "age": "99999999999999999999"})

    assert response.status_code == 422
    assert response.json() == {"errors": {"age": ["must be less than or equal to 2147483647"]}}
    assert count_contacts(database) == 0


def test_zipcode_too_long_for_storage(client, bram):
    response = client.post(CONTACTS_URL, json={**bram, "zipcode": "1" * 256})

    assert response.status_code == 422
    assert response.json() == {"errors": {"zipcode": ["is too long (maximum is 255 characters)"]}}
