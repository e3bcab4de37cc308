"""HTTP tests for the address book endpoints."""

import uuid

from conftest import address_fields, identity

URL = "/api/v1/address"


def create(client, user_id="alice", tenant_id="tenant-a", **overrides):
    return client.post(URL, json=address_fields(**overrides), headers=identity(user_id, tenant_id))


def test_create_address_returns_201_with_id(client):
    response = create(client)

    assert response.status_code == 201
    body = response.json()
    assert body["address_id"]
    uuid.UUID(body["address_id"])
    assert body["tenant_id"] == "tenant-a"
    assert body["user_id"] == "alice"
    assert body["created_at"] == body["updated_at"]


def test_create_then_get_returns_submitted_fields(client):
    submitted = address_fields()
    created = client.post(URL, json=submitted, headers=identity("alice")).json()

    response = client.get(f"{URL}/{created['address_id']}", headers=identity("alice"))

    assert response.status_code == 200
    body = response.json()
    for name, value in submitted.items():
        assert body[name] == value


def test_create_without_line2(client):
    fields = address_fields()
    del fields["line2"]

    response = client.post(URL, json=fields, headers=identity("alice"))

    assert response.status_code == 201
    assert response.json()["line2"] is None


def test_create_duplicate_returns_409_and_keeps_single_record(client):
    assert create(client).status_code == 201

    response = create(client)

    assert response.status_code == 409
    assert response.json()["code"] == "ADDRESS_DUPLICATE"
    listing = client.get(URL, headers=identity("alice")).json()
    assert len(listing) == 1


def test_duplicate_without_line2_is_detected(client):
    fields = address_fields(line2=None)
    assert client.post(URL, json=fields, headers=identity("alice")).status_code == 201

    response = client.post(URL, json=address_fields(line2="  "), headers=identity("alice"))

    assert response.status_code == 409


def test_same_content_for_different_users_is_allowed(client):
    assert create(client, user_id="alice").status_code == 201
    assert create(client, user_id="bob").status_code == 201


def test_same_content_in_different_tenants_is_allowed(client):
    assert create(client, tenant_id="tenant-a").status_code == 201
    assert create(client, tenant_id="tenant-b").status_code == 201


def test_create_missing_required_field_returns_400(client):
    fields = address_fields()
    del fields["city"]

    response = client.post(URL, json=fields, headers=identity("alice"))

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert "city" in body["message"]


def test_create_blank_required_field_returns_400(client):
    response = create(client, line1="   ")

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_create_rejects_identity_fields_in_body(client):
    body = dict(address_fields(), user_id="mallory")

    response = client.post(URL, json=body, headers=identity("alice"))

    assert response.status_code == 400
    assert "user_id" in response.json()["message"]


def test_missing_identity_headers_returns_401(client):
    response = client.post(URL, json=address_fields())

    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHENTICATED"


def test_get_other_users_address_forbidden_for_owner_allowed_for_admin(client):
    address_id = create(client, user_id="alice").json()["address_id"]

    as_bob = client.get(f"{URL}/{address_id}", headers=identity("bob"))
    as_admin = client.get(f"{URL}/{address_id}", headers=identity("carol", roles="support,admin"))

    assert as_bob.status_code == 403
    assert as_bob.json()["code"] == "FORBIDDEN"
    assert as_admin.status_code == 200
    assert as_admin.json()["user_id"] == "alice"


def test_get_address_of_other_tenant_is_not_found(client):
    address_id = create(client, tenant_id="tenant-a").json()["address_id"]

    response = client.get(f"{URL}/{address_id}", headers=identity("alice", tenant_id="tenant-b", roles="admin"))

    assert response.status_code == 404


def test_get_unknown_address_returns_404(client):
    response = client.get(f"{URL}/{uuid.uuid4()}", headers=identity("alice"))

    assert response.status_code == 404
    assert response.json()["code"] == "ADDRESS_NOT_FOUND"


def test_get_malformed_id_returns_400(client):
    response = client.get(f"{URL}/not-a-uuid", headers=identity("alice"))

    assert response.status_code == 400


def test_list_returns_own_addresses_in_creation_order(client):
    ids = [create(client, line1=f"{n} High Street").json()["address_id"] for n in range(1, 4)]
    create(client, user_id="bob")

    response = client.get(URL, headers=identity("alice"))

    assert response.status_code == 200
    assert [a["address_id"] for a in response.json()] == ids


def test_list_for_user_without_addresses_is_empty(client):
    response = client.get(URL, headers=identity("nobody"))

    assert response.status_code == 200
    assert response.json() == []


def test_list_other_user_requires_admin(client):
    create(client, user_id="alice")

    as_bob = client.get(URL, params={"userId": "alice"}, headers=identity("bob"))
    as_admin = client.get(URL, params={"userId": "alice"}, headers=identity("carol", roles="admin"))

    assert as_bob.status_code == 403
    assert as_admin.status_code == 200
    assert [a["user_id"] for a in as_admin.json()] == ["alice"]


def test_list_own_user_id_param_needs_no_admin(client):
    create(client, user_id="alice")

    response = client.get(URL, params={"userId": "alice"}, headers=identity("alice"))

    assert response.status_code == 200
    assert len(response.json()) == 1


def test_update_changes_content_only(client):
    created = create(client).json()
    new_fields = address_fields(line1="10 Downing Street", line2=None, postcode="SW1A 2AA")

    response = client.put(f"{URL}/{created['address_id']}", json=new_fields, headers=identity("alice"))

    assert response.status_code == 200
    updated = response.json()
    assert updated["line1"] == "10 Downing Street"
    assert updated["line2"] is None
    assert updated["postcode"] == "SW1A 2AA"
    assert updated["city"] == created["city"]
    assert updated["address_id"] == created["address_id"]
    assert updated["user_id"] == created["user_id"]
    assert updated["tenant_id"] == created["tenant_id"]
    assert updated["created_at"] == created["created_at"]
    assert updated["updated_at"] >= created["updated_at"]

    fetched = client.get(f"{URL}/{created['address_id']}", headers=identity("alice")).json()
    assert fetched == updated


def test_update_to_other_existing_address_returns_409(client):
    create(client, line1="1 First Street")
    second = create(client, line1="2 Second Street").json()

    response = client.put(
        f"{URL}/{second['address_id']}",
        json=address_fields(line1="1 First Street"),
        headers=identity("alice"),
    )

    assert response.status_code == 409
    unchanged = client.get(f"{URL}/{second['address_id']}", headers=identity("alice")).json()
    assert unchanged["line1"] == "2 Second Street"


def test_update_with_unchanged_values_is_not_a_duplicate(client):
    created = create(client).json()

    response = client.put(f"{URL}/{created['address_id']}", json=address_fields(), headers=identity("alice"))

    assert response.status_code == 200


def test_update_invalid_fields_returns_400(client):
    created = create(client).json()

    response = client.put(
        f"{URL}/{created['address_id']}",
        json=address_fields(country=""),
        headers=identity("alice"),
    )

    assert response.status_code == 400


def test_update_by_other_user_or_admin_is_forbidden(client):
    created = create(client).json()
    path = f"{URL}/{created['address_id']}"

    assert client.put(path, json=address_fields(city="Leeds"), headers=identity("bob")).status_code == 403
    assert client.put(path, json=address_fields(city="Leeds"), headers=identity("carol", roles="admin")).status_code == 403


def test_update_unknown_address_returns_404(client):
    response = client.put(f"{URL}/{uuid.uuid4()}", json=address_fields(), headers=identity("alice"))

    assert response.status_code == 404


def test_delete_removes_address_and_second_delete_is_404(client):
    created = create(client).json()
    path = f"{URL}/{created['address_id']}"

    first = client.delete(path, headers=identity("alice"))

    assert first.status_code == 204
    assert client.get(path, headers=identity("alice")).status_code == 404
    assert client.get(URL, headers=identity("alice")).json() == []
    assert client.delete(path, headers=identity("alice")).status_code == 404


def test_delete_by_other_user_is_forbidden(client):
    created = create(client).json()
    path = f"{URL}/{created['address_id']}"

    assert client.delete(path, headers=identity("bob")).status_code == 403
    assert client.get(path, headers=identity("alice")).status_code == 200


def test_recreate_after_delete_is_allowed(client):
    created = create(client).json()
    client.delete(f"{URL}/{created['address_id']}", headers=identity("alice"))

    response = create(client)

    assert response.status_code == 201
    assert response.json()["address_id"] != created["address_id"]


def test_audit_logs_visible_to_admin_only(client):
    created = create(client).json()
    client.delete(f"{URL}/{created['address_id']}", headers=identity("alice"))

    assert client.get("/api/v1/audit/logs", headers=identity("alice")).status_code == 403

    response = client.get("/api/v1/audit/logs", headers=identity("carol", roles="admin"))

    assert response.status_code == 200
    actions = [entry["action"] for entry in response.json()]
    assert actions == ["delete", "create"]
    assert all(entry["object_id"] == created["address_id"] for entry in response.json())


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_list_with_blank_user_id_lists_own_addresses(client):
    create(client, user_id="alice")
    create(client, user_id="carol", line1="1 Admin Road")

    as_owner = client.get(URL, params={"userId": ""}, headers=identity("alice"))
    as_admin = client.get(URL, params={"userId": "  "}, headers=identity("carol", roles="admin"))

    assert as_owner.status_code == 200
    assert [a["user_id"] for a in as_owner.json()] == ["alice"]
    assert as_admin.status_code == 200
    assert [a["user_id"] for a in as_admin.json()] == ["carol"]


def test_list_with_padded_own_user_id_needs_no_admin(client):
    create(client, user_id="alice")

    response = client.get(URL, params={"userId": "alice "}, headers=identity("alice"))

    assert response.status_code == 200
    assert len(response.json()) == 1
