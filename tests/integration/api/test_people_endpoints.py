"""API tests for the people endpoints."""

from uuid import uuid4

from fastapi.testclient import TestClient


class TestCreatePerson:
    def test_create_person_returns_201_with_location(
        self,
        test_client: TestClient,
        api_prefix: str,
    ):
        response = test_client.post(
            f"{api_prefix}/people",
            json={"fullName": "Ada Lovelace", "phone": "+44 20 7946 0958"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["fullName"] == "Ada Lovelace"
        assert data["phone"] == "+44 20 7946 0958"
        assert data["roles"] == []
        assert data["rowVersion"] == 1
        assert response.headers["location"].endswith(f"/api/people/{data['id']}")

    def test_create_person_with_roles(
        self,
        test_client: TestClient,
        api_prefix: str,
        make_role,
    ):
        editor = make_role("Editor")
        viewer = make_role("Viewer")

        response = test_client.post(
            f"{api_prefix}/people",
            json={"fullName": "Grace Hopper", "roleIds": [viewer["id"], editor["id"]]},
        )

        assert response.status_code == 201
        assert [role["name"] for role in response.json()["roles"]] == [
            "Editor",
            "Viewer",
        ]

    def test_unknown_role_is_rejected(self, test_client: TestClient, api_prefix: str):
        response = test_client.post(
            f"{api_prefix}/people",
            json={"fullName": "Grace Hopper", "roleIds": [str(uuid4())]},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ROLE_REFERENCE"

    def test_invalid_name_is_rejected(self, test_client: TestClient, api_prefix: str):
        response = test_client.post(
            f"{api_prefix}/people",
            json={"fullName": "R2-D2"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FULL_NAME"

    def test_invalid_phone_is_rejected(self, test_client: TestClient, api_prefix: str):
        response = test_client.post(
            f"{api_prefix}/people",
            json={"fullName": "Alan Turing", "phone": "call me"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_PHONE"

    def test_missing_name_fails_request_validation(
        self,
        test_client: TestClient,
        api_prefix: str,
    ):
        response = test_client.post(f"{api_prefix}/people", json={"phone": "1234567"})

        assert response.status_code == 422


class TestReadPeople:
    def test_list_is_empty_initially(self, test_client: TestClient, api_prefix: str):
        response = test_client.get(f"{api_prefix}/people")

        assert response.status_code == 200
        assert response.json() == []

    def test_list_and_get(self, test_client: TestClient, api_prefix: str):
        created = test_client.post(
            f"{api_prefix}/people",
            json={"fullName": "Alan Turing"},
        ).json()

        listed = test_client.get(f"{api_prefix}/people").json()
        fetched = test_client.get(f"{api_prefix}/people/{created['id']}")

        assert [person["id"] for person in listed] == [created["id"]]
        assert fetched.status_code == 200
        assert fetched.json()["fullName"] == "Alan Turing"

    def test_get_unknown_person_returns_404(
        self,
        test_client: TestClient,
        api_prefix: str,
    ):
        response = test_client.get(f"{api_prefix}/people/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["code"] == "PERSON_NOT_FOUND"


class TestUpdatePerson:
    def test_update_replaces_fields_and_bumps_row_version(
        self,
        test_client: TestClient,
        api_prefix: str,
        make_role,
    ):
        role = make_role("Editor")
        created = test_client.post(
            f"{api_prefix}/people",
            json={"fullName": "Alan Turing", "roleIds": [role["id"]]},
        ).json()

        response = test_client.put(
            f"{api_prefix}/people/{created['id']}",
            json={"fullName": "Alan M. Turing", "rowVersion": created["rowVersion"]},
        )

        assert response.status_code == 204
        updated = test_client.get(f"{api_prefix}/people/{created['id']}").json()
        assert updated["fullName"] == "Alan M. Turing"
        # Omitted roleIds clears the assignments
        assert updated["roles"] == []
        assert updated["rowVersion"] == created["rowVersion"] + 1

    def test_stale_row_version_returns_409(
        self,
        test_client: TestClient,
        api_prefix: str,
    ):
        created = test_client.post(
            f"{api_prefix}/people",
            json={"fullName": "Alan Turing"},
        ).json()
        first = test_client.put(
            f"{api_prefix}/people/{created['id']}",
            json={"fullName": "Alan Turing", "rowVersion": created["rowVersion"]},
        )
        assert first.status_code == 204

        second = test_client.put(
            f"{api_prefix}/people/{created['id']}",
            json={"fullName": "Someone Else", "rowVersion": created["rowVersion"]},
        )

        assert second.status_code == 409
        assert second.json()["code"] == "CONCURRENCY_CONFLICT"

    def test_update_unknown_person_returns_404(
        self,
        test_client: TestClient,
        api_prefix: str,
    ):
        response = test_client.put(
            f"{api_prefix}/people/{uuid4()}",
            json={"fullName": "Nobody Here"},
        )

        assert response.status_code == 404


class TestDeletePerson:
    def test_delete_person(self, test_client: TestClient, api_prefix: str):
        created = test_client.post(
            f"{api_prefix}/people",
            json={"fullName": "Alan Turing"},
        ).json()

        response = test_client.delete(f"{api_prefix}/people/{created['id']}")

        assert response.status_code == 204
        response = test_client.get(f"{api_prefix}/people/{created['id']}")
        assert response.status_code == 404

    def test_delete_unknown_person_returns_404(
        self,
        test_client: TestClient,
        api_prefix: str,
    ):
        response = test_client.delete(f"{api_prefix}/people/{uuid4()}")

        assert response.status_code == 404
