class TestReferenceValidation:
    """Foreign keys must point at existing rows owned by the same user"""

    def test_dangling_reference(self, client, auth_headers):
        response = client.post(
            "/api/complaints", headers=auth_headers, json={"title": "Broken", "customer_id": 999}
        )

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "dangling_reference"
        assert body["field"] == "customer_id"
        assert body["value"] == 999

    def test_reference_beyond_integer_range(self, client, auth_headers):
        response = client.post(
            "/api/complaints", headers=auth_headers, json={"title": "x", "customer_id": 10**20}
        )

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "dangling_reference"
        assert body["field"] == "customer_id"

    def test_cross_owner_reference(self, client, auth_headers, user_b_headers, make):
        theirs = make("customers", user_b_headers, name="Bob's client")

        response = client.post(
            "/api/complaints",
            headers=auth_headers,
            json={"title": "Broken", "customer_id": theirs["id"]},
        )

        assert response.status_code == 403
        assert response.json()["error"] == "cross_owner_reference"

    def test_cross_owner_reference_on_update(self, client, auth_headers, user_b_headers, make):
        complaint = make("complaints", auth_headers, title="Broken")
        theirs = make("customers", user_b_headers, name="Bob's client")

        response = client.patch(
            f"/api/complaints/{complaint['id']}",
            headers=auth_headers,
            json={"customer_id": theirs["id"]},
        )

        assert response.status_code == 403

    def test_team_member_needs_both_sides_owned(self, client, auth_headers, user_b_headers, make):
        """A team of one account cannot take in an employee of another"""
        team = make("teams", auth_headers, name="Platform")
        outsider = make("employees", user_b_headers, name="Mallory")

        response = client.post(
            "/api/team-members",
            headers=auth_headers,
            json={"team_id": team["id"], "employee_id": outsider["id"]},
        )

        assert response.status_code == 403
        assert response.json()["field"] == "employee_id"

    def test_team_member_requires_references(self, client, auth_headers):
        response = client.post("/api/team-members", headers=auth_headers, json={"role": "dev"})

        assert response.status_code == 422
        fields = {e["field"] for e in response.json()["errors"]}
        assert fields == {"team_id", "employee_id"}

    def test_team_member_scoped_through_team(self, client, auth_headers, user_b_headers, make):
        team = make("teams", auth_headers, name="Platform")
        employee = make("employees", auth_headers, name="Jane")
        member = make("team-members", auth_headers, team_id=team["id"], employee_id=employee["id"])
        assert "user_id" not in member

        assert client.get("/api/team-members", headers=auth_headers).json()["total"] == 1
        assert client.get("/api/team-members", headers=user_b_headers).json()["total"] == 0
        response = client.get(f"/api/team-members/{member['id']}", headers=user_b_headers)
        assert response.status_code == 404

    def test_duplicate_team_member(self, client, auth_headers, make):
        team = make("teams", auth_headers, name="Platform")
        employee = make("employees", auth_headers, name="Jane")
        make("team-members", auth_headers, team_id=team["id"], employee_id=employee["id"])

        response = client.post(
            "/api/team-members",
            headers=auth_headers,
            json={"team_id": team["id"], "employee_id": employee["id"]},
        )

        assert response.status_code == 409
        assert response.json()["error"] == "unique_constraint"


class TestDeletion:
    """Deleting a referenced row either clears or blocks the references"""

    def test_delete_clears_nullable_reference(self, client, auth_headers, make):
        leader = make("employees", auth_headers, name="Jane")
        team = make("teams", auth_headers, name="Platform", leader_id=leader["id"])

        response = client.delete(f"/api/employees/{leader['id']}", headers=auth_headers)
        assert response.status_code == 204

        team = client.get(f"/api/teams/{team['id']}", headers=auth_headers).json()
        assert team["leader_id"] is None

    def test_department_manager_cleared(self, client, auth_headers, make):
        """Departments and employees reference each other; either side can go"""
        department = make("departments", auth_headers, name="Sales")
        manager = make("employees", auth_headers, name="Jane", department_id=department["id"])
        client.patch(
            f"/api/departments/{department['id']}",
            headers=auth_headers,
            json={"manager_id": manager["id"]},
        )

        response = client.delete(f"/api/departments/{department['id']}", headers=auth_headers)
        assert response.status_code == 204

        manager = client.get(f"/api/employees/{manager['id']}", headers=auth_headers).json()
        assert manager["department_id"] is None

    def test_delete_blocked_by_required_reference(self, client, auth_headers, make):
        team = make("teams", auth_headers, name="Platform")
        employee = make("employees", auth_headers, name="Jane")
        make("team-members", auth_headers, team_id=team["id"], employee_id=employee["id"])

        response = client.delete(f"/api/teams/{team['id']}", headers=auth_headers)

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "referential_integrity"
        assert body["blockers"] == [{"kind": "team_member", "field": "team_id", "count": 1}]

        # Nothing was deleted
        assert client.get(f"/api/teams/{team['id']}", headers=auth_headers).status_code == 200

    def test_delete_after_blocker_removed(self, client, auth_headers, make):
        team = make("teams", auth_headers, name="Platform")
        employee = make("employees", auth_headers, name="Jane")
        member = make("team-members", auth_headers, team_id=team["id"], employee_id=employee["id"])

        client.delete(f"/api/team-members/{member['id']}", headers=auth_headers)
        response = client.delete(f"/api/teams/{team['id']}", headers=auth_headers)

        assert response.status_code == 204

    def test_blocked_delete_clears_nothing(self, client, auth_headers, make):
        """A blocked delete leaves nullable references in place"""
        employee = make("employees", auth_headers, name="Jane")
        team = make("teams", auth_headers, name="Platform", leader_id=employee["id"])
        make("team-members", auth_headers, team_id=team["id"], employee_id=employee["id"])

        response = client.delete(f"/api/employees/{employee['id']}", headers=auth_headers)
        assert response.status_code == 409

        team = client.get(f"/api/teams/{team['id']}", headers=auth_headers).json()
        assert team["leader_id"] == employee["id"]
