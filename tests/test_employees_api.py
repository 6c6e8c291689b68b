"""
Tests for the /api/v1/employees endpoints and the shared response envelope.
"""
import re
from datetime import date

import pytest

EMPLOYEES_URL = "/api/v1/employees"


@pytest.fixture
def create_employee(client, auth_headers, employee_payload):
    def _create(**overrides):
        response = client.post(EMPLOYEES_URL, json=employee_payload(**overrides), headers=auth_headers)
        assert response.status_code == 201, response.json()
        return response.json()["data"]
    return _create


class TestCreateEndpoint:

    def test_create_employee(self, client, auth_headers, employee_payload):
        payload = employee_payload(employment={"startDate": date.today().isoformat()})

        response = client.post(EMPLOYEES_URL, json=payload, headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Employee created successfully"
        data = body["data"]
        assert re.fullmatch(r"EMP\d{4}", data["employeeId"])
        assert data["fullName"] == "Jane Doe"
        assert data["yearsOfService"] == 0
        assert data["isActive"] is True
        assert data["personalInfo"]["address"]["zipCode"] == "94105"
        assert data["compensation"]["benefits"]["paidTimeOff"] == 20
        assert data["employment"]["manager"] is None

    def test_email_is_stored_lowercase(self, create_employee):
        data = create_employee(personal={"email": "Jane.DOE@Example.com"})

        assert data["personalInfo"]["email"] == "jane.doe@example.com"

    def test_client_supplied_employee_id_is_ignored(self, create_employee):
        data = create_employee(employeeId="EMP9999")

        assert data["employeeId"] == "EMP0001"

    def test_every_invalid_field_is_reported(self, client, auth_headers, employee_payload):
        payload = employee_payload(
            personal={"email": "not-an-email", "phone": "abc", "firstName": "J"},
            employment={"department": "Space"},
            compensation={"salary": -5}
        )

        response = client.post(EMPLOYEES_URL, json=payload, headers=auth_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation failed"
        fields = {error["field"] for error in body["errors"]}
        assert {
            "personalInfo.email",
            "personalInfo.phone",
            "personalInfo.firstName",
            "employment.department",
            "compensation.salary",
        } <= fields

    def test_future_start_date_is_rejected(self, client, auth_headers, employee_payload):
        payload = employee_payload(employment={"startDate": "2999-01-01"})

        response = client.post(EMPLOYEES_URL, json=payload, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "employment.startDate"

    def test_end_date_before_start_date_is_tagged_on_end_date(self, client, auth_headers, employee_payload):
        payload = employee_payload(employment={"startDate": "2024-01-01", "endDate": "2023-01-01"})

        response = client.post(EMPLOYEES_URL, json=payload, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["errors"] == [{
            "field": "employment.endDate",
            "message": "End date must be after start date",
            "value": "2023-01-01"
        }]

    def test_custom_rule_messages_are_plain(self, client, auth_headers, employee_payload):
        payload = employee_payload(personal={"phone": "abc"})

        response = client.post(EMPLOYEES_URL, json=payload, headers=auth_headers)

        error = response.json()["errors"][0]
        assert error["field"] == "personalInfo.phone"
        assert error["message"] == "Please provide a valid phone number"

    def test_duplicate_email_conflicts(self, client, auth_headers, employee_payload, create_employee):
        create_employee()

        response = client.post(EMPLOYEES_URL, json=employee_payload(), headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["code"] == "RESOURCE_CONFLICT"
        assert response.json()["errors"][0]["field"] == "personalInfo.email"

    def test_requires_authentication(self, client, employee_payload):
        response = client.post(EMPLOYEES_URL, json=employee_payload())

        assert response.status_code == 401
        assert response.json()["code"] == "NO_TOKEN"

    def test_manager_is_returned_as_summary(self, create_employee):
        manager = create_employee(personal={
            "firstName": "Mary", "lastName": "Major", "email": "mary@example.com"
        })
        report = create_employee(employment={"manager": manager["id"]})

        summary = report["employment"]["manager"]
        assert summary["id"] == manager["id"]
        assert summary["employeeId"] == manager["employeeId"]
        assert summary["fullName"] == "Mary Major"


class TestReadEndpoints:

    def test_get_employee(self, client, auth_headers, create_employee):
        created = create_employee()

        response = client.get(f"{EMPLOYEES_URL}/{created['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["employeeId"] == created["employeeId"]

    def test_get_unknown_employee(self, client, auth_headers):
        response = client.get(f"{EMPLOYEES_URL}/unknown", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Employee not found"
        assert response.json()["success"] is False

    def test_list_with_filters(self, client, auth_headers, create_employee):
        create_employee()
        create_employee(
            personal={"firstName": "Sam", "lastName": "Seller", "email": "sam@example.com"},
            employment={"department": "Sales"}
        )

        response = client.get(EMPLOYEES_URL, params={"department": "Sales"}, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert [employee["fullName"] for employee in data["employees"]] == ["Sam Seller"]
        assert data["pagination"]["totalEmployees"] == 1
        assert data["pagination"]["currentPage"] == 1

    def test_list_search_and_pagination(self, client, auth_headers, create_employee):
        for index in range(3):
            create_employee(personal={"email": f"jane{index}@example.com"})

        response = client.get(
            EMPLOYEES_URL,
            params={"search": "jane", "page": 2, "limit": 2, "sortBy": "employeeId", "sortOrder": "asc"},
            headers=auth_headers
        )

        data = response.json()["data"]
        assert [employee["employeeId"] for employee in data["employees"]] == ["EMP0003"]
        assert data["pagination"]["totalPages"] == 2
        assert data["pagination"]["hasPrevPage"] is True
        assert data["pagination"]["hasNextPage"] is False

    def test_invalid_department_filter(self, client, auth_headers):
        response = client.get(EMPLOYEES_URL, params={"department": "Space"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "department"

    def test_invalid_paging_values(self, client, auth_headers):
        response = client.get(EMPLOYEES_URL, params={"page": 0, "limit": 500}, headers=auth_headers)

        assert response.status_code == 400
        assert {error["field"] for error in response.json()["errors"]} == {"page", "limit"}

    def test_unknown_sort_field(self, client, auth_headers):
        response = client.get(EMPLOYEES_URL, params={"sortBy": "salaryHistory"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "sortBy"


class TestUpdateEndpoint:

    def test_partial_update(self, client, auth_headers, create_employee):
        created = create_employee()

        response = client.put(
            f"{EMPLOYEES_URL}/{created['id']}",
            json={"employment": {"position": "Staff Engineer"}},
            headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["employment"]["position"] == "Staff Engineer"
        assert data["employment"]["department"] == "Engineering"
        assert data["employeeId"] == created["employeeId"]

    def test_invalid_update(self, client, auth_headers, create_employee):
        created = create_employee()

        response = client.put(
            f"{EMPLOYEES_URL}/{created['id']}",
            json={"personalInfo": {"phone": "phone"}},
            headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "personalInfo.phone"

    def test_update_unknown_employee(self, client, auth_headers):
        response = client.put(f"{EMPLOYEES_URL}/unknown", json={}, headers=auth_headers)

        assert response.status_code == 404


class TestDeleteEndpoint:

    def test_delete_terminates_then_hides(self, client, auth_headers, create_employee):
        created = create_employee()
        url = f"{EMPLOYEES_URL}/{created['id']}"

        response = client.delete(url, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["isActive"] is False
        assert data["employment"]["status"] == "Terminated"
        assert data["employment"]["endDate"] == date.today().isoformat()

        assert client.get(url, headers=auth_headers).status_code == 404
        assert client.delete(url, headers=auth_headers).status_code == 404

        listing = client.get(EMPLOYEES_URL, headers=auth_headers).json()["data"]
        assert listing["pagination"]["totalEmployees"] == 0


class TestEnvelope:

    def test_unknown_route(self, client):
        response = client.get("/api/v1/nothing-here")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Route not found", "code": "HTTP_EXCEPTION"}

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_request_id_header(self, client):
        response = client.get("/health")

        assert response.headers["X-Request-ID"]
        assert response.headers["X-Content-Type-Options"] == "nosniff"
