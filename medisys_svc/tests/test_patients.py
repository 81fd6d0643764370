"""
Tests for patient endpoints.
"""
# Patient Endpoint Tests
def test_create_patient_success(client, anna_payload):
    """Test successful patient creation."""
    response = client.post("/api/v1/patients", json=anna_payload)
    assert response.status_code == 201
    data = response.json()
    assert isinstance(data["id"], int)
    assert data["first_name"] == "Anna"
    assert data["birth_date"] == "1990-05-01"
    assert data["gender"] == "W"
    # Optional fields default to empty strings
    assert data["street"] == ""
    assert data["email"] == ""


def test_create_patient_future_birth_date(client, anna_payload):
    """Test a birth date in the future is rejected and nothing is stored."""
    response = client.post("/api/v1/patients", json={**anna_payload, "birth_date": "2999-01-01"})
    assert response.status_code == 422
    body = response.json()
    assert body["context"]["errors"] == ["Birth date must not be in the future"]

    assert client.get("/api/v1/patients").json() == []


def test_create_patient_invalid_gender(client, anna_payload):
    """Test an unknown gender code is rejected."""
    response = client.post("/api/v1/patients", json={**anna_payload, "gender": "X"})
    assert response.status_code == 422
    assert "Gender must be one of M, W, D" in response.json()["detail"]


def test_create_patient_missing_gender(client, anna_payload):
    payload = dict(anna_payload)
    del payload["gender"]
    response = client.post("/api/v1/patients", json=payload)
    assert response.status_code == 422


def test_create_patient_validation_missing_name(client, anna_payload):
    """Test patient creation without first name fails request validation."""
    payload = dict(anna_payload)
    del payload["first_name"]
    response = client.post("/api/v1/patients", json=payload)
    assert response.status_code == 422


def test_get_patients_empty(client):
    """Test getting patients when database is empty."""
    response = client.get("/api/v1/patients")
    assert response.status_code == 200
    assert response.json() == []


def test_get_patients_sorted(client, anna_payload):
    """Test patients come back sorted by last name, then first name."""
    for first, last in [("Zoe", "Meier"), ("Anna", "Muster"), ("Bruno", "Meier")]:
        client.post("/api/v1/patients", json={**anna_payload, "first_name": first, "last_name": last})

    response = client.get("/api/v1/patients")
    assert response.status_code == 200
    names = [(p["last_name"], p["first_name"]) for p in response.json()]
    assert names == [("Meier", "Bruno"), ("Meier", "Zoe"), ("Muster", "Anna")]


def test_search_patients(client, anna_payload):
    client.post("/api/v1/patients", json=anna_payload)
    client.post("/api/v1/patients", json={
        **anna_payload, "first_name": "Hans", "last_name": "Keller", "insurance_number": "111",
    })

    response = client.get("/api/v1/patients", params={"q": "kell"})
    assert response.status_code == 200
    assert [p["first_name"] for p in response.json()] == ["Hans"]


def test_search_empty_term_returns_all(client, anna_payload):
    client.post("/api/v1/patients", json=anna_payload)
    client.post("/api/v1/patients", json={**anna_payload, "first_name": "Hans"})

    response = client.get("/api/v1/patients", params={"q": "  "})
    assert len(response.json()) == 2


def test_get_patient(client, anna_payload):
    created = client.post("/api/v1/patients", json=anna_payload).json()

    response = client.get(f"/api/v1/patients/{created['id']}")
    assert response.status_code == 200
    assert response.json() == created


def test_get_patient_not_found(client):
    response = client.get("/api/v1/patients/999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Patient 999 not found"


def test_update_patient(client, anna_payload):
    created = client.post("/api/v1/patients", json=anna_payload).json()

    response = client.put(
        f"/api/v1/patients/{created['id']}",
        json={**anna_payload, "insurance_provider": "Helsana", "city": "Thun"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == created["id"]
    assert data["insurance_provider"] == "Helsana"

    stored = client.get(f"/api/v1/patients/{created['id']}").json()
    assert stored["city"] == "Thun"


def test_update_patient_invalid_gender(client, anna_payload):
    created = client.post("/api/v1/patients", json=anna_payload).json()

    response = client.put(f"/api/v1/patients/{created['id']}", json={**anna_payload, "gender": "F"})
    assert response.status_code == 422
    assert client.get(f"/api/v1/patients/{created['id']}").json()["gender"] == "W"


def test_update_patient_not_found(client, anna_payload):
    response = client.put("/api/v1/patients/4242", json=anna_payload)
    assert response.status_code == 404


def test_update_patient_id_zero_not_found(client, anna_payload):
    """The store never assigns 0, so it is an unknown patient, not a new one."""
    response = client.put("/api/v1/patients/0", json=anna_payload)
    assert response.status_code == 404
    assert response.json()["detail"] == "Patient 0 not found"
    assert client.get("/api/v1/patients").json() == []


def test_delete_patient(client, anna_payload):
    created = client.post("/api/v1/patients", json=anna_payload).json()

    response = client.delete(f"/api/v1/patients/{created['id']}")
    assert response.status_code == 204
    assert client.get(f"/api/v1/patients/{created['id']}").status_code == 404


def test_delete_patient_not_found(client):
    response = client.delete("/api/v1/patients/31")
    assert response.status_code == 404


def test_delete_patient_with_appointment_conflict(client, anna_payload, add_appointment):
    """Test a patient with appointments cannot be deleted."""
    created = client.post("/api/v1/patients", json=anna_payload).json()
    add_appointment(created["id"])

    response = client.delete(f"/api/v1/patients/{created['id']}")
    assert response.status_code == 409
    body = response.json()
    assert "cannot be deleted" in body["detail"]
    assert body["context"]["dependents"] == {"appointments": 1, "invoices": 0}

    assert client.get(f"/api/v1/patients/{created['id']}").status_code == 200


def test_patient_lifecycle(client, anna_payload):
    """Create Anna, switch her provider, delete her."""
    created = client.post("/api/v1/patients", json=anna_payload).json()
    patient_id = created["id"]
    assert patient_id > 0

    client.put(f"/api/v1/patients/{patient_id}", json={**anna_payload, "insurance_provider": "Helsana"})
    stored = client.get(f"/api/v1/patients/{patient_id}").json()
    assert stored["insurance_provider"] == "Helsana"
    assert stored["first_name"] == "Anna"
    assert stored["birth_date"] == "1990-05-01"

    assert client.delete(f"/api/v1/patients/{patient_id}").status_code == 204
    assert client.get("/api/v1/patients").json() == []
