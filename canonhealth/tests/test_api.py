from canonhealth.app.main import app


def login(client, role, email, name=None, health_card=None):
    body = {"role": role, "email": email, "name": name}
    if health_card is not None:
        body["healthCard"] = health_card
    response = client.post("/api/login", json=body)
    assert response.status_code == 200
    return response.json()


def request_access(client, doctor_id, card, reasons=None):
    return client.post(
        "/api/doctor/requests",
        json={"doctorId": doctor_id, "patientHealthCard": card, "reasons": reasons or []},
    )


def test_app_title():
    assert app.title == "Canon Health API"


def test_api_paths_published():
    paths = app.openapi()["paths"]
    assert {
        "/api/login",
        "/api/patient/documents",
        "/api/patient/requests",
        "/api/patient/requests/{request_id}/respond",
        "/api/doctor/requests",
        "/api/doctor/documents",
        "/api/documents/upload",
        "/audit/logs",
    }.issubset(paths)
    tags = {tag for ops in paths.values() for op in ops.values() for tag in op.get("tags", [])}
    assert {"auth", "patient", "doctor", "documents", "audit"}.issubset(tags)


def test_login_requires_role_and_email(client):
    response = client.post("/api/login", json={"role": "doctor"})
    assert response.status_code == 400
    assert response.json()["detail"] == "role and email are required"


def test_login_returns_camel_case_user(client):
    user = login(client, "patient", "pat@example.com", "Pat", "HC1")
    assert user["role"] == "patient"
    assert user["healthCard"] == "HC1"
    assert login(client, "patient", "PAT@example.com")["id"] == user["id"]


def test_request_for_unknown_health_card_is_rejected(client):
    doctor = login(client, "doctor", "d@example.com", "Dr. D")
    response = request_access(client, doctor["id"], "HC-NONE")
    assert response.status_code == 400
    assert response.json()["detail"] == "Patient with that health card does not exist yet"


def test_request_from_unknown_doctor_is_not_found(client):
    login(client, "patient", "pat@example.com", "Pat", "HC1")
    assert request_access(client, 999, "HC1").status_code == 404


def test_patient_upload_is_private(client):
    patient = login(client, "patient", "pat@example.com", "Pat", "HC1")
    upload = client.post(
        "/api/documents/upload",
        files={"file": ("report.pdf", b"%PDF-1.4", "application/pdf")},
        data={"ownerHealthCard": "HC1", "uploadedById": str(patient["id"])},
    )
    assert upload.status_code == 200
    assert upload.json()["ownerPatientId"] == patient["id"]

    docs = client.get("/api/patient/documents", params={"patientId": patient["id"]}).json()
    assert len(docs) == 1
    assert docs[0]["name"] == "report.pdf"
    assert docs[0]["uploadedByName"] == "Pat"
    assert docs[0]["sharingSummary"] == "Only you can view this."

    stored = client.get(docs[0]["url"])
    assert stored.status_code == 200
    assert stored.content == b"%PDF-1.4"


def test_upload_requires_file_and_known_card(client):
    patient = login(client, "patient", "pat@example.com", "Pat", "HC1")
    missing_file = client.post(
        "/api/documents/upload",
        data={"ownerHealthCard": "HC1", "uploadedById": str(patient["id"])},
    )
    assert missing_file.status_code == 400
    assert missing_file.json()["detail"] == "File is required"

    unknown_card = client.post(
        "/api/documents/upload",
        files={"file": ("a.txt", b"a", "text/plain")},
        data={"ownerHealthCard": "HC-X", "uploadedById": str(patient["id"])},
    )
    assert unknown_card.status_code == 400


def test_approval_unlocks_doctor_listing(client):
    patient = login(client, "patient", "pat@example.com", "Pat", "HC1")
    doctor = login(client, "doctor", "house@example.com", "Dr. House")
    client.post(
        "/api/documents/upload",
        files={"file": ("report.pdf", b"x", "application/pdf")},
        data={"ownerHealthCard": "HC1", "uploadedById": str(doctor["id"])},
    )
    params = {"doctorId": doctor["id"], "patientHealthCard": "HC1"}
    assert client.get("/api/doctor/documents", params=params).status_code == 403

    created = request_access(client, doctor["id"], "HC1", ["consult"]).json()
    response = client.post(
        f"/api/patient/requests/{created['id']}/respond",
        json={
            "approve": True,
            "accessType": "permanent",
            "permissions": {"view": True, "download": False},
        },
    )
    assert response.status_code == 200
    grant = response.json()
    assert grant["status"] == "approved"
    assert grant["accessType"] == "permanent"
    assert grant["permissions"]["download"] is False
    assert grant["durationHours"] is None

    for _ in range(2):
        listing = client.get("/api/doctor/documents", params=params)
        assert listing.status_code == 200
        assert [doc["name"] for doc in listing.json()] == ["report.pdf"]
        assert "sharingSummary" not in listing.json()[0]

    docs = client.get("/api/patient/documents", params={"patientId": patient["id"]}).json()
    assert docs[0]["sharingSummary"] == "Shared with Dr. House"


def test_denial_keeps_doctor_out(client):
    login(client, "patient", "pat@example.com", "Pat", "HC1")
    doctor = login(client, "doctor", "house@example.com", "Dr. House")
    created = request_access(client, doctor["id"], "HC1").json()

    denied = client.post(f"/api/patient/requests/{created['id']}/respond", json={"approve": False})
    assert denied.json()["status"] == "denied"
    again = client.post(f"/api/patient/requests/{created['id']}/respond", json={"approve": True})
    assert again.json()["status"] == "denied"

    listing = client.get(
        "/api/doctor/documents", params={"doctorId": doctor["id"], "patientHealthCard": "HC1"}
    )
    assert listing.status_code == 403
    assert listing.json()["detail"] == "No approved access for this patient"

    logs = client.get("/audit/logs", params={"actorId": str(doctor["id"])}).json()
    assert [log["allowed"] for log in logs] == [False]


def test_new_request_is_listed_as_pending(client):
    patient = login(client, "patient", "pat@example.com", "Pat", "HC1")
    doctor = login(client, "doctor", "house@example.com", "Dr. House")
    created = request_access(client, doctor["id"], "HC1", ["referral", "imaging_review"]).json()

    listed = client.get("/api/patient/requests", params={"patientId": patient["id"]}).json()

    assert listed == [
        {
            "id": created["id"],
            "doctorName": "Dr. House",
            "status": "pending",
            "reasons": ["referral", "imaging_review"],
            "createdAt": created["createdAt"],
            "decisionAt": None,
            "accessType": None,
            "permissions": None,
            "durationHours": None,
        }
    ]


def test_respond_to_unknown_request(client):
    response = client.post("/api/patient/requests/42/respond", json={"approve": True})
    assert response.status_code == 404


def test_missing_query_ids(client):
    assert client.get("/api/patient/documents").status_code == 400
    assert client.get("/api/patient/requests").status_code == 400
    assert client.get("/api/patient/requests", params={"patientId": 5}).status_code == 404
    assert client.get("/api/doctor/documents", params={"doctorId": 1}).status_code == 400


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_upload_with_directory_in_file_name(client):
    patient = login(client, "patient", "pat@example.com", "Pat", "HC1")
    upload = client.post(
        "/api/documents/upload",
        files={"file": ("a/b c.pdf", b"nested", "application/pdf")},
        data={"ownerHealthCard": "HC1", "uploadedById": str(patient["id"])},
    )
    assert upload.status_code == 200
    doc = upload.json()
    assert doc["storedLocation"].endswith("-b_c.pdf")
    assert "/" not in doc["storedLocation"]
    assert client.get(doc["url"]).content == b"nested"


def test_non_numeric_doctor_id_is_not_found(client):
    login(client, "patient", "pat@example.com", "Pat", "HC1")
    response = request_access(client, "abc", "HC1")
    assert response.status_code == 404
    assert response.json()["detail"] == "Doctor not found"


def test_numeric_health_card_is_accepted(client):
    response = client.post(
        "/api/login", json={"role": "patient", "email": "n@example.com", "healthCard": 12345}
    )
    assert response.status_code == 200
    assert response.json()["healthCard"] == "12345"

    doctor = login(client, "doctor", "house@example.com", "Dr. House")
    created = request_access(client, doctor["id"], 12345)
    assert created.status_code == 200
    assert created.json()["patientHealthCard"] == "12345"


def test_malformed_body_is_a_client_error(client):
    response = client.post("/api/patient/requests/1/respond", json={"approve": "maybe"})
    assert response.status_code == 400
    assert "approve" in response.json()["detail"]
