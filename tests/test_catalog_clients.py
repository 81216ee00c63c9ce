from conftest import TUESDAY, WORKING_HOURS, next_weekday


def test_shop_is_missing_until_configured(api, staff_headers):
    response = api.get("/shop", headers=staff_headers)
    assert response.status_code == 500
    assert response.json()["code"] == "CONFIG_MISSING"


def test_admin_saves_shop_schedule(api, admin_headers, client_headers):
    payload = {"name": "Pet Shop Central", "workingHours": {"Monday": {"open": True, "start": "08:00", "end": "17:00"}}}
    response = api.put("/shop", json=payload, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["workingHours"]["monday"]["start"] == "08:00"

    fetched = api.get("/shop", headers=client_headers).json()
    assert fetched["name"] == "Pet Shop Central"

    payload["name"] = "Pet Shop Renomeado"
    second = api.put("/shop", json=payload, headers=admin_headers).json()
    assert second["id"] == response.json()["id"]
    assert second["name"] == "Pet Shop Renomeado"


def test_only_admins_save_the_shop(api, staff_headers):
    payload = {"name": "Pet Shop", "workingHours": WORKING_HOURS}
    assert api.put("/shop", json=payload, headers=staff_headers).status_code == 403


def test_invalid_schedules_are_rejected(api, admin_headers):
    for day in (
        {"open": True, "start": "18:00", "end": "09:00"},
        {"open": True, "start": "9h", "end": "18:00"},
        {"open": True},
    ):
        payload = {"name": "Pet Shop", "workingHours": {"monday": day}}
        response = api.put("/shop", json=payload, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_INPUT"

    payload = {"name": "Pet Shop", "workingHours": {"funday": {"open": False}}}
    assert api.put("/shop", json=payload, headers=admin_headers).status_code == 400


def test_service_catalog_crud(api, staff_headers, client_headers):
    created = api.post(
        "/services",
        json={"name": "Hidratacao", "duration": 45, "price": "35.50"},
        headers=staff_headers,
    )
    assert created.status_code == 201
    service = created.json()
    assert service["price"] == 35.5

    assert [s["name"] for s in api.get("/services", headers=client_headers).json()] == ["Hidratacao"]

    updated = api.put(f"/services/{service['id']}", json={"duration": 50}, headers=staff_headers).json()
    assert updated["duration"] == 50
    assert updated["name"] == "Hidratacao"

    assert api.delete(f"/services/{service['id']}", headers=staff_headers).status_code == 200
    assert api.get(f"/services/{service['id']}", headers=staff_headers).status_code == 404


def test_service_duration_must_be_positive(api, staff_headers):
    response = api.post("/services", json={"name": "Nada", "duration": 0, "price": 10}, headers=staff_headers)
    assert response.status_code == 400


def test_clients_cannot_edit_the_catalog(api, client_headers):
    response = api.post("/services", json={"name": "Banho", "duration": 30, "price": 10}, headers=client_headers)
    assert response.status_code == 403


def test_booked_service_cannot_be_deleted(api, shop, customer, pet, bath, staff_headers):
    api.post(
        "/appointments",
        json={
            "clientId": customer.id,
            "petId": pet.id,
            "serviceIds": [bath.id],
            "startTime": next_weekday(TUESDAY, 10).isoformat(),
        },
        headers=staff_headers,
    )
    response = api.delete(f"/services/{bath.id}", headers=staff_headers)
    assert response.status_code == 409


def book_slot(api, headers, customer, pet, service, start):
    return api.post(
        "/appointments",
        json={"clientId": customer.id, "petId": pet.id, "serviceIds": [service.id], "startTime": start.isoformat()},
        headers=headers,
    )


def test_booked_service_duration_is_locked(api, shop, customer, pet, bath, grooming, staff_headers):
    assert book_slot(api, staff_headers, customer, pet, bath, next_weekday(TUESDAY, 10)).status_code == 201
    assert book_slot(api, staff_headers, customer, pet, grooming, next_weekday(TUESDAY, 11)).status_code == 201

    # 90 minutes would push the 10:00 bath over the 11:00 grooming
    response = api.put(f"/services/{bath.id}", json={"duration": 90}, headers=staff_headers)
    assert response.status_code == 409
    assert response.json()["code"] == "CONFLICT"
    assert response.json()["field"] == "duration"
    assert api.get(f"/services/{bath.id}", headers=staff_headers).json()["duration"] == 60

    busy = api.get(
        "/appointments/busy", params={"date": next_weekday(TUESDAY, 10).date().isoformat()}, headers=staff_headers
    ).json()["busy"]
    assert [(b["start"], b["end"]) for b in busy] == [
        (next_weekday(TUESDAY, 10).isoformat(), next_weekday(TUESDAY, 11).isoformat()),
        (next_weekday(TUESDAY, 11).isoformat(), next_weekday(TUESDAY, 11, 30).isoformat()),
    ]


def test_booked_service_still_accepts_other_edits(api, shop, customer, pet, bath, staff_headers):
    book_slot(api, staff_headers, customer, pet, bath, next_weekday(TUESDAY, 10))

    response = api.put(f"/services/{bath.id}", json={"price": "55.00", "duration": 60}, headers=staff_headers)
    assert response.status_code == 200
    assert response.json()["price"] == 55.0


def test_duration_is_free_once_appointments_are_cancelled(api, shop, customer, pet, bath, staff_headers):
    appointment = book_slot(api, staff_headers, customer, pet, bath, next_weekday(TUESDAY, 10)).json()
    api.delete(f"/appointments/{appointment['id']}", headers=staff_headers)

    response = api.put(f"/services/{bath.id}", json={"duration": 90}, headers=staff_headers)
    assert response.status_code == 200
    assert response.json()["duration"] == 90


def test_client_crud_and_search(api, staff_headers):
    created = api.post(
        "/clients",
        json={"name": "Maria Souza", "phone": "(11) 91234-5678", "email": "Maria@Example.com"},
        headers=staff_headers,
    )
    assert created.status_code == 201
    client = created.json()
    assert client["phone"] == "11912345678"
    assert client["email"] == "maria@example.com"
    assert client["petCount"] == 0

    api.post("/clients", json={"name": "Joao Lima", "phone": "1133334444"}, headers=staff_headers)

    found = api.get("/clients", params={"search": "maria"}, headers=staff_headers).json()
    assert [c["id"] for c in found] == [client["id"]]

    updated = api.put(f"/clients/{client['id']}", json={"name": "Maria S. Souza"}, headers=staff_headers).json()
    assert updated["name"] == "Maria S. Souza"
    assert updated["phone"] == "11912345678"

    assert api.delete(f"/clients/{client['id']}", headers=staff_headers).status_code == 200
    assert api.get(f"/clients/{client['id']}", headers=staff_headers).json()["code"] == "CLIENT_NOT_FOUND"


def test_duplicate_client_email_is_rejected(api, staff_headers):
    payload = {"name": "Maria Souza", "phone": "11912345678", "email": "maria@example.com"}
    assert api.post("/clients", json=payload, headers=staff_headers).status_code == 201
    response = api.post("/clients", json=payload, headers=staff_headers)
    assert response.status_code == 409
    assert response.json()["code"] == "DUPLICATE"


def test_invalid_phone_is_rejected(api, staff_headers):
    response = api.post("/clients", json={"name": "Maria Souza", "phone": "123"}, headers=staff_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_INPUT"


def test_client_management_is_staff_only(api, client_headers):
    assert api.get("/clients", headers=client_headers).status_code == 403


def test_client_with_appointments_cannot_be_deleted(api, shop, customer, pet, bath, staff_headers):
    api.post(
        "/appointments",
        json={
            "clientId": customer.id,
            "petId": pet.id,
            "serviceIds": [bath.id],
            "startTime": next_weekday(TUESDAY, 10).isoformat(),
        },
        headers=staff_headers,
    )
    assert api.delete(f"/clients/{customer.id}", headers=staff_headers).status_code == 409


def test_pet_crud(api, customer, staff_headers):
    created = api.post(
        "/pets",
        json={"name": "Thor", "breed": "Labrador", "size": "GRANDE", "clientId": customer.id},
        headers=staff_headers,
    )
    assert created.status_code == 201
    pet = created.json()
    assert pet["clientName"] == customer.name

    listed = api.get("/pets", params={"clientId": customer.id}, headers=staff_headers).json()
    assert [p["id"] for p in listed] == [pet["id"]]

    updated = api.put(f"/pets/{pet['id']}", json={"size": "MEDIO"}, headers=staff_headers).json()
    assert updated["size"] == "MEDIO"

    assert api.delete(f"/pets/{pet['id']}", headers=staff_headers).status_code == 200
    assert api.get(f"/pets/{pet['id']}", headers=staff_headers).status_code == 404


def test_pet_needs_existing_owner_and_known_size(api, customer, staff_headers):
    response = api.post("/pets", json={"name": "Thor", "size": "GRANDE", "clientId": "nobody"}, headers=staff_headers)
    assert response.status_code == 404
    assert response.json()["code"] == "CLIENT_NOT_FOUND"

    response = api.post("/pets", json={"name": "Thor", "size": "ENORME", "clientId": customer.id}, headers=staff_headers)
    assert response.status_code == 400
