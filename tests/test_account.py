def address(**overrides):
    body = {
        "name": "Asha",
        "phone": "9876500001",
        "addressLine1": "12 MG Road",
        "city": "Surat",
        "state": "Gujarat",
        "pincode": "395003",
    }
    body.update(overrides)
    return body


def test_default_address_moves(client, customer):
    headers = customer["headers"]
    first = client.post("/api/addresses", json=address(isDefault=True), headers=headers).json()
    second = client.post("/api/addresses", json=address(addressLine1="4 Ring Road"), headers=headers).json()
    assert second["isDefault"] is False

    res = client.put(f"/api/addresses/{second['id']}", json={"isDefault": True}, headers=headers)
    assert res.status_code == 200
    assert res.json()["isDefault"] is True

    listed = {a["id"]: a for a in client.get("/api/addresses", headers=headers).json()}
    assert listed[first["id"]]["isDefault"] is False
    assert listed[second["id"]]["isDefault"] is True


def test_new_default_address_clears_previous(client, customer):
    headers = customer["headers"]
    client.post("/api/addresses", json=address(isDefault=True), headers=headers)
    client.post("/api/addresses", json=address(addressLine1="4 Ring Road", isDefault=True), headers=headers)
    defaults = [a for a in client.get("/api/addresses", headers=headers).json() if a["isDefault"]]
    assert [a["addressLine1"] for a in defaults] == ["4 Ring Road"]


def test_delete_address(client, customer):
    created = client.post("/api/addresses", json=address(), headers=customer["headers"]).json()
    res = client.delete(f"/api/addresses/{created['id']}", headers=customer["headers"])
    assert res.status_code == 200
    again = client.delete(f"/api/addresses/{created['id']}", headers=customer["headers"])
    assert again.status_code == 404


def test_contact_form(client, admin_headers):
    res = client.post(
        "/api/contact",
        json={
            "name": "Nisha",
            "mobile": "9876500011",
            "email": "nisha@example.com",
            "subject": "Blouse stitching",
            "category": "Product enquiry",
        },
    )
    assert res.status_code == 201
    assert res.json()["submission"]["message"] == ""

    listed = client.get("/api/admin/contact", headers=admin_headers).json()
    assert [s["subject"] for s in listed] == ["Blouse stitching"]


def test_contact_form_requires_fields(client):
    res = client.post("/api/contact", json={"name": "Nisha", "email": "nisha@example.com"})
    assert res.status_code == 400
