class TestMarques:

    def test_create_with_contacts(self, client, tm, headers_for):
        response = client.post("/marques", json={
            "nom": "Atelier Bleu",
            "contacts": [
                {"nom": "Durand", "principal": True},
                {"nom": "Leroy", "principal": True},
            ]
        }, headers=headers_for(tm))

        assert response.status_code == 201
        data = response.json()
        assert data["pays"] == "France"
        assert data["delai_paiement"] == 30
        assert [c["principal"] for c in data["contacts"]] == [True, False]

    def test_single_principal_contact(self, client, tm, headers_for, marque):
        url = f"/marques/{marque.id}/contacts"
        first = client.post(url, json={"nom": "Durand", "principal": True}, headers=headers_for(tm)).json()
        second = client.post(url, json={"nom": "Leroy", "principal": True}, headers=headers_for(tm)).json()

        contacts = client.get(f"/marques/{marque.id}", headers=headers_for(tm)).json()["contacts"]
        principals = {c["id"]: c["principal"] for c in contacts}
        assert principals == {first["id"]: False, second["id"]: True}

        client.put(f"{url}/{first['id']}", json={"nom": "Durand", "principal": True}, headers=headers_for(tm))
        contacts = client.get(f"/marques/{marque.id}", headers=headers_for(tm)).json()["contacts"]
        assert {c["id"]: c["principal"] for c in contacts} == {first["id"]: True, second["id"]: False}

    def test_delete_contact(self, client, tm, headers_for, marque):
        contact = client.post(f"/marques/{marque.id}/contacts", json={"nom": "Durand"}, headers=headers_for(tm)).json()
        assert client.delete(f"/marques/{marque.id}/contacts/{contact['id']}", headers=headers_for(tm)).status_code == 200
        assert client.delete(f"/marques/{marque.id}/contacts/{contact['id']}", headers=headers_for(tm)).status_code == 404

    def test_only_admin_deletes(self, client, tm, admin, headers_for, marque):
        assert client.delete(f"/marques/{marque.id}", headers=headers_for(tm)).status_code == 403
        assert client.delete(f"/marques/{marque.id}", headers=headers_for(admin)).status_code == 200
