from decimal import Decimal


class TestTalents:

    def test_create_with_rate_card(self, client, head_of, tm, headers_for):
        response = client.post("/talents", json={
            "prenom": "Lina",
            "nom": "Garcia",
            "manager_id": tm.id,
            "tarifs": {"tarif_story": "300", "tarif_tiktok_video": "900"}
        }, headers=headers_for(head_of))

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["commission_inbound"]) == Decimal("20")
        assert Decimal(data["tarifs"]["tarif_tiktok_video"]) == Decimal("900")
        assert data["tarifs"]["tarif_reel"] is None

    def test_commission_bounds(self, client, head_of, headers_for):
        response = client.post("/talents", json={
            "prenom": "Lina", "nom": "Garcia", "commission_inbound": "120"
        }, headers=headers_for(head_of))
        assert response.status_code == 422

    def test_tm_cannot_create(self, client, tm, headers_for):
        response = client.post("/talents", json={"prenom": "A", "nom": "B"}, headers=headers_for(tm))
        assert response.status_code == 403

    def test_tm_lists_own_talents(self, client, tm, other_tm, headers_for, talent):
        mine = client.get("/talents", headers=headers_for(tm)).json()
        assert mine["total"] == 1
        assert mine["items"][0]["id"] == talent.id
        assert client.get("/talents", headers=headers_for(other_tm)).json()["total"] == 0

    def test_manager_updates_talent(self, client, tm, other_tm, headers_for, talent):
        response = client.put(f"/talents/{talent.id}", json={"instagram": "@emma.l"}, headers=headers_for(tm))
        assert response.json()["instagram"] == "@emma.l"

        assert client.put(f"/talents/{talent.id}", json={"nom": "X"}, headers=headers_for(other_tm)).status_code == 403

    def test_rate_card_replacement(self, client, head_of, headers_for, talent):
        response = client.put(f"/talents/{talent.id}/tarifs", json={"tarif_story": "550"}, headers=headers_for(head_of))
        assert Decimal(response.json()["tarif_story"]) == Decimal("550")
        assert response.json()["tarif_post"] is None

    def test_unknown_content_type(self, client, tm, headers_for, talent):
        response = client.get(f"/talents/{talent.id}/tarif-suggere", params={"type": "Podcast"}, headers=headers_for(tm))
        assert response.json() == {"type_contenu": None, "prix_unitaire": None, "source": None}

    def test_delete_blocked_by_deals(self, client, admin, tm, headers_for, talent, marque):
        client.post("/negociations", json={"talent_id": talent.id, "marque_id": marque.id}, headers=headers_for(tm))
        assert client.delete(f"/talents/{talent.id}", headers=headers_for(admin)).status_code == 400
