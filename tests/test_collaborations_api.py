import pytest
from decimal import Decimal

from talentdesk.models import Collaboration


@pytest.fixture
def collab_payload(talent, marque, billing):
    return {
        "talent_id": talent.id,
        "marque_id": marque.id,
        "source": "INBOUND",
        "description": "Campagne printemps",
        "livrables": [
            {"type_contenu": "Story", "quantite": 2, "prix_unitaire": "500"},
            {"type_contenu": "Post", "quantite": 1, "prix_unitaire": "800"},
        ],
        "billing": billing,
    }


@pytest.fixture
def collaboration(client, tm, headers_for, collab_payload):
    response = client.post("/collaborations", json=collab_payload, headers=headers_for(tm))
    assert response.status_code == 201, response.json()
    return response.json()


class TestCreateCollaboration:

    def test_amounts_are_computed(self, collaboration):
        assert collaboration["reference"].startswith("COL-")
        assert collaboration["statut"] == "NEGO"
        assert Decimal(collaboration["montant_brut"]) == Decimal("1800")
        assert Decimal(collaboration["commission_percent"]) == Decimal("20")
        assert Decimal(collaboration["commission_euros"]) == Decimal("360")
        assert Decimal(collaboration["montant_net"]) == Decimal("1440")
        assert collaboration["billing_raison_sociale"] == "Maison Verte SAS"
        assert len(collaboration["livrables"]) == 2

    def test_billing_is_required(self, client, tm, headers_for, collab_payload):
        payload = {**collab_payload, "billing": None}
        response = client.post("/collaborations", json=payload, headers=headers_for(tm))
        assert response.status_code == 400

    def test_incomplete_billing(self, client, tm, headers_for, collab_payload, billing):
        payload = {**collab_payload, "billing": {**billing, "ville": " "}}
        response = client.post("/collaborations", json=payload, headers=headers_for(tm))
        assert response.status_code == 400
        assert "ville" in response.json()["error"]

    def test_needs_a_valid_deliverable(self, client, tm, headers_for, collab_payload):
        payload = {**collab_payload, "livrables": [{"type_contenu": "Story", "quantite": 1}]}
        response = client.post("/collaborations", json=payload, headers=headers_for(tm))
        assert response.status_code == 400

    def test_invalid_deliverables_are_dropped(self, client, tm, headers_for, collab_payload):
        payload = {**collab_payload}
        payload["livrables"] = collab_payload["livrables"] + [{"type_contenu": "  ", "prix_unitaire": "100"}]
        response = client.post("/collaborations", json=payload, headers=headers_for(tm))
        assert len(response.json()["livrables"]) == 2

    def test_commission_out_of_range(self, client, tm, headers_for, collab_payload):
        response = client.post("/collaborations", json={**collab_payload, "commission_percent": "101"}, headers=headers_for(tm))
        assert response.status_code == 400

    def test_other_tm_cannot_create(self, client, other_tm, headers_for, collab_payload):
        response = client.post("/collaborations", json=collab_payload, headers=headers_for(other_tm))
        assert response.status_code == 403


class TestUpdateCollaboration:

    def test_put_recomputes_amounts(self, client, tm, headers_for, collaboration):
        response = client.put(f"/collaborations/{collaboration['id']}", json={
            "livrables": [{"type_contenu": "Reel", "quantite": 1, "prix_unitaire": "1200"}],
            "commission_percent": "25"
        }, headers=headers_for(tm))

        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["montant_brut"]) == Decimal("1200")
        assert Decimal(data["commission_euros"]) == Decimal("300")
        assert Decimal(data["montant_net"]) == Decimal("900")

    def test_put_keeps_snapshot_without_billing(self, client, tm, headers_for, collaboration):
        data = client.put(f"/collaborations/{collaboration['id']}", json={"description": "x"}, headers=headers_for(tm)).json()
        assert data["billing_ville"] == "Paris"
        assert Decimal(data["montant_brut"]) == Decimal("1800")

    def test_put_keeps_negotiated_gross_amount(self, client, tm, head_of, headers_for, talent, marque):
        nego = client.post("/negociations", json={
            "talent_id": talent.id,
            "marque_id": marque.id,
            "budget_final": "1000",
            "livrables": [{"type_contenu": "Story", "quantite": 2, "prix_final": "100"}],
        }, headers=headers_for(tm)).json()
        client.post(f"/negociations/{nego['id']}/soumettre", headers=headers_for(tm))
        validated = client.post(f"/negociations/{nego['id']}/valider", json={"action": "valider"}, headers=headers_for(head_of)).json()
        url = f"/collaborations/{validated['collaboration_id']}"
        assert Decimal(client.get(url, headers=headers_for(tm)).json()["montant_brut"]) == Decimal("1000")

        data = client.put(url, json={"description": "Correction du brief"}, headers=headers_for(tm)).json()
        assert data["description"] == "Correction du brief"
        assert Decimal(data["montant_brut"]) == Decimal("1000")
        assert Decimal(data["montant_net"]) == Decimal("800")

        # New commission applies to the stored gross amount
        data = client.put(url, json={"commission_percent": "10"}, headers=headers_for(tm)).json()
        assert Decimal(data["montant_brut"]) == Decimal("1000")
        assert Decimal(data["commission_euros"]) == Decimal("100")
        assert Decimal(data["montant_net"]) == Decimal("900")

    def test_explicit_gross_amount_wins(self, client, tm, headers_for, collaboration):
        data = client.put(f"/collaborations/{collaboration['id']}", json={
            "montant_brut": "2000",
            "livrables": [{"type_contenu": "Reel", "quantite": 1, "prix_unitaire": "1200"}],
        }, headers=headers_for(tm)).json()
        assert Decimal(data["montant_brut"]) == Decimal("2000")
        assert Decimal(data["commission_euros"]) == Decimal("400")
        assert len(data["livrables"]) == 1

    def test_active_invoice_freezes_billing_and_deliverables(self, client, tm, admin, headers_for, collaboration, billing):
        url = f"/collaborations/{collaboration['id']}"
        facture = client.post("/documents", json={
            "type": "FACTURE", "collaboration_id": collaboration["id"]
        }, headers=headers_for(tm)).json()

        response = client.put(url, json={"billing": {**billing, "raison_sociale": "Autre SA"}}, headers=headers_for(tm))
        assert response.status_code == 400
        assert facture["reference"] in response.json()["error"]
        response = client.put(url, json={
            "livrables": [{"type_contenu": "Reel", "quantite": 1, "prix_unitaire": "2500"}]
        }, headers=headers_for(tm))
        assert response.status_code == 400

        data = client.put(url, json={"description": "Notes internes"}, headers=headers_for(tm)).json()
        assert data["billing_raison_sociale"] == "Maison Verte SAS"
        assert Decimal(data["montant_brut"]) == Decimal("1800")

        client.post(f"/documents/{facture['id']}/annuler", json={"motif": "Erreur"}, headers=headers_for(admin))
        response = client.put(url, json={"billing": {**billing, "raison_sociale": "Autre SA"}}, headers=headers_for(tm))
        assert response.status_code == 200
        assert response.json()["billing_raison_sociale"] == "Autre SA"

    def test_lost_requires_reason(self, client, tm, headers_for, collaboration):
        url = f"/collaborations/{collaboration['id']}"
        assert client.patch(url, json={"statut": "PERDU"}, headers=headers_for(tm)).status_code == 400

        response = client.patch(url, json={"statut": "PERDU", "raison_perdu": "Budget coupé"}, headers=headers_for(tm))
        assert response.status_code == 200
        assert response.json()["statut"] == "PERDU"
        assert response.json()["raison_perdu"] == "Budget coupé"

    def test_published_gets_a_date(self, client, tm, headers_for, collaboration):
        response = client.patch(f"/collaborations/{collaboration['id']}", json={
            "statut": "PUBLIE", "lien_publication": "https://instagram.com/p/abc"
        }, headers=headers_for(tm))
        assert response.json()["date_publication"] is not None
        assert response.json()["lien_publication"] == "https://instagram.com/p/abc"


class TestListAndDelete:

    def test_tm_only_sees_own_talents(self, client, tm, other_tm, admin, headers_for, collaboration):
        assert len(client.get("/collaborations", headers=headers_for(tm)).json()) == 1
        assert client.get("/collaborations", headers=headers_for(other_tm)).json() == []
        assert len(client.get("/collaborations", headers=headers_for(admin)).json()) == 1
        assert client.get(f"/collaborations/{collaboration['id']}", headers=headers_for(other_tm)).status_code == 403

    def test_delete_blocked_by_active_document(self, db, client, tm, admin, headers_for, collaboration):
        document = client.post("/documents", json={
            "type": "DEVIS", "collaboration_id": collaboration["id"]
        }, headers=headers_for(tm)).json()

        url = f"/collaborations/{collaboration['id']}"
        assert client.delete(url, headers=headers_for(tm)).status_code == 400

        client.post(f"/documents/{document['id']}/annuler", json={"motif": "Erreur"}, headers=headers_for(admin))
        assert client.delete(url, headers=headers_for(tm)).status_code == 200
        assert db.query(Collaboration).count() == 0


class TestCommissionPreview:

    def test_from_amount(self, client, tm, headers_for):
        response = client.post("/collaborations/calculer-commission", json={
            "montant_brut": "1000", "commission_percent": "12.5"
        }, headers=headers_for(tm))
        data = response.json()
        assert Decimal(data["commission_euros"]) == Decimal("125.00")
        assert Decimal(data["montant_net"]) == Decimal("875.00")

    def test_from_deliverables_with_talent_rate(self, client, tm, headers_for, talent):
        response = client.post("/collaborations/calculer-commission", json={
            "livrables": [{"type_contenu": "Story", "quantite": 3, "prix_unitaire": "500"}],
            "talent_id": talent.id,
            "source": "OUTBOUND"
        }, headers=headers_for(tm))
        data = response.json()
        assert Decimal(data["montant_brut"]) == Decimal("1500")
        assert Decimal(data["commission_percent"]) == Decimal("30")
        assert Decimal(data["montant_net"]) == Decimal("1050")

    def test_nothing_to_compute(self, client, tm, headers_for):
        response = client.post("/collaborations/calculer-commission", json={}, headers=headers_for(tm))
        assert response.status_code == 400
