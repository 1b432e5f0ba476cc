"""
End-to-end: a TM negotiates a deal, a Head Of validates it, the
collaboration is invoiced and paid.
"""

from decimal import Decimal


class TestDealToPayment:

    def test_negociation_to_paid_invoice(self, client, admin, head_of, tm, headers_for, talent, marque):
        tm_headers = headers_for(tm)
        reviewer_headers = headers_for(head_of)

        suggestion = client.get(f"/talents/{talent.id}/tarif-suggere", params={"type": "reel"}, headers=tm_headers).json()
        assert suggestion["type_contenu"] == "REEL"

        nego = client.post("/negociations", json={
            "talent_id": talent.id,
            "marque_id": marque.id,
            "brief": "Reel + stories",
            "livrables": [
                {"type_contenu": "Reel", "quantite": 1, "prix_souhaite": suggestion["prix_unitaire"]},
                {"type_contenu": "Story", "quantite": 3, "prix_demande": "450"},
            ],
        }, headers=tm_headers).json()

        client.post(f"/negociations/{nego['id']}/soumettre", headers=tm_headers)
        assert client.get("/notifications/non-lues", headers=reviewer_headers).json() == {"count": 1}

        client.post(f"/negociations/{nego['id']}/commentaires", json={"contenu": "OK pour 3 stories ?"}, headers=reviewer_headers)
        validated = client.post(f"/negociations/{nego['id']}/valider", json={"action": "valider"}, headers=reviewer_headers).json()
        assert validated["statut"] == "VALIDEE"

        collaboration = client.get(f"/collaborations/{validated['collaboration_id']}", headers=tm_headers).json()
        # 1200 + 3 x 450
        assert Decimal(collaboration["montant_brut"]) == Decimal("2550")
        assert Decimal(collaboration["montant_net"]) == Decimal("2040")

        facture = client.post("/documents", json={
            "type": "FACTURE", "collaboration_id": collaboration["id"], "po_client": "PO-778"
        }, headers=tm_headers).json()
        assert Decimal(facture["montant_ttc"]) == Decimal("3060")

        client.post(f"/documents/{facture['id']}/enregistrer", headers=tm_headers)
        client.post(f"/documents/{facture['id']}/envoyer", headers=reviewer_headers)
        paid = client.post(f"/documents/{facture['id']}/payer", json={}, headers=headers_for(admin)).json()
        assert paid["statut"] == "PAYE"

        collaboration = client.get(f"/collaborations/{collaboration['id']}", headers=tm_headers).json()
        assert collaboration["statut"] == "PAYE"
        assert [d["statut"] for d in collaboration["documents"]] == ["PAYE"]


class TestSnapshotFromValidationBody:

    def test_story_deal_uses_supplied_billing(self, db, client, head_of, tm, headers_for, talent, marque, billing):
        nego = client.post("/negociations", json={
            "talent_id": talent.id,
            "marque_id": marque.id,
            "source": "INBOUND",
            "livrables": [{"type_contenu": "STORY", "quantite": 2, "prix_souhaite": "100"}],
        }, headers=headers_for(tm)).json()
        client.post(f"/negociations/{nego['id']}/soumettre", headers=headers_for(tm))

        filiale = {**billing, "raison_sociale": "Maison Verte Benelux SA", "pays": "Belgique", "numero_tva": "BE0999999999"}
        validated = client.post(
            f"/negociations/{nego['id']}/valider",
            json={"action": "valider", "billing": filiale},
            headers=headers_for(head_of)
        ).json()

        collaboration = client.get(f"/collaborations/{validated['collaboration_id']}", headers=headers_for(tm)).json()
        assert Decimal(collaboration["montant_brut"]) == Decimal("200")
        assert Decimal(collaboration["commission_percent"]) == talent.commission_inbound
        assert Decimal(collaboration["commission_euros"]) == Decimal("40")
        assert Decimal(collaboration["montant_net"]) == Decimal("160")
        assert collaboration["billing_raison_sociale"] == "Maison Verte Benelux SA"
        assert collaboration["billing_pays"] == "Belgique"
        assert collaboration["billing_numero_tva"] == "BE0999999999"

        db.refresh(marque)
        assert marque.raison_sociale == "Maison Verte SAS"
        assert marque.pays == "France"
