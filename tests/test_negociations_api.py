"""
API Tests for the negotiation workflow

BROUILLON -> EN_ATTENTE -> (EN_DISCUSSION) -> VALIDEE | REFUSEE, with
edits, comments and the conversion into a collaboration.
"""

import pytest
from decimal import Decimal

from talentdesk.models import Collaboration, Marque, Notification, Negociation


@pytest.fixture
def nego_payload(talent, marque):
    return {
        "talent_id": talent.id,
        "marque_id": marque.id,
        "source": "INBOUND",
        "brief": "Lancement collection été",
        "budget_marque": "2000",
        "livrables": [
            {"type_contenu": "Story", "quantite": 2, "prix_demande": "600", "prix_final": "500"},
            {"type_contenu": "Post", "quantite": 1, "prix_demande": "900", "prix_souhaite": "800"},
        ],
    }


@pytest.fixture
def create_nego(client, tm, headers_for, nego_payload):
    def _create(user=None, **overrides):
        payload = {**nego_payload, **overrides}
        response = client.post("/negociations", json=payload, headers=headers_for(user or tm))
        assert response.status_code == 201, response.json()
        return response.json()
    return _create


@pytest.fixture
def submitted_nego(client, tm, headers_for, create_nego):
    nego = create_nego()
    response = client.post(f"/negociations/{nego['id']}/soumettre", headers=headers_for(tm))
    assert response.status_code == 200
    return response.json()


class TestCreateNegociation:

    def test_creates_draft_with_reference(self, create_nego, tm):
        nego = create_nego()
        assert nego["statut"] == "BROUILLON"
        assert nego["tm_id"] == tm.id
        assert nego["reference"].startswith("NEG-")
        assert nego["reference"].endswith("-0001")
        assert len(nego["livrables"]) == 2

    def test_brand_by_free_text(self, create_nego):
        nego = create_nego(marque_id=None, nom_marque_saisi="  Nouvelle Marque ")
        assert nego["marque_id"] is None
        assert nego["nom_marque_saisi"] == "Nouvelle Marque"

    def test_brand_is_required(self, client, tm, headers_for, nego_payload):
        payload = {**nego_payload, "marque_id": None, "nom_marque_saisi": "  "}
        response = client.post("/negociations", json=payload, headers=headers_for(tm))
        assert response.status_code == 400

    def test_unknown_talent(self, client, tm, headers_for, nego_payload):
        response = client.post("/negociations", json={**nego_payload, "talent_id": 999}, headers=headers_for(tm))
        assert response.status_code == 404

    def test_tm_lists_only_own(self, client, tm, other_tm, headers_for, create_nego, admin):
        create_nego()
        create_nego(user=other_tm)

        own = client.get("/negociations", headers=headers_for(tm)).json()
        assert [nego["tm_id"] for nego in own] == [tm.id]

        everything = client.get("/negociations", headers=headers_for(admin)).json()
        assert len(everything) == 2

        filtered = client.get("/negociations", params={"tm_id": other_tm.id}, headers=headers_for(admin)).json()
        assert [nego["tm_id"] for nego in filtered] == [other_tm.id]


class TestSubmit:

    def test_submit_notifies_reviewers(self, db, admin, head_of, submitted_nego):
        assert submitted_nego["statut"] == "EN_ATTENTE"
        assert submitted_nego["date_submitted"] is not None

        notified = {n.user_id for n in db.query(Notification).filter(Notification.type == "NEGO_SOUMISE")}
        assert notified == {admin.id, head_of.id}

    def test_submit_without_valid_deliverable(self, client, tm, headers_for, create_nego):
        nego = create_nego(livrables=[{"type_contenu": "Story", "quantite": 1}])
        response = client.post(f"/negociations/{nego['id']}/soumettre", headers=headers_for(tm))
        assert response.status_code == 400

    def test_only_owner_submits(self, client, other_tm, headers_for, create_nego):
        nego = create_nego()
        response = client.post(f"/negociations/{nego['id']}/soumettre", headers=headers_for(other_tm))
        assert response.status_code == 403


class TestEditAndComments:

    def test_reviewer_comment_opens_discussion(self, client, head_of, headers_for, submitted_nego):
        response = client.post(
            f"/negociations/{submitted_nego['id']}/commentaires",
            json={"contenu": "Peux-tu remonter le prix de la story ?"},
            headers=headers_for(head_of)
        )
        assert response.status_code == 201

        nego = client.get(f"/negociations/{submitted_nego['id']}", headers=headers_for(head_of)).json()
        assert nego["statut"] == "EN_DISCUSSION"
        assert len(nego["commentaires"]) == 1

    def test_owner_comment_keeps_status(self, client, tm, headers_for, submitted_nego):
        client.post(f"/negociations/{submitted_nego['id']}/commentaires", json={"contenu": "Relance faite"}, headers=headers_for(tm))
        nego = client.get(f"/negociations/{submitted_nego['id']}", headers=headers_for(tm)).json()
        assert nego["statut"] == "EN_ATTENTE"

    def test_blank_comment(self, client, tm, headers_for, submitted_nego):
        response = client.post(f"/negociations/{submitted_nego['id']}/commentaires", json={"contenu": "  "}, headers=headers_for(tm))
        assert response.status_code == 400

    def test_edit_pending_flags_modification(self, db, client, tm, head_of, headers_for, submitted_nego):
        response = client.put(
            f"/negociations/{submitted_nego['id']}",
            json={"budget_souhaite": "1900", "livrables": [{"type_contenu": "Reel", "quantite": 1, "prix_final": "1200"}]},
            headers=headers_for(tm)
        )
        assert response.status_code == 200
        nego = response.json()
        assert nego["statut"] == "EN_ATTENTE"
        assert nego["modified_since_review"] is True
        assert [l["type_contenu"] for l in nego["livrables"]] == ["Reel"]
        assert [c["contenu"] for c in nego["commentaires"]] == ["Négociation mise à jour"]
        assert db.query(Notification).filter(Notification.type == "NEGO_MODIFIEE", Notification.user_id == head_of.id).count() == 1

        seen = client.post(f"/negociations/{submitted_nego['id']}/marquer-vu", headers=headers_for(head_of)).json()
        assert seen["modified_since_review"] is False
        assert seen["reviewed_at"] is not None

    def test_edit_refused_reopens_draft(self, client, tm, head_of, headers_for, submitted_nego):
        refused = client.post(
            f"/negociations/{submitted_nego['id']}/valider",
            json={"action": "refuser", "raison_refus": "Budget trop bas"},
            headers=headers_for(head_of)
        ).json()
        assert refused["statut"] == "REFUSEE"
        assert refused["raison_refus"] == "Budget trop bas"

        reopened = client.put(f"/negociations/{submitted_nego['id']}", json={"budget_marque": "2500"}, headers=headers_for(tm)).json()
        assert reopened["statut"] == "BROUILLON"
        assert reopened["raison_refus"] is None
        assert reopened["modified_since_review"] is False
        assert "rouverte" in reopened["commentaires"][-1]["contenu"]

    def test_other_tm_cannot_edit(self, client, other_tm, headers_for, create_nego):
        nego = create_nego()
        response = client.put(f"/negociations/{nego['id']}", json={"brief": "x"}, headers=headers_for(other_tm))
        assert response.status_code == 403

    def test_cancelled_is_not_editable(self, client, tm, headers_for, create_nego):
        nego = create_nego()
        assert client.post(f"/negociations/{nego['id']}/annuler", headers=headers_for(tm)).json()["statut"] == "ANNULEE"
        response = client.put(f"/negociations/{nego['id']}", json={"brief": "x"}, headers=headers_for(tm))
        assert response.status_code == 400


class TestValidation:

    def test_validation_creates_collaboration(self, db, client, head_of, headers_for, submitted_nego, marque):
        response = client.post(
            f"/negociations/{submitted_nego['id']}/valider",
            json={"action": "valider"},
            headers=headers_for(head_of)
        )
        assert response.status_code == 200
        nego = response.json()
        assert nego["statut"] == "VALIDEE"
        assert nego["valide_par"] == head_of.id
        assert nego["collaboration_id"] is not None

        collaboration = db.query(Collaboration).filter(Collaboration.id == nego["collaboration_id"]).one()
        # 2 x 500 (final) + 1 x 800 (souhaité)
        assert collaboration.montant_brut == Decimal("1800")
        assert collaboration.commission_percent == Decimal("20")
        assert collaboration.commission_euros == Decimal("360")
        assert collaboration.montant_net == Decimal("1440")
        assert collaboration.statut == "GAGNE"
        assert collaboration.reference.startswith("COL-")
        assert [(l.type_contenu, l.prix_unitaire) for l in collaboration.livrables] == [
            ("Story", Decimal("500")), ("Post", Decimal("800"))
        ]
        assert collaboration.billing_raison_sociale == marque.raison_sociale
        assert Decimal(nego["budget_final"]) == Decimal("1800")

    def test_budget_final_takes_precedence(self, db, client, tm, head_of, headers_for, create_nego):
        nego = create_nego(budget_final="2500", source="OUTBOUND")
        client.post(f"/negociations/{nego['id']}/soumettre", headers=headers_for(tm))

        validated = client.post(f"/negociations/{nego['id']}/valider", json={"action": "valider"}, headers=headers_for(head_of)).json()

        collaboration = db.query(Collaboration).filter(Collaboration.id == validated["collaboration_id"]).one()
        assert collaboration.montant_brut == Decimal("2500")
        assert collaboration.commission_percent == Decimal("30")
        assert collaboration.montant_net == Decimal("1750")

    def test_commission_override(self, db, client, head_of, headers_for, submitted_nego):
        validated = client.post(
            f"/negociations/{submitted_nego['id']}/valider",
            json={"action": "valider", "commission_percent": "15"},
            headers=headers_for(head_of)
        ).json()
        collaboration = db.query(Collaboration).filter(Collaboration.id == validated["collaboration_id"]).one()
        assert collaboration.commission_euros == Decimal("270")

    def test_double_validation_is_rejected(self, db, client, head_of, headers_for, submitted_nego):
        url = f"/negociations/{submitted_nego['id']}/valider"
        assert client.post(url, json={"action": "valider"}, headers=headers_for(head_of)).status_code == 200

        response = client.post(url, json={"action": "valider"}, headers=headers_for(head_of))
        assert response.status_code == 400
        assert db.query(Collaboration).count() == 1

    def test_validated_cannot_be_deleted(self, client, tm, head_of, headers_for, submitted_nego):
        client.post(f"/negociations/{submitted_nego['id']}/valider", json={"action": "valider"}, headers=headers_for(head_of))
        response = client.delete(f"/negociations/{submitted_nego['id']}", headers=headers_for(tm))
        assert response.status_code == 400

    def test_draft_can_be_deleted(self, db, client, tm, headers_for, create_nego):
        nego = create_nego()
        assert client.delete(f"/negociations/{nego['id']}", headers=headers_for(tm)).status_code == 200
        assert db.query(Negociation).count() == 0

    def test_tm_cannot_validate(self, client, tm, headers_for, submitted_nego):
        response = client.post(f"/negociations/{submitted_nego['id']}/valider", json={"action": "valider"}, headers=headers_for(tm))
        assert response.status_code == 403

    def test_draft_cannot_be_validated(self, client, head_of, headers_for, create_nego):
        nego = create_nego()
        response = client.post(f"/negociations/{nego['id']}/valider", json={"action": "valider"}, headers=headers_for(head_of))
        assert response.status_code == 400

    def test_free_text_brand_is_created_with_body_billing(self, db, client, tm, head_of, headers_for, create_nego, billing):
        nego = create_nego(marque_id=None, nom_marque_saisi="Nouvelle Marque")
        client.post(f"/negociations/{nego['id']}/soumettre", headers=headers_for(tm))

        validated = client.post(
            f"/negociations/{nego['id']}/valider",
            json={"action": "valider", "billing": {**billing, "raison_sociale": "Nouvelle Marque SARL"}},
            headers=headers_for(head_of)
        ).json()

        marque = db.query(Marque).filter(Marque.nom == "Nouvelle Marque").one()
        assert validated["marque_id"] == marque.id
        collaboration = db.query(Collaboration).filter(Collaboration.id == validated["collaboration_id"]).one()
        assert collaboration.marque_id == marque.id
        assert collaboration.billing_raison_sociale == "Nouvelle Marque SARL"

    def test_incomplete_billing_is_rejected(self, db, client, tm, head_of, headers_for, create_nego):
        nego = create_nego(marque_id=None, nom_marque_saisi="Sans Adresse")
        client.post(f"/negociations/{nego['id']}/soumettre", headers=headers_for(tm))

        response = client.post(f"/negociations/{nego['id']}/valider", json={"action": "valider"}, headers=headers_for(head_of))

        assert response.status_code == 400
        assert db.query(Collaboration).count() == 0
        assert db.query(Marque).filter(Marque.nom == "Sans Adresse").count() == 0

    def test_modified_flag_does_not_block_validation(self, client, tm, head_of, headers_for, submitted_nego):
        client.put(f"/negociations/{submitted_nego['id']}", json={"brief": "Nouveau brief"}, headers=headers_for(tm))
        response = client.post(f"/negociations/{submitted_nego['id']}/valider", json={"action": "valider"}, headers=headers_for(head_of))
        assert response.status_code == 200
        assert response.json()["modified_since_review"] is False
