"""
Unit Tests for the rate resolver

Content labels are free text typed by talent managers; they must map to
the rate card columns deterministically.
"""

import pytest
from decimal import Decimal
from fastapi import HTTPException

from talentdesk.models import PartnerTarifOverride, Partner
from talentdesk.utils.tarifs import (
    ContentType, normalize_label, resolve_content_type,
    resolve_tarif, resolve_tarif_with_source, get_tarif_suggere
)


class TestNormalizeLabel:

    def test_strips_case_accents_and_separators(self):
        assert normalize_label("Vidéo TikTok") == "videotiktok"
        assert normalize_label("STORY_CONCOURS") == "storyconcours"
        assert normalize_label("  youtube-short ") == "youtubeshort"

    def test_empty_values(self):
        assert normalize_label(None) == ""
        assert normalize_label("   ") == ""


class TestResolveContentType:

    @pytest.mark.parametrize("label,expected", [
        ("STORY", ContentType.STORY),
        ("Story", ContentType.STORY),
        ("Vidéo TikTok", ContentType.TIKTOK_VIDEO),
        ("Story Concours", ContentType.STORY_CONCOURS),
    ])
    def test_exact_value_or_label(self, label, expected):
        assert resolve_content_type(label) == expected

    @pytest.mark.parametrize("label,expected", [
        ("story", ContentType.STORY),
        ("video tiktok", ContentType.TIKTOK_VIDEO),
        ("story_concours", ContentType.STORY_CONCOURS),
        ("Youtube Short", ContentType.YOUTUBE_SHORT),
        ("reel", ContentType.REEL),
    ])
    def test_normalized_equality(self, label, expected):
        assert resolve_content_type(label) == expected

    def test_substring_either_direction(self):
        assert resolve_content_type("Reel Instagram") == ContentType.REEL
        assert resolve_content_type("mini story") == ContentType.STORY
        assert resolve_content_type("TikTok") == ContentType.TIKTOK_VIDEO

    def test_longest_candidate_wins(self):
        """'Post Concours' contains 'Post' but is the more specific type."""
        assert resolve_content_type("Post Concours Noël") == ContentType.POST_CONCOURS
        assert resolve_content_type("story concours instagram") == ContentType.STORY_CONCOURS

    @pytest.mark.parametrize("label", [None, "", "   ", "Podcast"])
    def test_unmatched(self, label):
        assert resolve_content_type(label) is None


class TestResolveTarif:

    def test_override_wins_over_default(self):
        tarifs = {"tarif_story": Decimal("500")}
        override = {"tarif_story": Decimal("450")}
        assert resolve_tarif_with_source(ContentType.STORY, tarifs, override) == (Decimal("450"), "partner")

    def test_null_override_falls_back_to_default(self):
        tarifs = {"tarif_story": Decimal("500")}
        override = {"tarif_story": None, "tarif_post": Decimal("700")}
        assert resolve_tarif_with_source(ContentType.STORY, tarifs, override) == (Decimal("500"), "talent")

    def test_no_price_anywhere(self):
        assert resolve_tarif(ContentType.EVENT, {"tarif_story": Decimal("500")}) is None
        assert resolve_tarif(ContentType.EVENT, None, None) is None


class TestGetTarifSuggere:

    def test_talent_default(self, db, talent):
        result = get_tarif_suggere(db, talent.id, "reel")
        assert result == {"type_contenu": "REEL", "prix_unitaire": Decimal("1200"), "source": "talent"}

    def test_partner_override(self, db, talent):
        partner = Partner(nom="Agence Partenaire", slug="agence-partenaire")
        db.add(partner)
        db.flush()
        db.add(PartnerTarifOverride(partner_id=partner.id, talent_id=talent.id, tarif_reel=Decimal("1000")))
        db.commit()

        result = get_tarif_suggere(db, talent.id, "Reel", partner_id=partner.id)
        assert result["prix_unitaire"] == Decimal("1000")
        assert result["source"] == "partner"

        # Story is not overridden
        result = get_tarif_suggere(db, talent.id, "Story", partner_id=partner.id)
        assert result["prix_unitaire"] == Decimal("500")
        assert result["source"] == "talent"

    def test_unmatched_label(self, db, talent):
        result = get_tarif_suggere(db, talent.id, "Podcast")
        assert result == {"type_contenu": None, "prix_unitaire": None, "source": None}

    def test_unknown_talent(self, db):
        with pytest.raises(HTTPException) as exc:
            get_tarif_suggere(db, 999, "Story")
        assert exc.value.status_code == 404


class TestTarifSuggereEndpoint:

    def test_returns_suggestion(self, client, talent, tm, headers_for):
        response = client.get(
            f"/talents/{talent.id}/tarif-suggere",
            params={"type": "Post"},
            headers=headers_for(tm)
        )
        assert response.status_code == 200
        data = response.json()
        assert data["type_contenu"] == "POST"
        assert Decimal(data["prix_unitaire"]) == Decimal("800")
        assert data["source"] == "talent"
