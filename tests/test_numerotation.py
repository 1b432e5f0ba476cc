from talentdesk.utils.numerotation import generer_reference


class TestGenererReference:

    def test_sequential_per_type_and_year(self, db):
        assert generer_reference(db, "NEG", 2026) == "NEG-2026-0001"
        assert generer_reference(db, "NEG", 2026) == "NEG-2026-0002"
        assert generer_reference(db, "FACTURE", 2026) == "F-2026-0001"
        assert generer_reference(db, "DEVIS", 2026) == "D-2026-0001"
        assert generer_reference(db, "COLLAB", 2026) == "COL-2026-0001"

    def test_counter_restarts_each_year(self, db):
        generer_reference(db, "FACTURE", 2025)
        generer_reference(db, "FACTURE", 2025)
        assert generer_reference(db, "FACTURE", 2026) == "F-2026-0001"
        assert generer_reference(db, "FACTURE", 2025) == "F-2025-0003"
