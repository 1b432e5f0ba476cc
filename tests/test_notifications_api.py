import pytest

from talentdesk.utils.notifications import notifier, notifier_reviewers


@pytest.fixture
def notifications(db, tm):
    for i in range(3):
        notifier(db, tm.id, "INFO", f"Titre {i}", "Message")
    db.commit()


class TestNotifications:

    def test_unread_count_and_read_all(self, client, tm, headers_for, notifications):
        assert client.get("/notifications/non-lues", headers=headers_for(tm)).json() == {"count": 3}

        response = client.post("/notifications/lire-tout", headers=headers_for(tm))
        assert response.json()["count"] == 3
        assert client.get("/notifications/non-lues", headers=headers_for(tm)).json() == {"count": 0}

    def test_mark_one_read(self, client, tm, headers_for, notifications):
        newest = client.get("/notifications", headers=headers_for(tm)).json()[0]
        assert newest["titre"] == "Titre 2"

        assert client.post(f"/notifications/{newest['id']}/lu", headers=headers_for(tm)).json()["lu"] is True
        unread = client.get("/notifications", params={"non_lues": True}, headers=headers_for(tm)).json()
        assert [n["titre"] for n in unread] == ["Titre 1", "Titre 0"]

    def test_cannot_read_others(self, client, other_tm, tm, headers_for, notifications):
        newest = client.get("/notifications", headers=headers_for(tm)).json()[0]
        assert client.post(f"/notifications/{newest['id']}/lu", headers=headers_for(other_tm)).status_code == 404

    def test_reviewers_exclude_author_and_inactive(self, db, admin, head_of, make_user):
        make_user("HEAD_OF_SALES", email="off@talentdesk.fr", actif=False)
        count = notifier_reviewers(db, "TEST", "Titre", "Message", exclude_user_id=admin.id)
        db.commit()

        assert count == 1
        assert [n.user_id for n in head_of.notifications] == [head_of.id]
