from app.core.config import settings

V = settings.app.version

CARDS = [
    {"question": "What is mitosis?", "answer": "Cell division"},
    {"question": "What is meiosis?", "answer": "Division producing gametes"},
]


def _create(client, name="Biology", cards=CARDS):
    res = client.post(f"/{V}/sets", json={"name": name, "cards": cards})
    assert res.status_code == 201, res.text
    return res.json()


def test_create_and_get_set(client):
    created = _create(client, name="  Biology  ")
    assert created["name"] == "Biology"
    assert [c["question"] for c in created["flashcards"]] == [
        "What is mitosis?",
        "What is meiosis?",
    ]
    assert [c["order_index"] for c in created["flashcards"]] == [0, 1]

    res = client.get(f"/{V}/sets/{created['id']}")
    assert res.status_code == 200
    assert res.json()["flashcards"] == created["flashcards"]


def test_list_sets_newest_first_with_counts(client):
    first = _create(client, name="First")
    second = _create(client, name="Second", cards=CARDS[:1])

    res = client.get(f"/{V}/sets")
    assert res.status_code == 200
    body = res.json()
    assert [s["id"] for s in body] == [second["id"], first["id"]]
    assert [s["card_count"] for s in body] == [1, 2]


def test_create_set_validation(client):
    res = client.post(f"/{V}/sets", json={"name": "   ", "cards": CARDS})
    assert res.status_code == 422
    res = client.post(f"/{V}/sets", json={"name": "Empty", "cards": []})
    assert res.status_code == 422
    res = client.post(
        f"/{V}/sets", json={"name": "Blank card", "cards": [{"question": "q", "answer": " "}]}
    )
    assert res.status_code == 422


def test_rename_set(client):
    created = _create(client)
    res = client.patch(f"/{V}/sets/{created['id']}", json={"name": "Cell biology"})
    assert res.status_code == 200
    assert res.json()["name"] == "Cell biology"
    assert client.get(f"/{V}/sets/{created['id']}").json()["name"] == "Cell biology"


def test_delete_set(client):
    created = _create(client)
    assert client.delete(f"/{V}/sets/{created['id']}").status_code == 204
    assert client.get(f"/{V}/sets/{created['id']}").status_code == 404
    assert client.delete(f"/{V}/sets/{created['id']}").status_code == 404


def test_missing_set_is_404(client):
    assert client.get(f"/{V}/sets/999").status_code == 404
    assert client.patch(f"/{V}/sets/999", json={"name": "x"}).status_code == 404
    res = client.post(f"/{V}/sets/999/cards", json={"cards": CARDS})
    assert res.status_code == 404


def test_add_cards_appends_in_order(client):
    created = _create(client)
    res = client.post(
        f"/{V}/sets/{created['id']}/cards",
        json={"cards": [{"question": "What is a gene?", "answer": "A DNA segment"}]},
    )
    assert res.status_code == 201
    assert res.json() == {"inserted": 1}

    cards = client.get(f"/{V}/sets/{created['id']}").json()["flashcards"]
    assert [c["order_index"] for c in cards] == [0, 1, 2]
    assert cards[-1]["question"] == "What is a gene?"


def test_update_and_delete_card(client):
    created = _create(client)
    card_id = created["flashcards"][0]["id"]

    res = client.patch(
        f"/{V}/sets/{created['id']}/cards/{card_id}",
        json={"question": "Define mitosis", "answer": "Division into two identical cells"},
    )
    assert res.status_code == 200
    assert res.json()["question"] == "Define mitosis"

    assert client.delete(f"/{V}/sets/{created['id']}/cards/{card_id}").status_code == 204
    remaining = client.get(f"/{V}/sets/{created['id']}").json()["flashcards"]
    assert [c["id"] for c in remaining] == [created["flashcards"][1]["id"]]
    assert client.delete(f"/{V}/sets/{created['id']}/cards/{card_id}").status_code == 404


def test_card_must_belong_to_the_set(client):
    one = _create(client, name="One")
    two = _create(client, name="Two")
    foreign_card = two["flashcards"][0]["id"]
    res = client.patch(
        f"/{V}/sets/{one['id']}/cards/{foreign_card}",
        json={"question": "q", "answer": "a"},
    )
    assert res.status_code == 404


def test_sets_are_private_to_their_owner(client, users, login_as):
    created = _create(client)
    card_id = created["flashcards"][0]["id"]

    login_as(users[1])
    assert client.get(f"/{V}/sets").json() == []
    assert client.get(f"/{V}/sets/{created['id']}").status_code == 404
    assert client.delete(f"/{V}/sets/{created['id']}").status_code == 404
    res = client.patch(
        f"/{V}/sets/{created['id']}/cards/{card_id}",
        json={"question": "hijacked", "answer": "yes"},
    )
    assert res.status_code == 404

    login_as(users[0])
    assert client.get(f"/{V}/sets/{created['id']}").json()["flashcards"][0]["question"] == (
        "What is mitosis?"
    )


def test_sets_require_authentication(app, client):
    from app.modules.auth import current_active_user

    del app.dependency_overrides[current_active_user]
    assert client.get(f"/{V}/sets").status_code == 401
