from datetime import datetime, timedelta


def parse_dt(value):
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def test_check_rejects_offset_beyond_deadline(api_client, fixed_now):
    payload = {
        "deadline": (fixed_now + timedelta(days=2)).isoformat(),
        "value": 3,
        "unit": "day",
    }
    response = api_client.post("/reminders/check", json=payload)
    assert response.status_code == 200
    data = response.json()
    assert data["addable"] is False
    assert data["offset_minutes"] == 4320
    assert data["max_offset_minutes"] == 2880
    assert data["message"] == "That reminder would be in the past. Latest allowed is 2 day(s) before."


def test_check_accepts_offset_that_fits(api_client, fixed_now):
    payload = {"deadline": (fixed_now + timedelta(days=2)).isoformat(), "value": 1, "unit": "day"}
    data = api_client.post("/reminders/check", json=payload).json()
    assert data["addable"] is True
    assert data["offset_minutes"] == 1440
    assert data["message"] is None


def test_check_uses_now_from_request(api_client, fixed_now):
    deadline = fixed_now + timedelta(days=2)
    payload = {
        "deadline": deadline.isoformat(),
        "offset_minutes": 1440,
        "now": (deadline - timedelta(hours=1)).isoformat(),
    }
    data = api_client.post("/reminders/check", json=payload).json()
    assert data["addable"] is False
    assert data["max_offset_minutes"] == 60


def test_check_without_deadline(api_client):
    data = api_client.post("/reminders/check", json={"offset_minutes": 60}).json()
    assert data["addable"] is False
    assert data["max_offset_minutes"] == 0
    assert data["message"] == "Set a deadline before adding reminders."


def test_check_rejects_unknown_unit(api_client):
    response = api_client.post("/reminders/check", json={"value": 1, "unit": "fortnight"})
    assert response.status_code == 422


def test_normalize_labels_offsets(api_client):
    response = api_client.post("/reminders/normalize", json={"offsets": [1440, "1440", 4320, -5, 10080]})
    assert response.status_code == 200
    offsets = response.json()["offsets"]
    assert [o["minutes"] for o in offsets] == [10080, 4320, 1440]
    assert [o["label"] for o in offsets] == ["7 day(s) before", "3 day(s) before", "1 day(s) before"]


def test_normalize_accepts_csv(api_client):
    offsets = api_client.post("/reminders/normalize", json={"offsets": "90,120"}).json()["offsets"]
    assert [(o["minutes"], o["label"]) for o in offsets] == [(120, "2 hour(s) before"), (90, "90 minute(s) before")]


def test_prune_after_deadline_moves_earlier(api_client, fixed_now):
    payload = {"offsets": [10080, 1440], "deadline": (fixed_now + timedelta(hours=12)).isoformat()}
    data = api_client.post("/reminders/prune", json=payload).json()
    assert data == {
        "kept": [],
        "dropped_count": 2,
        "notice": "2 reminder(s) removed because they would be in the past.",
    }


def test_preview_falls_back_to_defaults(api_client, fixed_now):
    deadline = fixed_now + timedelta(days=14)
    data = api_client.post("/reminders/preview", json={"offsets": [], "deadline": deadline.isoformat()}).json()
    assert data["using_defaults"] is True
    assert [r["minutes"] for r in data["reminders"]] == [10080, 4320, 1440]
    assert parse_dt(data["reminders"][0]["remind_at"]) == deadline - timedelta(days=7)


def test_preview_without_deadline_is_empty(api_client):
    data = api_client.post("/reminders/preview", json={"offsets": [60]}).json()
    assert data["using_defaults"] is False
    assert data["reminders"] == [{"minutes": 60, "label": "1 hour(s) before", "remind_at": None}]


def test_huge_offsets_do_not_break_the_endpoints(api_client, fixed_now):
    deadline = (fixed_now + timedelta(days=14)).isoformat()

    preview = api_client.post("/reminders/preview", json={"offsets": [10**10, 60], "deadline": deadline})
    assert preview.status_code == 200
    assert [r["minutes"] for r in preview.json()["reminders"]] == [60]

    normalized = api_client.post("/reminders/normalize", json={"offsets": [10**10, 60]})
    assert normalized.status_code == 200
    assert [o["minutes"] for o in normalized.json()["offsets"]] == [60]

    check = api_client.post("/reminders/check", json={"offset_minutes": 10**10, "deadline": deadline})
    assert check.status_code == 200
    assert check.json()["addable"] is False
