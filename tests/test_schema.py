from app.db.schema import (
    append_log,
    empty_document,
    find_user,
    find_user_index,
    normalize,
    otp_entries,
)
from utils.constants import LOG_LIMIT


def test_normalize_empty_fills_defaults():
    assert normalize({}) == {
        "version": 5.1,
        "users": [],
        "products": [],
        "templates": [],
        "dealerNames": {"t1": "Dealer T1", "t2": "Dealer T2", "t3": "Dealer T3"},
        "brandLogoUrls": {},
        "logoUrl": "",
        "logs": [],
        "otps": {},
    }


def test_normalize_none_and_non_mapping_input():
    assert normalize(None) == empty_document()
    assert normalize() == empty_document()
    assert normalize(["not", "a", "document"]) == empty_document()


def test_normalize_replaces_null_fields():
    doc = normalize({"users": None, "logoUrl": None, "version": None})
    assert doc["users"] == []
    assert doc["logoUrl"] == ""
    assert doc["version"] == 5.1


def test_normalize_passes_present_fields_through_unchanged():
    raw = {
        "version": 4,
        "users": [{"email": 42}],
        "dealerNames": {"t1": "Gold"},
        "logoUrl": "",
        "otps": "garbage",
        "legacyField": {"keep": True},
    }
    doc = normalize(raw)
    assert doc["version"] == 4
    assert doc["users"] == [{"email": 42}]
    assert doc["dealerNames"] == {"t1": "Gold"}
    assert doc["otps"] == "garbage"
    assert doc["legacyField"] == {"keep": True}


def test_normalize_does_not_mutate_input():
    raw = {"users": []}
    normalize(raw)
    assert raw == {"users": []}


def test_normalize_is_idempotent():
    samples = [
        {},
        {"users": [{"email": "a@b.c"}], "logs": None},
        {"version": 6, "extra": [1, 2], "dealerNames": {}},
        normalize({"brandLogoUrls": {"acme": "https://x/logo.png"}}),
    ]
    for raw in samples:
        once = normalize(raw)
        assert normalize(once) == once


def test_default_containers_are_not_shared():
    first = empty_document()
    second = empty_document()
    first["users"].append({"email": "x"})
    first["dealerNames"]["t1"] = "Changed"
    assert second["users"] == []
    assert second["dealerNames"]["t1"] == "Dealer T1"


def test_append_log_prepends_newest():
    doc = empty_document()
    append_log(doc, "alice", "LOGIN", "first")
    entry = append_log(doc, "bob", "LOGIN", "second")
    assert doc["logs"][0] is entry
    assert [e["meta"] for e in doc["logs"]] == ["second", "first"]
    assert entry["ts"].endswith("Z")
    assert set(entry) == {"ts", "user", "action", "meta"}


def test_append_log_caps_at_limit_evicting_oldest():
    doc = empty_document()
    doc["logs"] = [
        {"ts": "t", "user": "u", "action": "A", "meta": str(i)}
        for i in range(LOG_LIMIT)
    ]
    append_log(doc, "u", "NEW", "newest")
    assert len(doc["logs"]) == LOG_LIMIT
    assert doc["logs"][0]["meta"] == "newest"
    assert doc["logs"][-1]["meta"] == str(LOG_LIMIT - 2)


def test_append_log_recovers_from_non_list_logs():
    doc = normalize({"logs": "broken"})
    append_log(doc, "u", "A")
    assert len(doc["logs"]) == 1


def test_find_user_is_case_insensitive():
    doc = normalize({"users": [{"email": "User@Example.com", "username": "u"}]})
    assert find_user(doc, "user@example.com")["username"] == "u"
    assert find_user_index(doc, "user@example.com") == 0
    assert find_user(doc, "other@example.com") is None


def test_find_user_skips_malformed_entries():
    doc = normalize({"users": ["nope", {"email": 7}, {"username": "no-email"}, {"email": "ok@x.io"}]})
    assert find_user_index(doc, "ok@x.io") == 3
    assert find_user_index(doc, "7") == -1


def test_otp_entries_replaces_non_object():
    doc = normalize({"otps": ["bad"]})
    entries = otp_entries(doc)
    assert entries == {}
    assert doc["otps"] is entries
