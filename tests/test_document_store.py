import pytest

from agenda.core.exceptions import EntityNotFoundException


def test_add_get_and_query(documents):
    a = documents.add("clients", {"name": "Ana", "salonId": "s1"})
    documents.add("clients", {"name": "Bia", "salonId": "s2"})

    assert documents.get("clients", a).data == {"name": "Ana", "salonId": "s1"}
    assert documents.get("clients", "missing") is None
    assert [d.get("name") for d in documents.query("clients", salonId="s1")] == ["Ana"]
    assert len(documents.query("clients")) == 2
    assert documents.query("schedules") == ()


def test_add_many_keeps_given_ids(documents):
    ids = documents.add_many("clients", [{"id": "local-1", "name": "Ana"}, {"name": "Bia"}])
    assert ids[0] == "local-1"
    assert documents.get("clients", "local-1").data == {"name": "Ana"}
    assert documents.get("clients", ids[1]) is not None


def test_set_replaces_or_merges(documents):
    documents.set("salons", "s1", {"name": "Salão", "ownerId": "u1"})
    documents.set("salons", "s1", {"document": "x"}, merge=True)
    assert documents.get("salons", "s1").data == {"name": "Salão", "ownerId": "u1", "document": "x"}

    documents.set("salons", "s1", {"name": "Outro"})
    assert documents.get("salons", "s1").data == {"name": "Outro"}


def test_update_merges_and_requires_existing(documents):
    doc_id = documents.add("clients", {"name": "Ana", "phone": "1"})
    documents.update("clients", doc_id, {"phone": "2"})
    assert documents.get("clients", doc_id).data == {"name": "Ana", "phone": "2"}

    with pytest.raises(EntityNotFoundException):
        documents.update("clients", "missing", {"phone": "3"})


def test_delete_missing_is_noop(documents):
    doc_id = documents.add("clients", {"name": "Ana"})
    documents.delete("clients", doc_id)
    documents.delete("clients", doc_id)
    assert documents.get("clients", doc_id) is None


def test_watch_delivers_initial_and_filtered_snapshots(documents):
    documents.add("clients", {"name": "Ana", "salonId": "s1"})
    received = []
    documents.watch("clients", {"salonId": "s1"}, received.append)

    documents.add("clients", {"name": "Bia", "salonId": "s1"})
    documents.add("clients", {"name": "Caio", "salonId": "s2"})

    assert [len(snap) for snap in received] == [1, 2, 2]
    assert {d.get("name") for d in received[-1]} == {"Ana", "Bia"}


def test_cancel_is_idempotent_and_stops_delivery(documents):
    received = []
    live = documents.watch("clients", {}, received.append)
    live.cancel()
    live.cancel()
    assert not live.active

    documents.add("clients", {"name": "Ana"})
    assert received == [()]


def test_listener_errors_do_not_break_writes(documents):
    calls = []

    def broken(snapshot):
        calls.append(snapshot)
        if len(calls) > 1:
            raise RuntimeError("boom")

    documents.watch("clients", {}, broken)
    doc_id = documents.add("clients", {"name": "Ana"})
    assert documents.get("clients", doc_id) is not None
    assert len(calls) == 2
