import json
import logging

import pytest

from geocache import config
from geocache.cli import main
from geocache.identity import commit


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def db(tmp_path):
    return str(tmp_path / "world.db")


def run(capsys, *argv):
    code = main(list(argv))
    captured = capsys.readouterr()
    return code, captured.out, captured.err


def create(capsys, db, key="oak-1", caller="alice-raw-id"):
    return run(
        capsys, "--db", db, "create", "--key", key, "--caller-id", caller,
        "--caller-name", "Alice", "--name", "Old Oak", "--description", "Under the roots",
        "--x", "5", "10", "--y", "5", "10", "--trackable", "brass coin",
    )


def test_create_and_read(capsys, db):
    code, out, _ = create(capsys, db)
    assert code == 0
    created = json.loads(out)
    assert created["name"] == "Old Oak"
    assert created["trackable"]["value"] == "brass coin"
    assert created["owner"]["commitment"] == commit("alice-raw-id", created["owner"]["salt"])

    code, out, _ = run(capsys, "--db", db, "read", "--key", "oak-1")
    assert code == 0
    assert json.loads(out) == created


def test_create_twice_fails(capsys, db):
    create(capsys, db)
    code, out, err = create(capsys, db, caller="bob-raw-id")
    assert code == 1
    assert out == ""
    assert "ALREADY_EXISTS" in err


def test_read_absent(capsys, db):
    code, _, err = run(capsys, "--db", db, "read", "--key", "nowhere")
    assert code == 1
    assert "NOT_FOUND" in err


def test_exists(capsys, db):
    _, out, _ = run(capsys, "--db", db, "exists", "--key", "oak-1")
    assert json.loads(out) == {"key": "oak-1", "exists": False}
    create(capsys, db)
    _, out, _ = run(capsys, "--db", db, "exists", "--key", "oak-1")
    assert json.loads(out) == {"key": "oak-1", "exists": True}


def test_update_and_move(capsys, db):
    create(capsys, db)
    code, out, _ = run(
        capsys, "--db", db, "update", "--key", "oak-1", "--caller-id", "alice-raw-id",
        "--name", "Hollow Oak",
    )
    assert code == 0
    assert json.loads(out)["name"] == "Hollow Oak"

    code, out, _ = run(
        capsys, "--db", db, "move", "--key", "oak-1", "--caller-id", "alice-raw-id",
        "--x", "7", "12", "--y", "-3", "3",
    )
    assert code == 0
    assert json.loads(out)["y_coord_range"] == [-3, 3]


def test_move_inverted_range(capsys, db):
    create(capsys, db)
    code, _, err = run(
        capsys, "--db", db, "move", "--key", "oak-1", "--caller-id", "alice-raw-id",
        "--x", "12", "7", "--y", "5", "10",
    )
    assert code == 1
    assert "INVALID_RANGE" in err


def test_visit(capsys, db):
    create(capsys, db)
    code, out, _ = run(
        capsys, "--db", db, "visit", "--key", "oak-1", "--caller-id", "bob-raw-id", "--at", "6", "6"
    )
    assert code == 0
    assert json.loads(out) == {"key": "oak-1", "status": "VISITED"}

    code, _, err = run(
        capsys, "--db", db, "visit", "--key", "oak-1", "--caller-id", "bob-raw-id", "--at", "10", "6"
    )
    assert code == 1
    assert "OUT_OF_RANGE" in err


def test_switch(capsys, db):
    _, out, _ = create(capsys, db)
    original = json.loads(out)["trackable"]

    code, out, _ = run(
        capsys, "--db", db, "switch", "--key", "oak-1",
        "--trackable-id", "t-pin", "--trackable-value", "enamel pin",
    )
    assert code == 0
    assert json.loads(out) == original


def test_reports_owner_only(capsys, db):
    create(capsys, db)
    code, _, _ = run(
        capsys, "--db", db, "report", "--key", "oak-1", "--caller-id", "bob-raw-id",
        "--message", "lid is cracked",
    )
    assert code == 0

    code, out, err = run(capsys, "--db", db, "reports", "--key", "oak-1", "--caller-id", "bob-raw-id")
    assert code == 1
    assert "NOT_OWNER" in err

    code, out, _ = run(capsys, "--db", db, "reports", "--key", "oak-1", "--caller-id", "alice-raw-id")
    assert code == 0
    assert [r["message"] for r in json.loads(out)] == ["lid is cracked"]


def test_delete(capsys, db):
    create(capsys, db)
    code, _, _ = run(capsys, "--db", db, "delete", "--key", "oak-1", "--caller-id", "bob-raw-id")
    assert code == 1

    code, out, _ = run(capsys, "--db", db, "delete", "--key", "oak-1", "--caller-id", "alice-raw-id")
    assert code == 0
    assert json.loads(out) == {"key": "oak-1", "status": "DELETED"}


def test_commit(capsys):
    code, out, _ = run(capsys, "commit", "--id", "123", "--salt", "123")
    assert code == 0
    assert json.loads(out) == {"salt": "123", "commitment": commit("123", "123")}


def test_missing_command():
    with pytest.raises(SystemExit):
        main([])


def test_seeded_runs_draw_fresh_values(capsys, db, monkeypatch):
    monkeypatch.setattr(config, "RANDOM_SEED", "replica-seed")

    a = json.loads(create(capsys, db, key="a")[1])
    b = json.loads(create(capsys, db, key="b")[1])
    assert a["owner"]["salt"] != b["owner"]["salt"]
    assert a["trackable"]["id"] != b["trackable"]["id"]

    for message in ["lid is cracked", "logbook full"]:
        run(capsys, "--db", db, "report", "--key", "a", "--caller-id", "bob-raw-id", "--message", message)
    _, out, _ = run(capsys, "--db", db, "reports", "--key", "a", "--caller-id", "alice-raw-id")
    ids = [r["id"] for r in json.loads(out)]
    assert len(set(ids)) == 2
    assert a["owner"]["salt"] not in ids


def test_seeded_replicas_agree_on_invocation_id(capsys, tmp_path, monkeypatch):
    monkeypatch.setattr(config, "RANDOM_SEED", "replica-seed")

    records = []
    for replica in ["one.db", "two.db"]:
        _, out, _ = run(
            capsys, "--db", str(tmp_path / replica), "--invocation-id", "tx-42",
            "create", "--key", "oak-1", "--caller-id", "alice-raw-id",
            "--name", "Old Oak", "--x", "5", "10", "--y", "5", "10", "--trackable", "coin",
        )
        records.append(json.loads(out))

    assert records[0] == records[1]
