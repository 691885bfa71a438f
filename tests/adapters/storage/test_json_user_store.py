import json
import threading

import pytest

from localchat.adapters import storage_fs
from localchat.adapters.storage_fs import JsonUserStore, public_user
from localchat.kernel.errors import UserExists

# --- Fixtures ---

@pytest.fixture
def users_file(tmp_path):
    return tmp_path / "data" / "users.json"

@pytest.fixture
def store(users_file):
    return JsonUserStore(users_file, history_limit=3)

# --- Tests ---

def test_missing_file_is_an_empty_store(run, store, users_file):
    assert run(store.get_user("nobody")) is None
    assert not users_file.exists()

def test_create_user_persists_without_plain_password(run, store, users_file):
    user = run(store.create_user("ada", "s3cret", "ada@example.com"))

    saved = json.loads(users_file.read_text())
    assert saved[0]["id"] == user["id"]
    assert saved[0]["username"] == "ada"
    assert saved[0]["data"] == {"history": []}
    assert "s3cret" not in users_file.read_text()
    assert public_user(user) == {"id": user["id"], "username": "ada", "email": "ada@example.com"}

def test_duplicate_username(run, store):
    run(store.create_user("ada", "pw"))

    with pytest.raises(UserExists) as excinfo:
        run(store.create_user("ada", "other"))
    assert excinfo.value.field == "username"

def test_duplicate_email(run, store):
    run(store.create_user("ada", "pw", "a@example.com"))

    with pytest.raises(UserExists, match="email already registered"):
        run(store.create_user("bob", "pw", "a@example.com"))

def test_users_without_email_do_not_conflict(run, store):
    run(store.create_user("ada", "pw"))
    run(store.create_user("bob", "pw"))

def test_authenticate(run, store):
    user = run(store.create_user("ada", "pw"))

    assert run(store.authenticate("ada", "pw"))["id"] == user["id"]
    assert run(store.authenticate("ada", "wrong")) is None
    assert run(store.authenticate("nobody", "pw")) is None

def test_history_is_trimmed_to_limit(run, store):
    user = run(store.create_user("ada", "pw"))

    for i in range(5):
        run(store.append_history(user["id"], f"q{i}", f"a{i}"))

    history = run(store.get_history(user["id"]))
    assert [h["prompt"] for h in history] == ["q2", "q3", "q4"]
    assert history[-1]["reply"] == "a4"
    assert "t" in history[-1]

def test_history_for_unknown_user_is_ignored(run, store):
    run(store.append_history("ghost", "q", "a"))

    assert run(store.get_history("ghost")) == []

def test_malformed_file_propagates(run, store, users_file):
    users_file.parent.mkdir(parents=True)
    users_file.write_text("this is not json")

    with pytest.raises(json.JSONDecodeError):
        run(store.get_user("anyone"))

def test_no_temp_file_left_behind(run, store, users_file):
    run(store.create_user("ada", "pw"))

    assert [p.name for p in users_file.parent.iterdir()] == ["users.json"]

def test_password_hashing_runs_off_the_event_loop(run, store, mocker):
    threads = []

    def recording(fn):
        def wrapper(*args):
            threads.append(threading.current_thread())
            return fn(*args)
        return wrapper

    mocker.patch.object(storage_fs, "hash_password", recording(storage_fs.hash_password))
    mocker.patch.object(storage_fs, "verify_password", recording(storage_fs.verify_password))

    run(store.create_user("ada", "pw"))
    assert run(store.authenticate("ada", "pw")) is not None

    assert len(threads) == 2
    assert threading.main_thread() not in threads
