import json
import os

from invoice_desk.storage.session import Anonymous, AuthSession, Authenticated, MemoryTokenStore, TokenStore


def test_token_round_trip(tmp_path):
    path = tmp_path / "nested" / "session.json"
    store = TokenStore(path)
    assert store.load() is None

    store.save("abc")
    assert json.loads(path.read_text(encoding="utf-8")) == {"accessToken": "abc"}
    assert TokenStore(path).load() == "abc"

    store.clear()
    assert store.load() is None


def test_legacy_key_is_read_and_replaced(tmp_path):
    path = tmp_path / "session.json"
    path.write_text(json.dumps({"token": "old", "theme": "dark"}), encoding="utf-8")
    store = TokenStore(path)
    assert store.load() == "old"

    store.save("new")
    assert json.loads(path.read_text(encoding="utf-8")) == {"theme": "dark", "accessToken": "new"}


def test_corrupt_file_means_no_token(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json", encoding="utf-8")
    assert TokenStore(path).load() is None


def test_session_states(tmp_path):
    session = AuthSession(TokenStore(tmp_path / "s.json"))
    assert isinstance(session.state, Anonymous)

    session.sign_in("s3cr3t-xyz")
    assert session.state == Authenticated("s3cr3t-xyz")
    assert "s3cr3t-xyz" not in repr(session.state)
    assert session.require_token() == "s3cr3t-xyz"

    session.expire()
    assert isinstance(session.state, Anonymous)
    assert session.state.reason
    assert TokenStore(tmp_path / "s.json").load() is None


def test_memory_store_is_a_full_token_store():
    store = MemoryTokenStore("abc")
    assert str(store.path) == os.devnull
    assert store.load() == "abc"

    store.clear()
    assert store.load() is None
    store.save("def")
    assert AuthSession(store).require_token() == "def"
