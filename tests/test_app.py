import threading

import pytest

from xorwow import XorwowEngine, config
from xorwow.app import create_app


@pytest.fixture
def client():
    app = create_app(seed=0, subsequence=0, offset=0)
    app.config["TESTING"] = True
    return app.test_client()


def test_next_returns_hex_outputs(client):
    r = client.get("/next?count=3")
    assert r.status_code == 200
    assert r.get_json()["outputs"] == [format(v, "08x") for v in (3179217846, 1883133293, 2220552389)]


def test_next_default_count(client):
    assert len(client.get("/next").get_json()["outputs"]) == 1


@pytest.mark.parametrize("count", ["0", "abc", str(config.MAX_BATCH + 1)])
def test_next_rejects_bad_count(client, count):
    r = client.get(f"/next?count={count}")
    assert r.status_code == 400
    assert r.get_json()["ok"] is False


def test_skip(client):
    assert client.post("/skip", json={"offset": 63}).get_json() == {"ok": True}
    assert client.get("/next").get_json()["outputs"] == [format(3397024107, "08x")]


def test_skip_accepts_string_offsets(client):
    e = XorwowEngine(0, 0, 1 << 60)
    assert client.post("/skip", json={"offset": hex(1 << 60)}).status_code == 200
    assert client.get("/next").get_json()["outputs"] == [format(e.next(), "08x")]


def test_skip_subsequence(client):
    e = XorwowEngine(0, 3)
    client.post("/skip_subsequence", json={"subsequence": 3})
    assert client.get("/state").get_json()["x"] == e.x


@pytest.mark.parametrize("payload", [None, {}, {"offset": -1}, {"offset": "zz"}, {"offset": 1.5}, {"offset": True}])
def test_skip_rejects_bad_payload(client, payload):
    r = client.post("/skip", json=payload)
    assert r.status_code == 400
    assert r.get_json()["ok"] is False


def test_state(client):
    state = client.get("/state").get_json()
    e = XorwowEngine(0)
    assert state["x"] == e.x
    assert state["d"] == e.d
    assert bytes.fromhex(state["state"]) == e.to_bytes()


def test_validate(client):
    assert client.post("/validate", json={"candidate": "bd7f03b6"}).get_json()["ok"] is True
    r = client.post("/validate", json={"candidate": "0"}).get_json()
    assert r["ok"] is False
    assert r["expected"] == format(1883133293, "08x")


@pytest.mark.parametrize("payload", [None, {"candidate": "xyz"}, {"candidate": 5}])
def test_validate_rejects_bad_payload(client, payload):
    assert client.post("/validate", json=payload).status_code == 400


def test_reset(client):
    client.get("/next?count=10")
    assert client.post("/reset", json={"seed": 9, "subsequence": 1, "offset": 2}).get_json()["ok"]
    e = XorwowEngine(9, 1, 2)
    assert client.get("/next?count=2").get_json()["outputs"] == [format(e.next(), "08x") for _ in range(2)]


def test_reset_keeps_seed_by_default(client):
    client.post("/reset", json={"seed": 9})
    client.get("/next")
    client.post("/reset", json={})
    e = XorwowEngine(9)
    assert client.get("/next").get_json()["outputs"] == [format(e.next(), "08x")]


def test_reset_rejects_bad_values(client):
    assert client.post("/reset", json={"offset": -5}).status_code == 400


@pytest.mark.parametrize("path,body", [
    ("/skip", ["offset"]),
    ("/skip_subsequence", ["subsequence"]),
    ("/reset", ["seed"]),
    ("/reset", "seed"),
    ("/validate", ["candidate"]),
])
def test_non_object_bodies_rejected(client, path, body):
    r = client.post(path, json=body)
    assert r.status_code == 400
    assert r.get_json()["ok"] is False


def test_concurrent_requests_do_not_lose_steps():
    app = create_app(seed=0)
    errors = []

    def pull():
        try:
            c = app.test_client()
            for _ in range(20):
                c.get("/next?count=5")
                c.post("/skip", json={"offset": 1})
        except Exception as e:  # surfaced through the assertion below
            errors.append(e)

    threads = [threading.Thread(target=pull) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert not errors

    # 4 threads x 20 rounds x (5 outputs + 1 skipped)
    e = XorwowEngine(0, 0, 4 * 20 * 6)
    assert app.test_client().get("/state").get_json()["x"] == e.x
