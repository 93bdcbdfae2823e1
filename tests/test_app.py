"""
Flask 블루프린트 테스트 (MemoryStorage TinyDB)
"""

from app import create_app, load_config


class TestConfig:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("ZKR1CS_DB_PATH", raising=False)
        monkeypatch.delenv("ZKR1CS_MEMORY_DB", raising=False)
        config = load_config()
        assert config["ZKR1CS_DB_PATH"] == "db.json"
        assert config["ZKR1CS_MEMORY_DB"] is False

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("ZKR1CS_MEMORY_DB", "1")
        monkeypatch.setenv("ZKR1CS_DB_PATH", "other.json")
        config = load_config()
        assert config["ZKR1CS_MEMORY_DB"] is True
        assert config["ZKR1CS_DB_PATH"] == "other.json"

    def test_explicit_override_wins(self, monkeypatch):
        monkeypatch.setenv("ZKR1CS_MEMORY_DB", "1")
        assert load_config({"ZKR1CS_MEMORY_DB": False})["ZKR1CS_MEMORY_DB"] is False

    def test_file_storage(self, tmp_path):
        path = tmp_path / "db.json"
        app = create_app({"ZKR1CS_DB_PATH": str(path), "ZKR1CS_MEMORY_DB": False})
        client = app.test_client()
        assert client.post("/r1cs/circuits/addition/prove", json={}).status_code == 201
        assert path.exists()


class TestCircuits:
    def test_index_redirects(self, client):
        resp = client.get("/")
        assert resp.status_code == 302
        assert resp.headers["Location"].endswith("/r1cs/circuits")

    def test_list(self, client):
        names = {c["name"] for c in client.get("/r1cs/circuits").get_json()}
        assert names == {"addition", "multiplication", "cubic", "age_over_18", "merkle_membership"}

    def test_detail(self, client):
        data = client.get("/r1cs/circuits/cubic").get_json()
        assert data["num_wires"] == 7
        assert data["wires"] == {"x": 1, "k": 2, "out": 6}
        assert len(data["gates"]) == 4
        assert len(data["r1cs"]["constraints"]) == 3
        assert data["defaults"] == {"x": "3", "k": "5"}

    def test_detail_unknown(self, client):
        assert client.get("/r1cs/circuits/nope").status_code == 404

    def test_detail_unknown_hash(self, client):
        resp = client.get("/r1cs/circuits/cubic?hash=md5")
        assert resp.status_code == 400
        assert "error" in resp.get_json()


class TestProofs:
    def _prove(self, client, name, body=None):
        resp = client.post(f"/r1cs/circuits/{name}/prove", json=body or {})
        assert resp.status_code == 201
        return resp.get_json()

    def test_prove_and_verify(self, client):
        created = self._prove(client, "cubic")
        assert created["public_inputs"] == {"2": "5"}
        assert created["outputs"] == {"6": "35"}

        record = client.get(f"/r1cs/proofs/{created['id']}").get_json()
        assert record["circuit"] == "cubic"
        assert record["verification"] is None

        result = client.post(f"/r1cs/proofs/{created['id']}/verify").get_json()
        assert result == {"result": "Satisfied", "index": None, "reason": None}

        record = client.get(f"/r1cs/proofs/{created['id']}").get_json()
        assert record["verification"]["result"] == "Satisfied"

    def test_age_under_18(self, client):
        created = self._prove(client, "age_over_18", {"inputs": {"age": 18}})
        result = client.post(f"/r1cs/proofs/{created['id']}/verify").get_json()
        assert result["result"] == "Violated"

    def test_merkle_with_sha256(self, client):
        created = self._prove(client, "merkle_membership", {"hash": "sha256"})
        result = client.post(f"/r1cs/proofs/{created['id']}/verify").get_json()
        assert result["result"] == "Satisfied"

    def test_verify_with_other_public_input(self, client):
        created = self._prove(client, "cubic")
        result = client.post(f"/r1cs/proofs/{created['id']}/verify",
                             json={"public_inputs": {"2": "6"}}).get_json()
        assert result["result"] == "Violated"
        assert result["index"] is None

    def test_unknown_input_name(self, client):
        resp = client.post("/r1cs/circuits/cubic/prove", json={"inputs": {"y": 1}})
        assert resp.status_code == 400

    def test_non_object_body(self, client):
        resp = client.post("/r1cs/circuits/age_over_18/prove", json=[1, 2])
        assert resp.status_code == 400
        assert "error" in resp.get_json()

        created = self._prove(client, "cubic")
        resp = client.post(f"/r1cs/proofs/{created['id']}/verify", json=[1])
        assert resp.status_code == 400

    def test_non_integer_input(self, client):
        resp = client.post("/r1cs/circuits/cubic/prove", json={"inputs": {"x": "three"}})
        assert resp.status_code == 400

    def test_hex_input(self, client):
        created = self._prove(client, "multiplication", {"inputs": {"a": "0x3", "b": 4}})
        assert created["outputs"] == {"3": "12"}

    def test_unknown_proof(self, client):
        assert client.get("/r1cs/proofs/missing").status_code == 404
        assert client.post("/r1cs/proofs/missing/verify").status_code == 404

    def test_clear(self, client):
        created = self._prove(client, "addition")
        assert client.post("/r1cs/proofs/clear").get_json() == {"cleared": True}
        assert client.get(f"/r1cs/proofs/{created['id']}").status_code == 404


def test_memory_db_isolated():
    a = create_app({"ZKR1CS_MEMORY_DB": True}).test_client()
    b = create_app({"ZKR1CS_MEMORY_DB": True}).test_client()
    proof_id = a.post("/r1cs/circuits/addition/prove", json={}).get_json()["id"]
    assert b.get(f"/r1cs/proofs/{proof_id}").status_code == 404
