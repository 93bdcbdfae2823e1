"""
직렬화 테스트
=============

바이트/dict 형식의 왕복과 손상된 입력에 대한 SerializationError.
"""

import json

import pytest

from zkr1cs.errors import SerializationError
from zkr1cs.example import cubic_circuit, merkle_example_inputs, merkle_membership_circuit
from zkr1cs.field import CURVE_ORDER, FR
from zkr1cs.prover import prove
from zkr1cs.r1cs import circuit_to_r1cs
from zkr1cs.serializers import (
    deserialize_fr, deserialize_proof, deserialize_r1cs, deserialize_witness,
    proof_to_dict, serialize_fr, serialize_proof, serialize_r1cs,
    serialize_witness,
)
from zkr1cs.witness import Witness


@pytest.fixture(scope="module")
def cubic_proof():
    circuit, wires = cubic_circuit()
    circuit.finalize()
    return circuit, prove(circuit, {wires["x"]: 3, wires["k"]: 5})


class TestFR:
    def test_round_trip_boundaries(self):
        for n in (0, 1, CURVE_ORDER - 1):
            assert deserialize_fr(serialize_fr(FR(n))) == FR(n)

    @pytest.mark.parametrize("bad", [str(CURVE_ORDER), "-1", "abc", None])
    def test_rejects(self, bad):
        with pytest.raises(SerializationError):
            deserialize_fr(bad)


class TestWitness:
    def test_layout(self):
        data = serialize_witness(Witness([1, 2]))
        assert len(data) == 4 + 2 * 32
        assert data[:4] == b"\x00\x00\x00\x02"
        assert deserialize_witness(data) == Witness([1, 2])

    def test_truncated(self):
        data = serialize_witness(Witness([1, 2]))
        with pytest.raises(SerializationError):
            deserialize_witness(data[:-1])
        with pytest.raises(SerializationError):
            deserialize_witness(data[:3])

    def test_out_of_range_element(self):
        data = bytearray(serialize_witness(Witness([1, 2])))
        data[-32:] = (CURVE_ORDER).to_bytes(32, "big")
        with pytest.raises(SerializationError):
            deserialize_witness(bytes(data))

    def test_constant_wire_not_one(self):
        data = bytearray(serialize_witness(Witness([1, 2])))
        data[4:36] = (5).to_bytes(32, "big")
        with pytest.raises(SerializationError):
            deserialize_witness(bytes(data))

    def test_not_bytes(self):
        with pytest.raises(SerializationError):
            deserialize_witness("00")


class TestR1CS:
    def test_round_trip(self, mimc):
        circuit, _ = merkle_membership_circuit(mimc)
        r1cs = circuit_to_r1cs(circuit.finalize())
        assert deserialize_r1cs(serialize_r1cs(r1cs)) == r1cs

    def test_hash_function_name_kept(self, sha256):
        circuit, _ = merkle_membership_circuit(sha256)
        r1cs = circuit_to_r1cs(circuit.finalize())
        data = json.loads(serialize_r1cs(r1cs))
        assert data["hash_function"] == "sha256"
        assert deserialize_r1cs(serialize_r1cs(r1cs)).hash_function == "sha256"

    def test_unknown_wire_rejected(self):
        circuit, _ = cubic_circuit()
        data = json.loads(serialize_r1cs(circuit_to_r1cs(circuit.finalize())))
        data["num_wires"] = 2
        with pytest.raises(SerializationError):
            deserialize_r1cs(json.dumps(data).encode())

    @pytest.mark.parametrize("payload", [
        b"not json",
        b"[]",
        b'{"version": 99, "num_wires": 1, "constraints": []}',
        b'{"version": 1, "num_wires": 0, "constraints": []}',
        b'{"version": 1, "num_wires": 1, "hash_function": "md5", "constraints": []}',
        b'{"version": 1, "num_wires": 1, "hash_function": ["mimc7"], "constraints": []}',
        b'{"version": 1, "num_wires": 2, "constraints": [{"a": {}}]}',
        b'{"version": 1, "num_wires": 2, "constraints": [{"a": {"x": "1"}, "b": {}, "c": {}}]}',
    ])
    def test_malformed(self, payload):
        with pytest.raises(SerializationError):
            deserialize_r1cs(payload)


class TestProof:
    def test_round_trip(self, cubic_proof):
        _, proof = cubic_proof
        assert deserialize_proof(serialize_proof(proof)) == proof

    def test_round_trip_merkle(self, mimc):
        circuit, wires = merkle_membership_circuit(mimc)
        circuit.finalize()
        values = merkle_example_inputs(circuit)
        proof = prove(circuit, {wires[n]: v for n, v in values.items()})
        assert deserialize_proof(serialize_proof(proof)) == proof

    def test_dict_fields(self, cubic_proof):
        circuit, proof = cubic_proof
        data = proof_to_dict(proof)
        assert data["circuit_id"] == circuit.circuit_id()
        assert data["hash_function"] == "mimc7"
        assert data["public_inputs"] == {"2": "5"}
        assert data["outputs"] == {"6": "35"}

    @pytest.mark.parametrize("field", ["circuit_id", "hash_function", "public_inputs", "witness"])
    def test_missing_field(self, cubic_proof, field):
        _, proof = cubic_proof
        data = proof_to_dict(proof)
        del data[field]
        with pytest.raises(SerializationError):
            deserialize_proof(json.dumps(data).encode())

    def test_bad_witness_hex(self, cubic_proof):
        _, proof = cubic_proof
        data = proof_to_dict(proof)
        data["witness"] = "zz"
        with pytest.raises(SerializationError):
            deserialize_proof(json.dumps(data))

    def test_truncated_bytes(self, cubic_proof):
        _, proof = cubic_proof
        with pytest.raises(SerializationError):
            deserialize_proof(serialize_proof(proof)[:-5])
