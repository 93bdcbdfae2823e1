"""
Prover / Verifier End-to-End 테스트
====================================

테스트 범위:
  - 모든 예제 회로: 증명 → 직렬화 → 역직렬화 → 검증 = Satisfied
  - 공개 입력 / 출력 불일치 → Violated(None)
  - 다른 회로의 증명 → StructuralError
  - 조작된 witness → 첫 실패 행의 Violated
"""

import pytest

from zkr1cs.checker import Satisfied, Violated
from zkr1cs.errors import IncompleteWitnessError, StructuralError
from zkr1cs.example import EXAMPLES, cubic_circuit, get_example
from zkr1cs.field import FR
from zkr1cs.hash import Sha256Hash
from zkr1cs.prover import Proof, prove
from zkr1cs.r1cs import circuit_to_r1cs
from zkr1cs.serializers import deserialize_proof, serialize_proof
from zkr1cs.verifier import verify


def _run(example, values=None, hash_function=None):
    circuit, wires = example.instantiate(hash_function)
    values = values if values is not None else example.defaults(circuit)
    proof = prove(circuit, example.bind(wires, values))
    return circuit, wires, values, proof


@pytest.mark.parametrize("name", sorted(EXAMPLES))
def test_examples_satisfied(name):
    example = get_example(name)
    circuit, wires, values, proof = _run(example)
    loaded = deserialize_proof(serialize_proof(proof))
    result = verify(circuit, loaded,
                    public_inputs=example.public_values(circuit, wires, values),
                    expected_outputs=example.expected_outputs(wires))
    assert result == Satisfied()


@pytest.mark.parametrize("name", ["age_over_18", "merkle_membership"])
def test_examples_with_sha256(name):
    example = get_example(name)
    circuit, wires, values, proof = _run(example, hash_function=Sha256Hash())
    assert proof.hash_function == "sha256"
    assert verify(circuit, proof, expected_outputs=example.expected_outputs(wires))


def test_unknown_example():
    with pytest.raises(KeyError):
        get_example("nope")


class TestCubic:
    @pytest.fixture
    def setup(self):
        example = get_example("cubic")
        return _run(example) + (example,)

    def test_proof_contents(self, setup):
        circuit, wires, _, proof, _ = setup
        assert proof.circuit_id == circuit.circuit_id()
        assert proof.public_inputs == {wires["k"].id: FR(5)}
        assert proof.outputs == {wires["out"].id: FR(35)}
        assert len(proof.witness) == circuit.num_wires

    def test_public_input_mismatch(self, setup):
        circuit, wires, _, proof, _ = setup
        result = verify(circuit, proof, public_inputs={wires["k"].id: 6})
        assert result == Violated(None)
        assert "공개 입력" in result.reason

    def test_unexpected_output(self, setup):
        circuit, wires, _, proof, _ = setup
        result = verify(circuit, proof, expected_outputs={wires["out"].id: 36})
        assert result == Violated(None)

    def test_public_inputs_disagree_with_witness(self, setup):
        circuit, wires, _, proof, _ = setup
        forged = Proof(proof.circuit_id, proof.hash_function,
                       {wires["k"].id: FR(6)}, proof.witness, proof.outputs)
        assert verify(circuit, forged) == Violated(None)

    def test_missing_public_input_entry(self, setup):
        circuit, _, _, proof, _ = setup
        forged = Proof(proof.circuit_id, proof.hash_function, {}, proof.witness, proof.outputs)
        assert verify(circuit, forged) == Violated(None)

    def test_non_public_wire_claimed(self, setup):
        circuit, wires, _, proof, _ = setup
        with pytest.raises(StructuralError):
            verify(circuit, proof, public_inputs={wires["x"].id: 3})

    def test_other_circuit(self, setup):
        _, _, _, proof, _ = setup
        other, _ = get_example("addition").instantiate()
        with pytest.raises(StructuralError):
            verify(other, proof)

    def test_other_hash_function(self, setup):
        _, _, _, proof, _ = setup
        other, _ = cubic_circuit(Sha256Hash())
        with pytest.raises(StructuralError):
            verify(other.finalize(), proof)

    def test_wrong_statement(self, setup):
        """x=4 → out=73 이므로 기대 출력 35 와 맞지 않는다."""
        circuit, wires, _, _, example = setup
        proof = prove(circuit, example.bind(wires, {"x": 4, "k": 5}))
        assert verify(circuit, proof) == Satisfied()
        result = verify(circuit, proof, expected_outputs=example.expected_outputs(wires))
        assert result == Violated(None)

    def test_tampered_witness(self, setup):
        circuit, wires, _, proof, _ = setup
        x2 = circuit.gates[0].output
        tampered = Proof(proof.circuit_id, proof.hash_function, proof.public_inputs,
                         proof.witness.replace(x2, 10), proof.outputs)
        assert verify(circuit, tampered) == Violated(0)

    def test_missing_input(self, setup):
        circuit, wires, _, _, _ = setup
        with pytest.raises(IncompleteWitnessError):
            prove(circuit, {wires["x"].id: 3})

    def test_reuses_translated_r1cs(self, setup):
        circuit, _, _, proof, _ = setup
        assert verify(circuit, proof, r1cs=circuit_to_r1cs(circuit))


def test_age_18_rejected():
    example = get_example("age_over_18")
    circuit, wires, values, proof = _run(example, {"age": 18})
    assert proof.outputs == {wires["ok"].id: FR(0)}
    assert verify(circuit, proof) == Violated(8)
