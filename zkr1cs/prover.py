"""
Prover: witness 생성 및 증명 아티팩트 구성
============================================

흐름:
  1. generate_witness(circuit, inputs) 로 전체 witness 계산
  2. R1CS 로 자체 검사 (거짓 명제면 경고만 남김, 판정은 Verifier 몫)
  3. Proof(circuit_id, hash_function, public_inputs, witness) 반환

이 시스템은 비간결(non-succinct) 증명을 다룬다: 아티팩트에는 witness 전체가
들어 있으며 Verifier 는 모든 제약을 직접 재평가한다. 은닉(hiding)은 제공하지 않는다.

사용 예시:
    >>> proof = prove(circuit, {x.id: 3})
    >>> data = serialize_proof(proof)
"""

import logging

from zkr1cs.checker import check_satisfiability
from zkr1cs.r1cs import circuit_to_r1cs
from zkr1cs.witness import generate_witness

logger = logging.getLogger(__name__)


class Proof:
    """증명 아티팩트.

    속성:
        circuit_id: 회로 구조 식별자 (Circuit.circuit_id())
        hash_function: 해시 협력자 이름
        public_inputs: {공개 입력 배선 id: FR}
        witness: Witness
        outputs: {출력 배선 id: FR} (Circuit.mark_output 으로 지정된 배선)
    """

    def __init__(self, circuit_id, hash_function, public_inputs, witness, outputs=None):
        self.circuit_id = circuit_id
        self.hash_function = hash_function
        self.public_inputs = dict(public_inputs)
        self.witness = witness
        self.outputs = dict(outputs or {})

    def __eq__(self, other):
        if not isinstance(other, Proof):
            return NotImplemented
        return (self.circuit_id == other.circuit_id
                and self.hash_function == other.hash_function
                and {w: int(v) for w, v in self.public_inputs.items()}
                == {w: int(v) for w, v in other.public_inputs.items()}
                and {w: int(v) for w, v in self.outputs.items()}
                == {w: int(v) for w, v in other.outputs.items()}
                and self.witness == other.witness)

    def __repr__(self):
        return f"Proof(circuit={self.circuit_id[:12]}..., wires={len(self.witness)})"


def prove(circuit, inputs, r1cs=None):
    """입력으로부터 증명 아티팩트를 만든다.

    Args:
        circuit: 봉인된 Circuit
        inputs: 입력 배선 id → 값
        r1cs: 미리 변환해 둔 R1CS (없으면 새로 변환)

    Raises:
        IncompleteWitnessError: 입력 누락
        StructuralError: 봉인되지 않은 회로 등
    """
    witness = generate_witness(circuit, inputs)
    r1cs = r1cs or circuit_to_r1cs(circuit)

    result = check_satisfiability(r1cs, witness, circuit.hash_function)
    if not result:
        logger.warning("회로 %s: 입력이 명제를 만족하지 않습니다 (%s)", circuit.name, result.reason)
    else:
        logger.info("회로 %s: witness 가 제약 %d개를 모두 만족합니다", circuit.name, len(r1cs))

    public_inputs = {wire_id: witness[wire_id] for wire_id in circuit.public_inputs()}
    outputs = {wire_id: witness[wire_id] for wire_id in circuit.outputs()}
    return Proof(circuit.circuit_id(), circuit.hash_function.name, public_inputs, witness, outputs)
