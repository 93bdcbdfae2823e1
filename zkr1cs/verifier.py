"""
Verifier: 증명 아티팩트 재검사
================================

Verifier 는 회로(설계도)를 직접 가지고 있고, Prover 가 보낸 아티팩트의
witness 로 모든 제약을 다시 평가한다.

검사 순서:
  1. 회로 식별자 / 해시 함수 일치 (다르면 StructuralError, 다른 회로의 증명)
  2. witness 의 공개 입력 배선 값 == 아티팩트의 public_inputs
  3. Verifier 가 기대하는 공개 입력 값이 주어졌다면 그것과도 일치
  4. 출력 배선도 2, 3 과 같은 방식으로 확인
  5. check_satisfiability(R1CS, witness, 회로 해시 함수)

2~4 의 불일치는 특정 행과 무관하므로 Violated(None, reason) 으로 보고한다.
"""

import logging

from zkr1cs.checker import Violated, check_satisfiability
from zkr1cs.errors import StructuralError
from zkr1cs.field import to_fr
from zkr1cs.r1cs import circuit_to_r1cs

logger = logging.getLogger(__name__)


def verify(circuit, proof, public_inputs=None, expected_outputs=None, r1cs=None):
    """증명을 검증한다.

    Args:
        circuit: 봉인된 Circuit
        proof: Proof
        public_inputs: Verifier 가 알고 있는 공개 입력 {배선 id: 값} (선택)
        expected_outputs: Verifier 가 기대하는 출력 {배선 id: 값} (선택)
        r1cs: 미리 변환해 둔 R1CS (선택)

    Returns:
        Satisfied() 또는 Violated(index)

    Raises:
        StructuralError: 회로 불일치, witness 길이 불일치
    """
    if proof.circuit_id != circuit.circuit_id():
        raise StructuralError("증명이 다른 회로에 대한 것입니다 (circuit_id 불일치)")
    if proof.hash_function != circuit.hash_function.name:
        raise StructuralError(
            f"해시 함수 불일치: 증명 {proof.hash_function}, 회로 {circuit.hash_function.name}"
        )

    r1cs = r1cs or circuit_to_r1cs(circuit)
    if r1cs.num_wires != circuit.num_wires:
        raise StructuralError(
            f"R1CS 배선 수 {r1cs.num_wires} 가 회로 배선 수 {circuit.num_wires} 와 다릅니다"
        )
    witness = proof.witness
    if len(witness) != r1cs.num_wires:
        raise StructuralError(
            f"witness 길이 {len(witness)} 가 R1CS 배선 수 {r1cs.num_wires} 와 다릅니다"
        )

    declared = set(circuit.public_inputs())
    if set(proof.public_inputs) != declared:
        return _reject(f"공개 입력 배선 집합 불일치: {sorted(proof.public_inputs)} != {sorted(declared)}")

    for wire_id, value in proof.public_inputs.items():
        if witness[wire_id] != value:
            return _reject(f"공개 입력 배선 {wire_id} 의 값이 witness 와 다릅니다")

    for wire_id, value in (public_inputs or {}).items():
        wire_id = int(wire_id)
        if wire_id not in declared:
            raise StructuralError(f"배선 {wire_id} 는 공개 입력이 아닙니다")
        if witness[wire_id] != to_fr(value):
            return _reject(f"공개 입력 배선 {wire_id} 의 값이 기대값과 다릅니다")

    if set(proof.outputs) != set(circuit.outputs()):
        return _reject("출력 배선 집합 불일치")
    for wire_id, value in proof.outputs.items():
        if witness[wire_id] != value:
            return _reject(f"출력 배선 {wire_id} 의 값이 witness 와 다릅니다")

    for wire_id, value in (expected_outputs or {}).items():
        wire_id = int(wire_id)
        if wire_id not in proof.outputs:
            raise StructuralError(f"배선 {wire_id} 는 회로 출력이 아닙니다")
        if witness[wire_id] != to_fr(value):
            return _reject(f"출력 배선 {wire_id} 의 값이 기대값과 다릅니다")

    result = check_satisfiability(r1cs, witness, circuit.hash_function)
    if result:
        logger.info("회로 %s: 검증 성공", circuit.name)
    else:
        logger.info("회로 %s: 검증 실패: %s", circuit.name, result.reason)
    return result


def _reject(reason):
    logger.info("검증 실패: %s", reason)
    return Violated(None, reason)
