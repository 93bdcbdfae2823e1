"""
만족성 검사기 (Satisfiability Checker)
======================================

R1CS 의 각 행을 witness 에 대해 평가하여 A(w) · B(w) == C(w) 인지 확인한다.

  - 모든 행이 성립 → Satisfied()
  - 처음으로 실패한 행 → Violated(index)  (fail-fast, 실패를 모으지 않음)

제약 위반은 예외가 아니라 정상적인 검증 결과이다.
상수 배선(0번) 값이 1 이 아니면 행과 무관한 Violated(None) 이다.
witness 길이가 R1CS 배선 수와 다르면 구조적 전제 조건 위반이므로
StructuralError 를 발생시킨다.

블랙박스 해시 행은 C(w) 대신 H(hash_inputs(w)) 를 기대값으로 사용한다.
hash_function 을 넘기지 않으면 r1cs.hash_function 에 기록된 이름으로 찾는다.
"""

from zkr1cs.circuit import ONE_WIRE
from zkr1cs.errors import StructuralError
from zkr1cs.field import FR
from zkr1cs.hash import get_hash_function


class CheckResult:
    satisfied = False

    def __bool__(self):
        return self.satisfied


class Satisfied(CheckResult):
    satisfied = True
    index = None
    reason = None

    def __eq__(self, other):
        return isinstance(other, Satisfied)

    def __hash__(self):
        return hash("Satisfied")

    def __repr__(self):
        return "Satisfied()"


class Violated(CheckResult):
    """실패한 첫 행의 인덱스. 행과 무관한 실패(공개 입력 불일치 등)는 index=None."""

    def __init__(self, index, reason=""):
        self.index = index
        self.reason = reason

    def __eq__(self, other):
        return isinstance(other, Violated) and self.index == other.index

    def __hash__(self):
        return hash(("Violated", self.index))

    def __repr__(self):
        return f"Violated({self.index})"


def evaluate_constraint(row, witness, hash_function=None):
    """한 행의 (A(w), B(w), 기대값) 을 반환한다."""
    a = row.a.evaluate(witness)
    b = row.b.evaluate(witness)
    if row.is_hash and hash_function is not None:
        c = hash_function.hash([lc.evaluate(witness) for lc in row.hash_inputs])
    else:
        c = row.c.evaluate(witness)
    return a, b, c


def check_satisfiability(r1cs, witness, hash_function=None):
    """R1CS 를 witness 로 검사한다.

    Args:
        r1cs: R1CS
        witness: Witness (또는 FR 시퀀스)
        hash_function: 블랙박스 해시 행을 재계산할 해시 협력자
                       (없으면 r1cs.hash_function 이름으로 조회)

    Returns:
        Satisfied() 또는 Violated(index)

    Raises:
        StructuralError: witness 길이 != r1cs.num_wires
        StructuralError: 해시 행이 있는데 해시 함수를 알 수 없을 때
    """
    if len(witness) != r1cs.num_wires:
        raise StructuralError(
            f"witness 길이 {len(witness)} 가 R1CS 배선 수 {r1cs.num_wires} 와 다릅니다"
        )
    if r1cs.num_wires and witness[ONE_WIRE] != FR(1):
        return Violated(None, "상수 배선(0번) 값이 1 이 아닙니다")
    if hash_function is None:
        hash_function = _recorded_hash_function(r1cs)

    for index, row in enumerate(r1cs.constraints):
        a, b, c = evaluate_constraint(row, witness, hash_function)
        if a * b != c:
            return Violated(index, f"제약 {index} ({row.label}) 불만족")
    return Satisfied()


def _recorded_hash_function(r1cs):
    if not any(row.is_hash for row in r1cs.constraints):
        return None
    if r1cs.hash_function is None:
        raise StructuralError("해시 행이 있지만 R1CS 에 해시 함수 이름이 없습니다")
    return get_hash_function(r1cs.hash_function)
