"""
Witness 생성기
==============

봉인된 회로와 입력 값으로부터 모든 배선 값(witness)을 계산한다.

**알고리즘**:
  게이트를 선언 순서대로 평가한다. 전방 참조 금지 불변식 덕분에
  선언 순서는 위상 정렬 순서이므로, 각 게이트의 입력은 이미 채워져 있다.

  witness = [1, 입력..., 게이트 출력/보조 배선...]

**게이트 의미론**:
  - ADD(a, b)   → a + b
  - MUL(a, b)   → a · b
  - HASH(v...)  → H(v...)   (회로의 해시 협력자)
  - RANGE_CHECK(a; bits, offset)
        v = a - offset 의 하위 bits 비트를 비트 배선에 쓰고,
        v < 2^bits 이면 플래그 1, 아니면 0
  - MERKLE_MEMBERSHIP(leaf, sib..., root; depth, path_index)
        레벨 i 다이제스트 = H(cur, sib_i) 또는 H(sib_i, cur)
        (path_index 의 i번째 비트가 1이면 현재 노드가 오른쪽 자식)
        최종 다이제스트 == root 이면 플래그 1

  예: age > 18 은 RANGE_CHECK(age; bits=8, offset=19) 로 표현한다.
      age=19 → v=0 → 범위 안 / age=18 → v=M-1 → 범위 밖

사용 예시:
    >>> w = generate_witness(circuit, {x.id: 3})
    >>> w[0]       # FR(1)
"""

import logging

from zkr1cs.circuit import GateKind, ONE_WIRE
from zkr1cs.errors import IncompleteWitnessError, StructuralError
from zkr1cs.field import FR, to_fr
from zkr1cs.merkle import compute_root, path_index_to_directions, verify_path

logger = logging.getLogger(__name__)


class Witness:
    """배선 하나당 값 하나를 갖는 밀집(dense) 벡터. values[0] == 1."""

    def __init__(self, values):
        values = [to_fr(v) for v in values]
        if not values or values[0] != FR(1):
            raise StructuralError("witness 의 0번 값은 1 이어야 합니다")
        self._values = tuple(values)

    @property
    def values(self):
        return list(self._values)

    def __len__(self):
        return len(self._values)

    def __getitem__(self, index):
        return self._values[index]

    def __iter__(self):
        return iter(self._values)

    def __eq__(self, other):
        if not isinstance(other, Witness):
            return NotImplemented
        return [int(v) for v in self._values] == [int(v) for v in other._values]

    def replace(self, index, value):
        """index 값을 바꾼 새 Witness (조작 테스트용).

        0번 값 불변식도 검사하지 않으므로 상수 배선 조작도 표현할 수 있다.
        """
        values = list(self._values)
        values[index] = to_fr(value)
        tampered = Witness.__new__(Witness)
        tampered._values = tuple(values)
        return tampered

    def to_ints(self):
        return [int(v) for v in self._values]

    def __repr__(self):
        return f"Witness({self.to_ints()})"


# ─────────────────────────────────────────────────────────────────────
# 게이트별 평가 함수
# ─────────────────────────────────────────────────────────────────────

def _eval_add(gate, values, hash_function):
    a, b = gate.inputs
    values[gate.output] = values[a] + values[b]


def _eval_mul(gate, values, hash_function):
    a, b = gate.inputs
    values[gate.output] = values[a] * values[b]


def _eval_hash(gate, values, hash_function):
    values[gate.output] = hash_function.hash([values[i] for i in gate.inputs])


def _eval_range_check(gate, values, hash_function):
    (a,) = gate.inputs
    bits = gate.params["bits"]
    v = int(values[a] - FR(gate.params["offset"]))
    for i, bit_wire in enumerate(gate.aux):
        values[bit_wire] = FR((v >> i) & 1)
    values[gate.output] = FR(1 if v < (1 << bits) else 0)


def _eval_merkle_membership(gate, values, hash_function):
    depth = gate.params["depth"]
    siblings = gate.inputs[1:1 + depth]
    directions = path_index_to_directions(gate.params["path_index"], depth)
    leaf = values[gate.inputs[0]]
    root = values[gate.inputs[-1]]

    path = [(values[sibling], is_left) for sibling, is_left in zip(siblings, directions)]
    current = leaf
    for step, digest_wire in zip(path, gate.aux):
        current = compute_root(current, [step], hash_function)
        values[digest_wire] = current
    values[gate.output] = FR(1 if verify_path(leaf, path, root, hash_function) else 0)


EVALUATORS = {
    GateKind.ADD: _eval_add,
    GateKind.MUL: _eval_mul,
    GateKind.HASH: _eval_hash,
    GateKind.RANGE_CHECK: _eval_range_check,
    GateKind.MERKLE_MEMBERSHIP: _eval_merkle_membership,
}


def generate_witness(circuit, inputs):
    """회로의 모든 배선 값을 계산한다.

    Args:
        circuit: 봉인된 Circuit
        inputs: 입력 배선 (id 또는 Wire) → 정수/FR 값

    Returns:
        Witness

    Raises:
        StructuralError: 봉인되지 않은 회로, 입력이 아닌 배선에 대한 값
        IncompleteWitnessError: 선언된 입력 배선의 값 누락
    """
    if not circuit.finalized:
        raise StructuralError("witness 생성 전에 회로를 finalize() 해야 합니다")

    bindings = {int(k): v for k, v in inputs.items()}
    input_wires = circuit.input_wires()

    extra = set(bindings) - set(input_wires)
    if extra:
        raise StructuralError(f"입력 배선이 아닌 배선에 값이 주어졌습니다: {sorted(extra)}")

    values = [None] * circuit.num_wires
    values[ONE_WIRE] = FR(1)
    for wire_id in input_wires:
        if wire_id not in bindings:
            raise IncompleteWitnessError(wire_id)
        values[wire_id] = to_fr(bindings[wire_id])

    for gate in circuit.gates:
        EVALUATORS[gate.kind](gate, values, circuit.hash_function)

    logger.debug("witness 생성 완료: 회로 %s, 배선 %d개, 게이트 %d개",
                 circuit.name, len(values), len(circuit.gates))
    return Witness(values)
