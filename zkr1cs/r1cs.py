"""
R1CS 변환기 (Circuit → Rank-1 Constraint System)
=================================================

봉인된 회로를 제약 행렬로 평탄화(flatten)한다.

**제약 형태**:
  각 제약은 선형결합 세 개 (A, B, C) 로 이루어지며,
  witness w 에 대해 다음을 만족해야 한다:

    A(w) · B(w) = C(w)      (A(w) = Σ A_i · w_i)

**게이트별 변환 규칙**:
  | 게이트            | 생성되는 행                                           |
  |-------------------|-------------------------------------------------------|
  | MUL(a,b)=c        | A={a:1}, B={b:1}, C={c:1}                             |
  | ADD(a,b)=c        | 행 없음, 이후 c 를 참조하는 선형결합에 {a:1,b:1} 인라인 |
  | HASH(v..)=h       | 블랙박스 행 A={h:1}, B={1:1}, C={h:1} (+ 해시 입력)    |
  | RANGE_CHECK       | 비트마다 b·(1-b)=0, 재구성 행 Σ2^i·b_i = a - offset,   |
  |                   | 플래그 행 flag·1 = 1                                  |
  | MERKLE_MEMBERSHIP | 레벨마다 블랙박스 해시 행, 루트 동등 행, 플래그 행     |

**덧셈 접기(folding)**:
  ADD 는 제약을 만들지 않는다. 출력 c 는 치환 테이블에 c ↦ a + b 로
  기록되고, c 를 소비하는 이후의 모든 선형결합이 치환된 값을 쓴다.
  아무도 소비하지 않은 (또는 출력으로 지정된) ADD 출력에만
  항등 행 A={c:1}, B={1:1}, C={a:1,b:1} 를 마지막에 추가한다.

  예: c = a + b; d = c · e  →  (a + b) · e = d  한 행

**해시 행(블랙박스)**:
  해시 내부는 산술화하지 않는다. 행은 해시 입력의 선형결합을 함께 보관하며,
  checker 는 C(w) 대신 H(입력(w)) 를 기대값으로 쓴다. 해시 함수 이름은
  R1CS.hash_function 에 기록되므로 R1CS 만으로도 해시 행을 검사할 수 있다.

변환은 결정론적이며 witness 와 무관하다.

사용 예시:
    >>> r1cs = circuit_to_r1cs(circuit)
    >>> len(r1cs.constraints)
    >>> A, B, C = r1cs.to_matrices()
"""

import logging

from zkr1cs.circuit import GateKind, ONE_WIRE
from zkr1cs.errors import StructuralError
from zkr1cs.field import FR, to_fr

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────
# 선형결합 (Linear Combination)
# ─────────────────────────────────────────────────────────────────────

class LinearCombination:
    """희소(sparse) 선형결합 {배선 id: FR 계수}.

    계수가 0인 항은 저장하지 않는다 (없는 키 ⇒ 계수 0).
    """

    def __init__(self, terms=None):
        self.terms = {}
        for wire_id, coeff in (terms or {}).items():
            coeff = to_fr(coeff)
            if int(coeff) != 0:
                self.terms[int(wire_id)] = coeff

    @classmethod
    def single(cls, wire_id, coeff=1):
        return cls({wire_id: coeff})

    @classmethod
    def constant(cls, value):
        """상수는 1 배선(0번)의 계수로 표현한다."""
        return cls({ONE_WIRE: value})

    def __add__(self, other):
        terms = dict(self.terms)
        for wire_id, coeff in other.terms.items():
            terms[wire_id] = terms.get(wire_id, FR(0)) + coeff
        return LinearCombination(terms)

    def __sub__(self, other):
        return self + other.scale(-1)

    def scale(self, k):
        k = to_fr(k)
        return LinearCombination({w: c * k for w, c in self.terms.items()})

    def __mul__(self, k):
        return self.scale(k)

    __rmul__ = __mul__

    def evaluate(self, witness):
        """Σ coeff_i · w_i"""
        total = FR(0)
        for wire_id, coeff in self.terms.items():
            total = total + coeff * witness[wire_id]
        return total

    def wires(self):
        return sorted(self.terms)

    def items(self):
        return [(w, self.terms[w]) for w in sorted(self.terms)]

    def is_zero(self):
        return not self.terms

    def __eq__(self, other):
        if not isinstance(other, LinearCombination):
            return NotImplemented
        return self.to_ints() == other.to_ints()

    def to_ints(self):
        return {w: int(c) for w, c in self.items()}

    def __repr__(self):
        if not self.terms:
            return "LC(0)"
        return "LC(" + " + ".join(f"{int(c)}·w{w}" for w, c in self.items()) + ")"


LC = LinearCombination


class Constraint:
    """A(w) · B(w) = C(w) 한 행.

    속성:
        a, b, c: LinearCombination
        hash_inputs: 블랙박스 해시 행이면 해시 입력 선형결합 튜플, 아니면 None
        label: 디버깅용 설명 (예: "mul g3")
    """

    def __init__(self, a, b, c, hash_inputs=None, label=""):
        self.a = a
        self.b = b
        self.c = c
        self.hash_inputs = tuple(hash_inputs) if hash_inputs is not None else None
        self.label = label

    @property
    def is_hash(self):
        return self.hash_inputs is not None

    def __eq__(self, other):
        if not isinstance(other, Constraint):
            return NotImplemented
        return (self.a == other.a and self.b == other.b and self.c == other.c
                and self.hash_inputs == other.hash_inputs and self.label == other.label)

    def __repr__(self):
        return f"Constraint({self.a} * {self.b} = {self.c}{' [hash]' if self.is_hash else ''})"


class R1CS:
    """제약 행의 순서 있는 리스트 + 선언된 배선 수.

    hash_function 은 블랙박스 해시 행을 재계산할 해시 협력자의 이름이다.
    회로에서 변환하면 회로의 해시 이름이 기록되고 직렬화에도 포함된다.
    """

    def __init__(self, num_wires, constraints, hash_function=None):
        self.num_wires = num_wires
        self.constraints = tuple(constraints)
        self.hash_function = hash_function
        for row in self.constraints:
            for lc in _row_lcs(row):
                if lc.terms and max(lc.terms) >= num_wires:
                    raise StructuralError(
                        f"제약이 존재하지 않는 배선 {max(lc.terms)} 을 참조합니다 (배선 수 {num_wires})"
                    )

    def __len__(self):
        return len(self.constraints)

    def __eq__(self, other):
        if not isinstance(other, R1CS):
            return NotImplemented
        return (self.num_wires == other.num_wires
                and self.hash_function == other.hash_function
                and self.constraints == other.constraints)

    def to_matrices(self):
        """밀집 행렬 (A, B, C). 각 행은 길이 num_wires 의 정수 리스트."""
        def dense(lc):
            row = [0] * self.num_wires
            for wire_id, coeff in lc.terms.items():
                row[wire_id] = int(coeff)
            return row

        A = [dense(row.a) for row in self.constraints]
        B = [dense(row.b) for row in self.constraints]
        C = [dense(row.c) for row in self.constraints]
        return A, B, C

    def __repr__(self):
        return (f"R1CS(wires={self.num_wires}, constraints={len(self.constraints)}, "
                f"hash={self.hash_function})")


def _row_lcs(row):
    yield row.a
    yield row.b
    yield row.c
    for lc in row.hash_inputs or ():
        yield lc


# ─────────────────────────────────────────────────────────────────────
# 변환기
# ─────────────────────────────────────────────────────────────────────

class _Translator:
    """게이트를 순회하며 행을 만든다. ADD 출력 치환 테이블을 유지한다."""

    def __init__(self, circuit):
        self.circuit = circuit
        self.one = LC.single(ONE_WIRE)
        self.substitution = {}
        self.consumed = set()
        self.add_gates = []
        self.constraints = []

    def expand(self, wire_id):
        """배선 → 선형결합. ADD 출력이면 인라인된 선형결합을 돌려준다."""
        if wire_id in self.substitution:
            self.consumed.add(wire_id)
            return self.substitution[wire_id]
        return LC.single(wire_id)

    def emit(self, a, b, c, hash_inputs=None, label=""):
        self.constraints.append(Constraint(a, b, c, hash_inputs, label))

    def translate_add(self, index, gate):
        a, b = gate.inputs
        self.substitution[gate.output] = self.expand(a) + self.expand(b)
        self.add_gates.append((index, gate))

    def translate_mul(self, index, gate):
        a, b = gate.inputs
        self.emit(self.expand(a), self.expand(b), LC.single(gate.output), label=f"mul g{index}")

    def translate_hash(self, index, gate):
        out = LC.single(gate.output)
        self.emit(out, self.one, out,
                  hash_inputs=[self.expand(i) for i in gate.inputs],
                  label=f"hash g{index}")

    def translate_range_check(self, index, gate):
        (a,) = gate.inputs
        recomposed = LC()
        for i, bit_wire in enumerate(gate.aux):
            bit = LC.single(bit_wire)
            self.emit(bit, self.one - bit, LC(), label=f"range g{index} bit{i}")
            recomposed = recomposed + bit.scale(1 << i)

        checked = self.expand(a) - LC.constant(gate.params["offset"])
        self.emit(recomposed, self.one, checked, label=f"range g{index} recompose")
        self.emit(LC.single(gate.output), self.one, self.one, label=f"range g{index} flag")

    def translate_merkle_membership(self, index, gate):
        depth = gate.params["depth"]
        path_index = gate.params["path_index"]
        siblings = gate.inputs[1:1 + depth]

        current = self.expand(gate.inputs[0])
        for level, (sibling, digest_wire) in enumerate(zip(siblings, gate.aux)):
            sib = self.expand(sibling)
            ordered = [sib, current] if (path_index >> level) & 1 else [current, sib]
            digest = LC.single(digest_wire)
            self.emit(digest, self.one, digest, hash_inputs=ordered,
                      label=f"merkle g{index} level{level}")
            current = digest

        self.emit(current, self.one, self.expand(gate.inputs[-1]), label=f"merkle g{index} root")
        self.emit(LC.single(gate.output), self.one, self.one, label=f"merkle g{index} flag")

    def run(self):
        handlers = {
            GateKind.ADD: self.translate_add,
            GateKind.MUL: self.translate_mul,
            GateKind.HASH: self.translate_hash,
            GateKind.RANGE_CHECK: self.translate_range_check,
            GateKind.MERKLE_MEMBERSHIP: self.translate_merkle_membership,
        }
        for index, gate in enumerate(self.circuit.gates):
            handlers[gate.kind](index, gate)

        outputs = set(self.circuit.outputs())
        for index, gate in self.add_gates:
            if gate.output not in self.consumed or gate.output in outputs:
                self.emit(LC.single(gate.output), self.one, self.substitution[gate.output],
                          label=f"add g{index}")

        return R1CS(self.circuit.num_wires, self.constraints, self.circuit.hash_function.name)


def circuit_to_r1cs(circuit):
    """봉인된 회로를 R1CS 로 변환한다.

    Raises:
        StructuralError: 회로가 봉인되지 않았을 때
    """
    if not circuit.finalized:
        raise StructuralError("R1CS 변환 전에 회로를 finalize() 해야 합니다")
    r1cs = _Translator(circuit).run()
    logger.debug("R1CS 변환 완료: 회로 %s, 제약 %d개", circuit.name, len(r1cs))
    return r1cs
