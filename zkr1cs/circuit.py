"""
산술 회로 표현 (Circuit Representation)
========================================

계산을 배선(wire)과 게이트(gate)의 그래프로 표현한다.

**배선(Wire)**:
  witness 벡터의 인덱스. 생성 순서대로 0, 1, 2, ... 가 부여된다.
  - 배선 0 은 항상 상수 1 (Visibility.ONE). 선형결합의 상수항을 담는다
  - PUBLIC  : Verifier 도 아는 입력
  - PRIVATE : Prover 만 아는 입력 (witness 전용)
  - INTERNAL: 게이트가 만들어낸 중간/출력 배선

**게이트(Gate)**:
  | 종류              | 입력                          | 파라미터            | 출력        |
  |-------------------|-------------------------------|---------------------|-------------|
  | ADD               | a, b                          | -                   | a + b       |
  | MUL               | a, b                          | -                   | a · b       |
  | HASH              | v_1, ..., v_n (n ≥ 1)         | -                   | H(v_1..v_n) |
  | RANGE_CHECK       | a                             | bits, offset        | 유효 플래그 |
  | MERKLE_MEMBERSHIP | leaf, sib_0..sib_{d-1}, root  | depth, path_index   | 유효 플래그 |

  RANGE_CHECK 는 bits 개의 비트 배선을, MERKLE_MEMBERSHIP 은 레벨마다
  중간 다이제스트 배선을 보조(aux) 배선으로 추가 할당한다.

**불변식**:
  게이트는 자신보다 먼저 만들어진 배선만 참조할 수 있다 (전방 참조 금지).
  따라서 게이트 생성 순서가 곧 유효한 위상 정렬(평가) 순서이다.

**봉인(finalize)**:
  finalize() 이후에는 배선/게이트를 추가할 수 없다. witness 생성과
  R1CS 변환은 봉인된 회로만 받는다.

사용 예시 (x³ + x + 5):
    >>> c = Circuit(name="cubic")
    >>> x = c.private_input()
    >>> x2 = c.mul(x, x)
    >>> x3 = c.mul(x2, x)
    >>> out = c.add(x3, x)
    >>> c.finalize()
"""

import hashlib
import json
from enum import Enum

from zkr1cs.errors import StructuralError
from zkr1cs.field import FIELD_BITS, CURVE_ORDER
from zkr1cs.hash import HashFunction, MiMCHash


class Visibility(Enum):
    ONE = "one"
    PUBLIC = "public"
    PRIVATE = "private"
    INTERNAL = "internal"


class GateKind(Enum):
    ADD = "add"
    MUL = "mul"
    HASH = "hash"
    RANGE_CHECK = "range_check"
    MERKLE_MEMBERSHIP = "merkle_membership"


# 고정 인자 수를 갖는 게이트
FIXED_ARITY = {
    GateKind.ADD: 2,
    GateKind.MUL: 2,
    GateKind.RANGE_CHECK: 1,
}

# 게이트별 허용 파라미터
ALLOWED_PARAMS = {
    GateKind.ADD: set(),
    GateKind.MUL: set(),
    GateKind.HASH: set(),
    GateKind.RANGE_CHECK: {"bits", "offset"},
    GateKind.MERKLE_MEMBERSHIP: {"depth", "path_index"},
}

ONE_WIRE = 0


class Wire:
    """witness 벡터의 한 슬롯을 가리키는 불변 핸들."""

    __slots__ = ("id", "visibility")

    def __init__(self, id, visibility):
        self.id = id
        self.visibility = visibility

    def __int__(self):
        return self.id

    def __index__(self):
        return self.id

    def __eq__(self, other):
        if isinstance(other, Wire):
            return self.id == other.id and self.visibility == other.visibility
        return NotImplemented

    def __hash__(self):
        return hash((self.id, self.visibility))

    def __repr__(self):
        return f"Wire({self.id}, {self.visibility.value})"


class Gate:
    """한 개의 출력 배선을 만드는 연산.

    속성:
        kind: GateKind
        inputs: 입력 배선 id 튜플
        output: 출력 배선 id
        aux: 게이트가 추가로 할당한 보조 배선 id 튜플 (비트, 중간 다이제스트)
        params: 게이트 파라미터 딕셔너리
    """

    def __init__(self, kind, inputs, output, aux=(), params=None):
        self.kind = kind
        self.inputs = tuple(inputs)
        self.output = output
        self.aux = tuple(aux)
        self.params = dict(params or {})

    def to_dict(self):
        return {
            "kind": self.kind.value,
            "inputs": list(self.inputs),
            "output": self.output,
            "aux": list(self.aux),
            "params": dict(sorted(self.params.items())),
        }

    def __eq__(self, other):
        if not isinstance(other, Gate):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Gate({self.kind.value}, in={list(self.inputs)}, out={self.output})"


class Circuit:
    """산술 회로 빌더.

    배선과 게이트를 순서대로 쌓아 올린 뒤 finalize() 로 봉인한다.
    봉인된 회로는 여러 증명 세션이 참조로 공유하는 읽기 전용 설계도이다.

    속성:
        name: 회로 이름 (회로 식별자에 포함됨)
        hash_function: Hash / Merkle 게이트가 사용하는 해시 협력자
    """

    def __init__(self, hash_function=None, name="circuit"):
        if hash_function is not None and not isinstance(hash_function, HashFunction):
            raise StructuralError(f"HashFunction 이 아닙니다: {hash_function!r}")
        self.name = name
        self.hash_function = hash_function or MiMCHash()
        self._wires = [Wire(ONE_WIRE, Visibility.ONE)]
        self._gates = []
        self._public = []
        self._private = []
        self._outputs = []
        self._finalized = False

    # ── 조회 ──

    @property
    def one(self):
        """상수 1 배선 (배선 0)."""
        return self._wires[ONE_WIRE]

    @property
    def num_wires(self):
        return len(self._wires)

    @property
    def wires(self):
        return tuple(self._wires)

    @property
    def gates(self):
        return tuple(self._gates)

    @property
    def finalized(self):
        return self._finalized

    def public_inputs(self):
        """공개 입력 배선 id (선언 순서)."""
        return list(self._public)

    def private_inputs(self):
        """비공개 입력 배선 id (선언 순서)."""
        return list(self._private)

    def input_wires(self):
        """모든 입력 배선 id (id 순서)."""
        return sorted(self._public + self._private)

    def outputs(self):
        return list(self._outputs)

    # ── 구성 ──

    def _ensure_open(self):
        if self._finalized:
            raise StructuralError(f"회로 '{self.name}' 는 이미 봉인되었습니다")

    def _new_wire(self, visibility):
        wire = Wire(len(self._wires), visibility)
        self._wires.append(wire)
        return wire

    def _resolve(self, wire):
        """Wire 또는 int → 배선 id. 아직 존재하지 않는 배선이면 StructuralError."""
        if isinstance(wire, bool) or not isinstance(wire, (Wire, int)):
            raise StructuralError(f"배선이 아닙니다: {wire!r}")
        wire_id = int(wire)
        if not 0 <= wire_id < len(self._wires):
            raise StructuralError(
                f"전방 참조: 배선 {wire_id} (현재 배선 수 {len(self._wires)})"
            )
        return wire_id

    def allocate_wire(self, visibility):
        """새 입력 배선을 할당한다 (PUBLIC 또는 PRIVATE)."""
        self._ensure_open()
        if isinstance(visibility, str):
            visibility = Visibility(visibility)
        if visibility not in (Visibility.PUBLIC, Visibility.PRIVATE):
            raise StructuralError(f"입력 배선으로 할당할 수 없는 가시성: {visibility}")
        wire = self._new_wire(visibility)
        if visibility is Visibility.PUBLIC:
            self._public.append(wire.id)
        else:
            self._private.append(wire.id)
        return wire

    def public_input(self):
        return self.allocate_wire(Visibility.PUBLIC)

    def private_input(self):
        return self.allocate_wire(Visibility.PRIVATE)

    def add_gate(self, kind, inputs, **params):
        """게이트를 추가하고 출력 배선을 반환한다.

        Raises:
            StructuralError: 봉인 이후 호출, 전방 참조, 인자 수 불일치,
                             허용되지 않은 파라미터
        """
        self._ensure_open()
        try:
            kind = GateKind(kind) if not isinstance(kind, GateKind) else kind
        except ValueError:
            raise StructuralError(f"알 수 없는 게이트 종류: {kind!r}") from None

        input_ids = [self._resolve(w) for w in inputs]

        unknown = set(params) - ALLOWED_PARAMS[kind]
        if unknown:
            raise StructuralError(f"{kind.value} 게이트에 허용되지 않은 파라미터: {sorted(unknown)}")

        if kind in FIXED_ARITY:
            expected = FIXED_ARITY[kind]
            if len(input_ids) != expected:
                raise StructuralError(
                    f"{kind.value} 게이트는 입력 {expected}개가 필요합니다 (받은 개수 {len(input_ids)})"
                )
        elif kind is GateKind.HASH:
            if not input_ids:
                raise StructuralError("hash 게이트는 입력이 1개 이상 필요합니다")

        params = self._check_params(kind, input_ids, params)

        aux = []
        if kind is GateKind.RANGE_CHECK:
            aux = [self._new_wire(Visibility.INTERNAL).id for _ in range(params["bits"])]
        elif kind is GateKind.MERKLE_MEMBERSHIP:
            aux = [self._new_wire(Visibility.INTERNAL).id for _ in range(params["depth"])]

        output = self._new_wire(Visibility.INTERNAL)
        self._gates.append(Gate(kind, input_ids, output.id, aux, params))
        return output

    def _check_params(self, kind, input_ids, params):
        if kind is GateKind.RANGE_CHECK:
            bits = params.get("bits")
            if isinstance(bits, bool) or not isinstance(bits, int) or not 1 <= bits < FIELD_BITS:
                raise StructuralError(f"bits 는 1 이상 {FIELD_BITS} 미만의 정수여야 합니다: {bits!r}")
            offset = params.get("offset", 0)
            if isinstance(offset, bool) or not isinstance(offset, int):
                raise StructuralError(f"offset 은 정수여야 합니다: {offset!r}")
            return {"bits": bits, "offset": offset % CURVE_ORDER}

        if kind is GateKind.MERKLE_MEMBERSHIP:
            depth = params.get("depth")
            if isinstance(depth, bool) or not isinstance(depth, int) or depth < 1:
                raise StructuralError(f"depth 는 1 이상의 정수여야 합니다: {depth!r}")
            if len(input_ids) != depth + 2:
                raise StructuralError(
                    f"merkle_membership 게이트는 입력 {depth + 2}개가 필요합니다 "
                    f"(leaf, sibling × {depth}, root; 받은 개수 {len(input_ids)})"
                )
            path_index = params.get("path_index", 0)
            if isinstance(path_index, bool) or not isinstance(path_index, int) \
                    or not 0 <= path_index < 2 ** depth:
                raise StructuralError(f"path_index 범위 초과: {path_index!r}")
            return {"depth": depth, "path_index": path_index}

        return dict(params)

    # ── 편의 메서드 ──

    def add(self, a, b):
        return self.add_gate(GateKind.ADD, [a, b])

    def mul(self, a, b):
        return self.add_gate(GateKind.MUL, [a, b])

    def hash(self, *values):
        return self.add_gate(GateKind.HASH, list(values))

    def range_check(self, a, bits, offset=0):
        """a - offset 이 [0, 2^bits) 안에 있음을 검사하는 플래그 배선."""
        return self.add_gate(GateKind.RANGE_CHECK, [a], bits=bits, offset=offset)

    def merkle_membership(self, leaf, siblings, root, path_index):
        siblings = list(siblings)
        return self.add_gate(
            GateKind.MERKLE_MEMBERSHIP,
            [leaf] + siblings + [root],
            depth=len(siblings),
            path_index=path_index,
        )

    def mark_output(self, wire):
        """배선을 회로 출력으로 지정한다."""
        self._ensure_open()
        wire_id = self._resolve(wire)
        if wire_id not in self._outputs:
            self._outputs.append(wire_id)
        return self._wires[wire_id]

    def finalize(self):
        """회로를 봉인한다. 이후 구조 변경은 StructuralError."""
        if not self._finalized:
            self._wires = tuple(self._wires)
            self._gates = tuple(self._gates)
            self._public = tuple(self._public)
            self._private = tuple(self._private)
            self._outputs = tuple(self._outputs)
            self._finalized = True
        return self

    # ── 식별/표시 ──

    def to_dict(self):
        return {
            "name": self.name,
            "hash_function": self.hash_function.name,
            "num_wires": self.num_wires,
            "public_inputs": list(self._public),
            "private_inputs": list(self._private),
            "outputs": list(self._outputs),
            "gates": [g.to_dict() for g in self._gates],
        }

    def circuit_id(self):
        """회로 구조의 SHA-256 식별자 (hex).

        같은 구조의 회로는 항상 같은 식별자를 가지며, 증명 아티팩트가
        어떤 회로에 대한 것인지 Verifier 가 확인하는 데 쓰인다.
        """
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode()).hexdigest()

    def describe(self):
        """게이트 테이블 (UI/HTTP 표시용)."""
        table = []
        for i, gate in enumerate(self._gates):
            row = gate.to_dict()
            row["index"] = i
            table.append(row)
        return table

    def __repr__(self):
        return (f"Circuit({self.name!r}, wires={self.num_wires}, gates={len(self._gates)}, "
                f"finalized={self._finalized})")
