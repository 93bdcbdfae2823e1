"""
예제 회로 모음 + E2E 데모
==========================

CLI, Flask 블루프린트, 테스트가 공유하는 예제 회로들.

  | 이름              | 명제                                           |
  |-------------------|------------------------------------------------|
  | addition          | a + b = out                                    |
  | multiplication    | a · b = out                                    |
  | cubic             | x³ + x + k = out   (x=3, k=5 → 35)              |
  | age_over_18       | age > 18  (RANGE_CHECK: age - 19 ∈ [0, 2^8))    |
  | merkle_membership | leaf 가 공개 root 를 갖는 4-리프 트리의 멤버     |

실행:
    python -m zkr1cs.example
"""

from zkr1cs.circuit import Circuit
from zkr1cs.merkle import MerkleTree

MERKLE_LEAVES = [1001, 2002, 3003, 4004]
MERKLE_LEAF_INDEX = 1


class Example:
    """예제 회로 정의.

    속성:
        name: 레지스트리 키
        description: 한 줄 설명
        build: hash_function → (circuit, wires) 를 돌려주는 함수.
               wires 는 {입력/출력 이름: Wire}
        defaults: circuit → {입력 이름: 값} 를 돌려주는 함수
        expected: {출력 이름: 기대값} (Verifier 가 확인)
    """

    def __init__(self, name, description, build, defaults, expected=None):
        self.name = name
        self.description = description
        self.build = build
        self.defaults = defaults
        self.expected = dict(expected or {})

    def instantiate(self, hash_function=None):
        circuit, wires = self.build(hash_function)
        return circuit.finalize(), wires

    def bind(self, wires, values):
        """{이름: 값} → {배선 id: 값}. 모르는 이름은 KeyError."""
        return {wires[name].id: value for name, value in values.items()}

    def public_values(self, circuit, wires, values):
        public = set(circuit.public_inputs())
        return {wires[n].id: v for n, v in values.items() if wires[n].id in public}

    def expected_outputs(self, wires):
        return {wires[name].id: value for name, value in self.expected.items()}


# ─────────────────────────────────────────────────────────────────────
# 회로 빌더
# ─────────────────────────────────────────────────────────────────────

def addition_circuit(hash_function=None):
    """a + b = out"""
    c = Circuit(hash_function, name="addition")
    a = c.private_input()
    b = c.private_input()
    out = c.mark_output(c.add(a, b))
    return c, {"a": a, "b": b, "out": out}


def multiplication_circuit(hash_function=None):
    """a · b = out"""
    c = Circuit(hash_function, name="multiplication")
    a = c.private_input()
    b = c.private_input()
    out = c.mark_output(c.mul(a, b))
    return c, {"a": a, "b": b, "out": out}


def cubic_circuit(hash_function=None):
    """x³ + x + k = out

    게이트:
      0 (mul): x · x   = x²
      1 (mul): x² · x  = x³
      2 (add): x³ + x  = t      (인라인)
      3 (add): t + k   = out    (출력 → 항등 행)
    """
    c = Circuit(hash_function, name="cubic")
    x = c.private_input()
    k = c.public_input()
    x2 = c.mul(x, x)
    x3 = c.mul(x2, x)
    t = c.add(x3, x)
    out = c.mark_output(c.add(t, k))
    return c, {"x": x, "k": k, "out": out}


def age_over_18_circuit(hash_function=None, bits=8):
    """age > 18  ⇔  age - 19 ∈ [0, 2^bits)"""
    c = Circuit(hash_function, name=f"age_over_18_{bits}")
    age = c.private_input()
    ok = c.mark_output(c.range_check(age, bits=bits, offset=19))
    return c, {"age": age, "ok": ok}


def merkle_membership_circuit(hash_function=None, depth=2, path_index=MERKLE_LEAF_INDEX):
    """leaf 와 경로로 재계산한 루트 == 공개 root"""
    c = Circuit(hash_function, name=f"merkle_membership_{depth}")
    leaf = c.private_input()
    siblings = [c.private_input() for _ in range(depth)]
    root = c.public_input()
    ok = c.mark_output(c.merkle_membership(leaf, siblings, root, path_index))
    wires = {"leaf": leaf, "root": root, "ok": ok}
    for i, sibling in enumerate(siblings):
        wires[f"sibling{i}"] = sibling
    return c, wires


def merkle_example_inputs(circuit, leaves=None, index=MERKLE_LEAF_INDEX):
    """예제 트리 (1001, 2002, 3003, 4004) 에서 index 리프의 입력 값."""
    tree = MerkleTree(leaves or MERKLE_LEAVES, circuit.hash_function)
    values = {"leaf": int(tree.leaves[index]), "root": int(tree.root)}
    for i, (sibling, _) in enumerate(tree.get_proof(index)):
        values[f"sibling{i}"] = int(sibling)
    return values


EXAMPLES = {
    ex.name: ex for ex in [
        Example("addition", "a + b = out", addition_circuit,
                lambda circuit: {"a": 10, "b": 20}, expected={"out": 30}),
        Example("multiplication", "a * b = out", multiplication_circuit,
                lambda circuit: {"a": 3, "b": 4}, expected={"out": 12}),
        Example("cubic", "x^3 + x + k = out", cubic_circuit,
                lambda circuit: {"x": 3, "k": 5}, expected={"out": 35}),
        Example("age_over_18", "age > 18", age_over_18_circuit,
                lambda circuit: {"age": 19}, expected={"ok": 1}),
        Example("merkle_membership", "4-leaf Merkle membership", merkle_membership_circuit,
                merkle_example_inputs, expected={"ok": 1}),
    ]
}


def get_example(name):
    try:
        return EXAMPLES[name]
    except KeyError:
        raise KeyError(f"알 수 없는 예제 회로: {name!r} (가능: {', '.join(EXAMPLES)})") from None


def main():
    from zkr1cs.prover import prove
    from zkr1cs.r1cs import circuit_to_r1cs
    from zkr1cs.verifier import verify

    print("=" * 60)
    print("  R1CS 만족성 증명 데모")
    print("=" * 60)

    for example in EXAMPLES.values():
        circuit, wires = example.instantiate()
        r1cs = circuit_to_r1cs(circuit)
        values = example.defaults(circuit)
        print(f"\n[{example.name}] {example.description}")
        print(f"    배선 수: {circuit.num_wires}, 게이트 수: {len(circuit.gates)}, "
              f"제약 수: {len(r1cs)}")

        proof = prove(circuit, example.bind(wires, values), r1cs=r1cs)
        result = verify(circuit, proof,
                        public_inputs=example.public_values(circuit, wires, values),
                        expected_outputs=example.expected_outputs(wires),
                        r1cs=r1cs)
        print(f"    결과: {'Satisfied ✓' if result else f'Violated ✗ ({result.index})'}")


if __name__ == "__main__":
    main()
