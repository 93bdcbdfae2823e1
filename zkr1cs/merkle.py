"""
Merkle 트리 (외부 협력자)
=========================

회로 바깥에서 Merkle 트리를 구성하고 경로(path)를 뽑아내는 유틸리티.
코어는 compute_root / verify_path 두 연산만 사용한다.

**경로 표현**:
  path = [(sibling_0, is_left_0), (sibling_1, is_left_1), ...]
  - sibling_i: i번째 레벨의 형제 노드 값
  - is_left_i: 형제 노드가 왼쪽에 있으면 True (즉 현재 노드는 오른쪽 자식)

예시 (4개 리프, 인덱스 1 증명):
    level 0: [1001, 2002, 3003, 4004]  → 2002 의 형제는 1001 (왼쪽)
    level 1: [H(1001,2002), H(3003,4004)] → 형제는 H(3003,4004) (오른쪽)
    path = [(1001, True), (H(3003,4004), False)]
"""

from zkr1cs.field import to_fr
from zkr1cs.hash import MiMCHash


def _combine(hash_function, current, sibling, sibling_is_left):
    if sibling_is_left:
        return hash_function.hash([sibling, current])
    return hash_function.hash([current, sibling])


def compute_root(leaf, path, hash_function=None):
    """리프와 경로로부터 루트를 재계산한다."""
    hash_function = hash_function or MiMCHash()
    current = to_fr(leaf)
    for sibling, is_left in path:
        current = _combine(hash_function, current, to_fr(sibling), is_left)
    return current


def verify_path(leaf, path, expected_root, hash_function=None):
    """재계산한 루트가 expected_root 와 같은지 확인한다."""
    return compute_root(leaf, path, hash_function) == to_fr(expected_root)


def path_index_to_directions(path_index, depth):
    """리프 인덱스 → 레벨별 is_left 목록 (비트가 1이면 현재 노드가 오른쪽)."""
    return [bool((path_index >> level) & 1) for level in range(depth)]


class MerkleTree:
    """이진 Merkle 트리.

    레벨의 노드 수가 홀수이면 마지막 노드를 복제해서 짝을 맞춘다.

    속성:
        leaves: 리프 FR 리스트
        levels: levels[0] = 리프, levels[-1] = [root]
        root: 루트 FR
    """

    def __init__(self, leaves, hash_function=None):
        if not leaves:
            raise ValueError("리프가 비어 있습니다")
        self.hash_function = hash_function or MiMCHash()
        self.leaves = [to_fr(leaf) for leaf in leaves]
        self.levels = [list(self.leaves)]

        current = self.leaves
        while len(current) > 1:
            next_level = []
            for i in range(0, len(current), 2):
                left = current[i]
                right = current[i + 1] if i + 1 < len(current) else current[i]
                next_level.append(self.hash_function.hash([left, right]))
            self.levels.append(next_level)
            current = next_level

    @property
    def root(self):
        return self.levels[-1][0]

    @property
    def depth(self):
        return len(self.levels) - 1

    def get_proof(self, index):
        """index 번째 리프의 경로 [(sibling, is_left), ...] 를 반환한다."""
        if not 0 <= index < len(self.leaves):
            raise ValueError(f"리프 인덱스 범위 초과: {index}")
        path = []
        for level in self.levels[:-1]:
            if index % 2 == 0:
                sibling = level[index + 1] if index + 1 < len(level) else level[index]
                path.append((sibling, False))
            else:
                path.append((level[index - 1], True))
            index //= 2
        return path

    def verify(self, leaf, path):
        return verify_path(leaf, path, self.root, self.hash_function)


