"""
직렬화/역직렬화 헬퍼
====================

FR, Witness, R1CS, Proof 를 바이트열 또는 TinyDB 에 저장 가능한 dict 로 변환한다.

**형식**:
  - FR       : 32바이트 빅엔디안 (바이트 형식) / 10진 문자열 (dict 형식)
  - Witness  : [4바이트 개수][FR 32바이트 × 개수]
  - R1CS     : JSON: {"version", "num_wires", "hash_function", "constraints": [...]}
  - Proof    : JSON: {"version", "circuit_id", "hash_function",
                       "public_inputs", "outputs", "witness"(hex)}

역직렬화는 항상 완전한 객체를 돌려주거나 SerializationError 를 발생시킨다.
"""

import json

from zkr1cs.errors import SerializationError, StructuralError
from zkr1cs.field import CURVE_ORDER, FR, FR_BYTES, fr_from_bytes, fr_to_bytes
from zkr1cs.hash import HASH_FUNCTIONS
from zkr1cs.prover import Proof
from zkr1cs.r1cs import R1CS, Constraint, LinearCombination
from zkr1cs.witness import Witness

FORMAT_VERSION = 1
COUNT_BYTES = 4


# ─── FR ───

def serialize_fr(val):
    """FR → str(int)"""
    return str(int(val))


def deserialize_fr(s):
    """str(int) → FR. 범위 [0, M) 밖이면 SerializationError."""
    try:
        n = int(s)
    except (TypeError, ValueError):
        raise SerializationError(f"필드 원소가 아닙니다: {s!r}") from None
    if not 0 <= n < CURVE_ORDER:
        raise SerializationError(f"필드 범위를 벗어난 값: {n}")
    return FR(n)


# ─── Witness ───

def serialize_witness(witness):
    """Witness → bytes"""
    out = bytearray(len(witness).to_bytes(COUNT_BYTES, "big"))
    for v in witness:
        out.extend(fr_to_bytes(v))
    return bytes(out)


def deserialize_witness(data):
    """bytes → Witness"""
    if not isinstance(data, (bytes, bytearray)):
        raise SerializationError("witness 는 바이트열이어야 합니다")
    if len(data) < COUNT_BYTES:
        raise SerializationError("witness 길이 헤더가 없습니다")
    count = int.from_bytes(data[:COUNT_BYTES], "big")
    body = data[COUNT_BYTES:]
    if len(body) != count * FR_BYTES:
        raise SerializationError(
            f"witness 본문 길이 불일치: 원소 {count}개 기대, {len(body)} 바이트"
        )
    values = []
    for i in range(count):
        n = fr_from_bytes(body[i * FR_BYTES:(i + 1) * FR_BYTES])
        if n >= CURVE_ORDER:
            raise SerializationError(f"witness[{i}] 가 필드 범위를 벗어났습니다")
        values.append(FR(n))
    try:
        return Witness(values)
    except StructuralError as exc:
        raise SerializationError(str(exc)) from exc


# ─── LinearCombination / Constraint ───

def serialize_lc(lc):
    """LinearCombination → {"wire_id": "coeff"}"""
    return {str(w): serialize_fr(c) for w, c in lc.items()}


def deserialize_lc(data):
    if not isinstance(data, dict):
        raise SerializationError("선형결합은 dict 여야 합니다")
    terms = {}
    for key, value in data.items():
        try:
            wire_id = int(key)
        except ValueError:
            raise SerializationError(f"배선 id 가 아닙니다: {key!r}") from None
        if wire_id < 0:
            raise SerializationError(f"음수 배선 id: {wire_id}")
        terms[wire_id] = deserialize_fr(value)
    return LinearCombination(terms)


def serialize_constraint(row):
    return {
        "a": serialize_lc(row.a),
        "b": serialize_lc(row.b),
        "c": serialize_lc(row.c),
        "hash_inputs": [serialize_lc(lc) for lc in row.hash_inputs] if row.is_hash else None,
        "label": row.label,
    }


def deserialize_constraint(data):
    try:
        hash_inputs = data.get("hash_inputs")
        if hash_inputs is not None:
            if not isinstance(hash_inputs, list):
                raise SerializationError("hash_inputs 는 리스트여야 합니다")
            hash_inputs = [deserialize_lc(lc) for lc in hash_inputs]
        return Constraint(
            deserialize_lc(data["a"]),
            deserialize_lc(data["b"]),
            deserialize_lc(data["c"]),
            hash_inputs=hash_inputs,
            label=str(data.get("label", "")),
        )
    except (KeyError, AttributeError) as exc:
        raise SerializationError(f"제약 형식 오류: {exc}") from exc


# ─── R1CS ───

def r1cs_to_dict(r1cs):
    """R1CS → dict (TinyDB 저장용)"""
    return {
        "version": FORMAT_VERSION,
        "num_wires": r1cs.num_wires,
        "hash_function": r1cs.hash_function,
        "constraints": [serialize_constraint(row) for row in r1cs.constraints],
    }


def r1cs_from_dict(data):
    """dict → R1CS"""
    if not isinstance(data, dict):
        raise SerializationError("R1CS 는 dict 여야 합니다")
    if data.get("version") != FORMAT_VERSION:
        raise SerializationError(f"지원하지 않는 형식 버전: {data.get('version')!r}")
    num_wires = data.get("num_wires")
    constraints = data.get("constraints")
    if isinstance(num_wires, bool) or not isinstance(num_wires, int) or num_wires < 1:
        raise SerializationError(f"num_wires 오류: {num_wires!r}")
    if not isinstance(constraints, list):
        raise SerializationError("constraints 는 리스트여야 합니다")
    hash_name = data.get("hash_function")
    if hash_name is not None and (not isinstance(hash_name, str) or hash_name not in HASH_FUNCTIONS):
        raise SerializationError(f"알 수 없는 해시 함수: {hash_name!r}")
    rows = [deserialize_constraint(row) for row in constraints]
    try:
        return R1CS(num_wires, rows, hash_name)
    except StructuralError as exc:
        raise SerializationError(str(exc)) from exc


def serialize_r1cs(r1cs):
    """R1CS → bytes (JSON)"""
    return json.dumps(r1cs_to_dict(r1cs), sort_keys=True).encode()


def deserialize_r1cs(data):
    """bytes → R1CS"""
    return r1cs_from_dict(_load_json(data))


# ─── Proof ───

def proof_to_dict(proof):
    """Proof → dict"""
    return {
        "version": FORMAT_VERSION,
        "circuit_id": proof.circuit_id,
        "hash_function": proof.hash_function,
        "public_inputs": {str(w): serialize_fr(v) for w, v in sorted(proof.public_inputs.items())},
        "outputs": {str(w): serialize_fr(v) for w, v in sorted(proof.outputs.items())},
        "witness": serialize_witness(proof.witness).hex(),
    }


def proof_from_dict(data):
    """dict → Proof"""
    if not isinstance(data, dict):
        raise SerializationError("proof 는 dict 여야 합니다")
    if data.get("version") != FORMAT_VERSION:
        raise SerializationError(f"지원하지 않는 형식 버전: {data.get('version')!r}")
    try:
        circuit_id = data["circuit_id"]
        hash_function = data["hash_function"]
        public_raw = data["public_inputs"]
        witness_hex = data["witness"]
    except KeyError as exc:
        raise SerializationError(f"proof 필드 누락: {exc}") from exc
    if not isinstance(circuit_id, str) or not isinstance(hash_function, str):
        raise SerializationError("circuit_id / hash_function 은 문자열이어야 합니다")
    outputs_raw = data.get("outputs", {})
    if not isinstance(public_raw, dict) or not isinstance(outputs_raw, dict):
        raise SerializationError("public_inputs / outputs 는 dict 여야 합니다")
    try:
        public_inputs = {int(w): deserialize_fr(v) for w, v in public_raw.items()}
        outputs = {int(w): deserialize_fr(v) for w, v in outputs_raw.items()}
        witness_bytes = bytes.fromhex(witness_hex)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"proof 형식 오류: {exc}") from exc
    return Proof(circuit_id, hash_function, public_inputs, deserialize_witness(witness_bytes), outputs)


def serialize_proof(proof):
    """Proof → bytes (JSON)"""
    return json.dumps(proof_to_dict(proof), sort_keys=True).encode()


def deserialize_proof(data):
    """bytes → Proof"""
    return proof_from_dict(_load_json(data))


def _load_json(data):
    try:
        if isinstance(data, (bytes, bytearray)):
            data = data.decode()
        return json.loads(data)
    except (UnicodeDecodeError, ValueError, TypeError) as exc:
        raise SerializationError(f"JSON 이 아닙니다: {exc}") from exc

