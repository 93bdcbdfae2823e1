"""
R1CS Flask Blueprint: 증명 생성/검증 엔드포인트
=================================================

  GET  /r1cs/circuits                    예제 회로 목록
  GET  /r1cs/circuits/<name>             게이트 테이블 + R1CS 행
  POST /r1cs/circuits/<name>/prove       증명 생성, TinyDB 에 저장
  GET  /r1cs/proofs/<proof_id>           저장된 증명 조회
  POST /r1cs/proofs/<proof_id>/verify    저장된 증명 검증
  POST /r1cs/proofs/clear                저장된 증명 전체 삭제

모든 응답은 JSON 이다.
"""

import secrets

from flask import Blueprint, current_app, jsonify, request
from tinydb import Query

from zkr1cs.errors import ZKError
from zkr1cs.example import EXAMPLES
from zkr1cs.hash import DEFAULT_HASH, get_hash_function
from zkr1cs.prover import prove
from zkr1cs.r1cs import circuit_to_r1cs
from zkr1cs.serializers import (
    proof_from_dict, proof_to_dict, r1cs_to_dict, serialize_fr,
)
from zkr1cs.verifier import verify

r1cs_bp = Blueprint('r1cs', __name__, url_prefix='/r1cs')

DATA = Query()

DB_EXTENSION = "zkr1cs.proofs"


def init_r1cs_bp(app, db):
    """app.py에서 DB 테이블을 주입받고 블루프린트를 등록한다.

    테이블은 앱마다 따로 보관하므로 한 프로세스에 앱이 여러 개 있어도 섞이지 않는다.
    """
    app.extensions[DB_EXTENSION] = db
    app.register_blueprint(r1cs_bp)


def _db():
    return current_app.extensions[DB_EXTENSION]


# ─── DB 헬퍼 ───

def db_get(key):
    """DB에서 키로 데이터를 조회한다."""
    result = _db().search(DATA.type == key)
    if not result:
        return None
    return result[0].get("data")


def db_set(key, data):
    """DB에 키로 데이터를 저장한다."""
    _db().upsert({"type": key, "data": data}, DATA.type == key)


def db_remove_prefix(prefix):
    """prefix로 시작하는 모든 키를 삭제한다."""
    _db().remove(DATA.type.test(lambda t: t.startswith(prefix)))


# ─── 요청 헬퍼 ───

def error(message, status=400):
    return jsonify({"error": message}), status


@r1cs_bp.errorhandler(ZKError)
def handle_zk_error(exc):
    return error(str(exc), 400)


def _to_int(value):
    if isinstance(value, bool):
        raise ZKError(f"정수가 아닙니다: {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value), 0)
    except ValueError:
        raise ZKError(f"정수가 아닙니다: {value!r}") from None


def _json_body():
    """요청 JSON 본문. 없으면 {}, 객체가 아니면 400."""
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ZKError("요청 본문은 JSON 객체여야 합니다")
    return body


def _instantiate(name, hash_name):
    example = EXAMPLES.get(name)
    if example is None:
        return None, None, None
    circuit, wires = example.instantiate(get_hash_function(hash_name))
    return example, circuit, wires


# ──────────────────────────────────────────────────────────────
# 회로
# ──────────────────────────────────────────────────────────────

@r1cs_bp.route("/circuits")
def list_circuits():
    """예제 회로 목록."""
    return jsonify([
        {"name": ex.name, "description": ex.description}
        for ex in EXAMPLES.values()
    ])


@r1cs_bp.route("/circuits/<name>")
def circuit_detail(name):
    """회로 구조와 R1CS 행을 반환한다."""
    hash_name = request.args.get("hash", DEFAULT_HASH)
    example, circuit, wires = _instantiate(name, hash_name)
    if example is None:
        return error(f"알 수 없는 회로: {name}", 404)

    r1cs = circuit_to_r1cs(circuit)
    return jsonify({
        "name": example.name,
        "description": example.description,
        "circuit_id": circuit.circuit_id(),
        "hash_function": circuit.hash_function.name,
        "num_wires": circuit.num_wires,
        "wires": {wire_name: wire.id for wire_name, wire in wires.items()},
        "public_inputs": circuit.public_inputs(),
        "private_inputs": circuit.private_inputs(),
        "outputs": circuit.outputs(),
        "gates": circuit.describe(),
        "r1cs": r1cs_to_dict(r1cs),
        "defaults": {k: str(v) for k, v in example.defaults(circuit).items()},
    })


@r1cs_bp.route("/circuits/<name>/prove", methods=["POST"])
def circuit_prove(name):
    """입력으로 증명을 만들고 DB에 저장한다.

    요청 JSON: {"inputs": {"age": 19}, "hash": "mimc7"}  (모두 선택)
    """
    body = _json_body()
    hash_name = body.get("hash", DEFAULT_HASH)
    example, circuit, wires = _instantiate(name, hash_name)
    if example is None:
        return error(f"알 수 없는 회로: {name}", 404)

    values = example.defaults(circuit)
    raw_inputs = body.get("inputs", {})
    if not isinstance(raw_inputs, dict):
        return error("inputs 는 객체여야 합니다")
    for input_name, value in raw_inputs.items():
        if input_name not in wires:
            return error(f"회로 '{name}' 에 없는 입력: {input_name}")
        values[input_name] = _to_int(value)

    proof = prove(circuit, example.bind(wires, values))
    proof_id = secrets.token_hex(8)
    record = {
        "id": proof_id,
        "circuit": example.name,
        "hash_function": hash_name,
        "public_values": {str(w): str(v) for w, v in
                          example.public_values(circuit, wires, values).items()},
        "proof": proof_to_dict(proof),
        "verification": None,
    }
    db_set(f"r1cs.proof.{proof_id}", record)

    return jsonify({
        "id": proof_id,
        "circuit_id": proof.circuit_id,
        "public_inputs": {str(w): serialize_fr(v) for w, v in proof.public_inputs.items()},
        "outputs": {str(w): serialize_fr(v) for w, v in proof.outputs.items()},
    }), 201


# ──────────────────────────────────────────────────────────────
# 증명
# ──────────────────────────────────────────────────────────────

@r1cs_bp.route("/proofs/<proof_id>")
def proof_detail(proof_id):
    record = db_get(f"r1cs.proof.{proof_id}")
    if record is None:
        return error(f"증명이 없습니다: {proof_id}", 404)
    return jsonify(record)


@r1cs_bp.route("/proofs/<proof_id>/verify", methods=["POST"])
def proof_verify(proof_id):
    """저장된 증명을 검증한다.

    요청 JSON: {"public_inputs": {"<wire_id>": value}}  (선택, 없으면 증명 시점 값 사용)
    """
    record = db_get(f"r1cs.proof.{proof_id}")
    if record is None:
        return error(f"증명이 없습니다: {proof_id}", 404)

    example, circuit, wires = _instantiate(record["circuit"], record["hash_function"])
    proof = proof_from_dict(record["proof"])

    body = _json_body()
    public_values = body.get("public_inputs", record["public_values"])
    if not isinstance(public_values, dict):
        return error("public_inputs 는 객체여야 합니다")
    public_values = {_to_int(w): _to_int(v) for w, v in public_values.items()}

    result = verify(circuit, proof,
                    public_inputs=public_values,
                    expected_outputs=example.expected_outputs(wires))
    verification = {
        "result": "Satisfied" if result else "Violated",
        "index": result.index,
        "reason": result.reason,
    }
    record["verification"] = verification
    db_set(f"r1cs.proof.{proof_id}", record)
    return jsonify(verification)


@r1cs_bp.route("/proofs/clear", methods=["POST"])
def proofs_clear():
    db_remove_prefix("r1cs.proof.")
    return jsonify({"cleared": True})
