"""
Flask 애플리케이션 팩토리
=========================

실행:
    flask --app app run
    python app.py

설정 (환경 변수 또는 create_app(config) 로 덮어쓰기):
    ZKR1CS_DB_PATH    TinyDB JSON 파일 경로 (기본값: db.json)
    ZKR1CS_MEMORY_DB  "1" 이면 MemoryStorage 사용 (파일을 만들지 않음)
    SECRET_KEY        Flask 세션 키
"""

import logging
import os

from flask import Flask, redirect, url_for
from tinydb import TinyDB
from tinydb.storages import MemoryStorage

from r1cs_routes import init_r1cs_bp

DEFAULT_CONFIG = {
    "SECRET_KEY": "key",
    "ZKR1CS_DB_PATH": "db.json",
    "ZKR1CS_MEMORY_DB": False,
}


def _env_flag(value):
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def load_config(overrides=None):
    """기본값 ← 환경 변수 ← overrides 순서로 설정을 합친다."""
    config = dict(DEFAULT_CONFIG)
    for key in DEFAULT_CONFIG:
        if key in os.environ:
            config[key] = os.environ[key]
    config.update(overrides or {})
    config["ZKR1CS_MEMORY_DB"] = _env_flag(config["ZKR1CS_MEMORY_DB"])
    return config


def open_db(config):
    if config["ZKR1CS_MEMORY_DB"]:
        return TinyDB(storage=MemoryStorage)    # Memory DB
    return TinyDB(config["ZKR1CS_DB_PATH"])     # Storage DB


def create_app(config=None):
    app = Flask(__name__)
    app.config.update(load_config(config))
    app.secret_key = app.config["SECRET_KEY"]

    db = open_db(app.config)
    app.extensions["zkr1cs.db"] = db
    init_r1cs_bp(app, db.table("r1cs"))

    @app.route("/")
    def main():
        return redirect(url_for("r1cs.list_circuits"))

    app.logger.setLevel(logging.INFO)
    app.logger.info("R1CS 앱 시작 (DB: %s)",
                    "memory" if app.config["ZKR1CS_MEMORY_DB"] else app.config["ZKR1CS_DB_PATH"])
    return app


if __name__ == "__main__":
    create_app().run(debug=True)
