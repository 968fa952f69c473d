from flask import Blueprint, jsonify, request
from datetime import datetime, timezone

api = Blueprint("api", __name__)

VERSION = "1.0.0"


def utcnow():
    return datetime.now(timezone.utc)


def timestamp():
    return utcnow().isoformat()


@api.get("/health")
def health():
    return jsonify({
        "status": "OK",
        "timestamp": timestamp(),
        "message": "Server is running normally",
        "https": request.is_secure,
    })


@api.get("/status")
def status():
    # services is a fixed stub, nothing is probed
    return jsonify({
        "version": VERSION,
        "status": "running",
        "timestamp": timestamp(),
        "https": request.is_secure,
        "services": {
            "database": "connected",
            "cache": "connected",
            "queue": "connected",
        },
    })


@api.get("/ping")
def ping():
    return jsonify({"message": "pong", "timestamp": timestamp(), "https": request.is_secure})
