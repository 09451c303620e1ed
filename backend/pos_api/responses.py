# Overview: Standard JSON response envelope {success, message?, data?, error?}.

from flask import jsonify


def success(data=None, message: str | None = None, status: int = 200):
    body = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def failure(message: str, status: int = 400, *, error: str | None = None, data=None):
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def validation_failure(exc):
    """400 with every failing field enumerated."""
    if exc.errors:
        return failure(str(exc), 400, data={"errors": exc.errors})
    return failure(str(exc), 400)
