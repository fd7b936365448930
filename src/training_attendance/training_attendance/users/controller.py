from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import json_body, json_errors
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    @json_errors
    def login():
        data = json_body()
        container.auth_service.start_login(data.get("username", ""), data.get("password", ""))
        return jsonify({"success": True, "message": "OTP sent"}), 200

    @app.route("/api/auth/verify-otp", methods=["POST"], endpoint="auth_verify_otp")
    @json_errors
    def verify_otp():
        data = json_body()
        result = container.auth_service.verify_otp(data.get("username", ""), data.get("otp", ""))
        return jsonify(
            {
                "success": True,
                "token": result.token,
                "userId": result.user_id,
                "username": result.username,
                "name": result.full_name,
                "role": result.role.value,
            }
        ), 200
