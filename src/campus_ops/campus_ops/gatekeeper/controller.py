from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file
from PIL import Image, UnidentifiedImageError

from ..common.http import json_api
from ..core.constants import MIN_SCAN_CODE_LENGTH
from ..core.exceptions import ValidationError
from ..container import Container


def decode_image_code(stream) -> str:
    """First barcode/QR payload found in an uploaded image."""
    # Imported here: pyzbar needs the native zbar library at import time.
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream).convert("RGB")
    except UnidentifiedImageError:
        raise ValidationError("Uploaded file is not an image") from None

    decoded = pyzbar_decode(img)
    if not decoded:
        raise ValidationError("No barcode detected in image")
    return payload_text(decoded[0].data)


def payload_text(data: bytes) -> str:
    try:
        return data.decode("utf-8").strip()
    except UnicodeDecodeError:
        raise ValidationError("Barcode does not contain readable text") from None


def _scan_code() -> str:
    if "image" in request.files:
        return decode_image_code(request.files["image"].stream)

    data = request.get_json(silent=True) or {}
    return str(data.get("barcode") or data.get("barcodeId") or "").strip()


def register(app: Flask, container: Container) -> None:
    gate = container.gate_service
    barcodes = container.barcode_service

    @app.route("/api/gatekeeper/scan", methods=["POST"], endpoint="api_gate_scan")
    def api_gate_scan():
        try:
            code = _scan_code()
        except ValidationError as e:
            return jsonify({"success": False, "status": "error", "message": str(e)}), 400

        if len(code) < MIN_SCAN_CODE_LENGTH:
            return (
                jsonify(
                    {
                        "success": False,
                        "status": "error",
                        "message": f'Invalid barcode format - received: "{code or "empty"}"',
                    }
                ),
                400,
            )

        result = gate.scan(code)
        return jsonify(result.to_payload()), result.http_status

    @app.route("/api/gatekeeper/search", methods=["GET"], endpoint="api_gate_search")
    @json_api
    def api_gate_search():
        results = gate.search(request.args.get("query") or "")
        return jsonify({"success": True, "count": len(results), "data": [r.to_dict() for r in results]})

    @app.route("/api/gatekeeper/generate-barcode/<int:student_pk>", methods=["POST"], endpoint="api_gate_barcode")
    @json_api
    def api_gate_barcode(student_pk: int):
        student = barcodes.generate(student_pk)
        return jsonify(
            {
                "success": True,
                "message": f"Barcode generated: {student.barcode_id}",
                "barcodeId": student.barcode_id,
                "student": {"studentId": student.student_id, "name": student.name, "barcodeId": student.barcode_id},
            }
        )

    @app.route("/api/gatekeeper/barcode/<int:student_pk>.png", methods=["GET"], endpoint="api_gate_barcode_png")
    @json_api
    def api_gate_barcode_png(student_pk: int):
        png = barcodes.qr_png(student_pk)
        return send_file(io.BytesIO(png), mimetype="image/png")

    @app.route("/api/gatekeeper/reprint/<int:student_pk>", methods=["POST"], endpoint="api_gate_reprint")
    @json_api
    def api_gate_reprint(student_pk: int):
        student = barcodes.record_reprint(student_pk)
        return jsonify(
            {
                "success": True,
                "message": f"Reprint recorded. This is copy #{student.reprint_count}",
                "reprintCount": student.reprint_count,
                "student": {
                    "studentId": student.student_id,
                    "name": student.name,
                    "barcodeId": student.barcode_id,
                    "reprintCount": student.reprint_count,
                },
            }
        )
