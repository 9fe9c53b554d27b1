from __future__ import annotations

import io
from typing import Optional

from flask import Flask, jsonify, request, send_file

from ..core.enums import ErrorKind, Role
from ..core.result import Result
from ..container import Container
from ..reports.exporter import PDF_MIMETYPE, XLSX_MIMETYPE
from .model import Actor

RESERVED_ARGS = {"fields", "id_field"}

EXPORT_MIMETYPES = {"xlsx": XLSX_MIMETYPE, "pdf": PDF_MIMETYPE}


def current_actor() -> Optional[Actor]:
    actor_id = (request.headers.get("X-Actor-Id") or "").strip()
    if not actor_id:
        return None
    email = (request.headers.get("X-Actor-Email") or "").strip() or None
    return Actor(actor_id=actor_id, email=email)


def respond(result: Result):
    if result.ok:
        return jsonify(result.to_dict()), 200
    status = 400 if result.error_kind == ErrorKind.INVALID_ARGUMENT else 502
    return jsonify(result.to_dict()), status


def parse_role(value: str) -> Optional[Role]:
    try:
        return Role(value)
    except ValueError:
        return None


def register(app: Flask, container: Container) -> None:
    def _unknown_role(role: str):
        return jsonify({"ok": False, "error": f"Unknown role: {role}"}), 404

    def _filters() -> dict:
        return {k: v for k, v in request.args.items() if k not in RESERVED_ARGS}

    def _json_body() -> dict:
        body = request.get_json(silent=True)
        return body if isinstance(body, dict) else {}

    @app.route("/api/<role>/<collection>", methods=["GET"], endpoint="records_list")
    def records_list(role: str, collection: str):
        r = parse_role(role)
        if r is None:
            return _unknown_role(role)
        fields = request.args.get("fields", "*")
        return respond(container.store_for(r).list(collection, fields, _filters(), actor=current_actor()))

    @app.route("/api/<role>/<collection>", methods=["POST"], endpoint="records_create")
    def records_create(role: str, collection: str):
        r = parse_role(role)
        if r is None:
            return _unknown_role(role)
        id_field = request.args.get("id_field")
        result = container.store_for(r).create(collection, _json_body(), current_actor(), id_field=id_field)
        if result.ok:
            return jsonify(result.to_dict()), 201
        return respond(result)

    def _export(role: str, collection: str, fmt: str):
        r = parse_role(role)
        if r is None:
            return _unknown_role(role)
        result = container.store_for(r).list(collection, "*", _filters(), actor=current_actor())
        if not result.ok:
            return respond(result)
        fields = request.args.get("fields")
        columns = [f.strip() for f in fields.split(",") if f.strip()] if fields else None
        payload = container.report_service.export(result, fmt=fmt, columns=columns, sheet_name=collection)
        return send_file(
            io.BytesIO(payload),
            mimetype=EXPORT_MIMETYPES[fmt],
            as_attachment=True,
            download_name=f"{collection}.{fmt}",
        )

    @app.route("/api/<role>/<collection>/export.xlsx", methods=["GET"], endpoint="records_export")
    def records_export(role: str, collection: str):
        return _export(role, collection, "xlsx")

    @app.route("/api/<role>/<collection>/export.pdf", methods=["GET"], endpoint="records_export_pdf")
    def records_export_pdf(role: str, collection: str):
        return _export(role, collection, "pdf")

    @app.route("/api/<role>/<collection>/<identity>", methods=["GET"], endpoint="records_get")
    def records_get(role: str, collection: str, identity: str):
        r = parse_role(role)
        if r is None:
            return _unknown_role(role)
        id_field = request.args.get("id_field", "id")
        result = container.store_for(r).get(collection, identity, id_field=id_field)
        if result.ok and result.data is None:
            return jsonify({"ok": False, "error": f"{collection} #{identity} not found"}), 404
        return respond(result)

    @app.route("/api/<role>/<collection>/<identity>", methods=["PUT", "PATCH"], endpoint="records_update")
    def records_update(role: str, collection: str, identity: str):
        r = parse_role(role)
        if r is None:
            return _unknown_role(role)
        id_field = request.args.get("id_field", "id")
        return respond(container.store_for(r).update(collection, identity, _json_body(), current_actor(), id_field=id_field))

    @app.route("/api/<role>/<collection>/<identity>", methods=["DELETE"], endpoint="records_delete")
    def records_delete(role: str, collection: str, identity: str):
        r = parse_role(role)
        if r is None:
            return _unknown_role(role)
        id_field = request.args.get("id_field", "id")
        return respond(container.store_for(r).delete(collection, identity, current_actor(), id_field=id_field))

    @app.route("/api/me/<collection>", methods=["GET"], endpoint="records_mine")
    def records_mine(collection: str):
        store = container.store_for(Role.EMPLOYEE)
        empid = request.args.get("empid")
        email = request.args.get("email")
        fields = request.args.get("fields", "*")
        if request.args.get("mode", "first") == "any":
            return respond(store.resolve_any(collection, empid, email, fields))
        return respond(store.resolve(collection, empid, email, fields))

    @app.route("/api/me/<collection>", methods=["PUT", "PATCH"], endpoint="records_mine_update")
    def records_mine_update(collection: str):
        store = container.store_for(Role.EMPLOYEE)
        return respond(
            store.update_own(
                collection,
                _json_body(),
                primary_key=request.args.get("empid"),
                secondary_key=request.args.get("email"),
                actor=current_actor(),
            )
        )

    @app.route("/api/me/<collection>", methods=["DELETE"], endpoint="records_mine_delete")
    def records_mine_delete(collection: str):
        store = container.store_for(Role.EMPLOYEE)
        return respond(
            store.delete_own(
                collection,
                primary_key=request.args.get("empid"),
                secondary_key=request.args.get("email"),
                actor=current_actor(),
            )
        )
