"""
Client routes.

Handles:
- /api/clients - List and register clients
- /api/clients/<id> - Read, replace, delete one client
"""

from flask import Blueprint, request

from .common import json_body, sanitize_record, service

clients_bp = Blueprint("clients", __name__, url_prefix="/api/clients")


@clients_bp.route("", methods=["GET"])
def list_clients():
    """List clients sorted by name; ?search= matches name, tax id or phone."""
    clients = service("CLIENT_SERVICE").list_clients()

    search = request.args.get("search", "").strip().lower()
    if search:
        clients = [
            c for c in clients
            if search in c.name.lower()
            or search in (c.tax_id or "").lower()
            or search in (c.phone or "").lower()
        ]

    return {"clients": [c.to_dict() for c in clients]}


@clients_bp.route("", methods=["POST"])
def add_client():
    return service("CLIENT_SERVICE").add(sanitize_record(json_body(), max_length=200)).to_dict(), 201


@clients_bp.route("/<client_id>", methods=["GET"])
def get_client(client_id: str):
    return service("CLIENT_SERVICE").get(client_id).to_dict()


@clients_bp.route("/<client_id>", methods=["PUT"])
def update_client(client_id: str):
    data = sanitize_record(json_body(), max_length=200)
    return service("CLIENT_SERVICE").update(client_id, data).to_dict()


@clients_bp.route("/<client_id>", methods=["DELETE"])
def delete_client(client_id: str):
    service("CLIENT_SERVICE").delete(client_id)
    return "", 204
