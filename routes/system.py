"""
System routes.

Handles:
- /api/health - Health check endpoint
- /api/settings - Quote settings (and sectors)
- /api/company - Company info and logo
- /api/backup - Export / restore all data
"""

from flask import Blueprint, current_app

from services.backup_service import backup_filename
from logging_config import get_logger
from .common import json_body, sanitize_record, sanitize_text, service


# Module logger
logger = get_logger(__name__)

system_bp = Blueprint("system", __name__, url_prefix="/api")


@system_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint with storage and autosave status."""
    store = service("STORE")
    autosaver = service("AUTOSAVER")

    health_status = {
        "status": "ok",
        "environment": current_app.config.get("ENVIRONMENT", "unknown"),
        "checks": {
            "storage": "file" if store.path else "memory",
            "autosave": autosaver.status or "idle",
        },
    }
    return health_status, 200


# =============================================================================
# SETTINGS
# =============================================================================

@system_bp.route("/settings", methods=["GET"])
def get_settings():
    return service("SETTINGS_SERVICE").get().to_dict()


@system_bp.route("/settings", methods=["PUT", "PATCH"])
def update_settings():
    changes = json_body()
    settings = service("SETTINGS_SERVICE").update(sanitize_record(changes))
    return settings.to_dict()


@system_bp.route("/settings/sectors", methods=["POST"])
def add_sector():
    name = sanitize_text(json_body().get("name"), max_length=100)
    return service("SETTINGS_SERVICE").add_sector(name).to_dict(), 201


@system_bp.route("/settings/sectors/<name>", methods=["DELETE"])
def remove_sector(name: str):
    return service("SETTINGS_SERVICE").remove_sector(name).to_dict()


# =============================================================================
# COMPANY
# =============================================================================

@system_bp.route("/company", methods=["GET"])
def get_company():
    settings_service = service("SETTINGS_SERVICE")
    data = settings_service.get_company_info().to_dict()
    data["logo"] = settings_service.get_logo()
    return data


@system_bp.route("/company", methods=["PUT"])
def update_company():
    """Replace company info. A "logo" key (data URL, or null to clear) is optional."""
    data = json_body()
    settings_service = service("SETTINGS_SERVICE")

    if "logo" in data:
        settings_service.set_logo(data.pop("logo"))
    info = settings_service.set_company_info(sanitize_record(data, max_length=200))

    result = info.to_dict()
    result["logo"] = settings_service.get_logo()
    return result


# =============================================================================
# BACKUP
# =============================================================================

@system_bp.route("/backup", methods=["GET"])
def export_backup():
    return {
        "filename": backup_filename(),
        "data": service("BACKUP_SERVICE").export(),
    }


@system_bp.route("/backup", methods=["POST"])
def restore_backup():
    restored = service("BACKUP_SERVICE").restore(json_body())
    logger.info(f"Backup restored over the API: {restored}")
    return {"restored": restored}
