"""Settings blueprint - read and update settings sections."""
from typing import Any, Dict
from flask import Blueprint, request, current_app
from pos.database import get_session
from pos.exceptions import BusinessLogicError
from pos.services import setting_service

settings_bp = Blueprint('settings', __name__, url_prefix='/settings')


@settings_bp.route('', methods=['GET'])
def all_settings() -> Dict[str, Any]:
    session = get_session()
    return {'settings': setting_service.get_all_settings(session)}


@settings_bp.route('/<section>', methods=['GET'])
def get_section(section: str) -> Dict[str, Any]:
    session = get_session()
    return {section: setting_service.get_section(session, section)}


@settings_bp.route('/<section>', methods=['PUT', 'PATCH'])
def update_section(section: str) -> Dict[str, Any]:
    """Merge the JSON body into a section (e.g. wholesale_settings)."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise BusinessLogicError('Se esperaba un objeto JSON')

    session = get_session()
    values = setting_service.update_section(session, section, payload)
    current_app.logger.info(f"Settings section '{section}' updated")
    return {section: values}
