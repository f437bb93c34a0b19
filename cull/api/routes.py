"""
Flask routes for the Cull web API.

Contains all API endpoints. The shared ScanState lives in the application
config under 'SCAN_STATE' (see cull.app.create_app).
"""

from __future__ import annotations

import logging
from datetime import datetime

from flask import Blueprint, current_app, jsonify, request

from ..config import DEFAULT_MODE, DEFAULT_THRESHOLD
from ..deletion import delete_files, delete_permanently, move_to_trash
from ..state import ScanState
from ..user_config import get_user_config
from ..utils import validators
from .orchestrator import ScanOrchestrator, is_known_strategy

# Create blueprint for routes
api = Blueprint('api', __name__)

# Module logger
_logger = logging.getLogger(__name__)


def _state() -> ScanState:
    return current_app.config['SCAN_STATE']


def _scan_running_response():
    return jsonify({'error': 'A scan is already running'}), 409


# =============================================================================
# Scan control
# =============================================================================

@api.route('/api/scan', methods=['POST'])
def api_scan():
    """Start a new scan in the background."""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'Request body required'}), 400

    scan_state = _state()
    if scan_state.is_scanning:
        return _scan_running_response()

    user_config = get_user_config()
    directory = str(data.get('directory', '')).strip()
    mode = data.get('mode', user_config.default_mode or DEFAULT_MODE)
    threshold = data.get('threshold', user_config.default_threshold or DEFAULT_THRESHOLD)
    workers = data.get('workers', user_config.default_workers)
    auto_select_strategy = data.get('autoSelectStrategy', '')

    # Validate parameters
    is_valid, error = validators.validate_scan_params(
        directory=directory,
        mode=mode,
        threshold=threshold,
        workers=workers,
    )
    if not is_valid:
        return jsonify({'error': error}), 400
    if not is_known_strategy(auto_select_strategy):
        return jsonify({'error': f'Unknown strategy: {auto_select_strategy}'}), 400

    orchestrator = ScanOrchestrator(
        scan_state=scan_state,
        directory=directory,
        mode=mode,
        threshold=int(threshold),
        workers=int(workers),
        auto_select_strategy=auto_select_strategy,
    )
    if orchestrator.start() is None:
        return _scan_running_response()

    _logger.info(f"Started scan of {directory}")
    return jsonify({'status': 'started'})


@api.route('/api/cancel', methods=['POST'])
def api_cancel():
    """Cancel the current scan."""
    if _state().request_cancel():
        return jsonify({'status': 'cancel_requested'})
    return jsonify({'status': 'no_scan_running'})


@api.route('/api/ping')
def api_ping():
    """Simple endpoint for connection monitoring."""
    return jsonify({'status': 'ok', 'time': datetime.now().isoformat()})


@api.route('/api/status')
def api_status():
    """Return current scan status and the latest progress snapshot."""
    return jsonify(_state().to_status_dict())


@api.route('/api/groups')
def api_groups():
    """Return all duplicate groups and the current selection."""
    return jsonify(_state().to_groups_dict())


# =============================================================================
# Selection
# =============================================================================

@api.route('/api/selection/toggle', methods=['POST'])
def api_selection_toggle():
    """Toggle one file in the selection."""
    data = request.get_json(silent=True) or {}
    file_id = data.get('fileId')
    if not isinstance(file_id, int) or isinstance(file_id, bool):
        return jsonify({'error': 'fileId must be an integer'}), 400

    scan_state = _state()
    changed = scan_state.toggle_file(file_id)
    return jsonify({'changed': changed, 'selected': sorted(scan_state.selected)})


@api.route('/api/selection/group', methods=['POST'])
def api_selection_group():
    """Select every file of a group except the largest."""
    data = request.get_json(silent=True) or {}
    group_id = str(data.get('groupId', ''))

    scan_state = _state()
    if not scan_state.select_all_but_largest(group_id):
        return jsonify({'error': f'Unknown group: {group_id}'}), 404
    return jsonify({'selected': sorted(scan_state.selected)})


@api.route('/api/selection/strategy', methods=['POST'])
def api_selection_strategy():
    """Apply an auto-selection strategy to current results."""
    data = request.get_json(silent=True) or {}
    strategy = data.get('strategy', 'largest')

    scan_state = _state()
    if not strategy or not is_known_strategy(strategy):
        return jsonify({'error': f'Unknown strategy: {strategy}'}), 400
    if not scan_state.groups:
        return jsonify({'error': 'No groups to apply strategy to'}), 400

    count = scan_state.apply_strategy(strategy)
    return jsonify({
        'status': 'applied',
        'count': count,
        'selected': sorted(scan_state.selected),
    })


@api.route('/api/selection/clear', methods=['POST'])
def api_selection_clear():
    """Unmark every file."""
    _state().clear_selection()
    return jsonify({'status': 'cleared'})


# =============================================================================
# Deletion
# =============================================================================

@api.route('/api/delete', methods=['POST'])
def api_delete():
    """
    Remove the selected files.

    Files go to the system trash unless 'permanent' is true. The removal
    never takes every member of a group: such requests are rejected.
    """
    data = request.get_json(silent=True) or {}
    permanent = bool(data.get('permanent', False))

    scan_state = _state()
    if scan_state.is_scanning:
        return _scan_running_response()

    records = scan_state.marked_files()
    if not records:
        return jsonify({'error': 'No files selected'}), 400

    marked = {f.id for f in records}
    for group in scan_state.groups:
        if group.file_ids <= marked:
            return jsonify({'error': 'Cannot delete every file in a group'}), 400

    remover = delete_permanently if permanent else move_to_trash
    result = delete_files(
        records,
        remover=remover,
        max_workers=get_user_config().delete_workers,
    )
    scan_state.apply_deletion_result(result)

    response = result.to_dict()
    response['remaining_groups'] = len(scan_state.groups)
    return jsonify(response)


__all__ = ['api']
