from flask import Blueprint, current_app, jsonify
from poker.services.sessions import SessionNotFound

main = Blueprint('main', __name__)


def _coordinator():
    return current_app.extensions['poker']


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the planning poker server!'})


@main.route('/health')
def health():
    return jsonify({'status': 'ok', 'sessions': len(_coordinator().registry)})


@main.route('/api/vote-values')
def vote_values():
    return jsonify({'values': list(current_app.config.get('VOTE_VALUES', []))})


@main.route('/api/sessions/<string:session_id>')
def get_session_state(session_id):
    """Current snapshot of a session, same payload as the session-state event."""
    try:
        snapshot = _coordinator().snapshot(session_id)
    except SessionNotFound:
        return jsonify({'error': 'Session not found'}), 404
    return jsonify(snapshot)
