from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the puck arena server!'})


@main.route('/api/match/state')
def match_state():
    """Current players, puck, score and free seats as JSON."""
    return jsonify(current_app.extensions['match'].snapshot())
