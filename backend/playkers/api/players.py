from flask import Blueprint, jsonify, request
from playkers import db
from playkers.models import Player, PlayerPerformance

players = Blueprint('players', __name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@players.route('/<string:player_id>', methods=['GET'])
def get_player(player_id):
    player = db.session.get(Player, player_id)
    if player is None:
        return jsonify({'error': 'Player not found'}), 404
    return jsonify(player.to_dict())


@players.route('/<string:player_id>/performances', methods=['GET'])
def get_performances(player_id):
    # Zero, negative or unparsable limits fall back to the default page size
    limit = min(max(request.args.get('limit', 0, type=int), 0) or DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)
    offset = max(request.args.get('offset', 0, type=int), 0)

    player = db.session.get(Player, player_id)
    if player is None:
        return jsonify({'error': 'Player not found'}), 404

    performances = (
        PlayerPerformance.query
        .filter_by(player_id=player.id)
        .order_by(PlayerPerformance.created_at.desc(), PlayerPerformance.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return jsonify({
        'player': {'id': player.id, 'name': player.name},
        'performances': [p.to_dict() for p in performances],
        'pagination': {'limit': limit, 'offset': offset, 'count': len(performances)},
    })
