from datetime import datetime

from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from playkers import db
from playkers.models import Match, MatchParticipant, MATCH_STATUSES, SPORTS
from playkers.services.matches.scoring import apply_score_update, coerce_score, flatten_roster, ScoreUpdateError
from playkers.services.matches.results import complete_match, CompletionError
from playkers.services.players import link_roster
from playkers.socketio_events import broadcast_match_update

matches = Blueprint('matches', __name__)


def _parse_datetime(value):
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00')).replace(tzinfo=None)
    except ValueError:
        return None


@matches.route('', methods=['GET'])
def list_matches():
    query = Match.query
    if request.args.get('sport'):
        query = query.filter_by(sport=request.args['sport'])
    if request.args.get('status'):
        query = query.filter_by(status=request.args['status'])
    if request.args.get('isPublic') == 'true':
        query = query.filter_by(is_public=True)
    return jsonify([m.to_dict() for m in query.order_by(Match.created_at.desc()).all()])


@matches.route('', methods=['POST'])
@login_required
def create_match():
    data = request.get_json(silent=True) or {}
    title = data.get('title')
    sport = data.get('sport')
    if not title:
        return jsonify({'error': 'title is required'}), 400
    if sport not in SPORTS:
        return jsonify({'error': f'sport must be one of {", ".join(SPORTS)}'}), 400
    status = data.get('status') or 'upcoming'
    if status not in MATCH_STATUSES:
        return jsonify({'error': f'status must be one of {", ".join(MATCH_STATUSES)}'}), 400

    match_data = data.get('matchData')
    if match_data is not None and not isinstance(match_data, dict):
        return jsonify({'error': 'matchData must be an object'}), 400
    try:
        team1_score = coerce_score(sport, data.get('team1Score'))
        team2_score = coerce_score(sport, data.get('team2Score'))
    except ScoreUpdateError as exc:
        return jsonify({'error': str(exc)}), 400

    if match_data:
        match_data = dict(match_data)
        for key in ('team1Roster', 'team2Roster'):
            if key in match_data:
                match_data[key] = link_roster(match_data[key])

    match = Match(
        title=title,
        sport=sport,
        match_type=data.get('matchType'),
        region=data.get('region'),
        venue_id=data.get('venueId'),
        organizer_id=current_user.id,
        scheduled_at=_parse_datetime(data.get('scheduledAt')),
        max_players=data.get('maxPlayers'),
        status=status,
        is_public=bool(data.get('isPublic', True)),
        team1_name=data.get('team1Name'),
        team2_name=data.get('team2Name'),
        team1_score=team1_score,
        team2_score=team2_score,
        match_data=match_data,
        description=data.get('description'),
    )
    db.session.add(match)
    db.session.commit()
    current_app.logger.info(f"[match-create] match={match.id} sport={sport} organizer={current_user.id}")
    return jsonify(match.to_dict()), 201


@matches.route('/<string:match_id>', methods=['GET'])
def get_match(match_id):
    match = Match.query.filter_by(id=match_id).first_or_404()
    return jsonify(match.to_dict())


@matches.route('/<string:match_id>', methods=['PUT'])
@login_required
def update_match(match_id):
    match = Match.query.filter_by(id=match_id).first_or_404()
    data = request.get_json(silent=True) or {}
    try:
        changed = apply_score_update(match, data)
    except ScoreUpdateError as exc:
        db.session.rollback()
        return jsonify({'error': str(exc)}), 400
    current_app.logger.info(
        f"[score-update] match={match.id} sport={match.sport} status={match.status} fields={','.join(changed) or '-'}"
    )
    broadcast_match_update(match)
    return jsonify(match.to_dict())


@matches.route('/<string:match_id>/participants', methods=['GET'])
def get_participants(match_id):
    participants = MatchParticipant.query.filter_by(match_id=match_id).all()
    return jsonify([p.to_dict() for p in participants])


@matches.route('/<string:match_id>/roster', methods=['GET'])
def get_roster(match_id):
    match = Match.query.filter_by(id=match_id).first_or_404()
    return jsonify(flatten_roster(match))


@matches.route('/<string:match_id>/join', methods=['POST'])
@login_required
def join_match(match_id):
    Match.query.filter_by(id=match_id).first_or_404()
    data = request.get_json(silent=True) or {}
    participant = MatchParticipant(
        match_id=match_id,
        user_id=current_user.id,
        team=data.get('team'),
        role=data.get('role') or 'player',
        status=data.get('status') or 'joined',
    )
    db.session.add(participant)
    db.session.commit()
    return jsonify(participant.to_dict()), 201


@matches.route('/<string:match_id>/leave', methods=['DELETE'])
@login_required
def leave_match(match_id):
    participant = MatchParticipant.query.filter_by(match_id=match_id, user_id=current_user.id).first()
    if not participant:
        return jsonify({'error': 'Participation not found'}), 404
    db.session.delete(participant)
    db.session.commit()
    return '', 204


@matches.route('/<string:match_id>/complete', methods=['POST'])
@login_required
def complete(match_id):
    match = Match.query.filter_by(id=match_id).first_or_404()
    data = request.get_json(silent=True) or {}
    try:
        outcome = complete_match(match, data)
    except CompletionError as exc:
        db.session.rollback()
        return jsonify({'error': str(exc)}), 400

    if outcome['alreadyProcessed']:
        current_app.logger.info(f"[complete-skip] match={match.id} already processed")
        return jsonify({'message': 'Match already completed', 'match': match.to_dict(), 'alreadyProcessed': True})

    stats = outcome['playerStats']
    current_app.logger.info(
        f"[complete] match={match.id} result={match.match_data['resultSummary'].get('resultType')} players={len(stats)}"
    )
    broadcast_match_update(match)
    data_bag = match.match_data or {}
    team_ids = [t for t in (data_bag.get('team1Id'), data_bag.get('team2Id')) if t]
    return jsonify({
        'message': 'Match completed successfully',
        'match': match.to_dict(),
        'alreadyProcessed': False,
        'statistics': {
            'playersUpdated': len(stats),
            'careersUpdated': outcome['careersUpdated'],
            'awardsProcessed': len([v for v in (match.match_data.get('awards') or {}).values() if v]),
        },
        'cacheInvalidation': {
            'teams': team_ids,
            'players': [s['playerId'] for s in stats],
            'matches': [match.id],
        },
    })
