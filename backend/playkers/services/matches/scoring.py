from typing import Any, Dict, List

from playkers import db
from playkers.models import Match, MATCH_STATUSES

ROSTER_KEYS = ('team1Roster', 'team2Roster')


class ScoreUpdateError(ValueError):
    """Raised when an update payload cannot be coerced for the match."""


def _to_int(value: Any, field: str) -> int:
    if value is None or value == '':
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        raise ScoreUpdateError(f'{field} must be a number')


def coerce_score(sport: str, value: Any) -> Any:
    """Coerce a client-sent score into the stored shape for ``sport``.

    Cricket scores are ``{runs, wickets, overs}`` with ``overs`` kept as the
    display string (``"15.2"``). Every other sport stores a plain int, unless
    the client sends an object, which is stored as given.
    """
    if value is None:
        return None
    if sport == 'cricket':
        if not isinstance(value, dict):
            return {'runs': _to_int(value, 'runs'), 'wickets': 0, 'overs': '0'}
        score = dict(value)
        score['runs'] = _to_int(value.get('runs'), 'runs')
        score['wickets'] = _to_int(value.get('wickets'), 'wickets')
        overs = value.get('overs')
        score['overs'] = str(overs) if overs not in (None, '') else '0'
        return score
    if isinstance(value, dict):
        return dict(value)
    return _to_int(value, 'score')


def merge_match_data(existing: Dict[str, Any] | None, incoming: Dict[str, Any] | None) -> Dict[str, Any]:
    """Shallow-merge ``incoming`` over ``existing``; rosters survive omission."""
    existing = dict(existing or {})
    incoming = dict(incoming or {})
    merged = {**existing, **incoming}
    for key in ROSTER_KEYS:
        roster = incoming.get(key)
        if roster is None:
            roster = existing.get(key)
        if roster is None:
            merged.pop(key, None)
        else:
            merged[key] = roster
    return merged


def apply_score_update(match: Match, payload: Dict[str, Any]) -> List[str]:
    """Apply a partial score update and commit it. Returns the changed fields.

    Omitted scores are left alone; ``matchData`` is always merged into the
    stored bag. Nothing guards concurrent writers: last write wins.
    """
    changed = []
    if 'status' in payload:
        status = payload.get('status')
        if status not in MATCH_STATUSES:
            raise ScoreUpdateError(f'status must be one of {", ".join(MATCH_STATUSES)}')
        match.status = status
        changed.append('status')
    if 'team1Score' in payload:
        match.team1_score = coerce_score(match.sport, payload.get('team1Score'))
        changed.append('team1Score')
    if 'team2Score' in payload:
        match.team2_score = coerce_score(match.sport, payload.get('team2Score'))
        changed.append('team2Score')
    incoming = payload.get('matchData')
    if incoming is not None and not isinstance(incoming, dict):
        raise ScoreUpdateError('matchData must be an object')
    # Assign a new dict so the JSON column is flagged dirty
    match.match_data = merge_match_data(match.match_data, incoming)
    if incoming:
        changed.append('matchData')
    for field, column in (('team1Name', 'team1_name'), ('team2Name', 'team2_name'), ('description', 'description')):
        if field in payload:
            setattr(match, column, payload.get(field))
            changed.append(field)
    db.session.add(match)
    db.session.commit()
    return changed


def flatten_roster(match: Match) -> List[Dict[str, Any]]:
    """Both team rosters as one list tagged with ``team`` and ``matchId``.

    A bare name is read as ``{"name": ...}``; any other non-object entry is skipped.
    """
    data = match.match_data or {}
    team1, team2 = data.get('team1Roster'), data.get('team2Roster')
    if not isinstance(team1, list) or not isinstance(team2, list) or not team1 or not team2:
        return []
    players = []
    for team, roster in (('team1', team1), ('team2', team2)):
        for entry in roster:
            if isinstance(entry, str):
                entry = {'name': entry}
            elif not isinstance(entry, dict):
                continue
            players.append({**entry, 'team': team, 'matchId': match.id})
    return players
