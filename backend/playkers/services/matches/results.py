import math
from typing import Any, Dict, List, Optional

from playkers import db
from playkers.models import Match, Player, PlayerPerformance

RESULT_TYPES = ('won-by-runs', 'won-by-wickets', 'tied', 'no-result', 'abandoned')
SCORECARD_INNINGS_FIELDS = ('inningsNumber', 'totalRuns', 'totalWickets', 'totalOvers', 'runRate')
SCORECARD_BATSMAN_FIELDS = ('runsScored', 'ballsFaced', 'fours', 'sixes', 'strikeRate')
SCORECARD_BOWLER_FIELDS = ('overs', 'runsGiven', 'wickets', 'maidens', 'economy')
AWARD_FLAGS = {
    'manOfTheMatch': 'manOfMatch',
    'bestBatsman': 'bestBatsman',
    'bestBowler': 'bestBowler',
    'bestFielder': 'bestFielder',
}


class CompletionError(ValueError):
    """Raised when a completion payload fails validation."""


def _runs(score: Any) -> int:
    if isinstance(score, dict):
        return int(score.get('runs') or 0)
    try:
        return int(score or 0)
    except (TypeError, ValueError):
        return 0


def _overs(score: Any) -> float:
    if not isinstance(score, dict):
        return 0.0
    try:
        return float(score.get('overs') or 0)
    except (TypeError, ValueError):
        return 0.0


def summarize_from_scores(match: Match) -> Dict[str, Any]:
    """Derive a result summary from the stored team scores.

    Higher total wins by the run difference; equal totals tie with a zero
    margin. The winner is the ``team{1,2}Id`` recorded in ``matchData``, or
    the side label when no team id was recorded.
    """
    data = match.match_data or {}
    team1_runs = _runs(match.team1_score)
    team2_runs = _runs(match.team2_score)
    if team1_runs > team2_runs:
        return {'winnerId': data.get('team1Id') or 'team1', 'resultType': 'won-by-runs', 'marginRuns': team1_runs - team2_runs}
    if team2_runs > team1_runs:
        return {'winnerId': data.get('team2Id') or 'team2', 'resultType': 'won-by-runs', 'marginRuns': team2_runs - team1_runs}
    return {'resultType': 'tied', 'marginRuns': 0}


def scorecard_from_scores(match: Match) -> Dict[str, Any]:
    data = match.match_data or {}

    def innings(score, team_key):
        runs, overs = _runs(score), _overs(score)
        return {
            'inningsNumber': 1,
            'battingTeamId': data.get(team_key) or '',
            'totalRuns': runs,
            'totalWickets': int(score.get('wickets') or 0) if isinstance(score, dict) else 0,
            'totalOvers': overs,
            'runRate': runs / max(overs, 1),
            'batsmen': [],
            'bowlers': [],
        }

    return {
        'team1Innings': [innings(match.team1_score, 'team1Id')],
        'team2Innings': [innings(match.team2_score, 'team2Id')],
    }


def validate_result_summary(summary: Any) -> Dict[str, Any]:
    if not isinstance(summary, dict):
        raise CompletionError('resultSummary is required')
    result_type = summary.get('resultType')
    if result_type not in RESULT_TYPES:
        raise CompletionError(f'resultType must be one of {", ".join(RESULT_TYPES)}')
    if result_type in ('won-by-runs', 'won-by-wickets') and not summary.get('winnerId'):
        raise CompletionError('winnerId is required for decisive results')
    if result_type == 'won-by-runs' and not isinstance(summary.get('marginRuns'), (int, float)):
        raise CompletionError('marginRuns is required for won-by-runs')
    if result_type == 'won-by-wickets' and not isinstance(summary.get('marginWickets'), (int, float)):
        raise CompletionError('marginWickets is required for won-by-wickets')
    if result_type in ('tied', 'no-result', 'abandoned'):
        if summary.get('marginRuns') or summary.get('marginWickets') or summary.get('marginBalls'):
            raise CompletionError('Margins are not allowed for ties and no-results')
    return summary


def _check_numbers(entry: Dict[str, Any], fields, where: str) -> None:
    for field in fields:
        value = entry.get(field)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise CompletionError(f'{where}.{field} must be a number')
        if value < 0:
            raise CompletionError(f'{where}.{field} cannot be negative')


def _check_strings(entry: Dict[str, Any], fields, where: str) -> None:
    for field in fields:
        value = entry.get(field)
        if value is not None and not isinstance(value, str):
            raise CompletionError(f'{where}.{field} must be a string')


def _check_entries(innings: Dict[str, Any], key: str, fields, where: str) -> None:
    entries = innings.get(key)
    if entries is None:
        return
    if not isinstance(entries, list):
        raise CompletionError(f'{where}.{key} must be a list')
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise CompletionError(f'{where}.{key}[{i}] must be an object')
        _check_strings(entry, ('playerId', 'dismissalType', 'bowlerOut', 'fielderOut'), f'{where}.{key}[{i}]')
        _check_numbers(entry, fields, f'{where}.{key}[{i}]')


def validate_scorecard(scorecard: Any) -> Dict[str, Any]:
    """Check innings, batsmen and bowlers shapes and their numeric fields."""
    if not isinstance(scorecard, dict):
        raise CompletionError('finalScorecard must be an object')
    for side in ('team1Innings', 'team2Innings'):
        innings_list = scorecard.get(side)
        if innings_list is None:
            continue
        if not isinstance(innings_list, list):
            raise CompletionError(f'{side} must be a list')
        for i, innings in enumerate(innings_list):
            where = f'{side}[{i}]'
            if not isinstance(innings, dict):
                raise CompletionError(f'{where} must be an object')
            _check_strings(innings, ('battingTeamId',), where)
            _check_numbers(innings, SCORECARD_INNINGS_FIELDS, where)
            _check_entries(innings, 'batsmen', SCORECARD_BATSMAN_FIELDS, where)
            _check_entries(innings, 'bowlers', SCORECARD_BOWLER_FIELDS, where)
    return scorecard


def aggregate_player_stats(scorecard: Dict[str, Any], team1_id: Optional[str], team2_id: Optional[str]) -> List[Dict[str, Any]]:
    """Fold every innings into one stat line per player."""
    stats: Dict[str, Dict[str, Any]] = {}
    innings_list = list(scorecard.get('team1Innings') or []) + list(scorecard.get('team2Innings') or [])
    for innings in innings_list:
        batting_team = innings.get('battingTeamId')
        for batsman in innings.get('batsmen') or []:
            pid = batsman.get('playerId')
            if not pid:
                continue
            dismissal = batsman.get('dismissalType') or 'not-out'
            line = stats.get(pid)
            if line is None:
                line = stats[pid] = {'playerId': pid, 'teamId': batting_team, 'isOut': False, 'dismissalType': None}
            for key, src in (('runsScored', 'runsScored'), ('ballsFaced', 'ballsFaced'), ('fours', 'fours'), ('sixes', 'sixes')):
                line[key] = line.get(key, 0) + int(batsman.get(src) or 0)
            if not line['isOut'] and dismissal != 'not-out':
                line['isOut'] = True
                line['dismissalType'] = dismissal
        # Bowlers belong to the side that is not batting
        fielding_team = team2_id if batting_team == team1_id else team1_id
        for bowler in innings.get('bowlers') or []:
            pid = bowler.get('playerId')
            if not pid:
                continue
            line = stats.get(pid)
            if line is None:
                line = stats[pid] = {'playerId': pid, 'teamId': fielding_team, 'isOut': False, 'dismissalType': None}
            line['oversBowled'] = line.get('oversBowled', 0) + float(bowler.get('overs') or 0)
            line['runsGiven'] = line.get('runsGiven', 0) + int(bowler.get('runsGiven') or 0)
            line['wicketsTaken'] = line.get('wicketsTaken', 0) + int(bowler.get('wickets') or 0)
            line['maidens'] = line.get('maidens', 0) + int(bowler.get('maidens') or 0)
    return list(stats.values())


def apply_awards(stats: List[Dict[str, Any]], awards: Optional[Dict[str, Any]]) -> None:
    if not awards:
        return
    by_player = {s['playerId']: s for s in stats}
    for award, flag in AWARD_FLAGS.items():
        line = by_player.get(awards.get(award))
        if line is not None:
            line[flag] = True


def fold_career_stats(career: Optional[Dict[str, Any]], line: Dict[str, Any], won: bool) -> Dict[str, Any]:
    """Return ``career`` with one match's stat line added."""
    career = dict(career or {})

    def bump(key, amount=1):
        if amount:
            career[key] = career.get(key, 0) + amount

    runs = line.get('runsScored', 0)
    wickets = line.get('wicketsTaken', 0)
    bump('totalMatches')
    bump('matchesWon', 1 if won else 0)
    if 'runsScored' in line:
        bump('innings')
    bump('dismissals', 1 if line.get('isOut') else 0)
    bump('totalRuns', runs)
    bump('totalBallsFaced', line.get('ballsFaced', 0))
    bump('totalFours', line.get('fours', 0))
    bump('totalSixes', line.get('sixes', 0))
    if runs >= 100:
        bump('centuries')
    elif runs >= 50:
        bump('halfCenturies')
    if runs > career.get('highestScore', 0):
        career['highestScore'] = runs
    bump('totalOvers', line.get('oversBowled', 0))
    bump('totalRunsGiven', line.get('runsGiven', 0))
    bump('totalWickets', wickets)
    bump('totalMaidens', line.get('maidens', 0))
    bump('fiveWicketHauls', 1 if wickets >= 5 else 0)
    for flag, key in (('manOfMatch', 'manOfTheMatchAwards'), ('bestBatsman', 'bestBatsmanAwards'),
                      ('bestBowler', 'bestBowlerAwards'), ('bestFielder', 'bestFielderAwards')):
        bump(key, 1 if line.get(flag) else 0)
    return career


def update_career_stats(stats: List[Dict[str, Any]], winner_id: Optional[str]) -> int:
    """Fold each stat line into the matching player's career. Returns players updated."""
    updated = 0
    for line in stats:
        player = db.session.get(Player, line['playerId'])
        if player is None:
            continue
        won = bool(winner_id) and line.get('teamId') == winner_id
        # Assign a new dict so the JSON column is flagged dirty
        player.career_stats = fold_career_stats(player.career_stats, line, won)
        db.session.add(player)
        updated += 1
    return updated


def complete_match(match: Match, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Finish ``match`` and record performances. Safe to call twice.

    Without a ``finalScorecard`` in ``payload`` the result is derived from the
    stored scores.
    """
    data = dict(match.match_data or {})
    if data.get('processed') is True:
        return {'match': match, 'alreadyProcessed': True, 'playerStats': [], 'careersUpdated': 0}

    payload = payload or {}
    scorecard = payload.get('finalScorecard')
    summary = payload.get('resultSummary')
    if scorecard is None:
        scorecard = scorecard_from_scores(match) if match.sport == 'cricket' else {}
        summary = summary or summarize_from_scores(match)
    else:
        validate_scorecard(scorecard)
    summary = validate_result_summary(summary)
    awards = payload.get('awards') or {}
    if not isinstance(awards, dict) or any(v is not None and not isinstance(v, str) for v in awards.values()):
        raise CompletionError('awards must map award names to player ids')

    team1_id, team2_id = data.get('team1Id'), data.get('team2Id')
    stats = aggregate_player_stats(scorecard, team1_id, team2_id) if match.sport == 'cricket' else []
    apply_awards(stats, awards)
    winner_id = summary.get('winnerId')
    for line in stats:
        db.session.add(PlayerPerformance(
            match_id=match.id,
            player_id=line['playerId'],
            team_id=line.get('teamId'),
            runs_scored=line.get('runsScored', 0),
            balls_faced=line.get('ballsFaced', 0),
            fours=line.get('fours', 0),
            sixes=line.get('sixes', 0),
            is_out=line.get('isOut', False),
            dismissal_type=line.get('dismissalType'),
            overs_bowled=line.get('oversBowled', 0),
            runs_given=line.get('runsGiven', 0),
            wickets_taken=line.get('wicketsTaken', 0),
            maidens=line.get('maidens', 0),
            man_of_match=line.get('manOfMatch', False),
            best_batsman=line.get('bestBatsman', False),
            best_bowler=line.get('bestBowler', False),
            best_fielder=line.get('bestFielder', False),
            is_winner=bool(winner_id) and line.get('teamId') == winner_id,
        ))
    careers = update_career_stats(stats, winner_id)

    data.update({
        'finalScorecard': scorecard,
        'awards': awards,
        'resultSummary': summary,
        'processed': True,
    })
    match.match_data = data
    match.status = 'completed'
    db.session.add(match)
    db.session.commit()
    return {'match': match, 'alreadyProcessed': False, 'playerStats': stats, 'careersUpdated': careers}
