from playkers import db
from playkers.models import Player, User


def upsert_player_by_email(email, name=None, role=None):
    """Find the player with ``email`` or create one, linking a matching user."""
    email = email.strip().lower()
    player = Player.query.filter_by(email=email).first()
    if player is None:
        user = User.query.filter_by(email=email).first()
        player = Player(name=name or email.split('@')[0], email=email, role=role,
                        user_id=user.id if user else None)
        db.session.add(player)
    else:
        if name:
            player.name = name
        if role:
            player.role = role
    db.session.commit()
    return player


def player_for_user(user, team_id=None):
    """The player profile linked to ``user``, created on first use."""
    player = Player.query.filter_by(user_id=user.id).first()
    if player is None:
        player = Player(name=user.display_name, email=user.email, user_id=user.id, team_id=team_id)
        db.session.add(player)
        db.session.commit()
    return player


def link_roster(roster):
    """Upsert every emailed roster entry and write the player id back onto it."""
    if not isinstance(roster, list):
        return roster
    linked = []
    for entry in roster:
        if not isinstance(entry, dict):
            linked.append(entry)
            continue
        entry = dict(entry)
        if entry.get('email'):
            player = upsert_player_by_email(entry['email'], entry.get('name'), entry.get('role'))
            entry['id'] = player.id
            entry['playerId'] = player.id
        elif entry.get('playerId'):
            entry['id'] = entry['playerId']
        linked.append(entry)
    return linked
