"""Event type constants

Payloads always include monster_id and owner_id.
"""


class EventTypes:
    MONSTER_CREATED = "monster_created"

    # lazy decay fired on read; data: old_mood, new_mood
    MONSTER_MOOD_DECAYED = "monster_mood_decayed"

    # correct action applied; data: action, xp_gained, total_xp
    MONSTER_INTERACTED = "monster_interacted"
    # data: old_level, new_level
    MONSTER_LEVELED_UP = "monster_leveled_up"

    MONSTER_GIFT_RECEIVED = "monster_gift_received"
    MONSTER_DAILY_PLAY = "monster_daily_play"

    # owner toggled gallery listing; data: is_public
    MONSTER_VISIBILITY_CHANGED = "monster_visibility_changed"
