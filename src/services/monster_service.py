"""Monster Service: connects the monster core to the DB

Every read goes through the lazy decay check; a due monster is written back
with a compare-and-swap on next_mood_change_at so that only one of several
concurrent readers gets to pick the new mood. Losers reload and return the
winner's state.

XP is added in SQL (total_xp = total_xp + n) so concurrent grants all land,
and the daily play counter is claimed with a compare-and-swap on the
(count, date) pair that was read.

The service flushes; committing is the caller's job (request scope).
"""

import random
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from src.core.event_bus import DomainEvent, EventBus
from src.core.event_types import EventTypes
from src.core.logging import get_logger
from src.core.monster.decay import (
    compute_current_state,
    initialize_timing,
    to_utc,
    utc_now,
)
from src.core.monster.interaction import (
    DailyPlayResult,
    DailyPlayUpdate,
    InteractionResult,
    resolve_daily_play,
    resolve_gift,
    resolve_interaction,
)
from src.core.monster.leveling import add_xp
from src.core.monster.models import Monster, Mood, XPResult
from src.core.monster.templates import get_template, is_valid_monster_name
from src.db.models import MonsterModel

logger = get_logger(__name__)

PUBLIC_GALLERY_LIMIT = 50


@dataclass(frozen=True)
class InteractionOutcome:
    monster: Monster
    result: InteractionResult


@dataclass(frozen=True)
class GiftOutcome:
    monster: Monster
    xp: XPResult


@dataclass(frozen=True)
class DailyPlayOutcome:
    monster: Monster
    result: DailyPlayResult


def _to_db(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetime → naive UTC for storage."""
    dt = to_utc(value)
    return dt.replace(tzinfo=None) if dt is not None else None


def _matches(column, value):
    """column = value, with NULL compared as IS NULL."""
    return column.is_(None) if value is None else column == value


class MonsterService:
    """Monster creation, lazy-decay reads, interactions, XP grants"""

    def __init__(
        self,
        db_session: Session,
        event_bus: EventBus,
        clock: Callable[[], datetime] = utc_now,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._db = db_session
        self._bus = event_bus
        self._clock = clock
        self._rng = rng

    # ── create ──────────────────────────────────────────────

    def create_monster(self, owner_id: str, name: str, template_id: str) -> Monster:
        """New monster: happy, level 1, zero XP, private, timer armed."""
        if not is_valid_monster_name(name):
            raise ValueError("Monster name must be between 2 and 50 characters")
        if get_template(template_id) is None:
            raise ValueError(f"Invalid monster template: {template_id}")

        now = self._clock()
        timing = initialize_timing(now, Mood.HAPPY, self._rng)

        row = MonsterModel(
            monster_id=str(uuid.uuid4()),
            owner_id=owner_id,
            name=name.strip(),
            template_id=template_id,
            mood=timing.mood.value,
            last_mood_change_at=_to_db(timing.last_mood_change_at),
            next_mood_change_at=_to_db(timing.next_mood_change_at),
            level=1,
            current_level_xp=0,
            total_xp=0,
            daily_play_count=0,
            is_public=False,
            created_at=_to_db(now),
        )
        self._db.add(row)
        self._db.flush()

        self._emit(EventTypes.MONSTER_CREATED, row)
        logger.info(f"Monster created: {row.monster_id} ({template_id}) owner={owner_id}")
        return self._monster_from_orm(row)

    # ── read (lazy decay) ───────────────────────────────────

    def get_monster(self, owner_id: str, monster_id: str) -> Optional[Monster]:
        """Fetch one monster with its mood brought up to date."""
        row = self._get_row(owner_id, monster_id)
        if row is None:
            return None
        self._apply_lazy_decay(row, self._clock())
        return self._monster_from_orm(row)

    def list_monsters(self, owner_id: str) -> List[Monster]:
        rows = (
            self._db.query(MonsterModel)
            .filter(MonsterModel.owner_id == owner_id)
            .order_by(MonsterModel.created_at)
            .all()
        )
        return self._decay_all(rows)

    def list_public(self, limit: int = PUBLIC_GALLERY_LIMIT) -> List[Monster]:
        """Gallery: public monsters of every owner, newest first."""
        rows = (
            self._db.query(MonsterModel)
            .filter(MonsterModel.is_public.is_(True))
            .order_by(MonsterModel.created_at.desc())
            .limit(limit)
            .all()
        )
        return self._decay_all(rows)

    # ── visibility ──────────────────────────────────────────

    def set_visibility(
        self, owner_id: str, monster_id: str, is_public: bool
    ) -> Optional[Monster]:
        """Show or hide the monster in the public gallery."""
        row = self._get_row(owner_id, monster_id)
        if row is None:
            return None

        self._apply_lazy_decay(row, self._clock())
        if row.is_public != is_public:
            row.is_public = is_public
            self._db.flush()
            self._emit(EventTypes.MONSTER_VISIBILITY_CHANGED, row, is_public=is_public)
            logger.info(f"Monster visibility: {monster_id} is_public={is_public}")
        return self._monster_from_orm(row)

    # ── interactions ────────────────────────────────────────

    def interact(
        self, owner_id: str, monster_id: str, action: str
    ) -> Optional[InteractionOutcome]:
        """Apply feed/sleep/play/cuddle. None if the monster is not found."""
        row = self._get_row(owner_id, monster_id)
        if row is None:
            return None

        now = self._clock()
        self._apply_lazy_decay(row, now)

        result = resolve_interaction(self._monster_from_orm(row), action, now, self._rng)
        if not result.ok:
            logger.info(
                f"Interaction rejected: {monster_id} action={action} "
                f"reason={result.error.code}"
            )
            return InteractionOutcome(monster=self._monster_from_orm(row), result=result)

        upd = result.update
        row.mood = upd.mood.value
        row.last_mood_change_at = _to_db(upd.last_mood_change_at)
        row.next_mood_change_at = _to_db(upd.next_mood_change_at)
        xp = self._grant_xp(row, upd.xp_gained)
        upd = replace(
            upd,
            total_xp=xp.new_total_xp,
            level=xp.new_level,
            current_level_xp=xp.new_current_xp,
            leveled_up=xp.leveled_up,
        )

        self._emit(
            EventTypes.MONSTER_INTERACTED,
            row,
            action=action,
            xp_gained=upd.xp_gained,
            total_xp=upd.total_xp,
        )
        self._emit_level_up(row, xp)

        logger.info(
            f"Interaction applied: {monster_id} action={action} "
            f"+{upd.xp_gained}xp (total={upd.total_xp}, level={upd.level})"
        )
        return InteractionOutcome(
            monster=self._monster_from_orm(row), result=replace(result, update=upd)
        )

    def give_gift(self, owner_id: str, monster_id: str) -> Optional[GiftOutcome]:
        """Gift XP. Mood and timer are left alone."""
        row = self._get_row(owner_id, monster_id)
        if row is None:
            return None

        self._apply_lazy_decay(row, self._clock())
        snapshot = self._monster_from_orm(row)
        planned = resolve_gift(snapshot)
        xp = self._grant_xp(row, planned.new_total_xp - snapshot.total_xp)

        self._emit(EventTypes.MONSTER_GIFT_RECEIVED, row, total_xp=xp.new_total_xp)
        self._emit_level_up(row, xp)
        logger.info(f"Gift given: {monster_id} total_xp={xp.new_total_xp}")
        return GiftOutcome(monster=self._monster_from_orm(row), xp=xp)

    def daily_play(self, owner_id: str, monster_id: str) -> Optional[DailyPlayOutcome]:
        """Rate-limited play for XP. Mood and timer are left alone."""
        row = self._get_row(owner_id, monster_id)
        if row is None:
            return None

        now = self._clock()
        self._apply_lazy_decay(row, now)

        # each lost claim means another play was recorded; the cap ends the loop
        while True:
            snapshot = self._monster_from_orm(row)
            result = resolve_daily_play(snapshot, now)
            if not result.ok:
                logger.info(f"Daily play limit reached: {monster_id}")
                return DailyPlayOutcome(monster=snapshot, result=result)
            if self._claim_daily_play(row, result.update):
                break
            logger.info(f"Daily play counter for {monster_id} moved; retrying")
            self._db.refresh(row)

        upd = result.update
        xp = self._grant_xp(row, upd.xp.new_total_xp - snapshot.total_xp)
        result = replace(result, update=replace(upd, xp=xp))

        self._emit(
            EventTypes.MONSTER_DAILY_PLAY,
            row,
            remaining=upd.remaining,
            total_xp=xp.new_total_xp,
        )
        self._emit_level_up(row, xp)
        return DailyPlayOutcome(monster=self._monster_from_orm(row), result=result)

    # ── internals ───────────────────────────────────────────

    def _get_row(self, owner_id: str, monster_id: str) -> Optional[MonsterModel]:
        return (
            self._db.query(MonsterModel)
            .filter(
                MonsterModel.monster_id == monster_id,
                MonsterModel.owner_id == owner_id,
            )
            .first()
        )

    def _decay_all(self, rows: List[MonsterModel]) -> List[Monster]:
        now = self._clock()
        for row in rows:
            self._apply_lazy_decay(row, now)
        return [self._monster_from_orm(r) for r in rows]

    def _apply_lazy_decay(self, row: MonsterModel, now: datetime) -> None:
        """Persist a due decay. Conditional on the timer we read."""
        state = compute_current_state(self._monster_from_orm(row), now, self._rng)
        if not state.changed:
            return

        old_mood = row.mood
        stmt = (
            update(MonsterModel)
            .where(
                MonsterModel.monster_id == row.monster_id,
                MonsterModel.owner_id == row.owner_id,
                _matches(MonsterModel.next_mood_change_at, row.next_mood_change_at),
            )
            .values(
                mood=state.mood.value,
                last_mood_change_at=_to_db(state.last_mood_change_at),
                next_mood_change_at=_to_db(state.next_mood_change_at),
            )
            .execution_options(synchronize_session=False)
        )
        applied = self._db.execute(stmt).rowcount
        self._db.refresh(row)

        if applied == 0:
            logger.info(
                f"Mood decay for {row.monster_id} already applied by another "
                f"request; keeping mood={row.mood}"
            )
            return

        if old_mood != state.mood.value:
            self._emit(
                EventTypes.MONSTER_MOOD_DECAYED,
                row,
                old_mood=old_mood,
                new_mood=state.mood.value,
            )
            logger.debug(f"Mood decayed: {row.monster_id} {old_mood} → {state.mood.value}")
        else:
            logger.info(f"Decay timer initialized for legacy monster {row.monster_id}")

    def _claim_daily_play(self, row: MonsterModel, upd: DailyPlayUpdate) -> bool:
        """Write the new counter only if nobody played since we read it."""
        stmt = (
            update(MonsterModel)
            .where(
                MonsterModel.monster_id == row.monster_id,
                MonsterModel.owner_id == row.owner_id,
                MonsterModel.daily_play_count == row.daily_play_count,
                _matches(MonsterModel.last_play_date, row.last_play_date),
            )
            .values(
                daily_play_count=upd.daily_play_count,
                last_play_date=upd.last_play_date,
            )
            .execution_options(synchronize_session=False)
        )
        return self._db.execute(stmt).rowcount == 1

    def _grant_xp(self, row: MonsterModel, delta: int) -> XPResult:
        """Add delta to total_xp in SQL, then rewrite the level cache from it."""
        self._db.flush()
        self._db.execute(
            update(MonsterModel)
            .where(
                MonsterModel.monster_id == row.monster_id,
                MonsterModel.owner_id == row.owner_id,
            )
            .values(total_xp=MonsterModel.total_xp + delta)
            .execution_options(synchronize_session=False)
        )
        self._db.refresh(row)

        xp = add_xp(row.total_xp - delta, delta)
        row.level = xp.new_level
        row.current_level_xp = xp.new_current_xp
        self._db.flush()
        return xp

    def _emit_level_up(self, row: MonsterModel, xp: XPResult) -> None:
        if xp.leveled_up:
            self._emit(
                EventTypes.MONSTER_LEVELED_UP,
                row,
                old_level=xp.old_level,
                new_level=xp.new_level,
            )

    def _emit(self, event_type: str, row: MonsterModel, **data) -> None:
        self._bus.emit(
            DomainEvent(
                event_type=event_type,
                data={"monster_id": row.monster_id, "owner_id": row.owner_id, **data},
                source="monster_service",
            )
        )

    # ── ORM → Core ──────────────────────────────────────────

    @staticmethod
    def _monster_from_orm(model: MonsterModel) -> Monster:
        return Monster(
            monster_id=model.monster_id,
            owner_id=model.owner_id,
            name=model.name,
            template_id=model.template_id,
            mood=Mood(model.mood),
            last_mood_change_at=to_utc(model.last_mood_change_at),
            next_mood_change_at=to_utc(model.next_mood_change_at),
            level=model.level,
            current_level_xp=model.current_level_xp,
            total_xp=model.total_xp,
            daily_play_count=model.daily_play_count,
            last_play_date=model.last_play_date,
            is_public=model.is_public,
            created_at=to_utc(model.created_at),
        )
