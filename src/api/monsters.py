"""Monster API endpoints.

Ownership is taken from the X-Owner-Id header; verifying it belongs to the
authentication layer in front of this service.
"""

from collections.abc import Generator

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from sqlalchemy.orm import Session

from src.api.schemas import (
    CreateMonsterRequest,
    ErrorResponse,
    InteractionResponse,
    InteractRequest,
    MonsterInfo,
    VisibilityRequest,
    XPResponse,
)
from src.core.event_bus import EventBus
from src.core.logging import get_logger
from src.core.monster.decay import time_until_next_change, utc_now
from src.core.monster.interaction import (
    MOOD_FIXED_BY,
    AlreadySatisfied,
    InteractionError,
    LimitReached,
    UnknownAction,
    WrongAction,
)
from src.core.monster.leveling import (
    XP_PER_DAILY_PLAY,
    XP_PER_GIFT,
    level_for_total_xp,
    progress_percent,
)
from src.core.monster.models import Monster, MonsterAction
from src.core.monster.templates import get_template
from src.db.database import get_db
from src.services.monster_service import MonsterService

logger = get_logger(__name__)

router = APIRouter(prefix="/monsters", tags=["monsters"])

NOT_FOUND = {404: {"model": ErrorResponse}}


def get_monster_service(
    request: Request, db: Session = Depends(get_db)
) -> Generator[MonsterService, None, None]:
    """MonsterService bound to the request session. Commits on success."""
    bus: EventBus = request.app.state.event_bus
    service = MonsterService(db, bus)
    try:
        yield service
        db.commit()
    except Exception:
        db.rollback()
        raise


def _owner(x_owner_id: str = Header(..., min_length=1)) -> str:
    return x_owner_id


def _build_monster_info(monster: Monster) -> MonsterInfo:
    """Monster → MonsterInfo (progress and countdown included)"""
    info = level_for_total_xp(monster.total_xp)
    template = get_template(monster.template_id)
    return MonsterInfo(
        monster_id=monster.monster_id,
        owner_id=monster.owner_id,
        name=monster.name,
        template_id=monster.template_id,
        template_name=template.name if template else "",
        color=template.default_color if template else None,
        is_public=monster.is_public,
        mood=monster.mood.value,
        last_mood_change_at=monster.last_mood_change_at,
        next_mood_change_at=monster.next_mood_change_at,
        next_change_in_ms=time_until_next_change(monster, utc_now()),
        level=info.level,
        current_level_xp=info.current_level_xp,
        xp_for_next_level=info.xp_for_next_level,
        total_xp=monster.total_xp,
        progress_percent=progress_percent(
            info.current_level_xp, info.xp_for_next_level
        ),
        created_at=monster.created_at,
    )


def _error_message(error: InteractionError) -> str:
    """Interaction error → user-facing message"""
    if isinstance(error, AlreadySatisfied):
        return "Monster is already happy!"
    if isinstance(error, UnknownAction):
        choices = ", ".join(a.value for a in MonsterAction)
        return f"Invalid action '{error.action}'. Must be one of: {choices}"
    if isinstance(error, WrongAction):
        expected = MOOD_FIXED_BY[error.attempted_action]
        return f"Wrong action! Monster is {error.actual_mood.value}, not {expected.value}"
    if isinstance(error, LimitReached):
        return "Daily play limit reached, come back tomorrow!"
    return "Interaction failed"


def _not_found(monster_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Monster not found: {monster_id}")


@router.post("", response_model=MonsterInfo, responses={400: {"model": ErrorResponse}})
def create_monster(
    request: CreateMonsterRequest,
    owner_id: str = Depends(_owner),
    service: MonsterService = Depends(get_monster_service),
) -> MonsterInfo:
    """Create a monster. It starts happy at level 1."""
    try:
        monster = service.create_monster(owner_id, request.name, request.template_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _build_monster_info(monster)


@router.get("", response_model=list[MonsterInfo])
def list_monsters(
    owner_id: str = Depends(_owner),
    service: MonsterService = Depends(get_monster_service),
) -> list[MonsterInfo]:
    return [_build_monster_info(m) for m in service.list_monsters(owner_id)]


@router.get("/public", response_model=list[MonsterInfo])
def list_public_monsters(
    limit: int = Query(50, ge=1, le=100),
    service: MonsterService = Depends(get_monster_service),
) -> list[MonsterInfo]:
    """Public gallery. No owner header needed."""
    return [_build_monster_info(m) for m in service.list_public(limit)]


@router.get("/{monster_id}", response_model=MonsterInfo, responses=NOT_FOUND)
def get_monster(
    monster_id: str,
    owner_id: str = Depends(_owner),
    service: MonsterService = Depends(get_monster_service),
) -> MonsterInfo:
    """
    Fetch a monster.

    The mood is recomputed on every read and written back only if it changed.
    """
    monster = service.get_monster(owner_id, monster_id)
    if monster is None:
        raise _not_found(monster_id)
    return _build_monster_info(monster)


@router.patch(
    "/{monster_id}/visibility", response_model=MonsterInfo, responses=NOT_FOUND
)
def set_visibility(
    monster_id: str,
    request: VisibilityRequest,
    owner_id: str = Depends(_owner),
    service: MonsterService = Depends(get_monster_service),
) -> MonsterInfo:
    monster = service.set_visibility(owner_id, monster_id, request.is_public)
    if monster is None:
        raise _not_found(monster_id)
    return _build_monster_info(monster)


@router.post(
    "/{monster_id}/interact", response_model=InteractionResponse, responses=NOT_FOUND
)
def interact(
    monster_id: str,
    request: InteractRequest,
    owner_id: str = Depends(_owner),
    service: MonsterService = Depends(get_monster_service),
) -> InteractionResponse:
    outcome = service.interact(owner_id, monster_id, request.action)
    if outcome is None:
        raise _not_found(monster_id)

    result = outcome.result
    if not result.ok:
        return InteractionResponse(
            success=False,
            action=request.action,
            message=_error_message(result.error),
            error=result.error.code,
            monster=_build_monster_info(outcome.monster),
        )

    return InteractionResponse(
        success=True,
        action=request.action,
        message=f"Monster is happy again! +{result.update.xp_gained} XP",
        xp_gained=result.update.xp_gained,
        leveled_up=result.update.leveled_up,
        monster=_build_monster_info(outcome.monster),
    )


@router.post("/{monster_id}/gift", response_model=XPResponse, responses=NOT_FOUND)
def give_gift(
    monster_id: str,
    owner_id: str = Depends(_owner),
    service: MonsterService = Depends(get_monster_service),
) -> XPResponse:
    outcome = service.give_gift(owner_id, monster_id)
    if outcome is None:
        raise _not_found(monster_id)

    return XPResponse(
        success=True,
        message=f"Gift received! +{XP_PER_GIFT} XP",
        xp_gained=XP_PER_GIFT,
        leveled_up=outcome.xp.leveled_up,
        monster=_build_monster_info(outcome.monster),
    )


@router.post("/{monster_id}/daily-play", response_model=XPResponse, responses=NOT_FOUND)
def daily_play(
    monster_id: str,
    owner_id: str = Depends(_owner),
    service: MonsterService = Depends(get_monster_service),
) -> XPResponse:
    """Play for XP without changing mood, a few times per UTC day."""
    outcome = service.daily_play(owner_id, monster_id)
    if outcome is None:
        raise _not_found(monster_id)

    result = outcome.result
    if not result.ok:
        return XPResponse(
            success=False,
            message=_error_message(result.error),
            error=result.error.code,
            remaining=result.error.remaining,
            monster=_build_monster_info(outcome.monster),
        )

    return XPResponse(
        success=True,
        message=f"Played! {result.update.remaining} plays left today",
        xp_gained=XP_PER_DAILY_PLAY,
        leveled_up=result.update.xp.leveled_up,
        remaining=result.update.remaining,
        monster=_build_monster_info(outcome.monster),
    )
