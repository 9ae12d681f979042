"""Monster templates and creation-time validation"""

from dataclasses import dataclass


@dataclass(frozen=True)
class MonsterTemplate:
    template_id: str
    name: str
    default_color: str


MONSTER_TEMPLATES: dict[str, MonsterTemplate] = {
    "chat-cosmique": MonsterTemplate(
        template_id="chat-cosmique",
        name="Chat Cosmique",
        default_color="#FF69B4",
    ),
    "dino-nuage": MonsterTemplate(
        template_id="dino-nuage",
        name="Dino Nuage",
        default_color="#87CEEB",
    ),
    "fairy-monster": MonsterTemplate(
        template_id="fairy-monster",
        name="Monstre Féérique",
        default_color="#98FB98",
    ),
    "grenouille-etoilee": MonsterTemplate(
        template_id="grenouille-etoilee",
        name="Grenouille Étoilée",
        default_color="#FFD700",
    ),
}

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50


def is_valid_monster_name(name: str) -> bool:
    """2~50 characters after trimming."""
    if not isinstance(name, str):
        return False
    return NAME_MIN_LENGTH <= len(name.strip()) <= NAME_MAX_LENGTH


def get_template(template_id: str) -> MonsterTemplate | None:
    return MONSTER_TEMPLATES.get(template_id)
