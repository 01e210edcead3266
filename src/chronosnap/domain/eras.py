"""Time travel destinations offered as one-click presets."""

from dataclasses import dataclass

from chronosnap.errors import UnknownEraError


@dataclass(frozen=True)
class TransformPreset:
    """A named era and the instruction sent to the model."""

    id: str
    label: str
    icon: str
    description: str
    instruction: str


ERAS: tuple[TransformPreset, ...] = (
    TransformPreset(
        id="ancient-egypt",
        label="Ancient Egypt",
        icon="🏺",
        description="Pharaohs and Pyramids",
        instruction=(
            "Keep the face exactly the same. Transform this person into an "
            "Ancient Egyptian royalty. Background is a golden palace with "
            "hieroglyphs. Photorealistic, cinematic lighting, 8k."
        ),
    ),
    TransformPreset(
        id="vikings",
        label="Viking Age",
        icon="⚔️",
        description="Warriors of the North",
        instruction=(
            "Keep the face exactly the same. Transform this person into a fierce "
            "Viking warrior with fur armor. Background is a misty fjord with "
            "longships. Dramatic, cold tones, cinematic."
        ),
    ),
    TransformPreset(
        id="victorian",
        label="Victorian London",
        icon="🎩",
        description="Steam and Mystery",
        instruction=(
            "Keep the face exactly the same. Transform this person into a "
            "19th-century Victorian aristocrat. Sepia tone, vintage photography "
            "style. Background is a foggy London street with gas lamps."
        ),
    ),
    TransformPreset(
        id="cyberpunk",
        label="Cyberpunk 2077",
        icon="🌃",
        description="Neon Future",
        instruction=(
            "Keep the face exactly the same. Transform this person into a "
            "cyberpunk street samurai with glowing tech implants. Background is "
            "a rainy neon city night. Vibrant colors, high contrast, futuristic."
        ),
    ),
    TransformPreset(
        id="mars",
        label="Mars 3000",
        icon="🚀",
        description="Red Planet Colony",
        instruction=(
            "Keep the face exactly the same. Transform this person into a "
            "futuristic astronaut on a Mars colony. Background is red martian "
            "landscape with glass domes. Sci-fi realism."
        ),
    ),
    TransformPreset(
        id="western",
        label="Wild West",
        icon="🤠",
        description="Gunslingers & Saloons",
        instruction=(
            "Keep the face exactly the same. Transform this person into a rugged "
            "cowboy/cowgirl in 1880. Sepia, grain, worn texture. Background is a "
            "wooden saloon."
        ),
    ),
)

_ERAS_BY_ID = {era.id: era for era in ERAS}
if len(_ERAS_BY_ID) != len(ERAS):
    raise RuntimeError("Era identifiers must be unique")


def list_eras() -> list[TransformPreset]:
    """Return the available destinations in display order."""
    return list(ERAS)


def get_era(era_id: str) -> TransformPreset:
    """Look up an era by identifier."""
    era = _ERAS_BY_ID.get(era_id)
    if era is None:
        raise UnknownEraError(f"Unknown era: {era_id}")
    return era
