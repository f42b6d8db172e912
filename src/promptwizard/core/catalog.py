"""Static option catalog.

The catalog is the offline source of options for every category.  It is used
directly when no LLM is configured and as the fallback whenever LLM option
generation fails.

Each category has a *primary* list (what the first visit to a step shows) and
a few *extra* candidates.  Together they form the candidate pool a reroll
draws from.  A reroll is a uniform draw without replacement from that pool,
preferring candidates whose labels were not on screen before; when the pool
minus the excluded labels is too small, excluded candidates fill the
remaining slots.

Subject-aware variants replace the head of the primary list for a few
steps (e.g. ``details`` after choosing a portrait subject), mirroring how the
LLM is asked to keep later steps consistent with earlier choices.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Mapping

from promptwizard.core.models import Category, Option

# ---------------------------------------------------------------------------
# Categories.
# ---------------------------------------------------------------------------

WIZARD_STEPS: tuple[Category, ...] = (
    Category(id="subject", label="Subject", description="Choose the main subject of your image"),
    Category(id="details", label="Details", description="Add specific details about your subject"),
    Category(id="setting", label="Setting", description="Select where your scene takes place"),
    Category(id="style", label="Style", description="Choose an artistic style for your image"),
    Category(id="mood", label="Mood", description="Set the emotional tone of your image"),
    Category(id="elements", label="Elements", description="Add supporting elements to your scene"),
    Category(
        id="composition",
        label="Composition",
        description="Determine how elements are arranged",
    ),
)

TAG_CATEGORIES: tuple[Category, ...] = (
    Category(id="subject", label="Subject", description="What is the main focus of your image?"),
    Category(id="style", label="Style", description="What artistic style should the image have?"),
    Category(id="lighting", label="Lighting", description="How should the scene be lit?"),
    Category(
        id="composition",
        label="Composition",
        description="How should elements be arranged?",
    ),
    Category(
        id="mood",
        label="Mood",
        description="What feeling or atmosphere should the image convey?",
    ),
    Category(id="color", label="Color", description="What color palette should be used?"),
    Category(id="setting", label="Setting", description="Where does the scene take place?"),
    Category(id="time", label="Time Period", description="When does the scene take place?"),
)

_CATEGORIES: dict[str, Category] = {c.id: c for c in (*TAG_CATEGORIES, *WIZARD_STEPS)}


def _opts(*rows: tuple[str, str, str]) -> tuple[Option, ...]:
    return tuple(Option(id=i, label=label, description=d) for i, label, d in rows)


# ---------------------------------------------------------------------------
# Primary options per category.
# ---------------------------------------------------------------------------

_PRIMARY: dict[str, tuple[Option, ...]] = {
    "subject": _opts(
        ("portrait", "Human Portrait", "A detailed portrait of a person"),
        ("landscape", "Landscape", "A scenic natural environment"),
        ("animal", "Animal", "A creature from the animal kingdom"),
        ("still-life", "Still Life", "An arrangement of inanimate objects"),
        ("architecture", "Architecture", "Buildings or architectural elements"),
        ("abstract", "Abstract", "Non-representational forms and patterns"),
    ),
    "details": _opts(
        ("intricate", "Intricate Details", "Complex and elaborate features"),
        ("minimalist", "Minimalist Details", "Simple, clean, and uncluttered"),
        ("textured", "Rich Textures", "Detailed surface patterns and textures"),
        ("weathered", "Weathered Look", "Showing signs of age and use"),
        ("ornate", "Ornate Decoration", "Elaborate and decorative elements"),
        ("geometric", "Geometric Patterns", "Regular shapes and mathematical forms"),
    ),
    "setting": _opts(
        ("urban", "Urban Environment", "City streets and buildings"),
        ("nature", "Natural Setting", "Forests, mountains, or other natural landscapes"),
        ("fantasy", "Fantasy World", "Imaginary and magical environments"),
        ("underwater", "Underwater", "Beneath the ocean surface"),
        ("space", "Outer Space", "Cosmic scenes beyond Earth"),
        ("indoor", "Indoor Scene", "Inside a building or room"),
    ),
    "style": _opts(
        ("photorealistic", "Photorealistic", "Resembling a high-quality photograph"),
        ("impressionist", "Impressionist", "Capturing light and atmosphere over detail"),
        ("surrealist", "Surrealist", "Dreamlike and unexpected juxtapositions"),
        ("digital-art", "Digital Art", "Modern computer-generated aesthetic"),
        ("watercolor", "Watercolor", "Soft, transparent color washes"),
        ("pop-art", "Pop Art", "Bold colors and popular culture imagery"),
    ),
    "mood": _opts(
        ("serene", "Serene", "Peaceful and calm atmosphere"),
        ("dramatic", "Dramatic", "Intense and emotionally charged"),
        ("mysterious", "Mysterious", "Enigmatic and intriguing"),
        ("joyful", "Joyful", "Happy and uplifting"),
        ("melancholic", "Melancholic", "Thoughtful and slightly sad"),
        ("ethereal", "Ethereal", "Delicate and otherworldly"),
    ),
    "elements": _opts(
        ("water", "Water Elements", "Rivers, lakes, or ocean"),
        ("foliage", "Lush Foliage", "Plants, trees, and greenery"),
        ("sky", "Dramatic Sky", "Clouds, stars, or atmospheric effects"),
        ("people", "People", "Human figures or crowds"),
        ("animals", "Animals", "Wildlife or domestic creatures"),
        ("light-rays", "Light Rays", "Beams of light creating atmosphere"),
    ),
    "composition": _opts(
        ("symmetrical", "Symmetrical", "Balanced elements on both sides"),
        ("rule-of-thirds", "Rule of Thirds", "Key elements at intersection points"),
        ("diagonal", "Diagonal Lines", "Dynamic angles across the image"),
        ("framing", "Natural Framing", "Subject framed by surrounding elements"),
        ("leading-lines", "Leading Lines", "Lines that guide the eye to the subject"),
        ("minimalist", "Minimalist", "Simple composition with few elements"),
    ),
    "lighting": _opts(
        ("natural", "Natural Light", "Daylight without artificial sources"),
        ("golden-hour", "Golden Hour", "Warm, low sunlight"),
        ("dramatic-light", "Dramatic", "Strong contrast between light and shadow"),
        ("soft", "Soft", "Diffuse, gentle illumination"),
        ("neon", "Neon", "Saturated artificial glow"),
        ("backlit", "Backlit", "Light source behind the subject"),
    ),
    "color": _opts(
        ("vibrant", "Vibrant", "Bright, saturated colors"),
        ("monochromatic", "Monochromatic", "Shades of a single hue"),
        ("pastel", "Pastel", "Pale, soft tones"),
        ("dark", "Dark", "Deep, low-key tones"),
        ("warm", "Warm", "Reds, oranges and yellows"),
        ("cool", "Cool", "Blues, greens and purples"),
    ),
    "time": _opts(
        ("modern", "Modern", "The present day"),
        ("vintage", "Vintage", "A few decades ago"),
        ("medieval", "Medieval", "The Middle Ages"),
        ("ancient", "Ancient", "Classical antiquity"),
        ("futuristic", "Futuristic", "A time yet to come"),
        ("timeless", "Timeless", "No identifiable era"),
    ),
}

# Extra candidates that only appear on reroll.
_EXTRA: dict[str, tuple[Option, ...]] = {
    "subject": _opts(
        ("cityscape", "Cityscape", "A sweeping view of a city"),
        ("vehicle", "Vehicle", "A car, ship, or flying machine"),
        ("mythical-creature", "Mythical Creature", "A beast from legend"),
    ),
    "details": _opts(
        ("glowing", "Glowing Accents", "Parts of the subject emit light"),
        ("filigree", "Fine Filigree", "Delicate metalwork ornamentation"),
        ("cracked", "Cracked Surfaces", "Fractures and fissures"),
    ),
    "setting": _opts(
        ("futuristic-city", "Futuristic City", "Towering structures of tomorrow"),
        ("desert", "Desert", "Dunes and open sand"),
        ("ruins", "Ancient Ruins", "Remains of a lost civilization"),
    ),
    "style": _opts(
        ("oil-painting", "Oil Painting", "Rich, layered brushwork"),
        ("pixel-art", "Pixel Art", "Low-resolution retro graphics"),
        ("3d-render", "3D Render", "Clean computer-rendered surfaces"),
    ),
    "mood": _opts(
        ("peaceful", "Peaceful", "Quiet and untroubled"),
        ("energetic", "Energetic", "Full of motion and life"),
        ("nostalgic", "Nostalgic", "Wistful longing for the past"),
    ),
    "elements": _opts(
        ("fog", "Drifting Fog", "Low mist softening the scene"),
        ("fire", "Flickering Fire", "Flames and embers"),
        ("birds", "Birds in Flight", "Silhouettes against the sky"),
    ),
    "composition": _opts(
        ("dynamic", "Dynamic", "Energetic, off-balance arrangement"),
        ("close-up", "Close-up", "Tight framing on the subject"),
        ("wide-angle", "Wide Angle", "Expansive field of view"),
    ),
    "lighting": _opts(
        ("candlelight", "Candlelight", "Small warm flickering sources"),
        ("moonlight", "Moonlight", "Cool, dim night illumination"),
        ("studio", "Studio Lighting", "Controlled key and fill lights"),
    ),
    "color": _opts(
        ("earthy", "Earthy", "Browns, ochres and olive greens"),
        ("neon-palette", "Neon", "Electric pinks and cyans"),
        ("sepia", "Sepia", "Aged brown photographic tones"),
    ),
    "time": _opts(
        ("victorian", "Victorian", "The nineteenth century"),
        ("prehistoric", "Prehistoric", "Before recorded history"),
        ("retro-future", "Retro-futuristic", "The future as imagined in the past"),
    ),
}

# Subject-aware heads: (subject id, step) -> options placed before the
# first three primary options.
_SUBJECT_VARIANTS: dict[tuple[str, str], tuple[Option, ...]] = {
    ("portrait", "details"): _opts(
        ("expressive", "Expressive Face", "Strong emotional expression"),
        ("profile", "Profile View", "Side view of the face"),
        ("close-up", "Close-up", "Detailed view of facial features"),
    ),
    ("landscape", "details"): _opts(
        ("mountains", "Mountains", "Towering peaks and valleys"),
        ("coastline", "Coastline", "Where land meets sea"),
        ("rolling-hills", "Rolling Hills", "Gentle undulating terrain"),
    ),
    ("portrait", "setting"): _opts(
        ("studio", "Studio Setting", "Professional photography backdrop"),
        ("street", "Street Scene", "Urban environment with character"),
        ("home", "Home Environment", "Comfortable domestic setting"),
    ),
    ("portrait", "style"): _opts(
        ("portrait-photography", "Portrait Photography", "Professional portrait style"),
        ("painterly", "Painterly Portrait", "Brushstroke-like texture"),
        ("fashion", "Fashion Photography", "Stylish and trendy aesthetic"),
    ),
    ("landscape", "style"): _opts(
        ("landscape-photography", "Landscape Photography", "Professional landscape style"),
        ("plein-air", "Plein Air Painting", "Outdoor painting style"),
        ("panoramic", "Panoramic", "Wide, sweeping view"),
    ),
}


def get_category(category_id: str) -> Category | None:
    """Return the category with *category_id*, or ``None`` if unknown."""
    return _CATEGORIES.get(category_id)


def has_category(category_id: str) -> bool:
    return category_id in _PRIMARY


def _selection_id(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, Option):
        return value.id
    if isinstance(value, Mapping):
        return value.get("id")
    return str(value)


def primary_options(category_id: str, selections: Mapping | None = None) -> list[Option]:
    """Return the first-visit options for a category.

    Args:
        category_id: Category to look up.
        selections: Prior selections keyed by category id.  Only the
            ``subject`` entry is consulted, to apply subject-aware variants.

    Returns:
        The options in display order.  Unknown categories yield ``[]``.
    """
    base = list(_PRIMARY.get(category_id, ()))
    subject_id = _selection_id((selections or {}).get("subject"))
    variant = _SUBJECT_VARIANTS.get((subject_id, category_id)) if subject_id else None
    if variant:
        return [*variant, *base[:3]]
    return base


def candidate_pool(category_id: str, selections: Mapping | None = None) -> list[Option]:
    """Return every option a reroll may draw from, without duplicate ids."""
    pool: list[Option] = []
    seen: set[str] = set()
    for option in (*primary_options(category_id, selections), *_PRIMARY.get(category_id, ()),
                   *_EXTRA.get(category_id, ())):
        if option.id not in seen:
            seen.add(option.id)
            pool.append(option)
    return pool


def catalog_options(
    category_id: str,
    selections: Mapping | None = None,
    *,
    reroll: bool = False,
    exclude_labels: Iterable[str] = (),
    count: int = 6,
    rng: random.Random | None = None,
) -> list[Option]:
    """Return up to *count* catalog options for a category.

    Without ``reroll`` the result is the deterministic primary list.  With
    ``reroll`` it is a uniform sample without replacement from the candidate
    pool, drawn first from candidates whose labels are not in
    *exclude_labels*.

    Args:
        category_id: Category to look up.
        selections: Prior selections keyed by category id.
        reroll: Draw a fresh subset instead of the primary list.
        exclude_labels: Labels shown before the reroll (case-insensitive).
        count: Maximum number of options to return.
        rng: Random source; defaults to the module-level ``random`` state.

    Returns:
        At most *count* options.  Callers that need exactly *count* pad the
        result with :func:`~promptwizard.core.option_generator.normalize_options`.
    """
    if not reroll:
        return primary_options(category_id, selections)[:count]

    rng = rng or random.Random()
    excluded = {label.casefold() for label in exclude_labels}
    pool = candidate_pool(category_id, selections)
    fresh = [o for o in pool if o.label.casefold() not in excluded]
    stale = [o for o in pool if o.label.casefold() in excluded]

    picked = rng.sample(fresh, min(count, len(fresh)))
    if len(picked) < count and stale:
        picked += rng.sample(stale, min(count - len(picked), len(stale)))
    return picked
