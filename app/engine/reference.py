"""Static agronomic reference data: crop profiles, soil retention and intervals.

Crops and soils are explicit enumerations.  Each member's value is its
canonical (Turkish) name as farmers enter it; English aliases resolve to the
same member.  Lookups go through :func:`app.engine.normalize.normalize_key`
and return ``None`` for unknown names so callers decide on the default row:

* crop profile → :data:`DEFAULT_CROP` (wheat)
* soil multiplier → :data:`DEFAULT_SOIL_MULTIPLIER` (1.0)
* irrigation interval → :data:`DEFAULT_INTERVAL_DAYS` (3)
* fallback daily liters → :data:`DEFAULT_DAILY_LITERS` (5)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from app.engine.normalize import normalize_key


class CropType(StrEnum):
    wheat = "buğday"
    barley = "arpa"
    rye = "çavdar"
    lentil = "mercimek"
    chickpea = "nohut"
    tomato = "domates"
    pepper = "biber"
    eggplant = "patlıcan"
    cucumber = "salatalık"
    squash = "kabak"
    potato = "patates"
    onion = "soğan"
    garlic = "sarımsak"
    carrot = "havuç"
    cabbage = "lahana"
    lettuce = "marul"
    spinach = "ispanak"
    apple = "elma"
    pear = "armut"
    strawberry = "çilek"
    cherry = "kiraz"
    grape = "üzüm"
    peach = "şeftali"
    apricot = "kayısı"
    plum = "erik"
    watermelon = "karpuz"
    melon = "kavun"
    sunflower = "ayçiçeği"
    canola = "kanola"
    sesame = "susam"
    cotton = "pamuk"
    fiber_crops = "iplik bitkileri"
    corn = "mısır"
    olive = "zeytin"
    pomegranate = "nar"
    fig = "incir"
    tea = "çay"
    coffee = "kahve"
    flowers = "çiçek"
    hay = "ot (saman)"


class SoilType(StrEnum):
    sandy = "kumlu"
    clay = "killi"
    loam = "tınlı"
    silty_clay = "balçık"
    gravelly = "çakıllı"


@dataclass(frozen=True, slots=True)
class CropProfile:
    """Water need per irrigation event (L/m²) and comfort ranges."""

    crop: CropType
    water_min: float
    water_max: float
    temp_optimal: float
    temp_min: float
    temp_max: float
    humidity_optimal: float


DEFAULT_CROP = CropType.wheat
DEFAULT_SOIL_MULTIPLIER = 1.0
DEFAULT_INTERVAL_DAYS = 3
DEFAULT_DAILY_LITERS = 5.0

# crop: (water_min, water_max, temp_opt, temp_min, temp_max, humidity_opt,
#        interval_days, fallback_daily_liters)
_CROP_TABLE: dict[CropType, tuple[float, float, float, float, float, float, int, float]] = {
    CropType.wheat: (3, 5, 20, 0, 30, 45, 4, 4),
    CropType.barley: (3, 5, 18, 0, 28, 45, 4, 3.5),
    CropType.rye: (2.5, 4.5, 18, -5, 28, 40, 4, 3.5),
    CropType.lentil: (2.5, 4, 18, 5, 28, 40, 3, 3),
    CropType.chickpea: (2, 3.5, 20, 5, 32, 35, 3, 2.5),
    CropType.tomato: (5, 8, 25, 15, 35, 60, 2, 6),
    CropType.pepper: (4.5, 7, 25, 15, 35, 60, 2, 5.5),
    CropType.eggplant: (5, 8, 26, 18, 35, 65, 2, 6.5),
    CropType.cucumber: (5, 7, 24, 18, 32, 65, 1, 6),
    CropType.squash: (4.5, 6.5, 23, 15, 32, 60, 2, 5.5),
    CropType.potato: (4, 6, 20, 10, 28, 50, 3, 5),
    CropType.onion: (3, 5, 18, 8, 28, 50, 3, 4),
    CropType.garlic: (2.5, 4, 18, 5, 25, 45, 4, 3),
    CropType.carrot: (3.5, 5, 18, 8, 28, 50, 2, 4),
    CropType.cabbage: (3.5, 5.5, 18, 8, 28, 55, 3, 4.5),
    CropType.lettuce: (3, 5, 16, 5, 24, 55, 2, 4),
    CropType.spinach: (2.5, 4, 15, 5, 22, 50, 2, 3),
    CropType.apple: (2.5, 4.5, 18, 5, 28, 50, 3, 3.5),
    CropType.pear: (3, 5, 19, 8, 28, 50, 3, 4),
    CropType.strawberry: (4, 6, 18, 8, 26, 60, 2, 5),
    CropType.cherry: (2, 4, 20, 10, 28, 45, 3, 3),
    CropType.grape: (2, 4.5, 20, 10, 30, 40, 4, 3),
    CropType.peach: (3, 5, 22, 12, 32, 45, 3, 4),
    CropType.apricot: (2.5, 4.5, 21, 10, 30, 40, 3, 3.5),
    CropType.plum: (3, 5, 20, 10, 28, 45, 3, 4),
    CropType.watermelon: (5, 7.5, 26, 18, 35, 50, 2, 6),
    CropType.melon: (4.5, 7, 25, 18, 32, 50, 2, 5.5),
    CropType.sunflower: (3.5, 5.5, 22, 10, 32, 45, 4, 4.5),
    CropType.canola: (2.5, 4, 18, 5, 28, 45, 4, 3.5),
    CropType.sesame: (3, 5, 26, 18, 35, 40, 3, 4),
    CropType.cotton: (6, 8, 26, 18, 38, 50, 3, 7),
    CropType.fiber_crops: (4, 6, 22, 12, 32, 45, 3, 5),
    CropType.corn: (5, 7, 24, 15, 32, 55, 2, 6),
    CropType.olive: (3.5, 6.5, 21, 10, 32, 35, 7, 2.5),
    CropType.pomegranate: (2, 4, 23, 12, 32, 40, 4, 3),
    CropType.fig: (2, 3.5, 22, 12, 32, 35, 5, 2.5),
    CropType.tea: (5, 8, 20, 10, 28, 70, 3, 6.5),
    CropType.coffee: (4, 7, 21, 15, 28, 65, 3, 5.5),
    CropType.flowers: (2.5, 4, 18, 8, 28, 50, 2, 3.5),
    CropType.hay: (2, 3.5, 18, 5, 28, 45, 4, 2.5),
}

# Lower retention → higher multiplier.
SOIL_MULTIPLIERS: dict[SoilType, float] = {
    SoilType.sandy: 1.3,
    SoilType.clay: 0.8,
    SoilType.loam: 1.0,
    SoilType.silty_clay: 0.85,
    SoilType.gravelly: 1.4,
}

CROP_PROFILES: dict[CropType, CropProfile] = {
    crop: CropProfile(crop, w_min, w_max, t_opt, t_min, t_max, h_opt)
    for crop, (w_min, w_max, t_opt, t_min, t_max, h_opt, _, _) in _CROP_TABLE.items()
}
IRRIGATION_INTERVALS: dict[CropType, int] = {
    crop: row[6] for crop, row in _CROP_TABLE.items()
}
FALLBACK_DAILY_LITERS: dict[CropType, float] = {
    crop: float(row[7]) for crop, row in _CROP_TABLE.items()
}

_CROP_ALIASES: dict[str, CropType] = {
    "corn": CropType.corn,
    "maize": CropType.corn,
    "hay": CropType.hay,
    "ot": CropType.hay,
    "saman": CropType.hay,
    "fiber crops": CropType.fiber_crops,
    "flower": CropType.flowers,
    "aubergine": CropType.eggplant,
    "zucchini": CropType.squash,
}
_SOIL_ALIASES: dict[str, SoilType] = {
    "sand": SoilType.sandy,
    "loamy": SoilType.loam,
    "silt": SoilType.silty_clay,
    "silty clay": SoilType.silty_clay,
    "gravel": SoilType.gravelly,
}


def _index(enum_cls: type[StrEnum], aliases: dict[str, StrEnum]) -> dict[str, StrEnum]:
    index: dict[str, StrEnum] = {}
    for member in enum_cls:
        index[normalize_key(member.value)] = member
        index[normalize_key(member.name.replace("_", " "))] = member
    for alias, member in aliases.items():
        index[normalize_key(alias)] = member
    return index


_CROP_INDEX = _index(CropType, _CROP_ALIASES)
_SOIL_INDEX = _index(SoilType, _SOIL_ALIASES)


def resolve_crop(name: str | None) -> CropType | None:
    return _CROP_INDEX.get(normalize_key(name))  # type: ignore[return-value]


def resolve_soil(name: str | None) -> SoilType | None:
    return _SOIL_INDEX.get(normalize_key(name))  # type: ignore[return-value]


def crop_profile(name: str | None) -> CropProfile:
    """Profile for ``name``, or the default crop's profile when unrecognized."""
    crop = resolve_crop(name)
    return CROP_PROFILES[crop if crop is not None else DEFAULT_CROP]


def soil_multiplier(name: str | None) -> float:
    soil = resolve_soil(name)
    if soil is None:
        return DEFAULT_SOIL_MULTIPLIER
    return SOIL_MULTIPLIERS[soil]


def irrigation_interval(name: str | None) -> int:
    crop = resolve_crop(name)
    if crop is None:
        return DEFAULT_INTERVAL_DAYS
    return IRRIGATION_INTERVALS.get(crop, DEFAULT_INTERVAL_DAYS)


def fallback_daily_liters(name: str | None) -> float:
    crop = resolve_crop(name)
    if crop is None:
        return DEFAULT_DAILY_LITERS
    return FALLBACK_DAILY_LITERS.get(crop, DEFAULT_DAILY_LITERS)
