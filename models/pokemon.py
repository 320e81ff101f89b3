"""
models/pokemon.py – Immutable data models for catalogue entries.

Each model exposes a ``from_api`` constructor that maps the PokéAPI JSON shape
onto plain attributes.  Missing keys raise KeyError / TypeError; the catalogue
client turns those into a RemoteError.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class PokemonSummary:
    """
    One entry of a paginated catalogue listing.

    Attributes
    ----------
    name : Catalogue name (lower-case, e.g. "pikachu").
    href : Resource URL; its last path segment is the numeric id.
    """

    name: str
    href: str

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "PokemonSummary":
        return cls(name=str(raw["name"]), href=str(raw["url"]))

    @property
    def pokemon_id(self) -> str:
        """Stable identifier taken from the final non-empty path segment."""
        segments = [s for s in self.href.split("/") if s]
        return segments[-1] if segments else ""

    def __str__(self) -> str:
        return f"#{self.pokemon_id}  {self.name.capitalize()}"


@dataclass(frozen=True)
class PokemonPage:
    """
    One page of ``GET /pokemon``.

    Attributes
    ----------
    count    : Total number of entries in the catalogue.
    next     : URL of the following page, or None on the last page.
    previous : URL of the preceding page, or None on the first page.
    results  : Entries of this page in remote order.
    """

    count: int
    next: Optional[str]
    previous: Optional[str]
    results: Tuple[PokemonSummary, ...] = ()

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "PokemonPage":
        return cls(
            count=int(raw["count"]),
            next=raw.get("next"),
            previous=raw.get("previous"),
            results=tuple(PokemonSummary.from_api(r) for r in raw["results"]),
        )


@dataclass(frozen=True)
class Sprites:
    front_default: Optional[str] = None
    back_default: Optional[str] = None
    front_shiny: Optional[str] = None
    back_shiny: Optional[str] = None

    @classmethod
    def from_api(cls, raw: Optional[Dict[str, Any]]) -> "Sprites":
        raw = raw or {}
        return cls(
            front_default=raw.get("front_default"),
            back_default=raw.get("back_default"),
            front_shiny=raw.get("front_shiny"),
            back_shiny=raw.get("back_shiny"),
        )


@dataclass(frozen=True)
class AbilitySlot:
    name: str
    is_hidden: bool
    slot: int


@dataclass(frozen=True)
class TypeSlot:
    name: str
    slot: int


@dataclass(frozen=True)
class StatValue:
    name: str
    base_stat: int
    effort: int


@dataclass(frozen=True)
class PokemonDetail:
    """
    Full record returned by ``GET /pokemon/{nameOrId}``.

    Attributes
    ----------
    id              : National dex number.
    name            : Catalogue name.
    height          : Height in decimetres.
    weight          : Weight in hectograms.
    base_experience : Experience granted on defeat; None for some forms.
    sprites         : Front/back, default/shiny image URLs.
    abilities       : Ordered ability slots.
    types           : Ordered type slots.
    stats           : Base stats with effort values.
    """

    id: int
    name: str
    height: int
    weight: int
    base_experience: Optional[int]
    sprites: Sprites = field(default_factory=Sprites)
    abilities: Tuple[AbilitySlot, ...] = ()
    types: Tuple[TypeSlot, ...] = ()
    stats: Tuple[StatValue, ...] = ()

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "PokemonDetail":
        base_exp = raw.get("base_experience")
        return cls(
            id=int(raw["id"]),
            name=str(raw["name"]),
            height=int(raw["height"]),
            weight=int(raw["weight"]),
            base_experience=int(base_exp) if base_exp is not None else None,
            sprites=Sprites.from_api(raw.get("sprites")),
            abilities=tuple(
                AbilitySlot(
                    name=a["ability"]["name"],
                    is_hidden=bool(a["is_hidden"]),
                    slot=int(a["slot"]),
                )
                for a in raw.get("abilities", [])
            ),
            types=tuple(
                TypeSlot(name=t["type"]["name"], slot=int(t["slot"]))
                for t in raw.get("types", [])
            ),
            stats=tuple(
                StatValue(
                    name=s["stat"]["name"],
                    base_stat=int(s["base_stat"]),
                    effort=int(s["effort"]),
                )
                for s in raw.get("stats", [])
            ),
        )

    @property
    def display_name(self) -> str:
        return self.name[:1].upper() + self.name[1:]

    @property
    def height_m(self) -> float:
        return self.height / 10.0

    @property
    def weight_kg(self) -> float:
        return self.weight / 10.0
