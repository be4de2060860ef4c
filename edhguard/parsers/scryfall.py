"""
Scryfall card record parsing.

Validates raw card objects from Scryfall bulk data (or any source using the
same field names) and converts them to CardRecords. Unrecognized fields are
ignored.

Bulk data: https://scryfall.com/docs/api/bulk-data
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from edhguard.models.card import LEGALITY_VALUES, CardFace, CardRecord

# Type line markers of objects that never go in a deck
NON_PLAYABLE_MARKERS = ("token", "art card", "emblem")


def is_playable_type_line(type_line: str) -> bool:
    """False for tokens, art cards and emblems."""
    lowered = type_line.lower()
    return not any(marker in lowered for marker in NON_PLAYABLE_MARKERS)


class ScryfallFace(BaseModel):
    """One entry of a card's card_faces array."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    image_uris: dict[str, str] | None = None


class ScryfallCard(BaseModel):
    """The subset of a Scryfall card object kept in the catalog."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1)
    type_line: str = Field(min_length=1)
    colors: list[str] = Field(default_factory=list)
    color_identity: list[str] = Field(default_factory=list)
    rarity: str = ""
    legalities: dict[str, str] = Field(default_factory=dict)
    mana_cost: str | None = None
    cmc: float | None = Field(default=None, ge=0)
    image_uris: dict[str, str] | None = None
    card_faces: list[ScryfallFace] | None = None

    @field_validator("colors", "color_identity", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("rarity", mode="before")
    @classmethod
    def _null_rarity(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("legalities", mode="before")
    @classmethod
    def _known_statuses_only(cls, value: Any) -> Any:
        # Unrecognized or non-string statuses are treated the same as a missing entry
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        return {
            fmt: status
            for fmt, status in value.items()
            if isinstance(status, str) and status in LEGALITY_VALUES
        }

    def to_record(self) -> CardRecord:
        """Convert to a CardRecord."""
        faces = tuple(
            CardFace(name=face.name, image_uris=face.image_uris) for face in self.card_faces or []
        )

        # Double-faced cards carry images per face; use the front face
        image_uris = self.image_uris
        if image_uris is None and faces:
            image_uris = faces[0].image_uris

        return CardRecord(
            name=self.name.strip(),
            type_line=self.type_line,
            colors=tuple(self.colors),
            color_identity=tuple(self.color_identity),
            rarity=self.rarity,
            legalities=self.legalities,
            mana_cost=self.mana_cost,
            cmc=self.cmc,
            image_uris=image_uris,
            faces=faces,
        )


def card_record_from_scryfall(raw: dict[str, Any]) -> CardRecord:
    """
    Validate a raw card object and convert it to a CardRecord.

    Raises:
        pydantic.ValidationError: If required fields are missing or malformed
    """
    return ScryfallCard.model_validate(raw).to_record()
