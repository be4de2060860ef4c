"""
Seed the catalog with placeholder cards for a deck.

Useful for trying out validation without importing a full card dump: every
card in the deck that the catalog does not know yet gets a minimal record.
Existing cards are never overwritten.
"""

import logging
import string
from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError

from edhguard.db.catalog import CatalogStore
from edhguard.db.errors import InvalidRecordError
from edhguard.models.card import CardRecord, normalize_card_name

logger = logging.getLogger(__name__)

BASIC_LAND_NAMES = frozenset({"plains", "island", "swamp", "mountain", "forest", "wastes"})

# Placeholder commanders, so a seeded deck can pass the commander check
KNOWN_LEGENDARY_CREATURES = frozenset(
    {
        "minthara, merciless soul",
        "atraxa, praetors' voice",
        "edgar markov",
        "the ur-dragon",
    }
)

PLACEHOLDER_LEGALITIES = {"commander": "legal"}


@dataclass
class SeedResult:
    """Counters for one seeding run."""

    added: list[str] = field(default_factory=list)
    existing: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def placeholder_record(card_name: str) -> CardRecord:
    """Build a minimal record for a card that is not in the catalog."""
    display_name = string.capwords(card_name.strip())
    key = normalize_card_name(card_name)

    if key in BASIC_LAND_NAMES:
        return CardRecord(
            name=display_name,
            type_line=f"Basic Land — {display_name}",
            rarity="common",
            legalities=dict(PLACEHOLDER_LEGALITIES),
            mana_cost="",
            cmc=0.0,
        )

    if key in KNOWN_LEGENDARY_CREATURES:
        return CardRecord(
            name=display_name,
            type_line="Legendary Creature",
            colors=("W", "B"),
            color_identity=("W", "B"),
            rarity="mythic",
            legalities=dict(PLACEHOLDER_LEGALITIES),
            mana_cost="{2}{W}{B}",
            cmc=4.0,
        )

    return CardRecord(
        name=display_name,
        type_line="Unknown",
        rarity="common",
        legalities=dict(PLACEHOLDER_LEGALITIES),
        mana_cost="",
        cmc=0.0,
    )


async def seed_deck_cards(store: CatalogStore, card_names: Iterable[str]) -> SeedResult:
    """
    Add placeholder records for deck cards missing from the catalog.

    Args:
        store: Connected catalog
        card_names: Card names from a deck (any case, duplicates allowed)

    Returns:
        SeedResult listing added, already-present and failed names
    """
    await store.initialize_schema()
    result = SeedResult()

    seen: set[str] = set()
    for card_name in card_names:
        key = normalize_card_name(card_name)
        if not key or key in seen:
            continue
        seen.add(key)

        try:
            if await store.get_by_name(key) is not None:
                result.existing.append(key)
                continue
            await store.upsert(placeholder_record(card_name))
        except (SQLAlchemyError, InvalidRecordError) as e:
            logger.warning("Failed to add card %r: %s", card_name, e)
            result.failed.append(key)
        else:
            result.added.append(key)

    logger.info(
        "Seeded %d cards (%d already present, %d failed)",
        len(result.added),
        len(result.existing),
        len(result.failed),
    )
    return result
