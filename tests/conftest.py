import json
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

import pytest

from edhguard.db.catalog import CatalogStore


@pytest.fixture
def sample_cards() -> list[dict[str, Any]]:
    """Sample Scryfall card data."""
    return [
        {
            "object": "card",
            "name": "Sol Ring",
            "type_line": "Artifact",
            "colors": [],
            "color_identity": [],
            "rarity": "uncommon",
            "mana_cost": "{1}",
            "cmc": 1.0,
            "set": "CMD",
            "legalities": {"commander": "legal", "legacy": "banned", "vintage": "restricted"},
            "image_uris": {"small": "https://img.example/sol-ring-small.jpg"},
        },
        {
            "object": "card",
            "name": "Atraxa, Praetors' Voice",
            "type_line": "Legendary Creature — Phyrexian Angel Horror",
            "colors": ["W", "U", "B", "G"],
            "color_identity": ["W", "U", "B", "G"],
            "rarity": "mythic",
            "mana_cost": "{G}{W}{U}{B}",
            "cmc": 4.0,
            "legalities": {"commander": "legal"},
        },
        {
            "object": "card",
            "name": "Plains",
            "type_line": "Basic Land — Plains",
            "colors": [],
            "color_identity": ["W"],
            "rarity": "common",
            "cmc": 0.0,
            "legalities": {"commander": "legal", "paupercommander": "legal"},
        },
        {
            "object": "card",
            "name": "Soldier",
            "type_line": "Token Creature — Soldier",
            "colors": ["W"],
            "color_identity": ["W"],
            "rarity": "common",
            "legalities": {},
        },
    ]


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[..., Path]:
    """Write card objects to a JSON array (or JSON lines) file."""

    def _write(cards: list[Any], name: str = "cards.json", *, json_lines: bool = False) -> Path:
        path = tmp_path / name
        with open(path, "w", encoding="utf-8") as f:
            if json_lines:
                for card in cards:
                    f.write(json.dumps(card))
                    f.write("\n")
            else:
                json.dump(cards, f)
        return path

    return _write


@pytest.fixture
async def catalog(tmp_path: Path) -> AsyncGenerator[CatalogStore, None]:
    """A connected catalog with its schema initialized."""
    store = CatalogStore(tmp_path / "cards.db", echo=False)
    await store.connect()
    await store.initialize_schema()
    yield store
    await store.close()
