"""Tests for Commander deck validation rules."""

from pathlib import Path

import pytest

from edhguard.db.catalog import CatalogStore
from edhguard.db.errors import EmptyCatalogError, StoreClosedError
from edhguard.models.card import CardRecord, normalize_card_name
from edhguard.models.format_rules import PAUPER_COMMANDER_RULES
from edhguard.models.violation import Severity
from edhguard.parsers.deck_text import parse_deck_text
from edhguard.services.deck_validator import (
    CachedCardLookup,
    check_commander,
    check_deck_size,
    check_format_legality,
    check_singleton,
    evaluate_deck,
    find_commander_candidates,
    validate_deck,
)


class FakeLookup:
    """In-memory card lookup that counts calls."""

    def __init__(self, *cards: CardRecord):
        self.cards = {card.key: card for card in cards}
        self.calls = 0

    async def get_by_name(self, name: str) -> CardRecord | None:
        self.calls += 1
        return self.cards.get(normalize_card_name(name))


ATRAXA = CardRecord(
    name="Atraxa, Praetors' Voice",
    type_line="Legendary Creature — Phyrexian Angel Horror",
    color_identity=("W", "U", "B", "G"),
    rarity="mythic",
    legalities={"commander": "legal"},
)
SOL_RING = CardRecord(
    name="Sol Ring",
    type_line="Artifact",
    rarity="uncommon",
    legalities={"commander": "legal", "paupercommander": "banned"},
)
PLAINS = CardRecord(
    name="Plains",
    type_line="Basic Land — Plains",
    rarity="common",
    legalities={"commander": "legal", "paupercommander": "legal"},
)
RELENTLESS_RATS = CardRecord(
    name="Relentless Rats",
    type_line="Creature — Rat",
    rarity="uncommon",
    legalities={"commander": "legal", "paupercommander": "legal"},
)
PRIMEVAL_TITAN = CardRecord(
    name="Primeval Titan",
    type_line="Creature — Giant",
    rarity="mythic",
    legalities={"commander": "banned"},
)
TEFERI = CardRecord(
    name="Teferi, Hero of Dominaria",
    type_line="Legendary Planeswalker — Teferi",
    rarity="mythic",
    legalities={"commander": "legal"},
)


def singleton_deck(size: int) -> dict[str, int]:
    return {f"card {i}": 1 for i in range(size)}


class TestCheckDeckSize:
    @pytest.mark.parametrize("size", [99, 101])
    async def test_wrong_size(self, size: int) -> None:
        violations = await check_deck_size(singleton_deck(size))

        assert len(violations) == 1
        assert violations[0].rule_id == "deck_size"
        assert violations[0].severity is Severity.ERROR
        assert violations[0].message == (
            f"Deck must contain exactly 100 cards. Found {size} cards."
        )

    async def test_exact_size(self) -> None:
        assert await check_deck_size(singleton_deck(100)) == []

    async def test_counts_copies(self) -> None:
        """Deck size is the sum of quantities, not distinct names."""
        counts = {"plains": 60, **singleton_deck(40)}

        assert await check_deck_size(counts) == []


class TestCheckSingleton:
    async def test_duplicate_reported(self) -> None:
        violations = await check_singleton({"sol ring": 2}, FakeLookup(SOL_RING))

        assert len(violations) == 1
        assert violations[0].message == 'Found 2 copies of "sol ring". Only 1 copy allowed.'
        assert violations[0].affected_cards == ("sol ring",)
        assert violations[0].severity is Severity.ERROR

    async def test_basic_lands_exempt(self) -> None:
        assert await check_singleton({"plains": 30}, FakeLookup(PLAINS)) == []

    async def test_named_exception_exempt(self) -> None:
        assert await check_singleton({"relentless rats": 25}, FakeLookup(RELENTLESS_RATS)) == []

    async def test_unknown_card_not_exempt(self) -> None:
        """Cards missing from the catalog get no exemption."""
        violations = await check_singleton({"plains": 2}, FakeLookup())

        assert [v.affected_cards for v in violations] == [("plains",)]

    async def test_without_lookup(self) -> None:
        """Without a catalog every duplicate is reported."""
        violations = await check_singleton({"plains": 10, "sol ring": 1})

        assert len(violations) == 1

    async def test_one_violation_per_card(self) -> None:
        violations = await check_singleton({"sol ring": 3, "mana crypt": 2}, FakeLookup(SOL_RING))

        assert sorted(v.affected_cards[0] for v in violations) == ["mana crypt", "sol ring"]


class TestCheckCommander:
    async def test_legendary_creature(self) -> None:
        assert await check_commander({"atraxa, praetors' voice": 1}, FakeLookup(ATRAXA)) == []

    async def test_legendary_planeswalker(self) -> None:
        assert await check_commander({"teferi, hero of dominaria": 1}, FakeLookup(TEFERI)) == []

    async def test_no_commander(self) -> None:
        lookup = FakeLookup(SOL_RING, PLAINS)

        violations = await check_commander({"sol ring": 1, "plains": 5}, lookup)

        assert len(violations) == 1
        assert violations[0].severity is Severity.ERROR
        assert violations[0].message == (
            "No valid commander found. Deck must contain a legendary creature or planeswalker."
        )

    async def test_without_lookup_warns(self) -> None:
        violations = await check_commander({"atraxa, praetors' voice": 1})

        assert len(violations) == 1
        assert violations[0].severity is Severity.WARNING
        assert violations[0].message == "Cannot verify commander without card database."

    async def test_pauper_commander(self) -> None:
        lookup = FakeLookup(ATRAXA, RELENTLESS_RATS)

        assert await check_commander({"relentless rats": 1}, lookup, PAUPER_COMMANDER_RULES) == []
        violations = await check_commander(
            {"atraxa, praetors' voice": 1}, lookup, PAUPER_COMMANDER_RULES
        )
        assert violations[0].message.endswith("Deck must contain an uncommon creature.")


class TestCheckFormatLegality:
    async def test_banned_card(self) -> None:
        violations = await check_format_legality(
            {"primeval titan": 1, "sol ring": 1}, FakeLookup(PRIMEVAL_TITAN, SOL_RING)
        )

        assert len(violations) == 1
        assert violations[0].message == '"primeval titan" is banned in Commander format.'
        assert violations[0].affected_cards == ("primeval titan",)

    async def test_unknown_and_unlisted_cards_ignored(self) -> None:
        """Cards absent from the catalog or without a legality entry pass."""
        no_entry = CardRecord(name="Homebrew", type_line="Artifact")
        lookup = FakeLookup(no_entry)

        assert await check_format_legality({"homebrew": 1, "mystery": 1}, lookup) == []

    async def test_uses_variant_legality(self) -> None:
        violations = await check_format_legality(
            {"sol ring": 1}, FakeLookup(SOL_RING), PAUPER_COMMANDER_RULES
        )

        assert violations[0].message == '"sol ring" is banned in Pauper Commander format.'

    async def test_without_lookup_warns(self) -> None:
        violations = await check_format_legality({"sol ring": 1})

        assert [v.severity for v in violations] == [Severity.WARNING]


class TestEvaluateDeck:
    async def test_valid_deck(self) -> None:
        counts = {"atraxa, praetors' voice": 1, "sol ring": 1, "plains": 98}

        result = await evaluate_deck(counts, FakeLookup(ATRAXA, SOL_RING, PLAINS))

        assert result.is_valid
        assert result.total_cards == 100
        assert result.violations == []
        assert result.card_counts == counts

    async def test_parsed_deck_list(self) -> None:
        """Plains is exempt from singleton; Lightning Bolt is not."""
        lightning_bolt = CardRecord(name="Lightning Bolt", type_line="Instant", rarity="common")
        deck = parse_deck_text("1 Sol Ring\n4 Lightning Bolt\n12 Plains")

        result = await evaluate_deck(deck.counts, FakeLookup(SOL_RING, lightning_bolt, PLAINS))

        size_errors = [v for v in result.violations if v.rule_id == "deck_size"]
        singleton_errors = [v for v in result.violations if v.rule_id == "singleton"]
        assert result.total_cards == 17
        assert len(size_errors) == 1
        assert "17 cards" in size_errors[0].message
        assert [v.affected_cards for v in singleton_errors] == [("lightning bolt",)]
        assert "4 copies" in singleton_errors[0].message

    async def test_collects_every_rule(self) -> None:
        counts = {"sol ring": 2, "primeval titan": 1}

        result = await evaluate_deck(counts, FakeLookup(SOL_RING, PRIMEVAL_TITAN))

        assert not result.is_valid
        assert [v.rule_id for v in result.violations] == [
            "deck_size",
            "singleton",
            "commander_check",
            "format_legality",
        ]
        assert len(result.errors()) == 4
        assert result.warnings() == []

    async def test_warnings_do_not_invalidate(self) -> None:
        """Without a catalog only warnings are added for the lookup rules."""
        result = await evaluate_deck(singleton_deck(100))

        assert result.is_valid
        assert [v.rule_id for v in result.warnings()] == ["commander_check", "format_legality"]

    async def test_each_name_looked_up_once(self) -> None:
        lookup = FakeLookup(ATRAXA, SOL_RING, PLAINS)

        await evaluate_deck({"atraxa, praetors' voice": 1, "sol ring": 2, "plains": 97}, lookup)

        assert lookup.calls == 3


class TestCachedCardLookup:
    async def test_caches_hits_and_misses(self) -> None:
        inner = FakeLookup(SOL_RING)
        cached = CachedCardLookup(inner)

        assert await cached.get_by_name("Sol Ring") == SOL_RING
        assert await cached.get_by_name("SOL RING") == SOL_RING
        assert await cached.get_by_name("missing") is None
        assert await cached.get_by_name("Missing") is None
        assert inner.calls == 2


class TestFindCommanderCandidates:
    async def test_lists_eligible_cards(self) -> None:
        lookup = FakeLookup(ATRAXA, TEFERI, SOL_RING)
        counts = {"atraxa, praetors' voice": 1, "teferi, hero of dominaria": 1, "sol ring": 1}

        candidates = await find_commander_candidates(counts, lookup)

        assert [card.name for card in candidates] == [ATRAXA.name, TEFERI.name]


class TestValidateDeck:
    async def test_against_catalog(self, catalog: CatalogStore) -> None:
        await catalog.upsert_batch([ATRAXA, SOL_RING, PLAINS, PRIMEVAL_TITAN])
        counts = {"atraxa, praetors' voice": 1, "primeval titan": 1, "plains": 98}

        result = await validate_deck(counts, catalog)

        assert not result.is_valid
        assert [v.rule_id for v in result.violations] == ["format_legality"]

    async def test_empty_catalog_raises(self, catalog: CatalogStore) -> None:
        with pytest.raises(EmptyCatalogError):
            await validate_deck({"sol ring": 1}, catalog)

    async def test_uninitialized_catalog_raises(self, tmp_path: Path) -> None:
        """A catalog that was never imported into counts as empty."""
        async with CatalogStore(tmp_path / "cards.db") as store:
            with pytest.raises(EmptyCatalogError):
                await validate_deck({"sol ring": 1}, store)

    async def test_closed_store_raises(self, tmp_path: Path) -> None:
        store = CatalogStore(tmp_path / "cards.db")

        with pytest.raises(StoreClosedError):
            await validate_deck({"sol ring": 1}, store)
