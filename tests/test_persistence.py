"""
Tests for session snapshots: round trips, RNG continuity, validation and
the corrupt-snapshot recovery path.
"""

import json

import pytest

from packages.swordcore.errors import CorruptSnapshot
from packages.swordcore.persistence import (
    JsonFileStorage,
    MemoryStorage,
    clear_snapshot,
    has_restorable_snapshot,
    load_snapshot,
    parse_snapshot,
    persist_snapshot,
    serialize_snapshot,
    validate_snapshot,
)
from packages.swordcore.state.cards import EffectKind, SkillEffect
from packages.swordcore.state.phase import GamePhase
from packages.swordcore.state.session import PendingSkillSelection

from tests.conftest import build_engine, build_enemy, build_skill, build_weapon


def mid_combat_session():
    sword = build_weapon(attack=12, durability=6, current_durability=4)
    charge = build_skill(name="Charge", multiplier=3.0,
                         effect=SkillEffect(kind=EffectKind.CHARGE_ATTACK, value=3.0, duration=2))
    engine = build_engine(enemies=[build_enemy(hp=40, delay=6), build_enemy(hp=25, defense=2)],
                          hand=[build_skill(), build_weapon()], deck=[build_skill(name="Deep")],
                          discard=[charge], sword=sword, seed=7)
    engine.player.hp = 33
    engine.game.turn = 3
    return engine.session


class TestRoundTrip:

    def test_state_survives(self):
        session = mid_combat_session()
        restored = parse_snapshot(json.loads(json.dumps(serialize_snapshot(session))))

        assert restored.player.to_dict() == session.player.to_dict()
        assert restored.game.to_dict() == session.game.to_dict()
        assert restored.game.phase == GamePhase.COMBAT

    def test_card_identity_kept(self):
        session = mid_combat_session()
        restored = parse_snapshot(serialize_snapshot(session))
        assert [c.uid for c in restored.player.hand] == [c.uid for c in session.player.hand]
        assert restored.player.current_sword.uid == session.player.current_sword.uid

    def test_rng_continues_where_it_left_off(self):
        session = mid_combat_session()
        session.rng.random()
        restored = parse_snapshot(json.loads(json.dumps(serialize_snapshot(session))))
        assert [restored.rng.random() for _ in range(3)] == [session.rng.random() for _ in range(3)]

    def test_pending_selection_survives(self):
        session = mid_combat_session()
        session.runtime.skill_selection = PendingSkillSelection(
            effect=EffectKind.GRAVE_RECALL, skill_uid="abc", mana_spent=1, offered_uids=["x", "y"])
        restored = parse_snapshot(serialize_snapshot(session))
        assert restored.runtime.skill_selection.offered_uids == ["x", "y"]
        assert restored.runtime.skill_selection.effect == EffectKind.GRAVE_RECALL


class TestValidation:

    def snapshot(self):
        return json.loads(json.dumps(serialize_snapshot(mid_combat_session())))

    def test_wrong_version(self):
        data = self.snapshot()
        data["version"] = 99
        with pytest.raises(CorruptSnapshot):
            validate_snapshot(data)

    def test_missing_list(self):
        data = self.snapshot()
        del data["player"]["discard"]
        with pytest.raises(CorruptSnapshot):
            validate_snapshot(data)

    def test_list_of_wrong_type(self):
        data = self.snapshot()
        data["game"]["enemies"] = "none"
        with pytest.raises(CorruptSnapshot):
            validate_snapshot(data)

    def test_illegal_phase(self):
        data = self.snapshot()
        data["game"]["phase"] = "shopping"
        with pytest.raises(CorruptSnapshot):
            validate_snapshot(data)

    def test_vitals_must_be_ints(self):
        data = self.snapshot()
        data["player"]["hp"] = "33"
        with pytest.raises(CorruptSnapshot):
            validate_snapshot(data)

    def test_hp_above_max(self):
        data = self.snapshot()
        data["player"]["hp"] = data["player"]["max_hp"] + 1
        with pytest.raises(CorruptSnapshot):
            parse_snapshot(data)

    def test_broken_card_is_corrupt(self):
        data = self.snapshot()
        data["player"]["hand"][0] = {"kind": "spell"}
        with pytest.raises(CorruptSnapshot):
            parse_snapshot(data)

    @pytest.mark.parametrize("section,key", [
        ("player", "hand"), ("player", "buffs"), ("game", "enemies"), ("runtime", "reward_cards"),
    ])
    def test_list_entries_must_be_objects(self, section, key):
        data = self.snapshot()
        data[section][key] = ["junk"]
        with pytest.raises(CorruptSnapshot):
            parse_snapshot(data)

    def test_durability_above_max_is_not_repaired(self):
        data = self.snapshot()
        data["player"]["current_sword"]["current_durability"] = 99
        with pytest.raises(CorruptSnapshot):
            parse_snapshot(data)

    def test_pile_weapon_durability_checked(self):
        data = self.snapshot()
        weapon = data["player"]["hand"][1]
        assert weapon["kind"] == "weapon"
        weapon["current_durability"] = -1
        with pytest.raises(CorruptSnapshot):
            parse_snapshot(data)

    def test_card_in_two_piles(self):
        data = self.snapshot()
        data["player"]["deck"].append(dict(data["player"]["hand"][0]))
        with pytest.raises(CorruptSnapshot):
            parse_snapshot(data)

    def test_equipped_weapon_also_in_hand(self):
        data = self.snapshot()
        data["player"]["hand"].append(dict(data["player"]["current_sword"]))
        with pytest.raises(CorruptSnapshot):
            parse_snapshot(data)

    @pytest.mark.parametrize("data", [None, [], "save", 1])
    def test_not_an_object(self, data):
        with pytest.raises(CorruptSnapshot):
            validate_snapshot(data)


class TestStorage:

    def test_persist_and_load(self, config):
        storage = MemoryStorage()
        session = mid_combat_session()
        assert persist_snapshot(storage, session, config)
        assert has_restorable_snapshot(storage, config)

        restored = load_snapshot(storage, config)
        assert restored.player.hp == 33
        assert restored.game.turn == 3

    def test_nothing_saved(self, config):
        storage = MemoryStorage()
        assert load_snapshot(storage, config) is None
        assert not has_restorable_snapshot(storage, config)

    def test_corrupt_snapshot_removed(self, config):
        storage = MemoryStorage()
        data = serialize_snapshot(mid_combat_session(), config)
        data["version"] = 0
        storage.set(config.storage_key, json.dumps(data))

        assert not has_restorable_snapshot(storage, config)
        assert load_snapshot(storage, config) is None
        assert storage.get(config.storage_key) is None

    def test_junk_card_starts_fresh(self, config):
        storage = MemoryStorage()
        data = serialize_snapshot(mid_combat_session(), config)
        data["player"]["hand"][0] = "junk"
        storage.set(config.storage_key, json.dumps(data))

        assert load_snapshot(storage, config) is None
        assert storage.get(config.storage_key) is None

    def test_unparseable_json_removed(self, config):
        storage = MemoryStorage()
        storage.set(config.storage_key, "{not json")
        assert load_snapshot(storage, config) is None
        assert config.storage_key not in storage.data

    def test_clear(self, config):
        storage = MemoryStorage()
        persist_snapshot(storage, mid_combat_session(), config)
        clear_snapshot(storage, config)
        assert storage.get(config.storage_key) is None

    def test_file_storage(self, tmp_path, config):
        storage = JsonFileStorage(tmp_path / "saves")
        persist_snapshot(storage, mid_combat_session(), config)
        assert (tmp_path / "saves" / f"{config.storage_key}.json").exists()
        assert load_snapshot(storage, config).game.turn == 3
        clear_snapshot(storage, config)
        assert storage.get(config.storage_key) is None
