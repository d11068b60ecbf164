"""
Default content tables.

Plain dict templates in the shape ContentLibrary.from_dict expects. These
are data for the shipped game and for the demo server; the engine itself
only ever sees the instances built from them.
"""

WEAPONS = {
    "samjeongdo": {
        "name": "Samjeongdo", "rarity": "common", "attack": 12, "attack_count": 1,
        "reach": "single", "defense": 8, "durability": 6, "mana_cost": 1,
        "draw_attack": {"name": "Officer's Draw", "multiplier": 1.0, "reach": "single", "durability_cost": 1},
    },
    "yedogeom": {
        "name": "Yedogeom", "rarity": "common", "attack": 10, "attack_count": 2,
        "reach": "single", "defense": 12, "durability": 8, "mana_cost": 1,
        "draw_attack": {"name": "Twin Draw", "multiplier": 0.6, "reach": "single", "durability_cost": 2},
    },
    "bongukgeom": {
        "name": "Bongukgeom", "rarity": "uncommon", "attack": 14, "attack_count": 1,
        "reach": "double", "defense": 15, "durability": 6, "mana_cost": 2,
        "draw_attack": {"name": "Bonguk Stance", "multiplier": 1.0, "reach": "double", "durability_cost": 1},
    },
    "haegapdo": {
        "name": "Haegapdo", "rarity": "uncommon", "attack": 18, "attack_count": 1,
        "reach": "single", "defense": 3, "pierce": 3, "durability": 5, "mana_cost": 2,
        "draw_attack": {"name": "Armor Splitter", "multiplier": 1.3, "reach": "single",
                        "durability_cost": 1, "pierce": True},
    },
    "katana": {
        "name": "Katana", "rarity": "common", "attack": 15, "attack_count": 1,
        "reach": "single", "defense": 10, "durability": 6, "mana_cost": 1,
        "draw_attack": {"name": "Iai", "multiplier": 1.8, "reach": "single", "durability_cost": 1,
                        "critical_condition": "enemyDelay1", "critical_multiplier": 1.5},
    },
    "wakizashi": {
        "name": "Wakizashi", "rarity": "common", "attack": 8, "attack_count": 2,
        "reach": "single", "defense": 12, "durability": 8, "mana_cost": 1,
        "draw_attack": {"name": "Short Blade Art", "multiplier": 0.5, "reach": "single", "durability_cost": 2,
                        "cancel_enemy_skill": True},
    },
    "tanto": {
        "name": "Tanto", "rarity": "common", "category": "dagger", "attack": 9, "attack_count": 1,
        "reach": "single", "defense": 6, "durability": 6, "mana_cost": 1,
        "on_hit": {"bleed": {"damage": 2, "duration": 3}},
        "draw_attack": {"name": "Hidden Stab", "multiplier": 1.0, "reach": "single", "durability_cost": 1,
                        "is_swift": True, "critical_bleed": {"damage": 4, "duration": 3}},
    },
    "woldo": {
        "name": "Woldo", "rarity": "rare", "attack": 22, "attack_count": 1,
        "reach": "triple", "defense": 5, "durability": 4, "mana_cost": 3,
        "on_hit": {"delay_increase": 1},
        "draw_attack": {"name": "Moonlight Cut", "multiplier": 1.5, "reach": "triple", "durability_cost": 1},
    },
    "nodachi": {
        "name": "Nodachi", "rarity": "rare", "attack": 25, "attack_count": 1,
        "reach": "double", "defense": 3, "durability": 4, "mana_cost": 3,
        "on_hit": {"armor_break": 2},
        "draw_attack": {"name": "Great Iai", "multiplier": 2.5, "reach": "double", "durability_cost": 1,
                        "armor_reduce": 2},
    },
    "rapier": {
        "name": "Rapier", "rarity": "uncommon", "attack": 10, "attack_count": 3,
        "reach": "single", "defense": 12, "durability": 9, "mana_cost": 1,
        "on_hit": {"poison": {"damage": 2, "duration": 2}},
        "draw_attack": {"name": "Lunge Flurry", "multiplier": 0.5, "reach": "single", "durability_cost": 3,
                        "delay_increase": 1},
    },
    "mirage": {
        "name": "Mirage Blade", "rarity": "unique", "attack": 30, "attack_count": 2,
        "reach": "double", "defense": 0, "durability": 1, "mana_cost": 0, "is_mirage": True,
        "draw_attack": {"name": "Phantom Sweep", "multiplier": 3.0, "reach": "all", "durability_cost": 1},
    },
}

SKILLS = {
    "slash": {"name": "Slash", "skill_kind": "attack", "attack_multiplier": 1.0, "mana_cost": 1},
    "thrust": {"name": "Thrust", "skill_kind": "attack", "attack_multiplier": 1.2, "mana_cost": 1,
               "effect": {"kind": "pierce", "value": 3}},
    "doubleSlash": {"name": "Double Slash", "skill_kind": "attack", "attack_multiplier": 0.7,
                    "attack_count": 2, "mana_cost": 1},
    "flurry": {"name": "Flurry", "skill_kind": "attack", "attack_multiplier": 0.3, "attack_count": 5,
               "mana_cost": 2},
    "sweepingBlow": {"name": "Sweeping Blow", "skill_kind": "attack", "attack_multiplier": 0.8,
                     "reach": "weaponDouble", "mana_cost": 1},
    "whirlwind": {"name": "Whirlwind", "skill_kind": "attack", "attack_multiplier": 0.6, "reach": "all",
                  "mana_cost": 3},
    "powerStrike": {"name": "Power Strike", "skill_kind": "attack", "attack_multiplier": 2.0, "mana_cost": 2,
                    "effect": {"kind": "chargeAttack", "value": 2.0, "duration": 1}},
    "bleedingEdge": {"name": "Bleeding Edge", "skill_kind": "attack", "attack_multiplier": 0.8, "mana_cost": 1,
                     "effect": {"kind": "bleed", "value": 3, "duration": 3}},
    "vampireSlash": {"name": "Vampire Slash", "skill_kind": "attack", "attack_multiplier": 1.0, "mana_cost": 2,
                     "effect": {"kind": "lifesteal", "value": 0.3}},
    "armorBreaker": {"name": "Armor Breaker", "skill_kind": "attack", "attack_multiplier": 0.8, "mana_cost": 1,
                     "effect": {"kind": "armorBreaker", "value": 2}},
    "stunStrike": {"name": "Stunning Blow", "skill_kind": "attack", "attack_multiplier": 1.5, "mana_cost": 3,
                   "effect": {"kind": "stun", "value": 1, "duration": 1}},
    "quickSlash": {"name": "Quick Slash", "skill_kind": "attack", "attack_multiplier": 0.6, "mana_cost": 1,
                   "is_swift": True, "critical_condition": "dagger", "critical_multiplier": 2.0},
    "followUpSlash": {"name": "Follow-up", "skill_kind": "attack", "attack_multiplier": 1.2, "mana_cost": 0,
                      "is_swift": True, "effect": {"kind": "followUp", "value": 1}},
    "finalJudgment": {"name": "Final Judgment", "skill_kind": "special", "attack_multiplier": 3.0,
                      "mana_cost": 3, "is_consumable": True, "is_piercing": True,
                      "effect": {"kind": "destroyWeapon", "value": 1}},
    "taunt": {"name": "Provoke", "skill_kind": "buff", "mana_cost": 1, "effect": {"kind": "taunt", "value": 1}},
    "parry": {"name": "Parry", "skill_kind": "defense", "mana_cost": 1, "is_swift": True,
              "effect": {"kind": "countDefense", "value": 5, "duration": 2, "counter_attack": True,
                         "counter_multiplier": 1.0, "consume_on_success": True}},
    "ironWall": {"name": "Iron Wall", "skill_kind": "defense", "mana_cost": 1,
                 "effect": {"kind": "countDefense", "value": 10, "duration": 3, "consume_on_success": True}},
    "flowRead": {"name": "Read the Flow", "skill_kind": "defense", "mana_cost": 2,
                 "effect": {"kind": "flowRead", "value": 8, "duration": 5,
                            "defense_scaling": [1, 2, 4, 6, 8],
                            "counter_scaling": [0.25, 0.5, 1.0, 1.5, 2.0],
                            "consume_on_success": True}},
    "focus": {"name": "Focus", "skill_kind": "buff", "mana_cost": 0, "is_swift": True,
              "effect": {"kind": "focus", "value": 0.5, "duration": 1}},
    "sharpen": {"name": "Sharpen", "skill_kind": "buff", "mana_cost": 1, "is_swift": True,
                "effect": {"kind": "sharpen", "value": 5, "duration": 3}},
    "meditate": {"name": "Meditate", "skill_kind": "draw", "mana_cost": 1, "effect": {"kind": "draw", "value": 2}},
    "stepIn": {"name": "Step In", "skill_kind": "buff", "mana_cost": 1, "is_swift": True,
               "effect": {"kind": "delayReduce", "value": 1}},
    "bladeDance": {"name": "Blade Dance", "skill_kind": "special", "mana_cost": 3, "is_swift": True,
                   "attack_multiplier": 0, "attack_count": 0,
                   "effect": {"kind": "bladeDance", "value": 3}},
    "sheathe": {"name": "Sheathe", "skill_kind": "buff", "mana_cost": 0, "is_swift": True,
                "effect": {"kind": "sheathe", "value": 1}},
    "bladeSeeker": {"name": "Blade Seeker", "skill_kind": "buff", "mana_cost": 2, "is_swift": True,
                    "effect": {"kind": "searchSword", "value": 3}},
    "soulRecall": {"name": "Soul Recall", "skill_kind": "buff", "mana_cost": 1, "is_swift": True,
                   "effect": {"kind": "graveDrawTop", "value": 2}},
    "graveRecall": {"name": "Grave Recall", "skill_kind": "buff", "mana_cost": 1, "is_swift": True,
                    "effect": {"kind": "graveRecall", "value": 3}},
    "ancestorBlade": {"name": "Ancestor Blade", "skill_kind": "buff", "mana_cost": 3, "is_swift": True,
                      "effect": {"kind": "graveEquip", "value": 3}},
    "bladeGrab": {"name": "Blade Grab", "skill_kind": "buff", "mana_cost": 2,
                  "effect": {"kind": "bladeGrab", "value": 1}},
}

ENEMIES = {
    "bandit": {
        "name": "Bandit", "hp": 32, "defense": 1,
        "actions": [{"id": "slash", "name": "Slash", "action_type": "attack", "damage": 9, "delay": 3}],
    },
    "archer": {
        "name": "Bandit Archer", "hp": 26, "defense": 0,
        "actions": [
            {"id": "arrow", "name": "Arrow", "action_type": "attack", "damage": 10, "delay": 2},
            {"id": "powerShot", "name": "Power Shot", "action_type": "attack", "damage": 16, "delay": 4},
        ],
    },
    "shieldman": {
        "name": "Bandit Shieldman", "hp": 30, "defense": 8,
        "actions": [
            {"id": "taunt", "name": "Taunt", "action_type": "taunt", "damage": 0, "delay": 1,
             "defense_increase": 1, "effect": {"kind": "taunt", "value": 1, "duration": 3}},
            {"id": "guard", "name": "Guard", "action_type": "defend", "damage": 0, "delay": 2},
            {"id": "bash", "name": "Shield Bash", "action_type": "attack", "damage": 12, "delay": 3},
        ],
    },
    "assassin": {
        "name": "Assassin", "hp": 35, "defense": 1,
        "actions": [
            {"id": "ambush", "name": "Ambush", "action_type": "attack", "damage": 22, "delay": 2},
            {"id": "vital", "name": "Vital Strike", "action_type": "special", "damage": 30, "delay": 4,
             "effect": {"kind": "bleed", "value": 5, "duration": 2}},
        ],
    },
    "shaman": {
        "name": "Shaman", "hp": 45, "defense": 3,
        "actions": [
            {"id": "bolt", "name": "Bolt", "action_type": "attack", "damage": 15, "delay": 2},
            {"id": "heal", "name": "Mend", "action_type": "buff", "damage": 0, "delay": 4,
             "effect": {"kind": "heal", "value": 20}},
        ],
    },
    "minion": {
        "name": "Henchman", "hp": 18, "defense": 0,
        "actions": [{"id": "stab", "name": "Stab", "action_type": "attack", "damage": 6, "delay": 2}],
    },
}

BOSSES = {
    "banditLeader": {
        "name": "Bandit Leader", "hp": 120, "defense": 5,
        "actions": [
            {"id": "heavyBlow", "name": "Heavy Blow", "action_type": "attack", "damage": 25, "delay": 3},
            {"id": "callMinions", "name": "Call Minions", "action_type": "special", "damage": 0, "delay": 2,
             "effect": {"kind": "summon", "value": 1, "template_id": "minion"}},
            {"id": "poisonBlade", "name": "Poison Blade", "action_type": "special", "damage": 12, "delay": 2,
             "effect": {"kind": "poison", "value": 8, "duration": 3}},
        ],
    },
    "swordMaster": {
        "name": "Sword Demon", "hp": 200, "defense": 6,
        "actions": [
            {"id": "windSlash", "name": "Wind Slash", "action_type": "attack", "damage": 20, "delay": 2},
            {"id": "combo", "name": "Triple Combo", "action_type": "attack", "damage": 14, "delay": 3,
             "hit_count": 3},
            {"id": "ultimate", "name": "Finisher", "action_type": "special", "damage": 40, "delay": 6},
        ],
    },
}

PASSIVES = {
    "waitIncrease": {"name": "Patience", "max_level": 3, "value": 1},
    "perfectCast": {"name": "Perfect Cast", "max_level": 1, "value": 1},
    "defenseBonus": {"name": "Steel Skin", "max_level": 10, "value": 1},
    "drawIncrease": {"name": "Quick Hands", "max_level": 2, "value": 1},
}

WAVES = {
    "boss_every": 5,
    "min_enemies": 2,
    "max_enemies": 3,
    "pools": {
        "1": ["bandit", "archer"],
        "3": ["bandit", "archer", "shieldman"],
        "6": ["bandit", "archer", "shieldman", "assassin", "shaman"],
    },
    "bosses": ["banditLeader", "swordMaster"],
    "boss_scaling_per_10": 0.15,
}

STARTER_DECK = [
    "katana", "samjeongdo", "wakizashi", "yedogeom", "bongukgeom",
    "slash", "slash", "slash", "thrust", "thrust",
    "doubleSlash", "doubleSlash", "parry", "parry", "quickSlash",
    "focus", "powerStrike", "sweepingBlow", "ironWall", "bladeGrab",
]

MIRAGE_WEAPON_ID = "mirage"

DEFAULT_CONTENT = {
    "weapons": WEAPONS,
    "skills": SKILLS,
    "enemies": ENEMIES,
    "bosses": BOSSES,
    "passives": PASSIVES,
    "waves": WAVES,
    "starter_deck": STARTER_DECK,
    "mirage_weapon_id": MIRAGE_WEAPON_ID,
}
