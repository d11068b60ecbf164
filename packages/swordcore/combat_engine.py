"""
Combat Engine - card play resolution for the sword battler.

This module drives everything that happens inside a combat:
1. Turn flow (start combat -> player actions -> end turn -> enemy actions)
2. The card pipeline: gate, targeting, hit accounting, damage, on-hit
   effects, post-resolution bookkeeping
3. Weapon equips and their draw attacks
4. The enemy action queue ticks and enemy action resolution (parries,
   counters, multi-hit, summons)
5. Count effects (charged attacks, counter-defense stances)
6. Kills, wave clear, rewards and level ups

Design principles:
- All mutable state lives on the GameSession passed in; no globals
- Gate checks raise RejectedAction before anything is mutated; the public
  methods turn that into an ActionResult plus a message event
- Once past the gate a resolution is a sequence of steps on a StepQueue;
  while steps are pending the engine is busy and refuses new input, so no
  two resolutions ever interleave
- Critical eligibility is decided once, before the attack mutates anything

Usage:
    from packages.swordcore import CombatEngine, ContentLibrary, GameSession

    content = ContentLibrary.default()
    session = GameSession.new(deck=content.starter_deck(), seed=42)
    engine = CombatEngine(session, content=content)
    engine.start_combat()

    result = engine.use_card(0)
    if result.data.get("targeting"):
        engine.select_target(engine.legal_target_ids()[0])
    engine.end_turn()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Dict, List, Optional

from .calc.damage import (
    calculate_base_damage,
    calculate_counter_damage,
    calculate_gold_drop,
    calculate_hit_damage,
    calculate_lifesteal,
    calculate_parry_rate,
    exp_for_kill,
    split_buffs,
)
from .calc.reach import Reach, resolve_reach, select_targets, target_count
from .config import DEFAULT_CONFIG, GameConfig
from .content.library import ContentLibrary
from .effects.count_effects import (
    active_defense_effect,
    consume_effect,
    register_charge,
    register_counter_defense,
    tick_count_effects,
)
from .effects.resolver import (
    apply_armor_reduction,
    apply_bleed,
    apply_critical_draw_attack_effects,
    apply_draw_attack_effects,
    apply_weapon_on_hit,
    increase_next_delay,
    tick_status,
)
from .errors import RejectedAction, RejectReason
from .events import CombatLog, EngineEvent, EventBus
from .handlers.cards import (
    draw_cards,
    draw_with_guaranteed_weapon,
    remove_mirage_cards,
    reset_deck,
    reveal_cards,
    take_from_pile,
)
from .handlers.enemy_actions import (
    arm_enemies,
    arm_enemy,
    legal_targets,
    reduce_delays,
    rotate_action,
    tick_enemy_timers,
)
from .handlers.progression import gain_exp, learn_passive
from .state.cards import (
    SELECTION_EFFECTS,
    Card,
    CriticalCondition,
    EffectKind,
    Skill,
    SkillEffect,
    SkillKind,
    Weapon,
    is_weapon,
)
from .state.enemy import Enemy, EnemyAction, EnemyActionType, EnemyEffectType
from .state.phase import GamePhase
from .state.player import Buff, BuffKind, CountEffect, CountEffectKind, PassiveKind
from .state.session import GameSession, PendingSkillSelection, PendingTarget
from .steps import Step, StepQueue

logger = logging.getLogger(__name__)

# Effects resolved on top of an attack/special skill's hits
ATTACK_SIDE_EFFECTS = (EffectKind.BLADE_DANCE, EffectKind.DELAY_REDUCE, EffectKind.TAUNT, EffectKind.SHEATHE)


# =============================================================================
# RESULTS
# =============================================================================

@dataclass
class ActionResult:
    """Outcome of a public engine call."""
    accepted: bool
    reason: Optional[RejectReason] = None
    message: Optional[str] = None
    # True while the resolution is suspended on a presentation beat
    pending: bool = False
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: Optional[str] = None, **data) -> "ActionResult":
        return cls(accepted=True, message=message, data=data)

    @classmethod
    def rejected(cls, error: RejectedAction) -> "ActionResult":
        return cls(accepted=False, reason=error.reason, message=error.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accepted": self.accepted,
            "reason": self.reason.value if self.reason else None,
            "message": self.message,
            "pending": self.pending,
            "data": self.data,
        }


@dataclass
class AttackPlan:
    """Everything an attack needs, fixed before the first hit lands."""
    name: str
    weapon: Weapon
    targets: List[Enemy]
    hits: int
    total_hits: int
    base_damage: float
    ignore_defense: bool = False
    skill_pierce: int = 0
    critical: bool = False
    drain_weapon: bool = False
    effect: Optional[SkillEffect] = None
    total_damage: int = 0


# =============================================================================
# COMBAT ENGINE
# =============================================================================

class CombatEngine:
    """
    Combat resolution for one GameSession.

    Handles:
    - Card play (weapons and skills) with targeting
    - Draw attacks, skill attacks, charge payoffs and counters
    - Enemy delay ticks and enemy actions
    - Turn flow, exchange, wait, rewards and level ups
    """

    def __init__(
        self,
        session: GameSession,
        content: Optional[ContentLibrary] = None,
        config: GameConfig = DEFAULT_CONFIG,
        events: Optional[EventBus] = None,
        auto_advance: bool = True,
    ):
        self.session = session
        self.content = content
        self.config = config
        self.events = events or EventBus()
        self.log = CombatLog(self.config.combat_log_size)
        self.steps = StepQueue(auto_advance=auto_advance, on_beat=self._on_beat)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def player(self):
        return self.session.player

    @property
    def game(self):
        return self.session.game

    @property
    def runtime(self):
        return self.session.runtime

    @property
    def rng(self):
        return self.session.rng

    @property
    def busy(self) -> bool:
        return self.steps.busy

    @property
    def draw_count(self) -> int:
        return self.config.draw_per_turn + self._passive_bonus(PassiveKind.DRAW_INCREASE)

    @property
    def max_wait_count(self) -> int:
        return self.config.base_wait_count + self._passive_bonus(PassiveKind.WAIT_INCREASE)

    def _passive_bonus(self, kind: PassiveKind) -> int:
        for passive in self.player.passives:
            if passive.kind == kind:
                return passive.level * passive.value
        return 0

    def living_enemies(self) -> List[Enemy]:
        return self.game.living_enemies()

    def legal_target_ids(self) -> List[str]:
        return [e.id for e in legal_targets(self.game.enemies)]

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def _emit(self, event: EngineEvent, **payload) -> None:
        self.log.log(self.game.turn, event.value, payload)
        self.events.emit(event, payload)

    def _message(self, text: str) -> None:
        logger.debug(text)
        self._emit(EngineEvent.MESSAGE, text=text)

    def _on_beat(self, step: Step) -> None:
        self._emit(EngineEvent.BEAT, label=step.label, ms=step.beat_ms)

    def _emit_refresh(self) -> None:
        self._emit(EngineEvent.HAND_CHANGED, hand=[c.uid for c in self.player.hand])
        self._emit(EngineEvent.STATS_CHANGED, hp=self.player.hp, mana=self.player.mana,
                   durability=self.player.current_sword.current_durability if self.player.current_sword else None)

    def _reject(self, error: RejectedAction) -> ActionResult:
        self._message(error.message)
        return ActionResult.rejected(error)

    def _run(self, result: ActionResult) -> ActionResult:
        """Drive queued steps and report whether they suspended."""
        self.steps.run()
        result.pending = self.steps.busy
        return result

    def resume(self) -> bool:
        """Continue a resolution suspended on a presentation beat."""
        return self.steps.resume()

    # -------------------------------------------------------------------------
    # Gate helpers
    # -------------------------------------------------------------------------

    def _require_idle(self) -> None:
        if self.steps.busy:
            raise RejectedAction(RejectReason.BUSY, "Still resolving")

    def _require_combat(self) -> None:
        if self.game.phase != GamePhase.COMBAT:
            raise RejectedAction(RejectReason.WRONG_PHASE, "Not in combat")

    def _require_no_selection(self) -> None:
        if self.runtime.skill_selection is not None:
            raise RejectedAction(RejectReason.SELECTION_PENDING, "Choose a card first")

    def _hand_card(self, index: int) -> Card:
        if index < 0 or index >= len(self.player.hand):
            raise RejectedAction(RejectReason.INVALID_INDEX, "No such card")
        return self.player.hand[index]

    def _selection_candidates(self, kind: EffectKind, limit: int) -> List[Card]:
        player = self.player
        if kind == EffectKind.SEARCH_SWORD:
            pool = [c for c in player.deck if is_weapon(c)]
            if len(pool) > limit:
                pool = self.rng.sample(pool, limit)
            return pool
        if kind == EffectKind.GRAVE_RECALL:
            return list(reversed(player.discard))[:limit]
        if kind == EffectKind.GRAVE_EQUIP:
            return [c for c in reversed(player.discard) if is_weapon(c)][:limit]
        return []

    def _check_gate(self, card: Card) -> None:
        """Raise RejectedAction if `card` cannot be played right now."""
        player = self.player
        if player.mana < card.mana_cost:
            raise RejectedAction(RejectReason.NOT_ENOUGH_MANA, "Not enough mana")
        if is_weapon(card):
            return
        if card.is_offensive:
            sword = player.current_sword
            if sword is None:
                raise RejectedAction(RejectReason.NO_WEAPON, "Equip a weapon first")
            if not card.is_charge and sword.current_durability <= 0:
                raise RejectedAction(RejectReason.NO_DURABILITY, "Weapon has no durability")
        kind = card.effect_kind
        if kind == EffectKind.FOLLOW_UP and not player.used_attack_this_turn:
            raise RejectedAction(RejectReason.NO_ATTACK_THIS_TURN, "Attack first this turn")
        if kind in SELECTION_EFFECTS and not self._selection_candidates(kind, 1):
            raise RejectedAction(RejectReason.NO_SELECTION, "Nothing to choose from")

    def can_play(self, index: int) -> bool:
        try:
            self._require_idle()
            self._require_combat()
            self._require_no_selection()
            self._check_gate(self._hand_card(index))
        except RejectedAction:
            return False
        return True

    def playable_cards(self) -> List[int]:
        return [i for i in range(len(self.player.hand)) if self.can_play(i)]

    # =========================================================================
    # COMBAT LIFECYCLE
    # =========================================================================

    def start_combat(self, enemies: Optional[List[Enemy]] = None) -> ActionResult:
        """
        Enter combat against `enemies` (or the content's wave spawn).

        Refills mana, clears the shield, arms every enemy's action queue
        and draws: an opening hand with a guaranteed weapon when the hand
        is empty, the per-turn draw otherwise.
        """
        try:
            self._require_idle()
            if enemies is None:
                if self.content is None:
                    raise RejectedAction(RejectReason.NO_CONTENT, "No enemies to fight")
                enemies = self.content.wave_enemies(self.game.current_wave, self.rng)
            transition = self.game.transition(GamePhase.COMBAT)
            if not transition.accepted:
                raise RejectedAction(RejectReason.WRONG_PHASE, "Cannot start combat now")
        except RejectedAction as e:
            return self._reject(e)

        player = self.player
        self.game.enemies = list(enemies)
        arm_enemies(self.game.enemies)
        player.mana = player.max_mana
        player.defense = 0
        player.waits_used = 0
        player.used_attack_this_turn = False
        self.runtime.clear_combat_selections()
        self.runtime.exchange_used = False

        if not player.hand:
            draw_with_guaranteed_weapon(player, self.config.initial_draw, self.rng, self.config.max_hand_size)
        else:
            self.draw_cards(self.draw_count)

        logger.info("Combat started: wave %d, %d enemies", self.game.current_wave, len(self.game.enemies))
        self._emit(EngineEvent.COMBAT_STARTED, wave=self.game.current_wave,
                   enemies=[e.id for e in self.game.enemies])
        self._emit_refresh()
        return ActionResult.ok(enemies=[e.id for e in self.game.enemies])

    def _check_combat_end(self) -> bool:
        """Wave clear: victory, deck reset and reward offer."""
        if self.game.phase != GamePhase.COMBAT or self.living_enemies():
            return False
        self.game.enemies = []
        self.game.transition(GamePhase.VICTORY)
        player = self.player
        player.buffs.clear()
        player.count_effects.clear()
        self.runtime.clear_combat_selections()
        self.runtime.skill_selection = None
        reset_deck(player, self.rng)
        if self.content is not None:
            self.runtime.reward_cards = self.content.reward_cards(
                self.rng, self.config.reward_card_count, self.config.reward_weapon_chance)
        logger.info("Wave %d cleared (score %d)", self.game.current_wave, self.game.score)
        self._emit(EngineEvent.COMBAT_ENDED, victory=True, wave=self.game.current_wave)
        self._emit(EngineEvent.REWARD_SHOWN, cards=[c.to_dict() for c in self.runtime.reward_cards])
        return True

    def _game_over(self) -> None:
        if self.game.phase == GamePhase.GAME_OVER:
            return
        self.game.transition(GamePhase.GAME_OVER, force=True)
        self.runtime.clear_combat_selections()
        logger.info("Game over on wave %d turn %d", self.game.current_wave, self.game.turn)
        self._emit(EngineEvent.COMBAT_ENDED, victory=False, wave=self.game.current_wave)
        self._emit(EngineEvent.GAME_OVER, score=self.game.score)

    # =========================================================================
    # DRAWING
    # =========================================================================

    def draw_cards(self, count: int):
        """Draw into hand; stops early (no error) when deck and discard are empty."""
        result = draw_cards(self.player, count, self.rng, self.config.max_hand_size)
        if result.exhausted:
            self._message("No cards left to draw")
        return result

    def draw_cards_with_guaranteed_weapon(self, count: int):
        return draw_with_guaranteed_weapon(self.player, count, self.rng, self.config.max_hand_size)

    def _add_to_hand(self, card: Card) -> None:
        if len(self.player.hand) >= self.config.max_hand_size:
            self.player.discard.append(card)
        else:
            self.player.hand.append(card)

    # =========================================================================
    # CARD PLAY
    # =========================================================================

    def use_card(self, index: int) -> ActionResult:
        """
        Play the card at `index` in hand.

        In exchange mode the card is exchanged instead. Weapons and
        attack/special skills ask for a target when the choice matters;
        everything else resolves at once.
        """
        try:
            self._require_idle()
            self._require_combat()
            self._require_no_selection()
            card = self._hand_card(index)
            if self.runtime.is_exchange_mode:
                return self._exchange(index)

            self.runtime.pending_target = None
            needs_target = is_weapon(card) or card.is_offensive
            if needs_target and self.living_enemies():
                self._check_gate(card)
                reach = self._card_reach(card)
                target = self._auto_target(reach)
                if target is None:
                    self.runtime.pending_target = PendingTarget(card_uid=card.uid, reach=reach)
                    self._emit(EngineEvent.TARGETING_STARTED, card_uid=card.uid, reach=reach.value,
                               legal=self.legal_target_ids())
                    return ActionResult.ok(targeting=True, reach=reach.value)
                return self._play(card, target)
            return self._play(card, None)
        except RejectedAction as e:
            return self._reject(e)

    def select_target(self, enemy_id: str) -> ActionResult:
        """Finish a pending targeting by picking an enemy."""
        try:
            self._require_idle()
            self._require_combat()
            pending = self.runtime.pending_target
            if pending is None:
                raise RejectedAction(RejectReason.NOT_TARGETING, "No card is waiting for a target")
            enemy = self.game.find_enemy(enemy_id)
            if enemy is None or not enemy.is_alive:
                raise RejectedAction(RejectReason.INVALID_TARGET, "Invalid target")
            if enemy_id not in self.legal_target_ids():
                raise RejectedAction(RejectReason.INVALID_TARGET, "A taunting enemy must be targeted")
            card = next((c for c in self.player.hand if c.uid == pending.card_uid), None)
            if card is None:
                self.runtime.pending_target = None
                raise RejectedAction(RejectReason.INVALID_INDEX, "Card is no longer in hand")
            result = self._play(card, enemy)
            self.runtime.pending_target = None
            return result
        except RejectedAction as e:
            return self._reject(e)

    def cancel_targeting(self) -> ActionResult:
        """Abort a pending targeting. Nothing was spent, nothing moves."""
        if self.runtime.pending_target is None:
            return self._reject(RejectedAction(RejectReason.NOT_TARGETING, "Not targeting"))
        uid = self.runtime.pending_target.card_uid
        self.runtime.pending_target = None
        self._emit(EngineEvent.TARGETING_CANCELLED, card_uid=uid)
        return ActionResult.ok()

    def _card_reach(self, card: Card) -> Reach:
        if is_weapon(card):
            return card.draw_attack.reach
        sword = self.player.current_sword
        return resolve_reach(card.reach, sword.reach if sword else None)

    def _auto_target(self, reach: Reach) -> Optional[Enemy]:
        """The target when the choice cannot change the outcome, else None."""
        legal = legal_targets(self.game.enemies)
        if not legal:
            return None
        if len(legal) == 1 or target_count(reach) >= len(self.living_enemies()):
            return legal[0]
        return None

    def _play(self, card: Card, target: Optional[Enemy]) -> ActionResult:
        self._check_gate(card)
        if is_weapon(card):
            return self._play_weapon(card, target)
        return self._play_skill(card, target)

    def _play_weapon(self, weapon: Weapon, target: Optional[Enemy]) -> ActionResult:
        player = self.player
        swift = player.is_barehanded or weapon.draw_attack.is_swift
        player.mana -= weapon.mana_cost
        take_from_pile(player.hand, weapon.uid)
        self._equip_weapon(weapon, target)
        self._finish_action(swift)
        return self._run(ActionResult.ok(played=weapon.uid, swift=swift))

    def _play_skill(self, skill: Skill, target: Optional[Enemy]) -> ActionResult:
        player = self.player
        kind = skill.effect_kind

        plan = None
        if skill.is_offensive and not skill.is_charge and skill.attack_count > 0:
            plan = self._plan_skill_attack(skill, target)

        # Committed from here on
        player.mana -= skill.mana_cost
        take_from_pile(player.hand, skill.uid)

        if skill.is_offensive:
            player.used_attack_this_turn = True
            if skill.is_charge:
                register_charge(player, skill, target.id if target else None)
                self._message(f"{skill.name} is charging")
            elif plan is not None:
                self._schedule_attack(plan)
            if kind in ATTACK_SIDE_EFFECTS:
                self._resolve_utility(skill)
        elif skill.skill_kind == SkillKind.DEFENSE:
            self._resolve_defense(skill)
        else:
            self._resolve_utility(skill)

        # The card lands after it resolved, so it never offers itself from discard
        if kind == EffectKind.SHEATHE:
            self._add_to_hand(skill)
        elif not skill.is_consumable:
            player.discard.append(skill)

        self._finish_action(skill.is_swift)
        return self._run(ActionResult.ok(played=skill.uid, swift=skill.is_swift))

    def _finish_action(self, swift: bool) -> None:
        """Post-resolution bookkeeping: the delay tick for non-swift actions."""
        if not swift:
            self.steps.schedule("delay tick", self._tick_after_action)
        self.steps.schedule("settle", self._emit_refresh)

    # -------------------------------------------------------------------------
    # Weapon equip and draw attack
    # -------------------------------------------------------------------------

    def _equip_weapon(self, weapon: Weapon, target: Optional[Enemy] = None, draw_attack: bool = True) -> bool:
        """
        Equip `weapon`; the previous weapon goes to discard if it still has
        durability. Mid-combat the new weapon performs its draw attack.
        Returns True if the player was bare-handed.
        """
        player = self.player
        was_barehanded = player.current_sword is None
        old = player.current_sword
        if old is not None and old.current_durability > 0:
            player.discard.append(old)
        player.current_sword = weapon
        self._emit(EngineEvent.WEAPON_EQUIPPED, weapon=weapon.uid, name=weapon.name)
        if draw_attack and self.game.in_combat and self.living_enemies():
            self._schedule_draw_attack(weapon, target)
        return was_barehanded

    def _schedule_draw_attack(self, weapon: Weapon, base_target: Optional[Enemy]) -> None:
        draw = weapon.draw_attack
        targets = select_targets(draw.reach, self.living_enemies(), base_target)
        # Decided before the delay increases below can change the condition
        critical = self._is_critical(draw.critical_condition, weapon, targets)

        delay_bonus = weapon.on_hit.delay_increase + draw.delay_increase
        if delay_bonus:
            for enemy in targets:
                increase_next_delay(enemy, delay_bonus)

        if weapon.current_durability < draw.durability_cost:
            self._message(f"{weapon.name} lacks durability for {draw.name}")
            return
        self.player.used_attack_this_turn = True
        self.steps.schedule(
            f"{draw.name}",
            partial(self._draw_attack_step, weapon, targets, critical),
            beat_ms=self.config.hit_interval_ms,
        )

    def _draw_attack_step(self, weapon: Weapon, targets: List[Enemy], critical: bool) -> None:
        if not self.game.in_combat:
            return
        draw = weapon.draw_attack
        weapon.consume_durability(draw.durability_cost)
        if weapon.current_durability <= 0:
            self._break_weapon(weapon)

        bonus, focus = self._attack_buffs()
        crit_mult = self._crit_multiplier(draw.critical_multiplier) if critical else 1.0
        base = calculate_base_damage(weapon.attack, bonus, draw.multiplier, focus, crit_mult)
        ignore = draw.pierce or (critical and draw.critical_pierce)

        for enemy in targets:
            if not self._is_present(enemy):
                continue
            damage = calculate_hit_damage(base, enemy.defense, weapon.pierce, 0, ignore)
            self._damage_enemy(enemy, damage, source=draw.name, critical=critical)
            if enemy.is_alive:
                apply_draw_attack_effects(enemy, draw)
                apply_weapon_on_hit(enemy, weapon)
                if critical:
                    apply_critical_draw_attack_effects(enemy, draw)
        self._consume_focus()

    # -------------------------------------------------------------------------
    # Skill attacks
    # -------------------------------------------------------------------------

    def _attack_buffs(self):
        player = self.player
        return split_buffs(
            (b.value for b in player.buffs if b.kind == BuffKind.ATTACK),
            (b.value for b in player.buffs if b.kind == BuffKind.FOCUS),
        )

    def _crit_multiplier(self, value: Optional[float]) -> float:
        return value if value is not None else self.config.default_critical_multiplier

    def _consume_focus(self) -> None:
        self.player.buffs = [b for b in self.player.buffs if b.kind != BuffKind.FOCUS]

    def _is_critical(self, condition: Optional[CriticalCondition], weapon: Weapon, targets: List[Enemy]) -> bool:
        if condition == CriticalCondition.DAGGER:
            return weapon.is_dagger
        if condition == CriticalCondition.ENEMY_DELAY_1:
            return any(t.head_action is not None and t.head_action.current_delay == 1 for t in targets)
        return False

    def _hit_count(self, weapon: Weapon, skill_attack_count: int):
        """(actual hits, requested hits, drain weapon) for an attack with `weapon`."""
        total = weapon.attack_count * skill_attack_count
        available = weapon.current_durability
        if available < total and self.player.has_passive(PassiveKind.PERFECT_CAST):
            return total, total, True
        return min(available, total), total, False

    def _plan_skill_attack(self, skill: Skill, base_target: Optional[Enemy]) -> AttackPlan:
        weapon = self.player.current_sword
        hits, total, drain = self._hit_count(weapon, skill.attack_count)
        if hits <= 0:
            raise RejectedAction(RejectReason.NO_HITS, "Weapon has no durability")

        reach = resolve_reach(skill.reach, weapon.reach)
        targets = select_targets(reach, self.living_enemies(), base_target)
        critical = self._is_critical(skill.critical_condition, weapon, targets)

        effect = skill.effect
        kind = effect.kind if effect else None
        bonus, focus = self._attack_buffs()
        crit_mult = self._crit_multiplier(skill.critical_multiplier) if critical else 1.0
        return AttackPlan(
            name=skill.name,
            weapon=weapon,
            targets=targets,
            hits=hits,
            total_hits=total,
            base_damage=calculate_base_damage(weapon.attack, bonus, skill.attack_multiplier, focus, crit_mult),
            ignore_defense=(skill.is_piercing or kind == EffectKind.ARMOR_BREAKER
                            or (critical and skill.critical_pierce)),
            skill_pierce=int(effect.value) if kind == EffectKind.PIERCE else 0,
            critical=critical,
            drain_weapon=drain,
            effect=effect,
        )

    def _schedule_attack(self, plan: AttackPlan) -> None:
        for i in range(plan.hits):
            self.steps.schedule(
                f"{plan.name} hit {i + 1}/{plan.hits}",
                partial(self._attack_hit_step, plan, i),
                beat_ms=self.config.hit_interval_ms,
            )
        self.steps.schedule(f"{plan.name} effects", partial(self._attack_effects_step, plan))

    def _attack_hit_step(self, plan: AttackPlan, index: int) -> None:
        if not self.game.in_combat:
            return
        weapon = plan.weapon
        weapon.consume_durability(1)
        if plan.drain_weapon and index == plan.hits - 1:
            weapon.consume_durability(weapon.current_durability)
        if weapon.current_durability <= 0:
            self._break_weapon(weapon)

        for enemy in plan.targets:
            if not self._is_present(enemy):
                continue
            damage = calculate_hit_damage(plan.base_damage, enemy.defense, weapon.pierce,
                                          plan.skill_pierce, plan.ignore_defense)
            plan.total_damage += self._damage_enemy(enemy, damage, source=plan.name, critical=plan.critical)

    def _attack_effects_step(self, plan: AttackPlan) -> None:
        """On-hit effects once the hit sequence is over."""
        if not self.game.in_combat:
            return
        player = self.player
        effect = plan.effect
        kind = effect.kind if effect else None
        weapon = plan.weapon

        for enemy in plan.targets:
            if not self._is_present(enemy):
                continue
            if kind == EffectKind.BLEED:
                apply_bleed(enemy, int(effect.value), effect.duration or 3)
            elif kind == EffectKind.STUN:
                enemy.stun = max(enemy.stun, int(effect.duration or effect.value or 1))
            elif kind == EffectKind.ARMOR_BREAKER:
                apply_armor_reduction(enemy, int(effect.value))
            apply_weapon_on_hit(enemy, weapon)
            increase_next_delay(enemy, weapon.on_hit.delay_increase)

        if kind == EffectKind.LIFESTEAL and plan.total_damage > 0:
            healed = calculate_lifesteal(plan.total_damage, effect.value)
            player.hp = min(player.max_hp, player.hp + healed)
        elif kind == EffectKind.DRAW:
            self.draw_cards(int(effect.value))
        elif kind == EffectKind.DESTROY_WEAPON and player.current_sword is weapon:
            player.current_sword = None
            self._emit(EngineEvent.WEAPON_BROKEN, weapon=weapon.uid, destroyed=True)
        self._consume_focus()

    # -------------------------------------------------------------------------
    # Non-attack skills
    # -------------------------------------------------------------------------

    def _resolve_defense(self, skill: Skill) -> None:
        kind = skill.effect_kind
        if kind in (EffectKind.COUNT_DEFENSE, EffectKind.FLOW_READ):
            register_counter_defense(self.player, skill)
            self._message(f"{skill.name} stance ready")
        elif skill.defense_bonus:
            self.player.buffs.append(Buff(id=skill.id, name=skill.name, kind=BuffKind.DEFENSE,
                                          value=skill.defense_bonus, duration=1))

    def _resolve_utility(self, skill: Skill) -> None:
        """Buff and draw skills."""
        player = self.player
        effect = skill.effect
        if effect is None:
            return
        kind = effect.kind
        value = int(effect.value)

        if kind == EffectKind.FOCUS:
            player.buffs.append(Buff(id=skill.id, name=skill.name, kind=BuffKind.FOCUS,
                                     value=effect.value, duration=effect.duration or 1))
        elif kind == EffectKind.SHARPEN:
            player.buffs.append(Buff(id=skill.id, name=skill.name, kind=BuffKind.ATTACK,
                                     value=effect.value, duration=effect.duration or 3))
            for card in player.deck:
                if is_weapon(card):
                    card.repair(1)
        elif kind == EffectKind.DRAW:
            self.draw_cards(value)
        elif kind == EffectKind.TAUNT:
            self._reduce_enemy_delays(1)
            self.draw_cards(value)
        elif kind == EffectKind.DELAY_REDUCE:
            self._reduce_enemy_delays(value)
        elif kind == EffectKind.SHEATHE:
            sword = player.current_sword
            if sword is not None:
                player.current_sword = None
                self._add_to_hand(sword)
        elif kind == EffectKind.GRAVE_DRAW_TOP:
            for _ in range(min(value, len(player.discard))):
                self._add_to_hand(player.discard.pop())
        elif kind == EffectKind.BLADE_GRAB:
            self._blade_grab()
        elif kind == EffectKind.BLADE_DANCE:
            self._blade_dance(value)
        elif kind in SELECTION_EFFECTS:
            self._open_selection(skill, kind, value or 1)

    def _blade_grab(self) -> None:
        """First weapon from the top of the deck is equipped, the next goes to hand."""
        player = self.player
        weapons = [c for c in reversed(player.deck) if is_weapon(c)][:2]
        if not weapons:
            self._message("No weapon in deck")
            return
        take_from_pile(player.deck, weapons[0].uid)
        self._equip_weapon(weapons[0])
        if len(weapons) > 1:
            take_from_pile(player.deck, weapons[1].uid)
            self._add_to_hand(weapons[1])

    def _blade_dance(self, count: int) -> None:
        """Reveal cards and play each one automatically, in order."""
        revealed = reveal_cards(self.player, count, self.rng)
        for card in revealed.drawn:
            self.steps.schedule(f"blade dance {card.name}", partial(self._blade_dance_card, card),
                                beat_ms=self.config.hit_interval_ms)

    def _blade_dance_card(self, card: Card) -> None:
        player = self.player
        if not self.game.in_combat:
            self._add_to_hand(card)
            return
        if is_weapon(card):
            self._equip_weapon(card)
            return
        sword = player.current_sword
        cost = max(1, card.durability_cost)
        if (card.skill_kind in (SkillKind.BUFF, SkillKind.DRAW) or card.is_charge
                or (card.is_offensive and (sword is None or sword.current_durability < cost))):
            self._add_to_hand(card)
            return
        if card.is_offensive:
            if card.durability_cost:
                sword.consume_durability(card.durability_cost)
            try:
                plan = self._plan_skill_attack(card, None)
            except RejectedAction:
                self._add_to_hand(card)
                return
            self._schedule_attack(plan)
        else:
            self._resolve_defense(card)
        if not card.is_consumable:
            player.discard.append(card)

    def _open_selection(self, skill: Skill, kind: EffectKind, limit: int) -> None:
        offered = self._selection_candidates(kind, limit)
        self.runtime.skill_selection = PendingSkillSelection(
            effect=kind, skill_uid=skill.uid, mana_spent=skill.mana_cost,
            offered_uids=[c.uid for c in offered],
        )
        self._emit(EngineEvent.SKILL_SELECTION_SHOWN, effect=kind.value, cards=[c.to_dict() for c in offered])

    def select_skill_card(self, index: int) -> ActionResult:
        """Pick one of the cards offered by a search/recall skill."""
        selection = self.runtime.skill_selection
        try:
            self._require_idle()
            if selection is None:
                raise RejectedAction(RejectReason.NO_SELECTION, "Nothing to choose")
            if index < 0 or index >= len(selection.offered_uids):
                raise RejectedAction(RejectReason.INVALID_INDEX, "No such card")
        except RejectedAction as e:
            return self._reject(e)

        player = self.player
        uid = selection.offered_uids[index]
        self.runtime.skill_selection = None
        if selection.effect == EffectKind.SEARCH_SWORD:
            card = take_from_pile(player.deck, uid)
            if card is not None:
                self._equip_weapon(card)
        elif selection.effect == EffectKind.GRAVE_EQUIP:
            card = take_from_pile(player.discard, uid)
            if card is not None:
                self._equip_weapon(card)
        else:
            card = take_from_pile(player.discard, uid)
            if card is not None:
                self._add_to_hand(card)
        self.steps.schedule("settle", self._emit_refresh)
        return self._run(ActionResult.ok(selected=uid))

    def cancel_skill_selection(self) -> ActionResult:
        """Back out of a selection: the skill returns to hand and its mana is refunded."""
        selection = self.runtime.skill_selection
        if selection is None:
            return self._reject(RejectedAction(RejectReason.NO_SELECTION, "Nothing to cancel"))
        player = self.player
        self.runtime.skill_selection = None
        skill = take_from_pile(player.discard, selection.skill_uid)
        if skill is not None:
            self._add_to_hand(skill)
        player.mana = min(player.max_mana, player.mana + selection.mana_spent)
        self._emit_refresh()
        return ActionResult.ok()

    # =========================================================================
    # TICKS
    # =========================================================================

    def _tick_after_action(self) -> None:
        """A non-swift action passed: enemy delays, count effects, buffs."""
        if not self.game.in_combat:
            return
        self._reduce_enemy_delays(1)
        self.steps.schedule("count effects", self._count_effect_tick_step)
        self.steps.schedule("buffs", self._tick_buffs)

    def _reduce_enemy_delays(self, amount: int) -> None:
        for enemy in reduce_delays(self.game.enemies, amount):
            self.steps.schedule(
                f"{enemy.name} acts",
                partial(self._enemy_action_step, enemy),
                beat_ms=self.config.enemy_action_interval_ms,
            )

    def _count_effect_tick_step(self) -> None:
        if not self.game.in_combat:
            return
        for effect in tick_count_effects(self.player):
            self._emit(EngineEvent.COUNT_EFFECT_RESOLVED, effect=effect.id, kind=effect.kind.value,
                       consumed=False)
            if effect.kind == CountEffectKind.CHARGE_ATTACK:
                self._resolve_charge(effect)

    def _tick_buffs(self) -> None:
        for buff in self.player.buffs:
            buff.duration -= 1
        self.player.buffs = [b for b in self.player.buffs if b.duration > 0]

    def _resolve_charge(self, effect: CountEffect) -> None:
        """Charge payoff, computed from the weapon equipped right now."""
        weapon = self.player.current_sword
        if weapon is None or weapon.current_durability <= 0:
            self._message(f"{effect.name} fizzles without a weapon")
            return
        hits, total, drain = self._hit_count(weapon, effect.skill_attack_count)
        if hits <= 0:
            self._message(f"{effect.name} fizzles")
            return
        reach = resolve_reach(effect.reach, weapon.reach)
        targets = select_targets(reach, self.living_enemies(), self.game.find_enemy(effect.target_id))
        bonus, focus = self._attack_buffs()
        self._schedule_attack(AttackPlan(
            name=effect.name,
            weapon=weapon,
            targets=targets,
            hits=hits,
            total_hits=total,
            base_damage=calculate_base_damage(weapon.attack, bonus, effect.attack_multiplier, focus),
            drain_weapon=drain,
        ))

    # =========================================================================
    # DAMAGE AND KILLS
    # =========================================================================

    def _is_present(self, enemy: Enemy) -> bool:
        return enemy.is_alive and any(e is enemy for e in self.game.enemies)

    def _damage_enemy(self, enemy: Enemy, amount: int, source: str = "", critical: bool = False) -> int:
        dealt = enemy.take_damage(amount)
        self._emit(EngineEvent.DAMAGE_DEALT, enemy=enemy.id, amount=amount, hp=enemy.hp,
                   source=source, critical=critical)
        if enemy.hp <= 0:
            self._kill_enemy(enemy)
        return dealt

    def _break_weapon(self, weapon: Weapon) -> None:
        """Unequip a weapon that hit 0 durability. Safe to call repeatedly."""
        if self.player.current_sword is weapon:
            self.player.current_sword = None
            logger.debug("%s broke", weapon.name)
            self._emit(EngineEvent.WEAPON_BROKEN, weapon=weapon.uid, destroyed=False)

    def _kill_enemy(self, enemy: Enemy) -> None:
        if not any(e is enemy for e in self.game.enemies):
            return
        self.game.enemies = [e for e in self.game.enemies if e is not enemy]
        player = self.player
        config = self.config

        self.game.score += enemy.max_hp * 10
        self.game.enemies_defeated += 1

        levels = gain_exp(player, exp_for_kill(enemy.max_hp, enemy.is_summoned), config)
        if levels:
            self.runtime.pending_level_up = True
            if self.content is not None:
                self.runtime.passive_choices = self.content.passive_choices(self.rng)
            self._emit(EngineEvent.LEVEL_UP, level=player.level,
                       choices=[p.value for p in self.runtime.passive_choices])

        gold = calculate_gold_drop(enemy.max_hp, enemy.is_boss, self.rng.random(),
                                   config.gold_hp_divisor, config.boss_gold_multiplier, config.gold_variance)
        player.gold += gold

        dropped = None
        if self.content is not None and self.rng.random() < config.card_drop_chance:
            dropped = self.content.random_drop(self.rng, config.weapon_drop_chance)
            player.discard.append(dropped)

        logger.debug("%s defeated (+%d gold)", enemy.name, gold)
        self._emit(EngineEvent.ENEMY_KILLED, enemy=enemy.id, gold=gold, score=self.game.score,
                   drop=dropped.uid if dropped else None)
        self._check_combat_end()

    # =========================================================================
    # ENEMY ACTIONS
    # =========================================================================

    def _enemy_action_step(self, enemy: Enemy, forced: bool = False) -> None:
        """Resolve the head action of `enemy` if it is (still) ready."""
        if not self.game.in_combat or not self._is_present(enemy):
            return
        status = tick_status(enemy.bleeds) + tick_status(enemy.poisons)
        if status:
            self._damage_enemy(enemy, status, source="status")
            if not enemy.is_alive:
                return

        head = enemy.head_action
        if head is None or not (forced or head.is_ready):
            return
        action = rotate_action(enemy)
        if enemy.is_stunned:
            self._message(f"{enemy.name} is stunned")
            return
        self._emit(EngineEvent.ENEMY_ACTION, enemy=enemy.id, action=action.id, type=action.action_type.value)

        if action.is_summon:
            self._summon(enemy, action)
        elif action.action_type in (EnemyActionType.ATTACK, EnemyActionType.SPECIAL):
            for i in range(action.hit_count):
                self.steps.schedule(
                    f"{enemy.name} {action.name} hit {i + 1}/{action.hit_count}",
                    partial(self._enemy_hit_step, enemy, action),
                    beat_ms=self.config.hit_interval_ms,
                )
        elif action.action_type == EnemyActionType.DEFEND:
            enemy.defense += action.defense_increase or self.config.default_enemy_defend
        elif action.action_type == EnemyActionType.TAUNT:
            enemy.is_taunting = True
            enemy.taunt_duration = action.effect.duration if action.effect and action.effect.duration else 1
            enemy.defense += action.defense_increase
        elif action.action_type == EnemyActionType.BUFF:
            if action.effect is not None and action.effect.kind == EnemyEffectType.HEAL:
                for ally in self.living_enemies():
                    ally.heal(action.effect.value)
        else:
            self._message(f"{enemy.name} prepares {action.name}")

    def _enemy_hit_step(self, enemy: Enemy, action: EnemyAction) -> None:
        """One hit of an enemy attack, with its own parry roll."""
        player = self.player
        if not self.game.in_combat or player.is_dead or not self._is_present(enemy):
            return

        weapon = player.current_sword
        stance = active_defense_effect(player)
        rate = calculate_parry_rate(
            weapon.defense if weapon else 0,
            (b.value for b in player.buffs if b.kind == BuffKind.DEFENSE),
            self._passive_bonus(PassiveKind.DEFENSE_BONUS),
            counter_multiplier=stance.current_defense_multiplier if stance else None,
        )
        incoming = action.damage
        if weapon is not None and weapon.current_durability > 0 and self.rng.random() * 100 < rate:
            weapon.consume_durability(1)
            if weapon.current_durability <= 0:
                self._break_weapon(weapon)
            self._emit(EngineEvent.PARRY, enemy=enemy.id, action=action.id, rate=rate)
            if stance is not None:
                # Only a weapon that survived the parry counters
                if stance.counter_attack and player.current_sword is weapon:
                    counter = calculate_counter_damage(weapon.attack, stance.current_counter_multiplier,
                                                       incoming, self.config.counter_incoming_ratio)
                    self._emit(EngineEvent.COUNTER_ATTACK, enemy=enemy.id, amount=counter)
                    self._damage_enemy(enemy, counter, source=stance.name)
                if stance.consume_on_success:
                    consume_effect(player, stance)
                    self._emit(EngineEvent.COUNT_EFFECT_RESOLVED, effect=stance.id, kind=stance.kind.value,
                               consumed=True)
            return

        damage = incoming
        absorbed = min(player.defense, damage)
        player.defense -= absorbed
        damage -= absorbed
        effect = action.effect
        if effect is not None and effect.kind in (EnemyEffectType.BLEED, EnemyEffectType.POISON):
            damage += effect.value
        player.hp = max(0, player.hp - damage)
        self._emit(EngineEvent.PLAYER_DAMAGED, enemy=enemy.id, amount=damage, hp=player.hp)
        if player.hp <= 0:
            self._game_over()

    def _summon(self, enemy: Enemy, action: EnemyAction) -> None:
        if self.content is None:
            return
        roster = self.living_enemies()
        if enemy.summon_cooldown > 0 or len(roster) >= self.config.max_enemies:
            self._message(f"{enemy.name} calls for help, but no one comes")
            return
        for _ in range(max(1, action.effect.value)):
            if len(self.game.enemies) >= self.config.max_enemies:
                break
            minion = self.content.summon_enemy(action.effect.template_id)
            if minion is None:
                break
            arm_enemy(minion)
            self.game.enemies.append(minion)
            self._emit(EngineEvent.ENEMY_SUMMONED, enemy=minion.id, summoner=enemy.id)
        enemy.summon_cooldown = self.config.summon_cooldown

    # =========================================================================
    # TURN FLOW
    # =========================================================================

    def wait(self) -> ActionResult:
        """Pass one non-swift action without playing a card (limited per turn)."""
        try:
            self._require_idle()
            self._require_combat()
            self._require_no_selection()
            if self.player.waits_used >= self.max_wait_count:
                raise RejectedAction(RejectReason.NO_WAITS_LEFT, "No waits left this turn")
        except RejectedAction as e:
            return self._reject(e)
        self.runtime.pending_target = None
        self.player.waits_used += 1
        self._finish_action(swift=False)
        return self._run(ActionResult.ok(waits_left=self.max_wait_count - self.player.waits_used))

    def end_turn(self) -> ActionResult:
        """
        End the player's turn.

        Mirage cards vanish, count effects tick, every enemy's armed action
        fires in line order, stun/taunt/cooldowns count down, then the next
        turn begins: mana refill, shield reset, a possible mirage weapon and
        the per-turn draw.
        """
        try:
            self._require_idle()
            self._require_combat()
            self._require_no_selection()
        except RejectedAction as e:
            return self._reject(e)

        self.runtime.clear_combat_selections()
        removed = remove_mirage_cards(self.player)
        if removed:
            self._message(f"{len(removed)} mirage card(s) fade away")

        self.steps.schedule("count effects", self._count_effect_tick_step)
        self.steps.schedule("enemy turn", self._enemy_turn_step)
        self.steps.schedule("buffs", self._tick_buffs)
        self.steps.schedule("next turn", self._start_next_turn)
        return self._run(ActionResult.ok())

    def _enemy_turn_step(self) -> None:
        if not self.game.in_combat:
            return
        for enemy in list(self.game.enemies):
            self.steps.schedule(
                f"{enemy.name} acts",
                partial(self._enemy_action_step, enemy, True),
                beat_ms=self.config.enemy_action_interval_ms,
            )

    def _start_next_turn(self) -> None:
        if not self.game.in_combat:
            return
        player = self.player
        player.used_attack_this_turn = False
        tick_enemy_timers(self.game.enemies)
        if self._check_combat_end():
            return
        self.game.turn += 1
        player.mana = player.max_mana
        player.defense = 0
        player.waits_used = 0
        self.runtime.exchange_used = False
        self._maybe_spawn_mirage()
        self.draw_cards(self.draw_count)
        self._emit(EngineEvent.TURN_ENDED, turn=self.game.turn)
        self._emit_refresh()

    def _maybe_spawn_mirage(self) -> None:
        player = self.player
        if (self.content is None or not player.is_barehanded
                or len(player.hand) >= self.config.max_hand_size):
            return
        if self.rng.random() < self.config.mirage_chance:
            mirage = self.content.create_mirage_weapon()
            if mirage is not None:
                player.hand.append(mirage)
                self._message(f"{mirage.name} appears in your hand")

    # =========================================================================
    # EXCHANGE
    # =========================================================================

    def toggle_exchange_mode(self) -> ActionResult:
        try:
            self._require_idle()
            self._require_combat()
            if not self.runtime.is_exchange_mode and self.runtime.exchange_used:
                raise RejectedAction(RejectReason.WRONG_PHASE, "Already exchanged this turn")
        except RejectedAction as e:
            return self._reject(e)
        self.runtime.is_exchange_mode = not self.runtime.is_exchange_mode
        self.runtime.pending_target = None
        self._emit(EngineEvent.EXCHANGE_MODE_CHANGED, active=self.runtime.is_exchange_mode)
        return ActionResult.ok(active=self.runtime.is_exchange_mode)

    def _exchange(self, index: int) -> ActionResult:
        """Swap a card in hand for the top of the deck (once per turn)."""
        player = self.player
        card = player.hand.pop(index)
        if not (is_weapon(card) and card.is_mirage):
            player.discard.append(card)
        self.draw_cards(1)
        self.runtime.is_exchange_mode = False
        self.runtime.exchange_used = True
        self._emit(EngineEvent.EXCHANGE_MODE_CHANGED, active=False)
        self._emit_refresh()
        return ActionResult.ok(exchanged=card.uid)

    # =========================================================================
    # REWARDS AND PROGRESSION
    # =========================================================================

    def choose_reward(self, index: int) -> ActionResult:
        """Add one offered reward card to the deck."""
        rewards = self.runtime.reward_cards
        if self.game.phase != GamePhase.VICTORY or not (0 <= index < len(rewards)):
            return self._reject(RejectedAction(RejectReason.INVALID_INDEX, "No such reward"))
        card = rewards[index]
        self.player.deck.append(card)
        self.runtime.reward_cards = []
        return ActionResult.ok(card=card.uid)

    def skip_reward(self) -> ActionResult:
        if self.game.phase != GamePhase.VICTORY:
            return self._reject(RejectedAction(RejectReason.WRONG_PHASE, "No rewards on offer"))
        self.runtime.reward_cards = []
        return ActionResult.ok()

    def learn_passive(self, index: int) -> ActionResult:
        """Take one of the passives offered on level up."""
        choices = self.runtime.passive_choices
        if not self.runtime.pending_level_up or not (0 <= index < len(choices)) or self.content is None:
            return self._reject(RejectedAction(RejectReason.INVALID_INDEX, "No such passive"))
        passive = learn_passive(self.player, self.content.create_passive(choices[index]))
        self.runtime.pending_level_up = False
        self.runtime.passive_choices = []
        return ActionResult.ok(passive=passive.kind.value, level=passive.level)

    def advance_wave(self) -> ActionResult:
        """Leave the victory screen and start the next wave."""
        if self.game.phase != GamePhase.VICTORY:
            return self._reject(RejectedAction(RejectReason.WRONG_PHASE, "Wave not cleared"))
        self.runtime.reward_cards = []
        self.game.current_wave += 1
        self.game.turn = 1
        self.game.transition(GamePhase.RUNNING)
        return self.start_combat()

    # =========================================================================
    # VIEW
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """Read-only view for presentation layers."""
        return {
            "player": self.player.to_dict(),
            "game": self.game.to_dict(),
            "runtime": self.runtime.to_dict(),
            "busy": self.busy,
            "legal_targets": self.legal_target_ids(),
            "playable": self.playable_cards() if self.game.in_combat else [],
        }
