"""
Scoring constants.

Hand-tuned weights and thresholds shared by the evaluators, adjustment passes
and interception responder. Selection and pacing knobs can be overridden from
the strategy config (see strategy_config.py); everything else lives here.
"""

# =============================================================================
# SENTINELS / SELECTION
# =============================================================================

INVALID_SCORE = -999          # Marks a candidate as unusable
MIN_DEPLOY_SCORE = 5          # Deployment pass threshold
MIN_ACTION_SCORE = 0          # Action pass threshold (top score must exceed this)
ACTION_POOL_RANGE = 20        # Near-best margin for the action sampling pool

# =============================================================================
# IMPACT VALUATOR
# =============================================================================

IMPACT_ATTACK_WEIGHT = 4.0
IMPACT_CLASS_WEIGHT = 2.0
IMPACT_DURABILITY_WEIGHT = 0.5

# =============================================================================
# LANE FAVORABILITY
# =============================================================================

LANE_SPEED_WEIGHT = 5
OWN_SECTION_DAMAGED_PENALTY = -20
OWN_SECTION_CRITICAL_PENALTY = -40
ENEMY_SECTION_DAMAGED_BONUS = 15
ENEMY_SECTION_CRITICAL_BONUS = 30
LOSING_LANE_THRESHOLD = -15
WINNING_LANE_THRESHOLD = 15
DOMINANT_LANE_THRESHOLD = 20
OVERKILL_LANE_THRESHOLD = 5

# =============================================================================
# DEPLOYMENT
# =============================================================================

DEFENSIVE_SPEED_BONUS = 15         # Fast unit into a losing lane
DEFENSIVE_KEYWORD_BONUS = 20       # Interceptor/guardian into a losing lane
OFFENSIVE_ATTACK_BONUS = 15        # Hard hitter into a winning lane
OFFENSIVE_ANTI_SHIP_BONUS = 20     # Anti-ship unit into a winning lane
BALANCED_CHEAP_UNIT_BONUS = 10     # Class <= 1 into a balanced lane
STABILIZATION_BONUS_MIN = 10
STABILIZATION_BONUS_MAX = 30
DOMINANCE_BONUS_MIN = 10
DOMINANCE_BONUS_MAX = 30
ON_DEPLOY_MARK_BONUS = 15
THREAT_DEPLOY_BONUS = 20           # Units that add threat at round start
OVERKILL_PENALTY = -150
ION_SHIELD_TARGET_MIN = 2          # Shields that make a unit worth an ION follow-up

# =============================================================================
# CARD PLAY
# =============================================================================

CARD_COST_WEIGHT = 4
RESOURCE_VALUE_WEIGHT = 8          # Single DESTROY: (hull + shields) x 8
FILTERED_DESTROY_WEIGHT = 8
FILTERED_CLASS_WEIGHT = 5
LANE_DESTROY_WEIGHT = 4
READY_UNIT_WEIGHT = 1.5            # Ready units count more in lane wipes
DAMAGE_WEIGHT = 8
FILTERED_DAMAGE_WEIGHT = 10
MULTI_HIT_BONUS_PER_TARGET = 15
LETHAL_BASE_BONUS = 50
LETHAL_CLASS_WEIGHT = 15

READY_SHIP_ATTACK_WEIGHT = 8
READY_UNIT_ATTACK_WEIGHT = 8
READY_INTERCEPTION_PER_THREAT = 20
READY_DEFENDER_BONUS = 15
READY_GUARDIAN_BONUS = 30
READY_UNCHECKED_BONUS = 25           # Readied unit is faster than every ready enemy
READY_OUTPACED_INTERCEPTOR_BONUS = 20  # Per enemy that can no longer intercept us

ENABLES_CARD_BASE = 60
ENABLES_CARD_PER_COST = 5
LOW_PRIORITY_SCORE = 1
DRAW_BASE_VALUE = 10
ENERGY_REMAINING_WEIGHT = 2
SEARCH_DRAW_PER_CARD = 12
SEARCH_BONUS_PER_SEARCH = 2
SEARCH_LOW_PRIORITY_SCORE = 2
SHIELD_HEAL_PER_POINT = 5
SECTION_HEAL_VALUE = 80
REPEAT_VALUE_PER_REPEAT = 25

JAMMER_BASE_VALUE = 30
JAMMER_CPU_WEIGHT = 5
JAMMER_HIGH_VALUE_UNIT_BONUS = 15
JAMMER_HIGH_VALUE_CLASS = 3

LANE_BUFF_IMPACT_WEIGHT = 1.5
MULTI_BUFF_BONUS_PER_UNIT = 10
ATTACK_BUFF_WEIGHT = 8
CLASS_VALUE_WEIGHT = 10
THREAT_REDUCTION_WEIGHT = 8
INTERCEPTOR_OVERCOME_BONUS = 60
SPEED_BUFF_BONUS = 20
GENERIC_STAT_BONUS = 10
EXHAUSTED_TARGET_SCORE = -1
PERMANENT_MOD_MULTIPLIER = 1.5
GO_AGAIN_BONUS = 40
UNKNOWN_CARD_SCORE = 0

# =============================================================================
# STATUS EFFECT / EXHAUST CARDS
# =============================================================================

STATUS_MOVE_DENY_WEIGHT = 8        # x target attack
STATUS_ON_MOVE_BONUS = 15
STATUS_ATTACK_DENY_WEIGHT = 10
STATUS_GUARDIAN_BONUS = 30
STATUS_DEFENDER_BONUS = 15
STATUS_AFTER_ATTACK_BONUS = 15
STATUS_INTERCEPT_DENY_WEIGHT = 6   # x target speed
STATUS_ALWAYS_INTERCEPTS_BONUS = 30
STATUS_DOGFIGHT_BONUS = 20
STATUS_FREED_ATTACKER_BONUS = 15   # Per ready friendly attacker in the lane
STATUS_READY_DENY_WEIGHT = 8
STATUS_READY_DURATION = 0.7
STATUS_POWERFUL_ABILITY_BONUS = 10
STATUS_READY_TARGET_BONUS = 10
STATUS_CLASS_BONUS = (0, 0, 10, 15)        # Cannot attack, indexed by class (capped)
STATUS_READY_CLASS_BONUS = (0, 0, 8, 12)   # Does not ready
EXHAUSTED_MOVE_DENY_FACTOR = 0.5
EXHAUSTED_ATTACK_DENY_FACTOR = 0.6
EXHAUSTED_INTERCEPT_DENY_FACTOR = 0.5
EXHAUSTED_READY_DENY_FACTOR = 0.7
STATUS_CLEAR_PER_EFFECT = 25
STATUS_MARKED_CLEAR = 15
STATUS_CLEAR_CLASS_BONUS = 20
STATUS_CLEAR_GO_AGAIN_BONUS = 30

EXHAUST_ATTACK_WEIGHT = 8
EXHAUST_INTERCEPTOR_BONUS = 30
EXHAUST_DEFENDER_BONUS = 15
EXHAUST_GUARDIAN_BONUS = 20
EXHAUST_ABILITY_BONUS = 20
EXHAUST_FREED_ATTACKER_BONUS = 10  # Per friendly unit no longer interceptable

# =============================================================================
# SPECIAL DAMAGE CARDS
# =============================================================================

OVERFLOW_SHIP_DAMAGE_WEIGHT = 12
PIERCING_SHIELD_BYPASS_WEIGHT = 4

# Conditional effects
CONDITIONAL_ENERGY_WEIGHT = 5

# =============================================================================
# UPGRADE CARDS
# =============================================================================

UPGRADE_ATTACK_BASE = 40           # Per point
UPGRADE_SPEED_BASE = 35
UPGRADE_SHIELDS_BASE = 30
UPGRADE_LIMIT_BASE = 50
UPGRADE_COST_REDUCTION_BASE = 45
UPGRADE_ABILITY_GRANT_BASE = 60
UPGRADE_GENERIC_BASE = 20
UPGRADE_ATTACK_ON_FAST = 20        # Speed 4+
UPGRADE_SPEED_ON_HEAVY = 15        # Attack 3+
UPGRADE_PIERCING_ON_HEAVY = 30     # Attack 3+
UPGRADE_CLASS_WEIGHT = 8
UPGRADE_DEPLOYED_BONUS = 15        # Per unit of the type on the board
UPGRADE_READY_BONUS = 8
UPGRADE_NONE_DEPLOYED_PENALTY = -30
UPGRADE_REMAINING_COPY_BONUS = 10
UPGRADE_AT_LIMIT_PENALTY = -20
UPGRADE_LAST_SLOT_BONUS = 12

DESTROY_UPGRADE_ATTACK_WEIGHT = 20
DESTROY_UPGRADE_SPEED_WEIGHT = 10
DESTROY_UPGRADE_OTHER_WEIGHT = 8
DESTROY_UPGRADE_KEYWORD_VALUE = 25
DESTROY_UPGRADE_UNKNOWN_VALUE = 15

# =============================================================================
# UNIT ATTACKS
# =============================================================================

TARGET_CLASS_WEIGHT = 10
FAVORABLE_TRADE_BONUS = 20
READY_TARGET_BONUS = 10
LANE_IMPACT_WEIGHT = 0.5
ANTI_SHIP_DENIAL_PENALTY = -100    # Anti-ship units should hit ships, not units
PIERCING_SHIELD_BONUS = 8
RETALIATE_LETHAL_PENALTY = -50
RETALIATE_DAMAGE_PENALTY = -5
LETHAL_ATTACK_BONUS = 20

# =============================================================================
# SECTION ATTACKS
# =============================================================================

SECTION_ATTACK_WEIGHT = 8
SECTION_DAMAGED_BONUS = 15
SECTION_CRITICAL_BONUS = 30
SECTION_NO_SHIELDS_BONUS = 40
SECTION_SHIELD_BREAK_BONUS = 35
HIGH_ATTACK_THRESHOLD = 3
HIGH_ATTACK_BONUS = 10
PIERCING_SECTION_BONUS = 10
CROSS_TO_DAMAGED_BONUS = 8
CROSS_TO_CRITICAL_BONUS = 12

# =============================================================================
# MOVEMENT
# =============================================================================

MOVE_COST = 10
DEFENSIVE_MOVE_BONUS = 25
OFFENSIVE_MOVE_BONUS = 20
ON_MOVE_ATTACK_BONUS = 15
ON_MOVE_SPEED_BONUS = 10
MOVE_OVERKILL_PENALTY = -150

# =============================================================================
# ABILITIES
# =============================================================================

ABILITY_HEAL_PER_POINT = 8
ABILITY_HEAL_CLASS_WEIGHT = 5
ABILITY_DAMAGE_PER_POINT = 8
ABILITY_LETHAL_BONUS = 50
ABILITY_LETHAL_CLASS_WEIGHT = 15
ABILITY_CROSS_LANE_BONUS = 20
ABILITY_DEFAULT_SCORE = 10
PURGE_TOKEN_BASE_SCORE = 10
ABILITY_ENERGY_WEIGHT = 4

# =============================================================================
# TARGET VALUE (damage / destroy effects)
# =============================================================================

JAMMER_BLOCKING_BASE = 30
JAMMER_PROTECTED_CLASS_WEIGHT = 3
JAMMER_PROTECTED_READY_BONUS = 10
INTERCEPTION_BLOCKER_BONUS = 40    # Per friendly attacker the target can block
TARGET_READY_BONUS = 25
CLASS_TIER_BONUS = (0, 3, 6, 10)   # Indexed by unit class
MED_ATTACK_BONUS = 4               # Attack 2-3
HIGH_TARGET_ATTACK_BONUS = 8       # Attack 4+
GUARDIAN_TARGET_BONUS = 15
DEFENDER_TARGET_BONUS = 10
ANTI_SHIP_TARGET_BONUS = 10
TARGET_LETHAL_BONUS = 20
PIERCING_BYPASS_BONUS = 5

SHIELD_BREAKER_HIGH_SHIELD_BONUS = 15
SHIELD_BREAKER_LOW_SHIELD_PENALTY = -5
ION_FULL_STRIP_BONUS = 20
ION_PER_SHIELD_VALUE = 6
ION_WASTED_PENALTY = -3
ION_NO_SHIELDS_PENALTY = -50
KINETIC_UNSHIELDED_BONUS = 25
KINETIC_BLOCKED_PENALTY = -100

# =============================================================================
# ADJUSTMENT PASSES
# =============================================================================

JAMMER_EFFICIENCY_BONUS = 30
JAMMER_EFFICIENCY_ATTACK_MAX = 2
INTERCEPTION_RISK_PENALTY = -80
UNCHECKED_ATTACK_BONUS = 100
SECOND_SECTION_DAMAGE_PENALTY = -120
LOSS_SECTION_DAMAGE_PENALTY = -400
INTERCEPTOR_CARD_PREMIUM = 1.15
MOBILITY_PER_LOCKED_UNIT = 25
MOBILITY_HIGH_CLASS_BONUS = 15
MOBILITY_HIGH_CLASS_MIN = 3
PACING_DEFICIT_THRESHOLD = 1
PACING_CARD_BONUS = 80

# =============================================================================
# INTERCEPTION RESPONDER
# =============================================================================

EXCELLENT_TRADE_RATIO = 0.3
GOOD_TRADE_RATIO = 0.7
PROTECTION_WORTH_RATIO = 1.5
EXCELLENT_SACRIFICE_RATIO = 2.0
GOOD_SACRIFICE_RATIO = 1.3
OPPORTUNITY_THREAT_RATIO = 1.5
EXCELLENT_TRADE_SCORE = 90
GOOD_TRADE_SCORE = 70
WORTHWHILE_TRADE_SCORE = 50
EXCELLENT_SACRIFICE_SCORE = 60
GOOD_SACRIFICE_SCORE = 45
HULL_PROTECTION_WEIGHT = 15
SHIELD_PROTECTION_WEIGHT = 5
DEFAULT_PROTECTION_WEIGHT = 10
DOGFIGHT_LETHAL_BONUS = 30
DOGFIGHT_DAMAGE_BONUS = 5
