# src/epistemic_engine/frames/definitions.py
"""
Built-in frame variants.

Importing this module registers every variant below with the global
frame_registry. Further variants can be added from configuration without
new code (see AppConfig.frames).
"""

from typing import List

from epistemic_core.frames.frame import INVERT_ALL, FrameDefinition
from epistemic_core.frames.frame_registry import frame_registry

# --- Task-oriented frames ---

EFFICIENCY = FrameDefinition(
    kind="efficiency",
    name="Efficiency",
    description="Prioritizes speed, resource optimization, and quick results.",
    weights={
        "performance": 0.9,
        "efficiency": 0.85,
        "speed": 0.85,
        "tool_result": 0.2,
        "observation": 0.15,
        "inference": 0.15,
        "testimony": 0.1,
        "external": 0.15,
    },
    default_weight=0.15,
    max_initial_confidence=0.85,
    compatibility={"efficiency": 0.9, "thoroughness": 0.3, "security": 0.5},
    default_compatibility=0.4,
)

THOROUGHNESS = FrameDefinition(
    kind="thoroughness",
    name="Thoroughness",
    description="Prioritizes completeness, detail, and comprehensive analysis.",
    weights={
        "detailed": 0.85,
        "comprehensive": 0.85,
        "inference": 0.8,
        "observation": 0.6,
        "tool_result": 0.5,
        "testimony": 0.4,
        "external": 0.35,
    },
    default_weight=0.2,
    max_initial_confidence=0.7,
    compatibility={"thoroughness": 0.9, "efficiency": 0.3, "security": 0.7},
    default_compatibility=0.5,
)

SECURITY = FrameDefinition(
    kind="security",
    name="Security",
    description="Prioritizes risk minimization and verified, first-hand evidence.",
    weights={
        "security": 0.9,
        "observation": 0.9,
        "tool_result": 0.85,
        "inference": 0.5,
        "external": 0.2,
        "testimony": 0.15,
    },
    default_weight=0.2,
    max_initial_confidence=0.6,
    compatibility={"security": 0.9, "thoroughness": 0.7, "efficiency": 0.5},
    default_compatibility=0.4,
)

# --- Debate roles ---

MODERATOR = FrameDefinition(
    kind="moderator",
    name="Moderator",
    description="Neutral facilitator weighing all sides evenly.",
    weights={"balanced": 0.9},
    default_weight=0.7,
    compatibility={"moderator": 0.95, "judge": 0.8, "pro": 0.6, "con": 0.6},
    default_compatibility=0.7,
)

PRO = FrameDefinition(
    kind="pro",
    name="Pro",
    description="Advocates for the motion and amplifies supporting evidence.",
    weights={"supporting": 0.85, "favorable": 0.85},
    default_weight=0.4,
    bias_factor=1.1,
    compatibility={"pro": 0.95, "moderator": 0.6, "judge": 0.5, "con": 0.3},
    default_compatibility=0.4,
)

CON = FrameDefinition(
    kind="con",
    name="Con",
    description="Advocates against the motion and reads evidence as counter-evidence.",
    weights={"opposing": 0.85, "critical": 0.85},
    default_weight=0.4,
    inverted_types=[INVERT_ALL],
    bias_factor=0.9,
    compatibility={"con": 0.95, "moderator": 0.6, "judge": 0.5, "pro": 0.3},
    default_compatibility=0.4,
)

JUDGE = FrameDefinition(
    kind="judge",
    name="Judge",
    description="Evaluates arguments on logic, evidence and structure.",
    weights={"logic": 0.7, "evidence": 0.6, "structure": 0.5},
    default_weight=0.5,
    compatibility={"judge": 0.95, "moderator": 0.8, "pro": 0.5, "con": 0.5},
    default_compatibility=0.6,
)

# --- Negotiation roles ---

PERSUASIVE = FrameDefinition(
    kind="persuasive",
    name="Persuasive",
    description="Seller perspective emphasizing influence and mutual value.",
    weights={
        "persuasive": 0.85,
        "influential": 0.85,
        "value_creation": 0.75,
        "mutual_benefit": 0.75,
        "reciprocity": 0.6,
        "social_proof": 0.6,
    },
    default_weight=0.5,
    bias_factor=1.1,
    compatibility={"persuasive": 0.95, "buyer": 0.7},
    default_compatibility=0.6,
)

BUYER = FrameDefinition(
    kind="buyer",
    name="Buyer",
    description="Buyer perspective focused on return, risk and reputation.",
    weights={
        "risk": 0.85,
        "security": 0.85,
        "roi": 0.8,
        "value": 0.8,
        "social_proof": 0.7,
        "reputation": 0.7,
    },
    default_weight=0.5,
    inverted_types=["risk", "security"],
    bias_factor=0.9,
    compatibility={"buyer": 0.95, "persuasive": 0.6},
    default_compatibility=0.5,
)

BUILTIN_FRAMES: List[FrameDefinition] = [
    EFFICIENCY,
    THOROUGHNESS,
    SECURITY,
    MODERATOR,
    PRO,
    CON,
    JUDGE,
    PERSUASIVE,
    BUYER,
]

DEBATE_FRAMES = ["moderator", "pro", "con", "judge"]
NEGOTIATION_FRAMES = ["persuasive", "buyer"]


def register_builtin_frames(replace: bool = True) -> None:
    frame_registry.register_many(BUILTIN_FRAMES, replace=replace)


register_builtin_frames()
