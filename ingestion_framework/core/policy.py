"""
Missing-value strategies and policy resolution.

A strategy says what to do with a missing cell in one column. Strategies are
configured at two levels: a single global fallback and a sparse per-column
override map. Before any data pass runs, the two levels are merged into one
ResolvedPolicy so the imputation engine only ever consults a single table.

Usage:
    policy = resolve_policy(
        features=["age", "income"],
        target="label",
        global_strategy=Strategy.parse("median"),
        column_strategies={"income": Strategy.constant(0)},
    )
    policy.strategy_for("age")      # Strategy(MEDIAN)
    policy.target_drop              # False
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from ingestion_framework.core.exceptions import ConfigValidationError

logger = logging.getLogger(__name__)


class StrategyKind(Enum):
    """Kinds of missing-value remediation."""
    LEAVE = "leave-as-is"
    DROP = "drop-row"
    ZERO = "zero"
    MEAN = "mean"
    MEDIAN = "median"
    MODE = "mode"
    CONSTANT = "constant"


# Kinds that can be used as the global fallback (constant is per-column only)
SIMPLE_KINDS = (
    StrategyKind.LEAVE,
    StrategyKind.DROP,
    StrategyKind.ZERO,
    StrategyKind.MEAN,
    StrategyKind.MEDIAN,
    StrategyKind.MODE,
)

_KIND_NAMES = ", ".join(k.value for k in StrategyKind)


@dataclass(frozen=True)
class Strategy:
    """
    A single missing-value strategy.

    Attributes:
        kind: What to do with missing cells
        value: Literal replacement, only meaningful for CONSTANT
    """
    kind: StrategyKind
    value: Any = None

    @classmethod
    def constant(cls, value: Any) -> "Strategy":
        return cls(StrategyKind.CONSTANT, value)

    @classmethod
    def parse(cls, raw: Any, field: Optional[str] = None, allow_constant: bool = True) -> "Strategy":
        """
        Build a Strategy from its configuration form.

        Accepts a Strategy, a kind name ("mean"), a StrategyKind, or a mapping
        such as {"type": "constant", "value": 0} / {"type": "median"}.

        Raises:
            ConfigValidationError: If the name is unknown, a constant has no
                value, or a constant is given where only simple kinds are allowed
        """
        if isinstance(raw, Strategy):
            strategy = raw
        elif isinstance(raw, StrategyKind):
            strategy = cls(raw)
        elif isinstance(raw, str):
            strategy = cls(_kind_from_name(raw, field))
        elif isinstance(raw, Mapping):
            if "type" not in raw:
                raise ConfigValidationError(
                    "Strategy mapping must have a 'type' key",
                    field=field,
                    expected="{type: <strategy>, value: <literal>}",
                    actual=str(dict(raw))
                )
            kind = _kind_from_name(raw["type"], field)
            if kind is StrategyKind.CONSTANT and "value" not in raw:
                raise ConfigValidationError(
                    "Constant strategy requires a 'value'",
                    field=field,
                    expected="{type: constant, value: <literal>}",
                    actual=str(dict(raw))
                )
            strategy = cls(kind, raw.get("value") if kind is StrategyKind.CONSTANT else None)
        else:
            raise ConfigValidationError(
                f"Invalid strategy: {raw!r}",
                field=field,
                expected=_KIND_NAMES,
                actual=repr(raw)
            )

        if not allow_constant and strategy.kind is StrategyKind.CONSTANT:
            raise ConfigValidationError(
                "Constant strategy is only allowed per column",
                field=field,
                expected=", ".join(k.value for k in SIMPLE_KINDS),
                actual=StrategyKind.CONSTANT.value
            )
        return strategy

    @property
    def imputes(self) -> bool:
        """True if this strategy replaces missing cells with a value."""
        return self.kind not in (StrategyKind.LEAVE, StrategyKind.DROP)

    @property
    def drops(self) -> bool:
        return self.kind is StrategyKind.DROP

    def to_config(self) -> Any:
        """Inverse of parse: plain string, or mapping for constants."""
        if self.kind is StrategyKind.CONSTANT:
            return {"type": self.kind.value, "value": self.value}
        return self.kind.value

    def __str__(self) -> str:
        if self.kind is StrategyKind.CONSTANT:
            return f"constant({self.value!r})"
        return self.kind.value


def _kind_from_name(name: Any, field: Optional[str]) -> StrategyKind:
    try:
        return StrategyKind(str(name).strip().lower())
    except ValueError:
        raise ConfigValidationError(
            f"Unknown missing-value strategy: {name!r}",
            field=field,
            expected=_KIND_NAMES,
            actual=str(name)
        )


LEAVE_AS_IS = Strategy(StrategyKind.LEAVE)


@dataclass
class ResolvedPolicy:
    """
    One effective strategy per column plus the row-drop switches.

    Attributes:
        feature_strategies: Effective strategy for every feature, in feature order
        target: Target column name (None if no target)
        target_strategy: Explicit target strategy (override, else global), if any
        drop_columns: Features whose effective strategy is drop-row
        global_drop: True iff the global strategy is drop-row
        target_drop: True if rows with a missing target must be removed
    """
    feature_strategies: Dict[str, Strategy] = field(default_factory=dict)
    target: Optional[str] = None
    target_strategy: Optional[Strategy] = None
    drop_columns: List[str] = field(default_factory=list)
    global_drop: bool = False
    target_drop: bool = False

    @property
    def features(self) -> List[str]:
        return list(self.feature_strategies)

    @property
    def drop_applied(self) -> bool:
        """True if any drop mechanism is active."""
        return self.global_drop or bool(self.drop_columns) or self.target_drop

    def strategy_for(self, column: str) -> Strategy:
        return self.feature_strategies.get(column, LEAVE_AS_IS)

    def imputing_columns(self) -> List[str]:
        """Features whose strategy computes a replacement value."""
        return [c for c, s in self.feature_strategies.items() if s.imputes]


def resolve_policy(
    features: List[str],
    target: Optional[str],
    global_strategy: Optional[Strategy],
    column_strategies: Optional[Mapping[str, Strategy]] = None,
    implicit_target_drop: bool = True
) -> ResolvedPolicy:
    """
    Merge the global fallback with per-column overrides.

    Feature strategy: override if present, else global, else leave-as-is.

    Target drop:
        1. global drop-row always drops rows with a missing target
        2. otherwise an explicit target strategy (override, else global)
           decides: drop-row drops, anything else keeps
        3. with no explicit target strategy, rows are dropped for a missing
           target iff some feature uses drop-row and implicit_target_drop
           is enabled

    Args:
        features: Feature column names in order
        target: Target column name, or None
        global_strategy: Fallback strategy, or None
        column_strategies: Sparse per-column overrides
        implicit_target_drop: Whether rule 3 applies

    Returns:
        ResolvedPolicy
    """
    overrides = dict(column_strategies or {})

    feature_strategies: Dict[str, Strategy] = {}
    for column in features:
        if column in overrides:
            feature_strategies[column] = overrides[column]
        elif global_strategy is not None:
            feature_strategies[column] = global_strategy
        else:
            feature_strategies[column] = LEAVE_AS_IS

    drop_columns = [c for c, s in feature_strategies.items() if s.drops]
    global_drop = global_strategy is not None and global_strategy.drops

    target_strategy: Optional[Strategy] = None
    if target is not None:
        target_strategy = overrides.get(target, global_strategy)

    if target is None:
        target_drop = False
    elif global_drop:
        target_drop = True
    elif target_strategy is not None:
        target_drop = target_strategy.drops
    else:
        target_drop = bool(drop_columns) and implicit_target_drop

    policy = ResolvedPolicy(
        feature_strategies=feature_strategies,
        target=target,
        target_strategy=target_strategy,
        drop_columns=drop_columns,
        global_drop=global_drop,
        target_drop=target_drop,
    )
    logger.debug(
        f"Resolved policy: drop_columns={drop_columns}, global_drop={global_drop}, "
        f"target_drop={target_drop}, imputing={policy.imputing_columns()}"
    )
    return policy
