from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Literal, Mapping

Severity = Literal["INFO", "WARN", "ERROR"]
FailureKind = Literal["input", "validation", "computation"]


class VariableKind(str, Enum):
    CATEGORICAL = "categorical"
    NUMERIC = "numeric"


class TestId(str, Enum):
    __test__ = False

    CHI_SQUARE = "chi_square"
    MCNEMAR = "mcnemar"
    T_TEST = "t_test"
    ANOVA = "anova"
    WILCOXON = "wilcoxon"
    PEARSON = "pearson"
    SPEARMAN = "spearman"
    VARIANCE_RATIO = "variance_ratio"
    SHAPIRO_WILK = "shapiro_wilk"
    KOLMOGOROV_SMIRNOV = "kolmogorov_smirnov"
    LILLIEFORS = "lilliefors"
    JARQUE_BERA = "jarque_bera"


@dataclass(frozen=True)
class Flag:
    code: str
    message: str
    severity: Severity = "WARN"
    stage: str = "unknown"
    variables: tuple[str, ...] = ()
    recommendation: str | None = None


@dataclass(frozen=True)
class Variable:
    name: str
    kind: VariableKind
    distinct_count: int
    values: tuple[Any, ...] = ()
    missing_count: int = 0


@dataclass(frozen=True)
class RoleSpec:
    name: str
    kind: VariableKind
    label: str
    min_levels: int | None = None
    max_levels: int | None = None


@dataclass(frozen=True)
class TestSpec:
    __test__ = False

    test_id: TestId
    display_name: str
    family: str
    roles: tuple[RoleSpec, ...]
    null_hypothesis: str
    significant_text: str
    not_significant_text: str
    options: tuple[str, ...] = ()
    square_dichotomous: bool = False
    min_sample_size: int = 2
    supports_posthoc: bool = False

    def role(self, name: str) -> RoleSpec:
        for role in self.roles:
            if role.name == name:
                return role
        raise KeyError(f"{self.display_name} has no role '{name}'")


@dataclass(frozen=True)
class AnalysisOptions:
    paired: bool = False
    equal_var: bool = False


@dataclass(frozen=True)
class AnalysisRequest:
    test_id: TestId
    role_bindings: Mapping[str, str] = field(default_factory=dict)
    options: AnalysisOptions = field(default_factory=AnalysisOptions)

    def __post_init__(self) -> None:
        object.__setattr__(self, "test_id", TestId(self.test_id))
        object.__setattr__(self, "role_bindings", MappingProxyType(dict(self.role_bindings)))


@dataclass(frozen=True)
class ValidationOutcome:
    test_id: TestId
    passed: bool
    code: str | None = None
    reason: str = ""
    role: str | None = None
    column: str | None = None
    observed: Any = None

    @classmethod
    def success(cls, test_id: TestId) -> "ValidationOutcome":
        return cls(test_id=test_id, passed=True)


@dataclass(frozen=True)
class ContingencyTable:
    row_variable: str
    column_variable: str
    row_labels: tuple[str, ...]
    column_labels: tuple[str, ...]
    observed: tuple[tuple[int, ...], ...]
    expected: tuple[tuple[float, ...], ...] | None = None
    kind: Literal["contingency"] = "contingency"

    @property
    def shape(self) -> tuple[int, int]:
        return len(self.row_labels), len(self.column_labels)


@dataclass(frozen=True)
class TukeyRow:
    group1: str
    group2: str
    mean_difference: float
    adjusted_p_value: float
    lower: float
    upper: float
    reject: bool

    @property
    def label(self) -> str:
        return f"{self.group1} vs {self.group2}"


@dataclass(frozen=True)
class TukeyTable:
    rows: tuple[TukeyRow, ...]
    alpha: float = 0.05
    kind: Literal["tukey"] = "tukey"


Auxiliary = ContingencyTable | TukeyTable | None


@dataclass(frozen=True)
class GroupSummary:
    level: str
    n: int
    mean: float
    sd: float
    minimum: float
    maximum: float


@dataclass(frozen=True)
class NormalityProfile:
    sample: tuple[float, ...]
    theoretical_quantiles: tuple[float, ...]
    ordered_values: tuple[float, ...]
    line_slope: float
    line_intercept: float


@dataclass(frozen=True)
class TestResult:
    __test__ = False

    test_id: TestId
    test_name: str
    method: str
    variables_used: tuple[str, ...]
    statistic: float
    p_value: float
    degrees_of_freedom: tuple[float, ...] | None = None
    estimate: float | None = None
    n_observations: int = 0
    auxiliary: Auxiliary = None
    group_summaries: tuple[GroupSummary, ...] = ()
    normality_profile: NormalityProfile | None = None
    extras: Mapping[str, float] = field(default_factory=dict)
    warnings: tuple[Flag, ...] = ()
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        object.__setattr__(self, "extras", MappingProxyType(dict(self.extras)))


@dataclass(frozen=True)
class SignificantPair:
    label: str
    adjusted_p_value: float


@dataclass(frozen=True)
class Interpretation:
    conclusion_text: str
    significant: bool
    significant_pairs: tuple[SignificantPair, ...] = ()
    alpha: float = 0.05


@dataclass(frozen=True)
class VariableSummary:
    name: str
    kind: VariableKind
    distinct_count: int
    missing_count: int


@dataclass(frozen=True)
class AnalysisReport:
    test_id: TestId
    test_name: str
    family: str
    null_hypothesis: str
    request: AnalysisRequest
    variables: tuple[VariableSummary, ...]
    result: TestResult
    interpretation: Interpretation
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _plain(self)


@dataclass(frozen=True)
class AnalysisFailure:
    kind: FailureKind
    test_id: TestId | None
    test_name: str
    message: str
    validation: ValidationOutcome | None = None

    def to_dict(self) -> dict[str, Any]:
        return _plain(self)


def _plain(value: Any) -> Any:
    """Like ``dataclasses.asdict``, but also unwraps read-only mappings."""
    if is_dataclass(value) and not isinstance(value, type):
        return {item.name: _plain(getattr(value, item.name)) for item in fields(value)}
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_plain(item) for item in value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value
