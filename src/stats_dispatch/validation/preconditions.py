from __future__ import annotations

from typing import Mapping

from stats_dispatch.core.models import (
    AnalysisRequest,
    RoleSpec,
    TestSpec,
    ValidationOutcome,
    Variable,
)


class PreconditionValidator:
    """Check a request's role bindings against the catalog entry of its test.

    Checks run in a fixed order (binding and kind, level cardinality, table
    shape) and stop at the first failure. Failures are returned, not raised.
    """

    name = "precondition-validation"

    def validate(
        self,
        spec: TestSpec,
        request: AnalysisRequest,
        variables: Mapping[str, Variable],
    ) -> ValidationOutcome:
        if request.test_id != spec.test_id:
            return self._fail(
                spec,
                "test_mismatch",
                f"Request is for '{request.test_id.value}' but was checked against "
                f"'{spec.test_id.value}'.",
            )

        for role in spec.roles:
            outcome = self._check_binding(spec, role, request, variables)
            if outcome is not None:
                return outcome

        for role in spec.roles:
            outcome = self._check_cardinality(spec, role, variables[request.role_bindings[role.name]])
            if outcome is not None:
                return outcome

        if spec.square_dichotomous:
            outcome = self._check_square_dichotomous(spec, request, variables)
            if outcome is not None:
                return outcome

        return ValidationOutcome.success(spec.test_id)

    def _check_binding(
        self,
        spec: TestSpec,
        role: RoleSpec,
        request: AnalysisRequest,
        variables: Mapping[str, Variable],
    ) -> ValidationOutcome | None:
        column = request.role_bindings.get(role.name)
        if not column:
            return self._fail(
                spec,
                "role_unbound",
                f"{spec.display_name} needs a column for the {role.label} ('{role.name}').",
                role=role.name,
            )

        variable = variables.get(column)
        if variable is None:
            return self._fail(
                spec,
                "column_missing",
                f"Column '{column}' bound to the {role.label} is not in the dataset.",
                role=role.name,
                column=column,
            )

        if variable.kind != role.kind:
            return self._fail(
                spec,
                "kind_mismatch",
                f"{role.label} '{column}' must be {role.kind.value}, found {variable.kind.value}.",
                role=role.name,
                column=column,
                observed=variable.kind.value,
            )
        return None

    def _check_cardinality(
        self,
        spec: TestSpec,
        role: RoleSpec,
        variable: Variable,
    ) -> ValidationOutcome | None:
        levels = variable.distinct_count
        if role.min_levels is not None and role.min_levels == role.max_levels:
            if levels != role.min_levels:
                return self._fail(
                    spec,
                    "level_count_exact",
                    f"{role.label} '{variable.name}': exactly {role.min_levels} levels required, "
                    f"found {levels}.",
                    role=role.name,
                    column=variable.name,
                    observed=levels,
                )
            return None

        if role.min_levels is not None and levels < role.min_levels:
            return self._fail(
                spec,
                "level_count_min",
                f"{role.label} '{variable.name}': at least {role.min_levels} levels required, "
                f"found {levels}.",
                role=role.name,
                column=variable.name,
                observed=levels,
            )

        if role.max_levels is not None and levels > role.max_levels:
            return self._fail(
                spec,
                "level_count_max",
                f"{role.label} '{variable.name}': at most {role.max_levels} levels allowed, "
                f"found {levels}.",
                role=role.name,
                column=variable.name,
                observed=levels,
            )
        return None

    def _check_square_dichotomous(
        self,
        spec: TestSpec,
        request: AnalysisRequest,
        variables: Mapping[str, Variable],
    ) -> ValidationOutcome | None:
        shape = tuple(variables[request.role_bindings[role.name]].distinct_count for role in spec.roles)
        if shape != (2, 2):
            columns = ", ".join(request.role_bindings[role.name] for role in spec.roles)
            return self._fail(
                spec,
                "contingency_shape",
                f"{spec.display_name} needs a 2x2 contingency table, found "
                f"{shape[0]}x{shape[1]} ({columns}).",
                observed=shape,
            )
        return None

    def _fail(
        self,
        spec: TestSpec,
        code: str,
        reason: str,
        *,
        role: str | None = None,
        column: str | None = None,
        observed: object = None,
    ) -> ValidationOutcome:
        return ValidationOutcome(
            test_id=spec.test_id,
            passed=False,
            code=code,
            reason=reason,
            role=role,
            column=column,
            observed=observed,
        )
