"""Integration validation across the four design artifacts.

The validator cross-references what earlier stages produced rather than
synthesizing anything new:

- Dependency check: every feature component API reference must overlap an
  endpoint path (``missing_dependency``, high, auto-fixable).
- Security check: components of admin screens must not call endpoints that
  skip authentication (``security_gap``, critical).
- Cycle check: cycles in the resolved component dependency graph
  (``circular_dependency``, medium), each distinct cycle reported once.

Results are deterministic. Synthetic issues can be injected for demos by
passing an explicit ``random.Random`` and a positive injection rate.

Example usage:
    >>> validator = IntegrationValidator()
    >>> result = validator.validate(analysis, ux, data, components)
    >>> result.score, result.is_valid
    (100, True)
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence

import structlog

from novague.linking import dependency_pairs, find_endpoint_by_path, match_endpoint
from novague.models.analysis import ProjectAnalysis
from novague.models.components import ComponentArchitecture
from novague.models.data import DataArchitecture
from novague.models.ux import ScreenAnalysis
from novague.models.validation import Issue, Optimization, Suggestion, ValidationResult

logger = structlog.get_logger(__name__)

CRITICAL_PENALTY = 20
ISSUE_PENALTY = 5

# (type, severity, description template, solution)
INJECTED_ISSUES: tuple[tuple[str, str, str, str], ...] = (
    (
        "performance_issue",
        "medium",
        "{name} re-renders whenever its parent updates.",
        "Memoize the component and stabilise callback props.",
    ),
    (
        "accessibility",
        "low",
        "Interactive elements in {name} lack accessible labels.",
        "Add aria-labels and keyboard handlers.",
    ),
    (
        "type_mismatch",
        "high",
        "Props of {name} do not match the response shape of its API.",
        "Derive the prop types from the endpoint response schema.",
    ),
)


def compute_score(issues: Sequence[Issue]) -> int:
    """Score a design: ``max(0, 100 - 20*critical - 5*total)``."""
    critical = sum(1 for issue in issues if issue.severity == "critical")
    return max(0, 100 - CRITICAL_PENALTY * critical - ISSUE_PENALTY * len(issues))


def build_result(
    issues: Iterable[Issue],
    suggestions: list[Suggestion] | None = None,
    optimizations: list[Optimization] | None = None,
) -> ValidationResult:
    """Assemble a ValidationResult, splitting critical issues from warnings."""
    issue_list = list(issues)
    critical = [issue for issue in issue_list if issue.severity == "critical"]
    return ValidationResult(
        is_valid=not critical,
        score=compute_score(issue_list),
        critical_issues=critical,
        warnings=[issue for issue in issue_list if issue.severity != "critical"],
        suggestions=suggestions or [],
        optimizations=optimizations or [],
    )


class IntegrationValidator:
    """Cross-artifact consistency checker.

    Attributes:
        rng: Random generator for synthetic issue injection (None disables it)
        injection_rate: Per feature component probability of injecting an issue
    """

    def __init__(self, rng: random.Random | None = None, injection_rate: float = 0.0) -> None:
        if not 0.0 <= injection_rate <= 1.0:
            raise ValueError(f"injection_rate must be within [0, 1], got {injection_rate}")
        self.rng = rng
        self.injection_rate = injection_rate
        self.logger = logger.bind(component="IntegrationValidator")

    def validate(
        self,
        analysis: ProjectAnalysis,
        ux: ScreenAnalysis,
        data: DataArchitecture,
        components: ComponentArchitecture,
        extra_issues: Iterable[Issue] = (),
    ) -> ValidationResult:
        """Run every check and score the design.

        Args:
            analysis: Stage 1 artifact
            ux: Stage 2 artifact
            data: Stage 3 artifact
            components: Stage 4 artifact
            extra_issues: Additional issues to include in scoring

        Returns:
            ValidationResult with issues, advisory suggestions and optimizations
        """
        issues = [
            *self.check_dependencies(data, components),
            *self.check_security(ux, data, components),
            *self.check_cycles(components),
            *self._inject_issues(components),
            *extra_issues,
        ]
        result = build_result(
            issues,
            suggestions=self.suggest(ux, data, components),
            optimizations=self.optimize(ux, data),
        )

        self.logger.info(
            "integration_validated",
            project=analysis.project_name,
            score=result.score,
            is_valid=result.is_valid,
            critical=len(result.critical_issues),
            warnings=len(result.warnings),
        )
        return result

    def check_dependencies(
        self, data: DataArchitecture, components: ComponentArchitecture
    ) -> list[Issue]:
        """Report feature component API references with no matching endpoint."""
        issues: list[Issue] = []
        for group in components.screens:
            for component in group.feature_components:
                for ref in component.dependencies.apis:
                    # Any overlapping path counts as defined
                    if find_endpoint_by_path(ref, data.endpoints) is not None:
                        continue
                    issues.append(
                        Issue(
                            type="missing_dependency",
                            severity="high",
                            location=f"Component: {component.name} ({component.id})",
                            description=(
                                f"Dependency on API '{ref}' is not defined in the "
                                "data architecture."
                            ),
                            solution=(
                                f"Create an endpoint for '{ref}' in the data "
                                "architecture or remove the dependency."
                            ),
                            auto_fix_available=True,
                        )
                    )
        return issues

    def check_security(
        self,
        ux: ScreenAnalysis,
        data: DataArchitecture,
        components: ComponentArchitecture,
    ) -> list[Issue]:
        """Report admin screen components calling unauthenticated endpoints."""
        issues: list[Issue] = []
        for screen in ux.screens:
            if screen.authentication != "admin":
                continue
            group = components.for_screen(screen.id)
            if group is None:
                continue
            for component in group.feature_components:
                for ref in component.dependencies.apis:
                    endpoint = match_endpoint(ref, data.endpoints)
                    # Unresolved references are reported by check_dependencies
                    if endpoint is None or endpoint.authentication:
                        continue
                    issues.append(
                        Issue(
                            type="security_gap",
                            severity="critical",
                            location=f"Screen: {screen.name} / Component: {component.name}",
                            description=(
                                f"Admin screen uses unprotected endpoint "
                                f"{endpoint.signature}."
                            ),
                            solution=(
                                "Require authentication and an admin authorization "
                                "rule on every endpoint used by admin screens."
                            ),
                            auto_fix_available=False,
                        )
                    )
        return issues

    def check_cycles(self, components: ComponentArchitecture) -> list[Issue]:
        """Report each distinct cycle of the component dependency graph."""
        graph: dict[str, list[str]] = {}
        names: dict[str, str] = {}
        for source, target in dependency_pairs(components):
            graph.setdefault(source.id, []).append(target.id)
            names[source.id] = source.name
            names[target.id] = target.name

        issues: list[Issue] = []
        for cycle in find_cycles(graph):
            path = " -> ".join(names[node] for node in [*cycle, cycle[0]])
            issues.append(
                Issue(
                    type="circular_dependency",
                    severity="medium",
                    location=f"Components: {path}",
                    description=f"Circular dependency detected: {path}.",
                    solution="Refactor shared logic into a custom hook or context.",
                    auto_fix_available=False,
                )
            )
        return issues

    def suggest(
        self,
        ux: ScreenAnalysis,
        data: DataArchitecture,
        components: ComponentArchitecture,
    ) -> list[Suggestion]:
        """Advisory suggestions derived from the artifacts' content."""
        suggestions: list[Suggestion] = []
        features = [c for g in components.screens for c in g.feature_components]

        if any(c.name.endswith("List") for c in features):
            suggestions.append(
                Suggestion(
                    category="performance",
                    title="Implement Virtualization",
                    description=(
                        "List components could use virtualization (e.g. react-window) "
                        "to handle large datasets."
                    ),
                    impact="high",
                    effort="medium",
                )
            )

        if len({c.name for c in features}) < len(features):
            suggestions.append(
                Suggestion(
                    category="maintainability",
                    title="Extract Common Types",
                    description=(
                        "The same components are specified on several screens. "
                        "Extract their prop types to a shared types file."
                    ),
                    impact="medium",
                    effort="low",
                )
            )

        if any(s.authentication == "admin" for s in ux.screens):
            suggestions.append(
                Suggestion(
                    category="security",
                    title="Enforce Role Checks Server-Side",
                    description=(
                        "Admin screens are hidden client-side; make sure every admin "
                        "endpoint verifies the role as well."
                    ),
                    impact="high",
                    effort="medium",
                )
            )

        indexed = {(i.table, i.columns[0]) for i in data.indexes if i.columns}
        unindexed = [
            f"{table.name}.{fk.column}"
            for table in data.tables
            for fk in table.foreign_keys
            if (table.name, fk.column) not in indexed
        ]
        if unindexed:
            suggestions.append(
                Suggestion(
                    category="architecture",
                    title="Index Foreign Keys",
                    description=f"Add indexes on {', '.join(unindexed)}.",
                    impact="medium",
                    effort="low",
                )
            )

        return suggestions

    def optimize(self, ux: ScreenAnalysis, data: DataArchitecture) -> list[Optimization]:
        """Optimization opportunities derived from the artifacts' content."""
        optimizations: list[Optimization] = []

        if any(s.authentication == "admin" for s in ux.screens):
            optimizations.append(
                Optimization(
                    target="Bundle Size",
                    description="Lazy load admin routes to reduce initial bundle size.",
                    estimated_gain="150KB",
                )
            )

        if any(f.name.endswith("_url") for t in data.tables for f in t.fields):
            optimizations.append(
                Optimization(
                    target="Images",
                    description="Serve uploaded images as WebP through an image CDN.",
                    estimated_gain="40%",
                )
            )

        if any(e.method == "GET" and ":" not in e.path for e in data.endpoints):
            optimizations.append(
                Optimization(
                    target="API Responses",
                    description="Paginate and cache list endpoints at the edge.",
                    estimated_gain="30% fewer origin requests",
                )
            )

        return optimizations

    def _inject_issues(self, components: ComponentArchitecture) -> list[Issue]:
        if self.rng is None or self.injection_rate <= 0.0:
            return []

        injected: list[Issue] = []
        for group in components.screens:
            for component in group.feature_components:
                if self.rng.random() >= self.injection_rate:
                    continue
                issue_type, severity, description, solution = self.rng.choice(INJECTED_ISSUES)
                injected.append(
                    Issue(
                        type=issue_type,
                        severity=severity,
                        location=f"Component: {component.name} ({component.id})",
                        description=description.format(name=component.name),
                        solution=solution,
                        auto_fix_available=False,
                    )
                )

        if injected:
            self.logger.debug("validation_issues_injected", count=len(injected))
        return injected


def find_cycles(graph: dict[str, list[str]]) -> list[list[str]]:
    """Find dependency cycles with a three-colour depth-first search.

    Every node is expanded once, so the search is linear in the size of the
    graph. One cycle is reported per back edge; each is rotated to start at
    its smallest node id so that a cycle reached from several edges is
    reported once.

    Args:
        graph: Adjacency lists keyed by node id

    Returns:
        Cycles as node id lists, without repeating the first node
    """
    cycles: list[list[str]] = []
    seen: set[tuple[str, ...]] = set()
    finished: set[str] = set()

    def visit(node: str, stack: list[str], on_stack: set[str]) -> None:
        for nxt in graph.get(node, []):
            # Back edge: the stack slice from nxt is a cycle
            if nxt in on_stack:
                cycle = stack[stack.index(nxt) :]
                pivot = cycle.index(min(cycle))
                canonical = tuple(cycle[pivot:] + cycle[:pivot])
                if canonical not in seen:
                    seen.add(canonical)
                    cycles.append(list(canonical))
                continue
            # Cross or forward edge into an explored subtree
            if nxt in finished:
                continue
            stack.append(nxt)
            on_stack.add(nxt)
            visit(nxt, stack, on_stack)
            stack.pop()
            on_stack.discard(nxt)
        finished.add(node)

    for start in sorted(graph):
        if start not in finished:
            visit(start, [start], {start})

    return cycles
