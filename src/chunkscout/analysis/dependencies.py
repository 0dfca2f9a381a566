"""Reconstruct the outer state a loader reads before it can run alone."""

from __future__ import annotations

from dataclasses import dataclass

from .models import LoaderCandidate
from .syntax import MEMBER_TYPES, node_text, path_text
from .walk import walk

__all__ = ["DependencyPlan", "resolve_dependencies"]


@dataclass(frozen=True, slots=True)
class DependencyPlan:
    """Bindings to declare and initializers to run before invoking a loader.

    ``bindings`` are bare identifiers declared as fresh empty objects;
    ``initializers`` are assignment statements executed once each, in order.
    """

    bindings: tuple[str, ...] = ()
    initializers: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.bindings or self.initializers)


def resolve_dependencies(candidate: LoaderCandidate) -> DependencyPlan:
    """Return the declarations needed by ``candidate``.

    Every member access rooted at a bare identifier is looked up by its
    normalized path in the candidate's assignment map. Paths without a
    recorded assignment stay undeclared; if the loader needs them its calls
    fail and are skipped during evaluation.

    Example:
        >>> from chunkscout.analysis.detector import detect_candidates
        >>> from chunkscout.analysis.syntax import parse_script
        >>> tree = parse_script(
        ...     'm.p = "/static/"; m.u = e => m.p + {1: "a"}[e] + ".js";'
        ... )
        >>> plan = resolve_dependencies(detect_candidates(tree.root_node)[0])
        >>> plan.bindings, plan.initializers
        (('m',), ('m.p = "/static/"',))
    """

    bindings: dict[str, None] = {}
    initializers: dict[str, str] = {}
    for member in walk(candidate.node, MEMBER_TYPES):
        base = member.child_by_field_name("object")
        if base is None or base.type != "identifier":
            continue
        path = path_text(member)
        if path in initializers:
            continue
        assignment = candidate.assignments.get(path)
        if assignment is None:
            continue
        bindings.setdefault(node_text(base), None)
        initializers[path] = node_text(assignment)
    return DependencyPlan(
        bindings=tuple(bindings),
        initializers=tuple(initializers.values()),
    )
