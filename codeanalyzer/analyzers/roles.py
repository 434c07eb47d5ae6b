"""Per-file role accumulator shared by both classification passes.

Both passes only ever *raise* a role's confidence (``max`` composition), so the
order in which rules fire within a pass cannot lower a score. The accumulator is
finalized once, after the content pass, and only then written onto the
ProjectFile.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from .models import ProjectFile, Role


@dataclass
class Classification:
    """Finalized result of classifying one file."""
    role: Role
    roles: list[Role]
    confidence: float
    patterns: list[str]

    def apply(self, file: ProjectFile) -> None:
        file.role = self.role
        file.roles = list(self.roles)
        file.confidence = self.confidence
        file.found_patterns = list(self.patterns)


@dataclass
class RoleAccumulator:
    """Collects (role, confidence, evidence) tuples for one file."""
    scores: dict[Role, float] = field(default_factory=dict)  # insertion = firing order
    patterns: list[str] = field(default_factory=list)
    promoted: Role | None = None

    def add(self, role: Role, confidence: float, evidence: str) -> None:
        """Record a role; keeps the highest confidence seen for it."""
        current = self.scores.get(role)
        if current is None or confidence > current:
            self.scores[role] = confidence
        if evidence:
            self.patterns.append(evidence)

    def promote(self, role: Role) -> None:
        """Make an already-recorded role primary regardless of firing order."""
        if role in self.scores:
            self.promoted = role

    def withdraw(self, role: Role, evidence: str = "") -> None:
        """Drop a tentative role that a later signal contradicted."""
        self.scores.pop(role, None)
        if self.promoted is role:
            self.promoted = None
        if evidence:
            self.patterns.append(evidence)

    def supersede(self, old: Role, new: Role) -> None:
        """Replace ``old`` with ``new`` as primary when ``old`` would have led."""
        if new not in self.scores:
            return
        if old in self.scores:
            was_primary = self.primary() is old
            self.scores.pop(old)
            if was_primary:
                self.promoted = new

    def confidence(self, role: Role) -> float:
        return self.scores.get(role, 0.0)

    def has(self, role: Role) -> bool:
        return role in self.scores

    def primary(self) -> Role:
        if self.promoted is not None:
            return self.promoted
        return next(iter(self.scores), Role.UNKNOWN)

    def snapshot(self) -> RoleAccumulator:
        """Copy used to roll back a failed content pass."""
        return RoleAccumulator(
            scores=dict(self.scores),
            patterns=list(self.patterns),
            promoted=self.promoted,
        )

    def finalize(self) -> Classification:
        primary = self.primary()
        roles = list(self.scores)
        if primary is not Role.UNKNOWN and roles and roles[0] is not primary:
            roles.remove(primary)
            roles.insert(0, primary)
        return Classification(
            role=primary,
            roles=roles,
            confidence=self.scores.get(primary, 0.0),
            patterns=list(self.patterns),
        )
