"""
component_17_plan_explanation.py

Step-by-step explanations of GOAP plans.

A ProofTree is the ordered record the planner builds for one reason() call:
the start state and goal as premises, one step per applied action (with the
facts it needs and produces), and a closing step that either confirms the
goal or records why no plan exists. Trees render as plain text and
round-trip through JSON.
"""

import json
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union


class StepType(Enum):
    PREMISE = "premise"
    INFERENCE = "inference"
    CONCLUSION = "conclusion"
    CONTRADICTION = "contradiction"


STEP_LABELS: Dict[StepType, str] = {
    StepType.PREMISE: "[PREMISE]",
    StepType.INFERENCE: "[ACTION]",
    StepType.CONCLUSION: "[OK]",
    StepType.CONTRADICTION: "[FAIL]",
}


@dataclass
class ProofStep:
    """
    One entry of a plan explanation.

    Attributes:
        step_id: Identifier, unique within its tree
        step_type: Role of the step
        description: One-line text shown to users
        facts: Encoded facts the step relies on (preconditions, goal)
        action: Action name for INFERENCE steps
        produces: Encoded facts the step establishes (effects, start state)
        cost: Action cost (100 - priority) for INFERENCE steps
        depends_on: step_ids that must precede this one
    """

    step_id: str
    step_type: StepType
    description: str
    facts: List[str] = field(default_factory=list)
    action: Optional[str] = None
    produces: List[str] = field(default_factory=list)
    cost: Optional[float] = None
    depends_on: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["step_type"] = self.step_type.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProofStep":
        """Build a step from to_dict() output; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        kwargs = {key: value for key, value in data.items() if key in known}
        kwargs["step_type"] = StepType(kwargs["step_type"])
        return cls(**kwargs)


@dataclass
class ProofTree:
    """Ordered explanation of one planning query."""

    query: str
    steps: List[ProofStep] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.now)

    def add_step(self, step: ProofStep) -> None:
        """
        Append a step.

        Raises:
            ValueError: If the step_id is taken or a dependency is unknown
        """
        known = {s.step_id for s in self.steps}
        if step.step_id in known:
            raise ValueError(f"Duplicate step id '{step.step_id}'")
        missing = [dep for dep in step.depends_on if dep not in known]
        if missing:
            raise ValueError(f"Step '{step.step_id}' depends on unknown steps {missing}")
        self.steps.append(step)

    def get_step(self, step_id: str) -> Optional[ProofStep]:
        return next((s for s in self.steps if s.step_id == step_id), None)

    def action_steps(self) -> List[ProofStep]:
        return [s for s in self.steps if s.step_type == StepType.INFERENCE]

    @property
    def plan(self) -> List[str]:
        """Action names in the order the explanation applies them."""
        return [s.action for s in self.action_steps() if s.action is not None]

    @property
    def succeeded(self) -> bool:
        return not any(s.step_type == StepType.CONTRADICTION for s in self.steps)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "steps": [step.to_dict() for step in self.steps],
            "metadata": self.metadata,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProofTree":
        tree = cls(
            query=data["query"],
            metadata=dict(data.get("metadata", {})),
            created_at=datetime.fromisoformat(data["created_at"]),
        )
        for step_data in data.get("steps", []):
            tree.add_step(ProofStep.from_dict(step_data))
        return tree

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> "ProofTree":
        return cls.from_dict(json.loads(text))


# ==================== Text Formatting ====================


def _fact_list(facts: Sequence[str], limit: int = 3) -> str:
    shown = ", ".join(facts[:limit])
    hidden = len(facts) - limit
    return f"{shown} (+{hidden} more)" if hidden > 0 else shown


def format_proof_step(step: ProofStep, indent: int = 0, show_details: bool = True) -> str:
    """
    Render one step.

    The first line holds the label, description and cost. With show_details
    the needed and produced facts follow, at most three of each.
    """
    pad = "  " * indent
    head = f"{pad}{STEP_LABELS[step.step_type]} {step.description}"
    if step.cost is not None:
        head += f" [cost {step.cost:g}]"

    lines = [head]
    if show_details:
        if step.facts:
            lines.append(f"{pad}    needs: {_fact_list(step.facts)}")
        if step.produces:
            lines.append(f"{pad}    gives: {_fact_list(step.produces)}")
    return "\n".join(lines)


def format_proof_tree(tree: ProofTree, show_details: bool = True) -> str:
    title = f"Plan explanation for: {tree.query}"
    lines = [title, "-" * len(title)]

    if not tree.steps:
        lines.append("(no steps)")
        return "\n".join(lines)

    lines.extend(format_proof_step(s, indent=1, show_details=show_details) for s in tree.steps)
    lines.append(f"{len(tree.action_steps())} actions, {len(tree.steps)} steps")
    return "\n".join(lines)


def format_proof_chain(steps: Sequence[ProofStep]) -> str:
    """Numbered one-line-per-step view."""
    return "\n".join(
        f"{i}. {STEP_LABELS[step.step_type]} {step.description}"
        for i, step in enumerate(steps, 1)
    )


# ==================== JSON Files ====================


def export_proof_to_json(tree: ProofTree, filepath: Union[str, Path]) -> None:
    Path(filepath).write_text(tree.to_json(), encoding="utf-8")


def import_proof_from_json(filepath: Union[str, Path]) -> ProofTree:
    return ProofTree.from_json(Path(filepath).read_text(encoding="utf-8"))
