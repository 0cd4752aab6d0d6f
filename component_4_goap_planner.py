"""
Component 4: GOAP Planner Core

Goal-oriented action planning over an implicitly generated state graph:
- SearchNode: state reached, edge used, path cost and parent link
- Neighbor generation from a static action library
- A*-style search with open/closed maps keyed by world state
- Path reconstruction
- Plan validation, simulation and failure diagnosis
- BaseReasoningEngine facade with plan explanations and a plan cache

Cost model: a successor's cost is (100 - priority) plus the heuristic distance
of the action's effects to the goal. By default this replaces the parent's
cost instead of adding to it; set cumulative_cost for standard A* costs.
Closed states are never reopened, and ties in the open set go to the node
inserted first.

Author: GOAP Planner Development Team
Date: 2026-10-19
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from common.constants import ROOT_EDGE
from component_1_world_state import WorldState
from component_15_logging_config import PerformanceLogger, get_logger
from component_17_plan_explanation import ProofStep, ProofTree, StepType
from component_2_actions import Action, ActionLibrary, Resolution, as_library
from component_3_heuristics import EffectDistanceHeuristic, Heuristic
from goap_config import GOAPConfig, get_config
from goap_exceptions import InvalidConfigError, SearchLimitError
from infrastructure.interfaces import BaseReasoningEngine, ReasoningResult
from infrastructure.plan_cache import PlanCache, PlanCacheKey, get_plan_cache

logger = get_logger(__name__)


# ============================================================================
# Search Node
# ============================================================================


@dataclass(eq=False)
class SearchNode:
    """
    Node in the search tree.

    Attributes:
        edge: Name of the action that led here ("" for the root)
        cost: Path cost used to order the open set
        state: World state at this node
        parent: Parent node (None only for the root)
    """

    edge: str
    cost: float
    state: WorldState
    parent: Optional["SearchNode"] = field(default=None, repr=False)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def depth(self) -> int:
        depth = 0
        node = self
        while node.parent is not None:
            depth += 1
            node = node.parent
        return depth

    def reconstruct_plan(self) -> List[str]:
        """Action names from the root (exclusive) to this node, in order."""
        plan = []
        node = self
        while node.parent is not None:
            plan.append(node.edge)
            node = node.parent
        return list(reversed(plan))


# ============================================================================
# GOAP Planner
# ============================================================================


class GOAPPlanner(BaseReasoningEngine):
    """
    Goal-oriented action planner with A*-style search.

    Features:
    - Forward search over states synthesized from action effects
    - Lazy preconditions resolved once per search
    - Optional expansion cap
    - Plan validation, simulation and diagnosis
    - BaseReasoningEngine interface with plan explanations
    """

    def __init__(
        self,
        actions: Union[ActionLibrary, Sequence[Action]],
        heuristic: Optional[Heuristic] = None,
        max_expansions: Optional[int] = None,
        cumulative_cost: Optional[bool] = None,
        config: Optional[GOAPConfig] = None,
    ):
        """
        Initialize planner.

        Args:
            actions: Action library (or a sequence of actions)
            heuristic: Distance estimate (default: EffectDistanceHeuristic)
            max_expansions: Expansion cap; falls back to config (None = unbounded)
            cumulative_cost: Accumulate costs along the path; falls back to config
            config: Planner configuration (default: get_config())

        Raises:
            InvalidConfigError: If max_expansions is given and not a positive int
        """
        if max_expansions is not None and (
            isinstance(max_expansions, bool)
            or not isinstance(max_expansions, int)
            or max_expansions <= 0
        ):
            raise InvalidConfigError(
                "max_expansions must be a positive integer or None",
                config_key="max_expansions",
                config_value=max_expansions,
            )

        self.config = config or get_config()
        self.library = as_library(actions)
        self.heuristic = heuristic or EffectDistanceHeuristic()
        self.max_expansions = (
            max_expansions if max_expansions is not None else self.config.max_expansions
        )
        self.cumulative_cost = (
            cumulative_cost if cumulative_cost is not None else self.config.cumulative_cost
        )
        self.stats: Dict[str, Any] = self._fresh_stats()
        # Deferred precondition values of the last search
        self.resolved: Resolution = {}

    @staticmethod
    def _fresh_stats() -> Dict[str, Any]:
        return {
            "expansions": 0,
            "generated": 0,
            "updated": 0,
            "discarded_closed": 0,
            "open_remaining": 0,
            "closed_size": 0,
            "plan_length": 0,
            "exhausted": False,
        }

    # ------------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------------

    def find_neighbors(
        self, node: SearchNode, goal: WorldState, resolved: Optional[Resolution] = None
    ) -> List[SearchNode]:
        """
        Successors of node, one per traversable action, in library order.

        An action is never generated right after itself. Deferred
        preconditions are looked up in (and added to) resolved; without it
        their resolvers run on every call.
        """
        neighbors = []

        for action in self.library:
            if action.name == node.edge:
                continue

            distance = self.heuristic.estimate(action, node.state, goal)
            total_cost = action.cost + distance
            if self.cumulative_cost:
                total_cost += node.cost

            new_state = action.apply(node.state)

            if not node.state.is_superset_of(action.precondition_state(resolved)):
                continue

            neighbors.append(
                SearchNode(edge=action.name, cost=total_cost, state=new_state, parent=node)
            )

        return neighbors

    def find_path(
        self, start: WorldState, goal: WorldState, strict: bool = False
    ) -> Optional[SearchNode]:
        """
        Search for a node whose state satisfies goal.

        Args:
            start: Starting world state
            goal: Facts that must all hold
            strict: Raise SearchLimitError instead of returning None when the
                expansion cap is hit

        Returns:
            Terminal SearchNode, or None if no plan exists
        """
        self.stats = self._fresh_stats()
        self.resolved = {}

        search_log = logger.bind(goal=goal.to_string())
        search_log.info(
            "Starting GOAP search",
            extra={"start": start.to_string(), "actions": len(self.library)},
        )

        with PerformanceLogger(logger.logger, "GOAP search", actions=len(self.library)):
            result = self._search(start, goal, self.resolved)

        if result is not None:
            self.stats["plan_length"] = result.depth
            search_log.info(
                "Plan found",
                extra={
                    "plan": " -> ".join(result.reconstruct_plan()) or "<empty>",
                    "cost": result.cost,
                    "expansions": self.stats["expansions"],
                },
            )
            return result

        if self.stats["exhausted"]:
            search_log.warning(
                "No plan found: open set exhausted",
                extra={"expansions": self.stats["expansions"]},
            )
            return None

        search_log.warning(
            "No plan found: expansion limit reached",
            extra={"max_expansions": self.max_expansions},
        )
        if strict:
            raise SearchLimitError(
                f"Search stopped after {self.stats['expansions']} expansions",
                max_expansions=self.max_expansions,
            )
        return None

    def _search(
        self, start: WorldState, goal: WorldState, resolved: Resolution
    ) -> Optional[SearchNode]:
        root = SearchNode(edge=ROOT_EDGE, cost=0, state=start)
        open_nodes: Dict[WorldState, SearchNode] = {start: root}
        closed_nodes: Dict[WorldState, SearchNode] = {}

        try:
            while open_nodes:
                # min() keeps the first of equal-cost nodes in insertion order
                current = min(open_nodes.values(), key=lambda n: n.cost)
                del open_nodes[current.state]
                closed_nodes[current.state] = current

                if current.state.is_superset_of(goal):
                    return current

                if (
                    self.max_expansions is not None
                    and self.stats["expansions"] >= self.max_expansions
                ):
                    return None

                self.stats["expansions"] += 1
                logger.debug(
                    "Expanding node",
                    extra={
                        "edge": current.edge or "<root>",
                        "cost": current.cost,
                        "state": current.state.to_string(),
                    },
                )

                for neighbor in self.find_neighbors(current, goal, resolved):
                    self.stats["generated"] += 1

                    if neighbor.state in closed_nodes:
                        self.stats["discarded_closed"] += 1
                        continue

                    existing = open_nodes.get(neighbor.state)
                    if existing is None:
                        open_nodes[neighbor.state] = neighbor
                    elif neighbor.cost < existing.cost:
                        existing.cost = neighbor.cost
                        existing.edge = neighbor.edge
                        existing.parent = current
                        self.stats["updated"] += 1

            self.stats["exhausted"] = True
            return None
        finally:
            self.stats["open_remaining"] = len(open_nodes)
            self.stats["closed_size"] = len(closed_nodes)

    def plan(self, start: WorldState, goal: WorldState) -> Optional[List[str]]:
        """
        Find a plan as a list of action names.

        Returns:
            Ordered action names ([] if start already satisfies goal), or None
        """
        node = self.find_path(start, goal)
        if node is None:
            return None
        return node.reconstruct_plan()

    # ------------------------------------------------------------------------
    # Plan checking
    # ------------------------------------------------------------------------

    def validate_plan(
        self,
        start: WorldState,
        goal: WorldState,
        plan: List[str],
        resolved: Optional[Resolution] = None,
    ) -> Tuple[bool, Optional[str]]:
        """
        Validate that plan achieves goal from start.

        Returns:
            (success, error_message)
        """
        diagnosis = self.diagnose_failure(start, goal, plan, resolved)
        if diagnosis["error"] is None:
            return True, None
        return False, diagnosis["error"]

    def simulate_plan(self, start: WorldState, plan: List[str]) -> List[WorldState]:
        """
        Apply plan effects in order and return the state trajectory.

        Preconditions are not checked; see validate_plan(). Simulation stops
        at the first name missing from the library, so a plan with an unknown
        action yields fewer than len(plan) + 1 states; diagnose_failure()
        reports which step failed.

        Returns:
            List of states, starting with start
        """
        states = [start]
        state = start

        for i, name in enumerate(plan):
            action = self.library.get(name)
            if action is None:
                logger.warning(
                    "Simulation stopped at unknown action",
                    extra={"action": name, "step": i},
                )
                break
            state = action.apply(state)
            states.append(state)

        return states

    def diagnose_failure(
        self,
        start: WorldState,
        goal: WorldState,
        plan: List[str],
        resolved: Optional[Resolution] = None,
    ) -> Dict[str, Any]:
        """
        Analyze why a plan fails.

        Deferred preconditions are resolved at most once per call, or looked
        up in resolved when a search already produced their values.

        Returns:
            Diagnostic information:
            - failed_at: Index of the failing step (len(plan) if the goal is missed)
            - failed_action: Name of the failing action
            - missing_preconditions: Facts required but absent
            - state_before: State before the failing step
            - error: Description, or None if the plan works
        """
        resolved = {} if resolved is None else resolved
        state = start

        for i, name in enumerate(plan):
            action = self.library.get(name)
            if action is None:
                return {
                    "failed_at": i,
                    "failed_action": name,
                    "missing_preconditions": WorldState(),
                    "state_before": state,
                    "error": f"Unknown action '{name}'",
                }

            required = action.precondition_state(resolved)
            if not state.is_superset_of(required):
                missing = required.difference(state)
                return {
                    "failed_at": i,
                    "failed_action": name,
                    "missing_preconditions": missing,
                    "state_before": state,
                    "error": f"Action {name} requires {missing.to_string()} but state is {state.to_string()}",
                }

            state = action.apply(state)

        if not state.is_superset_of(goal):
            missing_goals = goal.difference(state)
            return {
                "failed_at": len(plan),
                "failed_action": None,
                "missing_preconditions": missing_goals,
                "state_before": state,
                "error": f"Goal not achieved. Missing: {missing_goals.to_string()}",
            }

        return {"error": None}

    # ========================================================================
    # BaseReasoningEngine Interface Implementation
    # ========================================================================

    def reason(self, query: str, context: Dict[str, Any]) -> ReasoningResult:
        """
        Plan for the goal described in context.

        Context should contain:
        - 'start_state': WorldState to plan from
        - 'goal': WorldState to satisfy
        - 'enable_proof': Whether to build an explanation (default: True)

        Returns:
            ReasoningResult with the plan in metadata["plan"]
        """
        start = context.get("start_state")
        goal = context.get("goal")
        if start is None or goal is None:
            return ReasoningResult(
                success=False,
                answer="No start state or goal provided in context",
                confidence=0.0,
                strategy_used="goap_planner",
                metadata={"error": "missing_planning_input"},
            )

        cache_key = self._plan_cache_key(start, goal)
        cached = self._plan_cache().lookup(cache_key) if cache_key is not None else None

        if cached is not None:
            plan, cost = list(cached.actions), cached.cost
            from_cache = True
        else:
            node = self.find_path(start, goal)
            if node is None:
                reason = "search_exhausted" if self.stats["exhausted"] else "expansion_limit"
                return ReasoningResult(
                    success=False,
                    answer="No plan found",
                    confidence=0.0,
                    proof_tree=self._create_failure_proof_tree(query, start, goal, reason)
                    if context.get("enable_proof", True)
                    else None,
                    strategy_used="goap_planner_astar",
                    computation_cost=1.0,
                    metadata={
                        "expansions": self.stats["expansions"],
                        "max_expansions": self.max_expansions,
                        "reason": reason,
                    },
                )
            plan, cost = node.reconstruct_plan(), node.cost
            from_cache = False
            if cache_key is not None:
                self._plan_cache().store(cache_key, plan, cost)

        is_valid, error_msg = self.validate_plan(start, goal, plan, self.resolved)

        proof_tree = None
        if context.get("enable_proof", True):
            proof_tree = self._create_plan_proof_tree(
                query, start, goal, plan, from_cache=from_cache, resolved=self.resolved
            )

        return ReasoningResult(
            success=True,
            answer=f"Plan with {len(plan)} actions: {' -> '.join(plan) or '<empty>'}",
            confidence=1.0 if is_valid else 0.8,
            proof_tree=proof_tree,
            strategy_used="goap_planner_astar",
            computation_cost=0.0 if from_cache else self._relative_cost(),
            metadata={
                "plan": plan,
                "plan_length": len(plan),
                "cost": cost,
                "from_cache": from_cache,
                "expansions": 0 if from_cache else self.stats["expansions"],
                "is_valid": is_valid,
                "validation_error": error_msg,
            },
        )

    def _relative_cost(self) -> float:
        if not self.max_expansions:
            return 0.0
        return min(1.0, self.stats["expansions"] / self.max_expansions)

    def _plan_cache_key(
        self, start: WorldState, goal: WorldState
    ) -> Optional[PlanCacheKey]:
        # Resolvers read live context, so such libraries are never cached
        if not self.config.plan_cache_enabled or self.library.has_deferred_preconditions:
            return None

        heuristic_key = self.heuristic.cache_key()
        if heuristic_key is None:
            return None

        library_key = tuple(
            (
                a.name,
                a.priority,
                a.precondition_state().key,
                a.effects_state.key,
            )
            for a in self.library
        )
        return PlanCacheKey(
            library=library_key,
            heuristic=heuristic_key,
            cumulative_cost=self.cumulative_cost,
            max_expansions=self.max_expansions,
            start=start.key,
            goal=goal.key,
        )

    def _plan_cache(self) -> PlanCache:
        return get_plan_cache(
            maxsize=self.config.plan_cache_maxsize, ttl=self.config.plan_cache_ttl
        )

    def _start_proof_tree(self, query: str, start: WorldState, goal: WorldState) -> ProofTree:
        tree = ProofTree(
            query=query,
            metadata={
                "planner": type(self).__name__,
                "heuristic": type(self.heuristic).__name__,
                "cumulative_cost": self.cumulative_cost,
            },
        )
        tree.add_step(
            ProofStep(
                step_id="plan_initial_state",
                step_type=StepType.PREMISE,
                description=f"Start in {start.to_string()}",
                produces=list(start.key),
            )
        )
        tree.add_step(
            ProofStep(
                step_id="plan_goal",
                step_type=StepType.PREMISE,
                description=f"Reach {goal.to_string()}",
                facts=list(goal.key),
            )
        )
        return tree

    def _create_plan_proof_tree(
        self,
        query: str,
        start: WorldState,
        goal: WorldState,
        plan: List[str],
        from_cache: bool = False,
        resolved: Optional[Resolution] = None,
    ) -> ProofTree:
        """
        Explain a found plan: both premises, one INFERENCE step per action
        (needed facts, effects, cost) and a CONCLUSION tied to the goal.
        """
        tree = self._start_proof_tree(query, start, goal)
        resolved = {} if resolved is None else resolved

        previous = "plan_initial_state"
        for i, name in enumerate(plan):
            action = self.library.get(name)
            step_id = f"plan_action_{i}"
            tree.add_step(
                ProofStep(
                    step_id=step_id,
                    step_type=StepType.INFERENCE,
                    description=f"Apply {name}",
                    facts=list(action.precondition_state(resolved).key),
                    action=name,
                    produces=list(action.effects_state.key),
                    cost=action.cost,
                    depends_on=[previous],
                )
            )
            previous = step_id

        tree.add_step(
            ProofStep(
                step_id="plan_goal_achieved",
                step_type=StepType.CONCLUSION,
                description=f"Goal reached after {len(plan)} actions",
                facts=list(goal.key),
                depends_on=[previous, "plan_goal"],
            )
        )
        tree.metadata["plan_length"] = len(plan)
        tree.metadata["search_stats"] = None if from_cache else dict(self.stats)
        return tree

    def _create_failure_proof_tree(
        self, query: str, start: WorldState, goal: WorldState, reason: str
    ) -> ProofTree:
        """Explain a failed search with a CONTRADICTION step."""
        tree = self._start_proof_tree(query, start, goal)
        tree.add_step(
            ProofStep(
                step_id="plan_not_found",
                step_type=StepType.CONTRADICTION,
                description=f"No plan reaches the goal ({reason})",
                facts=list(goal.difference(start).key),
                depends_on=["plan_initial_state", "plan_goal"],
            )
        )
        tree.metadata["search_stats"] = dict(self.stats)
        return tree

    def get_capabilities(self) -> List[str]:
        return [
            "planning",
            "goap",
            "state_space_search",
            "astar_search",
            "heuristic_search",
            "forward_planning",
            "action_planning",
            "goal_achievement",
            "plan_validation",
        ]

    def estimate_cost(self, query: str) -> float:
        # Grows with library size; search space is implicit
        return min(1.0, 0.3 + 0.05 * len(self.library))
