"""
Monte Carlo Tree Search over caller-defined decision spaces

The tree is an arena: nodes live in one list and refer to their parent and
children by index, so discarding the search drops the whole tree at once.
"""
import logging
import math
import time
from collections.abc import Mapping
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Sequence

from monte_carlo_engine.base_engine import CancellationToken
from monte_carlo_engine.distribution import ExpansionFunction, RolloutFunction
from monte_carlo_engine.random_engine import RandomEngine
from utils.constants import DEFAULT_EXPLORATION_CONSTANT, DEFAULT_MAX_DEPTH
from utils.exceptions import ConfigurationError, ValidationError
from utils.helpers import require_positive_int

logger = logging.getLogger(__name__)

ROOT = 0

@dataclass
class MCTSNode:
    """Search-tree node; ``parent`` and ``children`` are arena indices"""
    index: int
    state: Any
    parent: Optional[int] = None
    action: Any = None
    prior: Optional[float] = None
    depth: int = 0
    children: List[int] = field(default_factory=list)
    visits: int = 0
    value: float = 0.0
    terminal: bool = False

    @property
    def average_value(self) -> float:
        return self.value / max(self.visits, 1)

@dataclass(frozen=True)
class Expansion:
    """Child record produced by an expansion callback"""
    state: Any
    action: Any = None
    prior: Optional[float] = None

@dataclass(frozen=True)
class PathStep:
    """One step of the extracted best action sequence"""
    action: Any
    visits: int
    avg_reward: float

@dataclass(frozen=True)
class ChildStats:
    """Summary of one root child; ``ucb`` is None while unvisited"""
    action: Any
    visits: int
    value: float
    ucb: Optional[float]

@dataclass(frozen=True)
class MCTSResult:
    """Outcome of one search"""
    best_action: Any
    best_sequence: List[PathStep]
    root_visits: int
    root_value: float
    children: List[ChildStats]
    total_simulations: int

def _coerce_expansion(record: Any) -> Expansion:
    if isinstance(record, Expansion):
        return record
    if isinstance(record, Mapping):
        if "state" not in record:
            raise ValidationError(f"Expansion record has no 'state': {record!r}")
        return Expansion(record["state"], record.get("action"), record.get("prior"))
    raise ValidationError(f"Expansion records must be mappings or Expansion, got {type(record).__name__}")

class SearchTree:
    """Arena of MCTS nodes rooted at index 0"""

    def __init__(self, root_state: Any):
        self.nodes: List[MCTSNode] = []
        self.add_node(root_state)

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def root(self) -> MCTSNode:
        return self.nodes[ROOT]

    def add_node(self, state: Any, parent: Optional[int] = None,
                 action: Any = None, prior: Optional[float] = None) -> int:
        index = len(self.nodes)
        depth = self.nodes[parent].depth + 1 if parent is not None else 0
        self.nodes.append(MCTSNode(index, state, parent, action, prior, depth))
        if parent is not None:
            self.nodes[parent].children.append(index)
        return index

    def ucb1(self, index: int, parent_visits: int, c: float) -> float:
        """exploit + c * sqrt(ln(parent visits) / visits); +inf when unvisited"""
        node = self.nodes[index]
        if node.visits == 0:
            return math.inf
        exploit = node.value / node.visits
        explore = c * math.sqrt(math.log(max(parent_visits, 1)) / node.visits)
        return exploit + explore

    def select(self, c: float) -> int:
        """Descend from the root by maximum UCB1 until reaching a leaf"""
        index = ROOT
        while self.nodes[index].children:
            parent = self.nodes[index]
            best = parent.children[0]
            best_ucb = self.ucb1(best, parent.visits, c)
            for child in parent.children[1:]:
                ucb = self.ucb1(child, parent.visits, c)
                if ucb > best_ucb:
                    best, best_ucb = child, ucb
            index = best
        return index

    def expand(self, index: int, records: Sequence[Any], rng: RandomEngine) -> int:
        """Materialise children of ``index`` and pick one to roll out"""
        for record in records:
            child = _coerce_expansion(record)
            self.add_node(child.state, index, child.action, child.prior)

        children = self.nodes[index].children
        unvisited = [c for c in children if self.nodes[c].visits == 0]
        pool = unvisited or children
        return pool[rng.next_int(0, len(pool) - 1)]

    def backpropagate(self, index: Optional[int], reward: float) -> None:
        while index is not None:
            node = self.nodes[index]
            node.visits += 1
            node.value += reward
            index = node.parent

    def best_path(self) -> List[PathStep]:
        """Robust-child path: follow the most visited child down to a leaf"""
        path = []
        node = self.root

        while node.children:
            best = self.nodes[node.children[0]]
            for child in node.children[1:]:
                if self.nodes[child].visits > best.visits:
                    best = self.nodes[child]
            path.append(PathStep(best.action, best.visits, best.average_value))
            node = best

        return path

class MonteCarloTreeSearch:
    """UCB1 tree search driven by caller expansion and rollout callbacks"""

    def __init__(
        self,
        rng: RandomEngine,
        exploration_constant: float = DEFAULT_EXPLORATION_CONSTANT,
        max_depth: int = DEFAULT_MAX_DEPTH,
        simulations: int = 1000
    ):
        self.rng = rng
        self.exploration_constant = exploration_constant
        self.max_depth = max_depth
        self.simulations = simulations

    def _validate(self, simulations: int, max_depth: int, c: float) -> None:
        require_positive_int("Number of simulations", simulations)
        if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 0:
            raise ConfigurationError(f"Maximum depth must be a non-negative integer, got {max_depth!r}")
        if not isinstance(c, (int, float)) or not math.isfinite(c) or c < 0:
            raise ConfigurationError(f"Exploration constant must be finite and >= 0, got {c!r}")

    def search(
        self,
        root_state: Any,
        expand_fn: ExpansionFunction,
        rollout_fn: RolloutFunction,
        simulations: Optional[int] = None,
        max_depth: Optional[int] = None,
        exploration_constant: Optional[float] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> MCTSResult:
        """
        Run select / expand / rollout / backpropagate ``simulations`` times

        Args:
            root_state: Opaque root state
            expand_fn: state -> list of ``{state, action, prior}`` records
            rollout_fn: state -> reward
            simulations: Iteration count override
            max_depth: Depth limit override; nodes at the limit are not expanded
            exploration_constant: UCB1 ``C`` override
            cancel_token: Checked at the top of every iteration

        Returns:
            Best action, robust-child action sequence and root-child summaries
        """
        total = self.simulations if simulations is None else simulations
        depth_limit = self.max_depth if max_depth is None else max_depth
        c = self.exploration_constant if exploration_constant is None else exploration_constant
        self._validate(total, depth_limit, c)

        logger.info(f"Starting MCTS: {total} simulations, max depth {depth_limit}, C={c:.4f}")
        start_time = time.time()
        tree = SearchTree(root_state)

        for i in range(total):
            if cancel_token is not None:
                cancel_token.raise_if_cancelled("MCTS", i)

            index = tree.select(c)
            node = tree.nodes[index]

            if node.depth < depth_limit and not node.terminal:
                records = list(expand_fn(node.state) or [])
                if records:
                    index = tree.expand(index, records, self.rng)
                else:
                    node.terminal = True

            reward = float(rollout_fn(tree.nodes[index].state))
            tree.backpropagate(index, reward)

        best_sequence = tree.best_path()
        root = tree.root
        children = []
        for child_index in root.children:
            child = tree.nodes[child_index]
            children.append(ChildStats(
                action=child.action,
                visits=child.visits,
                value=child.average_value,
                ucb=tree.ucb1(child_index, root.visits, c) if child.visits else None,
            ))

        logger.info(
            f"MCTS completed in {time.time() - start_time:.3f}s: "
            f"{len(tree)} nodes, best action {best_sequence[0].action if best_sequence else None!r}"
        )

        return MCTSResult(
            best_action=best_sequence[0].action if best_sequence else None,
            best_sequence=best_sequence,
            root_visits=root.visits,
            root_value=root.average_value,
            children=children,
            total_simulations=total,
        )

    def summarize(self, result: MCTSResult) -> Dict[str, Any]:
        """Plain-dict view of a search result"""
        return {
            "best_action": result.best_action,
            "best_sequence": [asdict(step) for step in result.best_sequence],
            "root_visits": result.root_visits,
            "root_value": result.root_value,
            "children": [asdict(child) for child in result.children],
            "total_simulations": result.total_simulations,
        }
