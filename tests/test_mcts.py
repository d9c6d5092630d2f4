"""
Tests for Monte Carlo Tree Search
"""
import math

import pytest

from monte_carlo_engine.base_engine import CancellationToken
from monte_carlo_engine.random_engine import RandomEngine
from tree_search.mcts import Expansion, MCTSResult, MonteCarloTreeSearch, SearchTree
from utils.exceptions import ConfigurationError, SimulationCancelledError, ValidationError

REWARDS = {"good": 1.0, "bad": 0.0, "root": 0.5}

def two_move_expand(state):
    if state == "root":
        return [{"state": "good", "action": "good"}, {"state": "bad", "action": "bad"}]
    return []

def two_move_rollout(state):
    return REWARDS[state]

def fan_out(k):
    def expand(state):
        if state == "root":
            return [Expansion(state=i, action=f"move-{i}", prior=1.0 / k) for i in range(k)]
        return []
    return expand

def binary_tree_expand(state):
    """Unbounded tree; states are tuples of actions taken so far"""
    return [{"state": state + (move,), "action": move} for move in ("L", "R")]

@pytest.fixture
def search(rng):
    return MonteCarloTreeSearch(rng, simulations=200)

class TestSearch:
    """Test complete searches"""

    def test_prefers_rewarding_action(self, search):
        result = search.search("root", two_move_expand, two_move_rollout)

        assert isinstance(result, MCTSResult)
        assert result.best_action == "good"
        assert result.best_sequence[0].action == "good"
        assert result.root_visits == 200
        assert result.total_simulations == 200

        by_action = {c.action: c for c in result.children}
        assert by_action["good"].visits > by_action["bad"].visits
        assert by_action["good"].value == 1.0
        assert by_action["bad"].value == 0.0

    def test_every_root_child_visited(self, rng):
        """With at least k simulations all k root children get a visit"""
        k = 5
        result = MonteCarloTreeSearch(rng).search("root", fan_out(k), lambda s: 0.5, simulations=k)

        assert len(result.children) == k
        assert all(c.visits == 1 for c in result.children)

    def test_terminal_root(self, search):
        """A root with no expansions is rolled out every iteration"""
        result = search.search("root", lambda s: [], lambda s: 0.25, simulations=10)

        assert result.best_action is None
        assert result.best_sequence == []
        assert result.children == []
        assert result.root_visits == 10
        assert result.root_value == pytest.approx(0.25)

    def test_empty_generator_marks_node_terminal(self, search):
        """Expansion callbacks may return any iterable, including an exhausted one"""
        result = search.search("root", lambda s: (r for r in []), lambda s: 0.25, simulations=10)

        assert result.best_action is None
        assert result.children == []
        assert result.root_visits == 10

    def test_generator_expansion(self, search):
        def expand(state):
            if state == "root":
                yield {"state": "good", "action": "good"}
                yield {"state": "bad", "action": "bad"}

        result = search.search("root", expand, two_move_rollout)
        assert result.best_action == "good"

    def test_max_depth_zero_never_expands(self, search):
        calls = []

        def expand(state):
            calls.append(state)
            return binary_tree_expand(state)

        result = search.search((), expand, lambda s: 1.0, simulations=20, max_depth=0)

        assert calls == []
        assert result.best_action is None
        assert result.root_visits == 20

    def test_max_depth_limits_expansion(self, search):
        expanded_depths = []

        def expand(state):
            expanded_depths.append(len(state))
            return binary_tree_expand(state)

        result = search.search((), expand, lambda s: s.count("L") / 3.0, simulations=100, max_depth=2)

        assert max(expanded_depths) < 2
        assert len(result.best_sequence) <= 2

    def test_unvisited_children_have_no_ucb(self, search):
        result = search.search("root", fan_out(3), lambda s: 0.5, simulations=1)

        visited = [c for c in result.children if c.visits]
        unvisited = [c for c in result.children if not c.visits]
        assert len(visited) == 1
        assert len(unvisited) == 2
        assert all(c.ucb is None for c in unvisited)
        assert math.isfinite(visited[0].ucb)

    def test_seeded_search_is_reproducible(self):
        def run():
            return MonteCarloTreeSearch(RandomEngine(seed=11)).search(
                (), binary_tree_expand, lambda s: s.count("R") / 5.0, simulations=150, max_depth=4
            )

        assert run() == run()

    def test_callback_errors_propagate(self, search):
        def rollout(state):
            raise RuntimeError("rollout failed")

        with pytest.raises(RuntimeError, match="rollout failed"):
            search.search("root", two_move_expand, rollout)

    def test_malformed_expansion_rejected(self, search):
        with pytest.raises(ValidationError):
            search.search("root", lambda s: [{"action": "no-state"}], two_move_rollout)

    @pytest.mark.parametrize("kwargs", [
        {"simulations": 0},
        {"simulations": -3},
        {"max_depth": -1},
        {"exploration_constant": -0.5},
        {"exploration_constant": float("inf")},
    ])
    def test_invalid_parameters(self, search, kwargs):
        with pytest.raises(ConfigurationError):
            search.search("root", two_move_expand, two_move_rollout, **kwargs)

    def test_summarize(self, search):
        summary = search.summarize(search.search("root", two_move_expand, two_move_rollout))

        assert summary["best_action"] == "good"
        assert summary["best_sequence"][0]["action"] == "good"
        assert {c["action"] for c in summary["children"]} == {"good", "bad"}

class TestCancellation:
    """Cancellation is observed between iterations"""

    def test_cancelled_before_start(self, search):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(SimulationCancelledError) as exc_info:
            search.search("root", two_move_expand, two_move_rollout, cancel_token=token)
        assert exc_info.value.completed == 0

    def test_cancelled_mid_search(self, search):
        token = CancellationToken()
        rollouts = []

        def rollout(state):
            rollouts.append(state)
            if len(rollouts) == 3:
                token.cancel()
            return REWARDS[state]

        with pytest.raises(SimulationCancelledError) as exc_info:
            search.search("root", two_move_expand, rollout, cancel_token=token)
        assert exc_info.value.completed == 3

class TestSearchTree:
    """Test the node arena directly"""

    def test_add_node_links_parent(self):
        tree = SearchTree("root")
        child = tree.add_node("child", parent=0, action="go")
        grandchild = tree.add_node("grandchild", parent=child)

        assert len(tree) == 3
        assert tree.root.children == [child]
        assert tree.nodes[grandchild].depth == 2
        assert tree.nodes[grandchild].parent == child

    def test_ucb1(self):
        tree = SearchTree("root")
        child = tree.add_node("child", parent=0)

        assert tree.ucb1(child, 10, math.sqrt(2)) == math.inf

        tree.nodes[child].visits = 4
        tree.nodes[child].value = 2.0
        expected = 0.5 + math.sqrt(2) * math.sqrt(math.log(10) / 4)
        assert tree.ucb1(child, 10, math.sqrt(2)) == pytest.approx(expected)

    def test_backpropagate_to_root(self):
        tree = SearchTree("root")
        child = tree.add_node("child", parent=0)
        leaf = tree.add_node("leaf", parent=child)

        tree.backpropagate(leaf, 0.75)

        for index in (0, child, leaf):
            assert tree.nodes[index].visits == 1
            assert tree.nodes[index].value == 0.75

    def test_best_path_follows_most_visited(self):
        tree = SearchTree("root")
        a = tree.add_node("a", parent=0, action="a")
        b = tree.add_node("b", parent=0, action="b")
        tree.nodes[a].visits = 3
        tree.nodes[b].visits = 7
        tree.nodes[b].value = 3.5

        path = tree.best_path()
        assert [step.action for step in path] == ["b"]
        assert path[0].avg_reward == 0.5

class TestEngineIntegration:
    """Tree search through the engine facade"""

    def test_default_simulation_budget(self, engine):
        result = engine.mcts("root", two_move_expand, two_move_rollout)

        assert result.total_simulations == 1000
        assert result.root_visits == 1000
        assert result.best_action == "good"
