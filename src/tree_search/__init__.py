"""
Monte Carlo Tree Search package
"""

from .mcts import (
    MonteCarloTreeSearch,
    SearchTree,
    MCTSNode,
    MCTSResult,
    Expansion,
    PathStep,
    ChildStats,
)

__all__ = [
    "MonteCarloTreeSearch",
    "SearchTree",
    "MCTSNode",
    "MCTSResult",
    "Expansion",
    "PathStep",
    "ChildStats",
]
