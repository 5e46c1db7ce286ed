"""
policy/base.py

Abstract base class for policy engine implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from crossref.join_index import JoinIndex
    from crossref.records import FleetModel
    from policy.engine import PolicyFinding


class BasePolicyEngine(ABC):
    """
    Contract for policy engine implementations.

    Subclasses receive the target fleet population and the join index and
    return one finding per model. No I/O and no side effects are permitted
    inside :meth:`evaluate`; calling it twice on the same inputs must give
    the same result.
    """

    @abstractmethod
    def evaluate(
        self,
        fleet: Iterable["FleetModel"],
        join_index: "JoinIndex",
    ) -> list["PolicyFinding"]:
        """
        Evaluate commercial policy for every model in *fleet*.

        Parameters
        ----------
        fleet:
            Models to evaluate, usually the top priority category only.

        join_index:
            Products joined to fleet models by numeric model id.

        Returns
        -------
        list[PolicyFinding]
            Findings ordered from most to least severe.
        """
