# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
"""
Sequential Kron (Ward) elimination of buses from a DC admittance structure.

Eliminating the bus k from the structure is the star-mesh transform:

    w'(m, n) = w(m, n) - w(k, m) * w(k, n) / w(k, k)

for every pair of neighbours (m, n) of k, including m = n. Doing it one bus
at a time over a dictionary based sparse structure avoids the dense fill-in
of the block Schur complement and lets us know which entries are new.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Iterable, Union
import numpy as np

from GridReduceEngine.Topology.admittance_model import AdmittanceModel
from GridReduceEngine.Topology.renumbering import BusRenumbering
from GridReduceEngine.basic_structures import IntVec, Logger
from GridReduceEngine.enumerations import BranchCircuitTag
from GridReduceEngine.exceptions import NumericalDegeneracyError

# circuit number given to the equivalent branches between buses that were not connected
EQUIVALENT_CIRCUIT = 99


@dataclass
class EquivalentEdge:
    """
    Branch synthesized by the elimination
    """
    f: int  # from bus number (original numbering)
    t: int  # to bus number (original numbering)
    b: float  # off-diagonal value of the admittance structure (1/x)
    circuit: int
    tag: BranchCircuitTag

    @property
    def x(self) -> float:
        """
        Equivalent branch reactance
        """
        return 1.0 / self.b


@dataclass
class EliminationResult:
    """
    Result of eliminating a set of nodes
    """
    model: AdmittanceModel

    # nodes in the order they were eliminated
    eliminated: IntVec

    # nodes that could not be eliminated (no neighbours left)
    not_eliminated: IntVec

    # (node, {neighbour: fraction}) for every eliminated node, in elimination order
    distribution_factors: List[Tuple[int, Dict[int, float]]] = field(default_factory=list)

    @property
    def retained(self) -> IntVec:
        """
        Nodes remaining in the reduced structure
        """
        return self.model.nodes


def eliminate_node(model: AdmittanceModel, k: int, tolerance: float = 1e-10) -> Dict[int, float]:
    """
    Eliminate the node k from the structure (in-place)
    :param model: AdmittanceModel
    :param k: node index
    :param tolerance: relative tolerance under which the self admittance is considered zero
    :return: {neighbour: coupling fraction} of k at the moment of its elimination
    """
    nbrs = sorted(model.neighbours(k).items())
    wkk = model.diag[k]

    total = sum(abs(w) for _, w in nbrs)

    if abs(wkk) <= tolerance * max(1.0, total):
        raise NumericalDegeneracyError(bus=k, value=wkk)

    for a, (m, wkm) in enumerate(nbrs):
        model.add_diagonal(m, -wkm * wkm / wkk)

        for n, wkn in nbrs[a + 1:]:
            model.add(m, n, -wkm * wkn / wkk)

    model.remove_node(k)

    if total == 0.0:
        return {m: 1.0 / len(nbrs) for m, _ in nbrs}

    return {m: abs(w) / total for m, w in nbrs}


def eliminate_nodes(model: AdmittanceModel,
                    nodes: Iterable[int],
                    tolerance: float = 1e-10,
                    renumbering: Union[BusRenumbering, None] = None,
                    logger: Union[Logger, None] = None,
                    in_place: bool = False) -> EliminationResult:
    """
    Eliminate a set of nodes one by one in ascending index order
    :param model: AdmittanceModel (copied unless in_place)
    :param nodes: indices of the nodes to eliminate
    :param tolerance: relative tolerance under which the self admittance is considered zero
    :param renumbering: BusRenumbering, used to report the original bus numbers
    :param logger: Logger
    :param in_place: eliminate over the given structure instead of a copy
    :return: EliminationResult
    """
    if logger is None:
        logger = Logger()

    if not in_place:
        model = model.copy()

    def bus_name(idx: int) -> int:
        return int(renumbering.original[idx]) if renumbering is not None else int(idx)

    eliminated = list()
    not_eliminated = list()
    factors = list()

    for k in sorted(set(int(x) for x in nodes)):

        if not model.active[k]:
            continue

        if model.degree(k) == 0:
            # nothing to re-distribute over, it stays
            logger.add_warning("Bus without neighbours cannot be eliminated", device=bus_name(k),
                               device_class="Bus")
            not_eliminated.append(k)
            continue

        try:
            fractions = eliminate_node(model=model, k=k, tolerance=tolerance)
        except NumericalDegeneracyError as e:
            raise NumericalDegeneracyError(bus=bus_name(k), value=e.value) from e

        eliminated.append(k)
        factors.append((int(k), fractions))

    logger.add_info("Buses eliminated", value=len(eliminated))

    return EliminationResult(model=model,
                             eliminated=np.array(eliminated, dtype=int),
                             not_eliminated=np.array(not_eliminated, dtype=int),
                             distribution_factors=factors)


def tag_equivalent_edges(reduced: AdmittanceModel,
                         original: AdmittanceModel,
                         renumbering: BusRenumbering,
                         tolerance: float = 1e-10) -> List[EquivalentEdge]:
    """
    Compare the reduced structure with the full one and produce the synthesized branches.
    - pairs that were not connected: Equivalent branch with circuit 99
    - pairs that were connected and whose value changed: Parallel branch with the next free circuit number
    - pairs that were connected and did not change: nothing, the original branches stay
    :param reduced: reduced AdmittanceModel
    :param original: full AdmittanceModel (the one holding the branch contributors)
    :param renumbering: BusRenumbering
    :param tolerance: relative tolerance to consider an entry changed
    :return: list of EquivalentEdge
    """
    edges = list()

    for i, j, v in reduced.edges():

        contrib = original.contributors.get((i, j), None)
        f = int(renumbering.original[i])
        t = int(renumbering.original[j])

        if contrib is None:
            if abs(v) > tolerance:
                edges.append(EquivalentEdge(f=f, t=t, b=v,
                                            circuit=EQUIVALENT_CIRCUIT,
                                            tag=BranchCircuitTag.Equivalent))
        else:
            v0 = sum(c.b for c in contrib)
            delta = v - v0
            if abs(delta) > tolerance * max(1.0, abs(v0)):
                edges.append(EquivalentEdge(f=f, t=t, b=delta,
                                            circuit=max(c.circuit for c in contrib) + 1,
                                            tag=BranchCircuitTag.Parallel))

    return edges
