# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple, Union
import numpy as np
from scipy.sparse import coo_matrix

import GridReduceEngine.IO.matpower.matpower_bus_definitions as mpb
import GridReduceEngine.IO.matpower.matpower_branch_definitions as mpbr
from GridReduceEngine.IO.matpower.matpower_case import MatpowerCase
from GridReduceEngine.Topology.renumbering import BusRenumbering
from GridReduceEngine.basic_structures import Vec, IntVec, BoolVec, CscMat
from GridReduceEngine.exceptions import ConfigurationError


def pair_key(i: int, j: int) -> Tuple[int, int]:
    """
    Unordered bus pair key
    """
    return (i, j) if i < j else (j, i)


@dataclass(frozen=True)
class BranchContribution:
    """
    Branch of the full model that contributes to an off-diagonal entry
    """
    branch_idx: int  # row in the branch table
    circuit: int  # circuit number among the branches of the same pair
    b: float  # contributed value (1/x)


class AdmittanceModel:
    """
    Sparse symmetric DC admittance structure (imaginary part of the Ybus with r = 0)
    Stored as one dictionary {neighbour: value} per node plus the diagonal vector,
    so that adding, updating or removing an entry is O(1).
    """

    def __init__(self, n: int):
        """
        :param n: number of nodes
        """
        self.n = n

        self.diag: Vec = np.zeros(n)

        # bus shunt susceptance (p.u.) as given at build time, already included in diag
        self.shunt: Vec = np.zeros(n)

        self.adj: List[Dict[int, float]] = [dict() for _ in range(n)]

        self.active: BoolVec = np.ones(n, dtype=bool)

        # (i, j) with i < j -> branches of the full model that produced the entry
        self.contributors: Dict[Tuple[int, int], List[BranchContribution]] = dict()

    def get(self, i: int, j: int) -> float:
        """
        Get entry (i, j)
        """
        if i == j:
            return self.diag[i]
        return self.adj[i].get(j, 0.0)

    def add_diagonal(self, i: int, val: float):
        self.diag[i] += val

    def add(self, i: int, j: int, val: float):
        """
        Add a value to the symmetric off-diagonal entries (i, j) and (j, i)
        """
        v = self.adj[i].get(j, 0.0) + val
        self.adj[i][j] = v
        self.adj[j][i] = v

    def remove(self, i: int, j: int):
        """
        Remove the symmetric off-diagonal entries (i, j) and (j, i)
        """
        self.adj[i].pop(j, None)
        self.adj[j].pop(i, None)

    def neighbours(self, k: int) -> Dict[int, float]:
        """
        Neighbours of k and their coupling value (do not modify the returned dictionary)
        """
        return self.adj[k]

    def degree(self, k: int) -> int:
        return len(self.adj[k])

    def remove_node(self, k: int):
        """
        Remove the node k and all its entries
        """
        for m in self.adj[k].keys():
            self.adj[m].pop(k, None)
        self.adj[k] = dict()
        self.diag[k] = 0.0
        self.shunt[k] = 0.0
        self.active[k] = False

    @property
    def nodes(self) -> IntVec:
        """
        Indices of the nodes still in the structure
        """
        return np.where(self.active)[0]

    def edges(self) -> List[Tuple[int, int, float]]:
        """
        Off-diagonal entries as (i, j, value) with i < j, sorted
        """
        lst = list()
        for i in self.nodes:
            for j, v in self.adj[i].items():
                if i < j:
                    lst.append((int(i), int(j), v))
        lst.sort()
        return lst

    def equivalent_shunts(self) -> Vec:
        """
        Shunt value of every node: the diagonal entry plus the row sum of the off-diagonals
        """
        sh = np.zeros(self.n)
        for i in self.nodes:
            sh[i] = self.diag[i] + sum(self.adj[i].values())
        return sh

    def copy(self) -> "AdmittanceModel":
        """
        Independent deep copy
        """
        cpy = AdmittanceModel(self.n)
        cpy.diag = self.diag.copy()
        cpy.shunt = self.shunt.copy()
        cpy.adj = [dict(d) for d in self.adj]
        cpy.active = self.active.copy()
        cpy.contributors = {key: list(val) for key, val in self.contributors.items()}
        return cpy

    def to_csc(self) -> CscMat:
        """
        Get the structure as a CSC sparse matrix (n x n, removed nodes are empty)
        """
        rows = list()
        cols = list()
        data = list()
        for i in self.nodes:
            rows.append(i)
            cols.append(i)
            data.append(self.diag[i])
            for j, v in self.adj[i].items():
                rows.append(i)
                cols.append(j)
                data.append(v)

        return coo_matrix((data, (rows, cols)), shape=(self.n, self.n)).tocsc()

    def check(self, renumbering: Union[BusRenumbering, None] = None, tol: float = 1e-9):
        """
        Check the symmetry and the diagonal dominance of the branch part of the structure
        (the bus shunts are left out of the dominance test)
        :param renumbering: BusRenumbering, used to report the original bus numbers
        :param tol: tolerance
        """

        def bus_name(idx: int) -> int:
            return int(renumbering.original[idx]) if renumbering is not None else int(idx)

        for i in self.nodes:
            if len(self.adj[i]) == 0 and abs(self.diag[i]) <= tol:
                raise ConfigurationError("Isolated bus in the admittance model", device=bus_name(i))

            for j, v in self.adj[i].items():
                if abs(self.adj[j].get(i, np.inf) - v) > tol:
                    raise ConfigurationError("Non symmetric admittance entry",
                                             device=f"{bus_name(i)}-{bus_name(j)}")

            off = sum(abs(v) for v in self.adj[i].values())
            if abs(self.diag[i] - self.shunt[i]) < off - tol * max(1.0, off):
                raise ConfigurationError("The admittance model is not diagonally dominant at bus",
                                         device=bus_name(i))


def build_admittance_model(case: MatpowerCase,
                           renumbering: BusRenumbering,
                           circuits: IntVec,
                           check: bool = True) -> AdmittanceModel:
    """
    Build the DC admittance structure of the case.
    For every in-service branch b = -1/x; the off-diagonal entries get -b and both diagonals +b.
    The bus shunt susceptance (BS / baseMVA) is added to the diagonal.
    :param case: MatpowerCase
    :param renumbering: BusRenumbering of the case buses
    :param circuits: circuit number of every branch
    :param check: check symmetry and diagonal dominance
    :return: AdmittanceModel
    """
    model = AdmittanceModel(renumbering.n)

    for k in range(case.nbranch):
        if case.branch[k, mpbr.BR_STATUS] <= 0:
            continue

        f_bus = int(case.branch[k, mpbr.F_BUS])
        t_bus = int(case.branch[k, mpbr.T_BUS])
        x = case.branch[k, mpbr.BR_X]

        if x == 0.0:
            raise ConfigurationError("Zero reactance branch", device=f"{k} ({f_bus}-{t_bus})")

        if f_bus == t_bus:
            raise ConfigurationError("Branch connected to the same bus at both ends",
                                     device=f"{k} ({f_bus}-{t_bus})")

        i = renumbering.index.get(f_bus, None)
        j = renumbering.index.get(t_bus, None)
        if i is None or j is None:
            raise ConfigurationError("Branch connected to an unknown bus", device=f"{k} ({f_bus}-{t_bus})")

        b = -1.0 / x
        model.add(i, j, -b)
        model.add_diagonal(i, b)
        model.add_diagonal(j, b)

        key = pair_key(i, j)
        if key not in model.contributors:
            model.contributors[key] = list()
        model.contributors[key].append(BranchContribution(branch_idx=k, circuit=int(circuits[k]), b=-b))

    bs = case.bus[:, mpb.BS] / case.baseMVA
    for i in range(case.nbus):
        model.add_diagonal(i, bs[i])
    model.shunt += bs

    if check:
        model.check(renumbering=renumbering)

    return model
