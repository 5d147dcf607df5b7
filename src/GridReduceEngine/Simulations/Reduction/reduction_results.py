# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from __future__ import annotations

from typing import List, Union
import numpy as np
import pandas as pd

import GridReduceEngine.IO.matpower.matpower_branch_definitions as mpbr
from GridReduceEngine.IO.matpower.matpower_case import MatpowerCase
from GridReduceEngine.Topology.elimination import EquivalentEdge
from GridReduceEngine.basic_structures import IntVec, IntMat, Logger
from GridReduceEngine.enumerations import BranchCircuitTag


class ReductionResults:
    """
    Network reduction results
    """

    def __init__(self,
                 reduced_case: MatpowerCase,
                 link: IntMat,
                 branch_circuits: IntVec,
                 branch_tags: List[BranchCircuitTag],
                 equivalent_edges: Union[List[EquivalentEdge], None] = None,
                 not_eliminated: Union[IntVec, None] = None,
                 logger: Union[Logger, None] = None):
        """
        :param reduced_case: reduced MatpowerCase
        :param link: generators Link table (ngen x 2): original bus, destination bus
        :param branch_circuits: circuit number of every branch of the reduced case
        :param branch_tags: tag of every branch of the reduced case
        :param equivalent_edges: synthesized branches kept in the reduced case
        :param not_eliminated: external bus numbers that could not be eliminated
        :param logger: Logger
        """
        self.reduced_case = reduced_case

        self.link = link

        self.branch_circuits = branch_circuits

        self.branch_tags = branch_tags

        self.equivalent_edges = equivalent_edges if equivalent_edges is not None else list()

        self.not_eliminated = not_eliminated if not_eliminated is not None else np.zeros(0, dtype=int)

        self.logger = logger if logger is not None else Logger()

    @property
    def moved_generators(self) -> IntMat:
        """
        Rows of the Link table whose bus changed
        """
        return self.link[self.link[:, 0] != self.link[:, 1], :]

    def get_link_df(self) -> pd.DataFrame:
        """
        Link table as DataFrame
        """
        return pd.DataFrame(data=self.link, columns=['Original bus', 'New bus'])

    def get_branch_df(self) -> pd.DataFrame:
        """
        Branches of the reduced case with their circuit and tag
        """
        br = self.reduced_case.branch
        return pd.DataFrame(data={'From': br[:, mpbr.F_BUS].astype(int),
                                  'To': br[:, mpbr.T_BUS].astype(int),
                                  'x (p.u.)': br[:, mpbr.BR_X],
                                  'Circuit': self.branch_circuits,
                                  'Tag': [str(tg) for tg in self.branch_tags]})

    def summary(self) -> pd.DataFrame:
        """
        Summary of the reduced case
        """
        n_eq = sum(1 for tg in self.branch_tags if tg != BranchCircuitTag.Original)
        data = [['Buses', self.reduced_case.nbus],
                ['Branches', self.reduced_case.nbranch],
                ['Equivalent branches', n_eq],
                ['Generators', self.reduced_case.ngen],
                ['Moved generators', self.moved_generators.shape[0]],
                ['Not eliminated buses', len(self.not_eliminated)],
                ['Total load (MW)', self.reduced_case.total_load()]]
        return pd.DataFrame(data=data, columns=['Magnitude', 'Value']).set_index('Magnitude')
