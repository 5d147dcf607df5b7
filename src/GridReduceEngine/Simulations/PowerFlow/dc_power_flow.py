# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from __future__ import annotations

from typing import Tuple, Union
import numpy as np
import pandas as pd
from scipy.sparse import coo_matrix
from scipy.sparse.linalg import spsolve

import GridReduceEngine.IO.matpower.matpower_bus_definitions as mpb
import GridReduceEngine.IO.matpower.matpower_branch_definitions as mpbr
import GridReduceEngine.IO.matpower.matpower_gen_definitions as mpg
from GridReduceEngine.IO.matpower.matpower_case import MatpowerCase
from GridReduceEngine.basic_structures import Vec, IntVec, CscMat
from GridReduceEngine.exceptions import SlackError, SingularSystemError


class DcPowerFlowResults:
    """
    DC power flow results
    """

    def __init__(self,
                 bus_numbers: IntVec,
                 theta: Vec,
                 Pbus: Vec,
                 F: IntVec,
                 T: IntVec,
                 Pf: Vec):
        """
        :param bus_numbers: bus numbers
        :param theta: bus voltage angles (rad)
        :param Pbus: bus injections (MW), including the slack balance
        :param F: from bus number of the branches
        :param T: to bus number of the branches
        :param Pf: branch flows (MW)
        """
        self.bus_numbers = bus_numbers
        self.theta = theta
        self.Pbus = Pbus
        self.F = F
        self.T = T
        self.Pf = Pf

    def get_bus_df(self) -> pd.DataFrame:
        """
        Bus results DataFrame
        """
        return pd.DataFrame(data={'Va (deg)': np.rad2deg(self.theta), 'P (MW)': self.Pbus},
                            index=pd.Index(self.bus_numbers, name='Bus'))

    def get_branch_df(self) -> pd.DataFrame:
        """
        Branch results DataFrame
        """
        return pd.DataFrame(data={'From': self.F, 'To': self.T, 'Pf (MW)': self.Pf})


def build_b_matrices(case: MatpowerCase) -> Tuple[CscMat, CscMat]:
    """
    DC susceptance matrices of the case, with b = 1/x for the in-service branches
    (taps, phase shifts, shunts and resistances are neglected)
    :param case: MatpowerCase
    :return: Bbus (nbus x nbus), Bf (nbranch x nbus)
    """
    bus_dict = case.get_bus_index_dict()
    nb = case.nbus
    nl = case.nbranch

    f = np.array([bus_dict[int(b)] for b in case.branch[:, mpbr.F_BUS]], dtype=int)
    t = np.array([bus_dict[int(b)] for b in case.branch[:, mpbr.T_BUS]], dtype=int)

    active = case.branch[:, mpbr.BR_STATUS] > 0
    if np.any(case.branch[active, mpbr.BR_X] == 0.0):
        raise SingularSystemError("Zero reactance branches cannot be modelled in the DC power flow")

    b = np.zeros(nl)
    b[active] = 1.0 / case.branch[active, mpbr.BR_X]

    rows = np.r_[np.arange(nl), np.arange(nl)]
    Cft = coo_matrix((np.r_[np.ones(nl), -np.ones(nl)], (rows, np.r_[f, t])), shape=(nl, nb)).tocsc()

    Bf = coo_matrix((np.r_[b, -b], (rows, np.r_[f, t])), shape=(nl, nb)).tocsc()
    Bbus = (Cft.T @ Bf).tocsc()

    return Bbus, Bf


def get_bus_injections(case: MatpowerCase) -> Vec:
    """
    Specified active power injection of every bus: generation - demand (MW)
    :param case: MatpowerCase
    :return: injections in bus table order
    """
    bus_dict = case.get_bus_index_dict()
    P = -case.bus[:, mpb.PD].copy()
    for g in range(case.ngen):
        if case.gen[g, mpg.GEN_STATUS] > 0:
            P[bus_dict[int(case.gen[g, mpg.GEN_BUS])]] += case.gen[g, mpg.PG]
    return P


def dc_power_flow(case: MatpowerCase, Pbus: Union[Vec, None] = None) -> DcPowerFlowResults:
    """
    Solve the DC power flow B theta = P with the reference buses angle fixed to zero.
    :param case: MatpowerCase
    :param Pbus: bus injections (MW) in bus table order, if None they are computed from the case
    :return: DcPowerFlowResults
    """
    if Pbus is None:
        Pbus = get_bus_injections(case)

    is_ref = case.bus[:, mpb.BUS_TYPE] == mpb.REF
    if not np.any(is_ref):
        raise SlackError("The DC power flow needs a reference bus")

    Bbus, Bf = build_b_matrices(case)
    pvpq = np.where(~is_ref)[0]

    theta = np.zeros(case.nbus)

    if len(pvpq):
        Bpp = Bbus[np.ix_(pvpq, pvpq)].tocsc()
        try:
            theta[pvpq] = np.atleast_1d(spsolve(Bpp, Pbus[pvpq] / case.baseMVA))
        except RuntimeError as e:
            raise SingularSystemError(str(e)) from e

        if not np.all(np.isfinite(theta)):
            raise SingularSystemError()

    Pf = (Bf @ theta) * case.baseMVA
    Pcalc = (Bbus @ theta) * case.baseMVA

    return DcPowerFlowResults(bus_numbers=case.bus_numbers,
                              theta=theta,
                              Pbus=Pcalc,
                              F=case.branch[:, mpbr.F_BUS].astype(int),
                              T=case.branch[:, mpbr.T_BUS].astype(int),
                              Pf=Pf)
