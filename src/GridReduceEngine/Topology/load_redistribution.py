# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from __future__ import annotations

from typing import Callable, Dict, List, Tuple, Union
import numpy as np

import GridReduceEngine.IO.matpower.matpower_bus_definitions as mpb
import GridReduceEngine.IO.matpower.matpower_branch_definitions as mpbr
from GridReduceEngine.IO.matpower.matpower_case import MatpowerCase
from GridReduceEngine.Simulations.PowerFlow.dc_power_flow import (DcPowerFlowResults, build_b_matrices,
                                                                  get_bus_injections)
from GridReduceEngine.Topology.renumbering import BusRenumbering
from GridReduceEngine.basic_structures import Vec, Logger
from GridReduceEngine.enumerations import BranchCircuitTag
from GridReduceEngine.exceptions import PowerFlowError, ServiceUnavailableError

DcFlowService = Callable[[MatpowerCase], DcPowerFlowResults]


def push_values(values: Vec, distribution_factors: List[Tuple[int, Dict[int, float]]]) -> Vec:
    """
    Push the values of the eliminated nodes onto their neighbours, in elimination order.
    A node eliminated later carries on what it received from the previous ones.
    :param values: value per node index (not modified)
    :param distribution_factors: (node, {neighbour: fraction}) in elimination order
    :return: values after the redistribution (zero on the eliminated nodes)
    """
    val = values.astype(float).copy()
    for k, fractions in distribution_factors:
        vk = val[k]
        if vk != 0.0:
            for m, frac in fractions.items():
                val[m] += vk * frac
        val[k] = 0.0
    return val


def redistribute_loads_proportional(full_case: MatpowerCase,
                                    reduced_case: MatpowerCase,
                                    renumbering: BusRenumbering,
                                    distribution_factors: List[Tuple[int, Dict[int, float]]],
                                    logger: Logger):
    """
    Set the loads of the reduced case by moving the load of every eliminated bus
    onto its neighbours at the moment of its elimination, proportionally to |w(k, m)|
    :param full_case: full MatpowerCase (renumbering order)
    :param reduced_case: reduced MatpowerCase (modified in-place)
    :param renumbering: BusRenumbering of the full case
    :param distribution_factors: elimination factors of the pass that eliminated all the external buses
    :param logger: Logger
    """
    pd_new = push_values(full_case.bus[:, mpb.PD], distribution_factors)
    qd_new = push_values(full_case.bus[:, mpb.QD], distribution_factors)

    idx = renumbering.to_internal(reduced_case.bus_numbers)

    moved = np.abs(pd_new[idx] - full_case.bus[idx, mpb.PD]) > 1e-12
    reduced_case.bus[:, mpb.PD] = pd_new[idx]
    reduced_case.bus[:, mpb.QD] = qd_new[idx]

    logger.add_info("Loads redistributed proportionally", value=int(np.sum(moved)))


def _solve(service: Union[DcFlowService, None], case: MatpowerCase) -> DcPowerFlowResults:
    """
    Call the DC power flow service translating its failures
    """
    if service is None:
        raise ServiceUnavailableError()

    try:
        res = service(case)
    except PowerFlowError as e:
        raise ServiceUnavailableError(f"The DC power flow failed: {e}") from e

    if res is None or not np.all(np.isfinite(res.theta)) or not np.all(np.isfinite(res.Pf)):
        raise ServiceUnavailableError("The DC power flow did not produce a valid solution")

    return res


def check_flow_fidelity(full_case: MatpowerCase,
                        full_res: DcPowerFlowResults,
                        reduced_case: MatpowerCase,
                        reduced_res: DcPowerFlowResults,
                        branch_tags: List[BranchCircuitTag],
                        flow_tolerance: float,
                        logger: Logger) -> float:
    """
    Compare the flows of the original branches kept in the reduced case with the full case flows
    :return: largest deviation found (MW)
    """
    full_flow = {(int(f), int(t)): list() for f, t in zip(full_res.F, full_res.T)}
    for f, t, pf in zip(full_res.F, full_res.T, full_res.Pf):
        full_flow[(int(f), int(t))].append(pf)

    # branches between the same buses keep their relative order in both tables
    seen: Dict[Tuple[int, int], int] = dict()
    max_dev = 0.0
    for k in range(reduced_case.nbranch):
        if branch_tags[k] != BranchCircuitTag.Original:
            continue

        key = (int(reduced_case.branch[k, mpbr.F_BUS]), int(reduced_case.branch[k, mpbr.T_BUS]))
        pos = seen.get(key, 0)
        seen[key] = pos + 1

        lst = full_flow.get(key, [])
        if pos >= len(lst):
            continue

        dev = abs(reduced_res.Pf[k] - lst[pos])
        max_dev = max(max_dev, dev)
        if dev > flow_tolerance:
            logger.add_divergence("Retained branch flow deviates from the full case",
                                  device=f"{key[0]}-{key[1]}",
                                  value=reduced_res.Pf[k],
                                  expected_value=lst[pos],
                                  tol=flow_tolerance,
                                  device_class="Branch")

    return max_dev


def redistribute_loads_flow_fidelity(full_case: MatpowerCase,
                                     reduced_case: MatpowerCase,
                                     branch_tags: List[BranchCircuitTag],
                                     dc_flow_service: Union[DcFlowService, None],
                                     flow_tolerance: float,
                                     logger: Logger):
    """
    Set the loads of the reduced case so that its DC power flow reproduces the angles
    of the retained buses in the full case DC power flow:

        P_target = B_red theta_R
        Pd = Pg - P_target

    The difference against the full case total load is put on the reference bus,
    which does not alter the angles since the B rows sum zero.
    :param full_case: full MatpowerCase
    :param reduced_case: reduced MatpowerCase with the generators already relocated (modified in-place)
    :param branch_tags: tag of every branch of the reduced case
    :param dc_flow_service: function case -> DcPowerFlowResults
    :param flow_tolerance: allowed deviation of the retained branch flows (MW)
    :param logger: Logger
    """
    full_res = _solve(dc_flow_service, full_case)

    angle = {int(b): th for b, th in zip(full_res.bus_numbers, full_res.theta)}
    theta_r = np.array([angle[int(b)] for b in reduced_case.bus_numbers])

    Bbus, _ = build_b_matrices(reduced_case)
    p_target = (Bbus @ theta_r) * reduced_case.baseMVA

    # generation only: the current demand is overwritten
    pg = get_bus_injections(reduced_case) + reduced_case.bus[:, mpb.PD]
    pd_new = pg - p_target

    ref = np.where(reduced_case.bus[:, mpb.BUS_TYPE] == mpb.REF)[0]
    if len(ref) == 0:
        raise ServiceUnavailableError("The reduced case has no reference bus")

    residual = full_case.total_load() - float(np.sum(pd_new))
    pd_new[ref[0]] += residual

    reduced_case.bus[:, mpb.PD] = pd_new
    logger.add_info("Load balance placed on the reference bus", device=int(reduced_case.bus[ref[0], mpb.BUS_I]),
                    value=residual, device_class="Bus")

    reduced_res = _solve(dc_flow_service, reduced_case)
    max_dev = check_flow_fidelity(full_case=full_case,
                                  full_res=full_res,
                                  reduced_case=reduced_case,
                                  reduced_res=reduced_res,
                                  branch_tags=branch_tags,
                                  flow_tolerance=flow_tolerance,
                                  logger=logger)

    logger.add_info("Maximum retained branch flow deviation (MW)", value=max_dev)
