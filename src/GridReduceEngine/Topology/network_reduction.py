# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Tuple, Union
import numpy as np

import GridReduceEngine.IO.matpower.matpower_bus_definitions as mpb
import GridReduceEngine.IO.matpower.matpower_branch_definitions as mpbr
import GridReduceEngine.IO.matpower.matpower_gen_definitions as mpg
from GridReduceEngine.IO.matpower.matpower_case import MatpowerCase
from GridReduceEngine.Topology.admittance_model import AdmittanceModel
from GridReduceEngine.Topology.elimination import EliminationResult, EquivalentEdge, eliminate_nodes
from GridReduceEngine.Topology.renumbering import BusRenumbering, assign_circuit_numbers
from GridReduceEngine.basic_structures import IntVec, IntMat, BoolVec, Logger
from GridReduceEngine.enumerations import BranchCircuitTag


@dataclass
class DualPassResult:
    """
    Result of the two reductions of the same admittance model
    """
    # all the external buses eliminated
    pass_a: EliminationResult

    # only the external buses without generators eliminated
    pass_b: EliminationResult


def dual_pass_reduction(model: AdmittanceModel,
                        external_idx: IntVec,
                        gen_idx: IntVec,
                        tolerance: float,
                        renumbering: BusRenumbering,
                        logger: Logger,
                        parallel: bool = False) -> DualPassResult:
    """
    Reduce two independent copies of the admittance model:
    pass A eliminates every external bus, pass B the external buses that hold no generator.
    :param model: full AdmittanceModel (not modified)
    :param external_idx: node indices of the external buses
    :param gen_idx: node indices of the generator buses
    :param tolerance: pivot tolerance
    :param renumbering: BusRenumbering
    :param logger: Logger
    :param parallel: run both passes at the same time
    :return: DualPassResult
    """
    external_idx = np.unique(np.array(external_idx, dtype=int))
    external_non_gen = np.setdiff1d(external_idx, np.array(gen_idx, dtype=int))

    logger_a = Logger()
    logger_b = Logger()

    def run_a() -> EliminationResult:
        return eliminate_nodes(model=model, nodes=external_idx, tolerance=tolerance,
                               renumbering=renumbering, logger=logger_a)

    def run_b() -> EliminationResult:
        return eliminate_nodes(model=model, nodes=external_non_gen, tolerance=tolerance,
                               renumbering=renumbering, logger=logger_b)

    if parallel:
        with ThreadPoolExecutor(max_workers=2) as executor:
            future_a = executor.submit(run_a)
            future_b = executor.submit(run_b)
            res_a = future_a.result()
            res_b = future_b.result()
    else:
        res_a = run_a()
        res_b = run_b()

    logger += logger_a
    logger += logger_b

    return DualPassResult(pass_a=res_a, pass_b=res_b)


def build_reduced_case(full_case: MatpowerCase,
                       renumbering: BusRenumbering,
                       pass_a: EliminationResult,
                       equivalent_edges: List[EquivalentEdge],
                       link: IntMat,
                       logger: Logger) -> Tuple[MatpowerCase, IntVec, List[BranchCircuitTag]]:
    """
    Compose the reduced case:
    retained buses, surviving branches plus the equivalent ones, equivalent shunts and moved generators.
    :param full_case: full MatpowerCase (renumbering order, not modified)
    :param renumbering: BusRenumbering
    :param pass_a: EliminationResult of the pass eliminating all the external buses
    :param equivalent_edges: list of synthesized branches
    :param link: generators Link table
    :param logger: Logger
    :return: reduced case, circuit number of every branch, tag of every branch
    """
    case = full_case.copy()
    retained_idx = pass_a.retained
    keep_bus = np.zeros(full_case.nbus, dtype=bool)
    keep_bus[retained_idx] = True
    kept_numbers = renumbering.original[retained_idx]

    # equivalent shunts, only where the elimination changed them
    bs_new = pass_a.model.equivalent_shunts()[keep_bus] * full_case.baseMVA
    bs_old = full_case.bus[keep_bus, mpb.BS]
    changed = ~np.isclose(bs_new, bs_old, rtol=0.0, atol=1e-9)

    case.bus = full_case.bus[keep_bus, :].copy()
    case.bus[changed, mpb.BS] = bs_new[changed]
    if full_case.bus_name is not None:
        case.bus_name = [nm for nm, k in zip(full_case.bus_name, keep_bus) if k]

    if np.any(changed):
        logger.add_info("Equivalent shunts added", value=int(np.sum(changed)))

    # surviving branches
    f = full_case.branch[:, mpbr.F_BUS].astype(int)
    t = full_case.branch[:, mpbr.T_BUS].astype(int)
    keep_br = np.isin(f, kept_numbers) & np.isin(t, kept_numbers)
    original_branches = full_case.branch[keep_br, :]
    circuits = assign_circuit_numbers(f, t)[keep_br]

    eq_branches = np.zeros((len(equivalent_edges), full_case.branch.shape[1]))
    for k, edge in enumerate(equivalent_edges):
        eq_branches[k, mpbr.F_BUS] = edge.f
        eq_branches[k, mpbr.T_BUS] = edge.t
        eq_branches[k, mpbr.BR_X] = edge.x
        eq_branches[k, mpbr.BR_STATUS] = 1
        eq_branches[k, mpbr.ANGMIN] = -360
        eq_branches[k, mpbr.ANGMAX] = 360

    case.branch = np.r_[original_branches, eq_branches]
    circuits = np.r_[circuits, np.array([e.circuit for e in equivalent_edges], dtype=int)]
    tags = [BranchCircuitTag.Original] * len(original_branches) + [e.tag for e in equivalent_edges]

    # generators
    case.gen = full_case.gen.copy()
    if case.ngen:
        case.gen[:, mpg.GEN_BUS] = link[:, 1]

    return case, circuits, tags


def post_filter(case: MatpowerCase,
                circuits: IntVec,
                tags: List[BranchCircuitTag],
                max_x: float,
                factor: float = 10.0,
                logger: Union[Logger, None] = None) -> Tuple[MatpowerCase, IntVec, List[BranchCircuitTag], BoolVec]:
    """
    Delete the synthesized branches whose reactance is larger than factor times
    the largest reactance of the full model
    :param case: reduced MatpowerCase (modified in-place)
    :param circuits: circuit number of every branch
    :param tags: tag of every branch
    :param max_x: largest |x| of the full model
    :param factor: multiplier of max_x over which a synthesized branch is deleted
    :param logger: Logger
    :return: case, circuits, tags, mask of the deleted branches
    """
    if logger is None:
        logger = Logger()

    synthesized = np.array([tg != BranchCircuitTag.Original for tg in tags], dtype=bool)
    large = np.abs(case.branch[:, mpbr.BR_X]) > factor * max_x if case.nbranch else np.zeros(0, dtype=bool)
    delete = synthesized & large

    for k in np.where(delete)[0]:
        logger.add_info("Large reactance equivalent branch deleted",
                        device=f"{int(case.branch[k, mpbr.F_BUS])}-{int(case.branch[k, mpbr.T_BUS])}",
                        value=case.branch[k, mpbr.BR_X],
                        expected_value=factor * max_x,
                        device_class="Branch")

    keep = ~delete
    case.branch = case.branch[keep, :]
    circuits = np.array(circuits, dtype=int)[keep]
    tags = [tg for tg, k in zip(tags, keep) if k]

    return case, circuits, tags, delete
