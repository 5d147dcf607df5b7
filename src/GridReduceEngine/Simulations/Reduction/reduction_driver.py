# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from __future__ import annotations

from typing import Iterable, Union
import numpy as np

import GridReduceEngine.IO.matpower.matpower_branch_definitions as mpbr
from GridReduceEngine.IO.matpower.matpower_case import MatpowerCase
from GridReduceEngine.Simulations.driver_template import DriverTemplate
from GridReduceEngine.Simulations.Reduction.reduction_options import ReductionOptions
from GridReduceEngine.Simulations.Reduction.reduction_results import ReductionResults
from GridReduceEngine.Topology.admittance_model import build_admittance_model
from GridReduceEngine.Topology.elimination import tag_equivalent_edges
from GridReduceEngine.Topology.generator_relocation import relocate_generators, update_bus_types
from GridReduceEngine.Topology.load_redistribution import (redistribute_loads_proportional,
                                                           redistribute_loads_flow_fidelity)
from GridReduceEngine.Topology.network_reduction import dual_pass_reduction, build_reduced_case, post_filter
from GridReduceEngine.Topology.preprocessing import preprocess_case, check_external_buses, check_dc_terminals
from GridReduceEngine.Topology.renumbering import BusRenumbering, assign_circuit_numbers
from GridReduceEngine.basic_structures import Logger
from GridReduceEngine.enumerations import SimulationTypes, LoadRedistributionMode, BranchCircuitTag


def no_reduction_results(case: MatpowerCase, logger: Logger) -> ReductionResults:
    """
    Results of reducing nothing: a copy of the case and the identity Link table
    """
    gen_buses = case.get_gen_bus_numbers()
    return ReductionResults(reduced_case=case.copy(),
                            link=np.c_[gen_buses, gen_buses].astype(int).reshape(-1, 2),
                            branch_circuits=assign_circuit_numbers(case.branch[:, mpbr.F_BUS].astype(int),
                                                                   case.branch[:, mpbr.T_BUS].astype(int)),
                            branch_tags=[BranchCircuitTag.Original] * case.nbranch,
                            logger=logger)


def reduce_case(case: MatpowerCase,
                external_buses: Iterable[int],
                options: ReductionOptions,
                logger: Logger) -> ReductionResults:
    """
    Reduce the case eliminating the external buses
    :param case: MatpowerCase (not modified)
    :param external_buses: bus numbers to eliminate
    :param options: ReductionOptions
    :param logger: Logger
    :return: ReductionResults
    """
    external = check_external_buses(case, external_buses)
    check_dc_terminals(case, external)

    if options.preprocess:
        full, external = preprocess_case(case, external, logger=logger)
    else:
        full = case.copy()

    if len(external) == 0:
        logger.add_info("No external buses")
        return no_reduction_results(case, logger)

    renumbering = BusRenumbering(full.bus_numbers)
    circuits = assign_circuit_numbers(full.branch[:, mpbr.F_BUS].astype(int),
                                      full.branch[:, mpbr.T_BUS].astype(int))
    model = build_admittance_model(full, renumbering=renumbering, circuits=circuits)

    external_idx = renumbering.translate_external(external)
    gen_idx = renumbering.to_internal(np.unique(full.get_gen_bus_numbers()))

    dual = dual_pass_reduction(model=model,
                               external_idx=external_idx,
                               gen_idx=gen_idx,
                               tolerance=options.tolerance,
                               renumbering=renumbering,
                               logger=logger,
                               parallel=options.parallel_passes)

    equivalent_edges = tag_equivalent_edges(reduced=dual.pass_a.model,
                                            original=model,
                                            renumbering=renumbering,
                                            tolerance=options.tolerance)

    link = relocate_generators(gen_buses=full.get_gen_bus_numbers(),
                               retained_a=dual.pass_a.retained,
                               model_b=dual.pass_b.model,
                               renumbering=renumbering,
                               logger=logger)

    reduced, branch_circuits, branch_tags = build_reduced_case(full_case=full,
                                                               renumbering=renumbering,
                                                               pass_a=dual.pass_a,
                                                               equivalent_edges=equivalent_edges,
                                                               link=link,
                                                               logger=logger)
    update_bus_types(reduced, full, link, logger)

    if options.load_redistribution_mode == LoadRedistributionMode.FlowFidelity:
        redistribute_loads_flow_fidelity(full_case=full,
                                         reduced_case=reduced,
                                         branch_tags=branch_tags,
                                         dc_flow_service=options.dc_flow_service,
                                         flow_tolerance=options.flow_tolerance,
                                         logger=logger)
    else:
        redistribute_loads_proportional(full_case=full,
                                        reduced_case=reduced,
                                        renumbering=renumbering,
                                        distribution_factors=dual.pass_a.distribution_factors,
                                        logger=logger)

    n_original = len(branch_tags) - len(equivalent_edges)
    reduced, branch_circuits, branch_tags, deleted = post_filter(case=reduced,
                                                                 circuits=branch_circuits,
                                                                 tags=branch_tags,
                                                                 max_x=full.max_branch_reactance(),
                                                                 factor=options.prune_factor,
                                                                 logger=logger)
    equivalent_edges = [e for e, d in zip(equivalent_edges, deleted[n_original:]) if not d]

    results = ReductionResults(reduced_case=reduced,
                               link=link,
                               branch_circuits=branch_circuits,
                               branch_tags=branch_tags,
                               equivalent_edges=equivalent_edges,
                               not_eliminated=renumbering.original[dual.pass_a.not_eliminated],
                               logger=logger)

    logger.add_info("Buses in the reduced model", value=reduced.nbus)
    logger.add_info("Branches in the reduced model", value=reduced.nbranch)
    logger.add_info("Equivalent branches in the reduced model", value=len(equivalent_edges))
    logger.add_info("Generators moved", value=results.moved_generators.shape[0])

    return results


class NetworkReductionDriver(DriverTemplate):
    """
    Network reduction driver
    """
    tpe = SimulationTypes.NetworkReduction_run
    name = tpe.value

    def __init__(self,
                 case: MatpowerCase,
                 external_buses: Iterable[int],
                 options: Union[ReductionOptions, None] = None):
        """
        NetworkReductionDriver constructor
        :param case: MatpowerCase instance
        :param external_buses: bus numbers to eliminate
        :param options: ReductionOptions
        """
        DriverTemplate.__init__(self, case=case)

        self.external_buses = list(external_buses)

        self.options = options if options is not None else ReductionOptions()

        self.results: Union[ReductionResults, None] = None

    def run(self):
        """
        Run the reduction
        """
        self.tic()
        self.results = None
        self.report_text("Reducing the network...")

        self.results = reduce_case(case=self.case,
                                   external_buses=self.external_buses,
                                   options=self.options,
                                   logger=self.logger)

        self.toc()
        self.report_done()
