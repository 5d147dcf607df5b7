# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from __future__ import annotations

from typing import Union

from GridReduceEngine.Simulations.options_template import OptionsTemplate
from GridReduceEngine.Simulations.PowerFlow.dc_power_flow import dc_power_flow
from GridReduceEngine.Topology.load_redistribution import DcFlowService
from GridReduceEngine.enumerations import LoadRedistributionMode


class ReductionOptions(OptionsTemplate):
    """
    Network reduction options
    """

    def __init__(self,
                 load_redistribution_mode: LoadRedistributionMode = LoadRedistributionMode.Proportional,
                 dc_flow_service: Union[DcFlowService, None] = dc_power_flow,
                 tolerance: float = 1e-10,
                 prune_factor: float = 10.0,
                 flow_tolerance: float = 1e-3,
                 parallel_passes: bool = False,
                 preprocess: bool = True):
        """
        Network reduction options
        :param load_redistribution_mode: how the load of the eliminated buses is moved to the retained ones
        :param dc_flow_service: DC power flow function (case -> DcPowerFlowResults), used in the flow fidelity mode
        :param tolerance: relative tolerance under which a self admittance is considered zero
        :param prune_factor: equivalent branches with |x| over prune_factor times the largest reactance are deleted
        :param flow_tolerance: allowed deviation (MW) of the retained branch flows in the flow fidelity mode
        :param parallel_passes: run the two elimination passes at the same time
        :param preprocess: remove out of service elements and dangling islands before reducing
        """
        OptionsTemplate.__init__(self, name='ReductionOptions')

        self.load_redistribution_mode = load_redistribution_mode

        self.dc_flow_service = dc_flow_service

        self.tolerance = tolerance

        self.prune_factor = prune_factor

        self.flow_tolerance = flow_tolerance

        self.parallel_passes = parallel_passes

        self.preprocess = preprocess

        self.register(key="load_redistribution_mode", tpe=LoadRedistributionMode)
        self.register(key="dc_flow_service", tpe=object)
        self.register(key="tolerance", tpe=float)
        self.register(key="prune_factor", tpe=float)
        self.register(key="flow_tolerance", tpe=float, units="MW")
        self.register(key="parallel_passes", tpe=bool)
        self.register(key="preprocess", tpe=bool)
