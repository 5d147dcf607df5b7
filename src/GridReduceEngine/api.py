# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from typing import Iterable, Union

from GridReduceEngine.basic_structures import Logger
from GridReduceEngine.enumerations import *
from GridReduceEngine.exceptions import *
from GridReduceEngine.IO import *
from GridReduceEngine.Topology import *
from GridReduceEngine.Simulations import *


def open_file(filename: str) -> MatpowerCase:
    """
    Open file
    :param filename: name of the MATPOWER file (.m)
    :return: MatpowerCase instance
    """
    return open_case(filename)


def save_file(case: MatpowerCase, filename: str):
    """
    Save file
    :param case: MatpowerCase instance
    :param filename: name of the MATPOWER file (.m)
    """
    case.save(filename)


def network_reduction(case: MatpowerCase,
                      external_buses: Iterable[int],
                      options: Union[ReductionOptions, None] = None) -> ReductionResults:
    """
    Reduce a case eliminating the external buses
    :param case: MatpowerCase
    :param external_buses: bus numbers to eliminate
    :param options: ReductionOptions (optional)
    :return: ReductionResults
    """
    driver = NetworkReductionDriver(case=case, external_buses=external_buses, options=options)
    driver.run()
    return driver.results


def power_flow(case: MatpowerCase) -> DcPowerFlowResults:
    """
    Run a DC power flow
    :param case: MatpowerCase
    :return: DcPowerFlowResults
    """
    return dc_power_flow(case)
