# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from __future__ import annotations

from typing import Tuple, Iterable
import numpy as np
from scipy.sparse import coo_matrix
from scipy.sparse.csgraph import connected_components

import GridReduceEngine.IO.matpower.matpower_bus_definitions as mpb
import GridReduceEngine.IO.matpower.matpower_branch_definitions as mpbr
import GridReduceEngine.IO.matpower.matpower_gen_definitions as mpg
import GridReduceEngine.IO.matpower.matpower_dcline_definitions as mpdc
from GridReduceEngine.IO.matpower.matpower_case import MatpowerCase
from GridReduceEngine.basic_structures import Logger, IntVec, BoolVec
from GridReduceEngine.exceptions import ConfigurationError


def check_external_buses(case: MatpowerCase, external_buses: Iterable[int]) -> IntVec:
    """
    Check that all the external bus numbers exist in the case
    :param case: MatpowerCase
    :param external_buses: external bus numbers
    :return: sorted array of unique external bus numbers
    """
    external = np.unique(np.array(list(external_buses), dtype=int))
    missing = np.setdiff1d(external, case.bus_numbers)
    if len(missing) > 0:
        raise ConfigurationError("External buses not found in the case",
                                 device=', '.join(str(b) for b in missing))
    return external


def check_dc_terminals(case: MatpowerCase, external_buses: IntVec):
    """
    HVDC terminals cannot be eliminated
    :param case: MatpowerCase
    :param external_buses: external bus numbers
    """
    terminals = np.intersect1d(case.get_dc_terminal_bus_numbers(), external_buses)
    if len(terminals) > 0:
        raise ConfigurationError("Not able to eliminate HVDC line terminals",
                                 device=', '.join(str(b) for b in terminals))


def _gencost_rows(case: MatpowerCase, keep_gen: BoolVec) -> BoolVec:
    """
    Rows of gencost that belong to the kept generators
    (gencost may hold one row per generator or two: active and reactive costs)
    """
    ngen = len(keep_gen)
    if case.gencost.shape[0] == 2 * ngen:
        return np.r_[keep_gen, keep_gen]
    return keep_gen


def remove_buses(case: MatpowerCase, keep_bus: BoolVec, logger: Logger) -> MatpowerCase:
    """
    Remove the buses not marked to keep, and every element connected to them
    :param case: MatpowerCase (modified in-place)
    :param keep_bus: boolean array (bus table order) of buses to keep
    :param logger: Logger
    :return: the same case
    """
    if np.all(keep_bus):
        return case

    kept_numbers = case.bus_numbers[keep_bus]

    for b in case.bus_numbers[~keep_bus]:
        logger.add_info("Bus removed", device=b, device_class="Bus")

    keep_br = (np.isin(case.branch[:, mpbr.F_BUS].astype(int), kept_numbers) &
               np.isin(case.branch[:, mpbr.T_BUS].astype(int), kept_numbers))

    keep_gen = np.isin(case.gen[:, mpg.GEN_BUS].astype(int), kept_numbers)

    if case.gencost is not None:
        case.gencost = case.gencost[_gencost_rows(case, keep_gen), :]

    if case.has_dclines:
        keep_dc = (np.isin(case.dcline[:, mpdc.F_BUS].astype(int), kept_numbers) &
                   np.isin(case.dcline[:, mpdc.T_BUS].astype(int), kept_numbers))
        case.dcline = case.dcline[keep_dc, :]

    if case.bus_name is not None:
        case.bus_name = [nm for nm, k in zip(case.bus_name, keep_bus) if k]

    case.bus = case.bus[keep_bus, :]
    case.branch = case.branch[keep_br, :]
    case.gen = case.gen[keep_gen, :]

    return case


def remove_out_of_service(case: MatpowerCase, logger: Logger) -> MatpowerCase:
    """
    Remove the out of service branches and generators and the isolated buses
    :param case: MatpowerCase (modified in-place)
    :param logger: Logger
    :return: the same case
    """
    br_on = case.branch[:, mpbr.BR_STATUS] > 0
    for i in np.where(~br_on)[0]:
        logger.add_info("Out of service branch removed",
                        device=f"{int(case.branch[i, mpbr.F_BUS])}-{int(case.branch[i, mpbr.T_BUS])}",
                        device_class="Branch")
    case.branch = case.branch[br_on, :]

    gen_on = case.gen[:, mpg.GEN_STATUS] > 0
    for i in np.where(~gen_on)[0]:
        logger.add_info("Out of service generator removed",
                        device=int(case.gen[i, mpg.GEN_BUS]),
                        device_class="Generator")
    if case.gencost is not None:
        case.gencost = case.gencost[_gencost_rows(case, gen_on), :]
    case.gen = case.gen[gen_on, :]

    keep_bus = case.bus[:, mpb.BUS_TYPE] != mpb.NONE
    return remove_buses(case, keep_bus=keep_bus, logger=logger)


def remove_dangling_islands(case: MatpowerCase, logger: Logger) -> MatpowerCase:
    """
    Remove the islands that do not contain a reference bus
    :param case: MatpowerCase (modified in-place)
    :param logger: Logger
    :return: the same case
    """
    n = case.nbus
    if n == 0:
        return case

    bus_dict = case.get_bus_index_dict()
    f = np.array([bus_dict[int(b)] for b in case.branch[:, mpbr.F_BUS]], dtype=int)
    t = np.array([bus_dict[int(b)] for b in case.branch[:, mpbr.T_BUS]], dtype=int)

    adj = coo_matrix((np.ones(len(f)), (f, t)), shape=(n, n)).tocsc()
    n_islands, labels = connected_components(adj, directed=False)

    is_ref = case.bus[:, mpb.BUS_TYPE] == mpb.REF
    if not np.any(is_ref):
        raise ConfigurationError("The case has no reference bus")

    if n_islands > 1:
        ref_islands = np.unique(labels[is_ref])
        keep_bus = np.isin(labels, ref_islands)
        if not np.all(keep_bus):
            logger.add_warning("Islands without reference bus removed",
                               value=n_islands - len(ref_islands))
        remove_buses(case, keep_bus=keep_bus, logger=logger)

    return case


def preprocess_case(case: MatpowerCase,
                    external_buses: Iterable[int],
                    logger: Logger | None = None) -> Tuple[MatpowerCase, IntVec]:
    """
    Clean the case before the reduction:
    out of service elements, isolated buses and islands without reference are removed,
    and the external bus list is purged accordingly.
    :param case: MatpowerCase (not modified)
    :param external_buses: external bus numbers
    :param logger: Logger
    :return: cleaned case copy, sorted array of external bus numbers
    """
    if logger is None:
        logger = Logger()

    external = check_external_buses(case, external_buses)

    cleaned = case.copy()
    remove_out_of_service(cleaned, logger=logger)
    remove_dangling_islands(cleaned, logger=logger)

    remaining = np.isin(external, cleaned.bus_numbers)
    for b in external[~remaining]:
        logger.add_info("External bus removed by the preprocessing", device=b, device_class="Bus")

    return cleaned, external[remaining]
