# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import numpy as np
import pytest

from GridReduceEngine.Topology.admittance_model import AdmittanceModel, build_admittance_model
from GridReduceEngine.Topology.elimination import eliminate_nodes
from GridReduceEngine.Topology.generator_relocation import relocate_generators, find_relocation_bus
from GridReduceEngine.Topology.renumbering import BusRenumbering, assign_circuit_numbers
from GridReduceEngine.basic_structures import Logger
from GridReduceEngine.exceptions import ConfigurationError


def dual_pass(case, external_idx, gen_idx):
    ren = BusRenumbering(case.bus_numbers)
    circuits = assign_circuit_numbers(case.branch[:, 0], case.branch[:, 1])
    model = build_admittance_model(case, renumbering=ren, circuits=circuits)
    res_a = eliminate_nodes(model, nodes=external_idx, renumbering=ren)
    res_b = eliminate_nodes(model, nodes=np.setdiff1d(external_idx, gen_idx), renumbering=ren)
    return res_a, res_b, ren


def test_relocation_tie_goes_to_lowest_bus(case5_ring_gen):
    """
    Bus 4 sees buses 2 and 5 with the same coupling (10/3) once bus 3 is eliminated
    """
    res_a, res_b, ren = dual_pass(case5_ring_gen, external_idx=[2, 3], gen_idx=[0, 3])
    logger = Logger()
    link = relocate_generators(case5_ring_gen.get_gen_bus_numbers(), res_a.retained, res_b.model, ren, logger)

    assert np.array_equal(link, [[1, 1], [4, 2]])
    assert len(logger.find("External generator moved")) == 1


def test_relocation_strongest_coupling(case5_ring_gen):
    case5_ring_gen.branch[3, 3] = 0.1  # 4-5 becomes stronger than the 4-2 equivalent
    res_a, res_b, ren = dual_pass(case5_ring_gen, external_idx=[2, 3], gen_idx=[0, 3])
    link = relocate_generators(case5_ring_gen.get_gen_bus_numbers(), res_a.retained, res_b.model, ren)

    assert np.array_equal(link, [[1, 1], [4, 5]])


def test_relocation_totality(case5_ring_gen):
    res_a, res_b, ren = dual_pass(case5_ring_gen, external_idx=[2, 3], gen_idx=[0, 3])
    link = relocate_generators(case5_ring_gen.get_gen_bus_numbers(), res_a.retained, res_b.model, ren)

    retained_buses = set(ren.original[res_a.retained])
    assert link.shape == (case5_ring_gen.ngen, 2)
    assert np.array_equal(link[:, 0], case5_ring_gen.get_gen_bus_numbers())
    assert all(b in retained_buses for b in link[:, 1])


def test_relocation_by_electrical_distance():
    """
    Chain 0 - 1 - 2 - 3 where 1 and 2 hold generators and are external:
    the generator of 2 has no retained neighbour and goes to the closest retained node (3)
    """
    model = AdmittanceModel(4)
    for i, j, x in [(0, 1, 0.5), (1, 2, 0.1), (2, 3, 0.2)]:
        model.add(i, j, 1.0 / x)
        model.add_diagonal(i, -1.0 / x)
        model.add_diagonal(j, -1.0 / x)

    ren = BusRenumbering([10, 20, 30, 40])
    retained = {0, 3}

    # 20 has a direct retained neighbour (10)
    assert find_relocation_bus(1, retained, model, ren) == 0

    # without the 10-20 coupling, 20 reaches 40 through 30
    model_b = model.copy()
    model_b.remove(0, 1)
    assert find_relocation_bus(1, retained, model_b, ren) == 3


def test_relocation_unreachable():
    model = AdmittanceModel(3)
    model.add(0, 1, 1.0)
    model.add_diagonal(0, -1.0)
    model.add_diagonal(1, -1.0)
    model.add_diagonal(2, -1.0)

    ren = BusRenumbering([1, 2, 3])

    with pytest.raises(ConfigurationError):
        relocate_generators(np.array([3]), np.array([0, 1]), model, ren)
