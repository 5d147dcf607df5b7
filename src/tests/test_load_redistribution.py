# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import numpy as np
import pytest

import GridReduceEngine.api as gre
from GridReduceEngine.Topology.load_redistribution import push_values


def test_push_values():
    values = np.array([1.0, 10.0, 6.0, 0.0])

    # node 1 splits to 0 and 2, then node 2 carries everything to 3
    factors = [(1, {0: 0.5, 2: 0.5}), (2, {3: 1.0})]
    res = push_values(values, factors)

    assert np.allclose(res, [6.0, 0.0, 0.0, 11.0])
    assert np.isclose(res.sum(), values.sum())
    assert values[1] == 10.0


def test_proportional_moves_reactive_load(case5_ring):
    case5_ring.bus[2, 3] = 12.0  # Qd of bus 3

    res = gre.network_reduction(case5_ring, external_buses=[3, 4])

    assert np.isclose(res.reduced_case.bus[:, 3].sum(), 12.0)


def test_flow_fidelity(case5_ring):
    """
    The original branches kept in the reduced case carry the same DC flows as in the full case
    """
    options = gre.ReductionOptions(load_redistribution_mode=gre.LoadRedistributionMode.FlowFidelity)
    res = gre.network_reduction(case5_ring, external_buses=[3, 4], options=options)

    full_pf = gre.power_flow(case5_ring)
    reduced_pf = gre.power_flow(res.reduced_case)

    # 1-2 and 5-1 are the first two branches of the reduced case
    assert np.allclose(reduced_pf.Pf[:2], full_pf.Pf[[0, 4]], atol=1e-6)
    assert np.allclose(reduced_pf.theta, full_pf.theta[[0, 1, 4]], atol=1e-9)

    assert np.isclose(res.reduced_case.total_load(), case5_ring.total_load())
    assert res.logger.count_type(gre.LogSeverity.Divergence) == 0


def test_flow_fidelity_with_moved_generator(case5_ring_gen):
    options = gre.ReductionOptions(load_redistribution_mode=gre.LoadRedistributionMode.FlowFidelity)
    res = gre.network_reduction(case5_ring_gen, external_buses=[3, 4], options=options)

    full_pf = gre.power_flow(case5_ring_gen)
    reduced_pf = gre.power_flow(res.reduced_case)

    assert np.allclose(reduced_pf.Pf[:2], full_pf.Pf[[0, 4]], atol=1e-6)
    assert np.isclose(res.reduced_case.total_load(), case5_ring_gen.total_load())


def test_flow_fidelity_without_service(case4):
    options = gre.ReductionOptions(load_redistribution_mode=gre.LoadRedistributionMode.FlowFidelity,
                                   dc_flow_service=None)

    with pytest.raises(gre.ServiceUnavailableError):
        gre.network_reduction(case4, external_buses=[2], options=options)


def test_flow_fidelity_service_failure(case4):
    def broken_service(case):
        raise gre.SingularSystemError()

    options = gre.ReductionOptions(load_redistribution_mode=gre.LoadRedistributionMode.FlowFidelity,
                                   dc_flow_service=broken_service)

    with pytest.raises(gre.ServiceUnavailableError):
        gre.network_reduction(case4, external_buses=[2], options=options)


def test_flow_fidelity_non_finite_solution(case4):
    def nan_service(case):
        res = gre.dc_power_flow(case)
        res.theta[:] = np.nan
        return res

    options = gre.ReductionOptions(load_redistribution_mode=gre.LoadRedistributionMode.FlowFidelity,
                                   dc_flow_service=nan_service)

    with pytest.raises(gre.ServiceUnavailableError):
        gre.network_reduction(case4, external_buses=[2], options=options)


def test_proportional_does_not_need_the_service(case4):
    options = gre.ReductionOptions(dc_flow_service=None)
    res = gre.network_reduction(case4, external_buses=[2], options=options)

    assert np.isclose(res.reduced_case.total_load(), case4.total_load())
