# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import numpy as np
import pytest

import GridReduceEngine.api as gre
from GridReduceEngine.Topology.preprocessing import preprocess_case


def branch_pairs(case):
    return set((min(int(f), int(t)), max(int(f), int(t))) for f, t in case.branch[:, :2])


def test_ring_scenario(case5_ring):
    """
    Eliminating the adjacent buses 3 and 4 of the 5 bus ring
    """
    res = gre.network_reduction(case5_ring, external_buses=[3, 4])
    reduced = res.reduced_case

    assert np.array_equal(reduced.bus_numbers, [1, 2, 5])

    eq = [k for k, tg in enumerate(res.branch_tags) if tg == gre.BranchCircuitTag.Equivalent]
    assert len(eq) == 1
    k = eq[0]
    assert tuple(reduced.branch[k, :2].astype(int)) == (2, 5)
    assert np.isclose(reduced.branch[k, 3], 0.1 + 0.2 + 0.3)
    assert res.branch_circuits[k] == gre.EQUIVALENT_CIRCUIT

    assert np.isclose(reduced.total_load(), case5_ring.total_load())
    assert np.allclose(reduced.bus[:, 2], [0.0, 20.0 + 80.0 / 3.0 + 110.0 / 3.0, 10.0 + 110.0 / 3.0])

    # the input is untouched
    assert case5_ring.nbus == 5
    assert case5_ring.nbranch == 5


def test_4_bus_reduction(case4):
    res = gre.network_reduction(case4, external_buses=[2])
    reduced = res.reduced_case

    assert np.array_equal(reduced.bus_numbers, [1, 3, 4])
    assert np.array_equal(reduced.branch[:, :2].astype(int), [[3, 4], [1, 3], [1, 4], [3, 4]])
    assert np.array_equal(res.branch_circuits, [1, 99, 99, 2])
    assert res.branch_tags == [gre.BranchCircuitTag.Original,
                               gre.BranchCircuitTag.Equivalent,
                               gre.BranchCircuitTag.Equivalent,
                               gre.BranchCircuitTag.Parallel]
    assert np.allclose(reduced.branch[1:, 3], [19.0 / 50.0, 19.0 / 40.0, 19.0 / 20.0])
    assert len(res.equivalent_edges) == 3

    assert np.allclose(reduced.bus[:, 2], [500.0 / 19.0, 30.0 + 250.0 / 19.0, 20.0 + 200.0 / 19.0])

    df = res.get_branch_df()
    assert list(df['Tag']) == ['Original', 'Equivalent', 'Equivalent', 'Parallel']


def test_equivalent_shunts_single_bus(case5_ring_shunts):
    """
    Eliminating bus 3 (B33 = -15 + 0.1) pushes its shunt to buses 2 and 4 as s_m - w_3m s_3 / w_33
    """
    res = gre.network_reduction(case5_ring_shunts, external_buses=[3])
    reduced = res.reduced_case

    assert np.array_equal(reduced.bus_numbers, [1, 2, 4, 5])
    assert np.allclose(reduced.bus[:, 5], [0.0, 19.0 + 100.0 / 14.9, 20.0 + 50.0 / 14.9, 0.0])

    k = res.branch_tags.index(gre.BranchCircuitTag.Equivalent)
    assert tuple(reduced.branch[k, :2].astype(int)) == (2, 4)
    assert np.isclose(reduced.branch[k, 3], 14.9 / 50.0)
    assert len(res.logger.find("Equivalent shunts added")) == 1


def test_equivalent_shunts_schur_complement(case5_ring_shunts):
    W = np.zeros((5, 5))
    for i, j, x in [(0, 1, 0.1), (1, 2, 0.1), (2, 3, 0.2), (3, 4, 0.3), (4, 0, 0.1)]:
        W[i, j] = W[j, i] = 1.0 / x
    B = W - np.diag(W.sum(axis=1)) + np.diag(case5_ring_shunts.bus[:, 5] / 100.0)

    r = [0, 1, 4]
    e = [2, 3]
    S = B[np.ix_(r, r)] - B[np.ix_(r, e)] @ np.linalg.solve(B[np.ix_(e, e)], B[np.ix_(e, r)])

    res = gre.network_reduction(case5_ring_shunts, external_buses=[3, 4])
    reduced = res.reduced_case

    assert np.allclose(reduced.bus[:, 5], S.sum(axis=1) * 100.0)
    assert reduced.bus[0, 5] == 0.0
    assert reduced.bus[1, 5] > 19.0

    k = res.branch_tags.index(gre.BranchCircuitTag.Equivalent)
    assert tuple(reduced.branch[k, :2].astype(int)) == (2, 5)
    assert np.isclose(reduced.branch[k, 3], 1.0 / S[1, 2])


@pytest.mark.parametrize("mode", [gre.LoadRedistributionMode.Proportional, gre.LoadRedistributionMode.FlowFidelity])
def test_load_conservation_with_shunts(case5_ring_shunts, mode):
    options = gre.ReductionOptions(load_redistribution_mode=mode)

    for external in [[3], [3, 4], [2, 3, 4]]:
        res = gre.network_reduction(case5_ring_shunts, external_buses=external, options=options)
        assert np.isclose(res.reduced_case.total_load(), case5_ring_shunts.total_load())


@pytest.mark.parametrize("external", [[2], [2, 3], [3, 4]])
def test_tagging_consistency(case4, case5_ring, external):
    for case in [case4, case5_ring]:
        res = gre.network_reduction(case, external_buses=external)
        input_pairs = branch_pairs(case)

        for (f, t), tg in zip(res.reduced_case.branch[:, :2].astype(int), res.branch_tags):
            pair = (min(f, t), max(f, t))
            if tg == gre.BranchCircuitTag.Equivalent:
                assert pair not in input_pairs
            else:
                assert pair in input_pairs

        assert len(res.branch_tags) == res.reduced_case.nbranch
        assert len(res.branch_circuits) == res.reduced_case.nbranch


@pytest.mark.parametrize("mode", [gre.LoadRedistributionMode.Proportional, gre.LoadRedistributionMode.FlowFidelity])
def test_load_conservation(case4, case5_ring, case5_ring_gen, mode):
    options = gre.ReductionOptions(load_redistribution_mode=mode)

    for case, external in [(case4, [2]), (case4, [2, 4]), (case5_ring, [3, 4]), (case5_ring_gen, [2, 3, 4])]:
        res = gre.network_reduction(case, external_buses=external, options=options)
        assert np.isclose(res.reduced_case.total_load(), case.total_load())


def test_generator_relocation(case5_ring_gen):
    res = gre.network_reduction(case5_ring_gen, external_buses=[3, 4])
    reduced = res.reduced_case

    assert np.array_equal(res.link, [[1, 1], [4, 2]])
    assert np.array_equal(reduced.gen[:, 0].astype(int), [1, 2])
    assert all(b in reduced.bus_numbers for b in res.link[:, 1])

    # bus 2 receives a generator
    assert reduced.bus[1, 1] == 2
    assert res.moved_generators.shape == (1, 2)
    assert list(res.get_link_df()['New bus']) == [1, 2]


def test_reference_moved(case4):
    case4.bus[0, 1] = 1
    case4.bus[1, 1] = 3
    case4.gen[0, 0] = 2

    res = gre.network_reduction(case4, external_buses=[2])

    assert np.array_equal(res.link, [[2, 1]])
    assert np.array_equal(res.reduced_case.get_ref_bus_numbers(), [1])
    assert len(res.logger.find("Reference moved")) == 1


def test_dc_terminal_elimination_fails(case5_dcline):
    driver = gre.NetworkReductionDriver(case5_dcline, external_buses=[3, 4])

    with pytest.raises(gre.ConfigurationError) as e:
        driver.run()

    assert "HVDC" in str(e.value)
    assert driver.results is None


def test_dc_line_kept(case5_dcline):
    res = gre.network_reduction(case5_dcline, external_buses=[3])

    assert np.array_equal(res.reduced_case.dcline, case5_dcline.dcline)


def test_empty_external_set(case4):
    res = gre.network_reduction(case4, external_buses=[])

    assert np.array_equal(res.reduced_case.bus, case4.bus)
    assert np.array_equal(res.reduced_case.branch, case4.branch)
    assert np.array_equal(res.reduced_case.gen, case4.gen)
    assert np.array_equal(res.link, [[1, 1]])
    assert res.branch_tags == [gre.BranchCircuitTag.Original] * case4.nbranch
    assert len(res.logger.find("No external buses")) == 1
    assert res.reduced_case is not case4


def test_unknown_external_bus(case4):
    with pytest.raises(gre.ConfigurationError) as e:
        gre.network_reduction(case4, external_buses=[2, 77])

    assert "77" in str(e.value)


def test_parallel_passes(case5_ring_gen):
    res1 = gre.network_reduction(case5_ring_gen, external_buses=[3, 4])
    res2 = gre.network_reduction(case5_ring_gen, external_buses=[3, 4],
                                 options=gre.ReductionOptions(parallel_passes=True))

    assert np.allclose(res1.reduced_case.bus, res2.reduced_case.bus)
    assert np.allclose(res1.reduced_case.branch, res2.reduced_case.branch)
    assert np.array_equal(res1.link, res2.link)


def test_driver_logs(case5_ring):
    driver = gre.NetworkReductionDriver(case5_ring, external_buses=[3, 4])
    driver.run()

    assert len(driver.logger.find("Elapsed total (s)")) == 2
    assert driver.results.logger is driver.logger
    assert driver.results.summary().loc['Buses', 'Value'] == 3
    assert driver.logger.error_count() == 0


def test_preprocessing(case5_ring):
    case = case5_ring.copy()
    case.bus = np.r_[case.bus, case.bus[[4], :]]
    case.bus[5, 0] = 6  # bus 6 without connections
    case.branch[2, 10] = 0  # 3-4 out of service

    logger = gre.Logger()
    cleaned, external = preprocess_case(case, [6, 3, 3], logger=logger)

    assert np.array_equal(cleaned.bus_numbers, [1, 2, 3, 4, 5])
    assert cleaned.nbranch == 4
    assert np.array_equal(external, [3])
    assert case.nbus == 6


def test_reduction_of_the_preprocessed_case(case5_ring):
    case5_ring.branch[2, 10] = 0  # 3-4 out of service: the ring becomes the chain 3-2-1-5-4

    res = gre.network_reduction(case5_ring, external_buses=[3, 4])

    assert np.array_equal(res.reduced_case.bus_numbers, [1, 2, 5])
    assert res.reduced_case.nbranch == 2
    assert np.isclose(res.reduced_case.total_load(), case5_ring.total_load())
