# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import os
import numpy as np

import GridReduceEngine.api as gre
from GridReduceEngine.IO.matpower.matpower_case import MatpowerCase


def test_open_case(root_path):
    fname = os.path.join(root_path, 'data', 'grids', 'case5_ring.m')
    case = gre.open_file(fname)

    assert case.name == 'case5_ring'
    assert case.baseMVA == 100.0
    assert case.nbus == 5
    assert case.nbranch == 5
    assert case.ngen == 1
    assert case.gencost.shape == (1, 7)
    assert case.bus_name == ['North', 'East', 'South East', 'South West', 'West']
    assert np.isclose(case.total_load(), 130.0)
    assert case.logger.error_count() == 0


def test_text_round_trip(root_path, tmp_path):
    fname = os.path.join(root_path, 'data', 'grids', 'case5_ring.m')
    case = gre.open_file(fname)
    case.bus[1, 2] = 1.0 / 3.0

    fname2 = os.path.join(tmp_path, 'case5_ring_copy.m')
    gre.save_file(case, fname2)
    case2 = gre.open_file(fname2)

    assert np.array_equal(case.bus, case2.bus)
    assert np.array_equal(case.branch, case2.branch)
    assert np.array_equal(case.gen, case2.gen)
    assert np.array_equal(case.gencost, case2.gencost)
    assert case.bus_name == case2.bus_name
    assert case2.dcline is None


def test_reduced_case_round_trip(root_path, tmp_path):
    fname = os.path.join(root_path, 'data', 'grids', 'case5_ring.m')
    case = gre.open_file(fname)

    res = gre.network_reduction(case, external_buses=[3, 4])

    # the reduced case can be written and read back, and reduced again
    text = res.reduced_case.to_text()
    case2 = MatpowerCase().parse_text(text)

    assert np.array_equal(res.reduced_case.branch, case2.branch)
    assert case2.bus_name == ['North', 'East', 'West']

    res2 = gre.network_reduction(case2, external_buses=[2])
    assert np.isclose(res2.reduced_case.total_load(), case.total_load())


def test_parse_text_extra_tables():
    text = """function mpc = small
mpc.version = '2';
mpc.baseMVA = 100;
mpc.bus = [
    1 3 0 0 0 0 1 1 0 230 1 1.1 0.9;
    2 1 50 0 0 0 1 1 0 230 1 1.1 0.9
];
mpc.gen = [1 50 0 100 -100 1 100 1 100 0];
mpc.branch = [1, 2, 0, 0.05, 0, 100, 100, 100, 0, 0, 1, -360, 360];
mpc.areas = [1 1];
"""
    case = MatpowerCase().parse_text(text)

    assert case.nbus == 2
    assert case.ngen == 1
    assert case.nbranch == 1
    assert np.isclose(case.branch[0, 3], 0.05)
    assert np.array_equal(case.extra['areas'], [[1, 1]])
    assert 'mpc.areas' in case.to_text()
