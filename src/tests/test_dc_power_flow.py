# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import numpy as np
import pytest

import GridReduceEngine.api as gre
from conftest import bus_row, gen_row, branch_row


def test_dc_power_flow_2_bus():
    case = gre.MatpowerCase(bus=[bus_row(1, 3), bus_row(2, pd=100.0)],
                            gen=[gen_row(1, pg=100.0)],
                            branch=[branch_row(1, 2, 0.1)])

    res = gre.dc_power_flow(case)

    assert np.allclose(res.theta, [0.0, -0.1])
    assert np.allclose(res.Pf, [100.0])
    assert np.allclose(res.Pbus, [100.0, -100.0])
    assert list(res.get_bus_df().index) == [1, 2]


def test_dc_power_flow_slack_balance(case5_ring):
    case5_ring.gen[0, 1] = 0.0  # the slack covers all the load anyway

    res = gre.dc_power_flow(case5_ring)

    assert np.isclose(res.Pbus[0], case5_ring.total_load())
    # what leaves bus 1
    assert np.isclose(res.Pf[0] - res.Pf[4], case5_ring.total_load())


def test_dc_power_flow_ignores_out_of_service_branches(case5_ring):
    case5_ring.branch[2, 10] = 0

    res = gre.dc_power_flow(case5_ring)

    assert res.Pf[2] == 0.0
    # bus 3 is only fed from bus 2
    assert np.isclose(res.Pf[1], 40.0)


def test_dc_power_flow_without_slack(case4):
    case4.bus[0, 1] = 2

    with pytest.raises(gre.SlackError):
        gre.dc_power_flow(case4)

