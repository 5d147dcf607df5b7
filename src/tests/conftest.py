# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from pathlib import Path

import pytest

from GridReduceEngine.IO.matpower.matpower_case import MatpowerCase

ROOT_PATH = Path(__file__).parent


def bus_row(i, tpe=1, pd=0.0, bs=0.0):
    return [i, tpe, pd, 0.0, 0.0, bs, 1, 1.0, 0.0, 230.0, 1, 1.1, 0.9]


def gen_row(i, pg=0.0, status=1):
    return [i, pg, 0.0, 300.0, -300.0, 1.0, 100.0, status, 250.0, 0.0]


def branch_row(f, t, x, status=1):
    return [f, t, 0.0, x, 0.0, 250.0, 250.0, 250.0, 0.0, 0.0, status, -360.0, 360.0]


@pytest.fixture
def root_path():
    return ROOT_PATH


@pytest.fixture
def case4() -> MatpowerCase:
    """
    Bus 2 in the middle of buses 1, 3 and 4; buses 3 and 4 also connected
    """
    return MatpowerCase(bus=[bus_row(1, 3),
                             bus_row(2, 1, pd=50.0),
                             bus_row(3, 1, pd=30.0),
                             bus_row(4, 1, pd=20.0)],
                        gen=[gen_row(1, pg=100.0)],
                        branch=[branch_row(1, 2, 0.1),
                                branch_row(2, 3, 0.2),
                                branch_row(2, 4, 0.25),
                                branch_row(3, 4, 0.5)],
                        baseMVA=100.0,
                        name='case4')


@pytest.fixture
def case5_ring() -> MatpowerCase:
    """
    Ring 1-2-3-4-5-1 with the generator in bus 1
    """
    return MatpowerCase(bus=[bus_row(1, 3),
                             bus_row(2, 1, pd=20.0),
                             bus_row(3, 1, pd=40.0),
                             bus_row(4, 1, pd=60.0),
                             bus_row(5, 1, pd=10.0)],
                        gen=[gen_row(1, pg=130.0)],
                        branch=[branch_row(1, 2, 0.1),
                                branch_row(2, 3, 0.1),
                                branch_row(3, 4, 0.2),
                                branch_row(4, 5, 0.3),
                                branch_row(5, 1, 0.1)],
                        baseMVA=100.0,
                        name='case5_ring')


@pytest.fixture
def case5_ring_gen(case5_ring: MatpowerCase) -> MatpowerCase:
    """
    Same ring with a second generator in bus 4
    """
    case = case5_ring.copy()
    case.bus[3, 1] = 2  # PV
    case.gen = MatpowerCase(gen=[gen_row(1, pg=90.0), gen_row(4, pg=40.0)]).gen
    return case


@pytest.fixture
def case5_dcline(case5_ring: MatpowerCase) -> MatpowerCase:
    """
    Same ring with an HVDC line between buses 4 and 5
    """
    case = case5_ring.copy()
    case.dcline = MatpowerCase(dcline=[[4, 5, 1, 10.0, 9.9, 0.0, 0.0, 1.0, 1.0]]).dcline
    return case


@pytest.fixture
def case5_ring_shunts(case5_ring: MatpowerCase) -> MatpowerCase:
    """
    Same ring with capacitors of 19, 10 and 20 MVAr in buses 2, 3 and 4
    """
    case = case5_ring.copy()
    case.bus[1:4, 5] = [19.0, 10.0, 20.0]
    return case
