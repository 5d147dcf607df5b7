# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
"""
Named column indices of the MATPOWER bus table.

    0.  BUS_I       bus number (positive integer)
    1.  BUS_TYPE    bus type (1 = PQ, 2 = PV, 3 = ref, 4 = isolated)
    2.  PD          real power demand (MW)
    3.  QD          reactive power demand (MVAr)
    4.  GS          shunt conductance (MW demanded at V = 1.0 p.u.)
    5.  BS          shunt susceptance (MVAr injected at V = 1.0 p.u.)
    6.  BUS_AREA    area number
    7.  VM          voltage magnitude (p.u.)
    8.  VA          voltage angle (degrees)
    9.  BASE_KV     base voltage (kV)
    10. ZONE        loss zone
    11. VMAX        maximum voltage magnitude (p.u.)
    12. VMIN        minimum voltage magnitude (p.u.)
"""

# bus types
PQ = 1
PV = 2
REF = 3
NONE = 4

# define the indices
BUS_I = 0
BUS_TYPE = 1
PD = 2
QD = 3
GS = 4
BS = 5
BUS_AREA = 6
VM = 7
VA = 8
BASE_KV = 9
ZONE = 10
VMAX = 11
VMIN = 12

# minimum number of columns of a case bus table
N_COLS = 13
