# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
"""
Named column indices of the MATPOWER gen table.

    0.  GEN_BUS     bus number
    1.  PG          real power output (MW)
    2.  QG          reactive power output (MVAr)
    3.  QMAX        maximum reactive power output (MVAr)
    4.  QMIN        minimum reactive power output (MVAr)
    5.  VG          voltage magnitude setpoint (p.u.)
    6.  MBASE       total MVA base of machine, defaults to baseMVA
    7.  GEN_STATUS  1 - in service, 0 - out of service
    8.  PMAX        maximum real power output (MW)
    9.  PMIN        minimum real power output (MW)

Only the columns used by the reduction are named; the rest of the table
(capability curve, ramp rates, OPF multipliers) is carried untouched.
"""

GEN_BUS = 0
PG = 1
QG = 2
QMAX = 3
QMIN = 4
VG = 5
MBASE = 6
GEN_STATUS = 7
PMAX = 8
PMIN = 9

# minimum number of columns of a case gen table
N_COLS = 10
