# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
"""
Named column indices of the MATPOWER branch table.

    0.  F_BUS       from bus number
    1.  T_BUS       to bus number
    2.  BR_R        resistance (p.u.)
    3.  BR_X        reactance (p.u.)
    4.  BR_B        total line charging susceptance (p.u.)
    5.  RATE_A      MVA rating A (long term rating)
    6.  RATE_B      MVA rating B (short term rating)
    7.  RATE_C      MVA rating C (emergency rating)
    8.  TAP         transformer off nominal turns ratio
    9.  SHIFT       transformer phase shift angle (degrees)
    10. BR_STATUS   initial branch status, 1 - in service, 0 - out of service
    11. ANGMIN      minimum angle difference (degrees)
    12. ANGMAX      maximum angle difference (degrees)

Columns 13-16 are added to the table by a power flow solution:

    13. PF          real power injected at "from" bus end (MW)
    14. QF          reactive power injected at "from" bus end (MVAr)
    15. PT          real power injected at "to" bus end (MW)
    16. QT          reactive power injected at "to" bus end (MVAr)
"""

F_BUS = 0
T_BUS = 1
BR_R = 2
BR_X = 3
BR_B = 4
RATE_A = 5
RATE_B = 6
RATE_C = 7
TAP = 8
SHIFT = 9
BR_STATUS = 10
ANGMIN = 11
ANGMAX = 12

PF = 13
QF = 14
PT = 15
QT = 16

# minimum number of columns of a case branch table
N_COLS = 13
