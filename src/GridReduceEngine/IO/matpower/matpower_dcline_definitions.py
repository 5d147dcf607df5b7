# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
"""
Named column indices of the MATPOWER dcline table (HVDC links).

    0.  F_BUS       from bus number
    1.  T_BUS       to bus number
    2.  BR_STATUS   initial branch status, 1 - in service, 0 - out of service
    3.  PF          MW flow at "from" bus ("from" -> "to")
    4.  PT          MW flow at "to" bus ("from" -> "to")
    5.  QF          MVAr injection at "from" bus
    6.  QT          MVAr injection at "to" bus
    7.  VF          voltage setpoint at "from" bus (p.u.)
    8.  VT          voltage setpoint at "to" bus (p.u.)
"""

F_BUS = 0
T_BUS = 1
BR_STATUS = 2
PF = 3
PT = 4
QF = 5
QT = 6
VF = 7
VT = 8
