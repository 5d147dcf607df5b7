# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from GridReduceEngine.Simulations.PowerFlow.dc_power_flow import (dc_power_flow, DcPowerFlowResults,
                                                                  build_b_matrices, get_bus_injections)
