# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from GridReduceEngine.Simulations.Reduction.reduction_options import ReductionOptions
from GridReduceEngine.Simulations.Reduction.reduction_results import ReductionResults
from GridReduceEngine.Simulations.Reduction.reduction_driver import NetworkReductionDriver, reduce_case
