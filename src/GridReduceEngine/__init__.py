# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0

from __future__ import annotations

from GridReduceEngine.__version__ import __GridReduceEngine_VERSION__
from GridReduceEngine.enumerations import *
from GridReduceEngine.exceptions import *
from GridReduceEngine.basic_structures import Logger
from GridReduceEngine.IO import *
from GridReduceEngine.Topology import *
from GridReduceEngine.Simulations import *
