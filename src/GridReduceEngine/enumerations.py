# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from enum import Enum


class LogSeverity(Enum):
    """
    LogSeverity
    """
    Error = 'Error'
    Warning = 'Warning'
    Information = 'Information'
    Divergence = 'Divergence'

    def __str__(self):
        return self.value

    def __repr__(self):
        return str(self)

    @staticmethod
    def argparse(s):
        """

        :param s:
        :return:
        """
        try:
            return LogSeverity[s]
        except KeyError:
            return s


class LoadRedistributionMode(Enum):
    """
    How the load of the eliminated buses is put back on the retained ones
    """
    Proportional = 'Proportional'
    FlowFidelity = 'Flow fidelity'

    def __str__(self):
        return self.value

    def __repr__(self):
        return str(self)

    @staticmethod
    def argparse(s):
        """

        :param s:
        :return:
        """
        try:
            return LoadRedistributionMode[s]
        except KeyError:
            return s


class BranchCircuitTag(Enum):
    """
    Origin of a branch of the reduced model
    """
    Original = 'Original'  # branch of the full model that survived
    Parallel = 'Parallel'  # equivalent branch in parallel to a full model branch
    Equivalent = 'Equivalent'  # equivalent branch between buses that were not connected

    def __str__(self):
        return self.value

    def __repr__(self):
        return str(self)

    @staticmethod
    def argparse(s):
        """

        :param s:
        :return:
        """
        try:
            return BranchCircuitTag[s]
        except KeyError:
            return s


class SimulationTypes(Enum):
    """
    Enumeration of simulation types
    """
    TemplateDriver = 'Template'
    NetworkReduction_run = 'Network reduction'
