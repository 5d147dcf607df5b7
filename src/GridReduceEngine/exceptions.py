# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0


class ReductionError(Exception):
    """Base class for exceptions of the network reduction."""

    def __init__(self, message="The network reduction failed"):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(ReductionError):
    """Exception raised when the case or the external bus list cannot be reduced as given."""

    def __init__(self, message="Invalid reduction configuration", device=""):
        self.device = device
        if device != "":
            message = f"{message}: {device}"
        super().__init__(message)


class NumericalDegeneracyError(ReductionError):
    """Exception raised when a bus to eliminate has no usable self admittance."""

    def __init__(self, bus, value, message="Zero self admittance found while eliminating bus"):
        self.bus = bus
        self.value = value
        super().__init__(f"{message} {bus} (B={value})")


class ServiceUnavailableError(ReductionError):
    """Exception raised when the DC power flow required by the load redistribution is not usable."""

    def __init__(self, message="The DC power flow service is not available"):
        super().__init__(message)


class PowerFlowError(Exception):
    """Base class for exceptions in the DC power flow."""
    pass


class SlackError(PowerFlowError):
    """Exception raised when there is a problem with the slack bus in a power flow study."""

    def __init__(self, message="Invalid or undefined slack bus configuration"):
        self.message = message
        super().__init__(self.message)


class SingularSystemError(PowerFlowError):
    """Exception raised when the susceptance system cannot be solved."""

    def __init__(self, message="The susceptance matrix is singular"):
        self.message = message
        super().__init__(self.message)
