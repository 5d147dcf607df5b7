# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from __future__ import annotations

from typing import Dict, Iterable, Tuple
import numpy as np

from GridReduceEngine.basic_structures import IntVec
from GridReduceEngine.exceptions import ConfigurationError


class BusRenumbering:
    """
    Bijection between the original bus numbers and the dense indices 0..n-1
    used to address the admittance structure.
    The dense index of a bus is its position in the bus table.
    """

    def __init__(self, bus_numbers: Iterable[int]):
        """
        :param bus_numbers: original bus numbers in bus table order
        """
        self.original: IntVec = np.array(list(bus_numbers), dtype=int)

        self.index: Dict[int, int] = {int(b): i for i, b in enumerate(self.original)}

        if len(self.index) != len(self.original):
            values, counts = np.unique(self.original, return_counts=True)
            raise ConfigurationError("Duplicated bus numbers",
                                     device=', '.join(str(b) for b in values[counts > 1]))

    @property
    def n(self) -> int:
        return len(self.original)

    def to_internal(self, buses: Iterable[int]) -> IntVec:
        """
        Translate original bus numbers into dense indices
        :param buses: original bus numbers
        :return: dense indices
        """
        buses = np.array(list(buses), dtype=int)
        missing = [int(b) for b in buses if int(b) not in self.index]
        if len(missing):
            raise ConfigurationError("Buses not found", device=', '.join(str(b) for b in missing))

        return np.array([self.index[int(b)] for b in buses], dtype=int)

    def to_original(self, idx: Iterable[int]) -> IntVec:
        """
        Translate dense indices into the original bus numbers
        :param idx: dense indices
        :return: original bus numbers
        """
        return self.original[np.array(list(idx), dtype=int)]

    def translate_external(self, external_buses: Iterable[int]) -> IntVec:
        """
        Translate the external bus list into sorted unique dense indices
        :param external_buses: original external bus numbers
        :return: sorted dense indices
        """
        try:
            idx = self.to_internal(external_buses)
        except ConfigurationError as e:
            raise ConfigurationError("External buses not found in the case", device=e.device) from e

        return np.unique(idx)


def assign_circuit_numbers(f: IntVec, t: IntVec) -> IntVec:
    """
    Number the parallel circuits between every pair of buses:
    the first branch of a pair gets 1, the second 2, and so on (in table order)
    :param f: from bus of every branch
    :param t: to bus of every branch
    :return: circuit number of every branch
    """
    counter: Dict[Tuple[int, int], int] = dict()
    circuits = np.zeros(len(f), dtype=int)

    for k, (a, b) in enumerate(zip(f, t)):
        key = (min(int(a), int(b)), max(int(a), int(b)))
        counter[key] = counter.get(key, 0) + 1
        circuits[k] = counter[key]

    return circuits
