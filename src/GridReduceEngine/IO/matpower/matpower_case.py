# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from __future__ import annotations

import re
from typing import Dict, List, Union
import numpy as np
import pandas as pd

import GridReduceEngine.IO.matpower.matpower_bus_definitions as mpb
import GridReduceEngine.IO.matpower.matpower_branch_definitions as mpbr
import GridReduceEngine.IO.matpower.matpower_gen_definitions as mpg
import GridReduceEngine.IO.matpower.matpower_dcline_definitions as mpdc
from GridReduceEngine.IO.matpower.matpower_utils import (find_between, remove_comments, txt2mat, txt2str_list,
                                                         mat2txt, num2str)
from GridReduceEngine.basic_structures import Logger, Mat, IntVec


def _as_table(data: Union[None, Mat, List], min_cols: int) -> Mat:
    """
    Convert some tabular data into a 2D float array with at least min_cols columns
    :param data: array-like or None
    :param min_cols: minimum number of columns
    :return: 2D float array
    """
    if data is None:
        return np.zeros((0, min_cols))

    arr = np.array(data, dtype=float, ndmin=2)
    if arr.size == 0:
        return np.zeros((0, max(min_cols, arr.shape[1] if arr.ndim == 2 else 0)))

    if arr.shape[1] < min_cols:
        arr = np.c_[arr, np.zeros((arr.shape[0], min_cols - arr.shape[1]))]

    return arr


class MatpowerCase:
    """
    MATPOWER case (version 2) stored as the plain MATPOWER tables.
    All the columns are kept, so that the fields that the reduction does not touch
    are written back exactly as they were read.
    """

    def __init__(self,
                 bus: Union[None, Mat, List] = None,
                 branch: Union[None, Mat, List] = None,
                 gen: Union[None, Mat, List] = None,
                 gencost: Union[None, Mat, List] = None,
                 dcline: Union[None, Mat, List] = None,
                 baseMVA: float = 100.0,
                 name: str = 'case',
                 bus_name: Union[None, List[str]] = None):
        """
        Constructor
        :param bus: bus table
        :param branch: branch table
        :param gen: generators table
        :param gencost: generator costs table (optional)
        :param dcline: HVDC lines table (optional)
        :param baseMVA: system base power (MVA)
        :param name: name of the case (function name when saved)
        :param bus_name: list of bus names (optional)
        """
        self.name = name

        self.version = '2'

        self.baseMVA = float(baseMVA)

        self.bus: Mat = _as_table(bus, mpb.N_COLS)

        self.branch: Mat = _as_table(branch, mpbr.N_COLS)

        self.gen: Mat = _as_table(gen, mpg.N_COLS)

        self.gencost: Union[None, Mat] = None if gencost is None else np.array(gencost, dtype=float, ndmin=2)

        self.dcline: Union[None, Mat] = None if dcline is None else _as_table(dcline, mpdc.VT + 1)

        self.bus_name: Union[None, List[str]] = None if bus_name is None else list(bus_name)

        # any other numeric table found in the file (areas, ...)
        self.extra: Dict[str, Mat] = dict()

        self.logger = Logger()

    @property
    def nbus(self) -> int:
        return self.bus.shape[0]

    @property
    def nbranch(self) -> int:
        return self.branch.shape[0]

    @property
    def ngen(self) -> int:
        return self.gen.shape[0]

    @property
    def bus_numbers(self) -> IntVec:
        """
        Array of the bus numbers (BUS_I) in table order
        """
        return self.bus[:, mpb.BUS_I].astype(int)

    @property
    def has_dclines(self) -> bool:
        return self.dcline is not None and self.dcline.shape[0] > 0

    def get_bus_index_dict(self) -> Dict[int, int]:
        """
        Get the dictionary bus number -> row index in the bus table
        """
        return {int(b): i for i, b in enumerate(self.bus[:, mpb.BUS_I])}

    def get_ref_bus_numbers(self) -> IntVec:
        """
        Numbers of the reference buses
        """
        return self.bus[self.bus[:, mpb.BUS_TYPE] == mpb.REF, mpb.BUS_I].astype(int)

    def get_gen_bus_numbers(self) -> IntVec:
        """
        Bus number of every generator (in gen table order)
        """
        return self.gen[:, mpg.GEN_BUS].astype(int)

    def get_dc_terminal_bus_numbers(self) -> IntVec:
        """
        Bus numbers of both terminals of all the HVDC lines
        """
        if not self.has_dclines:
            return np.zeros(0, dtype=int)
        return np.r_[self.dcline[:, mpdc.F_BUS], self.dcline[:, mpdc.T_BUS]].astype(int)

    def total_load(self) -> float:
        """
        Total active power demand (MW)
        """
        return float(np.sum(self.bus[:, mpb.PD]))

    def max_branch_reactance(self) -> float:
        """
        Largest branch reactance magnitude (p.u.)
        """
        if self.nbranch == 0:
            return 0.0
        return float(np.max(np.abs(self.branch[:, mpbr.BR_X])))

    def copy(self) -> "MatpowerCase":
        """
        Deep copy of the case
        """
        cpy = MatpowerCase(bus=self.bus.copy(),
                           branch=self.branch.copy(),
                           gen=self.gen.copy(),
                           gencost=None if self.gencost is None else self.gencost.copy(),
                           dcline=None if self.dcline is None else self.dcline.copy(),
                           baseMVA=self.baseMVA,
                           name=self.name,
                           bus_name=None if self.bus_name is None else list(self.bus_name))
        cpy.version = self.version
        cpy.extra = {key: val.copy() for key, val in self.extra.items()}
        return cpy

    def parse_text(self, text: str) -> "MatpowerCase":
        """
        Parse the text of a MATPOWER .m case file
        :param text: file contents
        :return: self
        """
        res = re.search(r'function\s+mpc\s*=\s*(\w+)', text)
        if res is not None:
            self.name = res.group(1)

        text = remove_comments(text)

        # split the file into its case variables (the case variables always start with 'mpc.')
        chunks = text.split('mpc.')

        buses_found = False

        for chunk in chunks[1:]:

            key = chunk.split('=')[0].strip()

            if key == "baseMVA":
                self.baseMVA = float(find_between(chunk, '=', ';'))

            elif key == "version":
                self.version = find_between(chunk, "'", "'")

            elif key == "bus_name":
                self.bus_name = txt2str_list(find_between(chunk, '{', '}'))

            elif '[' in chunk:
                data = txt2mat(find_between(chunk, '[', ']'))

                if key == "bus":
                    buses_found = True
                    self.bus = _as_table(data, mpb.N_COLS)
                elif key == "branch":
                    self.branch = _as_table(data, mpbr.N_COLS)
                elif key == "gen":
                    self.gen = _as_table(data, mpg.N_COLS)
                elif key == "gencost":
                    self.gencost = data
                elif key == "dcline":
                    self.dcline = _as_table(data, mpdc.VT + 1)
                else:
                    self.extra[key] = data
            else:
                self.logger.add_warning("Unsupported case field", device=key)

        if not buses_found:
            self.logger.add_error('No bus data')

        if self.bus_name is not None and len(self.bus_name) != self.nbus:
            self.logger.add_warning("The number of bus names does not match the number of buses",
                                    value=len(self.bus_name), expected_value=self.nbus)
            self.bus_name = None

        return self

    def read_file(self, file_name: str) -> "MatpowerCase":
        """
        Read a MATPOWER .m case file
        :param file_name: file name
        :return: self
        """
        with open(file_name, 'r') as f:
            text = f.read()

        return self.parse_text(text)

    def to_text(self) -> str:
        """
        Get the MATPOWER .m representation of the case
        :return: text
        """
        txt = f"function mpc = {self.name}\n"
        txt += "%% MATPOWER Case Format : Version 2\n"
        txt += f"mpc.version = '{self.version}';\n\n"
        txt += "%%-----  Power Flow Data  -----%%\n"
        txt += "%% system MVA base\n"
        txt += f"mpc.baseMVA = {num2str(self.baseMVA)};\n\n"

        txt += "%% bus data\n"
        txt += "%\tbus_i\ttype\tPd\tQd\tGs\tBs\tarea\tVm\tVa\tbaseKV\tzone\tVmax\tVmin\n"
        txt += "mpc.bus = [\n" + mat2txt(self.bus) + "\n];\n\n"

        txt += "%% generator data\n"
        txt += "%\tbus\tPg\tQg\tQmax\tQmin\tVg\tmBase\tstatus\tPmax\tPmin\n"
        txt += "mpc.gen = [\n" + mat2txt(self.gen) + "\n];\n\n"

        txt += "%% branch data\n"
        txt += "%\tfbus\ttbus\tr\tx\tb\trateA\trateB\trateC\tratio\tangle\tstatus\tangmin\tangmax\n"
        txt += "mpc.branch = [\n" + mat2txt(self.branch) + "\n];\n"

        if self.gencost is not None:
            txt += "\n%%-----  OPF Data  -----%%\n"
            txt += "%% generator cost data\n"
            txt += "mpc.gencost = [\n" + mat2txt(self.gencost) + "\n];\n"

        if self.dcline is not None:
            txt += "\n%% DC line data\n"
            txt += "mpc.dcline = [\n" + mat2txt(self.dcline) + "\n];\n"

        for key, data in self.extra.items():
            txt += f"\nmpc.{key} = [\n" + mat2txt(data) + "\n];\n"

        if self.bus_name is not None:
            txt += "\n%% bus names\n"
            txt += "mpc.bus_name = {\n" + '\n'.join(f"\t'{nm}';" for nm in self.bus_name) + "\n};\n"

        return txt

    def save(self, file_name: str):
        """
        Save the case as a MATPOWER .m file
        :param file_name: file name
        """
        with open(file_name, 'w') as f:
            f.write(self.to_text())

    def get_bus_df(self) -> pd.DataFrame:
        """
        Get the main bus data as a DataFrame indexed by bus number
        """
        return pd.DataFrame(data=self.bus[:, [mpb.BUS_TYPE, mpb.PD, mpb.GS, mpb.BS, mpb.VA]],
                            columns=['Type', 'Pd (MW)', 'Gs (MW)', 'Bs (MVAr)', 'Va (deg)'],
                            index=pd.Index(self.bus_numbers, name='Bus'))

    def get_branch_df(self) -> pd.DataFrame:
        """
        Get the main branch data as a DataFrame
        """
        return pd.DataFrame(data={'From': self.branch[:, mpbr.F_BUS].astype(int),
                                  'To': self.branch[:, mpbr.T_BUS].astype(int),
                                  'X (p.u.)': self.branch[:, mpbr.BR_X],
                                  'Rate A (MVA)': self.branch[:, mpbr.RATE_A],
                                  'Status': self.branch[:, mpbr.BR_STATUS].astype(int)})

    def get_gen_df(self) -> pd.DataFrame:
        """
        Get the main generator data as a DataFrame
        """
        return pd.DataFrame(data={'Bus': self.gen[:, mpg.GEN_BUS].astype(int),
                                  'Pg (MW)': self.gen[:, mpg.PG],
                                  'Status': self.gen[:, mpg.GEN_STATUS].astype(int)})

    def __str__(self):
        return f"{self.name}: {self.nbus} buses, {self.nbranch} branches, {self.ngen} generators"


def open_case(file_name: str) -> MatpowerCase:
    """
    Read a MATPOWER case file
    :param file_name: .m file name
    :return: MatpowerCase
    """
    return MatpowerCase().read_file(file_name)
