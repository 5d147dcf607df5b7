# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0

from typing import List, Any, Dict, Union
import datetime
import pandas as pd
import nptyping as npt
from scipy.sparse import csc_matrix
from GridReduceEngine.enumerations import LogSeverity

IntVec = npt.NDArray[npt.Shape['*'], npt.Int]
BoolVec = npt.NDArray[npt.Shape['*'], npt.Bool]
Vec = npt.NDArray[npt.Shape['*'], npt.Double]
Mat = npt.NDArray[npt.Shape['*, *'], npt.Double]
IntMat = npt.NDArray[npt.Shape['*, *'], npt.Int]
CscMat = csc_matrix


class LogEntry:
    """
    Logger entry
    """

    def __init__(self,
                 time: Union[str, None] = None,
                 msg="",
                 severity: LogSeverity = LogSeverity.Information,
                 device="",
                 value="",
                 expected_value="",
                 device_class="",
                 device_property=""):
        if time is None:
            self.time = "{date:%H:%M:%S}".format(date=datetime.datetime.now())
        else:
            self.time = time
        self.msg = str(msg)
        self.severity = severity
        self.device = device
        self.device_class = device_class
        self.device_property = device_property
        self.value = value
        self.expected_value = str(expected_value)

    def to_list(self) -> List[Any]:
        """
        Get list representation of this entry
        :return:
        """
        return [self.time, self.severity.value, self.msg,
                self.device_class, self.device_property, self.device,
                self.value, self.expected_value]

    def to_list_reduced(self) -> List[Any]:
        """
        Get the list representation without severity and message
        :return:
        """
        return [self.time, self.device_class, self.device_property, self.device, self.value, self.expected_value]

    def __str__(self):
        return "{0} {1}: {2} {3} {4} {5}".format(self.time,
                                                 self.severity.value,
                                                 self.msg,
                                                 self.device,
                                                 self.value,
                                                 self.expected_value)


class Logger:
    """
    Logger class
    """

    def __init__(self) -> None:

        self.entries: List[LogEntry] = list()

    def has_logs(self) -> bool:
        """
        Are there any logs?
        :return: True / False
        """
        return len(self.entries) > 0

    def add(self, msg: str, severity: LogSeverity = LogSeverity.Error, device="", value="", expected_value="",
            device_class='', device_property=''):
        """
        Add general entry
        :param msg: message
        :param severity: LogSeverity
        :param device: device identifier (i.e. the bus number)
        :param value: value found
        :param expected_value: value expected
        :param device_class: class of the device (Bus, Branch, Generator, ...)
        :param device_property: property of the device concerned
        """
        self.entries.append(LogEntry(msg=str(msg),
                                     severity=severity,
                                     device=str(device),
                                     value=str(value),
                                     expected_value=str(expected_value),
                                     device_class=str(device_class),
                                     device_property=str(device_property)))

    def add_info(self, msg: str, device="", value="", expected_value="", device_class='', device_property=''):
        """
        Add info entry
        """
        self.add(msg=msg, severity=LogSeverity.Information, device=device, value=value,
                 expected_value=expected_value, device_class=device_class, device_property=device_property)

    def add_warning(self, msg: str, device="", value="", expected_value="", device_class='', device_property=''):
        """
        Add warning entry
        """
        self.add(msg=msg, severity=LogSeverity.Warning, device=device, value=value,
                 expected_value=expected_value, device_class=device_class, device_property=device_property)

    def add_error(self, msg: str, device="", value="", expected_value="", device_class='', device_property=''):
        """
        Add error entry
        """
        self.add(msg=msg, severity=LogSeverity.Error, device=device, value=value,
                 expected_value=expected_value, device_class=device_class, device_property=device_property)

    def add_divergence(self, msg, device="", value=0.0, expected_value=0.0, tol=1e-6, device_class=''):
        """
        Add divergence entry, only if the value and the expected value differ more than tol
        :param msg: message
        :param device: device identifier
        :param value: value found
        :param expected_value: value expected
        :param tol: tolerance
        :param device_class: class of the device
        """
        if abs(value - expected_value) > tol:
            self.add(msg=msg, severity=LogSeverity.Divergence, device=device, value=value,
                     expected_value=expected_value, device_class=device_class)

    def to_dict(self) -> Dict[str, Dict[str, List[List[str]]]]:
        """
        Get the logs sorted by severity and message
        :return: Dictionary[Dictionary[List[time, class, property, device, value, expected value]]]
        """
        by_severity = dict()

        for e in self.entries:

            if e.severity.value not in by_severity.keys():
                by_severity[e.severity.value] = dict()

            by_msg = by_severity[e.severity.value]

            if e.msg in by_msg.keys():
                by_msg[e.msg].append(e.to_list_reduced())
            else:
                by_msg[e.msg] = [e.to_list_reduced()]

        return by_severity

    def to_df(self) -> pd.DataFrame:
        """
        Get DataFrame
        :return: DataFrame
        """
        data = [e.to_list() for e in self.entries]
        df = pd.DataFrame(data=data, columns=['Time', 'Severity', 'Message', 'Class',
                                              'Property', 'Device', 'Value', 'Expected value'])
        df.set_index('Time', inplace=True)
        return df

    def to_csv(self, fname):
        """
        Save to CSV
        :param fname: file name
        """
        self.to_df().to_csv(fname)

    def print(self) -> None:
        """
        Print the logs
        """
        print(self.to_df())

    def __str__(self):

        val = ''
        for e in self.entries:
            val += str(e) + '\n'
        return val

    def __getitem__(self, key):
        return self.entries[key]

    def __iadd__(self, other: "Logger"):
        """
        += implementation
        :param other: Logger
        """
        if other is not None:
            self.entries += other.entries
        return self

    def __len__(self) -> int:
        return len(self.entries)

    def count_type(self, severity: LogSeverity) -> int:
        """
        Count the number of entries of a certain severity
        :param severity: LogSeverity
        :return: number of occurrences
        """
        c = 0
        for entry in self.entries:
            if entry.severity == severity:
                c += 1

        return c

    def info_count(self) -> int:
        """
        Count the number of information occurrences
        """
        return self.count_type(LogSeverity.Information)

    def warning_count(self) -> int:
        """
        Count number of warnings
        """
        return self.count_type(LogSeverity.Warning)

    def error_count(self) -> int:
        """
        Count number of errors
        """
        return self.count_type(LogSeverity.Error)

    def find(self, msg: str) -> List[LogEntry]:
        """
        Get the entries whose message contains the given text
        :param msg: text to look for
        :return: list of LogEntry
        """
        return [e for e in self.entries if msg in e.msg]
