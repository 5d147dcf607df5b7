# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
import re
from typing import List
import numpy as np
from GridReduceEngine.basic_structures import Mat


def find_between(s: str, first: str, last: str) -> str:
    """
    Find sting between two sub-strings
    Args:
        s: Main string
        first: first sub-string
        last: second sub-string
    Example find_between('[Hello]', '[', ']')  -> returns 'Hello'
    Returns:
        String between the first and second sub-strings, if any was found otherwise returns an empty string
    """
    try:
        start = s.index(first) + len(first)
        end = s.index(last, start)
        return s[start:end]
    except ValueError:
        return ""


def remove_comments(text: str) -> str:
    """
    Remove the MATLAB comments (everything after a % sign) of every line
    :param text: .m file text
    :return: text without comments
    """
    lines = list()
    for line in text.split('\n'):
        pos = line.find('%')
        if pos >= 0:
            line = line[:pos]
        lines.append(line)
    return '\n'.join(lines)


def txt2mat(txt: str) -> Mat:
    """
    Convert the text of a MATLAB numeric matrix into a numpy array
    Rows are separated by ';' or new lines, values by blanks, tabs or commas.
    Rows shorter than the longest one are padded with zeros.
    :param txt: text between the brackets
    :return: 2D float array
    """
    rows: List[List[float]] = list()
    for line in re.split(r'[;\n]', txt):
        vec = line.replace(',', ' ').split()
        if len(vec):
            rows.append([float(val) for val in vec])

    if len(rows) == 0:
        return np.zeros((0, 0))

    ncols = max(len(row) for row in rows)
    arr = np.zeros((len(rows), ncols))
    for i, row in enumerate(rows):
        arr[i, :len(row)] = row

    return arr


def txt2str_list(txt: str) -> List[str]:
    """
    Convert the text of a MATLAB cell array of strings into a list of strings
    :param txt: text between the braces
    :return: list of strings
    """
    return re.findall(r"'([^']*)'", txt)


def num2str(val: float) -> str:
    """
    Write a number so that it can be read back without loss
    :param val: float value
    :return: text
    """
    val = float(val)
    if val.is_integer() and abs(val) < 1e15:
        return str(int(val))
    return repr(val)


def mat2txt(arr: Mat, indent='\t') -> str:
    """
    Convert a numpy 2D array into the text of a MATLAB matrix (rows ended with ';')
    :param arr: 2D array
    :param indent: row indentation
    :return: text
    """
    lines = list()
    for i in range(arr.shape[0]):
        lines.append(indent + '\t'.join(num2str(v) for v in arr[i, :]) + ';')
    return '\n'.join(lines)
