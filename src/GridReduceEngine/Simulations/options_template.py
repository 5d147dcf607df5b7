# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
# SPDX-License-Identifier: MPL-2.0
from enum import Enum
from typing import Any, Dict, List


class OptionsProperty:
    """
    Registered property of an options object
    """

    def __init__(self, prop_name: str, tpe: Any, units: str = '', definition: str = ''):
        """

        :param prop_name: name of the attribute
        :param tpe: data type
        :param units: units of the property
        :param definition: Definition of the property
        """
        self.name = prop_name

        self.tpe = tpe

        self.units = units

        self.definition = definition

    def __str__(self):
        return self.name

    def __repr__(self):
        return str(self)


class OptionsTemplate:
    """
    Options template
    """

    def __init__(self, name: str):
        """

        :param name: name of the options class
        """
        self.name = name

        self.registered_properties: Dict[str, OptionsProperty] = dict()

        self.property_list: List[OptionsProperty] = list()

    def register(self, key: str, tpe: Any, units: str = '', definition: str = ''):
        """
        Register property
        The property must exist
        :param key: name of the attribute
        :param tpe: data type
        :param units: units of the property
        :param definition: Definition of the property
        """
        assert (hasattr(self, key))  # the property must exist, this avoids bugs when registering

        if key in self.registered_properties.keys():
            raise Exception(f"Property {key} already registered!")

        prop = OptionsProperty(prop_name=key, tpe=tpe, units=units, definition=definition)
        self.registered_properties[key] = prop
        self.property_list.append(prop)

    def to_dict(self) -> Dict[str, Any]:
        """
        Get the registered properties and their values
        Enumerations are given by their value, and functions by their name
        :return: dictionary
        """
        data = dict()
        for prop in self.property_list:
            val = getattr(self, prop.name)
            if isinstance(val, Enum):
                data[prop.name] = val.value
            elif callable(val):
                data[prop.name] = getattr(val, '__name__', str(val))
            else:
                data[prop.name] = val
        return data

    def __str__(self):
        return self.name
