"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
import enum
import typing
from dataclasses import dataclass


class ConfigItemDataType(enum.Enum):
    """ Enumeration for configuration item data type """
    BOOLEAN = "bool"
    FLOAT = "float"
    INT = "int"
    STRING = "string"
    STRING_LIST = "string_list"
    UNSIGNED_INT = "uint"


@dataclass(frozen=True)
class ConfigurationSetupItem:
    """
    Describes one configuration key.

    Attributes:
        item_name: Key name inside its section.
        item_type: Type the raw value is converted to.
        valid_values: Optional whitelist for string items.
        is_required: Raise if no source provides a value.
        default_value: Value used when no source provides one.
        is_secret: Mask the value when the configuration is displayed.
    """

    item_name: str
    item_type: ConfigItemDataType
    valid_values: typing.Optional[list] = None
    is_required: bool = False
    default_value: typing.Optional[object] = None
    is_secret: bool = False


class ConfigurationSetup:
    """
    Configuration layout: section name -> list of setup items.
    """

    def __init__(self, setup_items: dict) -> None:
        """
        Initialize the ConfigurationSetup.

        Args:
            setup_items: A dictionary mapping section names (str) to lists of
                         ConfigurationSetupItem instances.
        """
        if not isinstance(setup_items, dict):
            raise TypeError("setup_items must be a dict[str, "
                            "list[ConfigurationSetupItem]]")

        self._items = setup_items

    def get_sections(self) -> list:
        """
        Get a list of sections available.

        Returns:
            List of strings that represent the sections available.
        """
        return list(self._items.keys())

    def get_section(self, name: str) -> list[ConfigurationSetupItem]:
        """
        Get the configuration items for a section, or an empty list if the
        section is unknown.
        """
        return self._items.get(name, [])
