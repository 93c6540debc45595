"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
import configparser
import os
import typing
from journalise_common.configuration.configuration_setup import (
    ConfigItemDataType, ConfigurationSetup, ConfigurationSetupItem)

SECRET_MASK = "********"


class Configuration:
    """
    Layout driven configuration.

    Every item is looked up, in order, in the environment (``SECTION_ITEM``
    upper-cased), in the optional INI file and finally in the layout
    default, then converted to the type declared by the layout.
    """

    def __init__(self):
        self._parser = configparser.ConfigParser()
        self._config_file: typing.Optional[str] = None
        self._has_config_file: bool = False
        self._config_file_required: bool = False
        self._layout: typing.Optional[ConfigurationSetup] = None
        self._config_items: dict[str, dict[str, typing.Any]] = {}

        self._readers: dict[ConfigItemDataType,
                            typing.Callable[[str, ConfigurationSetupItem],
                                            typing.Any]] = {
            ConfigItemDataType.INT: self._read_int,
            ConfigItemDataType.STRING: self._read_str,
            ConfigItemDataType.STRING_LIST: self._read_str_list,
            ConfigItemDataType.BOOLEAN: self._read_bool,
            ConfigItemDataType.FLOAT: self._read_float,
            ConfigItemDataType.UNSIGNED_INT: self._read_uint,
        }

    @property
    def has_config_file(self) -> bool:
        """ True if a configuration file was found and read. """
        return self._has_config_file

    def configure(self,
                  layout: ConfigurationSetup,
                  config_file: typing.Optional[str] = None,
                  file_required: bool = False) -> None:
        """
        Set the layout and optional configuration file.

        Args:
            layout: Schema definition of configuration (required).
            config_file: Path to config file (optional).
            file_required: Whether file must exist and be readable.
        """
        if layout is None:
            raise ValueError("Configuration layout cannot be None.")

        self._config_file = config_file
        self._config_file_required = file_required
        self._layout = layout

    def process_config(self) -> None:
        """
        Read every item declared in the layout.

        Raises:
            RuntimeError: If ``configure`` has not been called.
            ValueError: On unreadable files, missing required items or values
                        that cannot be converted.
        """
        if self._layout is None:
            raise RuntimeError("Configuration layout must be set before "
                               "processing.")

        if self._config_file:
            try:
                files_read = self._parser.read(self._config_file)
            except configparser.Error as ex:
                raise ValueError(
                    f"[ConfigError] Failed to parse file '{self._config_file}'"
                    f": {ex}") from ex

            if not files_read and self._config_file_required:
                raise ValueError(
                    f"[ConfigError] Required config file '{self._config_file}'"
                    " could not be opened.")

            self._has_config_file = bool(files_read)

        self._read_configuration()

    def get_entry(self, section: str, item: str) -> typing.Any:
        """
        Get a parsed configuration value.

        Raises:
            ValueError: If section or item not found.
        """
        try:
            return self._config_items[section][item]
        except KeyError as ex:
            raise ValueError(
                f"[ConfigError] Invalid key '{section}::{item}'") from ex

    def describe(self) -> list[tuple[str, str, typing.Any]]:
        """
        List (section, item, value) for display, with secret items masked.
        """
        entries = []
        for section_name in self._layout.get_sections():
            for item in self._layout.get_section(section_name):
                value = self._config_items.get(section_name, {}).get(
                    item.item_name)
                if item.is_secret and value:
                    value = SECRET_MASK
                entries.append((section_name, item.item_name, value))
        return entries

    def _lookup_value(
            self,
            section: str,
            item: ConfigurationSetupItem) -> typing.Any:
        env_var = f"{section}_{item.item_name}".upper()
        value = os.getenv(env_var)

        if value is None and self._has_config_file:
            try:
                value = self._parser.get(section, item.item_name)
            except (configparser.NoOptionError, configparser.NoSectionError):
                value = None

        if value is None:
            value = item.default_value

        if value is None and item.is_required:
            raise ValueError(f"[ConfigError] Missing required '{section}::"
                             f"{item.item_name}'")
        return value

    def _read_str(self,
                  section: str,
                  item: ConfigurationSetupItem) -> typing.Optional[str]:
        value = self._lookup_value(section, item)

        if value is None:
            return None

        if item.valid_values and value not in item.valid_values:
            raise ValueError(
                f"[ConfigError] '{section}::{item.item_name}' has invalid "
                f"value '{value}', expected one of {item.valid_values}")
        return str(value)

    def _read_str_list(self,
                       section: str,
                       item: ConfigurationSetupItem) -> list[str]:
        value = self._lookup_value(section, item)

        if value is None:
            return []

        if isinstance(value, (list, tuple)):
            entries = value
        else:
            entries = str(value).split(",")

        return [entry.strip() for entry in entries if str(entry).strip()]

    def _read_int(self,
                  section: str,
                  item: ConfigurationSetupItem) -> typing.Optional[int]:
        value = self._lookup_value(section, item)

        if value is None:
            return None

        try:
            return int(value)
        except (ValueError, TypeError) as ex:
            raise ValueError(
                f"[ConfigError] '{section}::{item.item_name}' has invalid "
                f"int '{value}'") from ex

    def _read_uint(self,
                   section: str,
                   item: ConfigurationSetupItem) -> typing.Optional[int]:
        value = self._read_int(section, item)
        if value is None:
            return None
        if value < 0:
            raise ValueError(
                f"[ConfigError] '{section}::{item.item_name}' has invalid "
                f"unsigned int '{value}'")
        return value

    def _read_bool(self,
                   section: str,
                   item: ConfigurationSetupItem) -> typing.Optional[bool]:
        value = self._lookup_value(section, item)

        if value is None or isinstance(value, bool):
            return value

        lowered = str(value).strip().lower()
        if lowered in {"true", "1", "yes", "on"}:
            return True
        if lowered in {"false", "0", "no", "off"}:
            return False

        raise ValueError(
            f"[ConfigError] '{section}::{item.item_name}' has invalid boolean "
            f"'{value}'")

    def _read_float(self,
                    section: str,
                    item: ConfigurationSetupItem) -> typing.Optional[float]:
        value = self._lookup_value(section, item)

        if value is None:
            return None

        try:
            return float(value)
        except (ValueError, TypeError) as ex:
            raise ValueError(
                f"[ConfigError] '{section}::{item.item_name}' has invalid "
                f"float '{value}'") from ex

    def _read_configuration(self) -> None:
        for section_name in self._layout.get_sections():
            section_values = self._config_items.setdefault(section_name, {})

            for section_item in self._layout.get_section(section_name):
                reader = self._readers.get(section_item.item_type)
                if not reader:
                    raise ValueError(
                        f"[ConfigError] Unsupported type "
                        f"'{section_item.item_type}' "
                        f"for '{section_name}::{section_item.item_name}'")

                section_values[section_item.item_name] = \
                    reader(section_name, section_item)
