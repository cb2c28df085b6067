# calcheck
# Copyright (C) 2026 The calcheck authors
#
# This program is free software; you can redistribute it and/or
# modify it under the terms of the GNU General Public License
# as published by the Free Software Foundation; version 3
# of the License or (at your option) any later version of
# the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program; if not, write to the Free Software
# Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston,
# MA  02110-1301, USA.

"""Validator configuration.

Settings are taken from the command line, the environment (using the
GitHub Actions INPUT_* convention) and an optional configuration file,
in that order of precedence.
"""

import collections
import configparser
import os

FILENAME = ".calcheck"

DEFAULT_FILES = "**/*.ics"
DEFAULT_FAIL_ON_ERROR = True
DEFAULT_FAIL_ON_WARNING = False
DEFAULT_CONCURRENCY = 8

_TRUE_VALUES = {"true", "yes", "1", "on"}
_FALSE_VALUES = {"false", "no", "0", "off"}


Settings = collections.namedtuple(
    "Settings", ["files", "fail_on_error", "fail_on_warning", "concurrency"]
)


class ConfigError(Exception):
    """Invalid configuration."""

    def __init__(self, message) -> None:
        super().__init__(message)
        self.message = message


def parse_bool(value: str) -> bool:
    if value.strip().lower() in _TRUE_VALUES:
        return True
    if value.strip().lower() in _FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean value {value!r}")


def parse_concurrency(value: str) -> int:
    ret = int(value)
    if ret < 1:
        raise ValueError(f"concurrency must be at least 1, got {ret}")
    return ret


class ValidatorConfig:
    """Source of validator settings.

    Getters raise KeyError when a setting is not configured.
    """

    def get_files(self) -> str:
        """Get the glob pattern(s) of files to validate."""
        raise NotImplementedError(self.get_files)

    def get_fail_on_error(self) -> bool:
        raise NotImplementedError(self.get_fail_on_error)

    def get_fail_on_warning(self) -> bool:
        raise NotImplementedError(self.get_fail_on_warning)

    def get_concurrency(self) -> int:
        raise NotImplementedError(self.get_concurrency)


class FileBasedValidatorConfig(ValidatorConfig):
    """Settings read from an INI-style configuration file."""

    def __init__(self, cp=None) -> None:
        if cp is None:
            cp = configparser.ConfigParser()
        self._configparser = cp

    @classmethod
    def from_file(cls, f):
        cp = configparser.ConfigParser()
        cp.read_file(f)
        return cls(cp)

    @classmethod
    def from_path(cls, path):
        with open(path, encoding="utf-8") as f:
            return cls.from_file(f)

    def get_files(self):
        return self._configparser["DEFAULT"]["files"]

    def get_fail_on_error(self):
        return parse_bool(self._configparser["DEFAULT"]["fail-on-error"])

    def get_fail_on_warning(self):
        return parse_bool(self._configparser["DEFAULT"]["fail-on-warning"])

    def get_concurrency(self):
        return parse_concurrency(self._configparser["DEFAULT"]["concurrency"])


class EnvironValidatorConfig(ValidatorConfig):
    """Settings read from INPUT_* environment variables."""

    def __init__(self, environ=None) -> None:
        if environ is None:
            environ = os.environ
        self._environ = environ

    def _get(self, name):
        value = self._environ["INPUT_" + name.upper()]
        if not value.strip():
            # Unset action inputs are passed as empty strings
            raise KeyError(name)
        return value

    def get_files(self):
        return self._get("files")

    def get_fail_on_error(self):
        return parse_bool(self._get("fail-on-error"))

    def get_fail_on_warning(self):
        return parse_bool(self._get("fail-on-warning"))

    def get_concurrency(self):
        return parse_concurrency(self._get("concurrency"))


def load_configs(config_path=None, environ=None) -> list[ValidatorConfig]:
    """Load configuration sources, highest precedence first.

    Args:
      config_path: Path to a configuration file; if None, FILENAME is
        read from the current directory when it exists
      environ: Environment to read settings from
    """
    configs: list[ValidatorConfig] = [EnvironValidatorConfig(environ)]
    if config_path is None and os.path.exists(FILENAME):
        config_path = FILENAME
    if config_path is not None:
        try:
            configs.append(FileBasedValidatorConfig.from_path(config_path))
        except OSError as exc:
            raise ConfigError(f"Unable to read {config_path}: {exc}") from exc
        except configparser.Error as exc:
            raise ConfigError(f"Invalid configuration in {config_path}: {exc}") from exc
    return configs


def _lookup(configs, getter_name, default):
    for config in configs:
        try:
            return getattr(config, getter_name)()
        except KeyError:
            pass
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
    return default


def resolve_settings(args, configs) -> Settings:
    """Combine command-line options with configuration sources.

    Args:
      args: argparse namespace; options that are None are looked up in
        the configuration sources
      configs: Configuration sources, highest precedence first
    """
    files = args.files
    if files is None:
        files = _lookup(configs, "get_files", DEFAULT_FILES)
    fail_on_error = args.fail_on_error
    if fail_on_error is None:
        fail_on_error = _lookup(configs, "get_fail_on_error", DEFAULT_FAIL_ON_ERROR)
    fail_on_warning = args.fail_on_warning
    if fail_on_warning is None:
        fail_on_warning = _lookup(
            configs, "get_fail_on_warning", DEFAULT_FAIL_ON_WARNING
        )
    concurrency = args.concurrency
    if concurrency is None:
        concurrency = _lookup(configs, "get_concurrency", DEFAULT_CONCURRENCY)
    return Settings(files, fail_on_error, fail_on_warning, concurrency)
