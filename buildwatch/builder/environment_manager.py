from typing import Optional, List, Protocol, MutableMapping
from dataclasses import dataclass, field
import os

from buildwatch.common.config.constants import DEFAULT_PATCH_VARIABLE
from buildwatch.common.config.logging_config import get_logger
from buildwatch.common.exceptions.build_exceptions import ToolchainNotFoundError
from buildwatch.common.utils.file_utils import (
    split_search_path,
    prepend_search_path,
    find_executable,
)


logger = get_logger(__name__)


@dataclass
class ToolchainLocation:
    entries: List[str] = field(default_factory=list)


@dataclass
class EnvironmentPatch:
    variable: str
    previous: Optional[str] = None
    patched: bool = False
    warning: Optional[str] = None
    restored: bool = False


class ToolchainLocator(Protocol):
    def locate(self, current_value: Optional[str]) -> ToolchainLocation:
        """Return the entries that must be added to the search path.

        Raises ToolchainNotFoundError when the toolchain cannot be found.
        """
        ...


class NullToolchainLocator:
    def locate(self, current_value: Optional[str]) -> ToolchainLocation:
        return ToolchainLocation()


class SearchPathToolchainLocator:
    def __init__(
        self,
        executables: List[str],
        search_paths: Optional[List[str]] = None,
        separator: str = os.pathsep,
    ):
        self._executables = list(executables)
        self._search_paths = list(search_paths or [])
        self._separator = separator

    def locate(self, current_value: Optional[str]) -> ToolchainLocation:
        current_entries = split_search_path(current_value, self._separator)

        missing = [exe for exe in self._executables if not find_executable(exe, current_entries)]
        if not missing:
            return ToolchainLocation()

        entries: List[str] = []
        still_missing: List[str] = []
        for exe in missing:
            found = find_executable(exe, self._search_paths)
            if found is None:
                still_missing.append(exe)
                continue
            directory = os.path.dirname(found)
            if directory not in entries:
                entries.append(directory)

        if still_missing:
            raise ToolchainNotFoundError(
                message=(
                    "WARNING: Could not locate the build toolchain "
                    f"({', '.join(still_missing)}) on the search path or in "
                    f"{', '.join(self._search_paths) or 'any configured directory'}.\n"
                ),
                missing_executables=still_missing,
                searched_paths=self._search_paths,
            )

        return ToolchainLocation(entries=entries)


class EnvironmentPatcher:
    def __init__(
        self,
        locator: Optional[ToolchainLocator] = None,
        variable: str = DEFAULT_PATCH_VARIABLE,
        environ: Optional[MutableMapping[str, str]] = None,
        separator: str = os.pathsep,
    ):
        self._locator = locator or NullToolchainLocator()
        self._variable = variable
        self._environ = environ if environ is not None else os.environ
        self._separator = separator
        self._active: Optional[EnvironmentPatch] = None

    @property
    def variable(self) -> str:
        return self._variable

    @property
    def active_patch(self) -> Optional[EnvironmentPatch]:
        return self._active

    def apply(self) -> EnvironmentPatch:
        if self._active is not None:
            # already patched; hand back the patch holding the original value
            return self._active

        current = self._environ.get(self._variable)

        try:
            location = self._locator.locate(current)
        except ToolchainNotFoundError as e:
            logger.warning(f"Toolchain not found, building with unmodified {self._variable}: {e}")
            return EnvironmentPatch(variable=self._variable, previous=current, warning=e.message)

        current_entries = split_search_path(current, self._separator)
        additions = [entry for entry in location.entries if entry not in current_entries]
        if not additions:
            return EnvironmentPatch(variable=self._variable, previous=current)

        self._environ[self._variable] = prepend_search_path(additions, current, self._separator)
        self._active = EnvironmentPatch(variable=self._variable, previous=current, patched=True)

        logger.debug(f"Prepended {additions} to {self._variable}")
        return self._active

    def restore(self, patch: Optional[EnvironmentPatch]) -> None:
        if patch is None or not patch.patched or patch.restored:
            return

        if patch.previous is None:
            self._environ.pop(patch.variable, None)
        else:
            self._environ[patch.variable] = patch.previous

        patch.restored = True
        if self._active is patch:
            self._active = None

        logger.debug(f"Restored {patch.variable}")
