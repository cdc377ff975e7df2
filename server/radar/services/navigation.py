"""Navigation state machine for the dashboard, timeline and changelog screens."""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models import PackageInfo, VersionInfo

logger = logging.getLogger(__name__)


class NavigationView(str, Enum):
    """Screens of the radar UI."""

    DASHBOARD = "dashboard"
    TIMELINE = "timeline"
    CHANGELOG = "changelog"


class InvalidTransitionError(ValueError):
    """A transition was requested without the selections it requires."""


@dataclass(frozen=True)
class NavigationState:
    """Consistent snapshot of the navigation machine."""
    current_view: NavigationView
    selected_package: Optional[PackageInfo]
    selected_version: Optional[VersionInfo]
    view_history: tuple[NavigationView, ...]

    def to_dict(self) -> dict:
        return {
            "currentView": self.current_view.value,
            "selectedPackage": (
                self.selected_package.model_dump(by_alias=True)
                if self.selected_package else None
            ),
            "selectedVersion": (
                self.selected_version.model_dump(by_alias=True)
                if self.selected_version else None
            ),
            "viewHistory": [view.value for view in self.view_history],
        }


INITIAL_STATE = NavigationState(
    current_view=NavigationView.DASHBOARD,
    selected_package=None,
    selected_version=None,
    view_history=(NavigationView.DASHBOARD,),
)


def _push(history: tuple[NavigationView, ...], view: NavigationView) -> tuple[NavigationView, ...]:
    if history[-1] is view:
        return history
    return history + (view,)


def _satisfied(view: NavigationView, package: Optional[PackageInfo], version: Optional[VersionInfo]) -> bool:
    if view is NavigationView.TIMELINE:
        return package is not None
    if view is NavigationView.CHANGELOG:
        return package is not None and version is not None
    return True


class NavigationMachine:
    """Tracks the active screen, the selected package/version and a history stack.

    Any screen can be reached from any other. ``back`` pops exactly one entry
    and floors at the dashboard. Every state, including the one observed
    through ``state``, satisfies:

    * the history is non-empty and starts with the dashboard;
    * no two consecutive history entries are equal;
    * the timeline has a package, the changelog a package and a version;
    * the dashboard has no selections.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._state = INITIAL_STATE

    @property
    def state(self) -> NavigationState:
        with self._lock:
            return self._state

    @property
    def current_view(self) -> NavigationView:
        return self.state.current_view

    @property
    def selected_package(self) -> Optional[PackageInfo]:
        return self.state.selected_package

    @property
    def selected_version(self) -> Optional[VersionInfo]:
        return self.state.selected_version

    def to_dashboard(self) -> NavigationState:
        with self._lock:
            self._state = NavigationState(
                current_view=NavigationView.DASHBOARD,
                selected_package=None,
                selected_version=None,
                view_history=_push(self._state.view_history, NavigationView.DASHBOARD),
            )
            return self._state

    def to_timeline(self, package: PackageInfo) -> NavigationState:
        if package is None:
            raise InvalidTransitionError("timeline requires a package")
        with self._lock:
            self._state = NavigationState(
                current_view=NavigationView.TIMELINE,
                selected_package=package,
                selected_version=self._state.selected_version,
                view_history=_push(self._state.view_history, NavigationView.TIMELINE),
            )
            logger.debug("Navigated to timeline of %s", package.npm_name)
            return self._state

    def to_changelog(self, package: PackageInfo, version: VersionInfo) -> NavigationState:
        if package is None:
            raise InvalidTransitionError("changelog requires a package")
        if version is None:
            raise InvalidTransitionError("changelog requires a version")
        with self._lock:
            self._state = NavigationState(
                current_view=NavigationView.CHANGELOG,
                selected_package=package,
                selected_version=version,
                view_history=_push(self._state.view_history, NavigationView.CHANGELOG),
            )
            logger.debug("Navigated to changelog of %s %s", package.npm_name, version.version)
            return self._state

    def back(self) -> NavigationState:
        with self._lock:
            history = self._state.view_history
            if len(history) <= 1:
                self._state = INITIAL_STATE
                return self._state

            history = history[:-1]
            previous = history[-1]
            package = self._state.selected_package
            version = self._state.selected_version

            if previous is NavigationView.DASHBOARD:
                package = version = None
            elif not _satisfied(previous, package, version):
                # Selections were cleared by a dashboard visit further up the stack
                logger.debug("Cannot restore %s without selections; returning to root", previous.value)
                self._state = INITIAL_STATE
                return self._state

            self._state = NavigationState(
                current_view=previous,
                selected_package=package,
                selected_version=version,
                view_history=history,
            )
            return self._state

    def reset(self) -> NavigationState:
        with self._lock:
            self._state = INITIAL_STATE
            return self._state
