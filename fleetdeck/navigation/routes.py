"""Typed route registry for dashboard navigation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Pattern, Tuple
from urllib.parse import quote, unquote, urlsplit

NOT_FOUND_PATH = "/404"
_PARAM_SEGMENT = re.compile(r":[^/]+")


@dataclass(frozen=True)
class Route:
    """Represents a named dashboard route."""

    key: str
    path: str
    name: str
    component: str
    icon: Optional[str] = None
    description: Optional[str] = None
    requires_auth: bool = False
    roles: Tuple[str, ...] = ()
    parent: Optional[str] = None
    hidden: bool = False

    @property
    def params(self) -> Tuple[str, ...]:
        return tuple(
            segment[1:] for segment in self.path.split("/") if segment.startswith(":")
        )

    @property
    def is_parametric(self) -> bool:
        return bool(self.params)


def _compile_pattern(path: str) -> Pattern[str]:
    segments = [
        "[^/]+" if segment.startswith(":") else re.escape(segment)
        for segment in path.split("/")
    ]
    return re.compile("^" + "/".join(segments) + "$")


def _normalize(path: str) -> str:
    raw = urlsplit(path or "/").path or "/"
    if len(raw) > 1 and raw.endswith("/"):
        raw = raw.rstrip("/") or "/"
    return raw


class RouteTable:
    """Immutable lookup structure over an ordered set of routes."""

    def __init__(self, routes: Iterable[Route]) -> None:
        ordered = tuple(routes)
        by_key: Dict[str, Route] = {}
        by_path: Dict[str, Route] = {}
        for route in ordered:
            if route.key in by_key:
                raise ValueError(f"Duplicate route key '{route.key}'")
            if route.path in by_path:
                raise ValueError(
                    f"Duplicate route path '{route.path}' "
                    f"({by_path[route.path].key}, {route.key})"
                )
            by_key[route.key] = route
            by_path[route.path] = route
        self._routes = ordered
        self._by_key = by_key
        self._by_path = by_path
        self._patterns: Tuple[Tuple[Route, Pattern[str]], ...] = tuple(
            (route, _compile_pattern(route.path)) for route in ordered
        )

    def __iter__(self):
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def get(self, key: str) -> Optional[Route]:
        return self._by_key.get(key)

    def resolve(self, path: str) -> Optional[Route]:
        """Find the route serving a concrete path.

        A static path registered verbatim wins over a parametric sibling, so
        ``/loads/create`` resolves to the create view rather than to
        ``/loads/:id``. Otherwise the first pattern in registry order that
        matches the whole path is returned.
        """
        concrete = _normalize(path)
        exact = self._by_path.get(concrete)
        if exact is not None:
            return exact
        for route, pattern in self._patterns:
            if pattern.fullmatch(concrete):
                return route
        return None

    def extract_params(self, route: Route, path: str) -> Dict[str, str]:
        """Pull ``:name`` segment values for ``route`` out of a concrete path."""
        concrete = _normalize(path).split("/")
        template = route.path.split("/")
        if len(concrete) != len(template):
            return {}
        return {
            segment[1:]: unquote(value)
            for segment, value in zip(template, concrete)
            if segment.startswith(":")
        }

    def resolve_or_not_found(self, path: str) -> Route:
        route = self.resolve(path)
        if route is not None:
            return route
        fallback = self._by_path.get(NOT_FOUND_PATH)
        if fallback is None:
            raise LookupError("Route table has no not-found route")
        return fallback

    def list_top_level(self) -> List[Route]:
        return [route for route in self._routes if not route.parent and not route.hidden]

    def list_children(self, parent_key: str) -> List[Route]:
        return [route for route in self._routes if route.parent == parent_key]

    def build(self, route_key: str, params: Optional[Mapping[str, object]] = None) -> str:
        """Build a concrete path for ``route_key``; unknown keys give ``/404``."""
        route = self._by_key.get(route_key)
        if route is None:
            return NOT_FOUND_PATH
        if not params:
            return route.path

        def _substitute(match: "re.Match[str]") -> str:
            name = match.group(0)[1:]
            if name not in params:
                return match.group(0)
            return quote(str(params[name]), safe="")

        return _PARAM_SEGMENT.sub(_substitute, route.path)

    def matches(self, path: str) -> bool:
        """Return True when ``path`` fully matches a registered pattern.

        The path is normalized the same way ``resolve`` normalizes it.
        """
        concrete = _normalize(path)
        return any(pattern.fullmatch(concrete) for _, pattern in self._patterns)

    def breadcrumb(self, route_key: str) -> List[Route]:
        chain: List[Route] = []
        seen = set()
        current = self._by_key.get(route_key)
        while current is not None and current.key not in seen:
            seen.add(current.key)
            chain.append(current)
            current = self._by_key.get(current.parent) if current.parent else None
        chain.reverse()
        return chain


ROUTES: Tuple[Route, ...] = (
    # Main dashboard
    Route("HOME", "/", "Dashboard", "Dashboard", icon="LayoutDashboard",
          description="Main dashboard overview"),
    # Load management
    Route("LOADS", "/loads", "Load Board", "LoadBoard", icon="Truck",
          description="Manage and view all loads"),
    Route("LOAD_DETAILS", "/loads/:id", "Load Details", "LoadDetails",
          parent="LOADS", hidden=True),
    Route("CREATE_LOAD", "/loads/create", "Create Load", "CreateLoad", parent="LOADS"),
    # Driver management
    Route("DRIVERS", "/drivers", "Drivers", "Drivers", icon="Users",
          description="Manage driver fleet"),
    Route("DRIVER_DETAILS", "/drivers/:id", "Driver Details", "DriverDetails",
          parent="DRIVERS", hidden=True),
    Route("CREATE_DRIVER", "/drivers/create", "Add Driver", "CreateDriver",
          parent="DRIVERS"),
    # Negotiations
    Route("NEGOTIATIONS", "/negotiations", "Negotiations", "Negotiations",
          icon="MessageSquare", description="AI-powered rate negotiations"),
    Route("NEGOTIATION_DETAILS", "/negotiations/:id", "Negotiation Details",
          "NegotiationDetails", parent="NEGOTIATIONS", hidden=True),
    # Analytics and reports
    Route("ANALYTICS", "/analytics", "Analytics", "Analytics", icon="BarChart3",
          description="Performance analytics and reports"),
    Route("REPORTS", "/reports", "Reports", "Reports", icon="FileText",
          description="Generate and view reports"),
    # Settings
    Route("SETTINGS", "/settings", "Settings", "Settings", icon="Settings",
          description="Application settings"),
    Route("COMPANY_PROFILE", "/settings/company", "Company Profile", "CompanyProfile",
          parent="SETTINGS"),
    Route("USER_PREFERENCES", "/settings/preferences", "User Preferences",
          "UserPreferences", parent="SETTINGS"),
    Route("API_SETTINGS", "/settings/api", "API Configuration", "APISettings",
          parent="SETTINGS"),
    # Mobile
    Route("MOBILE_DASHBOARD", "/mobile", "Mobile Dashboard", "MobileDashboard",
          hidden=True),
    Route("MOBILE_LOADS", "/mobile/loads", "Mobile Loads", "MobileLoads", hidden=True),
    # Error pages
    Route("NOT_FOUND", NOT_FOUND_PATH, "Page Not Found", "NotFound", hidden=True),
    Route("UNAUTHORIZED", "/unauthorized", "Unauthorized", "Unauthorized", hidden=True),
)

route_table = RouteTable(ROUTES)
