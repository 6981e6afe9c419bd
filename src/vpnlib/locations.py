"""Location catalog: countries and the cities they own."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple


class LocationKind(Enum):
    COUNTRY = "country"
    CITY = "city"


@dataclass(frozen=True)
class Location:
    """A node in the two-level location tree.

    Cities refer to their country by index into ``Catalog.countries`` rather
    than holding the country object, so the tree has no reference cycles.
    """

    name: str
    code: str
    kind: LocationKind
    parent: Optional[int] = None
    children: Tuple["Location", ...] = ()
    detail: str = field(default="", compare=False)

    @property
    def is_country(self) -> bool:
        return self.kind is LocationKind.COUNTRY

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def label(self) -> str:
        """Display label, e.g. ``Sweden (se)``."""
        return f"{self.name} ({self.code})" if self.code else self.name


def country(name: str, code: str = "", cities: Iterable[Tuple[str, str]] = (), index: int = 0) -> Location:
    """Build a country at ``index`` owning ``cities`` given as (name, code) pairs."""
    children = tuple(
        Location(name=c_name, code=c_code, kind=LocationKind.CITY, parent=index)
        for c_name, c_code in cities
    )
    return Location(name=name, code=code, kind=LocationKind.COUNTRY, children=children)


@dataclass(frozen=True)
class Catalog:
    """Ordered, read-only set of countries for one session."""

    countries: Tuple[Location, ...] = ()

    @classmethod
    def from_entries(cls, entries: Iterable[Tuple[str, str, Iterable[Tuple[str, str]]]]) -> "Catalog":
        """Build a catalog from (country name, code, [(city name, code), ...]) triples."""
        return cls(
            tuple(country(name, code, cities, index=i) for i, (name, code, cities) in enumerate(entries))
        )

    def __len__(self) -> int:
        return len(self.countries)

    def __bool__(self) -> bool:
        return bool(self.countries)

    def cities(self, index: int) -> Tuple[Location, ...]:
        return self.countries[index].children

    def index_of(self, location: Location) -> Optional[int]:
        """Index of a country in the catalog, or of a city's owning country."""
        if location.kind is LocationKind.CITY:
            return location.parent
        for i, c in enumerate(self.countries):
            if c == location:
                return i
        return None

    def parent_of(self, location: Location) -> Optional[Location]:
        if location.kind is LocationKind.COUNTRY or location.parent is None:
            return None
        return self.countries[location.parent]

    def location_id(self, location: Location) -> Tuple[str, ...]:
        """Identifier understood by the VPN tool: ``("se",)`` or ``("se", "got")``."""
        parent = self.parent_of(location)
        if parent is None:
            return (location.code,)
        return (parent.code, location.code)

    def find(self, country_name: str, city_name: Optional[str] = None) -> Optional[Location]:
        """Look a location up by name or code, case-insensitively."""

        def _matches(loc: Location, wanted: str) -> bool:
            wanted = wanted.strip().lower()
            return wanted in (loc.name.lower(), loc.code.lower())

        for c in self.countries:
            if not _matches(c, country_name):
                continue
            if city_name is None:
                return c
            for city in c.children:
                if _matches(city, city_name):
                    return city
            return None
        return None


class RelayListParseError(ValueError):
    pass


# "Sweden (se)" / "\tGothenburg (got) @ 57.70887°N, 11.97456°E"
_ENTRY_RE = re.compile(r"^(?P<name>[^()]+?)\s*\((?P<code>[^()]+)\)\s*(?:@\s*(?P<detail>.*))?$")


def _parse_entry(line: str, lineno: int) -> Tuple[str, str, str]:
    match = _ENTRY_RE.match(line.strip())
    if not match:
        raise RelayListParseError(f"line {lineno}: cannot parse location entry: {line.strip()!r}")
    return match.group("name"), match.group("code"), (match.group("detail") or "").strip()


def parse_relay_list(text: str) -> Catalog:
    """Parse ``mullvad relay list`` output into a catalog.

    Countries are unindented, cities are indented by one tab and relays by
    two or more. Relays are not part of the catalog.
    """
    countries: List[Tuple[str, str]] = []
    cities: List[List[Tuple[str, str, str]]] = []

    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        depth = len(line) - len(line.lstrip("\t"))
        if depth == 0:
            name, code, _ = _parse_entry(line, lineno)
            countries.append((name, code))
            cities.append([])
        elif depth == 1:
            if not countries:
                raise RelayListParseError(f"line {lineno}: city listed before any country")
            cities[-1].append(_parse_entry(line, lineno))

    result = []
    for index, ((name, code), owned) in enumerate(zip(countries, cities)):
        children = tuple(
            Location(name=c_name, code=c_code, kind=LocationKind.CITY, parent=index, detail=detail)
            for c_name, c_code, detail in owned
        )
        result.append(Location(name=name, code=code, kind=LocationKind.COUNTRY, children=children))
    return Catalog(tuple(result))
