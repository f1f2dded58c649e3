"""
============================================================
ENRON MAIL ACTIVITY — PEOPLE
============================================================
Looks up the names of all the people, discarding those
without valid names, and unifies records that share the
same canonical name under the first person id seen with it.
============================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

import pandas as pd

from rows import Skip, parse_actor_row

UNKNOWN = "unknown"

# Known data artifact: rows literally named "e-mail" at enron.com.
BOGUS = ("e-mail", "enron.com")

_SPACES_RE = re.compile(r" {2,}")


@dataclass(frozen=True)
class Person:
    """
    raw_id     -- people.personid
    unified_id -- same as raw_id unless an earlier record has the same name
    name       -- canonicalized personal name: real name or e-mail prefix derived
    """

    raw_id: int
    unified_id: int
    name: str

    @property
    def is_primary(self) -> bool:
        return self.raw_id == self.unified_id


def split_address(address: Optional[str]) -> Tuple[str, str]:
    """(local part, domain) of an e-mail address, quotes stripped."""
    if address is None:
        return UNKNOWN, UNKNOWN
    cleaned = address.replace('"', "").replace("'", "")
    parts = cleaned.split("@")
    # Trailing empty fields do not count: "john@" has no domain, "a@b@" has one.
    while parts and parts[-1] == "":
        parts.pop()
    if len(parts) != 2:
        return cleaned, UNKNOWN
    return parts[0], parts[1]


def display_name(name: Optional[str], local: str) -> str:
    if name is None:
        return local
    stripped = name.replace('"', "")
    return stripped if stripped else local


def is_bogus(name: str, domain: str) -> bool:
    return (name, domain) == BOGUS or name == UNKNOWN or domain == UNKNOWN


def canonical_name(name: str) -> str:
    return _SPACES_RE.sub(" ", name.upper().replace(".", " ")).strip()


@dataclass
class NameRegistry:
    """Canonical name -> first person id seen with it. Lives for one resolution pass."""

    first_ids: Dict[str, int] = field(default_factory=dict)

    def claim(self, name: str, raw_id: int) -> int:
        return self.first_ids.setdefault(name, raw_id)


def resolve_row(raw_id: int, email: Optional[str], name: Optional[str],
                registry: NameRegistry) -> Optional[Person]:
    local, domain = split_address(email)
    raw_name = display_name(name, local)
    if is_bogus(raw_name, domain):
        return None
    canon = canonical_name(raw_name)
    if not canon:
        return None
    return Person(raw_id, registry.claim(canon, raw_id), canon)


def resolve_people(rows: Iterable[Sequence[Any]]) -> Dict[int, Person]:
    """
    Resolve (person id, e-mail, name) rows in a single sequential pass.
    Rows that cannot be parsed or carry bogus names are left out.
    Result is ordered by ascending person id.
    """
    registry = NameRegistry()
    people: Dict[int, Person] = {}
    for row in rows:
        parsed = parse_actor_row(row)
        if isinstance(parsed, Skip):
            continue
        person = resolve_row(parsed.raw_id, parsed.email, parsed.name, registry)
        if person is not None:
            people[person.raw_id] = person
    return dict(sorted(people.items()))


def unified_ids(people: Dict[int, Person]) -> Dict[int, int]:
    return {pid: p.unified_id for pid, p in people.items()}


def people_frame(people: Dict[int, Person]) -> pd.DataFrame:
    return pd.DataFrame(
        [(p.raw_id, p.unified_id, p.name) for p in people.values()],
        columns=["pid", "unified", "name"],
    )
