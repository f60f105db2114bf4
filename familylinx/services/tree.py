"""
Group tree aggregation and navigation.

Works on an in-memory snapshot of a family's groups (``{group_id: Group}``)
and provides:
- Recursive member counts, photo collection and average age
- Member and photo filtering for search
- Parent person, breadcrumbs, root lookup and group URLs
- Slug lookup and nested hierarchy views

Members link to child groups through ``sub_group_id``; groups link to their
parent through ``parent_group_id``. Every walk keeps a visited set so a
malformed link cycle terminates.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Iterator, Mapping, Optional

from familylinx.models.documents import Person, Photo
from familylinx.models.family import Group
from familylinx.utils import as_utc, calculate_age, sort_photos_by_year

UNKNOWN_ROOT_SLUG = "unknown"


@dataclass
class PhotoEntry:
    """A photo tagged with the member it belongs to."""

    photo: Photo
    member_id: str
    member_name: str
    member_year_of_birth: int
    group_id: str

    @property
    def year_taken(self) -> int:
        return self.photo.year_taken


@dataclass
class Breadcrumb:
    """One step of the path from a root group down to the current group."""

    id: str
    name: str
    slug: Optional[str]
    url: str


@dataclass
class GroupStats:
    """Summary figures shown in a group's header."""

    direct_members: int
    total_members: int
    direct_photos: int
    total_photos: int
    average_age: Optional[float]
    sub_group_count: int


@dataclass
class HierarchyNode:
    """A group with its child groups, as printed by ``show-hierarchy``."""

    id: str
    name: str
    slug: Optional[str]
    path: str
    member_count: int
    children: list["HierarchyNode"] = field(default_factory=list)

    def walk(self, depth: int = 0) -> Iterator[tuple[int, "HierarchyNode"]]:
        """Depth-first iteration yielding ``(depth, node)``."""
        yield depth, self
        for child in self.children:
            yield from child.walk(depth + 1)


_NEVER = datetime.max.replace(tzinfo=timezone.utc)


def _creation_order(group: Group) -> tuple[datetime, str]:
    return as_utc(group.created_at) or _NEVER, group.id


def _matches(person: Person, query: str) -> bool:
    q = query.lower()
    return q in person.name.lower() or q in person.relationship.lower()


class GroupTree:
    """
    Read-only view over a family's groups.

    Person documents are parsed once when the tree is built, so the tree does
    not observe writes made afterwards; build a new one after mutating.
    """

    def __init__(self, groups: Mapping[str, Group], family_id: Optional[str] = None):
        self.groups: dict[str, Group] = dict(groups)
        self.family_id = family_id
        self._persons: dict[str, list[Person]] = {
            group_id: group.persons for group_id, group in self.groups.items()
        }

    @classmethod
    def from_groups(cls, groups: Iterable[Group], family_id: Optional[str] = None) -> "GroupTree":
        return cls({group.id: group for group in groups}, family_id=family_id)

    def get(self, group_id: str) -> Optional[Group]:
        return self.groups.get(group_id)

    def persons(self, group_id: str) -> list[Person]:
        """Direct members of a group (empty for unknown ids)."""
        return list(self._persons.get(group_id, []))

    # =========================================================================
    # Recursive aggregation
    # =========================================================================

    def _walk_persons(
        self,
        group_id: str,
        visited: Optional[set[str]] = None,
    ) -> Iterator[tuple[str, Person]]:
        """Yield ``(group_id, person)`` for a group and all sub-groups, depth first."""
        if visited is None:
            visited = set()
        if group_id in visited or group_id not in self.groups:
            return
        visited.add(group_id)

        for person in self._persons[group_id]:
            yield group_id, person
            if person.sub_group_id:
                yield from self._walk_persons(person.sub_group_id, visited)

    def count_members(self, group_id: str) -> int:
        """Members of the group plus members of every reachable sub-group."""
        return sum(1 for _ in self._walk_persons(group_id))

    def collect_photos(self, group_id: str) -> list[PhotoEntry]:
        """Every photo of every member, recursively, in traversal order."""
        return [
            PhotoEntry(
                photo=photo,
                member_id=person.id,
                member_name=person.name,
                member_year_of_birth=person.year_of_birth,
                group_id=owner_id,
            )
            for owner_id, person in self._walk_persons(group_id)
            for photo in person.photos
        ]

    def average_age(self, group_id: str, current_year: Optional[int] = None) -> Optional[float]:
        """
        Mean age over all members with a known year of birth.

        Returns:
            Average age rounded to one decimal, or None when nobody has a
            known year of birth
        """
        ages = [
            calculate_age(person.year_of_birth, person.year_of_death, current_year)
            for _, person in self._walk_persons(group_id)
            if person.year_of_birth
        ]
        if not ages:
            return None
        return round(sum(ages) / len(ages), 1)

    def group_photo_count(self, group_id: str) -> int:
        """Photos of the group's direct members only."""
        return sum(len(person.photos) for person in self._persons.get(group_id, []))

    def group_stats(self, group_id: str, current_year: Optional[int] = None) -> GroupStats:
        return GroupStats(
            direct_members=len(self._persons.get(group_id, [])),
            total_members=self.count_members(group_id),
            direct_photos=self.group_photo_count(group_id),
            total_photos=len(self.collect_photos(group_id)),
            average_age=self.average_age(group_id, current_year),
            sub_group_count=len(self.expanded_sub_groups(group_id)),
        )

    # =========================================================================
    # Search
    # =========================================================================

    def has_matching_members(
        self,
        group_id: str,
        query: str,
        _visited: Optional[set[str]] = None,
    ) -> bool:
        """True if a member of the group, or of any sub-group, matches the query."""
        visited = _visited if _visited is not None else set()
        if group_id in visited or group_id not in self.groups:
            return False
        visited.add(group_id)

        persons = self._persons[group_id]
        if any(_matches(person, query) for person in persons):
            return True
        return any(
            person.sub_group_id and self.has_matching_members(person.sub_group_id, query, visited)
            for person in persons
        )

    def filter_members(self, group_id: str, query: str = "") -> list[Person]:
        """
        Direct members to show for a search, oldest first.

        A member is kept when its name or relationship contains the query
        (case-insensitive) or when its sub-group has a match somewhere below.
        An empty query keeps everyone.
        """
        persons = self._persons.get(group_id, [])
        if query:
            persons = [
                person
                for person in persons
                if _matches(person, query)
                or (person.sub_group_id and self.has_matching_members(person.sub_group_id, query))
            ]
        return sorted(persons, key=lambda person: person.year_of_birth)

    def expanded_sub_groups(self, group_id: str) -> list[str]:
        """Sub-group ids reachable from the group through members (opened while searching)."""
        result: list[str] = []
        visited = {group_id}
        stack = [group_id]
        while stack:
            current = stack.pop()
            for person in self._persons.get(current, []):
                child_id = person.sub_group_id
                if not child_id or child_id in visited or child_id not in self.groups:
                    continue
                visited.add(child_id)
                result.append(child_id)
                stack.append(child_id)
        return result

    def timeline_people(self, query: str = "", min_photos: int = 3) -> list[Person]:
        """
        People across all root trees with at least ``min_photos`` photos.

        Photos are ordered oldest first; a query filters by name.
        """
        visited: set[str] = set()
        people: list[Person] = []
        for root in self.roots():
            for _, person in self._walk_persons(root.id, visited):
                if len(person.photos) < min_photos:
                    continue
                if query.strip() and query.lower() not in person.name.lower():
                    continue
                people.append(person.model_copy(update={"photos": sort_photos_by_year(person.photos)}))
        return people

    @staticmethod
    def available_years(photos: Iterable[PhotoEntry]) -> list[int]:
        """Distinct ``year_taken`` values, newest first."""
        return sorted({entry.year_taken for entry in photos}, reverse=True)

    @staticmethod
    def filter_photos(
        photos: Iterable[PhotoEntry],
        query: str = "",
        year: Optional[int] = None,
    ) -> list[PhotoEntry]:
        """
        Filter collected photos.

        The query matches the member name (case-insensitive) or appears in the
        year taken or the member's year of birth. ``year`` must equal the year
        taken exactly.
        """
        result = list(photos)
        if query.strip():
            q = query.lower()
            result = [
                entry
                for entry in result
                if q in entry.member_name.lower()
                or q in str(entry.year_taken)
                or q in str(entry.member_year_of_birth)
            ]
        if year is not None:
            result = [entry for entry in result if entry.year_taken == year]
        return result

    # =========================================================================
    # Navigation
    # =========================================================================

    def parent_person(self, group_id: str) -> Optional[Person]:
        """The member of the parent group whose ``sub_group_id`` is this group."""
        group = self.groups.get(group_id)
        if group is None or not group.parent_group_id:
            return None
        for person in self._persons.get(group.parent_group_id, []):
            if person.sub_group_id == group_id:
                return person
        return None

    def find_person(self, person_id: str) -> Optional[tuple[Group, Person]]:
        for group_id, persons in self._persons.items():
            for person in persons:
                if person.id == person_id:
                    return self.groups[group_id], person
        return None

    def ancestors(self, group_id: str) -> list[Group]:
        """Groups from the root down to (and including) ``group_id``."""
        chain: list[Group] = []
        seen: set[str] = set()
        current = self.groups.get(group_id)
        while current is not None and current.id not in seen:
            seen.add(current.id)
            chain.append(current)
            if not current.parent_group_id:
                break
            current = self.groups.get(current.parent_group_id)
        chain.reverse()
        return chain

    def find_root(self, group_id: str) -> Optional[Group]:
        """Topmost reachable ancestor; None when the chain is broken."""
        chain = self.ancestors(group_id)
        if not chain or chain[0].parent_group_id:
            return None
        return chain[0]

    def root_slug(self, group_id: str) -> str:
        root = self.find_root(group_id)
        if root is None or not root.slug:
            return UNKNOWN_ROOT_SLUG
        return root.slug

    def group_url(self, group_id: str) -> str:
        """
        Page URL of a group.

        Roots live at ``/{slug or family_id}``; everything else at
        ``/{root_slug}/{slug or id}``.
        """
        group = self.groups[group_id]
        if group.is_root:
            return f"/{group.slug or group.family_id}"
        return f"/{self.root_slug(group_id)}/{group.slug or group.id}"

    def breadcrumbs(self, group_id: str) -> list[Breadcrumb]:
        return [
            Breadcrumb(id=group.id, name=group.name, slug=group.slug, url=self.group_url(group.id))
            for group in self.ancestors(group_id)
        ]

    def roots(self) -> list[Group]:
        """Root groups, oldest first."""
        return sorted(
            (group for group in self.groups.values() if group.is_root),
            key=_creation_order,
        )

    def children_of(self, group_id: str) -> list[Group]:
        return sorted(
            (group for group in self.groups.values() if group.parent_group_id == group_id),
            key=lambda group: group.name.lower(),
        )

    def descendants(self, group_id: str) -> list[Group]:
        """All groups below ``group_id`` by parent link, breadth first."""
        result: list[Group] = []
        seen = {group_id}
        queue = [group_id]
        while queue:
            current = queue.pop(0)
            for child in self.children_of(current):
                if child.id in seen:
                    continue
                seen.add(child.id)
                result.append(child)
                queue.append(child.id)
        return result

    def find_by_slug(self, slug: str, under: Optional[str] = None) -> Optional[Group]:
        """
        Find a group by slug (or id).

        When ``under`` is given, descendants of that group win over other
        groups with the same slug; remaining ties go to the oldest group.
        """
        candidates = [
            group for group in self.groups.values() if group.slug == slug
        ] or [group for group in self.groups.values() if group.id == slug]
        if not candidates:
            return None

        if under is not None:
            below = {group.id for group in self.descendants(under)}
            preferred = [group for group in candidates if group.id in below]
            if preferred:
                candidates = preferred

        return min(
            candidates,
            key=_creation_order,
        )

    def hierarchy(self, group_id: str, _path: str = "", _seen: Optional[set[str]] = None) -> HierarchyNode:
        """Nested view of a group and its child groups with slug paths."""
        seen = _seen if _seen is not None else set()
        seen.add(group_id)
        group = self.groups[group_id]
        segment = group.slug or group.id
        path = f"{_path}/{segment}" if _path else segment

        node = HierarchyNode(
            id=group.id,
            name=group.name,
            slug=group.slug,
            path=path,
            member_count=len(self._persons.get(group_id, [])),
        )
        for child in self.children_of(group_id):
            if child.id not in seen:
                node.children.append(self.hierarchy(child.id, path, seen))
        return node
