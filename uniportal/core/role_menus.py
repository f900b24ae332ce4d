# uniportal/core/role_menus.py
#
# Role -> allowed menu entries (also used to render links).
# None = no filtering (full access). A list whitelists exactly the paths
# it names, including the hrefs inside menu groups.

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple, Union


@dataclass(frozen=True)
class MenuLink:
    title: str
    href: str


@dataclass(frozen=True)
class MenuGroup:
    title: str
    icon: str
    children: Tuple[MenuLink, ...] = field(default_factory=tuple)


MenuEntry = Union[str, MenuGroup]


def normalize_path(path: Optional[str] = "") -> str:
    """Strip trailing slashes; empty input and the root stay '/'."""
    if not path:
        return "/"
    stripped = path.rstrip("/")
    return stripped or "/"


ROLE_MENUS: Dict[str, Optional[List[MenuEntry]]] = {
    "admin": [
        "/staff/dashboard",
        MenuGroup("Manage Session", "fa fa-calendar", (
            MenuLink("Set Current Session", "/staff/session/current"),
            MenuLink("Switch Semester", "/staff/session/semester"),
        )),
        MenuGroup("Attendance Mgt", "fa fa-users", (
            MenuLink("Set Office Long/Lat.", "/staff/attendance/office-location"),
        )),
        MenuGroup("Manage Staff", "fa fa-user", (
            MenuLink("Assign Role to Staff", "/staff/manage/assign-role"),
            MenuLink("Modify Staff", "/staff/manage/modify"),
        )),
    ],
    "superadmin": None,
    "administrator": None,

    "hod": [
        "/staff/dashboard",
        "/transcripts/generate",
        "/results",
        "/transcripts/view",
        "/transcripts/send",
        "/records",
        "/staff/courses/add",
        "/staff/courses/assign",
        "/staff/students/utme",
        "/staff/students/attendance",
        "/staff/students/uniform",
        "/staff/exams/clearance/print",
        "/staff/signature/upload",
    ],
    "staff": [
        "/staff/dashboard",
        "/staff/attendance/mark",
        "/staff/courses/assigned",
    ],

    "lecturer": None,
    "dean": None,
    "ict": None,
    "bursary": None,
    "registry": None,
    "admission officer": None,
    "auditor": None,
    "health center": None,
    "works": None,
    "library": None,
    "provost": None,
    "student union": None,

    "student": None,
    "applicant": None,
}


def menu_paths(entries: Iterable[MenuEntry]) -> FrozenSet[str]:
    """Normalized set of every path a menu lists, group children included."""
    paths = set()
    for entry in entries or ():
        if isinstance(entry, MenuGroup):
            paths.update(normalize_path(child.href) for child in entry.children)
        else:
            paths.add(normalize_path(entry))
    return frozenset(paths)


def menu_for_role(role: str, menus=None) -> Optional[List[MenuEntry]]:
    """Menu entries to render for a role; None means render everything."""
    table = ROLE_MENUS if menus is None else menus
    return table.get(str(role or "").strip().lower())
