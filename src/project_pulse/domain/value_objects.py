"""Value objects — self-validating domain primitives."""

from __future__ import annotations

import re
from dataclasses import dataclass

from project_pulse.domain.exceptions import InvalidReferenceError

_SEGMENT = r"[A-Za-z0-9\-_.]+"

_URL_RE = re.compile(
    rf"^(?:[a-z][a-z0-9+.\-]*://)?(?:www\.)?[A-Za-z0-9\-.]+\.[A-Za-z]{{2,}}(?::\d+)?"
    rf"/(?P<owner>{_SEGMENT})/(?P<name>{_SEGMENT})/?$",
    re.IGNORECASE,
)
_SHORT_RE = re.compile(rf"^(?P<owner>{_SEGMENT})/(?P<name>{_SEGMENT})$")


@dataclass(frozen=True, slots=True)
class RepositoryIdentity:
    """Canonical ``(owner, name)`` pair addressing a repository.

    Built from either a full URL such as ``https://github.com/psf/requests``
    or the short ``psf/requests`` form; a trailing ``.git`` is dropped.
    """

    owner: str
    name: str

    @classmethod
    def parse(cls, reference: str) -> RepositoryIdentity:
        """Parse *reference* or raise :class:`InvalidReferenceError`."""
        text = (reference or "").strip()
        match = _SHORT_RE.match(text) or _URL_RE.match(text)
        if match:
            owner = match["owner"]
            name = match["name"]
            if name.endswith(".git"):
                name = name[: -len(".git")]
            if name and owner not in (".", "..") and name not in (".", ".."):
                return cls(owner=owner, name=name)
        raise InvalidReferenceError(
            f"Invalid repository reference: '{text}'. "
            "Use https://github.com/<owner>/<repo> or <owner>/<repo>."
        )

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def key(self) -> str:
        """Cache key — GitHub owner and repository names are case-insensitive."""
        return self.full_name.lower()
