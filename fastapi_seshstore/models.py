from typing import Any, Literal, NamedTuple, TypeAlias, Union

SessionValue: TypeAlias = Union[
    str,
    int,
    float,
    bool,
    None,
    list["SessionValue"],
    dict[str, "SessionValue"],
]

SessionData: TypeAlias = dict[str, SessionValue]

SamesiteOptions = Literal["lax", "strict", "none"]

DiagnosticLevel = Literal["warning", "error"]


class Session(dict[str, SessionValue]):
    """
    Per-request session data.

    Behaves exactly like a ``dict`` (and compares equal to one); id based stores
    keep the id they issued in ``session_id`` so the same entry is reused on the
    next save instead of allocating a new one.
    """

    __slots__ = ("session_id",)

    def __init__(
        self,
        data: SessionData | None = None,
        *,
        session_id: str | None = None,
    ) -> None:
        super().__init__(data or {})
        self.session_id: str | None = session_id

    def __repr__(self) -> str:
        return f"Session({dict.__repr__(self)}, session_id={self.session_id!r})"


def session_id_of(session: Any) -> str | None:
    """
    Returns the store issued id of `session`, if it has one. Plain dicts
    assigned by a handler never do.
    """
    return getattr(session, "session_id", None)


class ConfigDiagnostic(NamedTuple):
    level: DiagnosticLevel
    code: str
    message: str
