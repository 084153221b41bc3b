"""Immutable, case-insensitive HTTP headers.

Implements ``Mapping[str, str]``. Stores raw byte pairs exactly as
received from the ASGI scope, in order and with duplicates, so they can
be relayed without reformatting. Decodes on access.
"""

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive HTTP headers.

    ``__getitem__`` returns the first matching value.
    ``get_list`` returns all values for a header (e.g. multiple ``Set-Cookie``).
    ``without`` and ``replace`` return new instances; the original is
    never modified.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        object.__setattr__(self, "_raw", raw)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> "Headers":
        """Build headers from ``(name, value)`` string pairs."""
        return cls(
            tuple((name.encode("latin-1"), value.encode("latin-1")) for name, value in pairs)
        )

    def __getitem__(self, key: str) -> str:
        key_lower = key.lower().encode("latin-1")
        for name, value in self._raw:
            if name.lower() == key_lower:
                return value.decode("latin-1")
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        key_lower = key.lower().encode("latin-1")
        return any(name.lower() == key_lower for name, _ in self._raw)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._raw:
            key = name.decode("latin-1").lower()
            if key not in seen:
                seen.add(key)
                yield key

    def __len__(self) -> int:
        return len(set(self))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"Headers({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        try:
            return self[key]
        except KeyError:
            return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key* (e.g. multiple ``Set-Cookie``)."""
        key_lower = key.lower().encode("latin-1")
        return [value.decode("latin-1") for name, value in self._raw if name.lower() == key_lower]

    def without(self, names: Iterable[str]) -> "Headers":
        """Return new headers with every value of each name in *names* removed."""
        drop = {name.lower().encode("latin-1") for name in names}
        return Headers(tuple((n, v) for n, v in self._raw if n.lower() not in drop))

    def replace(self, key: str, value: str) -> "Headers":
        """Return new headers with all *key* values replaced by one *value*.

        The replacement takes the position of the first existing value,
        or is appended when *key* was absent.
        """
        key_lower = key.lower().encode("latin-1")
        new_pair = (key_lower, value.encode("latin-1"))
        result: list[tuple[bytes, bytes]] = []
        placed = False
        for name, existing in self._raw:
            if name.lower() == key_lower:
                if not placed:
                    result.append(new_pair)
                    placed = True
                continue
            result.append((name, existing))
        if not placed:
            result.append(new_pair)
        return Headers(tuple(result))

    def pairs(self) -> list[tuple[str, str]]:
        """All ``(name, value)`` pairs in order, decoded, duplicates kept."""
        return [(n.decode("latin-1"), v.decode("latin-1")) for n, v in self._raw]

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """Access raw header byte pairs for ASGI compatibility."""
        return self._raw
