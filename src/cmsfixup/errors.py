"""Exception taxonomy for cmsfixup.

Two families matter to callers:

- ``InputError``: something in the operator's input does not resolve (an unknown
  path alias, a record of the wrong content type, a category name with no
  taxonomy term). Batch workflows collect these and refuse to write when any
  are present.
- ``EnvironmentProblem``: the run cannot proceed at all (the record store or an
  input file cannot be opened). These are raised immediately.
"""

from __future__ import annotations


class FixupError(Exception):
    pass


class InputError(FixupError):
    pass


class RecordNotFoundError(InputError):
    def __init__(self, alias: str) -> None:
        super().__init__(f"URI {alias} couldn't be resolved to a node")
        self.alias = alias


class WrongContentTypeError(InputError):
    def __init__(self, nid: int, alias: str, expected: str, actual: str) -> None:
        super().__init__(f"node {nid} for alias {alias} is a '{actual}', not a '{expected}'")
        self.nid = nid
        self.alias = alias
        self.expected = expected
        self.actual = actual


class TermLookupError(InputError):
    def __init__(self, message: str, name: str, vocabulary: str) -> None:
        super().__init__(message)
        self.name = name
        self.vocabulary = vocabulary


class TermNotFoundError(TermLookupError):
    def __init__(self, name: str, vocabulary: str) -> None:
        super().__init__(
            f"Couldn't find term '{name}' in vocabulary '{vocabulary}'", name, vocabulary
        )


class AmbiguousTermError(TermLookupError):
    def __init__(self, name: str, vocabulary: str, count: int) -> None:
        super().__init__(
            f"Term '{name}' matches {count} terms in vocabulary '{vocabulary}'", name, vocabulary
        )
        self.count = count


class EnvironmentProblem(FixupError):
    pass


class StoreError(EnvironmentProblem):
    pass


class SourceFileError(EnvironmentProblem):
    pass


__all__ = [
    "AmbiguousTermError",
    "EnvironmentProblem",
    "FixupError",
    "InputError",
    "RecordNotFoundError",
    "SourceFileError",
    "StoreError",
    "TermLookupError",
    "TermNotFoundError",
    "WrongContentTypeError",
]
