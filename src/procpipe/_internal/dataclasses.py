""":mod:`dataclasses` utilities.

Note
----
This is an internal API not covered by versioning policy.
"""

from __future__ import annotations

import dataclasses
import typing as t

if t.TYPE_CHECKING:
    from _typeshed import DataclassInstance


class SkipDefaultFieldsReprMixin:
    r"""Only show fields that differ from their defaults in the representation.

    Fields declared with ``repr=False`` are never shown. Fields built with a
    ``default_factory`` are hidden while they still equal a fresh default.

    Notes
    -----
    Based on an answer by Pietro Oldrati, 2022-05-08, Unilicense

    https://stackoverflow.com/a/72161437/1396928

    Examples
    --------
    >>> @dataclasses.dataclass(repr=False)
    ... class Launch(SkipDefaultFieldsReprMixin):
    ...     args: list
    ...     cwd: object = None
    ...     env: dict = dataclasses.field(default_factory=dict)
    ...     token: object = dataclasses.field(default=None, repr=False)
    ...

    >>> Launch(['echo', 'hi'])
    Launch(args=['echo', 'hi'])

    >>> Launch(['ls'], cwd='/tmp', token='secret')
    Launch(args=['ls'], cwd='/tmp')

    >>> Launch(['env'], env={'LANG': 'C'})
    Launch(args=['env'], env={'LANG': 'C'})
    """

    def __repr__(self: DataclassInstance) -> str:
        """Omit default fields in object representation."""
        shown = []
        for field in dataclasses.fields(self):
            if not field.repr:
                continue
            value = getattr(self, field.name)
            if field.default is not dataclasses.MISSING and value == field.default:
                continue
            if (
                field.default_factory is not dataclasses.MISSING
                and value == field.default_factory()
            ):
                continue
            shown.append(f"{field.name}={value!r}")

        return f"{self.__class__.__name__}({', '.join(shown)})"
