"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~grimoire.exceptions.GrimoireError` subclass.
Shell scripts wrapping ``grimoire`` can inspect the exit code to tell a
missing spell apart from an unreachable catalog without parsing stderr.

Example::

    $ grimoire show /api/spells/no-such-spell
    $ echo $?
    4   # EXIT_NOT_FOUND
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (including configuration problems)."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_NOT_FOUND = 4
"""The catalog service answered HTTP 404 for the requested resource."""

EXIT_FETCH_FAILURE = 5
"""The catalog service answered with a non-success status or an unusable body."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (DNS failure, connection refused, timeout)."""
