"""Built-in CLI sub-commands for grimoire.

* :mod:`~grimoire.commands.catalog` -- ``list``, ``show`` and
  ``categories``, registered directly on the root app.
* :mod:`~grimoire.commands.config` -- the ``config`` sub-command group.
"""
