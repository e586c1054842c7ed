"""Remote action sync and dispatch.

Import from the submodules directly: ``parser``, ``builder``, ``sync`` and
``dispatch``.
"""
