"""Studio site backend: content entities, media attachments, leads, search and stats.

Stores and pipelines are wired together by ``studio.container.StudioContainer``
and exposed over HTTP by ``studio.api``.
"""
