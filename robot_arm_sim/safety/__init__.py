"""
Safety checks applied before a motion request is queued.

Workspace and joint-limit validation, axis-aligned obstacle checks, and
the composite validator the motion queue consults.
"""
