"""Settings package for the Pro-DJ project.

This package exposes multiple environment‑specific settings modules. The
`base.py` contains common configuration shared across environments. The
`dev.py` and `prod.py` modules extend base settings with environment
specific overrides.
"""
