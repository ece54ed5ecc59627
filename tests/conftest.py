"""
pytest configuration.

Hypothesis profiles (select with HYPOTHESIS_PROFILE=ci|dev):
- default: balanced speed and coverage
- ci: more examples
- dev: fast iteration
"""

import os

from hypothesis import settings

settings.register_profile("default", max_examples=100, deadline=None)
settings.register_profile("ci", max_examples=500, deadline=None)
settings.register_profile("dev", max_examples=10, deadline=None)
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "default"))
