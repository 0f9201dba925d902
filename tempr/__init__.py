"""
Tempr - contextual prompt engine.

Decides when a listening moment is worth surfacing to a user (from
location, weather, calendar and time-of-day signals) and assembles a
time-boxed queue blending familiar and discovery tracks for it.
"""

__version__ = "1.0.0"
