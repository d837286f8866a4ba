"""
Webform Migration Application

Migrates legacy webforms (Drupal 7 webform tables) into webform entities on
a newer version of the platform.

Supports:
- Forms, confirmation settings and submit button labels
- Field components, including option lists and conditional visibility
- Submitted data, resumable from a persisted low-water-mark
- Per-form email notification handlers with template token rewriting
- Simulated runs that log instead of writing to the target
"""

__version__ = "0.1.0"
