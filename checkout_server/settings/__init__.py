"""
Settings package for checkout_server.

Point ``DJANGO_SETTINGS_MODULE`` at one of ``base``, ``development``,
``production`` or ``test``.
"""
