# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Package-wide defaults for header checking and logging

``error_level`` is the problem level (see :mod:`niftigeom.batteryrunners`) at
or above which a header check raises its error.  The default of 40 means that
only "error" grade problems in a header (a bad magic string, a data offset
inside the header of a single file) stop a read, while lesser problems
(non-unit qfac, unknown transform codes) are fixed and logged.

``logger`` receives the header check messages and the geometry state machine
messages.  Problems found in headers log at the level of the problem; geometry
state transitions log at ``DEBUG``.  Use e.g. ``logger.setLevel(1)`` to see
all messages.
"""

import logging

error_level = 40
logger = logging.getLogger('niftigeom.global')
logger.addHandler(logging.StreamHandler())


class LoggingOutputSuppressor:
    """Context manager to silence the package logger handlers"""

    def __enter__(self):
        self.orig_handlers = logger.handlers[:]
        for handler in self.orig_handlers:
            logger.removeHandler(handler)

    def __exit__(self, exc, value, tb):
        for handler in self.orig_handlers:
            logger.addHandler(handler)
