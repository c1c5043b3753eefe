# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the niftigeom package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Check batteries for binary headers

A check is a callable with signature ``obj, report = check(obj, fix=False)``.
With ``fix=True`` the check may repair `obj` in place (or return a repaired
copy).  A :class:`BatteryRunner` runs a sequence of checks over one object
and collects their :class:`Report` instances.

Reports carry a ``problem_level`` from 0 (nothing wrong) to 50 (severe),
following the levels of the :mod:`logging` module, so a level 40 problem
logs as an error.  Each report also carries the exception class to raise if
the problem is judged too serious to continue (see
:attr:`niftigeom.imageglobals.error_level`).

The NIfTI header checks in :mod:`niftigeom.nifti1` look like this one, which
repairs a missing qfac::

    def chk_qfac(hdr, fix=False):
        rep = Report(HeaderDataError)
        if hdr['pixdim'][0] in (-1, 1):
            return hdr, rep
        rep.problem_level = 20
        rep.problem_msg = 'pixdim[0] (qfac) should be 1 (default) or -1'
        if fix:
            hdr['pixdim'][0] = 1
            rep.fix_msg = 'setting qfac to 1'
        return hdr, rep

>>> def chk(obj, fix=False):
...     return obj, Report()
>>> btrun = BatteryRunner((chk,))
>>> [rep.problem_level for rep in btrun.check_only('a header')]
[0]
"""


class BatteryRunner:
    """Run a fixed sequence of checks over an object"""

    def __init__(self, checks):
        """Initialize from sequence of `checks`

        Parameters
        ----------
        checks : sequence
           callables with signature ``obj, rep = chk(obj, fix=False)``, run in
           the order given.
        """
        self._checks = checks

    def check_only(self, obj):
        """Run checks on `obj` without fixes, return reports"""
        reports = []
        for check in self._checks:
            obj, rep = check(obj, False)
            reports.append(rep)
        return reports

    def check_fix(self, obj):
        """Run checks with fixes on `obj`

        Returns
        -------
        obj : object
           `obj` after fixes; may be modified in place or replaced
        reports : list
           one report per check
        """
        reports = []
        for check in self._checks:
            obj, report = check(obj, True)
            reports.append(report)
        return obj, reports

    def __len__(self):
        return len(self._checks)


class Report:
    def __init__(self, error=Exception, problem_level=0, problem_msg='', fix_msg=''):
        """Initialize report

        Parameters
        ----------
        error : None or Exception class
           Error to raise if this problem should stop processing.  None means
           the check cannot raise.
        problem_level : int
           Level of problem, from 0 (no problem) to 50 (severe).  For a
           report from a fix, this is the level of the problem remaining
           after the fix.
        problem_msg : str
           Description of the problem found.
        fix_msg : str
           Description of any fix applied.

        Examples
        --------
        >>> rep = Report(ValueError, 10)
        >>> rep.problem_level
        10
        """
        self.error = error
        self.problem_level = problem_level
        self.problem_msg = problem_msg
        self.fix_msg = fix_msg

    def __getstate__(self):
        return self.error, self.problem_level, self.problem_msg, self.fix_msg

    def __eq__(self, other):
        return self.__getstate__() == other.__getstate__()

    def __ne__(self, other):
        return not self == other

    def __str__(self):
        return self.__dict__.__str__()

    @property
    def message(self):
        """Problem message, with the fix message appended if present"""
        if self.fix_msg:
            return '; '.join((self.problem_msg, self.fix_msg))
        return self.problem_msg

    def log_raise(self, logger, error_level=40):
        """Log problem, raise error if problem >= `error_level`

        Parameters
        ----------
        logger : logging.Logger
           logger implementing ``log`` method
        error_level : int, optional
           raise ``self.error`` if ``self.problem_level`` >= `error_level`
        """
        logger.log(self.problem_level, self.message)
        if self.problem_level and self.problem_level >= error_level:
            if self.error:
                raise self.error(self.problem_msg)
