# -*- coding: utf-8 -*-
"""accesslog comes with many built-in format *fields*, covering the
request line, the response, sizes, timing, and several timestamp
encodings. Each :class:`AccessField` pairs a name with a getter, which
is called with an :class:`AccessEvent` at render time.

Cookies and headers are not fields; they have their own placeholder
syntax, see :mod:`accesslog.tags`.
"""

import time
import datetime
from email.utils import format_datetime

from boltons.timeutils import UTC, LocalTZ
from boltons.cacheutils import cachedproperty
from boltons.formatutils import BaseFormatField

from accesslog.common import (HOST, METHOD, PATH, PROTO, QUERY, REMOTE,
                              REAL_IP, SCHEME, URI, REFERER, USER_AGENT,
                              WHEN, WHEN_ISO, WHEN_UTC_ISO, WHEN_UNIX,
                              WHEN_ISO_MS, WHEN_UTC_ISO_MS, SIZE, SIZE_HUMAN,
                              STATUS, LATENCY, LATENCY_MS, PAYLOAD_SIZE,
                              PAYLOAD_SIZE_HUMAN, KBYTES, MBYTES)


FIELD_MAP = {}  # builtins plus fields added with register_field()
BUILTIN_FIELD_MAP = {}  # populated below

NANOS_PER_SECOND = 10 ** 9
NANOS_PER_MS = 10 ** 6


def register_builtin_field(field):
    register_field(field)
    BUILTIN_FIELD_MAP[field.fname] = field


def register_field(field):
    FIELD_MAP[field.fname] = field


class AccessEvent(object):
    """What field getters see: the request, plus the timing of the render
    in progress. The clock is read once, at creation, so that all the
    time fields of a line agree with each other.
    """
    def __init__(self, request, started_at, now_ns=None):
        self.request = request
        self.started_at = started_at
        self.now_ns = time.time_ns() if now_ns is None else now_ns

    @property
    def elapsed_ns(self):
        return self.now_ns - self.started_at

    @cachedproperty
    def local_now(self):
        return nanos2datetime(self.now_ns, local=True)

    @cachedproperty
    def utc_now(self):
        return nanos2datetime(self.now_ns)


def nanos2datetime(nanos, local=False):
    secs, rem = divmod(nanos, NANOS_PER_SECOND)
    tz = LocalTZ if local else UTC
    dt = datetime.datetime.fromtimestamp(secs, tz=tz)
    return dt.replace(microsecond=rem // 1000)


def _format_offset(dt):
    offset = int(dt.utcoffset().total_seconds())
    if offset == 0:
        return 'Z'
    sign = '-' if offset < 0 else '+'
    hours, minutes = divmod(abs(offset) // 60, 60)
    return '%s%02d:%02d' % (sign, hours, minutes)


def datetime2rfc3339(dt, with_ms=False, utc_z=False):
    """Render *dt* as ``2006-01-02T15:04:05-07:00``. With *with_ms*,
    milliseconds are added, minus trailing zeros (and omitted entirely
    when zero). With *utc_z*, the zone is always written as ``Z``.
    """
    ret = dt.strftime('%Y-%m-%dT%H:%M:%S')
    if with_ms:
        ret += ('.%03d' % (dt.microsecond // 1000)).rstrip('0').rstrip('.')
    return ret + ('Z' if utc_z else _format_offset(dt))


def datetime2rfc1123(dt):
    "Render *dt* as ``Mon, 02 Jan 2006 15:04:05 -0700``."
    return format_datetime(dt)


def get_human_readable_size(size):
    """Format a byte count in B, KB, or MB. Fractions are rendered with up
    to two decimal places, and trailing zeros and dots are trimmed.

    >>> get_human_readable_size(1536)
    '1.5KB'
    """
    if size < KBYTES:
        return '%dB' % size
    if size < MBYTES:
        return ('%.2f' % (size / float(KBYTES))).rstrip('0.') + 'KB'
    return ('%.2f' % (size / float(MBYTES))).rstrip('0.') + 'MB'


def _fmt_frac(value, prec):
    whole, frac = divmod(value, 10 ** prec)
    if not frac:
        return '%d' % whole
    return '%d.%s' % (whole, ('%0*d' % (prec, frac)).rstrip('0'))


def format_duration(nanos):
    """Render a duration given in nanoseconds the conventional way, e.g.,
    ``"350ms"``, ``"1.5s"``, ``"2m3.25s"``, ``"1h0m0s"``, or ``"0s"``.
    """
    if nanos == 0:
        return '0s'
    sign = '-' if nanos < 0 else ''
    nanos = abs(nanos)
    if nanos < 1000:
        return '%s%dns' % (sign, nanos)
    if nanos < NANOS_PER_MS:
        return sign + _fmt_frac(nanos, 3) + u'\xb5s'
    if nanos < NANOS_PER_SECOND:
        return sign + _fmt_frac(nanos, 6) + 'ms'

    minutes, rem = divmod(nanos, 60 * NANOS_PER_SECOND)
    ret = _fmt_frac(rem, 9) + 's'
    if minutes:
        hours, minutes = divmod(minutes, 60)
        ret = '%dm%s' % (minutes, ret)
        if hours:
            ret = '%dh%s' % (hours, ret)
    return sign + ret


def _truncdiv(num, den):
    "Integer division rounding toward zero, rather than down."
    if num < 0:
        return -(-num // den)
    return num // den


def _get_body_size(request):
    return request.response_body_size or 0


def _get_body_size_human(request):
    if request.response_body_size is None:
        return '0B'
    return get_human_readable_size(request.response_body_size)


class AccessField(BaseFormatField):
    """A named value that can be rendered into an access log line. The
    *getter* receives an :class:`AccessEvent`, and its return value is
    rendered with the format spec *fspec* (``'s'`` by default, ``'d'``
    for integers).
    """
    def __init__(self, fname, fspec='s', getter=None):
        if not callable(getter):
            raise TypeError('expected callable for AccessField getter,'
                            ' not %r' % (getter,))
        super(AccessField, self).__init__(fname, fspec)
        self.getter = getter

    def render(self, event):
        return format(self.getter(event), self.fspec)

    def __repr__(self):
        cn = self.__class__.__name__
        return '%s(%r, %r)' % (cn, self.fname, self.fspec)


_AF = AccessField
REQUEST_FIELDS = [_AF(HOST, 's', lambda e: e.request.host),
                  _AF(METHOD, 's', lambda e: e.request.method),
                  _AF(PATH, 's', lambda e: e.request.path or '/'),
                  _AF(PROTO, 's', lambda e: e.request.proto),
                  _AF(QUERY, 's', lambda e: e.request.query),
                  _AF(REMOTE, 's', lambda e: e.request.remote),
                  _AF(REAL_IP, 's', lambda e: e.request.real_ip),
                  _AF(SCHEME, 's', lambda e: e.request.scheme),
                  _AF(URI, 's', lambda e: e.request.uri),
                  _AF(REFERER, 's', lambda e: e.request.referer),
                  _AF(USER_AGENT, 's', lambda e: e.request.user_agent)]

SIZE_FIELDS = [
    _AF(STATUS, 'd', lambda e: e.request.status_code),
    _AF(PAYLOAD_SIZE, 'd', lambda e: e.request.request_body_size),
    _AF(PAYLOAD_SIZE_HUMAN, 's',
        lambda e: get_human_readable_size(e.request.request_body_size)),
    _AF(SIZE, 'd', lambda e: _get_body_size(e.request)),
    _AF(SIZE_HUMAN, 's', lambda e: _get_body_size_human(e.request))]

# all the "when" fields are the time of rendering, not of the request
WHEN_FIELDS = [
    _AF(WHEN, 's', lambda e: datetime2rfc1123(e.local_now)),
    _AF(WHEN_ISO, 's', lambda e: datetime2rfc3339(e.local_now)),
    _AF(WHEN_UTC_ISO, 's', lambda e: datetime2rfc3339(e.utc_now, utc_z=True)),
    _AF(WHEN_ISO_MS, 's',
        lambda e: datetime2rfc3339(e.local_now, with_ms=True)),
    _AF(WHEN_UTC_ISO_MS, 's',
        lambda e: datetime2rfc3339(e.utc_now, with_ms=True, utc_z=True)),
    _AF(WHEN_UNIX, 'd', lambda e: e.now_ns // NANOS_PER_SECOND)]

LATENCY_FIELDS = [
    _AF(LATENCY, 's', lambda e: format_duration(e.elapsed_ns)),
    _AF(LATENCY_MS, 'd', lambda e: _truncdiv(e.elapsed_ns, NANOS_PER_MS))]


for f in REQUEST_FIELDS:
    register_builtin_field(f)
for f in SIZE_FIELDS:
    register_builtin_field(f)
for f in WHEN_FIELDS:
    register_builtin_field(f)
for f in LATENCY_FIELDS:
    register_builtin_field(f)

del f
