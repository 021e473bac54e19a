# -*- coding: utf-8 -*-
"""Implements types and functions for rendering
:class:`~accesslog.request.RequestInfo` instances into access log
lines.
"""

from accesslog.context import note
from accesslog.fields import AccessEvent, FIELD_MAP
from accesslog.tags import (parse_format, LITERAL, FIELD, COOKIE,
                            REQUEST_HEADER, RESPONSE_HEADER)


__all__ = ['AccessFormatter', 'render', 'generate_log']


def _resolve_cookie(event, name):
    try:
        return event.request.get_cookie(name)
    except KeyError:
        return ''


def _resolve_request_header(event, name):
    return event.request.get_request_header(name)


def _resolve_response_header(event, name):
    return event.request.get_response_header(name)


_RESOLVER_MAP = {COOKIE: _resolve_cookie,
                 REQUEST_HEADER: _resolve_request_header,
                 RESPONSE_HEADER: _resolve_response_header}


def _render_segments(segments, field_map, event):
    ret = []
    for seg in segments:
        kind, text = seg
        if kind == LITERAL:
            ret.append(text)
            continue
        try:
            if kind == FIELD:
                field = field_map.get(text)
                # unrecognized field names render as nothing
                ret.append(field.render(event) if field else '')
            else:
                ret.append(_RESOLVER_MAP[kind](event, text) or '')
        except Exception as e:
            note('render_segment', 'got %r rendering %r for %r',
                 e, seg, event.request)
    return ''.join(ret)


def render(segments, request, started_at, **kwargs):
    """Render a compiled format (see
    :func:`~accesslog.tags.parse_format`) for *request*, with latency
    measured from *started_at*, in nanoseconds since the epoch, as
    returned by :func:`time.time_ns`. Never raises.

    Fields added with :func:`~accesslog.fields.register_field` are
    available, and *extra_fields* adds more for this call only.
    """
    extra_fields = kwargs.pop('extra_fields', None)
    now_ns = kwargs.pop('now_ns', None)
    if kwargs:
        raise TypeError('unexpected keyword arguments: %r'
                        % list(kwargs.keys()))
    field_map = FIELD_MAP
    if extra_fields:
        field_map = dict(FIELD_MAP)
        field_map.update([(f.fname, f) for f in extra_fields])
    event = AccessEvent(request, started_at, now_ns=now_ns)
    return _render_segments(segments, field_map, event)


class AccessFormatter(object):
    """The ``AccessFormatter`` compiles its format string once, and
    renders it any number of times, from any number of threads. Unknown
    fields, cookies, and headers render as empty strings, and a field
    that raises during rendering is noted (see
    :func:`accesslog.context.note`) and rendered empty, so a log line
    is always produced.

    Args:
        format_str (str): The template for the line to be rendered,
            e.g., ``"{method} {uri} {status} {latency-ms}ms"``.
        extra_fields (list): Optionally specify
            :class:`~accesslog.fields.AccessField` instances this
            Formatter should recognize in addition to the builtins
            and those added with
            :func:`~accesslog.fields.register_field` before the
            Formatter was created.
            Extra fields win over builtins of the same name.

    >>> from accesslog.request import RequestInfo
    >>> fmtr = AccessFormatter('{method} {status}')
    >>> fmtr.format(RequestInfo(method='GET', status_code=200), 0)
    'GET 200'
    """
    def __init__(self, format_str, **kwargs):
        extra_fields = kwargs.pop('extra_fields', None)
        if kwargs:
            raise TypeError('unexpected keyword arguments: %r'
                            % list(kwargs.keys()))
        self._field_map = dict(FIELD_MAP)
        if extra_fields:
            extra_field_map = dict([(f.fname, f) for f in extra_fields])
            self._field_map.update(extra_field_map)

        self.raw_format_str = format_str
        self.segments = parse_format(format_str)

    def __repr__(self):
        return '%s(%r)' % (self.__class__.__name__, self.raw_format_str)

    def format(self, request, started_at, now_ns=None):
        """Render the access log line for *request*, with latency measured
        from *started_at* (nanoseconds since the epoch). *now_ns*
        overrides the clock, and defaults to :func:`time.time_ns`.
        """
        event = AccessEvent(request, started_at, now_ns=now_ns)
        return _render_segments(self.segments, self._field_map, event)

    __call__ = format


def generate_log(format_str, **kwargs):
    """Compile *format_str* once, and return a function which renders it
    given a request and a start time.
    """
    return AccessFormatter(format_str, **kwargs).format
