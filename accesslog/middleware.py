# -*- coding: utf-8 -*-
"""The :class:`AccessLogMiddleware` wraps a WSGI application, timing
each request and, once the response has been fully sent, rendering an
access log line and handing it to an *on_log* callback.

>>> from accesslog import COMMON_FORMAT, StreamEmitter
>>> app = AccessLogMiddleware(app, COMMON_FORMAT, StreamEmitter('stderr'))
"""

import time

from accesslog.context import note
from accesslog.formatters import AccessFormatter
from accesslog.request import RequestInfo
from accesslog.utils import to_int


__all__ = ['AccessLogMiddleware', 'default_skipper']


def default_skipper(request_info):
    return False


class _LoggedResponse(object):
    """Wraps the application's response iterable, counting bytes as they
    are sent, and triggers the log callback on close, i.e., when the
    server is done with the response.
    """
    def __init__(self, app_iter, on_close):
        self._app_iter = app_iter
        self._on_close = on_close
        self._closed = False
        self.body_size = 0

    def __iter__(self):
        for chunk in self._app_iter:
            self.body_size += len(chunk)
            yield chunk

    def close(self):
        if self._closed:
            return
        self._closed = True
        try:
            app_close = getattr(self._app_iter, 'close', None)
            if callable(app_close):
                app_close()
        finally:
            self._on_close(self.body_size)


class AccessLogMiddleware(object):
    """WSGI middleware which renders one access log line per request.

    Args:
        app: The WSGI application to wrap.
        format_str (str): The format of the line. Required, see
            :mod:`accesslog.tags` for the syntax and
            :mod:`accesslog.fields` for the builtin fields.
        on_log (callable): Called as ``on_log(entry, request_info)``
            with every rendered line. Required.
        skipper (callable): Called with the
            :class:`~accesslog.request.RequestInfo` of each request,
            before it is handled. Requests for which it returns true are
            passed through without logging. By default nothing is
            skipped.
        extra_fields (list): Passed through to
            :class:`~accesslog.formatters.AccessFormatter`.

    A missing format string or callback is a configuration error, and
    raises immediately.
    """
    def __init__(self, app, format_str, on_log, **kwargs):
        if not format_str:
            raise ValueError('access log middleware requires a format string')
        if not callable(on_log):
            raise TypeError('expected callable for on_log, not %r'
                            % (on_log,))
        skipper = kwargs.pop('skipper', None) or default_skipper
        if not callable(skipper):
            raise TypeError('expected callable for skipper, not %r'
                            % (skipper,))
        extra_fields = kwargs.pop('extra_fields', None)
        if kwargs:
            raise TypeError('unexpected keyword arguments: %r'
                            % list(kwargs.keys()))

        self.app = app
        self.on_log = on_log
        self.skipper = skipper
        self.formatter = AccessFormatter(format_str,
                                         extra_fields=extra_fields)

    def __call__(self, environ, start_response):
        request_info = RequestInfo.from_environ(environ)
        if self.skipper(request_info):
            return self.app(environ, start_response)

        started_at = time.time_ns()
        response = {}

        def _start_response(status, headers, exc_info=None):
            response['status'] = status
            response['headers'] = headers
            return start_response(status, headers, exc_info)

        def _finish(body_size):
            status = response.get('status')
            status_code = to_int(status.split(None, 1)[0]) if status else 500
            request_info.set_response(status_code,
                                      headers=response.get('headers'),
                                      body_size=body_size)
            entry = self.formatter.format(request_info, started_at)
            self.on_log(entry, request_info)

        try:
            app_iter = self.app(environ, _start_response)
        except Exception:
            try:
                _finish(None)
            except Exception as e:
                # the application's exception is the one to propagate
                note('on_log', 'got %r logging failed request %r',
                     e, request_info)
            raise
        return _LoggedResponse(app_iter, _finish)

    def __repr__(self):
        cn = self.__class__.__name__
        return ('<%s app=%r formatter=%r>'
                % (cn, self.app, self.formatter))
