# -*- coding: utf-8 -*-
"""Emitters are callable objects which take a rendered access log line
and the :class:`~accesslog.request.RequestInfo` it was rendered from,
and output the line somewhere: a list in memory, stdout/stderr, or a
file. Any of them can be passed as the *on_log* callback of
:class:`~accesslog.middleware.AccessLogMiddleware`.
"""

import io
import os
import sys
from collections import deque

from accesslog.context import note
from accesslog.utils import check_encoding_settings


__all__ = ['AggregateEmitter', 'StreamEmitter', 'FileEmitter']


stream_types = (io.BytesIO, io.BufferedWriter, io.RawIOBase)


class AggregateEmitter(object):
    "Keeps the most recent *limit* entries in memory. Mostly for tests."
    def __init__(self, limit=None):
        self._limit = limit
        self.items = deque(maxlen=limit)

    def get_entries(self):
        return [entry for entry, request in self.items]

    def get_entry(self, idx):
        return self.items[idx][0]

    def clear(self):
        self.items.clear()

    def emit_entry(self, entry, request=None):
        self.items.append((entry, request))

    __call__ = emit_entry

    def __repr__(self):
        cn = self.__class__.__name__
        args = (cn, self._limit, len(self.items))
        return '<%s limit=%r entry_count=%r>' % args


class StreamEmitter(object):
    '''Writes entries, one per line, to a binary stream, or to the console
    given the shortcut values ``"stdout"`` or ``"stderr"``.

    Avoid using StreamEmitter directly when you have a file path for
    your log file. Use FileEmitter instead.
    '''
    def __init__(self, stream, encoding=None, **kwargs):
        if stream in ('stdout', 'stderr'):
            stream = getattr(sys, stream).buffer
        if encoding is None:
            encoding = getattr(stream, 'encoding', None) or 'UTF-8'
        errors = kwargs.pop('errors', 'backslashreplace')
        sep = kwargs.pop('sep', None)
        if kwargs:
            raise TypeError('unexpected keyword arguments: %r'
                            % list(kwargs.keys()))

        check_encoding_settings(encoding, errors)  # raises on error

        if not isinstance(stream, stream_types):
            st_names = ', '.join([st.__name__ for st in stream_types])
            raise TypeError('%s expected instance of %s, or shortcut'
                            ' values "stderr" or "stdout", not: %r'
                            % (self.__class__.__name__, st_names, stream))
        _mode = getattr(stream, 'mode', None)
        if _mode and 'b' not in _mode:
            raise ValueError('expected stream opened in binary mode,'
                             ' not: %r (mode %s)' % (stream, _mode))
        self.stream = stream

        if sep is None:
            sep = os.linesep
        if isinstance(sep, str):
            sep = sep.encode(encoding)
        self.sep = sep
        self.errors = errors
        self.encoding = encoding

    def emit_entry(self, entry, request=None):
        entry = entry.encode(self.encoding, self.errors)
        try:
            self.stream.write(entry + self.sep if self.sep else entry)
            self.flush()
        except Exception as e:
            note('stream_emit', 'got %r on %r.emit_entry()', e, self)
        return

    __call__ = emit_entry

    def flush(self):
        stream_flush = getattr(self.stream, 'flush', None)
        if not callable(stream_flush):
            return
        try:
            stream_flush()
        except Exception as e:
            note('stream_flush', 'got %r on %r.flush()', e, self)

    def __repr__(self):
        return '<%s stream=%r>' % (self.__class__.__name__, self.stream)


class FileEmitter(StreamEmitter):
    """
    The convenient and correct way to write access logs to a file when
    you have a path available. Appends by default; pass
    ``overwrite=True`` to truncate.
    """
    def __init__(self, filepath, encoding='utf-8', **kwargs):
        self.filepath = os.path.abspath(filepath)
        mode = 'ab' if not kwargs.pop('overwrite', False) else 'wb'
        stream = io.open(self.filepath, mode)
        super(FileEmitter, self).__init__(stream, encoding=encoding, **kwargs)

    def close(self):
        if self.stream is None:
            return
        try:
            self.flush()
            self.stream.close()
            self.stream = None
        except Exception as e:
            note('file_close', 'got %r on %r.close()', e, self)

    def emit_entry(self, entry, request=None):
        if self.stream is None:
            note('file_emit', 'dropped entry on closed %r', self)
            return
        super(FileEmitter, self).emit_entry(entry, request)

    __call__ = emit_entry
