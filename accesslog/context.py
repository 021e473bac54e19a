# -*- coding: utf-8 -*-
"""The library can't log through itself, so conditions that need to be
robustly ignored (a field that blows up mid-render, a stream that
won't take a write) are reported as *notes*. Notes are dropped unless
a handler is registered on the process-wide context:

>>> get_context().note_handlers.append(print)
"""

ACCESSLOG_CONTEXT = None


def get_context():
    if not ACCESSLOG_CONTEXT:
        set_context(AccessLogContext())

    return ACCESSLOG_CONTEXT


def set_context(context):
    global ACCESSLOG_CONTEXT

    ACCESSLOG_CONTEXT = context

    return context


def note(name, message, *a, **kw):
    return get_context().note(name, message, *a, **kw)


class AccessLogContext(object):
    def __init__(self, **kwargs):
        self.note_handlers = list(kwargs.pop('note_handlers', None) or [])
        if kwargs:
            raise TypeError('unexpected keyword arguments: %r'
                            % list(kwargs.keys()))

    def note(self, name, message, *a, **kw):
        """Format *message* with *a*, if any, and pass it along with *name*
        to every registered note handler. A message that doesn't
        format is passed along unformatted.
        """
        if not self.note_handlers:
            return
        if a:
            try:
                message = message % a
            except Exception:
                pass
        for nh in self.note_handlers:
            nh(name, message)
        return

    def __repr__(self):
        cn = self.__class__.__name__
        return '<%s note_handlers=%r>' % (cn, self.note_handlers)
