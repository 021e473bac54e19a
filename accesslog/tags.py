# -*- coding: utf-8 -*-
"""Compiles access log format strings into sequences of
:class:`Segment` instances. A format string is plain text with
placeholders of the form:

  * ``{name}``: a builtin or extra field, e.g., ``{method}``
  * ``{~name}``: a cookie value
  * ``{>Name}``: a request header
  * ``{<Name}``: a response header

A placeholder's interior must be non-empty and contain no space, tab,
newline, carriage return, or form feed, otherwise it is left in place
as literal text. Other characters, including non-ASCII spaces, are
allowed. There is no escape syntax for literal braces.

>>> parse_format('{method} {~sid}')
(Segment(kind='field', text='method'), Segment(kind='literal', text=' '), Segment(kind='cookie', text='sid'))
"""

import re
from collections import namedtuple


__all__ = ['Segment', 'parse_format',
           'LITERAL', 'FIELD', 'COOKIE', 'REQUEST_HEADER', 'RESPONSE_HEADER']


LITERAL = 'literal'
FIELD = 'field'
COOKIE = 'cookie'
REQUEST_HEADER = 'requestHeader'
RESPONSE_HEADER = 'responseHeader'

_PREFIX_KIND_MAP = {'~': COOKIE,
                    '>': REQUEST_HEADER,
                    '<': RESPONSE_HEADER}

# whitespace is exactly space, \t, \n, \f and \r; \v and non-ASCII spaces
# such as NBSP may appear inside a tag
_tag_re = re.compile(r'\{[^ \t\n\f\r]+?\}')


class Segment(namedtuple('Segment', 'kind text')):
    """One unit of a compiled format. *text* is the literal text for
    ``literal`` segments, and the field, cookie, or header name for
    the rest.
    """
    __slots__ = ()

    @property
    def is_literal(self):
        return self.kind == LITERAL


def _tag_to_segment(tag):
    kind = _PREFIX_KIND_MAP.get(tag[0])
    if kind is None:
        return Segment(FIELD, tag)
    return Segment(kind, tag[1:])


def parse_format(format_str):
    """Split *format_str* into a tuple of :class:`Segment` objects, in
    order. Never raises on malformed input; unknown field names are
    kept as-is and resolved (to nothing) at render time.
    """
    ret, prev_end = [], 0
    for match in _tag_re.finditer(format_str):
        start, end = match.start(), match.end()
        if prev_end < start:
            ret.append(Segment(LITERAL, format_str[prev_end:start]))
        ret.append(_tag_to_segment(format_str[start + 1:end - 1]))
        prev_end = end
    if prev_end < len(format_str):
        ret.append(Segment(LITERAL, format_str[prev_end:]))
    return tuple(ret)
