# -*- coding: utf-8 -*-
"""The :class:`RequestInfo` type is the read-only view of a single
request/response pair that formatters render from. The middleware
builds one per request from the WSGI environ, and fills in the
response side once the wrapped application has answered. Tests (and
other integrations) can simply construct one by hand.
"""

from accesslog.common import HTTP_SCHEME, HTTPS_SCHEME
from accesslog.utils import to_int


__all__ = ['RequestInfo']


_ATTR_DEFAULTS = (('method', ''),
                  ('host', ''),
                  ('path', ''),
                  ('proto', ''),
                  ('query', ''),
                  ('remote', ''),
                  ('uri', ''),
                  ('tls', False),
                  ('status_code', 0),
                  ('request_body_size', 0),
                  ('response_body_size', None))


def _normalize_headers(headers):
    if not headers:
        return {}
    if hasattr(headers, 'items'):
        headers = headers.items()
    ret = {}
    for name, value in headers:
        # first value wins, same as a typical header "get"
        ret.setdefault(name.lower(), value)
    return ret


def _parse_cookie_header(cookie_header):
    """Split a request Cookie header into a name-to-value map, one pair at
    a time. Malformed pairs are skipped without affecting their
    neighbors, and the first value of a repeated name wins.
    """
    ret = {}
    for pair in (cookie_header or '').split(';'):
        name, sep, value = pair.strip().partition('=')
        name = name.strip()
        if not sep or not name:
            continue
        value = value.strip()
        if len(value) > 1 and value[0] == value[-1] == '"':
            value = value[1:-1]
        ret.setdefault(name, value)
    return ret


def _split_host(addr):
    "Strip a trailing port, if any, from *addr*."
    if addr.startswith('['):
        return addr[1:].split(']', 1)[0]
    if addr.count(':') == 1:
        return addr.split(':', 1)[0]
    return addr


def _environ_headers(environ):
    for key, value in environ.items():
        if key.startswith('HTTP_'):
            yield key[5:].replace('_', '-'), value
        elif key in ('CONTENT_TYPE', 'CONTENT_LENGTH') and value:
            yield key.replace('_', '-'), value


class RequestInfo(object):
    """Holds the fields of a request (and, once available, its
    response) needed to render an access log line.

    Args:
        method (str): The HTTP method, e.g., ``"GET"``.
        host (str): Value of the Host header.
        path (str): The URL path. Rendered as ``"/"`` when empty.
        proto (str): The protocol, e.g., ``"HTTP/1.1"``.
        query (str): The raw query string, without the leading ``?``.
        remote (str): The peer address, possibly with a port.
        uri (str): The request URI, as sent by the client.
        tls (bool): Whether the connection used transport
            security. Defaults to ``False``.
        status_code (int): The response status code.
        request_body_size (int): Length of the request body in bytes.
        response_body_size (int): Length of the response body in
            bytes, or ``None`` if no body was buffered.
        request_headers: A mapping or iterable of pairs.
        response_headers: A mapping or iterable of pairs.
        cookies (dict): A map of cookie name to value.

    Header lookups are case-insensitive. Missing headers and cookies
    are not errors, see :meth:`get_request_header` and
    :meth:`get_cookie`.
    """
    def __init__(self, **kwargs):
        for attr, default in _ATTR_DEFAULTS:
            setattr(self, attr, kwargs.pop(attr, default))
        self.request_headers = _normalize_headers(
            kwargs.pop('request_headers', None))
        self.response_headers = _normalize_headers(
            kwargs.pop('response_headers', None))
        self.cookies = dict(kwargs.pop('cookies', None) or {})
        if kwargs:
            raise TypeError('unexpected keyword arguments: %r'
                            % list(kwargs.keys()))

    @classmethod
    def from_environ(cls, environ):
        "Build a RequestInfo from the request side of a WSGI *environ*."
        headers = list(_environ_headers(environ))
        path = environ.get('SCRIPT_NAME', '') + environ.get('PATH_INFO', '')
        query = environ.get('QUERY_STRING', '')
        uri = environ.get('REQUEST_URI') or environ.get('RAW_URI')
        if not uri:
            uri = path + ('?' + query if query else '')

        host = environ.get('HTTP_HOST')
        if not host:
            host = environ.get('SERVER_NAME', '')
            port = environ.get('SERVER_PORT')
            if host and port:
                host = '%s:%s' % (host, port)

        remote = environ.get('REMOTE_ADDR', '')
        remote_port = environ.get('REMOTE_PORT')
        if remote and remote_port:
            remote = '%s:%s' % (remote, remote_port)

        return cls(method=environ.get('REQUEST_METHOD', ''),
                   host=host,
                   path=path,
                   proto=environ.get('SERVER_PROTOCOL', ''),
                   query=query,
                   remote=remote,
                   uri=uri,
                   tls=environ.get('wsgi.url_scheme') == 'https',
                   request_body_size=to_int(environ.get('CONTENT_LENGTH')),
                   request_headers=headers,
                   cookies=_parse_cookie_header(environ.get('HTTP_COOKIE')))

    @property
    def scheme(self):
        return HTTPS_SCHEME if self.tls else HTTP_SCHEME

    @property
    def real_ip(self):
        """The client IP, preferring the first ``X-Forwarded-For`` entry,
        then ``X-Real-Ip``, then the host part of :attr:`remote`.
        """
        forwarded = self.get_request_header('X-Forwarded-For')
        if forwarded:
            first = forwarded.split(',')[0].strip()
            if first:
                return first
        real_ip = self.get_request_header('X-Real-Ip').strip()
        if real_ip:
            return real_ip
        return _split_host(self.remote)

    @property
    def referer(self):
        return self.get_request_header('Referer')

    @property
    def user_agent(self):
        return self.get_request_header('User-Agent')

    def get_request_header(self, name):
        "Returns the header value, or ``''`` if absent."
        return self.request_headers.get(name.lower(), '')

    def get_response_header(self, name):
        "Returns the header value, or ``''`` if absent."
        return self.response_headers.get(name.lower(), '')

    def get_cookie(self, name):
        "Returns the value of cookie *name*. Raises KeyError if absent."
        return self.cookies[name]

    def set_response(self, status_code, headers=None, body_size=None):
        "Record the response side, once the application has answered."
        self.status_code = status_code
        self.response_headers = _normalize_headers(headers)
        self.response_body_size = body_size

    def __repr__(self):
        cn = self.__class__.__name__
        return ('<%s %s %r status=%r>'
                % (cn, self.method, self.uri or self.path, self.status_code))
