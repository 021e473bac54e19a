# -*- coding: utf-8 -*-

import re
import time
import threading

from accesslog import AccessFormatter, RequestInfo, render, generate_log
from accesslog.context import get_context
from accesslog.fields import AccessField
from accesslog.tags import parse_format


MS = 10 ** 6
NOW_NS = 1635115925 * 10 ** 9 + 120 * MS  # 2021-10-24T22:52:05.12Z

t_req = RequestInfo(method='GET',
                    host='example.com',
                    path='/api/users',
                    proto='HTTP/1.1',
                    query='page=2&sort=name',
                    remote='10.0.0.7:51234',
                    uri='/api/users?page=2&sort=name',
                    tls=True,
                    status_code=200,
                    request_body_size=1536,
                    response_body_size=3 * 1024 * 1024,
                    request_headers={'X-Request-Id': 'abc123',
                                     'Referer': 'https://example.com/',
                                     'User-Agent': 'curl/8.0',
                                     'X-Forwarded-For': '1.2.3.4, 10.0.0.1'},
                    response_headers={'Content-Type': 'application/json'},
                    cookies={'session': 's3cr3t'})


TCS = [('{host}', 'example.com'),
       ('{method}', 'GET'),
       ('{path}', '/api/users'),
       ('{proto}', 'HTTP/1.1'),
       ('{query}', 'page=2&sort=name'),
       ('{remote}', '10.0.0.7:51234'),
       ('{real-ip}', '1.2.3.4'),
       ('{scheme}', 'HTTPS'),
       ('{uri}', '/api/users?page=2&sort=name'),
       ('{referer}', 'https://example.com/'),
       ('{userAgent}', 'curl/8.0'),
       ('{status}', '200'),
       ('{payload-size}', '1536'),
       ('{payload-size-human}', '1.5KB'),
       ('{size}', str(3 * 1024 * 1024)),
       ('{size-human}', '3MB'),
       ('{when-utc-iso}', '2021-10-24T22:52:05Z'),
       ('{when-utc-iso-ms}', '2021-10-24T22:52:05.12Z'),
       ('{when-unix}', '1635115925'),
       ('{latency}', '1.5s'),
       ('{latency-ms}', '1500'),
       ('{~session}', 's3cr3t'),
       ('{>X-Request-Id}', 'abc123'),
       ('{>x-request-id}', 'abc123'),
       ('{<Content-Type}', 'application/json')]


def test_individual_fields():
    started_at = NOW_NS - 1500 * MS
    for field_tmpl, result in TCS:
        fmtr = AccessFormatter(field_tmpl)
        assert fmtr.format(t_req, started_at, now_ns=NOW_NS) == result


def test_local_time_fields():
    fmtr = AccessFormatter('{when}|{when-iso}|{when-iso-ms}')
    when, when_iso, when_iso_ms = fmtr(t_req, NOW_NS, now_ns=NOW_NS).split('|')
    assert re.match(r'^[A-Z][a-z]{2}, \d{2} [A-Z][a-z]{2} 2021'
                    r' \d{2}:\d{2}:05 [+-]\d{4}$', when)
    assert re.match(r'^2021-10-2\dT\d{2}:\d{2}:05(Z|[+-]\d{2}:\d{2})$', when_iso)
    assert re.match(r'^2021-10-2\dT\d{2}:\d{2}:05\.12(Z|[+-]\d{2}:\d{2})$',
                    when_iso_ms)


def test_literal_roundtrip():
    for tmpl in ('', 'plain text', '{not a tag}', 'a { b } c', '{}'):
        assert AccessFormatter(tmpl).format(t_req, NOW_NS) == tmpl
        assert AccessFormatter(tmpl).format(RequestInfo(), NOW_NS) == tmpl


def test_placeholder_isolation():
    req = RequestInfo(method='GET', status_code=200)
    assert AccessFormatter('{method} {status}')(req, time.time_ns()) == 'GET 200'


def test_unknown_field():
    fmtr = AccessFormatter('{bogus-field}')
    assert fmtr.format(t_req, NOW_NS) == ''
    fmtr = AccessFormatter('[{bogus-field}] {method}')
    assert fmtr.format(t_req, NOW_NS) == '[] GET'


def test_missing_cookie_and_headers():
    req = RequestInfo(method='GET')
    fmtr = AccessFormatter('{~session}{>X-Request-Id}{<Content-Type}')
    assert fmtr.format(req, NOW_NS) == ''


def test_defaults():
    req = RequestInfo(path='')
    started_at = time.time_ns()
    fmtr = AccessFormatter('{path} {scheme} {size} {size-human} {real-ip}')
    assert fmtr.format(req, started_at) == '/ HTTP 0 0B '


def test_latency_ms():
    started_at = time.time_ns() - 500 * MS
    fmtr = AccessFormatter('{latency-ms}')
    first = int(fmtr.format(t_req, started_at))
    second = int(fmtr.format(t_req, started_at))
    assert first >= 500
    assert second >= first


def test_latency_ms_truncates():
    fmtr = AccessFormatter('{latency-ms}')
    assert fmtr.format(t_req, 0, now_ns=MS - 1) == '0'
    assert fmtr.format(t_req, 0, now_ns=2 * MS + MS - 1) == '2'


def test_template_reuse():
    fmtr = AccessFormatter('{method} {path} {status} {~user}')
    req_a = RequestInfo(method='GET', path='/a', status_code=200,
                        cookies={'user': 'alice'})
    req_b = RequestInfo(method='POST', path='', status_code=404)
    started_at = time.time_ns()
    assert fmtr.format(req_a, started_at) == 'GET /a 200 alice'
    assert fmtr.format(req_b, started_at) == 'POST / 404 '
    assert fmtr.format(req_a, started_at) == 'GET /a 200 alice'


def test_concurrent_renders():
    fmtr = AccessFormatter('{method} {path} {status}')
    results = {}

    def _render(i):
        req = RequestInfo(method='GET', path='/%s' % i, status_code=200 + i)
        results[i] = fmtr.format(req, time.time_ns())

    threads = [threading.Thread(target=_render, args=(i,)) for i in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results == dict([(i, 'GET /%s %s' % (i, 200 + i))
                            for i in range(20)])


def test_failing_field_is_noted():
    notes = []
    get_context().note_handlers.append(lambda n, m: notes.append(n))
    try:
        def _explode(event):
            raise RuntimeError('boom')
        fmtr = AccessFormatter('{method} {kaboom}!',
                               extra_fields=[AccessField('kaboom', 's',
                                                         _explode)])
        assert fmtr.format(t_req, NOW_NS) == 'GET !'
    finally:
        get_context().note_handlers.pop()
    assert notes == ['render_segment']


def test_extra_fields():
    trace = AccessField('trace-id', 's',
                        lambda e: e.request.get_request_header('X-Trace'))
    loud = AccessField('method', 's', lambda e: e.request.method.lower())
    req = RequestInfo(method='PUT', request_headers=[('X-Trace', 't-1')])
    fmtr = AccessFormatter('{method} {trace-id}', extra_fields=[trace, loud])
    assert fmtr.format(req, NOW_NS) == 'put t-1'
    # builtins are unaffected for other formatters
    assert AccessFormatter('{method} {trace-id}')(req, NOW_NS) == 'PUT '


def test_render_function():
    segments = parse_format('{method} {latency-ms}ms')
    assert render(segments, t_req, 0, now_ns=250 * MS) == 'GET 250ms'
    extra = AccessField('answer', 'd', lambda e: 42)
    assert render(parse_format('{answer}'), t_req, 0,
                  extra_fields=[extra]) == '42'


def test_generate_log():
    log_func = generate_log('{method} {uri}')
    assert log_func(t_req, time.time_ns()) == 'GET /api/users?page=2&sort=name'


def test_unexpected_kwargs():
    try:
        AccessFormatter('{method}', quoter=False)
    except TypeError:
        assert True
    else:
        assert False
    assert repr(AccessFormatter('{method}')) == "AccessFormatter('{method}')"


def test_latency_ms_truncates_toward_zero():
    fmtr = AccessFormatter('{latency-ms}')
    assert fmtr.format(t_req, 1, now_ns=0) == '0'
    assert fmtr.format(t_req, MS + 1, now_ns=0) == '-1'


def test_registered_field():
    from accesslog.fields import FIELD_MAP, register_field
    tenant = AccessField('tenant', 's',
                         lambda e: e.request.get_request_header('X-Tenant'))
    register_field(tenant)
    try:
        req = RequestInfo(method='GET', request_headers={'X-Tenant': 'acme'})
        assert AccessFormatter('{method} {tenant}')(req, NOW_NS) == 'GET acme'
        assert render(parse_format('{tenant}'), req, NOW_NS) == 'acme'
    finally:
        FIELD_MAP.pop('tenant')
    assert AccessFormatter('{tenant}')(req, NOW_NS) == ''
