# -*- coding: utf-8 -*-

HOST = 'host'
METHOD = 'method'
PATH = 'path'
PROTO = 'proto'
QUERY = 'query'
REMOTE = 'remote'
REAL_IP = 'real-ip'
SCHEME = 'scheme'
URI = 'uri'
REFERER = 'referer'
USER_AGENT = 'userAgent'
WHEN = 'when'
WHEN_ISO = 'when-iso'
WHEN_UTC_ISO = 'when-utc-iso'
WHEN_UNIX = 'when-unix'
WHEN_ISO_MS = 'when-iso-ms'
WHEN_UTC_ISO_MS = 'when-utc-iso-ms'
SIZE = 'size'
SIZE_HUMAN = 'size-human'
STATUS = 'status'
LATENCY = 'latency'
LATENCY_MS = 'latency-ms'
PAYLOAD_SIZE = 'payload-size'
PAYLOAD_SIZE_HUMAN = 'payload-size-human'

HTTP_SCHEME = 'HTTP'
HTTPS_SCHEME = 'HTTPS'

KBYTES = 1024
MBYTES = 1024 * 1024

COMMON_FORMAT = '{real-ip} {when-iso} {method} {uri} {status}'
