# -*- coding: utf-8 -*-

from accesslog.context import get_context, set_context

from accesslog.common import COMMON_FORMAT
from accesslog.tags import Segment, parse_format
from accesslog.fields import AccessField, get_human_readable_size
from accesslog.formatters import AccessFormatter, render, generate_log
from accesslog.request import RequestInfo
from accesslog.middleware import AccessLogMiddleware
from accesslog.emitters import AggregateEmitter, StreamEmitter, FileEmitter
