# -*- coding: utf-8 -*-


class EncodingLookupError(LookupError):
    pass


class ErrorBehaviorLookupError(LookupError):
    pass


def check_encoding_settings(encoding, errors):
    try:
        ''.encode(encoding)
    except LookupError as le:
        raise EncodingLookupError(le.args[0])
    try:
        # then test error-handler
        '\xdd'.encode('ascii', errors)
    except LookupError as le:
        raise ErrorBehaviorLookupError(le.args[0])
    except Exception:
        # that ascii encode should never work
        return True
    return True


def to_int(value, default=0):
    "Lenient int conversion for values like WSGI's CONTENT_LENGTH."
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
