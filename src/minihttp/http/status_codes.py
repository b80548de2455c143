"""
Status codes this server sends or logs.

    HTTP/1.1 404 Not Found
             ─── ─────────
             code  phrase

Only 200, 201, 404 and 500 ever go on the wire. 400 and 431 are carried
by HTTPParseError for the logs; a malformed request gets no response.
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    An int that also knows its reason phrase.

        >>> HTTPStatus.CREATED == 201
        True
        >>> HTTPStatus.CREATED.phrase
        'Created'
    """

    def __new__(cls, value: int, phrase: str):
        member = int.__new__(cls, value)
        member._value_ = value
        member.phrase = phrase
        return member

    OK = 200, "OK"
    CREATED = 201, "Created"

    BAD_REQUEST = 400, "Bad Request"
    NOT_FOUND = 404, "Not Found"
    REQUEST_HEADER_FIELDS_TOO_LARGE = 431, "Request Header Fields Too Large"

    INTERNAL_SERVER_ERROR = 500, "Internal Server Error"
