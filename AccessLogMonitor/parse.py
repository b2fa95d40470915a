import re
from urllib.parse import urlsplit

# Characters that end the first segment of a request path. Query and fragment
# end it too, so "/?q" and "/#top" are the root and "/api?q" is "api"
_SEGMENT_END = re.compile(r"[/?#]")

ROOT_SECTION = "/"


class MalformedEntry(ValueError):
    """ A log line that can't be attributed to any section """


def parseSection(line: str) -> str:
    """
    Extract the section, i.e. first path segment, out of a Common Log Format line, e.g.

        127.0.0.1 - james [09/May/2018:16:00:39 +0000] "GET /report/x HTTP/1.0" 200 123

    yields "report". A request for the root path yields "/".
    """
    target = _requestTarget(_requestLine(line))

    segment = _SEGMENT_END.split(target[1:], maxsplit=1)[0]
    if segment:
        return segment

    # Only "/", optionally with a query or fragment, is the root. "//x" has an empty segment.
    if target[1:2] == "/":
        raise MalformedEntry(f"Empty section in request path: {target}")
    return ROOT_SECTION


def _requestLine(line: str) -> str:
    "Request line is the first quoted field, no matter what the server logs around it"
    fields = line.split('"')
    if len(fields) < 3:
        raise MalformedEntry(f"No quoted request line: {line.rstrip()}")
    return fields[1]


def _requestTarget(request: str) -> str:
    "Pick the path out of 'METHOD path PROTOCOL', tolerating absolute-form targets"
    if "/" not in request:
        raise MalformedEntry(f"No path in request line: {request}")

    for token in request.split():
        if token.startswith("/"):
            return token
        if "://" in token:
            return urlsplit(token).path or ROOT_SECTION

    raise MalformedEntry(f"No path in request line: {request}")
