def buildLine(path: str = "/api/user", method: str = "GET") -> str:
    """ Construct a Common Log Format line where only the request path matters """
    return (
        '127.0.0.1 - james [09/May/2018:16:00:39 +0000] '
        f'"{method} {path} HTTP/1.0" 200 1234'
    )


class FakeClock:
    """ Monotonic clock that only moves when told to """

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
