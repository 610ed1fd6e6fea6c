import pytest


class FakeResponse:
    def __init__(
        self,
        text: str = "",
        status_code: int = 200,
        reason: str = "OK",
        content_type: str = "text/csv; charset=utf-8",
        json_body=None,
    ):
        self.text = text
        self.status_code = status_code
        self.reason = reason
        self.headers = {"Content-Type": content_type}
        self.encoding = None
        self._json_body = json_body

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._json_body is None:
            raise ValueError("No JSON object could be decoded")
        return self._json_body


class FakeSession:
    """Records every request and replays queued responses (the last one repeats)."""

    def __init__(self, *responses, error: Exception | None = None):
        self.responses = list(responses) or [FakeResponse()]
        self.error = error
        self.calls: list[tuple[str, str, dict]] = []

    def _reply(self, method: str, url: str, kwargs: dict):
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]

    def get(self, url, **kwargs):
        return self._reply("GET", url, kwargs)

    def post(self, url, **kwargs):
        return self._reply("POST", url, kwargs)


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def fake_clock():
    return FakeClock(1_000_000.0)


@pytest.fixture
def csv_session():
    def _build(text: str, **kwargs):
        return FakeSession(FakeResponse(text, **kwargs))

    return _build


DPO_CSV = "\n".join([
    "Task Name,Start Date,Status,Submitted To,Target Date,Date Completed",
    "Privacy notice review,01/02/2024,Completed,Legal,01/10/2024,01/09/2024",
    "Breach drill,01/03/2024,Pending,IT,01/20/2024,",
    "Consent form update,01/04/2024,In Progress,HR,02/01/2024,",
    "Vendor DPA audit,01/05/2024",
    "Data inventory,01/08/2024,Completed,Compliance,01/15/2024,01/12/2024",
    "Retention schedule,01/09/2024,Pending,Legal,01/31/2024,",
    "Staff training,01/10/2024,Resolved,HR,01/18/2024,",
    "DPIA for CRM,01/11/2024,Pending,IT,02/15/2024,",
    "Cookie banner,01/12/2024,Completed,IT,01/19/2024,01/19/2024",
])


@pytest.fixture
def dpo_csv():
    return DPO_CSV
